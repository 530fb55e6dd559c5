"""
Exception hierarchy for the kernel.

Only programming and definition errors are exceptions. Everything a user
can cause by editing a proof (a wrong rule, a missing dependency, a
refused deletion) comes back as a value instead.
"""

from typing import Optional


class NatDedError(Exception):
    """Base exception. Carries structured context for callers."""

    def __init__(self, message: str, context: Optional[dict] = None):
        super().__init__(message)
        self.context = context or {}


class ParseError(NatDedError):
    """Expression text could not be parsed."""

    def __init__(self, message: str, text: str = "", column: Optional[int] = None):
        if column is not None:
            message = f"col {column}: {message}"
        super().__init__(message, {"text": text, "column": column})
        self.text = text
        self.column = column


class CatalogError(NatDedError):
    """The static rule catalog is inconsistent. Aborts catalog construction."""


class ArityConflict(CatalogError):
    """One name used with two different argument counts inside a clause."""

    def __init__(self, name: str, first: int, second: int):
        super().__init__(
            f"{name!r} used with arity {first} and arity {second}",
            {"name": name, "arities": (first, second)},
        )
        self.name = name
        self.arities = (first, second)


class OracleMismatch(CatalogError):
    """Two sides of a clause disagree on some truth-table row."""

    def __init__(self, rule: str, clause: tuple, env: dict):
        lhs, rhs = clause
        super().__init__(
            f"{rule}: {lhs} and {rhs} differ under {env}",
            {"rule": rule, "clause": clause, "env": env},
        )
        self.rule = rule
        self.clause = clause
        self.env = env


class UnboundMetavariable(NatDedError):
    """Instantiating a pattern needs a binding that does not exist."""

    def __init__(self, name: str):
        super().__init__(f"metavariable {name!r} is unbound", {"name": name})
        self.name = name


class VariableCapture(NatDedError):
    """Filling a context would put a free name under a quantifier that binds it."""

    def __init__(self, body, args: tuple):
        super().__init__(
            f"filling {body} with {', '.join(str(a) for a in args)} captures a free name",
            {"body": body, "args": args},
        )
        self.body = body
        self.args = args


class ProofLoadError(NatDedError):
    """Bulk-loaded proof data violates a proof-tree invariant."""


class DanglingReference(NatDedError, LookupError):
    """Raised only by the *_or_die lookups when a reference is gone."""

    def __init__(self, ref):
        super().__init__(f"{ref!r} does not exist in this proof", {"ref": ref})
        self.ref = ref


class ExclusiveAccessError(NatDedError, RuntimeError):
    """Structural edit attempted while a with_mut_* callback holds the proof."""
