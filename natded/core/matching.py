"""
Pattern matching against metavariable schemas.

A pattern is an ordinary expression read with every name as a
metavariable:

    Var("phi")              plain metavariable, matches any subexpression
    Var("S", (Var("phi"),)) functional metavariable, matches a
                            substitution context applied to phi's binding

Matching is one-sided (only the pattern has metavariables) and purely
syntactic: P & Q does not match Q & P.

Bindings are plain dicts: {"phi": Var("P"), "S": Context(1, And(Hole(0), Var("R")))}

A functional metavariable cannot be matched until the bindings of its
arguments are known, so those occurrences are deferred until the
structural pass is done. The first resolved occurrence builds the context
by replacing every occurrence of the argument values in the candidate with
holes. Every later occurrence must reproduce its candidate by filling that
same context.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from .exceptions import ArityConflict, UnboundMetavariable, VariableCapture
from .expr import (
    Binary, Contra, Hole, Not, Quantifier, Taut, Var,
    children, free_vars, map_children, substitute_holes,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Context:
    """An expression with numbered holes, the value of a functional metavariable."""
    arity: int
    body: object

    def captures(self, args: tuple) -> bool:
        """Would some argument's free name land under a quantifier binding it?"""
        return _captures(self.body, tuple(args), frozenset())

    def fill(self, args: tuple):
        """Plug args into the holes. Raises VariableCapture rather than capture a name."""
        args = tuple(args)
        if self.captures(args):
            raise VariableCapture(self.body, args)
        return substitute_holes(self.body, args)

    def __str__(self):
        params = ", ".join(f"?{i}" for i in range(self.arity))
        return f"\\{params}. {self.body}"


def _captures(body, args: tuple, bound: frozenset) -> bool:
    if isinstance(body, Hole):
        return bool(free_vars(args[body.index]) & bound)
    if isinstance(body, Quantifier):
        bound = bound | {body.name}
    return any(_captures(child, args, bound) for child in children(body))


def is_metavariable(pattern) -> bool:
    return isinstance(pattern, Var) and not pattern.args


def is_functional(pattern) -> bool:
    return isinstance(pattern, Var) and bool(pattern.args)


def abstract(expr, targets: tuple, bound: frozenset = frozenset()):
    """
    Replace each free occurrence of targets[i] in expr with Hole(i),
    outermost first. An occurrence whose names are bound by an enclosing
    quantifier is a different expression and stays put.
    """
    for i, target in enumerate(targets):
        if expr == target and not free_vars(target) & bound:
            return Hole(i)
    if isinstance(expr, Quantifier):
        bound = bound | {expr.name}
    return map_children(expr, lambda child: abstract(child, targets, bound))


def instantiate(pattern, bindings: dict):
    """
    Build the concrete expression a pattern denotes under bindings.

    Raises UnboundMetavariable if some name in the pattern has no binding,
    VariableCapture if a context would capture a name of its argument.
    """
    if isinstance(pattern, Var):
        if pattern.name not in bindings:
            raise UnboundMetavariable(pattern.name)
        bound = bindings[pattern.name]
        if not pattern.args:
            if isinstance(bound, Context):
                raise ArityConflict(pattern.name, bound.arity, 0)
            return bound
        if not isinstance(bound, Context) or bound.arity != pattern.arity:
            raise ArityConflict(pattern.name, getattr(bound, "arity", 0), pattern.arity)
        return bound.fill(tuple(instantiate(a, bindings) for a in pattern.args))
    return map_children(pattern, lambda child: instantiate(child, bindings))


def _match(pattern, candidate, bindings: dict, deferred: list) -> bool:
    if isinstance(pattern, Var):
        if pattern.args:
            deferred.append((pattern, candidate))
            return True
        if pattern.name not in bindings:
            bindings[pattern.name] = candidate
            return True
        bound = bindings[pattern.name]
        return not isinstance(bound, Context) and bound == candidate

    if type(pattern) is not type(candidate):
        return False
    if isinstance(pattern, (Taut, Contra)):
        return True
    if isinstance(pattern, Not):
        return _match(pattern.operand, candidate.operand, bindings, deferred)
    if isinstance(pattern, Binary):
        return (_match(pattern.left, candidate.left, bindings, deferred)
                and _match(pattern.right, candidate.right, bindings, deferred))
    if isinstance(pattern, Quantifier):
        return (pattern.name == candidate.name
                and _match(pattern.body, candidate.body, bindings, deferred))
    if isinstance(pattern, Hole):
        return pattern == candidate
    return False


def _ground_args(args: tuple, bindings: dict) -> Optional[tuple]:
    try:
        return tuple(instantiate(a, bindings) for a in args)
    except (UnboundMetavariable, VariableCapture):
        return None


def _resolve_deferred(bindings: dict, deferred: list) -> bool:
    pending = list(deferred)
    while pending:
        waiting = []
        for pattern, candidate in pending:
            args = _ground_args(pattern.args, bindings)
            if args is None:
                waiting.append((pattern, candidate))
                continue
            bound = bindings.get(pattern.name)
            if bound is None:
                bindings[pattern.name] = Context(len(args), abstract(candidate, args))
            elif not isinstance(bound, Context) or bound.arity != len(args):
                return False
            elif bound.captures(args) or bound.fill(args) != candidate:
                return False
        if len(waiting) == len(pending):
            # arguments that nothing outside a functional metavariable binds
            return False
        pending = waiting
    return True


def match_all(pairs: Iterable, bindings: Optional[dict] = None) -> Optional[dict]:
    """
    Match several (pattern, candidate) pairs under one shared set of bindings.

    Returns the extended bindings, or None if any pair fails. The input
    bindings dict is never modified.
    """
    bindings = dict(bindings) if bindings else {}
    deferred = []
    for pattern, candidate in pairs:
        if not _match(pattern, candidate, bindings, deferred):
            return None
    if not _resolve_deferred(bindings, deferred):
        return None
    return bindings


def match(pattern, candidate, bindings: Optional[dict] = None) -> Optional[dict]:
    """
    Match one pattern against a concrete expression.

    Examples:
        match(parse("phi -> phi"), parse("P -> P"))  -> {"phi": P}
        match(parse("phi -> phi"), parse("P -> Q"))  -> None
    """
    result = match_all([(pattern, candidate)], bindings)
    if result is not None:
        logger.debug("matched %s against %s", pattern, candidate)
    return result
