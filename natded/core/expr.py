"""
Expressions: immutable trees over propositional/predicate logic.

    Taut()                  ⊤
    Contra()                ⊥
    Var("P")                a propositional variable (arity 0)
    Var("S", (Var("x"),))   a predicate application S(x)
    Not(e)                  ~e
    And/Or/Implies/Iff      e & f, e | f, e -> f, e <-> f
    Forall("x", e)          forall x, e
    Exists("x", e)          exists x, e

Expressions are values. Two expressions are equal iff they are built from
the same constructors in the same shape; nothing is normalized, so
P & Q != Q & P even though they are equivalent.

Hole(i) never comes out of the parser. It marks the i-th argument slot
inside a substitution context built by the matcher.
"""

from dataclasses import dataclass
from typing import Callable, ClassVar, Iterator, Optional, Union

from .exceptions import ArityConflict, CatalogError


@dataclass(frozen=True)
class Taut:
    def __str__(self):
        return "⊤"


@dataclass(frozen=True)
class Contra:
    def __str__(self):
        return "⊥"


@dataclass(frozen=True)
class Var:
    """A variable, or a predicate applied to arguments when args is non-empty."""
    name: str
    args: tuple = ()

    @property
    def arity(self) -> int:
        return len(self.args)

    def __str__(self):
        if not self.args:
            return self.name
        return f"{self.name}({', '.join(str(a) for a in self.args)})"


@dataclass(frozen=True)
class Not:
    operand: "Expr"

    def __str__(self):
        return f"~{_wrap(self.operand)}"


@dataclass(frozen=True)
class Binary:
    left: "Expr"
    right: "Expr"

    symbol: ClassVar[str] = "?"

    @staticmethod
    def truth(a: bool, b: bool) -> bool:
        raise NotImplementedError

    def __str__(self):
        return f"{_wrap(self.left)} {self.symbol} {_wrap(self.right)}"


@dataclass(frozen=True)
class And(Binary):
    symbol: ClassVar[str] = "&"

    @staticmethod
    def truth(a, b):
        return a and b


@dataclass(frozen=True)
class Or(Binary):
    symbol: ClassVar[str] = "|"

    @staticmethod
    def truth(a, b):
        return a or b


@dataclass(frozen=True)
class Implies(Binary):
    symbol: ClassVar[str] = "->"

    @staticmethod
    def truth(a, b):
        return (not a) or b


@dataclass(frozen=True)
class Iff(Binary):
    symbol: ClassVar[str] = "<->"

    @staticmethod
    def truth(a, b):
        return a == b


@dataclass(frozen=True)
class Quantifier:
    name: str
    body: "Expr"

    keyword: ClassVar[str] = "?"

    def __str__(self):
        return f"{self.keyword} {self.name}, {_wrap(self.body)}"


@dataclass(frozen=True)
class Forall(Quantifier):
    keyword: ClassVar[str] = "forall"


@dataclass(frozen=True)
class Exists(Quantifier):
    keyword: ClassVar[str] = "exists"


@dataclass(frozen=True)
class Hole:
    index: int

    def __str__(self):
        return f"?{self.index}"


Expr = Union[Taut, Contra, Var, Not, Binary, Quantifier, Hole]

TOP = Taut()
BOTTOM = Contra()

BINARY_OPERATORS = {cls.symbol: cls for cls in (And, Or, Implies, Iff)}


def _wrap(expr) -> str:
    if isinstance(expr, Binary):
        return f"({expr})"
    return str(expr)


def var(name: str) -> Var:
    return Var(name)


def apply(name: str, *args) -> Var:
    return Var(name, tuple(args))


# ── Traversal ───────────────────────────────────────────────────────────────

def children(expr) -> tuple:
    if isinstance(expr, Var):
        return expr.args
    if isinstance(expr, Not):
        return (expr.operand,)
    if isinstance(expr, Binary):
        return (expr.left, expr.right)
    if isinstance(expr, Quantifier):
        return (expr.body,)
    return ()


def map_children(expr, fn: Callable):
    """Rebuild expr with fn applied to each direct child."""
    if isinstance(expr, Var):
        if not expr.args:
            return expr
        return Var(expr.name, tuple(fn(a) for a in expr.args))
    if isinstance(expr, Not):
        return Not(fn(expr.operand))
    if isinstance(expr, Binary):
        return type(expr)(fn(expr.left), fn(expr.right))
    if isinstance(expr, Quantifier):
        return type(expr)(expr.name, fn(expr.body))
    return expr


def subexpressions(expr) -> Iterator:
    """Pre-order walk over expr and every subexpression."""
    yield expr
    for child in children(expr):
        yield from subexpressions(child)


def substitute_holes(body, args: tuple):
    """Fill Hole(i) with args[i]."""
    if isinstance(body, Hole):
        return args[body.index]
    return map_children(body, lambda c: substitute_holes(c, args))


def has_holes(expr) -> bool:
    return any(isinstance(e, Hole) for e in subexpressions(expr))


# ── Free variables and arities ──────────────────────────────────────────────

def free_vars(expr) -> frozenset:
    """Names that occur outside the scope of a quantifier binding them."""
    if isinstance(expr, Var):
        names = {expr.name}
        for arg in expr.args:
            names |= free_vars(arg)
        return frozenset(names)
    if isinstance(expr, Quantifier):
        return free_vars(expr.body) - {expr.name}
    names = frozenset()
    for child in children(expr):
        names |= free_vars(child)
    return names


def infer_arities(expr, arities: Optional[dict] = None, bound: frozenset = frozenset()) -> dict:
    """
    Record how many arguments each free name is applied to.

    Updates and returns arities. Raises ArityConflict when the same name
    shows up with two different argument counts.
    """
    if arities is None:
        arities = {}
    if isinstance(expr, Var) and expr.name not in bound:
        seen = arities.setdefault(expr.name, expr.arity)
        if seen != expr.arity:
            raise ArityConflict(expr.name, seen, expr.arity)
    if isinstance(expr, Quantifier):
        bound = bound | {expr.name}
    for child in children(expr):
        infer_arities(child, arities, bound)
    return arities


# ── Truth-functional evaluation ─────────────────────────────────────────────

def evaluate(expr, env: dict) -> bool:
    """
    Evaluate expr as a propositional function.

    env maps each free name to a tuple of 2**arity booleans. An application
    S(a, b) reads S's table at the index whose bit i is the value of
    argument i.
    """
    if isinstance(expr, Taut):
        return True
    if isinstance(expr, Contra):
        return False
    if isinstance(expr, Var):
        if expr.name not in env:
            raise CatalogError(f"no truth table for {expr.name!r}", {"name": expr.name})
        index = 0
        for i, arg in enumerate(expr.args):
            if evaluate(arg, env):
                index |= 1 << i
        return env[expr.name][index]
    if isinstance(expr, Not):
        return not evaluate(expr.operand, env)
    if isinstance(expr, Binary):
        return expr.truth(evaluate(expr.left, env), evaluate(expr.right, env))
    raise CatalogError(f"{expr} is not truth-functional", {"expr": expr})
