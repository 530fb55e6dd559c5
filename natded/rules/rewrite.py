"""
Rewrite rules: named, bidirectional equivalence schemas.

A rule is a list of clauses (lhs, rhs). Each clause licenses rewriting
an instance of lhs into the matching instance of rhs, and an instance of
rhs back into lhs.

Checking a step runs in two halves. The source side of a clause is
matched against the cited dependencies, then the target side is matched
against the step's conclusion under the bindings already found. When the
target's metavariables are all bound this is exactly "instantiate the
target and compare". With several dependencies the source side is split
along its &-spine, one conjunct per dependency, and every assignment of
dependencies to conjuncts is tried.
"""

import itertools
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, Optional

from ..core.exceptions import UnboundMetavariable, VariableCapture
from ..core.expr import And
from ..core.matching import instantiate, match, match_all
from ..core.parser import parse

logger = logging.getLogger(__name__)


class Direction(Enum):
    FORWARD = "lhs => rhs"
    BACKWARD = "rhs => lhs"


@dataclass(frozen=True)
class RuleMatch:
    """Which clause, in which direction, licensed a step, and the bindings used."""
    clause: int
    direction: Direction
    bindings: dict


def split_conjuncts(pattern, count: int) -> Optional[list]:
    """
    Split a left-nested conjunction into count parts.

        split_conjuncts((a & b) & c, 3) -> [a, b, c]
        split_conjuncts((a & b) & c, 2) -> [a & b, c]
    """
    if count == 1:
        return [pattern]
    if isinstance(pattern, And):
        head = split_conjuncts(pattern.left, count - 1)
        if head is not None:
            return head + [pattern.right]
    return None


@dataclass(frozen=True)
class RewriteRule:
    name: str
    reductions: tuple

    @classmethod
    def from_patterns(cls, name: str, patterns: Iterable) -> "RewriteRule":
        """Build a rule from (lhs, rhs) pattern strings."""
        return cls(name, tuple((parse(lhs), parse(rhs)) for lhs, rhs in patterns))

    def sides(self, clause: int, direction: Direction) -> tuple:
        """(source, target) of a clause read in the given direction."""
        lhs, rhs = self.reductions[clause]
        return (lhs, rhs) if direction is Direction.FORWARD else (rhs, lhs)

    def directed_clauses(self) -> Iterator[tuple]:
        """Yield (clause, direction, source, target), both directions of every clause."""
        for index in range(len(self.reductions)):
            for direction in Direction:
                yield (index, direction) + self.sides(index, direction)

    def find_match(self, conclusion, premises: Iterable) -> Optional[RuleMatch]:
        premises = list(premises)
        if not premises:
            return None
        for index, direction, source, target in self.directed_clauses():
            parts = split_conjuncts(source, len(premises))
            if parts is None:
                continue
            for ordering in itertools.permutations(premises):
                bindings = match_all(zip(parts, ordering))
                if bindings is None:
                    continue
                bindings = match(target, conclusion, bindings)
                if bindings is not None:
                    logger.debug("%s clause %d (%s) licenses %s",
                                 self.name, index, direction.value, conclusion)
                    return RuleMatch(index, direction, bindings)
        return None

    def applies(self, conclusion, premises: Iterable) -> bool:
        """Does some clause, in some direction, take premises to conclusion?"""
        return self.find_match(conclusion, premises) is not None

    def instantiate(self, clause: int, direction: Direction, bindings: dict):
        """The target side of a clause under bindings. Raises UnboundMetavariable or VariableCapture."""
        _, target = self.sides(clause, direction)
        return instantiate(target, bindings)

    def rewrite(self, expr) -> list:
        """Every expression one application of this rule turns expr into, at the top level."""
        results = []
        for index, direction, source, target in self.directed_clauses():
            bindings = match(source, expr)
            if bindings is None:
                continue
            try:
                result = instantiate(target, bindings)
            except (UnboundMetavariable, VariableCapture):
                continue
            if result not in results:
                results.append(result)
        return results

    def __str__(self):
        clauses = "; ".join(f"{lhs} <=> {rhs}" for lhs, rhs in self.reductions)
        return f"{self.name}: {clauses}"
