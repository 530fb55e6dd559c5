"""
Core data structures of a proof document: references and line contents.

References are opaque handles. Each wraps an integer taken from a single
counter owned by the proof, so a handle is never reused and never depends
on where its line sits:

    PremiseRef(3)         an assumed expression
    JustificationRef(7)   a derived line citing a rule
    SubproofRef(5)        a nested scope

A subproof's lines are JustificationRef | SubproofRef. A justification's
line dependencies are PremiseRef | JustificationRef, its subproof
dependencies are SubproofRef.
"""

from dataclasses import dataclass, field, replace
from typing import Optional, Union


@dataclass(frozen=True, order=True)
class PremiseRef:
    id: int

    def __repr__(self):
        return f"PremiseRef({self.id})"


@dataclass(frozen=True, order=True)
class JustificationRef:
    id: int

    def __repr__(self):
        return f"JustificationRef({self.id})"


@dataclass(frozen=True, order=True)
class SubproofRef:
    id: int

    def __repr__(self):
        return f"SubproofRef({self.id})"


LineRef = Union[PremiseRef, JustificationRef]
StepRef = Union[JustificationRef, SubproofRef]
AnyRef = Union[PremiseRef, JustificationRef, SubproofRef]


@dataclass
class Premise:
    """An assumption. expr is None until the line has been parsed."""
    expr: Optional[object] = None

    def copy(self) -> "Premise":
        return Premise(self.expr)


@dataclass
class Justification:
    """
    A derived line: conclusion, the rule cited, and what it depends on.

    rule is a catalog rule id, or None for a freshly inserted step.
    """
    conclusion: Optional[object] = None
    rule: Optional[str] = None
    line_deps: set = field(default_factory=set)
    subproof_deps: set = field(default_factory=set)

    def copy(self) -> "Justification":
        return replace(self, line_deps=set(self.line_deps),
                       subproof_deps=set(self.subproof_deps))

    @property
    def name(self):
        rule = self.rule or "(no rule)"
        return f"{self.conclusion if self.conclusion is not None else '?'} [{rule}]"


@dataclass(frozen=True)
class Subproof:
    """Read-only snapshot of one scope: its premises, then its lines."""
    premises: tuple = ()
    lines: tuple = ()

    def direct_lines(self) -> tuple:
        return tuple(r for r in self.lines if isinstance(r, JustificationRef))

    def __len__(self):
        return len(self.premises) + len(self.lines)


def is_line_ref(ref) -> bool:
    return isinstance(ref, (PremiseRef, JustificationRef))


def is_step_ref(ref) -> bool:
    return isinstance(ref, (JustificationRef, SubproofRef))
