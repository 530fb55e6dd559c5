"""
Line verification.

verify_line answers one question: does this line follow, by its cited
rule, from its cited dependencies? It is a pure function of the proof's
current content and the catalog, recomputed on every call.

Failures are values (VerificationError), never exceptions. A premise
always checks out. A line that has no parsed expression yet is not
wrong, only not yet verifiable: it reports INCOMPLETE, which the verdict
surface shows as UNVERIFIED. A subproof reference is not a line of its
own; asking about one reports NOT_A_LINE, which also shows as UNVERIFIED.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .core.state import JustificationRef, PremiseRef, SubproofRef

logger = logging.getLogger(__name__)


class ErrorKind(Enum):
    WRONG_RULE = "the cited rule does not produce this conclusion from the cited lines"
    BAD_DEPENDENCY = "a cited dependency does not exist or is out of scope"
    WRONG_DEPENDENCY_COUNT = "the cited rule needs a different set of dependencies"
    NO_RULE = "no rule cited"
    UNKNOWN_RULE = "the cited rule is not in the catalog"
    NOT_FOUND = "no such line"
    INCOMPLETE = "the line or one of its dependencies has no parsed expression"
    NOT_A_LINE = "a subproof is checked through the lines inside it"


@dataclass(frozen=True)
class VerificationError:
    kind: ErrorKind
    message: str = ""

    def __str__(self):
        return self.message or self.kind.value


class LineStatus(Enum):
    UNVERIFIED = "unverified"
    VALID = "valid"
    INVALID = "invalid"


@dataclass(frozen=True)
class Verdict:
    status: LineStatus
    error: Optional[VerificationError] = None

    @classmethod
    def from_error(cls, error: Optional[VerificationError]) -> "Verdict":
        if error is None:
            return cls(LineStatus.VALID)
        if error.kind in (ErrorKind.INCOMPLETE, ErrorKind.NOT_A_LINE):
            return cls(LineStatus.UNVERIFIED, error)
        return cls(LineStatus.INVALID, error)


def _describe(proof, ref) -> str:
    numbers = proof.line_numbers()
    if ref in numbers:
        return f"line {numbers[ref][0]}"
    span = proof.subproof_span(ref) if isinstance(ref, SubproofRef) else None
    if span is not None:
        return f"subproof {span[0]}-{span[1]}"
    return repr(ref)


def verify_line(proof, ref, catalog) -> Optional[VerificationError]:
    """None if ref checks out, else the first reason it does not."""
    if isinstance(ref, PremiseRef):
        if ref not in proof:
            return VerificationError(ErrorKind.NOT_FOUND, f"{ref!r} does not exist")
        return None

    if isinstance(ref, SubproofRef) and ref in proof:
        return VerificationError(ErrorKind.NOT_A_LINE, f"{_describe(proof, ref)} is a subproof, not a line")

    just = proof.lookup_justification(ref) if isinstance(ref, JustificationRef) else None
    if just is None:
        return VerificationError(ErrorKind.NOT_FOUND, f"{ref!r} is not a line of this proof")
    if just.conclusion is None:
        return VerificationError(ErrorKind.INCOMPLETE, "this line has no parsed expression")
    if just.rule is None:
        return VerificationError(ErrorKind.NO_RULE)

    rule = catalog.lookup(just.rule)
    if rule is None:
        return VerificationError(ErrorKind.UNKNOWN_RULE, f"unknown rule {just.rule!r}")

    for dep in sorted(just.line_deps, key=lambda r: r.id):
        if not isinstance(dep, (PremiseRef, JustificationRef)) or not proof.can_reference_dep(ref, dep):
            return VerificationError(
                ErrorKind.BAD_DEPENDENCY,
                f"{_describe(proof, dep)} cannot be cited from {_describe(proof, ref)}",
            )
    for dep in sorted(just.subproof_deps, key=lambda r: r.id):
        if not isinstance(dep, SubproofRef) or not proof.can_reference_dep(ref, dep):
            return VerificationError(
                ErrorKind.BAD_DEPENDENCY,
                f"{_describe(proof, dep)} cannot be cited from {_describe(proof, ref)}",
            )

    if just.subproof_deps:
        return VerificationError(
            ErrorKind.WRONG_DEPENDENCY_COUNT,
            f"{catalog.display_name(just.rule)} cites lines, not subproofs",
        )
    if not just.line_deps:
        return VerificationError(
            ErrorKind.WRONG_DEPENDENCY_COUNT,
            f"{catalog.display_name(just.rule)} needs at least one cited line",
        )

    premises = [proof.lookup_expr(dep) for dep in sorted(just.line_deps, key=lambda r: r.id)]
    if any(p is None for p in premises):
        return VerificationError(ErrorKind.INCOMPLETE, "a cited line has no parsed expression")

    if not rule.applies(just.conclusion, premises):
        logger.debug("%r: %s does not license %s", ref, just.rule, just.conclusion)
        return VerificationError(
            ErrorKind.WRONG_RULE,
            f"{catalog.display_name(just.rule)} does not produce {just.conclusion} "
            f"from {', '.join(str(p) for p in premises)}",
        )
    return None


def verdict(proof, ref, catalog) -> Verdict:
    """Status of one line for display: UNVERIFIED, VALID or INVALID with a reason."""
    if isinstance(ref, (PremiseRef, JustificationRef)) and ref in proof and proof.lookup_expr(ref) is None:
        return Verdict(LineStatus.UNVERIFIED)
    return Verdict.from_error(verify_line(proof, ref, catalog))


def verify_all(proof, catalog) -> dict:
    """{ref: Verdict} for every premise and justification, in document order."""
    verdicts = {}
    for _, _, ref in proof.iter_lines():
        verdicts[ref] = verdict(proof, ref, catalog)
    invalid = sum(1 for v in verdicts.values() if v.status is LineStatus.INVALID)
    logger.debug("verified %d lines, %d invalid", len(verdicts), invalid)
    return verdicts
