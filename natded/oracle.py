"""
Truth-table oracle for the rule catalog.

For each clause of each rule: collect the free names of both sides, infer
each name's arity, give every name a truth table of 2**arity entries and
try every joint assignment of all table entries. Both sides must agree on
every row, otherwise the clause is not an equivalence and the catalog is
broken.

The row count is 2**(sum of 2**arity), so this is only ever run over the
static catalog, never over user proofs. max_slots caps the total table
width.
"""

import itertools
import logging
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional

from .core.exceptions import CatalogError, OracleMismatch
from .core.expr import evaluate, free_vars, infer_arities

logger = logging.getLogger(__name__)

DEFAULT_MAX_SLOTS = 20


@dataclass
class ClauseReport:
    """Outcome of brute-forcing one clause."""
    rule: str
    clause: int
    lhs: object
    rhs: object
    arities: dict = field(default_factory=dict)
    rows: int = 0
    counterexample: Optional[dict] = None

    @property
    def ok(self) -> bool:
        return self.counterexample is None

    @property
    def name(self):
        return f"{self.rule}[{self.clause}]: {self.lhs} <=> {self.rhs}"


def clause_arities(lhs, rhs) -> dict:
    """Arity of every free name across both sides. Raises ArityConflict."""
    arities = infer_arities(lhs)
    return infer_arities(rhs, arities)


def assignments(names: list, arities: dict) -> Iterator[dict]:
    """Every environment giving each name a table of 2**arity booleans."""
    widths = [2 ** arities[name] for name in names]
    for row in itertools.product((False, True), repeat=sum(widths)):
        env = {}
        start = 0
        for name, width in zip(names, widths):
            env[name] = row[start:start + width]
            start += width
        yield env


def check_clause(rule: str, clause: int, lhs, rhs, max_slots: int = DEFAULT_MAX_SLOTS) -> ClauseReport:
    arities = clause_arities(lhs, rhs)
    names = sorted(free_vars(lhs) | free_vars(rhs))
    slots = sum(2 ** arities[name] for name in names)
    if slots > max_slots:
        raise CatalogError(
            f"{rule}[{clause}] needs {slots} truth-table slots, limit is {max_slots}",
            {"rule": rule, "clause": clause, "slots": slots},
        )

    report = ClauseReport(rule, clause, lhs, rhs, arities)
    for env in assignments(names, arities):
        report.rows += 1
        if evaluate(lhs, env) != evaluate(rhs, env):
            report.counterexample = env
            break
    logger.debug("%s: %d rows, %s", report.name, report.rows, "ok" if report.ok else "MISMATCH")
    return report


def check_rule(rule, max_slots: int = DEFAULT_MAX_SLOTS) -> list:
    return [
        check_clause(rule.name, i, lhs, rhs, max_slots)
        for i, (lhs, rhs) in enumerate(rule.reductions)
    ]


def check_rules(rules: Iterable, max_slots: int = DEFAULT_MAX_SLOTS) -> list:
    reports = []
    for rule in rules:
        reports.extend(check_rule(rule, max_slots))
    return reports


def assert_sound(rules: Iterable, max_slots: int = DEFAULT_MAX_SLOTS) -> list:
    """Check every clause. Raises OracleMismatch on the first clause that fails."""
    reports = check_rules(rules, max_slots)
    for report in reports:
        if not report.ok:
            logger.error("catalog clause is not an equivalence: %s", report.name)
            raise OracleMismatch(report.rule, (report.lhs, report.rhs), report.counterexample)
    return reports
