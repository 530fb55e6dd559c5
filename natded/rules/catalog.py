"""
The rule catalog: every rewrite rule, by id, in named groups.

The catalog is built once, explicitly, and handed to whoever verifies
proofs. Nothing in the kernel reaches for a global one.
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterator, Mapping, Optional

from ..core.exceptions import CatalogError, ParseError
from ..core.expr import infer_arities
from ..oracle import DEFAULT_MAX_SLOTS, assert_sound
from .equivalences import CLASSIFICATIONS, PATTERN_TABLES
from .rewrite import RewriteRule

logger = logging.getLogger(__name__)


def display_name(rule_id: str) -> str:
    """CONDITIONAL_IMPLICATION -> Conditional Implication"""
    return rule_id.replace("_", " ").title()


@dataclass(frozen=True)
class RuleCatalog:
    rules: Mapping
    groups: tuple

    def lookup(self, rule_id: Optional[str]) -> Optional[RewriteRule]:
        if rule_id is None:
            return None
        return self.rules.get(rule_id)

    def __contains__(self, rule_id) -> bool:
        return rule_id in self.rules

    def __iter__(self) -> Iterator[RewriteRule]:
        return iter(self.rules.values())

    def __len__(self):
        return len(self.rules)

    def classifications(self) -> list:
        """[(group name, [RewriteRule, ...]), ...] in menu order."""
        return [(group, [self.rules[r] for r in ids]) for group, ids in self.groups]

    def rules_in(self, group: str) -> tuple:
        for name, ids in self.groups:
            if name == group:
                return tuple(self.rules[r] for r in ids)
        return ()

    def group_of(self, rule_id: str) -> Optional[str]:
        for name, ids in self.groups:
            if rule_id in ids:
                return name
        return None

    def display_name(self, rule_id: str) -> str:
        return display_name(rule_id)


def validate_rule(rule: RewriteRule):
    """Each clause must use every name with a single arity. Raises ArityConflict."""
    for lhs, rhs in rule.reductions:
        try:
            infer_arities(rhs, infer_arities(lhs))
        except CatalogError:
            logger.error("inconsistent arities in %s: %s <=> %s", rule.name, lhs, rhs)
            raise


def build_catalog(
    tables: Optional[dict] = None,
    classifications: Optional[dict] = None,
    validate: bool = True,
    check_truth_tables: bool = False,
    max_slots: Optional[int] = None,
) -> RuleCatalog:
    """
    Build a catalog from pattern tables.

    Args:
        tables:             {rule id: [(lhs, rhs), ...]}; defaults to the
                            built-in equivalence tables
        classifications:    {group name: [rule id, ...]}; defaults to the
                            built-in groups, or one "Equivalence" group
                            holding every rule of custom tables
        validate:           check clause arities
        check_truth_tables: also brute-force every clause with the oracle
        max_slots:          oracle table width limit

    Raises CatalogError if any table is malformed or inconsistent.
    """
    if tables is None:
        tables = PATTERN_TABLES
        classifications = classifications or CLASSIFICATIONS
    if classifications is None:
        classifications = {"Equivalence": list(tables)}

    rules = {}
    for rule_id, patterns in tables.items():
        try:
            rule = RewriteRule.from_patterns(rule_id, patterns)
        except ParseError as err:
            raise CatalogError(f"{rule_id}: bad pattern: {err}", {"rule": rule_id}) from err
        if validate:
            validate_rule(rule)
        rules[rule_id] = rule

    groups = []
    for group, ids in classifications.items():
        missing = [r for r in ids if r not in rules]
        if missing:
            raise CatalogError(f"group {group!r} names unknown rules {missing}", {"group": group})
        groups.append((group, tuple(ids)))

    if check_truth_tables:
        assert_sound(rules.values(), max_slots or DEFAULT_MAX_SLOTS)

    logger.debug("built catalog of %d rules in %d groups", len(rules), len(groups))
    return RuleCatalog(MappingProxyType(rules), tuple(groups))
