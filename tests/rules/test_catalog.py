"""
Tests for the rule catalog.

The core claims:
    - Every built-in table parses and has consistent arities
    - Groups are kept in menu order and only name known rules
    - Bad tables abort construction with CatalogError
"""

import pytest

from natded.core.exceptions import ArityConflict, CatalogError, OracleMismatch
from natded.core.parser import parse
from natded.rules.catalog import RuleCatalog, build_catalog, display_name, validate_rule
from natded.rules.equivalences import CLASSIFICATIONS, PATTERN_TABLES
from natded.rules.rewrite import RewriteRule


@pytest.fixture(scope="module")
def catalog():
    return build_catalog()


class TestBuiltinCatalog:
    def test_every_table_is_loaded(self, catalog):
        assert isinstance(catalog, RuleCatalog)
        assert len(catalog) == len(PATTERN_TABLES)
        for rule_id in PATTERN_TABLES:
            assert rule_id in catalog
            assert len(catalog.lookup(rule_id).reductions) == len(PATTERN_TABLES[rule_id])

    def test_group_order(self, catalog):
        groups = [name for name, _ in catalog.classifications()]
        assert groups == [
            "Boolean Equivalence", "Conditional Equivalence",
            "Biconditional Equivalence", "Reduction",
        ]

    def test_every_rule_is_in_a_group(self, catalog):
        grouped = {rule.name for _, rules in catalog.classifications() for rule in rules}
        assert grouped == set(PATTERN_TABLES)

    def test_rules_in_and_group_of(self, catalog):
        names = [r.name for r in catalog.rules_in("Boolean Equivalence")]
        assert names == CLASSIFICATIONS["Boolean Equivalence"]
        assert catalog.group_of("BICONDITIONAL_SUBSTITUTION") == "Biconditional Equivalence"
        assert catalog.group_of("NOPE") is None
        assert catalog.rules_in("Nope") == ()

    def test_lookup_unknown(self, catalog):
        assert catalog.lookup("NOPE") is None
        assert catalog.lookup(None) is None

    def test_catalog_is_read_only(self, catalog):
        with pytest.raises(TypeError):
            catalog.rules["X"] = None

    def test_iteration_yields_rules(self, catalog):
        assert all(isinstance(r, RewriteRule) for r in catalog)

    def test_display_name(self, catalog):
        assert display_name("CONDITIONAL_IMPLICATION") == "Conditional Implication"
        assert catalog.display_name("DOUBLE_NEGATION") == "Double Negation"


class TestCustomTables:
    def test_default_single_group(self):
        catalog = build_catalog({"SWAP": [("phi & psi", "psi & phi")]})
        assert [g for g, _ in catalog.classifications()] == ["Equivalence"]
        assert catalog.lookup("SWAP").applies(parse("Q & P"), [parse("P & Q")])

    def test_bad_pattern(self):
        with pytest.raises(CatalogError) as info:
            build_catalog({"BROKEN": [("phi &", "phi")]})
        assert info.value.context["rule"] == "BROKEN"

    def test_arity_conflict(self):
        with pytest.raises(ArityConflict):
            build_catalog({"CLASH": [("S(phi)", "S")]})

    def test_arity_check_can_be_skipped(self):
        catalog = build_catalog({"CLASH": [("S(phi)", "S")]}, validate=False)
        assert "CLASH" in catalog

    def test_unknown_rule_in_group(self):
        with pytest.raises(CatalogError):
            build_catalog({"A": [("phi", "~~phi")]}, {"Group": ["A", "B"]})

    def test_truth_table_check_on_build(self):
        with pytest.raises(OracleMismatch):
            build_catalog({"WRONG": [("phi -> psi", "psi -> phi")]}, check_truth_tables=True)

    def test_truth_table_check_passes(self):
        catalog = build_catalog({"DN": [("~~phi", "phi")]}, check_truth_tables=True)
        assert "DN" in catalog

    def test_validate_rule(self):
        validate_rule(RewriteRule.from_patterns("OK", [("F(phi) & phi", "phi & F(phi)")]))
        with pytest.raises(ArityConflict):
            validate_rule(RewriteRule.from_patterns("BAD", [("F(phi)", "F(phi, psi)")]))
