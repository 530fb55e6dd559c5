from .rewrite import Direction, RuleMatch, RewriteRule, split_conjuncts
from .catalog import RuleCatalog, build_catalog, display_name
from .equivalences import CLASSIFICATIONS, PATTERN_TABLES

__all__ = [
    "Direction", "RuleMatch", "RewriteRule", "split_conjuncts",
    "RuleCatalog", "build_catalog", "display_name",
    "CLASSIFICATIONS", "PATTERN_TABLES",
]
