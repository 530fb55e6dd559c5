"""
natded: the kernel of a natural-deduction proof assistant.

Proof documents are trees of premises, justified lines and nested
subproofs. Each justified line cites an equivalence rule from an
explicitly built catalog, and verify_line checks that the rule really
takes the cited lines to the conclusion.

Usage:
    python -m natded --demo double_negation
    python -m natded --demo implication
    python -m natded --demo substitution
    python -m natded --demo scoping
    python -m natded --catalog
    python -m natded --check-catalog
"""

from .core.expr import (
    Taut, Contra, Var, Not, And, Or, Implies, Iff, Forall, Exists,
    TOP, BOTTOM, free_vars, infer_arities, evaluate,
)
from .core.parser import parse, try_parse
from .core.matching import match, instantiate
from .core.state import PremiseRef, JustificationRef, SubproofRef, Justification
from .core.proof import Proof
from .rules.rewrite import Direction, RewriteRule
from .rules.catalog import RuleCatalog, build_catalog
from .oracle import check_rules, assert_sound
from .verify import ErrorKind, VerificationError, LineStatus, Verdict, verify_line, verdict, verify_all
from .visualization import format_proof, print_proof, print_catalog

__all__ = [
    "Taut", "Contra", "Var", "Not", "And", "Or", "Implies", "Iff", "Forall", "Exists",
    "TOP", "BOTTOM", "free_vars", "infer_arities", "evaluate",
    "parse", "try_parse",
    "match", "instantiate",
    "PremiseRef", "JustificationRef", "SubproofRef", "Justification",
    "Proof",
    "Direction", "RewriteRule",
    "RuleCatalog", "build_catalog",
    "check_rules", "assert_sound",
    "ErrorKind", "VerificationError", "LineStatus", "Verdict", "verify_line", "verdict", "verify_all",
    "format_proof", "print_proof", "print_catalog",
]
