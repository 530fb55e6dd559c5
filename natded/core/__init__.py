from .exceptions import (
    NatDedError, ParseError, CatalogError, ArityConflict, OracleMismatch,
    UnboundMetavariable, VariableCapture, ProofLoadError, DanglingReference,
    ExclusiveAccessError,
)
from .expr import (
    Taut, Contra, Var, Not, Binary, And, Or, Implies, Iff,
    Quantifier, Forall, Exists, Hole, Expr, TOP, BOTTOM,
    var, apply, free_vars, infer_arities, evaluate,
)
from .parser import parse, try_parse
from .matching import Context, match, match_all, instantiate
from .state import (
    PremiseRef, JustificationRef, SubproofRef,
    Premise, Justification, Subproof,
)
from .proof import Proof

__all__ = [
    "NatDedError", "ParseError", "CatalogError", "ArityConflict", "OracleMismatch",
    "UnboundMetavariable", "VariableCapture", "ProofLoadError", "DanglingReference",
    "ExclusiveAccessError",
    "Taut", "Contra", "Var", "Not", "Binary", "And", "Or", "Implies", "Iff",
    "Quantifier", "Forall", "Exists", "Hole", "Expr", "TOP", "BOTTOM",
    "var", "apply", "free_vars", "infer_arities", "evaluate",
    "parse", "try_parse",
    "Context", "match", "match_all", "instantiate",
    "PremiseRef", "JustificationRef", "SubproofRef",
    "Premise", "Justification", "Subproof",
    "Proof",
]
