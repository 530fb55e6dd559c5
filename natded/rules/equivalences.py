"""
Pattern tables for the equivalence rules.

Every name in a pattern is a metavariable. S(phi) is a functional
metavariable: a context with one hole, applied to phi.
"""

# Boolean equivalences

DOUBLE_NEGATION = [
    ("~~P", "P"),
]

DISTRIBUTION = [
    ("(P & Q) | (P & R)", "P & (Q | R)"),
    ("(P | Q) & (P | R)", "P | (Q & R)"),
]

IDENTITY = [
    ("phi & ^|^", "phi"),
    ("phi | _|_", "phi"),
]

ANNIHILATION = [
    ("phi & _|_", "_|_"),
    ("phi | ^|^", "^|^"),
]

INVERSE = [
    ("~^|^", "_|_"),
    ("~_|_", "^|^"),
]

# Conditional equivalences

CONDITIONAL_ABSORPTION = [
    ("phi & (~phi -> psi)", "phi"),
    ("psi & (phi -> psi)", "psi"),
]

CONDITIONAL_COMPLEMENT = [
    ("phi -> phi", "^|^"),
]

CONDITIONAL_IDENTITY = [
    ("phi -> _|_", "~phi"),
    ("^|^ -> phi", "phi"),
]

CONDITIONAL_ANNIHILATION = [
    ("phi -> ^|^", "^|^"),
    ("_|_ -> phi", "^|^"),
]

CONDITIONAL_IMPLICATION = [
    ("phi -> psi", "~phi | psi"),
    ("~(phi -> psi)", "phi & ~psi"),
]

CONDITIONAL_CONTRAPOSITION = [
    ("~phi -> ~psi", "psi -> phi"),
]

CONDITIONAL_EXPORTATION = [
    ("phi -> (psi -> lambda)", "(phi & psi) -> lambda"),
]

CONDITIONAL_DISTRIBUTION = [
    ("phi -> (psi & lambda)", "(phi -> psi) & (phi -> lambda)"),
    ("(phi | psi) -> lambda", "(phi -> lambda) & (psi -> lambda)"),
    ("phi -> (psi | lambda)", "(phi -> psi) | (phi -> lambda)"),
    ("(phi & psi) -> lambda", "(phi -> lambda) | (psi -> lambda)"),
]

CONDITIONAL_REDUCTION = [
    ("phi & (phi -> psi)", "phi & psi"),
    ("~psi & (phi -> psi)", "~psi & ~phi"),
]

KNIGHTS_AND_KNAVES = [
    ("phi <-> (phi & psi)", "phi -> psi"),
    ("phi <-> (phi | psi)", "psi -> phi"),
]

CONDITIONAL_IDEMPOTENCE = [
    ("phi -> ~phi", "~phi"),
    ("~phi -> phi", "phi"),
]

# Biconditional equivalences

BICONDITIONAL_EQUIVALENCE = [
    ("(phi -> psi) & (psi -> phi)", "phi <-> psi"),
    ("(phi & psi) | (~phi & ~psi)", "phi <-> psi"),
]

BICONDITIONAL_COMMUTATION = [
    ("phi <-> psi", "psi <-> phi"),
]

BICONDITIONAL_ASSOCIATION = [
    ("phi <-> (psi <-> lambda)", "(phi <-> psi) <-> lambda"),
]

BICONDITIONAL_REDUCTION = [
    ("phi & (phi <-> psi)", "phi & psi"),
    ("~phi & (phi <-> psi)", "~phi & ~psi"),
]

BICONDITIONAL_COMPLEMENT = [
    ("phi <-> phi", "^|^"),
    ("phi <-> ~phi", "_|_"),
]

BICONDITIONAL_IDENTITY = [
    ("phi <-> _|_", "~phi"),
    ("phi <-> ^|^", "phi"),
]

BICONDITIONAL_NEGATION = [
    ("~phi <-> psi", "~(phi <-> psi)"),
    ("phi <-> ~psi", "~(phi <-> psi)"),
]

BICONDITIONAL_SUBSTITUTION = [
    ("(phi <-> psi) & S(phi)", "(phi <-> psi) & S(psi)"),
]

# Reductions against the constants

CONJUNCTION = [
    ("phi & ^|^", "phi"),
    ("phi & _|_", "_|_"),
]

DISJUNCTION = [
    ("phi | _|_", "phi"),
    ("phi | ^|^", "^|^"),
]

NEGATION = [
    ("~^|^", "_|_"),
    ("~_|_", "^|^"),
]

BICOND_REDUCTION = [
    ("phi <-> _|_", "~phi"),
    ("phi <-> ^|^", "phi"),
]

COND_REDUCTION = [
    ("phi -> ^|^", "^|^"),
    ("_|_ -> phi", "^|^"),
    ("phi -> _|_", "~phi"),
    ("^|^ -> phi", "phi"),
]


CLASSIFICATIONS = {
    "Boolean Equivalence": [
        "DOUBLE_NEGATION", "DISTRIBUTION", "IDENTITY", "ANNIHILATION", "INVERSE",
    ],
    "Conditional Equivalence": [
        "CONDITIONAL_ABSORPTION", "CONDITIONAL_COMPLEMENT", "CONDITIONAL_IDENTITY",
        "CONDITIONAL_ANNIHILATION", "CONDITIONAL_IMPLICATION",
        "CONDITIONAL_CONTRAPOSITION", "CONDITIONAL_EXPORTATION",
        "CONDITIONAL_DISTRIBUTION", "CONDITIONAL_REDUCTION", "KNIGHTS_AND_KNAVES",
        "CONDITIONAL_IDEMPOTENCE",
    ],
    "Biconditional Equivalence": [
        "BICONDITIONAL_EQUIVALENCE", "BICONDITIONAL_COMMUTATION",
        "BICONDITIONAL_ASSOCIATION", "BICONDITIONAL_REDUCTION",
        "BICONDITIONAL_COMPLEMENT", "BICONDITIONAL_IDENTITY",
        "BICONDITIONAL_NEGATION", "BICONDITIONAL_SUBSTITUTION",
    ],
    "Reduction": [
        "CONJUNCTION", "DISJUNCTION", "NEGATION", "BICOND_REDUCTION", "COND_REDUCTION",
    ],
}

PATTERN_TABLES = {
    name: globals()[name]
    for names in CLASSIFICATIONS.values()
    for name in names
}
