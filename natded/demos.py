"""
Demo registry.

Each demo is a dict describing a sample proof for the CLI:
    make_proof:   () -> Proof
    description:  str
"""

from .core.parser import parse
from .core.proof import Proof
from .core.state import Justification


def make_double_negation_proof() -> Proof:
    """~~Q, therefore Q (correct) and ~Q (wrong rule)."""
    proof = Proof(parse("~~Q"))
    premise = proof.premises()[0]
    proof.add_step(Justification(parse("Q"), "DOUBLE_NEGATION", {premise}))
    proof.add_step(Justification(parse("~Q"), "DOUBLE_NEGATION", {premise}))
    return proof


def make_implication_proof() -> Proof:
    """P -> Q rewritten both ways by Conditional Implication."""
    proof = Proof(parse("P -> Q"))
    premise = proof.premises()[0]
    good = proof.add_step(Justification(parse("~P | Q"), "CONDITIONAL_IMPLICATION", {premise}))
    proof.add_step(Justification(parse("P | Q"), "CONDITIONAL_IMPLICATION", {premise}))
    proof.add_step(Justification(parse("P -> Q"), "CONDITIONAL_IMPLICATION", {good}))
    return proof


def make_substitution_proof() -> Proof:
    """Substituting Q for P inside P & R, given P <-> Q."""
    return Proof.from_dict({
        "premises": [
            {"id": "iff", "expr": "P <-> Q"},
            {"id": "conj", "expr": "P & R"},
        ],
        "lines": [
            {"id": "good", "conclusion": "(P <-> Q) & (Q & R)",
             "rule": "BICONDITIONAL_SUBSTITUTION", "deps": ["iff", "conj"]},
            {"id": "bad", "conclusion": "(P <-> Q) & (Q & S)",
             "rule": "BICONDITIONAL_SUBSTITUTION", "deps": ["iff", "conj"]},
        ],
    })


def make_scoping_proof() -> Proof:
    """
    A subproof whose assumption is cited from outside it, next to a
    correct citation of an outer premise from inside it.
    """
    return Proof.from_dict({
        "premises": [{"id": "top", "expr": "A & ^|^"}],
        "lines": [
            {"id": "sub", "subproof": {
                "premises": [{"id": "hyp", "expr": "~~B"}],
                "lines": [
                    {"conclusion": "B", "rule": "DOUBLE_NEGATION", "deps": ["hyp"]},
                    {"conclusion": "A", "rule": "IDENTITY", "deps": ["top"]},
                ],
            }},
            {"conclusion": "B", "rule": "DOUBLE_NEGATION", "deps": ["hyp"]},
            {"conclusion": "A", "rule": "DOUBLE_NEGATION", "deps": ["top"]},
            {"conclusion": None, "rule": None},
        ],
    })


def make_empty_proof() -> Proof:
    return Proof.new_empty()


DEMOS = {
    "double_negation": {
        "make_proof":  make_double_negation_proof,
        "description": "Double Negation: ~~Q gives Q, not ~Q",
    },
    "implication": {
        "make_proof":  make_implication_proof,
        "description": "Conditional Implication in both directions",
    },
    "substitution": {
        "make_proof":  make_substitution_proof,
        "description": "Biconditional Substitution across two cited premises",
    },
    "scoping": {
        "make_proof":  make_scoping_proof,
        "description": "Subproof scoping: assumptions are not visible outside their subproof",
    },
    "empty": {
        "make_proof":  make_empty_proof,
        "description": "The blank document: one empty premise and one empty step",
    },
}
