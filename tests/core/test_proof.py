"""
Tests for the proof tree.

The core claims:
    - Reference stability:   inserting or deleting a sibling never changes
                             what any other reference resolves to
    - Premise-removal guard: the last top-level premise and subproof
                             premises cannot be removed on their own
    - Cascading delete:      removing a subproof makes every reference
                             inside it resolve to None
    - Visibility:            a line sees earlier lines of its own scope and
                             its ancestors, closed subproofs only as a whole
    - Exclusivity:           no structural edit while a with_mut_* callback runs
    - Bulk load:             from_dict(to_dict(p)) rebuilds the same document
"""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from natded.core.exceptions import DanglingReference, ExclusiveAccessError, ProofLoadError
from natded.core.parser import parse
from natded.core.proof import Proof
from natded.core.state import (
    Justification, JustificationRef, PremiseRef, SubproofRef, Subproof,
)


def step(text=None, rule=None, deps=()):
    return Justification(parse(text) if text else None, rule, set(deps))


def nested_proof():
    """
    1 | A
      |----
    2 | | B          (subproof s)
      | |----
    3 | | B & A      cites 1, 2
    4 | A            cites 1
    """
    proof = Proof(parse("A"))
    a = proof.premises()[0]
    s = proof.add_subproof(empty=True)
    b = proof.add_premise(parse("B"), within=s)
    inner = proof.add_step(step("B & A", "DOUBLE_NEGATION", [a, b]), within=s)
    outer = proof.add_step(step("A", "DOUBLE_NEGATION", [a]))
    return proof, a, s, b, inner, outer


# ── Construction ────────────────────────────────────────────────────────────

class TestConstruction:
    def test_proof_starts_with_one_premise(self):
        proof = Proof(parse("P"))
        assert len(proof.premises()) == 1
        assert proof.lookup_expr(proof.premises()[0]) == parse("P")
        assert proof.lines() == ()

    def test_new_empty(self):
        proof = Proof.new_empty()
        assert len(proof.premises()) == 1
        assert len(proof.lines()) == 1
        assert proof.lookup_expr(proof.premises()[0]) is None
        just = proof.lookup_justification(proof.lines()[0])
        assert just == Justification()

    def test_refs_are_never_reused(self):
        proof = Proof()
        r1 = proof.add_step()
        proof.remove_line(r1)
        r2 = proof.add_step()
        assert r1 != r2
        assert r1 not in proof
        assert r2 in proof


# ── Insertion ───────────────────────────────────────────────────────────────

class TestInsertion:
    def test_add_premise_appends(self):
        proof = Proof(parse("P"))
        q = proof.add_premise(parse("Q"))
        assert proof.premises()[-1] == q

    def test_add_premise_relative(self):
        proof = Proof(parse("P"))
        p = proof.premises()[0]
        before = proof.add_premise_relative(parse("O"), p, after=False)
        after = proof.add_premise_relative(parse("Q"), p, after=True)
        assert proof.premises() == (before, p, after)

    def test_add_premise_relative_to_missing_ref(self):
        proof = Proof()
        assert proof.add_premise_relative(parse("Q"), PremiseRef(999)) is None

    def test_prepend_and_append_steps(self):
        proof = Proof()
        last = proof.add_step(step("P"))
        first = proof.prepend_step(step("Q"))
        assert proof.lines() == (first, last)

    def test_add_step_relative(self):
        proof = Proof()
        a = proof.add_step()
        c = proof.add_step()
        b = proof.add_step_relative(step("B"), a, after=True)
        z = proof.add_step_relative(step("Z"), a, after=False)
        assert proof.lines() == (z, a, b, c)

    def test_step_relative_to_subproof(self):
        proof = Proof()
        s = proof.add_subproof()
        j = proof.add_step_relative(None, s, after=False)
        assert proof.lines() == (j, s)

    def test_subproof_gets_default_premise_and_step(self):
        proof = Proof()
        s = proof.add_subproof()
        sub = proof.lookup_subproof(s)
        assert len(sub.premises) == 1
        assert len(sub.lines) == 1
        assert proof.parent_of_line(sub.premises[0]) == s

    def test_add_subproof_relative(self):
        proof = Proof()
        a = proof.add_step()
        s = proof.add_subproof_relative(a, after=True)
        assert proof.lines() == (a, s)
        assert len(proof.lookup_subproof(s)) == 2

    def test_insert_within_missing_subproof(self):
        proof = Proof()
        assert proof.add_step(within=SubproofRef(42)) is None
        assert proof.add_premise(parse("P"), within=SubproofRef(42)) is None
        assert proof.add_subproof(within=SubproofRef(42)) is None

    def test_relative_insert_after_premise_ref_fails(self):
        proof = Proof()
        assert proof.add_step_relative(None, proof.premises()[0]) is None


# ── Removal ─────────────────────────────────────────────────────────────────

class TestPremiseRemovalGuard:
    def test_last_top_level_premise_stays(self):
        proof = Proof(parse("P"))
        p = proof.premises()[0]
        assert not proof.may_remove_line(p)
        assert proof.remove_line(p) is False
        assert proof.premises() == (p,)

    def test_one_of_two_premises_can_go(self):
        proof = Proof(parse("P"))
        p = proof.premises()[0]
        q = proof.add_premise(parse("Q"))
        assert proof.may_remove_line(q)
        assert proof.remove_line(q) is True
        assert proof.premises() == (p,)
        assert proof.lookup_premise(q) is None

    def test_subproof_premise_stays(self):
        proof, a, s, b, inner, outer = nested_proof()
        assert not proof.may_remove_line(b)
        assert proof.remove_line(b) is False
        assert proof.lookup_subproof(s).premises == (b,)

    def test_steps_always_removable(self):
        proof, a, s, b, inner, outer = nested_proof()
        assert proof.may_remove_line(inner)
        assert proof.remove_line(inner)
        assert proof.lookup_subproof(s).lines == ()

    def test_unknown_refs(self):
        proof = Proof()
        assert not proof.may_remove_line(JustificationRef(77))
        assert proof.remove_line(JustificationRef(77)) is False
        assert proof.remove_subproof(SubproofRef(77)) is False


class TestCascadingDelete:
    def test_everything_inside_goes(self):
        proof = Proof()
        s = proof.add_subproof()
        t = proof.add_subproof(within=s)
        inside = [ref for _, ref in proof.walk() if proof.depth_of(ref) and proof.depth_of(ref) > 0]
        assert t in inside
        assert len(inside) == 5
        assert proof.remove_subproof(s)
        assert s not in proof
        for ref in inside:
            assert ref not in proof
            assert proof.lookup_pj(ref) is None
            assert proof.parent_of_line(ref) is None
        assert proof.lookup_subproof(t) is None
        assert len(proof) == 1

    def test_dangling_dependency_left_in_place(self):
        proof, a, s, b, inner, outer = nested_proof()
        proof.toggle_dependency(outer, s)
        proof.remove_subproof(s)
        assert s in proof.lookup_justification(outer).subproof_deps


class TestReferenceStability:
    def test_sibling_insert_and_delete(self):
        proof, a, s, b, inner, outer = nested_proof()
        before = {ref: proof.lookup_pj(ref) for ref in (a, b, inner, outer)}
        extra = proof.add_step_relative(step("Z"), inner, after=False)
        proof.add_premise_relative(parse("Y"), a)
        proof.remove_line(extra)
        for ref, content in before.items():
            assert proof.lookup_pj(ref) == content

    @settings(max_examples=50)
    @given(st.lists(st.tuples(st.sampled_from(["add", "prepend", "remove", "sub", "drop"]),
                              st.integers(min_value=0, max_value=20)),
                    max_size=25))
    def test_random_edits_keep_survivors(self, edits):
        proof = Proof(parse("P"))
        contents = {proof.premises()[0]: proof.lookup_pj(proof.premises()[0])}
        counter = 0
        for op, n in edits:
            counter += 1
            live = [r for r in contents if r in proof]
            if op == "add":
                ref = proof.add_step(step(f"Q{counter}"))
                contents[ref] = proof.lookup_pj(ref)
            elif op == "prepend":
                ref = proof.prepend_step(step(f"R{counter}"))
                contents[ref] = proof.lookup_pj(ref)
            elif op == "sub":
                proof.add_subproof()
            elif op == "remove" and live:
                proof.remove_line(live[n % len(live)])
            elif op == "drop":
                subs = [r for r in proof.lines() if isinstance(r, SubproofRef)]
                if subs:
                    proof.remove_subproof(subs[n % len(subs)])
            for ref, content in contents.items():
                if ref in proof:
                    assert proof.lookup_pj(ref) == content
        assert len(proof.premises()) >= 1


# ── Mutation ────────────────────────────────────────────────────────────────

class TestScopedMutation:
    def test_with_mut_step_edits_in_place(self):
        proof = Proof()
        j = proof.add_step()
        proof.with_mut_step(j, lambda just: setattr(just, "rule", "DOUBLE_NEGATION"))
        assert proof.lookup_justification(j).rule == "DOUBLE_NEGATION"

    def test_with_mut_returns_callback_result(self):
        proof = Proof(parse("P"))
        p = proof.premises()[0]
        assert proof.with_mut_premise(p, lambda prem: str(prem.expr)) == "P"

    def test_missing_ref_returns_none(self):
        proof = Proof()
        assert proof.with_mut_step(JustificationRef(9), lambda j: 1) is None
        assert proof.set_rule(JustificationRef(9), "X") is False

    def test_structural_edit_inside_callback_refused(self):
        proof = Proof()
        j = proof.add_step()

        def meddle(just):
            proof.add_step()

        with pytest.raises(ExclusiveAccessError):
            proof.with_mut_step(j, meddle)
        assert proof.lines() == (j,)
        # the borrow is released after the failed callback
        assert proof.add_step() is not None

    def test_nested_borrow_refused(self):
        proof = Proof(parse("P"))
        p = proof.premises()[0]
        with pytest.raises(ExclusiveAccessError):
            proof.with_mut_premise(p, lambda prem: proof.set_premise(p, parse("Q")))

    def test_lookups_are_copies(self):
        proof = Proof()
        j = proof.add_step(step("P", deps=[proof.premises()[0]]))
        snapshot = proof.lookup_justification(j)
        snapshot.line_deps.clear()
        assert proof.lookup_justification(j).line_deps == {proof.premises()[0]}

    def test_inserted_justification_is_owned(self):
        proof = Proof(parse("~~Q"))
        p = proof.premises()[0]
        shared = Justification(parse("Q"), "DOUBLE_NEGATION", {p})
        a = proof.add_step(shared)
        b = proof.add_step(shared)
        proof.set_conclusion(a, parse("~Q"))
        assert proof.lookup_justification(b).conclusion == parse("Q")
        assert shared.conclusion == parse("Q")
        shared.rule = "IDENTITY"
        shared.line_deps.clear()
        assert proof.lookup_justification(a).rule == "DOUBLE_NEGATION"
        assert proof.lookup_justification(b).line_deps == {p}

    def test_setters(self):
        proof = Proof()
        p = proof.premises()[0]
        j = proof.add_step()
        assert proof.set_premise(p, parse("P"))
        assert proof.set_conclusion(j, parse("~~P"))
        assert proof.set_rule(j, "DOUBLE_NEGATION")
        just = proof.lookup_justification(j)
        assert (just.conclusion, just.rule) == (parse("~~P"), "DOUBLE_NEGATION")

    def test_toggle_dependency(self):
        proof, a, s, b, inner, outer = nested_proof()
        assert proof.toggle_dependency(outer, a) is False
        assert proof.lookup_justification(outer).line_deps == set()
        assert proof.toggle_dependency(outer, a) is True
        assert proof.toggle_dependency(outer, s) is True
        assert proof.lookup_justification(outer).subproof_deps == {s}


# ── Queries ─────────────────────────────────────────────────────────────────

class TestQueries:
    def test_iter_lines_numbers_document_order(self):
        proof, a, s, b, inner, outer = nested_proof()
        assert list(proof.iter_lines()) == [(1, 0, a), (2, 1, b), (3, 1, inner), (4, 0, outer)]

    def test_subproof_span(self):
        proof, a, s, b, inner, outer = nested_proof()
        assert proof.subproof_span(s) == (2, 3)
        assert proof.subproof_span(SubproofRef(99)) is None

    def test_depth_and_parent(self):
        proof, a, s, b, inner, outer = nested_proof()
        assert proof.depth_of(inner) == 1
        assert proof.depth_of(outer) == 0
        assert proof.parent_of_line(inner) == s
        assert proof.parent_of_line(outer) is None
        assert proof.depth_of(JustificationRef(99)) is None

    def test_top_level_snapshot(self):
        proof, a, s, b, inner, outer = nested_proof()
        top = proof.top_level_proof()
        assert top == Subproof((a,), (s, outer))
        assert top.direct_lines() == (outer,)

    def test_contains(self):
        proof, a, s, b, inner, outer = nested_proof()
        assert proof.contains(s)
        assert not proof.contains(PremiseRef(1000))

    def test_or_die(self):
        proof, a, s, b, inner, outer = nested_proof()
        assert proof.lookup_justification_or_die(outer).rule == "DOUBLE_NEGATION"
        proof.remove_line(outer)
        with pytest.raises(DanglingReference):
            proof.lookup_justification_or_die(outer)
        with pytest.raises(LookupError):
            proof.lookup_justification_or_die(outer)


class TestVisibility:
    def test_inner_sees_outer_premise_and_own_premise(self):
        proof, a, s, b, inner, outer = nested_proof()
        assert proof.can_reference_dep(inner, a)
        assert proof.can_reference_dep(inner, b)

    def test_outer_cannot_see_inside_subproof(self):
        proof, a, s, b, inner, outer = nested_proof()
        assert not proof.can_reference_dep(outer, b)
        assert not proof.can_reference_dep(outer, inner)
        assert proof.can_reference_dep(outer, s)

    def test_no_forward_or_self_reference(self):
        proof, a, s, b, inner, outer = nested_proof()
        later = proof.add_step()
        assert not proof.can_reference_dep(outer, later)
        assert not proof.can_reference_dep(outer, outer)

    def test_subproof_cannot_cite_itself(self):
        proof, a, s, b, inner, outer = nested_proof()
        assert not proof.can_reference_dep(inner, s)

    def test_gone_refs_are_invisible(self):
        proof, a, s, b, inner, outer = nested_proof()
        proof.remove_subproof(s)
        assert not proof.can_reference_dep(outer, s)
        assert proof.visible_from(inner) == set()


# ── Bulk load ───────────────────────────────────────────────────────────────

class TestBulkLoad:
    def test_round_trip(self):
        proof, a, s, b, inner, outer = nested_proof()
        proof.toggle_dependency(outer, s)
        data = proof.to_dict()
        loaded = Proof.from_dict(data)
        assert loaded.to_dict()["premises"][0]["expr"] == "A"
        assert [(n, d) for n, d, _ in loaded.iter_lines()] == [(n, d) for n, d, _ in proof.iter_lines()]
        exprs = [loaded.lookup_expr(r) for _, _, r in loaded.iter_lines()]
        assert exprs == [proof.lookup_expr(r) for _, _, r in proof.iter_lines()]
        last = loaded.lookup_justification(loaded.lines()[-1])
        assert len(last.line_deps) == 1
        assert len(last.subproof_deps) == 1

    def test_plain_string_premises(self):
        proof = Proof.from_dict({"premises": ["P", "Q"], "lines": []})
        assert [proof.lookup_expr(p) for p in proof.premises()] == [parse("P"), parse("Q")]

    def test_unknown_rule_kept(self):
        proof = Proof.from_dict({
            "premises": [{"id": "p", "expr": "P"}],
            "lines": [{"conclusion": "P", "rule": "NO_SUCH_RULE", "deps": ["p"]}],
        })
        assert proof.lookup_justification(proof.lines()[0]).rule == "NO_SUCH_RULE"

    def test_blank_text_is_unparsed(self):
        proof = Proof.from_dict({"premises": [""], "lines": [{"conclusion": None}]})
        assert proof.lookup_expr(proof.premises()[0]) is None
        assert proof.lookup_expr(proof.lines()[0]) is None

    @pytest.mark.parametrize("data", [
        {"premises": []},
        {"lines": [{"conclusion": "P"}]},
        {"premises": ["P &"]},
        {"premises": [{"id": "a", "expr": "P"}, {"id": "a", "expr": "Q"}]},
        {"premises": ["P"], "lines": [{"conclusion": "P", "deps": ["nope"]}]},
        {"premises": [{"id": "a", "expr": "P"}],
         "lines": [{"conclusion": "P", "subproof_deps": ["a"]}]},
    ])
    def test_invalid_input(self, data):
        with pytest.raises(ProofLoadError):
            Proof.from_dict(data)
