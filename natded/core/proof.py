"""
The proof tree.

A proof is a root scope holding premises and then lines. A line is either
a justification or a nested subproof, which is itself a scope. Content
lives in flat arenas keyed by reference, and a parent map records which
subproof owns each reference (None for the root). Structural edits only
touch the lists of the scope they change, so no other reference moves,
and deleted references simply stop resolving.

Every lookup returns None for a reference that no longer exists. Only the
*_or_die lookups raise.
"""

import itertools
import logging
from dataclasses import dataclass, field
from typing import Callable, Iterator, Optional

from .exceptions import (
    DanglingReference, ExclusiveAccessError, ParseError, ProofLoadError,
)
from .parser import parse
from .state import (
    Justification, JustificationRef, Premise, PremiseRef, Subproof,
    SubproofRef,
)

logger = logging.getLogger(__name__)


@dataclass
class _Scope:
    premises: list = field(default_factory=list)
    lines: list = field(default_factory=list)

    def snapshot(self) -> Subproof:
        return Subproof(tuple(self.premises), tuple(self.lines))


class Proof:
    """
    A natural-deduction proof document.

    Proof() starts with a single premise (expr, or an unparsed blank line).
    Proof.new_empty() is the blank document an editor opens: one empty
    premise and one empty step.
    """

    def __init__(self, premise=None):
        self._ids = itertools.count(1)
        self._root = _Scope()
        self._scopes = {}          # SubproofRef -> _Scope
        self._premises = {}        # PremiseRef -> Premise
        self._justifications = {}  # JustificationRef -> Justification
        self._parents = {}         # any ref -> Optional[SubproofRef]
        self._borrowed = False
        self.add_premise(premise)

    @classmethod
    def new_empty(cls) -> "Proof":
        proof = cls()
        proof.prepend_step(Justification())
        return proof

    # ── Internals ───────────────────────────────────────────────────────────

    def _new_ref(self, kind):
        return kind(next(self._ids))

    def _scope(self, sref: Optional[SubproofRef]) -> Optional[_Scope]:
        if sref is None:
            return self._root
        return self._scopes.get(sref)

    def _check_not_borrowed(self):
        if self._borrowed:
            raise ExclusiveAccessError("proof is held by a with_mut_* callback")

    def _insert_step(self, ref, content, scope: _Scope, index: int, parent):
        if isinstance(ref, JustificationRef):
            # the proof owns its lines; callers keep their own object
            self._justifications[ref] = content.copy()
        else:
            self._scopes[ref] = content
        self._parents[ref] = parent
        scope.lines.insert(index, ref)

    def _forget(self, ref):
        self._premises.pop(ref, None)
        self._justifications.pop(ref, None)
        self._parents.pop(ref, None)
        scope = self._scopes.pop(ref, None)
        if scope is not None:
            for child in scope.premises + scope.lines:
                self._forget(child)

    # ── Insertion ───────────────────────────────────────────────────────────

    def add_premise(self, expr=None, within: Optional[SubproofRef] = None) -> Optional[PremiseRef]:
        """Append a premise to the root, or to subproof `within`."""
        self._check_not_borrowed()
        scope = self._scope(within)
        if scope is None:
            return None
        ref = self._new_ref(PremiseRef)
        self._premises[ref] = Premise(expr)
        self._parents[ref] = within
        scope.premises.append(ref)
        logger.debug("added %r in %r", ref, within)
        return ref

    def add_premise_relative(self, expr, ref: PremiseRef, after: bool = True) -> Optional[PremiseRef]:
        """Insert a premise next to an existing premise, in the same scope."""
        self._check_not_borrowed()
        if ref not in self._premises:
            return None
        parent = self._parents[ref]
        scope = self._scope(parent)
        new_ref = self._new_ref(PremiseRef)
        self._premises[new_ref] = Premise(expr)
        self._parents[new_ref] = parent
        scope.premises.insert(scope.premises.index(ref) + int(after), new_ref)
        logger.debug("added %r %s %r", new_ref, "after" if after else "before", ref)
        return new_ref

    def prepend_step(self, justification: Optional[Justification] = None,
                     within: Optional[SubproofRef] = None) -> Optional[JustificationRef]:
        """Insert a justification as the first line of a scope."""
        self._check_not_borrowed()
        scope = self._scope(within)
        if scope is None:
            return None
        ref = self._new_ref(JustificationRef)
        self._insert_step(ref, justification or Justification(), scope, 0, within)
        logger.debug("prepended %r in %r", ref, within)
        return ref

    def add_step(self, justification: Optional[Justification] = None,
                 within: Optional[SubproofRef] = None) -> Optional[JustificationRef]:
        """Append a justification as the last line of a scope."""
        self._check_not_borrowed()
        scope = self._scope(within)
        if scope is None:
            return None
        ref = self._new_ref(JustificationRef)
        self._insert_step(ref, justification or Justification(), scope, len(scope.lines), within)
        logger.debug("appended %r in %r", ref, within)
        return ref

    def add_step_relative(self, justification: Optional[Justification], ref,
                          after: bool = True) -> Optional[JustificationRef]:
        """Insert a justification before or after a justification or subproof."""
        self._check_not_borrowed()
        if ref not in self._justifications and ref not in self._scopes:
            return None
        parent = self._parents[ref]
        scope = self._scope(parent)
        new_ref = self._new_ref(JustificationRef)
        index = scope.lines.index(ref) + int(after)
        self._insert_step(new_ref, justification or Justification(), scope, index, parent)
        logger.debug("added %r %s %r", new_ref, "after" if after else "before", ref)
        return new_ref

    def add_subproof(self, within: Optional[SubproofRef] = None, empty: bool = False) -> Optional[SubproofRef]:
        """
        Append a subproof to a scope.

        The new subproof gets one blank premise and one blank step unless
        empty is set.
        """
        self._check_not_borrowed()
        scope = self._scope(within)
        if scope is None:
            return None
        sref = self._new_ref(SubproofRef)
        self._insert_step(sref, _Scope(), scope, len(scope.lines), within)
        if not empty:
            self.add_premise(None, within=sref)
            self.add_step(Justification(), within=sref)
        logger.debug("appended %r in %r", sref, within)
        return sref

    def add_subproof_relative(self, ref, after: bool = True) -> Optional[SubproofRef]:
        """Insert a subproof, with one blank premise and one blank step, next to a line."""
        self._check_not_borrowed()
        if ref not in self._justifications and ref not in self._scopes:
            return None
        parent = self._parents[ref]
        scope = self._scope(parent)
        sref = self._new_ref(SubproofRef)
        self._insert_step(sref, _Scope(), scope, scope.lines.index(ref) + int(after), parent)
        self.add_premise(None, within=sref)
        self.add_step(Justification(), within=sref)
        logger.debug("added %r %s %r", sref, "after" if after else "before", ref)
        return sref

    # ── Removal ─────────────────────────────────────────────────────────────

    def may_remove_line(self, ref) -> bool:
        """
        Steps can always be removed. A subproof's premises cannot be removed
        on their own, and the last top-level premise cannot be removed.
        """
        if isinstance(ref, JustificationRef):
            return ref in self._justifications
        if isinstance(ref, PremiseRef) and ref in self._premises:
            if self._parents[ref] is not None:
                return False
            return len(self._root.premises) > 1
        return False

    def remove_line(self, ref) -> bool:
        """Remove a premise or justification. Refused edits are a no-op returning False."""
        self._check_not_borrowed()
        if not self.may_remove_line(ref):
            if ref in self._premises:
                logger.warning("refusing to remove %r", ref)
            return False
        scope = self._scope(self._parents[ref])
        if isinstance(ref, PremiseRef):
            scope.premises.remove(ref)
        else:
            scope.lines.remove(ref)
        self._forget(ref)
        logger.debug("removed %r", ref)
        return True

    def remove_subproof(self, sref: SubproofRef) -> bool:
        """Remove a subproof and everything nested inside it."""
        self._check_not_borrowed()
        if sref not in self._scopes:
            return False
        self._scope(self._parents[sref]).lines.remove(sref)
        self._forget(sref)
        logger.debug("removed %r and its contents", sref)
        return True

    # ── Scoped in-place mutation ────────────────────────────────────────────

    def _with_borrow(self, content, fn: Callable):
        self._check_not_borrowed()
        self._borrowed = True
        try:
            return fn(content)
        finally:
            self._borrowed = False

    def with_mut_premise(self, ref: PremiseRef, fn: Callable):
        """Call fn(premise) on the live premise. Returns fn's result, or None if ref is gone."""
        premise = self._premises.get(ref)
        if premise is None:
            return None
        return self._with_borrow(premise, fn)

    def with_mut_step(self, ref: JustificationRef, fn: Callable):
        """Call fn(justification) on the live justification. Returns fn's result, or None if ref is gone."""
        just = self._justifications.get(ref)
        if just is None:
            return None
        return self._with_borrow(just, fn)

    def set_premise(self, ref: PremiseRef, expr) -> bool:
        def assign(premise):
            premise.expr = expr
            return True
        return bool(self.with_mut_premise(ref, assign))

    def set_conclusion(self, ref: JustificationRef, expr) -> bool:
        def assign(just):
            just.conclusion = expr
            return True
        return bool(self.with_mut_step(ref, assign))

    def set_rule(self, ref: JustificationRef, rule: Optional[str]) -> bool:
        def assign(just):
            just.rule = rule
            return True
        return bool(self.with_mut_step(ref, assign))

    def toggle_dependency(self, ref: JustificationRef, dep) -> Optional[bool]:
        """Add dep if it is not cited, remove it if it is. Returns whether it is now cited."""
        def toggle(just):
            deps = just.subproof_deps if isinstance(dep, SubproofRef) else just.line_deps
            if dep in deps:
                deps.discard(dep)
                return False
            deps.add(dep)
            return True
        return self.with_mut_step(ref, toggle)

    # ── Lookup ──────────────────────────────────────────────────────────────

    def __contains__(self, ref) -> bool:
        return ref in self._parents

    def contains(self, ref) -> bool:
        return ref in self

    def __len__(self):
        return len(self._premises) + len(self._justifications)

    def parent_of_line(self, ref) -> Optional[SubproofRef]:
        """The subproof directly containing ref; None at top level or if ref is gone."""
        return self._parents.get(ref)

    def top_level_proof(self) -> Subproof:
        return self._root.snapshot()

    def premises(self) -> tuple:
        return tuple(self._root.premises)

    def lines(self) -> tuple:
        return tuple(self._root.lines)

    def lookup_subproof(self, sref: SubproofRef) -> Optional[Subproof]:
        scope = self._scopes.get(sref)
        return scope.snapshot() if scope is not None else None

    def lookup_premise(self, ref: PremiseRef) -> Optional[Premise]:
        premise = self._premises.get(ref)
        return premise.copy() if premise is not None else None

    def lookup_justification(self, ref: JustificationRef) -> Optional[Justification]:
        just = self._justifications.get(ref)
        return just.copy() if just is not None else None

    def lookup_pj(self, ref):
        """Premise or Justification content for a line reference, or None."""
        if isinstance(ref, PremiseRef):
            return self.lookup_premise(ref)
        if isinstance(ref, JustificationRef):
            return self.lookup_justification(ref)
        return None

    def lookup_justification_or_die(self, ref: JustificationRef) -> Justification:
        just = self.lookup_justification(ref)
        if just is None:
            raise DanglingReference(ref)
        return just

    def lookup_expr(self, ref):
        """The expression a line asserts, or None if it is gone or unparsed."""
        if isinstance(ref, PremiseRef) and ref in self._premises:
            return self._premises[ref].expr
        if isinstance(ref, JustificationRef) and ref in self._justifications:
            return self._justifications[ref].conclusion
        return None

    # ── Traversal ───────────────────────────────────────────────────────────

    def walk(self) -> Iterator[tuple]:
        """Yield (depth, ref) for every premise, step and subproof in document order."""
        def visit(scope, depth):
            for premise in scope.premises:
                yield depth, premise
            for ref in scope.lines:
                yield depth, ref
                if isinstance(ref, SubproofRef):
                    yield from visit(self._scopes[ref], depth + 1)
        yield from visit(self._root, 0)

    def iter_lines(self) -> Iterator[tuple]:
        """Yield (line_number, depth, ref) for premises and justifications, numbered from 1."""
        lines = ((d, r) for d, r in self.walk() if not isinstance(r, SubproofRef))
        for number, (depth, ref) in enumerate(lines, start=1):
            yield number, depth, ref

    def line_numbers(self) -> dict:
        return {ref: (number, depth) for number, depth, ref in self.iter_lines()}

    def depth_of(self, ref) -> Optional[int]:
        if ref not in self:
            return None
        depth = 0
        parent = self._parents[ref]
        while parent is not None:
            depth += 1
            parent = self._parents[parent]
        return depth

    def subproof_span(self, sref: SubproofRef) -> Optional[tuple]:
        """(first, last) line numbers covered by a subproof, or None."""
        if sref not in self._scopes:
            return None
        numbers = self.line_numbers()
        inside = [numbers[r][0] for r in self._contents(sref) if r in numbers]
        if not inside:
            return None
        return min(inside), max(inside)

    def _contents(self, sref: SubproofRef) -> Iterator:
        scope = self._scopes[sref]
        for ref in scope.premises + scope.lines:
            yield ref
            if isinstance(ref, SubproofRef):
                yield from self._contents(ref)

    # ── Visibility ──────────────────────────────────────────────────────────

    def visible_from(self, ref) -> set:
        """
        Everything ref may cite: earlier premises and lines of its own scope,
        then of each enclosing scope up to the root. Subproofs are visible as
        whole units once closed; their insides never are.
        """
        if ref not in self:
            return set()
        visible = set()
        current = ref
        parent = self._parents[ref]
        while True:
            scope = self._scope(parent)
            if isinstance(current, PremiseRef):
                visible.update(scope.premises[:scope.premises.index(current)])
            else:
                visible.update(scope.premises)
                visible.update(scope.lines[:scope.lines.index(current)])
            if parent is None:
                return visible
            current, parent = parent, self._parents[parent]

    def can_reference_dep(self, line_ref, dep) -> bool:
        if dep not in self or dep == line_ref:
            return False
        return dep in self.visible_from(line_ref)

    # ── Verification ────────────────────────────────────────────────────────

    def verify_line(self, ref, catalog):
        """None if the line checks out, else a VerificationError."""
        from ..verify import verify_line
        return verify_line(self, ref, catalog)

    # ── Bulk load ───────────────────────────────────────────────────────────

    def to_dict(self) -> dict:
        def expr_text(expr):
            return None if expr is None else str(expr)

        def label(ref):
            prefix = {PremiseRef: "p", JustificationRef: "j", SubproofRef: "s"}[type(ref)]
            return f"{prefix}{ref.id}"

        def dump(scope):
            lines = []
            for ref in scope.lines:
                if isinstance(ref, SubproofRef):
                    lines.append({"id": label(ref), "subproof": dump(self._scopes[ref])})
                    continue
                just = self._justifications[ref]
                lines.append({
                    "id": label(ref),
                    "conclusion": expr_text(just.conclusion),
                    "rule": just.rule,
                    "deps": [label(d) for d in sorted(just.line_deps, key=lambda r: r.id)],
                    "subproof_deps": [label(d) for d in sorted(just.subproof_deps, key=lambda r: r.id)],
                })
            return {
                "premises": [{"id": label(p), "expr": expr_text(self._premises[p].expr)}
                             for p in scope.premises],
                "lines": lines,
            }

        return dump(self._root)

    @classmethod
    def from_dict(cls, data: dict) -> "Proof":
        """
        Build a proof from nested dicts, as produced by to_dict().

        Premises may be given as plain strings. Raises ProofLoadError if the
        root has no premises, an id repeats, a dependency id is unknown or of
        the wrong kind, or some text does not parse.
        """
        premises = data.get("premises") or []
        if not premises:
            raise ProofLoadError("a proof needs at least one top-level premise")

        proof = cls(_load_expr(_premise_text(premises[0])))
        ids = {}
        pending = []
        _register(ids, premises[0], proof._root.premises[0])
        proof._load_scope({"premises": premises[1:], "lines": data.get("lines", [])},
                          None, ids, pending)

        for jref, dep_ids, sdep_ids in pending:
            just = proof._justifications[jref]
            for dep_id in dep_ids:
                dep = ids.get(dep_id)
                if not isinstance(dep, (PremiseRef, JustificationRef)):
                    raise ProofLoadError(f"unknown line dependency {dep_id!r}", {"id": dep_id})
                just.line_deps.add(dep)
            for dep_id in sdep_ids:
                dep = ids.get(dep_id)
                if not isinstance(dep, SubproofRef):
                    raise ProofLoadError(f"unknown subproof dependency {dep_id!r}", {"id": dep_id})
                just.subproof_deps.add(dep)
        logger.debug("loaded proof with %d lines", len(proof))
        return proof

    def _load_scope(self, data: dict, within, ids: dict, pending: list):
        for entry in data.get("premises", []):
            ref = self.add_premise(_load_expr(_premise_text(entry)), within=within)
            _register(ids, entry, ref)
        for entry in data.get("lines", []):
            if "subproof" in entry:
                sref = self.add_subproof(within=within, empty=True)
                _register(ids, entry, sref)
                self._load_scope(entry["subproof"], sref, ids, pending)
                continue
            just = Justification(
                conclusion=_load_expr(entry.get("conclusion")),
                rule=entry.get("rule"),
            )
            ref = self.add_step(just, within=within)
            _register(ids, entry, ref)
            pending.append((ref, entry.get("deps", []), entry.get("subproof_deps", [])))


def _premise_text(entry):
    return entry.get("expr") if isinstance(entry, dict) else entry


def _load_expr(text):
    if text is None or text == "":
        return None
    try:
        return parse(text)
    except ParseError as err:
        raise ProofLoadError(f"cannot parse {text!r}: {err}", {"text": text}) from err


def _register(ids: dict, entry, ref):
    if not isinstance(entry, dict) or entry.get("id") is None:
        return
    if entry["id"] in ids:
        raise ProofLoadError(f"duplicate id {entry['id']!r}", {"id": entry["id"]})
    ids[entry["id"]] = ref
