"""
Visualization and reporting utilities.
"""

from .core.state import JustificationRef, PremiseRef, SubproofRef
from .verify import LineStatus, verify_all

VERT = "│"
VERT_RIGHT = "├"
UP_RIGHT = "└"
HORIZ = "─"


def _status_label(proof, ref, verdict) -> str:
    if verdict.status is LineStatus.UNVERIFIED:
        return "(unverified)"
    if verdict.status is LineStatus.INVALID:
        return f"Error: {verdict.error}"
    if isinstance(ref, PremiseRef):
        return "Assumption" if proof.parent_of_line(ref) is not None else "Premise"
    return "Correct"


def _citation(proof, just, numbers, catalog) -> str:
    rule = catalog.display_name(just.rule) if just.rule else "(no rule)"
    cited = sorted(numbers[d][0] for d in just.line_deps if d in numbers)
    parts = [str(n) for n in cited]
    for sref in sorted(just.subproof_deps, key=lambda r: r.id):
        span = proof.subproof_span(sref)
        if span is not None:
            parts.append(f"{span[0]}-{span[1]}")
    return f"{rule} [{', '.join(parts)}]" if parts else rule


def format_proof(proof, catalog) -> list:
    """One text row per line: number, nesting bars, expression, verdict, citation."""
    verdicts = verify_all(proof, catalog)
    numbers = proof.line_numbers()
    rows = []

    def emit(scope, depth):
        bars = VERT * depth
        for premise in scope.premises:
            number = numbers[premise][0]
            expr = proof.lookup_expr(premise)
            text = "" if expr is None else str(expr)
            rows.append(f"{number:>3} {bars}{VERT} {text:<32} {_status_label(proof, premise, verdicts[premise])}")
        rows.append(f"    {bars}{VERT_RIGHT}{HORIZ * 4}")
        for i, ref in enumerate(scope.lines):
            if isinstance(ref, SubproofRef):
                emit(proof.lookup_subproof(ref), depth + 1)
                continue
            edge = UP_RIGHT if i == len(scope.lines) - 1 else VERT
            just = proof.lookup_justification(ref)
            text = "" if just.conclusion is None else str(just.conclusion)
            status = _status_label(proof, ref, verdicts[ref])
            citation = _citation(proof, just, numbers, catalog)
            rows.append(f"{numbers[ref][0]:>3} {bars}{edge} {text:<32} {status:<12} {citation}")

    emit(proof.top_level_proof(), 0)
    return rows


def print_proof(proof, catalog):
    """Pretty-print a proof with a verdict on every line."""
    print(f"\n{'='*60}")
    for row in format_proof(proof, catalog):
        print(row)
    print(f"{'='*60}")
    verdicts = verify_all(proof, catalog)
    invalid = [r for r, v in verdicts.items() if v.status is LineStatus.INVALID]
    pending = [r for r, v in verdicts.items() if v.status is LineStatus.UNVERIFIED]
    print(f"  {len(verdicts)} lines, {len(invalid)} invalid, {len(pending)} unverified")


def print_catalog(catalog, verbose: bool = True):
    """Print every rule group, and each rule's clauses when verbose."""
    print(f"\n{'='*60}")
    print("Rule catalog")
    print(f"{'='*60}")
    for group, rules in catalog.classifications():
        print(f"{group}:")
        for rule in rules:
            print(f"  {catalog.display_name(rule.name)}")
            if verbose:
                for lhs, rhs in rule.reductions:
                    print(f"      {lhs}  <=>  {rhs}")


def print_oracle_results(reports):
    """Print one line per clause checked by the truth-table oracle."""
    print(f"\n{'='*60}")
    print("Truth-table check")
    print(f"{'='*60}")
    for report in reports:
        mark = "ok" if report.ok else "MISMATCH"
        print(f"  [{mark:>8}] {report.name}  ({report.rows} rows)")
        if not report.ok:
            print(f"             counterexample: {report.counterexample}")
    failures = sum(1 for r in reports if not r.ok)
    print(f"{'='*60}")
    print(f"  {len(reports)} clauses, {failures} failures")


def export_dot(proof, path="proof_graph.dot"):
    """Export the dependency graph of a proof as a DOT file for Graphviz."""
    numbers = proof.line_numbers()
    with open(path, "w") as f:
        f.write("digraph proof {\n")
        f.write("  rankdir=TB;\n")
        f.write("  node [shape=box, style=rounded];\n")
        for ref, (number, depth) in numbers.items():
            expr = proof.lookup_expr(ref)
            label = f"{number}. {'' if expr is None else expr}".replace('"', '\\"')
            color = "lightblue" if isinstance(ref, PremiseRef) else "lightgray"
            f.write(f'  "{number}" [label="{label}", fillcolor={color}, style=filled];\n')
            if isinstance(ref, JustificationRef):
                just = proof.lookup_justification(ref)
                for dep in just.line_deps:
                    if dep in numbers:
                        f.write(f'  "{numbers[dep][0]}" -> "{number}";\n')
        f.write("}\n")
    print(f"Graph exported to {path}")
