"""
CLI entry point. Run as: python -m natded --demo <name>
"""

import argparse
import json
import logging
import sys

from .core.exceptions import CatalogError
from .demos import DEMOS
from .oracle import DEFAULT_MAX_SLOTS, check_rules
from .rules.catalog import build_catalog
from .visualization import export_dot, print_catalog, print_oracle_results, print_proof


def main(argv=None):
    parser = argparse.ArgumentParser(description="Natural-deduction proof checker")
    parser.add_argument(
        "--demo",
        choices=list(DEMOS.keys()),
        default="substitution",
        help="Which sample proof to check",
    )
    parser.add_argument("--catalog", action="store_true", help="Print the rule catalog")
    parser.add_argument("--check-catalog", action="store_true",
                        help="Brute-force every catalog clause with the truth-table oracle")
    parser.add_argument("--max-slots", type=int, default=DEFAULT_MAX_SLOTS,
                        help=f"Truth-table width limit for --check-catalog (default {DEFAULT_MAX_SLOTS})")
    parser.add_argument("--dump", action="store_true", help="Print the demo proof as JSON")
    parser.add_argument("--dot", type=str, default=None, help="Export DOT graph to file")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("--verbose", action="store_true", help="Debug logging")
    verbosity.add_argument("--quiet", action="store_true", help="Less output")
    args = parser.parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.ERROR if args.quiet else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    try:
        catalog = build_catalog()
    except CatalogError as err:
        print(f"Rule catalog is broken: {err}", file=sys.stderr)
        return 1

    if args.catalog:
        print_catalog(catalog, verbose=not args.quiet)

    if args.check_catalog:
        try:
            reports = check_rules(catalog, args.max_slots)
        except CatalogError as err:
            print(f"Truth-table check aborted: {err}", file=sys.stderr)
            return 1
        print_oracle_results(reports)
        if not all(r.ok for r in reports):
            return 1

    demo = DEMOS[args.demo]
    proof = demo["make_proof"]()
    print(f"Demo: {args.demo} ({demo['description']})")
    print_proof(proof, catalog)

    if args.dump:
        print(json.dumps(proof.to_dict(), indent=2, ensure_ascii=False))

    if args.dot:
        export_dot(proof, args.dot)

    return 0


if __name__ == "__main__":
    sys.exit(main())
