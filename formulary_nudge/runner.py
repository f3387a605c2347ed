#!/usr/bin/env python3
"""CLI entry point for Formulary Nudge.

Examples:
    formulary-nudge resolve warning --override informational
    formulary-nudge output 1049221 --data-dir ./data
    formulary-nudge match "humira pen"
"""

import argparse
import json
import logging
import sys

from .config import config
from .exceptions import FormularyNudgeError
from .matcher import best_match
from .output import build_output
from .severity import resolve
from .store import JsonDocumentStore, MappingStore, PolicyStore

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)


def cmd_resolve(args) -> int:
    resolved = resolve(args.org_default, args.override)
    print(json.dumps(resolved.to_dict(), indent=2))
    return 0


def cmd_output(args) -> int:
    documents = JsonDocumentStore(args.data_dir)
    payload = build_output(
        args.anchor_rxcui,
        PolicyStore(documents),
        MappingStore(documents),
    )
    print(json.dumps(payload, indent=2))
    return 0


def cmd_match(args) -> int:
    mappings = MappingStore(JsonDocumentStore(args.data_dir)).list_mappings()
    result = best_match(args.query, mappings)
    if result is None:
        print(f"No mapping matches {args.query!r}")
        return 1
    print(result.how)
    print(json.dumps(result.mapping.to_dict(), indent=2))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Formulary Nudge - Formulary substitution severity and lookup tools"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--data-dir",
        type=str,
        default=None,
        help=f"Directory holding policy and mapping JSON (default: {config.DATA_DIR})",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    resolve_parser = subparsers.add_parser(
        "resolve", help="Resolve effective severity from org default and override"
    )
    resolve_parser.add_argument("org_default", help="Org default severity")
    resolve_parser.add_argument(
        "--override",
        default=None,
        help="Mapping severity override (downgrade only)",
    )
    resolve_parser.set_defaults(func=cmd_resolve)

    output_parser = subparsers.add_parser(
        "output", help="Show the prescriber output for an anchor RxCUI"
    )
    output_parser.add_argument("anchor_rxcui", help="Anchor drug RxCUI")
    output_parser.set_defaults(func=cmd_output)

    match_parser = subparsers.add_parser(
        "match", help="Find the mapping that best matches a drug name"
    )
    match_parser.add_argument("query", help="Drug name or RxCUI")
    match_parser.set_defaults(func=cmd_match)

    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    try:
        return args.func(args)
    except FormularyNudgeError as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
