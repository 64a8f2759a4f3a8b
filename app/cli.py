"""
Command-line interface for the question paper generator.

Usage:
    python -m app generate --file questions.xlsx --paper-type mid1 [OPTIONS]
"""

import argparse
import json
import os
import sys
from typing import List, Optional

from app.config import get_settings
from app.exceptions import SpreadsheetReadError
from app.middleware.logging import configure_logging
from app.services.paper_generator import create_selector, generate_paper
from app.services.quota_selector import DEFAULT_QUOTA_TABLES
from app.services.spreadsheet_reader import read_rows


def create_parser() -> argparse.ArgumentParser:
    """Create CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="paper-generator",
        description="Question Paper Generator CLI - Build a paper from a local spreadsheet"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    generate_parser = subparsers.add_parser(
        "generate",
        help="Generate a question paper from a spreadsheet"
    )
    generate_parser.add_argument(
        "--file",
        "-f",
        type=str,
        required=True,
        help="Question bank spreadsheet (.xlsx, .xlsm, .xls or .csv)"
    )
    generate_parser.add_argument(
        "--paper-type",
        "-t",
        type=str,
        required=True,
        help=f"Paper type ({', '.join(DEFAULT_QUOTA_TABLES)})"
    )
    generate_parser.add_argument(
        "--seed",
        "-s",
        type=int,
        default=None,
        help="Random seed for a reproducible paper (default: from env or random)"
    )
    generate_parser.add_argument(
        "--output",
        "-o",
        type=str,
        default=None,
        help="Write the paper JSON to this file instead of stdout"
    )

    return parser


def generate_command(args: argparse.Namespace) -> int:
    """
    Execute the generate command.

    Args:
        args: Parsed command-line arguments

    Returns:
        int: Exit code (0 for success, 1 for error)
    """
    try:
        settings = get_settings()
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    configure_logging("WARNING")

    if not os.path.isfile(args.file):
        print(f"Error: File not found: {args.file}", file=sys.stderr)
        return 1

    with open(args.file, "rb") as f:
        content = f.read()

    try:
        rows = read_rows(content, os.path.basename(args.file))
    except SpreadsheetReadError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    seed = args.seed if args.seed is not None else settings.selection_seed
    result = generate_paper(rows, args.paper_type, selector=create_selector(seed))

    if result.paper is None:
        message = result.error.message if result.error else "Unknown error"
        print(f"Error: {message}", file=sys.stderr)
        return 1

    output = json.dumps(result.paper.model_dump(by_alias=True, mode="json"), indent=2)
    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(output + "\n")
        print(f"Wrote {len(result.paper.questions)} questions to {args.output}")
    else:
        print(output)

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    if args.command == "generate":
        return generate_command(args)

    print(f"Unknown command: {args.command}")
    return 1


if __name__ == "__main__":
    sys.exit(main())
