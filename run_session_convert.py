#!/usr/bin/env python3
"""
Session File Converter

Converts a Steepbook export between CSV and JSON using the same import
validation as the app. Invalid rows are reported and skipped.

Usage:
    python run_session_convert.py steepbook_sessions.csv -o sessions.json
    python run_session_convert.py steepbook_sessions.json -o sessions.csv
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

# Ensure repo root is on path
_REPO_ROOT = Path(__file__).resolve().parent
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

from steepbook.config import configure_logging
from steepbook.document import decode_json, encode_json
from steepbook.tabular import decode_csv, encode_csv


def format_for(path: Path) -> str:
    return "json" if path.suffix.lower() == ".json" else "csv"


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Convert Steepbook session exports between CSV and JSON",
    )
    parser.add_argument("input", type=Path, help="CSV or JSON export to read")
    parser.add_argument(
        "-o", "--output",
        type=Path,
        required=True,
        help="Output file; format is chosen by extension (.csv or .json)",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail instead of skipping invalid sessions",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level (default: WARNING)",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_arguments(argv)
    configure_logging(args.log_level)

    try:
        text = args.input.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        print(f"ERROR: Could not read {args.input}: {e}", file=sys.stderr)
        return 1

    decode = decode_json if format_for(args.input) == "json" else decode_csv
    result = decode(text)

    if result.failed:
        print(f"ERROR: {result.error}", file=sys.stderr)
        return 1

    if result.partial:
        print(f"WARNING: {result.error}", file=sys.stderr)
        if args.strict:
            return 1

    encode = encode_json if format_for(args.output) == "json" else encode_csv
    try:
        with args.output.open("w", encoding="utf-8", newline="") as f:
            f.write(encode(result.sessions))
    except OSError as e:
        print(f"ERROR: Could not write {args.output}: {e}", file=sys.stderr)
        return 1

    print(f"✓ Converted {len(result.sessions)} sessions - saved to {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
