#!/usr/bin/env python3
"""
Compare two HTML test-case exports from the command line.

Usage:
  python run_step_diff.py path/to/original.html path/to/revised.html [--mode content]
"""

from __future__ import annotations

import argparse
import sys
import uuid
from pathlib import Path

from dotenv import load_dotenv

from errors import StepDiffError
from matching import MatchPolicy
from step_diff import diff_documents


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Row- and word-level diff of two HTML test-case exports."
    )
    parser.add_argument("old", type=Path, help="Original HTML export")
    parser.add_argument("new", type=Path, help="Revised HTML export")
    parser.add_argument(
        "--mode",
        choices=[p.value for p in MatchPolicy],
        default=MatchPolicy.BY_IDENTIFIER.value,
        help="Match rows by Step Order ('step', default) or by procedure text ('content')",
    )
    parser.add_argument(
        "--report-dir",
        type=Path,
        default=Path("reports"),
        help="Directory to write the final HTML report (default: reports)",
    )
    parser.add_argument("--no-summary", action="store_true", help="Skip the AI summary")
    parser.add_argument("--only-changes", action="store_true", help="Hide unchanged rows")
    parser.add_argument("--debug", action="store_true")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    args = parse_args(argv)

    if not args.old.is_file():
        raise SystemExit(f"old file not found: {args.old}")
    if not args.new.is_file():
        raise SystemExit(f"new file not found: {args.new}")

    report_dir = args.report_dir.resolve()
    report_dir.mkdir(parents=True, exist_ok=True)
    final_path = report_dir / f"diff_report_{uuid.uuid4().hex}.html"

    try:
        diff_documents(
            old=args.old,
            new=args.new,
            out=final_path,
            mode=args.mode,
            debug=args.debug,
            summarize=not args.no_summary,
            only_changes=args.only_changes,
        )
    except StepDiffError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    print(f"Report written: {final_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
