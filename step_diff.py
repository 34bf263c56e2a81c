#!/usr/bin/env python3
"""
Step Diff – row- and word-level comparison of two test-case specifications
exported as HTML tables.

Each export holds a table with the columns *Step Order*, *Procedure* and
*Expected Outcome* (plus any others).  Both tables are rebuilt into logical
test steps, aligned under one of two matching policies and written as a
single HTML report with an optional AI summary of the changes.

Example
-------
```python
from step_diff import diff_documents

diff_documents(
    old="v1.html",
    new="v2.html",
    out="step_diff_report.html",
    mode="content",     # or "step" (match by Step Order, the default)
    debug=False,
    api_key="sk-...",   # or set OPENAI_API_KEY in the environment
)
```

Dependencies
------------
``pip install beautifulsoup4 lxml numpy openai tenacity tqdm markdown``
"""

from __future__ import annotations

import logging
import os
import pathlib
from typing import Optional, Union

from openai import OpenAI

from alignment import ComparisonResult, align_records
from errors import EmptyComparisonError, SourceFormatError
from html_tables import load_grid
from matching import MatchPolicy
from records import build_records
from report import render_report
from summary import summarize_changes

DEFAULT_POLICY = MatchPolicy.BY_IDENTIFIER
DEFAULT_REPORT = "step_diff_report.html"


def _load_records(path: pathlib.Path, label: str, logger: logging.Logger):
    grid = load_grid(path, label)
    logger.debug("%s: %d table rows read from %s", label, len(grid), path.name)
    try:
        return build_records(grid, label, logger)
    except SourceFormatError as e:
        raise SourceFormatError(f"{e} in {label} file: {path.name}", source=str(path)) from e


def compare_files(
    old_path: pathlib.Path,
    new_path: pathlib.Path,
    policy: Union[MatchPolicy, str] = DEFAULT_POLICY,
    logger: Optional[logging.Logger] = None,
) -> ComparisonResult:
    """Load both exports, rebuild their records and align them."""
    logger = logger or logging.getLogger("step-diff")
    old_records = _load_records(pathlib.Path(old_path), "original", logger)
    new_records = _load_records(pathlib.Path(new_path), "revised", logger)
    logger.info("Records – original: %d, revised: %d", len(old_records), len(new_records))

    if not old_records and not new_records:
        raise EmptyComparisonError()
    return align_records(old_records, new_records, policy, logger)


def build_report(
    old_path: pathlib.Path,
    new_path: pathlib.Path,
    out_html: pathlib.Path,
    policy: Union[MatchPolicy, str] = DEFAULT_POLICY,
    debug: bool = False,
    api_key: Optional[str] = None,
    summarize: bool = True,
    only_changes: bool = False,
) -> ComparisonResult:
    """Internal helper that runs the comparison and writes the HTML report."""

    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(levelname)s %(message)s" if debug else "%(message)s",
    )
    logger = logging.getLogger("step-diff")

    policy = MatchPolicy(policy)
    logger.info("▶ Comparing %s → %s (match by %s) …", old_path.name, new_path.name, policy.value)
    result = compare_files(old_path, new_path, policy, logger)

    summary_text = ""
    if summarize:
        key = api_key or os.getenv("OPENAI_API_KEY")
        client = OpenAI(api_key=key) if key else None
        logger.info("▶ AI summary …")
        summary_text = summarize_changes(client, result, logger)

    out_html.write_text(
        render_report(result, summary_text, only_changes=only_changes),
        encoding="utf-8",
    )
    logger.info("✅ Report written → %s", out_html.resolve())
    return result


def diff_documents(
    *,
    old: str | pathlib.Path,
    new: str | pathlib.Path,
    out: str | pathlib.Path = DEFAULT_REPORT,
    mode: Union[MatchPolicy, str] = DEFAULT_POLICY,
    debug: bool = False,
    api_key: str | None = None,
    summarize: bool = True,
    only_changes: bool = False,
) -> pathlib.Path:
    """Compare two HTML exports and write the report.

    Parameters
    ----------
    old, new : str | Path
        The original and revised HTML exports.
    out : str | Path, default "step_diff_report.html"
        Where to write the HTML report.
    mode : MatchPolicy | str, default "step"
        ``"step"`` pairs rows by Step Order, ``"content"`` by the first two
        lines of the procedure.
    debug : bool, default False
        If True, enable verbose logging.
    api_key : str | None
        OpenAI API key. If None, falls back to the OPENAI_API_KEY env var; with
        no key at all the report carries a placeholder instead of a summary.
    summarize : bool, default True
        Set to False to skip the AI summary entirely.
    only_changes : bool, default False
        Leave UNCHANGED rows out of the report table.

    Returns
    -------
    pathlib.Path
        Absolute path of the generated HTML report.
    """

    out_path = pathlib.Path(out)
    build_report(
        old_path=pathlib.Path(old),
        new_path=pathlib.Path(new),
        out_html=out_path,
        policy=mode,
        debug=debug,
        api_key=api_key,
        summarize=summarize,
        only_changes=only_changes,
    )
    return out_path.resolve()


__all__ = ["compare_files", "build_report", "diff_documents"]
