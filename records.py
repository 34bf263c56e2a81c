"""
records.py – turn a raw table grid into logical test-step records.

A test-case export spreads one step over several ``<tr>`` rows: the first
row carries the *Step Order*, the following rows ("continuation rows") have
no step number and only extend the procedure / outcome text.  Section
headings ("category rows") carry a procedure text only.

``build_records`` finds the header row, zips every following row onto the
header keys and folds continuation rows back into the step they belong to.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from errors import SourceFormatError
from html_text import normalize_text

STEP_ORDER = "Step Order"
PROCEDURE = "Procedure"
EXPECTED_OUTCOME = "Expected Outcome"
REQUIRED_HEADERS = (STEP_ORDER, PROCEDURE, EXPECTED_OUTCOME)

Record = Dict[str, str]

_log = logging.getLogger("step-diff")


def _cell(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def is_category(record: Record) -> bool:
    """A section heading: procedure text only, no step number, no outcome."""
    return (
        normalize_text(record.get(STEP_ORDER)) == ""
        and normalize_text(record.get(PROCEDURE)) != ""
        and normalize_text(record.get(EXPECTED_OUTCOME)) == ""
    )


def find_header(
    grid: Sequence[Sequence[Any]],
    required: Sequence[str] = REQUIRED_HEADERS,
) -> tuple[int, List[str]]:
    """Return (row index, normalized header texts) of the first header row."""
    for idx, row in enumerate(grid):
        if not row:
            continue
        texts = [normalize_text(_cell(c)) for c in row]
        if set(required).issubset(texts):
            return idx, texts
    raise SourceFormatError(
        'Could not find the table header row containing "%s".' % ", ".join(required)
    )


def build_records(
    grid: Sequence[Sequence[Any]],
    label: str = "table",
    logger: Optional[logging.Logger] = None,
    *,
    required: Sequence[str] = REQUIRED_HEADERS,
) -> List[Record]:
    logger = logger or _log
    if not grid:
        return []

    header_idx, headers = find_header(grid, required)

    records: List[Record] = []
    target: Optional[int] = None   # index in `records` receiving continuation rows
    merged = 0
    orphaned = 0

    for raw in grid[header_idx + 1:]:
        raw = list(raw or [])
        row: Record = {}
        for col, key in enumerate(headers):
            row[key] = _cell(raw[col]) if col < len(raw) else ""

        if is_category(row):
            target = None
            records.append(row)
        elif normalize_text(row.get(STEP_ORDER)) != "":
            records.append(row)
            target = len(records) - 1
        elif target is not None:
            parent = records[target]
            for key in dict.fromkeys(headers):
                extra = row.get(key, "")
                if extra and normalize_text(extra) != "":
                    parent[key] = parent.get(key, "") + extra
            merged += 1
        else:
            records.append(row)
            orphaned += 1

    logger.info(
        "%s: %d records kept, %d continuation rows merged, %d orphaned",
        label, len(records), merged, orphaned,
    )
    return records


__all__ = [
    "STEP_ORDER",
    "PROCEDURE",
    "EXPECTED_OUTCOME",
    "REQUIRED_HEADERS",
    "Record",
    "is_category",
    "find_header",
    "build_records",
]
