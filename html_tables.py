"""
html_tables.py – locate the test-step table in an exported HTML document.

The export may hold several tables (cover page, revision history, …); the one
we want is the first whose first row names all required columns.  Cells are
returned as their inner HTML so formatting survives into the report.
"""

from __future__ import annotations

import pathlib
from typing import List, Sequence

from bs4 import BeautifulSoup
from bs4.element import Tag

from errors import SourceFormatError
from records import REQUIRED_HEADERS

Grid = List[List[str]]


def _cells(row: Tag) -> List[Tag]:
    return row.find_all(["th", "td"], recursive=False)


def _has_headers(table: Tag, required: Sequence[str]) -> bool:
    first = table.find("tr")
    if first is None:
        return False
    texts = [c.get_text().strip() for c in _cells(first)]
    return all(h in texts for h in required)


def extract_grid(html_doc: str, required: Sequence[str] = REQUIRED_HEADERS) -> Grid:
    """Return the qualifying table as rows of inner-HTML cell strings."""
    soup = BeautifulSoup(html_doc or "", "lxml")
    tables = soup.find_all("table")
    if not tables:
        raise SourceFormatError("No tables found in the HTML file.")

    target = next((t for t in tables if _has_headers(t, required)), None)
    if target is None:
        raise SourceFormatError(
            'Could not find a table with the required headers: "%s".' % ", ".join(required)
        )
    return [[cell.decode_contents() for cell in _cells(tr)] for tr in target.find_all("tr")]


def load_grid(
    path: pathlib.Path,
    label: str = "original",
    required: Sequence[str] = REQUIRED_HEADERS,
) -> Grid:
    path = pathlib.Path(path)
    raw = path.read_text(encoding="utf-8", errors="replace")
    try:
        return extract_grid(raw, required)
    except SourceFormatError as e:
        raise SourceFormatError(f"{e} in {label} file: {path.name}", source=str(path)) from e


__all__ = ["Grid", "extract_grid", "load_grid"]
