"""
report.py – self-contained HTML report for a ComparisonResult.

Cell contents are the original HTML fragments of the export, rendered as-is
(minus inline text colours, which would fight the row colours).  Changed text
in MODIFIED rows is marked up with ``<ins>``/``<del>`` from the word diff.
"""

from __future__ import annotations

import datetime
import html
from itertools import groupby
from typing import List, Optional

import markdown
from bs4 import BeautifulSoup

from alignment import ChangeType, ComparisonResult, RowPair
from html_text import normalize_text
from matching import MatchPolicy
from records import EXPECTED_OUTCOME, PROCEDURE, STEP_ORDER, Record, is_category
from word_diff import DiffType, TokenKind, diff_text

_SUBCATEGORY_MARKERS = ("Full screen mode", "Test with")

_CSS = """
<style>
  body{font-family:system-ui,-apple-system,"Segoe UI",Roboto,sans-serif;color:#1f2937;}
  .summary{border:1px solid #e5e7eb;border-radius:12px;padding:1rem 1.5rem;margin-bottom:2rem;}
  .counts span{display:inline-block;margin-right:1.5rem;font-weight:600;}
  .legend span{display:inline-block;margin:0.5rem 1rem 0.5rem 0;padding:0 4px;border-radius:3px;}
  table.stepdiff{border-collapse:collapse;width:100%;table-layout:fixed;}
  table.stepdiff th,table.stepdiff td{border:1px solid #e5e7eb;padding:8px;vertical-align:top;}
  table.stepdiff th{position:sticky;top:0;background:#f3f4f6;z-index:1;font-size:0.8em;text-transform:uppercase;}
  table.stepdiff td{white-space:pre-wrap;word-break:break-word;font-size:0.9em;}
  table.stepdiff td.step{text-align:center;font-weight:bold;vertical-align:middle;width:6%;}
  table.stepdiff td.step.changed{background:#fde68a;}
  table.stepdiff tr.unchanged{background:#fff;}
  table.stepdiff tr.modified{background:#fffbeb;}
  table.stepdiff tr.added{background:#f0fdf4;}
  table.stepdiff tr.deleted{background:#fef2f2;}
  table.stepdiff tr.category{background:#4A70A9;color:#fff;}
  table.stepdiff tr.subcategory{background:#31694E;color:#fff;}
  ins{background:#bbf7d0;text-decoration:none;border-radius:3px;}
  del{background:#fecaca;text-decoration-color:#f87171;border-radius:3px;}
  p.empty{text-align:center;color:#6b7280;}
</style>
"""


def strip_color_styles(fragment: str) -> str:
    """Drop inline ``color`` declarations and ``<font color>`` attributes."""
    if not fragment or "color" not in fragment.lower():
        return fragment or ""
    soup = BeautifulSoup(fragment, "html.parser")
    for el in soup.find_all(True):
        style = el.get("style")
        if style is not None:
            decls = [d for d in style.split(";") if d.strip()]
            kept = [d for d in decls if d.split(":", 1)[0].strip().lower() != "color"]
            if kept:
                el["style"] = ";".join(kept)
            else:
                del el["style"]
        if el.name == "font" and el.has_attr("color"):
            del el["color"]
    return soup.decode()


def cell_diff_html(original: str, revised: str) -> str:
    """Render the word diff of two fragments with ``<ins>``/``<del>`` marks.

    Markup tokens are emitted bare: added and common tags as they are, deleted
    tags not at all, so the result nests like the revised fragment.
    """
    parts: List[str] = []
    segments = diff_text(original, revised)
    for (kind_is_tag, typ), group in groupby(segments, key=lambda s: (s.kind is TokenKind.TAG, s.type)):
        text = "".join(s.value for s in group)
        if typ is DiffType.COMMON:
            parts.append(text)
        elif kind_is_tag:
            if typ is DiffType.ADDED:
                parts.append(text)
        elif typ is DiffType.ADDED:
            parts.append(f"<ins>{text}</ins>")
        else:
            parts.append(f"<del>{text}</del>")
    return "".join(parts)


def row_class(pair: RowPair) -> str:
    record = pair.original if pair.original is not None else pair.revised
    if record is not None and is_category(record):
        text = normalize_text(record.get(PROCEDURE))
        if any(m in text for m in _SUBCATEGORY_MARKERS):
            return "subcategory"
        return "category"
    return pair.status.value.lower()


def _field(record: Optional[Record], key: str) -> str:
    if record is None:
        return ""
    return strip_color_styles(record.get(key) or "")


def _revised_cell(pair: RowPair, key: str, category: bool) -> str:
    old = _field(pair.original, key)
    new = _field(pair.revised, key)
    if pair.status is ChangeType.MODIFIED and not category and old != new:
        return cell_diff_html(old, new)
    return new


def _row_html(pair: RowPair, policy: MatchPolicy) -> str:
    cls = row_class(pair)
    category = cls in ("category", "subcategory")

    cells: List[str] = []
    if policy is MatchPolicy.BY_IDENTIFIER:
        owner = pair.original if pair.original is not None else pair.revised
        cells.append(f"<td class='step'>{_field(owner, STEP_ORDER)}</td>")
    else:
        cells.append(f"<td class='step'>{_field(pair.original, STEP_ORDER)}</td>")

    cells.append(f"<td>{_field(pair.original, PROCEDURE)}</td>")
    cells.append(f"<td>{_field(pair.original, EXPECTED_OUTCOME)}</td>")
    cells.append(f"<td>{_revised_cell(pair, PROCEDURE, category)}</td>")
    cells.append(f"<td>{_revised_cell(pair, EXPECTED_OUTCOME, category)}</td>")

    if policy is MatchPolicy.BY_CONTENT_SIGNATURE:
        old_step = _field(pair.original, STEP_ORDER)
        new_step = _field(pair.revised, STEP_ORDER)
        changed = pair.status is ChangeType.MODIFIED and old_step != new_step and not category
        step_cls = "step changed" if changed else "step"
        cells.append(f"<td class='{step_cls}'>{new_step}</td>")

    return f"<tr class='{cls}' id='{html.escape(pair.key)}'>" + "".join(cells) + "</tr>\n"


def _header_html(policy: MatchPolicy) -> str:
    if policy is MatchPolicy.BY_IDENTIFIER:
        cols = ["Step Order"]
    else:
        cols = ["Step Order (Original)"]
    cols += [
        "Original Procedure",
        "Original Expected Outcome",
        "Revised Procedure",
        "Revised Expected Outcome",
    ]
    if policy is MatchPolicy.BY_CONTENT_SIGNATURE:
        cols.append("Step Order (Revised)")
    return "<thead><tr>" + "".join(f"<th>{html.escape(c)}</th>" for c in cols) + "</tr></thead>\n"


def render_report(
    result: ComparisonResult,
    summary_text: str = "",
    *,
    only_changes: bool = False,
    title: str = "Test step comparison",
) -> str:
    """Return a complete HTML document for *result*."""
    rows = result.rows
    if only_changes:
        rows = [r for r in rows if r.status is not ChangeType.UNCHANGED]

    counts = result.summary
    parts: List[str] = [
        "<!DOCTYPE html><html><head><meta charset='utf-8'>",
        f"<title>{html.escape(title)}</title>",
        _CSS,
        "</head><body style='margin:2rem;'>\n",
        f"<h1>{html.escape(title)}</h1>\n",
        "<div class='summary'><h2>AI summary</h2>\n",
        markdown.markdown(html.escape(summary_text or ""), extensions=["extra"]),
        "<p class='counts'>",
        f"<span>Added: {counts.added}</span>",
        f"<span>Deleted: {counts.deleted}</span>",
        f"<span>Modified: {counts.modified}</span>",
        "</p>\n",
        "<p class='legend'>",
        "<span style='background:#f0fdf4;'>Added row</span>",
        "<span style='background:#fef2f2;'>Deleted row</span>",
        "<span style='background:#fffbeb;'>Modified row</span>",
        "<ins>Added text</ins> <del>Deleted text</del>",
        "</p>\n",
        f"<p class='meta'>Matched by {html.escape(result.policy.value)} · "
        f"generated {datetime.datetime.now():%Y-%m-%d %H:%M}</p>\n",
        "</div>\n",
    ]

    parts.append("<table class='stepdiff'>\n")
    parts.append(_header_html(result.policy))
    parts.append("<tbody>\n")
    parts.extend(_row_html(pair, result.policy) for pair in rows)
    parts.append("</tbody></table>\n")

    if not rows:
        msg = "No changes found." if only_changes else "No data to display."
        parts.append(f"<p class='empty'>{msg}</p>\n")

    parts.append("</body></html>")
    return "".join(parts)


__all__ = ["strip_color_styles", "cell_diff_html", "row_class", "render_report"]
