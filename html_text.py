"""
html_text.py – plain-text views of HTML cell fragments.

Every comparison in the diff goes through one of the two helpers below:

* ``normalize_text`` – markup stripped, entities decoded, trimmed.
* ``leading_key``    – first two non-empty *lines* of a fragment joined by a
  single space; used as the identity signature of a step when matching by
  content.

Both are total: ``None`` and non-string input are treated as text (``None`` as
empty), so a malformed cell degrades to "" instead of aborting a comparison.
"""

from __future__ import annotations

import re
import warnings
from functools import lru_cache
from typing import Any

from bs4 import BeautifulSoup, MarkupResemblesLocatorWarning

# Cell fragments are often plain words ("Login", "1.2") which bs4 flags as
# "looks like a filename/URL".
warnings.filterwarnings("ignore", category=MarkupResemblesLocatorWarning)

_LINE_BREAK = "||LINE_BREAK||"
_LINE_BREAK_RX = re.compile(r"<br\s*/?>|</p>|</div>", re.IGNORECASE)
_CACHE_SIZE = 8192


def _as_fragment(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _text_content(fragment: str) -> str:
    if not fragment:
        return ""
    if "<" not in fragment and "&" not in fragment:
        return fragment
    return BeautifulSoup(fragment, "html.parser").get_text()


@lru_cache(maxsize=_CACHE_SIZE)
def _normalize_cached(fragment: str) -> str:
    return _text_content(fragment).strip()


@lru_cache(maxsize=_CACHE_SIZE)
def _leading_key_cached(fragment: str) -> str:
    with_separators = _LINE_BREAK_RX.sub(_LINE_BREAK, fragment)
    lines = [ln.strip() for ln in _text_content(with_separators).split(_LINE_BREAK)]
    lines = [ln for ln in lines if ln]
    return " ".join(lines[:2]).strip()


def normalize_text(fragment: Any) -> str:
    """Return the trimmed text content of an HTML fragment.

    Entities are decoded, so ``"x &lt;y&gt; z"`` gives ``"x <y> z"``; feeding
    that result back in strips ``<y>`` as a tag.  Normalizing is a no-op only
    for text without angle brackets.
    """
    return _normalize_cached(_as_fragment(fragment))


def leading_key(fragment: Any) -> str:
    """Return the first two non-empty lines of *fragment*, space-joined.

    ``<br>``, ``</p>`` and ``</div>`` count as line boundaries; everything else
    is stripped as markup.  ``"<p>Open app</p><p>Log in</p><p>Wait</p>"``
    gives ``"Open app Log in"``.
    """
    fragment = _as_fragment(fragment)
    if not fragment:
        return ""
    return _leading_key_cached(fragment)


__all__ = ["normalize_text", "leading_key"]
