"""
matching.py – when are two records "the same step"?

Two independent questions are answered per policy:

* ``equal``          – identity: should the aligner pair these rows at all?
* ``content_equal``  – only asked for an ``equal`` pair: UNCHANGED or MODIFIED?

``BY_IDENTIFIER`` tracks a step through its *Step Order* value.
``BY_CONTENT_SIGNATURE`` tracks it through the first two lines of its
procedure, which survives renumbering but cannot match rows whose procedure
is empty.
"""

from __future__ import annotations

from enum import Enum
from typing import Union

from html_text import leading_key, normalize_text
from records import EXPECTED_OUTCOME, PROCEDURE, STEP_ORDER, Record, is_category


class MatchPolicy(str, Enum):
    BY_IDENTIFIER = "step"
    BY_CONTENT_SIGNATURE = "content"


def _raw(record: Record, key: str) -> str:
    value = record.get(key)
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


class RowMatcher:
    """Category handling shared by both policies; subclasses do the rest."""

    policy: MatchPolicy

    def equal(self, a: Record, b: Record) -> bool:
        cat_a, cat_b = is_category(a), is_category(b)
        if cat_a and cat_b:
            return normalize_text(a.get(PROCEDURE)) == normalize_text(b.get(PROCEDURE))
        if cat_a != cat_b:
            return False
        return self._same_step(a, b)

    def content_equal(self, a: Record, b: Record) -> bool:
        if is_category(a):
            return True
        return self._same_content(a, b)

    def _same_step(self, a: Record, b: Record) -> bool:
        raise NotImplementedError

    def _same_content(self, a: Record, b: Record) -> bool:
        raise NotImplementedError


class IdentifierMatcher(RowMatcher):
    policy = MatchPolicy.BY_IDENTIFIER

    def _same_step(self, a: Record, b: Record) -> bool:
        return normalize_text(a.get(STEP_ORDER)) == normalize_text(b.get(STEP_ORDER))

    def _same_content(self, a: Record, b: Record) -> bool:
        return (_raw(a, PROCEDURE), _raw(a, EXPECTED_OUTCOME)) == (
            _raw(b, PROCEDURE),
            _raw(b, EXPECTED_OUTCOME),
        )


class ContentSignatureMatcher(RowMatcher):
    policy = MatchPolicy.BY_CONTENT_SIGNATURE

    def _same_step(self, a: Record, b: Record) -> bool:
        key_a = leading_key(a.get(PROCEDURE))
        return key_a != "" and key_a == leading_key(b.get(PROCEDURE))

    def _same_content(self, a: Record, b: Record) -> bool:
        return all(
            _raw(a, key).strip() == _raw(b, key).strip()
            for key in (PROCEDURE, EXPECTED_OUTCOME, STEP_ORDER)
        )


_MATCHERS = {
    MatchPolicy.BY_IDENTIFIER: IdentifierMatcher(),
    MatchPolicy.BY_CONTENT_SIGNATURE: ContentSignatureMatcher(),
}


def get_matcher(policy: Union[MatchPolicy, str]) -> RowMatcher:
    """Return the matcher for *policy* (enum member or its value, e.g. "step")."""
    return _MATCHERS[MatchPolicy(policy)]


__all__ = [
    "MatchPolicy",
    "RowMatcher",
    "IdentifierMatcher",
    "ContentSignatureMatcher",
    "get_matcher",
]
