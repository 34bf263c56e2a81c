"""
alignment.py – pair the records of two document versions.

``align_records`` runs an LCS over the two record sequences with the policy's
``equal`` as oracle and classifies every resulting row as ADDED, DELETED,
MODIFIED or UNCHANGED.  Matched category rows are always UNCHANGED.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence, Union

from errors import EmptyComparisonError
from lcs import ADDED, DELETED, lcs_script
from matching import MatchPolicy, get_matcher
from records import Record

_log = logging.getLogger("step-diff")


class ChangeType(str, Enum):
    ADDED = "ADDED"
    DELETED = "DELETED"
    MODIFIED = "MODIFIED"
    UNCHANGED = "UNCHANGED"


@dataclass
class RowPair:
    status: ChangeType
    original: Optional[Record]
    revised: Optional[Record]
    key: str

    def to_dict(self) -> Dict[str, object]:
        return {"status": self.status.value, "original": self.original, "revised": self.revised}


@dataclass
class DiffSummary:
    added: int = 0
    deleted: int = 0
    modified: int = 0

    def as_dict(self) -> Dict[str, int]:
        return {"added": self.added, "deleted": self.deleted, "modified": self.modified}


@dataclass
class ComparisonResult:
    headers: List[str]
    rows: List[RowPair]
    summary: DiffSummary = field(default_factory=DiffSummary)
    policy: MatchPolicy = MatchPolicy.BY_IDENTIFIER

    @property
    def has_changes(self) -> bool:
        return any(r.status is not ChangeType.UNCHANGED for r in self.rows)


def merged_headers(original: Sequence[Record], revised: Sequence[Record]) -> List[str]:
    keys: Dict[str, None] = {}
    for seq in (original, revised):
        if seq:
            keys.update(dict.fromkeys(seq[0]))
    return list(keys)


def align_records(
    original: Sequence[Record],
    revised: Sequence[Record],
    policy: Union[MatchPolicy, str] = MatchPolicy.BY_IDENTIFIER,
    logger: Optional[logging.Logger] = None,
) -> ComparisonResult:
    logger = logger or _log
    if not original and not revised:
        raise EmptyComparisonError()

    matcher = get_matcher(policy)
    ops = lcs_script(
        original,
        revised,
        matcher.equal,
        desc="Aligning",
        disable=logger.getEffectiveLevel() > logging.INFO,
    )

    rows: List[RowPair] = []
    summary = DiffSummary()
    for op, i, j in ops:
        if op == ADDED:
            rows.append(RowPair(ChangeType.ADDED, None, revised[j], f"revised-{j + 1}"))
            summary.added += 1
        elif op == DELETED:
            rows.append(RowPair(ChangeType.DELETED, original[i], None, f"original-{i + 1}"))
            summary.deleted += 1
        else:
            a, b = original[i], revised[j]
            if matcher.content_equal(a, b):
                status = ChangeType.UNCHANGED
            else:
                status = ChangeType.MODIFIED
                summary.modified += 1
            rows.append(RowPair(status, a, b, f"match-{i + 1}-{j + 1}"))

    logger.info(
        "Aligned %d/%d records (%s): %d added, %d deleted, %d modified",
        len(original), len(revised), matcher.policy.value,
        summary.added, summary.deleted, summary.modified,
    )
    return ComparisonResult(merged_headers(original, revised), rows, summary, matcher.policy)


__all__ = [
    "ChangeType",
    "RowPair",
    "DiffSummary",
    "ComparisonResult",
    "merged_headers",
    "align_records",
]
