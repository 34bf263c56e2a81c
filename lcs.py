"""
lcs.py – longest-common-subsequence edit scripts.

Shared by the row aligner and the word diff.  The backtrack walks from the
bottom-right cell and, when the two current items are not equal, prefers
moving along the *revised* axis on ties.  Read front to back, a replaced run
therefore comes out as "deleted … then added …".
"""

from __future__ import annotations

from typing import Callable, Iterator, List, Optional, Sequence, Tuple, TypeVar

import numpy as np
from tqdm import tqdm

T = TypeVar("T")

MATCH = "match"
ADDED = "added"
DELETED = "deleted"

# (op, i, j) with 0-based positions; the position of the absent side is None.
Op = Tuple[str, Optional[int], Optional[int]]


def lcs_table(
    a: Sequence[T],
    b: Sequence[T],
    equal: Callable[[T, T], bool],
    *,
    desc: Optional[str] = None,
    disable: bool = True,
) -> np.ndarray:
    """Fill the (len(a)+1) × (len(b)+1) table of LCS lengths."""
    m, n = len(a), len(b)
    dp = np.zeros((m + 1, n + 1), dtype=np.int32)
    for i in tqdm(range(1, m + 1), desc=desc, unit="row", disable=disable):
        dpi = dp[i]
        dpim1 = dp[i - 1]
        ai = a[i - 1]
        for j in range(1, n + 1):
            if equal(ai, b[j - 1]):
                dpi[j] = dpim1[j - 1] + 1
            else:
                dpi[j] = max(dpim1[j], dpi[j - 1])
    return dp


def _backtrack(
    a: Sequence[T],
    b: Sequence[T],
    equal: Callable[[T, T], bool],
    dp: np.ndarray,
) -> Iterator[Op]:
    i, j = len(a), len(b)
    while i > 0 or j > 0:
        if i > 0 and j > 0 and equal(a[i - 1], b[j - 1]):
            yield MATCH, i - 1, j - 1
            i -= 1
            j -= 1
        elif j > 0 and (i == 0 or dp[i, j - 1] >= dp[i - 1, j]):
            yield ADDED, None, j - 1
            j -= 1
        else:
            yield DELETED, i - 1, None
            i -= 1


def lcs_script(
    a: Sequence[T],
    b: Sequence[T],
    equal: Callable[[T, T], bool],
    *,
    desc: Optional[str] = None,
    disable: bool = True,
) -> List[Op]:
    """Return the edit script turning *a* into *b*, in document order."""
    dp = lcs_table(a, b, equal, desc=desc, disable=disable)
    ops = list(_backtrack(a, b, equal, dp))
    ops.reverse()
    return ops


__all__ = ["MATCH", "ADDED", "DELETED", "lcs_table", "lcs_script"]
