"""
word_diff.py – word-level diff of two HTML cell fragments.

Fragments are split into three kinds of token: whole markup tags, runs of
whitespace and words.  Tags are atomic, so a segment never holds half a tag
and the rendered diff can re-emit unmatched markup as it was.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, NamedTuple

from lcs import ADDED, DELETED, lcs_script

_SPLIT_RX = re.compile(r"(<[^>]+>|\s+)")
_TAG_RX = re.compile(r"<[^>]+>")


class TokenKind(str, Enum):
    TAG = "tag"
    SPACE = "space"
    WORD = "word"


class Token(NamedTuple):
    kind: TokenKind
    text: str


class DiffType(str, Enum):
    COMMON = "COMMON"
    ADDED = "ADDED"
    DELETED = "DELETED"


@dataclass(frozen=True)
class DiffSegment:
    type: DiffType
    value: str
    kind: TokenKind = TokenKind.WORD


def _kind(piece: str) -> TokenKind:
    if _TAG_RX.fullmatch(piece):
        return TokenKind.TAG
    if piece.isspace():
        return TokenKind.SPACE
    return TokenKind.WORD


def tokenize(fragment: str) -> List[Token]:
    """Split *fragment* into tag / whitespace / word tokens, in order."""
    if not fragment:
        return []
    return [Token(_kind(p), p) for p in _SPLIT_RX.split(fragment) if p]


def _same_token(a: Token, b: Token) -> bool:
    return a.text == b.text


def diff_text(original: str, revised: str) -> List[DiffSegment]:
    """Token-level edit script from *original* to *revised*.

    COMMON + DELETED values concatenate back to *original*, COMMON + ADDED to
    *revised*.
    """
    original = original or ""
    revised = revised or ""
    if original == revised:
        return [DiffSegment(DiffType.COMMON, original)]

    old_tokens = tokenize(original)
    new_tokens = tokenize(revised)

    segments: List[DiffSegment] = []
    for op, i, j in lcs_script(old_tokens, new_tokens, _same_token):
        if op == ADDED:
            tok, tag = new_tokens[j], DiffType.ADDED
        elif op == DELETED:
            tok, tag = old_tokens[i], DiffType.DELETED
        else:
            tok, tag = old_tokens[i], DiffType.COMMON
        segments.append(DiffSegment(tag, tok.text, tok.kind))
    return segments


__all__ = ["TokenKind", "Token", "DiffType", "DiffSegment", "tokenize", "diff_text"]
