"""
summary.py – short natural-language summary of a comparison via OpenAI.

Only a sample of the changed rows is sent (first ``SAMPLE_LIMIT`` non-UNCHANGED
pairs) together with the counts.  ``summarize_changes`` never raises: an API
failure is logged and replaced by a fallback text so the computed diff is
still reported.
"""

from __future__ import annotations

import json
import logging
from typing import List, Optional

from openai import OpenAI
from tenacity import retry, stop_after_attempt, wait_random_exponential

from alignment import ChangeType, ComparisonResult, DiffSummary, RowPair
from matching import MatchPolicy

GPT_MODEL = "gpt-4o-mini"
SAMPLE_LIMIT = 10

NO_CHANGES_MESSAGE = "No functional changes were detected between the two files."
NO_CLIENT_MESSAGE = "AI summary unavailable: no OpenAI API key configured."
ERROR_MESSAGE = (
    "Could not generate an AI summary due to an error. "
    "Please review the detailed changes below."
)

_MATCHED_BY = {
    MatchPolicy.BY_IDENTIFIER: "their 'Step Order' ID",
    MatchPolicy.BY_CONTENT_SIGNATURE: "the first two lines of their 'Procedure' text",
}


def changed_rows_sample(result: ComparisonResult, limit: int = SAMPLE_LIMIT) -> List[RowPair]:
    return [r for r in result.rows if r.status is not ChangeType.UNCHANGED][:limit]


def build_prompt(summary: DiffSummary, sample: List[RowPair], policy: MatchPolicy) -> str:
    rows_json = json.dumps([r.to_dict() for r in sample], indent=2, ensure_ascii=False)
    return (
        "You are an expert data analyst assistant. Your task is to provide a concise, "
        "high-level summary of the differences between two versions of an HTML test case "
        "document. Do not repeat the stats verbatim; instead, interpret them to describe "
        "the nature of the changes. The reader is likely a project manager or QA lead, so "
        "keep it easy to understand and focused on test procedures and outcomes.\n\n"
        f"The comparison matched test steps by {_MATCHED_BY[MatchPolicy(policy)]}.\n\n"
        "Statistical summary of the changes:\n"
        f"- Test steps added: {summary.added}\n"
        f"- Test steps deleted: {summary.deleted}\n"
        f"- Test steps modified: {summary.modified}\n\n"
        f"A sample of up to {SAMPLE_LIMIT} changed rows (status, original, revised):\n"
        f"{rows_json}\n\n"
        "Based on this, give a brief, insightful summary (2-4 sentences) of what changed "
        "between the two versions, focusing on the substance of the changes."
    )


@retry(stop=stop_after_attempt(6), wait=wait_random_exponential(min=1, max=20))
def gpt_summary(
    client: OpenAI,
    summary: DiffSummary,
    sample: List[RowPair],
    policy: MatchPolicy,
) -> str:
    r = client.chat.completions.create(
        model=GPT_MODEL,
        messages=[{"role": "user", "content": build_prompt(summary, sample, policy)}],
        max_tokens=400,
        temperature=0.0,
    )
    return (r.choices[0].message.content or "").strip()


def summarize_changes(
    client: Optional[OpenAI],
    result: ComparisonResult,
    logger: logging.Logger,
) -> str:
    sample = changed_rows_sample(result)
    if not sample:
        return NO_CHANGES_MESSAGE
    if client is None:
        logger.warning("No OpenAI client – skipping AI summary")
        return NO_CLIENT_MESSAGE
    try:
        return gpt_summary(client, result.summary, sample, result.policy)
    except Exception as e:
        logger.error("AI summary failed: %s", e)
        return ERROR_MESSAGE


__all__ = [
    "GPT_MODEL",
    "SAMPLE_LIMIT",
    "changed_rows_sample",
    "build_prompt",
    "gpt_summary",
    "summarize_changes",
]
