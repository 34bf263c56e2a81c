"""Tests for the AI summary wrapper (no network access)."""

import logging
from types import SimpleNamespace

import summary
from alignment import ChangeType, align_records
from matching import MatchPolicy


class FakeCompletions:
    def __init__(self, content: str = " Steps were renumbered. ") -> None:
        self.content = content
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeClient:
    def __init__(self) -> None:
        self.completions = FakeCompletions()
        self.chat = SimpleNamespace(completions=self.completions)


def _changed_result(rec, n_changed: int = 1):
    original = [rec("0", "Keep", "Same")] + [rec(str(i), f"Old {i}", "X") for i in range(1, n_changed + 1)]
    revised = [rec("0", "Keep", "Same")] + [rec(str(i), f"New {i}", "X") for i in range(1, n_changed + 1)]
    return align_records(original, revised, MatchPolicy.BY_IDENTIFIER)


def test_sample_is_first_ten_changed_rows(rec) -> None:
    result = _changed_result(rec, 15)
    sample = summary.changed_rows_sample(result)
    assert len(sample) == 10
    assert all(r.status is ChangeType.MODIFIED for r in sample)
    assert sample[0].key == "match-2-2"


def test_no_changes_skips_the_model(rec) -> None:
    result = align_records([rec("1", "A", "X")], [rec("1", "A", "X")], MatchPolicy.BY_IDENTIFIER)
    client = FakeClient()
    text = summary.summarize_changes(client, result, logging.getLogger("t"))
    assert text == summary.NO_CHANGES_MESSAGE
    assert client.completions.calls == []


def test_without_client_a_labeled_fallback_is_used(rec) -> None:
    text = summary.summarize_changes(None, _changed_result(rec), logging.getLogger("t"))
    assert text == summary.NO_CLIENT_MESSAGE


def test_summary_request(rec) -> None:
    client = FakeClient()
    result = _changed_result(rec, 2)
    text = summary.summarize_changes(client, result, logging.getLogger("t"))
    assert text == "Steps were renumbered."

    [call] = client.completions.calls
    assert call["model"] == summary.GPT_MODEL
    prompt = call["messages"][0]["content"]
    assert "Test steps modified: 2" in prompt
    assert "Test steps added: 0" in prompt
    assert "'Step Order' ID" in prompt
    assert "Old 1" in prompt and "New 2" in prompt


def test_prompt_names_content_matching(rec) -> None:
    result = align_records([rec("1", "A", "X")], [rec("2", "A", "X")], MatchPolicy.BY_CONTENT_SIGNATURE)
    prompt = summary.build_prompt(result.summary, summary.changed_rows_sample(result), result.policy)
    assert "first two lines of their 'Procedure' text" in prompt


def test_api_failure_is_replaced_by_fallback(rec, monkeypatch, caplog) -> None:
    def boom(*args, **kwargs):
        raise RuntimeError("rate limited")

    monkeypatch.setattr(summary, "gpt_summary", boom)
    result = _changed_result(rec)
    rows_before = list(result.rows)

    text = summary.summarize_changes(FakeClient(), result, logging.getLogger("t"))

    assert text == summary.ERROR_MESSAGE
    assert result.rows == rows_before
    assert "rate limited" in caplog.text
