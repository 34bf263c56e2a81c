from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Sequence

import pytest

HEADER = ["Step Order", "Procedure", "Expected Outcome"]


def make_record(step: str = "", proc: str = "", outcome: str = "") -> dict[str, str]:
    return {"Step Order": step, "Procedure": proc, "Expected Outcome": outcome}


def export_html(rows: Sequence[Sequence[str]], header: Sequence[str] = HEADER) -> str:
    head = "".join(f"<th>{h}</th>" for h in header)
    body = "".join(
        "<tr>" + "".join(f"<td>{c}</td>" for c in row) + "</tr>" for row in rows
    )
    return (
        "<html><body>"
        "<table><tr><td>Document</td><td>Rev</td></tr><tr><td>TC-7</td><td>B</td></tr></table>"
        f"<table><tr>{head}</tr>{body}</table>"
        "</body></html>"
    )


@pytest.fixture
def rec() -> Callable[..., dict[str, str]]:
    return make_record


@pytest.fixture
def logger() -> logging.Logger:
    return logging.getLogger("step-diff-test")


@pytest.fixture
def write_export(tmp_path: Path) -> Callable[..., Path]:
    def _write(name: str, rows: Sequence[Sequence[str]], header: Sequence[str] = HEADER) -> Path:
        path = tmp_path / name
        path.write_text(export_html(rows, header), encoding="utf-8")
        return path

    return _write


@pytest.fixture(autouse=True)
def _no_openai_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
