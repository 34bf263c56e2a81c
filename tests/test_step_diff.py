"""End-to-end tests for the driver and the command-line runner."""

import pytest

import run_step_diff
from alignment import ChangeType
from errors import EmptyComparisonError, SourceFormatError
from matching import MatchPolicy
from step_diff import compare_files, diff_documents
from summary import NO_CLIENT_MESSAGE

V1 = [
    ["", "<b>Login</b>", ""],
    ["1", "<p>Open app</p><p>Tap login</p>", "Form shown"],
    ["", "<p>Wait for spinner</p>", "Spinner gone"],
    ["2", "Enter user", "Echoed"],
]
V2 = [
    ["", "<b>Login</b>", ""],
    ["1", "<p>Open app</p><p>Tap login</p>", "Form shown"],
    ["", "<p>Wait for spinner</p>", "Spinner gone"],
    ["3", "Enter user", "Echoed"],
]


def test_compare_files_policies(write_export) -> None:
    old = write_export("v1.html", V1)
    new = write_export("v2.html", V2)

    by_id = compare_files(old, new, MatchPolicy.BY_IDENTIFIER)
    assert [r.status for r in by_id.rows] == [
        ChangeType.UNCHANGED,
        ChangeType.UNCHANGED,
        ChangeType.DELETED,
        ChangeType.ADDED,
    ]
    merged = by_id.rows[1].original
    assert merged["Procedure"] == "<p>Open app</p><p>Tap login</p><p>Wait for spinner</p>"

    by_content = compare_files(old, new, "content")
    assert [r.status for r in by_content.rows][-1] is ChangeType.MODIFIED
    assert by_content.summary.as_dict() == {"added": 0, "deleted": 0, "modified": 1}


def test_diff_documents_writes_report(write_export, tmp_path) -> None:
    out = diff_documents(
        old=write_export("v1.html", V1),
        new=write_export("v2.html", V2),
        out=tmp_path / "report.html",
        mode="content",
    )
    assert out == (tmp_path / "report.html").resolve()
    doc = out.read_text(encoding="utf-8")
    assert "table class='stepdiff'" in doc
    assert "Step Order (Revised)" in doc
    assert NO_CLIENT_MESSAGE in doc


def test_missing_header_row_names_the_file(write_export, tmp_path) -> None:
    old = write_export("v1.html", V1)
    bad = tmp_path / "broken.html"
    bad.write_text("<p>no table</p>", encoding="utf-8")
    with pytest.raises(SourceFormatError, match="in revised file: broken.html"):
        compare_files(old, bad)


def test_header_only_exports_cannot_be_compared(write_export) -> None:
    with pytest.raises(EmptyComparisonError):
        compare_files(write_export("a.html", []), write_export("b.html", []))


def test_cli_writes_report(write_export, tmp_path, capsys) -> None:
    code = run_step_diff.main([
        str(write_export("v1.html", V1)),
        str(write_export("v2.html", V2)),
        "--report-dir", str(tmp_path / "out"),
        "--no-summary",
    ])
    assert code == 0
    assert "Report written:" in capsys.readouterr().out
    assert len(list((tmp_path / "out").glob("diff_report_*.html"))) == 1


def test_cli_reports_errors(write_export, tmp_path, capsys) -> None:
    code = run_step_diff.main([
        str(write_export("a.html", [])),
        str(write_export("b.html", [])),
        "--report-dir", str(tmp_path),
        "--no-summary",
    ])
    assert code == 1
    assert "No comparable test step data" in capsys.readouterr().err
