"""Tests for the Flask upload service."""

import io
import os
import time

import pytest

import app as app_module

_HEAD = "<tr><th>Step Order</th><th>Procedure</th><th>Expected Outcome</th></tr>"
V1_HTML = f"<table>{_HEAD}<tr><td>1</td><td>Do it</td><td>Done</td></tr></table>"
V2_HTML = f"<table>{_HEAD}<tr><td>2</td><td>Do it</td><td>Done</td></tr></table>"


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setattr(app_module, "REPORT_DIR", tmp_path)
    app_module.app.config["TESTING"] = True
    return app_module.app.test_client()


def _upload(old: str, new: str, **form):
    data = {
        "old": (io.BytesIO(old.encode("utf-8")), "v1.html"),
        "new": (io.BytesIO(new.encode("utf-8")), "v2.html"),
    }
    data.update(form)
    return data


def test_diff_and_download(client, tmp_path) -> None:
    resp = client.post("/diff", data=_upload(V1_HTML, V2_HTML, mode="content"), content_type="multipart/form-data")
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["mode"] == "content"
    assert body["summary"] == {"added": 0, "deleted": 0, "modified": 1}

    filename = body["download_url"].rsplit("/", 1)[1]
    assert (tmp_path / filename).is_file()

    dl = client.get(f"/download/{filename}")
    assert dl.status_code == 200
    assert b"stepdiff" in dl.data


def test_default_mode_is_step(client) -> None:
    resp = client.post("/diff", data=_upload(V1_HTML, V2_HTML, summary="0"), content_type="multipart/form-data")
    assert resp.status_code == 200
    assert resp.get_json()["summary"] == {"added": 1, "deleted": 1, "modified": 0}


def test_missing_upload(client) -> None:
    resp = client.post(
        "/diff",
        data={"old": (io.BytesIO(b"x"), "v1.html")},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 400
    assert "error" in resp.get_json()


def test_unknown_mode(client) -> None:
    resp = client.post("/diff", data=_upload(V1_HTML, V2_HTML, mode="fuzzy"), content_type="multipart/form-data")
    assert resp.status_code == 400
    assert "fuzzy" in resp.get_json()["error"]


def test_source_errors_name_the_upload(client) -> None:
    resp = client.post("/diff", data=_upload("<p>nothing</p>", V2_HTML), content_type="multipart/form-data")
    assert resp.status_code == 400
    assert resp.get_json()["error"].endswith("in original file: v1.html")


def test_download_unknown_report(client) -> None:
    assert client.get("/download/nope.html").status_code == 404


def test_dot_dot_filename_falls_back_to_default(client, tmp_path) -> None:
    data = _upload(V1_HTML, V2_HTML)
    data["old"] = (io.BytesIO(V1_HTML.encode("utf-8")), "..")
    resp = client.post("/diff", data=data, content_type="multipart/form-data")
    assert resp.status_code == 200
    filename = resp.get_json()["download_url"].rsplit("/", 1)[1]
    assert (tmp_path / filename).is_file()


def test_delete_old_reports_removes_only_stale_files(tmp_path, monkeypatch) -> None:
    monkeypatch.setattr(app_module, "REPORT_DIR", tmp_path)
    stale = tmp_path / "stale.html"
    fresh = tmp_path / "fresh.html"
    stale.write_text("old")
    fresh.write_text("new")
    forty_days_ago = time.time() - 40 * 86400
    os.utime(stale, (forty_days_ago, forty_days_ago))

    app_module.delete_old_reports(30)

    assert not stale.exists()
    assert fresh.exists()
