# app.py
from flask import Flask, request, send_file, jsonify, url_for
import os, tempfile, contextlib, uuid, time
from pathlib import Path

from dotenv import load_dotenv
from werkzeug.utils import secure_filename

from errors import StepDiffError
from matching import MatchPolicy
from step_diff import build_report

load_dotenv()

app = Flask(__name__)

# where finished HTML reports live
REPORT_DIR = Path(os.getenv("STEP_DIFF_REPORT_DIR", "reports")).resolve()
REPORT_DIR.mkdir(parents=True, exist_ok=True)


@contextlib.contextmanager
def tmp_workdir():
    """Create a throw-away working directory."""
    with tempfile.TemporaryDirectory() as d:
        yield Path(d)


@app.errorhandler(StepDiffError)
def handle_step_diff_error(err):
    return jsonify({"error": str(err)}), 400


@app.route("/diff", methods=["POST"])
def diff_route():
    # sanity-check the upload
    if "old" not in request.files or "new" not in request.files:
        return jsonify({"error": "Please upload both 'old' and 'new' files."}), 400

    mode = request.form.get("mode", MatchPolicy.BY_IDENTIFIER.value)
    try:
        policy = MatchPolicy(mode)
    except ValueError:
        return jsonify({"error": f"Unknown comparison mode: {mode!r}"}), 400

    with tmp_workdir() as workdir:
        # keep the upload names so error messages point at the right document
        old_path = workdir / "old" / (secure_filename(request.files["old"].filename or "") or "old.html")
        new_path = workdir / "new" / (secure_filename(request.files["new"].filename or "") or "new.html")
        old_path.parent.mkdir()
        new_path.parent.mkdir()
        request.files["old"].save(old_path)
        request.files["new"].save(new_path)

        report_local = workdir / "step_diff_report.html"
        result = build_report(
            old_path=old_path,
            new_path=new_path,
            out_html=report_local,
            policy=policy,
            api_key=os.getenv("OPENAI_API_KEY"),
            summarize=request.form.get("summary", "1") != "0",
        )

        # move the HTML into our public report folder under a unique name
        final_name = f"diff_report_{uuid.uuid4().hex}.html"
        final_path = REPORT_DIR / final_name
        os.replace(report_local, final_path)

    # hand back the absolute download URL
    return jsonify(
        {
            "download_url": url_for("download_report", filename=final_name, _external=True),
            "mode": policy.value,
            "summary": result.summary.as_dict(),
        }
    )


@app.route("/download/<filename>")
def download_report(filename):
    path = REPORT_DIR / filename
    if not path.is_file():
        return jsonify({"error": "Report not found"}), 404
    return send_file(path, mimetype="text/html", as_attachment=True, download_name=filename)


# housekeeping helper (call from a cron job or similar)
def delete_old_reports(days: int = 30):
    cutoff = time.time() - days * 86400
    for p in REPORT_DIR.iterdir():
        if p.is_file() and p.stat().st_mtime < cutoff:
            p.unlink()


if __name__ == "__main__":
    # Flask’s auto-reloader can interfere with tmp dirs; disable if you like
    app.run(host="0.0.0.0", port=8000, debug=True)
