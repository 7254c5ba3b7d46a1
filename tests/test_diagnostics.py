import json
from pathlib import Path

from jsxlocalizer.core.diagnostics import DiagnosticReport
from jsxlocalizer.utils.encoding import decode_bytes, read_text_safely


def test_report_counts_and_write(tmp_path: Path):
    report = DiagnosticReport(project="demo", source_language="en", target_language="he")
    report.set_status("App.jsx", "transformed")
    report.add_extracted("App.jsx", {"key": "hello", "text": "Hello", "line": 3})
    report.mark_skipped("util.js", "no JSX markup")
    report.mark_failed("Broken.jsx", "does not parse", line=2)
    report.add_collision("hello", "Hello", "Hello!")

    out = tmp_path / "reports" / "run.json"
    assert report.write(str(out))

    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["totals"] == {"files": 3, "extracted": 1, "skipped": 1, "failed": 1, "collisions": 1}
    assert data["files"]["App.jsx"]["entries"][0]["status"] == "extracted"
    assert data["files"]["Broken.jsx"]["entries"][0]["line"] == 2


def test_decode_bytes_fallbacks():
    assert decode_bytes("שלום".encode("utf-8")) == "שלום"
    assert decode_bytes(b"\xef\xbb\xbfconst a = 1;") == "const a = 1;"
    # Not UTF-8: falls back to detection instead of raising
    assert "caf" in decode_bytes("café crème brûlée".encode("latin-1"))


def test_read_text_safely_missing_file(tmp_path: Path):
    assert read_text_safely(tmp_path / "missing.jsx") is None
