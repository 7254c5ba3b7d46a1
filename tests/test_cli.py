import json
import textwrap
from pathlib import Path

from jsxlocalizer.cli_main import main


def _write(path: Path, code: str):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(code).lstrip(), encoding="utf-8")


def _args(tmp_path: Path, *extra):
    return [
        str(tmp_path / "src"),
        "--config", str(tmp_path / "jsxlocalizer.json"),
        "--locales-dir", str(tmp_path / "locales"),
        "--workers", "1",
        *extra,
    ]


def test_cli_run_writes_tables_and_report(tmp_path: Path, capsys):
    _write(tmp_path / "src" / "Nav.jsx", """
        export function Nav() {
          return <nav>Main menu</nav>;
        }
    """)
    report = tmp_path / "report.json"

    code = main(_args(tmp_path, "--target-lang", "de", "--report", str(report)))

    assert code == 0
    assert json.loads((tmp_path / "locales" / "de.json").read_text(encoding="utf-8")) == {"mainMenu": ""}
    data = json.loads(report.read_text(encoding="utf-8"))
    assert data["target_language"] == "de"
    assert data["totals"]["extracted"] == 1
    assert "SUCCESS" in capsys.readouterr().out


def test_cli_strict_fails_on_collision(tmp_path: Path):
    _write(tmp_path / "src" / "A.jsx", """
        function A() {
          return <p>Hello!</p>;
        }
    """)
    _write(tmp_path / "src" / "B.jsx", """
        function B() {
          return <p>Hello</p>;
        }
    """)

    assert main(_args(tmp_path, "--dry-run")) == 0
    assert main(_args(tmp_path, "--dry-run", "--strict")) == 1


def test_cli_rejects_bad_config(tmp_path: Path):
    (tmp_path / "src").mkdir()
    config_file = tmp_path / "jsxlocalizer.json"
    config_file.write_text(json.dumps({"extraction_settings": {"quote_style": "backtick"}}), encoding="utf-8")
    assert main(_args(tmp_path)) == 2


def test_cli_missing_source(tmp_path: Path):
    assert main(_args(tmp_path)) == 1


def test_cli_save_config_persists_flags(tmp_path: Path):
    (tmp_path / "src").mkdir()
    config_file = tmp_path / "jsxlocalizer.json"

    assert main(_args(tmp_path, "--key-policy", "component", "--target-lang", "fr", "--save-config")) == 0

    saved = json.loads(config_file.read_text(encoding="utf-8"))
    assert saved["extraction_settings"]["key_policy"] == "component"
    assert saved["output_settings"]["target_language"] == "fr"
    assert saved["output_settings"]["locales_dir"] == str(tmp_path / "locales")


def test_cli_lists_file_left_unchanged_by_collision(tmp_path: Path, capsys):
    _write(tmp_path / "src" / "A.jsx", """
        function A() {
          return <p>Hello!</p>;
        }
    """)
    _write(tmp_path / "src" / "B.jsx", """
        function B() {
          return <p>Hello</p>;
        }
    """)

    assert main(_args(tmp_path)) == 0
    out = capsys.readouterr().out
    assert f"[CONFLICT] {tmp_path / 'src' / 'B.jsx'}: left unchanged" in out
    assert "<p>Hello</p>" in (tmp_path / "src" / "B.jsx").read_text(encoding="utf-8")
