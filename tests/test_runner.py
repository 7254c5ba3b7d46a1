import json
import textwrap
from pathlib import Path

import pytest

from jsxlocalizer.core.locale_store import LocaleTableStore
from jsxlocalizer.core.runner import discover_source_files, localize_file, run_localization
from jsxlocalizer.core.transformer import TransformStatus


APP = textwrap.dedent("""\
    export default function App() {
      return <h1>Dashboard</h1>;
    }
""")

PROFILE = textwrap.dedent("""\
    export const Profile = ({ name }) => <p>Signed in as {name}</p>;
""")


def _project(root: Path) -> Path:
    src = root / "src"
    (src / "components").mkdir(parents=True)
    (src / "App.jsx").write_text(APP, encoding="utf-8")
    (src / "components" / "Profile.tsx").write_text(PROFILE, encoding="utf-8")
    (src / "utils.js").write_text("export const sum = (a, b) => a + b;\n", encoding="utf-8")
    (src / "notes.md").write_text("# Notes\n", encoding="utf-8")
    vendored = root / "node_modules" / "lib"
    vendored.mkdir(parents=True)
    (vendored / "index.jsx").write_text(APP, encoding="utf-8")
    return root


def test_discover_skips_excluded_dirs(tmp_path: Path):
    root = _project(tmp_path)
    found = discover_source_files(root)
    assert [p.relative_to(root).as_posix() for p in found] == [
        "src/App.jsx",
        "src/components/Profile.tsx",
        "src/utils.js",
    ]


def test_discover_single_file_and_missing_path(tmp_path: Path):
    root = _project(tmp_path)
    app = root / "src" / "App.jsx"
    assert discover_source_files(app) == [app]
    assert discover_source_files(root, extensions=["tsx"]) == [root / "src" / "components" / "Profile.tsx"]
    with pytest.raises(FileNotFoundError):
        discover_source_files(root / "missing")


def test_run_rewrites_files_and_flushes_once(tmp_path: Path, monkeypatch):
    root = _project(tmp_path)
    locales = tmp_path / "locales"
    store = LocaleTableStore(locales_dir=str(locales))

    flushes = []
    original_flush = LocaleTableStore.flush

    def counting_flush(self):
        flushes.append(self)
        return original_flush(self)

    monkeypatch.setattr(LocaleTableStore, "flush", counting_flush)

    summary = run_localization(discover_source_files(root), None, store, workers=1)

    assert len(flushes) == 1
    assert summary.success and summary.tables_saved
    assert (summary.files, summary.transformed, summary.skipped, summary.failed) == (3, 2, 1, 0)
    assert summary.extracted == 2
    assert "{t('dashboard')}" in (root / "src" / "App.jsx").read_text(encoding="utf-8")
    assert json.loads((locales / "en.json").read_text(encoding="utf-8")) == {
        "dashboard": "Dashboard",
        "signedInAsName": "Signed in as {{name}}",
    }
    assert json.loads((locales / "he.json").read_text(encoding="utf-8")) == {
        "dashboard": "",
        "signedInAsName": "",
    }
    report = summary.report.to_dict()
    assert report["totals"]["extracted"] == 2
    assert report["files"][str(root / "src" / "utils.js")]["status"] == "skipped"


def test_dry_run_writes_nothing(tmp_path: Path):
    root = _project(tmp_path)
    locales = tmp_path / "locales"
    store = LocaleTableStore(locales_dir=str(locales))

    summary = run_localization(discover_source_files(root), None, store, dry_run=True)

    assert summary.success
    assert summary.flush is None
    assert (root / "src" / "App.jsx").read_text(encoding="utf-8") == APP
    assert not locales.exists()
    assert dict(store.pending()) == {"dashboard": "Dashboard", "signedInAsName": "Signed in as {{name}}"}


def test_failed_file_is_reported_and_left_alone(tmp_path: Path):
    broken = tmp_path / "Broken.jsx"
    source = "function Broken() {\n  return <div>Unclosed;\n}\n"
    broken.write_text(source, encoding="utf-8")
    (tmp_path / "App.jsx").write_text(APP, encoding="utf-8")
    store = LocaleTableStore(locales_dir=str(tmp_path / "locales"))

    summary = run_localization(discover_source_files(tmp_path), None, store)

    assert not summary.success
    assert summary.failed == 1 and summary.transformed == 1
    assert summary.failures[0][0] == str(broken)
    assert broken.read_text(encoding="utf-8") == source
    assert summary.tables_saved


def test_localize_file_preserves_crlf(tmp_path: Path):
    path = tmp_path / "App.jsx"
    path.write_bytes(APP.replace("\n", "\r\n").encode("utf-8"))

    outcome = localize_file(str(path))

    assert outcome.status is TransformStatus.TRANSFORMED and outcome.written
    assert outcome.pairs == [("dashboard", "Dashboard")]
    raw = path.read_bytes()
    assert b"{t('dashboard')}" in raw
    assert raw.count(b"\r\n") == APP.count("\n") + 2
    assert raw.count(b"\n") == raw.count(b"\r\n")


def test_process_pool_matches_serial_run(tmp_path: Path):
    serial_root = _project(tmp_path / "serial")
    pooled_root = _project(tmp_path / "pooled")
    serial_store = LocaleTableStore(locales_dir=str(tmp_path / "serial_locales"))
    pooled_store = LocaleTableStore(locales_dir=str(tmp_path / "pooled_locales"))

    run_localization(discover_source_files(serial_root), None, serial_store, workers=1)
    summary = run_localization(discover_source_files(pooled_root), None, pooled_store, workers=2)

    assert summary.success
    assert (tmp_path / "pooled_locales" / "en.json").read_text(encoding="utf-8") == \
        (tmp_path / "serial_locales" / "en.json").read_text(encoding="utf-8")
    assert (pooled_root / "src" / "App.jsx").read_text(encoding="utf-8") == \
        (serial_root / "src" / "App.jsx").read_text(encoding="utf-8")


def test_colliding_file_is_left_unchanged(tmp_path: Path):
    first = tmp_path / "A.jsx"
    second = tmp_path / "B.jsx"
    first.write_text("function A() {\n  return <p>Hello!</p>;\n}\n", encoding="utf-8")
    second_source = "function B() {\n  return <div><p>Hello</p><p>Welcome back</p></div>;\n}\n"
    second.write_text(second_source, encoding="utf-8")
    locales = tmp_path / "locales"
    store = LocaleTableStore(locales_dir=str(locales))

    summary = run_localization(discover_source_files(tmp_path), None, store)

    assert summary.success
    assert summary.conflicted == [str(second)]
    assert summary.transformed == 1
    assert "{t('hello')}" in first.read_text(encoding="utf-8")
    assert second.read_text(encoding="utf-8") == second_source
    assert json.loads((locales / "en.json").read_text(encoding="utf-8")) == {"hello": "Hello!"}
    assert [(c.key, c.origin) for c in summary.collisions] == [("hello", "run")]
    report = summary.report.to_dict()
    assert report["files"][str(second)]["status"] == "conflicted"


def test_file_colliding_with_existing_table_is_left_unchanged(tmp_path: Path):
    locales = tmp_path / "locales"
    locales.mkdir()
    (locales / "en.json").write_text(json.dumps({"dashboard": "Dashboard overview"}), encoding="utf-8")
    app = tmp_path / "App.jsx"
    app.write_text(APP, encoding="utf-8")
    store = LocaleTableStore(locales_dir=str(locales))

    summary = run_localization([app], None, store)

    assert summary.conflicted == [str(app)]
    assert app.read_text(encoding="utf-8") == APP
    assert summary.flush is None
    assert [c.origin for c in summary.collisions] == ["disk"]
    assert json.loads((locales / "en.json").read_text(encoding="utf-8")) == {"dashboard": "Dashboard overview"}
