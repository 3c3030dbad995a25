import pytest
from pastewatch.ui.validation import validate_storage_dir, run_all_checks
from pastewatch.storage.files import sanitize_filename, compute_content_hash, truncate_content
from pastewatch.storage.records import load_records, summarize_storage, group_by_key

def test_sanitization():
    assert sanitize_filename("foo bar.txt") == "foo_bar_txt"
    assert sanitize_filename("src/app.py") == "src_app_py"
    assert sanitize_filename("..\\win:name?.ts") == "__win_name__ts"
    assert sanitize_filename('a*b"c<d>e|f') == "a_b_c_d_e_f"

def test_hashing():
    assert compute_content_hash("hello world") == "5eb63bbbe01eeed093cb22bb8f5acdc3"
    assert compute_content_hash("") == "d41d8cd98f00b204e9800998ecf8427e"

def test_truncation():
    assert truncate_content("short", 10, "...") == "short"
    assert truncate_content("abcdefghij", 10, "...") == "abcdefghij"
    assert truncate_content("abcdefghijk", 10, "...") == "abcdefghij..."
    assert truncate_content("abcdefghijk", 10, "...", keep=3) == "abc..."

def test_validate_storage_dir(tmp_path):
    assert validate_storage_dir(tmp_path / "snapshots") == []
    assert (tmp_path / "snapshots").is_dir()

    blocker = tmp_path / "blocker"
    blocker.write_text("file")
    errors = validate_storage_dir(blocker / "snapshots")
    assert len(errors) == 1
    assert "Cannot write to snapshot storage" in errors[0]

def test_run_all_checks(tmp_path, monkeypatch):
    monkeypatch.setattr("pastewatch.ui.validation.settings.STORAGE_DIR", tmp_path / "store")
    assert run_all_checks() == []

def test_load_records_skips_broken_files(tmp_path):
    session_dir = tmp_path / "2026-01-01" / "session_x"
    session_dir.mkdir(parents=True)
    (session_dir / "broken.json").write_text("{nope")
    (session_dir / "partial.json").write_text('{"id": "only-an-id"}')

    assert load_records(tmp_path) == []
    assert summarize_storage(tmp_path) == [{"day": "2026-01-01", "session_id": "session_x", "records": 2}]

def test_load_records_missing_dir(tmp_path):
    assert load_records(tmp_path / "missing") == []
    assert summarize_storage(tmp_path / "missing") == []

def test_group_by_key(snapshot_factory):
    snaps = [snapshot_factory(key="a.py"), snapshot_factory(key="b.py", offset_ms=1), snapshot_factory(key="a.py", offset_ms=2)]
    grouped = group_by_key(snaps)
    assert list(grouped) == ["a.py", "b.py"]
    assert len(grouped["a.py"]) == 2
