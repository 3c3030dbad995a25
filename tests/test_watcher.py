import asyncio
import os
import threading
from unittest.mock import patch
from pastewatch.documents import FileDocument, guess_language_id
from pastewatch.watcher import PollingWatcher


def test_first_poll_is_baseline(tmp_path):
    (tmp_path / "app.py").write_text("print('hi')\n")
    watcher = PollingWatcher(tmp_path)
    assert watcher.poll() == []


def test_poll_reports_new_and_modified_files(tmp_path):
    app = tmp_path / "app.py"
    app.write_text("print('hi')\n")
    watcher = PollingWatcher(tmp_path)
    watcher.poll()

    app.write_text("print('hello world')\n")
    new = tmp_path / "pkg" / "mod.ts"
    new.parent.mkdir()
    new.write_text("export const x = 1;\n")

    assert watcher.poll() == sorted([app.absolute(), new.absolute()])
    assert watcher.poll() == []


def test_poll_skips_ignored_locations(tmp_path):
    watcher = PollingWatcher(tmp_path)
    watcher.poll()

    (tmp_path / "node_modules").mkdir()
    (tmp_path / "node_modules" / "lib.js").write_text("x")
    (tmp_path / ".git").mkdir()
    (tmp_path / ".git" / "config.toml").write_text("x")
    (tmp_path / "image.png").write_bytes(b"\x89PNG")

    assert watcher.poll() == []


def test_mtime_change_is_detected(tmp_path):
    app = tmp_path / "app.py"
    app.write_text("a = 1\n")
    watcher = PollingWatcher(tmp_path)
    watcher.poll()

    st = app.stat()
    os.utime(app, ns=(st.st_atime_ns, st.st_mtime_ns + 5_000_000_000))

    assert watcher.poll() == [app.absolute()]


def test_file_document(tmp_path):
    path = tmp_path / "mod.py"
    path.write_text("a = 1\nb = 2")
    doc = FileDocument(path)

    assert doc.get_path() == str(path.absolute())
    assert doc.get_text() == "a = 1\nb = 2"
    assert doc.get_line_count() == 2
    assert doc.get_language_id() == "python"
    assert guess_language_id(tmp_path / "README.MD") == "markdown"
    assert guess_language_id(tmp_path / "data.bin") == "plaintext"


class RecordingTracker:
    def __init__(self, stop):
        self.stop = stop
        self.documents = []

    async def handle_save(self, document):
        self.documents.append(document)
        self.stop.set()


def test_run_feeds_changes_into_tracker(tmp_path):
    app = tmp_path / "app.py"
    app.write_text("a = 1\n")
    watcher = PollingWatcher(tmp_path, interval=0.01)
    watcher.poll()
    app.write_text("a = 1\nb = 2\n")

    async def scenario():
        stop = asyncio.Event()
        tracker = RecordingTracker(stop)
        await asyncio.wait_for(watcher.run(tracker, stop), timeout=5)
        return tracker.documents

    documents = asyncio.run(scenario())

    assert len(documents) == 1
    assert documents[0].get_path() == str(app.absolute())
    assert documents[0].get_text() == "a = 1\nb = 2\n"


def test_run_reads_files_off_the_event_loop_thread(tmp_path):
    app = tmp_path / "app.py"
    app.write_text("a = 1\n")
    watcher = PollingWatcher(tmp_path, interval=0.01)
    watcher.poll()
    app.write_text("a = 2\nb = 3\n")
    read_threads = []

    def reading_document(path):
        read_threads.append(threading.get_ident())
        return FileDocument(path)

    async def scenario():
        stop = asyncio.Event()
        tracker = RecordingTracker(stop)
        with patch("pastewatch.watcher.FileDocument", side_effect=reading_document):
            await asyncio.wait_for(watcher.run(tracker, stop), timeout=5)
        return tracker.documents

    documents = asyncio.run(scenario())

    assert len(documents) == 1
    assert read_threads and read_threads[0] != threading.get_ident()
