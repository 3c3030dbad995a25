import asyncio
import json
from unittest.mock import patch
from pastewatch.plugins import PluginScanTask, extension_id, scan_extensions


def add_extension(root, dirname, publisher=None, name=None):
    ext = root / dirname
    ext.mkdir(parents=True)
    if publisher and name:
        (ext / "package.json").write_text(json.dumps({"publisher": publisher, "name": name}))
    return ext


def test_extension_id_from_manifest(tmp_path):
    ext = add_extension(tmp_path, "whatever-9.9.9", publisher="GitHub", name="copilot-chat")
    assert extension_id(ext) == "github.copilot-chat"


def test_extension_id_from_directory_name(tmp_path):
    assert extension_id(add_extension(tmp_path, "codeium.codeium-1.2.3")) == "codeium.codeium"
    assert extension_id(add_extension(tmp_path, "continue.continue-0.9.1-linux-x64")) == "continue.continue"
    assert extension_id(add_extension(tmp_path, "ms-python.python")) == "ms-python.python"


def test_broken_manifest_falls_back_to_directory_name(tmp_path):
    ext = add_extension(tmp_path, "tabnine.tabnine-vscode-3.0.0")
    (ext / "package.json").write_text("{not json")
    assert extension_id(ext) == "tabnine.tabnine-vscode"


def test_scan_extensions(tmp_path):
    add_extension(tmp_path, "github.copilot-1.100.0")
    add_extension(tmp_path, "x", publisher="saoudrizwan", name="claude-dev")
    add_extension(tmp_path, "ms-python.python-2024.1.0")
    (tmp_path / "extensions.json").write_text("[]")

    assert scan_extensions(tmp_path) == ["github.copilot", "saoudrizwan.claude-dev"]


def test_scan_missing_directory(tmp_path):
    assert scan_extensions(tmp_path / "missing") == []


def test_scan_task_runs_immediately_and_stops(tmp_path):
    add_extension(tmp_path, "codeium.codeium-1.0.0")
    results = []

    async def scenario():
        task = PluginScanTask(tmp_path, interval_ms=60000, on_result=results.append)
        task.start()
        task.start()  # second start is ignored
        for _ in range(100):
            if results:
                break
            await asyncio.sleep(0.01)
        running = task.running
        task.stop()
        return running, task.running

    running, after_stop = asyncio.run(scenario())

    assert results == [["codeium.codeium"]]
    assert running is True
    assert after_stop is False


def test_manifest_that_is_not_an_object_falls_back(tmp_path):
    ext = add_extension(tmp_path, "github.copilot-1.0.0")
    (ext / "package.json").write_text("[]")

    assert extension_id(ext) == "github.copilot"
    assert scan_extensions(tmp_path) == ["github.copilot"]


def test_manifest_with_invalid_utf8_falls_back(tmp_path):
    ext = add_extension(tmp_path, "codeium.codeium-1.0.0")
    (ext / "package.json").write_bytes(b'{"publisher": "\xff"}')

    assert extension_id(ext) == "codeium.codeium"
    assert scan_extensions(tmp_path) == ["codeium.codeium"]


def test_scan_task_keeps_running_after_a_failed_scan(tmp_path):
    results = []

    async def scenario():
        with patch("pastewatch.plugins.scan_extensions", side_effect=[RuntimeError("boom"), ["kite.kite"]]):
            task = PluginScanTask(tmp_path, interval_ms=10, on_result=results.append)
            task.start()
            for _ in range(100):
                if results:
                    break
                await asyncio.sleep(0.01)
            running = task.running
            task.stop()
        return running

    running = asyncio.run(scenario())

    assert results == [["kite.kite"]]
    assert running is True
