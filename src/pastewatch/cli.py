import asyncio
import signal
import sys
from pathlib import Path
from typing import Optional

import typer

from pastewatch.config import settings, validate_settings
from pastewatch.logging import logger, get_session_id, configure_logging

app = typer.Typer(no_args_is_help=True)

@app.callback()
def main():
    """
    Pastewatch: flags large, fast or wholesale edits in a monitored folder.
    """
    configure_logging(settings.LOG_LEVEL)

@app.command(name="doctor")
def doctor():
    """
    Check configuration and storage health.
    """
    logger.info("Running doctor check...")

    print("\n🩺 Pastewatch Doctor\n")

    print(f"Python: {sys.version.split()[0]}")
    print(f"Session ID: {get_session_id()}")

    print("\n[Configuration]")
    print(f"LINE_THRESHOLD:        {settings.LINE_THRESHOLD}")
    print(f"TIME_THRESHOLD_MS:     {settings.TIME_THRESHOLD_MS}")
    print(f"CHAR_THRESHOLD:        {settings.CHAR_THRESHOLD}")
    print(f"PER_FILE_HISTORY_CAP:  {settings.PER_FILE_HISTORY_CAP}")
    print(f"WORKING_SET_CAP:       {settings.WORKING_SET_CAP}")
    print(f"RETENTION_DAYS:        {settings.RETENTION_DAYS}")

    monitored = settings.MONITORED_FOLDER
    folder_status = f"✅ {monitored}" if monitored else "❌ Not set (monitoring disabled)"
    print(f"MONITORED_FOLDER:      {folder_status}")

    for warning in validate_settings(settings):
        print(f"⚠️  {warning}")

    storage_dir = Path(settings.STORAGE_DIR)
    if storage_dir.exists() and storage_dir.is_dir():
        print(f"\n[Snapshot Storage]      ✅ Found: {storage_dir.absolute()}")
    else:
        print(f"\n[Snapshot Storage]      ❌ Missing: {storage_dir.absolute()} (created on first watch)")

    print("\nDoctor check complete.")


def _print_finding(finding, previous, current):
    from pastewatch.classifier import format_finding_details
    print(f"\n⚠️  {format_finding_details(previous, current, finding)}\n")


async def _watch(folder_settings):
    from pastewatch.tracker import Tracker
    from pastewatch.watcher import PollingWatcher

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, stop.set)
        loop.add_signal_handler(signal.SIGTERM, stop.set)
    except NotImplementedError:
        # Windows event loops; KeyboardInterrupt still ends the run
        pass

    tracker = Tracker(
        folder_settings,
        sink=_print_finding,
        on_error=lambda e: print(f"❌ {e}"),
        scan_plugins=True,
    )
    async with tracker:
        watcher = PollingWatcher(
            Path(folder_settings.MONITORED_FOLDER), interval=folder_settings.POLL_INTERVAL_SECONDS
        )
        await watcher.run(tracker, stop)
        stats = tracker.store.stats()
        print(f"\n📸 {stats.total_snapshots} snapshots across {stats.total_tracked_files} files this session.")


@app.command("watch")
def watch(folder: Optional[Path] = typer.Argument(None, help="Folder to monitor (defaults to MONITORED_FOLDER)")):
    """Monitor a folder and report suspicious changes until interrupted."""
    from pastewatch.errors import InitializationError

    monitored = str(folder.absolute()) if folder else settings.MONITORED_FOLDER
    if not monitored:
        print("❌ No folder to monitor. Pass one or set MONITORED_FOLDER.")
        raise typer.Exit(code=1)
    if not Path(monitored).is_dir():
        print(f"❌ Not a directory: {monitored}")
        raise typer.Exit(code=1)

    folder_settings = settings.model_copy(update={"MONITORED_FOLDER": monitored})
    print(f"👀 Monitoring {monitored} (Ctrl-C to stop)")
    try:
        asyncio.run(_watch(folder_settings))
    except InitializationError as e:
        logger.error(f"Failed to initialize: {e}")
        print(f"❌ Failed: {e}")
        raise typer.Exit(code=1)
    except KeyboardInterrupt:
        pass


@app.command("history")
def history(key: str, day: Optional[str] = typer.Option(None, help="Restrict to YYYY-MM-DD")):
    """Show persisted snapshots for a logical key (path relative to the monitored folder)."""
    from pastewatch.storage.records import load_records

    records = [s for s in load_records(settings.STORAGE_DIR, day=day) if s.relative_path == key]
    if not records:
        print("No snapshots found.")
        return

    print(f"Found {len(records)} snapshots for {key}:")
    for i, snap in enumerate(records, 1):
        print(f"{i}. {snap.timestamp.isoformat()} lines={snap.line_count} chars={snap.character_count} hash={snap.hash[:8]}")


@app.command("stats")
def stats():
    """Count persisted snapshot records per day and session."""
    from pastewatch.storage.records import summarize_storage

    rows = summarize_storage(settings.STORAGE_DIR)
    if not rows:
        print("No persisted snapshots.")
        return
    for row in rows:
        print(f"{row['day']}  {row['session_id']}  {row['records']} records")
    print(f"Total: {sum(r['records'] for r in rows)} records")


@app.command("purge")
def purge(days: int = typer.Option(settings.RETENTION_DAYS, help="Delete directories older than this many days")):
    """Delete expired snapshot directories."""
    from pastewatch.storage.store import SnapshotStore

    store = SnapshotStore(settings.STORAGE_DIR)
    result = asyncio.run(store.purge_expired(days))
    print(f"✅ Removed {len(result.removed)} directories.")
    for err in result.errors:
        print(f"❌ {err.path}: {err}")


@app.command("plugins")
def plugins(extensions_dir: Optional[Path] = typer.Option(None, help="Editor extensions directory")):
    """Scan for installed AI coding extensions."""
    from pastewatch.plugins import scan_extensions

    found = scan_extensions(extensions_dir or settings.EXTENSIONS_DIR)
    if not found:
        print("No AI extensions detected.")
        return
    print(f"Detected {len(found)} AI extensions:")
    for ext_id in found:
        print(f"- {ext_id}")

if __name__ == "__main__":
    app()
