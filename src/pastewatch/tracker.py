"""
Application state for save tracking.

One Tracker is built at startup and owns the snapshot store, the classifier
thresholds and the optional plugin scan task. ``close()`` releases them.
"""
import asyncio
from pathlib import Path
from typing import Callable, Dict, List, Optional

from pydantic import BaseModel, Field

from pastewatch.classifier import classify
from pastewatch.config import ClassifierThresholds, RetentionPolicy, Settings, validate_settings
from pastewatch.documents import Document
from pastewatch.errors import InvalidInputError, PastewatchError, PersistenceError
from pastewatch.logging import logger
from pastewatch.models.finding import Finding
from pastewatch.models.snapshot import Snapshot
from pastewatch.plugins import PluginScanTask
from pastewatch.storage.store import SnapshotStore, Stats

FindingSink = Callable[[Finding, Snapshot, Snapshot], None]
ErrorSink = Callable[[PastewatchError], None]


class TrackerStatus(BaseModel):
    monitoring: bool
    monitored_folder: str
    session_id: str
    stats: Stats
    ai_extensions: List[str] = Field(default_factory=list)


class Tracker:
    def __init__(
        self,
        settings: Optional[Settings] = None,
        store: Optional[SnapshotStore] = None,
        sink: Optional[FindingSink] = None,
        on_error: Optional[ErrorSink] = None,
        scan_plugins: bool = False,
    ):
        self.settings = settings or Settings()
        folder = self.settings.MONITORED_FOLDER
        # Documents report absolute paths
        self.monitored_folder = str(Path(folder).absolute()) if folder else ""
        self.thresholds = ClassifierThresholds.from_settings(self.settings)
        self.store = store or SnapshotStore(
            self.settings.STORAGE_DIR, RetentionPolicy.from_settings(self.settings)
        )
        self.sink = sink
        self.on_error = on_error
        self.plugin_scan = None
        if scan_plugins:
            self.plugin_scan = PluginScanTask(
                self.settings.EXTENSIONS_DIR, self.settings.PLUGIN_SCAN_INTERVAL_MS
            )
        self.monitoring = False
        self._in_flight: Dict[str, asyncio.Future] = {}

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.close()

    async def start(self):
        """Prepare storage and start monitoring. InitializationError propagates."""
        await self.store.initialize()
        await self.store.purge_expired(self.settings.RETENTION_DAYS)

        for warning in validate_settings(self.settings):
            logger.warning(warning)

        if self.plugin_scan:
            self.plugin_scan.start()

        if not self.monitored_folder:
            logger.info("No monitored folder configured, monitoring disabled")
            return

        self.monitoring = True
        logger.info(f"Started monitoring folder: {self.monitored_folder}")

    def close(self):
        self.monitoring = False
        if self.plugin_scan:
            self.plugin_scan.stop()
        self.store.close()

    def is_monitored(self, path: str) -> bool:
        if not self.monitored_folder or not path:
            return False
        return Path(path).is_relative_to(self.monitored_folder)

    @property
    def in_flight(self) -> List[str]:
        return list(self._in_flight)

    async def wait_idle(self):
        """Wait until every save currently being processed has finished."""
        if self._in_flight:
            await asyncio.gather(*self._in_flight.values())

    def _report(self, error: PastewatchError):
        logger.error(f"Error handling document save: {error}")
        if self.on_error:
            self.on_error(error)

    async def handle_save(self, document: Document) -> Optional[Finding]:
        """
        Record a snapshot for a saved document and classify the change.

        Saves for a file whose previous save is still being processed are
        dropped. Errors are reported through ``on_error`` and never raised,
        so one failed save does not stop monitoring.
        """
        if not self.monitoring:
            return None

        path = document.get_path()
        if not self.is_monitored(path):
            return None

        try:
            key = self.store.compute_logical_key(path, self.monitored_folder)
        except InvalidInputError as e:
            self._report(e)
            return None

        if key in self._in_flight:
            logger.info(f"Save for {key} is still being processed, dropping event")
            return None

        done = asyncio.get_running_loop().create_future()
        self._in_flight[key] = done
        try:
            return await self._process(document, path, key)
        except PastewatchError as e:
            self._report(e)
            return None
        finally:
            del self._in_flight[key]
            done.set_result(None)

    async def _process(self, document: Document, path: str, key: str) -> Optional[Finding]:
        logger.debug(f"Document saved: {path}")
        previous = self.store.get_previous(key)

        try:
            current = await self.store.record_snapshot(
                document.get_text(),
                path,
                key,
                document.get_language_id(),
                document.get_line_count(),
            )
        except PersistenceError as e:
            # The in-memory snapshot is still usable for classification
            self._report(e)
            current = e.snapshot

        if previous is None:
            logger.info(f"First snapshot for file: {key}")
            return None

        finding = classify(previous, current, self.thresholds)
        if finding is None:
            return None

        logger.warning(
            f"Suspicious activity detected: {finding.category.value} ({finding.severity.value}) "
            f"in {key}: {finding.line_delta:+d} lines, {finding.char_delta} chars in {finding.time_delta_ms}ms"
        )
        if self.sink:
            self.sink(finding, previous, current)
        return finding

    def status(self) -> TrackerStatus:
        return TrackerStatus(
            monitoring=self.monitoring,
            monitored_folder=self.monitored_folder,
            session_id=self.store.session_id,
            stats=self.store.stats(),
            ai_extensions=self.plugin_scan.detected if self.plugin_scan else [],
        )
