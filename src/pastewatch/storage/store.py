"""
In-memory snapshot index with disk persistence.

Snapshots are grouped by logical key (path relative to the monitored root).
Each key keeps a bounded FIFO history and the number of keys held in memory
is bounded as well; evicting a key never touches its persisted records.
Persisted records live under ``<storage_dir>/<YYYY-MM-DD>/<session_id>/``.
"""
import itertools
import os
import stat as stat_module
import time
from collections import deque
from pathlib import Path
from typing import Deque, Dict, List, Optional

from pydantic import BaseModel, Field

from pastewatch.config import RetentionPolicy
from pastewatch.errors import InitializationError, InvalidInputError, PersistenceError, PurgeError
from pastewatch.logging import get_session_id, logger, random_base36
from pastewatch.models.snapshot import Snapshot, SnapshotMetadata
from pastewatch.storage.files import (
    MEMORY_TRUNCATION_MARKER,
    compute_content_hash,
    list_dir,
    make_dirs,
    record_filename,
    remove_tree,
    serialize_record,
    session_dir,
    stat_path,
    today_string,
    write_record,
)

_sequence = itertools.count(1)


class Stats(BaseModel):
    total_snapshots: int = 0
    total_tracked_files: int = 0


class PurgeResult(BaseModel):
    model_config = {"arbitrary_types_allowed": True}

    removed: List[str] = Field(default_factory=list)
    errors: List[PurgeError] = Field(default_factory=list)


class SnapshotStore:
    def __init__(
        self,
        storage_dir: Path,
        policy: Optional[RetentionPolicy] = None,
        session_id: Optional[str] = None,
    ):
        self.storage_dir = Path(storage_dir)
        self.policy = policy or RetentionPolicy()
        self.session_id = session_id or get_session_id()
        # Insertion ordered; used to break eviction ties
        self._history: Dict[str, Deque[Snapshot]] = {}
        self._initialized = False
        self._closed = False

    @property
    def initialized(self) -> bool:
        return self._initialized and not self._closed

    async def initialize(self):
        """Create the storage root, today's directory and this session's directory."""
        day_dir = self.storage_dir / today_string()
        try:
            await make_dirs(self.storage_dir, day_dir, day_dir / self.session_id)
        except OSError as e:
            logger.error(f"Failed to create snapshot directories under {self.storage_dir}: {e}")
            raise InitializationError(f"Cannot prepare snapshot storage at {self.storage_dir}: {e}") from e

        self._initialized = True
        self._closed = False
        logger.info(f"Snapshot storage ready at {day_dir / self.session_id}")

    def close(self):
        self._closed = True

    def compute_logical_key(self, absolute_path: str, monitored_root: str) -> str:
        """
        Return ``absolute_path`` relative to ``monitored_root``.

        Falls back to the basename when the two paths cannot be related (e.g.
        different drives); that fallback is not guaranteed to be unique.
        """
        if not absolute_path or not monitored_root:
            raise InvalidInputError("Invalid file path or monitored folder provided")
        try:
            return os.path.relpath(absolute_path, monitored_root)
        except ValueError as e:
            logger.warning(f"Could not relativize {absolute_path} against {monitored_root}: {e}")
            return os.path.basename(absolute_path)

    def _new_snapshot_id(self) -> str:
        return f"{self.session_id}_{int(time.time() * 1000)}_{next(_sequence)}{random_base36(6)}"

    def _evict_one(self):
        # Fewest snapshots first; min() keeps the earliest inserted key on ties
        victim = min(self._history, key=lambda k: len(self._history[k]))
        del self._history[victim]
        logger.info(f"Memory cleaned: removed snapshots for {victim}")

    def _remember(self, snapshot: Snapshot):
        key = snapshot.relative_path
        history = self._history.get(key)
        if history is None:
            if len(self._history) >= self.policy.working_set_cap:
                self._evict_one()
            history = deque(maxlen=self.policy.per_file_history_cap)
            self._history[key] = history
        history.append(snapshot)

    async def record_snapshot(
        self,
        content: str,
        absolute_path: str,
        logical_key: str,
        language_id: str = "plaintext",
        line_count: Optional[int] = None,
    ) -> Snapshot:
        """
        Capture ``content`` as the newest snapshot of ``logical_key``.

        The snapshot is visible through get_history/get_previous before the
        disk write is awaited. If the write fails a PersistenceError is raised
        carrying the (still valid) in-memory snapshot.
        """
        if not self.initialized:
            raise InitializationError("Snapshot store is not initialized")
        if not isinstance(content, str):
            raise InvalidInputError("Snapshot content must be a string")
        if not absolute_path or not logical_key:
            raise InvalidInputError("Invalid document provided to record_snapshot")

        if line_count is None:
            line_count = content.count("\n") + 1

        snapshot = Snapshot(
            id=self._new_snapshot_id(),
            session_id=self.session_id,
            file_path=str(absolute_path),
            relative_path=logical_key,
            content=content,
            line_count=line_count,
            character_count=len(content),
            hash=compute_content_hash(content),
            metadata=SnapshotMetadata(
                file_size=len(content.encode("utf-8")),
                language=language_id or "plaintext",
            ),
        )

        payload = serialize_record(snapshot, self.policy.disk_truncate_threshold)

        if len(content) > self.policy.memory_truncate_threshold:
            snapshot = snapshot.model_copy(
                update={"content": content[: self.policy.truncate_prefix_chars] + MEMORY_TRUNCATION_MARKER}
            )
        self._remember(snapshot)

        path = session_dir(self.storage_dir, self.session_id) / record_filename(snapshot)
        try:
            await write_record(path, payload)
        except OSError as e:
            logger.error(f"Failed to save snapshot {snapshot.id} to disk: {e}")
            raise PersistenceError(f"Failed to save snapshot: {e}", snapshot=snapshot) from e

        return snapshot

    def get_history(self, logical_key: str) -> List[Snapshot]:
        return list(self._history.get(logical_key, ()))

    def get_previous(self, logical_key: str) -> Optional[Snapshot]:
        history = self._history.get(logical_key)
        if not history:
            return None
        return history[-1]

    def tracked_keys(self) -> List[str]:
        return list(self._history)

    async def purge_expired(self, max_age_days: Optional[int] = None) -> PurgeResult:
        """
        Delete storage sub-directories last modified more than ``max_age_days`` ago.

        Never raises: a missing root is a no-op and per-entry failures are
        logged and collected in the result.
        """
        days = self.policy.retention_days if max_age_days is None else max_age_days
        cutoff = time.time() - days * 86400
        result = PurgeResult()

        if not self.storage_dir.exists():
            logger.debug(f"Snapshot storage {self.storage_dir} does not exist, nothing to purge")
            return result

        try:
            entries = await list_dir(self.storage_dir)
        except OSError as e:
            logger.error(f"Failed to list {self.storage_dir} for cleanup: {e}")
            result.errors.append(PurgeError(str(e), path=self.storage_dir))
            return result

        for entry in entries:
            try:
                st = await stat_path(entry)
                if stat_module.S_ISDIR(st.st_mode) and st.st_mtime < cutoff:
                    await remove_tree(entry)
                    result.removed.append(entry.name)
                    logger.info(f"Cleaned up old snapshot directory: {entry.name}")
            except OSError as e:
                logger.warning(f"Failed to clean up {entry}: {e}")
                result.errors.append(PurgeError(str(e), path=entry))

        return result

    def stats(self) -> Stats:
        return Stats(
            total_snapshots=sum(len(h) for h in self._history.values()),
            total_tracked_files=len(self._history),
        )
