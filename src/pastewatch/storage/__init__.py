from pastewatch.storage.store import SnapshotStore, Stats, PurgeResult
from pastewatch.storage.records import load_records

__all__ = ["SnapshotStore", "Stats", "PurgeResult", "load_records"]
