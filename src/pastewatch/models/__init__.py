from pastewatch.models.snapshot import Snapshot, SnapshotMetadata
from pastewatch.models.finding import Finding, FindingCategory, Severity

__all__ = [
    "Snapshot", "SnapshotMetadata",
    "Finding", "FindingCategory", "Severity",
]
