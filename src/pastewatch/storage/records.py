import json
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import ValidationError

from pastewatch.logging import logger
from pastewatch.models.snapshot import Snapshot


def iter_record_paths(storage_dir: Path, day: Optional[str] = None, session_id: Optional[str] = None) -> List[Path]:
    """Return persisted record files, optionally restricted to one day and/or session."""
    storage_dir = Path(storage_dir)
    if not storage_dir.exists():
        return []
    day_glob = day or "*"
    session_glob = session_id or "*"
    return sorted(storage_dir.glob(f"{day_glob}/{session_glob}/*.json"))


def load_record(path: Path) -> Snapshot:
    with open(path, "r", encoding="utf-8") as f:
        return Snapshot.model_validate(json.load(f))


def load_records(storage_dir: Path, day: Optional[str] = None, session_id: Optional[str] = None) -> List[Snapshot]:
    """
    Read persisted snapshots back from disk, oldest first.

    Unreadable or malformed records are logged and skipped.
    """
    snapshots = []
    for path in iter_record_paths(storage_dir, day, session_id):
        try:
            snapshots.append(load_record(path))
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Skipping unreadable snapshot record {path}: {e}")
    snapshots.sort(key=lambda s: s.timestamp)
    return snapshots


def group_by_key(snapshots: List[Snapshot]) -> Dict[str, List[Snapshot]]:
    grouped: Dict[str, List[Snapshot]] = {}
    for snapshot in snapshots:
        grouped.setdefault(snapshot.relative_path, []).append(snapshot)
    return grouped


def summarize_storage(storage_dir: Path) -> List[dict]:
    """Count persisted records per (day, session) directory."""
    storage_dir = Path(storage_dir)
    rows = []
    if not storage_dir.exists():
        return rows
    for day_dir in sorted(p for p in storage_dir.iterdir() if p.is_dir()):
        for sess_dir in sorted(p for p in day_dir.iterdir() if p.is_dir()):
            rows.append({
                "day": day_dir.name,
                "session_id": sess_dir.name,
                "records": sum(1 for _ in sess_dir.glob("*.json")),
            })
    return rows
