import asyncio
import hashlib
import json
import re
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import List

from pastewatch.models.snapshot import Snapshot

DISK_TRUNCATION_MARKER = "...[truncated]"
MEMORY_TRUNCATION_MARKER = "...[memory_optimized]"

_UNSAFE_CHARS = re.compile(r'[/\\:*?"<>|]')
_WHITESPACE_RUN = re.compile(r"\s+")
_DOT_RUN = re.compile(r"\.+")


def sanitize_filename(name: str) -> str:
    """Make a logical key safe to embed in a single filename component."""
    s = _UNSAFE_CHARS.sub("_", name)
    s = _WHITESPACE_RUN.sub("_", s)
    return _DOT_RUN.sub("_", s)


def compute_content_hash(content: str) -> str:
    """MD5 of the UTF-8 encoded text. Used for equality checks only."""
    return hashlib.md5(content.encode("utf-8")).hexdigest()


def truncate_content(content: str, limit: int, marker: str, keep: int = None) -> str:
    """Return ``content`` unchanged if it fits ``limit``, else a prefix plus ``marker``."""
    if len(content) <= limit:
        return content
    keep = limit if keep is None else keep
    return content[:keep] + marker


def today_string(now: datetime = None) -> str:
    now = now or datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%d")


def session_dir(storage_dir: Path, session_id: str, day: str = None) -> Path:
    return storage_dir / (day or today_string()) / session_id


def record_filename(snapshot: Snapshot) -> str:
    return f"{sanitize_filename(snapshot.relative_path)}_{snapshot.id}.json"


def serialize_record(snapshot: Snapshot, disk_truncate_threshold: int) -> str:
    """Serialize a snapshot for disk, truncating long content."""
    record = snapshot.model_dump(mode="json")
    record["content"] = truncate_content(
        snapshot.content, disk_truncate_threshold, DISK_TRUNCATION_MARKER
    )
    return json.dumps(record, indent=2, ensure_ascii=False)


def _write_text(path: Path, payload: str):
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(payload)


async def write_record(path: Path, payload: str):
    await asyncio.to_thread(_write_text, path, payload)


async def make_dirs(*paths: Path):
    for path in paths:
        await asyncio.to_thread(path.mkdir, parents=True, exist_ok=True)


async def list_dir(path: Path) -> List[Path]:
    return await asyncio.to_thread(lambda: sorted(path.iterdir()))


async def stat_path(path: Path):
    return await asyncio.to_thread(path.stat)


async def remove_tree(path: Path):
    await asyncio.to_thread(shutil.rmtree, path)
