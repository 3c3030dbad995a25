import pytest
from datetime import datetime, timedelta, timezone
from pastewatch.models.snapshot import Snapshot, SnapshotMetadata

BASE_TIME = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def make_snapshot(
    line_count=100,
    character_count=1000,
    hash="a1",
    offset_ms=0,
    key="src/app.py",
    snapshot_id=None,
):
    return Snapshot(
        id=snapshot_id or f"snap_{offset_ms}_{hash}",
        timestamp=BASE_TIME + timedelta(milliseconds=offset_ms),
        session_id="session_test",
        file_path=f"/project/{key}",
        relative_path=key,
        content="x" * character_count,
        line_count=line_count,
        character_count=character_count,
        hash=hash,
        metadata=SnapshotMetadata(file_size=character_count, language="python"),
    )


@pytest.fixture
def snapshot_factory():
    return make_snapshot
