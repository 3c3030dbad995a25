from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


class SnapshotMetadata(BaseModel):
    file_size: int = Field(description="UTF-8 byte length of the captured content")
    language: str = Field(default="plaintext", description="Language id declared by the document source")
    encoding: str = "utf8"


class Snapshot(BaseModel):
    """
    Point-in-time capture of one file's text.

    line_count, character_count, hash and metadata are computed from the
    original content. Instances are frozen; the store keeps a copy with
    shortened ``content`` for large files, and those statistics keep
    describing the original text.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    session_id: str
    file_path: str = Field(description="Absolute path of the saved file")
    relative_path: str = Field(description="Logical key: path relative to the monitored root")
    content: str
    line_count: int
    character_count: int
    hash: str
    metadata: SnapshotMetadata
