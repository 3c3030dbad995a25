from pathlib import Path
from typing import List

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    LINE_THRESHOLD: int = Field(50, gt=0, description="Line increase that counts as a rapid insertion")
    TIME_THRESHOLD_MS: int = Field(
        30000,
        gt=0,
        description="Window (ms) within which a line increase is considered rapid"
    )
    CHAR_THRESHOLD: int = Field(
        500,
        gt=0,
        description="Absolute character delta that flags wholesale content replacement"
    )
    PER_FILE_HISTORY_CAP: int = Field(50, gt=0, description="Snapshots kept in memory per file")
    WORKING_SET_CAP: int = Field(200, gt=0, description="Files kept in memory at once")
    RETENTION_DAYS: int = Field(7, gt=0, description="Days persisted snapshots are kept on disk")
    MEMORY_TRUNCATE_THRESHOLD: int = Field(
        10000,
        gt=0,
        description="In-memory content longer than this is shortened after hashing"
    )
    DISK_TRUNCATE_THRESHOLD: int = Field(
        1000,
        gt=0,
        description="Persisted content longer than this is truncated"
    )
    TRUNCATE_PREFIX_CHARS: int = Field(1000, gt=0, description="Prefix kept when content is shortened in memory")
    STORAGE_DIR: Path = Field(Path("data") / "snapshots", description="Root of persisted snapshot records")
    MONITORED_FOLDER: str = Field("", description="Directory whose saves are tracked; empty disables monitoring")
    POLL_INTERVAL_SECONDS: float = Field(1.0, gt=0, description="Polling interval of the file watcher")
    PLUGIN_SCAN_INTERVAL_MS: int = Field(300000, gt=0, description="Interval of the AI plugin presence scan")
    EXTENSIONS_DIR: Path = Field(
        Path.home() / ".vscode" / "extensions",
        description="Editor extensions directory scanned for AI plugins"
    )
    LOG_LEVEL: str = Field("INFO", description="Root log level")


class ClassifierThresholds(BaseModel):
    """Thresholds consumed by the change classifier."""
    line_threshold: int = 50
    time_threshold_ms: int = 30000
    char_threshold: int = 500

    @classmethod
    def from_settings(cls, settings: Settings) -> "ClassifierThresholds":
        return cls(
            line_threshold=settings.LINE_THRESHOLD,
            time_threshold_ms=settings.TIME_THRESHOLD_MS,
            char_threshold=settings.CHAR_THRESHOLD,
        )


class RetentionPolicy(BaseModel):
    """Memory and disk bounds applied by the snapshot store."""
    per_file_history_cap: int = Field(50, gt=0)
    working_set_cap: int = Field(200, gt=0)
    retention_days: int = Field(7, gt=0)
    memory_truncate_threshold: int = 10000
    disk_truncate_threshold: int = 1000
    truncate_prefix_chars: int = 1000

    @classmethod
    def from_settings(cls, settings: Settings) -> "RetentionPolicy":
        return cls(
            per_file_history_cap=settings.PER_FILE_HISTORY_CAP,
            working_set_cap=settings.WORKING_SET_CAP,
            retention_days=settings.RETENTION_DAYS,
            memory_truncate_threshold=settings.MEMORY_TRUNCATE_THRESHOLD,
            disk_truncate_threshold=settings.DISK_TRUNCATE_THRESHOLD,
            truncate_prefix_chars=settings.TRUNCATE_PREFIX_CHARS,
        )


def validate_settings(settings: Settings) -> List[str]:
    """Return human readable warnings for values outside their recommended range."""
    warnings = []

    if not 10 <= settings.LINE_THRESHOLD <= 1000:
        warnings.append(
            f"LINE_THRESHOLD={settings.LINE_THRESHOLD} is outside the recommended range 10-1000."
        )

    if not 60000 <= settings.PLUGIN_SCAN_INTERVAL_MS <= 3600000:
        warnings.append(
            f"PLUGIN_SCAN_INTERVAL_MS={settings.PLUGIN_SCAN_INTERVAL_MS} is outside the recommended range 60000-3600000."
        )

    if settings.DISK_TRUNCATE_THRESHOLD > settings.MEMORY_TRUNCATE_THRESHOLD:
        warnings.append(
            "DISK_TRUNCATE_THRESHOLD is larger than MEMORY_TRUNCATE_THRESHOLD; "
            "persisted content may be cut shorter than expected."
        )

    return warnings

# Singleton instance
settings = Settings()
