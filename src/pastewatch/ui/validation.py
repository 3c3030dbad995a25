from typing import List
from pathlib import Path
from pastewatch.config import settings, validate_settings

def validate_storage_dir(storage_dir: Path = None) -> List[str]:
    """Validate that the snapshot storage directory exists and is writable."""
    errors = []
    storage_dir = Path(storage_dir or settings.STORAGE_DIR)

    try:
        storage_dir.mkdir(parents=True, exist_ok=True)
        test_file = storage_dir / ".write_test"
        test_file.touch()
        test_file.unlink()
    except OSError as e:
        errors.append(f"Cannot write to snapshot storage {storage_dir}: {e}")

    return errors

def validate_config() -> List[str]:
    """Out-of-range settings are reported but do not block the dashboard."""
    return [f"Warning: {w}" for w in validate_settings(settings)]

def run_all_checks() -> List[str]:
    """Run all blocking validation checks."""
    errors = []
    errors.extend(validate_storage_dir())
    return errors
