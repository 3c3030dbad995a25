import logging
import random
import string
import sys
import time
from typing import Optional

# One session id for the whole process, created on first use
_session_id: Optional[str] = None

_BASE36 = string.digits + string.ascii_lowercase


def random_base36(length: int) -> str:
    return "".join(random.choice(_BASE36) for _ in range(length))


def new_session_id() -> str:
    """Build a session id of the form session_<epoch-ms>_<random>."""
    return f"session_{int(time.time() * 1000)}_{random_base36(9)}"


def get_session_id() -> str:
    """Return the process session_id, generating it on first call."""
    global _session_id
    if _session_id is None:
        _session_id = new_session_id()
    return _session_id


def set_session_id(session_id: str):
    global _session_id
    _session_id = session_id


class SessionIDFilter(logging.Filter):
    """Injects session_id into log records."""
    def filter(self, record):
        record.session_id = get_session_id()
        return True


def configure_logging(level: str = "INFO"):
    """Configures the root logger with a standard format including session_id."""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers to avoid duplication
    if logger.handlers:
        logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | [%(session_id)s] | %(name)s:%(funcName)s:%(lineno)d - %(message)s"
    )
    handler.setFormatter(formatter)

    handler.addFilter(SessionIDFilter())

    logger.addHandler(handler)

    # Streamlit's file watcher is chatty at INFO
    logging.getLogger("watchdog").setLevel(logging.WARNING)

# Initialize logging on import with default settings
configure_logging()
logger = logging.getLogger("pastewatch")
