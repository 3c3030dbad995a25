"""
Error taxonomy for the snapshot engine.

- InitializationError: storage root could not be prepared; fatal for the session.
- InvalidInputError: caller passed malformed arguments; never retried.
- PersistenceError: a snapshot record could not be written. The in-memory
  snapshot stays valid and is available as ``.snapshot``.
- PurgeError: one entry of an expiry sweep failed; logged, sweep continues.
"""


class PastewatchError(Exception):
    """Base class for all pastewatch errors."""


class InitializationError(PastewatchError):
    pass


class InvalidInputError(PastewatchError, ValueError):
    pass


class PersistenceError(PastewatchError):
    def __init__(self, message: str, snapshot=None):
        super().__init__(message)
        self.snapshot = snapshot


class PurgeError(PastewatchError):
    def __init__(self, message: str, path=None):
        super().__init__(message)
        self.path = path
