from enum import Enum

from pydantic import BaseModel


class FindingCategory(str, Enum):
    RAPID_INCREASE = "rapid-increase"
    CONTENT_REPLACEMENT = "content-replacement"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    # Order by rank instead of the string value
    def __lt__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank >= other.rank


_SEVERITY_RANK = {Severity.LOW: 0, Severity.MEDIUM: 1, Severity.HIGH: 2}


class Finding(BaseModel):
    """A suspicious transition between two snapshots of the same file."""
    category: FindingCategory
    severity: Severity
    logical_key: str
    line_delta: int
    char_delta: int
    time_delta_ms: int
