"""
Interval arithmetic over half-open intervals [start, end).

The functions are generic over the point type: datetimes paired with a
timedelta buffer, or minute offsets paired with an int buffer.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from clinic_scheduling.core.domain import ValueObject


def overlaps(a_start: Any, a_end: Any, b_start: Any, b_end: Any) -> bool:
    """Return True if [a_start, a_end) and [b_start, b_end) share any point.

    Touching endpoints do not overlap.
    """
    return a_start < b_end and b_start < a_end


def buffered_overlaps(a_start: Any, a_end: Any, b_start: Any, b_end: Any, buffer: Any) -> bool:
    """Overlap test with ``buffer`` appended to the END of both intervals.

    Start sides are left untouched, so a gap shorter than ``buffer`` between
    the end of one interval and the start of the other counts as overlap.
    """
    return overlaps(a_start, a_end + buffer, b_start, b_end + buffer)


@dataclass(frozen=True)
class TimeInterval(ValueObject):
    """Half-open interval between two absolute timestamps."""

    start: datetime
    end: datetime

    def _validate(self) -> None:
        if self.end <= self.start:
            raise ValueError("Interval end must be after its start")

    @classmethod
    def from_duration(cls, start: datetime, minutes: int) -> "TimeInterval":
        return cls(start=start, end=start + timedelta(minutes=minutes))

    @property
    def duration_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)

    def overlaps(self, other: "TimeInterval") -> bool:
        return overlaps(self.start, self.end, other.start, other.end)

    def overlaps_with_buffer(self, other: "TimeInterval", buffer_minutes: int) -> bool:
        return buffered_overlaps(
            self.start,
            self.end,
            other.start,
            other.end,
            timedelta(minutes=buffer_minutes),
        )
