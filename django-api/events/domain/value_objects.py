"""Domain primitives that enforce validity at creation time."""

from dataclasses import dataclass
from datetime import datetime
from typing import Self
from uuid import UUID


def overlaps(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> bool:
    """Return True if the half-open intervals [start_a, end_a) and [start_b, end_b) intersect.

    Touching intervals ([10, 20) and [20, 30)) do not overlap.
    """
    return start_a < end_b and start_b < end_a


@dataclass(frozen=True)
class EventId:
    """Unique identifier for an Event."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(str(value)))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class SwapId:
    """Unique identifier for a Swap."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(str(value)))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class UserId:
    """Unique identifier for a User (owned by the accounts app)."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(str(value)))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class TimeInterval:
    """Half-open interval [start_time, end_time) with start_time strictly before end_time."""

    start_time: datetime
    end_time: datetime

    def __post_init__(self) -> None:
        if self.start_time >= self.end_time:
            raise ValueError("Start time must be before end time")

    def overlaps(self, other: "TimeInterval") -> bool:
        return overlaps(self.start_time, self.end_time, other.start_time, other.end_time)

    def contains(self, instant: datetime) -> bool:
        return self.start_time <= instant < self.end_time

    def has_started(self, now: datetime) -> bool:
        return self.start_time <= now

    def is_past(self, now: datetime) -> bool:
        return self.end_time < now

    def __str__(self) -> str:
        return f"{self.start_time.isoformat()} - {self.end_time.isoformat()}"
