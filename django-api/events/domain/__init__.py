from events.domain.models import (
    Event,
    EventStatus,
    Swap,
    SwapStatus,
    UserSummary,
    advance_status,
)
from events.domain.value_objects import EventId, SwapId, TimeInterval, UserId, overlaps

__all__ = [
    "Event",
    "EventStatus",
    "Swap",
    "SwapStatus",
    "UserSummary",
    "advance_status",
    "EventId",
    "SwapId",
    "UserId",
    "TimeInterval",
    "overlaps",
]
