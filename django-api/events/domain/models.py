"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Django ORM models are in events/models.py (persistence layer).
"""

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum

from events.domain.errors import InvalidTransitionError
from events.domain.value_objects import EventId, SwapId, TimeInterval, UserId


class EventStatus(str, Enum):
    BUSY = "BUSY"
    SWAPPABLE = "SWAPPABLE"
    SWAP_PENDING = "SWAP_PENDING"
    COMPLETED = "COMPLETED"


class SwapStatus(str, Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


# COMPLETED is absorbing: it has no outgoing edges.
EVENT_TRANSITIONS: dict[EventStatus, frozenset[EventStatus]] = {
    EventStatus.BUSY: frozenset({EventStatus.SWAPPABLE, EventStatus.COMPLETED}),
    EventStatus.SWAPPABLE: frozenset(
        {EventStatus.BUSY, EventStatus.SWAP_PENDING, EventStatus.COMPLETED}
    ),
    EventStatus.SWAP_PENDING: frozenset(
        {EventStatus.BUSY, EventStatus.SWAPPABLE, EventStatus.COMPLETED}
    ),
    EventStatus.COMPLETED: frozenset(),
}

SWAP_TRANSITIONS: dict[SwapStatus, frozenset[SwapStatus]] = {
    SwapStatus.PENDING: frozenset({SwapStatus.ACCEPTED, SwapStatus.REJECTED}),
    SwapStatus.ACCEPTED: frozenset(),
    SwapStatus.REJECTED: frozenset(),
}


@dataclass(frozen=True)
class UserSummary:
    """Public, redacted view of a user: never carries email or credentials."""

    id: UserId
    user_name: str


@dataclass(frozen=True)
class Event:
    """Domain representation of an Event."""

    id: EventId
    title: str
    interval: TimeInterval
    owner: UserSummary
    status: EventStatus
    created_at: datetime
    updated_at: datetime

    @property
    def start_time(self) -> datetime:
        return self.interval.start_time

    @property
    def end_time(self) -> datetime:
        return self.interval.end_time

    def is_owned_by(self, user_id: UserId) -> bool:
        return self.owner.id == user_id

    def transition_to(self, status: EventStatus) -> "Event":
        """Return a copy in `status`, or raise if the edge is not allowed."""
        if status not in EVENT_TRANSITIONS[self.status]:
            raise InvalidTransitionError(
                f"Event cannot move from {self.status.value} to {status.value}"
            )
        return replace(self, status=status)

    def transfer_to(self, owner: UserSummary) -> "Event":
        return replace(self, owner=owner)


@dataclass(frozen=True)
class Swap:
    """Domain representation of a Swap between two users' events.

    `my_slot` is the requester's offered event, `their_slot` the responder's.
    """

    id: SwapId
    requester: UserSummary
    responder: UserSummary
    my_slot: Event
    their_slot: Event
    status: SwapStatus
    created_at: datetime
    updated_at: datetime

    def transition_to(self, status: SwapStatus) -> "Swap":
        if status not in SWAP_TRANSITIONS[self.status]:
            raise InvalidTransitionError(
                f"Swap cannot move from {self.status.value} to {status.value}"
            )
        return replace(self, status=status)


def advance_status(event: Event, now: datetime) -> Event:
    """Apply the time-based transitions to a single event.

    An event that has started drops any swap offer and becomes BUSY; an event
    whose end has passed becomes COMPLETED. Already advanced events come back
    unchanged.
    """
    if event.status is EventStatus.COMPLETED:
        return event
    if event.interval.contains(now) and event.status in (
        EventStatus.SWAPPABLE,
        EventStatus.SWAP_PENDING,
    ):
        return event.transition_to(EventStatus.BUSY)
    if event.interval.is_past(now):
        return event.transition_to(EventStatus.COMPLETED)
    return event
