"""Event service - all business logic lives here.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors
"""

import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timezone
from typing import TypeVar

from events.domain import (
    Event,
    EventId,
    EventStatus,
    SwapStatus,
    TimeInterval,
    UserId,
    advance_status,
)
from events.domain.errors import (
    EmptyTitleError,
    EventLockedError,
    EventNotFoundError,
    InvalidIdError,
    InvalidIntervalError,
    InvalidTransitionError,
    MissingFieldError,
    NotEventOwnerError,
    PastIntervalError,
)
from events.services.overlap import OverlapChecker
from events.stores.interfaces import EventStore, SwapStore

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
IdT = TypeVar("IdT")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_id(id_type: type[IdT], value: object, name: str) -> IdT:
    """Parse a UUID string into a typed identifier.

    Raises:
        InvalidIdError: If the value is not a valid UUID.
    """
    try:
        return id_type.from_string(value)
    except (TypeError, ValueError, AttributeError) as exc:
        raise InvalidIdError(name) from exc


class EventService:
    """Service for event lifecycle operations."""

    def __init__(self, store: EventStore, swaps: SwapStore, clock: Clock = utcnow) -> None:
        self._store = store
        self._swaps = swaps
        self._clock = clock
        self._overlaps = OverlapChecker(store)

    def list_own_events(self, owner_id: UserId) -> list[Event]:
        return self.advance_statuses(self._store.list_events_for_owner(owner_id))

    def list_all_events(self) -> list[Event]:
        return self.advance_statuses(self._store.list_events())

    def get_event(self, event_id: str, owner_id: UserId) -> Event:
        """Return one of the owner's events.

        Raises:
            InvalidIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist.
            NotEventOwnerError: If the event belongs to someone else.
        """
        event = self._get_owned_event(parse_id(EventId, event_id, "event id"), owner_id)
        return self.advance_statuses([event])[0]

    def create_event(
        self,
        owner_id: UserId,
        title: str | None,
        start_time: datetime | None,
        end_time: datetime | None,
    ) -> Event:
        """Create a BUSY event in the owner's calendar.

        Raises:
            MissingFieldError, EmptyTitleError, InvalidIntervalError,
            PastIntervalError: If the input is not a valid future interval.
            OverlapConflictError: If the owner already has an overlapping event.
        """
        if title is None or start_time is None or end_time is None:
            raise MissingFieldError("All fields are required")
        title = self._clean_title(title)
        if start_time >= end_time:
            raise InvalidIntervalError()
        if start_time <= self._clock():
            raise PastIntervalError("Cannot create an event in the past")
        interval = TimeInterval(start_time=start_time, end_time=end_time)

        with self._store.atomic():
            self._store.lock_owners(owner_id)
            self._overlaps.ensure_free(owner_id, interval)
            event = self._store.create_event(owner_id, title, interval, EventStatus.BUSY)

        logger.info(f"Created event {event.id} for owner {owner_id}")
        return event

    def update_event(
        self,
        event_id: str,
        owner_id: UserId,
        *,
        title: str | None = None,
        start_time: datetime | None = None,
        end_time: datetime | None = None,
    ) -> Event:
        """Edit the title and/or bounds of an event.

        A single new bound is checked against the other stored bound before
        the two are merged. Completed events and events locked by a pending swap
        cannot be edited.
        """
        parsed_id = parse_id(EventId, event_id, "event id")
        if title is None and start_time is None and end_time is None:
            raise MissingFieldError("At least one field is required")
        if title is not None:
            title = self._clean_title(title)
        if start_time is not None and end_time is not None and start_time >= end_time:
            raise InvalidIntervalError()
        now = self._clock()
        if (start_time is not None and start_time < now) or (
            end_time is not None and end_time < now
        ):
            raise PastIntervalError("Cannot move an event into the past")

        with self._store.atomic():
            self._store.lock_owners(owner_id)
            event = self._current(self._get_owned_event(parsed_id, owner_id, for_update=True))
            if event.status is EventStatus.COMPLETED:
                raise InvalidTransitionError("Event is already completed")
            if event.status is EventStatus.SWAP_PENDING:
                raise EventLockedError()
            if start_time is not None and end_time is None and start_time >= event.end_time:
                raise InvalidIntervalError("Start time must be before the current end time")
            if end_time is not None and start_time is None and end_time <= event.start_time:
                raise InvalidIntervalError("End time must be after the current start time")

            interval = TimeInterval(
                start_time=start_time or event.start_time,
                end_time=end_time or event.end_time,
            )
            self._overlaps.ensure_free(owner_id, interval, exclude=(event.id,))
            updated = self._store.save_event(
                replace(event, title=title or event.title, interval=interval)
            )

        logger.info(f"Updated event {updated.id}")
        return updated

    def delete_event(self, event_id: str, owner_id: UserId) -> Event:
        """Delete an event and return it as it was.

        Raises:
            EventLockedError: If the event is held by a pending swap.
        """
        parsed_id = parse_id(EventId, event_id, "event id")
        with self._store.atomic():
            event = self._get_owned_event(parsed_id, owner_id, for_update=True)
            locked = event.status is EventStatus.SWAP_PENDING
            if locked or self._swaps.list_pending_swaps_for_event(event.id):
                raise EventLockedError()
            self._store.delete_event(event.id)

        logger.info(f"Deleted event {event.id}")
        return event

    def enable_swap(self, event_id: str, owner_id: UserId) -> Event:
        """Offer a BUSY event for swapping."""
        parsed_id = parse_id(EventId, event_id, "event id")
        with self._store.atomic():
            event = self._current(self._get_owned_event(parsed_id, owner_id, for_update=True))
            if event.status is not EventStatus.BUSY:
                raise InvalidTransitionError("Event is not busy")
            return self._store.save_event(event.transition_to(EventStatus.SWAPPABLE))

    def disable_swap(self, event_id: str, owner_id: UserId) -> Event:
        """Withdraw a swap offer; a pending negotiation on the event is rejected."""
        parsed_id = parse_id(EventId, event_id, "event id")
        with self._store.atomic():
            event = self._current(self._get_owned_event(parsed_id, owner_id, for_update=True))
            if event.status is EventStatus.COMPLETED:
                raise InvalidTransitionError("Event is already completed")
            if event.status is EventStatus.BUSY:
                raise InvalidTransitionError("Event is already busy")
            was_pending = event.status is EventStatus.SWAP_PENDING
            event = self._store.save_event(event.transition_to(EventStatus.BUSY))
            if was_pending:
                self._withdraw_pending_swaps(event.id)
            return event

    def advance_statuses(self, events: list[Event]) -> list[Event]:
        """Apply time-based transitions and persist the events that changed.

        Idempotent: events already in their time-appropriate status are left
        untouched. Returns the events in their up-to-date state, in input order.
        """
        now = self._clock()
        changed = [
            (event, advanced)
            for event in events
            if (advanced := advance_status(event, now)) is not event
        ]
        if not changed:
            return events

        latest: dict[EventId, Event] = {}
        deleted: set[EventId] = set()
        with self._store.atomic():
            for stale, _ in changed:
                # The list was read without locks; decide again on the locked row.
                fresh = self._store.get_event(stale.id, for_update=True)
                if fresh is None:
                    deleted.add(stale.id)
                    continue
                advanced = advance_status(fresh, now)
                if advanced is fresh:
                    latest[fresh.id] = fresh
                    continue
                latest[fresh.id] = self._store.save_event(advanced)
                if fresh.status is EventStatus.SWAP_PENDING:
                    for counterpart in self._withdraw_pending_swaps(fresh.id):
                        latest[counterpart.id] = counterpart

        logger.debug(f"Advanced {len(changed)} event statuses")
        return [latest.get(event.id, event) for event in events if event.id not in deleted]

    def _withdraw_pending_swaps(self, event_id: EventId) -> list[Event]:
        """Reject pending swaps on an event that left SWAP_PENDING.

        Counterpart events still locked by those swaps go back to SWAPPABLE.
        Returns the counterpart events that were changed.
        """
        released = []
        for swap in self._swaps.list_pending_swaps_for_event(event_id):
            rejected = swap.transition_to(SwapStatus.REJECTED)
            self._swaps.update_swap_status(swap.id, rejected.status)
            other_id = swap.their_slot.id if swap.my_slot.id == event_id else swap.my_slot.id
            other = self._store.get_event(other_id, for_update=True)
            if other is not None and other.status is EventStatus.SWAP_PENDING:
                released.append(
                    self._store.save_event(other.transition_to(EventStatus.SWAPPABLE))
                )
            logger.info(f"Withdrew swap {swap.id} after event {event_id} left SWAP_PENDING")
        return released

    def _current(self, event: Event) -> Event:
        """Return the event in its time-appropriate status, persisting any change."""
        return self.advance_statuses([event])[0]

    def _get_owned_event(
        self, event_id: EventId, owner_id: UserId, *, for_update: bool = False
    ) -> Event:
        event = self._store.get_event(event_id, for_update=for_update)
        if event is None:
            raise EventNotFoundError()
        if not event.is_owned_by(owner_id):
            raise NotEventOwnerError()
        return event

    @staticmethod
    def _clean_title(title: str) -> str:
        title = title.strip()
        if not title:
            raise EmptyTitleError()
        return title
