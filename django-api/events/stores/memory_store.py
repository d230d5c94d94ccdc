"""In-memory implementation of the EventStore and SwapStore.

One instance serves as both stores so that a single atomic() block covers
event and swap writes, the same way the Django stores share a connection.
"""

import uuid
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, replace
from datetime import datetime, timezone

from events.domain import (
    Event,
    EventId,
    EventStatus,
    Swap,
    SwapId,
    SwapStatus,
    TimeInterval,
    UserId,
    UserSummary,
)
from events.domain.errors import DuplicateSwapError
from events.stores.interfaces import EventStore, SwapStore


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class _SwapRecord:
    id: SwapId
    requester_id: UserId
    responder_id: UserId
    my_slot_id: EventId
    their_slot_id: EventId
    status: SwapStatus
    created_at: datetime
    updated_at: datetime


class InMemoryStore(EventStore, SwapStore):
    def __init__(self, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock
        self._users: dict[UserId, UserSummary] = {}
        self._events: dict[EventId, Event] = {}
        self._swaps: dict[SwapId, _SwapRecord] = {}

    @contextmanager
    def atomic(self) -> Iterator[None]:
        snapshot = (self._events, self._swaps)
        self._events, self._swaps = dict(self._events), dict(self._swaps)
        try:
            yield
        except Exception:
            self._events, self._swaps = snapshot
            raise

    def add_user(self, user_name: str) -> UserSummary:
        user = UserSummary(id=UserId(uuid.uuid4()), user_name=user_name)
        self._users[user.id] = user
        return user

    # Events

    def _sorted(self, events: Iterable[Event]) -> list[Event]:
        return sorted(events, key=lambda event: event.start_time)

    def list_events(self) -> list[Event]:
        return self._sorted(self._events.values())

    def list_events_for_owner(self, owner_id: UserId) -> list[Event]:
        return self._sorted(e for e in self._events.values() if e.is_owned_by(owner_id))

    def list_swappable_events(self, exclude_owner_id: UserId) -> list[Event]:
        return self._sorted(
            e
            for e in self._events.values()
            if e.status is EventStatus.SWAPPABLE and not e.is_owned_by(exclude_owner_id)
        )

    def get_event(self, event_id: EventId, *, for_update: bool = False) -> Event | None:
        return self._events.get(event_id)

    def find_overlapping_event(
        self,
        owner_id: UserId,
        interval: TimeInterval,
        exclude_ids: Iterable[EventId] = (),
    ) -> Event | None:
        excluded = set(exclude_ids)
        for event in self.list_events_for_owner(owner_id):
            if event.id in excluded or event.status is EventStatus.COMPLETED:
                continue
            if event.interval.overlaps(interval):
                return event
        return None

    def create_event(
        self,
        owner_id: UserId,
        title: str,
        interval: TimeInterval,
        status: EventStatus,
    ) -> Event:
        now = self._clock()
        event = Event(
            id=EventId(uuid.uuid4()),
            title=title,
            interval=interval,
            owner=self._users[owner_id],
            status=status,
            created_at=now,
            updated_at=now,
        )
        self._events[event.id] = event
        return event

    def save_event(self, event: Event) -> Event:
        saved = replace(event, updated_at=self._clock())
        self._events[event.id] = saved
        return saved

    def delete_event(self, event_id: EventId) -> None:
        self._events.pop(event_id, None)
        self._swaps = {
            swap_id: record
            for swap_id, record in self._swaps.items()
            if event_id not in (record.my_slot_id, record.their_slot_id)
        }

    def lock_owners(self, *owner_ids: UserId) -> None:
        # Single-threaded; there is nothing to serialize.
        pass

    # Swaps

    def _to_swap(self, record: _SwapRecord) -> Swap:
        return Swap(
            id=record.id,
            requester=self._users[record.requester_id],
            responder=self._users[record.responder_id],
            my_slot=self._events[record.my_slot_id],
            their_slot=self._events[record.their_slot_id],
            status=record.status,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )

    def get_swap(self, swap_id: SwapId, *, for_update: bool = False) -> Swap | None:
        record = self._swaps.get(swap_id)
        return self._to_swap(record) if record else None

    def pending_swap_exists(self, my_slot_id: EventId, their_slot_id: EventId) -> bool:
        return any(
            record.status is SwapStatus.PENDING
            and record.my_slot_id == my_slot_id
            and record.their_slot_id == their_slot_id
            for record in self._swaps.values()
        )

    def list_pending_swaps_for_event(self, event_id: EventId) -> list[Swap]:
        return self._list_swaps(
            lambda r: r.status is SwapStatus.PENDING
            and event_id in (r.my_slot_id, r.their_slot_id)
        )

    def create_swap(
        self,
        requester_id: UserId,
        responder_id: UserId,
        my_slot_id: EventId,
        their_slot_id: EventId,
    ) -> Swap:
        if self.pending_swap_exists(my_slot_id, their_slot_id):
            raise DuplicateSwapError()
        now = self._clock()
        record = _SwapRecord(
            id=SwapId(uuid.uuid4()),
            requester_id=requester_id,
            responder_id=responder_id,
            my_slot_id=my_slot_id,
            their_slot_id=their_slot_id,
            status=SwapStatus.PENDING,
            created_at=now,
            updated_at=now,
        )
        self._swaps[record.id] = record
        return self._to_swap(record)

    def update_swap_status(self, swap_id: SwapId, status: SwapStatus) -> Swap:
        record = replace(self._swaps[swap_id], status=status, updated_at=self._clock())
        self._swaps[swap_id] = record
        return self._to_swap(record)

    def _list_swaps(self, predicate: Callable[[_SwapRecord], bool]) -> list[Swap]:
        records = sorted(
            (r for r in self._swaps.values() if predicate(r)),
            key=lambda r: r.created_at,
            reverse=True,
        )
        return [self._to_swap(r) for r in records]

    def list_swaps_for_responder(self, user_id: UserId) -> list[Swap]:
        return self._list_swaps(lambda r: r.responder_id == user_id)

    def list_swaps_for_requester(self, user_id: UserId) -> list[Swap]:
        return self._list_swaps(lambda r: r.requester_id == user_id)
