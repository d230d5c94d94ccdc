"""Django ORM implementation of the EventStore and SwapStore."""

import logging
from collections.abc import Iterable, Iterator
from contextlib import contextmanager

from django.contrib.auth import get_user_model
from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone

from events import models as orm
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
from events.domain.errors import DuplicateSwapError, StorageError
from events.stores.interfaces import EventStore, SwapStore, TransactionalStore

logger = logging.getLogger(__name__)


def _to_user(user) -> UserSummary:
    return UserSummary(id=UserId(user.id), user_name=user.user_name)


def _to_event(row: orm.Event) -> Event:
    return Event(
        id=EventId(row.id),
        title=row.title,
        interval=TimeInterval(start_time=row.start_time, end_time=row.end_time),
        owner=_to_user(row.owner),
        status=EventStatus(row.status),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _to_swap(row: orm.Swap) -> Swap:
    return Swap(
        id=SwapId(row.id),
        requester=_to_user(row.requester),
        responder=_to_user(row.responder),
        my_slot=_to_event(row.my_slot),
        their_slot=_to_event(row.their_slot),
        status=SwapStatus(row.status),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


@contextmanager
def db_errors() -> Iterator[None]:
    """Re-raise database failures as StorageError; usable as a decorator too."""
    try:
        yield
    except DatabaseError as exc:
        logger.exception("Database error, operation aborted")
        raise StorageError() from exc


class DjangoTransactionalStore(TransactionalStore):
    """Shares the default database connection, so nested stores join one transaction."""

    @contextmanager
    def atomic(self) -> Iterator[None]:
        with db_errors(), transaction.atomic():
            yield


class DjangoEventStore(DjangoTransactionalStore, EventStore):
    """PostgreSQL-backed event store using Django ORM."""

    def _events(self):
        return orm.Event.objects.select_related("owner")

    @db_errors()
    def list_events(self) -> list[Event]:
        return [_to_event(row) for row in self._events().order_by("start_time")]

    @db_errors()
    def list_events_for_owner(self, owner_id: UserId) -> list[Event]:
        rows = self._events().filter(owner_id=owner_id.value).order_by("start_time")
        return [_to_event(row) for row in rows]

    @db_errors()
    def list_swappable_events(self, exclude_owner_id: UserId) -> list[Event]:
        rows = (
            self._events()
            .filter(status=orm.Event.Status.SWAPPABLE)
            .exclude(owner_id=exclude_owner_id.value)
            .order_by("start_time")
        )
        return [_to_event(row) for row in rows]

    @db_errors()
    def get_event(self, event_id: EventId, *, for_update: bool = False) -> Event | None:
        query = self._events()
        if for_update:
            query = query.select_for_update(of=("self",))
        row = query.filter(id=event_id.value).first()
        return _to_event(row) if row else None

    @db_errors()
    def find_overlapping_event(
        self,
        owner_id: UserId,
        interval: TimeInterval,
        exclude_ids: Iterable[EventId] = (),
    ) -> Event | None:
        row = (
            self._events()
            .filter(
                owner_id=owner_id.value,
                start_time__lt=interval.end_time,
                end_time__gt=interval.start_time,
            )
            .exclude(status=orm.Event.Status.COMPLETED)
            .exclude(id__in=[event_id.value for event_id in exclude_ids])
            .order_by("start_time")
            .first()
        )
        return _to_event(row) if row else None

    @db_errors()
    def create_event(
        self,
        owner_id: UserId,
        title: str,
        interval: TimeInterval,
        status: EventStatus,
    ) -> Event:
        row = orm.Event.objects.create(
            owner_id=owner_id.value,
            title=title,
            start_time=interval.start_time,
            end_time=interval.end_time,
            status=status.value,
        )
        return self.get_event(EventId(row.id))

    @db_errors()
    def save_event(self, event: Event) -> Event:
        row = orm.Event.objects.get(id=event.id.value)
        row.title = event.title
        row.start_time = event.start_time
        row.end_time = event.end_time
        row.owner_id = event.owner.id.value
        row.status = event.status.value
        row.save()
        return self.get_event(event.id)

    @db_errors()
    def delete_event(self, event_id: EventId) -> None:
        orm.Event.objects.filter(id=event_id.value).delete()

    @db_errors()
    def lock_owners(self, *owner_ids: UserId) -> None:
        ids = sorted({owner_id.value for owner_id in owner_ids})
        list(
            get_user_model()
            .objects.select_for_update()
            .filter(id__in=ids)
            .order_by("id")
            .values_list("id", flat=True)
        )


class DjangoSwapStore(DjangoTransactionalStore, SwapStore):
    """Swap store using Django ORM; all related rows are fetched in one query."""

    def _swaps(self):
        return orm.Swap.objects.select_related(
            "requester",
            "responder",
            "my_slot__owner",
            "their_slot__owner",
        )

    @db_errors()
    def get_swap(self, swap_id: SwapId, *, for_update: bool = False) -> Swap | None:
        query = self._swaps()
        if for_update:
            query = query.select_for_update(of=("self",))
        row = query.filter(id=swap_id.value).first()
        return _to_swap(row) if row else None

    @db_errors()
    def pending_swap_exists(self, my_slot_id: EventId, their_slot_id: EventId) -> bool:
        return orm.Swap.objects.filter(
            my_slot_id=my_slot_id.value,
            their_slot_id=their_slot_id.value,
            status=orm.Swap.Status.PENDING,
        ).exists()

    @db_errors()
    def list_pending_swaps_for_event(self, event_id: EventId) -> list[Swap]:
        rows = self._swaps().filter(
            Q(my_slot_id=event_id.value) | Q(their_slot_id=event_id.value),
            status=orm.Swap.Status.PENDING,
        )
        return [_to_swap(row) for row in rows]

    @db_errors()
    def create_swap(
        self,
        requester_id: UserId,
        responder_id: UserId,
        my_slot_id: EventId,
        their_slot_id: EventId,
    ) -> Swap:
        try:
            with transaction.atomic():
                row = orm.Swap.objects.create(
                    requester_id=requester_id.value,
                    responder_id=responder_id.value,
                    my_slot_id=my_slot_id.value,
                    their_slot_id=their_slot_id.value,
                )
        except IntegrityError as exc:
            logger.warning(f"Pending swap already exists for {my_slot_id} -> {their_slot_id}")
            raise DuplicateSwapError() from exc
        return self.get_swap(SwapId(row.id))

    @db_errors()
    def update_swap_status(self, swap_id: SwapId, status: SwapStatus) -> Swap:
        orm.Swap.objects.filter(id=swap_id.value).update(
            status=status.value, updated_at=timezone.now()
        )
        return self.get_swap(swap_id)

    @db_errors()
    def list_swaps_for_responder(self, user_id: UserId) -> list[Swap]:
        rows = self._swaps().filter(responder_id=user_id.value).order_by("-created_at")
        return [_to_swap(row) for row in rows]

    @db_errors()
    def list_swaps_for_requester(self, user_id: UserId) -> list[Swap]:
        rows = self._swaps().filter(requester_id=user_id.value).order_by("-created_at")
        return [_to_swap(row) for row in rows]
