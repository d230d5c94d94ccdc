"""Store interfaces (repository pattern).

Stores must be swappable and return domain models.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from contextlib import AbstractContextManager

from events.domain import (
    Event,
    EventId,
    EventStatus,
    Swap,
    SwapId,
    SwapStatus,
    TimeInterval,
    UserId,
)


class TransactionalStore(ABC):
    """A store whose writes can be grouped into one all-or-nothing unit."""

    @abstractmethod
    def atomic(self) -> AbstractContextManager[None]:
        """Return a context manager scoping a transaction.

        Every write made inside the block commits together or not at all. An
        exception leaving the block rolls the transaction back and propagates;
        persistence failures surface as StorageError.
        """
        ...


class EventStore(TransactionalStore):
    """Interface for event persistence operations."""

    @abstractmethod
    def list_events(self) -> list[Event]:
        """Return all events ordered by start_time ascending."""
        ...

    @abstractmethod
    def list_events_for_owner(self, owner_id: UserId) -> list[Event]:
        """Return the owner's events ordered by start_time ascending."""
        ...

    @abstractmethod
    def list_swappable_events(self, exclude_owner_id: UserId) -> list[Event]:
        """Return SWAPPABLE events not owned by `exclude_owner_id`."""
        ...

    @abstractmethod
    def get_event(self, event_id: EventId, *, for_update: bool = False) -> Event | None:
        """Return an event by ID, or None if not found.

        With for_update, the row is locked until the surrounding transaction ends.
        """
        ...

    @abstractmethod
    def find_overlapping_event(
        self,
        owner_id: UserId,
        interval: TimeInterval,
        exclude_ids: Iterable[EventId] = (),
    ) -> Event | None:
        """Return the first non-completed event of the owner overlapping `interval`."""
        ...

    @abstractmethod
    def create_event(
        self,
        owner_id: UserId,
        title: str,
        interval: TimeInterval,
        status: EventStatus,
    ) -> Event:
        ...

    @abstractmethod
    def save_event(self, event: Event) -> Event:
        """Persist title, interval, owner and status of an existing event."""
        ...

    @abstractmethod
    def delete_event(self, event_id: EventId) -> None:
        ...

    @abstractmethod
    def lock_owners(self, *owner_ids: UserId) -> None:
        """Lock the given owners' calendars until the surrounding transaction ends.

        Writers that check for overlaps hold this lock, so two transactions
        cannot both pass the check for the same owner. Locks are taken in
        ascending id order.
        """
        ...


class SwapStore(TransactionalStore):
    """Interface for swap persistence operations."""

    @abstractmethod
    def get_swap(self, swap_id: SwapId, *, for_update: bool = False) -> Swap | None:
        ...

    @abstractmethod
    def pending_swap_exists(self, my_slot_id: EventId, their_slot_id: EventId) -> bool:
        """Check if a PENDING swap already links this exact pair of events."""
        ...

    @abstractmethod
    def list_pending_swaps_for_event(self, event_id: EventId) -> list[Swap]:
        """Return PENDING swaps referencing the event on either side."""
        ...

    @abstractmethod
    def create_swap(
        self,
        requester_id: UserId,
        responder_id: UserId,
        my_slot_id: EventId,
        their_slot_id: EventId,
    ) -> Swap:
        """Insert a PENDING swap.

        Raises:
            DuplicateSwapError: If a PENDING swap for the pair already exists.
        """
        ...

    @abstractmethod
    def update_swap_status(self, swap_id: SwapId, status: SwapStatus) -> Swap:
        ...

    @abstractmethod
    def list_swaps_for_responder(self, user_id: UserId) -> list[Swap]:
        """Return swaps addressed to the user, newest first."""
        ...

    @abstractmethod
    def list_swaps_for_requester(self, user_id: UserId) -> list[Swap]:
        """Return swaps sent by the user, newest first."""
        ...
