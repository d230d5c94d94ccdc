"""Swap service - the two-party negotiation protocol.

A swap moves through PENDING -> ACCEPTED | REJECTED. Every write of a request
or a response happens inside one store transaction, and the events and the
swap are re-read under lock inside that transaction so that concurrent changes
are detected instead of overwritten.
"""

import logging

from events.domain import (
    Event,
    EventId,
    EventStatus,
    Swap,
    SwapId,
    SwapStatus,
    UserId,
)
from events.domain.errors import (
    DuplicateSwapError,
    EventNotFoundError,
    InvalidAcceptError,
    InvalidTransitionError,
    MissingFieldError,
    NotEventOwnerError,
    NotSwapResponderError,
    SelfSwapError,
    SwapAlreadyProcessedError,
    SwapNotFoundError,
)
from events.services.event_service import Clock, EventService, parse_id, utcnow
from events.services.overlap import OverlapChecker
from events.stores.interfaces import EventStore, SwapStore

logger = logging.getLogger(__name__)


class SwapService:
    """Service for swap negotiation between two event owners."""

    def __init__(self, events: EventStore, swaps: SwapStore, clock: Clock = utcnow) -> None:
        self._events = events
        self._swaps = swaps
        self._clock = clock
        self._overlaps = OverlapChecker(events)
        self._lifecycle = EventService(events, swaps, clock)

    def request_swap(
        self,
        requester_id: UserId,
        event_id: str | None,
        target_event_id: str | None,
    ) -> Swap:
        """Offer the requester's event in exchange for another user's event.

        Both events must be SWAPPABLE; on success they become SWAP_PENDING
        and a PENDING swap addressed to the target's owner is returned.

        Raises:
            MissingFieldError, InvalidIdError: If an id is absent or malformed.
            EventNotFoundError: If either event does not exist.
            NotEventOwnerError: If the offered event is not the requester's.
            DuplicateSwapError: If the same pair already has a PENDING swap.
            InvalidTransitionError: If either event is not currently SWAPPABLE.
            OverlapConflictError: If either party would end up double-booked.
        """
        if not event_id or not target_event_id:
            raise MissingFieldError("Both event IDs are required")
        my_slot_id = parse_id(EventId, event_id, "event id")
        their_slot_id = parse_id(EventId, target_event_id, "target event id")

        with self._swaps.atomic():
            mine, theirs = self._lock_events(my_slot_id, their_slot_id)
            if mine is None or theirs is None:
                raise EventNotFoundError("One or both events not found")
            if not mine.is_owned_by(requester_id):
                raise NotEventOwnerError("You can only request swaps for your own events")
            if theirs.is_owned_by(requester_id):
                raise SelfSwapError()
            if self._swaps.pending_swap_exists(mine.id, theirs.id):
                raise DuplicateSwapError()
            if not (
                self._is_live(mine, EventStatus.SWAPPABLE)
                and self._is_live(theirs, EventStatus.SWAPPABLE)
            ):
                raise InvalidTransitionError("Both events must be swappable to request a swap")

            self._ensure_both_free(mine, theirs)

            swap = self._swaps.create_swap(
                requester_id=requester_id,
                responder_id=theirs.owner.id,
                my_slot_id=mine.id,
                their_slot_id=theirs.id,
            )
            self._events.save_event(mine.transition_to(EventStatus.SWAP_PENDING))
            self._events.save_event(theirs.transition_to(EventStatus.SWAP_PENDING))
            swap = self._swaps.get_swap(swap.id)

        logger.info(f"Swap {swap.id} requested: {mine.id} -> {theirs.id}")
        return swap

    def respond_swap(self, responder_id: UserId, swap_id: str, accept: object) -> Swap:
        """Accept or reject a PENDING swap addressed to the responder.

        Accepting exchanges the owners of the two events and makes both BUSY;
        rejecting puts both events back on offer as SWAPPABLE.

        Raises:
            MissingFieldError, InvalidAcceptError: If `accept` is absent or not a bool.
            SwapNotFoundError: If the swap does not exist.
            SwapAlreadyProcessedError: If the swap is no longer PENDING.
            NotSwapResponderError: If the caller is not the swap's responder.
            InvalidTransitionError: If either event drifted out of SWAP_PENDING.
            OverlapConflictError: If accepting would double-book either party.
        """
        parsed_id = parse_id(SwapId, swap_id, "swap id")
        if accept is None:
            raise MissingFieldError("Acceptance status is required")
        if not isinstance(accept, bool):
            raise InvalidAcceptError()

        with self._swaps.atomic():
            swap = self._swaps.get_swap(parsed_id)
            if swap is None:
                raise SwapNotFoundError()
            # The participants of a swap never change, so they can be locked first.
            self._events.lock_owners(swap.requester.id, swap.responder.id)
            swap = self._swaps.get_swap(parsed_id, for_update=True)
            if swap is None:
                raise SwapNotFoundError()
            if swap.status is not SwapStatus.PENDING:
                raise SwapAlreadyProcessedError()
            if swap.responder.id != responder_id:
                raise NotSwapResponderError()

            mine, theirs = self._lock_events(swap.my_slot.id, swap.their_slot.id)
            if mine is None or theirs is None:
                raise EventNotFoundError("One or both events no longer exist")
            if mine.status is not EventStatus.SWAP_PENDING:
                raise InvalidTransitionError("Requester's event is not swappable now")
            if theirs.status is not EventStatus.SWAP_PENDING:
                raise InvalidTransitionError("Your event is not swappable now")

            if accept:
                result = self._accept(swap, mine, theirs)
            else:
                result = self._reject(swap, mine, theirs)

        logger.info(f"Swap {result.id} {result.status.value.lower()} by {responder_id}")
        return result

    def list_swappable_for_others(self, viewer_id: UserId) -> list[Event]:
        """Return events other users currently offer for swapping."""
        events = self._lifecycle.advance_statuses(
            self._events.list_swappable_events(exclude_owner_id=viewer_id)
        )
        return [event for event in events if event.status is EventStatus.SWAPPABLE]

    def list_incoming(self, viewer_id: UserId) -> list[Swap]:
        return self._swaps.list_swaps_for_responder(viewer_id)

    def list_outgoing(self, viewer_id: UserId) -> list[Swap]:
        return self._swaps.list_swaps_for_requester(viewer_id)

    def _accept(self, swap: Swap, mine: Event, theirs: Event) -> Swap:
        if not self._is_live(mine, EventStatus.SWAP_PENDING) or not self._is_live(
            theirs, EventStatus.SWAP_PENDING
        ):
            raise InvalidTransitionError("One or both events have already started")
        self._ensure_both_free(
            mine, theirs, responder_prefix="For you", requester_prefix="For them"
        )

        self._events.save_event(
            mine.transfer_to(swap.responder).transition_to(EventStatus.BUSY)
        )
        self._events.save_event(
            theirs.transfer_to(swap.requester).transition_to(EventStatus.BUSY)
        )
        return self._swaps.update_swap_status(
            swap.id, swap.transition_to(SwapStatus.ACCEPTED).status
        )

    def _reject(self, swap: Swap, mine: Event, theirs: Event) -> Swap:
        self._events.save_event(mine.transition_to(EventStatus.SWAPPABLE))
        self._events.save_event(theirs.transition_to(EventStatus.SWAPPABLE))
        return self._swaps.update_swap_status(
            swap.id, swap.transition_to(SwapStatus.REJECTED).status
        )

    def _ensure_both_free(
        self,
        mine: Event,
        theirs: Event,
        *,
        responder_prefix: str = "For them",
        requester_prefix: str = "",
    ) -> None:
        """Check that neither owner would hold overlapping events after the exchange.

        The two events being exchanged are excluded on both sides.
        """
        exchanged = (mine.id, theirs.id)
        self._overlaps.ensure_free(
            mine.owner.id, theirs.interval, exclude=exchanged, prefix=requester_prefix
        )
        self._overlaps.ensure_free(
            theirs.owner.id, mine.interval, exclude=exchanged, prefix=responder_prefix
        )

    def _lock_events(
        self, my_slot_id: EventId, their_slot_id: EventId
    ) -> tuple[Event | None, Event | None]:
        """Lock both events' owners, then both events, each in ascending id order.

        Every writer takes owner locks before event locks, so two crossed
        requests on the same pair wait on each other instead of deadlocking.
        """
        unlocked = [self._events.get_event(my_slot_id), self._events.get_event(their_slot_id)]
        self._events.lock_owners(*(event.owner.id for event in unlocked if event is not None))
        locked = {
            event_id: self._events.get_event(event_id, for_update=True)
            for event_id in sorted({my_slot_id, their_slot_id}, key=lambda e: e.value)
        }
        return locked[my_slot_id], locked[their_slot_id]

    def _is_live(self, event: Event, status: EventStatus) -> bool:
        """True if the event is in `status` and has not started yet."""
        return event.status is status and not event.interval.has_started(self._clock())
