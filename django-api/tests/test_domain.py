"""Unit tests for domain primitives.

These test invariants that must hold at construction time.
Run with: pytest tests/test_domain.py -v
"""

import uuid
from datetime import datetime, timedelta, timezone

import pytest

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
    advance_status,
    overlaps,
)
from events.domain.errors import ErrorKind, InvalidTransitionError, ValidationError

BASE = datetime(2030, 1, 1, tzinfo=timezone.utc)


def t(hours: float) -> datetime:
    return BASE + timedelta(hours=hours)


def make_event(start: float, end: float, status: EventStatus = EventStatus.BUSY) -> Event:
    return Event(
        id=EventId(uuid.uuid4()),
        title="Standup",
        interval=TimeInterval(t(start), t(end)),
        owner=UserSummary(id=UserId(uuid.uuid4()), user_name="alice"),
        status=status,
        created_at=BASE,
        updated_at=BASE,
    )


class TestOverlaps:
    """Tests for the half-open interval overlap check."""

    def test_adjacent_intervals_do_not_overlap(self):
        assert overlaps(t(10), t(20), t(20), t(30)) is False
        assert overlaps(t(20), t(30), t(10), t(20)) is False

    def test_partial_overlap(self):
        assert overlaps(t(10), t(20), t(15), t(25)) is True

    def test_containment_overlaps(self):
        assert overlaps(t(10), t(40), t(20), t(30)) is True
        assert overlaps(t(20), t(30), t(10), t(40)) is True

    def test_disjoint_intervals(self):
        assert overlaps(t(0), t(1), t(5), t(6)) is False

    @pytest.mark.parametrize(
        "a, b",
        [
            ((0, 10), (5, 15)),
            ((0, 10), (10, 20)),
            ((0, 10), (2, 3)),
            ((0, 1), (7, 9)),
        ],
    )
    def test_symmetric(self, a, b):
        assert overlaps(t(a[0]), t(a[1]), t(b[0]), t(b[1])) == overlaps(
            t(b[0]), t(b[1]), t(a[0]), t(a[1])
        )

    def test_works_on_plain_numbers(self):
        assert overlaps(10, 20, 20, 30) is False
        assert overlaps(10, 20, 19, 30) is True


class TestTimeInterval:
    """Tests for TimeInterval value object."""

    def test_rejects_empty_interval(self):
        with pytest.raises(ValueError):
            TimeInterval(t(1), t(1))

    def test_rejects_reversed_interval(self):
        with pytest.raises(ValueError):
            TimeInterval(t(2), t(1))

    def test_contains_is_half_open(self):
        interval = TimeInterval(t(1), t(2))
        assert interval.contains(t(1))
        assert interval.contains(t(1.5))
        assert not interval.contains(t(2))

    def test_is_past_only_after_end(self):
        interval = TimeInterval(t(1), t(2))
        assert not interval.is_past(t(2))
        assert interval.is_past(t(2.1))


class TestIdentifiers:
    """Tests for EventId, SwapId and UserId value objects."""

    def test_from_string_valid_uuid(self):
        value = uuid.uuid4()
        assert EventId.from_string(str(value)).value == value
        assert SwapId.from_string(str(value)).value == value

    def test_from_string_invalid_uuid(self):
        with pytest.raises(ValueError):
            EventId.from_string("not-a-uuid")

    def test_equal_values_are_equal_ids(self):
        value = uuid.uuid4()
        assert UserId(value) == UserId.from_string(str(value))


class TestEventStateMachine:
    """Tests for the allowed event status edges."""

    @pytest.mark.parametrize(
        "source, target",
        [
            (EventStatus.BUSY, EventStatus.SWAPPABLE),
            (EventStatus.SWAPPABLE, EventStatus.BUSY),
            (EventStatus.SWAPPABLE, EventStatus.SWAP_PENDING),
            (EventStatus.SWAP_PENDING, EventStatus.SWAPPABLE),
            (EventStatus.SWAP_PENDING, EventStatus.BUSY),
            (EventStatus.BUSY, EventStatus.COMPLETED),
        ],
    )
    def test_allowed_transitions(self, source, target):
        assert make_event(1, 2, source).transition_to(target).status is target

    @pytest.mark.parametrize("target", list(EventStatus))
    def test_completed_is_absorbing(self, target):
        with pytest.raises(InvalidTransitionError):
            make_event(1, 2, EventStatus.COMPLETED).transition_to(target)

    def test_busy_cannot_jump_to_swap_pending(self):
        with pytest.raises(InvalidTransitionError) as exc_info:
            make_event(1, 2).transition_to(EventStatus.SWAP_PENDING)
        assert isinstance(exc_info.value, ValidationError)
        assert exc_info.value.kind is ErrorKind.VALIDATION

    def test_transfer_keeps_status(self):
        new_owner = UserSummary(id=UserId(uuid.uuid4()), user_name="bob")
        event = make_event(1, 2, EventStatus.SWAP_PENDING).transfer_to(new_owner)
        assert event.owner == new_owner
        assert event.status is EventStatus.SWAP_PENDING


class TestSwapStateMachine:
    def test_terminal_swaps_cannot_change(self):
        event = make_event(1, 2)
        swap = Swap(
            id=SwapId(uuid.uuid4()),
            requester=event.owner,
            responder=event.owner,
            my_slot=event,
            their_slot=event,
            status=SwapStatus.PENDING,
            created_at=BASE,
            updated_at=BASE,
        )
        accepted = swap.transition_to(SwapStatus.ACCEPTED)
        with pytest.raises(InvalidTransitionError):
            accepted.transition_to(SwapStatus.REJECTED)


class TestAdvanceStatus:
    """Tests for the time-based status advancement rule."""

    def test_future_event_is_unchanged(self):
        event = make_event(5, 6, EventStatus.SWAPPABLE)
        assert advance_status(event, t(0)) is event

    @pytest.mark.parametrize("status", [EventStatus.SWAPPABLE, EventStatus.SWAP_PENDING])
    def test_started_offer_becomes_busy(self, status):
        event = make_event(1, 3, status)
        assert advance_status(event, t(1)).status is EventStatus.BUSY
        assert advance_status(event, t(2)).status is EventStatus.BUSY

    def test_started_busy_event_stays_busy(self):
        event = make_event(1, 3)
        assert advance_status(event, t(2)) is event

    @pytest.mark.parametrize(
        "status", [EventStatus.BUSY, EventStatus.SWAPPABLE, EventStatus.SWAP_PENDING]
    )
    def test_ended_event_becomes_completed(self, status):
        assert advance_status(make_event(1, 2, status), t(3)).status is EventStatus.COMPLETED

    def test_completed_event_is_unchanged(self):
        event = make_event(1, 2, EventStatus.COMPLETED)
        assert advance_status(event, t(3)) is event

    @pytest.mark.parametrize("now", [0, 1, 1.5, 2, 2.5])
    @pytest.mark.parametrize("status", list(EventStatus))
    def test_idempotent(self, status, now):
        event = make_event(1, 2, status)
        once = advance_status(event, t(now))
        assert advance_status(once, t(now)) == once
