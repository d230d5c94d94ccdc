"""Lock ordering of the service writes.

Owners are locked before any overlap check, and before the rows they own,
always in ascending id order.
"""

import pytest

from events.stores.memory_store import InMemoryStore


class RecordingStore(InMemoryStore):
    """In-memory store that records the locks it is asked for."""

    def __init__(self, clock) -> None:
        super().__init__(clock)
        self.calls = []

    def lock_owners(self, *owner_ids):
        self.calls.append(("owners", sorted(owner_id.value for owner_id in owner_ids)))
        super().lock_owners(*owner_ids)

    def get_event(self, event_id, *, for_update=False):
        if for_update:
            self.calls.append(("event", event_id.value))
        return super().get_event(event_id, for_update=for_update)

    def find_overlapping_event(self, owner_id, interval, exclude_ids=()):
        self.calls.append(("overlap", owner_id.value))
        return super().find_overlapping_event(owner_id, interval, exclude_ids)


@pytest.fixture
def store(clock):
    return RecordingStore(clock)


@pytest.fixture
def pair(event_service, store, alice, bob, at):
    mine = event_service.create_event(alice.id, "Standup", at(1), at(2))
    theirs = event_service.create_event(bob.id, "Gym", at(3), at(4))
    event_service.enable_swap(str(mine.id), alice.id)
    event_service.enable_swap(str(theirs.id), bob.id)
    store.calls.clear()
    return mine, theirs


def event_locks(calls):
    return [value for kind, value in calls if kind == "event"]


def test_create_locks_owner_before_overlap_check(event_service, store, alice, at):
    event_service.create_event(alice.id, "Standup", at(1), at(2))

    assert store.calls == [("owners", [alice.id.value]), ("overlap", alice.id.value)]


def test_update_locks_owner_first(event_service, store, alice, at):
    event = event_service.create_event(alice.id, "Standup", at(1), at(2))
    store.calls.clear()

    event_service.update_event(str(event.id), alice.id, end_time=at(3))

    assert store.calls[0] == ("owners", [alice.id.value])
    assert ("overlap", alice.id.value) in store.calls


def test_crossed_requests_lock_in_the_same_order(swap_service, store, alice, bob, pair):
    mine, theirs = pair
    both_owners = ("owners", sorted([alice.id.value, bob.id.value]))
    expected = sorted([mine.id.value, theirs.id.value])

    swap = swap_service.request_swap(alice.id, str(mine.id), str(theirs.id))
    forward = list(store.calls)
    swap_service.respond_swap(bob.id, str(swap.id), False)
    store.calls.clear()
    swap_service.request_swap(bob.id, str(theirs.id), str(mine.id))
    backward = list(store.calls)

    assert event_locks(forward)[:2] == expected
    assert event_locks(backward)[:2] == expected
    assert forward[0] == both_owners
    assert backward[0] == both_owners


def test_accept_locks_both_owners_before_events(swap_service, store, alice, bob, pair):
    mine, theirs = pair
    swap = swap_service.request_swap(alice.id, str(mine.id), str(theirs.id))
    store.calls.clear()

    swap_service.respond_swap(bob.id, str(swap.id), True)

    assert store.calls[0] == ("owners", sorted([alice.id.value, bob.id.value]))
    assert event_locks(store.calls)[:2] == sorted([mine.id.value, theirs.id.value])
