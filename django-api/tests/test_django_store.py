"""Tests for the Django ORM stores against the test database."""

from contextlib import contextmanager
from datetime import datetime, timezone

import pytest
from django.db import OperationalError, connection

from events.domain import TimeInterval, UserId
from events.domain.errors import StorageError
from events.stores.django_store import DjangoEventStore, DjangoSwapStore

pytestmark = pytest.mark.django_db


@contextmanager
def failing_queries(table: str):
    """Make every query that touches `table` fail like a dropped connection."""

    def wrapper(execute, sql, params, many, context):
        if table in sql:
            raise OperationalError("server closed the connection unexpectedly")
        return execute(sql, params, many, context)

    with connection.execute_wrapper(wrapper):
        yield


class TestReadFailures:
    def test_list_events(self):
        with failing_queries("events_event"), pytest.raises(StorageError):
            DjangoEventStore().list_events()

    def test_find_overlapping_event(self, make_user):
        alice = make_user("alice")
        interval = TimeInterval(
            datetime(2030, 1, 1, 9, tzinfo=timezone.utc),
            datetime(2030, 1, 1, 10, tzinfo=timezone.utc),
        )

        with failing_queries("events_event"), pytest.raises(StorageError):
            DjangoEventStore().find_overlapping_event(UserId(alice.id), interval)

    def test_list_swaps_for_responder(self, make_user):
        bob = make_user("bob")

        with failing_queries("events_swap"), pytest.raises(StorageError):
            DjangoSwapStore().list_swaps_for_responder(UserId(bob.id))


class TestLockOwners:
    def test_locks_inside_a_transaction(self, make_user):
        alice, bob = make_user("alice"), make_user("bob")
        store = DjangoEventStore()

        with store.atomic():
            store.lock_owners(UserId(bob.id), UserId(alice.id), UserId(alice.id))

    def test_no_owners_is_a_no_op(self):
        store = DjangoEventStore()

        with store.atomic():
            store.lock_owners()
