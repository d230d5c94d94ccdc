"""HTTP tests for the swap negotiation endpoints."""

import uuid
from datetime import timedelta

import pytest
from django.utils import timezone

pytestmark = pytest.mark.django_db


def iso(hours: float) -> str:
    return (timezone.now() + timedelta(hours=hours)).isoformat()


@pytest.fixture
def alice(make_user):
    return make_user("alice")


@pytest.fixture
def bob(make_user):
    return make_user("bob")


@pytest.fixture
def alice_api(client_for, alice):
    return client_for(alice)


@pytest.fixture
def bob_api(client_for, bob):
    return client_for(bob)


def offer(api, title, start, end):
    created = api.post(
        "/api/events", {"title": title, "start_time": iso(start), "end_time": iso(end)}
    )
    assert created.status_code == 201, created.json()
    enabled = api.post(f"/api/events/{created.json()['id']}/enable-swap")
    assert enabled.status_code == 200, enabled.json()
    return enabled.json()


@pytest.fixture
def pair(alice_api, bob_api):
    return offer(alice_api, "Standup", 1, 2), offer(bob_api, "Gym", 3, 4)


@pytest.fixture
def pending(alice_api, pair):
    mine, theirs = pair
    response = alice_api.post(
        "/api/swaps", {"event_id": mine["id"], "target_event_id": theirs["id"]}
    )
    assert response.status_code == 201, response.json()
    return response.json()


class TestSwappableSlots:
    def test_lists_other_users_offers_without_email(self, alice_api, pair):
        listed = alice_api.get("/api/swaps/swappable-slots").json()

        assert [e["id"] for e in listed] == [pair[1]["id"]]
        assert set(listed[0]["owner"]) == {"id", "user_name"}
        assert listed[0]["owner"]["user_name"] == "bob"


class TestRequestSwap:
    def test_creates_pending_swap(self, pending, alice, bob, pair):
        assert pending["status"] == "PENDING"
        assert pending["requester"]["id"] == str(alice.id)
        assert pending["responder"]["id"] == str(bob.id)
        assert pending["my_slot"]["id"] == pair[0]["id"]
        assert pending["my_slot"]["status"] == "SWAP_PENDING"
        assert pending["their_slot"]["status"] == "SWAP_PENDING"

    def test_missing_ids(self, alice_api):
        response = alice_api.post("/api/swaps", {})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "MISSING_FIELD"

    def test_malformed_id(self, alice_api, pair):
        response = alice_api.post(
            "/api/swaps", {"event_id": "bad", "target_event_id": pair[1]["id"]}
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_ID"

    def test_unknown_target(self, alice_api, pair):
        response = alice_api.post(
            "/api/swaps", {"event_id": pair[0]["id"], "target_event_id": str(uuid.uuid4())}
        )

        assert response.status_code == 404

    def test_offering_someone_elses_event(self, bob_api, pair):
        response = bob_api.post(
            "/api/swaps", {"event_id": pair[0]["id"], "target_event_id": pair[1]["id"]}
        )

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "NOT_EVENT_OWNER"

    def test_duplicate_is_409(self, alice_api, pair, pending):
        response = alice_api.post(
            "/api/swaps", {"event_id": pair[0]["id"], "target_event_id": pair[1]["id"]}
        )

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "DUPLICATE_SWAP"

    def test_target_not_swappable(self, alice_api, bob_api, pair):
        bob_api.post(f"/api/events/{pair[1]['id']}/disable-swap")

        response = alice_api.post(
            "/api/swaps", {"event_id": pair[0]["id"], "target_event_id": pair[1]["id"]}
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_TRANSITION"


class TestRespondSwap:
    def test_accept_exchanges_owners(self, alice_api, bob_api, alice, bob, pair, pending):
        response = bob_api.post(f"/api/swaps/{pending['id']}/respond", {"accept": True})

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ACCEPTED"
        assert body["my_slot"]["owner"]["id"] == str(bob.id)
        assert body["their_slot"]["owner"]["id"] == str(alice.id)
        assert [e["id"] for e in alice_api.get("/api/events").json()] == [pair[1]["id"]]
        assert [e["status"] for e in bob_api.get("/api/events").json()] == ["BUSY"]

    def test_reject_with_string_flag(self, bob_api, pair, pending):
        response = bob_api.post(f"/api/swaps/{pending['id']}/respond", {"accept": "false"})

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "REJECTED"
        assert body["my_slot"]["status"] == "SWAPPABLE"
        assert body["their_slot"]["status"] == "SWAPPABLE"

    def test_missing_accept(self, bob_api, pending):
        response = bob_api.post(f"/api/swaps/{pending['id']}/respond", {})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "MISSING_FIELD"

    def test_non_boolean_accept(self, bob_api, pending):
        response = bob_api.post(f"/api/swaps/{pending['id']}/respond", {"accept": "maybe"})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_ACCEPT"

    def test_requester_cannot_respond(self, alice_api, pending):
        response = alice_api.post(f"/api/swaps/{pending['id']}/respond", {"accept": True})

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "NOT_SWAP_RESPONDER"

    def test_unknown_swap(self, bob_api):
        response = bob_api.post(f"/api/swaps/{uuid.uuid4()}/respond", {"accept": True})

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "SWAP_NOT_FOUND"

    def test_second_response_is_rejected(self, bob_api, pending):
        bob_api.post(f"/api/swaps/{pending['id']}/respond", {"accept": False})

        response = bob_api.post(f"/api/swaps/{pending['id']}/respond", {"accept": True})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "SWAP_ALREADY_PROCESSED"

    def test_accept_rolls_back_on_fresh_overlap(self, alice_api, bob_api, pair, pending):
        # Bob books the slot he would receive while the request is pending.
        created = bob_api.post(
            "/api/events", {"title": "Dentist", "start_time": iso(1), "end_time": iso(2)}
        )
        assert created.status_code == 201

        response = bob_api.post(f"/api/swaps/{pending['id']}/respond", {"accept": True})

        assert response.status_code == 409
        assert response.json()["error"]["message"].startswith("For you")
        outgoing = alice_api.get("/api/swaps/outgoing").json()
        assert outgoing[0]["status"] == "PENDING"
        assert outgoing[0]["my_slot"]["owner"]["user_name"] == "alice"


class TestLockedEvents:
    def test_delete_pending_event_is_locked(self, bob_api, pair, pending):
        response = bob_api.delete(f"/api/events/{pair[1]['id']}")

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "EVENT_LOCKED"

    def test_disable_pending_event_withdraws_swap(self, alice_api, bob_api, pair, pending):
        response = alice_api.post(f"/api/events/{pair[0]['id']}/disable-swap")

        assert response.json()["status"] == "BUSY"
        (incoming,) = bob_api.get("/api/swaps/incoming").json()
        assert incoming["status"] == "REJECTED"
        assert incoming["their_slot"]["status"] == "SWAPPABLE"


class TestSwapLists:
    def test_incoming_and_outgoing(self, alice_api, bob_api, pending):
        assert [s["id"] for s in bob_api.get("/api/swaps/incoming").json()] == [pending["id"]]
        assert [s["id"] for s in alice_api.get("/api/swaps/outgoing").json()] == [pending["id"]]
        assert alice_api.get("/api/swaps/incoming").json() == []
        assert bob_api.get("/api/swaps/outgoing").json() == []
