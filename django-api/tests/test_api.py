"""Integration tests for the festivals HTTP API.

These run against the Django ORM stores.
Run with: pytest tests/test_api.py -v
"""

import uuid

import pytest
from rest_framework.test import APIClient

from festivals import models as orm
from festivals.domain.errors import BulkTransitionError, ValidationError
from festivals.handlers.errors import domain_exception_handler

FESTIVAL_PAYLOAD = {
    "name": "Summer Sound",
    "description": "Three days of live music",
    "dates": ["2025-07-01", "2025-07-03"],
    "venue": "Riverside Park",
    "venue_layout": {"stages": ["Main"], "vendor_areas": ["North lawn"]},
    "budget": {
        "tracking": "1000.00",
        "costs": "50000.00",
        "logistics": "8000.00",
        "expected_revenue": "90000.00",
    },
    "vendor_management": {"food_stalls": ["Tacos"], "merchandise_booths": ["Shirts"]},
}


def _account(username: str, *roles: str) -> orm.UserAccount:
    return orm.UserAccount.objects.create(username=username, full_name=username.title(), roles=list(roles))


def _as(user: orm.UserAccount | None) -> dict:
    return {"HTTP_X_CALLER_ID": str(user.id)} if user else {}


@pytest.fixture
def users(db) -> dict:
    return {
        "organizer": _account("olivia", "ORGANIZER"),
        "artist": _account("arlo", "ARTIST"),
        "bandmate": _account("bea", "ARTIST"),
        "staff": _account("sam", "STAFF"),
        "visitor": _account("vic", "VISITOR"),
    }


@pytest.fixture
def festival(api_client: APIClient, users) -> dict:
    payload = {
        **FESTIVAL_PAYLOAD,
        "organizers": [str(users["organizer"].id)],
        "staff": [str(users["staff"].id)],
    }
    response = api_client.post("/api/festivals", payload, format="json", **_as(users["organizer"]))
    assert response.status_code == 201
    return response.json()


def _performance_payload(users) -> dict:
    return {
        "name": "The Lanterns",
        "description": "Indie folk quartet",
        "genre": "Folk",
        "duration": 45,
        "band_members": [str(users["bandmate"].id)],
        "artists": [str(users["artist"].id)],
        "technical_requirements": {
            "equipment": ["Drum kit"],
            "stage_setup": "Riser",
            "sound_lighting": "Warm wash",
        },
        "setlist": ["Opener", "Closer"],
        "merchandise_items": [
            {"name": "Tour shirt", "description": "Black", "type": "apparel", "price": "25.00"}
        ],
        "preferred_rehearsal_times": ["2025-07-01T10:00"],
        "preferred_performance_slots": ["2025-07-02T20:00"],
    }


def _transition(api_client, festival_id, action, caller):
    return api_client.post(
        f"/api/festivals/{festival_id}/transitions/{action}", format="json", **_as(caller)
    )


@pytest.mark.django_db
class TestAuthentication:
    """Tests for caller identification."""

    def test_missing_caller_header_is_unauthorized(self, api_client: APIClient):
        """Requests without X-Caller-Id are rejected with 401."""
        response = api_client.post("/api/festivals", FESTIVAL_PAYLOAD, format="json")
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "NOT_AUTHENTICATED"

    def test_unknown_caller_is_unauthorized(self, api_client: APIClient):
        """An unknown caller ID is rejected with 401."""
        response = api_client.get("/api/festivals", HTTP_X_CALLER_ID=str(uuid.uuid4()))
        assert response.status_code == 401

    def test_public_search_needs_no_caller(self, api_client: APIClient):
        """Festival search is open to anonymous visitors."""
        response = api_client.get("/api/festivals/search")
        assert response.status_code == 200
        assert response.json() == []


@pytest.mark.django_db
class TestFestivalEndpoints:
    """Tests for /api/festivals."""

    def test_create_festival(self, festival, users):
        """POST creates a CREATED festival."""
        assert festival["state"] == "CREATED"
        assert festival["organizers"] == [str(users["organizer"].id)]
        assert festival["budget"]["costs"] == "50000.00"
        assert festival["dates"] == ["2025-07-01", "2025-07-03"]

    def test_create_by_artist_forbidden(self, api_client: APIClient, users):
        """Artists get 403."""
        payload = {**FESTIVAL_PAYLOAD, "organizers": [str(users["organizer"].id)]}
        response = api_client.post("/api/festivals", payload, format="json", **_as(users["artist"]))
        assert response.status_code == 403
        assert response.json()["error"]["code"] == "NOT_AUTHORIZED"

    def test_create_with_invalid_organizer(self, api_client: APIClient, users):
        """Invalid organizer references are listed in the error details."""
        bad = str(users["artist"].id)
        payload = {**FESTIVAL_PAYLOAD, "organizers": [str(users["organizer"].id), bad]}
        response = api_client.post("/api/festivals", payload, format="json", **_as(users["organizer"]))
        assert response.status_code == 400
        assert response.json()["error"] == {
            "code": "INVALID_REFERENCE",
            "message": response.json()["error"]["message"],
            "details": [bad],
        }

    def test_create_duplicate_name_conflicts(self, api_client: APIClient, festival, users):
        """A second festival with the same name is a 409."""
        payload = {**FESTIVAL_PAYLOAD, "organizers": [str(users["organizer"].id)]}
        response = api_client.post("/api/festivals", payload, format="json", **_as(users["organizer"]))
        assert response.status_code == 409

    def test_malformed_body_is_validation_error(self, api_client: APIClient, users):
        """Unparseable dates give a 400 naming the field."""
        payload = {**FESTIVAL_PAYLOAD, "dates": ["someday"], "organizers": [str(users["organizer"].id)]}
        response = api_client.post("/api/festivals", payload, format="json", **_as(users["organizer"]))
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_FAILED"
        assert response.json()["error"]["details"] == ["dates"]

    def test_get_invalid_id(self, api_client: APIClient, users):
        """A malformed festival ID gives 400."""
        response = api_client.get("/api/festivals/not-a-uuid", **_as(users["visitor"]))
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_ID"

    def test_get_unknown_festival(self, api_client: APIClient, users):
        """An unknown festival gives 404."""
        response = api_client.get(f"/api/festivals/{uuid.uuid4()}", **_as(users["visitor"]))
        assert response.status_code == 404

    def test_patch_updates_fields(self, api_client: APIClient, festival, users):
        """PATCH applies a partial update."""
        response = api_client.patch(
            f"/api/festivals/{festival['id']}",
            {"venue": "Harbour Stage"},
            format="json",
            **_as(users["organizer"]),
        )
        assert response.status_code == 200
        assert response.json()["venue"] == "Harbour Stage"
        assert response.json()["name"] == festival["name"]

    def test_delete_created_festival(self, api_client: APIClient, festival, users):
        """DELETE removes a CREATED festival."""
        response = api_client.delete(f"/api/festivals/{festival['id']}", **_as(users["organizer"]))
        assert response.status_code == 204
        assert not orm.Festival.objects.filter(id=festival["id"]).exists()

    def test_add_staff(self, api_client: APIClient, festival, users):
        """Staff rosters are extended without duplicates."""
        extra = _account("stu", "STAFF")
        response = api_client.post(
            f"/api/festivals/{festival['id']}/staff",
            {"user_ids": [str(users["staff"].id), str(extra.id)]},
            format="json",
            **_as(users["organizer"]),
        )
        assert response.status_code == 200
        assert response.json()["staff"] == [str(users["staff"].id), str(extra.id)]

    def test_transition_out_of_order(self, api_client: APIClient, festival, users):
        """Skipping a phase is a 400 state guard."""
        response = _transition(api_client, festival["id"], "start-review", users["organizer"])
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "STATE_GUARD"

    def test_unknown_transition(self, api_client: APIClient, festival, users):
        """Unknown transition names are rejected."""
        response = _transition(api_client, festival["id"], "teleport", users["organizer"])
        assert response.status_code == 400

    def test_decisions_without_scheduled_performances(self, api_client: APIClient, festival, users):
        """Decision-making with nothing scheduled is a 404 and changes nothing."""
        for action in (
            "start-submission",
            "start-assignment",
            "start-review",
            "start-scheduling",
            "start-final-submission",
        ):
            assert _transition(api_client, festival["id"], action, users["organizer"]).status_code == 200
        response = _transition(api_client, festival["id"], "make-decisions", users["organizer"])
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NO_SCHEDULED_PERFORMANCES"
        assert orm.Festival.objects.get(id=festival["id"]).state == "FINAL_SUBMISSION"


@pytest.mark.django_db
class TestPerformanceEndpoints:
    """Tests for performance endpoints, ending in an announced festival."""

    def test_full_lifecycle(self, api_client: APIClient, festival, users):
        """A performance travels from CREATED to ACCEPTED and the festival is announced."""
        organizer, artist, staff = users["organizer"], users["artist"], users["staff"]
        fid = festival["id"]

        assert _transition(api_client, fid, "start-submission", organizer).json()["state"] == "SUBMISSION"
        created = api_client.post(
            f"/api/festivals/{fid}/performances", _performance_payload(users), format="json", **_as(artist)
        )
        assert created.status_code == 201
        performance = created.json()
        pid = performance["id"]
        assert performance["merchandise_items"][0]["price"] == "25.00"

        submitted = api_client.post(f"/api/performances/{pid}/submit", format="json", **_as(artist))
        assert submitted.json()["state"] == "SUBMITTED"

        _transition(api_client, fid, "start-assignment", organizer)
        assigned = api_client.post(
            f"/api/festivals/{fid}/performances/{pid}/stage-manager",
            {"staff_id": str(staff.id)},
            format="json",
            **_as(organizer),
        )
        assert assigned.json()["stage_manager"] == str(staff.id)

        _transition(api_client, fid, "start-review", organizer)
        reviewed = api_client.post(
            f"/api/performances/{pid}/review",
            {"score": 8, "comments": "good"},
            format="json",
            **_as(staff),
        )
        assert reviewed.json()["score"] == 8

        _transition(api_client, fid, "start-scheduling", organizer)
        approved = api_client.post(
            f"/api/festivals/{fid}/performances/{pid}/approve", format="json", **_as(organizer)
        )
        assert approved.json()["state"] == "APPROVED"

        _transition(api_client, fid, "start-final-submission", organizer)
        scheduled = api_client.post(
            f"/api/festivals/{fid}/performances/{pid}/final-submission",
            {"setlist": ["One"], "time_slot": "20:00", "rehearsal_time": "14:00"},
            format="json",
            **_as(artist),
        )
        assert scheduled.json()["state"] == "SCHEDULED"

        decided = _transition(api_client, fid, "make-decisions", organizer)
        assert decided.status_code == 200
        assert decided.json()["festival"]["state"] == "DECISION"
        assert [p["state"] for p in decided.json()["accepted"]] == ["ACCEPTED"]

        announced = _transition(api_client, fid, "announce", organizer)
        assert announced.json()["state"] == "ANNOUNCED"

        search = api_client.get("/api/festivals/search", {"name": "summer"})
        assert [f["id"] for f in search.json()] == [fid]

        mine = api_client.get("/api/festivals", **_as(organizer))
        assert [p["id"] for p in mine.json()[0]["performances"]] == [pid]

    def test_review_by_wrong_staff_forbidden(self, api_client: APIClient, festival, users):
        """Only the assigned stage manager may review."""
        organizer, artist = users["organizer"], users["artist"]
        fid = festival["id"]
        _transition(api_client, fid, "start-submission", organizer)
        pid = api_client.post(
            f"/api/festivals/{fid}/performances", _performance_payload(users), format="json", **_as(artist)
        ).json()["id"]
        api_client.post(f"/api/performances/{pid}/submit", format="json", **_as(artist))
        _transition(api_client, fid, "start-assignment", organizer)
        api_client.post(
            f"/api/festivals/{fid}/performances/{pid}/stage-manager",
            {"staff_id": str(users["staff"].id)},
            format="json",
            **_as(organizer),
        )
        _transition(api_client, fid, "start-review", organizer)
        other = _account("stu", "STAFF")
        response = api_client.post(
            f"/api/performances/{pid}/review", {"score": 5, "comments": "meh"}, format="json", **_as(other)
        )
        assert response.status_code == 403

    def test_add_band_member_grants_role(self, api_client: APIClient, festival, users):
        """Adding a visitor as band member grants the ARTIST role."""
        fid = festival["id"]
        pid = api_client.post(
            f"/api/festivals/{fid}/performances",
            _performance_payload(users),
            format="json",
            **_as(users["artist"]),
        ).json()["id"]
        response = api_client.post(
            f"/api/festivals/{fid}/performances/{pid}/band-members",
            {"user_id": str(users["visitor"].id)},
            format="json",
            **_as(users["artist"]),
        )
        assert response.status_code == 200
        assert "ARTIST" in response.json()["user"]["roles"]
        assert "ARTIST" in orm.UserAccount.objects.get(id=users["visitor"].id).roles

    def test_submit_incomplete_lists_fields(self, api_client: APIClient, festival, users):
        """Submitting without optional fields lists them."""
        fid = festival["id"]
        _transition(api_client, fid, "start-submission", users["organizer"])
        payload = _performance_payload(users)
        del payload["setlist"]
        pid = api_client.post(
            f"/api/festivals/{fid}/performances", payload, format="json", **_as(users["artist"])
        ).json()["id"]
        response = api_client.post(f"/api/performances/{pid}/submit", format="json", **_as(users["artist"]))
        assert response.status_code == 400
        assert response.json()["error"]["details"] == ["setlist"]

    def test_withdraw(self, api_client: APIClient, festival, users):
        """DELETE withdraws a CREATED performance."""
        pid = api_client.post(
            f"/api/festivals/{festival['id']}/performances",
            _performance_payload(users),
            format="json",
            **_as(users["artist"]),
        ).json()["id"]
        response = api_client.delete(f"/api/performances/{pid}", **_as(users["artist"]))
        assert response.status_code == 204
        assert not orm.Performance.objects.filter(id=pid).exists()

    def test_duplicate_performance_name_conflicts(self, api_client: APIClient, festival, users):
        """Performance names are unique within a festival."""
        url = f"/api/festivals/{festival['id']}/performances"
        api_client.post(url, _performance_payload(users), format="json", **_as(users["artist"]))
        response = api_client.post(url, _performance_payload(users), format="json", **_as(users["artist"]))
        assert response.status_code == 409


class TestErrorMapping:
    """Tests for domain_exception_handler."""

    def test_bulk_failure_reports_succeeded_and_failed(self):
        """A failed bulk transition lists both the rolled back and the failing records."""
        exc = BulkTransitionError(succeeded=["p-1", "p-2"], failed=["p-3"])
        response = domain_exception_handler(exc, {"view": None})
        assert response.status_code == 500
        error = response.data["error"]
        assert error["code"] == "BULK_TRANSITION_FAILED"
        assert error["details"] == ["p-3"]
        assert error["succeeded"] == ["p-1", "p-2"]

    def test_other_domain_errors_have_no_succeeded_key(self):
        """Only bulk failures carry the succeeded list."""
        response = domain_exception_handler(ValidationError("Bad", fields=["name"]), {"view": None})
        assert response.status_code == 400
        assert "succeeded" not in response.data["error"]
