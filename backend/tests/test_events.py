"""Tests for Event CRUD, geocoding on write, attendance and invites.

Covers:
- Event create / update / delete
- Authorization — creator-only mutations
- Geocoding hard-fail on create and update → 400
- Duplicate guard (title + location + date_time) → 400
- Attendance upsert and counts
- Invites for private events
"""
from tests.conftest import DEFAULT_LOCATION, attend, create_test_event, create_test_user, iso_in


def _setup(client):
    """Create an organizer and one other user."""
    organizer = create_test_user(client, username="organizer")
    other = create_test_user(client, username="other")
    return organizer, other


class TestEventCreate:
    """Event creation and initial state."""

    def test_create_event_geocodes_location(self, client, geocoder):
        organizer, _ = _setup(client)
        data = create_test_event(client, organizer["user_id"], title="Samba", category="musica")
        assert data["title"] == "Samba"
        assert data["category"] == "musica"
        assert data["latitude"] == -23.5503
        assert data["longitude"] == -46.6339
        assert data["creator_id"] == organizer["user_id"]
        assert data["organizer"]["username"] == "organizer"
        assert data["shareable_link"]
        assert geocoder.calls == [DEFAULT_LOCATION]

    def test_default_category(self, client):
        organizer, _ = _setup(client)
        data = create_test_event(client, organizer["user_id"])
        assert data["category"] == "outros"
        assert data["price_type"] == "free"

    def test_unknown_location_is_rejected(self, client):
        organizer, _ = _setup(client)
        resp = client.post(f"/api/events?actor_user_id={organizer['user_id']}", json={
            "title": "Nowhere",
            "location": "Atlantis",
            "date_time": iso_in(days=1),
        })
        assert resp.status_code == 400
        assert "Atlantis" in resp.json()["detail"]
        assert client.get("/api/events").json() == []

    def test_duplicate_event_rejected(self, client):
        organizer, _ = _setup(client)
        when = iso_in(days=3)
        payload = {"title": "Jam", "location": DEFAULT_LOCATION, "date_time": when}
        first = client.post(f"/api/events?actor_user_id={organizer['user_id']}", json=payload)
        assert first.status_code == 201
        second = client.post(f"/api/events?actor_user_id={organizer['user_id']}", json=payload)
        assert second.status_code == 400

    def test_missing_title_is_validation_error(self, client):
        organizer, _ = _setup(client)
        resp = client.post(f"/api/events?actor_user_id={organizer['user_id']}", json={
            "location": DEFAULT_LOCATION,
            "date_time": iso_in(days=1),
        })
        assert resp.status_code == 400

    def test_unknown_creator(self, client):
        resp = client.post("/api/events?actor_user_id=nobody", json={
            "title": "Ghost", "location": DEFAULT_LOCATION, "date_time": iso_in(days=1),
        })
        assert resp.status_code == 404


class TestEventUpdate:
    """Event update with authorization and re-geocoding."""

    def test_update_event_creator(self, client):
        organizer, _ = _setup(client)
        event = create_test_event(client, organizer["user_id"])
        resp = client.put(
            f"/api/events/{event['event_id']}?actor_user_id={organizer['user_id']}",
            json={"title": "Updated Title", "description": "Now with a band"},
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["title"] == "Updated Title"
        assert data["description"] == "Now with a band"

    def test_update_event_non_creator_forbidden(self, client):
        organizer, other = _setup(client)
        event = create_test_event(client, organizer["user_id"])
        resp = client.put(
            f"/api/events/{event['event_id']}?actor_user_id={other['user_id']}",
            json={"title": "Hacked Title"},
        )
        assert resp.status_code == 403

    def test_update_invisible_private_event_is_404(self, client):
        organizer, other = _setup(client)
        event = create_test_event(client, organizer["user_id"], is_private=True)
        resp = client.put(
            f"/api/events/{event['event_id']}?actor_user_id={other['user_id']}",
            json={"title": "Hacked Title"},
        )
        assert resp.status_code == 404

    def test_location_change_regeocodes(self, client, geocoder):
        organizer, _ = _setup(client)
        event = create_test_event(client, organizer["user_id"])
        resp = client.put(
            f"/api/events/{event['event_id']}?actor_user_id={organizer['user_id']}",
            json={"location": "Copacabana, Rio de Janeiro"},
        )
        assert resp.status_code == 200
        assert resp.json()["latitude"] == -22.9711
        assert geocoder.calls[-1] == "Copacabana, Rio de Janeiro"

    def test_location_change_to_unknown_place_fails(self, client):
        organizer, _ = _setup(client)
        event = create_test_event(client, organizer["user_id"])
        resp = client.put(
            f"/api/events/{event['event_id']}?actor_user_id={organizer['user_id']}",
            json={"location": "Atlantis"},
        )
        assert resp.status_code == 400
        fetched = client.get(f"/api/events/{event['event_id']}").json()
        assert fetched["event"]["location"] == DEFAULT_LOCATION


class TestEventDelete:

    def test_delete_event(self, client):
        organizer, other = _setup(client)
        event = create_test_event(client, organizer["user_id"])
        attend(client, event["event_id"], other["user_id"])
        resp = client.delete(f"/api/events/{event['event_id']}?actor_user_id={organizer['user_id']}")
        assert resp.status_code == 204
        assert client.get(f"/api/events/{event['event_id']}").status_code == 404

    def test_delete_by_non_creator_is_404(self, client):
        organizer, other = _setup(client)
        event = create_test_event(client, organizer["user_id"])
        resp = client.delete(f"/api/events/{event['event_id']}?actor_user_id={other['user_id']}")
        assert resp.status_code == 404
        assert client.get(f"/api/events/{event['event_id']}").status_code == 200


class TestAttendance:
    """RSVP upsert and the derived counters."""

    def test_attend_and_count(self, client):
        organizer, other = _setup(client)
        event = create_test_event(client, organizer["user_id"])
        data = attend(client, event["event_id"], other["user_id"])
        assert data["status"] == "attending"

        details = client.get(f"/api/events/{event['event_id']}?viewer_id={other['user_id']}").json()
        assert details["attendance_count"] == 1
        assert details["user_attendance"]["status"] == "attending"

    def test_attendance_is_upserted(self, client):
        organizer, other = _setup(client)
        event = create_test_event(client, organizer["user_id"])
        first = attend(client, event["event_id"], other["user_id"])
        second = attend(client, event["event_id"], other["user_id"], status="interested")
        assert first["attendance_id"] == second["attendance_id"]
        assert second["status"] == "interested"

        details = client.get(f"/api/events/{event['event_id']}").json()
        assert details["attendance_count"] == 0

    def test_attendees_lists_only_attending(self, client):
        organizer, other = _setup(client)
        third = create_test_user(client, username="third")
        event = create_test_event(client, organizer["user_id"])
        attend(client, event["event_id"], other["user_id"])
        attend(client, event["event_id"], third["user_id"], status="not_going")

        resp = client.get(f"/api/events/{event['event_id']}/attendees")
        assert resp.status_code == 200
        assert [u["username"] for u in resp.json()] == ["other"]

    def test_invalid_status_is_validation_error(self, client):
        organizer, other = _setup(client)
        event = create_test_event(client, organizer["user_id"])
        resp = client.post(
            f"/api/events/{event['event_id']}/attend?actor_user_id={other['user_id']}",
            json={"status": "maybe"},
        )
        assert resp.status_code == 400

    def test_cannot_attend_invisible_private_event(self, client):
        organizer, other = _setup(client)
        event = create_test_event(client, organizer["user_id"], is_private=True)
        resp = client.post(
            f"/api/events/{event['event_id']}/attend?actor_user_id={other['user_id']}",
            json={"status": "attending"},
        )
        assert resp.status_code == 404


class TestInvites:

    def test_private_event_invitees_get_pending_invites(self, client):
        organizer, other = _setup(client)
        event = create_test_event(client, organizer["user_id"], is_private=True, invitee_ids=[other["user_id"]])
        resp = client.get(f"/api/invites?actor_user_id={other['user_id']}")
        assert resp.status_code == 200
        invites = resp.json()
        assert len(invites) == 1
        assert invites[0]["event_id"] == event["event_id"]
        assert invites[0]["status"] == "pending"

    def test_public_event_ignores_invitee_ids(self, client):
        organizer, other = _setup(client)
        create_test_event(client, organizer["user_id"], invitee_ids=[other["user_id"]])
        assert client.get(f"/api/invites?actor_user_id={other['user_id']}").json() == []

    def test_creator_can_invite_later(self, client):
        organizer, other = _setup(client)
        event = create_test_event(client, organizer["user_id"], is_private=True)
        resp = client.post(
            f"/api/events/{event['event_id']}/invites?actor_user_id={organizer['user_id']}",
            json={"user_ids": [other["user_id"], organizer["user_id"], "unknown-user"]},
        )
        assert resp.status_code == 201
        assert [i["user_id"] for i in resp.json()] == [other["user_id"]]

        again = client.post(
            f"/api/events/{event['event_id']}/invites?actor_user_id={organizer['user_id']}",
            json={"user_ids": [other["user_id"]]},
        )
        assert again.json() == []

    def test_non_creator_cannot_invite(self, client):
        organizer, other = _setup(client)
        third = create_test_user(client, username="third")
        event = create_test_event(client, organizer["user_id"])
        resp = client.post(
            f"/api/events/{event['event_id']}/invites?actor_user_id={other['user_id']}",
            json={"user_ids": [third["user_id"]]},
        )
        assert resp.status_code == 403

    def test_rsvp_answers_invite(self, client):
        organizer, other = _setup(client)
        event = create_test_event(client, organizer["user_id"], is_private=True, invitee_ids=[other["user_id"]])
        attend(client, event["event_id"], other["user_id"])
        assert client.get(f"/api/invites?actor_user_id={other['user_id']}").json() == []


class TestMyEvents:

    def test_mine_lists_created_events_newest_first(self, client):
        organizer, other = _setup(client)
        create_test_event(client, organizer["user_id"], title="First")
        create_test_event(client, organizer["user_id"], title="Second", is_private=True)
        create_test_event(client, other["user_id"], title="Not mine")
        resp = client.get(f"/api/events/mine?actor_user_id={organizer['user_id']}")
        assert resp.status_code == 200
        assert [d["event"]["title"] for d in resp.json()] == ["Second", "First"]
