"""Tests for User CRUD, stats and user search."""
from tests.conftest import attend, create_test_event, create_test_user, make_friends


class TestUserCRUD:
    """User create / get / update / list."""

    def test_create_user(self, client):
        data = create_test_user(client, username="alice", first_name="Alice")
        assert data["username"] == "alice"
        assert data["first_name"] == "Alice"
        assert data["role"] == "user"
        assert data["auth_type"] == "local"
        assert "user_id" in data

    def test_duplicate_username_rejected(self, client):
        create_test_user(client, username="alice")
        resp = client.post("/api/users", json={"username": "alice"})
        assert resp.status_code == 400

    def test_short_username_is_validation_error(self, client):
        resp = client.post("/api/users", json={"username": "a"})
        assert resp.status_code == 400
        assert isinstance(resp.json()["detail"], list)

    def test_get_user_not_found(self, client):
        resp = client.get("/api/users/00000000-0000-0000-0000-000000000000")
        assert resp.status_code == 404

    def test_update_user(self, client):
        user = create_test_user(client)
        resp = client.patch(
            f"/api/users/{user['user_id']}?actor_user_id={user['user_id']}", json={"last_name": "Souza"}
        )
        assert resp.status_code == 200
        assert resp.json()["last_name"] == "Souza"

    def test_only_the_user_may_update_themself(self, client):
        user = create_test_user(client, username="alice")
        other = create_test_user(client, username="mallory")
        resp = client.patch(f"/api/users/{user['user_id']}?actor_user_id={other['user_id']}", json={"last_name": "X"})
        assert resp.status_code == 403

    def test_list_users(self, client):
        create_test_user(client, username="alice")
        create_test_user(client, username="bob")
        resp = client.get("/api/users")
        assert resp.status_code == 200
        names = [u["username"] for u in resp.json()]
        assert names == ["alice", "bob"]

    def test_phone_is_normalized_on_create(self, client):
        data = create_test_user(client, username="alice", phone_e164="+55 (11) 98765-4321")
        assert data["phone_e164"] == "+5511987654321"

    def test_invalid_phone_rejected(self, client):
        resp = client.post("/api/users", json={"username": "alice", "phone_e164": "not a phone"})
        assert resp.status_code == 400


class TestContactPrivacy:
    """Email and phone are only shown to the user and their friends."""

    def _alice(self, client):
        return create_test_user(client, username="alice", email="alice@example.com", phone_e164="+5511987654321")

    def test_list_never_exposes_contact_fields(self, client):
        self._alice(client)
        listed = client.get("/api/users").json()[0]
        assert listed["username"] == "alice"
        for field in ("email", "phone_e164", "auth_type", "role"):
            assert field not in listed

    def test_stranger_sees_public_profile_only(self, client):
        alice = self._alice(client)
        stranger = create_test_user(client, username="stranger")
        for query in ("", f"?viewer_id={stranger['user_id']}"):
            data = client.get(f"/api/users/{alice['user_id']}{query}").json()
            assert data["username"] == "alice"
            assert "email" not in data
            assert "phone_e164" not in data
            assert data["average_rating"] is None

    def test_self_and_friends_see_contact_fields(self, client):
        alice = self._alice(client)
        bob = create_test_user(client, username="bob")
        make_friends(client, bob["user_id"], alice["user_id"])
        for viewer in (alice, bob):
            data = client.get(f"/api/users/{alice['user_id']}?viewer_id={viewer['user_id']}").json()
            assert data["email"] == "alice@example.com"
            assert data["phone_e164"] == "+5511987654321"

    def test_pending_request_is_not_enough(self, client):
        alice = self._alice(client)
        bob = create_test_user(client, username="bob")
        client.post(f"/api/friend-requests?actor_user_id={bob['user_id']}", json={"addressee_id": alice["user_id"]})
        data = client.get(f"/api/users/{alice['user_id']}?viewer_id={bob['user_id']}").json()
        assert "phone_e164" not in data


class TestUserStats:
    """GET /api/users/{id} carries the aggregated counters."""

    def test_new_user_has_empty_stats(self, client):
        user = create_test_user(client)
        data = client.get(f"/api/users/{user['user_id']}").json()
        assert data["events_created"] == 0
        assert data["events_attended"] == 0
        assert data["friends_count"] == 0
        assert data["average_rating"] is None

    def test_stats_count_events_attendance_and_friends(self, client):
        alice = create_test_user(client, username="alice")
        bob = create_test_user(client, username="bob")
        carol = create_test_user(client, username="carol")
        make_friends(client, alice["user_id"], bob["user_id"])
        make_friends(client, carol["user_id"], alice["user_id"])

        event = create_test_event(client, alice["user_id"], title="Party")
        create_test_event(client, alice["user_id"], title="Picnic")
        other = create_test_event(client, bob["user_id"], title="Bob's Show")
        attend(client, other["event_id"], alice["user_id"])
        attend(client, event["event_id"], bob["user_id"], status="interested")

        data = client.get(f"/api/users/{alice['user_id']}").json()
        assert data["events_created"] == 2
        assert data["events_attended"] == 1
        assert data["friends_count"] == 2

    def test_average_rating_over_organized_events(self, client):
        organizer = create_test_user(client, username="organizer")
        guest = create_test_user(client, username="guest")
        past = create_test_event(client, organizer["user_id"], title="Done", days_from_now=-1)
        attend(client, past["event_id"], guest["user_id"])
        resp = client.post(
            f"/api/events/{past['event_id']}/rate?actor_user_id={guest['user_id']}",
            json={"organizer_rating": 4, "event_rating": 5},
        )
        assert resp.status_code == 201

        data = client.get(f"/api/users/{organizer['user_id']}").json()
        assert data["average_rating"] == 4.0

        rating = client.get(f"/api/users/{organizer['user_id']}/organizer-rating").json()
        assert rating == {"average": 4.0, "total_ratings": 1}

    def test_organizer_rating_defaults_to_zero(self, client):
        user = create_test_user(client)
        rating = client.get(f"/api/users/{user['user_id']}/organizer-rating").json()
        assert rating == {"average": 0.0, "total_ratings": 0}


class TestUserSearch:
    """GET /api/search/users."""

    def test_short_query_returns_empty(self, client):
        create_test_user(client, username="alice")
        assert client.get("/api/search/users?query=a").json() == []

    def test_matches_username_and_names_case_insensitive(self, client):
        create_test_user(client, username="alice", first_name="Alice")
        create_test_user(client, username="bob", last_name="Alison")
        create_test_user(client, username="carol")
        resp = client.get("/api/search/users?query=ALI")
        assert resp.status_code == 200
        assert sorted(u["username"] for u in resp.json()) == ["alice", "bob"]
        assert "email" not in resp.json()[0]
