"""Pytest fixtures — per-test SQLite database and a fake geocoder."""
from datetime import datetime, timedelta, timezone
import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from ourmap.database import Base, get_db
from ourmap.main import app
from ourmap.models.event import Event
from ourmap.models.user import User
from ourmap.routers.geocode import get_rate_limiter
from ourmap.services.geocoding import Coordinates, CitySuggestion, GeocodingError, get_geocoder
from ourmap.services.ttl_store import MemoryTTLStore, RateLimiter

SQLITE_URL = "sqlite:///./test.db"

TEST_RATE_LIMIT = 5

# Known places for the fake geocoder. Distances from ORIGIN are
# along a meridian: 0.08993 deg of latitude is ~10 km, 0.53959 is ~60 km.
ORIGIN = Coordinates(lat=0.0, lng=0.0)
KNOWN_PLACES = {
    "Praça da Sé, São Paulo": Coordinates(lat=-23.5503, lng=-46.6339),
    "Avenida Paulista, São Paulo": Coordinates(lat=-23.5614, lng=-46.6559),
    "Copacabana, Rio de Janeiro": Coordinates(lat=-22.9711, lng=-43.1822),
    "Near Origin": Coordinates(lat=0.08993, lng=0.0),
    "Far From Origin": Coordinates(lat=0.53959, lng=0.0),
}
DEFAULT_LOCATION = "Praça da Sé, São Paulo"


class FakeGeocoder:
    """In-memory stand-in for the Mapbox client."""

    def __init__(self, places=None):
        self.places = dict(places or KNOWN_PLACES)
        self.calls = []

    def geocode(self, address):
        self.calls.append(address)
        if address not in self.places:
            raise GeocodingError(f"Address not found: {address}")
        return self.places[address]

    def reverse_geocode(self, lat, lng):
        for name, coords in self.places.items():
            if (coords.lat, coords.lng) == (lat, lng):
                return name
        raise GeocodingError(f"Location not found: ({lat}, {lng})")

    def search_cities(self, query, limit=5):
        query = query.strip()
        if len(query) < 2:
            return []
        return [
            CitySuggestion(place_name=name, text=name.split(",")[0], lat=c.lat, lng=c.lng)
            for name, c in self.places.items()
            if query.lower() in name.lower()
        ][:limit]


@pytest.fixture(scope="function")
def db_engine():
    """Create a fresh SQLite engine for each test."""
    engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False})

    # Enable WAL mode and FK enforcement (cascades)
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db(db_engine):
    """Yield a database session bound to the test engine."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def geocoder():
    return FakeGeocoder()


@pytest.fixture(scope="function")
def rate_limiter():
    return RateLimiter(MemoryTTLStore(), max_attempts=TEST_RATE_LIMIT, window_seconds=60, prefix="geocode")


@pytest.fixture(scope="function")
def client(db_engine, geocoder, rate_limiter):
    """FastAPI TestClient with the database, geocoder and rate limiter overridden."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)

    def _override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_geocoder] = lambda: geocoder
    app.dependency_overrides[get_rate_limiter] = lambda: rate_limiter
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Helpers: create records via the API, return the JSON response dict
# ---------------------------------------------------------------------------
def iso_in(days: float = 0, hours: float = 0) -> str:
    """ISO timestamp relative to now (negative values are in the past)."""
    return (datetime.now(timezone.utc) + timedelta(days=days, hours=hours)).isoformat()


def create_test_user(client: TestClient, username: str = "testuser", **fields) -> dict:
    """Helper — POST /api/users and return response JSON."""
    resp = client.post("/api/users", json={"username": username, **fields})
    assert resp.status_code == 201, resp.text
    return resp.json()


def create_test_event(
    client: TestClient,
    creator_id: str,
    title: str = "Test Event",
    location: str = DEFAULT_LOCATION,
    days_from_now: float = 1,
    **fields,
) -> dict:
    """Helper — POST /api/events and return response JSON."""
    payload = {"title": title, "location": location, "date_time": iso_in(days=days_from_now), **fields}
    resp = client.post(f"/api/events?actor_user_id={creator_id}", json=payload)
    assert resp.status_code == 201, resp.text
    return resp.json()


def attend(client: TestClient, event_id: str, user_id: str, status: str = "attending") -> dict:
    resp = client.post(f"/api/events/{event_id}/attend?actor_user_id={user_id}", json={"status": status})
    assert resp.status_code == 200, resp.text
    return resp.json()


def make_friends(client: TestClient, requester_id: str, addressee_id: str) -> dict:
    """Helper — send and accept a friend request."""
    resp = client.post(f"/api/friend-requests?actor_user_id={requester_id}", json={"addressee_id": addressee_id})
    assert resp.status_code == 201, resp.text
    request_id = resp.json()["friendship_id"]
    resp = client.put(
        f"/api/friend-requests/{request_id}?actor_user_id={addressee_id}",
        json={"status": "accepted"},
    )
    assert resp.status_code == 200, resp.text
    return resp.json()


# ---------------------------------------------------------------------------
# Helpers: insert rows directly for service-level tests
# ---------------------------------------------------------------------------
def add_user(db, username: str):
    user = User(username=username)
    db.add(user)
    db.commit()
    return user


def add_event(db, creator, title: str = "Event", days_from_now: float = 1, **fields):
    fields.setdefault("location", DEFAULT_LOCATION)
    row = Event(
        title=title,
        creator_id=creator.user_id,
        date_time=datetime.now(timezone.utc) + timedelta(days=days_from_now),
        **fields,
    )
    db.add(row)
    db.commit()
    return row
