"""Tests for the Mapbox adapter and the geocoding endpoints."""
from unittest.mock import MagicMock

import pytest
import requests

from ourmap.services.geocoding import Coordinates, Geocoder, GeocodingError
from tests.conftest import TEST_RATE_LIMIT


def _session(payload=None, exc=None, status_error=None):
    session = MagicMock(spec=requests.Session)
    if exc is not None:
        session.get.side_effect = exc
        return session
    response = MagicMock()
    response.json.return_value = payload
    if status_error is not None:
        response.raise_for_status.side_effect = status_error
    session.get.return_value = response
    return session


def _geocoder(session, token="pk.test"):
    return Geocoder(access_token=token, base_url="https://geo.example/places", timeout=3, session=session)


class TestGeocoderClient:

    def test_geocode_swaps_lng_lat(self):
        session = _session({"features": [{"center": [-46.6339, -23.5503], "place_name": "Sé"}]})
        coords = _geocoder(session).geocode("Praça da Sé")
        assert coords == Coordinates(lat=-23.5503, lng=-46.6339)

        args, kwargs = session.get.call_args
        assert args[0].startswith("https://geo.example/places/")
        assert args[0].endswith(".json")
        assert kwargs["params"]["access_token"] == "pk.test"
        assert kwargs["params"]["limit"] == 1
        assert kwargs["timeout"] == 3

    def test_missing_token(self):
        session = _session({"features": []})
        with pytest.raises(GeocodingError):
            _geocoder(session, token="").geocode("Anywhere")
        session.get.assert_not_called()

    def test_blank_address(self):
        with pytest.raises(GeocodingError):
            _geocoder(_session({"features": []})).geocode("   ")

    def test_no_features(self):
        with pytest.raises(GeocodingError):
            _geocoder(_session({"features": []})).geocode("Atlantis")

    def test_http_error_is_wrapped(self):
        session = _session({}, status_error=requests.HTTPError("401 Unauthorized"))
        with pytest.raises(GeocodingError):
            _geocoder(session).geocode("Praça da Sé")

    def test_network_error_is_wrapped(self):
        session = _session(exc=requests.ConnectionError("down"))
        with pytest.raises(GeocodingError):
            _geocoder(session).geocode("Praça da Sé")

    def test_reverse_geocode(self):
        session = _session({"features": [{"center": [0, 0], "place_name": "São Paulo, Brazil"}]})
        assert _geocoder(session).reverse_geocode(-23.55, -46.63) == "São Paulo, Brazil"
        assert "-46.63,-23.55" in session.get.call_args[0][0]

    def test_search_cities(self):
        session = _session({"features": [
            {"center": [-46.63, -23.55], "place_name": "São Paulo, Brazil", "text": "São Paulo"},
            {"center": [-43.18, -22.97], "place_name": "Rio de Janeiro, Brazil", "text": "Rio de Janeiro"},
        ]})
        suggestions = _geocoder(session).search_cities("São", limit=2)
        assert [s.text for s in suggestions] == ["São Paulo", "Rio de Janeiro"]
        params = session.get.call_args[1]["params"]
        assert params["types"] == "place"
        assert params["limit"] == 2

    def test_search_cities_short_query(self):
        session = _session({"features": []})
        assert _geocoder(session).search_cities("S") == []
        session.get.assert_not_called()


class TestGeocodeEndpoints:

    def test_geocode(self, client):
        resp = client.post("/api/geocode", json={"address": "Praça da Sé, São Paulo"})
        assert resp.status_code == 200
        assert resp.json() == {"lat": -23.5503, "lng": -46.6339}

    def test_blank_address_is_400(self, client):
        assert client.post("/api/geocode", json={"address": "  "}).status_code == 400

    def test_provider_failure_is_500(self, client):
        resp = client.post("/api/geocode", json={"address": "Atlantis"})
        assert resp.status_code == 500

    def test_reverse_geocode(self, client):
        resp = client.post("/api/reverse-geocode", json={"lat": -22.9711, "lng": -43.1822})
        assert resp.json() == {"address": "Copacabana, Rio de Janeiro"}

    def test_search_cities(self, client):
        resp = client.post("/api/search-cities", json={"query": "são paulo"})
        assert resp.status_code == 200
        places = [s["place_name"] for s in resp.json()["suggestions"]]
        assert places == ["Praça da Sé, São Paulo", "Avenida Paulista, São Paulo"]

    def test_rate_limited(self, client):
        for _ in range(TEST_RATE_LIMIT):
            assert client.post("/api/search-cities", json={"query": "rio"}).status_code == 200
        resp = client.post("/api/geocode", json={"address": "Praça da Sé, São Paulo"})
        assert resp.status_code == 429
