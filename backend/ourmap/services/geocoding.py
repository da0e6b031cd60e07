"""Geocoding adapter — Mapbox Geocoding v5 over HTTP.

Converts free-text addresses to coordinates and back.  Every call is a
network round trip; nothing is cached and nothing is retried.
"""
import logging
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import quote

import requests

from ourmap.config import settings

logger = logging.getLogger(__name__)


class GeocodingError(Exception):
    """The provider could not resolve the request (or is not configured)."""


@dataclass(frozen=True)
class Coordinates:
    lat: float
    lng: float


@dataclass(frozen=True)
class CitySuggestion:
    place_name: str
    text: str
    lat: float
    lng: float


class Geocoder:
    """Thin client for the Mapbox places endpoint."""

    def __init__(
        self,
        access_token: str,
        base_url: str = settings.GEOCODING_BASE_URL,
        timeout: float = settings.GEOCODING_TIMEOUT_SEC,
        session: Optional[requests.Session] = None,
    ):
        self.access_token = access_token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _features(self, search_text: str, **params: Any) -> list[dict]:
        if not self.access_token:
            raise GeocodingError("Mapbox access token not configured")

        url = f"{self.base_url}/{quote(search_text, safe=',-.')}.json"
        params = {"access_token": self.access_token, **params}
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as exc:
            logger.warning("Geocoding request for '%s' failed: %s", search_text, exc)
            raise GeocodingError("Geocoding request failed") from exc

        return payload.get("features") or []

    def geocode(self, address: str) -> Coordinates:
        """Resolve an address to its best-match coordinates."""
        address = (address or "").strip()
        if not address:
            raise GeocodingError("Address is required")

        features = self._features(address, limit=1)
        if not features:
            raise GeocodingError(f"Address not found: {address}")

        # Mapbox returns [lng, lat]
        lng, lat = features[0]["center"]
        logger.info("Geocoded '%s' to (%s, %s)", address, lat, lng)
        return Coordinates(lat=float(lat), lng=float(lng))

    def reverse_geocode(self, lat: float, lng: float) -> str:
        """Resolve coordinates to a human-readable place name."""
        features = self._features(f"{lng},{lat}", limit=1)
        if not features:
            raise GeocodingError(f"Location not found: ({lat}, {lng})")
        return features[0]["place_name"]

    def search_cities(self, query: str, limit: int = 5) -> list[CitySuggestion]:
        """City autocomplete; short queries return no suggestions."""
        query = (query or "").strip()
        if len(query) < settings.SEARCH_MIN_QUERY_LENGTH:
            return []

        features = self._features(query, types="place", limit=limit, language=settings.GEOCODING_LANGUAGE)
        suggestions = []
        for feature in features:
            lng, lat = feature["center"]
            suggestions.append(CitySuggestion(
                place_name=feature["place_name"],
                text=feature.get("text", feature["place_name"]),
                lat=float(lat),
                lng=float(lng),
            ))
        return suggestions


def get_geocoder() -> Geocoder:
    """FastAPI dependency — overridden in tests with a fake geocoder."""
    return Geocoder(access_token=settings.MAPBOX_ACCESS_TOKEN)
