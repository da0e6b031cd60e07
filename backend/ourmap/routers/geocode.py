"""Geocoding API routes — address lookup, reverse lookup, city autocomplete.

All three proxy the external provider, so each client host is rate limited.
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, Request, status

from ourmap.config import settings
from ourmap.schemas.geocode import (
    AddressOut,
    CitySearchOut,
    CitySearchRequest,
    CoordinatesOut,
    GeocodeRequest,
    ReverseGeocodeRequest,
)
from ourmap.services.geocoding import Geocoder, GeocodingError, get_geocoder
from ourmap.services.ttl_store import MemoryTTLStore, RateLimiter

logger = logging.getLogger(__name__)
router = APIRouter()

_limiter = RateLimiter(
    MemoryTTLStore(),
    max_attempts=settings.GEOCODE_RATE_LIMIT,
    window_seconds=settings.GEOCODE_RATE_WINDOW_SEC,
    prefix="geocode",
)


def get_rate_limiter() -> RateLimiter:
    return _limiter


def enforce_rate_limit(request: Request, limiter: RateLimiter = Depends(get_rate_limiter)) -> None:
    client = request.client.host if request.client else "unknown"
    if not limiter.hit(client):
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many geocoding requests, try again later",
        )


def _provider_error(exc: GeocodingError) -> HTTPException:
    logger.error("Geocoding provider error: %s", exc)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


@router.post("/geocode", response_model=CoordinatesOut, dependencies=[Depends(enforce_rate_limit)])
def geocode(payload: GeocodeRequest, geocoder: Geocoder = Depends(get_geocoder)):
    if not payload.address.strip():
        raise HTTPException(status_code=400, detail="Address is required")
    try:
        return geocoder.geocode(payload.address)
    except GeocodingError as exc:
        raise _provider_error(exc)


@router.post("/reverse-geocode", response_model=AddressOut, dependencies=[Depends(enforce_rate_limit)])
def reverse_geocode(payload: ReverseGeocodeRequest, geocoder: Geocoder = Depends(get_geocoder)):
    try:
        return AddressOut(address=geocoder.reverse_geocode(payload.lat, payload.lng))
    except GeocodingError as exc:
        raise _provider_error(exc)


@router.post("/search-cities", response_model=CitySearchOut, dependencies=[Depends(enforce_rate_limit)])
def search_cities(payload: CitySearchRequest, geocoder: Geocoder = Depends(get_geocoder)):
    try:
        suggestions = geocoder.search_cities(payload.query)
    except GeocodingError as exc:
        raise _provider_error(exc)
    return {"suggestions": suggestions}
