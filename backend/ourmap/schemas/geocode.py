"""Pydantic schemas for the geocoding endpoints."""
from __future__ import annotations
from pydantic import BaseModel, Field


class GeocodeRequest(BaseModel):
    address: str


class CoordinatesOut(BaseModel):
    lat: float
    lng: float

    model_config = {"from_attributes": True}


class ReverseGeocodeRequest(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class AddressOut(BaseModel):
    address: str


class CitySearchRequest(BaseModel):
    query: str


class CitySuggestionOut(BaseModel):
    place_name: str
    text: str
    lat: float
    lng: float

    model_config = {"from_attributes": True}


class CitySearchOut(BaseModel):
    suggestions: list[CitySuggestionOut]
