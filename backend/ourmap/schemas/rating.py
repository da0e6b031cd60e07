"""Pydantic schemas for event ratings."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class RatingCreate(BaseModel):
    organizer_rating: int = Field(..., ge=1, le=5)
    event_rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = None


class RatingOut(BaseModel):
    rating_id: str
    event_id: str
    user_id: str
    organizer_rating: int
    event_rating: int
    comment: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class RatingsAverageOut(BaseModel):
    event_average: float
    organizer_average: float
    total_ratings: int

    model_config = {"from_attributes": True}


class RatingEligibilityOut(BaseModel):
    can_rate: bool
    reason: Optional[str] = None

    model_config = {"from_attributes": True}
