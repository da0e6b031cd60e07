"""Pydantic schemas for Categories."""
from __future__ import annotations
from typing import Optional
from pydantic import BaseModel, Field


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    value: str = Field(..., min_length=1, max_length=100)
    parent_value: Optional[str] = None
    icon: Optional[str] = None
    display_order: int = 0


class CategoryOut(BaseModel):
    category_id: str
    name: str
    value: str
    icon: Optional[str] = None
    parent_id: Optional[str] = None
    display_order: int

    model_config = {"from_attributes": True}
