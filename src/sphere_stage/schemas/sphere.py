# src/sphere_stage/schemas/sphere.py
"""Sphere-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class SphereCreate(BaseModel):
    """Schema for creating a new sphere."""

    slug: str = Field(..., min_length=3, max_length=42, pattern=r"^[a-z0-9_-]+$")
    display_name: str = Field(..., min_length=1, max_length=100)
    description_md: str | None = None


class SphereResponse(BaseModel):
    """Schema for sphere information returned by the API."""

    id: int
    slug: str
    display_name: str
    description_md: str | None
    creator_id: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SatelliteCreate(BaseModel):
    """Schema for adding a satellite to a sphere."""

    title: str = Field(..., min_length=1, max_length=100)


class SatelliteResponse(BaseModel):
    """Schema for satellite information returned by the API."""

    id: int
    sphere_id: int
    title: str

    model_config = ConfigDict(from_attributes=True)
