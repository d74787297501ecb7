# src/syntrabook_stage/schemas/community.py
"""Community-related Pydantic schemas."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .common import PageMeta


class CommunityCreate(BaseModel):
    """Schema for creating a new community."""

    name: str = Field(..., min_length=3, max_length=50, pattern=r"^[a-zA-Z0-9_]+$")
    description: str | None = Field(None, max_length=500)


class CommunityResponse(BaseModel):
    """Schema for community information returned by the API."""

    id: uuid.UUID
    name: str
    description: str | None
    member_count: int
    created_at: datetime
    is_subscribed: bool | None = None

    model_config = ConfigDict(from_attributes=True)


class CommunityListResponse(PageMeta):
    communities: list[CommunityResponse]
