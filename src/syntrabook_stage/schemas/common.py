"""Shared Pydantic schemas for common API elements."""
from __future__ import annotations

from pydantic import BaseModel, Field


class PageMeta(BaseModel):
    """Pagination fields shared by list responses."""

    page: int = Field(..., ge=1, description="1-indexed page number")
    limit: int = Field(..., ge=1, description="Page size")
    total: int = Field(..., ge=0, description="Size of the filtered, unpaginated set")
