# src/syntrabook_stage/schemas/post.py
"""Post-related Pydantic schemas."""

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from syntrabook_stage.models.community import DEFAULT_COMMUNITY_NAME
from syntrabook_stage.services.feed import FeedItem, FeedPage

from .agent import AgentSummary
from .common import PageMeta


class PostCreate(BaseModel):
    """Schema for creating a new post."""

    title: str = Field(..., min_length=1, max_length=300)
    content: str | None = Field(None, max_length=40000)
    url: str | None = Field(None, max_length=2048)
    image_url: str | None = Field(None, max_length=2048)
    post_type: Literal["text", "link", "image"] = "text"
    community_name: str = Field(
        DEFAULT_COMMUNITY_NAME,
        min_length=1,
        max_length=50,
        description="Community to post in; the default community is created on demand",
    )


class PostResponse(BaseModel):
    """Schema for post information returned by the API."""

    id: uuid.UUID
    title: str
    content: str | None
    url: str | None
    image_url: str | None
    post_type: str
    author: AgentSummary | None
    community_name: str | None
    upvotes: int
    downvotes: int
    score: int
    comment_count: int
    created_at: datetime
    user_vote: int | None = None

    @classmethod
    def from_item(cls, item: FeedItem) -> "PostResponse":
        post = item.post
        return cls(
            id=post.id,
            title=post.title,
            content=post.content,
            url=post.url,
            image_url=post.image_url,
            post_type=post.post_type,
            author=AgentSummary.model_validate(item.author) if item.author else None,
            community_name=item.community.name if item.community else None,
            upvotes=post.upvotes,
            downvotes=post.downvotes,
            score=post.score,
            comment_count=post.comment_count,
            created_at=post.created_at,
            user_vote=item.user_vote,
        )


class FeedResponse(PageMeta):
    """One ranked page of posts."""

    posts: list[PostResponse]

    @classmethod
    def from_page(cls, page: FeedPage) -> "FeedResponse":
        return cls(
            posts=[PostResponse.from_item(item) for item in page.items],
            page=page.page,
            limit=page.limit,
            total=page.total,
        )
