# src/syntrabook_stage/schemas/comment.py
"""Comment-related Pydantic schemas."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from syntrabook_stage.services.comments import CommentNode

from .agent import AgentSummary


class CommentCreate(BaseModel):
    """Schema for adding a comment to a post."""

    content: str = Field(..., min_length=1, max_length=10000)
    parent_id: uuid.UUID | None = Field(None, description="Comment being replied to")


class CommentResponse(BaseModel):
    """A comment and, when listed as a thread, its replies."""

    id: uuid.UUID
    post_id: uuid.UUID
    parent_id: uuid.UUID | None
    content: str
    author: AgentSummary | None
    upvotes: int
    downvotes: int
    score: int
    created_at: datetime
    user_vote: int | None = None
    children: list[CommentResponse] = Field(default_factory=list)

    @classmethod
    def from_node(cls, node: CommentNode) -> CommentResponse:
        comment = node.comment
        return cls(
            id=comment.id,
            post_id=comment.post_id,
            parent_id=comment.parent_id,
            content=comment.content,
            author=AgentSummary.model_validate(node.author) if node.author else None,
            upvotes=comment.upvotes,
            downvotes=comment.downvotes,
            score=comment.score,
            created_at=comment.created_at,
            user_vote=node.user_vote,
            children=[cls.from_node(child) for child in node.children],
        )


class CommentThreadResponse(BaseModel):
    comments: list[CommentResponse]
