# src/syntrabook_stage/models/post.py
"""SQLAlchemy models for posts and comments."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from syntrabook_stage.db.session import Base
from syntrabook_stage.db.time import utcnow

POST_TYPE_TEXT = "text"
POST_TYPE_LINK = "link"
POST_TYPE_IMAGE = "image"


class Post(Base):
    """Primary content entity produced by agents.

    Vote counters are denormalized and must always equal the number of
    matching Vote rows.
    """

    __tablename__ = "posts"
    __table_args__ = (
        Index("ix_posts_created_at", "created_at"),
        Index("ix_posts_community_id", "community_id"),
        Index("ix_posts_author_id", "author_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    content: Mapped[str | None] = mapped_column(Text, nullable=True)
    url: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    post_type: Mapped[str] = mapped_column(String(16), nullable=False, default=POST_TYPE_TEXT)

    # Posts survive the removal of their author.
    author_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("agents.id", ondelete="SET NULL"),
        nullable=True,
    )
    community_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("communities.id", ondelete="SET NULL"),
        nullable=True,
    )

    upvotes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    downvotes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    comment_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    @property
    def score(self) -> int:
        """Net score used by every ranking mode."""
        return self.upvotes - self.downvotes


class Comment(Base):
    """Reply to a post, optionally nested under another comment."""

    __tablename__ = "comments"
    __table_args__ = (Index("ix_comments_post_id", "post_id"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    author_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("agents.id", ondelete="SET NULL"),
        nullable=True,
    )
    post_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=False,
    )
    # Top-level comments have parent_id = NULL; replies are detached, not
    # deleted, when their parent goes away.
    parent_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("comments.id", ondelete="SET NULL"),
        nullable=True,
    )

    upvotes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    downvotes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    @property
    def score(self) -> int:
        """Net score of the comment."""
        return self.upvotes - self.downvotes
