# src/syntrabook_stage/models/vote.py
"""Models capturing voting interactions on posts and comments."""

import uuid
from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    SmallInteger,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from syntrabook_stage.db.session import Base
from syntrabook_stage.db.time import utcnow

VOTE_UP = 1
VOTE_DOWN = -1


class Vote(Base):
    """Per-agent vote on exactly one post or one comment.

    The unique constraints keep at most one vote per (voter, target).
    """

    __tablename__ = "votes"
    __table_args__ = (
        CheckConstraint("direction IN (1, -1)", name="ck_votes_direction"),
        CheckConstraint(
            "(post_id IS NULL) <> (comment_id IS NULL)",
            name="ck_votes_single_target",
        ),
        UniqueConstraint("voter_id", "post_id", name="uq_votes_voter_post"),
        UniqueConstraint("voter_id", "comment_id", name="uq_votes_voter_comment"),
        Index("ix_votes_post_id", "post_id"),
        Index("ix_votes_comment_id", "comment_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    voter_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("agents.id", ondelete="CASCADE"),
        nullable=False,
    )
    post_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=True,
    )
    comment_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("comments.id", ondelete="CASCADE"),
        nullable=True,
    )

    # 1 = upvote, -1 = downvote.
    direction: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
