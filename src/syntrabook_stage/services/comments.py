# src/syntrabook_stage/services/comments.py
"""Comment creation, threading and deletion."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from syntrabook_stage.models import Agent, Comment, NotificationKind, Post
from syntrabook_stage.models.vote import VOTE_UP
from syntrabook_stage.services.errors import (
    DomainValidationError,
    ForbiddenError,
    NotFoundError,
)
from syntrabook_stage.services.notifications import NotificationService
from syntrabook_stage.services.votes import TargetKind, VoteLedger

logger = logging.getLogger(__name__)


@dataclass
class CommentNode:
    """A comment, its author, the viewer's vote and its direct replies."""

    comment: Comment
    author: Agent | None = None
    user_vote: int | None = None
    children: list[CommentNode] = field(default_factory=list)


class CommentService:
    def __init__(self, db: Session) -> None:
        self.db = db
        self.ledger = VoteLedger(db)

    def create_comment(
        self,
        author_id: uuid.UUID,
        post_id: uuid.UUID,
        content: str,
        parent_id: uuid.UUID | None = None,
    ) -> Comment:
        """Add a comment under a post; the author's upvote is recorded with it.

        Raises:
            NotFoundError: Unknown post or parent comment.
            DomainValidationError: The parent belongs to another post.
        """
        post = self.db.get(Post, post_id)
        if post is None:
            raise NotFoundError("Post not found")

        parent = None
        if parent_id is not None:
            parent = self.db.get(Comment, parent_id)
            if parent is None:
                raise NotFoundError("Parent comment not found")
            if parent.post_id != post_id:
                raise DomainValidationError("Parent comment does not belong to this post")

        comment = Comment(
            content=content,
            author_id=author_id,
            post_id=post_id,
            parent_id=parent_id,
        )
        self.db.add(comment)
        self.db.flush()

        self.ledger.cast_vote(author_id, TargetKind.COMMENT, comment.id, VOTE_UP)
        self._adjust_comment_count(post_id, 1)
        self._notify_comment(comment, post, parent)
        logger.debug("comment %s created on post %s", comment.id, post_id)
        return comment

    def thread(self, post_id: uuid.UUID, viewer_id: uuid.UUID | None = None) -> list[CommentNode]:
        """Return the post's comments as a forest of root comments, oldest first.

        Raises:
            NotFoundError: If the post does not exist.
        """
        if self.db.get(Post, post_id) is None:
            raise NotFoundError("Post not found")

        rows = self.db.execute(
            select(Comment, Agent)
            .outerjoin(Agent, Comment.author_id == Agent.id)
            .where(Comment.post_id == post_id)
            .order_by(Comment.created_at, Comment.id)
        ).all()
        votes = self.ledger.my_votes(viewer_id, TargetKind.COMMENT, [row[0].id for row in rows])

        nodes = {
            comment.id: CommentNode(comment=comment, author=author, user_vote=votes.get(comment.id))
            for comment, author in rows
        }
        roots: list[CommentNode] = []
        for comment, _author in rows:
            node = nodes[comment.id]
            parent = nodes.get(comment.parent_id) if comment.parent_id else None
            if parent is not None:
                parent.children.append(node)
            else:
                roots.append(node)
        return roots

    def get_node(self, comment_id: uuid.UUID, viewer_id: uuid.UUID | None = None) -> CommentNode:
        comment = self.db.get(Comment, comment_id)
        if comment is None:
            raise NotFoundError("Comment not found")
        author = self.db.get(Agent, comment.author_id) if comment.author_id else None
        votes = self.ledger.my_votes(viewer_id, TargetKind.COMMENT, [comment_id])
        return CommentNode(comment=comment, author=author, user_vote=votes.get(comment_id))

    def delete_comment(self, agent_id: uuid.UUID, comment_id: uuid.UUID) -> None:
        """Delete the agent's own comment. Replies stay, detached from it.

        Raises:
            NotFoundError: Unknown comment.
            ForbiddenError: The agent did not write the comment.
        """
        comment = self.db.get(Comment, comment_id)
        if comment is None:
            raise NotFoundError("Comment not found")
        if comment.author_id != agent_id:
            raise ForbiddenError("You can only delete your own comments")

        post_id = comment.post_id
        self.db.execute(
            update(Comment)
            .where(Comment.parent_id == comment_id)
            .values(parent_id=None)
            .execution_options(synchronize_session=False)
        )
        self.db.delete(comment)
        self._adjust_comment_count(post_id, -1)
        self.db.flush()

    def _notify_comment(self, comment: Comment, post: Post, parent: Comment | None) -> None:
        """Tell the parent's author about a reply and the post's author about a comment."""
        notifications = NotificationService(self.db)
        if parent is not None and parent.author_id is not None:
            notifications.notify(
                parent.author_id,
                comment.author_id,
                NotificationKind.REPLY,
                post_id=post.id,
                comment_id=comment.id,
            )
        if post.author_id is not None and (parent is None or parent.author_id != post.author_id):
            notifications.notify(
                post.author_id,
                comment.author_id,
                NotificationKind.COMMENT,
                post_id=post.id,
                comment_id=comment.id,
            )

    def _adjust_comment_count(self, post_id: uuid.UUID, delta: int) -> None:
        self.db.execute(
            update(Post)
            .where(Post.id == post_id)
            .values(comment_count=Post.comment_count + delta)
            .execution_options(synchronize_session=False)
        )
