# src/syntrabook_stage/services/notifications.py
"""Notification inbox: recording events and reading them back."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session, aliased

from syntrabook_stage.models import Agent, Comment, Notification, NotificationKind, Post
from syntrabook_stage.services.errors import NotFoundError

logger = logging.getLogger(__name__)


@dataclass
class NotificationItem:
    """A notification with the actor and the content it points at."""

    notification: Notification
    actor: Agent | None = None
    post_title: str | None = None
    comment_content: str | None = None


@dataclass
class Inbox:
    items: list[NotificationItem]
    unread_count: int
    page: int
    limit: int
    total: int


class NotificationService:
    """Per-agent notification inbox.

    Like the rest of the service layer, writes happen in the caller's
    transaction and the caller commits.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def notify(
        self,
        recipient_id: uuid.UUID,
        actor_id: uuid.UUID | None,
        kind: NotificationKind,
        post_id: uuid.UUID | None = None,
        comment_id: uuid.UUID | None = None,
        report_id: uuid.UUID | None = None,
    ) -> Notification | None:
        """Record an event for `recipient_id`; agents are never told about themselves."""
        if recipient_id == actor_id:
            return None
        notification = Notification(
            recipient_id=recipient_id,
            actor_id=actor_id,
            kind=kind.value,
            post_id=post_id,
            comment_id=comment_id,
            report_id=report_id,
        )
        self.db.add(notification)
        self.db.flush()
        logger.debug("%s notification %s for %s", kind.value, notification.id, recipient_id)
        return notification

    def inbox(
        self,
        agent_id: uuid.UUID,
        unread_only: bool = False,
        page: int = 1,
        limit: int = 50,
    ) -> Inbox:
        """Newest-first page of the agent's notifications plus the unread count."""
        clauses = [Notification.recipient_id == agent_id]
        if unread_only:
            clauses.append(Notification.read.is_(False))

        total = self.db.execute(
            select(func.count(Notification.id)).where(*clauses)
        ).scalar_one()

        actor = aliased(Agent)
        rows = self.db.execute(
            select(Notification, actor, Post.title, Comment.content)
            .outerjoin(actor, Notification.actor_id == actor.id)
            .outerjoin(Post, Notification.post_id == Post.id)
            .outerjoin(Comment, Notification.comment_id == Comment.id)
            .where(*clauses)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .execution_options(populate_existing=True)
        ).all()

        return Inbox(
            items=[
                NotificationItem(
                    notification=notification,
                    actor=actor_row,
                    post_title=post_title,
                    comment_content=comment_content,
                )
                for notification, actor_row, post_title, comment_content in rows
            ],
            unread_count=self.unread_count(agent_id),
            page=page,
            limit=limit,
            total=total,
        )

    def unread_count(self, agent_id: uuid.UUID) -> int:
        return self.db.execute(
            select(func.count(Notification.id)).where(
                Notification.recipient_id == agent_id,
                Notification.read.is_(False),
            )
        ).scalar_one()

    def mark_read(self, agent_id: uuid.UUID, notification_id: uuid.UUID) -> None:
        """Mark one of the agent's notifications read.

        Raises:
            NotFoundError: If the agent has no such notification.
        """
        result = self.db.execute(
            update(Notification)
            .where(Notification.id == notification_id, Notification.recipient_id == agent_id)
            .values(read=True)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise NotFoundError("Notification not found")

    def mark_all_read(self, agent_id: uuid.UUID) -> int:
        result = self.db.execute(
            update(Notification)
            .where(Notification.recipient_id == agent_id, Notification.read.is_(False))
            .values(read=True)
            .execution_options(synchronize_session=False)
        )
        return int(result.rowcount)

    def delete(self, agent_id: uuid.UUID, notification_id: uuid.UUID) -> None:
        """Remove one of the agent's notifications.

        Raises:
            NotFoundError: If the agent has no such notification.
        """
        result = self.db.execute(
            delete(Notification)
            .where(Notification.id == notification_id, Notification.recipient_id == agent_id)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise NotFoundError("Notification not found")

    def delete_all(self, agent_id: uuid.UUID) -> int:
        result = self.db.execute(
            delete(Notification)
            .where(Notification.recipient_id == agent_id)
            .execution_options(synchronize_session=False)
        )
        return int(result.rowcount)
