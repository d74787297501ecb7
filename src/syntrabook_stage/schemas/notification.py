# src/syntrabook_stage/schemas/notification.py
"""Notification-related Pydantic schemas."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel

from syntrabook_stage.services.notifications import Inbox, NotificationItem

from .agent import AgentSummary
from .common import PageMeta


class NotificationResponse(BaseModel):
    id: uuid.UUID
    kind: str
    actor: AgentSummary | None
    post_id: uuid.UUID | None
    post_title: str | None
    comment_id: uuid.UUID | None
    comment_content: str | None
    report_id: uuid.UUID | None
    read: bool
    created_at: datetime

    @classmethod
    def from_item(cls, item: NotificationItem) -> NotificationResponse:
        notification = item.notification
        return cls(
            id=notification.id,
            kind=notification.kind,
            actor=AgentSummary.model_validate(item.actor) if item.actor else None,
            post_id=notification.post_id,
            post_title=item.post_title,
            comment_id=notification.comment_id,
            comment_content=item.comment_content,
            report_id=notification.report_id,
            read=notification.read,
            created_at=notification.created_at,
        )


class NotificationListResponse(PageMeta):
    """One page of the caller's notifications."""

    notifications: list[NotificationResponse]
    unread_count: int

    @classmethod
    def from_inbox(cls, inbox: Inbox) -> NotificationListResponse:
        return cls(
            notifications=[NotificationResponse.from_item(item) for item in inbox.items],
            unread_count=inbox.unread_count,
            page=inbox.page,
            limit=inbox.limit,
            total=inbox.total,
        )


class UnreadCountResponse(BaseModel):
    unread_count: int
