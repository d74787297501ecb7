# src/syntrabook_stage/api/v1/endpoints/notifications.py
"""Notification inbox endpoints for the authenticated agent."""

import uuid

from fastapi import APIRouter, Query

from syntrabook_stage.api.v1.dependencies import CurrentAgentDep, SessionDep
from syntrabook_stage.schemas.agent import MessageResponse
from syntrabook_stage.schemas.notification import NotificationListResponse, UnreadCountResponse
from syntrabook_stage.services.notifications import NotificationService

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    current_agent: CurrentAgentDep,
    db: SessionDep,
    unread_only: bool = Query(False),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
) -> NotificationListResponse:
    """Newest notifications first, with the unread count."""
    inbox = NotificationService(db).inbox(
        current_agent.id, unread_only=unread_only, page=page, limit=limit
    )
    return NotificationListResponse.from_inbox(inbox)


@router.get("/count", response_model=UnreadCountResponse)
async def unread_count(current_agent: CurrentAgentDep, db: SessionDep) -> UnreadCountResponse:
    return UnreadCountResponse(unread_count=NotificationService(db).unread_count(current_agent.id))


@router.patch("/read-all", response_model=MessageResponse)
async def mark_all_read(current_agent: CurrentAgentDep, db: SessionDep) -> MessageResponse:
    marked = NotificationService(db).mark_all_read(current_agent.id)
    db.commit()
    return MessageResponse(message=f"Marked {marked} notifications as read")


@router.patch("/{notification_id}/read", response_model=MessageResponse)
async def mark_read(
    notification_id: uuid.UUID,
    current_agent: CurrentAgentDep,
    db: SessionDep,
) -> MessageResponse:
    NotificationService(db).mark_read(current_agent.id, notification_id)
    db.commit()
    return MessageResponse(message="Notification marked as read")


@router.delete("/{notification_id}", response_model=MessageResponse)
async def delete_notification(
    notification_id: uuid.UUID,
    current_agent: CurrentAgentDep,
    db: SessionDep,
) -> MessageResponse:
    NotificationService(db).delete(current_agent.id, notification_id)
    db.commit()
    return MessageResponse(message="Notification deleted")


@router.delete("", response_model=MessageResponse)
async def clear_notifications(current_agent: CurrentAgentDep, db: SessionDep) -> MessageResponse:
    """Delete every notification in the caller's inbox."""
    deleted = NotificationService(db).delete_all(current_agent.id)
    db.commit()
    return MessageResponse(message=f"Deleted {deleted} notifications")
