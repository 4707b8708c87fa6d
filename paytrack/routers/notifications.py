"""Notification API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from paytrack.core.auth import CurrentUser, get_current_user
from paytrack.core.database import get_db
from paytrack.models.notification import NotificationType
from paytrack.schemas.common import Envelope
from paytrack.schemas.notification import (
    MarkAllReadResult,
    NotificationEnvelope,
    NotificationListData,
    to_notification_response,
)
from paytrack.services.notification_service import NotificationService

router = APIRouter()


@router.get(
    "",
    response_model=Envelope[NotificationListData],
    summary="List notifications",
)
async def list_notifications(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1),
    type: NotificationType | None = None,
    read: bool | None = None,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> Envelope[NotificationListData]:
    """List the caller's notifications, newest first."""
    data = NotificationService(db).list_notifications(
        current_user.id, page=page, limit=limit, type=type, read=read
    )
    return Envelope(data=data)


@router.put(
    "/mark-all-read",
    response_model=Envelope[MarkAllReadResult],
    summary="Mark all notifications as read",
)
async def mark_all_read(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> Envelope[MarkAllReadResult]:
    result = NotificationService(db).mark_all_read(current_user.id)
    return Envelope(data=result, message="All notifications marked as read")


@router.put(
    "/{notification_id}/read",
    response_model=NotificationEnvelope,
    summary="Mark a notification as read",
    responses={404: {"description": "Notification not found"}},
)
async def mark_as_read(
    notification_id: UUID,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> NotificationEnvelope:
    notification = NotificationService(db).mark_read(notification_id)
    return NotificationEnvelope(data=to_notification_response(notification))
