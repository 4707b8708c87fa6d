"""Repository for Notification CRUD operations."""

from __future__ import annotations

from typing import Any
from uuid import UUID

from sqlalchemy import func as sa_func
from sqlalchemy.orm import Query, Session

from paytrack.core.sorting import apply_order_by
from paytrack.models.notification import Notification, NotificationType
from paytrack.models.shared import generate_uuid


class NotificationRepository:
    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        *,
        type: NotificationType,
        user_id: UUID,
        message: str,
        data: dict[str, Any],
    ) -> Notification:
        notification = Notification(
            id=generate_uuid(),
            type=type.value,
            user_id=user_id,
            message=message,
            data=data,
            read=False,
        )
        self.db.add(notification)
        self.db.commit()
        self.db.refresh(notification)
        return notification

    def get_by_id(self, notification_id: UUID) -> Notification | None:
        return (
            self.db.query(Notification)
            .filter(Notification.id == notification_id)
            .first()
        )

    def _for_user(
        self,
        user_id: UUID,
        type: NotificationType | None = None,
        read: bool | None = None,
    ) -> Query[Notification]:
        query = self.db.query(Notification).filter(Notification.user_id == user_id)
        if type is not None:
            query = query.filter(Notification.type == type.value)
        if read is not None:
            query = query.filter(Notification.read == read)
        return query

    def get_all(
        self,
        user_id: UUID,
        skip: int = 0,
        limit: int = 20,
        type: NotificationType | None = None,
        read: bool | None = None,
    ) -> list[Notification]:
        query = apply_order_by(self._for_user(user_id, type, read), Notification, None)
        return query.offset(skip).limit(limit).all()

    def count(
        self,
        user_id: UUID,
        type: NotificationType | None = None,
        read: bool | None = None,
    ) -> int:
        return self._for_user(user_id, type, read).count()

    def count_unread(self, user_id: UUID) -> int:
        return self._for_user(user_id, read=False).count()

    def count_by_type(self, user_id: UUID) -> list[tuple[str, int]]:
        rows = (
            self._for_user(user_id)
            .with_entities(Notification.type, sa_func.count(Notification.id))
            .group_by(Notification.type)
            .order_by(sa_func.count(Notification.id).desc(), Notification.type)
            .all()
        )
        return [(str(type_), int(count)) for type_, count in rows]

    def mark_as_read(self, notification_id: UUID) -> Notification | None:
        notification = self.get_by_id(notification_id)
        if notification is None:
            return None
        notification.read = True  # type: ignore[assignment]
        self.db.commit()
        self.db.refresh(notification)
        return notification

    def mark_all_as_read(self, user_id: UUID) -> tuple[int, int]:
        """Mark every unread notification of a user read; returns (matched, updated)."""
        unread = self._for_user(user_id, read=False)
        matched = unread.count()
        updated = unread.update({Notification.read: True}, synchronize_session=False)
        self.db.commit()
        return matched, updated
