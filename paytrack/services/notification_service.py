"""Service for creating and reading in-app notifications."""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy.orm import Session

from paytrack.core.errors import NotFoundError
from paytrack.models.notification import Notification, NotificationType
from paytrack.models.payment import Payment
from paytrack.repositories.notification_repository import NotificationRepository
from paytrack.schemas.common import CountBucket
from paytrack.schemas.notification import (
    DATA_MODELS,
    CustomerAddedData,
    MarkAllReadResult,
    NotificationData,
    NotificationListData,
    PaymentOverdueData,
    PaymentReceivedData,
    to_notification_response,
)

logger = logging.getLogger(__name__)


class NotificationService:
    """Persists notifications addressed to staff users."""

    def __init__(self, db: Session):
        self.db = db
        self.repo = NotificationRepository(db)

    def notify(
        self,
        *,
        type: NotificationType,
        user_id: UUID,
        message: str,
        data: NotificationData,
    ) -> Notification:
        """Create an unread notification.

        Raises ValueError if ``data`` is not the payload variant for ``type``.
        """
        expected = DATA_MODELS[type]
        if not isinstance(data, expected):
            raise ValueError(f"{type.value} notifications require {expected.__name__} data")
        return self.repo.create(
            type=type,
            user_id=user_id,
            message=message,
            data=data.model_dump(mode="json", by_alias=True),
        )

    def notify_payment_received(
        self, *, user_id: UUID, payment: Payment, customer_name: str
    ) -> Notification:
        amount = float(payment.amount)
        return self.notify(
            type=NotificationType.PAYMENT_RECEIVED,
            user_id=user_id,
            message=f"Payment of ${amount:.2f} received from {customer_name}",
            data=PaymentReceivedData(
                payment_id=payment.id,
                customer_id=payment.customer_id,
                customer_name=customer_name,
                amount=amount,
                transaction_id=payment.transaction_id,
                payment_date=payment.payment_date,
            ),
        )

    def notify_payment_overdue(
        self,
        *,
        user_id: UUID,
        customer_id: UUID,
        customer_name: str,
        amount: Decimal | float,
        due_date: datetime,
    ) -> Notification:
        return self.notify(
            type=NotificationType.PAYMENT_OVERDUE,
            user_id=user_id,
            message=f"Payment for {customer_name} is overdue",
            data=PaymentOverdueData(
                customer_id=customer_id,
                customer_name=customer_name,
                amount=float(amount),
                due_date=due_date,
            ),
        )

    def notify_customer_added(
        self, *, user_id: UUID, customer_id: UUID, customer_name: str, email: str
    ) -> Notification:
        return self.notify(
            type=NotificationType.CUSTOMER_ADDED,
            user_id=user_id,
            message=f"New customer {customer_name} added",
            data=CustomerAddedData(
                customer_id=customer_id,
                customer_name=customer_name,
                email=email,
            ),
        )

    def list_notifications(
        self,
        user_id: UUID,
        page: int = 1,
        limit: int = 20,
        type: NotificationType | None = None,
        read: bool | None = None,
    ) -> NotificationListData:
        """Newest-first page of a user's notifications.

        ``total`` follows the filters; the unread count and type buckets always
        cover the user's full set.
        """
        skip = (page - 1) * limit
        notifications = self.repo.get_all(user_id, skip=skip, limit=limit, type=type, read=read)
        return NotificationListData(
            notifications=[to_notification_response(n) for n in notifications],
            total=self.repo.count(user_id, type=type, read=read),
            unread_count=self.repo.count_unread(user_id),
            type_counts=[
                CountBucket(key=key, doc_count=count)
                for key, count in self.repo.count_by_type(user_id)
            ],
            page=page,
            limit=limit,
        )

    def mark_read(self, notification_id: UUID) -> Notification:
        """Mark one notification read; marking it again is a no-op.

        Ownership is not checked against the caller.
        """
        notification = self.repo.mark_as_read(notification_id)
        if notification is None:
            raise NotFoundError("Notification")
        return notification

    def mark_all_read(self, user_id: UUID) -> MarkAllReadResult:
        matched, updated = self.repo.mark_all_as_read(user_id)
        logger.info("Marked %d of %d notifications read for user %s", updated, matched, user_id)
        return MarkAllReadResult(matched=matched, updated=updated)
