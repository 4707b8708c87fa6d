"""Pydantic schemas for notifications.

The ``data`` payload is a closed union keyed by notification type; each
variant has a fixed field set.
"""

from typing import Annotated, Any, Literal
from uuid import UUID

from pydantic import Field, TypeAdapter

from paytrack.models.notification import Notification, NotificationType
from paytrack.schemas.common import CamelModel, CountBucket, UtcDatetime


class PaymentReceivedData(CamelModel):
    payment_id: UUID
    customer_id: UUID
    customer_name: str
    amount: float
    transaction_id: str
    payment_date: UtcDatetime


class PaymentOverdueData(CamelModel):
    customer_id: UUID
    customer_name: str
    amount: float
    due_date: UtcDatetime


class CustomerAddedData(CamelModel):
    customer_id: UUID
    customer_name: str
    email: str


NotificationData = PaymentReceivedData | PaymentOverdueData | CustomerAddedData

DATA_MODELS: dict[NotificationType, type[CamelModel]] = {
    NotificationType.PAYMENT_RECEIVED: PaymentReceivedData,
    NotificationType.PAYMENT_OVERDUE: PaymentOverdueData,
    NotificationType.CUSTOMER_ADDED: CustomerAddedData,
}


class _NotificationBase(CamelModel):
    id: UUID
    message: str
    user_id: UUID
    read: bool
    created_at: UtcDatetime


class PaymentReceivedNotification(_NotificationBase):
    type: Literal["PAYMENT_RECEIVED"]
    data: PaymentReceivedData


class PaymentOverdueNotification(_NotificationBase):
    type: Literal["PAYMENT_OVERDUE"]
    data: PaymentOverdueData


class CustomerAddedNotification(_NotificationBase):
    type: Literal["CUSTOMER_ADDED"]
    data: CustomerAddedData


NotificationResponse = Annotated[
    PaymentReceivedNotification | PaymentOverdueNotification | CustomerAddedNotification,
    Field(discriminator="type"),
]

notification_adapter: TypeAdapter[Any] = TypeAdapter(NotificationResponse)


def to_notification_response(notification: Notification) -> Any:
    """Validate a stored notification into its typed response variant."""
    return notification_adapter.validate_python(
        {
            "id": notification.id,
            "type": notification.type,
            "message": notification.message,
            "user_id": notification.user_id,
            "read": notification.read,
            "data": notification.data,
            "created_at": notification.created_at,
        }
    )


class NotificationListData(CamelModel):
    notifications: list[NotificationResponse]
    total: int
    unread_count: int
    type_counts: list[CountBucket]
    page: int
    limit: int


class MarkAllReadResult(CamelModel):
    matched: int
    updated: int


class NotificationEnvelope(CamelModel):
    success: bool = True
    data: NotificationResponse
    message: str | None = None
