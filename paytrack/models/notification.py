"""Notification model for in-app notifications."""

from enum import Enum

from sqlalchemy import JSON, Boolean, Column, DateTime, String

from paytrack.core.database import Base
from paytrack.models.shared import UUIDType, generate_uuid, utc_now


class NotificationType(str, Enum):
    PAYMENT_RECEIVED = "PAYMENT_RECEIVED"
    PAYMENT_OVERDUE = "PAYMENT_OVERDUE"
    CUSTOMER_ADDED = "CUSTOMER_ADDED"


class Notification(Base):
    """Notification model - stores in-app notifications for staff users."""

    __tablename__ = "notifications"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    type = Column(String(50), nullable=False, index=True)
    message = Column(String(1000), nullable=False)
    # Recipient; weak reference to users.id
    user_id = Column(UUIDType, nullable=False, index=True)
    read = Column(Boolean, nullable=False, default=False, index=True)
    data = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
