from enum import Enum

from sqlalchemy import Column, DateTime, Integer, Numeric, String

from paytrack.core.database import Base
from paytrack.models.shared import UUIDType, generate_uuid, utc_now


class PaymentStatus(str, Enum):
    """Billing state of a customer, mirrored onto its payments."""

    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    OVERDUE = "OVERDUE"


class Customer(Base):
    __tablename__ = "customers"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    # Stored lowercased; uniqueness is checked by the service before insert
    email = Column(String(255), nullable=False, index=True)
    phone = Column(String(20), nullable=True)
    outstanding_amount = Column(Numeric(12, 2), nullable=False, default=0)
    payment_due_date = Column(DateTime(timezone=True), nullable=False, index=True)
    payment_status = Column(
        String(20), nullable=False, default=PaymentStatus.PENDING.value, index=True
    )
    # Staff member who created the record; recipient of overdue notifications
    created_by = Column(UUIDType, nullable=True, index=True)
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)
