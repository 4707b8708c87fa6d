"""Payment model for recorded customer payments."""

from enum import Enum

from sqlalchemy import Column, DateTime, Numeric, String, Text

from paytrack.core.database import Base
from paytrack.models.customer import PaymentStatus
from paytrack.models.shared import UUIDType, generate_uuid, utc_now


class PaymentMethod(str, Enum):
    """Accepted payment methods."""

    CREDIT_CARD = "CREDIT_CARD"
    BANK_TRANSFER = "BANK_TRANSFER"
    CASH = "CASH"


class Payment(Base):
    """Payment model - one row per processed payment."""

    __tablename__ = "payments"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    # Weak reference: deleting a customer leaves its payments in place
    customer_id = Column(UUIDType, nullable=False, index=True)

    amount = Column(Numeric(12, 2), nullable=False)
    payment_method = Column(String(20), nullable=False)
    notes = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default=PaymentStatus.COMPLETED.value)
    payment_date = Column(DateTime(timezone=True), nullable=False, default=utc_now, index=True)
    transaction_id = Column(String(64), nullable=False, unique=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)
