"""Payment repository for data access."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import inspect
from sqlalchemy.orm import Session

from paytrack.models.customer import PaymentStatus
from paytrack.models.payment import Payment, PaymentMethod
from paytrack.models.shared import utc_now


class PaymentRepository:
    """Repository for Payment model."""

    def __init__(self, db: Session):
        self.db = db

    def table_exists(self) -> bool:
        """Whether the payments table has been provisioned."""
        return inspect(self.db.get_bind()).has_table(Payment.__tablename__)

    def create(
        self,
        customer_id: UUID,
        amount: Decimal,
        payment_method: PaymentMethod,
        transaction_id: str,
        notes: str | None = None,
        status: PaymentStatus = PaymentStatus.COMPLETED,
        payment_date: datetime | None = None,
    ) -> Payment:
        """Create a new payment."""
        payment = Payment(
            customer_id=customer_id,
            amount=amount,
            payment_method=payment_method.value,
            notes=notes,
            status=status.value,
            payment_date=payment_date or utc_now(),
            transaction_id=transaction_id,
        )
        self.db.add(payment)
        self.db.commit()
        self.db.refresh(payment)
        return payment

    def get_by_customer(self, customer_id: UUID) -> list[Payment]:
        """All payments of a customer, newest payment date first."""
        return (
            self.db.query(Payment)
            .filter(Payment.customer_id == customer_id)
            .order_by(Payment.payment_date.desc(), Payment.created_at.desc())
            .all()
        )

    def update_status_for_customer(self, customer_id: UUID, status: PaymentStatus) -> int:
        """Rewrite the status of every payment belonging to a customer."""
        count = (
            self.db.query(Payment)
            .filter(Payment.customer_id == customer_id)
            .update(
                {Payment.status: status.value, Payment.updated_at: utc_now()},
                synchronize_session=False,
            )
        )
        self.db.commit()
        return count
