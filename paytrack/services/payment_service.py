"""Payment workflow: record a payment, settle the balance, notify.

The steps are separate store writes with no rollback: a payment recorded
against a missing customer stays recorded.
"""

from __future__ import annotations

import logging
import secrets
import string
import time
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

from sqlalchemy.orm import Session

from paytrack.core.errors import ConflictError, NotFoundError, ServerError
from paytrack.models.customer import Customer, PaymentStatus
from paytrack.models.payment import Payment, PaymentMethod
from paytrack.repositories.customer_repository import CustomerRepository
from paytrack.repositories.payment_repository import PaymentRepository
from paytrack.services.event_publisher import EventPublisher
from paytrack.services.notification_service import NotificationService
from paytrack.services.overdue_service import OverdueService, OverdueSweepResult

logger = logging.getLogger(__name__)

MAX_BALANCE_ATTEMPTS = 3
CENT = Decimal("0.01")
_BASE36 = string.digits + string.ascii_lowercase


def generate_transaction_id() -> str:
    """``TXN`` + epoch milliseconds + 9 random base-36 characters."""
    suffix = "".join(secrets.choice(_BASE36) for _ in range(9))
    return f"TXN{int(time.time() * 1000)}{suffix}"


def settle_balance(outstanding: Decimal, amount: Decimal) -> tuple[Decimal, PaymentStatus]:
    """New outstanding amount and status after a payment.

    The balance never goes negative. Any remaining balance means PENDING,
    including for a customer that was OVERDUE.
    """
    remaining = max(Decimal("0"), outstanding - amount)
    status = PaymentStatus.COMPLETED if remaining == 0 else PaymentStatus.PENDING
    return remaining, status


@dataclass
class PaymentOutcome:
    payment: Payment
    customer_id: UUID
    outstanding_amount: Decimal
    payment_status: PaymentStatus


class PaymentService:
    def __init__(self, db: Session, publisher: EventPublisher):
        self.db = db
        self.payment_repo = PaymentRepository(db)
        self.customer_repo = CustomerRepository(db)
        self.notifications = NotificationService(db)
        self.publisher = publisher

    async def process_payment(
        self,
        customer_id: UUID,
        amount: Decimal | float,
        payment_method: PaymentMethod,
        acting_user_id: UUID,
        notes: str | None = None,
    ) -> PaymentOutcome:
        if not self.payment_repo.table_exists():
            raise ServerError("Payments collection not initialized. Please contact administrator.")

        # Stored amounts carry two decimal places; settle on the stored value
        amount_dec = Decimal(str(amount)).quantize(CENT, rounding=ROUND_HALF_UP)
        payment = self.payment_repo.create(
            customer_id=customer_id,
            amount=amount_dec,
            payment_method=payment_method,
            transaction_id=generate_transaction_id(),
            notes=notes,
        )

        customer, remaining, status = self._apply_payment(customer_id, amount_dec)
        customer_name: str = customer.name  # type: ignore[assignment]

        self.notifications.notify_payment_received(
            user_id=acting_user_id, payment=payment, customer_name=customer_name
        )
        await self.publisher.notify_payment_received(payment, customer_name)

        logger.info(
            "Processed payment %s of %.2f for customer %s (remaining %.2f, %s)",
            payment.transaction_id,
            amount_dec,
            customer_id,
            remaining,
            status.value,
        )
        return PaymentOutcome(
            payment=payment,
            customer_id=customer_id,
            outstanding_amount=remaining,
            payment_status=status,
        )

    def _apply_payment(
        self, customer_id: UUID, amount: Decimal
    ) -> tuple[Customer, Decimal, PaymentStatus]:
        """Read-compute-write the balance, retrying when another writer got there first."""
        for attempt in range(1, MAX_BALANCE_ATTEMPTS + 1):
            customer = self.customer_repo.get_by_id(customer_id)
            if customer is None:
                raise NotFoundError("Customer")

            remaining, status = settle_balance(Decimal(customer.outstanding_amount), amount)
            if self.customer_repo.apply_balance(
                customer_id, customer.version, remaining, status  # type: ignore[arg-type]
            ):
                return customer, remaining, status
            logger.warning(
                "Balance update for customer %s lost a race (attempt %d/%d)",
                customer_id,
                attempt,
                MAX_BALANCE_ATTEMPTS,
            )

        raise ConflictError(
            "Customer balance changed concurrently, please retry",
            details={"customerId": str(customer_id)},
        )

    def get_payment_history(self, customer_id: UUID) -> list[Payment]:
        return self.payment_repo.get_by_customer(customer_id)

    async def update_payment_status(
        self, customer_id: UUID, status: PaymentStatus
    ) -> tuple[UUID, PaymentStatus]:
        """Administrative override of a customer's status and all its payments."""
        if self.customer_repo.set_status(customer_id, status) is None:
            raise NotFoundError("Customer")
        count = self.payment_repo.update_status_for_customer(customer_id, status)
        await self.publisher.notify_payment_update(customer_id, status)
        logger.info(
            "Set status %s on customer %s and %d payments", status.value, customer_id, count
        )
        return customer_id, status

    async def check_overdue_payments(self) -> OverdueSweepResult:
        return await OverdueService(self.db, self.publisher).sweep(create_notifications=True)
