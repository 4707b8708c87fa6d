"""Overdue detection: the one place that flips PENDING customers to OVERDUE.

The customer search runs it inline through the ``MaintenancePass`` protocol,
and the worker runs it hourly with notifications enabled.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Protocol
from uuid import UUID

from sqlalchemy.orm import Session

from paytrack.models.customer import PaymentStatus
from paytrack.models.shared import utc_now
from paytrack.repositories.customer_repository import CustomerRepository
from paytrack.services.event_publisher import EventPublisher
from paytrack.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


class MaintenancePass(Protocol):
    """Work the customer search performs before querying."""

    async def run(self) -> int:
        """Run the pass and return the number of records it changed."""
        ...


class NoopMaintenancePass:
    async def run(self) -> int:
        return 0


@dataclass
class OverdueSweepResult:
    overdue_count: int = 0
    processed_customers: list[UUID] = field(default_factory=list)


@dataclass(frozen=True)
class _Candidate:
    id: UUID
    name: str
    outstanding_amount: Decimal
    payment_due_date: datetime
    created_by: UUID | None


class OverdueService:
    """Marks PENDING customers past their due date as OVERDUE.

    Each record is flipped with a conditional write, so a record already
    flipped by a concurrent sweep produces no second set of events.
    """

    def __init__(self, db: Session, publisher: EventPublisher):
        self.db = db
        self.customer_repo = CustomerRepository(db)
        self.notifications = NotificationService(db)
        self.publisher = publisher

    async def sweep(self, *, create_notifications: bool = False) -> OverdueSweepResult:
        now = utc_now()
        candidates = [
            _Candidate(
                id=c.id,  # type: ignore[arg-type]
                name=c.name,  # type: ignore[arg-type]
                outstanding_amount=c.outstanding_amount,  # type: ignore[arg-type]
                payment_due_date=c.payment_due_date,  # type: ignore[arg-type]
                created_by=c.created_by,  # type: ignore[arg-type]
            )
            for c in self.customer_repo.get_overdue_candidates(now)
        ]

        result = OverdueSweepResult()
        for candidate in candidates:
            if not self.customer_repo.mark_overdue(candidate.id, now):
                continue
            result.processed_customers.append(candidate.id)

            if create_notifications:
                self._persist_notification(candidate)

            await self.publisher.notify_payment_overdue(
                customer_id=candidate.id,
                customer_name=candidate.name,
                amount=float(candidate.outstanding_amount),
                due_date=candidate.payment_due_date,
            )
            await self.publisher.notify_payment_update(candidate.id, PaymentStatus.OVERDUE)

        result.overdue_count = len(result.processed_customers)
        if result.overdue_count:
            logger.info("Marked %d customers as overdue", result.overdue_count)
        return result

    async def run(self) -> int:
        result = await self.sweep()
        return result.overdue_count

    def _persist_notification(self, candidate: _Candidate) -> None:
        if candidate.created_by is None:
            logger.warning(
                "Customer %s has no owning user; skipping overdue notification", candidate.id
            )
            return
        self.notifications.notify_payment_overdue(
            user_id=candidate.created_by,
            customer_id=candidate.id,
            customer_name=candidate.name,
            amount=candidate.outstanding_amount,
            due_date=candidate.payment_due_date,
        )
