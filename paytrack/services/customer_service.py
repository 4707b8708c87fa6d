"""Customer record lifecycle: create, update and delete."""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy.orm import Session

from paytrack.core.errors import ConflictError, NotFoundError
from paytrack.models.customer import Customer
from paytrack.repositories.customer_repository import CustomerRepository
from paytrack.schemas.customer import CustomerCreate, CustomerUpdate
from paytrack.services.event_publisher import EventPublisher
from paytrack.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL_MESSAGE = "Customer with this email already exists"


class CustomerService:
    """Writes customer records.

    Email uniqueness is a check-then-insert against the store, so two
    concurrent creates with the same email can both succeed.
    """

    def __init__(self, db: Session, publisher: EventPublisher | None = None):
        self.db = db
        self.repo = CustomerRepository(db)
        self.notifications = NotificationService(db)
        self.publisher = publisher

    async def create(
        self,
        data: CustomerCreate,
        acting_user_id: UUID | None = None,
        *,
        notify: bool = True,
    ) -> Customer:
        if self.repo.email_exists(data.email):
            raise ConflictError(DUPLICATE_EMAIL_MESSAGE)

        customer = self.repo.create(data, created_by=acting_user_id)
        logger.info("Created customer %s (%s)", customer.id, customer.email)

        if notify:
            if acting_user_id is not None:
                self.notifications.notify_customer_added(
                    user_id=acting_user_id,
                    customer_id=customer.id,  # type: ignore[arg-type]
                    customer_name=customer.name,  # type: ignore[arg-type]
                    email=customer.email,  # type: ignore[arg-type]
                )
            if self.publisher is not None:
                await self.publisher.notify_new_customer(customer)
        return customer

    def update(self, customer_id: UUID, data: CustomerUpdate) -> Customer:
        if not self.repo.get_by_id(customer_id):
            raise NotFoundError("Customer")
        if data.email is not None and self.repo.email_exists(data.email, exclude_id=customer_id):
            raise ConflictError(DUPLICATE_EMAIL_MESSAGE)

        customer = self.repo.update(customer_id, data)
        if customer is None:
            raise NotFoundError("Customer")
        return customer

    def delete(self, customer_id: UUID) -> None:
        """Hard-delete a customer; its payments are left in place."""
        if not self.repo.delete(customer_id):
            raise NotFoundError("Customer")
        logger.info("Deleted customer %s", customer_id)
