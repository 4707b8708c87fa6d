from collections.abc import Sequence
from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import ColumnElement, case
from sqlalchemy import func as sa_func
from sqlalchemy.orm import Query, Session

from paytrack.core.sorting import apply_order_by
from paytrack.models.customer import Customer, PaymentStatus
from paytrack.models.shared import utc_now
from paytrack.schemas.customer import CustomerCreate, CustomerUpdate

# Public sort names accepted by the search endpoint
SORT_ALIASES = {
    "name": "name",
    "email": "email",
    "paymentDueDate": "payment_due_date",
    "outstandingAmount": "outstanding_amount",
    "paymentStatus": "payment_status",
    "createdAt": "created_at",
}


class CustomerRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, customer_id: UUID) -> Customer | None:
        return self.db.query(Customer).filter(Customer.id == customer_id).first()

    def email_exists(self, email: str, exclude_id: UUID | None = None) -> bool:
        """Check if another customer already uses ``email``."""
        query = self.db.query(Customer).filter(Customer.email == email.lower())
        if exclude_id is not None:
            query = query.filter(Customer.id != exclude_id)
        return query.first() is not None

    def create(self, data: CustomerCreate, created_by: UUID | None = None) -> Customer:
        values = data.model_dump()
        values["email"] = values["email"].lower()
        values["payment_status"] = data.payment_status.value
        customer = Customer(**values, created_by=created_by)
        self.db.add(customer)
        self.db.commit()
        self.db.refresh(customer)
        return customer

    def update(self, customer_id: UUID, data: CustomerUpdate) -> Customer | None:
        customer = self.get_by_id(customer_id)
        if not customer:
            return None
        update_data = data.model_dump(exclude_unset=True)
        # Required columns are never cleared by a partial update
        update_data = {key: value for key, value in update_data.items() if value is not None or key == "phone"}
        if "email" in update_data:
            update_data["email"] = update_data["email"].lower()
        if "payment_status" in update_data:
            update_data["payment_status"] = PaymentStatus(update_data["payment_status"]).value
        for key, value in update_data.items():
            setattr(customer, key, value)
        customer.version = Customer.version + 1  # type: ignore[assignment]
        self.db.commit()
        self.db.refresh(customer)
        return customer

    def delete(self, customer_id: UUID) -> bool:
        customer = self.get_by_id(customer_id)
        if not customer:
            return False
        self.db.delete(customer)
        self.db.commit()
        return True

    def _filtered(self, filters: Sequence[ColumnElement[bool]]) -> Query:  # type: ignore[type-arg]
        query = self.db.query(Customer)
        for criterion in filters:
            query = query.filter(criterion)
        return query

    def search(
        self,
        filters: Sequence[ColumnElement[bool]],
        skip: int = 0,
        limit: int = 10,
        sort_field: str | None = None,
        sort_order: str | None = None,
    ) -> list[Customer]:
        query = apply_order_by(
            self._filtered(filters),
            Customer,
            sort_field,
            sort_order,
            aliases=SORT_ALIASES,
        )
        return query.offset(skip).limit(limit).all()

    def count(self, filters: Sequence[ColumnElement[bool]]) -> int:
        return self._filtered(filters).count()

    def aggregate(self, filters: Sequence[ColumnElement[bool]]) -> dict[str, Any]:
        """Status buckets and outstanding-amount totals over the filtered set."""
        status_rows = (
            self._filtered(filters)
            .with_entities(Customer.payment_status, sa_func.count(Customer.id))
            .group_by(Customer.payment_status)
            .order_by(sa_func.count(Customer.id).desc(), Customer.payment_status)
            .all()
        )
        overdue_expr = case(
            (Customer.payment_status == PaymentStatus.OVERDUE.value, Customer.outstanding_amount),
            else_=0,
        )
        total, average, overdue = (
            self._filtered(filters)
            .with_entities(
                sa_func.coalesce(sa_func.sum(Customer.outstanding_amount), 0),
                sa_func.coalesce(sa_func.avg(Customer.outstanding_amount), 0),
                sa_func.coalesce(sa_func.sum(overdue_expr), 0),
            )
            .one()
        )
        return {
            "status_counts": [(str(status), int(count)) for status, count in status_rows],
            "total_outstanding": float(total),
            "avg_outstanding": float(average),
            "overdue_amount": float(overdue),
        }

    def get_overdue_candidates(self, now: datetime) -> list[Customer]:
        """PENDING customers whose due date is strictly before ``now``."""
        return (
            self.db.query(Customer)
            .filter(
                Customer.payment_status == PaymentStatus.PENDING.value,
                Customer.payment_due_date < now,
            )
            .order_by(Customer.payment_due_date)
            .all()
        )

    def mark_overdue(self, customer_id: UUID, now: datetime) -> bool:
        """Flip a customer from PENDING to OVERDUE.

        Returns False when the row is no longer PENDING, so concurrent sweeps
        flip each record once.
        """
        updated = (
            self.db.query(Customer)
            .filter(
                Customer.id == customer_id,
                Customer.payment_status == PaymentStatus.PENDING.value,
            )
            .update(
                {
                    Customer.payment_status: PaymentStatus.OVERDUE.value,
                    Customer.updated_at: now,
                    Customer.version: Customer.version + 1,
                },
                synchronize_session=False,
            )
        )
        self.db.commit()
        return bool(updated)

    def apply_balance(
        self,
        customer_id: UUID,
        expected_version: int,
        outstanding_amount: Decimal,
        payment_status: PaymentStatus,
    ) -> bool:
        """Write a new balance if the customer is still at ``expected_version``.

        The session is committed either way so later reads see fresh rows.
        """
        updated = (
            self.db.query(Customer)
            .filter(Customer.id == customer_id, Customer.version == expected_version)
            .update(
                {
                    Customer.outstanding_amount: outstanding_amount,
                    Customer.payment_status: payment_status.value,
                    Customer.updated_at: utc_now(),
                    Customer.version: Customer.version + 1,
                },
                synchronize_session=False,
            )
        )
        self.db.commit()
        return bool(updated)

    def set_status(self, customer_id: UUID, status: PaymentStatus) -> Customer | None:
        customer = self.get_by_id(customer_id)
        if not customer:
            return None
        customer.payment_status = status.value  # type: ignore[assignment]
        customer.version = Customer.version + 1  # type: ignore[assignment]
        self.db.commit()
        self.db.refresh(customer)
        return customer
