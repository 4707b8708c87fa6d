"""Pydantic schemas for payments."""

from decimal import Decimal
from uuid import UUID

from pydantic import Field

from paytrack.models.customer import PaymentStatus
from paytrack.models.payment import PaymentMethod
from paytrack.schemas.common import CamelModel, UtcDatetime


class PaymentProcessRequest(CamelModel):
    customer_id: UUID
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    payment_method: PaymentMethod
    notes: str | None = Field(default=None, max_length=1000)


class PaymentResponse(CamelModel):
    id: UUID
    customer_id: UUID
    amount: float
    payment_method: PaymentMethod
    notes: str | None
    status: PaymentStatus
    payment_date: UtcDatetime
    transaction_id: str
    created_at: UtcDatetime
    updated_at: UtcDatetime


class CustomerBalanceSummary(CamelModel):
    id: UUID
    outstanding_amount: float
    payment_status: PaymentStatus


class PaymentProcessResponse(CamelModel):
    payment: PaymentResponse
    customer: CustomerBalanceSummary


class PaymentStatusUpdate(CamelModel):
    status: PaymentStatus


class PaymentStatusResult(CamelModel):
    customer_id: UUID
    status: PaymentStatus


class OverdueCheckResult(CamelModel):
    overdue_count: int
    processed_customers: list[UUID]
