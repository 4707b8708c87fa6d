from decimal import Decimal
from uuid import UUID

from pydantic import EmailStr, Field, field_validator

from paytrack.models.customer import PaymentStatus
from paytrack.schemas.common import CamelModel, CountBucket, UtcDatetime

PHONE_PATTERN = r"^\d{10}$"


class CustomerCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    phone: str | None = Field(default=None, pattern=PHONE_PATTERN)
    outstanding_amount: Decimal = Field(..., ge=0, decimal_places=2)
    payment_due_date: UtcDatetime
    payment_status: PaymentStatus = PaymentStatus.PENDING

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Name is required")
        return value

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value: str) -> str:
        return value.strip().lower()


class CustomerUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, pattern=PHONE_PATTERN)
    outstanding_amount: Decimal | None = Field(default=None, ge=0, decimal_places=2)
    payment_due_date: UtcDatetime | None = None
    payment_status: PaymentStatus | None = None

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value: str | None) -> str | None:
        return value.strip().lower() if value is not None else None


class CustomerResponse(CamelModel):
    id: UUID
    name: str
    email: str
    phone: str | None
    outstanding_amount: float
    payment_due_date: UtcDatetime
    payment_status: PaymentStatus
    created_by: UUID | None = None
    created_at: UtcDatetime
    updated_at: UtcDatetime


class CustomerSearchFilters(CamelModel):
    """Search criteria as received from the query string.

    Date and amount bounds stay raw strings; the search service decides how
    to parse them.
    """

    search_term: str | None = None
    payment_status: list[PaymentStatus] = Field(default_factory=list)
    due_date_start: str | None = None
    due_date_end: str | None = None
    min_amount: str | None = None
    max_amount: str | None = None


class CustomerSort(CamelModel):
    sort_field: str | None = None
    sort_order: str | None = None


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int


class CustomerAggregations(CamelModel):
    status_counts: list[CountBucket]
    total_outstanding: float
    avg_outstanding: float
    overdue_amount: float


class CustomerSearchResponse(CamelModel):
    success: bool = True
    data: list[CustomerResponse]
    pagination: Pagination
    aggregations: CustomerAggregations
    overdue_updates_applied: int
