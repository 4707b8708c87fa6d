"""Customer query engine: filters, sorting, paging and aggregates.

A maintenance pass (normally the overdue sweep) runs before every search so
that status filters and aggregates see up-to-date payment states.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from sqlalchemy import ColumnElement, and_, or_
from sqlalchemy import func as sa_func
from sqlalchemy.orm import Session

from paytrack.core.errors import ValidationError
from paytrack.models.customer import Customer
from paytrack.repositories.customer_repository import CustomerRepository
from paytrack.schemas.customer import CustomerSearchFilters, CustomerSort
from paytrack.services.overdue_service import MaintenancePass

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10


@dataclass
class CustomerSearchResult:
    records: list[Customer]
    total: int
    aggregations: dict[str, Any]
    page: int
    limit: int
    overdue_updates_applied: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def text_criterion(term: str) -> ColumnElement[bool]:
    """Match a search term against name, email and phone.

    Name matches when the name or any word in it starts with the term.
    Email and phone match when every whitespace-separated token of the term
    occurs in them. At least one of the three must match.
    """
    lowered = term.lower()
    escaped = _escape_like(lowered)
    name = sa_func.lower(Customer.name)
    name_match = or_(
        name.like(f"{escaped}%", escape="\\"),
        name.like(f"% {escaped}%", escape="\\"),
    )

    tokens = [_escape_like(token) for token in lowered.split()]
    email_match = and_(
        *[sa_func.lower(Customer.email).like(f"%{token}%", escape="\\") for token in tokens]
    )
    phone_match = and_(*[Customer.phone.like(f"%{token}%", escape="\\") for token in tokens])
    return or_(name_match, email_match, phone_match)


def parse_date_bound(value: str | None, field_name: str, *, end: bool = False) -> datetime | None:
    """Parse an ISO date or datetime bound; naive values are treated as UTC.

    A date-only upper bound covers the whole day.
    """
    if value is None or not value.strip():
        return None
    raw = value.strip()
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        raise ValidationError(
            f"Invalid {field_name}: expected an ISO 8601 date",
            details={"field": field_name, "value": value},
        ) from None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    else:
        parsed = parsed.astimezone(UTC)
    if end and len(raw) == 10:
        parsed = parsed + timedelta(days=1) - timedelta(microseconds=1)
    return parsed


def parse_amount_bound(value: str | None) -> float | None:
    """Return the bound as a float, or None when absent or not a finite number."""
    if value is None or not value.strip():
        return None
    try:
        amount = float(value)
    except ValueError:
        return None
    return amount if math.isfinite(amount) else None


class CustomerSearchService:
    def __init__(self, db: Session, maintenance: MaintenancePass):
        self.db = db
        self.repo = CustomerRepository(db)
        self.maintenance = maintenance

    def build_filters(self, filters: CustomerSearchFilters) -> list[ColumnElement[bool]]:
        criteria: list[ColumnElement[bool]] = []

        term = (filters.search_term or "").strip()
        if term:
            criteria.append(text_criterion(term))

        if filters.payment_status:
            criteria.append(
                Customer.payment_status.in_([status.value for status in filters.payment_status])
            )

        start = parse_date_bound(filters.due_date_start, "dueDateStart")
        end = parse_date_bound(filters.due_date_end, "dueDateEnd", end=True)
        if start is not None:
            criteria.append(Customer.payment_due_date >= start)
        if end is not None:
            criteria.append(Customer.payment_due_date <= end)

        min_amount = parse_amount_bound(filters.min_amount)
        max_amount = parse_amount_bound(filters.max_amount)
        if min_amount is not None:
            criteria.append(Customer.outstanding_amount >= min_amount)
        if max_amount is not None:
            criteria.append(Customer.outstanding_amount <= max_amount)

        return criteria

    async def search(
        self,
        filters: CustomerSearchFilters,
        page: int = DEFAULT_PAGE,
        limit: int = DEFAULT_LIMIT,
        sort: CustomerSort | None = None,
    ) -> CustomerSearchResult:
        overdue_updates = await self.maintenance.run()

        criteria = self.build_filters(filters)
        sort = sort or CustomerSort()
        records = self.repo.search(
            criteria,
            skip=(page - 1) * limit,
            limit=limit,
            sort_field=sort.sort_field,
            sort_order=sort.sort_order,
        )
        total = self.repo.count(criteria)
        aggregations = self.repo.aggregate(criteria)

        logger.debug(
            "Customer search matched %d records (page %d, limit %d)", total, page, limit
        )
        return CustomerSearchResult(
            records=records,
            total=total,
            aggregations=aggregations,
            page=page,
            limit=limit,
            overdue_updates_applied=overdue_updates,
        )
