"""Customer API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, File, Query, UploadFile
from sqlalchemy.orm import Session

from paytrack.core.auth import CurrentUser, get_current_user
from paytrack.core.config import settings
from paytrack.core.database import get_db
from paytrack.core.errors import ValidationError
from paytrack.models.customer import PaymentStatus
from paytrack.schemas.common import CountBucket, Envelope, MessageEnvelope
from paytrack.schemas.customer import (
    CustomerAggregations,
    CustomerCreate,
    CustomerResponse,
    CustomerSearchFilters,
    CustomerSearchResponse,
    CustomerSort,
    CustomerUpdate,
    Pagination,
)
from paytrack.schemas.customer_import import CustomerImportResponse
from paytrack.services.customer_import_service import CustomerImportService
from paytrack.services.customer_search_service import CustomerSearchService
from paytrack.services.customer_service import CustomerService
from paytrack.services.event_publisher import EventPublisher, get_event_publisher
from paytrack.services.overdue_service import MaintenancePass, NoopMaintenancePass, OverdueService

router = APIRouter()


def get_maintenance_pass(
    db: Session = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher),
) -> MaintenancePass:
    if not settings.INLINE_OVERDUE_SWEEP:
        return NoopMaintenancePass()
    return OverdueService(db, publisher)


@router.get(
    "/search",
    response_model=CustomerSearchResponse,
    summary="Search customers",
    responses={400: {"description": "Invalid date bound"}},
)
async def search_customers(
    search_term: str | None = Query(default=None, alias="searchTerm"),
    payment_status: list[PaymentStatus] | None = Query(default=None, alias="paymentStatus"),
    due_date_start: str | None = Query(default=None, alias="dueDateStart"),
    due_date_end: str | None = Query(default=None, alias="dueDateEnd"),
    min_amount: str | None = Query(default=None, alias="minAmount"),
    max_amount: str | None = Query(default=None, alias="maxAmount"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1),
    sort_field: str | None = Query(default=None, alias="sortField"),
    sort_order: str | None = Query(default=None, alias="sortOrder"),
    db: Session = Depends(get_db),
    maintenance: MaintenancePass = Depends(get_maintenance_pass),
    current_user: CurrentUser = Depends(get_current_user),
) -> CustomerSearchResponse:
    """Search, filter, sort and page customers.

    Aggregates cover every matching customer, not only the returned page.
    """
    filters = CustomerSearchFilters(
        search_term=search_term,
        payment_status=payment_status or [],
        due_date_start=due_date_start,
        due_date_end=due_date_end,
        min_amount=min_amount,
        max_amount=max_amount,
    )
    result = await CustomerSearchService(db, maintenance).search(
        filters,
        page=page,
        limit=limit,
        sort=CustomerSort(sort_field=sort_field, sort_order=sort_order),
    )
    aggregations = result.aggregations
    return CustomerSearchResponse(
        data=[CustomerResponse.model_validate(c) for c in result.records],
        pagination=Pagination(
            page=result.page,
            limit=result.limit,
            total=result.total,
            total_pages=result.total_pages,
        ),
        aggregations=CustomerAggregations(
            status_counts=[
                CountBucket(key=key, doc_count=count)
                for key, count in aggregations["status_counts"]
            ],
            total_outstanding=aggregations["total_outstanding"],
            avg_outstanding=aggregations["avg_outstanding"],
            overdue_amount=aggregations["overdue_amount"],
        ),
        overdue_updates_applied=result.overdue_updates_applied,
    )


@router.post(
    "",
    response_model=Envelope[CustomerResponse],
    status_code=201,
    summary="Create a customer",
    responses={409: {"description": "Customer with this email already exists"}},
)
async def create_customer(
    data: CustomerCreate,
    db: Session = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher),
    current_user: CurrentUser = Depends(get_current_user),
) -> Envelope[CustomerResponse]:
    customer = await CustomerService(db, publisher).create(data, current_user.id)
    return Envelope(data=CustomerResponse.model_validate(customer))


@router.post(
    "/bulk-upload",
    response_model=CustomerImportResponse,
    summary="Import customers from a spreadsheet",
    responses={400: {"description": "Missing, oversized or unreadable spreadsheet"}},
)
async def bulk_upload(
    file: UploadFile | None = File(default=None),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> CustomerImportResponse:
    """Create one customer per spreadsheet row; bad rows are reported, not fatal."""
    if file is None:
        raise ValidationError("Please upload an Excel file")
    content = await file.read()
    service = CustomerImportService(CustomerService(db))
    return await service.import_file(file.filename, content, current_user.id)


@router.put(
    "/{customer_id}",
    response_model=Envelope[CustomerResponse],
    summary="Update a customer",
    responses={
        404: {"description": "Customer not found"},
        409: {"description": "Customer with this email already exists"},
    },
)
async def update_customer(
    customer_id: UUID,
    data: CustomerUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> Envelope[CustomerResponse]:
    customer = CustomerService(db).update(customer_id, data)
    return Envelope(data=CustomerResponse.model_validate(customer))


@router.delete(
    "/{customer_id}",
    response_model=MessageEnvelope,
    summary="Delete a customer",
    responses={404: {"description": "Customer not found"}},
)
async def delete_customer(
    customer_id: UUID,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> MessageEnvelope:
    CustomerService(db).delete(customer_id)
    return MessageEnvelope(message="Customer deleted successfully")
