"""Payment API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from paytrack.core.auth import CurrentUser, get_current_user
from paytrack.core.database import get_db
from paytrack.schemas.common import Envelope
from paytrack.schemas.payment import (
    CustomerBalanceSummary,
    OverdueCheckResult,
    PaymentProcessRequest,
    PaymentProcessResponse,
    PaymentResponse,
    PaymentStatusResult,
    PaymentStatusUpdate,
)
from paytrack.services.event_publisher import EventPublisher, get_event_publisher
from paytrack.services.payment_service import PaymentService

router = APIRouter()


@router.post(
    "/process",
    response_model=Envelope[PaymentProcessResponse],
    summary="Process a payment",
    responses={
        404: {"description": "Customer not found"},
        409: {"description": "Customer balance changed concurrently"},
    },
)
async def process_payment(
    data: PaymentProcessRequest,
    db: Session = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher),
    current_user: CurrentUser = Depends(get_current_user),
) -> Envelope[PaymentProcessResponse]:
    outcome = await PaymentService(db, publisher).process_payment(
        customer_id=data.customer_id,
        amount=data.amount,
        payment_method=data.payment_method,
        acting_user_id=current_user.id,
        notes=data.notes,
    )
    return Envelope(
        data=PaymentProcessResponse(
            payment=PaymentResponse.model_validate(outcome.payment),
            customer=CustomerBalanceSummary(
                id=outcome.customer_id,
                outstanding_amount=float(outcome.outstanding_amount),
                payment_status=outcome.payment_status,
            ),
        ),
        message="Payment processed successfully",
    )


@router.get(
    "/history/{customer_id}",
    response_model=Envelope[list[PaymentResponse]],
    summary="Payment history of a customer",
)
async def payment_history(
    customer_id: UUID,
    db: Session = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher),
    current_user: CurrentUser = Depends(get_current_user),
) -> Envelope[list[PaymentResponse]]:
    payments = PaymentService(db, publisher).get_payment_history(customer_id)
    return Envelope(data=[PaymentResponse.model_validate(p) for p in payments])


@router.put(
    "/status/{customer_id}",
    response_model=Envelope[PaymentStatusResult],
    summary="Override the payment status of a customer",
    responses={404: {"description": "Customer not found"}},
)
async def update_payment_status(
    customer_id: UUID,
    data: PaymentStatusUpdate,
    db: Session = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher),
    current_user: CurrentUser = Depends(get_current_user),
) -> Envelope[PaymentStatusResult]:
    updated_id, status = await PaymentService(db, publisher).update_payment_status(
        customer_id, data.status
    )
    return Envelope(
        data=PaymentStatusResult(customer_id=updated_id, status=status),
        message="Payment status updated successfully",
    )


@router.post(
    "/check-overdue",
    response_model=Envelope[OverdueCheckResult],
    summary="Mark overdue customers and notify their owners",
)
async def check_overdue_payments(
    db: Session = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher),
    current_user: CurrentUser = Depends(get_current_user),
) -> Envelope[OverdueCheckResult]:
    result = await PaymentService(db, publisher).check_overdue_payments()
    return Envelope(
        data=OverdueCheckResult(
            overdue_count=result.overdue_count,
            processed_customers=result.processed_customers,
        )
    )
