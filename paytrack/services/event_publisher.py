"""Typed broadcast events pushed to connected staff clients."""

from __future__ import annotations

from uuid import UUID

from fastapi import Depends

from paytrack.core.connections import ConnectionRegistry, EventType, get_connection_registry
from paytrack.models.customer import Customer, PaymentStatus
from paytrack.models.payment import Payment


class EventPublisher:
    """Renders domain events and hands them to the connection registry."""

    def __init__(self, registry: ConnectionRegistry):
        self.registry = registry

    async def notify_payment_received(self, payment: Payment, customer_name: str) -> int:
        amount = float(payment.amount)
        return await self.registry.broadcast(
            EventType.PAYMENT_RECEIVED,
            {
                "paymentId": payment.id,
                "customerId": payment.customer_id,
                "customerName": customer_name,
                "amount": amount,
                "paymentDate": payment.payment_date,
                "transactionId": payment.transaction_id,
                "message": f"Payment of ${amount:.2f} received from {customer_name}",
            },
        )

    async def notify_payment_overdue(
        self,
        *,
        customer_id: UUID,
        customer_name: str,
        amount: float,
        due_date: object,
    ) -> int:
        return await self.registry.broadcast(
            EventType.PAYMENT_OVERDUE,
            {
                "customerId": customer_id,
                "customerName": customer_name,
                "amount": amount,
                "dueDate": due_date,
                "message": f"Payment for {customer_name} is overdue",
            },
        )

    async def notify_payment_update(self, customer_id: UUID, status: PaymentStatus) -> int:
        return await self.registry.broadcast(
            EventType.PAYMENT_UPDATE,
            {
                "customerId": customer_id,
                "paymentStatus": status.value,
                "message": f"Payment status updated to {status.value}",
            },
        )

    async def notify_new_customer(self, customer: Customer) -> int:
        return await self.registry.broadcast(
            EventType.CUSTOMER_ADDED,
            {
                "customerId": customer.id,
                "name": customer.name,
                "email": customer.email,
                "outstandingAmount": float(customer.outstanding_amount),
                "paymentStatus": customer.payment_status,
                "message": f"New customer {customer.name} added",
            },
        )


def get_event_publisher(
    registry: ConnectionRegistry = Depends(get_connection_registry),
) -> EventPublisher:
    return EventPublisher(registry)
