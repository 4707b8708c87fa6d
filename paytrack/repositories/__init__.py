from paytrack.repositories.customer_repository import CustomerRepository
from paytrack.repositories.notification_repository import NotificationRepository
from paytrack.repositories.payment_repository import PaymentRepository
from paytrack.repositories.user_repository import UserRepository

__all__ = [
    "CustomerRepository",
    "NotificationRepository",
    "PaymentRepository",
    "UserRepository",
]
