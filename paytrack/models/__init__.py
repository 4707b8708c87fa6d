from paytrack.models.customer import Customer, PaymentStatus
from paytrack.models.notification import Notification, NotificationType
from paytrack.models.payment import Payment, PaymentMethod
from paytrack.models.user import User, UserRole

__all__ = [
    "Customer",
    "Notification",
    "NotificationType",
    "Payment",
    "PaymentMethod",
    "PaymentStatus",
    "User",
    "UserRole",
]
