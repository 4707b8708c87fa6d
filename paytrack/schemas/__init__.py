from paytrack.schemas.auth import AuthResponse, LoginRequest, RegisterRequest, UserResponse
from paytrack.schemas.common import CamelModel, CountBucket, Envelope, MessageEnvelope
from paytrack.schemas.customer import (
    CustomerCreate,
    CustomerResponse,
    CustomerSearchFilters,
    CustomerSearchResponse,
    CustomerSort,
    CustomerUpdate,
)
from paytrack.schemas.customer_import import CustomerImportResponse
from paytrack.schemas.notification import (
    MarkAllReadResult,
    NotificationListData,
    NotificationResponse,
)
from paytrack.schemas.payment import (
    OverdueCheckResult,
    PaymentProcessRequest,
    PaymentProcessResponse,
    PaymentResponse,
    PaymentStatusResult,
    PaymentStatusUpdate,
)

__all__ = [
    "AuthResponse",
    "CamelModel",
    "CountBucket",
    "CustomerCreate",
    "CustomerImportResponse",
    "CustomerResponse",
    "CustomerSearchFilters",
    "CustomerSearchResponse",
    "CustomerSort",
    "CustomerUpdate",
    "Envelope",
    "LoginRequest",
    "MarkAllReadResult",
    "MessageEnvelope",
    "NotificationListData",
    "NotificationResponse",
    "OverdueCheckResult",
    "PaymentProcessRequest",
    "PaymentProcessResponse",
    "PaymentResponse",
    "PaymentStatusResult",
    "PaymentStatusUpdate",
    "RegisterRequest",
    "UserResponse",
]
