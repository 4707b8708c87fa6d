"""Schemas for spreadsheet customer imports."""

from typing import Any
from uuid import UUID

from paytrack.models.customer import PaymentStatus
from paytrack.schemas.common import CamelModel


class ImportSummary(CamelModel):
    total: int
    successful: int
    failed: int


class ImportedRow(CamelModel):
    row: int
    id: UUID
    email: str
    name: str
    payment_status: PaymentStatus
    outstanding_amount: float


class FailedRow(CamelModel):
    row: int
    data: dict[str, Any]
    errors: list[str]


class ImportDetails(CamelModel):
    successful: list[ImportedRow]
    failed: list[FailedRow]


class CustomerImportResponse(CamelModel):
    success: bool = True
    message: str
    summary: ImportSummary
    details: ImportDetails
