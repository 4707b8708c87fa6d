"""Bulk customer import from an uploaded spreadsheet.

Rows are validated and created one by one; a bad row is reported with its
spreadsheet row number and never aborts the rest of the file.
"""

from __future__ import annotations

import io
import logging
import math
import re
from datetime import UTC, date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from pathlib import PurePath
from typing import Any
from uuid import UUID

import pandas as pd
from pydantic import ValidationError as PydanticValidationError

from paytrack.core.config import settings
from paytrack.core.errors import ConflictError, ValidationError
from paytrack.models.customer import PaymentStatus
from paytrack.schemas.customer import CustomerCreate
from paytrack.schemas.customer_import import (
    CustomerImportResponse,
    FailedRow,
    ImportDetails,
    ImportedRow,
    ImportSummary,
)
from paytrack.services.customer_service import CustomerService

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = [
    "name",
    "email",
    "phone",
    "outstandingAmount",
    "paymentDueDate",
    "paymentStatus",
]
ALLOWED_EXTENSIONS = {".xlsx", ".xls"}

# Day 25569 of the spreadsheet calendar is 1970-01-01
SERIAL_EPOCH_OFFSET = 25569
_UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_STATUS_VALUES = [status.value for status in PaymentStatus]


def serial_to_datetime(serial: float) -> datetime:
    return _UNIX_EPOCH + timedelta(days=serial - SERIAL_EPOCH_OFFSET)


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def _text(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _parse_due_date(value: Any) -> datetime | None:
    if _is_number(value):
        return serial_to_datetime(float(value))
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=UTC)
    try:
        parsed = pd.to_datetime(str(value).strip(), utc=True)
    except (ValueError, TypeError, OverflowError):
        return None
    if pd.isna(parsed):
        return None
    return parsed.to_pydatetime()


def _parse_amount(value: Any) -> float | None:
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(amount) else amount


def validate_row(row: dict[str, Any]) -> list[str]:
    """Return the validation messages for one spreadsheet row."""
    errors: list[str] = []

    if not _text(row.get("name") or ""):
        errors.append("Name is required")

    email = row.get("email")
    if email is None or not _text(email):
        errors.append("Email is required")
    elif not _EMAIL_RE.match(_text(email)):
        errors.append("Invalid email format")

    phone = row.get("phone")
    if phone is not None and _text(phone):
        phone_text = _text(phone)
        if len(phone_text) != 10:
            errors.append("Phone number must be 10 digits")
        elif not phone_text.isdigit():
            errors.append("Phone number must contain only digits")

    amount = row.get("outstandingAmount")
    if amount is None or (isinstance(amount, str) and not amount.strip()):
        errors.append("Outstanding amount is required")
    elif (parsed_amount := _parse_amount(amount)) is None:
        errors.append("Outstanding amount must be a number")
    elif parsed_amount < 0:
        errors.append("Outstanding amount cannot be negative")

    due_date = row.get("paymentDueDate")
    if due_date is None or (isinstance(due_date, str) and not due_date.strip()):
        errors.append("Payment due date is required")
    elif _parse_due_date(due_date) is None:
        errors.append("Invalid date format (use YYYY-MM-DD or valid Excel date)")

    status = row.get("paymentStatus")
    if status is None or not _text(status):
        errors.append("Payment status is required")
    elif _text(status) not in _STATUS_VALUES:
        errors.append(f"Invalid payment status. Must be one of: {', '.join(_STATUS_VALUES)}")

    return errors


def row_to_customer(row: dict[str, Any]) -> CustomerCreate:
    """Build a create payload from a row that passed ``validate_row``."""
    phone = row.get("phone")
    return CustomerCreate(
        name=_text(row["name"]),
        email=_text(row["email"]).lower(),
        phone=_text(phone) if phone is not None and _text(phone) else None,
        outstanding_amount=Decimal(str(float(row["outstandingAmount"]))).quantize(
            Decimal("0.01"), rounding=ROUND_HALF_UP
        ),
        payment_due_date=_parse_due_date(row["paymentDueDate"]),
        payment_status=PaymentStatus(_text(row["paymentStatus"])),
    )


def _json_safe(row: dict[str, Any]) -> dict[str, Any]:
    safe: dict[str, Any] = {}
    for key, value in row.items():
        if isinstance(value, datetime | date):
            safe[str(key)] = value.isoformat()
        elif value is None or isinstance(value, str | int | float | bool):
            safe[str(key)] = value
        else:
            safe[str(key)] = str(value)
    return safe


def read_rows(content: bytes) -> list[tuple[int, dict[str, Any]]]:
    """Read the first sheet into ``(spreadsheet_row_number, row)`` pairs."""
    try:
        frame = pd.read_excel(io.BytesIO(content), sheet_name=0, dtype=object)
    except Exception as exc:  # noqa: BLE001
        logger.warning("Could not parse uploaded spreadsheet: %s", exc)
        raise ValidationError("Invalid Excel file format") from exc

    frame = frame.dropna(how="all")
    if frame.empty:
        raise ValidationError("Excel file is empty")

    frame.columns = [str(column).strip() for column in frame.columns]
    missing = [column for column in REQUIRED_COLUMNS if column not in frame.columns]
    if missing:
        raise ValidationError(
            f"Missing required columns: {', '.join(missing)}",
            details={"missingColumns": missing},
        )

    frame = frame.astype(object).where(pd.notna(frame), None)
    return [
        (int(index) + 2, {str(k): v for k, v in record.items()})
        for index, record in zip(frame.index, frame.to_dict(orient="records"), strict=True)
    ]


class CustomerImportService:
    def __init__(self, customer_service: CustomerService):
        self.customer_service = customer_service

    @staticmethod
    def check_upload(filename: str | None, size: int) -> None:
        extension = PurePath(filename or "").suffix.lower()
        if extension not in ALLOWED_EXTENSIONS:
            raise ValidationError("Please upload an Excel file (.xlsx or .xls)")
        if size > settings.MAX_UPLOAD_BYTES:
            max_mb = settings.MAX_UPLOAD_BYTES // (1024 * 1024)
            raise ValidationError(f"File size too large. Maximum size is {max_mb}MB")

    async def import_file(
        self, filename: str | None, content: bytes, acting_user_id: UUID
    ) -> CustomerImportResponse:
        self.check_upload(filename, len(content))
        rows = read_rows(content)

        successful: list[ImportedRow] = []
        failed: list[FailedRow] = []
        for row_number, row in rows:
            errors = validate_row(row)
            if not errors:
                try:
                    customer = await self.customer_service.create(
                        row_to_customer(row), acting_user_id, notify=False
                    )
                except PydanticValidationError as exc:
                    errors = [str(error["msg"]) for error in exc.errors()]
                except ConflictError as exc:
                    errors = [exc.message]
                else:
                    successful.append(
                        ImportedRow(
                            row=row_number,
                            id=customer.id,
                            email=customer.email,
                            name=customer.name,
                            payment_status=customer.payment_status,
                            outstanding_amount=float(customer.outstanding_amount),
                        )
                    )
                    continue
            failed.append(FailedRow(row=row_number, data=_json_safe(row), errors=errors))

        logger.info(
            "Imported %s: %d rows, %d successful, %d failed",
            filename,
            len(rows),
            len(successful),
            len(failed),
        )
        return CustomerImportResponse(
            message=f"Processed {len(rows)} rows: {len(successful)} successful, {len(failed)} failed",
            summary=ImportSummary(
                total=len(rows), successful=len(successful), failed=len(failed)
            ),
            details=ImportDetails(successful=successful, failed=failed),
        )
