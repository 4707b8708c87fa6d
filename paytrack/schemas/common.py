"""Shared schema building blocks: camelCase models, UTC datetimes, envelopes."""

from datetime import UTC, date, datetime
from typing import Annotated, Any, Generic, TypeVar

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


def to_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _date_only_to_midnight(value: Any) -> Any:
    if isinstance(value, str) and len(value.strip()) == 10:
        return f"{value.strip()}T00:00:00"
    if isinstance(value, date) and not isinstance(value, datetime):
        return datetime(value.year, value.month, value.day)
    return value


UtcDatetime = Annotated[datetime, BeforeValidator(_date_only_to_midnight), AfterValidator(to_utc)]


class CamelModel(BaseModel):
    """Base model exposing camelCase field names on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class CountBucket(CamelModel):
    key: str
    doc_count: int


class Envelope(CamelModel, Generic[T]):
    success: bool = True
    data: T
    message: str | None = None


class MessageEnvelope(CamelModel):
    success: bool = True
    message: str
