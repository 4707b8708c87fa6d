import logging
from typing import Any

from arq import cron

from paytrack.core.config import settings
from paytrack.core.connections import ConnectionRegistry
from paytrack.core.database import SessionLocal
from paytrack.core.logging import configure_logging
from paytrack.services.event_publisher import EventPublisher
from paytrack.services.payment_service import PaymentService
from paytrack.tasks import redis_settings

logger = logging.getLogger(__name__)


async def startup(ctx: dict[str, Any]) -> None:
    configure_logging(settings.LOG_LEVEL)
    # The worker runs in its own process and holds no client connections;
    # its broadcasts reach nobody, only the persisted notifications matter.
    ctx["connection_registry"] = ConnectionRegistry()


async def check_overdue_payments_task(ctx: dict[str, Any]) -> int:
    """Background task: mark PENDING customers past due as OVERDUE.

    Persists an overdue notification for each customer's owning user.
    Runs hourly.
    """
    registry = ctx.get("connection_registry") or ConnectionRegistry()
    db = SessionLocal()
    try:
        service = PaymentService(db, EventPublisher(registry))
        result = await service.check_overdue_payments()
        if result.overdue_count > 0:
            logger.info("Overdue check flagged %d customers", result.overdue_count)
        return result.overdue_count
    finally:
        db.close()


class WorkerSettings:
    functions = [check_overdue_payments_task]
    cron_jobs = [
        cron(check_overdue_payments_task, minute={0}),  # hourly
    ]
    on_startup = startup
    redis_settings = redis_settings
