"""Tests for worker background tasks and cron job registration."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from paytrack.core import database as db_module
from paytrack.core.connections import ConnectionRegistry
from paytrack.models.customer import Customer
from paytrack.models.notification import Notification
from paytrack.services.overdue_service import OverdueSweepResult
from paytrack.worker import WorkerSettings, check_overdue_payments_task, startup
from tests.conftest import make_customer


class TestCheckOverduePaymentsTask:
    """Tests for the check_overdue_payments_task worker function."""

    @pytest.mark.asyncio
    async def test_flags_overdue_customers(self, db_session, staff_user):
        """Test that the task flips past-due customers and notifies their owners."""
        late = make_customer(
            db_session,
            payment_due_date=datetime.now(UTC) - timedelta(days=1),
            created_by=staff_user.id,
        )
        make_customer(db_session, email="fine@acme.io")

        with patch("paytrack.worker.SessionLocal", db_module.SessionLocal):
            result = await check_overdue_payments_task({"connection_registry": ConnectionRegistry()})

        assert result == 1
        db_session.expire_all()
        assert db_session.get(Customer, late.id).payment_status == "OVERDUE"
        assert db_session.query(Notification).filter_by(user_id=staff_user.id).count() == 1

    @pytest.mark.asyncio
    async def test_returns_zero_without_candidates(self):
        """Test that an empty sweep returns 0 even without a startup registry."""
        with patch("paytrack.worker.SessionLocal", db_module.SessionLocal):
            assert await check_overdue_payments_task({}) == 0

    @pytest.mark.asyncio
    async def test_closes_session_on_failure(self):
        """Test that the DB session is closed when the sweep raises."""
        mock_session = MagicMock()
        mock_service = MagicMock()
        mock_service.check_overdue_payments = AsyncMock(side_effect=RuntimeError("boom"))

        with (
            patch("paytrack.worker.SessionLocal", return_value=mock_session),
            patch("paytrack.worker.PaymentService", return_value=mock_service),
            pytest.raises(RuntimeError, match="boom"),
        ):
            await check_overdue_payments_task({})

        mock_session.close.assert_called_once()

    @pytest.mark.asyncio
    async def test_uses_service_result(self):
        """Test that the task returns the sweep's overdue count."""
        mock_service = MagicMock()
        mock_service.check_overdue_payments = AsyncMock(
            return_value=OverdueSweepResult(overdue_count=4, processed_customers=[])
        )
        with (
            patch("paytrack.worker.SessionLocal", return_value=MagicMock()),
            patch("paytrack.worker.PaymentService", return_value=mock_service),
        ):
            assert await check_overdue_payments_task({}) == 4


class TestWorkerStartup:
    @pytest.mark.asyncio
    async def test_startup_sets_registry(self):
        ctx: dict = {}
        with patch("paytrack.worker.configure_logging") as mock_logging:
            await startup(ctx)
        assert isinstance(ctx["connection_registry"], ConnectionRegistry)
        mock_logging.assert_called_once()


class TestWorkerSettings:
    def test_functions_registered(self):
        assert check_overdue_payments_task in WorkerSettings.functions

    def test_hourly_cron(self):
        assert len(WorkerSettings.cron_jobs) == 1
        job = WorkerSettings.cron_jobs[0]
        assert job.coroutine is check_overdue_payments_task
        assert job.minute == {0}
        assert job.hour is None

    def test_startup_hook(self):
        assert WorkerSettings.on_startup is startup
