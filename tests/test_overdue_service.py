"""Overdue detection tests."""

import uuid
from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest

from paytrack.core.connections import EventType
from paytrack.models.customer import Customer, PaymentStatus
from paytrack.models.notification import Notification, NotificationType
from paytrack.repositories.customer_repository import CustomerRepository
from paytrack.services.event_publisher import EventPublisher
from paytrack.services.overdue_service import NoopMaintenancePass, OverdueService
from tests.conftest import make_customer


def _past(days=1):
    return datetime.now(UTC) - timedelta(days=days)


def _future(days=1):
    return datetime.now(UTC) + timedelta(days=days)


@pytest.fixture
def service(db_session, registry):
    return OverdueService(db_session, EventPublisher(registry))


class TestOverdueSweep:
    @pytest.mark.asyncio
    async def test_flips_only_pending_past_due(self, db_session, service):
        late = make_customer(db_session, email="late@acme.io", payment_due_date=_past())
        make_customer(db_session, email="future@acme.io", payment_due_date=_future())
        make_customer(
            db_session,
            email="paid@acme.io",
            payment_due_date=_past(),
            payment_status=PaymentStatus.COMPLETED.value,
        )
        make_customer(
            db_session,
            email="already@acme.io",
            payment_due_date=_past(),
            payment_status=PaymentStatus.OVERDUE.value,
        )

        result = await service.sweep()

        assert result.overdue_count == 1
        assert result.processed_customers == [late.id]
        db_session.expire_all()
        statuses = {c.email: c.payment_status for c in db_session.query(Customer).all()}
        assert statuses == {
            "late@acme.io": "OVERDUE",
            "future@acme.io": "PENDING",
            "paid@acme.io": "COMPLETED",
            "already@acme.io": "OVERDUE",
        }

    @pytest.mark.asyncio
    async def test_one_overdue_and_one_update_event_per_flip(self, db_session, service, registry):
        for i in range(3):
            make_customer(
                db_session,
                name=f"Late {i}",
                email=f"late{i}@acme.io",
                outstanding_amount=Decimal("12.50"),
                payment_due_date=_past(i + 1),
            )

        await service.sweep()

        overdue = registry.of_type(EventType.PAYMENT_OVERDUE)
        updates = registry.of_type(EventType.PAYMENT_UPDATE)
        assert len(overdue) == 3
        assert len(updates) == 3
        assert {e["customerName"] for e in overdue} == {"Late 0", "Late 1", "Late 2"}
        assert overdue[0]["amount"] == 12.5
        assert overdue[0]["message"].endswith("is overdue")
        assert all(e["paymentStatus"] == "OVERDUE" for e in updates)
        assert updates[0]["message"] == "Payment status updated to OVERDUE"

    @pytest.mark.asyncio
    async def test_second_sweep_is_a_no_op(self, db_session, service, registry):
        make_customer(db_session, payment_due_date=_past())
        assert (await service.sweep()).overdue_count == 1
        assert (await service.sweep()).overdue_count == 0
        assert len(registry.events) == 2

    @pytest.mark.asyncio
    async def test_run_returns_count(self, db_session, service):
        make_customer(db_session, payment_due_date=_past())
        assert await service.run() == 1

    @pytest.mark.asyncio
    async def test_inline_sweep_persists_no_notifications(self, db_session, service, staff_user):
        make_customer(db_session, payment_due_date=_past(), created_by=staff_user.id)
        await service.run()
        assert db_session.query(Notification).count() == 0

    @pytest.mark.asyncio
    async def test_notifications_go_to_owner(self, db_session, service, staff_user):
        customer = make_customer(
            db_session,
            name="Owned",
            payment_due_date=_past(),
            outstanding_amount=Decimal("80"),
            created_by=staff_user.id,
        )

        await service.sweep(create_notifications=True)

        notification = db_session.query(Notification).one()
        assert notification.type == NotificationType.PAYMENT_OVERDUE.value
        assert notification.user_id == staff_user.id
        assert notification.message == "Payment for Owned is overdue"
        assert notification.data["customerId"] == str(customer.id)
        assert notification.data["amount"] == 80.0
        assert notification.read is False

    @pytest.mark.asyncio
    async def test_customer_without_owner_still_flipped(self, db_session, service, caplog):
        make_customer(db_session, payment_due_date=_past(), created_by=None)

        result = await service.sweep(create_notifications=True)

        assert result.overdue_count == 1
        assert db_session.query(Notification).count() == 0
        assert "no owning user" in caplog.text


class TestConditionalFlip:
    def test_mark_overdue_only_once(self, db_session):
        customer = make_customer(db_session, payment_due_date=_past())
        repo = CustomerRepository(db_session)
        now = datetime.now(UTC)
        assert repo.mark_overdue(customer.id, now) is True
        assert repo.mark_overdue(customer.id, now) is False

    def test_mark_overdue_bumps_version(self, db_session):
        customer = make_customer(db_session, payment_due_date=_past())
        CustomerRepository(db_session).mark_overdue(customer.id, datetime.now(UTC))
        db_session.refresh(customer)
        assert customer.version == 2

    def test_missing_customer(self, db_session):
        assert CustomerRepository(db_session).mark_overdue(uuid.uuid4(), datetime.now(UTC)) is False


class TestNoopMaintenancePass:
    @pytest.mark.asyncio
    async def test_does_nothing(self, db_session):
        customer = make_customer(db_session, payment_due_date=_past())
        assert await NoopMaintenancePass().run() == 0
        db_session.refresh(customer)
        assert customer.payment_status == PaymentStatus.PENDING.value
