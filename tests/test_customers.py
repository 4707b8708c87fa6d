"""Customer CRUD API and service tests."""

import uuid
from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest

from paytrack.core.connections import EventType
from paytrack.core.errors import ConflictError, NotFoundError
from paytrack.models.customer import Customer, PaymentStatus
from paytrack.models.notification import Notification, NotificationType
from paytrack.models.payment import Payment
from paytrack.models.shared import UUIDType
from paytrack.repositories.customer_repository import CustomerRepository
from paytrack.schemas.customer import CustomerCreate, CustomerUpdate
from paytrack.services.customer_service import CustomerService
from paytrack.services.event_publisher import EventPublisher
from tests.conftest import make_customer


def _payload(**overrides):
    payload = {
        "name": "Grace Hopper",
        "email": "Grace.Hopper@Acme.io",
        "phone": "5550001111",
        "outstandingAmount": 250.5,
        "paymentDueDate": "2030-01-15",
        "paymentStatus": "PENDING",
    }
    payload.update(overrides)
    return payload


class TestUUIDType:
    def test_process_bind_param_none(self):
        assert UUIDType().process_bind_param(None, None) is None

    def test_process_bind_param_string(self):
        value = str(uuid.uuid4())
        assert UUIDType().process_bind_param(value, None) == value

    def test_process_result_value_string(self):
        value = uuid.uuid4()
        assert UUIDType().process_result_value(str(value), None) == value


class TestCustomerService:
    @pytest.mark.asyncio
    async def test_create_records_owner_and_notifies(self, db_session, registry, staff_user):
        service = CustomerService(db_session, EventPublisher(registry))
        customer = await service.create(
            CustomerCreate.model_validate(_payload()), staff_user.id
        )

        assert customer.email == "grace.hopper@acme.io"
        assert customer.created_by == staff_user.id
        assert customer.version == 1

        notifications = db_session.query(Notification).all()
        assert len(notifications) == 1
        assert notifications[0].type == NotificationType.CUSTOMER_ADDED.value
        assert notifications[0].user_id == staff_user.id
        assert notifications[0].data["customerName"] == "Grace Hopper"

        events = registry.of_type(EventType.CUSTOMER_ADDED)
        assert len(events) == 1
        assert events[0]["message"] == "New customer Grace Hopper added"

    @pytest.mark.asyncio
    async def test_create_without_notify(self, db_session, registry, staff_user):
        service = CustomerService(db_session, EventPublisher(registry))
        await service.create(
            CustomerCreate.model_validate(_payload()), staff_user.id, notify=False
        )
        assert db_session.query(Notification).count() == 0
        assert registry.events == []

    @pytest.mark.asyncio
    async def test_create_duplicate_email(self, db_session):
        make_customer(db_session, email="grace.hopper@acme.io")
        with pytest.raises(ConflictError, match="already exists"):
            await CustomerService(db_session).create(CustomerCreate.model_validate(_payload()))

    def test_update_bumps_version(self, db_session):
        customer = make_customer(db_session)
        updated = CustomerService(db_session).update(
            customer.id, CustomerUpdate(name="Ada King")
        )
        assert updated.name == "Ada King"
        assert updated.version == 2

    def test_update_missing(self, db_session):
        with pytest.raises(NotFoundError):
            CustomerService(db_session).update(uuid.uuid4(), CustomerUpdate(name="x"))

    def test_update_email_taken_by_other(self, db_session):
        make_customer(db_session, email="taken@acme.io")
        customer = make_customer(db_session, email="mine@acme.io")
        with pytest.raises(ConflictError):
            CustomerService(db_session).update(customer.id, CustomerUpdate(email="TAKEN@acme.io"))

    def test_update_keeps_own_email(self, db_session):
        customer = make_customer(db_session, email="mine@acme.io")
        updated = CustomerService(db_session).update(
            customer.id, CustomerUpdate(email="Mine@Acme.io", name="Renamed")
        )
        assert updated.email == "mine@acme.io"

    def test_delete_leaves_payments(self, db_session):
        customer = make_customer(db_session)
        db_session.add(
            Payment(
                customer_id=customer.id,
                amount=Decimal("10"),
                payment_method="CASH",
                transaction_id="TXN1abc",
            )
        )
        db_session.commit()

        CustomerService(db_session).delete(customer.id)

        assert CustomerRepository(db_session).get_by_id(customer.id) is None
        assert db_session.query(Payment).count() == 1

    def test_delete_missing(self, db_session):
        with pytest.raises(NotFoundError):
            CustomerService(db_session).delete(uuid.uuid4())


class TestCustomersAPI:
    def test_create_customer(self, client, auth_headers, registry, staff_user):
        response = client.post("/api/customers", json=_payload(), headers=auth_headers)
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["email"] == "grace.hopper@acme.io"
        assert data["outstandingAmount"] == 250.5
        assert data["paymentStatus"] == "PENDING"
        assert data["createdBy"] == str(staff_user.id)
        assert data["paymentDueDate"].startswith("2030-01-15T00:00:00")
        assert len(registry.of_type(EventType.CUSTOMER_ADDED)) == 1

    def test_create_duplicate_email_conflict(self, client, auth_headers):
        assert client.post("/api/customers", json=_payload(), headers=auth_headers).status_code == 201
        response = client.post(
            "/api/customers",
            json=_payload(email="GRACE.HOPPER@acme.io"),
            headers=auth_headers,
        )
        assert response.status_code == 409
        assert response.json()["error"] == {
            "type": "CONFLICT_ERROR",
            "message": "Customer with this email already exists",
        }

    @pytest.mark.parametrize(
        "override",
        [
            {"email": "not-an-email"},
            {"phone": "12345"},
            {"outstandingAmount": -1},
            {"outstandingAmount": 10.005},
            {"paymentStatus": "LATE"},
            {"name": "   "},
        ],
    )
    def test_create_validation_errors(self, client, auth_headers, override):
        response = client.post("/api/customers", json=_payload(**override), headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["error"]["type"] == "VALIDATION_ERROR"

    def test_create_requires_auth(self, client):
        assert client.post("/api/customers", json=_payload()).status_code == 401

    def test_update_customer(self, client, auth_headers, db_session):
        customer = make_customer(db_session)
        response = client.put(
            f"/api/customers/{customer.id}",
            json={"outstandingAmount": 42, "paymentStatus": "OVERDUE"},
            headers=auth_headers,
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["outstandingAmount"] == 42
        assert data["paymentStatus"] == "OVERDUE"
        assert data["name"] == "Ada Lovelace"

    def test_update_missing_customer(self, client, auth_headers):
        response = client.put(
            f"/api/customers/{uuid.uuid4()}", json={"name": "x"}, headers=auth_headers
        )
        assert response.status_code == 404
        assert response.json()["error"] == {
            "type": "NOT_FOUND_ERROR",
            "message": "Customer not found",
        }

    def test_update_can_clear_phone(self, client, auth_headers, db_session):
        customer = make_customer(db_session)
        response = client.put(
            f"/api/customers/{customer.id}", json={"phone": None}, headers=auth_headers
        )
        assert response.status_code == 200
        assert response.json()["data"]["phone"] is None

    def test_delete_customer(self, client, auth_headers, db_session):
        customer = make_customer(db_session)
        response = client.delete(f"/api/customers/{customer.id}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Customer deleted successfully"}
        db_session.expire_all()
        assert db_session.query(Customer).count() == 0

    def test_delete_missing_customer(self, client, auth_headers):
        response = client.delete(f"/api/customers/{uuid.uuid4()}", headers=auth_headers)
        assert response.status_code == 404

    def test_timestamps_serialized_as_utc(self, client, auth_headers, db_session):
        make_customer(
            db_session,
            payment_due_date=datetime(2031, 5, 1, 12, 0, tzinfo=UTC) + timedelta(hours=1),
            payment_status=PaymentStatus.COMPLETED.value,
        )
        response = client.get("/api/customers/search", headers=auth_headers)
        record = response.json()["data"][0]
        assert record["paymentDueDate"] == "2031-05-01T13:00:00Z"
