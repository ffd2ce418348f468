"""API tests for manual job runs, health and bearer token checks"""

import pytest
from datetime import date, timedelta

from src.app.services.authenticator import Claims
from src.domain.user import UserRole


@pytest.mark.asyncio
class TestJobs:

    async def test_list_jobs(self, client):
        response = await client.get("/api/jobs")

        assert response.status_code == 200
        names = {job["name"] for job in response.json()}
        assert names == {"reminders", "recurring", "overdue", "session_cleanup", "inventory_check"}

    async def test_run_recurring_generation(self, client):
        """
        Given: A weekly booking three days out, so the next occurrence is ten days out
        When: The recurring job is run with a 14 day horizon
        Then: Exactly one occurrence is created and a second run creates nothing
        """
        # Arrange
        first_day = date.today() + timedelta(days=3)
        created = await client.post(
            "/api/bookings",
            json={
                "email": "weekly@example.com",
                "name": "Wes Weekly",
                "scheduled_date": first_day.isoformat(),
                "scheduled_time": "11:00 AM",
                "address": "1 Loop Rd",
                "frequency": "weekly",
            },
        )
        template_id = created.json()["recurring_template_id"]

        # Act
        response = await client.post("/api/jobs/recurring/run")
        again = await client.post("/api/jobs/recurring/run")

        # Assert
        assert response.status_code == 200
        data = response.json()
        assert data["ran"] is True
        assert data["error"] is None
        generated = data["result"]["bookings_created"]
        assert len(generated) == 1
        assert generated[0]["scheduled_date"] == (first_day + timedelta(days=7)).isoformat()
        assert generated[0]["recurring_template_id"] == template_id
        assert generated[0]["scheduled_time"] == "11:00 AM"

        assert again.json()["result"]["bookings_created"] == []

    async def test_run_overdue_sweep(self, client, sent_invoice):
        response = await client.post("/api/jobs/overdue/run")

        assert response.status_code == 200
        assert response.json()["result"]["transitioned_invoice_ids"] == [sent_invoice.id]

        invoice = (await client.get(f"/api/invoices/{sent_invoice.id}")).json()
        assert invoice["status"] == "overdue"

    async def test_unknown_job(self, client):
        response = await client.post("/api/jobs/cleanup/run")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "JOB_NOT_FOUND"


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def bearer(app, claims: Claims) -> dict:
    token = app.state.authenticator.issue(claims)
    return {"Authorization": f"Bearer {token}"}


@pytest.mark.asyncio
class TestAuthentication:

    async def test_missing_token(self, auth_app_and_client):
        _, client = auth_app_and_client

        response = await client.get("/api/bookings")

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "UNAUTHORIZED"

    async def test_garbage_token(self, auth_app_and_client):
        _, client = auth_app_and_client

        response = await client.get(
            "/api/bookings", headers={"Authorization": "Bearer not-a-token"}
        )

        assert response.status_code == 401

    async def test_customer_is_not_staff(self, auth_app_and_client, customer):
        app, client = auth_app_and_client

        response = await client.get(
            "/api/bookings",
            headers=bearer(app, Claims(subject_id=customer.id, is_customer=True)),
        )

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "FORBIDDEN"

    async def test_staff_can_list_bookings(self, auth_app_and_client):
        app, client = auth_app_and_client

        response = await client.get(
            "/api/bookings", headers=bearer(app, Claims(subject_id="u1", role=UserRole.EMPLOYEE))
        )

        assert response.status_code == 200

    async def test_jobs_need_admin(self, auth_app_and_client):
        app, client = auth_app_and_client

        manager = await client.post(
            "/api/jobs/overdue/run",
            headers=bearer(app, Claims(subject_id="u1", role=UserRole.MANAGER)),
        )
        admin = await client.get(
            "/api/jobs", headers=bearer(app, Claims(subject_id="u2", role=UserRole.ADMIN))
        )

        assert manager.status_code == 403
        assert admin.status_code == 200

    async def test_booking_form_is_public(self, auth_app_and_client):
        _, client = auth_app_and_client

        response = await client.post(
            "/api/bookings",
            json={
                "email": "walkin@example.com",
                "scheduled_date": (date.today() + timedelta(days=5)).isoformat(),
                "address": "9 Main St",
            },
        )

        assert response.status_code == 201

    async def test_customer_reads_only_own_invoices(self, auth_app_and_client, sent_invoice):
        """
        Given: An invoice belonging to one customer
        When: That customer and another customer ask for it
        Then: The owner sees it and the other customer gets a not found
        """
        app, client = auth_app_and_client

        own = await client.get(
            f"/api/invoices/{sent_invoice.id}",
            headers=bearer(app, Claims(subject_id=sent_invoice.customer_id, is_customer=True)),
        )
        foreign = await client.get(
            f"/api/invoices/{sent_invoice.id}",
            headers=bearer(app, Claims(subject_id="someone-else", is_customer=True)),
        )

        assert own.status_code == 200
        assert foreign.status_code == 404
