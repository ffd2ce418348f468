"""API tests for invoice creation, reading and sending"""

import pytest
from decimal import Decimal


@pytest.mark.asyncio
class TestCreateInvoice:

    async def test_create_invoice(self, client, customer):
        """
        Given: A 179.00 line and a 10.00 discount at 8% tax
        When: POST /api/invoices is called
        Then: Tax is charged on the discounted subtotal and the invoice is a draft
        """
        # Arrange
        payload = {
            "customer_id": customer.id,
            "line_items": [
                {"description": "Deep Cleaning", "quantity": 1, "unit_price": "179.00"}
            ],
            "discount_amount": "10.00",
        }

        # Act
        response = await client.post("/api/invoices", json=payload)

        # Assert
        assert response.status_code == 201
        data = response.json()
        assert data["invoice_number"] == "INV-1001"
        assert data["status"] == "draft"
        assert Decimal(data["subtotal"]) == Decimal("179.00")
        assert Decimal(data["tax_amount"]) == Decimal("13.52")
        assert Decimal(data["total"]) == Decimal("182.52")
        assert Decimal(data["amount_due"]) == Decimal("182.52")
        assert Decimal(data["amount_paid"]) == Decimal("0.00")
        assert data["due_date"] is not None
        assert data["items"][0]["description"] == "Deep Cleaning"

    async def test_numbers_are_sequential(self, client, customer):
        payload = {
            "customer_id": customer.id,
            "line_items": [{"description": "Window Cleaning", "unit_price": "79.00"}],
        }

        first = await client.post("/api/invoices", json=payload)
        second = await client.post("/api/invoices", json=payload)

        assert first.json()["invoice_number"] == "INV-1001"
        assert second.json()["invoice_number"] == "INV-1002"

    async def test_discount_larger_than_subtotal(self, client, customer):
        response = await client.post(
            "/api/invoices",
            json={
                "customer_id": customer.id,
                "line_items": [{"description": "Window Cleaning", "unit_price": "79.00"}],
                "discount_amount": "80.00",
            },
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_DISCOUNT"

    async def test_unknown_customer(self, client):
        response = await client.post(
            "/api/invoices",
            json={
                "customer_id": "nobody",
                "line_items": [{"description": "Window Cleaning", "unit_price": "79.00"}],
            },
        )

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "CUSTOMER_NOT_FOUND"

    async def test_line_items_required(self, client, customer):
        response = await client.post(
            "/api/invoices", json={"customer_id": customer.id, "line_items": []}
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
class TestReadInvoices:

    async def test_get_invoice(self, client, sent_invoice):
        response = await client.get(f"/api/invoices/{sent_invoice.id}")

        assert response.status_code == 200
        assert response.json()["invoice_number"] == "INV-1001"

    async def test_unknown_invoice(self, client):
        response = await client.get("/api/invoices/missing")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "INVOICE_NOT_FOUND"

    async def test_list_by_status(self, client, customer, sent_invoice):
        await client.post(
            "/api/invoices",
            json={
                "customer_id": customer.id,
                "line_items": [{"description": "Window Cleaning", "unit_price": "79.00"}],
            },
        )

        sent = await client.get("/api/invoices", params={"status": "sent"})
        everything = await client.get("/api/invoices", params={"customer_id": customer.id})

        assert [i["invoice_id"] for i in sent.json()] == [sent_invoice.id]
        assert len(everything.json()) == 2


@pytest.mark.asyncio
class TestSendInvoice:

    async def test_send_draft(self, client, customer):
        created = await client.post(
            "/api/invoices",
            json={
                "customer_id": customer.id,
                "line_items": [{"description": "Carpet Cleaning", "unit_price": "149.00"}],
            },
        )
        invoice_id = created.json()["invoice_id"]

        response = await client.post(f"/api/invoices/{invoice_id}/send")

        assert response.status_code == 200
        invoice = response.json()["invoice"]
        assert invoice["status"] == "sent"
        assert invoice["sent_at"] is not None

    async def test_paid_invoice_cannot_be_sent(self, client, sent_invoice):
        await client.post(
            "/api/payments",
            json={"invoice_id": sent_invoice.id, "amount": "100.00", "method": "cash"},
        )

        response = await client.post(f"/api/invoices/{sent_invoice.id}/send")

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_INVOICE_STATUS"
