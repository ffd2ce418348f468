"""API tests for manual payments, refunds and the card processor webhook"""

import hashlib
import hmac
import json
import time
import pytest
from decimal import Decimal
from sqlmodel import select

from src.domain.customer import Customer
from src.domain.payment import Payment

WEBHOOK_SECRET = "whsec_integration"


def signed(payload: dict, secret: str = WEBHOOK_SECRET):
    body = json.dumps(payload).encode()
    timestamp = int(time.time())
    digest = hmac.new(
        secret.encode(), f"{timestamp}.{body.decode()}".encode(), hashlib.sha256
    ).hexdigest()
    return body, {"stripe-signature": f"t={timestamp},v1={digest}"}


def checkout_completed(invoice_id, session_id="cs_test_1"):
    return {
        "id": "evt_1",
        "object": "event",
        "type": "checkout.session.completed",
        "data": {
            "object": {
                "id": session_id,
                "object": "checkout.session",
                "payment_intent": "pi_test_1",
                "amount_total": 10000,
                "metadata": {"invoice_id": invoice_id},
            }
        },
    }


async def customer_spend(db_session, customer_id):
    db_session.expire_all()
    customer = (
        await db_session.execute(select(Customer).where(Customer.id == customer_id))
    ).scalar_one()
    return customer.total_spent


@pytest.mark.asyncio
class TestApplyPayment:

    async def test_partial_then_full(self, client, db_session, sent_invoice):
        """
        Given: A sent 100.00 invoice
        When: 40.00 and then 60.00 are recorded
        Then: The invoice goes partial, then paid, and the customer's spend follows
        """
        # Act
        first = await client.post(
            "/api/payments",
            json={"invoice_id": sent_invoice.id, "amount": "40.00", "method": "check",
                  "reference_number": "1042"},
        )
        second = await client.post(
            "/api/payments",
            json={"invoice_id": sent_invoice.id, "amount": "60.00", "method": "cash"},
        )

        # Assert
        assert first.status_code == 201
        partial = first.json()["invoice"]
        assert partial["status"] == "partial"
        assert Decimal(partial["amount_due"]) == Decimal("60.00")
        assert first.json()["payment"]["reference_number"] == "1042"

        paid = second.json()["invoice"]
        assert paid["status"] == "paid"
        assert Decimal(paid["amount_due"]) == Decimal("0.00")
        assert paid["paid_date"] is not None

        assert await customer_spend(db_session, sent_invoice.customer_id) == Decimal("100.00")

    async def test_overpayment_is_rejected(self, client, sent_invoice):
        response = await client.post(
            "/api/payments",
            json={"invoice_id": sent_invoice.id, "amount": "150.00", "method": "cash"},
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "OVERPAYMENT"

        invoice = (await client.get(f"/api/invoices/{sent_invoice.id}")).json()
        assert invoice["status"] == "sent"
        assert Decimal(invoice["amount_paid"]) == Decimal("0.00")

    async def test_zero_amount_is_rejected(self, client, sent_invoice):
        response = await client.post(
            "/api/payments",
            json={"invoice_id": sent_invoice.id, "amount": "0", "method": "cash"},
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_AMOUNT"

    async def test_card_cannot_be_recorded_by_hand(self, client, sent_invoice):
        response = await client.post(
            "/api/payments",
            json={"invoice_id": sent_invoice.id, "amount": "10.00", "method": "card"},
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    async def test_unknown_invoice(self, client):
        response = await client.post(
            "/api/payments", json={"invoice_id": "missing", "amount": "10.00"}
        )

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "INVOICE_NOT_FOUND"


@pytest.mark.asyncio
class TestRefundPayment:

    async def test_refund_reopens_balance(self, client, db_session, sent_invoice):
        """
        Given: A fully paid invoice
        When: Its only payment is refunded
        Then: The invoice is refunded with the full amount due again
        """
        paid = await client.post(
            "/api/payments",
            json={"invoice_id": sent_invoice.id, "amount": "100.00", "method": "cash"},
        )
        payment_id = paid.json()["payment"]["payment_id"]

        response = await client.post(
            f"/api/payments/{payment_id}/refund", json={"reason": "Customer complaint"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["payment"]["status"] == "refunded"
        assert data["invoice"]["status"] == "refunded"
        assert Decimal(data["invoice"]["amount_due"]) == Decimal("100.00")
        assert await customer_spend(db_session, sent_invoice.customer_id) == Decimal("0.00")

    async def test_second_refund_is_rejected(self, client, sent_invoice):
        paid = await client.post(
            "/api/payments",
            json={"invoice_id": sent_invoice.id, "amount": "30.00", "method": "cash"},
        )
        payment_id = paid.json()["payment"]["payment_id"]

        first = await client.post(f"/api/payments/{payment_id}/refund", json={})
        second = await client.post(f"/api/payments/{payment_id}/refund", json={})

        assert first.status_code == 200
        assert second.status_code == 400
        assert second.json()["error"]["code"] == "PAYMENT_NOT_REFUNDABLE"


@pytest.mark.asyncio
class TestCardPayments:

    async def test_checkout_without_processor(self, client, sent_invoice):
        response = await client.post("/api/payments/checkout", json={"invoice_id": sent_invoice.id})

        assert response.status_code == 503
        assert response.json()["error"]["code"] == "PAYMENTS_NOT_CONFIGURED"

    async def test_webhook_without_processor(self, client):
        response = await client.post("/api/webhooks/stripe", content=b"{}")

        assert response.status_code == 503

    async def test_checkout_completed_settles_invoice_once(
        self, stripe_client, db_session, sent_invoice
    ):
        """
        Given: A signed checkout.session.completed event for a sent invoice
        When: It is delivered twice
        Then: One payment is recorded and the invoice is paid
        """
        # Arrange
        body, headers = signed(checkout_completed(sent_invoice.id))

        # Act
        first = await stripe_client.post("/api/webhooks/stripe", content=body, headers=headers)
        redelivery = await stripe_client.post("/api/webhooks/stripe", content=body, headers=headers)

        # Assert
        assert first.status_code == 200
        assert first.json() == {"received": True, "applied": True}
        assert redelivery.status_code == 200
        assert redelivery.json() == {"received": True, "applied": False}

        payments = (
            await db_session.execute(select(Payment).where(Payment.invoice_id == sent_invoice.id))
        ).scalars().all()
        assert len(payments) == 1
        assert payments[0].processor_reference == "cs_test_1"
        assert payments[0].amount == Decimal("100.00")

        invoice = (await stripe_client.get(f"/api/invoices/{sent_invoice.id}")).json()
        assert invoice["status"] == "paid"

    async def test_bad_signature(self, stripe_client, sent_invoice):
        body, headers = signed(checkout_completed(sent_invoice.id), secret="whsec_wrong")

        response = await stripe_client.post("/api/webhooks/stripe", content=body, headers=headers)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_SIGNATURE"

    async def test_other_events_are_ignored(self, stripe_client):
        body, headers = signed({"id": "evt_2", "object": "event", "type": "charge.refunded",
                                "data": {"object": {}}})

        response = await stripe_client.post("/api/webhooks/stripe", content=body, headers=headers)

        assert response.status_code == 200
        assert response.json() == {"received": True}
