"""Unit tests for the email senders, templates and the Stripe adapter"""

import hashlib
import hmac
import json
import time
import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import httpx

from src.adapter.services.email_sender import (
    CompositeEmailSender,
    LoggingEmailSender,
    ResendEmailSender,
    create_email_sender,
)
from src.adapter.services.payment_processor import StripePaymentProcessor
from src.app.services import email_templates
from src.app.services.email_sender import EmailResult
from src.app.services.payment_processor import WebhookVerificationError
from src.domain.booking import Booking
from src.domain.customer import Customer
from src.domain.invoice import Invoice


def mock_async_client(response=None, error=None):
    """Patchable stand-in for httpx.AsyncClient used as an async context manager"""
    client = MagicMock()
    if error is not None:
        client.post = AsyncMock(side_effect=error)
    else:
        client.post = AsyncMock(return_value=response)
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=None)
    return MagicMock(return_value=client), client


@pytest.mark.asyncio
class TestResendEmailSender:

    async def test_successful_send(self):
        # Arrange
        request = httpx.Request("POST", "https://api.resend.com/emails")
        response = httpx.Response(200, json={"id": "re_msg_1"}, request=request)
        client_cls, client = mock_async_client(response)
        sender = ResendEmailSender(api_key="key", from_address="Bubble Bee <hi@bubblebee.com>")

        # Act
        with patch("src.adapter.services.email_sender.httpx.AsyncClient", client_cls):
            result = await sender.send("dana@example.com", "Hello", "Body", "<p>Body</p>")

        # Assert
        assert result.sent is True
        assert result.message_id == "re_msg_1"
        payload = client.post.call_args.kwargs["json"]
        assert payload["to"] == ["dana@example.com"]
        assert payload["html"] == "<p>Body</p>"
        assert client.post.call_args.kwargs["headers"]["Authorization"] == "Bearer key"

    async def test_provider_error_is_reported_not_raised(self):
        request = httpx.Request("POST", "https://api.resend.com/emails")
        response = httpx.Response(422, json={"message": "invalid to"}, request=request)
        client_cls, _ = mock_async_client(response)
        sender = ResendEmailSender(api_key="key", from_address="hi@bubblebee.com")

        with patch("src.adapter.services.email_sender.httpx.AsyncClient", client_cls):
            result = await sender.send("bad", "Hello", "Body")

        assert result.sent is False
        assert "422" in result.error

    async def test_network_error_is_reported(self):
        client_cls, _ = mock_async_client(error=httpx.ConnectError("refused"))
        sender = ResendEmailSender(api_key="key", from_address="hi@bubblebee.com")

        with patch("src.adapter.services.email_sender.httpx.AsyncClient", client_cls):
            result = await sender.send("dana@example.com", "Hello", "Body")

        assert result.sent is False
        assert "refused" in result.error


@pytest.mark.asyncio
class TestCompositeEmailSender:

    async def test_success_if_any_sender_delivers(self):
        failing = MagicMock()
        failing.send = AsyncMock(side_effect=RuntimeError("boom"))
        working = MagicMock()
        working.send = AsyncMock(return_value=EmailResult(sent=True, message_id="m1"))

        result = await CompositeEmailSender([failing, working]).send("a@b.c", "s", "t")

        assert result.sent is True
        assert result.message_id == "m1"

    async def test_all_failed(self):
        failing = MagicMock()
        failing.send = AsyncMock(return_value=EmailResult(sent=False, error="bounced"))

        result = await CompositeEmailSender([failing]).send("a@b.c", "s", "t")

        assert result.sent is False
        assert result.error == "bounced"


class TestCreateEmailSender:

    def test_defaults_to_logging(self):
        assert isinstance(create_email_sender(), LoggingEmailSender)

    def test_resend_without_key_logs_only(self):
        assert isinstance(create_email_sender(provider="resend"), LoggingEmailSender)

    def test_resend_with_key(self):
        sender = create_email_sender(provider="resend", api_key="key", from_address="hi@x.com")

        assert isinstance(sender, CompositeEmailSender)
        assert isinstance(sender.senders[1], ResendEmailSender)


class TestEmailTemplates:

    def test_booking_confirmation_escapes_html(self):
        customer = Customer(id="c1", email="dana@example.com", first_name="<Dana>")
        booking = Booking(
            id="bk_1",
            customer_id="c1",
            service_id="svc_regular",
            scheduled_date=date(2024, 6, 10),
            scheduled_time="9:00 AM",
            address="12 Elm St",
            base_price=Decimal("99.00"),
            total_price=Decimal("99.00"),
        )

        message = email_templates.booking_confirmation(
            customer, booking, "Regular Cleaning", "Bubble Bee Cleaning"
        )

        assert "&lt;Dana&gt;" in message.html_body
        assert "<Dana>" in message.text_body
        assert "9:00 AM" in message.text_body

    def test_overdue_notice(self):
        customer = Customer(id="c1", email="dana@example.com", first_name="Dana")
        invoice = Invoice(
            id="inv_1",
            invoice_number="INV-1001",
            customer_id="c1",
            total=Decimal("108.00"),
            amount_due=Decimal("58.00"),
            issue_date=date(2024, 5, 1),
            due_date=date(2024, 5, 15),
        )

        message = email_templates.overdue_notice(customer, invoice)

        assert message.subject == "Overdue Invoice INV-1001"
        assert "$58.00" in message.text_body


def stripe_signature(payload: bytes, secret: str) -> str:
    timestamp = int(time.time())
    signed = f"{timestamp}.{payload.decode()}".encode()
    digest = hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={digest}"


class TestStripeWebhookVerification:

    def setup_method(self):
        self.processor = StripePaymentProcessor(
            secret_key="sk_test_x", webhook_secret="whsec_test", frontend_url="https://app.example/"
        )

    def test_valid_checkout_completed_event(self):
        """
        Given: A correctly signed checkout.session.completed payload
        When: It is verified
        Then: Session, payment intent and invoice id are extracted
        """
        payload = json.dumps({
            "id": "evt_1",
            "object": "event",
            "type": "checkout.session.completed",
            "data": {
                "object": {
                    "id": "cs_1",
                    "object": "checkout.session",
                    "payment_intent": "pi_1",
                    "amount_total": 10800,
                    "metadata": {"invoice_id": "inv_1"},
                }
            },
        }).encode()

        event = self.processor.verify_webhook(payload, stripe_signature(payload, "whsec_test"))

        assert event.type == "checkout.session.completed"
        assert event.session_id == "cs_1"
        assert event.payment_intent == "pi_1"
        assert event.invoice_id == "inv_1"
        assert event.amount_total == 10800

    def test_bad_signature(self):
        payload = json.dumps({"id": "evt_1", "object": "event", "type": "x", "data": {}}).encode()

        with pytest.raises(WebhookVerificationError):
            self.processor.verify_webhook(payload, stripe_signature(payload, "whsec_wrong"))
