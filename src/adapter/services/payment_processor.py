"""Stripe Payment Processor

The stripe SDK is synchronous; calls run in a worker thread so they do
not block the event loop. The API key is passed per call instead of
being set on the module.
"""

import asyncio
import json
import logging
from decimal import Decimal
from typing import Optional
import stripe
from src.app.services.payment_processor import (
    PaymentProcessor,
    PaymentProcessorError,
    WebhookVerificationError,
    CheckoutSession,
    ProcessorEvent,
    RefundResult,
)
from src.domain.customer import Customer
from src.domain.invoice import Invoice
from src.domain.money import to_minor_units

logger = logging.getLogger(__name__)


class StripePaymentProcessor(PaymentProcessor):

    def __init__(
        self,
        secret_key: str,
        webhook_secret: str,
        frontend_url: str,
        currency: str = "usd",
    ):
        self.secret_key = secret_key
        self.webhook_secret = webhook_secret
        self.frontend_url = frontend_url.rstrip("/")
        self.currency = currency

    async def create_customer(self, customer: Customer) -> str:
        try:
            created = await asyncio.to_thread(
                stripe.Customer.create,
                api_key=self.secret_key,
                email=customer.email,
                name=customer.full_name,
                phone=customer.phone,
                metadata={"customer_id": customer.id},
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe customer creation failed for {customer.id}: {e}")
            raise PaymentProcessorError(str(e))
        return created.id

    async def create_checkout_session(
        self, invoice: Invoice, customer: Customer
    ) -> CheckoutSession:
        params = {
            "api_key": self.secret_key,
            "mode": "payment",
            "payment_method_types": ["card"],
            "line_items": [{
                "price_data": {
                    "currency": self.currency,
                    "product_data": {"name": f"Invoice {invoice.invoice_number}"},
                    "unit_amount": to_minor_units(invoice.amount_due),
                },
                "quantity": 1,
            }],
            "success_url": f"{self.frontend_url}/payment-success?session_id={{CHECKOUT_SESSION_ID}}",
            "cancel_url": f"{self.frontend_url}/invoices/{invoice.id}",
            "metadata": {
                "invoice_id": invoice.id,
                "invoice_number": invoice.invoice_number,
                "customer_id": customer.id,
            },
        }
        if customer.stripe_customer_id:
            params["customer"] = customer.stripe_customer_id
        elif customer.email:
            params["customer_email"] = customer.email

        try:
            session = await asyncio.to_thread(stripe.checkout.Session.create, **params)
        except stripe.StripeError as e:
            logger.error(f"Stripe checkout failed for invoice {invoice.id}: {e}")
            raise PaymentProcessorError(str(e))

        logger.info(f"Checkout session {session.id} created for invoice {invoice.invoice_number}")
        return CheckoutSession(session_id=session.id, url=session.url)

    async def create_refund(
        self, payment_reference: str, amount: Optional[Decimal] = None
    ) -> RefundResult:
        params = {"api_key": self.secret_key, "payment_intent": payment_reference}
        if amount is not None:
            params["amount"] = to_minor_units(amount)

        try:
            refund = await asyncio.to_thread(stripe.Refund.create, **params)
        except stripe.StripeError as e:
            logger.error(f"Stripe refund failed for {payment_reference}: {e}")
            raise PaymentProcessorError(str(e))
        return RefundResult(refund_id=refund.id, status=refund.status)

    def verify_webhook(self, payload: bytes, signature: str) -> ProcessorEvent:
        try:
            stripe.Webhook.construct_event(payload, signature, self.webhook_secret)
        except (ValueError, stripe.SignatureVerificationError) as e:
            raise WebhookVerificationError(f"Invalid webhook: {e}")

        event = json.loads(payload)
        data = event.get("data", {}).get("object", {}) or {}
        metadata = data.get("metadata") or {}
        return ProcessorEvent(
            type=event.get("type", ""),
            session_id=data.get("id"),
            payment_intent=data.get("payment_intent"),
            invoice_id=metadata.get("invoice_id"),
            amount_total=data.get("amount_total"),
        )
