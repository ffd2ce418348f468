"""Payment Processor Interface

Defines the contract for the card-payment processor.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional
from src.domain.customer import Customer
from src.domain.invoice import Invoice


class PaymentProcessorError(Exception):
    """Processor call failed or was rejected"""

    code = "PROCESSOR_ERROR"


class WebhookVerificationError(PaymentProcessorError):
    """Webhook payload signature did not verify"""

    code = "INVALID_SIGNATURE"


@dataclass
class CheckoutSession:
    session_id: str
    url: str


@dataclass
class ProcessorEvent:
    """
    Verified webhook event

    ``invoice_id`` comes from the metadata attached when the checkout
    session was created.
    """

    type: str
    session_id: Optional[str] = None
    payment_intent: Optional[str] = None
    invoice_id: Optional[str] = None
    amount_total: Optional[int] = None


@dataclass
class RefundResult:
    refund_id: str
    status: str


class PaymentProcessor(ABC):
    """Abstract card-payment processor"""

    @abstractmethod
    async def create_customer(self, customer: Customer) -> str:
        """Register the customer with the processor and return its id"""
        pass

    @abstractmethod
    async def create_checkout_session(
        self, invoice: Invoice, customer: Customer
    ) -> CheckoutSession:
        """
        Open a hosted checkout for the invoice's amount due

        Raises:
            PaymentProcessorError: processor rejected the request
        """
        pass

    @abstractmethod
    async def create_refund(
        self, payment_reference: str, amount: Optional[Decimal] = None
    ) -> RefundResult:
        """
        Refund a processor payment, fully when ``amount`` is None

        Raises:
            PaymentProcessorError: processor rejected the request
        """
        pass

    @abstractmethod
    def verify_webhook(self, payload: bytes, signature: str) -> ProcessorEvent:
        """
        Verify the signature and parse the webhook payload

        Raises:
            WebhookVerificationError: signature or payload is invalid
        """
        pass
