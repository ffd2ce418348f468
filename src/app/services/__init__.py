from .unit_of_work import UnitOfWork
from .email_sender import EmailSender, EmailResult
from .payment_processor import (
    PaymentProcessor,
    PaymentProcessorError,
    WebhookVerificationError,
    CheckoutSession,
    ProcessorEvent,
    RefundResult,
)
from .broadcaster import Broadcaster
from .authenticator import Authenticator, AuthenticationError, Claims
from .invoice_locks import InvoiceLockRegistry
from .customer_mailer import CustomerMailer

__all__ = [
    "UnitOfWork",
    "EmailSender",
    "EmailResult",
    "PaymentProcessor",
    "PaymentProcessorError",
    "WebhookVerificationError",
    "CheckoutSession",
    "ProcessorEvent",
    "RefundResult",
    "Broadcaster",
    "Authenticator",
    "AuthenticationError",
    "Claims",
    "InvoiceLockRegistry",
    "CustomerMailer",
]
