from .unit_of_work import SqlAlchemyUnitOfWork
from .email_sender import (
    LoggingEmailSender,
    ResendEmailSender,
    CompositeEmailSender,
    create_email_sender,
)
from .payment_processor import StripePaymentProcessor
from .broadcaster import InMemoryBroadcaster
from .authenticator import JoseAuthenticator

__all__ = [
    "SqlAlchemyUnitOfWork",
    "LoggingEmailSender",
    "ResendEmailSender",
    "CompositeEmailSender",
    "create_email_sender",
    "StripePaymentProcessor",
    "InMemoryBroadcaster",
    "JoseAuthenticator",
]
