from .base import BaseModel, generate_uuid
from .customer import Customer
from .service import Service
from .user import User, UserRole
from .user_session import UserSession
from .recurring_template import RecurringTemplate
from .booking import Booking, BookingStatus, BookingFrequency
from .invoice import Invoice, InvoiceStatus
from .invoice_item import InvoiceItem
from .payment import Payment, PaymentMethod, PaymentStatus
from .communication import Communication, CommunicationType, CommunicationStatus
from .inventory_item import InventoryItem
from .recurrence import Frequency

__all__ = [
    "BaseModel",
    "generate_uuid",
    "Customer",
    "Service",
    "User",
    "UserRole",
    "UserSession",
    "RecurringTemplate",
    "Booking",
    "BookingStatus",
    "BookingFrequency",
    "Invoice",
    "InvoiceStatus",
    "InvoiceItem",
    "Payment",
    "PaymentMethod",
    "PaymentStatus",
    "Communication",
    "CommunicationType",
    "CommunicationStatus",
    "InventoryItem",
    "Frequency",
]
