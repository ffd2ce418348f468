from .booking_repository import BookingRepository
from .recurring_template_repository import RecurringTemplateRepository
from .invoice_repository import InvoiceRepository
from .invoice_item_repository import InvoiceItemRepository
from .payment_repository import PaymentRepository
from .customer_repository import CustomerRepository
from .service_repository import ServiceRepository
from .communication_repository import CommunicationRepository
from .user_repository import UserRepository
from .user_session_repository import UserSessionRepository
from .inventory_repository import InventoryRepository

__all__ = [
    "BookingRepository",
    "RecurringTemplateRepository",
    "InvoiceRepository",
    "InvoiceItemRepository",
    "PaymentRepository",
    "CustomerRepository",
    "ServiceRepository",
    "CommunicationRepository",
    "UserRepository",
    "UserSessionRepository",
    "InventoryRepository",
]
