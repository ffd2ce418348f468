from .booking_repository import SqlAlchemyBookingRepository
from .recurring_template_repository import SqlAlchemyRecurringTemplateRepository
from .invoice_repository import SqlAlchemyInvoiceRepository
from .invoice_item_repository import SqlAlchemyInvoiceItemRepository
from .payment_repository import SqlAlchemyPaymentRepository
from .customer_repository import SqlAlchemyCustomerRepository
from .service_repository import SqlAlchemyServiceRepository
from .communication_repository import SqlAlchemyCommunicationRepository
from .user_repository import SqlAlchemyUserRepository
from .user_session_repository import SqlAlchemyUserSessionRepository
from .inventory_repository import SqlAlchemyInventoryRepository

__all__ = [
    "SqlAlchemyBookingRepository",
    "SqlAlchemyRecurringTemplateRepository",
    "SqlAlchemyInvoiceRepository",
    "SqlAlchemyInvoiceItemRepository",
    "SqlAlchemyPaymentRepository",
    "SqlAlchemyCustomerRepository",
    "SqlAlchemyServiceRepository",
    "SqlAlchemyCommunicationRepository",
    "SqlAlchemyUserRepository",
    "SqlAlchemyUserSessionRepository",
    "SqlAlchemyInventoryRepository",
]
