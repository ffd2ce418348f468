"""Billing domain use cases"""
from .create_invoice import CreateInvoice
from .create_invoice_from_booking import CreateInvoiceFromBooking
from .get_invoice import GetInvoice, ListInvoices
from .send_invoice import SendInvoice
from .apply_payment import ApplyPayment
from .confirm_processor_payment import ConfirmProcessorPayment
from .sweep_overdue import SweepOverdue
from .create_checkout_session import CreateCheckoutSession
from .refund_payment import RefundPayment
from .dtos import (
    InvoiceLineItemDTO,
    CreateInvoiceCommandDTO,
    CreateInvoiceFromBookingCommandDTO,
    InvoiceItemResponseDTO,
    InvoiceResponseDTO,
    ApplyPaymentCommandDTO,
    PaymentResponseDTO,
    PaymentAppliedResponseDTO,
    ConfirmProcessorPaymentCommandDTO,
    ProcessorConfirmationResponseDTO,
    SweepOverdueCommandDTO,
    OverdueSweepResultDTO,
    SendInvoiceResponseDTO,
    CheckoutSessionResponseDTO,
    RefundPaymentCommandDTO,
    RefundResponseDTO,
)

__all__ = [
    "CreateInvoice",
    "CreateInvoiceFromBooking",
    "GetInvoice",
    "ListInvoices",
    "SendInvoice",
    "ApplyPayment",
    "ConfirmProcessorPayment",
    "SweepOverdue",
    "CreateCheckoutSession",
    "RefundPayment",
    "InvoiceLineItemDTO",
    "CreateInvoiceCommandDTO",
    "CreateInvoiceFromBookingCommandDTO",
    "InvoiceItemResponseDTO",
    "InvoiceResponseDTO",
    "ApplyPaymentCommandDTO",
    "PaymentResponseDTO",
    "PaymentAppliedResponseDTO",
    "ConfirmProcessorPaymentCommandDTO",
    "ProcessorConfirmationResponseDTO",
    "SweepOverdueCommandDTO",
    "OverdueSweepResultDTO",
    "SendInvoiceResponseDTO",
    "CheckoutSessionResponseDTO",
    "RefundPaymentCommandDTO",
    "RefundResponseDTO",
]
