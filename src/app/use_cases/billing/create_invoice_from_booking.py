"""CreateInvoiceFromBooking Use Case

Bills a completed booking.
"""

from libs.result import Result, Return, Error
from src.app.repositories.booking_repository import BookingRepository
from src.app.repositories.service_repository import ServiceRepository
from src.domain.booking import BookingStatus
from src.domain.money import quantize_money
from .create_invoice import CreateInvoice
from .dtos import (
    CreateInvoiceCommandDTO,
    CreateInvoiceFromBookingCommandDTO,
    InvoiceLineItemDTO,
    InvoiceResponseDTO,
)


class CreateInvoiceFromBooking:
    """
    Use Case: Invoice a completed booking

    One line for the service (base + add-ons), the booking discount
    carried over, tax applied by CreateInvoice. A booking that already has
    an invoice returns INVOICE_ALREADY_EXISTS.
    """

    def __init__(
        self,
        create_invoice: CreateInvoice,
        booking_repo: BookingRepository,
        service_repo: ServiceRepository,
    ):
        self.create_invoice = create_invoice
        self.booking_repo = booking_repo
        self.service_repo = service_repo

    async def execute(
        self, command: CreateInvoiceFromBookingCommandDTO
    ) -> Result[InvoiceResponseDTO]:
        try:
            booking = await self.booking_repo.get_by_id(command.booking_id)
            if not booking:
                return Return.err(
                    Error(
                        code="BOOKING_NOT_FOUND",
                        message=f"Booking {command.booking_id} not found",
                    )
                )
            if BookingStatus(booking.status) != BookingStatus.COMPLETED:
                return Return.err(
                    Error(
                        code="INVALID_STATUS_TRANSITION",
                        message="Only completed bookings can be invoiced",
                        reason=f"Booking status is {BookingStatus(booking.status).value}",
                    )
                )

            service = await self.service_repo.get_by_id(booking.service_id)
            service_name = service.name if service else "Cleaning service"

            invoice_command = CreateInvoiceCommandDTO(
                customer_id=booking.customer_id,
                booking_id=booking.id,
                line_items=[
                    InvoiceLineItemDTO(
                        description=f"{service_name} - {booking.scheduled_date.isoformat()}",
                        quantity=1,
                        unit_price=quantize_money(booking.base_price + booking.addons_price),
                    )
                ],
                discount_amount=booking.discount_amount,
                issue_date=command.issue_date,
            )
        except Exception as e:
            return Return.err(
                Error(
                    code="CREATE_INVOICE_FAILED",
                    message="Failed to build invoice from booking",
                    reason=str(e),
                )
            )

        return await self.create_invoice.execute(invoice_command)
