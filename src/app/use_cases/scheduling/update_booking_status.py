"""UpdateBookingStatus Use Case

Staff moves a booking through its lifecycle.
"""

import logging
from typing import Optional
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.broadcaster import Broadcaster
from src.app.repositories.booking_repository import BookingRepository
from src.app.repositories.customer_repository import CustomerRepository
from src.app.use_cases.billing.create_invoice_from_booking import CreateInvoiceFromBooking
from src.app.use_cases.billing.dtos import CreateInvoiceFromBookingCommandDTO
from src.domain.booking import BookingStatus, BookingValidationError
from .dtos import UpdateBookingStatusCommandDTO, BookingStatusResponseDTO, BookingResponseDTO

logger = logging.getLogger(__name__)


class UpdateBookingStatus:
    """
    Use Case: Change booking status

    Business Rules:
    1. Only transitions of the booking state machine are accepted
       (completed -> pending is rejected)
    2. Cancelling requires a reason
    3. Lifecycle timestamps are set once; re-entering a status is a no-op
    4. Completion increments the customer's completed job count
    5. Completion optionally issues one invoice for the booking

    Flow:
    1. Get booking with lock (SELECT FOR UPDATE)
    2. Apply transition
    3. Update customer job count on completion
    4. Commit transaction
    5. Create invoice from booking (own transaction, failure is logged)
    6. Publish booking:updated
    """

    def __init__(
        self,
        uow: UnitOfWork,
        booking_repo: BookingRepository,
        customer_repo: CustomerRepository,
        broadcaster: Broadcaster,
        invoice_from_booking: Optional[CreateInvoiceFromBooking] = None,
    ):
        self.uow = uow
        self.booking_repo = booking_repo
        self.customer_repo = customer_repo
        self.broadcaster = broadcaster
        self.invoice_from_booking = invoice_from_booking

    async def execute(
        self, command: UpdateBookingStatusCommandDTO
    ) -> Result[BookingStatusResponseDTO]:
        try:
            # Step 1: Get booking with pessimistic lock
            booking = await self.booking_repo.get_by_id(command.booking_id, for_update=True)
            if not booking:
                return Return.err(
                    Error(
                        code="BOOKING_NOT_FOUND",
                        message=f"Booking {command.booking_id} not found",
                    )
                )

            # Step 2: Apply the transition (raises on invalid input)
            changed = booking.transition_to(
                command.status, cancellation_reason=command.cancellation_reason
            )

            if not changed:
                unchanged = BookingStatusResponseDTO(
                    booking=BookingResponseDTO.from_entity(booking), changed=False
                )
                await self.uow.rollback()
                return Return.ok(unchanged)

            booking = await self.booking_repo.update(booking)

            # Step 3: Completed jobs count towards the customer aggregate
            completed = BookingStatus(booking.status) == BookingStatus.COMPLETED
            if completed:
                await self.customer_repo.increment_total_jobs(booking.customer_id)

            # Step 4: Commit transaction
            await self.uow.commit()
            response = BookingStatusResponseDTO(
                booking=BookingResponseDTO.from_entity(booking), changed=True
            )

            logger.info(f"Booking {booking.id} moved to {response.booking.status}")

        except BookingValidationError as e:
            await self.uow.rollback()
            return Return.err(Error(code=e.code, message=str(e)))
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="UPDATE_BOOKING_STATUS_FAILED",
                    message="Failed to update booking status",
                    reason=str(e),
                )
            )

        # Step 5: Invoice the completed job
        if completed and self.invoice_from_booking is not None:
            invoice_result = await self.invoice_from_booking.execute(
                CreateInvoiceFromBookingCommandDTO(
                    booking_id=response.booking.booking_id, issue_date=command.today
                )
            )
            if invoice_result.is_ok():
                response.invoice_id = invoice_result.value.invoice_id
            elif invoice_result.error.code != "INVOICE_ALREADY_EXISTS":
                logger.error(
                    f"Auto-invoice for booking {response.booking.booking_id} failed: "
                    f"{invoice_result.error.message} ({invoice_result.error.reason})"
                )

        # Step 6: Notify dashboards
        self.broadcaster.publish("booking:updated", response.booking.model_dump(mode="json"))

        return Return.ok(response)
