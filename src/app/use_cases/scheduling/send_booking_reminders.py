"""SendBookingReminders Use Case

Nightly sweep: remind customers of tomorrow's cleanings.
"""

import logging
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.email_sender import EmailSender
from src.app.services.customer_mailer import CustomerMailer
from src.app.services import email_templates
from src.app.repositories.booking_repository import BookingRepository
from src.app.repositories.customer_repository import CustomerRepository
from src.app.repositories.service_repository import ServiceRepository
from src.app.repositories.communication_repository import CommunicationRepository
from src.domain.booking import BookingStatus
from src.domain.recurrence import tomorrow_window
from .dtos import SendRemindersCommandDTO, ReminderSweepResultDTO

logger = logging.getLogger(__name__)

REMINDABLE_STATUSES = (BookingStatus.PENDING, BookingStatus.CONFIRMED)


class SendBookingReminders:
    """
    Use Case: Reminder sweep

    Business Rules:
    1. Targets pending/confirmed bookings scheduled for tomorrow
    2. A booking with a sent reminder already logged is skipped, so a
       doubled tick sends nothing twice
    3. Every attempt is logged as a communication; failures keep
       status=failed for manual follow-up
    4. One booking's failure never stops the sweep
    """

    def __init__(
        self,
        uow: UnitOfWork,
        booking_repo: BookingRepository,
        customer_repo: CustomerRepository,
        service_repo: ServiceRepository,
        communication_repo: CommunicationRepository,
        email_sender: EmailSender,
        company_name: str,
    ):
        self.uow = uow
        self.booking_repo = booking_repo
        self.customer_repo = customer_repo
        self.service_repo = service_repo
        self.communication_repo = communication_repo
        self.company_name = company_name
        self.mailer = CustomerMailer(email_sender, communication_repo)

    async def execute(self, command: SendRemindersCommandDTO) -> Result[ReminderSweepResultDTO]:
        target_date = tomorrow_window(command.today)

        try:
            bookings = await self.booking_repo.get_scheduled_for(target_date, REMINDABLE_STATUSES)
            booking_ids = [booking.id for booking in bookings]
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="SEND_REMINDERS_FAILED",
                    message="Failed to load bookings for reminders",
                    reason=str(e),
                )
            )

        logger.info(f"Found {len(booking_ids)} bookings for {target_date.isoformat()}")

        sent = 0
        already_sent = 0
        failed_ids = []

        for booking_id in booking_ids:
            try:
                if await self.communication_repo.exists_sent(
                    booking_id, email_templates.REMINDER_LOG_SUBJECT
                ):
                    already_sent += 1
                    continue

                booking = await self.booking_repo.get_by_id(booking_id)
                customer = await self.customer_repo.get_by_id(booking.customer_id)
                service = await self.service_repo.get_by_id(booking.service_id)
                message = email_templates.booking_reminder(
                    customer, booking, service.name if service else "Cleaning", self.company_name
                )

                result = await self.mailer.deliver(
                    customer,
                    message,
                    booking_id=booking_id,
                    log_subject=email_templates.REMINDER_LOG_SUBJECT,
                )
                await self.uow.commit()

                if result.sent:
                    sent += 1
                else:
                    failed_ids.append(booking_id)

            except Exception as e:
                await self.uow.rollback()
                logger.error(f"Failed to send reminder for booking {booking_id}: {e}")
                failed_ids.append(booking_id)

        logger.info(
            f"Reminder sweep for {target_date.isoformat()}: {sent} sent, "
            f"{already_sent} already sent, {len(failed_ids)} failed"
        )

        return Return.ok(
            ReminderSweepResultDTO(
                target_date=target_date,
                bookings_found=len(booking_ids),
                sent=sent,
                already_sent=already_sent,
                failed=len(failed_ids),
                failed_booking_ids=failed_ids,
            )
        )
