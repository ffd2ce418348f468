"""CreateBooking Use Case

Accepts a public booking submission from the website.
"""

import logging
from typing import Optional
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.email_sender import EmailSender
from src.app.services.broadcaster import Broadcaster
from src.app.services.customer_mailer import CustomerMailer
from src.app.services import email_templates
from src.app.repositories.booking_repository import BookingRepository
from src.app.repositories.customer_repository import CustomerRepository
from src.app.repositories.service_repository import ServiceRepository
from src.app.repositories.recurring_template_repository import RecurringTemplateRepository
from src.app.repositories.communication_repository import CommunicationRepository
from src.domain.booking import (
    Booking,
    BookingFrequency,
    BookingStatus,
    BookingValidationError,
    TIME_SLOTS,
    estimate_price,
    price_total,
    resolve_service_id,
)
from src.domain.customer import Customer
from src.domain.money import quantize_money
from src.domain.recurrence import Frequency, advance_occurrence
from src.domain.recurring_template import RecurringTemplate
from .dtos import CreateBookingCommandDTO, BookingResponseDTO

logger = logging.getLogger(__name__)


class CreateBooking:
    """
    Use Case: Public booking submission

    Business Rules:
    1. Customer is found or created by lower-cased email
    2. Unknown service keys fall back to regular cleaning
    3. A time slot can hold one active booking per date
    4. Price is the explicit quote, or estimated from the property size
    5. A recurring frequency also creates an active RecurringTemplate
       starting at the occurrence after the booked date
    6. Email failure never fails the booking

    Flow:
    1. Validate service and slot
    2. Find or create customer
    3. Create template (recurring only) and booking
    4. Commit transaction
    5. Send confirmation + business notice, log communications
    6. Publish booking:created
    """

    def __init__(
        self,
        uow: UnitOfWork,
        booking_repo: BookingRepository,
        customer_repo: CustomerRepository,
        service_repo: ServiceRepository,
        template_repo: RecurringTemplateRepository,
        communication_repo: CommunicationRepository,
        email_sender: EmailSender,
        broadcaster: Broadcaster,
        company_name: str,
        business_email: Optional[str] = None,
    ):
        self.uow = uow
        self.booking_repo = booking_repo
        self.customer_repo = customer_repo
        self.service_repo = service_repo
        self.template_repo = template_repo
        self.email_sender = email_sender
        self.broadcaster = broadcaster
        self.company_name = company_name
        self.business_email = business_email
        self.mailer = CustomerMailer(email_sender, communication_repo)

    async def execute(self, command: CreateBookingCommandDTO) -> Result[BookingResponseDTO]:
        try:
            # Step 1: Validate service and time slot
            service_id = resolve_service_id(command.service)
            service = await self.service_repo.get_by_id(service_id)
            if not service or not service.is_active:
                return Return.err(
                    Error(
                        code="SERVICE_NOT_FOUND",
                        message=f"Service {service_id} is not available",
                    )
                )

            if command.scheduled_time not in TIME_SLOTS:
                return Return.err(
                    Error(
                        code="SLOT_UNAVAILABLE",
                        message=f"{command.scheduled_time} is not a bookable time slot",
                        reason=f"Valid slots: {', '.join(TIME_SLOTS)}",
                    )
                )

            booked_slots = await self.booking_repo.get_booked_slots(command.scheduled_date)
            if command.scheduled_time in booked_slots:
                return Return.err(
                    Error(
                        code="SLOT_UNAVAILABLE",
                        message=(
                            f"{command.scheduled_time} on {command.scheduled_date.isoformat()} "
                            f"is already booked"
                        ),
                    )
                )

            # Step 2: Find or create the customer
            customer = await self._find_or_create_customer(command)

            address = command.address or customer.address
            if not address:
                return Return.err(
                    Error(
                        code="ADDRESS_REQUIRED",
                        message="A service address is required",
                    )
                )

            # Step 3: Price the booking
            if command.price is not None:
                quoted = quantize_money(command.price)
            else:
                quoted = estimate_price(
                    service.base_price, command.sqft, command.bedrooms, command.bathrooms
                )
            total = price_total(quoted)

            # Step 4: Recurring choice creates the standing template
            template = None
            frequency = BookingFrequency(command.frequency)
            if frequency != BookingFrequency.ONCE:
                recurrence = Frequency(frequency.value)
                anchor_day = command.scheduled_date.day if recurrence == Frequency.MONTHLY else None
                template = await self.template_repo.create(
                    RecurringTemplate(
                        customer_id=customer.id,
                        service_id=service.id,
                        frequency=recurrence.value,
                        anchor_day=anchor_day,
                        preferred_time=command.scheduled_time,
                        address=address,
                        city=command.city,
                        state=command.state,
                        zip_code=command.zip_code,
                        sqft=command.sqft,
                        bedrooms=command.bedrooms,
                        bathrooms=command.bathrooms,
                        base_price=quoted,
                        next_date=advance_occurrence(
                            command.scheduled_date, recurrence, anchor_day=anchor_day
                        ),
                    )
                )

            booking = await self.booking_repo.create(
                Booking(
                    customer_id=customer.id,
                    service_id=service.id,
                    scheduled_date=command.scheduled_date,
                    scheduled_time=command.scheduled_time,
                    estimated_duration=service.duration_minutes,
                    address=address,
                    city=command.city,
                    state=command.state,
                    zip_code=command.zip_code,
                    access_notes=command.access_notes,
                    sqft=command.sqft,
                    bedrooms=command.bedrooms,
                    bathrooms=command.bathrooms,
                    base_price=quoted,
                    total_price=total,
                    status=BookingStatus.PENDING,
                    frequency=frequency,
                    is_recurring=template is not None,
                    recurring_template_id=template.id if template else None,
                )
            )

            # Step 5: Commit transaction
            await self.uow.commit()
            response = BookingResponseDTO.from_entity(booking)

            logger.info(
                f"Booking {booking.id} created for customer {customer.id} on "
                f"{booking.scheduled_date.isoformat()} {booking.scheduled_time} ({total})"
            )

        except BookingValidationError as e:
            await self.uow.rollback()
            return Return.err(Error(code=e.code, message=str(e)))
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="CREATE_BOOKING_FAILED",
                    message="Failed to create booking",
                    reason=str(e),
                )
            )

        # Step 6: Notifications never undo the booking
        await self._notify(customer, booking, service.name)
        self.broadcaster.publish("booking:created", response.model_dump(mode="json"))

        return Return.ok(response)

    async def _find_or_create_customer(self, command: CreateBookingCommandDTO) -> Customer:
        email = command.customer_email.strip().lower()
        customer = await self.customer_repo.get_by_email(email)
        if customer:
            return customer

        name_parts = (command.customer_name or "").split()
        return await self.customer_repo.create(
            Customer(
                email=email,
                first_name=name_parts[0] if name_parts else "Customer",
                last_name=" ".join(name_parts[1:]),
                phone=command.customer_phone,
                address=command.address,
                city=command.city,
                state=command.state,
                zip_code=command.zip_code,
                source="website",
            )
        )

    async def _notify(self, customer: Customer, booking: Booking, service_name: str) -> None:
        try:
            confirmation = email_templates.booking_confirmation(
                customer, booking, service_name, self.company_name
            )
            await self.mailer.deliver(
                customer, confirmation, booking_id=booking.id, log_subject="Booking Confirmation"
            )

            if self.business_email:
                notice = email_templates.business_booking_notice(customer, booking, service_name)
                result = await self.email_sender.send(
                    self.business_email, notice.subject, notice.text_body, notice.html_body
                )
                if not result.sent:
                    logger.error(f"Business notice for booking {booking.id} not sent: {result.error}")

            await self.uow.commit()
        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Failed to send booking notifications for {booking.id}: {e}")
