"""Scheduling domain use cases"""
from .create_booking import CreateBooking
from .update_booking_status import UpdateBookingStatus
from .get_availability import GetAvailability
from .list_bookings import ListBookings, GetBooking
from .create_recurring_template import CreateRecurringTemplate
from .generate_occurrences import GenerateOccurrences
from .send_booking_reminders import SendBookingReminders
from .dtos import (
    CreateBookingCommandDTO,
    BookingResponseDTO,
    UpdateBookingStatusCommandDTO,
    BookingStatusResponseDTO,
    AvailabilityResponseDTO,
    ListBookingsQueryDTO,
    CreateRecurringTemplateCommandDTO,
    RecurringTemplateResponseDTO,
    GenerateOccurrencesCommandDTO,
    TemplateIssueDTO,
    GenerationResultDTO,
    SendRemindersCommandDTO,
    ReminderSweepResultDTO,
)

__all__ = [
    "CreateBooking",
    "UpdateBookingStatus",
    "GetAvailability",
    "ListBookings",
    "GetBooking",
    "CreateRecurringTemplate",
    "GenerateOccurrences",
    "SendBookingReminders",
    "CreateBookingCommandDTO",
    "BookingResponseDTO",
    "UpdateBookingStatusCommandDTO",
    "BookingStatusResponseDTO",
    "AvailabilityResponseDTO",
    "ListBookingsQueryDTO",
    "CreateRecurringTemplateCommandDTO",
    "RecurringTemplateResponseDTO",
    "GenerateOccurrencesCommandDTO",
    "TemplateIssueDTO",
    "GenerationResultDTO",
    "SendRemindersCommandDTO",
    "ReminderSweepResultDTO",
]
