"""Unit tests for SendBookingReminders use case"""

import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from src.app.services.email_sender import EmailResult
from src.app.use_cases.scheduling.dtos import SendRemindersCommandDTO
from src.app.use_cases.scheduling.send_booking_reminders import SendBookingReminders
from src.domain.booking import Booking, BookingStatus
from src.domain.customer import Customer
from src.domain.service import Service

TODAY = date(2024, 6, 3)
TOMORROW = date(2024, 6, 4)


def make_booking(booking_id, customer_id="cust_1"):
    return Booking(
        id=booking_id,
        customer_id=customer_id,
        service_id="svc_regular",
        scheduled_date=TOMORROW,
        scheduled_time="9:00 AM",
        address="12 Elm St",
        base_price=Decimal("99.00"),
        total_price=Decimal("99.00"),
        status=BookingStatus.CONFIRMED,
    )


@pytest.fixture
def bookings():
    return {b.id: b for b in [make_booking("bk_1"), make_booking("bk_2", "cust_2")]}


@pytest.fixture
def booking_repo(bookings):
    repo = MagicMock()
    repo.get_scheduled_for = AsyncMock(return_value=list(bookings.values()))
    repo.get_by_id = AsyncMock(side_effect=lambda booking_id: bookings[booking_id])
    return repo


@pytest.fixture
def customer_repo():
    customers = {
        "cust_1": Customer(id="cust_1", email="dana@example.com", first_name="Dana"),
        "cust_2": Customer(id="cust_2", email="lee@example.com", first_name="Lee"),
    }
    repo = MagicMock()
    repo.get_by_id = AsyncMock(side_effect=lambda customer_id: customers[customer_id])
    return repo


@pytest.fixture
def service_repo():
    repo = MagicMock()
    repo.get_by_id = AsyncMock(
        return_value=Service(id="svc_regular", name="Regular Cleaning", base_price=Decimal("99.00"))
    )
    return repo


@pytest.fixture
def communication_repo():
    repo = MagicMock()
    repo.exists_sent = AsyncMock(return_value=False)
    repo.create = AsyncMock(side_effect=lambda entity: entity)
    return repo


@pytest.fixture
def email_sender():
    sender = MagicMock()
    sender.send = AsyncMock(return_value=EmailResult(sent=True, message_id="msg_1"))
    return sender


@pytest.fixture
def use_case(mock_uow, booking_repo, customer_repo, service_repo, communication_repo, email_sender):
    return SendBookingReminders(
        uow=mock_uow,
        booking_repo=booking_repo,
        customer_repo=customer_repo,
        service_repo=service_repo,
        communication_repo=communication_repo,
        email_sender=email_sender,
        company_name="Bubble Bee Cleaning",
    )


@pytest.mark.asyncio
class TestSendBookingReminders:

    async def test_reminds_tomorrows_bookings(self, use_case, booking_repo, email_sender, mock_uow):
        """
        Given: Two confirmed bookings tomorrow
        When: The reminder sweep runs today
        Then: Both customers are emailed and each attempt is committed
        """
        # Act
        result = await use_case.execute(SendRemindersCommandDTO(today=TODAY))

        # Assert
        assert result.is_ok()
        assert result.value.target_date == TOMORROW
        assert result.value.bookings_found == 2
        assert result.value.sent == 2
        assert result.value.failed == 0
        assert booking_repo.get_scheduled_for.call_args[0][0] == TOMORROW
        recipients = sorted(call.args[0] for call in email_sender.send.await_args_list)
        assert recipients == ["dana@example.com", "lee@example.com"]
        assert mock_uow.commit.await_count == 2

    async def test_already_reminded_booking_is_skipped(
        self, use_case, communication_repo, email_sender
    ):
        """
        Given: bk_1 already has a sent reminder logged
        When: The sweep runs a second time
        Then: Only bk_2 is emailed
        """
        communication_repo.exists_sent = AsyncMock(
            side_effect=lambda booking_id, subject: booking_id == "bk_1"
        )

        result = await use_case.execute(SendRemindersCommandDTO(today=TODAY))

        assert result.value.already_sent == 1
        assert result.value.sent == 1
        assert email_sender.send.await_args_list[0].args[0] == "lee@example.com"

    async def test_failed_send_is_logged(self, use_case, email_sender, communication_repo):
        email_sender.send = AsyncMock(return_value=EmailResult(sent=False, error="bounced"))

        result = await use_case.execute(SendRemindersCommandDTO(today=TODAY))

        assert result.value.sent == 0
        assert result.value.failed == 2
        assert sorted(result.value.failed_booking_ids) == ["bk_1", "bk_2"]
        logged = communication_repo.create.call_args[0][0]
        assert logged.status == "failed"
        assert logged.subject == "Booking Reminder"

    async def test_one_failure_does_not_stop_the_sweep(
        self, use_case, customer_repo, email_sender, mock_uow
    ):
        def lookup(customer_id):
            if customer_id == "cust_1":
                raise RuntimeError("connection lost")
            return Customer(id="cust_2", email="lee@example.com", first_name="Lee")

        customer_repo.get_by_id = AsyncMock(side_effect=lookup)

        result = await use_case.execute(SendRemindersCommandDTO(today=TODAY))

        assert result.value.sent == 1
        assert result.value.failed_booking_ids == ["bk_1"]
        mock_uow.rollback.assert_awaited_once()

    async def test_load_failure(self, use_case, booking_repo):
        booking_repo.get_scheduled_for = AsyncMock(side_effect=RuntimeError("db down"))

        result = await use_case.execute(SendRemindersCommandDTO(today=TODAY))

        assert result.error.code == "SEND_REMINDERS_FAILED"
