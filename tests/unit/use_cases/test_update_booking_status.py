"""Unit tests for UpdateBookingStatus use case"""

import pytest
from datetime import date, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from libs.result import Return, Error
from src.app.use_cases.billing.dtos import InvoiceResponseDTO
from src.app.use_cases.scheduling.dtos import UpdateBookingStatusCommandDTO
from src.app.use_cases.scheduling.update_booking_status import UpdateBookingStatus
from src.domain.booking import Booking, BookingStatus


async def passthrough(entity):
    return entity


def make_booking(status=BookingStatus.IN_PROGRESS, **overrides):
    data = dict(
        id="bk_1",
        customer_id="cust_1",
        service_id="svc_regular",
        scheduled_date=date(2024, 6, 3),
        scheduled_time="9:00 AM",
        address="12 Elm St",
        base_price=Decimal("99.00"),
        total_price=Decimal("99.00"),
        status=status,
    )
    data.update(overrides)
    return Booking(**data)


@pytest.fixture
def booking():
    return make_booking()


@pytest.fixture
def booking_repo(booking):
    repo = MagicMock()
    repo.get_by_id = AsyncMock(return_value=booking)
    repo.update = AsyncMock(side_effect=passthrough)
    return repo


@pytest.fixture
def customer_repo():
    repo = MagicMock()
    repo.increment_total_jobs = AsyncMock()
    return repo


@pytest.fixture
def invoice_from_booking():
    invoice = MagicMock(spec=InvoiceResponseDTO)
    invoice.invoice_id = "inv_1"
    use_case = MagicMock()
    use_case.execute = AsyncMock(return_value=Return.ok(invoice))
    return use_case


@pytest.fixture
def use_case(mock_uow, booking_repo, customer_repo, mock_broadcaster, invoice_from_booking):
    return UpdateBookingStatus(
        uow=mock_uow,
        booking_repo=booking_repo,
        customer_repo=customer_repo,
        broadcaster=mock_broadcaster,
        invoice_from_booking=invoice_from_booking,
    )


def command(status, **overrides):
    return UpdateBookingStatusCommandDTO(
        booking_id="bk_1", status=status, today=date(2024, 6, 3), **overrides
    )


@pytest.mark.asyncio
class TestCompletion:

    async def test_completion_counts_job_and_invoices(
        self, use_case, customer_repo, invoice_from_booking, mock_uow, mock_broadcaster
    ):
        """
        Given: A booking in progress
        When: Staff marks it completed
        Then: completed_at is set, the customer's job count grows and an invoice is issued
        """
        # Act
        result = await use_case.execute(command(BookingStatus.COMPLETED))

        # Assert
        assert result.is_ok()
        assert result.value.changed is True
        assert result.value.booking.status == "completed"
        assert result.value.booking.completed_at is not None
        assert result.value.invoice_id == "inv_1"
        customer_repo.increment_total_jobs.assert_awaited_once_with("cust_1")
        mock_uow.commit.assert_awaited_once()

        invoice_command = invoice_from_booking.execute.call_args[0][0]
        assert invoice_command.booking_id == "bk_1"
        assert invoice_command.issue_date == date(2024, 6, 3)
        assert mock_broadcaster.publish.call_args[0][0] == "booking:updated"

    async def test_invoice_failure_keeps_completion(self, use_case, invoice_from_booking):
        invoice_from_booking.execute = AsyncMock(
            return_value=Return.err(Error(code="CREATE_INVOICE_FAILED", message="boom"))
        )

        result = await use_case.execute(command(BookingStatus.COMPLETED))

        assert result.is_ok()
        assert result.value.booking.status == "completed"
        assert result.value.invoice_id is None

    async def test_without_auto_invoice(self, mock_uow, booking_repo, customer_repo, mock_broadcaster):
        use_case = UpdateBookingStatus(
            uow=mock_uow,
            booking_repo=booking_repo,
            customer_repo=customer_repo,
            broadcaster=mock_broadcaster,
        )

        result = await use_case.execute(command(BookingStatus.COMPLETED))

        assert result.value.invoice_id is None


@pytest.mark.asyncio
class TestTransitions:

    async def test_confirm_pending_booking(self, use_case, booking, customer_repo, invoice_from_booking):
        booking.status = BookingStatus.PENDING

        result = await use_case.execute(command(BookingStatus.CONFIRMED))

        assert result.value.booking.status == "confirmed"
        assert result.value.booking.confirmed_at is not None
        customer_repo.increment_total_jobs.assert_not_awaited()
        invoice_from_booking.execute.assert_not_awaited()

    async def test_completed_back_to_pending_rejected(self, use_case, booking, booking_repo, mock_uow):
        """
        Given: A completed booking
        When: Staff tries to move it back to pending
        Then: INVALID_STATUS_TRANSITION is returned and nothing is written
        """
        booking.status = BookingStatus.COMPLETED

        result = await use_case.execute(command(BookingStatus.PENDING))

        assert result.error.code == "INVALID_STATUS_TRANSITION"
        booking_repo.update.assert_not_awaited()
        mock_uow.rollback.assert_awaited_once()

    async def test_reentering_status_is_noop(
        self, use_case, booking, booking_repo, customer_repo, mock_uow
    ):
        first_completion = datetime(2024, 6, 3, 15, 0)
        booking.status = BookingStatus.COMPLETED
        booking.completed_at = first_completion

        result = await use_case.execute(command(BookingStatus.COMPLETED))

        assert result.value.changed is False
        assert result.value.booking.completed_at == first_completion
        booking_repo.update.assert_not_awaited()
        customer_repo.increment_total_jobs.assert_not_awaited()
        mock_uow.commit.assert_not_awaited()

    async def test_cancel_requires_reason(self, use_case, booking):
        booking.status = BookingStatus.PENDING

        result = await use_case.execute(command(BookingStatus.CANCELLED))

        assert result.error.code == "CANCELLATION_REASON_REQUIRED"

    async def test_cancel_with_reason(self, use_case, booking):
        booking.status = BookingStatus.CONFIRMED

        result = await use_case.execute(
            command(BookingStatus.CANCELLED, cancellation_reason=" Customer moved ")
        )

        assert result.value.booking.status == "cancelled"
        assert result.value.booking.cancellation_reason == "Customer moved"

    async def test_booking_not_found(self, use_case, booking_repo):
        booking_repo.get_by_id = AsyncMock(return_value=None)

        result = await use_case.execute(command(BookingStatus.CONFIRMED))

        assert result.error.code == "BOOKING_NOT_FOUND"
