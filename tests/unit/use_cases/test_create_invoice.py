"""Unit tests for CreateInvoice and CreateInvoiceFromBooking use cases

Tests cover:
- Totals: line rounding, discount, tax half-up on the discounted subtotal
- Invoice number and due date defaults
- Duplicate, foreign-booking and discount validation
- Invoicing a completed booking
"""

import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from src.app.use_cases.billing.create_invoice import CreateInvoice
from src.app.use_cases.billing.create_invoice_from_booking import CreateInvoiceFromBooking
from src.app.use_cases.billing.dtos import (
    CreateInvoiceCommandDTO,
    CreateInvoiceFromBookingCommandDTO,
    InvoiceLineItemDTO,
)
from src.domain.booking import Booking, BookingStatus
from src.domain.customer import Customer
from src.domain.service import Service


async def passthrough(entity):
    return entity


async def passthrough_many(entities):
    return entities


@pytest.fixture
def customer():
    return Customer(id="cust_1", email="dana@example.com", first_name="Dana")


@pytest.fixture
def booking():
    return Booking(
        id="bk_1",
        customer_id="cust_1",
        service_id="svc_deep",
        scheduled_date=date(2024, 6, 3),
        scheduled_time="9:00 AM",
        address="12 Elm St",
        base_price=Decimal("179.00"),
        addons_price=Decimal("25.00"),
        discount_amount=Decimal("10.00"),
        total_price=Decimal("194.00"),
        status=BookingStatus.COMPLETED,
    )


@pytest.fixture
def invoice_repo():
    repo = MagicMock()
    repo.exists_for_booking = AsyncMock(return_value=False)
    repo.generate_invoice_number = AsyncMock(return_value="INV-1001")
    repo.create = AsyncMock(side_effect=passthrough)
    return repo


@pytest.fixture
def item_repo():
    repo = MagicMock()
    repo.create_many = AsyncMock(side_effect=passthrough_many)
    return repo


@pytest.fixture
def customer_repo(customer):
    repo = MagicMock()
    repo.get_by_id = AsyncMock(return_value=customer)
    return repo


@pytest.fixture
def booking_repo(booking):
    repo = MagicMock()
    repo.get_by_id = AsyncMock(return_value=booking)
    return repo


@pytest.fixture
def use_case(mock_uow, invoice_repo, item_repo, customer_repo, booking_repo, mock_broadcaster):
    return CreateInvoice(
        uow=mock_uow,
        invoice_repo=invoice_repo,
        item_repo=item_repo,
        customer_repo=customer_repo,
        booking_repo=booking_repo,
        tax_rate=Decimal("0.08"),
        due_days=14,
        broadcaster=mock_broadcaster,
    )


def command(**overrides):
    data = {
        "customer_id": "cust_1",
        "line_items": [
            InvoiceLineItemDTO(description="Deep clean", quantity=1, unit_price=Decimal("179.00")),
            InvoiceLineItemDTO(description="Oven", quantity=2, unit_price=Decimal("12.50")),
        ],
        "issue_date": date(2024, 6, 3),
    }
    data.update(overrides)
    return CreateInvoiceCommandDTO(**data)


@pytest.mark.asyncio
class TestCreateInvoiceTotals:

    async def test_totals_with_discount_and_tax(self, use_case, invoice_repo, mock_uow, mock_broadcaster):
        """
        Given: Lines of 179.00 and 2 x 12.50 with a 4.00 discount at 8% tax
        When: The invoice is created
        Then: subtotal 204.00, tax 16.00 on 200.00, total 216.00, all due
        """
        # Act
        result = await use_case.execute(command(discount_amount=Decimal("4.00")))

        # Assert
        assert result.is_ok()
        invoice = result.value
        assert invoice.invoice_number == "INV-1001"
        assert invoice.subtotal == Decimal("204.00")
        assert invoice.discount_amount == Decimal("4.00")
        assert invoice.tax_amount == Decimal("16.00")
        assert invoice.total == Decimal("216.00")
        assert invoice.amount_due == Decimal("216.00")
        assert invoice.amount_paid == Decimal("0.00")
        assert invoice.status == "draft"
        assert [item.total for item in invoice.items] == [Decimal("179.00"), Decimal("25.00")]
        invoice_repo.generate_invoice_number.assert_awaited_once_with("INV-", 1001)
        mock_uow.commit.assert_awaited_once()
        assert mock_broadcaster.publish.call_args[0][0] == "invoice:created"

    async def test_tax_rounds_to_cents(self, use_case):
        lines = [InvoiceLineItemDTO(description="Window wash", unit_price=Decimal("12.34"))]

        result = await use_case.execute(command(line_items=lines))

        # 12.34 * 0.08 = 0.9872
        assert result.value.tax_amount == Decimal("0.99")
        assert result.value.total == Decimal("13.33")

    async def test_half_cent_tax_rounds_up(
        self, mock_uow, invoice_repo, item_repo, customer_repo, booking_repo
    ):
        use_case = CreateInvoice(
            uow=mock_uow,
            invoice_repo=invoice_repo,
            item_repo=item_repo,
            customer_repo=customer_repo,
            booking_repo=booking_repo,
            tax_rate=Decimal("0.05"),
        )
        lines = [InvoiceLineItemDTO(description="Trash bags", unit_price=Decimal("0.10"))]

        result = await use_case.execute(command(line_items=lines))

        # 0.10 * 0.05 = 0.005
        assert result.value.tax_amount == Decimal("0.01")

    async def test_due_date_defaults_to_issue_plus_due_days(self, use_case):
        result = await use_case.execute(command())

        assert result.value.due_date == date(2024, 6, 17)

    async def test_explicit_due_date_is_kept(self, use_case):
        result = await use_case.execute(command(due_date=date(2024, 7, 1)))

        assert result.value.due_date == date(2024, 7, 1)


@pytest.mark.asyncio
class TestCreateInvoiceRejected:

    async def test_discount_above_subtotal(self, use_case, invoice_repo):
        result = await use_case.execute(command(discount_amount=Decimal("500.00")))

        assert result.error.code == "INVALID_DISCOUNT"
        invoice_repo.create.assert_not_awaited()

    async def test_booking_already_invoiced(self, use_case, invoice_repo):
        """
        Given: A booking that already has an invoice
        When: A second invoice is created for it
        Then: INVOICE_ALREADY_EXISTS is returned
        """
        invoice_repo.exists_for_booking = AsyncMock(return_value=True)

        result = await use_case.execute(command(booking_id="bk_1"))

        assert result.error.code == "INVOICE_ALREADY_EXISTS"
        invoice_repo.create.assert_not_awaited()

    async def test_booking_of_another_customer(self, use_case, booking):
        booking.customer_id = "cust_other"

        result = await use_case.execute(command(booking_id="bk_1"))

        assert result.error.code == "BOOKING_NOT_FOUND"

    async def test_unknown_customer(self, use_case, customer_repo):
        customer_repo.get_by_id = AsyncMock(return_value=None)

        result = await use_case.execute(command())

        assert result.error.code == "CUSTOMER_NOT_FOUND"

    async def test_repository_failure(self, use_case, item_repo, mock_uow, mock_broadcaster):
        item_repo.create_many = AsyncMock(side_effect=RuntimeError("constraint"))

        result = await use_case.execute(command())

        assert result.error.code == "CREATE_INVOICE_FAILED"
        mock_uow.rollback.assert_awaited_once()
        mock_broadcaster.publish.assert_not_called()


@pytest.fixture
def service_repo():
    repo = MagicMock()
    repo.get_by_id = AsyncMock(
        return_value=Service(id="svc_deep", name="Deep Clean", base_price=Decimal("179.00"))
    )
    return repo


@pytest.fixture
def from_booking(use_case, booking_repo, service_repo):
    return CreateInvoiceFromBooking(
        create_invoice=use_case, booking_repo=booking_repo, service_repo=service_repo
    )


@pytest.mark.asyncio
class TestCreateInvoiceFromBooking:

    async def test_completed_booking_is_invoiced(self, from_booking):
        """
        Given: A completed deep clean at 179.00 + 25.00 add-ons, 10.00 off
        When: It is invoiced
        Then: One line at 204.00, discount carried, tax on 194.00
        """
        # Act
        result = await from_booking.execute(
            CreateInvoiceFromBookingCommandDTO(booking_id="bk_1", issue_date=date(2024, 6, 3))
        )

        # Assert
        assert result.is_ok()
        invoice = result.value
        assert invoice.booking_id == "bk_1"
        assert len(invoice.items) == 1
        assert invoice.items[0].description == "Deep Clean - 2024-06-03"
        assert invoice.items[0].unit_price == Decimal("204.00")
        assert invoice.discount_amount == Decimal("10.00")
        assert invoice.tax_amount == Decimal("15.52")
        assert invoice.total == Decimal("209.52")

    async def test_booking_not_completed(self, from_booking, booking, invoice_repo):
        booking.status = BookingStatus.CONFIRMED

        result = await from_booking.execute(CreateInvoiceFromBookingCommandDTO(booking_id="bk_1"))

        assert result.error.code == "INVALID_STATUS_TRANSITION"
        invoice_repo.create.assert_not_awaited()

    async def test_missing_booking(self, from_booking, booking_repo):
        booking_repo.get_by_id = AsyncMock(return_value=None)

        result = await from_booking.execute(CreateInvoiceFromBookingCommandDTO(booking_id="bk_x"))

        assert result.error.code == "BOOKING_NOT_FOUND"
