"""Unit tests for SweepOverdue use case"""

import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from src.app.services.email_sender import EmailResult
from src.app.use_cases.billing.sweep_overdue import SweepOverdue
from src.app.use_cases.billing.dtos import SweepOverdueCommandDTO
from src.domain.communication import CommunicationStatus
from src.domain.customer import Customer
from src.domain.invoice import Invoice, InvoiceStatus

TODAY = date(2024, 6, 10)


def make_invoice(invoice_id, amount_due="100.00", due_date=date(2024, 6, 9), status=InvoiceStatus.SENT):
    amount_due = Decimal(amount_due)
    return Invoice(
        id=invoice_id,
        invoice_number=f"INV-{invoice_id}",
        customer_id="cust_1",
        subtotal=Decimal("100.00"),
        total=Decimal("100.00"),
        amount_paid=Decimal("100.00") - amount_due,
        amount_due=amount_due,
        status=status,
        issue_date=date(2024, 5, 26),
        due_date=due_date,
    )


@pytest.fixture
def invoices():
    return {}


@pytest.fixture
def invoice_repo(invoices):
    repo = MagicMock()
    repo.get_overdue_candidates = AsyncMock(side_effect=lambda today: list(invoices.values()))
    repo.get_by_id = AsyncMock(side_effect=lambda invoice_id, for_update=False: invoices.get(invoice_id))
    repo.update = AsyncMock(side_effect=lambda i: i)
    return repo


@pytest.fixture
def customer_repo():
    repo = MagicMock()
    repo.get_by_id = AsyncMock(
        return_value=Customer(id="cust_1", email="ann@example.com", first_name="Ann")
    )
    return repo


@pytest.fixture
def communication_repo():
    repo = MagicMock()
    repo.create = AsyncMock(side_effect=lambda c: c)
    return repo


@pytest.fixture
def email_sender():
    sender = MagicMock()
    sender.send = AsyncMock(return_value=EmailResult(sent=True, message_id="msg_1"))
    return sender


@pytest.fixture
def use_case(mock_uow, invoice_repo, customer_repo, communication_repo, email_sender):
    return SweepOverdue(
        uow=mock_uow,
        invoice_repo=invoice_repo,
        customer_repo=customer_repo,
        communication_repo=communication_repo,
        email_sender=email_sender,
    )


@pytest.mark.asyncio
class TestSweepOverdue:

    async def test_past_due_unpaid_invoice_becomes_overdue(self, use_case, invoices, email_sender):
        """
        Given: A sent invoice due yesterday with 100.00 outstanding
        When: The sweep runs
        Then: It is overdue and a notice is emailed
        """
        # Arrange
        invoices["a"] = make_invoice("a")

        # Act
        result = await use_case.execute(SweepOverdueCommandDTO(today=TODAY))

        # Assert
        assert result.is_ok()
        assert invoices["a"].status == InvoiceStatus.OVERDUE
        assert result.value.transitioned_invoice_ids == ["a"]
        assert result.value.notices_sent == 1
        email_sender.send.assert_awaited_once()
        assert email_sender.send.call_args[0][0] == "ann@example.com"

    async def test_nothing_owed_is_left_alone(self, use_case, invoices, email_sender):
        """
        Given: A sent invoice due yesterday with nothing outstanding
        When: The sweep runs
        Then: It stays sent and no notice is sent
        """
        invoices["b"] = make_invoice("b", amount_due="0.00")

        result = await use_case.execute(SweepOverdueCommandDTO(today=TODAY))

        assert invoices["b"].status == InvoiceStatus.SENT
        assert result.value.transitioned == 0
        email_sender.send.assert_not_awaited()

    async def test_second_sweep_changes_nothing(self, use_case, invoices, email_sender):
        invoices["a"] = make_invoice("a")
        await use_case.execute(SweepOverdueCommandDTO(today=TODAY))

        result = await use_case.execute(SweepOverdueCommandDTO(today=TODAY))

        assert result.value.transitioned == 0
        assert email_sender.send.await_count == 1

    async def test_failed_notice_keeps_status_and_is_logged(
        self, use_case, invoices, email_sender, communication_repo
    ):
        """
        Given: The email provider rejects the notice
        When: The sweep runs
        Then: The invoice is still overdue and a failed communication is recorded
        """
        invoices["a"] = make_invoice("a")
        email_sender.send = AsyncMock(return_value=EmailResult(sent=False, error="rate limited"))

        result = await use_case.execute(SweepOverdueCommandDTO(today=TODAY))

        assert invoices["a"].status == InvoiceStatus.OVERDUE
        assert result.value.notice_failures == ["a"]
        logged = communication_repo.create.call_args[0][0]
        assert logged.status == CommunicationStatus.FAILED
        assert logged.invoice_id == "a"

    async def test_one_failing_invoice_does_not_stop_sweep(self, use_case, invoices, invoice_repo):
        invoices["a"] = make_invoice("a")
        invoices["b"] = make_invoice("b")

        async def update(invoice):
            if invoice.id == "a":
                raise RuntimeError("deadlock detected")
            return invoice

        invoice_repo.update = AsyncMock(side_effect=update)

        result = await use_case.execute(SweepOverdueCommandDTO(today=TODAY))

        assert result.value.errors == ["a"]
        assert result.value.transitioned_invoice_ids == ["b"]
