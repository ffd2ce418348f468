"""Overdue sweep and payments on one invoice, wired the way the app wires them"""

import asyncio
import pytest
from decimal import Decimal
from sqlmodel import select

from src.adapter.repositories import (
    SqlAlchemyCustomerRepository,
    SqlAlchemyInvoiceRepository,
    SqlAlchemyPaymentRepository,
)
from src.adapter.services.email_sender import LoggingEmailSender
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.invoice_locks import InvoiceLockRegistry
from src.app.use_cases.billing import ApplyPayment, ApplyPaymentCommandDTO
from src.domain.invoice import Invoice, InvoiceStatus
from src.worker.scheduler import build_job_runner


@pytest.mark.asyncio
async def test_payment_settled_during_sweep_is_not_marked_overdue(session_factory, sent_invoice):
    """
    Given: A sent, past-due invoice and a job runner sharing the app's lock registry
    When: A full payment is queued on the invoice lock ahead of the overdue sweep
    Then: The sweep waits, re-reads the settled invoice and leaves it paid
    """
    # Arrange
    locks = InvoiceLockRegistry()
    runner = build_job_runner(session_factory, email_sender=LoggingEmailSender(), locks=locks)

    async def pay():
        async with session_factory() as session:
            use_case = ApplyPayment(
                uow=SqlAlchemyUnitOfWork(session),
                invoice_repo=SqlAlchemyInvoiceRepository(session),
                payment_repo=SqlAlchemyPaymentRepository(session),
                customer_repo=SqlAlchemyCustomerRepository(session),
                locks=locks,
            )
            return await use_case.execute(
                ApplyPaymentCommandDTO(invoice_id=sent_invoice.id, amount=Decimal("100.00"))
            )

    held = locks.lock_for(sent_invoice.id)
    await held.acquire()

    # Act
    payment = asyncio.create_task(pay())
    await asyncio.sleep(0.05)
    sweep = asyncio.create_task(runner.trigger("overdue"))
    await asyncio.sleep(0.2)

    sweep_blocked = not sweep.done()
    held.release()
    run = await sweep
    paid = await payment

    # Assert
    assert sweep_blocked
    assert paid.is_ok()
    assert run.ran is True
    assert run.error is None
    assert run.result.invoices_checked == 1
    assert run.result.transitioned_invoice_ids == []

    async with session_factory() as session:
        invoice = (
            await session.execute(select(Invoice).where(Invoice.id == sent_invoice.id))
        ).scalar_one()
    assert invoice.status == InvoiceStatus.PAID
    assert invoice.amount_due == Decimal("0.00")
