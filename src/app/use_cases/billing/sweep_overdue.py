"""SweepOverdue Use Case

Daily pass that marks unpaid, past-due invoices overdue and notifies the
customer.
"""

import logging
from typing import Optional
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.email_sender import EmailSender
from src.app.services.customer_mailer import CustomerMailer
from src.app.services.invoice_locks import InvoiceLockRegistry
from src.app.services import email_templates
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.customer_repository import CustomerRepository
from src.app.repositories.communication_repository import CommunicationRepository
from src.domain.invoice import Invoice
from .dtos import SweepOverdueCommandDTO, OverdueSweepResultDTO

logger = logging.getLogger(__name__)


class SweepOverdue:
    """
    Use Case: Overdue sweep

    Business Rules:
    1. status = sent, due_date < today and amount_due > 0 -> overdue
    2. Each invoice is committed on its own
    3. An overdue notice is sent for each newly overdue invoice; a failed
       notice is logged (and recorded as a failed communication) without
       blocking the rest of the sweep
    """

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        customer_repo: CustomerRepository,
        communication_repo: CommunicationRepository,
        email_sender: EmailSender,
        locks: Optional[InvoiceLockRegistry] = None,
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.customer_repo = customer_repo
        self.locks = locks if locks is not None else InvoiceLockRegistry()
        self.mailer = CustomerMailer(email_sender, communication_repo)

    async def execute(self, command: SweepOverdueCommandDTO) -> Result[OverdueSweepResultDTO]:
        today = command.today

        try:
            candidates = await self.invoice_repo.get_overdue_candidates(today)
            invoice_ids = [invoice.id for invoice in candidates]
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="SWEEP_OVERDUE_FAILED",
                    message="Failed to load overdue candidates",
                    reason=str(e),
                )
            )

        transitioned = []
        notices_sent = 0
        notice_failures = []
        errors = []

        for invoice_id in invoice_ids:
            # Status change, committed per invoice
            try:
                async with self.locks.lock_for(invoice_id):
                    invoice = await self.invoice_repo.get_by_id(invoice_id, for_update=True)
                    if invoice is None or not invoice.mark_overdue(today):
                        await self.uow.rollback()
                        continue
                    invoice = await self.invoice_repo.update(invoice)
                    await self.uow.commit()
                transitioned.append(invoice_id)
            except Exception as e:
                await self.uow.rollback()
                logger.error(f"Failed to mark invoice {invoice_id} overdue: {e}")
                errors.append(invoice_id)
                continue

            # Notice, isolated from the status change
            if await self._send_notice(invoice):
                notices_sent += 1
            else:
                notice_failures.append(invoice_id)

        logger.info(
            f"Overdue sweep for {today.isoformat()}: {len(transitioned)} of "
            f"{len(invoice_ids)} invoices marked overdue, {len(notice_failures)} notices failed"
        )

        return Return.ok(
            OverdueSweepResultDTO(
                invoices_checked=len(invoice_ids),
                transitioned=len(transitioned),
                transitioned_invoice_ids=transitioned,
                notices_sent=notices_sent,
                notice_failures=notice_failures,
                errors=errors,
            )
        )

    async def _send_notice(self, invoice: Invoice) -> bool:
        try:
            customer = await self.customer_repo.get_by_id(invoice.customer_id)
            if customer is None:
                logger.error(f"Overdue notice for invoice {invoice.id}: customer not found")
                return False
            result = await self.mailer.deliver(
                customer, email_templates.overdue_notice(customer, invoice), invoice_id=invoice.id
            )
            await self.uow.commit()
            return result.sent
        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Failed to send overdue notice for invoice {invoice.id}: {e}")
            return False
