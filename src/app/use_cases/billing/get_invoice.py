"""GetInvoice and ListInvoices Use Cases"""

from typing import List, Optional
from libs.result import Result, Return, Error
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.invoice_item_repository import InvoiceItemRepository
from src.domain.invoice import InvoiceStatus
from .dtos import InvoiceResponseDTO


class GetInvoice:
    """
    Use Case: Read one invoice with its line items

    A customer caller (``customer_id`` given) only sees their own invoices.
    """

    def __init__(self, invoice_repo: InvoiceRepository, item_repo: InvoiceItemRepository):
        self.invoice_repo = invoice_repo
        self.item_repo = item_repo

    async def execute(
        self, invoice_id: str, customer_id: Optional[str] = None
    ) -> Result[InvoiceResponseDTO]:
        try:
            invoice = await self.invoice_repo.get_by_id(invoice_id)
            if not invoice or (customer_id is not None and invoice.customer_id != customer_id):
                return Return.err(
                    Error(
                        code="INVOICE_NOT_FOUND",
                        message=f"Invoice {invoice_id} not found",
                    )
                )
            items = await self.item_repo.get_by_invoice_id(invoice.id)
            return Return.ok(InvoiceResponseDTO.from_entity(invoice, items))
        except Exception as e:
            return Return.err(
                Error(
                    code="GET_INVOICE_FAILED",
                    message="Failed to load invoice",
                    reason=str(e),
                )
            )


class ListInvoices:
    def __init__(self, invoice_repo: InvoiceRepository):
        self.invoice_repo = invoice_repo

    async def execute(
        self,
        customer_id: Optional[str] = None,
        status: Optional[InvoiceStatus] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Result[List[InvoiceResponseDTO]]:
        try:
            invoices = await self.invoice_repo.list(
                customer_id=customer_id, status=status, limit=limit, offset=offset
            )
            return Return.ok([InvoiceResponseDTO.from_entity(i) for i in invoices])
        except Exception as e:
            return Return.err(
                Error(
                    code="LIST_INVOICES_FAILED",
                    message="Failed to list invoices",
                    reason=str(e),
                )
            )
