"""SQLAlchemy Invoice Repository Implementation

Implements invoice persistence using SQLAlchemy async session.
"""

from typing import Optional, List
from datetime import date, datetime
from sqlmodel import select, func
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.invoice_repository import InvoiceRepository
from src.domain.invoice import Invoice, InvoiceStatus


class SqlAlchemyInvoiceRepository(InvoiceRepository):
    """
    SQLAlchemy implementation of InvoiceRepository

    Features:
    - Pessimistic locking via SELECT FOR UPDATE
    - Sequential invoice numbering per prefix
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, invoice: Invoice) -> Invoice:
        """
        Create a new invoice

        Args:
            invoice: Invoice entity to persist

        Returns:
            Created Invoice
        """
        self.session.add(invoice)
        await self.session.flush()
        await self.session.refresh(invoice)
        return invoice

    async def get_by_id(self, invoice_id: str, for_update: bool = False) -> Optional[Invoice]:
        """
        Retrieve invoice by ID with optional row-level locking

        Args:
            invoice_id: Invoice ID
            for_update: If True, locks the row with SELECT FOR UPDATE (prevents concurrent modifications)

        Returns:
            Invoice if found, None otherwise
        """
        statement = select(Invoice).where(Invoice.id == invoice_id)

        if for_update:
            # Refresh rows already in the identity map with what was just locked
            statement = statement.with_for_update().execution_options(populate_existing=True)

        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def list(
        self,
        customer_id: Optional[str] = None,
        status: Optional[InvoiceStatus] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Invoice]:
        statement = select(Invoice)

        if customer_id:
            statement = statement.where(Invoice.customer_id == customer_id)
        if status:
            statement = statement.where(Invoice.status == status)

        statement = statement.order_by(Invoice.created_at.desc())
        statement = statement.limit(limit).offset(offset)

        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def update(self, invoice: Invoice) -> Invoice:
        """
        Update an existing invoice

        Args:
            invoice: Invoice entity with updated values

        Returns:
            Updated Invoice
        """
        invoice.updated_at = datetime.utcnow()
        self.session.add(invoice)
        await self.session.flush()
        await self.session.refresh(invoice)
        return invoice

    async def exists_for_booking(self, booking_id: str) -> bool:
        statement = (
            select(func.count())
            .select_from(Invoice)
            .where(Invoice.booking_id == booking_id)
            .where(Invoice.status != InvoiceStatus.CANCELLED)
        )
        result = await self.session.execute(statement)
        count = result.scalar_one()
        return count > 0

    async def get_overdue_candidates(self, today: date) -> List[Invoice]:
        statement = (
            select(Invoice)
            .where(Invoice.status == InvoiceStatus.SENT)
            .where(Invoice.due_date < today)
            .where(Invoice.amount_due > 0)
            .order_by(Invoice.due_date)
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def generate_invoice_number(self, prefix: str, start_number: int) -> str:
        """
        Generate the next sequential invoice number

        Format: {prefix}{N} (e.g., INV-1001)

        Returns:
            Unique invoice number string
        """
        statement = select(Invoice.invoice_number).where(
            Invoice.invoice_number.like(f"{prefix}%")
        )
        result = await self.session.execute(statement)

        # Numbers are compared numerically: INV-999 < INV-1000
        highest = start_number - 1
        for invoice_number in result.scalars().all():
            suffix = invoice_number[len(prefix):]
            if suffix.isdigit():
                highest = max(highest, int(suffix))

        return f"{prefix}{highest + 1}"
