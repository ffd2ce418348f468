"""Invoice Repository Interface

Defines the contract for invoice persistence operations.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional, List
from src.domain.invoice import Invoice, InvoiceStatus


class InvoiceRepository(ABC):
    """
    Repository interface for Invoice persistence

    Balance-changing callers read with for_update=True so the
    read-modify-write of amount_paid/amount_due/status is serialized.
    """

    @abstractmethod
    async def create(self, invoice: Invoice) -> Invoice:
        """
        Create a new invoice

        Args:
            invoice: Invoice entity to persist

        Returns:
            Created Invoice
        """
        pass

    @abstractmethod
    async def get_by_id(self, invoice_id: str, for_update: bool = False) -> Optional[Invoice]:
        """
        Retrieve invoice by ID

        Args:
            invoice_id: Invoice ID
            for_update: If True, lock the row with SELECT FOR UPDATE

        Returns:
            Invoice if found, None otherwise
        """
        pass

    @abstractmethod
    async def list(
        self,
        customer_id: Optional[str] = None,
        status: Optional[InvoiceStatus] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Invoice]:
        """List invoices, newest first"""
        pass

    @abstractmethod
    async def update(self, invoice: Invoice) -> Invoice:
        """
        Update an existing invoice

        Args:
            invoice: Invoice entity with updated values

        Returns:
            Updated Invoice
        """
        pass

    @abstractmethod
    async def exists_for_booking(self, booking_id: str) -> bool:
        """
        Check if an invoice was already issued for a booking

        Used to prevent duplicate invoices on booking completion.
        """
        pass

    @abstractmethod
    async def get_overdue_candidates(self, today: date) -> List[Invoice]:
        """
        Invoices the overdue sweep should transition

        Returns:
            Invoices with status=sent, due_date < today and amount_due > 0
        """
        pass

    @abstractmethod
    async def generate_invoice_number(self, prefix: str, start_number: int) -> str:
        """
        Generate the next sequential invoice number

        Format: {prefix}{N}, e.g. INV-1001

        Args:
            prefix: Invoice number prefix
            start_number: Number used when no invoice exists yet

        Returns:
            Unique invoice number string
        """
        pass
