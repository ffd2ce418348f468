"""Payment Repository Interface"""

from abc import ABC, abstractmethod
from typing import Optional, List
from src.domain.payment import Payment


class PaymentRepository(ABC):
    """
    Repository interface for Payment persistence

    Payments are append-only; update is used only to mark a refund.
    """

    @abstractmethod
    async def create(self, payment: Payment) -> Payment:
        pass

    @abstractmethod
    async def get_by_id(self, payment_id: str, for_update: bool = False) -> Optional[Payment]:
        pass

    @abstractmethod
    async def get_by_processor_reference(self, processor_reference: str) -> Optional[Payment]:
        """
        Find the payment recorded for a card processor checkout session

        Used to make webhook redelivery idempotent.
        """
        pass

    @abstractmethod
    async def get_by_invoice_id(self, invoice_id: str) -> List[Payment]:
        pass

    @abstractmethod
    async def update(self, payment: Payment) -> Payment:
        pass
