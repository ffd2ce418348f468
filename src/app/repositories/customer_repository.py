"""Customer Repository Interface"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Optional
from src.domain.customer import Customer


class CustomerRepository(ABC):

    @abstractmethod
    async def create(self, customer: Customer) -> Customer:
        pass

    @abstractmethod
    async def get_by_id(self, customer_id: str) -> Optional[Customer]:
        pass

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[Customer]:
        """Lookup by lower-cased email"""
        pass

    @abstractmethod
    async def update(self, customer: Customer) -> Customer:
        pass

    @abstractmethod
    async def adjust_total_spent(self, customer_id: str, delta: Decimal) -> None:
        """
        Add ``delta`` (negative for refunds) to the lifetime spend aggregate

        Must run in the same transaction as the payment it reflects.
        """
        pass

    @abstractmethod
    async def increment_total_jobs(self, customer_id: str) -> None:
        pass
