"""SQLAlchemy Customer Repository Implementation"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.customer_repository import CustomerRepository
from src.domain.customer import Customer


class SqlAlchemyCustomerRepository(CustomerRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, customer: Customer) -> Customer:
        self.session.add(customer)
        await self.session.flush()
        await self.session.refresh(customer)
        return customer

    async def get_by_id(self, customer_id: str) -> Optional[Customer]:
        statement = select(Customer).where(Customer.id == customer_id)
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Optional[Customer]:
        statement = select(Customer).where(Customer.email == email.lower())
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def update(self, customer: Customer) -> Customer:
        customer.updated_at = datetime.utcnow()
        self.session.add(customer)
        await self.session.flush()
        await self.session.refresh(customer)
        return customer

    async def adjust_total_spent(self, customer_id: str, delta: Decimal) -> None:
        """
        Atomic in-database increment of the lifetime spend aggregate

        Note:
            Should be called within the transaction that records the payment
        """
        statement = (
            update(Customer)
            .where(Customer.id == customer_id)
            .values(
                total_spent=Customer.total_spent + delta,
                updated_at=datetime.utcnow(),
            )
        )
        await self.session.execute(statement)
        await self.session.flush()

    async def increment_total_jobs(self, customer_id: str) -> None:
        statement = (
            update(Customer)
            .where(Customer.id == customer_id)
            .values(total_jobs=Customer.total_jobs + 1, updated_at=datetime.utcnow())
        )
        await self.session.execute(statement)
        await self.session.flush()
