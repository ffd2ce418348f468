"""SQLAlchemy Inventory Repository Implementation"""

from typing import List
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.inventory_repository import InventoryRepository
from src.domain.inventory_item import InventoryItem


class SqlAlchemyInventoryRepository(InventoryRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_low_stock(self) -> List[InventoryItem]:
        statement = (
            select(InventoryItem)
            .where(InventoryItem.is_active == True)  # noqa: E712
            .where(InventoryItem.current_stock <= InventoryItem.min_stock)
            .order_by(InventoryItem.name)
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())
