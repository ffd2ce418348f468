"""SQLAlchemy Service Repository Implementation"""

from typing import Optional, List
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.service_repository import ServiceRepository
from src.domain.service import Service


class SqlAlchemyServiceRepository(ServiceRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, service_id: str) -> Optional[Service]:
        statement = select(Service).where(Service.id == service_id)
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def list_active(self) -> List[Service]:
        statement = (
            select(Service)
            .where(Service.is_active == True)  # noqa: E712
            .order_by(Service.base_price)
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def create(self, service: Service) -> Service:
        self.session.add(service)
        await self.session.flush()
        return service
