"""SQLAlchemy Recurring Template Repository Implementation"""

from datetime import date, datetime
from typing import Optional, List
from sqlmodel import select, or_
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.recurring_template_repository import RecurringTemplateRepository
from src.domain.recurring_template import RecurringTemplate


class SqlAlchemyRecurringTemplateRepository(RecurringTemplateRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, template: RecurringTemplate) -> RecurringTemplate:
        self.session.add(template)
        await self.session.flush()
        await self.session.refresh(template)
        return template

    async def get_by_id(self, template_id: str) -> Optional[RecurringTemplate]:
        statement = select(RecurringTemplate).where(RecurringTemplate.id == template_id)
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def get_due(self, horizon_end: date) -> List[RecurringTemplate]:
        statement = (
            select(RecurringTemplate)
            .where(RecurringTemplate.is_active == True)  # noqa: E712
            .where(
                or_(
                    RecurringTemplate.next_date.is_(None),
                    RecurringTemplate.next_date <= horizon_end,
                )
            )
            .order_by(RecurringTemplate.created_at)
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def update(self, template: RecurringTemplate) -> RecurringTemplate:
        template.updated_at = datetime.utcnow()
        self.session.add(template)
        await self.session.flush()
        await self.session.refresh(template)
        return template
