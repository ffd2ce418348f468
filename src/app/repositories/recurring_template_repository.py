"""Recurring Template Repository Interface"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional, List
from src.domain.recurring_template import RecurringTemplate


class RecurringTemplateRepository(ABC):

    @abstractmethod
    async def create(self, template: RecurringTemplate) -> RecurringTemplate:
        pass

    @abstractmethod
    async def get_by_id(self, template_id: str) -> Optional[RecurringTemplate]:
        pass

    @abstractmethod
    async def get_due(self, horizon_end: date) -> List[RecurringTemplate]:
        """
        Active templates with work inside the horizon

        Args:
            horizon_end: Last date the engine may materialize

        Returns:
            Templates where is_active and (next_date is null or next_date <= horizon_end)
        """
        pass

    @abstractmethod
    async def update(self, template: RecurringTemplate) -> RecurringTemplate:
        pass
