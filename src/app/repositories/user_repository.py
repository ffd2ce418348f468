"""Staff User Repository Interface"""

from abc import ABC, abstractmethod
from typing import Optional, List
from src.domain.user import User


class UserRepository(ABC):

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]:
        pass

    @abstractmethod
    async def get_active_admins(self) -> List[User]:
        pass

    @abstractmethod
    async def create(self, user: User) -> User:
        pass
