"""Login Session Repository Interface"""

from abc import ABC, abstractmethod
from datetime import datetime


class UserSessionRepository(ABC):

    @abstractmethod
    async def delete_expired(self, now: datetime) -> int:
        """
        Delete sessions with expires_at < now

        Returns:
            Number of deleted sessions
        """
        pass
