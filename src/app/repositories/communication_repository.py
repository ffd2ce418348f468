"""Communication Log Repository Interface"""

from abc import ABC, abstractmethod
from src.domain.communication import Communication


class CommunicationRepository(ABC):

    @abstractmethod
    async def create(self, communication: Communication) -> Communication:
        pass

    @abstractmethod
    async def exists_sent(self, booking_id: str, subject: str) -> bool:
        """True if a message with this subject was already sent for the booking"""
        pass
