"""Realtime Broadcaster Interface"""

from abc import ABC, abstractmethod
from typing import Any, Dict


class Broadcaster(ABC):
    """
    Fire-and-forget publisher of named events to dashboard clients

    ``publish`` never raises and gives no delivery guarantee.
    """

    @abstractmethod
    def publish(self, event: str, payload: Dict[str, Any]) -> None:
        pass
