"""In-process realtime broadcaster

Each dashboard connection subscribes with its own bounded queue.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, Set
from src.app.services.broadcaster import Broadcaster

logger = logging.getLogger(__name__)


class InMemoryBroadcaster(Broadcaster):

    def __init__(self, queue_size: int = 100):
        self.queue_size = queue_size
        self._subscribers: Set[asyncio.Queue] = set()

    def subscribe(self) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue(maxsize=self.queue_size)
        self._subscribers.add(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue) -> None:
        self._subscribers.discard(queue)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def publish(self, event: str, payload: Dict[str, Any]) -> None:
        message = {
            "type": event,
            "data": payload,
            "timestamp": datetime.utcnow().isoformat(),
        }
        for queue in list(self._subscribers):
            try:
                queue.put_nowait(message)
            except asyncio.QueueFull:
                # Slow consumer
                logger.warning("Dropping dashboard subscriber with a full queue")
                self._subscribers.discard(queue)
