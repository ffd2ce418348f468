"""Inventory Repository Interface"""

from abc import ABC, abstractmethod
from typing import List
from src.domain.inventory_item import InventoryItem


class InventoryRepository(ABC):

    @abstractmethod
    async def get_low_stock(self) -> List[InventoryItem]:
        """Active items with current_stock <= min_stock"""
        pass
