"""Data Transfer Objects for Maintenance Use Cases"""

from datetime import datetime
from typing import List
from pydantic import BaseModel, Field


class SessionCleanupResultDTO(BaseModel):
    deleted: int = Field(..., description="Expired sessions removed")
    cutoff: datetime


class LowInventoryItemDTO(BaseModel):
    item_id: str
    name: str
    unit: str
    current_stock: str
    min_stock: str


class LowInventoryResultDTO(BaseModel):
    low_stock_items: List[LowInventoryItemDTO] = Field(default_factory=list)
    admins_notified: int = 0
    failed_recipients: List[str] = Field(default_factory=list)
