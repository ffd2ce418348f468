"""Inventory Item Domain Entity

Cleaning supplies tracked for the weekly low-stock alert.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import Numeric
from src.domain.base import BaseModel, generate_uuid


class InventoryItem(BaseModel, table=True):
    __tablename__ = "inventory"

    id: str = Field(default_factory=generate_uuid, primary_key=True)
    name: str = Field()
    category: Optional[str] = Field(default=None)
    unit: str = Field(default="each")

    current_stock: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(12, 2), nullable=False, default=0),
    )

    min_stock: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(12, 2), nullable=False, default=0),
    )

    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def is_low(self) -> bool:
        return self.current_stock <= self.min_stock
