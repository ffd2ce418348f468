"""Service Domain Entity

A cleaning service offered to customers (regular, deep, move-out, ...).
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import Numeric
from src.domain.base import BaseModel


class Service(BaseModel, table=True):
    __tablename__ = "services"

    id: str = Field(primary_key=True, description="Service key, e.g. svc_regular")
    name: str = Field(description="Display name")
    description: Optional[str] = Field(default=None)

    base_price: Decimal = Field(
        sa_column=Column(Numeric(12, 2), nullable=False),
        description="Starting price before size adjustments"
    )

    duration_minutes: int = Field(default=120)
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
