"""Communication Log Domain Entity

Append-only record of messages sent to customers. A failed send is kept
with status=failed so it can be followed up manually.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from sqlmodel import Field, Index
from src.domain.base import BaseModel, generate_uuid


class CommunicationType(str, Enum):
    EMAIL = "email"
    SMS = "sms"
    CALL = "call"
    NOTE = "note"
    SYSTEM = "system"


class CommunicationStatus(str, Enum):
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


class Communication(BaseModel, table=True):
    __tablename__ = "communications"
    __table_args__ = (
        Index("ix_communications_customer_id", "customer_id"),
        Index("ix_communications_booking_subject", "booking_id", "subject"),
    )

    id: str = Field(default_factory=generate_uuid, primary_key=True)
    customer_id: str = Field(foreign_key="customers.id")
    booking_id: Optional[str] = Field(default=None, foreign_key="bookings.id")
    invoice_id: Optional[str] = Field(default=None, foreign_key="invoices.id")
    type: CommunicationType = Field(default=CommunicationType.EMAIL)
    direction: str = Field(default="outbound")
    subject: Optional[str] = Field(default=None)
    content: Optional[str] = Field(default=None)
    status: CommunicationStatus = Field(default=CommunicationStatus.SENT)
    error: Optional[str] = Field(default=None, description="Provider error for failed sends")
    created_at: datetime = Field(default_factory=datetime.utcnow)
