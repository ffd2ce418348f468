"""Login Session Domain Entity

Refresh-token sessions for staff and customers. Expired rows are purged
hourly by the session cleanup job.
"""

from datetime import datetime
from typing import Optional
from sqlmodel import Field, Index
from src.domain.base import BaseModel, generate_uuid


class UserSession(BaseModel, table=True):
    __tablename__ = "sessions"
    __table_args__ = (
        Index("ix_sessions_expires_at", "expires_at"),
    )

    id: str = Field(default_factory=generate_uuid, primary_key=True)
    user_id: Optional[str] = Field(default=None, foreign_key="users.id")
    customer_id: Optional[str] = Field(default=None, foreign_key="customers.id")
    refresh_token: str = Field()
    user_agent: Optional[str] = Field(default=None)
    ip_address: Optional[str] = Field(default=None)
    expires_at: datetime = Field()
    created_at: datetime = Field(default_factory=datetime.utcnow)
