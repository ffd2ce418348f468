"""Staff User Domain Entity"""

from datetime import datetime
from enum import Enum
from typing import Optional
from sqlmodel import Field, Index
from src.domain.base import BaseModel, generate_uuid


class UserRole(str, Enum):
    """Staff roles, most privileged first"""
    ADMIN = "admin"
    MANAGER = "manager"
    EMPLOYEE = "employee"


class User(BaseModel, table=True):
    """
    User - Staff account (admin, manager or employee)

    Customers are a separate entity and never carry a staff role.
    """

    __tablename__ = "users"
    __table_args__ = (
        Index("ix_users_email", "email", unique=True),
    )

    id: str = Field(default_factory=generate_uuid, primary_key=True)
    email: str = Field(description="Login email")
    first_name: str = Field()
    last_name: str = Field(default="")
    phone: Optional[str] = Field(default=None)
    role: UserRole = Field(default=UserRole.EMPLOYEE)
    is_active: bool = Field(default=True)
    last_login_at: Optional[datetime] = Field(default=None)
    created_at: datetime = Field(default_factory=datetime.utcnow)
