"""Authenticator Interface

Issues and validates signed session claims.
"""

from abc import ABC, abstractmethod
from typing import Optional
from pydantic import BaseModel
from src.domain.user import UserRole


# Staff roles in increasing order of privilege
ROLE_RANK = {
    UserRole.EMPLOYEE: 1,
    UserRole.MANAGER: 2,
    UserRole.ADMIN: 3,
}


class AuthenticationError(Exception):
    code = "UNAUTHORIZED"


class Claims(BaseModel):
    """
    Validated claim set

    Customers and staff are disjoint: a customer token has
    ``is_customer=True`` and no role.
    """

    subject_id: str
    role: Optional[UserRole] = None
    is_customer: bool = False

    def has_role(self, minimum: UserRole) -> bool:
        """admin > manager > employee; customers never pass a staff gate"""
        if self.is_customer or self.role is None:
            return False
        return ROLE_RANK[UserRole(self.role)] >= ROLE_RANK[UserRole(minimum)]


class Authenticator(ABC):

    @abstractmethod
    def issue(self, claims: Claims) -> str:
        """Return a signed token for the claims"""
        pass

    @abstractmethod
    def validate(self, token: str) -> Claims:
        """
        Decode and verify a token

        Raises:
            AuthenticationError: token is malformed, expired or forged
        """
        pass
