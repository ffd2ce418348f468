"""Authentication dependencies

Bearer tokens are validated by the app's Authenticator. With
AUTH_DISABLED every request acts as an admin.
"""

from typing import Optional
from fastapi import Depends, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from libs.result import Error
from src.api.error import ClientError
from src.app.services.authenticator import AuthenticationError, Claims
from src.domain.user import UserRole

bearer_scheme = HTTPBearer(auto_error=False)

AUTH_DISABLED_SUBJECT = "auth-disabled"


def claims_from_token(request: Request, token: Optional[str]) -> Optional[Claims]:
    """Shared by HTTP dependencies and the websocket feed"""
    if request.app.state.config.AUTH_DISABLED:
        return Claims(subject_id=AUTH_DISABLED_SUBJECT, role=UserRole.ADMIN)
    if not token:
        return None
    try:
        return request.app.state.authenticator.validate(token)
    except AuthenticationError as e:
        raise ClientError(
            Error(code=e.code, message=str(e)),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )


async def optional_claims(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[Claims]:
    return claims_from_token(request, credentials.credentials if credentials else None)


async def get_claims(claims: Optional[Claims] = Depends(optional_claims)) -> Claims:
    if claims is None:
        raise ClientError(
            Error(code="UNAUTHORIZED", message="Authentication required"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )
    return claims


def require_role(minimum: UserRole):
    async def dependency(claims: Claims = Depends(get_claims)) -> Claims:
        if not claims.has_role(minimum):
            raise ClientError(
                Error(code="FORBIDDEN", message=f"Requires {minimum.value} role or higher"),
                status_code=status.HTTP_403_FORBIDDEN,
            )
        return claims

    return dependency


require_staff = require_role(UserRole.EMPLOYEE)
require_manager = require_role(UserRole.MANAGER)
require_admin = require_role(UserRole.ADMIN)


def customer_scope(claims: Optional[Claims]) -> Optional[str]:
    """Customer id to restrict reads to, None for staff"""
    if claims is not None and claims.is_customer:
        return claims.subject_id
    return None
