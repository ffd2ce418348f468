"""JWT authenticator (python-jose)"""

import logging
from datetime import datetime, timedelta
from jose import JWTError
from jose import jwt as jose_jwt
from src.app.services.authenticator import Authenticator, AuthenticationError, Claims

logger = logging.getLogger(__name__)


class JoseAuthenticator(Authenticator):

    def __init__(self, secret: str, algorithm: str = "HS256", expires_minutes: int = 60 * 24 * 7):
        self.secret = secret
        self.algorithm = algorithm
        self.expires_minutes = expires_minutes

    def issue(self, claims: Claims) -> str:
        to_encode = {
            "sub": claims.subject_id,
            "is_customer": claims.is_customer,
            "exp": datetime.utcnow() + timedelta(minutes=self.expires_minutes),
        }
        if claims.role is not None:
            to_encode["role"] = claims.role.value
        return jose_jwt.encode(to_encode, self.secret, algorithm=self.algorithm)

    def validate(self, token: str) -> Claims:
        try:
            payload = jose_jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except JWTError as e:
            logger.warning(f"JWT verification failed: {e}")
            raise AuthenticationError("Invalid or expired token")

        subject = payload.get("sub")
        if not subject:
            raise AuthenticationError("Token has no subject")
        try:
            return Claims(
                subject_id=subject,
                role=payload.get("role"),
                is_customer=bool(payload.get("is_customer", False)),
            )
        except ValueError:
            raise AuthenticationError("Token carries an unknown role")
