import logging
from datetime import datetime, timedelta, timezone

import jwt
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..errors import InternalServerError, UnauthorizedError
from ..models.db_models import Role, User

logger = logging.getLogger(__name__)


class TokenClaims(BaseModel):
    """The identity carried by a bearer token, validated right after decoding."""
    id: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    role: Role

    model_config = ConfigDict(frozen=True)


class TokenService:
    """Issues and verifies signed, time-limited bearer tokens."""

    def __init__(self, secret: str, expires_in_seconds: int, algorithm: str = "HS256"):
        self._secret = secret
        self._expires_in = timedelta(seconds=expires_in_seconds)
        self._algorithm = algorithm

    def issue(self, user: User) -> str:
        """Signs a token for the user. Failure is fatal to the calling request."""
        now = datetime.now(timezone.utc)
        payload = {
            "id": user.id,
            "email": user.email,
            "role": user.role,
            "iat": now,
            "exp": now + self._expires_in,
        }
        try:
            token = jwt.encode(payload, self._secret, algorithm=self._algorithm)
        except Exception as e:
            logger.error(f"Failed to generate JWT token: {e}", exc_info=True)
            raise InternalServerError("Failed to generate authentication token") from e
        logger.debug(f"JWT token generated for user ID: {user.id}")
        return token

    def verify(self, token: str) -> TokenClaims:
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except jwt.PyJWTError as e:
            # The reason is logged but never returned to the caller.
            logger.warning(f"Invalid or expired token: {e}")
            raise UnauthorizedError("Invalid or expired token")

        try:
            return TokenClaims.model_validate(payload)
        except ValidationError as e:
            logger.warning(f"Token is valid but its payload is malformed: {e.errors()}")
            raise UnauthorizedError("Invalid token payload")
