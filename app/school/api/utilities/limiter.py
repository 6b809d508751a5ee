# app/school/api/utilities/limiter.py

import jwt
from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from ...config.config import settings


def get_limiter_key(request: Request) -> str:
    """
    Returns the rate-limit bucket for a request: the user id carried by a
    correctly signed bearer token when there is one, otherwise the client IP address.
    """
    auth_header = request.headers.get("authorization")
    if auth_header and settings.JWT_SECRET and auth_header.lower().startswith("bearer "):
        token = auth_header.split(" ", 1)[1]
        try:
            # Expiry is not checked here; the auth gate rejects expired tokens.
            payload = jwt.decode(
                token,
                settings.JWT_SECRET,
                algorithms=[settings.JWT_ALGORITHM],
                options={"verify_exp": False}
            )
            user_id = payload.get("id")
            if isinstance(user_id, str) and user_id:
                return f"user:{user_id}"
        except jwt.PyJWTError:
            pass

    return get_remote_address(request)


limiter = Limiter(key_func=get_limiter_key, storage_uri=settings.RATE_LIMIT_STORAGE_URI)
