import logging
from dataclasses import dataclass
from typing import Callable, Sequence

from fastapi import Depends, Request

from ..db.user_repository import UserRepository
from ..errors import BadRequestError, UnauthorizedError
from ..models.db_models import User
from ..modules.tokens import TokenClaims, TokenService
from .dependencies import get_token_service, get_user_repository

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


@dataclass(frozen=True)
class AuthenticatedUser:
    claims: TokenClaims
    document: User


async def authenticate(
    request: Request,
    user_repository: UserRepository = Depends(get_user_repository),
    token_service: TokenService = Depends(get_token_service)
) -> AuthenticatedUser:
    """
    Verifies the bearer token, loads the user it names and attaches both the
    claims (`request.state.user`) and the stored user
    (`request.state.user_document`) to the request.
    """
    auth_header = request.headers.get("authorization")
    if not auth_header:
        raise UnauthorizedError("Authorization header is missing")

    if not auth_header.startswith(BEARER_PREFIX):
        raise UnauthorizedError("Invalid authorization header format")

    token = auth_header[len(BEARER_PREFIX):]
    if not token:
        raise UnauthorizedError("Token is missing")

    claims = token_service.verify(token)

    try:
        user = await user_repository.find_by_id(claims.id)
    except BadRequestError:
        # A signed token with a malformed id names no user.
        user = None
    if not user:
        raise UnauthorizedError("User not found")

    request.state.user = claims
    request.state.user_document = user
    logger.debug(f"User authenticated: {claims.id} ({claims.email})")
    return AuthenticatedUser(claims=claims, document=user)


def check_roles(request: Request, allowed_roles: Sequence[str]) -> TokenClaims:
    claims = getattr(request.state, "user", None)
    if claims is None:
        raise UnauthorizedError("User not authenticated")

    if claims.role not in allowed_roles:
        logger.warning(
            f"Access denied for user {claims.id}: role '{claims.role}' "
            f"not in required roles {list(allowed_roles)}"
        )
        raise UnauthorizedError("Insufficient permissions")
    return claims


def authorize(allowed_roles: Sequence[str]) -> Callable:
    """
    Builds a dependency that runs after `authenticate` and lets only the given
    roles through.
    """
    allowed_roles = tuple(allowed_roles)

    async def role_gate(request: Request, current_user: AuthenticatedUser = Depends(authenticate)) -> AuthenticatedUser:
        check_roles(request, allowed_roles)
        return current_user

    return role_gate


require_staff = authorize(["teacher", "admin"])
