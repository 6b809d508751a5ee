import logging
from typing import Optional, Tuple

from pymongo.errors import DuplicateKeyError

from ..db.user_repository import UserRepository
from ..errors import BadRequestError, ConflictError, UnauthorizedError
from ..models.db_models import Role, User
from ..modules.passwords import PasswordHasher
from ..modules.tokens import TokenService

logger = logging.getLogger(__name__)


class UserService:
    """
    Signup and signin. Both return the stored user together with a freshly
    issued bearer token.
    """
    def __init__(self, user_repository: UserRepository, password_hasher: PasswordHasher, token_service: TokenService):
        self.user_repository = user_repository
        self.password_hasher = password_hasher
        self.token_service = token_service

    async def sign_up(self, name: str, email: str, password: str, role: Optional[Role] = None) -> Tuple[User, str]:
        email = email.strip().lower()
        logger.info(f"Signup attempt for email: {email}")

        if await self.user_repository.email_exists(email):
            logger.warning(f"Signup attempt with existing email: {email}")
            raise ConflictError("User with this email already exists")

        hashed_password = await self.password_hasher.hash(password)
        try:
            user = await self.user_repository.create({
                "name": name,
                "email": email,
                "password": hashed_password,
                "role": role or "student",
            })
        except DuplicateKeyError:
            # Lost a race with a concurrent signup for the same email.
            logger.warning(f"Signup attempt with existing email: {email}")
            raise ConflictError("User with this email already exists")

        token = self.token_service.issue(user)
        logger.info(f"Signup successful for user ID: {user.id}")
        return user, token

    async def sign_in(self, email: str, password: str) -> Tuple[User, str]:
        logger.info(f"Signin attempt for email: {email}")
        user = await self.user_repository.find_by_email(email)
        if not user:
            raise BadRequestError("User not found")

        if not await self.password_hasher.verify(password, user.password):
            logger.warning(f"Signin with invalid password for user ID: {user.id}")
            raise UnauthorizedError("Invalid password")

        token = self.token_service.issue(user)
        logger.info(f"Signin successful for user ID: {user.id}")
        return user, token
