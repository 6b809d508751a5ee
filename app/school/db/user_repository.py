import logging
from typing import Optional

from .base_repository import BaseRepository
from .mongo import USERS
from ..models.db_models import User

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    model = User
    collection_name = USERS

    async def find_by_email(self, email: str) -> Optional[User]:
        document = await self._collection.find_one({"email": email.strip().lower()})
        return self._to_model(document)

    async def email_exists(self, email: str) -> bool:
        return await self.exists({"email": email.strip().lower()})
