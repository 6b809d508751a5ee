from dataclasses import dataclass

from motor.motor_asyncio import AsyncIOMotorDatabase

from .config.config import Config
from .db.attendance_repository import AttendanceRepository
from .db.class_repository import ClassRepository
from .db.user_repository import UserRepository
from .modules.passwords import PasswordHasher
from .modules.tokens import TokenService
from .services.attendance_service import AttendanceService
from .services.class_service import ClassService
from .services.user_service import UserService


@dataclass(frozen=True)
class Container:
    """Everything a request needs, built once at startup."""
    user_repository: UserRepository
    class_repository: ClassRepository
    attendance_repository: AttendanceRepository

    token_service: TokenService
    password_hasher: PasswordHasher

    user_service: UserService
    class_service: ClassService
    attendance_service: AttendanceService


def build_container(*, db: AsyncIOMotorDatabase, config: Config) -> Container:
    user_repository = UserRepository(db)
    class_repository = ClassRepository(db)
    attendance_repository = AttendanceRepository(db)

    token_service = TokenService(
        secret=config.JWT_SECRET,
        expires_in_seconds=config.jwt_expires_in_seconds,
        algorithm=config.JWT_ALGORITHM,
    )
    password_hasher = PasswordHasher(rounds=config.SALT_ROUNDS)

    return Container(
        user_repository=user_repository,
        class_repository=class_repository,
        attendance_repository=attendance_repository,
        token_service=token_service,
        password_hasher=password_hasher,
        user_service=UserService(user_repository, password_hasher, token_service),
        class_service=ClassService(class_repository),
        attendance_service=AttendanceService(attendance_repository),
    )
