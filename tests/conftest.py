# tests/conftest.py
import asyncio
import os
import sys

import pytest

# Required settings must exist before the application modules are imported.
os.environ.setdefault("MONGODB_URI", "mongodb://localhost:27017/school_test")
os.environ.setdefault("JWT_SECRET", "test-secret-key-with-at-least-32-characters")
os.environ.setdefault("ENVIRONMENT", "test")

if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

from fastapi.testclient import TestClient  # noqa: E402

from app.school.api.dependencies import get_container  # noqa: E402
from app.school.api.utilities.limiter import limiter  # noqa: E402
from app.school.config.config import settings  # noqa: E402
from app.school.container import Container  # noqa: E402
from app.school.main import create_app  # noqa: E402
from app.school.modules.passwords import PasswordHasher  # noqa: E402
from app.school.modules.tokens import TokenService  # noqa: E402
from app.school.services.attendance_service import AttendanceService  # noqa: E402
from app.school.services.class_service import ClassService  # noqa: E402
from app.school.services.user_service import UserService  # noqa: E402
from fakes import FakeAttendanceRepository, FakeClassRepository, FakeUserRepository  # noqa: E402


@pytest.fixture(autouse=True)
def reset_rate_limits():
    """Every test starts with empty rate-limit buckets."""
    limiter.reset()
    yield

# --- In-memory repositories ---

@pytest.fixture
def user_repository() -> FakeUserRepository:
    return FakeUserRepository()

@pytest.fixture
def class_repository() -> FakeClassRepository:
    return FakeClassRepository()

@pytest.fixture
def attendance_repository() -> FakeAttendanceRepository:
    return FakeAttendanceRepository()

# --- Application ---

@pytest.fixture
def container(user_repository, class_repository, attendance_repository) -> Container:
    """The real services wired to in-memory repositories."""
    token_service = TokenService(secret=settings.JWT_SECRET, expires_in_seconds=3600)
    password_hasher = PasswordHasher(rounds=4)
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


@pytest.fixture
def client(container: Container) -> TestClient:
    """A client for an app whose lifespan is skipped and whose container is the in-memory one."""
    app = create_app()
    app.dependency_overrides[get_container] = lambda: container
    return TestClient(app)


@pytest.fixture
def login(container: Container):
    """Seeds a user with the given role and returns (user, Authorization headers)."""
    def _login(role: str = "student", name: str = None):
        name = name or f"Test {role.title()}"
        email = f"{name.lower().replace(' ', '.')}@example.com"
        user = container.user_repository.insert(name=name, email=email, password="unused-hash", role=role)
        token = container.token_service.issue(user)
        return user, {"Authorization": f"Bearer {token}"}
    return _login
