#app/school/api/dependencies.py
from fastapi import Depends, Request

from ..container import Container
from ..db.user_repository import UserRepository
from ..modules.tokens import TokenService
from ..services.attendance_service import AttendanceService
from ..services.class_service import ClassService
from ..services.user_service import UserService


def get_container(request: Request) -> Container:
    """
    Returns the container the lifespan stored on the application state.
    Tests replace this provider through `app.dependency_overrides`.
    """
    return request.app.state.container


def get_user_repository(container: Container = Depends(get_container)) -> UserRepository:
    return container.user_repository


def get_token_service(container: Container = Depends(get_container)) -> TokenService:
    return container.token_service


def get_user_service(container: Container = Depends(get_container)) -> UserService:
    return container.user_service


def get_class_service(container: Container = Depends(get_container)) -> ClassService:
    return container.class_service


def get_attendance_service(container: Container = Depends(get_container)) -> AttendanceService:
    return container.attendance_service
