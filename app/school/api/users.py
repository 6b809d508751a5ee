import logging

from fastapi import APIRouter, Depends, Request, status

from ..services.user_service import UserService
from .auth import AuthenticatedUser, authenticate
from .dependencies import get_user_service
from .schemas.user import AuthResponse, ProfileResponse, SignInRequest, SignUpRequest, UserResponse
from .utilities.limiter import limiter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED, summary="Register a new user")
@limiter.limit("30/minute")
async def signup(request: Request, signup_request: SignUpRequest, service: UserService = Depends(get_user_service)):
    logger.info("Signup request received")
    user, token = await service.sign_up(
        name=signup_request.name,
        email=signup_request.email,
        password=signup_request.password,
        role=signup_request.role,
    )
    return AuthResponse(message="User created successfully", user=UserResponse.model_validate(user), token=token)


@router.post("/signin", response_model=AuthResponse, summary="Sign in with email and password")
@limiter.limit("30/minute")
async def signin(request: Request, signin_request: SignInRequest, service: UserService = Depends(get_user_service)):
    logger.info("Signin request received")
    user, token = await service.sign_in(signin_request.email, signin_request.password)
    return AuthResponse(message="User signed in successfully", user=UserResponse.model_validate(user), token=token)


@router.get("/me", response_model=ProfileResponse, summary="Identity of the calling user")
@limiter.limit("120/minute")
async def get_profile(request: Request, current_user: AuthenticatedUser = Depends(authenticate)):
    return ProfileResponse(message="User profile retrieved successfully", user=current_user.claims)
