"""Session login endpoints."""

from fastapi import APIRouter, Request, status

from hr_compliance.api.dependencies import DbSession
from hr_compliance.api.schemas import (
    ErrorResponse,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    UserResponse,
)
from hr_compliance.api.security import SESSION_USER_KEY, SessionUser
from hr_compliance.services.audit_service import AuditService
from hr_compliance.services.user_service import UserService

router = APIRouter(prefix="/api", tags=["auth"])


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def register(request: Request, db: DbSession, payload: RegisterRequest) -> UserResponse:
    """Create an account and log it in."""
    user = await UserService(db).register(payload.username, payload.password, payload.role)
    await AuditService(db).record("users", user.id, "CREATE", user.id, new_data=user)
    await db.commit()
    request.session[SESSION_USER_KEY] = user.id
    return UserResponse.model_validate(user)


@router.post(
    "/login",
    response_model=UserResponse,
    responses={401: {"model": ErrorResponse}},
)
async def login(request: Request, db: DbSession, payload: LoginRequest) -> UserResponse:
    """Start a session for a username/password pair."""
    user = await UserService(db).authenticate(payload.username, payload.password)
    request.session.clear()
    request.session[SESSION_USER_KEY] = user.id
    return UserResponse.model_validate(user)


@router.post("/logout", response_model=MessageResponse)
async def logout(request: Request) -> MessageResponse:
    """End the current session."""
    request.session.clear()
    return MessageResponse(message="Logged out")


@router.get(
    "/user",
    response_model=UserResponse,
    responses={401: {"model": ErrorResponse}},
)
async def current_user(user: SessionUser) -> UserResponse:
    """Get the logged-in user."""
    return UserResponse.model_validate(user)
