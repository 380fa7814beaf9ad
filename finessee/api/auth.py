"""Authentication API endpoints.

Provides endpoints for session management:
- POST /api/auth/register - visitor sign-up or sign-in by WhatsApp number
- POST /api/auth/admin-login - admin sign-in with password
- POST /api/auth/logout - clear the session
- GET /api/auth/me - current user
"""

from fastapi import APIRouter, Request

from finessee.api.deps import SESSION_USER_KEY, CurrentUser, UserServiceDep
from finessee.api.schemas import (
    AdminLoginRequest,
    AuthResponse,
    ErrorResponse,
    MeResponse,
    RegisterRequest,
    SuccessResponse,
    UserResponse,
)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/register",
    response_model=AuthResponse,
    responses={403: {"model": ErrorResponse}},
)
async def register(
    body: RegisterRequest,
    request: Request,
    service: UserServiceDep,
) -> AuthResponse:
    """Register a visitor, or sign in a known number, and start a session."""
    user = await service.register(body.name, body.whatsapp_number, body.city)
    request.session[SESSION_USER_KEY] = user.id
    return AuthResponse(user=UserResponse.model_validate(user))


@router.post(
    "/admin-login",
    response_model=AuthResponse,
    responses={401: {"model": ErrorResponse}},
)
async def admin_login(
    body: AdminLoginRequest,
    request: Request,
    service: UserServiceDep,
) -> AuthResponse:
    """Sign in an administrator and start a session."""
    user = await service.admin_login(body.whatsapp_number, body.password)
    request.session[SESSION_USER_KEY] = user.id
    return AuthResponse(user=UserResponse.model_validate(user))


@router.post("/logout", response_model=SuccessResponse)
async def logout(request: Request) -> SuccessResponse:
    """End the session."""
    request.session.clear()
    return SuccessResponse(success=True)


@router.get(
    "/me",
    response_model=MeResponse,
    responses={401: {"model": ErrorResponse}},
)
async def me(user: CurrentUser) -> MeResponse:
    """Get the signed-in user."""
    return MeResponse(user=UserResponse.model_validate(user))
