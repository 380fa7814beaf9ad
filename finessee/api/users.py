"""User administration API endpoints.

Provides admin-only endpoints:
- GET /api/users - list users
- POST /api/users - create a user
- GET /api/users/export - XLSX export of all users
- GET /api/admin/users/{id} - user with wishlist
- PUT /api/users/{id} - update a user
- DELETE /api/users/{id} - delete a user
"""

from fastapi import APIRouter, Response, status

from finessee.api.deps import AdminUser, UserServiceDep
from finessee.api.schemas import (
    ErrorResponse,
    SuccessResponse,
    UserCreateRequest,
    UserDetailResponse,
    UserResponse,
    UserUpdateRequest,
)
from finessee.api.wishlist import item_to_response
from finessee.application.exports import XLSX_MEDIA_TYPE, export_filename

router = APIRouter(prefix="/api", tags=["Users"])


@router.get("/users", response_model=list[UserResponse])
async def list_users(admin: AdminUser, service: UserServiceDep) -> list[UserResponse]:
    """List all users."""
    return [UserResponse.model_validate(u) for u in await service.list_users()]


@router.post(
    "/users",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def create_user(
    body: UserCreateRequest,
    admin: AdminUser,
    service: UserServiceDep,
) -> UserResponse:
    """Create a user. Only a primary admin may create admins."""
    user = await service.create_user(
        admin,
        name=body.name,
        whatsapp_number=body.whatsapp_number,
        city=body.city,
        password=body.password,
        is_admin=body.is_admin,
    )
    return UserResponse.model_validate(user)


@router.get(
    "/users/export",
    responses={200: {"content": {XLSX_MEDIA_TYPE: {}}}},
)
async def export_users(admin: AdminUser, service: UserServiceDep) -> Response:
    """Download all users as XLSX."""
    content = await service.export_xlsx()
    filename = export_filename("Users")
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get(
    "/admin/users/{user_id}",
    response_model=UserDetailResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_user_detail(
    user_id: int,
    admin: AdminUser,
    service: UserServiceDep,
) -> UserDetailResponse:
    """Get a user with their wishlist."""
    detail = await service.user_detail(user_id)
    return UserDetailResponse(
        user=UserResponse.model_validate(detail.user),
        wishlist=[item_to_response(item) for item in detail.wishlist],
    )


@router.put(
    "/users/{user_id}",
    response_model=UserResponse,
    responses={
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)
async def update_user(
    user_id: int,
    body: UserUpdateRequest,
    admin: AdminUser,
    service: UserServiceDep,
) -> UserResponse:
    """Update a user. Admin flags change only for a primary admin actor."""
    user = await service.update_user(admin, user_id, body.model_dump(exclude_unset=True))
    return UserResponse.model_validate(user)


@router.delete(
    "/users/{user_id}",
    response_model=SuccessResponse,
    responses={
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)
async def delete_user(
    user_id: int,
    admin: AdminUser,
    service: UserServiceDep,
) -> SuccessResponse:
    """Delete a user with their wishlist and feedback."""
    await service.delete_user(admin, user_id)
    return SuccessResponse(success=True)
