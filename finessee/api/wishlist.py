"""Wishlist API endpoints.

Provides endpoints for the signed-in user's wishlist:
- GET /api/wishlist - entries with products
- POST /api/wishlist - add a product
- DELETE /api/wishlist/{product_id} - remove a product (idempotent)
- GET /api/wishlist/{product_id}/status - membership check
- GET /api/wishlist/export/excel - XLSX export (admins may pass userId)
"""

from typing import Annotated

from fastapi import APIRouter, Query, Response, status

from finessee.api.deps import CurrentUser, UserServiceDep, WishlistServiceDep
from finessee.api.schemas import (
    ErrorResponse,
    ProductResponse,
    SuccessResponse,
    WishlistAddRequest,
    WishlistEntryResponse,
    WishlistItemResponse,
    WishlistStatusResponse,
)
from finessee.application.exports import XLSX_MEDIA_TYPE, export_filename
from finessee.application.wishlist_service import WishlistItem
from finessee.domain.exceptions import ForbiddenError

router = APIRouter(prefix="/api/wishlist", tags=["Wishlist"])


# ============================================================================
# Converters
# ============================================================================


def item_to_response(item: WishlistItem) -> WishlistItemResponse:
    """Convert a WishlistItem to WishlistItemResponse."""
    return WishlistItemResponse(
        id=item.entry.id,
        user_id=item.entry.user_id,
        product_id=item.entry.product_id,
        created_at=item.entry.created_at,
        product=ProductResponse.model_validate(item.product),
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.get("", response_model=list[WishlistItemResponse])
async def list_wishlist(user: CurrentUser, service: WishlistServiceDep) -> list[WishlistItemResponse]:
    """Get the current user's wishlist in insertion order."""
    items = await service.list_for_user(user.id)
    return [item_to_response(item) for item in items]


@router.get(
    "/export/excel",
    responses={
        200: {"content": {XLSX_MEDIA_TYPE: {}}},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)
async def export_wishlist(
    user: CurrentUser,
    service: WishlistServiceDep,
    users: UserServiceDep,
    user_id: Annotated[int | None, Query(alias="userId")] = None,
) -> Response:
    """Download a wishlist as XLSX.

    Admins may export another user's wishlist by passing ``userId``.
    """
    owner = user
    if user_id is not None and user_id != user.id:
        if not user.is_admin:
            raise ForbiddenError("Admin access required to export other users' wishlists")
        owner = await users.get_user(user_id)

    content = await service.export_xlsx(owner)
    filename = export_filename("Wishlist", owner.name)
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post(
    "",
    response_model=WishlistEntryResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def add_to_wishlist(
    body: WishlistAddRequest,
    user: CurrentUser,
    service: WishlistServiceDep,
) -> WishlistEntryResponse:
    """Add a product to the current user's wishlist."""
    entry = await service.add(user.id, body.product_id)
    return WishlistEntryResponse.model_validate(entry)


@router.delete("/{product_id}", response_model=SuccessResponse)
async def remove_from_wishlist(
    product_id: int,
    user: CurrentUser,
    service: WishlistServiceDep,
) -> SuccessResponse:
    """Remove a product. ``success`` is false when it was not saved."""
    removed = await service.remove(user.id, product_id)
    return SuccessResponse(success=removed)


@router.get("/{product_id}/status", response_model=WishlistStatusResponse)
async def wishlist_status(
    product_id: int,
    user: CurrentUser,
    service: WishlistServiceDep,
) -> WishlistStatusResponse:
    """Check whether a product is in the current user's wishlist."""
    return WishlistStatusResponse(in_wishlist=await service.is_member(user.id, product_id))
