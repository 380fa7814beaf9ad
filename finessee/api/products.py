"""Product API endpoints.

Provides endpoints for browsing and administering products:
- GET /api/products - filtered, searched, sorted, paginated listing
- GET /api/products/{id} - product details
- POST /api/products - create a product (admin)
- PUT /api/products/{id} - update a product (admin)
- DELETE /api/products/{id} - delete a product (admin)
- POST /api/products/upload-excel - import a CSV/XLSX file (admin)
"""

from typing import Annotated

from fastapi import APIRouter, File, Query, UploadFile, status

from finessee.api.deps import AdminUser, ImportServiceDep, ListingServiceDep
from finessee.api.schemas import (
    ErrorResponse,
    ImportResponse,
    PaginationSchema,
    ProductCreateRequest,
    ProductListResponse,
    ProductResponse,
    ProductUpdateRequest,
    SuccessResponse,
)
from finessee.catalog.service import ListingRequest

router = APIRouter(prefix="/api/products", tags=["Products"])

# Fields a client may clear by sending null; material is cleared to "".
NULLABLE_PRODUCT_FIELDS = {"image_url", "description", "material"}


@router.get("", response_model=ProductListResponse)
async def list_products(
    service: ListingServiceDep,
    search: Annotated[str | None, Query(description="Free-text search")] = None,
    category: Annotated[str | None, Query(description="Category or 'all'")] = None,
    finish: Annotated[str | None, Query(description="Finish or 'all'")] = None,
    material: Annotated[str | None, Query(description="Material or 'all'")] = None,
    sort_by: Annotated[
        str | None, Query(alias="sortBy", description="name, code, category or newest")
    ] = None,
    page: Annotated[str | None, Query(description="Page number (1-based)")] = None,
    limit: Annotated[str | None, Query(description="Items per page")] = None,
) -> ProductListResponse:
    """List products.

    A non-empty search ignores the category, finish, material and sort
    parameters. Invalid page or limit values fall back to defaults.
    """
    result = await service.list_products(
        ListingRequest(
            search=search,
            category=category,
            finish=finish,
            material=material,
            sort_by=sort_by,
            page=page,
            limit=limit,
        )
    )
    return ProductListResponse(
        products=[ProductResponse.model_validate(p) for p in result.items],
        pagination=PaginationSchema(
            page=result.page,
            limit=result.limit,
            total=result.total,
            total_pages=result.total_pages,
        ),
    )


@router.post(
    "/upload-excel",
    response_model=ImportResponse,
    responses={400: {"model": ErrorResponse}},
)
async def upload_products(
    admin: AdminUser,
    service: ImportServiceDep,
    excel: Annotated[UploadFile, File(description="CSV or XLSX file")],
) -> ImportResponse:
    """Import products from an uploaded spreadsheet."""
    content = await excel.read()
    result = await service.import_products(excel.filename or "", content)
    return ImportResponse(
        success=result.success,
        imported=result.imported,
        total=result.total,
        skipped=result.skipped,
    )


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_product(product_id: int, service: ListingServiceDep) -> ProductResponse:
    """Get product details."""
    product = await service.get_product(product_id)
    return ProductResponse.model_validate(product)


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def create_product(
    body: ProductCreateRequest,
    admin: AdminUser,
    service: ListingServiceDep,
) -> ProductResponse:
    """Create a product."""
    data = body.model_dump()
    data["status"] = body.status.value
    product = await service.create_product(data)
    return ProductResponse.model_validate(product)


@router.put(
    "/{product_id}",
    response_model=ProductResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_product(
    product_id: int,
    body: ProductUpdateRequest,
    admin: AdminUser,
    service: ListingServiceDep,
) -> ProductResponse:
    """Update a product. Only the fields present in the body change."""
    changes = {
        key: value
        for key, value in body.model_dump(exclude_unset=True).items()
        if value is not None or key in NULLABLE_PRODUCT_FIELDS
    }
    if "status" in changes:
        changes["status"] = body.status.value
    product = await service.update_product(product_id, changes)
    return ProductResponse.model_validate(product)


@router.delete(
    "/{product_id}",
    response_model=SuccessResponse,
    responses={404: {"model": ErrorResponse}},
)
async def delete_product(
    product_id: int,
    admin: AdminUser,
    service: ListingServiceDep,
) -> SuccessResponse:
    """Delete a product and its wishlist entries."""
    await service.delete_product(product_id)
    return SuccessResponse(success=True)
