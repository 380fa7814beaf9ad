"""API schemas for the catalog API.

Pydantic models for request/response validation and serialization. Bodies
use camelCase keys on the wire; Python code uses snake_case names.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from finessee.catalog.models import ProductStatus


class CamelModel(BaseModel):
    """Base model serialised with camelCase keys and readable from ORM objects."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ============================================================================
# Common Schemas
# ============================================================================


class ErrorDetail(BaseModel):
    """Detailed error information."""

    field: str | None = Field(default=None, description="Field that caused the error")
    message: str = Field(..., description="Error message")


class ErrorResponse(BaseModel):
    """Standard error response.

    All API errors follow this format for consistency.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: list[ErrorDetail] = Field(
        default_factory=list, description="Additional error details"
    )
    request_id: str | None = Field(
        default=None, description="Request ID for correlation"
    )


class SuccessResponse(CamelModel):
    """Outcome of an operation without a body."""

    success: bool = Field(default=True)


# ============================================================================
# Product Schemas
# ============================================================================


class ProductResponse(CamelModel):
    """Product representation."""

    id: int
    name: str
    code: str
    category: str
    length: float
    breadth: float
    height: float
    finish: str
    material: str = ""
    image_url: str | None = None
    image_urls: list[str] = Field(default_factory=list)
    description: str | None = None
    status: str = ProductStatus.ACTIVE.value
    created_at: datetime
    updated_at: datetime


class ProductCreateRequest(CamelModel):
    """Request to create a product."""

    name: str = Field(..., min_length=1)
    code: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    length: float = Field(..., gt=0, description="Length in cm")
    breadth: float = Field(..., gt=0, description="Breadth in cm")
    height: float = Field(..., gt=0, description="Height in cm")
    finish: str = Field(..., min_length=1)
    material: str | None = Field(default="", description="Empty when unspecified")
    image_url: str | None = None
    image_urls: list[str] = Field(default_factory=list)
    description: str | None = None
    status: ProductStatus = ProductStatus.ACTIVE


class ProductUpdateRequest(CamelModel):
    """Partial product update. Omitted fields are left unchanged."""

    name: str | None = Field(default=None, min_length=1)
    code: str | None = Field(default=None, min_length=1)
    category: str | None = Field(default=None, min_length=1)
    length: float | None = Field(default=None, gt=0)
    breadth: float | None = Field(default=None, gt=0)
    height: float | None = Field(default=None, gt=0)
    finish: str | None = Field(default=None, min_length=1)
    material: str | None = None
    image_url: str | None = None
    image_urls: list[str] | None = None
    description: str | None = None
    status: ProductStatus | None = None


class PaginationSchema(CamelModel):
    """Pagination block of a listing."""

    page: int
    limit: int
    total: int
    total_pages: int


class ProductListResponse(CamelModel):
    """One page of products."""

    products: list[ProductResponse]
    pagination: PaginationSchema


class ImportResponse(CamelModel):
    """Result of a spreadsheet import."""

    success: bool = True
    imported: int
    total: int
    skipped: int = 0


# ============================================================================
# Wishlist Schemas
# ============================================================================


class WishlistAddRequest(CamelModel):
    """Request to add a product to the wishlist."""

    product_id: int


class WishlistEntryResponse(CamelModel):
    """Wishlist entry."""

    id: int
    user_id: int
    product_id: int
    created_at: datetime


class WishlistItemResponse(WishlistEntryResponse):
    """Wishlist entry with its product."""

    product: ProductResponse


class WishlistStatusResponse(CamelModel):
    """Whether a product is in the current user's wishlist."""

    in_wishlist: bool


# ============================================================================
# User Schemas
# ============================================================================


class UserResponse(CamelModel):
    """User representation. Password hashes are never included."""

    id: int
    name: str
    whatsapp_number: str
    city: str = ""
    is_admin: bool
    is_primary_admin: bool
    created_at: datetime


class RegisterRequest(CamelModel):
    """Visitor registration."""

    name: str = Field(..., min_length=1)
    whatsapp_number: str = Field(..., min_length=5)
    city: str = ""


class AdminLoginRequest(CamelModel):
    """Admin login."""

    whatsapp_number: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class AuthResponse(CamelModel):
    """Signed-in user."""

    user: UserResponse
    success: bool = True


class MeResponse(CamelModel):
    """Current user."""

    user: UserResponse


class UserCreateRequest(CamelModel):
    """Admin request to create a user."""

    name: str = Field(..., min_length=1)
    whatsapp_number: str = Field(..., min_length=5)
    city: str = ""
    password: str | None = None
    is_admin: bool = False


class UserUpdateRequest(CamelModel):
    """Admin request to change a user. Omitted fields are left unchanged."""

    name: str | None = None
    whatsapp_number: str | None = None
    city: str | None = None
    password: str | None = None
    is_admin: bool | None = None
    is_primary_admin: bool | None = None


class UserDetailResponse(CamelModel):
    """User with their wishlist."""

    user: UserResponse
    wishlist: list[WishlistItemResponse]


# ============================================================================
# Feedback Schemas
# ============================================================================


class FeedbackCreateRequest(CamelModel):
    """Customer feedback submission.

    ``userId`` is taken from the session when signed in.
    """

    user_id: int | None = None
    product_id: int | None = None
    customer_name: str = Field(..., min_length=1)
    customer_phone: str | None = None
    rating: int
    title: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)


class FeedbackUpdateRequest(CamelModel):
    """Moderation changes. Omitted fields are left unchanged."""

    is_approved: bool | None = None
    is_published: bool | None = None
    admin_notes: str | None = None


class FeedbackResponse(CamelModel):
    """Feedback representation."""

    id: int
    user_id: int
    product_id: int | None = None
    customer_name: str
    customer_phone: str | None = None
    rating: int
    title: str
    message: str
    is_approved: bool
    is_published: bool
    admin_notes: str | None = None
    created_at: datetime
    updated_at: datetime


# ============================================================================
# Health Schemas
# ============================================================================


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str
    service: str
    version: str
    storage: str
