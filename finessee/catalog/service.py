"""Listing service for product operations.

Turns raw listing parameters into a predicate, sort key and page window,
and exposes the product administration operations.
"""

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

import structlog

from finessee.catalog.models import Product
from finessee.catalog.predicates import FacetFilter, Predicate, SearchQuery, SortKey
from finessee.catalog.repository import ProductRepository
from finessee.domain.exceptions import NotFoundError
from finessee.infrastructure.config import settings

logger = structlog.get_logger()

T = TypeVar("T")


def parse_positive_int(value: Any, default: int) -> int:
    """Parse a positive integer leniently.

    Args:
        value: Raw value (string, int or None).
        default: Value used when parsing fails or the result is not positive.

    Returns:
        Parsed positive integer, or ``default``.
    """
    if value is None or isinstance(value, bool):
        return default
    try:
        parsed = int(str(value).strip())
    except ValueError:
        return default
    return parsed if parsed > 0 else default


@dataclass
class ListingRequest:
    """Raw listing parameters as received on the wire.

    Attributes:
        search: Free-text search; when non-empty, facets and sort are ignored.
        category: Category selection or "all".
        finish: Finish selection or "all".
        material: Material selection or "all".
        sort_by: One of name, code, category, newest.
        page: Page number (1-indexed).
        limit: Items per page.
    """

    search: str | None = None
    category: str | None = None
    finish: str | None = None
    material: str | None = None
    sort_by: str | None = None
    page: str | int | None = None
    limit: str | int | None = None


@dataclass
class PaginatedResult(Generic[T]):
    """Paginated result container.

    Attributes:
        items: List of items.
        total: Total count across all pages.
        page: Current page.
        limit: Items per page.
    """

    items: list[T]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        """Calculate total pages."""
        return (self.total + self.limit - 1) // self.limit

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class ListingService:
    """Service for product listing and administration.

    Example usage:
        async with storage.session() as repos:
            service = ListingService(repos.products)
            result = await service.list_products(
                ListingRequest(category="Tables", sort_by="code", page="2")
            )
    """

    def __init__(
        self,
        repository: ProductRepository,
        request_id: str | None = None,
        default_limit: int | None = None,
        max_limit: int | None = None,
    ) -> None:
        """Initialize service.

        Args:
            repository: Product repository.
            request_id: Request ID for correlation.
            default_limit: Page size when none is given.
            max_limit: Upper bound on page size.
        """
        self.repository = repository
        self.request_id = request_id
        self.default_limit = default_limit or settings.default_page_limit
        self.max_limit = max_limit or settings.max_page_limit

    def build_query(self, request: ListingRequest) -> tuple[Predicate, SortKey]:
        """Choose the predicate and order for a request.

        Args:
            request: Raw listing parameters.

        Returns:
            Tuple of (predicate, sort key).
        """
        search = (request.search or "").strip()
        if search:
            return SearchQuery(search), SortKey.NAME

        predicate = FacetFilter.from_wire(
            category=request.category,
            finish=request.finish,
            material=request.material,
        )
        return predicate, SortKey.parse(request.sort_by)

    async def list_products(self, request: ListingRequest) -> PaginatedResult[Product]:
        """List one page of products.

        Pages past the end return no items with the true total.

        Args:
            request: Raw listing parameters.

        Returns:
            Paginated products.
        """
        page = parse_positive_int(request.page, 1)
        limit = min(parse_positive_int(request.limit, self.default_limit), self.max_limit)
        predicate, sort = self.build_query(request)

        result = PaginatedResult[Product](items=[], total=0, page=page, limit=limit)
        result.items = await self.repository.find_page(
            predicate, sort, limit=limit, offset=result.offset
        )
        result.total = await self.repository.count_matching(predicate)
        return result

    # ========================================================================
    # Administration
    # ========================================================================

    async def get_product(self, product_id: int) -> Product:
        """Get product by ID.

        Raises:
            NotFoundError: If the product does not exist.
        """
        product = await self.repository.get(product_id)
        if product is None:
            raise NotFoundError.for_entity("Product", product_id)
        return product

    async def create_product(self, data: dict[str, Any]) -> Product:
        """Create a product.

        Args:
            data: Product fields.

        Returns:
            Created product.

        Raises:
            ConflictError: If the code is already used.
        """
        product = await self.repository.create(Product(**data))
        logger.info(
            "Product created",
            product_id=product.id,
            code=product.code,
            request_id=self.request_id,
        )
        return product

    async def update_product(self, product_id: int, changes: dict[str, Any]) -> Product:
        """Update a product.

        Raises:
            NotFoundError: If the product does not exist.
            ConflictError: If the new code is already used.
        """
        product = await self.repository.update(product_id, changes)
        logger.info(
            "Product updated",
            product_id=product_id,
            fields=sorted(changes),
            request_id=self.request_id,
        )
        return product

    async def delete_product(self, product_id: int) -> None:
        """Delete a product and its wishlist entries.

        Raises:
            NotFoundError: If the product does not exist.
        """
        if not await self.repository.delete(product_id):
            raise NotFoundError.for_entity("Product", product_id)
        logger.info("Product deleted", product_id=product_id, request_id=self.request_id)
