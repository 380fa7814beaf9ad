"""Wishlist application service.

Manages the per-user set of saved products:
- Adding a product (atomic, duplicate-safe)
- Removing a product (idempotent)
- Listing entries with their products
- Exporting the wishlist as a spreadsheet
"""

from dataclasses import dataclass

import structlog

from finessee.application.exports import build_wishlist_workbook
from finessee.catalog.models import Product
from finessee.domain.exceptions import NotFoundError
from finessee.infrastructure.models import User, WishlistEntry
from finessee.infrastructure.storage import Repositories

logger = structlog.get_logger()


@dataclass
class WishlistItem:
    """Wishlist entry joined with its product."""

    entry: WishlistEntry
    product: Product


class WishlistService:
    """Application service for wishlists."""

    def __init__(self, repos: Repositories, request_id: str | None = None) -> None:
        """Initialize service.

        Args:
            repos: Repositories of the current unit of work.
            request_id: Request ID for correlation.
        """
        self.repos = repos
        self.request_id = request_id

    async def add(self, user_id: int, product_id: int) -> WishlistEntry:
        """Add a product to a user's wishlist.

        Args:
            user_id: Owner.
            product_id: Product to save.

        Returns:
            Created entry.

        Raises:
            NotFoundError: If the product does not exist.
            ConflictError: If the product is already in the wishlist.
        """
        if await self.repos.products.get(product_id) is None:
            raise NotFoundError.for_entity("Product", product_id)

        entry = await self.repos.wishlist.add(user_id, product_id)
        logger.info(
            "Wishlist item added",
            user_id=user_id,
            product_id=product_id,
            request_id=self.request_id,
        )
        return entry

    async def remove(self, user_id: int, product_id: int) -> bool:
        """Remove a product from a user's wishlist.

        Returns:
            True if an entry was removed, False if there was none.
        """
        removed = await self.repos.wishlist.remove(user_id, product_id)
        if removed:
            logger.info(
                "Wishlist item removed",
                user_id=user_id,
                product_id=product_id,
                request_id=self.request_id,
            )
        return removed

    async def is_member(self, user_id: int, product_id: int) -> bool:
        return await self.repos.wishlist.exists(user_id, product_id)

    async def list_for_user(self, user_id: int) -> list[WishlistItem]:
        """Get a user's wishlist in insertion order.

        Entries whose product no longer exists are omitted.
        """
        rows = await self.repos.wishlist.list_with_products(user_id)
        return [WishlistItem(entry=entry, product=product) for entry, product in rows]

    async def export_xlsx(self, user: User) -> bytes:
        """Export a user's wishlist as an XLSX workbook.

        Args:
            user: Wishlist owner.

        Returns:
            XLSX file content.

        Raises:
            NotFoundError: If the wishlist is empty.
        """
        items = await self.list_for_user(user.id)
        if not items:
            raise NotFoundError("No items in wishlist", details={"user_id": user.id})

        content = build_wishlist_workbook(user.name, [item.product for item in items])
        logger.info(
            "Wishlist exported",
            user_id=user.id,
            items=len(items),
            request_id=self.request_id,
        )
        return content
