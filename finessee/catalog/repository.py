"""Product repositories.

Provides the ``ProductRepository`` interface with a SQLAlchemy implementation
and an in-memory implementation. Both evaluate predicates through
``finessee.catalog.predicates`` so their results agree.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from finessee.catalog.models import Product, ProductStatus
from finessee.catalog.predicates import Facet, FacetFilter, Predicate, SortKey
from finessee.domain.exceptions import ConflictError, NotFoundError
from finessee.infrastructure.memory_store import MemoryStore
from finessee.infrastructure.models import Feedback, WishlistEntry

# Fields a caller may change through ``update``.
UPDATABLE_FIELDS = frozenset(
    {
        "name",
        "code",
        "category",
        "length",
        "breadth",
        "height",
        "finish",
        "material",
        "image_url",
        "image_urls",
        "description",
        "status",
    }
)


def _duplicate_code(code: str) -> ConflictError:
    return ConflictError(
        "Product code already exists",
        details={"code": code},
    )


def _check_batch_codes(products: list[Product]) -> None:
    """Raise ConflictError when a code repeats inside one batch."""
    seen: set[str] = set()
    for product in products:
        if product.code in seen:
            raise _duplicate_code(product.code)
        seen.add(product.code)


def _clean_changes(changes: dict[str, Any]) -> dict[str, Any]:
    cleaned = {k: v for k, v in changes.items() if k in UPDATABLE_FIELDS}
    if "material" in cleaned and cleaned["material"] is None:
        cleaned["material"] = ""
    if "image_urls" in cleaned and cleaned["image_urls"] is None:
        cleaned["image_urls"] = []
    return cleaned


class ProductRepository(ABC):
    """Storage interface for products.

    ``limit=None`` means unbounded. Every listing order is completed by
    ascending id, so pagination over a fixed store never duplicates or
    skips a product.
    """

    @abstractmethod
    async def find_page(
        self,
        predicate: Predicate,
        sort: SortKey = SortKey.NAME,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Product]:
        """Find products matching a predicate, ordered and sliced.

        Args:
            predicate: FacetFilter or SearchQuery.
            sort: Sort key.
            limit: Maximum results, None for all.
            offset: Number of leading results to skip.

        Returns:
            Matching products in order.
        """

    @abstractmethod
    async def count_matching(self, predicate: Predicate) -> int:
        """Count products matching a predicate."""

    @abstractmethod
    async def distinct_values(self, facet: Facet, predicate: Predicate) -> set[str]:
        """Get distinct non-empty values of a facet among matching products."""

    @abstractmethod
    async def get(self, product_id: int) -> Product | None:
        """Get product by ID."""

    @abstractmethod
    async def get_by_code(self, code: str) -> Product | None:
        """Get product by code."""

    @abstractmethod
    async def find_codes(self, codes: Iterable[str]) -> set[str]:
        """Get which of the given codes already exist."""

    @abstractmethod
    async def create(self, product: Product) -> Product:
        """Persist a new product.

        Raises:
            ConflictError: If the code is already used.
        """

    @abstractmethod
    async def update(self, product_id: int, changes: dict[str, Any]) -> Product:
        """Apply changes to a product.

        Raises:
            NotFoundError: If the product does not exist.
            ConflictError: If the new code is already used.
        """

    @abstractmethod
    async def delete(self, product_id: int) -> bool:
        """Delete a product and its wishlist entries.

        Returns:
            True if a product was deleted.
        """

    @abstractmethod
    async def bulk_create(self, products: list[Product]) -> list[Product]:
        """Persist several products at once.

        Raises:
            ConflictError: If any code is already used or repeats in the batch.
        """


# ============================================================================
# SQLAlchemy implementation
# ============================================================================


class SqlProductRepository(ProductRepository):
    """Repository for Product database operations.

    Example usage:
        async with storage.session() as repos:
            products = await repos.products.find_page(
                FacetFilter(category="Tables"),
                SortKey.CODE,
                limit=20,
            )
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    async def find_page(
        self,
        predicate: Predicate,
        sort: SortKey = SortKey.NAME,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Product]:
        dialect = self.session.bind.dialect.name
        query = select(Product).where(predicate.clause()).order_by(*sort.order_by(dialect))
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def count_matching(self, predicate: Predicate) -> int:
        query = select(func.count(Product.id)).where(predicate.clause())
        result = await self.session.execute(query)
        return result.scalar_one()

    async def distinct_values(self, facet: Facet, predicate: Predicate) -> set[str]:
        column = facet.column
        query = (
            select(column)
            .distinct()
            .where(predicate.clause())
            .where(column.is_not(None))
            .where(column != "")
        )
        result = await self.session.execute(query)
        return set(result.scalars().all())

    async def get(self, product_id: int) -> Product | None:
        return await self.session.get(Product, product_id)

    async def get_by_code(self, code: str) -> Product | None:
        result = await self.session.execute(select(Product).where(Product.code == code))
        return result.scalar_one_or_none()

    async def find_codes(self, codes: Iterable[str]) -> set[str]:
        wanted = list(set(codes))
        if not wanted:
            return set()
        result = await self.session.execute(select(Product.code).where(Product.code.in_(wanted)))
        return set(result.scalars().all())

    async def create(self, product: Product) -> Product:
        if await self.get_by_code(product.code) is not None:
            raise _duplicate_code(product.code)
        if product.material is None:
            product.material = ""
        self.session.add(product)
        try:
            await self.session.flush()
        except IntegrityError as e:
            raise _duplicate_code(product.code) from e
        return product

    async def update(self, product_id: int, changes: dict[str, Any]) -> Product:
        product = await self.get(product_id)
        if product is None:
            raise NotFoundError.for_entity("Product", product_id)

        cleaned = _clean_changes(changes)
        new_code = cleaned.get("code")
        if new_code is not None and new_code != product.code:
            if await self.get_by_code(new_code) is not None:
                raise _duplicate_code(new_code)

        for key, value in cleaned.items():
            setattr(product, key, value)
        product.updated_at = datetime.now(timezone.utc)
        try:
            await self.session.flush()
        except IntegrityError as e:
            raise _duplicate_code(product.code) from e
        return product

    async def delete(self, product_id: int) -> bool:
        product = await self.get(product_id)
        if product is None:
            return False

        # SQLite does not enforce foreign keys by default.
        await self.session.execute(
            delete(WishlistEntry).where(WishlistEntry.product_id == product_id)
        )
        await self.session.execute(
            update(Feedback).where(Feedback.product_id == product_id).values(product_id=None)
        )
        await self.session.delete(product)
        await self.session.flush()
        return True

    async def bulk_create(self, products: list[Product]) -> list[Product]:
        _check_batch_codes(products)
        existing = await self.find_codes(p.code for p in products)
        if existing:
            raise _duplicate_code(sorted(existing)[0])

        for product in products:
            if product.material is None:
                product.material = ""
        self.session.add_all(products)
        try:
            await self.session.flush()
        except IntegrityError as e:
            raise ConflictError("Product code already exists") from e
        return products


# ============================================================================
# In-memory implementation
# ============================================================================


class InMemoryProductRepository(ProductRepository):
    """Repository over a shared ``MemoryStore``.

    Stores transient Product instances keyed by id.
    """

    def __init__(self, store: MemoryStore) -> None:
        """Initialize repository.

        Args:
            store: Shared in-memory tables.
        """
        self.store = store

    def _matching(self, predicate: Predicate) -> list[Product]:
        return [p for p in self.store.products.values() if predicate.matches(p)]

    async def find_page(
        self,
        predicate: Predicate,
        sort: SortKey = SortKey.NAME,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Product]:
        ordered = sort.sort(self._matching(predicate))
        end = None if limit is None else offset + limit
        return ordered[offset:end]

    async def count_matching(self, predicate: Predicate) -> int:
        return len(self._matching(predicate))

    async def distinct_values(self, facet: Facet, predicate: Predicate) -> set[str]:
        return {facet.value_of(p) for p in self._matching(predicate)} - {""}

    async def get(self, product_id: int) -> Product | None:
        return self.store.products.get(product_id)

    async def get_by_code(self, code: str) -> Product | None:
        for product in self.store.products.values():
            if product.code == code:
                return product
        return None

    async def find_codes(self, codes: Iterable[str]) -> set[str]:
        existing = {p.code for p in self.store.products.values()}
        return existing & set(codes)

    def _insert(self, product: Product) -> Product:
        now = datetime.now(timezone.utc)
        product.id = self.store.next_id("products")
        product.material = product.material or ""
        product.image_urls = list(product.image_urls or [])
        product.status = product.status or ProductStatus.ACTIVE.value
        product.created_at = product.created_at or now
        product.updated_at = now
        self.store.products[product.id] = product
        return product

    async def create(self, product: Product) -> Product:
        if await self.get_by_code(product.code) is not None:
            raise _duplicate_code(product.code)
        return self._insert(product)

    async def update(self, product_id: int, changes: dict[str, Any]) -> Product:
        product = self.store.products.get(product_id)
        if product is None:
            raise NotFoundError.for_entity("Product", product_id)

        cleaned = _clean_changes(changes)
        new_code = cleaned.get("code")
        if new_code is not None and new_code != product.code:
            if await self.get_by_code(new_code) is not None:
                raise _duplicate_code(new_code)

        for key, value in cleaned.items():
            setattr(product, key, value)
        product.updated_at = datetime.now(timezone.utc)
        return product

    async def delete(self, product_id: int) -> bool:
        if self.store.products.pop(product_id, None) is None:
            return False
        self.store.cascade_product(product_id)
        return True

    async def bulk_create(self, products: list[Product]) -> list[Product]:
        _check_batch_codes(products)
        existing = await self.find_codes(p.code for p in products)
        if existing:
            raise _duplicate_code(sorted(existing)[0])
        return [self._insert(product) for product in products]
