"""Product predicates and sort policy.

A predicate is either a ``FacetFilter`` (exact facet constraints) or a
``SearchQuery`` (free-text substring match). Each predicate can test a
product in memory and render itself as a SQLAlchemy clause, so both storage
backends share one definition of what "matches" means.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

from sqlalchemy import ColumnElement, and_, func, or_, true

from finessee.catalog.models import Product

# Wire value that means "no constraint" for a facet.
ALL_SENTINEL = "all"


def escape_like(value: str, escape: str = "\\") -> str:
    """Escape LIKE wildcards so user text matches literally.

    Args:
        value: Raw user text.
        escape: Escape character used in the LIKE clause.

    Returns:
        Text with escape, ``%`` and ``_`` characters escaped.
    """
    return (
        value.replace(escape, escape * 2)
        .replace("%", f"{escape}%")
        .replace("_", f"{escape}_")
    )


def normalize_facet_value(value: str | None) -> str | None:
    """Map unconstrained wire values ("all", empty, None) to None."""
    if value is None:
        return None
    if value == "" or value == ALL_SENTINEL:
        return None
    return value


# ============================================================================
# Facets
# ============================================================================


class Facet(str, Enum):
    """Product attribute usable for exact-match filtering."""

    CATEGORY = "category"
    FINISH = "finish"
    MATERIAL = "material"

    @property
    def column(self) -> Any:
        """Get the mapped column for this facet."""
        return getattr(Product, self.value)

    def value_of(self, product: Product) -> str:
        """Read this facet's value from a product."""
        return getattr(product, self.value) or ""


@dataclass(frozen=True)
class FacetFilter:
    """Conjunction of exact facet constraints.

    A ``None`` field is unconstrained; a filter with no constraints matches
    every product.
    """

    category: str | None = None
    finish: str | None = None
    material: str | None = None

    @classmethod
    def from_wire(
        cls,
        category: str | None = None,
        finish: str | None = None,
        material: str | None = None,
    ) -> "FacetFilter":
        """Build a filter from raw wire values, dropping "all" and empty."""
        return cls(
            category=normalize_facet_value(category),
            finish=normalize_facet_value(finish),
            material=normalize_facet_value(material),
        )

    def constraints(self) -> dict[Facet, str]:
        """Get the active constraints keyed by facet."""
        active: dict[Facet, str] = {}
        for facet in Facet:
            value = getattr(self, facet.value)
            if value is not None:
                active[facet] = value
        return active

    def without(self, facet: Facet) -> "FacetFilter":
        """Get a copy of this filter with one facet unconstrained."""
        values = {f.value: getattr(self, f.value) for f in Facet}
        values[facet.value] = None
        return FacetFilter(**values)

    @property
    def is_empty(self) -> bool:
        """Whether the filter constrains nothing."""
        return not self.constraints()

    def matches(self, product: Product) -> bool:
        """Test a product in memory."""
        return all(
            facet.value_of(product) == value
            for facet, value in self.constraints().items()
        )

    def clause(self) -> ColumnElement[bool]:
        """Render the filter as a SQL boolean clause."""
        conditions = [facet.column == value for facet, value in self.constraints().items()]
        if not conditions:
            return true()
        return and_(*conditions)


@dataclass(frozen=True)
class SearchQuery:
    """Case-insensitive substring search over name, code, category and finish."""

    text: str

    SEARCHED_FIELDS = ("name", "code", "category", "finish")

    @property
    def needle(self) -> str:
        return self.text.lower()

    def matches(self, product: Product) -> bool:
        """Test a product in memory."""
        needle = self.needle
        return any(
            needle in (getattr(product, field) or "").lower()
            for field in self.SEARCHED_FIELDS
        )

    def clause(self) -> ColumnElement[bool]:
        """Render the search as a SQL boolean clause with literal wildcards."""
        pattern = f"%{escape_like(self.needle)}%"
        return or_(
            *(
                func.lower(getattr(Product, field)).like(pattern, escape="\\")
                for field in self.SEARCHED_FIELDS
            )
        )


Predicate = Union[FacetFilter, SearchQuery]


# ============================================================================
# Sort policy
# ============================================================================


class SortKey(str, Enum):
    """Listing order. Every key is completed by ascending id."""

    NAME = "name"
    CODE = "code"
    CATEGORY = "category"
    NEWEST = "newest"

    @classmethod
    def parse(cls, value: str | None) -> "SortKey":
        """Parse a wire sort value, falling back to name.

        Args:
            value: Raw ``sortBy`` value.

        Returns:
            Matching SortKey, or NAME for missing or unknown values.
        """
        if not value:
            return cls.NAME
        try:
            return cls(value)
        except ValueError:
            return cls.NAME

    def order_by(self, dialect: str | None = None) -> list[Any]:
        """Get SQL ORDER BY expressions for this key.

        Text keys compare by code point, like ``sort``. SQLite's default
        BINARY collation already does; PostgreSQL needs the "C" collation
        instead of the database locale.

        Args:
            dialect: SQLAlchemy dialect name of the executing connection.
        """
        if self is SortKey.NEWEST:
            primary = Product.created_at.desc()
        else:
            column = getattr(Product, self.value)
            if dialect == "postgresql":
                column = column.collate("C")
            primary = column.asc()
        return [primary, Product.id.asc()]

    def sort(self, products: list[Product]) -> list[Product]:
        """Sort products in memory with the same order as ``order_by``."""
        ordered = sorted(products, key=lambda p: p.id)
        if self is SortKey.NEWEST:
            # Stable sort keeps ascending id among equal timestamps.
            ordered.sort(key=lambda p: p.created_at, reverse=True)
        else:
            ordered.sort(key=lambda p: getattr(p, self.value))
        return ordered
