"""Facet engine.

Computes the values still available for one facet given the selections on
the others, so the UI never offers an option that leads to zero results.
"""

from finessee.catalog.predicates import Facet, FacetFilter
from finessee.catalog.repository import ProductRepository


class FacetEngine:
    """Computes available facet values.

    Example usage:
        engine = FacetEngine(repos.products)
        categories = await engine.available_values(
            Facet.CATEGORY, FacetFilter.from_wire(finish="Polished Brass")
        )
    """

    def __init__(self, repository: ProductRepository) -> None:
        """Initialize engine.

        Args:
            repository: Product repository to query.
        """
        self.repository = repository

    async def available_values(self, target: Facet, others: FacetFilter) -> list[str]:
        """Get distinct non-empty values of ``target`` under the other selections.

        The target facet's own selection is ignored, so the current choice
        never hides its alternatives.

        Args:
            target: Facet whose values are wanted.
            others: Current selections.

        Returns:
            Values sorted ascending.
        """
        predicate = others.without(target)
        values = await self.repository.distinct_values(target, predicate)
        return sorted(values)

    async def all_values(self, target: Facet) -> list[str]:
        """Get every distinct non-empty value of a facet, sorted ascending."""
        return await self.available_values(target, FacetFilter())
