"""Facet API endpoints.

Provides endpoints for filter options:
- GET /api/filters/categories?finish&material - categories still available
- GET /api/filters/finishes?category&material - finishes still available
- GET /api/filters/materials?category&finish - materials still available
- GET /api/categories, /api/finishes, /api/materials - every value
"""

from typing import Annotated

from fastapi import APIRouter, Query

from finessee.api.deps import FacetEngineDep
from finessee.catalog.predicates import Facet, FacetFilter

router = APIRouter(prefix="/api", tags=["Filters"])

FacetParam = Annotated[str | None, Query(description="Selected value or 'all'")]


# ============================================================================
# Dynamic filters
# ============================================================================


@router.get("/filters/categories", response_model=list[str])
async def available_categories(
    engine: FacetEngineDep,
    finish: FacetParam = None,
    material: FacetParam = None,
) -> list[str]:
    """Get categories that have products under the other selections."""
    others = FacetFilter.from_wire(finish=finish, material=material)
    return await engine.available_values(Facet.CATEGORY, others)


@router.get("/filters/finishes", response_model=list[str])
async def available_finishes(
    engine: FacetEngineDep,
    category: FacetParam = None,
    material: FacetParam = None,
) -> list[str]:
    """Get finishes that have products under the other selections."""
    others = FacetFilter.from_wire(category=category, material=material)
    return await engine.available_values(Facet.FINISH, others)


@router.get("/filters/materials", response_model=list[str])
async def available_materials(
    engine: FacetEngineDep,
    category: FacetParam = None,
    finish: FacetParam = None,
) -> list[str]:
    """Get materials that have products under the other selections."""
    others = FacetFilter.from_wire(category=category, finish=finish)
    return await engine.available_values(Facet.MATERIAL, others)


# ============================================================================
# Global lists
# ============================================================================


@router.get("/categories", response_model=list[str])
async def all_categories(engine: FacetEngineDep) -> list[str]:
    return await engine.all_values(Facet.CATEGORY)


@router.get("/finishes", response_model=list[str])
async def all_finishes(engine: FacetEngineDep) -> list[str]:
    return await engine.all_values(Facet.FINISH)


@router.get("/materials", response_model=list[str])
async def all_materials(engine: FacetEngineDep) -> list[str]:
    return await engine.all_values(Facet.MATERIAL)
