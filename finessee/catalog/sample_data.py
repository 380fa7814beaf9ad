"""Sample catalog data.

Seeds the primary administrator and eight sample products into an empty
store so a fresh install has something to browse.
"""

from typing import Any

import structlog

from finessee.catalog.models import Product
from finessee.catalog.predicates import FacetFilter
from finessee.infrastructure.models import User
from finessee.infrastructure.storage import Repositories

logger = structlog.get_logger()

PRIMARY_ADMIN_NUMBER = "+1234567890"

_IMG = "https://images.unsplash.com/photo-{}?ixlib=rb-4.0.3&auto=format&fit=crop&w=400&h=300"
_IDOL = _IMG.format("1524484485831-a92ffc0de03f")
_VASE = _IMG.format("1578662996442-48f60103fc96")
_BOWL = _IMG.format("1586023492125-27b2c045efd7")
_DECOR = _IMG.format("1549497538-303791108f95")

SAMPLE_PRODUCTS: list[dict[str, Any]] = [
    {
        "name": "Handcrafted Brass Ganesha Idol",
        "code": "VF-BG-001",
        "category": "Brass Idols",
        "length": 15,
        "breadth": 12,
        "height": 20,
        "finish": "Antique Brass",
        "material": "Pure Brass",
        "image_url": _IDOL,
        "image_urls": [_VASE, f"{_VASE}&q=80", f"{_IDOL}&q=90"],
        "description": (
            "Exquisitely handcrafted brass Ganesha idol with intricate detailing. "
            "Perfect for home temples and spiritual spaces. Made by skilled artisans "
            "using traditional techniques."
        ),
    },
    {
        "name": "Decorative Brass Bowl Set",
        "code": "VF-BB-002",
        "category": "Home Decor",
        "length": 25,
        "breadth": 25,
        "height": 8,
        "finish": "Polished Brass",
        "material": "Pure Brass",
        "image_url": _BOWL,
        "image_urls": [_DECOR, f"{_BOWL}&q=80"],
        "description": (
            "Set of 3 decorative brass bowls with traditional engravings. Ideal for "
            "serving dry fruits, sweets, or as decorative pieces."
        ),
    },
    {
        "name": "Brass Diya Oil Lamp",
        "code": "VF-DL-003",
        "category": "Lighting",
        "length": 10,
        "breadth": 10,
        "height": 5,
        "finish": "Traditional Brass",
        "material": "Pure Brass",
        "image_url": _IDOL,
        "image_urls": [_VASE, f"{_IDOL}&q=85"],
        "description": (
            "Traditional brass diya perfect for festivals and daily prayers. "
            "Handcrafted with beautiful patterns and smooth finish."
        ),
    },
    {
        "name": "Ornate Brass Kalash",
        "code": "VF-BK-004",
        "category": "Religious Items",
        "length": 12,
        "breadth": 12,
        "height": 18,
        "finish": "Engraved Brass",
        "material": "Pure Brass",
        "image_url": _DECOR,
        "image_urls": [_BOWL, f"{_IDOL}&q=80", f"{_VASE}&q=85"],
        "description": (
            "Sacred brass kalash with intricate engravings. Essential for religious "
            "ceremonies and puja rituals. Comes with detailed craftsmanship."
        ),
    },
    {
        "name": "Conference Table",
        "code": "VF-CT-005",
        "category": "Tables",
        "length": 300,
        "breadth": 120,
        "height": 75,
        "finish": "Mahogany",
        "material": "Mahogany Wood",
        "image_url": _DECOR,
    },
    {
        "name": "Modular Bookshelf",
        "code": "VF-BS-006",
        "category": "Storage",
        "length": 100,
        "breadth": 30,
        "height": 200,
        "finish": "White Oak",
        "material": "White Oak & Metal",
        "image_url": _BOWL,
    },
    {
        "name": "Premium Lounge Chair",
        "code": "VF-LC-007",
        "category": "Chairs",
        "length": 80,
        "breadth": 85,
        "height": 95,
        "finish": "Gray Fabric",
        "material": "Premium Fabric & Wood",
        "image_url": _BOWL,
    },
    {
        "name": "Modern Side Table",
        "code": "VF-ST-008",
        "category": "Tables",
        "length": 45,
        "breadth": 45,
        "height": 55,
        "finish": "Wood & Metal",
        "material": "Engineered Wood & Steel",
        "image_url": _BOWL,
    },
]


async def seed_sample_data(repos: Repositories) -> None:
    """Seed the primary admin and sample products into an empty store.

    Each part is seeded only when its table is empty, so restarts against a
    database never duplicate rows.

    Args:
        repos: Repositories of one unit of work.
    """
    if not await repos.users.list_all():
        await repos.users.create(
            User(
                name="Admin User",
                whatsapp_number=PRIMARY_ADMIN_NUMBER,
                city="",
                is_admin=True,
                is_primary_admin=True,
            )
        )
        logger.info("Seeded primary admin", whatsapp_number=PRIMARY_ADMIN_NUMBER)

    if await repos.products.count_matching(FacetFilter()):
        return

    products = await repos.products.bulk_create([Product(**data) for data in SAMPLE_PRODUCTS])
    logger.info("Seeded sample products", count=len(products))
