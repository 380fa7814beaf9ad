"""SQLAlchemy model for the product catalog.

Defines the Product table. The same mapped class is used by the in-memory
backend as a plain transient object.
"""

from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import JSON, DateTime, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from finessee.infrastructure.database import Base


class ProductStatus(str, Enum):
    """Lifecycle state of a product."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    DRAFT = "draft"


class Product(Base):
    """Product entity in the catalog.

    Attributes:
        id: System-assigned numeric identifier.
        name: Display name.
        code: Unique human-readable code (e.g. "VF-BG-001").
        category: Category facet value.
        length: Length in centimeters.
        breadth: Breadth in centimeters.
        height: Height in centimeters.
        finish: Finish facet value.
        material: Material facet value, empty string when unspecified.
        image_url: Primary image reference.
        image_urls: Additional image references, in display order.
        description: Free-text description.
        status: One of active, inactive, draft.
        created_at: Creation timestamp.
        updated_at: Last update timestamp.
    """

    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    code: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    category: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    length: Mapped[float] = mapped_column(Float, nullable=False)
    breadth: Mapped[float] = mapped_column(Float, nullable=False)
    height: Mapped[float] = mapped_column(Float, nullable=False)
    finish: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    material: Mapped[str] = mapped_column(
        String(255), nullable=False, default="", server_default="", index=True
    )
    image_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    image_urls: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ProductStatus.ACTIVE.value
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<Product(id={self.id}, code={self.code}, name={self.name[:30]})>"

    @property
    def dimensions_label(self) -> str:
        """Get dimensions as "L×B×H" with trailing zeros dropped."""
        return f"{self.length:g}×{self.breadth:g}×{self.height:g}"
