# app/models/product.py
import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import Column, JSON
from sqlmodel import SQLModel, Field

CATEGORIES: list[str] = [
    "Laptops",
    "Desktops",
    "Security",
    "Accessories",
    "Audio",
    "Networking",
    "Components",
    "Monitors",
    "Storage",
    "Gaming",
]

AVAILABLE = "Available"

MIN_IMAGES = 2
MAX_IMAGES = 5


class Product(SQLModel, table=True):
    """
    Catalog entry for the tech store.

    Images:
      - `images` holds public URLs, `image_public_ids` the storage handles
        used to delete them. Both lists are parallel (same length, same order)
        and hold between MIN_IMAGES and MAX_IMAGES entries.

    Soft delete:
      - `is_active=False` hides the product from public reads but keeps the
        row, so bookings referencing it stay valid.
    """

    __tablename__ = "products"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    name: str = Field(
        max_length=100,
        index=True,
        description="Display name of the product",
    )

    description: str = Field(
        max_length=1000,
        description="Long description",
    )

    category: str = Field(index=True)
    condition: str = Field(index=True)
    type: str = Field(index=True, description="Second Hand | New/Refurbished | ...")

    availability: str = Field(
        default=AVAILABLE,
        index=True,
        description="Available | Out of Stock | Discontinued",
    )

    features: list[str] = Field(default_factory=list, sa_column=Column(JSON))

    images: list[str] = Field(default_factory=list, sa_column=Column(JSON))
    image_public_ids: list[str] = Field(default_factory=list, sa_column=Column(JSON))

    price: float | None = Field(default=None, ge=0)
    original_price: float | None = Field(default=None, ge=0)
    discount: float | None = Field(default=None, ge=0, le=100)

    stock: int = Field(default=1, ge=0)

    # brand, model, color, weight, dimensions, warranty, year
    specifications: dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))

    tags: list[str] = Field(default_factory=list, sa_column=Column(JSON))

    is_active: bool = Field(
        default=True,
        index=True,
        description="Whether this product is visible on the storefront",
    )

    views: int = Field(default=0, ge=0)
    likes: int = Field(default=0, ge=0)

    created_by: uuid.UUID | None = Field(
        default=None,
        foreign_key="users.id",
        index=True,
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Last modification timestamp (UTC)",
    )

    @property
    def is_bookable(self) -> bool:
        """Only active, Available products accept bookings."""
        return self.is_active and self.availability == AVAILABLE

    @property
    def primary_image(self) -> str:
        return self.images[0] if self.images else ""
