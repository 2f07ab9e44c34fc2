# app/schemas/product.py
import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, field_validator
from sqlmodel import SQLModel, Field

Category = Literal[
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
Condition = Literal["New", "Excellent", "Very Good", "Good", "Fair"]
ProductType = Literal["Second Hand", "New/Refurbished", "Spare Parts", "Refurbished"]
Availability = Literal["Available", "Out of Stock", "Discontinued"]
SortOption = Literal["newest", "oldest", "name", "price-low", "price-high", "popular"]


class Specifications(BaseModel):
    model_config = ConfigDict(extra="forbid")

    brand: str | None = None
    model: str | None = None
    color: str | None = None
    weight: str | None = None
    dimensions: str | None = None
    warranty: str | None = None
    year: int | None = None


def _clean_features(v: list[str] | None) -> list[str] | None:
    if v is None:
        return v
    cleaned = [f.strip() for f in v if f and f.strip()]
    for f in cleaned:
        if len(f) > 100:
            raise ValueError("Feature cannot be more than 100 characters")
    return cleaned


def _clean_tags(v: list[str] | None) -> list[str] | None:
    if v is None:
        return v
    return [t.strip().lower() for t in v if t and t.strip()]


class ProductCreate(SQLModel):
    """
    Product fields for creation.

    Sent as the JSON `data` part of a multipart request together with
    2-5 image files.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=2, max_length=100)
    description: str = Field(min_length=10, max_length=1000)
    category: Category
    condition: Condition
    type: ProductType
    availability: Availability = "Available"
    features: list[str] = Field(default_factory=list)
    price: float | None = Field(default=None, ge=0)
    original_price: float | None = Field(default=None, ge=0)
    discount: float | None = Field(default=None, ge=0, le=100)
    stock: int = Field(default=1, ge=0)
    specifications: Specifications = Field(default_factory=Specifications)
    tags: list[str] = Field(default_factory=list)

    @field_validator("name", "description", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("features")
    @classmethod
    def validate_features(cls, v: list[str]) -> list[str]:
        return _clean_features(v)

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, v: list[str]) -> list[str]:
        return _clean_tags(v)


class ProductUpdate(SQLModel):
    """
    Partial update payload for products.
    All fields are optional.

    `existing_image_public_ids` lists the current images to keep; any
    current image not listed is removed. Omit it to keep all images.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, min_length=2, max_length=100)
    description: str | None = Field(default=None, min_length=10, max_length=1000)
    category: Category | None = None
    condition: Condition | None = None
    type: ProductType | None = None
    availability: Availability | None = None
    features: list[str] | None = None
    price: float | None = Field(default=None, ge=0)
    original_price: float | None = Field(default=None, ge=0)
    discount: float | None = Field(default=None, ge=0, le=100)
    stock: int | None = Field(default=None, ge=0)
    specifications: Specifications | None = None
    tags: list[str] | None = None
    existing_image_public_ids: list[str] | None = None

    @field_validator("name", "description", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("features")
    @classmethod
    def validate_features(cls, v: list[str] | None) -> list[str] | None:
        return _clean_features(v)

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, v: list[str] | None) -> list[str] | None:
        return _clean_tags(v)


class ProductRead(SQLModel):
    """
    Product representation for clients.
    """

    id: uuid.UUID
    name: str
    description: str
    category: str
    condition: str
    type: str
    availability: Availability
    features: list[str]
    images: list[str]
    image_public_ids: list[str]
    price: float | None
    original_price: float | None
    discount: float | None
    stock: int
    specifications: dict
    tags: list[str]
    is_active: bool
    views: int
    likes: int
    created_by: uuid.UUID | None
    created_at: datetime
    updated_at: datetime
