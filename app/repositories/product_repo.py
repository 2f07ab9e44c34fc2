# app/repositories/product_repo.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import update
from sqlmodel import Session, select

from app.models.product import Product

SORT_OPTIONS = {
    "newest": (Product.created_at.desc(),),
    "oldest": (Product.created_at.asc(),),
    "name": (Product.name.asc(),),
    "price-low": (Product.price.asc(),),
    "price-high": (Product.price.desc(),),
    "popular": (Product.views.desc(), Product.likes.desc()),
}


class ProductRepository:
    """
    Data access layer for Product.

    - Pure DB operations (CRUD + queries).
    - No FastAPI, no business logic.
    """

    def get_by_id(self, session: Session, product_id: uuid.UUID) -> Product | None:
        return session.get(Product, product_id)

    def list(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 12,
        only_active: bool = True,
        category: str | None = None,
        condition: str | None = None,
        product_type: str | None = None,
        availability: str | None = None,
        sort: str = "newest",
    ) -> list[Product]:
        stmt = select(Product)
        if only_active:
            stmt = stmt.where(Product.is_active == True)  # noqa: E712
        if category:
            stmt = stmt.where(Product.category == category)
        if condition:
            stmt = stmt.where(Product.condition == condition)
        if product_type:
            stmt = stmt.where(Product.type == product_type)
        if availability:
            stmt = stmt.where(Product.availability == availability)

        order_by = SORT_OPTIONS.get(sort, SORT_OPTIONS["newest"])
        stmt = stmt.order_by(*order_by).offset(skip).limit(limit)
        return session.exec(stmt).all()

    def create(self, session: Session, product: Product) -> Product:
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    def update(self, session: Session, product: Product) -> Product:
        product.updated_at = datetime.now(timezone.utc)
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    # ----- Counters -----
    # Single UPDATE statements so concurrent requests never lose increments.

    def increment_views(self, session: Session, product_id: uuid.UUID) -> None:
        stmt = (
            update(Product)
            .where(Product.id == product_id)
            .values(views=Product.views + 1)
        )
        session.exec(stmt)
        session.commit()

    def increment_likes(self, session: Session, product_id: uuid.UUID) -> bool:
        stmt = (
            update(Product)
            .where(Product.id == product_id, Product.is_active == True)  # noqa: E712
            .values(likes=Product.likes + 1)
        )
        result = session.exec(stmt)
        session.commit()
        return result.rowcount == 1
