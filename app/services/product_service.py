# app/services/product_service.py
import logging
import uuid
from typing import Iterable

from sqlmodel import Session

from app.core.errors import NotFoundError, TransientStoreError, ValidationError
from app.core.storage_utils import delete_image, generate_filename, upload_image
from app.database import engine
from app.models.product import MAX_IMAGES, MIN_IMAGES, Product
from app.models.user import User
from app.repositories.product_repo import ProductRepository
from app.schemas.product import ProductCreate, ProductUpdate

logger = logging.getLogger(__name__)


# --- Image config ---

MAX_IMAGE_BYTES = 5 * 1024 * 1024  # 5MB per image

ALLOWED_IMAGE_CONTENT_TYPES: dict[str, str] = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}

# Columns an update may explicitly reset to null.
NULLABLE_FIELDS = {"price", "original_price", "discount"}


class ProductService:
    """
    Business logic for the product catalog.

    Responsibilities:
      - validation beyond pydantic (image count, image type/size)
      - image upload/delete orchestration with Supabase Storage
      - soft delete and best-effort view counting
      - admin-only operations (enforced at router via require_admin)
    """

    def __init__(self, repo: ProductRepository):
        self.repo = repo

    # ----- Helpers -----

    @staticmethod
    def _validate_and_get_ext(content_type: str, file_bytes: bytes) -> str:
        if content_type not in ALLOWED_IMAGE_CONTENT_TYPES:
            raise ValidationError("Unsupported image type. Allowed: JPEG, PNG, WEBP.")

        if len(file_bytes) > MAX_IMAGE_BYTES:
            raise ValidationError("Image too large (max 5MB).")

        return ALLOWED_IMAGE_CONTENT_TYPES[content_type]

    @staticmethod
    def _check_image_count(count: int) -> None:
        if count < MIN_IMAGES:
            raise ValidationError(f"Minimum {MIN_IMAGES} product images are required")
        if count > MAX_IMAGES:
            raise ValidationError(f"Maximum {MAX_IMAGES} product images are allowed")

    def _upload_images(
        self,
        product_id: uuid.UUID,
        files: list[tuple[str, bytes]],
    ) -> tuple[list[str], list[str]]:
        """
        Upload images to products/<product_id>/<uuid>.<ext>.

        Returns parallel (urls, public_ids). If one upload fails, the ones
        already stored are released and TransientStoreError is raised.
        """
        exts = [self._validate_and_get_ext(ct, data) for ct, data in files]

        urls: list[str] = []
        public_ids: list[str] = []
        for (content_type, file_bytes), ext in zip(files, exts):
            path = f"products/{product_id}/{generate_filename(ext)}"
            try:
                url, public_id = upload_image(path, file_bytes, content_type)
            except Exception as exc:
                logger.error("Image upload failed for product %s: %s", product_id, exc)
                self._release_images(public_ids)
                raise TransientStoreError("Image upload failed, please retry") from exc
            urls.append(url)
            public_ids.append(public_id)

        return urls, public_ids

    @staticmethod
    def _release_images(public_ids: Iterable[str]) -> None:
        """
        Best-effort storage cleanup. The product row is the source of truth;
        a failed delete is logged and otherwise ignored.
        """
        for public_id in public_ids:
            try:
                delete_image(public_id)
            except Exception as exc:
                logger.warning("Could not delete image %s: %s", public_id, exc)

    # ----- Reads -----

    def list_products(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 12,
        category: str | None = None,
        condition: str | None = None,
        product_type: str | None = None,
        availability: str | None = None,
        sort: str = "newest",
    ) -> list[Product]:
        return self.repo.list(
            session,
            skip=skip,
            limit=limit,
            only_active=True,
            category=category,
            condition=condition,
            product_type=product_type,
            availability=availability,
            sort=sort,
        )

    def get_product(self, session: Session, product_id: uuid.UUID) -> Product:
        """Any product, active or not (admin paths)."""
        product = self.repo.get_by_id(session, product_id)
        if not product:
            raise NotFoundError("Product not found")
        return product

    def get_public_product(self, session: Session, product_id: uuid.UUID) -> Product:
        """
        Storefront read: soft-deleted products are reported as unavailable.
        The view counter is bumped separately via `record_view`.
        """
        product = self.get_product(session, product_id)
        if not product.is_active:
            raise NotFoundError("Product not available")
        return product

    def increment_views(self, session: Session, product_id: uuid.UUID) -> None:
        try:
            self.repo.increment_views(session, product_id)
        except Exception as exc:
            session.rollback()
            logger.warning("View counter update failed for %s: %s", product_id, exc)

    def record_view(self, product_id: uuid.UUID) -> None:
        """
        Background-task entry point: own session, never raises.
        """
        with Session(engine) as session:
            self.increment_views(session, product_id)

    def like_product(self, session: Session, product_id: uuid.UUID) -> Product:
        if not self.repo.increment_likes(session, product_id):
            raise NotFoundError("Product not found")
        return self.get_product(session, product_id)

    # ----- Admin writes -----

    def create_product(
        self,
        session: Session,
        current_user: User,
        payload: ProductCreate,
        files: list[tuple[str, bytes]],
    ) -> Product:
        """
        Create a product with 2-5 images.

        Args:
            files: list of (content_type, file_bytes)
        """
        self._check_image_count(len(files))

        product = Product(
            name=payload.name,
            description=payload.description,
            category=payload.category,
            condition=payload.condition,
            type=payload.type,
            availability=payload.availability,
            features=payload.features,
            price=payload.price,
            original_price=payload.original_price,
            discount=payload.discount,
            stock=payload.stock,
            specifications=payload.specifications.model_dump(exclude_none=True),
            tags=payload.tags,
            created_by=current_user.id,
        )

        urls, public_ids = self._upload_images(product.id, files)
        product.images = urls
        product.image_public_ids = public_ids

        try:
            product = self.repo.create(session, product)
        except Exception:
            session.rollback()
            self._release_images(public_ids)
            raise

        logger.info("Product %s created by %s", product.id, current_user.id)
        return product

    def update_product(
        self,
        session: Session,
        product_id: uuid.UUID,
        payload: ProductUpdate,
        files: list[tuple[str, bytes]] | None = None,
    ) -> Product:
        """
        Partial update.

        Images:
          - keep the current images listed in existing_image_public_ids
            (all of them when the field is omitted)
          - append newly uploaded files
          - total must stay within 2-5
          - dropped images are deleted from Storage after the row is saved

        Fields sent as null are cleared when nullable (price, original_price,
        discount) and rejected otherwise.
        """
        product = self.get_product(session, product_id)
        files = files or []

        keep = payload.existing_image_public_ids
        if keep is None:
            keep = list(product.image_public_ids)

        kept_pairs = [
            (url, pid)
            for url, pid in zip(product.images, product.image_public_ids)
            if pid in keep
        ]
        dropped = [pid for pid in product.image_public_ids if pid not in keep]

        data = payload.model_dump(exclude_unset=True, exclude={"existing_image_public_ids"})
        for field, value in data.items():
            if value is None and field not in NULLABLE_FIELDS:
                raise ValidationError(f"Validation failed: {field} cannot be null")

        self._check_image_count(len(kept_pairs) + len(files))

        new_urls: list[str] = []
        new_ids: list[str] = []
        if files:
            new_urls, new_ids = self._upload_images(product.id, files)

        for field, value in data.items():
            setattr(product, field, value)
        if payload.specifications is not None:
            product.specifications = payload.specifications.model_dump(exclude_none=True)

        # Reassign whole lists so the JSON columns are flagged dirty.
        product.images = [url for url, _ in kept_pairs] + new_urls
        product.image_public_ids = [pid for _, pid in kept_pairs] + new_ids

        try:
            product = self.repo.update(session, product)
        except Exception:
            session.rollback()
            self._release_images(new_ids)
            raise

        self._release_images(dropped)
        return product

    def delete_product(self, session: Session, product_id: uuid.UUID) -> None:
        """
        Soft delete: hide the product, then release its images.

        Bookings keep their own snapshot of name/image/category.
        """
        product = self.get_product(session, product_id)
        public_ids = list(product.image_public_ids)

        product.is_active = False
        self.repo.update(session, product)

        self._release_images(public_ids)
        logger.info("Product %s soft-deleted", product_id)
