# app/routers/products.py
import uuid

from fastapi import (
    APIRouter,
    BackgroundTasks,
    Depends,
    File,
    Form,
    Query,
    UploadFile,
    status,
)
from pydantic import ValidationError as PydanticValidationError
from sqlmodel import Session

from app.core.auth import require_admin
from app.core.errors import ValidationError
from app.database import get_session
from app.models.product import CATEGORIES
from app.models.user import User
from app.repositories.product_repo import ProductRepository
from app.schemas.product import (
    Availability,
    Category,
    Condition,
    ProductCreate,
    ProductRead,
    ProductType,
    ProductUpdate,
    SortOption,
)
from app.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["Products"])

repo = ProductRepository()
service = ProductService(repo)


def _read_files(files: list[UploadFile] | None) -> list[tuple[str, bytes]]:
    payload: list[tuple[str, bytes]] = []
    for f in files or []:
        if not f.content_type:
            raise ValidationError("Missing content-type for one of the uploaded files")
        payload.append((f.content_type, f.file.read()))
    return payload


def _parse(model, raw: str):
    try:
        return model.model_validate_json(raw)
    except PydanticValidationError as exc:
        errors = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        raise ValidationError(f"Validation failed: {errors}")


# -------- Public endpoints --------


@router.get("", response_model=list[ProductRead])
def list_products(
    session: Session = Depends(get_session),
    category: Category | None = None,
    condition: Condition | None = None,
    type: ProductType | None = None,
    availability: Availability | None = None,
    sort: SortOption = "newest",
    skip: int = Query(0, ge=0),
    limit: int = Query(12, ge=1, le=50),
):
    """
    List active products with optional filters and sorting.
    """
    return service.list_products(
        session,
        skip=skip,
        limit=limit,
        category=category,
        condition=condition,
        product_type=type,
        availability=availability,
        sort=sort,
    )


@router.get("/categories", response_model=list[str])
def list_categories():
    """All product categories."""
    return CATEGORIES


@router.get("/{product_id}", response_model=ProductRead)
def get_product(
    product_id: uuid.UUID,
    background_tasks: BackgroundTasks,
    session: Session = Depends(get_session),
):
    """
    Get a single active product by id.

    The view counter is incremented after the response is sent; a failed
    increment never affects this read.
    """
    product = service.get_public_product(session, product_id)
    background_tasks.add_task(service.record_view, product.id)
    return product


@router.post("/{product_id}/like", response_model=ProductRead)
def like_product(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """Increment the like counter of an active product."""
    return service.like_product(session, product_id)


# -------- Admin endpoints --------


@router.post(
    "",
    response_model=ProductRead,
    status_code=status.HTTP_201_CREATED,
)
def create_product(
    data: str = Form(..., description="ProductCreate as JSON"),
    files: list[UploadFile] = File(..., description="2 to 5 product images"),
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    """
    Create a new product with 2-5 images (admin only).

    Multipart form:
      - data: JSON object with product fields
      - files: image files (JPEG, PNG, WEBP)
    """
    payload = _parse(ProductCreate, data)
    return service.create_product(session, admin, payload, _read_files(files))


@router.put(
    "/{product_id}",
    response_model=ProductRead,
    dependencies=[Depends(require_admin)],
)
def update_product(
    product_id: uuid.UUID,
    data: str = Form("{}", description="ProductUpdate as JSON"),
    files: list[UploadFile] | None = File(None),
    session: Session = Depends(get_session),
):
    """
    Update a product (admin only).

    `existing_image_public_ids` in `data` selects which current images to
    keep; new files are appended. The result must have 2-5 images.
    """
    payload = _parse(ProductUpdate, data)
    return service.update_product(session, product_id, payload, _read_files(files))


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_admin)],
)
def delete_product(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
) -> dict[str, str]:
    """
    Soft-delete a product and release its images (admin only).
    """
    service.delete_product(session, product_id)
    return {"message": "Product deleted successfully"}
