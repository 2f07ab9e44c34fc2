# app/core/storage_utils.py
import uuid
from functools import lru_cache

from supabase import Client, create_client

from app.core.config import get_settings

settings = get_settings()


@lru_cache
def storage_client() -> Client:
    """
    Supabase client authenticated with the service role key.

    Only the backend holds this key; it is used for product image
    uploads and deletes in Storage.

    Raises:
        RuntimeError: if SUPABASE_SERVICE_ROLE_KEY is not set.
    """
    if not settings.SUPABASE_SERVICE_ROLE_KEY:
        raise RuntimeError("Missing SUPABASE_SERVICE_ROLE_KEY in .env")
    return create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)


def _bucket():
    # Resolved per call: importing this module never needs the service role key.
    return storage_client().storage.from_(settings.STORAGE_BUCKET)


def upload_image(path: str, file_bytes: bytes, content_type: str) -> tuple[str, str]:
    """
    Upload an image to the product bucket.

    Args:
        path: Full object path inside the bucket.
              Example: "products/<product_id>/<uuid>.png"
        file_bytes: File content in bytes.
        content_type: MIME type stored with the object.

    Returns:
        (public_url, public_id). The public_id is the object path and is
        what `delete_image` expects.
    """
    bucket = _bucket()
    bucket.upload(path, file_bytes, {"content-type": content_type, "upsert": "true"})
    return bucket.get_public_url(path), path


def delete_image(public_id: str) -> None:
    """
    Delete an image by its public_id (object path relative to bucket).

    Removing a path that no longer exists is a no-op on Supabase's side,
    so calling this twice for the same id is safe.
    """
    _bucket().remove([public_id])


def generate_filename(ext: str) -> str:
    """Random object name like <uuid4>.png for a new upload."""
    return f"{uuid.uuid4()}.{ext}"
