# core/storage.py

"""
Supabase Storage helpers (maintenance photos and report PDFs).
"""

import random
import string
import time
from typing import List, Optional

from fastapi import HTTPException
from supabase import Client

from core.config import settings
from core.errors import extract_supabase_error
from core.logging_config import get_logger

logger = get_logger("storage")

ALLOWED_IMAGE_TYPES = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
}


def validate_image(content_type: Optional[str], size: int, filename: str = "file"):
    """400 unless the upload is a JPEG/PNG/GIF/WebP image within PHOTO_MAX_BYTES."""
    if content_type not in ALLOWED_IMAGE_TYPES:
        raise HTTPException(
            400,
            f"Invalid file type for {filename}. Allowed: JPEG, PNG, GIF, WebP",
        )
    if size > settings.PHOTO_MAX_BYTES:
        max_mb = settings.PHOTO_MAX_BYTES // (1024 * 1024)
        raise HTTPException(400, f"{filename} is too large. Maximum size is {max_mb}MB")


def build_object_path(folder: str, filename: str, content_type: Optional[str] = None) -> str:
    """<folder>/<millis>-<random>.<ext>"""
    ext = ALLOWED_IMAGE_TYPES.get(content_type or "")
    if not ext:
        ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else "bin"
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=8))
    return f"{folder}/{int(time.time() * 1000)}-{suffix}.{ext}"


def _is_missing_bucket(error: Exception) -> bool:
    message = extract_supabase_error(error).lower()
    return "bucket not found" in message or ("bucket" in message and "not found" in message)


def ensure_bucket(
    client: Client,
    bucket: str,
    allowed_mime_types: Optional[List[str]] = None,
    file_size_limit: Optional[int] = None,
):
    options = {"public": True}
    if file_size_limit:
        options["file_size_limit"] = file_size_limit
    if allowed_mime_types:
        options["allowed_mime_types"] = allowed_mime_types

    logger.info(f"Creating storage bucket '{bucket}'")
    client.storage.create_bucket(bucket, options=options)


def upload_public_file(
    client: Client,
    bucket: str,
    path: str,
    content: bytes,
    content_type: str,
    allowed_mime_types: Optional[List[str]] = None,
    file_size_limit: Optional[int] = None,
) -> str:
    """
    Upload `content` and return its public URL.
    A missing bucket is created once and the upload retried; any other
    storage error propagates.
    """
    file_options = {"content-type": content_type, "upsert": "false"}
    storage = client.storage.from_(bucket)

    try:
        storage.upload(path, content, file_options=file_options)
    except Exception as e:
        if not _is_missing_bucket(e):
            logger.error(f"Upload to {bucket}/{path} failed: {extract_supabase_error(e)}")
            raise

        ensure_bucket(client, bucket, allowed_mime_types, file_size_limit)
        storage = client.storage.from_(bucket)
        storage.upload(path, content, file_options=file_options)

    return storage.get_public_url(path).rstrip("?")
