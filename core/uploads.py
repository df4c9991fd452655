import os
import secrets
import time
from typing import List, Optional

from fastapi import UploadFile

from core.config import settings
from core.errors import ValidationError

ALLOWED_EXTENSIONS = {".jpeg", ".jpg", ".png", ".gif"}
ALLOWED_MIME_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/gif"}

PROPERTY_IMAGE_DIR = "properties"


def property_image_dir() -> str:
    path = os.path.join(settings.UPLOAD_DIR, PROPERTY_IMAGE_DIR)
    os.makedirs(path, exist_ok=True)
    return path


async def save_property_images(files: Optional[List[UploadFile]]) -> List[str]:
    """Store uploaded images on disk and return their public ``/uploads/...`` paths."""
    files = [f for f in (files or []) if f is not None and f.filename]
    if len(files) > settings.MAX_UPLOAD_FILES:
        raise ValidationError(f"At most {settings.MAX_UPLOAD_FILES} images can be uploaded")

    # Validate everything before writing anything
    payloads = []
    for image in files:
        ext = os.path.splitext(image.filename)[1].lower()
        if ext not in ALLOWED_EXTENSIONS or (image.content_type or "").lower() not in ALLOWED_MIME_TYPES:
            raise ValidationError("Only image files are allowed")
        content = await image.read()
        if len(content) > settings.MAX_UPLOAD_BYTES:
            raise ValidationError(f"Image {image.filename} exceeds the upload size limit")
        payloads.append((ext, content))

    target_dir = property_image_dir()
    paths = []
    for ext, content in payloads:
        filename = f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{ext}"
        with open(os.path.join(target_dir, filename), "wb") as f:
            f.write(content)
        paths.append(f"/uploads/{PROPERTY_IMAGE_DIR}/{filename}")
    return paths


def discard_property_images(paths: List[str]) -> None:
    """Remove images saved by ``save_property_images`` when the listing they belong to is rejected."""
    target_dir = os.path.join(settings.UPLOAD_DIR, PROPERTY_IMAGE_DIR)
    for path in paths:
        filename = os.path.basename(path)
        try:
            os.remove(os.path.join(target_dir, filename))
        except FileNotFoundError:
            continue
