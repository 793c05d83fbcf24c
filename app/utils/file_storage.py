import base64
import binascii
import os
import uuid
from pathlib import Path
from typing import Optional
from fastapi import HTTPException
from loguru import logger
from app.core.config import settings


# Define storage location (using Path for OS agnostic handling)
REQUEST_IMG_DIR = Path(settings.static_dir) / "requests"
STATIC_URL_PREFIX = "/static/requests"

IMAGE_EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/webp": "webp",
}


def save_base64_image(base64_str: Optional[str]) -> Optional[str]:
    """
    Decodes a Base64 image string, saves it to the static directory,
    and returns the public URL.
    """
    if not base64_str:
        return None

    # Frontend usually sends: "data:image/png;base64,iVBORw0KGgoAAA..."
    ext = "png"
    if "," in base64_str:
        header, encoded = base64_str.split(",", 1)
        for mime, candidate in IMAGE_EXTENSIONS.items():
            if mime in header:
                ext = candidate
                break
        else:
            raise HTTPException(
                status_code=400,
                detail="Only PNG, JPEG and WebP images are accepted."
            )
    else:
        encoded = base64_str

    try:
        data = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError):
        raise HTTPException(status_code=400, detail="Image is not valid base64.")

    os.makedirs(REQUEST_IMG_DIR, exist_ok=True)
    filename = f"{uuid.uuid4()}.{ext}"
    file_path = REQUEST_IMG_DIR / filename

    try:
        with open(file_path, "wb") as f:
            f.write(data)
    except OSError as e:
        logger.error(f"Error saving image: {e}")
        raise

    return f"{settings.public_url}{STATIC_URL_PREFIX}/{filename}"


def delete_image(image_url: Optional[str]):
    """Removes a stored request image given the URL save_base64_image returned."""
    if not image_url:
        return

    file_path = REQUEST_IMG_DIR / image_url.rsplit("/", 1)[-1]
    try:
        file_path.unlink(missing_ok=True)
    except OSError as e:
        logger.error(f"Error removing image {file_path}: {e}")
