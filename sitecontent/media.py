"""
Site Content Store - Cloudinary Image Client

Uploads image bytes to Cloudinary's REST upload API and returns the durable
``secure_url`` of the stored asset.

Uses httpx for the async multipart POST.  Requests are signed the way
Cloudinary expects: every upload parameter except ``file``, ``api_key`` and
``signature`` is sorted by name, joined as ``k=v`` pairs with ``&``, the API
secret is appended, and the whole string is SHA-1 hashed.
"""

from __future__ import annotations

import hashlib
import time
from pathlib import PurePosixPath
from typing import Any

import httpx
from loguru import logger

from sitecontent.config import (
    ALLOWED_IMAGE_EXTENSIONS,
    CLOUDINARY_API_KEY,
    CLOUDINARY_API_SECRET,
    CLOUDINARY_API_URL,
    CLOUDINARY_CLOUD_NAME,
    CLOUDINARY_FOLDER,
    CLOUDINARY_UPLOAD_TIMEOUT,
)

# Parameters Cloudinary leaves out of the signature
_UNSIGNED_PARAMS = {"file", "api_key", "signature", "resource_type", "cloud_name"}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def is_configured() -> bool:
    """Return True if Cloudinary credentials are configured."""
    return bool(CLOUDINARY_CLOUD_NAME and CLOUDINARY_API_KEY and CLOUDINARY_API_SECRET)


def is_allowed_image(filename: str) -> bool:
    """Return True if *filename* has one of the accepted image extensions."""
    return PurePosixPath(filename).suffix.lower() in ALLOWED_IMAGE_EXTENSIONS


def allowed_formats() -> str:
    """Cloudinary ``allowed_formats`` value, e.g. ``gif,jpeg,jpg,png,webp``."""
    return ",".join(sorted(ext.lstrip(".") for ext in ALLOWED_IMAGE_EXTENSIONS))


def sign_params(params: dict[str, Any], api_secret: str) -> str:
    """Compute the Cloudinary SHA-1 signature for a set of upload parameters."""
    to_sign = "&".join(
        f"{k}={v}"
        for k, v in sorted(params.items())
        if k not in _UNSIGNED_PARAMS and v not in (None, "")
    )
    return hashlib.sha1((to_sign + api_secret).encode("utf-8")).hexdigest()


def _upload_url() -> str:
    return f"{CLOUDINARY_API_URL.rstrip('/')}/{CLOUDINARY_CLOUD_NAME}/image/upload"


# ---------------------------------------------------------------------------
# Upload
# ---------------------------------------------------------------------------
async def upload_image(
    content: bytes,
    filename: str,
    content_type: str = "application/octet-stream",
) -> str | None:
    """
    Upload image bytes to Cloudinary.

    Returns the secure URL of the stored image, or None if the media host is
    not configured or the upload failed for any reason.
    """
    if not is_configured():
        logger.warning("⚠️ Cloudinary not configured")
        return None

    params: dict[str, Any] = {
        "allowed_formats": allowed_formats(),
        "folder": CLOUDINARY_FOLDER,
        "timestamp": int(time.time()),
    }
    data = {
        **{k: str(v) for k, v in params.items()},
        "api_key": CLOUDINARY_API_KEY,
        "signature": sign_params(params, CLOUDINARY_API_SECRET),
    }

    try:
        async with httpx.AsyncClient(timeout=CLOUDINARY_UPLOAD_TIMEOUT) as client:
            response = await client.post(
                _upload_url(),
                data=data,
                files={"file": (filename, content, content_type)},
            )
            if response.status_code != 200:
                logger.error(
                    f"❌ Cloudinary upload failed ({response.status_code}): {response.text[:200]}"
                )
                return None

            url = response.json().get("secure_url")
            if not url:
                logger.error("❌ Cloudinary response did not include a secure_url")
                return None

            logger.info(f"⬆️ Uploaded {filename} to Cloudinary ({len(content)} bytes)")
            return url
    except httpx.HTTPError as e:
        logger.error(f"❌ Cloudinary upload error for {filename}: {e}")
        return None
    except ValueError as e:
        logger.error(f"❌ Could not decode Cloudinary response for {filename}: {e}")
        return None
