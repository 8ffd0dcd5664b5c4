"""
Site Content Store - JSON API Routes

Provides the REST endpoints used by the site's pages:
- Content read (all key/value pairs in one object)
- Content write (single key, and bulk)
- Image upload (relayed to Cloudinary, URL stored as content)
- Health check

Every failure is reported the same way: HTTP 500 with a short generic
``detail`` message.  The underlying cause is only logged.
"""

import time
from typing import Any, Dict, Optional

from fastapi import APIRouter, File, Form, HTTPException, UploadFile
from loguru import logger
from pydantic import BaseModel, field_validator

from sitecontent.config import APP_VERSION, MAX_UPLOAD_SIZE_BYTES, MAX_UPLOAD_SIZE_MB
from sitecontent.database import count_content
from sitecontent.media import is_configured
from sitecontent.services import content_store, upload_relay

router = APIRouter(prefix="/api", tags=["API"])

# Track startup time for health check
_START_TIME = time.time()

UPLOAD_CHUNK_SIZE = 65536


# ---------------------------------------------------------------------------
# Pydantic models
# ---------------------------------------------------------------------------
def _scalar_to_text(value: Any) -> Any:
    """Render JSON scalars the way the site's pages display them."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    return value


class ContentUpdate(BaseModel):
    key: str
    value: str

    @field_validator("value", mode="before")
    @classmethod
    def _coerce_value(cls, value: Any) -> Any:
        return _scalar_to_text(value)


class BulkContentUpdate(BaseModel):
    data: Dict[str, str]

    @field_validator("data", mode="before")
    @classmethod
    def _coerce_values(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: _scalar_to_text(v) for k, v in data.items()}
        return data


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------
@router.get("/health")
async def health_check():
    """Health check endpoint for the service."""
    uptime = round(time.time() - _START_TIME, 2)

    try:
        total = await count_content()
        db_ok = True
    except Exception as e:
        logger.warning("⚠️ Health check could not query database: {}", e)
        total = None
        db_ok = False

    return {
        "status": "ok" if db_ok else "degraded",
        "database": "ok" if db_ok else "unavailable",
        "media_configured": is_configured(),
        "content_items": total,
        "uptime_seconds": uptime,
        "version": APP_VERSION,
    }


# ---------------------------------------------------------------------------
# Content
# ---------------------------------------------------------------------------
@router.get("/content")
async def api_get_content():
    """Return every stored content value as a single ``{key: value}`` object."""
    try:
        return await content_store.get_all()
    except Exception as e:
        logger.exception(f"❌ Failed to load content: {e}")
        raise HTTPException(status_code=500, detail="Failed to load content")


@router.post("/content")
async def api_save_content(body: ContentUpdate):
    """Create or overwrite the value stored under ``body.key``."""
    try:
        await content_store.set_content(body.key, body.value)
    except Exception as e:
        logger.exception(f"❌ Failed to save content '{body.key}': {e}")
        raise HTTPException(status_code=500, detail="Failed to save content")

    return {"success": True, "message": f"{body.key} saved!"}


@router.post("/content/bulk")
async def api_save_content_bulk(body: BulkContentUpdate):
    """Create or overwrite many content values in one all-or-nothing write."""
    try:
        await content_store.set_bulk(body.data)
    except Exception as e:
        logger.exception(f"❌ Failed to save bulk content ({len(body.data)} keys): {e}")
        raise HTTPException(status_code=500, detail="Failed to save content")

    return {"success": True, "message": "All content saved!"}


# ---------------------------------------------------------------------------
# Image upload (relayed to Cloudinary)
# ---------------------------------------------------------------------------
@router.post("/upload")
async def api_upload_image(
    image: Optional[UploadFile] = File(None),
    key: Optional[str] = Form(None),
):
    """
    Upload an image for a content key.

    The file is forwarded to Cloudinary; on success the returned URL becomes
    the stored value for *key* and is echoed back as ``imageUrl``.
    """
    try:
        if image is None or key is None:
            logger.warning("⚠️ Upload request missing the image file or the content key")
            raise HTTPException(status_code=500, detail="Image upload failed")

        filename = image.filename or ""
        chunks = []
        total_size = 0
        while chunk := await image.read(UPLOAD_CHUNK_SIZE):
            total_size += len(chunk)
            if total_size > MAX_UPLOAD_SIZE_BYTES:
                logger.warning(
                    f"⚠️ Upload for '{key}' exceeds {MAX_UPLOAD_SIZE_MB}MB limit: {filename}"
                )
                raise HTTPException(status_code=500, detail="Image upload failed")
            chunks.append(chunk)

        logger.info(f"📤 Upload received: {filename} ({total_size} bytes) -> {key}")

        image_url = await upload_relay.upload(
            b"".join(chunks),
            filename,
            key,
            content_type=image.content_type or "application/octet-stream",
        )
        if not image_url:
            raise HTTPException(status_code=500, detail="Image upload failed")

        return {"success": True, "imageUrl": image_url}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"❌ Image upload error for '{key}': {e}")
        raise HTTPException(status_code=500, detail="Image upload failed")
