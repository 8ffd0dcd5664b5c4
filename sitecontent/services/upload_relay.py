"""
Site Content Store - Media Upload Relay

Forwards an uploaded image to Cloudinary and records the returned URL as the
content value for the given key.  The content row is only touched after the
media host has accepted the file, so a failed upload leaves the stored value
for that key unchanged.
"""

from typing import Optional

from loguru import logger

from sitecontent.media import is_allowed_image, upload_image
from sitecontent.services.content_store import set_content


async def upload(
    content: bytes,
    filename: str,
    key: str,
    content_type: str = "application/octet-stream",
) -> Optional[str]:
    """
    Upload *content* to the media host and store its URL under *key*.

    Returns the image URL, or None if the file was rejected or the upload
    failed.  Errors writing the URL to the database propagate.
    """
    if not content:
        logger.warning("⚠️ Refusing to upload empty file for key '{}'", key)
        return None

    if not is_allowed_image(filename):
        logger.warning("⚠️ Unsupported image type for key '{}': {}", key, filename)
        return None

    url = await upload_image(content, filename, content_type)
    if not url:
        logger.error("❌ Image upload failed for key '{}'", key)
        return None

    await set_content(key, url)
    logger.success("🖼️ Image for '{}' stored at {}", key, url)
    return url
