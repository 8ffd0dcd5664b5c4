"""
Site Content Store - Content Store Service

Thin service layer over the ``content`` table.  Keys and values are taken
as-is: any string is a valid key and any string (including the empty
string) is a valid value.

Database errors are not caught here; they propagate to the route handlers,
which turn them into a generic server error.
"""

from typing import Dict

from loguru import logger

from sitecontent.database import (
    get_all_content,
    upsert_content,
    upsert_content_bulk,
)


async def get_all() -> Dict[str, str]:
    """Return every stored ``key -> value`` pair (empty dict when nothing is stored)."""
    return await get_all_content()


async def set_content(key: str, value: str) -> bool:
    """Upsert a single content value. Returns True once the write is committed."""
    await upsert_content(key, value)
    return True


async def set_bulk(entries: Dict[str, str]) -> bool:
    """
    Upsert many content values at once.

    The write is all-or-nothing: a failure part-way through leaves none of
    the entries written and the exception propagates to the caller.
    """
    written = await upsert_content_bulk(entries)
    logger.debug("📦 Bulk write finished: {} entries", written)
    return True
