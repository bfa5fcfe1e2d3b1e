"""
Unused-file reaper.

One sweep lists the storage directory and deletes every entry whose name is
not in the in-use set. Per-entry work (stat + delete) is dispatched as
concurrent tasks over aiofiles.os; a failure on one entry is logged and does
not affect the others. A failure to list the directory aborts the sweep.

Nothing is returned: outcomes are only visible in the logs.
"""

from __future__ import annotations

import asyncio
import logging
import os
from typing import AbstractSet

import aiofiles.os

logger = logging.getLogger(__name__)


async def _reap_entry(storage_dir: str, name: str, in_use: AbstractSet[str]) -> None:
    path = os.path.join(storage_dir, name)
    try:
        await aiofiles.os.stat(path)
    except OSError as e:
        logger.error("[Reaper] Error retrieving file stats for %s: %s", path, e)
        return

    if name in in_use:
        return

    try:
        await aiofiles.os.remove(path)
    except OSError as e:
        logger.error("[Reaper] Error deleting file %s: %s", path, e)
        return
    logger.info("[Reaper] Deleted unused file: %s", path)


async def purge(storage_dir: str | os.PathLike, in_use: AbstractSet[str]) -> None:
    """Delete every entry directly under storage_dir whose name is not in in_use."""
    storage_dir = os.fspath(storage_dir)
    try:
        names = await aiofiles.os.listdir(storage_dir)
    except OSError as e:
        logger.error("[Reaper] Error reading directory %s: %s", storage_dir, e)
        return

    logger.debug("[Reaper] Sweeping %d entries in %s (%d in use)", len(names), storage_dir, len(in_use))
    await asyncio.gather(*(_reap_entry(storage_dir, name, in_use) for name in names))


__all__ = ["purge"]
