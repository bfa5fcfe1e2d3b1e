"""
Local filesystem storage for uploaded files.

All stored files live flat under a single directory and are addressed only by
name. Public paths are built from the configured URL prefix the directory is
mounted at.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import aiofiles.os

from media_upload.shared.exceptions import StorageError, ValidationError
from media_upload.config import constants as C

logger = logging.getLogger(__name__)


class LocalStorage:
    def __init__(self, root: str | os.PathLike, public_prefix: str = "/public/uploads") -> None:
        self.root = Path(root).resolve()
        self.public_prefix = "/" + public_prefix.strip("/")

    def ensure_dir(self) -> Path:
        """Create the storage directory if absent and check it is writable."""
        self.root.mkdir(parents=True, exist_ok=True)
        if not os.access(self.root, os.W_OK):
            raise RuntimeError(f"Storage directory is not writable: {self.root}")
        return self.root

    def resolve(self, name: str) -> Path:
        """
        Map a stored file name to its absolute path.

        Raises ValidationError if the name resolves outside the storage
        directory or to the directory itself.
        """
        if not name or "\x00" in name:
            raise ValidationError(C.MSG_INVALID_NAME, details={"name": name})
        candidate = (self.root / name).resolve()
        if candidate == self.root or candidate.parent != self.root:
            logger.warning("[Storage] Rejected name outside storage: %r", name)
            raise ValidationError(C.MSG_INVALID_NAME, details={"name": name})
        return candidate

    def public_path(self, name: str) -> str:
        return f"{self.public_prefix}/{name}"

    async def delete(self, name: str) -> None:
        path = self.resolve(name)
        try:
            await aiofiles.os.remove(path)
        except OSError as e:
            raise StorageError(C.MSG_DELETE_FAILED, details={"name": name}) from e
        logger.info("[Storage] Deleted %s", path)

    def discard(self, path: str | os.PathLike) -> None:
        """Remove a file written by this process, ignoring files already gone."""
        try:
            Path(path).unlink(missing_ok=True)
        except OSError as e:
            logger.warning("[Storage] Could not discard %s: %s", path, e)


__all__ = ["LocalStorage"]
