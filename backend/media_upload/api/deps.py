"""
Request-scoped dependencies.

Settings, storage and the compressor are built once in create_app() and hung
on app.state; handlers reach them through these dependencies instead of
module-level globals.
"""

from __future__ import annotations

import logging
import secrets
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import APIKeyHeader

from media_upload.config import constants as C
from media_upload.config.settings import Settings
from media_upload.core.file_utils.storage import LocalStorage
from media_upload.core.image_utils.compression import ImageCompressor
from media_upload.shared.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

api_key_header = APIKeyHeader(name=C.API_KEY_HEADER, auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_storage(request: Request) -> LocalStorage:
    return request.app.state.storage


def get_compressor(request: Request) -> ImageCompressor:
    return request.app.state.compressor


def require_api_key(
    request: Request,
    api_key: Optional[str] = Depends(api_key_header),
    settings: Settings = Depends(get_settings),
) -> None:
    """Reject the request with 401 unless x-api-key matches the configured key exactly."""
    if api_key is None or not secrets.compare_digest(
        api_key.encode("utf-8"), settings.API_KEY.encode("utf-8")
    ):
        logger.warning(
            "[Auth] Rejected %s %s from %s",
            request.method,
            request.url.path,
            request.client.host if request.client else "unknown",
        )
        raise AuthenticationError(C.MSG_UNAUTHORIZED)


__all__ = ["get_settings", "get_storage", "get_compressor", "require_api_key"]
