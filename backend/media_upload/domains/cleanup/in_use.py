"""
In-use file providers.

The reaper never decides on its own which files are still referenced. Before
each sweep the scheduler asks a provider, and a provider failure cancels the
sweep instead of falling back to an empty set.

Providers:
    StaticInUseProvider    - fixed set of names.
    ManifestInUseProvider  - JSON array or one-name-per-line text file.
    HttpInUseProvider      - GET from an inventory service (JSON array or {"files": [...]}).

build_in_use_provider(settings) picks one from configuration (URL first, then
manifest) and returns None when neither is configured.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Optional, Protocol, Set

import aiofiles
import httpx

from media_upload.config import constants as C
from media_upload.config.settings import Settings

logger = logging.getLogger(__name__)


class InUseProvider(Protocol):
    async def fetch(self) -> Set[str]:
        ...


def _names_from_payload(payload: Any) -> Set[str]:
    if isinstance(payload, dict):
        payload = payload.get("files")
    if not isinstance(payload, list) or not all(isinstance(n, str) for n in payload):
        raise ValueError("expected a list of file names")
    return set(payload)


class StaticInUseProvider:
    def __init__(self, names: Iterable[str] = ()) -> None:
        self._names = frozenset(names)

    async def fetch(self) -> Set[str]:
        return set(self._names)


class ManifestInUseProvider:
    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    async def fetch(self) -> Set[str]:
        async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
            text = await f.read()

        stripped = text.strip()
        if stripped.startswith(("[", "{")):
            return _names_from_payload(json.loads(stripped))
        return {line.strip() for line in stripped.splitlines() if line.strip()}


class HttpInUseProvider:
    def __init__(
        self,
        url: str,
        api_key: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.url = url
        self.api_key = api_key
        self.timeout = timeout
        self.transport = transport

    async def fetch(self) -> Set[str]:
        headers = {C.API_KEY_HEADER: self.api_key} if self.api_key else {}
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            resp = await client.get(self.url, headers=headers)
            resp.raise_for_status()
            return _names_from_payload(resp.json())


def build_in_use_provider(settings: Settings) -> Optional[InUseProvider]:
    if settings.IN_USE_URL:
        logger.info("[InUse] Using inventory endpoint %s", settings.IN_USE_URL)
        return HttpInUseProvider(settings.IN_USE_URL, api_key=settings.IN_USE_API_KEY)
    if settings.IN_USE_MANIFEST:
        logger.info("[InUse] Using manifest file %s", settings.IN_USE_MANIFEST)
        return ManifestInUseProvider(settings.IN_USE_MANIFEST)
    logger.warning("[InUse] No in-use provider configured; scheduled sweeps will be skipped")
    return None


__all__ = [
    "InUseProvider",
    "StaticInUseProvider",
    "ManifestInUseProvider",
    "HttpInUseProvider",
    "build_in_use_provider",
]
