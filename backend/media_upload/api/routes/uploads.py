# media_upload/api/routes/uploads.py
"""
Upload routes.

POST /upload   - one file in multipart field "file"
POST /uploads  - up to MAX_FILES files in multipart field "files"

Every file is validated (MIME type image/* or video/*, size cap) before any of
them is compressed, so a rejected file leaves storage untouched. A compression
failure in a multi-file request fails the whole batch; outputs already written
for that batch are removed.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import List, Optional

from fastapi import APIRouter, Depends, File, UploadFile

from media_upload.api.deps import get_compressor, get_settings, get_storage, require_api_key
from media_upload.api.schemas.uploads import MultiUploadResponse, UploadedFile, UploadResponse
from media_upload.config import constants as C
from media_upload.config.settings import Settings
from media_upload.core.file_utils.storage import LocalStorage
from media_upload.core.image_utils.compression import ImageCompressor
from media_upload.shared.exceptions import ProcessingError, ValidationError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["uploads"], dependencies=[Depends(require_api_key)])


async def read_validated(file: UploadFile, max_bytes: int) -> bytes:
    """Read an upload into memory, enforcing the MIME allow-list and size cap."""
    mime = (file.content_type or "").lower()
    if not mime.startswith(C.ALLOWED_MIME_PREFIXES):
        raise ValidationError(C.MSG_INVALID_TYPE, details={"filename": file.filename, "mime": mime})

    chunks: List[bytes] = []
    total = 0
    while True:
        block = await file.read(C.UPLOAD_CHUNK_SIZE)
        if not block:
            break
        total += len(block)
        if total > max_bytes:
            raise ValidationError(
                C.MSG_TOO_LARGE,
                details={"filename": file.filename, "max_bytes": max_bytes},
            )
        chunks.append(block)
    return b"".join(chunks)


@router.post("/upload", response_model=UploadResponse)
async def upload_file(
    file: Optional[UploadFile] = File(None),
    settings: Settings = Depends(get_settings),
    storage: LocalStorage = Depends(get_storage),
    compressor: ImageCompressor = Depends(get_compressor),
):
    """Upload a single file and store its compressed version."""
    if file is None or not file.filename:
        raise ValidationError(C.MSG_NO_FILE)

    buffer = await read_validated(file, settings.MAX_FILE_SIZE)

    try:
        output_path = await compressor.compress_async(buffer, file.filename, file.content_type)
    except Exception as e:  # noqa: BLE001
        raise ProcessingError(C.MSG_UPLOAD_FAILED, details={"filename": file.filename}) from e

    return UploadResponse(
        message=C.MSG_UPLOAD_OK,
        fileName=output_path.name,
        filePath=storage.public_path(output_path.name),
    )


@router.post("/uploads", response_model=MultiUploadResponse)
async def upload_files(
    files: Optional[List[UploadFile]] = File(None),
    settings: Settings = Depends(get_settings),
    storage: LocalStorage = Depends(get_storage),
    compressor: ImageCompressor = Depends(get_compressor),
):
    """Upload several files; they are compressed in parallel and succeed or fail together."""
    files = [f for f in (files or []) if f.filename]
    if not files:
        raise ValidationError(C.MSG_NO_FILES)
    if len(files) > settings.MAX_FILES:
        raise ValidationError(
            C.MSG_TOO_MANY_FILES,
            details={"max_files": settings.MAX_FILES, "got": len(files)},
        )

    buffers = [await read_validated(f, settings.MAX_FILE_SIZE) for f in files]

    results = await asyncio.gather(
        *(compressor.compress_async(buf, f.filename, f.content_type) for buf, f in zip(buffers, files)),
        return_exceptions=True,
    )

    failures = [r for r in results if isinstance(r, BaseException)]
    if failures:
        for r in results:
            if isinstance(r, Path):
                storage.discard(r)
        raise ProcessingError(
            C.MSG_UPLOADS_FAILED,
            details={"failed": len(failures), "total": len(files)},
        ) from failures[0]

    return MultiUploadResponse(
        message=C.MSG_UPLOADS_OK,
        files=[UploadedFile(filename=p.name, path=storage.public_path(p.name)) for p in results],
    )
