# media_upload/api/routes/files.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from media_upload.api.deps import get_storage, require_api_key
from media_upload.api.schemas.uploads import MessageResponse
from media_upload.config import constants as C
from media_upload.core.file_utils.storage import LocalStorage

logger = logging.getLogger(__name__)

router = APIRouter(tags=["files"], dependencies=[Depends(require_api_key)])


# `path` convertor: names carrying encoded slashes must still reach LocalStorage.resolve.
@router.post("/delete/{file:path}", response_model=MessageResponse)
async def delete_file(file: str, storage: LocalStorage = Depends(get_storage)):
    """
    Remove a stored file by name.

    400 if the name points outside the storage directory, 500 on any
    filesystem failure (including a file that does not exist).
    """
    await storage.delete(file)
    return MessageResponse(message=C.MSG_DELETE_OK)
