# media_upload/api/schemas/uploads.py
"""
Response schemas for the upload / delete endpoints.

Field names follow the public JSON contract (camelCase for the single-file
response, lowercase for the multi-file list).
"""

from __future__ import annotations

from typing import List
from pydantic import BaseModel, Field


class MessageResponse(BaseModel):
    message: str


class UploadResponse(MessageResponse):
    fileName: str = Field(..., description="Stored file name ({unix_ms}-{original_name})")
    filePath: str = Field(..., description="Public path the file is served from")


class UploadedFile(BaseModel):
    filename: str
    path: str


class MultiUploadResponse(MessageResponse):
    files: List[UploadedFile] = Field(default_factory=list)


__all__ = [
    "MessageResponse",
    "UploadResponse",
    "UploadedFile",
    "MultiUploadResponse",
]
