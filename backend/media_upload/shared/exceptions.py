"""
Application-wide custom exception hierarchy.

Purpose:
    Provide typed errors across the upload service (validation, access control,
    storage, image processing) and unify HTTP/JSON response formatting in a
    single place.

Design:
    - BaseAppError: Root custom exception (never raised directly).
    - ValidationError: Bad or missing upload, wrong type, oversize, bad name. -> 400
    - AuthenticationError: Missing or mismatched API key. -> 401
    - StorageError: Filesystem failures on the storage directory. -> 500
    - ProcessingError: Decoding / compression failures. -> 500

Features:
    - Each exception carries: message, code (short slug), details (optional dict payload).
    - to_dict() / to_response() helpers for consistent JSON output.
    - Response body always has a top-level "message" so clients can show it as-is.

Usage Example:
    raise ValidationError("File too large", details={"max_bytes": 52428800})

    In a FastAPI exception handler:
        @app.exception_handler(BaseAppError)
        async def app_error_handler(request: Request, exc: BaseAppError):
            return exc.to_response()
"""

from __future__ import annotations

from typing import Any, Dict, Optional
from fastapi.responses import JSONResponse


class BaseAppError(Exception):
    """Root custom application exception."""

    default_code = "app_error"

    def __init__(self, message: str, *, code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}

    @property
    def status_code(self) -> int:
        return HTTP_STATUS_MAP.get(self.code, 400)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"message": self.message, "code": self.code}
        if self.details:
            body["details"] = self.details
        return body

    def to_response(self, status_code: int | None = None) -> JSONResponse:
        return JSONResponse(status_code=status_code or self.status_code, content=self.to_dict())

    def __str__(self) -> str:  # pragma: no cover - formatting
        if self.details:
            return f"{self.code}: {self.message} ({self.details})"
        return f"{self.code}: {self.message}"


class ValidationError(BaseAppError):
    """Raised when an upload or request parameter is rejected."""
    default_code = "validation_error"


class AuthenticationError(BaseAppError):
    """Raised when the API key header is missing or wrong."""
    default_code = "authentication_error"


class StorageError(BaseAppError):
    """Raised for filesystem failures inside the storage directory."""
    default_code = "storage_error"


class ProcessingError(BaseAppError):
    """Raised when an image cannot be decoded, resized or written."""
    default_code = "processing_error"


HTTP_STATUS_MAP: Dict[str, int] = {
    "app_error": 400,
    "validation_error": 400,
    "authentication_error": 401,
    "storage_error": 500,
    "processing_error": 500,
}


__all__ = [
    "BaseAppError",
    "ValidationError",
    "AuthenticationError",
    "StorageError",
    "ProcessingError",
    "HTTP_STATUS_MAP",
]
