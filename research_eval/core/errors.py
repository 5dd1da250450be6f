# research_eval/core/errors.py
"""
Error taxonomy shared by the stores and the routers.

Every error carries the HTTP status and a short machine code; the handlers
registered in ``research_eval.main`` turn them into the JSON envelope
``{"success": false, "error": <code>, "message": <text>}``.
"""
from __future__ import annotations

from typing import Any, Dict, Optional


class AppError(Exception):
    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(self, message: str, extra: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.extra = extra or {}

    def to_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"success": False, "error": self.error_code, "message": self.message}
        if self.extra:
            body["extra"] = self.extra
        return body


class ValidationError(AppError):
    """Missing or malformed input."""
    status_code = 400
    error_code = "validation_error"


class AuthenticationError(AppError):
    status_code = 401
    error_code = "authentication_failed"


class NotFoundError(AppError):
    """Unknown user / project / evaluation."""
    status_code = 404
    error_code = "not_found"


class UploadRejected(AppError):
    """Attachment is not a PDF."""
    status_code = 400
    error_code = "upload_rejected"


class StorageError(AppError):
    """Any underlying persistence failure."""
    status_code = 500
    error_code = "storage_error"

    def __init__(self, operation: str, details: Optional[str] = None):
        super().__init__(
            f"Database operation failed: {operation}",
            extra={"operation": operation, "details": details},
        )
