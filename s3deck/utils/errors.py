from enum import Enum
from typing import Any, Dict, Optional

from fastapi import status


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    UPSTREAM = "upstream"
    PARTIAL_BATCH = "partial_batch"


# Read by SidecarError.status_code
STATUS_CODES = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.UPSTREAM: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class SidecarError(Exception):
    """Base error carrying a kind and structured context for the HTTP boundary."""

    kind: ErrorKind = ErrorKind.UPSTREAM

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.kind]


class ValidationError(SidecarError):
    kind = ErrorKind.VALIDATION


class NotFoundError(SidecarError):
    kind = ErrorKind.NOT_FOUND


class UpstreamError(SidecarError):
    kind = ErrorKind.UPSTREAM


class PathCollectionError(ValidationError):
    """Raised when a local path cannot be statted or walked."""

    def __init__(self, path: str, reason: str):
        super().__init__(reason, {"path": path})
        self.path = path


def require_fields(values: Dict[str, Optional[str]], message: str) -> None:
    """Raise a ValidationError naming the empty fields when any value is empty."""
    missing = [name for name, value in values.items() if not value]
    if missing:
        raise ValidationError(message, {"missing": missing})
