"""Error taxonomy shared by repositories, routes and the client."""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Codes carried in the `error.code` field of the API envelope."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    BAD_REQUEST = "BAD_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"


HTTP_STATUS = {
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.BAD_REQUEST: 400,
    ErrorCode.UNAUTHORIZED: 401,
    ErrorCode.FORBIDDEN: 403,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.CONFLICT: 409,
    ErrorCode.INTERNAL_ERROR: 500,
}


class ConfigurationError(RuntimeError):
    """Fatal misconfiguration (e.g. DATABASE_URL missing)."""


class StorageError(Exception):
    """Typed error raised by the repository layer."""

    def __init__(self, code: ErrorCode, message: str, details: Any = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details

    def __repr__(self) -> str:
        return f"StorageError({self.code.value}, {self.message!r})"

    @property
    def status_code(self) -> int:
        return HTTP_STATUS.get(self.code, 500)

    @classmethod
    def validation(cls, message: str, details: Any = None) -> StorageError:
        return cls(ErrorCode.VALIDATION_ERROR, message, details)

    @classmethod
    def not_found(cls, message: str, details: Any = None) -> StorageError:
        return cls(ErrorCode.NOT_FOUND, message, details)

    @classmethod
    def conflict(cls, message: str, details: Any = None) -> StorageError:
        return cls(ErrorCode.CONFLICT, message, details)

    @classmethod
    def internal(cls, message: str, details: Any = None) -> StorageError:
        return cls(ErrorCode.INTERNAL_ERROR, message, details)


def error_body(code: ErrorCode | str, message: str, details: Any = None) -> dict:
    """Standard error envelope."""
    error: dict[str, Any] = {
        "code": code.value if isinstance(code, ErrorCode) else code,
        "message": message,
    }
    if details is not None:
        error["details"] = details
    return {"success": False, "error": error}
