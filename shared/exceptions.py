"""
Error taxonomy for the file portal.

Core components raise these; the web layer maps each one to an HTTP status
in main.py. Path policy and the upload validator never raise.
"""

from typing import Any, Dict, Optional


class PortalError(Exception):
    """Base exception for all portal errors"""

    status_code = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "detail": self.message,
            "details": self.details
        }


class ValidationError(PortalError):
    """Upload or request input rejected"""

    status_code = 400

    def __init__(self, message: str = "Invalid input", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class ConflictError(PortalError):
    """Uniqueness or lifecycle precondition violated"""

    status_code = 409

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="CONFLICT", details=details)


class NotFoundError(PortalError):
    """Missing entity or missing physical bytes"""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: Any, message: Optional[str] = None):
        super().__init__(
            message or f"{resource_type} '{resource_id}' not found",
            code=f"{resource_type.upper()}_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": str(resource_id)}
        )


class ForbiddenError(PortalError):
    """Caller's role does not permit the action"""

    status_code = 403

    def __init__(self, message: str = "Not authorized to perform this action"):
        super().__init__(message, code="FORBIDDEN")


class StorageIOError(PortalError):
    """A filesystem operation failed"""

    status_code = 500

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(
            message,
            code="STORAGE_IO_ERROR",
            details={"path": path} if path else None
        )
