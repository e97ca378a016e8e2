"""
Error taxonomy for CivitasFix.

Route handlers and the workflow raise these instead of bare HTTPException;
``create_app`` installs a handler that turns any of them into the
``{"success": false, "message": ..., "code": ...}`` envelope.
"""

from typing import Any, Dict, Optional


class CivitasFixError(Exception):
    """Base exception for all CivitasFix errors"""

    status_code = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "success": False,
            "message": self.message,
            "code": self.code,
        }
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(CivitasFixError):
    """Missing or malformed input"""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class ConflictError(ValidationError):
    """Unique value already taken"""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, field=field)
        self.code = "CONFLICT"


class AuthenticationError(CivitasFixError):
    """Caller could not be identified"""

    status_code = 401

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message, code="AUTH_FAILED")


class InvalidTokenError(AuthenticationError):
    def __init__(self, message: str = "Invalid token"):
        super().__init__(message)
        self.code = "INVALID_TOKEN"


class TokenExpiredError(AuthenticationError):
    def __init__(self):
        super().__init__("Token has expired")
        self.code = "TOKEN_EXPIRED"


class AuthorizationError(CivitasFixError):
    """Caller is known but not allowed to do this"""

    status_code = 403

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message, code="NOT_AUTHORIZED")


class NotFoundError(CivitasFixError):
    status_code = 404

    def __init__(self, resource_type: str, resource_id: Any = None):
        message = f"{resource_type} not found"
        details: Dict[str, Any] = {"resource_type": resource_type}
        if resource_id is not None:
            message = f"{resource_type} with ID '{resource_id}' not found"
            details["resource_id"] = resource_id
        super().__init__(
            message,
            code=f"{resource_type.upper().replace(' ', '_')}_NOT_FOUND",
            details=details,
        )


class InternalError(CivitasFixError):
    status_code = 500

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message, code="INTERNAL_ERROR")
