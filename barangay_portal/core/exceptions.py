from typing import Any, Dict


class PortalError(Exception):
    """Base error for lifecycle operations. `error_type` is surfaced in result dicts."""

    error_type = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(PortalError):
    error_type = "validation"


class NotFoundError(PortalError):
    error_type = "not_found"


class StoreError(PortalError):
    error_type = "store"


class SideEffectError(PortalError):
    """Notification, email or upload cleanup failure. Never changes the primary outcome."""

    error_type = "side_effect"


def ok(**payload: Any) -> Dict[str, Any]:
    return {"success": True, **payload}


def fail(error: PortalError) -> Dict[str, Any]:
    return {"success": False, "error": error.message, "error_type": error.error_type}
