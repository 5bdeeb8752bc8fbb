from fastapi import HTTPException, status
from typing import Any, Dict

STATUS_CODES = {
    "validation": status.HTTP_400_BAD_REQUEST,
    "not_found": status.HTTP_404_NOT_FOUND,
}


def unwrap(result: Dict[str, Any]) -> Dict[str, Any]:
    """Return a successful service result, or raise the HTTPException matching its error_type."""
    if result.get("success"):
        return result
    raise HTTPException(
        status_code=STATUS_CODES.get(result.get("error_type"), status.HTTP_500_INTERNAL_SERVER_ERROR),
        detail=result.get("error") or "Request failed",
    )
