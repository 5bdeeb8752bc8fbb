from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from .firebase_auth import firebase_auth
import logging

security = HTTPBearer()
logger = logging.getLogger(__name__)

STAFF_ROLES = ["admin", "official"]


async def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(security)):
    """
    Verify Firebase authentication token and return user data.
    Raises 401 if token is invalid.
    """
    user_data = await firebase_auth.verify_token(credentials.credentials)

    if not user_data:
        logger.warning("[Auth] Token verification failed - invalid token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    logger.debug(f"[Auth] Authenticated user: {user_data.get('uid')} with role: {user_data.get('role')}")
    return user_data


def require_role(required_roles: list):
    def role_checker(current_user: dict = Depends(get_current_user)):
        user_role = current_user.get("role")
        if user_role not in required_roles:
            logger.warning(f"[Auth] Role check failed: user role '{user_role}' not in required roles {required_roles}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient permissions. Required role: {required_roles}, current role: {user_role}"
            )
        return current_user
    return role_checker


require_staff_or_admin = require_role(STAFF_ROLES)
require_admin = require_role(["admin"])


def is_staff(current_user: dict) -> bool:
    return current_user.get("role") in STAFF_ROLES


def ensure_owner(record: dict, current_user: dict, not_found_detail: str):
    """
    Residents may only see their own records. Someone else's record is
    reported as missing so its existence is not revealed.
    """
    if is_staff(current_user):
        return
    owner = (record or {}).get("userId")
    if not owner or owner != current_user.get("uid"):
        logger.warning(f"[Auth] {current_user.get('uid')} denied access to a record owned by {owner}")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=not_found_detail)
