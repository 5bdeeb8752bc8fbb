from firebase_admin import auth
from typing import Optional
import logging

from ..core.firebase_init import initialize_firebase, is_firebase_available
from ..core.exceptions import ValidationError

logger = logging.getLogger(__name__)


class FirebaseAuth:
    """Firebase Auth calls used by the portal: token checks, staff accounts and account cleanup"""

    def _ensure_app(self):
        if not is_firebase_available() and not initialize_firebase():
            raise Exception("Firebase initialization failed - Auth not available")

    async def verify_token(self, token: str) -> Optional[dict]:
        try:
            self._ensure_app()
            return auth.verify_id_token(token)
        except Exception as e:
            logger.warning(f"Token verification failed: {e}")
            return None

    async def create_user(self, email: str, password: str, display_name: str = None) -> dict:
        self._ensure_app()
        try:
            user = auth.create_user(
                email=email,
                password=password,
                display_name=display_name,
                email_verified=True,
            )
        except auth.EmailAlreadyExistsError:
            raise ValidationError("Email already exists. Please use a different email.")
        except ValueError as e:
            # The SDK validates email and password locally before calling the API
            if "password" in str(e).lower():
                raise ValidationError("Password is too weak. Please use a stronger password.")
            raise ValidationError("Invalid email address.")
        except Exception as e:
            raise Exception(f"User creation failed: {e}")
        logger.info(f"Created auth account {user.uid}")
        return {
            "uid": user.uid,
            "email": user.email,
        }

    async def set_custom_claims(self, uid: str, claims: dict):
        self._ensure_app()
        try:
            auth.set_custom_user_claims(uid, claims)
        except Exception as e:
            raise Exception(f"Setting custom claims failed: {e}")

    async def update_user(self, uid: str, **kwargs):
        """Update user properties in Firebase Auth"""
        self._ensure_app()
        try:
            auth.update_user(uid, **kwargs)
        except Exception as e:
            raise Exception(f"User update failed: {e}")

    async def disable_user(self, uid: str):
        await self.update_user(uid, disabled=True)
        logger.info(f"Disabled auth account {uid}")

    async def delete_user(self, uid: str):
        """Delete a user from Firebase Auth"""
        self._ensure_app()
        try:
            auth.delete_user(uid)
        except Exception as e:
            raise Exception(f"User deletion failed: {e}")
        logger.info(f"Deleted auth account {uid}")


firebase_auth = FirebaseAuth()
