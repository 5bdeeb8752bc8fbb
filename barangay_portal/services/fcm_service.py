from typing import List, Dict, Any, Optional
from firebase_admin import messaging
import logging

from ..database.database_service import database_service
from ..database.collections import COLLECTIONS
from ..models.notification_models import FCMToken, UserRole
from ..core.clock import now_ms
from ..core.config import settings

logger = logging.getLogger(__name__)

# FCM rejects multicast messages addressed to more tokens than this
MULTICAST_LIMIT = 500


class FCMService:
    """Firebase Cloud Messaging service for push notifications"""

    def __init__(self, db=None, messaging_client=None):
        self.db = db or database_service
        self.messaging = messaging_client or messaging

    async def send_to_multiple_tokens(
        self,
        tokens: List[str],
        title: str,
        body: str,
        data: Optional[Dict[str, str]] = None
    ) -> Dict[str, Any]:
        """Send one notification to many device tokens, MULTICAST_LIMIT per request. Returns counts and the tokens that failed."""
        success_count = 0
        failure_count = 0
        failed_tokens = []

        for start in range(0, len(tokens), MULTICAST_LIMIT):
            batch = tokens[start:start + MULTICAST_LIMIT]
            message = self.messaging.MulticastMessage(
                notification=self.messaging.Notification(
                    title=title,
                    body=body,
                ),
                data=data or {},
                tokens=batch,
            )

            response = self.messaging.send_each_for_multicast(message)
            logger.info(f"Notification batch sent: {response.success_count} success, {response.failure_count} failure")
            success_count += response.success_count
            failure_count += response.failure_count

            if response.failure_count > 0:
                for idx, resp in enumerate(response.responses):
                    if not resp.success:
                        logger.error(f"Failed to send to token {batch[idx]}: {resp.exception}")
                        failed_tokens.append(batch[idx])

        return {
            "success_count": success_count,
            "failure_count": failure_count,
            "failed_tokens": failed_tokens,
        }

    async def get_tokens_by_roles(self, roles: List[UserRole]) -> List[str]:
        """Get FCM tokens registered under the given roles, de-duplicated."""
        tokens: List[str] = []
        for role in roles:
            role_value = role.value if isinstance(role, UserRole) else str(role)
            success, role_tokens, error = await self.db.get(f"{COLLECTIONS['fcm_tokens_by_role']}/{role_value}")
            if not success:
                logger.error(f"Error getting FCM tokens for role {role_value}: {error}")
                continue
            for token_data in (role_tokens or {}).values():
                token = (token_data or {}).get("token")
                if token and token not in tokens:
                    tokens.append(token)
        return tokens

    async def get_tokens_by_uids(self, uids: List[str]) -> List[str]:
        """Get active, recently refreshed tokens for specific users. Stale tokens are marked inactive."""
        tokens: List[str] = []
        max_age = settings.FCM_TOKEN_MAX_AGE_DAYS * 24 * 60 * 60 * 1000
        now = now_ms()

        for uid in uids:
            success, token_data, error = await self.db.get(f"{COLLECTIONS['fcm_tokens']}/{uid}")
            if not success:
                logger.error(f"Error getting FCM token for {uid}: {error}")
                continue
            if not token_data:
                continue

            token_age = now - int(token_data.get("lastUpdated", 0))
            if token_age >= max_age:
                await self.db.update(f"{COLLECTIONS['fcm_tokens']}/{uid}", {"active": False})
                logger.info(f"Marked old token for UID {uid} as inactive")
            elif token_data.get("active") and token_data.get("token"):
                tokens.append(token_data["token"])

        return tokens

    async def cleanup_invalid_tokens(self, invalid_tokens: List[str]) -> int:
        """Deactivate tokens the provider rejected and drop them from the role index."""
        success, all_tokens, error = await self.db.get(COLLECTIONS['fcm_tokens'])
        if not success or not all_tokens:
            return 0

        updates: Dict[str, Any] = {}
        for uid, token_data in all_tokens.items():
            if (token_data or {}).get("token") in invalid_tokens:
                updates[f"{COLLECTIONS['fcm_tokens']}/{uid}/active"] = False
                updates[f"{COLLECTIONS['fcm_tokens_by_role']}/{token_data.get('role')}/{uid}"] = None

        if updates:
            success, error = await self.db.multi_path_update(updates)
            if not success:
                logger.error(f"Error cleaning up invalid tokens: {error}")
                return 0
            logger.info(f"Cleaned up {len(updates) // 2} invalid tokens")
        return len(updates) // 2

    async def save_user_token(self, uid: str, token: str, role: UserRole, device_type: str = "web") -> bool:
        """Save or replace a user's FCM token and its role index entry"""
        token_record = FCMToken(
            token=token,
            uid=uid,
            role=role,
            deviceType=device_type,
            lastUpdated=now_ms(),
        )
        success, error = await self.db.multi_path_update({
            f"{COLLECTIONS['fcm_tokens']}/{uid}": token_record.model_dump(mode="json"),
            f"{COLLECTIONS['fcm_tokens_by_role']}/{token_record.role.value}/{uid}": {
                "token": token,
                "lastUpdated": token_record.lastUpdated,
            },
        })
        if not success:
            logger.error(f"Error storing FCM token for {uid}: {error}")
        return success

    async def remove_user_token(self, uid: str) -> bool:
        """Remove a user's token (logout)"""
        success, token_data, error = await self.db.get(f"{COLLECTIONS['fcm_tokens']}/{uid}")
        if not success:
            logger.error(f"Error reading FCM token for {uid}: {error}")
            return False
        if not token_data:
            return True

        success, error = await self.db.multi_path_update({
            f"{COLLECTIONS['fcm_tokens']}/{uid}": None,
            f"{COLLECTIONS['fcm_tokens_by_role']}/{token_data.get('role')}/{uid}": None,
        })
        if not success:
            logger.error(f"Error removing FCM token for {uid}: {error}")
        return success


fcm_service = FCMService()
