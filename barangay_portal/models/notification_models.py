from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from enum import Enum


class NotificationType(str, Enum):
    RESIDENT_VERIFICATION = "resident_verification"
    APPOINTMENT_UPDATE = "appointment_update"
    CERTIFICATE_REQUEST = "certificate_request"
    CERTIFICATE_UPDATE = "certificate_update"
    ANNOUNCEMENT = "announcement"
    EVENT_UPDATE = "event_update"


class NotificationPriority(str, Enum):
    HIGH = "high"
    NORMAL = "normal"


class UserRole(str, Enum):
    ADMIN = "admin"
    OFFICIAL = "official"
    RESIDENT = "resident"


class NotificationRequest(BaseModel):
    """A logical event to fan out as push notifications to roles or specific users."""

    type: NotificationType
    target_roles: List[UserRole] = Field(default_factory=list)
    target_uids: List[str] = Field(default_factory=list)
    title: str
    body: str
    icon: Optional[str] = None
    click_action: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict)
    priority: NotificationPriority = NotificationPriority.NORMAL

    def message_data(self, timestamp: int) -> Dict[str, str]:
        """FCM data payloads only accept string values."""
        payload = {
            "type": self.type.value,
            "priority": self.priority.value,
            "timestamp": str(timestamp),
        }
        if self.icon:
            payload["icon"] = self.icon
        if self.click_action:
            payload["clickAction"] = self.click_action
        for key, value in self.data.items():
            if value is not None:
                payload[key] = str(value)
        return payload


class FCMToken(BaseModel):
    token: str
    uid: str
    role: UserRole
    deviceType: str = "web"  # web, mobile
    lastUpdated: int
    active: bool = True
