import os
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


class Settings:
    FIREBASE_PROJECT_ID: str = os.getenv("FIREBASE_PROJECT_ID", "malinta-connect")
    FIREBASE_DATABASE_URL: str = os.getenv(
        "FIREBASE_DATABASE_URL",
        "https://malinta-connect-default-rtdb.asia-southeast1.firebasedatabase.app",
    )
    FIREBASE_STORAGE_BUCKET: str = os.getenv("FIREBASE_STORAGE_BUCKET", "malinta-connect.appspot.com")
    FIREBASE_SERVICE_ACCOUNT_PATH: str = os.getenv(
        "FIREBASE_SERVICE_ACCOUNT_PATH",
        "firebase-service-account.json",
    )

    # Outbound email (SendGrid)
    SENDGRID_API_KEY: str | None = os.getenv("SENDGRID_API_KEY")
    FROM_EMAIL: str = os.getenv("FROM_EMAIL", "noreply@malinta-connect.com")
    FROM_NAME: str = os.getenv("FROM_NAME", "Barangay Malinta")
    EMAIL_MOCK_MODE: bool = _env_flag("EMAIL_MOCK_MODE", "true")

    # Contact details rendered into resident-facing emails
    CONTACT_PHONE: str = os.getenv("CONTACT_PHONE", "+63 912 345 6789")
    CONTACT_EMAIL: str = os.getenv("CONTACT_EMAIL", "info@malinta-connect.com")
    PICKUP_LOCATION: str = os.getenv("PICKUP_LOCATION", "Malinta Barangay Hall, Main Office")
    PICKUP_HOURS: str = os.getenv("PICKUP_HOURS", "8:00 AM - 5:00 PM")

    # Push notifications
    NOTIFICATION_ICON: str = os.getenv("NOTIFICATION_ICON", "/images/malinta_logo.jpg")
    FCM_TOKEN_MAX_AGE_DAYS: int = int(os.getenv("FCM_TOKEN_MAX_AGE_DAYS", "30"))

    # Lifecycle behaviour
    # "count" reproduces the count-then-write numbering, "counter" uses an atomic transaction
    REFERENCE_NUMBER_STRATEGY: str = os.getenv("REFERENCE_NUMBER_STRATEGY", "count").lower()
    ENFORCE_STATUS_TRANSITIONS: bool = _env_flag("ENFORCE_STATUS_TRANSITIONS", "true")
    ENFORCE_FUTURE_RESCHEDULE: bool = _env_flag("ENFORCE_FUTURE_RESCHEDULE", "false")

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Timezone for date stamping (default to UTC+8 for Philippines)
    TZ_OFFSET: int = int(os.getenv("TZ_OFFSET", "8"))


settings = Settings()
