import uuid
import urllib.parse
from typing import List, Optional, Dict, Any
from datetime import datetime
import logging

from firebase_admin import storage

from ..core.config import settings
from ..core.exceptions import SideEffectError, StoreError, ValidationError

logger = logging.getLogger(__name__)

# Top-level folder for every object this service writes
ROOT_FOLDER = "barangay-portal"

ALLOWED_IMAGE_TYPES = {'image/jpeg', 'image/jpg', 'image/png', 'image/gif', 'image/webp'}
MAX_IMAGE_SIZE = 5 * 1024 * 1024  # 5MB

EXTENSIONS = {
    'image/jpeg': '.jpg',
    'image/jpg': '.jpg',
    'image/png': '.png',
    'image/gif': '.gif',
    'image/webp': '.webp',
}


class FileStorageService:
    """
    Image uploads (certificate photos, signatures, ID photos) in Firebase Storage.

    An upload returns a download URL and a public id. The public id is the
    object path inside the bucket, and is what `delete` takes.
    """

    def __init__(self, bucket=None):
        self._bucket = bucket

    @property
    def bucket(self):
        if self._bucket is None:
            self._bucket = storage.bucket(settings.FIREBASE_STORAGE_BUCKET or None)
            logger.info(f"Firebase Storage bucket resolved (gs://{self._bucket.name})")
        return self._bucket

    @staticmethod
    def _validate_image(content: bytes, content_type: str) -> None:
        if (content_type or "").lower() not in ALLOWED_IMAGE_TYPES:
            raise ValidationError(f"Invalid image type. Allowed: {', '.join(sorted(ALLOWED_IMAGE_TYPES))}")
        if not content:
            raise ValidationError("Uploaded file is empty.")
        if len(content) > MAX_IMAGE_SIZE:
            raise ValidationError(f"Image too large. Maximum size: {MAX_IMAGE_SIZE / (1024*1024):.1f}MB")

    async def upload(
        self,
        content: bytes,
        folder: str,
        content_type: str = "image/png",
        tags: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        """Upload an image under ROOT_FOLDER/folder. Returns {"url", "public_id"}."""
        self._validate_image(content, content_type)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        public_id = f"{ROOT_FOLDER}/{folder.strip('/')}/{timestamp}_{uuid.uuid4()}{EXTENSIONS[content_type.lower()]}"
        download_token = str(uuid.uuid4())

        try:
            blob = self.bucket.blob(public_id)
            blob.metadata = {
                'tags': ",".join(tags or []),
                'upload_timestamp': datetime.now().isoformat(),
                'firebaseStorageDownloadTokens': download_token,
            }
            blob.upload_from_string(content, content_type=content_type)
        except Exception as e:
            logger.error(f"File upload failed: {e}")
            raise StoreError("File upload failed")

        encoded_path = urllib.parse.quote(public_id, safe='')
        url = f"https://firebasestorage.googleapis.com/v0/b/{self.bucket.name}/o/{encoded_path}?alt=media&token={download_token}"

        logger.info(f"File uploaded successfully: {public_id}")
        return {"url": url, "public_id": public_id}

    async def delete(self, public_id: str) -> bool:
        try:
            self.bucket.blob(public_id).delete()
        except Exception as e:
            logger.error(f"Failed to delete stored file {public_id}: {e}")
            raise SideEffectError(f"File deletion failed: {public_id}")

        logger.info(f"Deleted stored file {public_id}")
        return True


file_storage_service = FileStorageService()
