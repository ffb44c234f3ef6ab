"""
Media Storage for Legendary Signatures API

Uploads product images, banner artwork and personalized videos to the
Firebase Storage bucket. Without a configured bucket an in-memory bucket
keeps uploads for the life of the process.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Protocol
import logging
import time

import firebase_init
from config import MAX_IMAGE_BYTES, MAX_VIDEO_BYTES, ALLOWED_IMAGE_TYPES, ALLOWED_VIDEO_TYPES
from error_handling import StorageUploadError
from utils import sanitize_filename

logger = logging.getLogger(__name__)

MEDIA_LIMITS = {
    'image': (ALLOWED_IMAGE_TYPES, MAX_IMAGE_BYTES),
    'video': (ALLOWED_VIDEO_TYPES, MAX_VIDEO_BYTES),
}


def build_object_path(folder: str, filename: str) -> str:
    """<folder>/<ms timestamp>_<sanitized filename>"""
    return f"{folder}/{int(time.time() * 1000)}_{sanitize_filename(filename)}"


def check_media(data: bytes, content_type: str, kind: str):
    """
    Reject uploads of the wrong type or size

    Raises:
        StorageUploadError: If the content type or size is not accepted
    """
    allowed_types, max_bytes = MEDIA_LIMITS[kind]
    if content_type not in allowed_types:
        raise StorageUploadError(
            f"Unsupported {kind} type '{content_type}'. Allowed: {', '.join(sorted(allowed_types))}"
        )
    if not data:
        raise StorageUploadError(f"Empty {kind} upload")
    if len(data) > max_bytes:
        raise StorageUploadError(f"{kind.capitalize()} exceeds {max_bytes // (1024 * 1024)} MB limit")


class MediaStorage(Protocol):
    """Operations the API needs from object storage"""

    def upload(self, data: bytes, filename: str, content_type: str, folder: str, kind: str = 'image') -> dict:
        ...

    def delete(self, path: str) -> bool:
        ...

    def probe(self) -> dict:
        ...


class FirebaseMediaStorage:
    """Firebase Storage bucket wrapper"""

    def __init__(self, bucket):
        self.bucket = bucket

    def upload(self, data: bytes, filename: str, content_type: str, folder: str, kind: str = 'image') -> dict:
        check_media(data, content_type, kind)
        path = build_object_path(folder, filename)
        try:
            blob = self.bucket.blob(path)
            blob.upload_from_string(data, content_type=content_type)
            blob.make_public()
            logger.info(f"Uploaded {len(data)} bytes to {path}")
            return {'url': blob.public_url, 'path': path}
        except Exception as e:
            logger.error(f"Upload to {path} failed: {e}")
            raise StorageUploadError(f"Upload failed: {str(e)}", path) from e

    def delete(self, path: str) -> bool:
        try:
            self.bucket.blob(path).delete()
            logger.info(f"Deleted stored object {path}")
            return True
        except Exception as e:
            logger.warning(f"Could not delete stored object {path}: {e}")
            return False

    def probe(self) -> dict:
        """Upload and remove a small text object"""
        path = f"diagnostics/test-{int(time.time() * 1000)}.txt"
        try:
            blob = self.bucket.blob(path)
            blob.upload_from_string("Test upload from diagnostic tool", content_type="text/plain")
            blob.delete()
            return {
                "success": True,
                "message": "Firebase Storage is working correctly",
                "details": f"Uploaded and removed {path} in bucket {self.bucket.name}"
            }
        except Exception as e:
            return {
                "success": False,
                "message": "Firebase Storage upload failed",
                "details": str(e)
            }


@dataclass
class InMemoryMediaStorage:
    """Process-local bucket used without Firebase Storage"""

    base_url: str = "http://localhost/media"
    objects: Dict[str, bytes] = field(default_factory=dict)

    def upload(self, data: bytes, filename: str, content_type: str, folder: str, kind: str = 'image') -> dict:
        check_media(data, content_type, kind)
        path = build_object_path(folder, filename)
        self.objects[path] = data
        return {'url': f"{self.base_url}/{path}", 'path': path}

    def delete(self, path: str) -> bool:
        return self.objects.pop(path, None) is not None

    def probe(self) -> dict:
        return {
            "success": True,
            "message": "Using in-memory media storage",
            "details": "No Firebase Storage bucket is configured; uploads are not persisted"
        }


_media_storage: Optional[MediaStorage] = None


def get_media_storage() -> MediaStorage:
    """Return a singleton storage client"""
    global _media_storage
    if _media_storage:
        return _media_storage

    if firebase_init.bucket is not None:
        _media_storage = FirebaseMediaStorage(firebase_init.bucket)
    else:
        _media_storage = InMemoryMediaStorage()
    return _media_storage


async def store_upload(upload, folder: str, kind: str = 'image') -> dict:
    """Read an UploadFile and put it in the bucket under folder"""
    data = await upload.read()
    return get_media_storage().upload(
        data, upload.filename or 'upload', upload.content_type or 'application/octet-stream', folder, kind
    )
