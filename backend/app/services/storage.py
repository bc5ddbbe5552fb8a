"""Object store adapter backed by a Firebase (Google Cloud Storage) bucket."""
import logging
import secrets
import time
from datetime import timedelta
from typing import Any, Protocol
from urllib.parse import unquote, urlparse

from google.api_core import exceptions as gcs_exceptions

from app.core.exceptions import StorageError

logger = logging.getLogger(__name__)

PUBLIC_HOST = "storage.googleapis.com"
RESOLVED_SCHEMES = ("http://", "https://")


class ObjectStore(Protocol):
    def object_path(self, file_url: str) -> str | None:
        ...

    def upload(self, data: bytes, path: str | None = None, content_type: str | None = None) -> str:
        ...

    def get_download_url(self, file_url: str, expires_in: timedelta | None = None) -> str:
        ...

    def delete(self, file_url: str) -> None:
        ...


def generate_upload_path(prefix: str = "uploads") -> str:
    return f"{prefix}/{int(time.time() * 1000)}-{secrets.token_hex(6)}"


def user_upload_prefix(user_id: str) -> str:
    return f"uploads/{user_id}/"


def is_user_path(path: str | None, user_id: str) -> bool:
    """True when ``path`` is an object under the user's uploads folder."""
    if not path or not path.startswith(user_upload_prefix(user_id)):
        return False
    return ".." not in path.split("/")


class FirebaseObjectStore:
    """Stores files in a bucket and hands out public or signed URLs."""

    def __init__(self, bucket: Any, signed_url_ttl: timedelta = timedelta(hours=1)) -> None:
        self.bucket = bucket
        self.signed_url_ttl = signed_url_ttl

    def object_path(self, file_url: str) -> str | None:
        """
        Map ``gs://bucket/path``, the bucket's public URL, or a bare path to an object path.

        URLs that point anywhere other than this bucket map to ``None``.
        """
        if file_url.startswith("gs://"):
            bucket_name, _, path = file_url[len("gs://"):].partition("/")
            return path if bucket_name == self.bucket.name and path else None

        if file_url.startswith(RESOLVED_SCHEMES):
            parsed = urlparse(file_url)
            bucket_prefix = f"/{self.bucket.name}/"
            if parsed.netloc == PUBLIC_HOST and parsed.path.startswith(bucket_prefix):
                return unquote(parsed.path[len(bucket_prefix):]) or None
            return None
        return file_url

    def upload(self, data: bytes, path: str | None = None, content_type: str | None = None) -> str:
        file_path = path or generate_upload_path()
        try:
            blob = self.bucket.blob(file_path)
            blob.upload_from_string(data, content_type=content_type)
            blob.make_public()
        except Exception as e:
            logger.error(f"Error uploading file to {file_path}: {e}", exc_info=True)
            raise StorageError("Failed to upload file") from e

        logger.info("Uploaded %s bytes to %s", len(data), file_path)
        return f"https://{PUBLIC_HOST}/{self.bucket.name}/{file_path}"

    def get_download_url(self, file_url: str, expires_in: timedelta | None = None) -> str:
        """Return a time-limited URL; already-resolved http(s) URLs pass through."""
        if file_url.startswith(RESOLVED_SCHEMES):
            return file_url

        file_path = self.object_path(file_url)
        if file_path is None:
            return file_url
        try:
            blob = self.bucket.blob(file_path)
            return blob.generate_signed_url(
                expiration=expires_in or self.signed_url_ttl,
                method="GET",
                version="v4",
            )
        except Exception as e:
            logger.warning(f"Could not sign download URL for {file_url}: {e}")
            return file_url

    def delete(self, file_url: str) -> None:
        """Remove the object behind ``file_url``; missing objects and foreign URLs are no-ops."""
        file_path = self.object_path(file_url)
        if file_path is None:
            logger.info("Skipping delete of %s: not stored in bucket %s", file_url, self.bucket.name)
            return

        try:
            self.bucket.blob(file_path).delete()
        except gcs_exceptions.NotFound:
            logger.info("%s was already removed from the object store", file_path)
            return
        except Exception as e:
            logger.error(f"Error deleting file {file_path}: {e}", exc_info=True)
            raise StorageError("Failed to delete file") from e
        logger.info("Deleted %s from object store", file_path)
