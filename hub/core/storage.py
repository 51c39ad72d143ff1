"""
Object storage for uploaded media.

Objects live in Supabase Storage buckets (public URLs are what rows store).
When S3 credentials are configured every upload and removal is mirrored to
the S3 bucket under "<bucket>/<path>".
"""

import logging
import secrets
import string
import time
from typing import Any, Callable, Iterable, List, Optional, Tuple
from urllib.parse import unquote, urlparse

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from supabase import Client

from hub.config import settings
from hub.core.errors import ValidationFailed

logger = logging.getLogger(__name__)

IMAGE_TYPES = ("image/jpeg", "image/jpg", "image/png", "image/webp")
GALLERY_IMAGE_TYPES = IMAGE_TYPES + ("image/gif",)
VIDEO_TYPES = ("video/mp4", "video/webm", "video/quicktime")
DASHBOARD_VIDEO_TYPES = VIDEO_TYPES + ("video/avi",)

_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/gif": "gif",
    "video/mp4": "mp4",
    "video/webm": "webm",
    "video/quicktime": "mov",
    "video/avi": "avi",
}


class S3Mirror:
    def __init__(self):
        if not settings.s3_enabled:
            raise ValueError("AWS S3 credentials and bucket name must be configured")

        self.s3_client = boto3.client(
            "s3",
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
            region_name=settings.aws_region
        )
        self.bucket_name = settings.s3_bucket_name

    def upload_file(self, key: str, content: bytes, content_type: str) -> None:
        self.s3_client.put_object(
            Bucket=self.bucket_name,
            Key=key,
            Body=content,
            ContentType=content_type
        )

    def delete_files(self, keys: List[str]) -> None:
        self.s3_client.delete_objects(
            Bucket=self.bucket_name,
            Delete={"Objects": [{"Key": k} for k in keys], "Quiet": True}
        )


class MediaStorage:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.mirror = None
        if settings.s3_enabled:
            try:
                self.mirror = S3Mirror()
            except (ValueError, BotoCoreError) as e:
                logger.warning(f"S3 mirror disabled: {e}")

    def upload(self, bucket: str, path: str, content: bytes, content_type: str) -> str:
        """Upload and return the public URL. Errors propagate."""
        self.supabase.storage.from_(bucket).upload(
            path,
            content,
            file_options={"content-type": content_type, "cache-control": "3600", "upsert": "false"},
        )
        logger.info(f"Uploaded {bucket}/{path} ({len(content)} bytes)")
        if self.mirror:
            try:
                self.mirror.upload_file(f"{bucket}/{path}", content, content_type)
            except (ClientError, BotoCoreError) as e:
                logger.warning(f"S3 mirror upload failed for {bucket}/{path}: {e}")
        return self.public_url(bucket, path)

    def public_url(self, bucket: str, path: str) -> str:
        return self.supabase.storage.from_(bucket).get_public_url(path)

    def remove(self, bucket: str, paths: List[str]) -> None:
        self.supabase.storage.from_(bucket).remove(paths)
        if self.mirror:
            try:
                self.mirror.delete_files([f"{bucket}/{p}" for p in paths])
            except (ClientError, BotoCoreError) as e:
                logger.warning(f"S3 mirror removal failed for {bucket} {paths}: {e}")

    def remove_quietly(self, bucket: str, paths: Iterable[Optional[str]]) -> bool:
        """Best-effort removal. Logs and returns False on failure instead of raising."""
        paths = [p for p in dict.fromkeys(paths) if p]
        if not paths:
            return True
        try:
            self.remove(bucket, paths)
            logger.info(f"Removed from storage {bucket}: {paths}")
            return True
        except Exception as e:
            logger.warning(f"Failed to remove from storage {bucket} {paths}: {e}")
            return False


def storage_path_from_url(url: Optional[str], bucket: str) -> Optional[str]:
    """Object key inside bucket for a Supabase public URL, or None for external URLs."""
    if not url:
        return None
    marker = f"/storage/v1/object/public/{bucket}/"
    path = urlparse(url).path
    if marker not in path:
        return None
    key = unquote(path.split(marker, 1)[1])
    return key or None


def generate_object_path(folder: str, prefix: str, content_type: str) -> str:
    """"<folder>/<prefix>_<millis>_<random>.<ext>"."""
    ext = _EXTENSIONS.get(content_type, "bin")
    suffix = "".join(secrets.choice(string.ascii_lowercase + string.digits) for _ in range(6))
    return f"{folder}/{prefix}_{int(time.time() * 1000)}_{suffix}.{ext}"


def validate_upload(content: bytes, content_type: Optional[str], allowed: Tuple[str, ...], max_bytes: int) -> None:
    if not content:
        raise ValidationFailed("Nenhum arquivo enviado")
    if content_type not in allowed:
        kinds = ", ".join(sorted({_EXTENSIONS[t].upper() for t in allowed}))
        raise ValidationFailed(f"Tipo de arquivo não permitido. Use {kinds}")
    if len(content) > max_bytes:
        raise ValidationFailed(f"Arquivo muito grande. Máximo {max_bytes // (1024 * 1024)}MB")


class CompensatingActions:
    """Undo steps for a multi-step write.

    Register an undo after each step succeeds. If the block raises, the
    undos run newest first and the original exception propagates. Undo
    failures are logged and do not mask the original error.
    """

    def __init__(self, operation: str):
        self.operation = operation
        self._undo: List[Tuple[str, Callable, tuple]] = []

    def add(self, description: str, func: Callable[..., Any], *args: Any) -> None:
        self._undo.append((description, func, args))

    def rollback(self) -> None:
        while self._undo:
            description, func, args = self._undo.pop()
            try:
                func(*args)
                logger.warning(f"{self.operation}: rolled back {description}")
            except Exception as e:
                logger.error(f"{self.operation}: rollback of {description} failed: {e}")

    def __enter__(self) -> "CompensatingActions":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is not None:
            self.rollback()
        return False
