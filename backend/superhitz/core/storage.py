import io
import json
import re
import time
from urllib.parse import quote

import structlog

from superhitz.config import Settings
from superhitz.errors import StorageWriteError

log = structlog.get_logger()

_WHITESPACE = re.compile(r"\s+")


def sanitize_filename(filename: str) -> str:
    return _WHITESPACE.sub("_", filename)


def object_path(prefix: str, uid: str, filename: str = "", suffix: str = "") -> str:
    """
    Kollisionssäker objektsökväg: {prefix}/{uid}_{ns-timestamp}_{filnamn}.
    Utan filnamn blir det {prefix}/{uid}_{ns-timestamp}{suffix}.
    """
    stamp = time.time_ns()
    if filename:
        return f"{prefix}/{uid}_{stamp}_{sanitize_filename(filename)}"
    return f"{prefix}/{uid}_{stamp}{suffix}"


def public_read_policy(bucket: str) -> str:
    return json.dumps({
        "Version": "2012-10-17",
        "Statement": [{
            "Effect": "Allow",
            "Principal": {"AWS": ["*"]},
            "Action": ["s3:GetObject"],
            "Resource": [f"arn:aws:s3:::{bucket}/*"],
        }],
    })


class StorageClient:
    def __init__(self, settings: Settings):
        self._settings = settings
        self._client = None

    @property
    def bucket(self) -> str:
        return self._settings.MINIO_BUCKET_MEDIA

    def _get_client(self):
        if self._client is None:
            from minio import Minio
            self._client = Minio(
                self._settings.MINIO_ENDPOINT,
                access_key=self._settings.MINIO_ACCESS_KEY,
                secret_key=self._settings.MINIO_SECRET_KEY,
                secure=self._settings.MINIO_SECURE,
            )
        return self._client

    def public_url(self, path: str) -> str:
        base = self._settings.MINIO_PUBLIC_URL.rstrip("/")
        if not base:
            scheme = "https" if self._settings.MINIO_SECURE else "http"
            base = f"{scheme}://{self._settings.MINIO_ENDPOINT}"
        return f"{base}/{self.bucket}/{quote(path)}"

    async def store(self, data: bytes, path: str, content_type: str) -> str:
        """Skriv hela bufferten som ett objekt och returnera publik URL."""
        try:
            client = self._get_client()
            client.put_object(
                bucket_name=self.bucket,
                object_name=path,
                data=io.BytesIO(data),
                length=len(data),
                content_type=content_type,
            )
        except Exception as e:
            log.error("storage_upload_failed", path=path, error=str(e))
            raise StorageWriteError(f"Storage write failed for {path}: {e}") from e

        log.info("storage_upload_complete", path=path, size=len(data), content_type=content_type)
        return self.public_url(path)


async def init_storage(storage: StorageClient):
    """Skapa bucket och publik läs-policy om möjligt, tyst fail om MinIO inte finns."""
    try:
        client = storage._get_client()
        if not client.bucket_exists(bucket_name=storage.bucket):
            client.make_bucket(bucket_name=storage.bucket)
            log.info("bucket_created", bucket=storage.bucket)
        client.set_bucket_policy(bucket_name=storage.bucket, policy=public_read_policy(storage.bucket))
    except Exception as e:
        log.warning("storage_init_failed_continuing", error=str(e))
