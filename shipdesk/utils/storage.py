"""
Storage backends for uploaded media.

Keys look like ``images/image-1760880000000-123456789.png``: a folder from
``UPLOAD_PATHS`` plus the stored filename.
"""
from abc import ABC, abstractmethod
import logging
import os
from pathlib import Path
from typing import List, Optional

import aioboto3

from shipdesk.core.config import settings
from shipdesk.core.constants import UPLOADS_URL_PREFIX

log = logging.getLogger(__name__)


def _clean_key(key: str) -> str:
    key = key.replace("\\", "/").lstrip("/")
    if not key or any(part in ("", ".", "..") for part in key.split("/")):
        raise ValueError(f"Invalid storage key: {key!r}")
    return key


class StorageBackend(ABC):
    @abstractmethod
    async def put(self, key: str, body: bytes, content_type: str) -> str:
        ...

    @abstractmethod
    async def get(self, key: str) -> Optional[bytes]:
        ...

    @abstractmethod
    async def delete(self, key: str) -> bool:
        ...

    @abstractmethod
    async def list(self, folder: str) -> List[str]:
        ...

    @abstractmethod
    def url(self, key: str) -> str:
        ...


class LocalStorage(StorageBackend):
    """Files on disk under ``root``, served back at ``/uploads``."""

    def __init__(self, root: str):
        self.root = Path(root)

    def _path(self, key: str) -> Path:
        return self.root / _clean_key(key)

    async def put(self, key: str, body: bytes, content_type: str) -> str:
        path = self._path(key)
        os.makedirs(path.parent, exist_ok=True)
        with open(path, "wb") as buffer:
            buffer.write(body)
        return _clean_key(key)

    async def get(self, key: str) -> Optional[bytes]:
        path = self._path(key)
        if not path.is_file():
            return None
        with open(path, "rb") as f:
            return f.read()

    async def delete(self, key: str) -> bool:
        path = self._path(key)
        if not path.is_file():
            return False
        path.unlink()
        return True

    async def list(self, folder: str) -> List[str]:
        directory = self._path(folder)
        if not directory.is_dir():
            return []
        folder = _clean_key(folder)
        return sorted(f"{folder}/{p.name}" for p in directory.iterdir() if p.is_file())

    def url(self, key: str) -> str:
        return f"{UPLOADS_URL_PREFIX}/{_clean_key(key)}"


class SpacesStorage(StorageBackend):
    """DigitalOcean Spaces (any S3-compatible bucket) via aioboto3."""

    def __init__(
        self,
        *,
        key: str,
        secret: str,
        bucket: str,
        endpoint: str,
        cdn_base: str,
        region: str = "nyc3",
        prefix: str = "",
    ):
        if not all([key, secret, bucket, endpoint, cdn_base]):
            raise RuntimeError("Spaces env vars not fully configured")
        self.key = key
        self.secret = secret
        self.bucket = bucket
        self.endpoint = endpoint
        self.cdn_base = cdn_base.rstrip("/")
        self.region = region
        self.prefix = prefix.strip("/")
        self._session = aioboto3.Session()

    def _object_key(self, key: str) -> str:
        key = _clean_key(key)
        return f"{self.prefix}/{key}" if self.prefix else key

    def _client(self):
        return self._session.client(
            "s3",
            region_name=self.region,
            endpoint_url=self.endpoint,
            aws_access_key_id=self.key,
            aws_secret_access_key=self.secret,
        )

    async def put(self, key: str, body: bytes, content_type: str) -> str:
        async with self._client() as s3:
            await s3.put_object(
                Bucket=self.bucket,
                Key=self._object_key(key),
                Body=body,
                ContentType=content_type or "application/octet-stream",
                ACL="public-read",
            )
        return _clean_key(key)

    async def get(self, key: str) -> Optional[bytes]:
        async with self._client() as s3:
            try:
                obj = await s3.get_object(Bucket=self.bucket, Key=self._object_key(key))
            except s3.exceptions.NoSuchKey:
                return None
            async with obj["Body"] as stream:
                return await stream.read()

    async def delete(self, key: str) -> bool:
        object_key = self._object_key(key)
        async with self._client() as s3:
            try:
                await s3.head_object(Bucket=self.bucket, Key=object_key)
            except s3.exceptions.ClientError as exc:
                if exc.response.get("Error", {}).get("Code") in ("404", "NoSuchKey", "NotFound"):
                    return False
                raise
            await s3.delete_object(Bucket=self.bucket, Key=object_key)
        return True

    async def list(self, folder: str) -> List[str]:
        folder = _clean_key(folder)
        prefix = self._object_key(folder) + "/"
        keys = []
        async with self._client() as s3:
            paginator = s3.get_paginator("list_objects_v2")
            async for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix):
                for item in page.get("Contents", []):
                    keys.append(f"{folder}/{item['Key'][len(prefix):]}")
        return sorted(keys)

    def url(self, key: str) -> str:
        return f"{self.cdn_base}/{self._object_key(key)}"


def get_storage() -> StorageBackend:
    if settings.storage_backend == "spaces":
        return SpacesStorage(
            key=settings.do_spaces_key,
            secret=settings.do_spaces_secret,
            bucket=settings.do_spaces_bucket,
            endpoint=settings.do_spaces_endpoint,
            cdn_base=settings.do_spaces_cdn_base,
            region=settings.do_spaces_region,
            prefix=settings.do_spaces_prefix,
        )
    return LocalStorage(settings.upload_root)
