"""Key-prefixed blob stores for firmware binaries.

Backends:
- FirebaseObjectStorage: Firebase Storage bucket (firebase-admin). The SDK is
  blocking, so every call runs in a worker thread.
- LocalObjectStorage: a directory tree on the gateway host.
- InMemoryObjectStorage: process memory, for development and tests.
"""

from __future__ import annotations

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from common.config import Settings

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class ObjectStorage(ABC):
    """Operations the firmware workflow needs from a blob store."""

    @abstractmethod
    async def list_prefix(self, prefix: str) -> List[str]:
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        ...

    @abstractmethod
    async def write(self, key: str, data: bytes, content_type: str = DEFAULT_CONTENT_TYPE) -> None:
        ...

    @abstractmethod
    async def list_all(self) -> List[str]:
        ...


@dataclass(frozen=True)
class StoredObject:
    data: bytes
    content_type: str


class InMemoryObjectStorage(ObjectStorage):
    def __init__(self) -> None:
        self._objects: Dict[str, StoredObject] = {}

    async def list_prefix(self, prefix: str) -> List[str]:
        return [k for k in self._objects if k.startswith(prefix)]

    async def delete(self, key: str) -> None:
        self._objects.pop(key, None)

    async def write(self, key: str, data: bytes, content_type: str = DEFAULT_CONTENT_TYPE) -> None:
        self._objects[key] = StoredObject(data=bytes(data), content_type=content_type)

    async def list_all(self) -> List[str]:
        return list(self._objects)

    def get(self, key: str) -> Optional[StoredObject]:
        return self._objects.get(key)


class LocalObjectStorage(ObjectStorage):
    """Stores each object as a file; the content type goes in a sidecar file."""

    METADATA_SUFFIX = ".metadata.json"

    def __init__(self, base_dir: str | Path):
        self._base_dir = Path(base_dir).resolve()

    def _path(self, key: str) -> Path:
        path = (self._base_dir / key).resolve()
        if self._base_dir not in path.parents:
            raise ValueError(f"Object key escapes storage directory: {key}")
        return path

    def _metadata_path(self, path: Path) -> Path:
        return path.with_name(path.name + self.METADATA_SUFFIX)

    def _keys(self) -> List[str]:
        if not self._base_dir.exists():
            return []
        return sorted(
            p.relative_to(self._base_dir).as_posix()
            for p in self._base_dir.rglob("*")
            if p.is_file() and not p.name.endswith(self.METADATA_SUFFIX)
        )

    def _delete(self, key: str) -> None:
        path = self._path(key)
        path.unlink(missing_ok=True)
        self._metadata_path(path).unlink(missing_ok=True)

    def _write(self, key: str, data: bytes, content_type: str) -> None:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        self._metadata_path(path).write_text(json.dumps({"contentType": content_type}))

    async def list_prefix(self, prefix: str) -> List[str]:
        keys = await asyncio.to_thread(self._keys)
        return [k for k in keys if k.startswith(prefix)]

    async def delete(self, key: str) -> None:
        await asyncio.to_thread(self._delete, key)

    async def write(self, key: str, data: bytes, content_type: str = DEFAULT_CONTENT_TYPE) -> None:
        await asyncio.to_thread(self._write, key, data, content_type)

    async def list_all(self) -> List[str]:
        return await asyncio.to_thread(self._keys)


class FirebaseObjectStorage(ObjectStorage):
    APP_NAME = "telemetry-gateway"

    def __init__(self, bucket_name: str, credentials_path: Optional[str] = None):
        import firebase_admin
        from firebase_admin import credentials, storage

        try:
            app = firebase_admin.get_app(self.APP_NAME)
        except ValueError:
            cred = (
                credentials.Certificate(credentials_path)
                if credentials_path
                else credentials.ApplicationDefault()
            )
            app = firebase_admin.initialize_app(
                cred, {"storageBucket": bucket_name}, name=self.APP_NAME
            )

        self._bucket = storage.bucket(bucket_name, app=app)
        logger.info("[FIRMWARE] Firebase Storage bucket=%s", bucket_name)

    def _list(self, prefix: Optional[str]) -> List[str]:
        return [blob.name for blob in self._bucket.list_blobs(prefix=prefix)]

    def _write(self, key: str, data: bytes, content_type: str) -> None:
        self._bucket.blob(key).upload_from_string(data, content_type=content_type)

    async def list_prefix(self, prefix: str) -> List[str]:
        return await asyncio.to_thread(self._list, prefix)

    async def delete(self, key: str) -> None:
        await asyncio.to_thread(self._bucket.blob(key).delete)

    async def write(self, key: str, data: bytes, content_type: str = DEFAULT_CONTENT_TYPE) -> None:
        await asyncio.to_thread(self._write, key, data, content_type)

    async def list_all(self) -> List[str]:
        return await asyncio.to_thread(self._list, None)


def build_object_storage(settings: Settings) -> ObjectStorage:
    backend = settings.firmware_storage_backend
    if backend == "firebase":
        if not settings.firebase_storage_bucket:
            raise ValueError("FIREBASE_STORAGE_BUCKET is required for the firebase backend")
        return FirebaseObjectStorage(settings.firebase_storage_bucket, settings.firebase_credentials)
    if backend == "memory":
        logger.warning("[FIRMWARE] In-memory firmware storage: binaries are lost on restart")
        return InMemoryObjectStorage()
    if backend == "local":
        logger.info("[FIRMWARE] Local firmware storage dir=%s", settings.firmware_storage_dir)
        return LocalObjectStorage(settings.firmware_storage_dir)
    raise ValueError(f"Unknown FIRMWARE_STORAGE_BACKEND: {backend}")
