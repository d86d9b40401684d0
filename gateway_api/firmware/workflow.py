"""Firmware version workflow.

Upload: one binary per version. Any object already stored under the version
prefix is deleted before the new binary is written.
Listing: versions are read back from the object keys.
Stable pointer: delegated to the relational store (append-only log).
"""

from __future__ import annotations

import logging
from typing import List

from ..errors import NotFoundError, StorageError
from ..persistence.repository import TelemetryRepository
from .object_storage import DEFAULT_CONTENT_TYPE, ObjectStorage
from .versions import (
    firmware_key,
    firmware_prefix,
    validate_firmware_filename,
    validate_firmware_version,
    version_from_key,
)

logger = logging.getLogger(__name__)


class FirmwareWorkflow:
    def __init__(self, repository: TelemetryRepository, storage: ObjectStorage):
        self._repository = repository
        self._storage = storage

    async def upload(
        self,
        data: bytes,
        filename: str | None,
        version: str | None,
        content_type: str | None = None,
    ) -> str:
        """Store ``data`` as the binary for ``version``.

        Returns:
            Object key of the stored binary, once the write has completed.

        Raises:
            ValidationError: malformed version or non-.bin filename.
            StorageError: the object store failed.
        """
        validate_firmware_version(version)
        validate_firmware_filename(filename)

        prefix = firmware_prefix(version)
        key = firmware_key(version)
        try:
            for existing in await self._storage.list_prefix(prefix):
                await self._storage.delete(existing)
                logger.info("[FIRMWARE] Deleted existing file: %s", existing)

            await self._storage.write(key, data, content_type or DEFAULT_CONTENT_TYPE)
        except Exception as e:
            logger.exception("[FIRMWARE] Upload of version %s failed", version)
            raise StorageError("firmware_upload", e) from e

        logger.info("[FIRMWARE] File uploaded successfully: %s (%d bytes)", key, len(data))
        return key

    async def list_versions(self) -> List[str]:
        try:
            keys = await self._storage.list_all()
        except Exception as e:
            logger.exception("[FIRMWARE] Error listing firmware versions")
            raise StorageError("firmware_list", e) from e

        versions: dict[str, None] = {}
        for key in keys:
            version = version_from_key(key)
            if version is not None:
                versions.setdefault(version, None)
        return list(versions)

    async def set_stable(self, version: str | None) -> None:
        validate_firmware_version(version)
        await self._repository.set_stable_firmware_version(version)

    async def get_stable(self) -> str:
        pointer = await self._repository.latest_stable_firmware_version()
        if pointer is None or not pointer.firmware_version:
            raise NotFoundError("No stable firmware version found")
        return pointer.firmware_version
