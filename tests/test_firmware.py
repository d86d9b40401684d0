"""
Tests for firmware version rules, object storage backends and the workflow.

Run: pytest tests/test_firmware.py -v
"""

import re

import pytest

from gateway_api.errors import NotFoundError, StorageError, ValidationError
from gateway_api.firmware.object_storage import (
    DEFAULT_CONTENT_TYPE,
    InMemoryObjectStorage,
    LocalObjectStorage,
    build_object_storage,
)
from gateway_api.firmware.versions import (
    INVALID_FILE_MESSAGE,
    INVALID_VERSION_MESSAGE,
    firmware_key,
    is_valid_firmware_version,
    validate_firmware_filename,
    version_from_key,
)
from gateway_api.firmware.workflow import FirmwareWorkflow

from .conftest import count_rows, insert_stable_pointer, make_settings


@pytest.fixture
def workflow(repository, storage) -> FirmwareWorkflow:
    return FirmwareWorkflow(repository, storage)


class FailingStorage(InMemoryObjectStorage):
    async def write(self, key, data, content_type=DEFAULT_CONTENT_TYPE):
        raise OSError("bucket unavailable")

    async def list_all(self):
        raise OSError("bucket unavailable")


# =============================================================================
# VERSIONS AND KEYS
# =============================================================================

class TestVersions:
    @pytest.mark.parametrize("version", ["1.0.0", "0.0.1", "10.20.30"])
    def test_valid(self, version):
        assert is_valid_firmware_version(version)

    @pytest.mark.parametrize("version", ["1.0", "v1.0.0", "1.0.0.0", "1.0.x", " 1.0.0", "1.0.0\n", "", None])
    def test_invalid(self, version):
        assert not is_valid_firmware_version(version)

    def test_key_round_trip(self):
        assert firmware_key("1.2.3") == "firmware/1.2.3/firmware.bin"
        assert version_from_key("firmware/1.2.3/firmware.bin") == "1.2.3"

    @pytest.mark.parametrize("key", ["firmware/1.2.3/other.bin", "backups/1.2.3/firmware.bin", "firmware/"])
    def test_foreign_keys_ignored(self, key):
        assert version_from_key(key) is None

    @pytest.mark.parametrize("filename", ["fw.txt", "fw.bin.txt", "fw", "", None])
    def test_filename_must_be_bin(self, filename):
        with pytest.raises(ValidationError, match=re.escape(INVALID_FILE_MESSAGE)):
            validate_firmware_filename(filename)


# =============================================================================
# OBJECT STORAGE
# =============================================================================

class TestLocalObjectStorage:
    async def test_write_list_delete(self, tmp_path):
        store = LocalObjectStorage(tmp_path / "blobs")

        await store.write("firmware/1.0.0/firmware.bin", b"\x00\x01", "application/octet-stream")
        await store.write("firmware/1.1.0/firmware.bin", b"\x02")

        assert await store.list_all() == ["firmware/1.0.0/firmware.bin", "firmware/1.1.0/firmware.bin"]
        assert await store.list_prefix("firmware/1.0.0/") == ["firmware/1.0.0/firmware.bin"]
        assert (tmp_path / "blobs" / "firmware" / "1.0.0" / "firmware.bin").read_bytes() == b"\x00\x01"

        await store.delete("firmware/1.0.0/firmware.bin")

        assert await store.list_all() == ["firmware/1.1.0/firmware.bin"]

    async def test_empty_directory(self, tmp_path):
        assert await LocalObjectStorage(tmp_path / "missing").list_all() == []

    async def test_key_cannot_escape_base_dir(self, tmp_path):
        store = LocalObjectStorage(tmp_path / "blobs")

        with pytest.raises(ValueError):
            await store.write("../outside.bin", b"x")


class TestBuildObjectStorage:
    def test_backends(self, tmp_path):
        db = tmp_path / "gateway.db"

        assert isinstance(build_object_storage(make_settings(db, firmware_storage_backend="memory")), InMemoryObjectStorage)
        assert isinstance(build_object_storage(make_settings(db, firmware_storage_backend="local")), LocalObjectStorage)

    def test_firebase_requires_bucket(self, tmp_path):
        with pytest.raises(ValueError):
            build_object_storage(make_settings(tmp_path / "gateway.db", firmware_storage_backend="firebase"))

    def test_unknown_backend(self, tmp_path):
        with pytest.raises(ValueError):
            build_object_storage(make_settings(tmp_path / "gateway.db", firmware_storage_backend="ftp"))


# =============================================================================
# WORKFLOW
# =============================================================================

class TestUpload:
    async def test_upload_stores_under_version_key(self, workflow, storage):
        key = await workflow.upload(b"binary", "fw.bin", "1.0.0")

        assert key == "firmware/1.0.0/firmware.bin"
        stored = storage.get(key)
        assert stored.data == b"binary"
        assert stored.content_type == DEFAULT_CONTENT_TYPE

    async def test_reupload_replaces_previous_binary(self, workflow, storage):
        await workflow.upload(b"first", "a.bin", "1.0.0")
        await workflow.upload(b"second", "b.bin", "1.0.0", content_type="application/x-binary")

        keys = await storage.list_prefix("firmware/1.0.0/")
        assert keys == ["firmware/1.0.0/firmware.bin"]
        assert storage.get(keys[0]).data == b"second"
        assert storage.get(keys[0]).content_type == "application/x-binary"

    async def test_stray_objects_under_prefix_removed(self, workflow, storage):
        await storage.write("firmware/1.0.0/old-name.bin", b"old")
        await storage.write("firmware/1.0.1/firmware.bin", b"other")

        await workflow.upload(b"new", "fw.bin", "1.0.0")

        assert await storage.list_prefix("firmware/1.0.0/") == ["firmware/1.0.0/firmware.bin"]
        assert storage.get("firmware/1.0.1/firmware.bin").data == b"other"

    async def test_non_bin_file_rejected(self, workflow, storage):
        with pytest.raises(ValidationError, match=re.escape(INVALID_FILE_MESSAGE)):
            await workflow.upload(b"text", "notes.txt", "1.0.0")

        assert await storage.list_all() == []

    async def test_version_checked_before_file(self, workflow):
        with pytest.raises(ValidationError, match=re.escape(INVALID_VERSION_MESSAGE)):
            await workflow.upload(b"text", "notes.txt", "1.0")

    async def test_storage_failure(self, repository):
        workflow = FirmwareWorkflow(repository, FailingStorage())

        with pytest.raises(StorageError):
            await workflow.upload(b"x", "fw.bin", "1.0.0")


class TestListVersions:
    async def test_empty(self, workflow):
        assert await workflow.list_versions() == []

    async def test_versions_from_keys(self, workflow, storage):
        await workflow.upload(b"a", "a.bin", "1.0.0")
        await workflow.upload(b"b", "b.bin", "1.1.0")
        await workflow.upload(b"c", "c.bin", "1.0.0")
        await storage.write("firmware/readme.txt", b"ignored")

        assert sorted(await workflow.list_versions()) == ["1.0.0", "1.1.0"]

    async def test_storage_failure(self, repository):
        workflow = FirmwareWorkflow(repository, FailingStorage())

        with pytest.raises(StorageError):
            await workflow.list_versions()


class TestStablePointer:
    async def test_not_found_when_unset(self, workflow):
        with pytest.raises(NotFoundError):
            await workflow.get_stable()

    async def test_set_then_get(self, workflow):
        await workflow.set_stable("1.0.0")
        await workflow.set_stable("2.0.0")

        assert await workflow.get_stable() == "2.0.0"

    async def test_invalid_version_not_recorded(self, workflow, engine):
        with pytest.raises(ValidationError, match=re.escape(INVALID_VERSION_MESSAGE)):
            await workflow.set_stable("2.0")

        assert await count_rows(engine, "LatestStableFirmware") == 0

    @pytest.mark.parametrize("version", ["", None])
    async def test_blank_pointer_reads_as_not_found(self, workflow, engine, version):
        await insert_stable_pointer(engine, version)

        with pytest.raises(NotFoundError):
            await workflow.get_stable()

    async def test_blank_pointer_hides_older_version(self, workflow, engine):
        await workflow.set_stable("1.0.0")
        await insert_stable_pointer(engine, "")

        with pytest.raises(NotFoundError):
            await workflow.get_stable()
