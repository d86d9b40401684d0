"""Firmware version strings and object keys."""

from __future__ import annotations

import re
from pathlib import PurePosixPath
from typing import Optional

from ..errors import ValidationError

FIRMWARE_VERSION_PATTERN = re.compile(r"^\d+\.\d+\.\d+$")
FIRMWARE_KEY_PATTERN = re.compile(r"^firmware/([\d.]+)/firmware\.bin$")
FIRMWARE_EXTENSION = ".bin"

INVALID_VERSION_MESSAGE = "Invalid firmware version format. Use major.minor.patch (e.g., 1.0.2)"
INVALID_FILE_MESSAGE = "Please upload a .bin file"


def is_valid_firmware_version(version: Optional[str]) -> bool:
    if not isinstance(version, str):
        return False
    # fullmatch: "$" alone would accept a trailing newline
    return FIRMWARE_VERSION_PATTERN.fullmatch(version) is not None


def validate_firmware_version(version: Optional[str]) -> str:
    if not is_valid_firmware_version(version):
        raise ValidationError(INVALID_VERSION_MESSAGE)
    return version


def validate_firmware_filename(filename: Optional[str]) -> str:
    if not filename or PurePosixPath(filename).suffix != FIRMWARE_EXTENSION:
        raise ValidationError(INVALID_FILE_MESSAGE)
    return filename


def firmware_prefix(version: str) -> str:
    return f"firmware/{version}/"


def firmware_key(version: str) -> str:
    return f"{firmware_prefix(version)}firmware.bin"


def version_from_key(key: str) -> Optional[str]:
    match = FIRMWARE_KEY_PATTERN.match(key)
    return match.group(1) if match else None
