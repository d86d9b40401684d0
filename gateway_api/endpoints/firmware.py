"""Firmware endpoints: binary upload, version listing, stable pointer."""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile

from ..dependencies import get_firmware, require_token
from ..errors import NotFoundError, StorageError, ValidationError
from ..firmware.workflow import FirmwareWorkflow
from ..schemas import MessageOut, StableFirmwareOut

logger = logging.getLogger(__name__)

router = APIRouter(tags=["firmware"], dependencies=[Depends(require_token)])


@router.post("/firmware-update", response_model=MessageOut)
async def firmware_update(
    firmwareFile: Optional[UploadFile] = File(default=None),
    firmwareVersion: Optional[str] = Form(default=None),
    firmware: FirmwareWorkflow = Depends(get_firmware),
):
    """Upload a .bin for a major.minor.patch version, replacing any previous one."""
    logger.info(
        "[API] Firmware upload file=%s version=%s",
        firmwareFile.filename if firmwareFile else None,
        firmwareVersion,
    )

    data = await firmwareFile.read() if firmwareFile is not None else b""
    try:
        await firmware.upload(
            data=data,
            filename=firmwareFile.filename if firmwareFile else None,
            version=firmwareVersion,
            content_type=firmwareFile.content_type if firmwareFile else None,
        )
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StorageError:
        raise HTTPException(status_code=500, detail="Failed to handle firmware upload")

    return MessageOut(message="Firmware uploaded and saved successfully")


@router.get("/set-stable-latest-version", response_model=MessageOut)
async def set_stable_latest_version(
    firmwareVersion: Optional[str] = Query(default=None),
    firmware: FirmwareWorkflow = Depends(get_firmware),
):
    logger.info("[API] Setting stable latest version: %s", firmwareVersion)
    try:
        await firmware.set_stable(firmwareVersion)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StorageError:
        raise HTTPException(status_code=500, detail="Failed to set latest stable firmware version")

    return MessageOut(message="Latest stable firmware version set successfully")


@router.get("/firmware-versions", response_model=List[str])
async def firmware_versions(firmware: FirmwareWorkflow = Depends(get_firmware)):
    try:
        return await firmware.list_versions()
    except StorageError:
        raise HTTPException(status_code=500, detail="Failed to fetch firmware versions")


@router.get("/latest-stable-firmware", response_model=StableFirmwareOut)
async def latest_stable_firmware(firmware: FirmwareWorkflow = Depends(get_firmware)):
    try:
        version = await firmware.get_stable()
    except NotFoundError:
        raise HTTPException(status_code=404, detail="No stable firmware version found")
    except StorageError:
        raise HTTPException(status_code=500, detail="Internal Server Error")

    return StableFirmwareOut(firmware_version=version)
