# app/core/storage.py

import os
import re
import secrets
import time
from pathlib import Path
from typing import Optional

from fastapi import UploadFile
from fastapi.concurrency import run_in_threadpool
from loguru import logger

from app.core.config import Settings
from app.core.exceptions import AttachmentTooLargeError, MissingAttachmentError
from app.schemas.form import AttachmentMeta

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def ensure_upload_dir(settings: Settings) -> Path:
    path = Path(settings.UPLOAD_DIR)
    path.mkdir(parents=True, exist_ok=True)
    return path


def safe_original_name(filename: Optional[str]) -> str:
    """Basename only, with anything outside [A-Za-z0-9._-] collapsed to '_'."""
    name = os.path.basename((filename or "").replace("\\", "/"))
    name = _UNSAFE_CHARS.sub("_", name).strip("._")
    return name or "file"


def make_stored_name(filename: Optional[str]) -> str:
    """
    `<epoch-ms>-<random>-<original>`: the millisecond clock plus a random
    suffix keeps concurrent uploads of the same file apart.
    """
    return f"{time.time_ns() // 1_000_000}-{secrets.randbelow(10**9)}-{safe_original_name(filename)}"


async def save_attachment(file: Optional[UploadFile], settings: Settings) -> AttachmentMeta:
    """
    Store an uploaded attachment in UPLOAD_DIR.
    - Absent or zero-byte upload -> MissingAttachmentError.
    - Larger than MAX_UPLOAD_SIZE -> AttachmentTooLargeError.
    - Returns metadata; the binary itself never goes into the record.
    """
    if file is None:
        raise MissingAttachmentError()

    content = await file.read()

    if len(content) == 0:
        raise MissingAttachmentError()

    if len(content) > settings.MAX_UPLOAD_SIZE:
        raise AttachmentTooLargeError(settings.MAX_UPLOAD_SIZE)

    stored_name = make_stored_name(file.filename)
    target = ensure_upload_dir(settings) / stored_name

    await run_in_threadpool(target.write_bytes, content)
    logger.info(f"Stored attachment {stored_name} ({len(content)} bytes)")

    return AttachmentMeta(
        original_name=file.filename or stored_name,
        stored_name=stored_name,
        content_type=file.content_type or "application/octet-stream",
        size=len(content),
        path=f"{settings.UPLOADS_URL_PREFIX.rstrip('/')}/{stored_name}",
    )


async def discard_attachment(meta: Optional[AttachmentMeta], settings: Settings) -> None:
    """Remove a stored file whose request was rejected after the upload."""
    if meta is None:
        return

    target = Path(settings.UPLOAD_DIR) / meta.stored_name
    try:
        await run_in_threadpool(target.unlink, missing_ok=True)
        logger.info(f"Discarded attachment {meta.stored_name}")
    except OSError as e:
        logger.warning(f"Failed to discard attachment {meta.stored_name}: {e}")
