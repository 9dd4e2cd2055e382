"""
Spreadsheet upload. Files are stored under ``UPLOAD_DIR`` with a timestamp
added to the name so repeated uploads never overwrite each other.
"""

import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import APIRouter, File, HTTPException, UploadFile

from drugbot.exceptions import InvalidRequestError
from drugbot.utils.config import get_settings

logger = logging.getLogger(__name__)

router = APIRouter()

ALLOWED_EXTENSIONS = (".xlsx", ".xls")
_EXTENSION_PATTERN = re.compile(r"\.(xlsx|xls)$", re.IGNORECASE)


def upload_timestamp(now: Optional[datetime] = None) -> str:
    """UTC ISO timestamp with ':' and '.' replaced, e.g. 2024-03-01T09-15-02-123Z."""
    now = now or datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H-%M-%S-") + f"{now.microsecond // 1000:03d}Z"


def stored_file_name(original_name: str, now: Optional[datetime] = None) -> str:
    """
    Name an uploaded spreadsheet is saved under: ``<stem>_<timestamp><ext>``.

    Any directory part of ``original_name`` is dropped.
    """
    base = Path(original_name).name
    extension = ".xlsx" if base.lower().endswith(".xlsx") else ".xls"
    stem = _EXTENSION_PATTERN.sub("", base)
    return f"{stem}_{upload_timestamp(now)}{extension}"


@router.post("/upload")
def upload_file(file: Optional[UploadFile] = File(default=None)) -> Dict[str, Any]:
    """Accept an Excel workbook and save it to the upload directory."""
    if file is None or not file.filename:
        raise InvalidRequestError("No file provided")
    if not file.filename.lower().endswith(ALLOWED_EXTENSIONS):
        raise InvalidRequestError("Only Excel files (.xlsx or .xls) are allowed")

    upload_dir = Path(get_settings().upload_dir)
    file_name = stored_file_name(file.filename)
    try:
        content = file.file.read()
        upload_dir.mkdir(parents=True, exist_ok=True)
        (upload_dir / file_name).write_bytes(content)
    except OSError as e:
        logger.error(f"Upload of {file.filename} failed: {e}")
        raise HTTPException(status_code=500, detail="Failed to upload file") from e

    logger.info(f"Stored upload {file.filename} as {file_name} ({len(content)} bytes)")
    return {
        "message": "File uploaded successfully",
        "fileName": file_name,
        "originalName": file.filename,
        "size": len(content),
    }
