"""
Upload checks for documents sent to /api/documents.
"""

import os
import re
from typing import BinaryIO

from fastapi import HTTPException, UploadFile, status

# Extension -> MIME types a browser may report for it
DOCUMENT_TYPES = {
    ".pdf": {"application/pdf"},
    ".png": {"image/png"},
    ".jpg": {"image/jpeg"},
    ".jpeg": {"image/jpeg"},
    ".doc": {"application/msword"},
    ".docx": {"application/vnd.openxmlformats-officedocument.wordprocessingml.document"},
}

MAX_DOCUMENT_BYTES = 10 * 1024 * 1024

FALLBACK_FILENAME = "unnamed_file"


def document_extension(filename: str) -> str:
    return os.path.splitext(filename.lower())[1]


def is_allowed_document(filename: str, content_type: str = None) -> bool:
    """
    True when the extension is a supported document type and the reported
    MIME type (if any) belongs to that extension.
    """
    mime_types = DOCUMENT_TYPES.get(document_extension(filename))
    if mime_types is None:
        return False
    return not content_type or content_type in mime_types


def stream_size(stream: BinaryIO) -> int:
    """Byte length of a seekable stream; the position is left at the start."""
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(0)
    return size


async def validate_upload_file(file: UploadFile) -> int:
    """
    Check an uploaded document before it is stored.

    Returns:
        Size of the upload in bytes

    Raises:
        HTTPException: 400 for a missing name or unsupported type, 413 for an
            empty or oversized file
    """
    if not file.filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No filename provided")

    if not is_allowed_document(file.filename, file.content_type):
        allowed = ", ".join(sorted(DOCUMENT_TYPES))
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"File type not allowed. Allowed types: {allowed}"
        )

    size = stream_size(file.file)
    if not 0 < size <= MAX_DOCUMENT_BYTES:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File is empty or larger than {MAX_DOCUMENT_BYTES // (1024 * 1024)}MB"
        )

    return size


def sanitize_filename(filename: str) -> str:
    """Reduce a client-supplied name to a safe basename."""
    name = os.path.basename(filename.replace("\\", "/"))
    name = re.sub(r"[^\w\-.]", "_", name)
    if name in ("", ".", ".."):
        return FALLBACK_FILENAME
    return name
