"""
Stores uploaded resume PDFs on local disk.
"""
import logging
import os
import time
import uuid
from pathlib import Path

from fastapi import HTTPException, UploadFile, status

from resume_scanner.core import config

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".pdf"}
CHUNK_SIZE = 64 * 1024


def get_upload_dir() -> Path:
    """Upload directory for this process, created on first use."""
    upload_dir = Path(config.UPLOAD_DIR)
    upload_dir.mkdir(parents=True, exist_ok=True)
    return upload_dir


def validate_pdf(file: UploadFile) -> str:
    """
    Reject anything that is not a PDF by both extension and content type.

    Returns:
        The lower-cased file extension
    """
    if not file or not file.filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file uploaded")

    ext = os.path.splitext(file.filename)[1].lower()
    content_type = (file.content_type or "").lower()
    if ext not in ALLOWED_EXTENSIONS or "pdf" not in content_type:
        logger.warning(f"Rejected upload: filename={file.filename}, content_type={file.content_type}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Error: PDFs Only!")
    return ext


async def save_pdf_upload(file: UploadFile, field_name: str = "resume") -> str:
    """
    Validate and write an uploaded PDF to the upload directory.

    The file is streamed in chunks and removed again if it turns out to be
    larger than ``MAX_UPLOAD_BYTES``.

    Returns:
        Path of the stored file

    Raises:
        HTTPException: 400 for a missing file, wrong type or oversize upload
    """
    ext = validate_pdf(file)
    max_bytes = config.MAX_UPLOAD_BYTES
    dest = get_upload_dir() / f"{field_name}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}{ext}"

    written = 0
    too_large = False
    with open(dest, "wb") as out:
        while True:
            chunk = await file.read(CHUNK_SIZE)
            if not chunk:
                break
            written += len(chunk)
            if written > max_bytes:
                too_large = True
                break
            out.write(chunk)

    if too_large:
        dest.unlink(missing_ok=True)
        logger.warning(f"Rejected upload over {max_bytes} bytes: filename={file.filename}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"File too large. Maximum size is {max_bytes} bytes."
        )

    if written == 0:
        dest.unlink(missing_ok=True)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Uploaded file is empty")

    logger.info(f"Stored upload: path={dest}, bytes={written}")
    return str(dest)
