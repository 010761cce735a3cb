"""
Input validation utilities.

This module validates uploaded guest-list files before they reach the
CSV import service.
"""

import logging
from fastapi import UploadFile, HTTPException, status

from core.config import get_settings

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = [
    'text/csv',
    'text/plain',
    'application/csv',
    'application/vnd.ms-excel',  # what Windows browsers send for .csv
    'application/octet-stream',
]
ALLOWED_EXTENSIONS = ('.csv', '.txt')


async def validate_csv_upload(file: UploadFile) -> bytes:
    """
    Validate an uploaded CSV file.

    Checks:
    1. Content type (or file extension) looks like CSV
    2. File size is within limits

    Args:
        file: Uploaded file from FastAPI

    Returns:
        bytes: Validated file data

    Raises:
        HTTPException 400: If validation fails
    """
    max_size = get_settings().CSV_MAX_FILE_SIZE
    filename = (file.filename or "").lower()
    content_type = (file.content_type or "").split(";")[0].strip().lower()

    if content_type not in ALLOWED_CONTENT_TYPES and not filename.endswith(ALLOWED_EXTENSIONS):
        logger.warning(f"Invalid upload type: {file.content_type} ({file.filename})")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid file type. Upload the guest list as a .csv file."
        )

    try:
        file_data = await file.read()
    except Exception as e:
        logger.error(f"Error reading file: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Error reading file: {str(e)}"
        )

    file_size = len(file_data)
    if file_size > max_size:
        logger.warning(f"File too large: {file_size} bytes (max: {max_size})")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"File too large. Maximum size: {max_size / (1024 * 1024):.1f}MB"
        )

    return file_data
