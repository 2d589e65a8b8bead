"""
Diagram upload validation utilities.

Checks uploaded model files before they reach the content store.

Dependencies: fastapi
System role: Upload validation for diagram generation endpoints
"""

from fastapi import UploadFile

from gridviz.core.exceptions import ValidationError


async def read_upload(file: UploadFile, max_bytes: int) -> bytes:
    """
    Read an uploaded model file fully into memory.

    Args:
        file: Multipart upload
        max_bytes: Largest accepted size

    Returns:
        bytes: File content

    Raises:
        ValidationError: If the upload is empty or too large
    """
    data = await file.read(max_bytes + 1)
    if not data:
        raise ValidationError("Uploaded file is empty", field="file")
    if len(data) > max_bytes:
        raise ValidationError(
            f"Uploaded file exceeds the maximum size of {max_bytes} bytes", field="file"
        )
    return data
