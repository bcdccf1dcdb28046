"""Checks on an uploaded file before it reaches the validation pipeline."""

from __future__ import annotations

from pdcm_validator.exceptions import BadRequestException

ACCEPTED_FORMATS = [
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.ms-excel",
]


def validate_upload(file_name: str | None, content_type: str | None, content: bytes | None) -> bytes:
    """Make sure an upload is present and is an Excel file.

    Args:
        file_name: Original name of the uploaded file
        content_type: MIME type reported for the upload
        content: Raw file bytes

    Returns:
        The file bytes, unchanged

    Raises:
        BadRequestException: If no file was uploaded or its type is not accepted
    """
    if not file_name or content is None:
        raise BadRequestException("No file uploaded")

    mimetype = content_type or "none"
    if mimetype not in ACCEPTED_FORMATS:
        raise BadRequestException(
            f"Please upload an Excel file. Expected: {','.join(ACCEPTED_FORMATS)}. Obtained: {mimetype}."
        )
    return content
