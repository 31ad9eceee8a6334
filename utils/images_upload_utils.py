import base64
from typing import Optional, Sequence
from core.config import SUPPORTED_IMAGE_TYPES
from models.caption_model import ValidationResult


def is_supported_image_type(content_type: Optional[str], supported_types: Sequence[str] = SUPPORTED_IMAGE_TYPES) -> bool:
    return bool(content_type) and content_type.lower() in supported_types


def format_file_size(size_bytes: int) -> str:
    """ Render a byte count the way it is shown to clients, e.g. 10485760 -> "10MB" """
    mb = size_bytes / (1024 * 1024)
    if mb >= 1:
        return f"{mb:g}MB"
    return f"{size_bytes / 1024:g}KB"


def validate_image_file(
    content: Optional[bytes],
    content_type: Optional[str],
    max_file_size: int,
    supported_types: Sequence[str] = SUPPORTED_IMAGE_TYPES,
) -> ValidationResult:
    """
    Validate an uploaded image.

    Args:
        content: Raw file bytes, or None when no file was sent
        content_type: Declared MIME type of the upload
        max_file_size: Upload ceiling in bytes
        supported_types: Allowed MIME types

    Returns:
        ValidationResult with the first failing check's message
    """
    if content is None:
        return ValidationResult(is_valid=False, error="No image file provided")

    if not is_supported_image_type(content_type, supported_types):
        return ValidationResult(
            is_valid=False,
            error=f"Invalid file type: {content_type}. Supported: {', '.join(supported_types)}",
        )

    if len(content) > max_file_size:
        return ValidationResult(
            is_valid=False,
            error=f"File size exceeds the {format_file_size(max_file_size)} limit",
            size_exceeded=True,
        )

    if len(content) == 0:
        return ValidationResult(is_valid=False, error="Empty file uploaded")

    return ValidationResult(is_valid=True)


def build_data_url(image_bytes: bytes, mime_type: str) -> str:
    encoded = base64.b64encode(image_bytes).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"
