import base64

from core.config import get_settings
from utils.images_upload_utils import (
    SUPPORTED_IMAGE_TYPES,
    build_data_url,
    format_file_size,
    validate_image_file,
)

LIMIT = 10 * 1024 * 1024


def test_accepts_supported_image():
    result = validate_image_file(b"\xff\xd8\xff", "image/jpeg", LIMIT)
    assert result.is_valid
    assert result.error is None


def test_missing_file():
    result = validate_image_file(None, None, LIMIT)
    assert not result.is_valid
    assert result.error == "No image file provided"


def test_rejects_unsupported_type():
    result = validate_image_file(b"%PDF-1.7", "application/pdf", LIMIT)
    assert not result.is_valid
    assert result.error == (
        "Invalid file type: application/pdf. Supported: image/jpeg, image/png, image/gif, image/webp"
    )


def test_rejects_empty_file():
    result = validate_image_file(b"", "image/png", LIMIT)
    assert not result.is_valid
    assert result.error == "Empty file uploaded"


def test_rejects_oversized_file():
    result = validate_image_file(b"x" * (LIMIT + 1), "image/webp", LIMIT)
    assert not result.is_valid
    assert result.size_exceeded
    assert result.error == "File size exceeds the 10MB limit"


def test_file_at_limit_is_accepted():
    assert validate_image_file(b"x" * 2048, "image/gif", 2048).is_valid


def test_mime_type_match_ignores_case():
    assert validate_image_file(b"GIF89a", "IMAGE/GIF", LIMIT).is_valid


def test_format_file_size():
    assert format_file_size(LIMIT) == "10MB"
    assert format_file_size(1536 * 1024) == "1.5MB"
    assert format_file_size(512 * 1024) == "512KB"


def test_build_data_url():
    url = build_data_url(b"hello", "image/png")
    prefix = "data:image/png;base64,"
    assert url.startswith(prefix)
    assert base64.b64decode(url[len(prefix):]) == b"hello"


def test_supported_types_constant():
    assert set(SUPPORTED_IMAGE_TYPES) == {"image/jpeg", "image/png", "image/gif", "image/webp"}


def test_settings_and_validation_share_one_allow_list():
    settings = get_settings()

    assert tuple(settings.supported_image_types) == SUPPORTED_IMAGE_TYPES
    assert validate_image_file(b"GIF89a", "image/gif", LIMIT).is_valid
