"""
Request dependencies for the caption endpoints.

FastAPI resolves these in declaration order, so upload and prompt validation
run before the vision service is built.
"""

from typing import Optional
from fastapi import File, Form, UploadFile
from core.config import Settings, get_settings, get_missing_settings
from core.exceptions import ConfigurationException, FileUploadException, ValidationException
from core.logging import get_logger
from models.caption_model import UploadedImage
from services.vision_service import VisionService
from utils.images_upload_utils import validate_image_file

logger = get_logger(__name__)


async def get_validated_image(
    image: Optional[UploadFile] = File(None, description="Image file (JPEG, PNG, GIF or WebP)")
) -> UploadedImage:
    """
    Dependency that reads and validates the uploaded image.

    Raises:
        ValidationException: If the file is missing, empty or of an unsupported type
        FileUploadException: If the file exceeds the size ceiling
    """
    settings = get_settings()

    content = None
    content_type = None
    filename = None
    if image is not None:
        filename = image.filename
        content_type = image.content_type
        # One byte past the ceiling is enough to detect an oversized upload
        content = await image.read(settings.max_file_size + 1)

    validation = validate_image_file(
        content,
        content_type,
        settings.max_file_size,
        settings.supported_image_types,
    )
    if not validation.is_valid:
        logger.warning(f"Rejected upload {filename!r}: {validation.error}")
        if validation.size_exceeded:
            raise FileUploadException(validation.error, filename=filename)
        raise ValidationException(validation.error, field="image")

    return UploadedImage(content=content, content_type=content_type.lower(), filename=filename)


async def get_custom_prompt(
    prompt: Optional[str] = Form(None, description="Instruction sent to the model with the image")
) -> str:
    """
    Dependency that returns the trimmed custom prompt.

    Raises:
        ValidationException: If the prompt is missing or blank
    """
    if not prompt or not prompt.strip():
        raise ValidationException("Custom prompt is required", field="prompt")
    return prompt.strip()


class VisionServiceManager:
    """Holds one vision service per settings object so the OpenAI client is reused across requests."""

    def __init__(self):
        self._service: Optional[VisionService] = None
        self._settings: Optional[Settings] = None

    async def get(self, settings: Settings) -> VisionService:
        if self._service is not None and self._settings is settings:
            return self._service

        # Settings were reloaded, drop the client built from the old ones
        await self.close()

        self._service = VisionService(
            api_key=settings.azure_openai_api_key,
            endpoint=settings.azure_openai_endpoint,
            model_id=settings.azure_openai_model_id,
            api_version=settings.azure_openai_api_version,
            max_retries=settings.caption_max_retries,
            base_delay=settings.caption_retry_base_delay,
        )
        self._settings = settings
        logger.info(f"Vision service ready for model {settings.azure_openai_model_id}")
        return self._service

    async def close(self) -> None:
        if self._service is None:
            return
        service, self._service, self._settings = self._service, None, None
        await service.close()


vision_manager = VisionServiceManager()


async def get_vision_service() -> VisionService:
    """
    Dependency to get the shared vision service.

    Raises:
        ConfigurationException: If the Azure OpenAI settings are incomplete
    """
    settings = get_settings()

    missing = get_missing_settings(settings)
    if missing:
        logger.error(f"Vision service unavailable, missing: {', '.join(missing)}")
        raise ConfigurationException(
            "Missing required Azure OpenAI environment variables",
            missing=missing
        )

    return await vision_manager.get(settings)
