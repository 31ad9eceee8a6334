"""
Caption API routes for the Image Caption service.
"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from models.caption_model import CaptionResponse, HealthResponse, UploadedImage
from services.vision_service import VisionService
from core.config import get_settings
from core.logging import get_logger
from core.dependencies import get_validated_image, get_custom_prompt, get_vision_service
from utils.images_upload_utils import format_file_size

logger = get_logger(__name__)
router = APIRouter(prefix="/api/caption", tags=["caption"])

ERROR_RESPONSES = {
    400: {"model": CaptionResponse, "description": "Invalid upload or missing prompt"},
    500: {"model": CaptionResponse, "description": "Caption generation failed"}
}


@router.post(
    "",
    response_model=CaptionResponse,
    response_model_exclude_none=True,
    responses=ERROR_RESPONSES,
    summary="Generate Caption",
    description="Upload an image and generate a caption for it."
)
async def generate_caption(
    image: UploadedImage = Depends(get_validated_image),
    vision_service: VisionService = Depends(get_vision_service)
):
    """
    Generate a caption for an uploaded image.

    - **image**: image file (JPEG, PNG, GIF, WebP), at most 10MB
    """
    logger.info(f"Caption request for {image.filename!r} ({image.content_type}, {len(image.content)} bytes)")

    caption = await vision_service.generate_caption(image.content, image.content_type)

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=CaptionResponse(success=True, caption=caption).to_content()
    )


@router.post(
    "/custom",
    response_model=CaptionResponse,
    response_model_exclude_none=True,
    responses=ERROR_RESPONSES,
    summary="Generate Caption With Custom Prompt",
    description="Upload an image and generate text following a custom prompt."
)
async def generate_custom_caption(
    image: UploadedImage = Depends(get_validated_image),
    prompt: str = Depends(get_custom_prompt),
    vision_service: VisionService = Depends(get_vision_service)
):
    """
    Generate text for an uploaded image following a caller-supplied prompt.

    - **image**: image file (JPEG, PNG, GIF, WebP), at most 10MB
    - **prompt**: instruction for the model; surrounding whitespace is trimmed
    """
    logger.info(f"Custom caption request for {image.filename!r} with prompt of {len(prompt)} chars")

    caption = await vision_service.generate_caption_with_prompt(image.content, image.content_type, prompt)

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=CaptionResponse(success=True, caption=caption).to_content()
    )


@router.get("/health", response_model=HealthResponse, summary="Caption Health Check")
async def caption_health():
    """Report supported formats and the upload ceiling."""
    settings = get_settings()
    return HealthResponse(
        supportedFormats=list(settings.supported_image_types),
        maxFileSize=format_file_size(settings.max_file_size)
    )
