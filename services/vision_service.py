"""
Vision service for generating image captions with an Azure OpenAI vision deployment.
"""

from typing import Any, Awaitable, Callable, Dict, List, Optional
import httpx
from openai import AsyncAzureOpenAI, AuthenticationError, NotFoundError
from core.exceptions import CaptionGenerationException
from services.base import BaseService
from utils.images_upload_utils import build_data_url
from utils.retry_utils import with_retry, is_rate_limit_error, get_status_code

DEFAULT_CAPTION_PROMPT = (
    "Please analyze this image and generate a detailed, natural language caption that describes "
    "what you see. Include relevant details about the subjects, actions, setting, colors, and mood "
    "if applicable. Keep the caption concise but informative (1-3 sentences)."
)

DEFAULT_MAX_TOKENS = 300
CUSTOM_PROMPT_MAX_TOKENS = 500
TEMPERATURE = 0.7

RATE_LIMIT_MESSAGE = "API rate limit exceeded. Please wait a moment and try again."


class VisionService(BaseService):
    """Generates captions by sending an image and an instruction to a vision model."""

    def __init__(
        self,
        api_key: str,
        endpoint: str,
        model_id: str,
        api_version: str = "2024-02-15-preview",
        max_retries: int = 3,
        base_delay: float = 1.0,
        client: Optional[Any] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ):
        self.model_id = model_id
        self.endpoint = endpoint
        self.max_retries = max_retries
        self.base_delay = base_delay
        self._sleep = sleep
        # with_retry owns the retry budget, so the SDK must not retry underneath it
        self.client = client or AsyncAzureOpenAI(
            api_key=api_key,
            azure_endpoint=endpoint,
            api_version=api_version,
            max_retries=0,
            http_client=http_client,
        )

    @staticmethod
    def build_messages(image_bytes: bytes, mime_type: str, prompt: str) -> List[Dict[str, Any]]:
        """Single user message holding the instruction and the image as a data URL."""
        return [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": prompt},
                    {
                        "type": "image_url",
                        "image_url": {
                            "url": build_data_url(image_bytes, mime_type),
                            "detail": "auto",
                        },
                    },
                ],
            }
        ]

    async def _complete(self, messages: List[Dict[str, Any]], max_tokens: int, empty_message: str) -> str:
        response = await self.client.chat.completions.create(
            model=self.model_id,
            messages=messages,
            max_tokens=max_tokens,
            temperature=TEMPERATURE,
        )

        content = None
        if response.choices:
            message = response.choices[0].message
            content = message.content if message else None

        if not content or not content.strip():
            raise ValueError(empty_message)

        return content.strip()

    async def _request_caption(
        self,
        image_bytes: bytes,
        mime_type: str,
        prompt: str,
        max_tokens: int,
        empty_message: str,
    ) -> str:
        messages = self.build_messages(image_bytes, mime_type, prompt)

        try:
            caption = await with_retry(
                lambda: self._complete(messages, max_tokens, empty_message),
                max_retries=self.max_retries,
                base_delay=self.base_delay,
                sleep=self._sleep,
            )
        except Exception as e:
            self.logger.error(f"Vision service error: {e}")
            raise self._map_error(e) from e

        self.logger.info(f"Caption generated ({len(caption)} chars) with model {self.model_id}")
        return caption

    @staticmethod
    def _map_error(error: Exception) -> CaptionGenerationException:
        """Translate an upstream failure into a client-facing message."""
        status_code = get_status_code(error)
        message = str(error)

        if isinstance(error, AuthenticationError) or status_code == 401 or "401" in message:
            return CaptionGenerationException("Invalid API key or unauthorized access", upstream_status=401)
        if isinstance(error, NotFoundError) or status_code == 404 or "404" in message:
            return CaptionGenerationException("Model deployment not found", upstream_status=404)
        if is_rate_limit_error(error):
            return CaptionGenerationException(RATE_LIMIT_MESSAGE, upstream_status=429)
        return CaptionGenerationException(
            f"Failed to generate caption: {message}",
            upstream_status=status_code
        )

    async def generate_caption(self, image_bytes: bytes, mime_type: str) -> str:
        """
        Generate a caption for an image.

        Args:
            image_bytes: The image file contents
            mime_type: The MIME type of the image

        Returns:
            Generated caption string

        Raises:
            CaptionGenerationException: If the model call fails or returns no content
        """
        return await self._request_caption(
            image_bytes,
            mime_type,
            DEFAULT_CAPTION_PROMPT,
            DEFAULT_MAX_TOKENS,
            "No caption generated from the AI model",
        )

    async def generate_caption_with_prompt(self, image_bytes: bytes, mime_type: str, prompt: str) -> str:
        """
        Generate a caption following a caller-supplied instruction.

        Args:
            image_bytes: The image file contents
            mime_type: The MIME type of the image
            prompt: Instruction sent alongside the image

        Returns:
            Generated text

        Raises:
            CaptionGenerationException: If the model call fails or returns no content
        """
        return await self._request_caption(
            image_bytes,
            mime_type,
            prompt,
            CUSTOM_PROMPT_MAX_TOKENS,
            "No response generated from the AI model",
        )

    async def close(self) -> None:
        """Release the HTTP connections held by the OpenAI client."""
        close = getattr(self.client, "close", None)
        if close is not None:
            await close()

    def is_ready(self) -> bool:
        return bool(self.client is not None and self.model_id and self.endpoint)

    def service_details(self) -> dict:
        return {
            "model_id": self.model_id,
            "endpoint": self.endpoint,
            "max_retries": self.max_retries,
        }
