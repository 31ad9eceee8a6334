"""
Pydantic models for caption generation.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional
from pydantic import BaseModel, Field


def current_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2024-05-01T12:00:00.000Z"""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class CaptionResponse(BaseModel):
    """Response envelope returned by every caption endpoint."""
    success: bool = False
    caption: Optional[str] = None
    error: Optional[str] = None
    timestamp: str = Field(default_factory=current_timestamp)

    def to_content(self) -> dict:
        """JSON body with unset optional fields left out."""
        return self.model_dump(exclude_none=True)


class ValidationResult(BaseModel):
    """Outcome of validating an uploaded image."""
    is_valid: bool
    error: Optional[str] = None
    size_exceeded: bool = False


class UploadedImage(BaseModel):
    """An image upload that passed validation."""
    content: bytes
    content_type: str
    filename: Optional[str] = None


class HealthResponse(BaseModel):
    """Response model for the caption health check."""
    status: str = "healthy"
    timestamp: str = Field(default_factory=current_timestamp)
    supportedFormats: List[str]
    maxFileSize: str


class ApiInfoResponse(BaseModel):
    """Response model for the API description endpoint."""
    name: str
    version: str
    endpoints: Dict[str, str]
    documentation: str
