"""
Custom exceptions for the Image Caption service.
"""

from typing import Any, Dict, Optional
from fastapi import status


class CaptionServiceException(Exception):
    """Base exception for all caption service errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "GENERIC_ERROR",
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationException(CaptionServiceException):
    """Exception raised for request validation errors."""

    def __init__(self, message: str, field: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"field": field, **(details or {})}
        )


class FileUploadException(CaptionServiceException):
    """Exception raised for file upload errors."""

    def __init__(self, message: str, filename: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            error_code="FILE_UPLOAD_ERROR",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"filename": filename, **(details or {})}
        )


class ConfigurationException(CaptionServiceException):
    """Exception raised when required configuration is missing."""

    def __init__(self, message: str, missing: Optional[list] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            error_code="CONFIGURATION_ERROR",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details={"missing": missing or [], **(details or {})}
        )


class CaptionGenerationException(CaptionServiceException):
    """Exception raised when the vision model call fails."""

    def __init__(self, message: str, upstream_status: Optional[int] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            error_code="CAPTION_GENERATION_ERROR",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details={"upstream_status": upstream_status, **(details or {})}
        )
