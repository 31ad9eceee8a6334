"""
Base service class for the Image Caption service.
"""

from abc import ABC
from core.logging import LoggerMixin


class BaseService(LoggerMixin, ABC):
    """Base service class with common functionality."""

    def is_ready(self) -> bool:
        """Whether the service has what it needs to handle requests."""
        return True

    def service_details(self) -> dict:
        """Extra fields reported by health_check."""
        return {}

    def health_check(self) -> dict:
        """
        Perform a health check for the service.

        Returns:
            Health check results
        """
        try:
            ready = self.is_ready()

            return {
                "service": self.__class__.__name__,
                "status": "healthy" if ready else "unhealthy",
                **self.service_details()
            }

        except Exception as e:
            self.logger.error(f"Health check failed for {self.__class__.__name__}: {e}")
            return {
                "service": self.__class__.__name__,
                "status": "unhealthy",
                "error": str(e)
            }
