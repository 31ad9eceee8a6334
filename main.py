"""
Main application file for the AI Image Caption Generator API.
Wires configuration, logging, middleware, error handling and the caption routes.
"""

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager

# Core imports
from core.config import get_settings, get_missing_settings, validate_required_settings
from core.logging import setup_logging, get_logger
from core.middleware import RequestLoggingMiddleware
from core.exceptions import CaptionServiceException
from core.dependencies import get_vision_service, vision_manager
from models.caption_model import ApiInfoResponse, CaptionResponse

# API routes
from api.caption_router import router as caption_router

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events."""
    settings = get_settings()
    logger.info(f"Starting {settings.app_name} on http://{settings.host}:{settings.port}")

    try:
        validate_required_settings(settings)
        if not get_missing_settings(settings):
            logger.info("All required environment variables are configured")
        logger.info(f"Configuration validated - Environment: {settings.environment.value}")

    except Exception as e:
        logger.error(f"Failed to initialize application: {e}")
        raise

    yield

    logger.info(f"Shutting down {settings.app_name}")
    await vision_manager.close()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    setup_logging()

    app = FastAPI(
        title=settings.app_name,
        description="Generates natural-language captions for uploaded images with a hosted vision model",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
        debug=settings.debug
    )

    # Errors are rendered by the exception handlers below, inside this middleware
    app.add_middleware(RequestLoggingMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    app.include_router(caption_router)

    @app.get("/", tags=["root"])
    async def root():
        """Root endpoint with basic application information."""
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "environment": settings.environment.value,
            "status": "healthy"
        }

    @app.get("/api", tags=["root"], response_model=ApiInfoResponse)
    async def api_info():
        """Describe the available endpoints."""
        return ApiInfoResponse(
            name=settings.app_name,
            version=settings.app_version,
            endpoints={
                "POST /api/caption": "Generate caption for uploaded image",
                "POST /api/caption/custom": "Generate caption with custom prompt",
                "GET /api/caption/health": "Health check endpoint",
            },
            documentation="Interactive docs are served at /docs when DEBUG=true"
        )

    @app.get("/health", tags=["health"])
    async def health_check():
        """Health check endpoint for monitoring."""
        try:
            vision_health = (await get_vision_service()).health_check()
        except CaptionServiceException as e:
            vision_health = {"service": "VisionService", "status": "unhealthy", "error": e.message}

        return {
            "status": "healthy" if vision_health["status"] == "healthy" else "degraded",
            "version": settings.app_version,
            "environment": settings.environment.value,
            "services": {
                "vision": vision_health
            }
        }

    @app.exception_handler(CaptionServiceException)
    async def caption_service_exception_handler(request: Request, exc: CaptionServiceException):
        """Render service exceptions as the response envelope."""
        logger.error(
            f"Caption service exception: {exc.error_code} - {exc.message}",
            extra={"details": exc.details}
        )

        return JSONResponse(
            status_code=exc.status_code,
            content=CaptionResponse(error=exc.message).to_content()
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
        """Malformed form data is a client error."""
        errors = exc.errors()
        first = errors[0] if errors else {}
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = first.get("msg", "Invalid request")
        if location:
            message = f"Invalid {location}: {message}"

        logger.warning(f"Request validation failed: {errors}")

        return JSONResponse(
            status_code=400,
            content=CaptionResponse(error=message).to_content()
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Render framework HTTP errors as the response envelope."""
        message = "Endpoint not found" if exc.status_code == 404 else str(exc.detail)

        return JSONResponse(
            status_code=exc.status_code,
            content=CaptionResponse(error=message).to_content(),
            headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler for unhandled errors."""
        logger.error(
            f"Unhandled exception: {str(exc)}",
            exc_info=True
        )

        return JSONResponse(
            status_code=500,
            content=CaptionResponse(error="Internal server error").to_content()
        )

    return app


app = create_app()


if __name__ == "__main__":
    settings = get_settings()

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level.lower(),
        access_log=True
    )
