"""FastAPI application factory."""

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.middleware.gzip import GZipMiddleware

from .api import api_router
from .web import web_router
from .errors import shortener_error_handler, request_validation_error_handler
from .middleware import AuthMiddleware, GzipRequestMiddleware, RealIPMiddleware, LoggingMiddleware
from shortener.errors import ShortenerError


def create_app(
    storage_instance,
    service_instance,
    config,
) -> FastAPI:
    """Create and configure FastAPI application.
    
    Args:
        storage_instance: Storage backend instance
        service_instance: Service instance
        config: Configuration instance
        
    Returns:
        Configured FastAPI app
    """
    app = FastAPI(
        title="URL Shortener",
        description="Content-addressable URL shortening service",
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )
    
    # Store instances in app state for access in routes
    app.state.storage = storage_instance
    app.state.service = service_instance
    app.state.config = config
    
    app.add_exception_handler(ShortenerError, shortener_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    
    # Added innermost first: logging wraps everything
    app.add_middleware(AuthMiddleware, secret_key=config.secret_key)
    app.add_middleware(RealIPMiddleware)
    app.add_middleware(GzipRequestMiddleware)
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(LoggingMiddleware)
    
    app.include_router(api_router, prefix="/api", tags=["API"])
    app.include_router(web_router, tags=["Web"])
    
    return app
