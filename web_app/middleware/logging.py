"""Request/response logging middleware."""

import time
import logging
from typing import Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log one line per request and one per response.
    
    Responses carry the status, body size and elapsed time; server errors
    are logged at ERROR so they stand out from client mistakes.
    """
    
    def __init__(self, app, logger: Optional[logging.Logger] = None):
        super().__init__(app)
        self.logger = logger or logging.getLogger("shortener.web")
    
    async def dispatch(self, request: Request, call_next: Callable):
        started = time.perf_counter()
        peer = request.headers.get("x-real-ip") or (request.client.host if request.client else "unknown")
        self.logger.info(f"Request: {request.method} {request.url.path} from {peer}")
        
        response = await call_next(request)
        
        elapsed_ms = (time.perf_counter() - started) * 1000
        level = logging.ERROR if response.status_code >= 500 else logging.INFO
        self.logger.log(
            level,
            f"Response: {request.method} {request.url.path} - Status: {response.status_code} - "
            f"Size: {response.headers.get('content-length', '-')} - Duration: {elapsed_ms:.2f}ms",
        )
        
        return response
