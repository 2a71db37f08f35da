"""Client address middleware."""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from typing import Callable


class RealIPMiddleware(BaseHTTPMiddleware):
    """Store the client address reported by the proxy in X-Real-IP.
    
    ``request.state.real_ip`` is None when the header is absent; the peer
    address is never consulted for trust decisions.
    """
    
    async def dispatch(self, request: Request, call_next: Callable):
        real_ip = request.headers.get("x-real-ip")
        request.state.real_ip = real_ip.strip() if real_ip else None
        
        response = await call_next(request)
        return response
