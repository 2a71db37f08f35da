"""Cookie-based user identity.

Every request carries a user id in ``request.state.user_id``. It comes from
the ``AUTH_TOKEN`` cookie (an HS256 JWT with a ``UserID`` claim) when that
cookie is valid; otherwise a fresh id is minted and the cookie is set on the
response. ``request.state.authenticated`` tells whether the id came from a
valid cookie presented by the client.
"""

import uuid
import logging
from typing import Callable, Optional

from jose import JWTError, jwt
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

AUTH_COOKIE_NAME = "AUTH_TOKEN"
ALGORITHM = "HS256"

logger = logging.getLogger("shortener.web.auth")


def build_token(user_id: str, secret_key: str) -> str:
    """Sign a token carrying the user id."""
    return jwt.encode({"UserID": user_id}, secret_key, algorithm=ALGORITHM)


def get_user_id(token: Optional[str], secret_key: str) -> str:
    """Extract the user id from a token.
    
    Returns:
        The user id, or an empty string if the token is missing or invalid
    """
    if not token:
        return ""
    
    try:
        claims = jwt.decode(token, secret_key, algorithms=[ALGORITHM])
    except JWTError as e:
        logger.debug(f"Rejected auth token: {e}")
        return ""
    
    user_id = claims.get("UserID")
    return user_id if isinstance(user_id, str) else ""


class AuthMiddleware(BaseHTTPMiddleware):
    """Resolve or issue the caller's identity."""
    
    def __init__(self, app, secret_key: str):
        super().__init__(app)
        self.secret_key = secret_key
    
    async def dispatch(self, request: Request, call_next: Callable):
        user_id = get_user_id(request.cookies.get(AUTH_COOKIE_NAME), self.secret_key)
        request.state.authenticated = bool(user_id)
        
        issued_token = None
        if not user_id:
            user_id = str(uuid.uuid4())
            issued_token = build_token(user_id, self.secret_key)
        request.state.user_id = user_id
        
        response = await call_next(request)
        
        if issued_token:
            response.set_cookie(AUTH_COOKIE_NAME, issued_token, httponly=True)
        return response
