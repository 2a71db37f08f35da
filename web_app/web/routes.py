"""Plain-text shortening, redirect and ping routes."""

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import PlainTextResponse, RedirectResponse

from ..api.routes import current_user_id
from shortener.common.validators import is_valid_short_code
from shortener.errors import ValidationError, NotFoundError

router = APIRouter()


@router.get("/ping", include_in_schema=False)
async def ping(request: Request):
    """Liveness probe; 500 when the storage backend is unreachable."""
    service = request.app.state.service
    
    await service.ping()
    
    return Response(status_code=status.HTTP_200_OK)


@router.post("/", response_class=PlainTextResponse, status_code=status.HTTP_201_CREATED)
async def shorten_url_text(request: Request, user_id: str = Depends(current_user_id)):
    """Shorten the URL sent as the raw request body."""
    service = request.app.state.service
    
    raw = await request.body()
    try:
        original_url = raw.decode("utf-8")
    except UnicodeDecodeError:
        raise ValidationError("Request body must be UTF-8 text")
    
    short_url = await service.shorten_url(original_url, user_id)
    
    return PlainTextResponse(short_url, status_code=status.HTTP_201_CREATED)


@router.get("/{short_code}", include_in_schema=False)
async def redirect_to_url(request: Request, short_code: str):
    """Redirect to the original URL (404 unknown, 410 deleted)."""
    service = request.app.state.service
    
    is_valid, _ = is_valid_short_code(short_code)
    if not is_valid:
        raise NotFoundError(f"Short URL with code '{short_code}' not found.")
    
    original_url = await service.get_original_url(short_code)
    
    return RedirectResponse(url=original_url, status_code=status.HTTP_307_TEMPORARY_REDIRECT)
