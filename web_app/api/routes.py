"""API routes implementation."""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from .schemas import (
    ShortenRequest,
    ShortenResponse,
    BatchShortenItem,
    BatchShortenResult,
    UserURLResponse,
    StatsResponse,
    ErrorResponse,
)
from shortener.service import BatchRequestItem
from shortener.common.network import is_trusted_ip

router = APIRouter()
logger = logging.getLogger("shortener.web")


def current_user_id(request: Request) -> str:
    """User id resolved (or freshly issued) by the auth middleware."""
    return getattr(request.state, "user_id", "")


def authenticated_user_id(request: Request) -> str:
    """User id from a valid cookie; 401 otherwise."""
    if not getattr(request.state, "authenticated", False):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Valid AUTH_TOKEN cookie required",
        )
    return request.state.user_id


@router.post(
    "/shorten",
    response_model=ShortenResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid request"},
        409: {"model": ErrorResponse, "description": "Short code bound to another URL"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
    },
    summary="Create short URL",
)
async def shorten_url(
    request: Request,
    body: ShortenRequest,
    user_id: str = Depends(current_user_id),
):
    """Create a shortened URL."""
    service = request.app.state.service
    
    short_url = await service.shorten_url(body.url, user_id)
    
    return ShortenResponse(result=short_url)


@router.post(
    "/shorten/batch",
    response_model=List[BatchShortenResult],
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid request"},
        500: {"model": ErrorResponse, "description": "Batch was not stored"},
    },
    summary="Create short URLs in one batch",
    description="All URLs are stored or none are. Results keep the request order.",
)
async def shorten_url_batch(
    request: Request,
    body: List[BatchShortenItem],
    user_id: str = Depends(current_user_id),
):
    """Create shortened URLs for a batch."""
    service = request.app.state.service
    
    items = [
        BatchRequestItem(original_url=item.original_url, correlation_id=item.correlation_id)
        for item in body
    ]
    results = await service.shorten_url_batch(items, user_id)
    
    return [
        BatchShortenResult(correlation_id=r.correlation_id, short_url=r.short_url)
        for r in results
    ]


@router.get(
    "/user/urls",
    response_model=List[UserURLResponse],
    responses={
        204: {"description": "The user owns no URLs"},
        401: {"description": "No valid identity cookie"},
    },
    summary="List the caller's URLs",
)
async def get_user_urls(
    request: Request,
    user_id: str = Depends(authenticated_user_id),
):
    """List URLs shortened by the calling user, deleted ones flagged."""
    service = request.app.state.service
    
    records = await service.get_user_urls(user_id)
    if not records:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    
    return [
        UserURLResponse(
            short_url=service.short_url_for(record.short_code),
            original_url=record.original_url,
            is_deleted=record.is_deleted,
        )
        for record in records
    ]


@router.delete(
    "/user/urls",
    status_code=status.HTTP_202_ACCEPTED,
    summary="Delete the caller's URLs",
    description="Accepted immediately; deletion runs in the background. "
                "Codes the caller does not own are ignored.",
)
async def delete_user_urls(
    request: Request,
    short_codes: List[str],
    user_id: str = Depends(current_user_id),
):
    """Schedule deletion of URLs owned by the calling user."""
    service = request.app.state.service
    
    service.submit_delete_user_urls(short_codes, user_id)
    
    return Response(status_code=status.HTTP_202_ACCEPTED)


@router.get(
    "/internal/stats",
    response_model=StatsResponse,
    responses={403: {"description": "Caller is outside the trusted subnet"}},
    summary="Get statistics",
)
async def get_stats(request: Request):
    """Service statistics, only for callers inside the trusted subnet."""
    service = request.app.state.service
    config = request.app.state.config
    
    real_ip = getattr(request.state, "real_ip", None)
    if not is_trusted_ip(real_ip, config.trusted_subnet):
        logger.warning(f"Stats request from untrusted address {real_ip}")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    
    urls, users = await service.get_stats()
    
    return StatsResponse(urls=urls, users=users)
