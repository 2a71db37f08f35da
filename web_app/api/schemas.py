"""Pydantic schemas for API requests and responses."""

from pydantic import BaseModel, Field
from typing import Optional


class ShortenRequest(BaseModel):
    """Request to shorten a URL."""
    
    url: str = Field(..., description="The URL to shorten")
    
    model_config = {
        "json_schema_extra": {
            "examples": [
                {"url": "https://example.com/very/long/path/to/resource"}
            ]
        }
    }


class ShortenResponse(BaseModel):
    """Response after shortening a URL."""
    
    result: str = Field(..., description="The complete short URL")


class BatchShortenItem(BaseModel):
    """One URL of a batch request."""
    
    correlation_id: str = Field("", description="Caller token echoed in the response")
    original_url: str = Field(..., description="The URL to shorten")


class BatchShortenResult(BaseModel):
    """One result of a batch request."""
    
    correlation_id: str
    short_url: str


class UserURLResponse(BaseModel):
    """A URL owned by the calling user."""
    
    short_url: str
    original_url: str
    is_deleted: bool = False


class StatsResponse(BaseModel):
    """Service-wide statistics."""
    
    urls: int = Field(..., description="Number of stored short URLs")
    users: int = Field(..., description="Number of distinct owners")


class ErrorResponse(BaseModel):
    """Error response."""
    
    error: str = Field(..., description="Error type")
    detail: Optional[str] = Field(None, description="Detailed error information")
