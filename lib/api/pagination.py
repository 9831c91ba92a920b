"""
Pagination helpers for list endpoints.

- PaginationParams: page + limit, validated
- pagination_params(): FastAPI dependency building PaginationParams
- PaginationMeta / build_pagination(): the `pagination` block of list envelopes
"""

from fastapi import Query
from pydantic import BaseModel, Field

from lib import config


class PaginationParams(BaseModel):
    page: int = Field(ge=1, default=1, description="Page number (1-indexed)")
    limit: int = Field(
        ge=1, le=config.MAX_PAGE_SIZE, default=config.DEFAULT_PAGE_SIZE, description="Items per page"
    )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class PaginationMeta(BaseModel):
    """Pagination block attached to list responses."""

    page: int = Field(..., description="Current page number (1-indexed)")
    limit: int = Field(..., description="Items per page")
    total: int = Field(..., description="Total number of items across all pages")
    totalPages: int = Field(..., description="Total number of pages")
    hasNextPage: bool = Field(..., description="Whether there is a next page")
    hasPrevPage: bool = Field(..., description="Whether there is a previous page")


def pagination_params(
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(config.DEFAULT_PAGE_SIZE, ge=1, le=config.MAX_PAGE_SIZE, description="Items per page"),
) -> PaginationParams:
    """FastAPI dependency to extract pagination parameters from query string."""
    return PaginationParams(page=page, limit=limit)


def build_pagination(page: int, limit: int, total: int) -> PaginationMeta:
    """
    Raises:
        ValueError: If page or limit are invalid
    """
    if page < 1:
        raise ValueError("page must be >= 1")
    if limit < 1:
        raise ValueError("limit must be >= 1")

    total_pages = (total + limit - 1) // limit
    return PaginationMeta(
        page=page,
        limit=limit,
        total=total,
        totalPages=total_pages,
        hasNextPage=page < total_pages,
        hasPrevPage=page > 1,
    )
