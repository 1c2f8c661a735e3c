"""
Memory Journal Backend — Shared Pydantic Schemas
==================================================

What:  Base model, pagination envelope, and small response bodies shared by
       every resource.
Why:   The web client speaks camelCase JSON (`likeCount`, `isPublic`); Python
       code speaks snake_case. CamelModel bridges the two once.
How:   alias_generator=to_camel makes every field's alias camelCase. FastAPI
       serializes response models by alias; populate_by_name lets services
       construct models with snake_case keyword arguments.
"""

import math
from datetime import datetime
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base for all API schemas: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ══════════════════════════════════════════════════════════════════════════
# Pagination
# ══════════════════════════════════════════════════════════════════════════


class Page(CamelModel, Generic[T]):
    """
    What:  Offset-pagination envelope used by every list endpoint.
    Shape: {currentPage, totalPages, totalItemCount, data: [...]}

    Why offset (not cursor) pagination:
        The client renders numbered pages and sorts by counters
        (mostLiked, mostPosted ...), which a created_at cursor cannot express.
    """
    current_page: int = Field(description="Requested page number (1-based)")
    total_pages: int = Field(description="ceil(totalItemCount / pageSize)")
    total_item_count: int = Field(description="Items matching the filters")
    data: List[T] = Field(description="Items on this page")

    @classmethod
    def build(cls, items: List[T], page: int, page_size: int, total: int) -> "Page[T]":
        return cls(
            current_page=page,
            total_pages=math.ceil(total / page_size) if page_size else 0,
            total_item_count=total,
            data=items,
        )


# ══════════════════════════════════════════════════════════════════════════
# Small response bodies
# ══════════════════════════════════════════════════════════════════════════


class MessageResponse(CamelModel):
    """Plain acknowledgement, e.g. {"message": "그룹 공감하기 성공"}."""
    message: str


class VisibilityResponse(CamelModel):
    """Returned by the is-public endpoints."""
    id: str
    is_public: bool


class PasswordRequest(CamelModel):
    """Body carrying a group or comment secret (`password`)."""
    password: str


class ErrorResponse(CamelModel):
    """
    What:  Error body returned by every exception handler.
    Why:   The client only reads `message`; request correlation travels in the
           X-Request-ID header instead of the body.
    """
    message: str = Field(description="Human-readable error description")


class BadgeSweepResponse(CamelModel):
    """Result of a manually triggered anniversary sweep."""
    message: str
    awarded: int = Field(description="Groups that received the badge in this run")


class HealthResponse(CamelModel):
    """
    What:  Health check response showing service and dependency status.
    Who:   Returned by GET /health for monitoring and load balancer probes.
    """
    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    scheduler: str = Field(description="Anniversary sweep: running, stopped, disabled")
    next_sweep_at: Optional[datetime] = Field(default=None, description="Next scheduled sweep")
    uptime_seconds: float = Field(description="Seconds since service started")
