"""Shared Pydantic models for the tenantdesk client."""

from .pagination import CursorPagination, CursorPaginationMeta

__all__ = [
    "CursorPagination",
    "CursorPaginationMeta",
]
