"""
Shared response shapes.
"""

from typing import Generic, TypeVar

from pydantic import BaseModel

ItemT = TypeVar("ItemT")


class Page(BaseModel, Generic[ItemT]):
    """One page of a list endpoint, newest first."""
    items: list[ItemT]
    total: int
    limit: int
    offset: int


class ErrorResponse(BaseModel):
    """Body of every engine error returned by the API."""
    error: str
    detail: str
