"""Pydantic schemas for categories."""
from schemas.base import CamelModel


class CategoryResponse(CamelModel):
    """A category and its icon."""

    id: int
    name: str
    icon: str
