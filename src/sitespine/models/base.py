"""Base model shared by SiteSpine's pydantic types.

Example:
    >>> from sitespine.models.base import SiteSpineModel
    >>> class Page(SiteSpineModel):
    ...     title: str
    >>> Page(title="  Hello ").title
    'Hello'
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class SiteSpineModel(BaseModel):
    """Base model with standard configuration."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        str_strip_whitespace=True,
        validate_assignment=True,
        extra="forbid",
    )
