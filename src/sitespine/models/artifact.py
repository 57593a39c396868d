"""Build artifacts - what a processed file leaves behind for later rules.

Every file a rule processes is recorded as a `BuildArtifact`, keyed by an
item id derived from its source path. Snapshots only hold item ids; the
artifact is how a later rule (a feed, an index page) gets back to the
title, output path and compiled body of each item.

Example:
    >>> from sitespine.models.artifact import BuildArtifact, uuid_from_path
    >>> item_id = uuid_from_path("posts/hello.md")
    >>> artifact = BuildArtifact(
    ...     item_id=item_id,
    ...     path="posts/hello.html",
    ...     resource="posts/hello.md",
    ...     metadata={"title": "Hello"},
    ... )
    >>> artifact.title
    'Hello'
    >>> uuid_from_path("posts/hello.md") == item_id
    True
"""

from __future__ import annotations

import uuid
from datetime import datetime
from pathlib import PurePath
from typing import Any
from uuid import UUID

from pydantic import Field

from sitespine.models.base import SiteSpineModel


def uuid_from_path(path: str | PurePath) -> UUID:
    """Deterministic item id for a source path (UUID v3, OID namespace).

    Separators are normalized so the id is the same on every platform.

    Example:
        >>> from sitespine.models.artifact import uuid_from_path
        >>> uuid_from_path("posts\\\\a.md") == uuid_from_path("posts/a.md")
        True
    """
    text = str(path).replace("\\", "/")
    return uuid.uuid3(uuid.NAMESPACE_OID, text)


class BuildArtifact(SiteSpineModel):
    """Metadata recorded for one processed source file."""

    item_id: UUID = Field(..., description="Id used in snapshots")
    path: str = Field(..., description="Output path relative to the output directory")
    resource: str = Field(..., description="Source path relative to the content root")
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        description="Compiled metadata, including the compiled body",
    )
    modified_date: datetime | None = Field(default=None, description="Source mtime")

    @property
    def title(self) -> str | None:
        """Title from metadata, if it is a string."""
        value = self.metadata.get("title")
        return value if isinstance(value, str) else None

    @property
    def body(self) -> str:
        """Compiled body (before templates were applied)."""
        value = self.metadata.get("body")
        return value if isinstance(value, str) else ""
