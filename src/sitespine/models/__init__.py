"""Pydantic models for SiteSpine."""

from sitespine.models.artifact import BuildArtifact, uuid_from_path
from sitespine.models.base import SiteSpineModel

__all__ = [
    "SiteSpineModel",
    "BuildArtifact",
    "uuid_from_path",
]
