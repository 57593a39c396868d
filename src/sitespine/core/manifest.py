"""Build manifest - what the previous build wrote.

Skipping an up-to-date file must not make it vanish from feeds and index
pages, so each output remembers the artifact and the snapshot keys its
source contributed. A skipped file replays them from the manifest.

The manifest is a JSON file in the output directory. A missing, unreadable
or outdated manifest just means a full rebuild.

Example:
    >>> import tempfile
    >>> from pathlib import Path
    >>> from sitespine.core.manifest import BuildManifest, ManifestEntry
    >>> from sitespine.models.artifact import uuid_from_path
    >>> with tempfile.TemporaryDirectory() as tmpdir:
    ...     path = Path(tmpdir) / ".sitespine-manifest.json"
    ...     manifest = BuildManifest()
    ...     manifest.entries["posts/a.html"] = ManifestEntry(
    ...         source="posts/a.md",
    ...         item_id=uuid_from_path("posts/a.md"),
    ...         snapshots=["main-rss-feed"],
    ...     )
    ...     manifest.save(path)
    ...     BuildManifest.load(path).entries["posts/a.html"].snapshots
    ['main-rss-feed']
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Any
from uuid import UUID

from pydantic import Field, ValidationError
from pydantic_core import to_jsonable_python

from sitespine.core.exceptions import BuildIOError
from sitespine.models.artifact import BuildArtifact
from sitespine.models.base import SiteSpineModel

logger = logging.getLogger("sitespine.manifest")

MANIFEST_VERSION = 1


class ManifestEntry(SiteSpineModel):
    """One output of the previous build."""

    source: str
    item_id: UUID
    metadata: dict[str, Any] = Field(default_factory=dict)
    modified_date: datetime | None = None
    snapshots: list[str] = Field(default_factory=list)

    @classmethod
    def from_artifact(cls, artifact: BuildArtifact, snapshots: list[str]) -> ManifestEntry:
        """Entry for a freshly built artifact; metadata is made JSON-safe."""
        return cls(
            source=artifact.resource,
            item_id=artifact.item_id,
            metadata=to_jsonable_python(artifact.metadata, fallback=str),
            modified_date=artifact.modified_date,
            snapshots=list(snapshots),
        )

    def to_artifact(self, destination: str) -> BuildArtifact:
        return BuildArtifact(
            item_id=self.item_id,
            path=destination,
            resource=self.source,
            metadata=dict(self.metadata),
            modified_date=self.modified_date,
        )


class BuildManifest(SiteSpineModel):
    """Entries keyed by output path (relative to the output directory)."""

    version: int = MANIFEST_VERSION
    entries: dict[str, ManifestEntry] = Field(default_factory=dict)

    @classmethod
    def load(cls, path: Path) -> BuildManifest:
        """Read the manifest at ``path``; an empty one if missing or invalid."""
        if not path.is_file():
            return cls()
        try:
            manifest = cls.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, ValueError, ValidationError) as e:
            logger.warning("Ignoring unreadable build manifest %s: %s", path, e)
            return cls()
        if manifest.version != MANIFEST_VERSION:
            logger.warning(
                "Ignoring build manifest %s with version %s", path, manifest.version
            )
            return cls()
        return manifest

    def save(self, path: Path) -> None:
        """Write the manifest to ``path``.

        Raises:
            BuildIOError: If the file cannot be written.
        """
        try:
            path.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        except OSError as e:
            raise BuildIOError(f"Could not write build manifest {path}: {e}", path=str(path), cause=e) from e
