"""Per-file build context handed to every pipeline step.

A `BuildContext` lives for one rule processing one file. It gives steps
read access to the build settings and templates, and the only sanctioned
way to publish facts for later rules: appending to a snapshot. Appends are
held until the file has been built and written, so a file that fails
halfway never shows up in a snapshot.

Example:
    >>> from sitespine.core.config import Settings
    >>> from sitespine.core.context import BuildContext
    >>> from sitespine.renderers.templates import TemplateEngine
    >>> from sitespine.snapshots import ArtifactStore, SnapshotRegistry
    >>> registry = SnapshotRegistry()
    >>> ctx = BuildContext(
    ...     source="posts/a.md",
    ...     destination="posts/a.html",
    ...     settings=Settings(verbosity=0),
    ...     templates=TemplateEngine("templates"),
    ...     snapshots=registry,
    ...     artifacts=ArtifactStore(),
    ... )
    >>> ctx.add_to_snapshot("feed") == ctx.item_id
    True
    >>> registry.get("feed")
    ()
    >>> ctx.commit_snapshots()
    >>> registry.get("feed") == (ctx.item_id,)
    True
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any
from uuid import UUID

from sitespine.models.artifact import BuildArtifact, uuid_from_path

if TYPE_CHECKING:
    from sitespine.core.config import Settings
    from sitespine.renderers.templates import TemplateEngine
    from sitespine.snapshots import ArtifactStore, SnapshotRegistry

logger = logging.getLogger("sitespine.context")


@dataclass
class BuildContext:
    """Context for one (rule, file) pair.

    Attributes:
        source: Relative source path (or the virtual target of a
            generated rule).
        destination: Resolved output path, relative to the output dir.
        settings: Build settings (read only).
        templates: Shared template engine.
        written_snapshots: Keys this file appended its own id to, in order.
        pending_snapshots: Appends not yet sent to the registry.
        warnings: Non-fatal problems reported by steps, collected into
            the build report.
    """

    source: str
    destination: str
    settings: Settings
    templates: TemplateEngine
    snapshots: SnapshotRegistry = field(repr=False)
    artifacts: ArtifactStore = field(repr=False)
    written_snapshots: list[str] = field(default_factory=list)
    pending_snapshots: list[tuple[str, UUID]] = field(default_factory=list, repr=False)
    warnings: list[str] = field(default_factory=list)

    @property
    def item_id(self) -> UUID:
        """Item id of the current source file."""
        return uuid_from_path(self.source)

    @property
    def verbosity(self) -> int:
        return self.settings.verbosity

    @property
    def force(self) -> bool:
        return self.settings.force

    @property
    def output_dir(self) -> Path:
        return self.settings.output_dir

    @property
    def url_root(self) -> str:
        return self.settings.url_root

    def add_to_snapshot(self, key: str, item_id: UUID | None = None) -> UUID:
        """Append an item (default: the current file) to snapshot ``key``.

        The append reaches the shared registry through `commit_snapshots`,
        which the build state calls once the file has been written.

        Returns:
            The appended item id.
        """
        item = item_id if item_id is not None else self.item_id
        self.pending_snapshots.append((key, item))
        if item == self.item_id:
            self.written_snapshots.append(key)
        return item

    def commit_snapshots(self) -> None:
        """Send the pending appends to the registry, in order."""
        for key, item in self.pending_snapshots:
            self.snapshots.add(key, item)
        self.pending_snapshots.clear()

    def snapshot(self, key: str) -> tuple[UUID, ...]:
        """Items appended to ``key`` so far, this file's pending ones last."""
        pending = tuple(item for k, item in self.pending_snapshots if k == key)
        return self.snapshots.get(key) + pending

    def artifact(self, item_id: UUID) -> BuildArtifact | None:
        """Look up the artifact recorded for ``item_id``."""
        return self.artifacts.get(item_id)

    def render_template(self, name: str, context: dict[str, Any]) -> str:
        """Render template ``name`` with ``context`` plus build variables.

        ``ROOT_PREFIX`` (the URL root) and ``path`` (the destination) are
        added unless the context already defines them.
        """
        variables = {"ROOT_PREFIX": self.url_root, "path": self.destination}
        variables.update(context)
        return self.templates.render(name, variables)

    def warn(self, message: str) -> None:
        """Log a non-fatal problem and record it for the build report."""
        logger.warning("%s: %s", self.source, message)
        self.warnings.append(f"{self.source}: {message}")
