"""Snapshot registry and artifact store.

Snapshots are how rules talk to each other. A rule that processes posts
appends each post's item id to a named snapshot; a rule registered later
(a feed, an archive page) reads the snapshot and looks the items up in the
artifact store. Rules run in registration order, so a snapshot read before
its producers ran is simply empty.

Example:
    >>> from uuid import UUID
    >>> from sitespine.snapshots import SnapshotRegistry
    >>> registry = SnapshotRegistry()
    >>> registry.get("main-rss-feed")
    ()
    >>> registry.add("main-rss-feed", UUID(int=1))
    >>> registry.add("main-rss-feed", UUID(int=2))
    >>> [u.int for u in registry.get("main-rss-feed")]
    [1, 2]
"""

from __future__ import annotations

from collections.abc import Iterator
from uuid import UUID

from sitespine.models.artifact import BuildArtifact


class SnapshotRegistry:
    """Append-only mapping of snapshot key to ordered item ids.

    One registry exists per build state. There is no removal: during a
    build a bucket only grows, and insertion order is the order consumers
    see.

    Builds are single threaded, so appends need no locking. If file
    processing ever runs in parallel, `add` must become an atomic append
    (guard it with a ``threading.Lock``).
    """

    def __init__(self) -> None:
        self._snapshots: dict[str, list[UUID]] = {}

    def ensure(self, key: str) -> None:
        """Create an empty bucket for ``key`` if it does not exist yet."""
        self._snapshots.setdefault(key, [])

    def add(self, key: str, item_id: UUID) -> None:
        """Append ``item_id`` to ``key``, creating the bucket if needed."""
        self._snapshots.setdefault(key, []).append(item_id)

    def get(self, key: str) -> tuple[UUID, ...]:
        """Return the items of ``key`` in insertion order (empty if unknown)."""
        return tuple(self._snapshots.get(key, ()))

    def keys(self) -> list[str]:
        return list(self._snapshots)

    def __contains__(self, key: object) -> bool:
        return key in self._snapshots

    def __len__(self) -> int:
        return len(self._snapshots)

    def __repr__(self) -> str:
        sizes = ", ".join(f"{k}={len(v)}" for k, v in self._snapshots.items())
        return f"SnapshotRegistry({sizes})"


class ArtifactStore:
    """Artifacts of processed files, keyed by item id.

    Example:
        >>> from sitespine.models.artifact import BuildArtifact, uuid_from_path
        >>> from sitespine.snapshots import ArtifactStore
        >>> store = ArtifactStore()
        >>> artifact = BuildArtifact(
        ...     item_id=uuid_from_path("a.md"), path="a.html", resource="a.md"
        ... )
        >>> store.record(artifact)
        >>> store.get(artifact.item_id).path
        'a.html'
    """

    def __init__(self) -> None:
        self._artifacts: dict[UUID, BuildArtifact] = {}

    def record(self, artifact: BuildArtifact) -> None:
        """Store ``artifact``, replacing an earlier one for the same item."""
        self._artifacts[artifact.item_id] = artifact

    def get(self, item_id: UUID) -> BuildArtifact | None:
        return self._artifacts.get(item_id)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._artifacts

    def __iter__(self) -> Iterator[BuildArtifact]:
        return iter(self._artifacts.values())

    def __len__(self) -> int:
        return len(self._artifacts)
