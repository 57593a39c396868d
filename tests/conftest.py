"""Shared fixtures for SiteSpine tests."""

from __future__ import annotations

import os
from collections.abc import Callable
from pathlib import Path

import pytest

from sitespine.core.config import Settings
from sitespine.core.context import BuildContext
from sitespine.renderers.templates import TemplateEngine
from sitespine.snapshots import ArtifactStore, SnapshotRegistry

ENV_VARS = (
    "FORCE",
    "VERBOSITY",
    "OUTPUT_DIR",
    "SITESPINE_FORCE",
    "SITESPINE_VERBOSITY",
    "SITESPINE_OUTPUT_DIR",
    "SITESPINE_CONTENT_ROOT",
    "SITESPINE_TEMPLATES_DIR",
    "SITESPINE_ERROR_POLICY",
    "SITESPINE_URL_ROOT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Isolate tests from build variables set in the calling shell."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # Keep a stray .env in the working directory out of Settings.
    monkeypatch.chdir(tmp_path)


WriteFiles = Callable[[dict[str, str]], Path]


@pytest.fixture
def site_root(tmp_path: Path) -> Path:
    """Empty content root."""
    root = tmp_path / "site"
    root.mkdir()
    return root


@pytest.fixture
def write_files(site_root: Path) -> WriteFiles:
    """Write ``{relative path: text}`` under the content root."""

    def _write(files: dict[str, str]) -> Path:
        for name, text in files.items():
            path = site_root / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        return site_root

    return _write


@pytest.fixture
def make_context(site_root: Path) -> Callable[..., BuildContext]:
    """Factory for a BuildContext over ``site_root``."""

    def _make(
        source: str = "posts/a.md",
        destination: str = "posts/a.html",
        *,
        snapshots: SnapshotRegistry | None = None,
        artifacts: ArtifactStore | None = None,
        **settings: object,
    ) -> BuildContext:
        return BuildContext(
            source=source,
            destination=destination,
            settings=Settings(content_root=site_root, verbosity=0, **settings),
            templates=TemplateEngine(site_root / "templates"),
            snapshots=snapshots if snapshots is not None else SnapshotRegistry(),
            artifacts=artifacts if artifacts is not None else ArtifactStore(),
        )

    return _make


@pytest.fixture
def bump_mtime() -> Callable[[Path], None]:
    """Move a file's mtime forward so it looks newer than earlier outputs."""

    def _bump(path: Path, seconds: float = 5.0) -> None:
        stat = path.stat()
        os.utime(path, (stat.st_atime + seconds, stat.st_mtime + seconds))

    return _bump
