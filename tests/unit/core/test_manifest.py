"""Tests for sitespine.core.manifest and sitespine.core.report."""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

import pytest

from sitespine.core.exceptions import BuildFailed, BuildIOError, CompilerError
from sitespine.core.manifest import BuildManifest, ManifestEntry
from sitespine.core.report import BuildReport, FileFailure, RuleStats
from sitespine.models.artifact import BuildArtifact, uuid_from_path

# =============================================================================
# Manifest
# =============================================================================


class TestBuildManifest:
    """Tests for manifest persistence."""

    def test_round_trip(self, tmp_path: Path) -> None:
        path = tmp_path / "manifest.json"
        manifest = BuildManifest()
        manifest.entries["posts/a.html"] = ManifestEntry(
            source="posts/a.md",
            item_id=uuid_from_path("posts/a.md"),
            metadata={"title": "A", "body": "<p>a</p>"},
            modified_date=datetime(2020, 1, 1, tzinfo=UTC),
            snapshots=["main-rss-feed"],
        )
        manifest.save(path)

        loaded = BuildManifest.load(path)
        entry = loaded.entries["posts/a.html"]
        assert entry.item_id == uuid_from_path("posts/a.md")
        assert entry.metadata["title"] == "A"
        assert entry.modified_date == datetime(2020, 1, 1, tzinfo=UTC)
        assert entry.snapshots == ["main-rss-feed"]

    def test_missing_file(self, tmp_path: Path) -> None:
        assert BuildManifest.load(tmp_path / "none.json").entries == {}

    @pytest.mark.parametrize("content", ["{not json", '{"entries": 3}', '{"version": 99}'])
    def test_invalid_manifest_ignored(self, tmp_path: Path, content: str) -> None:
        path = tmp_path / "manifest.json"
        path.write_text(content)
        assert BuildManifest.load(path).entries == {}

    def test_save_failure(self, tmp_path: Path) -> None:
        with pytest.raises(BuildIOError):
            BuildManifest().save(tmp_path / "missing-dir" / "manifest.json")


class TestManifestEntry:
    def test_from_artifact_makes_metadata_json_safe(self) -> None:
        artifact = BuildArtifact(
            item_id=uuid_from_path("a.md"),
            path="a.html",
            resource="a.md",
            metadata={"date": datetime(2020, 5, 1), "path": Path("x/y"), "tags": ("a", "b")},
        )
        entry = ManifestEntry.from_artifact(artifact, ["feed"])
        assert entry.metadata["date"] == "2020-05-01T00:00:00"
        assert entry.metadata["path"] == "x/y"
        assert entry.metadata["tags"] == ["a", "b"]
        assert entry.snapshots == ["feed"]

    def test_to_artifact(self) -> None:
        entry = ManifestEntry(source="a.md", item_id=uuid_from_path("a.md"), metadata={"title": "A"})
        artifact = entry.to_artifact("a/index.html")
        assert artifact.path == "a/index.html"
        assert artifact.resource == "a.md"
        assert artifact.title == "A"


# =============================================================================
# Report
# =============================================================================


class TestBuildReport:
    """Tests for build statistics."""

    def test_totals(self) -> None:
        report = BuildReport(
            rule_stats=[
                RuleStats("posts/*", matched=3, written=2, failed=1),
                RuleStats("css/*", matched=2, skipped=2),
            ]
        )
        assert report.total_matched == 5
        assert report.total_written == 2
        assert report.total_skipped == 2

    def test_ok_and_exit_code(self) -> None:
        report = BuildReport()
        assert report.ok
        assert report.exit_code == 0
        report.failures.append(FileFailure("posts/*", "posts/a.md", CompilerError("x")))
        assert not report.ok
        assert report.exit_code == 1
        assert report.total_failed == 1

    def test_raise_for_failures(self) -> None:
        report = BuildReport()
        report.raise_for_failures()

        error = CompilerError("pandoc failed", source="posts/a.md")
        report.failures.append(FileFailure("posts/*", "posts/a.md", error))
        with pytest.raises(BuildFailed, match="posts/a.md") as exc_info:
            report.raise_for_failures()
        assert exc_info.value.report is report
        assert exc_info.value.cause is error

    def test_failure_str(self) -> None:
        failure = FileFailure("posts/*", "posts/a.md", CompilerError("boom"))
        assert str(failure) == "[posts/*] posts/a.md: CompilerError: boom"

    def test_duration(self) -> None:
        report = BuildReport(started_at=datetime(2020, 1, 1, tzinfo=UTC))
        assert report.duration_ms == 0.0
        report.completed_at = datetime(2020, 1, 1, 0, 0, 2, tzinfo=UTC)
        assert report.duration_ms == 2000.0

    def test_rule_processed(self) -> None:
        assert RuleStats("x", matched=5, written=2, skipped=2, failed=1).processed == 3
