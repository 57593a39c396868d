"""Build report - per-rule statistics and per-file failures.

Example:
    >>> from sitespine.core.report import BuildReport, RuleStats
    >>> report = BuildReport()
    >>> report.rule_stats.append(RuleStats("posts/*", matched=3, written=2, failed=1))
    >>> report.total_written, report.total_failed
    (2, 1)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime

from sitespine.core.exceptions import BuildFailed, FileError


@dataclass
class FileFailure:
    """One source file a rule could not build."""

    rule: str
    source: str
    error: FileError

    @property
    def message(self) -> str:
        return str(self.error)

    def __str__(self) -> str:
        return f"[{self.rule}] {self.source}: {type(self.error).__name__}: {self.error}"


@dataclass
class RuleStats:
    """Statistics of one rule.

    Example:
        >>> from sitespine.core.report import RuleStats
        >>> stats = RuleStats("css/*", matched=4, written=1, skipped=3)
        >>> stats.processed
        1
    """

    rule_name: str
    matched: int = 0
    written: int = 0
    skipped: int = 0
    failed: int = 0
    aborted: bool = False
    duration_ms: float = 0.0

    @property
    def processed(self) -> int:
        """Files the pipeline actually ran for (written or failed)."""
        return self.written + self.failed


@dataclass
class BuildReport:
    """Result of `State.finish()`."""

    rule_stats: list[RuleStats] = field(default_factory=list)
    failures: list[FileFailure] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    completed_at: datetime | None = None

    @property
    def ok(self) -> bool:
        """True when no file failed."""
        return not self.failures

    @property
    def total_matched(self) -> int:
        return sum(s.matched for s in self.rule_stats)

    @property
    def total_written(self) -> int:
        return sum(s.written for s in self.rule_stats)

    @property
    def total_skipped(self) -> int:
        return sum(s.skipped for s in self.rule_stats)

    @property
    def total_failed(self) -> int:
        return len(self.failures)

    @property
    def duration_ms(self) -> float:
        if self.completed_at is None:
            return 0.0
        return (self.completed_at - self.started_at).total_seconds() * 1000

    @property
    def exit_code(self) -> int:
        """Process exit status: 0 on success, 1 when any file failed."""
        return 0 if self.ok else 1

    def failed_sources(self) -> list[str]:
        return [f.source for f in self.failures]

    def raise_for_failures(self) -> None:
        """Raise `BuildFailed` if any file failed.

        Raises:
            BuildFailed: With this report attached.
        """
        if self.failures:
            sources = ", ".join(self.failed_sources())
            raise BuildFailed(
                f"{len(self.failures)} file(s) failed to build: {sources}",
                report=self,
                cause=self.failures[0].error,
            )
