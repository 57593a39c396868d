"""Tests for the build reporters."""

from __future__ import annotations

import logging
from datetime import UTC, datetime

import pytest
from rich.console import Console

from sitespine.core.exceptions import CompilerError
from sitespine.core.report import BuildReport, FileFailure, RuleStats
from sitespine.reporter import RichBuildReporter, SimpleBuildReporter


@pytest.fixture
def report() -> BuildReport:
    return BuildReport(
        rule_stats=[
            RuleStats("posts/*", matched=3, written=2, failed=1, duration_ms=12.0),
            RuleStats("rss.xml", matched=1, written=1),
        ],
        failures=[FileFailure("posts/*", "posts/b.md", CompilerError("pandoc exited with status 64"))],
        warnings=["Rule `[draft]` matched no files"],
        started_at=datetime(2020, 1, 1, tzinfo=UTC),
        completed_at=datetime(2020, 1, 1, 0, 0, 1, tzinfo=UTC),
    )


class TestRichBuildReporter:
    """Tests for the terminal table."""

    def test_table_rows(self, report: BuildReport) -> None:
        table = RichBuildReporter().build_table(report)
        assert table.row_count == 2
        assert [column.header for column in table.columns][:3] == ["Rule", "Matched", "Written"]

    def test_output(self, report: BuildReport) -> None:
        console = Console(record=True, width=120)
        RichBuildReporter(console=console).report(report)
        text = console.export_text()
        assert "posts/*" in text
        assert "posts/b.md" in text
        assert "[draft]" in text
        assert "FAILED" in text

    def test_ok_summary(self) -> None:
        console = Console(record=True, width=120)
        RichBuildReporter(console=console).report(BuildReport(rule_stats=[RuleStats("css/*", 1, 1)]))
        assert "OK 1 written" in console.export_text()


class TestSimpleBuildReporter:
    """Tests for the log reporter."""

    def test_lines(self, report: BuildReport, caplog: pytest.LogCaptureFixture) -> None:
        logger = logging.getLogger("tests.report")
        with caplog.at_level(logging.INFO, logger="tests.report"):
            SimpleBuildReporter(logger=logger).report(report)

        messages = [record.getMessage() for record in caplog.records]
        assert messages[0] == "[RULE] posts/*: matched 3, written 2, cached 0, failed 1"
        assert "[WARNING] Rule `[draft]` matched no files" in messages
        assert "[FAILED] posts/b.md: CompilerError: pandoc exited with status 64" in messages
        assert messages[-1] == "[FAILED] Written: 3, Cached: 0, Failed: 1"

    def test_failures_logged_as_errors(
        self, report: BuildReport, caplog: pytest.LogCaptureFixture
    ) -> None:
        logger = logging.getLogger("tests.report")
        with caplog.at_level(logging.INFO, logger="tests.report"):
            SimpleBuildReporter(logger=logger).report(report)
        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert len(errors) == 1
