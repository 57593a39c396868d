"""Simple logging-based build report.

Suitable for CI logs or when the output is not a terminal.

Example:
    >>> from sitespine.reporter import SimpleBuildReporter
    >>>
    >>> reporter = SimpleBuildReporter()
    >>> # reporter.report(state.finish())

    # Output in logs:
    # [RULE] posts/*: matched 3, written 2, cached 0, failed 1
    # [FAILED] posts/broken.md: CompilerError: pandoc exited with status 64: ...
    # [DONE] Written: 2, Cached: 0, Failed: 1
"""

from __future__ import annotations

import logging

from sitespine.core.report import BuildReport


class SimpleBuildReporter:
    """Text build report written to a logger.

    Attributes:
        logger: The logger instance to use
    """

    def __init__(
        self,
        logger: logging.Logger | None = None,
        log_level: int = logging.INFO,
    ):
        """Initialize the reporter.

        Args:
            logger: Logger to use (default: sitespine.report logger)
            log_level: Logging level for summary lines; failures are
                always logged at ERROR
        """
        self._logger = logger or logging.getLogger("sitespine.report")
        self._log_level = log_level

    def report(self, report: BuildReport) -> None:
        for stats in report.rule_stats:
            suffix = " (aborted)" if stats.aborted else ""
            self._logger.log(
                self._log_level,
                f"[RULE] {stats.rule_name}: matched {stats.matched:,}, "
                f"written {stats.written:,}, cached {stats.skipped:,}, "
                f"failed {stats.failed:,}{suffix}",
            )
        for warning in report.warnings:
            self._logger.warning(f"[WARNING] {warning}")
        for failure in report.failures:
            self._logger.error(
                f"[FAILED] {failure.source}: {type(failure.error).__name__}: {failure.error}"
            )
        status = "DONE" if report.ok else "FAILED"
        self._logger.log(
            self._log_level,
            f"[{status}] Written: {report.total_written:,}, "
            f"Cached: {report.total_skipped:,}, Failed: {report.total_failed:,}",
        )


__all__ = ["SimpleBuildReporter"]
