"""Build state - the orchestrator.

`State` owns the ordered rule list, the snapshot registry, the artifact
store and the settings. Rules are attached with `then()` and executed, in
registration order, by a single call to `finish()`.

Example:
    >>> import tempfile
    >>> from pathlib import Path
    >>> from sitespine import State, copy
    >>> with tempfile.TemporaryDirectory() as tmpdir:
    ...     root = Path(tmpdir)
    ...     (root / "css").mkdir()
    ...     _ = (root / "css" / "main.css").write_text("body {}")
    ...     state = State(content_root=root, verbosity=0)
    ...     report = state.then(copy("css/*")).finish()
    ...     (report.total_written, (root / "_site" / "css" / "main.css").exists())
    (1, True)
"""

from __future__ import annotations

import logging
import shutil
import time
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from sitespine.core.config import ErrorPolicy, Settings, get_settings
from sitespine.core.context import BuildContext
from sitespine.core.exceptions import BuildFailed, BuildIOError, ConfigError, FileError
from sitespine.core.logging import configure_logging
from sitespine.core.manifest import BuildManifest, ManifestEntry
from sitespine.core.report import BuildReport, FileFailure, RuleStats
from sitespine.models.artifact import BuildArtifact
from sitespine.patterns import list_sources
from sitespine.pipeline import Document, PipelineResult
from sitespine.renderers.templates import TemplateEngine
from sitespine.routes import resolve
from sitespine.rules import Rule
from sitespine.snapshots import ArtifactStore, SnapshotRegistry

logger = logging.getLogger("sitespine.state")

NOTHING_GENERATED = """Nothing to be generated. This might happen if:
- You haven't added any rules.
- You either haven't made any changes to your source files or they weren't detected. \
Rerun with $FORCE set to ignore mtimes and force generation. Set $VERBOSITY to greater \
than 1 to get more messages."""


class State:
    """Ordered rules plus everything they share during one build.

    Args:
        settings: Build settings; loaded from the environment when omitted.
        setup_logging: Install the Rich log handler for ``settings.verbosity``.
        **overrides: Setting overrides (``content_root=...``, ``force=True``...).

    Raises:
        ConfigError: If a setting (override or environment variable) is
            invalid.

    Example:
        >>> from sitespine import State, copy
        >>> state = State(verbosity=0).then(copy("css/*")).then(copy("images/*"))
        >>> [rule.name for rule in state.rules]
        ['css/*', 'images/*']
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        setup_logging: bool = True,
        **overrides: Any,
    ) -> None:
        if settings is None:
            settings = get_settings(**overrides)
        elif overrides:
            settings = get_settings(**{**settings.model_dump(), **overrides})
        self._settings = settings
        self._setup_logging = setup_logging
        self._rules: list[Rule] = []
        self._declared_snapshots: set[str] = set()
        self._warnings: list[str] = []
        self._finished = False
        self.snapshots = SnapshotRegistry()
        self.artifacts = ArtifactStore()
        if setup_logging:
            configure_logging(settings.verbosity)

    # -- configuration -----------------------------------------------------

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def rules(self) -> tuple[Rule, ...]:
        """Registered rules, in execution order."""
        return tuple(self._rules)

    @property
    def force(self) -> bool:
        return self._settings.force

    @property
    def verbosity(self) -> int:
        return self._settings.verbosity

    @property
    def content_root(self) -> Path:
        return Path(self._settings.content_root)

    @property
    def output_dir(self) -> Path:
        """Output directory; relative values are taken from the content root."""
        return self._resolve_dir(self._settings.output_dir)

    @property
    def templates_dir(self) -> Path:
        return self._resolve_dir(self._settings.templates_dir)

    @property
    def warnings(self) -> list[str]:
        """Registration-time warnings collected so far."""
        return list(self._warnings)

    def _resolve_dir(self, path: Path) -> Path:
        path = Path(path)
        return path if path.is_absolute() else self.content_root / path

    def set_force_generate(self, force: bool) -> State:
        """Rebuild everything, ignoring modification times."""
        self._settings = self._settings.model_copy(update={"force": bool(force)})
        return self

    def set_verbosity(self, verbosity: int) -> State:
        """Change the diagnostic level (0 silent to 5).

        Raises:
            ConfigError: If ``verbosity`` is outside 0-5.
        """
        if not isinstance(verbosity, int) or not 0 <= verbosity <= 5:
            raise ConfigError(f"Verbosity must be between 0 and 5, got {verbosity!r}")
        self._settings = self._settings.model_copy(update={"verbosity": verbosity})
        if self._setup_logging:
            configure_logging(verbosity)
        return self

    # -- registration ------------------------------------------------------

    def then(self, rule: Rule) -> State:
        """Register ``rule`` after the existing ones and return the state.

        A rule reading a snapshot that no earlier rule writes is accepted,
        but logged and reported: at run time that snapshot will be empty.

        Raises:
            ConfigError: If ``rule`` is not a `Rule`.
            RuntimeError: If the build already ran.
        """
        if self._finished:
            raise RuntimeError("Cannot add rules after finish()")
        if not isinstance(rule, Rule):
            raise ConfigError(f"then() expects a Rule, got {type(rule).__name__}")

        for key in rule.consumes:
            if key not in self._declared_snapshots:
                message = (
                    f"Rule `{rule.name}` reads snapshot `{key}` but no earlier rule writes it; "
                    "register the producing rule first"
                )
                logger.warning(message)
                self._warnings.append(message)
        self._declared_snapshots.update(rule.produces)
        self._rules.append(rule)
        return self

    def add_snapshot(self, key: str) -> State:
        """Declare snapshot ``key`` up front so it exists even if empty."""
        if not isinstance(key, str) or not key:
            raise ConfigError("Snapshot key cannot be empty")
        self._declared_snapshots.add(key)
        self.snapshots.ensure(key)
        return self

    # -- execution ---------------------------------------------------------

    def finish(self) -> BuildReport:
        """Run every rule and return the build report.

        Per-file failures are recorded in the report according to the
        error policy; check ``report.ok`` or call
        ``report.raise_for_failures()``.

        Raises:
            RuntimeError: If called a second time.
            BuildIOError: Content root missing, output not writable.
            ConfigError: Output directory is the content root.
            BuildFailed: Policy ``abort_build`` hit a failure, or a
                mandatory rule produced nothing.
        """
        if self._finished:
            raise RuntimeError("finish() was already called on this State")
        self._finished = True

        report = BuildReport(warnings=list(self._warnings))
        content_root = self.content_root
        output_dir = self.output_dir
        self._prepare_output(content_root, output_dir)
        if self.verbosity > 0:
            logger.info(f"Output directory is {output_dir}")

        manifest_path = output_dir / self._settings.manifest_name
        previous = BuildManifest() if self.force else BuildManifest.load(manifest_path)
        current = BuildManifest()
        templates = TemplateEngine(self.templates_dir)
        sources = list_sources(content_root, exclude=[output_dir])
        logger.debug(f"Found {len(sources)} source files under {content_root}")

        for rule in self._rules:
            stats = self._run_rule(rule, sources, templates, previous, current, report)
            report.rule_stats.append(stats)

        current.save(manifest_path)
        report.completed_at = datetime.now(UTC)

        if report.total_written == 0 and not report.failures:
            logger.info(NOTHING_GENERATED)
        else:
            logger.info(
                f"Build finished: {report.total_written} written, "
                f"{report.total_skipped} cached, {report.total_failed} failed "
                f"in {report.duration_ms:.0f}ms"
            )
        return report

    def _prepare_output(self, content_root: Path, output_dir: Path) -> None:
        if not content_root.is_dir():
            raise BuildIOError(
                f"Content root {content_root} is not a directory", path=str(content_root)
            )
        if output_dir.resolve() == content_root.resolve():
            raise ConfigError("The output directory cannot be the content root")
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise BuildIOError(
                f"Could not create output directory {output_dir}: {e}",
                path=str(output_dir),
                cause=e,
            ) from e

    def _run_rule(
        self,
        rule: Rule,
        sources: list[str],
        templates: TemplateEngine,
        previous: BuildManifest,
        current: BuildManifest,
        report: BuildReport,
    ) -> RuleStats:
        started = time.perf_counter()
        stats = RuleStats(rule_name=rule.name)
        targets = rule.targets(sources)
        stats.matched = len(targets)
        logger.debug(f"Rule `{rule.name}` matched {len(targets)} file(s)")

        for source in targets:
            try:
                destination = resolve(rule.route, source)
                cached = self._cached_entry(rule, source, destination, templates, previous)
                if cached is not None:
                    self._replay(cached, destination)
                    current.entries[destination] = cached
                    stats.skipped += 1
                    if self.verbosity > 0:
                        logger.info(f"Using cached {destination}")
                    continue
                self._build_file(rule, source, destination, templates, current, report)
                stats.written += 1
            except FileError as e:
                stats.failed += 1
                failure = FileFailure(rule=rule.name, source=e.source or source, error=e)
                report.failures.append(failure)
                logger.error(f"{failure.source}: {e}")
                policy = self._settings.error_policy
                if policy is ErrorPolicy.ABORT_BUILD:
                    stats.duration_ms = (time.perf_counter() - started) * 1000
                    report.rule_stats.append(stats)
                    report.completed_at = datetime.now(UTC)
                    raise BuildFailed(
                        f"Build aborted: {failure.source} failed in rule `{rule.name}`",
                        report=report,
                        cause=e,
                    ) from e
                if policy is ErrorPolicy.ABORT_RULE:
                    stats.aborted = True
                    logger.warning(f"Skipping the rest of rule `{rule.name}`")
                    break

        stats.duration_ms = (time.perf_counter() - started) * 1000

        if rule.mandatory:
            if stats.failed and not stats.written and not stats.skipped:
                report.rule_stats.append(stats)
                report.completed_at = datetime.now(UTC)
                raise BuildFailed(
                    f"Mandatory rule `{rule.name}` failed for every matched file",
                    report=report,
                    cause=report.failures[-1].error,
                )
            if not stats.matched:
                message = f"Mandatory rule `{rule.name}` matched no files"
                logger.warning(message)
                report.warnings.append(message)
        return stats

    def _build_file(
        self,
        rule: Rule,
        source: str,
        destination: str,
        templates: TemplateEngine,
        current: BuildManifest,
        report: BuildReport,
    ) -> None:
        context = BuildContext(
            source=source,
            destination=destination,
            settings=self._settings,
            templates=templates,
            snapshots=self.snapshots,
            artifacts=self.artifacts,
            warnings=report.warnings,
        )
        source_path = self.content_root / source
        result = rule.pipeline.run(context, source_path)

        artifact = BuildArtifact(
            item_id=context.item_id,
            path=destination,
            resource=source,
            metadata=self._artifact_metadata(result),
            modified_date=_mtime(source_path),
        )
        if self.verbosity > 0:
            logger.info(
                f"Will create {destination} from resource {source} "
                f"with artifact uuid {artifact.item_id}"
            )
        if self.verbosity > 3:
            logger.debug(f"Metadata of {source}: {artifact.metadata!r}")

        self._write(result, source_path, self.output_dir / destination)
        context.commit_snapshots()
        self.artifacts.record(artifact)
        current.entries[destination] = ManifestEntry.from_artifact(
            artifact, context.written_snapshots
        )

    @staticmethod
    def _artifact_metadata(result: PipelineResult) -> dict[str, Any]:
        compiled = result.compiled
        if compiled is None:
            return {}
        metadata = dict(compiled.metadata)
        if isinstance(compiled.body, str):
            metadata["body"] = compiled.body
        return metadata

    def _write(self, result: PipelineResult, source_path: Path, target: Path) -> None:
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(result.value, Document):
                target.write_bytes(result.value.as_bytes())
            else:
                shutil.copyfile(source_path, target)
        except OSError as e:
            raise BuildIOError(f"Could not write {target}: {e}", path=str(target), cause=e) from e

    def _cached_entry(
        self,
        rule: Rule,
        source: str,
        destination: str,
        templates: TemplateEngine,
        previous: BuildManifest,
    ) -> ManifestEntry | None:
        """Manifest entry to reuse if ``destination`` is up to date.

        Generated rules and rules reading snapshots always run, since their
        inputs are other files. So do pipelines with a step whose inputs
        are undeclared.
        """
        if self.force or rule.generated or rule.consumes or not rule.pipeline.cacheable:
            return None
        entry = previous.entries.get(destination)
        if entry is None or entry.source != source:
            return None
        try:
            output_mtime = (self.output_dir / destination).stat().st_mtime
        except OSError:
            return None
        inputs = [self.content_root / source]
        inputs.extend(templates.template_path(name) for name in rule.pipeline.templates)
        for path in inputs:
            try:
                if path.stat().st_mtime > output_mtime:
                    logger.debug(f"{destination} is older than {path}")
                    return None
            except OSError:
                return None
        return entry

    def _replay(self, entry: ManifestEntry, destination: str) -> None:
        self.artifacts.record(entry.to_artifact(destination))
        for key in entry.snapshots:
            self.snapshots.add(key, entry.item_id)


def _mtime(path: Path) -> datetime | None:
    try:
        return datetime.fromtimestamp(path.stat().st_mtime, tz=UTC)
    except OSError:
        return None
