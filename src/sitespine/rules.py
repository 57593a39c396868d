"""Rules - what to build from which files.

A rule binds a pattern set (which sources), a route (where the output goes)
and a pipeline (how the output is made). Rules are registered on a
`State` and run in registration order; a file may be processed by any
number of rules.

Example:
    >>> from sitespine.compilers import pandoc
    >>> from sitespine.renderers import TemplateRenderer
    >>> from sitespine.routes import SetExtension
    >>> from sitespine.rules import copy, match_pattern
    >>> posts = match_pattern(
    ...     "posts/*",
    ...     SetExtension("html"),
    ...     TemplateRenderer("post.html"),
    ...     pandoc(),
    ... )
    >>> posts.matches("posts/hello.md"), posts.matches("index.md")
    (True, False)
    >>> copy("css/*").targets(["css/main.css", "index.md"])
    ['css/main.css']
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from sitespine.compilers.base import Compiler, CopyStep
from sitespine.core.exceptions import ConfigError
from sitespine.patterns import PatternLike, PatternSet, normalize_path
from sitespine.pipeline import Pipeline, PipelineStep, ValueKind
from sitespine.renderers.base import Renderer, RendererPipeline
from sitespine.routes import Identity, Route

RendererLike = Renderer | Sequence[Renderer] | None


@dataclass(frozen=True)
class Rule:
    """A pattern set (or generated target), a route and a pipeline.

    Attributes:
        pattern: Sources the rule selects; ``None`` for a generated rule.
        route: Output path policy.
        pipeline: Steps producing the output.
        name: Display name used in logs and the build report.
        mandatory: Fail the build when every matched file failed.
        target: Virtual source path of a generated rule (a feed, an index
            built from snapshots). Generated rules run exactly once.
    """

    pattern: PatternSet | None
    route: Route
    pipeline: Pipeline
    name: str = ""
    mandatory: bool = False
    target: str | None = None

    def __post_init__(self) -> None:
        if (self.pattern is None) == (self.target is None):
            raise ConfigError("A rule needs exactly one of a pattern or a generated target")
        if self.pattern is not None and not isinstance(self.pattern, PatternSet):
            raise ConfigError(f"Rule pattern must be a PatternSet, got {self.pattern!r}")
        if self.target is not None:
            target = normalize_path(self.target)
            if not target or target.startswith("/"):
                raise ConfigError(f"Invalid generated target `{self.target}`")
            object.__setattr__(self, "target", target)
        if not isinstance(self.route, Route):
            raise ConfigError(f"Not a route: {self.route!r}")
        if not isinstance(self.pipeline, Pipeline):
            raise ConfigError(f"Not a pipeline: {self.pipeline!r}")
        if not self.name:
            label = str(self.pattern) if self.pattern is not None else self.target
            object.__setattr__(self, "name", label)

    @property
    def generated(self) -> bool:
        return self.pattern is None

    @property
    def produces(self) -> tuple[str, ...]:
        """Snapshot keys this rule appends to."""
        return self.pipeline.produces_snapshots

    @property
    def consumes(self) -> tuple[str, ...]:
        """Snapshot keys this rule reads."""
        return self.pipeline.consumes_snapshots

    def matches(self, source: str) -> bool:
        if self.pattern is None:
            return False
        return self.pattern.matches(source)

    def targets(self, sources: Iterable[str]) -> list[str]:
        """Sources this rule processes, in order.

        A generated rule ignores ``sources`` and yields its target.
        """
        if self.target is not None:
            return [self.target]
        return [source for source in sources if self.matches(source)]


def _renderer_steps(renderer: RendererLike) -> list[PipelineStep]:
    if renderer is None:
        return []
    if isinstance(renderer, Renderer):
        return [renderer]
    if isinstance(renderer, (str, bytes)):
        raise ConfigError("Pass TemplateRenderer(name) instead of a bare template name")
    return [RendererPipeline(renderer)]


def match_pattern(
    pattern: PatternLike | PatternSet,
    route: Route,
    renderer: RendererLike,
    compiler: Compiler,
    *,
    name: str | None = None,
    mandatory: bool = False,
) -> Rule:
    """Rule that compiles every matching file, then renders it.

    Args:
        pattern: Pattern text (``"posts/*"``, ``"^*.md"``), a `MatchPattern`,
            or an iterable of them.
        route: Output path policy.
        renderer: A renderer, a list of renderers (applied first to last),
            or ``None`` to write the compiled body as is.
        compiler: Compiler producing the document.
        name: Display name (defaults to the pattern text).
        mandatory: Fail the build if every matched file fails.

    Raises:
        ConfigError: On a malformed pattern or mismatched steps.
    """
    if not isinstance(compiler, Compiler):
        raise ConfigError(f"Not a compiler: {compiler!r}")
    steps: list[PipelineStep] = [compiler, *_renderer_steps(renderer)]
    return Rule(
        pattern=PatternSet.of(pattern),
        route=route,
        pipeline=Pipeline(steps),
        name=name or "",
        mandatory=mandatory,
    )


def copy(
    pattern: PatternLike | PatternSet,
    route: Route | None = None,
    *,
    name: str | None = None,
) -> Rule:
    """Rule that copies matching files verbatim (route defaults to `Identity`)."""
    return Rule(
        pattern=PatternSet.of(pattern),
        route=route if route is not None else Identity(),
        pipeline=Pipeline([CopyStep()]),
        name=name or "",
    )


def create(
    path: str,
    route: Route | None = None,
    compiler: Compiler | None = None,
    renderer: RendererLike = None,
    *,
    name: str | None = None,
) -> Rule:
    """Generated rule writing one output that has no source file.

    The compiler is called with the content root joined with ``path``,
    which usually does not exist; it builds its document from snapshots
    and artifacts instead.
    """
    if not isinstance(compiler, Compiler):
        raise ConfigError(f"create() needs a compiler, got {compiler!r}")
    pipeline = Pipeline([compiler, *_renderer_steps(renderer)])
    if pipeline.produces is not ValueKind.CONTENT:
        raise ConfigError("A generated rule must produce content")
    return Rule(
        pattern=None,
        route=route if route is not None else Identity(),
        pipeline=pipeline,
        name=name or "",
        target=path,
    )
