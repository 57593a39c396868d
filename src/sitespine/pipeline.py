"""Pipeline - ordered transform steps applied to one matched file.

Every step has the same shape, ``apply(context, value) -> value``, where the
value is either the source path or a `Document` (content buffer plus
metadata). Each step class declares which kind it accepts and produces, and
`Pipeline` checks at construction that consecutive steps fit together:

- compilers turn a path into a document,
- renderers turn a document into a document,
- the copy step passes the path through (the file is copied verbatim).

Example:
    >>> from sitespine.pipeline import Pipeline
    >>> from sitespine.compilers import ReadCompiler
    >>> from sitespine.renderers import TemplateRenderer
    >>> pipeline = Pipeline([ReadCompiler(), TemplateRenderer("default.html")])
    >>> pipeline.produces
    <ValueKind.CONTENT: 'content'>
    >>> pipeline.templates
    ('default.html',)
    >>> Pipeline([TemplateRenderer("default.html")])  # doctest: +IGNORE_EXCEPTION_DETAIL
    Traceback (most recent call last):
    ConfigError: step 0 (TemplateRenderer) accepts content but receives path
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, ClassVar

from sitespine.core.exceptions import ConfigError, FileError, SiteSpineError

if TYPE_CHECKING:
    from sitespine.core.context import BuildContext

logger = logging.getLogger("sitespine.pipeline")


class ValueKind(str, Enum):
    """Kinds of value flowing between pipeline steps."""

    PATH = "path"  # source file on disk
    CONTENT = "content"  # Document buffer


@dataclass
class Document:
    """Content buffer passed between compiler and renderer steps.

    Example:
        >>> from sitespine.pipeline import Document
        >>> doc = Document("<p>Hi</p>", {"title": "Greeting"})
        >>> doc.template_context()["title"], doc.template_context()["body"]
        ('Greeting', '<p>Hi</p>')
        >>> doc.as_bytes()
        b'<p>Hi</p>'
    """

    body: str | bytes = ""
    metadata: dict[str, Any] = field(default_factory=dict)

    def template_context(self) -> dict[str, Any]:
        """Metadata plus ``body``, as handed to templates."""
        context = dict(self.metadata)
        context["body"] = self.body
        return context

    def as_bytes(self) -> bytes:
        if isinstance(self.body, bytes):
            return self.body
        return self.body.encode("utf-8")


class PipelineStep(ABC):
    """A single transform stage.

    Subclasses set ``accepts``/``produces`` and the error type that wraps
    unexpected exceptions raised while they run.
    """

    accepts: ClassVar[ValueKind]
    produces: ClassVar[ValueKind]
    error_type: ClassVar[type[FileError]] = FileError

    @abstractmethod
    def apply(self, context: BuildContext, value: Any) -> Any:
        """Transform ``value`` (a `Path` or a `Document`)."""
        ...

    @property
    def templates(self) -> tuple[str, ...]:
        """Template names this step renders (used for staleness checks)."""
        return ()

    @property
    def produces_snapshots(self) -> tuple[str, ...]:
        """Snapshot keys this step appends to."""
        return ()

    @property
    def consumes_snapshots(self) -> tuple[str, ...]:
        """Snapshot keys this step reads."""
        return ()

    @property
    def cacheable(self) -> bool:
        """Whether ``templates`` and the source mtime cover every input.

        Outputs of a pipeline with an uncacheable step are rebuilt on
        every run.
        """
        return True

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


@dataclass
class PipelineResult:
    """Outcome of running a pipeline over one file.

    Attributes:
        value: Final value; a `Path` means "copy this file".
        compiled: First document produced by a compiler step, before any
            template was applied. Recorded as the file's artifact.
    """

    value: Path | Document
    compiled: Document | None = None


class Pipeline:
    """Validated, ordered sequence of steps.

    An empty pipeline accepts and produces a path, which copies the source.

    Args:
        steps: Steps in execution order.

    Raises:
        ConfigError: If a step is not a `PipelineStep` or its input kind
            does not match the previous step's output kind.
    """

    def __init__(self, steps: Iterable[PipelineStep] = ()) -> None:
        self._steps: tuple[PipelineStep, ...] = tuple(steps)
        expected = ValueKind.PATH
        for index, step in enumerate(self._steps):
            if not isinstance(step, PipelineStep):
                raise ConfigError(f"step {index} is not a pipeline step: {step!r}")
            if step.accepts != expected:
                raise ConfigError(
                    f"step {index} ({type(step).__name__}) accepts {step.accepts.value} "
                    f"but receives {expected.value}"
                )
            expected = step.produces
        self._produces = expected

    @property
    def steps(self) -> tuple[PipelineStep, ...]:
        return self._steps

    @property
    def produces(self) -> ValueKind:
        """Kind of the final value."""
        return self._produces

    @property
    def templates(self) -> tuple[str, ...]:
        names: list[str] = []
        for step in self._steps:
            names.extend(n for n in step.templates if n not in names)
        return tuple(names)

    @property
    def produces_snapshots(self) -> tuple[str, ...]:
        return tuple(dict.fromkeys(k for step in self._steps for k in step.produces_snapshots))

    @property
    def consumes_snapshots(self) -> tuple[str, ...]:
        return tuple(dict.fromkeys(k for step in self._steps for k in step.consumes_snapshots))

    @property
    def cacheable(self) -> bool:
        return all(step.cacheable for step in self._steps)

    def run(self, context: BuildContext, source: Path) -> PipelineResult:
        """Run every step in order, feeding each output to the next step.

        Raises:
            FileError: The failing step's error type (`CompilerError`,
                `RendererError`...), with the source path attached.
        """
        value: Path | Document = source
        compiled: Document | None = None
        for step in self._steps:
            logger.debug("%s: running %r", context.source, step)
            try:
                value = step.apply(context, value)
            except SiteSpineError as e:
                if isinstance(e, FileError) and e.source is None:
                    e.source = context.source
                raise
            except Exception as e:
                raise step.error_type(
                    f"{type(step).__name__} failed: {e}",
                    source=context.source,
                    cause=e,
                ) from e
            if compiled is None and isinstance(value, Document):
                compiled = value
        return PipelineResult(value=value, compiled=compiled)

    def __iter__(self) -> Iterator[PipelineStep]:
        return iter(self._steps)

    def __len__(self) -> int:
        return len(self._steps)

    def __repr__(self) -> str:
        return f"Pipeline({list(self._steps)!r})"
