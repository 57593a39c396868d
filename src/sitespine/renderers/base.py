"""Renderer steps - document in, document out.

Renderers run after the compiler. They receive the compiled document and
produce the final output body, usually by applying one or more templates.
Metadata is carried through untouched so later renderers (and the template
context) still see it.

Example:
    >>> from sitespine.pipeline import Document
    >>> from sitespine.renderers import CustomRenderer, RendererPipeline
    >>> shout = CustomRenderer(lambda ctx, doc: str(doc.body).upper())
    >>> wrap = CustomRenderer(lambda ctx, doc: f"<main>{doc.body}</main>")
    >>> doc = RendererPipeline([shout, wrap]).render(None, Document("hi"))
    >>> doc
    '<main>HI</main>'
"""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, ClassVar

from sitespine.core.exceptions import ConfigError, RendererError
from sitespine.pipeline import Document, PipelineStep, ValueKind

if TYPE_CHECKING:
    from sitespine.core.context import BuildContext


class Renderer(PipelineStep):
    """Base class for steps that turn a document into output text."""

    accepts: ClassVar[ValueKind] = ValueKind.CONTENT
    produces: ClassVar[ValueKind] = ValueKind.CONTENT
    error_type: ClassVar[type[RendererError]] = RendererError

    def apply(self, context: BuildContext, value: Document) -> Document:
        return Document(self.render(context, value), dict(value.metadata))

    @abstractmethod
    def render(self, context: BuildContext, document: Document) -> str:
        """Return the rendered body for ``document``."""
        ...


class TemplateRenderer(Renderer):
    """Apply one named template.

    The template sees the document metadata, the compiled content as
    ``body``, plus ``ROOT_PREFIX`` and ``path``.

    Args:
        name: Template file name, relative to the templates directory.
    """

    def __init__(self, name: str) -> None:
        if not isinstance(name, str) or not name:
            raise ConfigError("Template name cannot be empty")
        self.name = name

    @property
    def templates(self) -> tuple[str, ...]:
        return (self.name,)

    def render(self, context: BuildContext, document: Document) -> str:
        return context.render_template(self.name, document.template_context())

    def __repr__(self) -> str:
        return f"TemplateRenderer({self.name!r})"


class RendererPipeline(Renderer):
    """Chain renderers; each output becomes the next one's ``body``.

    The first renderer in the list is applied first, so
    ``RendererPipeline([TemplateRenderer("post.html"),
    TemplateRenderer("default.html")])`` nests a post inside the site
    layout. An empty chain renders to an empty string.
    """

    def __init__(self, renderers: Iterable[Renderer]) -> None:
        self.renderers: tuple[Renderer, ...] = tuple(renderers)
        for renderer in self.renderers:
            if not isinstance(renderer, Renderer):
                raise ConfigError(f"Not a renderer: {renderer!r}")

    @property
    def templates(self) -> tuple[str, ...]:
        return tuple(dict.fromkeys(n for r in self.renderers for n in r.templates))

    @property
    def consumes_snapshots(self) -> tuple[str, ...]:
        return tuple(dict.fromkeys(k for r in self.renderers for k in r.consumes_snapshots))

    @property
    def cacheable(self) -> bool:
        return all(r.cacheable for r in self.renderers)

    def render(self, context: BuildContext, document: Document) -> str:
        if not self.renderers:
            return ""
        current = document
        for renderer in self.renderers:
            current = Document(renderer.render(context, current), current.metadata)
        return str(current.body)

    def __repr__(self) -> str:
        return f"RendererPipeline({list(self.renderers)!r})"


class CustomRenderer(Renderer):
    """Render with an arbitrary function ``func(context, document) -> str``.

    Without ``templates`` the function's inputs are unknown, so its outputs
    are rebuilt on every run. Declaring the templates it renders (an empty
    list if none) lets unchanged outputs be skipped.

    Args:
        func: The render function.
        templates: Templates the function renders through
            ``context.render_template``.
        reads: Snapshot keys the function reads.
    """

    def __init__(
        self,
        func: Callable[[BuildContext, Document], str],
        *,
        templates: Iterable[str] | None = None,
        reads: Iterable[str] = (),
    ) -> None:
        if not callable(func):
            raise ConfigError("CustomRenderer needs a callable")
        self.func = func
        self.template_names = tuple(templates) if templates is not None else None
        self.reads = tuple(reads)

    @property
    def templates(self) -> tuple[str, ...]:
        return self.template_names or ()

    @property
    def consumes_snapshots(self) -> tuple[str, ...]:
        return self.reads

    @property
    def cacheable(self) -> bool:
        return self.template_names is not None

    def render(self, context: BuildContext, document: Document) -> str:
        result = self.func(context, document)
        if isinstance(result, bytes):
            return result.decode("utf-8")
        return str(result)

    def __repr__(self) -> str:
        name = getattr(self.func, "__name__", type(self.func).__name__)
        return f"CustomRenderer({name})"


def load_and_apply_template(name: str) -> TemplateRenderer:
    """Shorthand for ``TemplateRenderer(name)``."""
    return TemplateRenderer(name)
