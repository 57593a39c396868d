"""Compiler steps - source path in, document out.

A compiler is the first content-producing step of a pipeline. It reads the
source file (or ignores it, for generated rules) and returns a `Document`:
the compiled body plus whatever metadata it found.

Example:
    >>> from sitespine.compilers import FunctionCompiler, compiler_seq
    >>> title = FunctionCompiler(lambda ctx, path: {"title": "Hello"})
    >>> body = FunctionCompiler(lambda ctx, path: "<p>Hi</p>")
    >>> doc = compiler_seq(title, body).compile(None, None)
    >>> doc.body, doc.metadata
    ('<p>Hi</p>', {'title': 'Hello'})
"""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any, ClassVar

from sitespine.core.exceptions import CompilerError, ConfigError
from sitespine.pipeline import Document, PipelineStep, ValueKind

if TYPE_CHECKING:
    from sitespine.core.context import BuildContext

CompilerFunc = Callable[["BuildContext", Path], Any]


class Compiler(PipelineStep):
    """Base class for steps that turn a source path into a document."""

    accepts: ClassVar[ValueKind] = ValueKind.PATH
    produces: ClassVar[ValueKind] = ValueKind.CONTENT
    error_type: ClassVar[type[CompilerError]] = CompilerError

    def apply(self, context: BuildContext, value: Path) -> Document:
        return self.compile(context, value)

    @abstractmethod
    def compile(self, context: BuildContext, path: Path) -> Document:
        """Compile the file at ``path``."""
        ...


def to_document(result: Any) -> Document:
    """Normalize a compiler function's return value into a `Document`.

    Example:
        >>> from sitespine.compilers.base import to_document
        >>> to_document({"title": "T", "body": "<p>x</p>"})
        Document(body='<p>x</p>', metadata={'title': 'T'})
        >>> to_document(None)
        Document(body='', metadata={})
    """
    if result is None:
        return Document()
    if isinstance(result, Document):
        return result
    if isinstance(result, (str, bytes)):
        return Document(result)
    if isinstance(result, Mapping):
        metadata = dict(result)
        body = metadata.pop("body", "")
        if not isinstance(body, (str, bytes)):
            body = str(body)
        return Document(body, metadata)
    raise TypeError(
        f"compiler returned {type(result).__name__}; expected Document, mapping, str, bytes or None"
    )


class FunctionCompiler(Compiler):
    """Compile with an arbitrary function ``func(context, path)``.

    The function may return a `Document`, a mapping (its ``"body"`` key
    becomes the body, the rest is metadata), ``str``/``bytes``, or ``None``.

    Args:
        func: The compile function.
        writes: Snapshot keys the function appends to through
            ``context.add_to_snapshot``; declared so rule ordering can be
            checked.
        templates: Templates the function renders through
            ``context.render_template``; a newer template rebuilds the file.
        reads: Snapshot keys the function reads. A rule reading snapshots
            is rebuilt on every run.
    """

    def __init__(
        self,
        func: CompilerFunc,
        writes: Iterable[str] = (),
        *,
        templates: Iterable[str] = (),
        reads: Iterable[str] = (),
    ) -> None:
        if not callable(func):
            raise ConfigError("FunctionCompiler needs a callable")
        self.func = func
        self.writes = tuple(writes)
        self.template_names = tuple(templates)
        self.reads = tuple(reads)

    @property
    def templates(self) -> tuple[str, ...]:
        return self.template_names

    @property
    def produces_snapshots(self) -> tuple[str, ...]:
        return self.writes

    @property
    def consumes_snapshots(self) -> tuple[str, ...]:
        return self.reads

    def compile(self, context: BuildContext, path: Path) -> Document:
        return to_document(self.func(context, path))

    def __repr__(self) -> str:
        name = getattr(self.func, "__name__", type(self.func).__name__)
        return f"FunctionCompiler({name})"


class SequenceCompiler(Compiler):
    """Run several compilers on the same path and merge their documents.

    Metadata is merged with later compilers winning on conflicting keys.
    The body is the last non-empty body produced.
    """

    def __init__(self, compilers: Iterable[Compiler]) -> None:
        self.compilers: tuple[Compiler, ...] = tuple(compilers)
        if not self.compilers:
            raise ConfigError("compiler_seq needs at least one compiler")
        for compiler in self.compilers:
            if not isinstance(compiler, Compiler):
                raise ConfigError(f"Not a compiler: {compiler!r}")

    @property
    def templates(self) -> tuple[str, ...]:
        return tuple(dict.fromkeys(n for c in self.compilers for n in c.templates))

    @property
    def produces_snapshots(self) -> tuple[str, ...]:
        return tuple(dict.fromkeys(k for c in self.compilers for k in c.produces_snapshots))

    @property
    def consumes_snapshots(self) -> tuple[str, ...]:
        return tuple(dict.fromkeys(k for c in self.compilers for k in c.consumes_snapshots))

    @property
    def cacheable(self) -> bool:
        return all(c.cacheable for c in self.compilers)

    def compile(self, context: BuildContext, path: Path) -> Document:
        merged = Document()
        for compiler in self.compilers:
            doc = compiler.compile(context, path)
            merged.metadata.update(doc.metadata)
            if doc.body:
                merged.body = doc.body
        return merged

    def __repr__(self) -> str:
        return f"SequenceCompiler({list(self.compilers)!r})"


def compiler_seq(*compilers: Compiler) -> SequenceCompiler:
    """Combine compilers, e.g. ``compiler_seq(pandoc(), add_to_snapshot("feed"))``."""
    return SequenceCompiler(compilers)


class SnapshotCompiler(Compiler):
    """Append the current file's item id to a snapshot.

    Produces an empty document, so it is meant to be combined with a real
    compiler through `compiler_seq`.
    """

    def __init__(self, key: str) -> None:
        if not isinstance(key, str) or not key:
            raise ConfigError("Snapshot key cannot be empty")
        self.key = key

    @property
    def produces_snapshots(self) -> tuple[str, ...]:
        return (self.key,)

    def compile(self, context: BuildContext, path: Path) -> Document:
        context.add_to_snapshot(self.key)
        return Document()

    def __repr__(self) -> str:
        return f"SnapshotCompiler({self.key!r})"


def add_to_snapshot(key: str) -> SnapshotCompiler:
    return SnapshotCompiler(key)


class ReadCompiler(Compiler):
    """Read the source file as text."""

    def __init__(self, encoding: str = "utf-8") -> None:
        self.encoding = encoding

    def compile(self, context: BuildContext, path: Path) -> Document:
        return Document(Path(path).read_text(encoding=self.encoding))


class CopyStep(PipelineStep):
    """Pass the source path through; the file is copied verbatim."""

    accepts: ClassVar[ValueKind] = ValueKind.PATH
    produces: ClassVar[ValueKind] = ValueKind.PATH

    def apply(self, context: BuildContext, value: Path) -> Path:
        return value
