"""Markdown compiler backed by the ``pandoc`` executable.

The source is converted twice: once to pandoc's JSON AST, to read the
front-matter metadata, and once to HTML for the body. Front matter looks
like::

    ---
    title: example title
    author: someone
    date: 2019-06-15
    ---

    Lorem ipsum.

Pandoc's tagged metadata values (``MetaMap``, ``MetaList``, ``MetaBool``,
``MetaString``, ``MetaInlines``, ``MetaBlocks``) are flattened to plain
Python values so templates can use them directly.

Example:
    >>> from sitespine.compilers.pandoc import parse_pandoc_metadata
    >>> ast = {"meta": {"title": {"t": "MetaInlines", "c": [
    ...     {"t": "Str", "c": "Hello"}, {"t": "Space"}, {"t": "Str", "c": "world"}]}}}
    >>> parse_pandoc_metadata(ast)
    {'title': 'Hello world'}
"""

from __future__ import annotations

import json
import logging
import subprocess
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Any

from sitespine.compilers.base import Compiler
from sitespine.core.exceptions import CompilerError
from sitespine.pipeline import Document

if TYPE_CHECKING:
    from sitespine.core.context import BuildContext

logger = logging.getLogger("sitespine.compilers.pandoc")

# Inlines whose content is a list of inlines; the rest flatten to "".
_NESTED_INLINES = frozenset(
    {"Emph", "Strong", "Strikeout", "Superscript", "Subscript", "SmallCaps", "Underline"}
)
_BREAKS = frozenset({"SoftBreak", "LineBreak"})


def flatten_inlines(inlines: Iterable[Any]) -> str:
    """Concatenate the plain text of a list of pandoc inline elements.

    Formatting (emphasis, strong...) is dropped, spaces and breaks are kept.
    Links, images, code, math, notes and other complex inlines contribute
    nothing.
    """
    parts: list[str] = []
    for inline in inlines:
        if not isinstance(inline, dict):
            continue
        tag = inline.get("t")
        if tag == "Str":
            parts.append(str(inline.get("c", "")))
        elif tag == "Space":
            parts.append(" ")
        elif tag in _BREAKS:
            parts.append("\n")
        elif tag in _NESTED_INLINES:
            parts.append(flatten_inlines(inline.get("c") or []))
    return "".join(parts)


def meta_to_python(value: Any) -> Any:
    """Convert one tagged pandoc metadata value to a plain Python value.

    Example:
        >>> from sitespine.compilers.pandoc import meta_to_python
        >>> meta_to_python({"t": "MetaList", "c": [
        ...     {"t": "MetaBool", "c": True}, {"t": "MetaString", "c": "x"}]})
        [True, 'x']
    """
    if not isinstance(value, dict):
        return value
    tag = value.get("t")
    content = value.get("c")
    if tag == "MetaMap":
        return {k: meta_to_python(v) for k, v in (content or {}).items()}
    if tag == "MetaList":
        return [meta_to_python(v) for v in content or []]
    if tag == "MetaBool":
        return bool(content)
    if tag == "MetaString":
        return "" if content is None else str(content)
    if tag == "MetaInlines":
        return flatten_inlines(content or [])
    if tag == "MetaBlocks":
        return ""
    return value


def parse_pandoc_metadata(document: Any) -> dict[str, Any]:
    """Extract flattened metadata from a pandoc JSON document.

    Anything that does not look like a pandoc document yields ``{}``.
    """
    if not isinstance(document, dict):
        return {}
    meta = document.get("meta")
    if not isinstance(meta, dict):
        return {}
    return {key: meta_to_python(value) for key, value in meta.items()}


class PandocCompiler(Compiler):
    """Compile a markdown file with ``pandoc``.

    Args:
        executable: Name or path of the pandoc binary.
        extra_args: Extra arguments passed to both invocations
            (e.g. ``["--from", "markdown+smart"]``).
        timeout: Seconds to wait for each invocation, ``None`` to wait
            forever.

    Raises:
        CompilerError: If pandoc cannot be started, times out or exits with
            a non-zero status. The message carries pandoc's stderr.
    """

    def __init__(
        self,
        executable: str = "pandoc",
        extra_args: Sequence[str] = (),
        timeout: float | None = None,
    ) -> None:
        self.executable = executable
        self.extra_args = tuple(extra_args)
        self.timeout = timeout

    def compile(self, context: BuildContext, path: Path) -> Document:
        raw = self._run(["-t", "json", str(path)], context.source)
        try:
            metadata = parse_pandoc_metadata(json.loads(raw))
        except ValueError:
            logger.warning("%s: could not parse pandoc metadata, ignoring it", context.source)
            metadata = {}
        if context.verbosity > 2:
            logger.debug("Parsed metadata for %s: %r", context.source, metadata)

        body = self._run(["-t", "html", str(path)], context.source)
        return Document(body, metadata)

    def _run(self, args: list[str], source: str) -> str:
        command = [self.executable, *self.extra_args, *args]
        try:
            completed = subprocess.run(
                command,
                capture_output=True,
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            raise CompilerError(
                f"pandoc timed out after {self.timeout}s", source=source, cause=e
            ) from e
        except OSError as e:
            raise CompilerError(
                f"failed to execute {self.executable}: {e}", source=source, cause=e
            ) from e

        if completed.returncode != 0:
            stderr = completed.stderr.decode("utf-8", errors="replace").strip()
            raise CompilerError(
                f"{self.executable} exited with status {completed.returncode}: {stderr}",
                source=source,
            )
        return completed.stdout.decode("utf-8", errors="replace")

    def __repr__(self) -> str:
        return f"PandocCompiler({self.executable!r})"


def pandoc(
    executable: str = "pandoc",
    extra_args: Sequence[str] = (),
    timeout: float | None = None,
) -> PandocCompiler:
    """Create a `PandocCompiler`."""
    return PandocCompiler(executable, extra_args, timeout)
