"""Pattern matching for selecting source files.

A `MatchPattern` is a glob-like selector over relative, ``/``-separated
paths. Wildcards never cross a directory boundary:

- ``index.md`` matches exactly that file,
- ``posts/*`` matches the direct children of ``posts``,
- ``posts/*.md`` matches direct children ending in ``.md``.

A leading ``^`` makes the pattern match anywhere in the tree: ``^posts/*``
matches ``posts/a.md`` and ``blog/posts/a.md``. Recursive wildcards (``**``)
are not supported; chain several patterns in a `PatternSet` instead.

Example:
    >>> from sitespine.patterns import MatchPattern
    >>> MatchPattern.parse("posts/*").matches("posts/a.md")
    True
    >>> MatchPattern.parse("posts/*").matches("posts/2020/a.md")
    False
    >>> MatchPattern.parse("^posts/*").matches("blog/posts/a.md")
    True
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from pathlib import Path, PurePath

from sitespine.core.exceptions import ConfigError

ANYWHERE_PREFIX = "^"


def normalize_path(path: str | PurePath) -> str:
    """Normalize a relative path to ``/`` separators without a ``./`` prefix.

    Example:
        >>> from sitespine.patterns import normalize_path
        >>> normalize_path("./posts\\\\a.md")
        'posts/a.md'
    """
    text = str(path).replace("\\", "/")
    while text.startswith("./"):
        text = text[2:]
    return text


@dataclass(frozen=True)
class MatchPattern:
    """Single-level glob selector.

    Args:
        glob: Pattern text without the ``^`` prefix.
        anywhere: Match a trailing run of path segments instead of
            the whole path from the root.

    Example:
        >>> from sitespine.patterns import MatchPattern
        >>> p = MatchPattern("css/*.css")
        >>> p.matches("css/main.css"), p.matches("css/main.scss")
        (True, False)
        >>> str(MatchPattern("posts/*", anywhere=True))
        '^posts/*'
    """

    glob: str
    anywhere: bool = False
    segments: tuple[str, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.glob, str):
            raise ConfigError(f"Pattern must be a string, got {type(self.glob).__name__}")
        glob = normalize_path(self.glob)
        if not glob:
            raise ConfigError("Pattern cannot be empty")
        if glob.startswith("/"):
            raise ConfigError(f"Pattern `{self.glob}` must be relative to the content root")

        segments = tuple(glob.split("/"))
        for segment in segments:
            if segment in ("", ".", ".."):
                raise ConfigError(f"Pattern `{self.glob}` has an empty or relative segment")
            if "**" in segment:
                raise ConfigError(
                    f"Pattern `{self.glob}` uses a recursive wildcard, which is not supported"
                )
            if segment.count("[") != segment.count("]"):
                raise ConfigError(f"Pattern `{self.glob}` has an unbalanced character class")

        object.__setattr__(self, "glob", glob)
        object.__setattr__(self, "segments", segments)

    @classmethod
    def parse(cls, text: str) -> MatchPattern:
        """Build a pattern from its textual form, honouring the ``^`` prefix."""
        if isinstance(text, str) and text.startswith(ANYWHERE_PREFIX):
            return cls(text[len(ANYWHERE_PREFIX) :], anywhere=True)
        return cls(text)

    def matches(self, path: str | PurePath) -> bool:
        """Check whether a relative source path is selected by this pattern."""
        parts = [part for part in normalize_path(path).split("/") if part not in ("", ".")]
        count = len(self.segments)
        if len(parts) < count:
            return False
        if not self.anywhere and len(parts) != count:
            return False
        tail = parts[len(parts) - count :]
        return all(fnmatchcase(part, segment) for part, segment in zip(tail, self.segments))

    def __str__(self) -> str:
        prefix = ANYWHERE_PREFIX if self.anywhere else ""
        return f"{prefix}{self.glob}"


PatternLike = str | MatchPattern | Iterable[str | MatchPattern]


@dataclass(frozen=True)
class PatternSet:
    """Non-empty union of patterns; a path matches if any pattern does.

    Example:
        >>> from sitespine.patterns import PatternSet
        >>> patterns = PatternSet.of(["index.md", "^posts/*"])
        >>> patterns.matches("index.md"), patterns.matches("about.md")
        (True, False)
        >>> str(patterns)
        'index.md, ^posts/*'
    """

    patterns: tuple[MatchPattern, ...]

    def __post_init__(self) -> None:
        if not self.patterns:
            raise ConfigError("A rule needs at least one pattern")

    @classmethod
    def of(cls, value: PatternLike | PatternSet) -> PatternSet:
        """Coerce a string, pattern or iterable of either into a set."""
        if isinstance(value, PatternSet):
            return value
        if isinstance(value, (str, MatchPattern)):
            value = [value]
        try:
            items = list(value)
        except TypeError as e:
            raise ConfigError(f"Cannot build a pattern from {value!r}") from e
        patterns = tuple(
            item if isinstance(item, MatchPattern) else MatchPattern.parse(item)
            for item in items
        )
        return cls(patterns)

    def matches(self, path: str | PurePath) -> bool:
        return any(pattern.matches(path) for pattern in self.patterns)

    def __iter__(self) -> Iterator[MatchPattern]:
        return iter(self.patterns)

    def __str__(self) -> str:
        return ", ".join(str(p) for p in self.patterns)


def list_sources(root: str | Path, exclude: Iterable[str | Path] = ()) -> list[str]:
    """List regular files under ``root`` as sorted relative POSIX paths.

    Hidden files and directories (``.git``, ``.cache``...) are skipped, as
    is every directory in ``exclude`` (typically the output directory).

    Args:
        root: Content root.
        exclude: Directories to leave out of the walk.

    Returns:
        Relative paths in lexicographic order.
    """
    root = Path(root)
    excluded = {Path(p).resolve() for p in exclude}
    sources: list[str] = []
    for dirpath, dirnames, filenames in os.walk(root):
        current = Path(dirpath)
        dirnames[:] = [
            name
            for name in dirnames
            if not name.startswith(".") and (current / name).resolve() not in excluded
        ]
        for name in filenames:
            if name.startswith("."):
                continue
            sources.append((current / name).relative_to(root).as_posix())
    return sorted(sources)
