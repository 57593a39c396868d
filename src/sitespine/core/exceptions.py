"""Custom exceptions.

SiteSpine uses a hierarchy of exceptions to separate fatal build errors
from per-file failures that are recorded and reported at the end:

Example:
    >>> from sitespine.core.exceptions import CompilerError, FileError, SiteSpineError
    >>> isinstance(CompilerError("pandoc failed"), FileError)
    True
    >>> try:
    ...     raise CompilerError("pandoc failed", source="posts/a.md")
    ... except SiteSpineError as e:
    ...     print(f"Caught: {type(e).__name__} for {e.source}")
    Caught: CompilerError for posts/a.md
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sitespine.core.report import BuildReport


class SiteSpineError(Exception):
    """Base exception for SiteSpine.

    Example:
        >>> from sitespine.core.exceptions import SiteSpineError
        >>> e = SiteSpineError("something went wrong")
        >>> str(e)
        'something went wrong'
    """


class ConfigError(SiteSpineError):
    """A rule, pattern, route or pipeline is malformed.

    Raised while rules are constructed or registered, before anything
    is built.

    Example:
        >>> from sitespine.core.exceptions import ConfigError
        >>> raise ConfigError("bad pattern")  # doctest: +IGNORE_EXCEPTION_DETAIL
        Traceback (most recent call last):
        ConfigError: bad pattern
    """


class BuildIOError(SiteSpineError):
    """Filesystem failure that aborts the whole build.

    Missing content root, unwritable output directory and failed writes
    end up here. The triggering ``OSError`` is kept as ``cause``.

    Example:
        >>> from sitespine.core.exceptions import BuildIOError
        >>> err = BuildIOError("cannot create _site", path="_site")
        >>> err.path
        '_site'
    """

    def __init__(
        self,
        message: str,
        path: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.path = path
        self.cause = cause


class FileError(SiteSpineError):
    """Recoverable failure while processing one source file.

    Example:
        >>> from sitespine.core.exceptions import FileError
        >>> err = FileError("Conversion failed", source="posts/a.md")
        >>> err.source
        'posts/a.md'
    """

    def __init__(
        self,
        message: str,
        source: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.source = source
        self.cause = cause


class CompilerError(FileError):
    """A compiler step (external converter or function) failed."""


class RendererError(FileError):
    """A template could not be loaded or rendered."""


class RouteError(FileError):
    """A source path cannot be mapped to an output path.

    Example:
        >>> from sitespine.core.exceptions import RouteError
        >>> raise RouteError("no file stem", source="")  # doctest: +IGNORE_EXCEPTION_DETAIL
        Traceback (most recent call last):
        RouteError: no file stem
    """


class BuildFailed(SiteSpineError):
    """The build was stopped, or finished with recorded failures.

    Carries the report collected up to that point.
    """

    def __init__(
        self,
        message: str,
        report: BuildReport | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.report = report
        self.cause = cause
