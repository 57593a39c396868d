"""Routes - mapping source paths to output paths.

A route is a pure function of the relative source path. It never touches
the filesystem.

Example:
    >>> from sitespine.routes import Identity, SetExtension, resolve
    >>> resolve(SetExtension("html"), "posts/a.md")
    'posts/a.html'
    >>> resolve(Identity(), "css/x.css")
    'css/x.css'
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import PurePath, PurePosixPath

from sitespine.core.exceptions import ConfigError, RouteError
from sitespine.patterns import normalize_path


class Route(ABC):
    """Base class for output path policies."""

    @abstractmethod
    def resolve(self, source: str) -> str:
        """Return the output path for a normalized relative source path.

        Raises:
            RouteError: If the source cannot be mapped.
        """
        ...


@dataclass(frozen=True)
class Identity(Route):
    """Keep the source path unchanged (asset copies)."""

    def resolve(self, source: str) -> str:
        return source


@dataclass(frozen=True)
class SetExtension(Route):
    """Replace the file extension, keeping the directory structure.

    Example:
        >>> from sitespine.routes import SetExtension
        >>> SetExtension(".xml").resolve("feeds/main.rss")
        'feeds/main.xml'
        >>> SetExtension("html").resolve("README")
        'README.html'
    """

    extension: str

    def __post_init__(self) -> None:
        if not isinstance(self.extension, str):
            raise ConfigError("Extension must be a string")
        extension = self.extension.lstrip(".")
        if not extension or "/" in extension or "\\" in extension:
            raise ConfigError(f"Invalid extension `{self.extension}`")
        object.__setattr__(self, "extension", extension)

    def resolve(self, source: str) -> str:
        path = PurePosixPath(source)
        if not path.stem or path.name in ("", ".", ".."):
            raise RouteError(f"Path `{source}` has no file stem", source=source)
        return path.with_suffix(f".{self.extension}").as_posix()


@dataclass(frozen=True)
class Const(Route):
    """Ignore the source path and always use this one."""

    path: str

    def __post_init__(self) -> None:
        if not isinstance(self.path, str) or not normalize_path(self.path):
            raise ConfigError("Const route needs a non-empty path")

    def resolve(self, source: str) -> str:
        return normalize_path(self.path)


@dataclass(frozen=True)
class Custom(Route):
    """Compute the output path with a function of the source path.

    Example:
        >>> from sitespine.routes import Custom
        >>> pretty = Custom(lambda p: p.with_suffix("") / "index.html")
        >>> pretty.resolve("about.md")
        'about/index.html'
    """

    func: Callable[[PurePosixPath], str | PurePath]

    def resolve(self, source: str) -> str:
        try:
            result = self.func(PurePosixPath(source))
        except Exception as e:
            raise RouteError(f"Custom route failed for `{source}`: {e}", source=source, cause=e) from e
        return normalize_path(result)


def resolve(route: Route, source: str | PurePath) -> str:
    """Resolve ``source`` with ``route`` and check the result stays relative.

    Raises:
        RouteError: If the route fails, or yields an absolute path or one
            that climbs out of the output directory.

    Example:
        >>> from sitespine.routes import Const, resolve
        >>> resolve(Const("../outside.html"), "a.md")
        Traceback (most recent call last):
        ...
        sitespine.core.exceptions.RouteError: Route for `a.md` leaves the output directory: `../outside.html`
    """
    source = normalize_path(source)
    destination = route.resolve(source)
    path = PurePosixPath(destination)
    if not destination or path.is_absolute() or ".." in path.parts or path == PurePosixPath("."):
        raise RouteError(
            f"Route for `{source}` leaves the output directory: `{destination}`",
            source=source,
        )
    return path.as_posix()
