"""Jinja2 template engine used by renderer steps.

Templates are looked up by name in the templates directory, loaded on first
use and kept for the rest of the build (``auto_reload`` is off).

Example:
    >>> import tempfile
    >>> from pathlib import Path
    >>> from sitespine.renderers.templates import TemplateEngine
    >>> with tempfile.TemporaryDirectory() as tmpdir:
    ...     _ = (Path(tmpdir) / "page.html").write_text("<h1>{{ title }}</h1>{{ body }}")
    ...     engine = TemplateEngine(tmpdir)
    ...     engine.render("page.html", {"title": "Hi", "body": "<p>x</p>"})
    '<h1>Hi</h1><p>x</p>'
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, TemplateError, TemplateNotFound
from jinja2.exceptions import FilterArgumentError

from sitespine.core.exceptions import RendererError

DATE_INPUT_FORMAT = "%Y-%m-%d %H:%M:%S"


def sort_by_key(value: Iterable[Any], attr: str, reverse: bool = False) -> list[Any]:
    """Sort a sequence of mappings (or objects) by one key.

    Usage: ``{% for post in posts | sort_by_key("date") %}``. Items missing
    the key sort first.

    Example:
        >>> from sitespine.renderers.templates import sort_by_key
        >>> sort_by_key([{"n": 2}, {"n": 1}], "n")
        [{'n': 1}, {'n': 2}]
    """
    if isinstance(value, (str, bytes, Mapping)) or not isinstance(value, Iterable):
        raise FilterArgumentError("sort_by_key: value is not a list")

    def key(item: Any) -> tuple[bool, Any]:
        if isinstance(item, Mapping):
            found = item.get(attr)
        else:
            found = getattr(item, attr, None)
        return (found is not None, found)

    try:
        return sorted(value, key=key, reverse=reverse)
    except TypeError as e:
        raise FilterArgumentError(f"sort_by_key: values of `{attr}` are not comparable") from e


def date_fmt(value: Any, fmt: str) -> str:
    """Format a date with a strftime string.

    Accepts datetimes, Unix timestamps, ISO 8601 strings and
    ``YYYY-mm-dd HH:MM:SS`` strings. Usage: ``{{ date | date_fmt("%Y-%m-%d") }}``.

    Example:
        >>> from sitespine.renderers.templates import date_fmt
        >>> date_fmt("2020-03-01 10:00:00", "%d/%m/%Y")
        '01/03/2020'
    """
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        moment = datetime.fromtimestamp(value)
    elif isinstance(value, str):
        try:
            moment = datetime.strptime(value, DATE_INPUT_FORMAT)
        except ValueError:
            try:
                moment = datetime.fromisoformat(value)
            except ValueError as e:
                raise FilterArgumentError(f"date_fmt: cannot parse date `{value}`") from e
    else:
        raise FilterArgumentError(f"date_fmt: unsupported date value {value!r}")
    return moment.strftime(fmt)


class TemplateEngine:
    """Loads and renders named templates from a directory.

    Args:
        templates_dir: Directory templates are loaded from.
        filters: Extra Jinja2 filters to register.
    """

    def __init__(
        self,
        templates_dir: str | Path,
        *,
        filters: Mapping[str, Any] | None = None,
    ) -> None:
        self.templates_dir = Path(templates_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=False,  # bodies are already HTML
            auto_reload=False,
            keep_trailing_newline=True,
        )
        self.env.filters["sort_by_key"] = sort_by_key
        self.env.filters["date_fmt"] = date_fmt
        if filters:
            self.env.filters.update(filters)

    def template_path(self, name: str) -> Path:
        """Filesystem path of template ``name``."""
        return self.templates_dir / name

    def render(self, name: str, context: Mapping[str, Any]) -> str:
        """Render template ``name`` with ``context``.

        Raises:
            RendererError: If the template is missing or fails to render.
        """
        try:
            template = self.env.get_template(name)
        except TemplateNotFound as e:
            raise RendererError(
                f"Template `{name}` not found in {self.templates_dir}", cause=e
            ) from e
        except TemplateError as e:
            raise RendererError(f"Could not load template `{name}`: {e}", cause=e) from e
        try:
            return template.render(dict(context))
        except TemplateError as e:
            raise RendererError(
                f"Encountered error when trying to render with template `{name}`: {e}",
                cause=e,
            ) from e
