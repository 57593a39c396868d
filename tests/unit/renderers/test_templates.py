"""Tests for sitespine.renderers.templates - Jinja2 engine and filters."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest
from jinja2.exceptions import FilterArgumentError

from sitespine.core.exceptions import RendererError
from sitespine.renderers.templates import TemplateEngine, date_fmt, sort_by_key


class TestSortByKey:
    def test_sorts_mappings(self) -> None:
        posts = [{"date": "2020-02"}, {"date": "2020-01"}, {"date": "2020-03"}]
        assert [p["date"] for p in sort_by_key(posts, "date")] == ["2020-01", "2020-02", "2020-03"]

    def test_reverse(self) -> None:
        assert sort_by_key([{"n": 1}, {"n": 2}], "n", reverse=True) == [{"n": 2}, {"n": 1}]

    def test_missing_key_sorts_first(self) -> None:
        assert sort_by_key([{"n": 2}, {}, {"n": 1}], "n") == [{}, {"n": 1}, {"n": 2}]

    def test_attributes(self) -> None:
        class Item:
            def __init__(self, n: int) -> None:
                self.n = n

        assert [i.n for i in sort_by_key([Item(3), Item(1)], "n")] == [1, 3]

    def test_not_a_list(self) -> None:
        with pytest.raises(FilterArgumentError):
            sort_by_key("abc", "n")
        with pytest.raises(FilterArgumentError):
            sort_by_key({"n": 1}, "n")

    def test_incomparable_values(self) -> None:
        with pytest.raises(FilterArgumentError):
            sort_by_key([{"n": 1}, {"n": "a"}], "n")


class TestDateFmt:
    def test_datetime(self) -> None:
        assert date_fmt(datetime(2020, 3, 1, 10, 0), "%Y/%m/%d %H:%M") == "2020/03/01 10:00"

    def test_legacy_string_format(self) -> None:
        assert date_fmt("2020-03-01 10:00:00", "%d.%m.%Y") == "01.03.2020"

    def test_iso_string(self) -> None:
        assert date_fmt("2020-03-01T10:00:00", "%H:%M") == "10:00"
        assert date_fmt("2020-03-01", "%B %d, %Y") == "March 01, 2020"

    def test_timestamp(self) -> None:
        stamp = datetime(2021, 5, 4, 12, 0).timestamp()
        assert date_fmt(stamp, "%Y-%m-%d") == "2021-05-04"

    @pytest.mark.parametrize("value", ["yesterday", None, True])
    def test_unparseable(self, value: object) -> None:
        with pytest.raises(FilterArgumentError):
            date_fmt(value, "%Y")


class TestTemplateEngine:
    """Tests for template lookup and rendering."""

    def test_filters_available(self, tmp_path: Path) -> None:
        (tmp_path / "list.html").write_text(
            '{% for p in posts | sort_by_key("n") %}{{ p.n }}{% endfor %}'
            '|{{ when | date_fmt("%Y") }}'
        )
        engine = TemplateEngine(tmp_path)
        out = engine.render("list.html", {"posts": [{"n": 2}, {"n": 1}], "when": "2019-06-15"})
        assert out == "12|2019"

    def test_extra_filters(self, tmp_path: Path) -> None:
        (tmp_path / "t.html").write_text("{{ name | shout }}")
        engine = TemplateEngine(tmp_path, filters={"shout": str.upper})
        assert engine.render("t.html", {"name": "hi"}) == "HI"

    def test_no_autoescape(self, tmp_path: Path) -> None:
        (tmp_path / "t.html").write_text("{{ body }}")
        assert TemplateEngine(tmp_path).render("t.html", {"body": "<b>x</b>"}) == "<b>x</b>"

    def test_keys_that_are_not_identifiers(self, tmp_path: Path) -> None:
        (tmp_path / "t.html").write_text("{{ body }}")
        context = {"body": "ok", "pandoc-api-version": [1, 23]}
        assert TemplateEngine(tmp_path).render("t.html", context) == "ok"

    def test_template_path(self, tmp_path: Path) -> None:
        assert TemplateEngine(tmp_path).template_path("a/b.html") == tmp_path / "a/b.html"

    def test_missing_directory_is_renderer_error(self, tmp_path: Path) -> None:
        with pytest.raises(RendererError):
            TemplateEngine(tmp_path / "missing").render("t.html", {})

    def test_syntax_error(self, tmp_path: Path) -> None:
        (tmp_path / "bad.html").write_text("{% for %}")
        with pytest.raises(RendererError, match="bad.html"):
            TemplateEngine(tmp_path).render("bad.html", {})

    def test_filter_error_is_renderer_error(self, tmp_path: Path) -> None:
        (tmp_path / "t.html").write_text('{{ "nope" | date_fmt("%Y") }}')
        with pytest.raises(RendererError):
            TemplateEngine(tmp_path).render("t.html", {})
