"""Tests for sitespine.routes - output path policies."""

from __future__ import annotations

from pathlib import PurePosixPath

import pytest

from sitespine.core.exceptions import ConfigError, RouteError
from sitespine.routes import Const, Custom, Identity, SetExtension, resolve


class TestIdentity:
    def test_keeps_path(self) -> None:
        assert resolve(Identity(), "css/x.css") == "css/x.css"

    def test_normalizes_source(self) -> None:
        assert resolve(Identity(), "./css\\x.css") == "css/x.css"


class TestSetExtension:
    """Tests for extension replacement."""

    def test_replaces_extension(self) -> None:
        assert resolve(SetExtension("html"), "posts/a.md") == "posts/a.html"

    def test_leading_dot_accepted(self) -> None:
        assert SetExtension(".html").extension == "html"
        assert resolve(SetExtension(".html"), "a.md") == "a.html"

    def test_adds_extension_when_missing(self) -> None:
        assert resolve(SetExtension("html"), "README") == "README.html"

    def test_only_last_suffix_replaced(self) -> None:
        assert resolve(SetExtension("gz"), "dist/app.tar.bz2") == "dist/app.tar.gz"

    @pytest.mark.parametrize("extension", ["", ".", "a/b", "a\\b"])
    def test_malformed_extension(self, extension: str) -> None:
        with pytest.raises(ConfigError):
            SetExtension(extension)


class TestConst:
    def test_ignores_source(self) -> None:
        route = Const("feeds/rss.xml")
        assert resolve(route, "posts/a.md") == "feeds/rss.xml"
        assert resolve(route, "index.md") == "feeds/rss.xml"

    def test_empty_path_rejected(self) -> None:
        with pytest.raises(ConfigError):
            Const("")


class TestCustom:
    """Tests for function routes."""

    def test_receives_pure_path(self) -> None:
        seen: list[object] = []

        def route(path: PurePosixPath) -> PurePosixPath:
            seen.append(path)
            return path.with_suffix("") / "index.html"

        assert resolve(Custom(route), "about.md") == "about/index.html"
        assert seen == [PurePosixPath("about.md")]

    def test_string_result(self) -> None:
        assert resolve(Custom(lambda p: f"out/{p.name}"), "a/b.md") == "out/b.md"

    def test_exception_becomes_route_error(self) -> None:
        def broken(path: PurePosixPath) -> str:
            raise ValueError("nope")

        with pytest.raises(RouteError) as exc_info:
            resolve(Custom(broken), "a.md")
        assert exc_info.value.source == "a.md"
        assert isinstance(exc_info.value.cause, ValueError)


class TestResolveGuards:
    """Resolved paths must stay inside the output directory."""

    @pytest.mark.parametrize("bad", ["/abs/x.html", "../x.html", "a/../../x.html", "."])
    def test_escaping_paths_rejected(self, bad: str) -> None:
        with pytest.raises(RouteError):
            resolve(Custom(lambda p: bad), "a.md")

    def test_empty_result_rejected(self) -> None:
        with pytest.raises(RouteError):
            resolve(Custom(lambda p: ""), "a.md")
