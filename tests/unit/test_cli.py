"""Tests for the command line interface."""

from __future__ import annotations

from pathlib import Path

import pytest
import typer
from typer.testing import CliRunner

from sitespine import __version__
from sitespine.cli import app, load_site

runner = CliRunner()

SITE_DEFINITION = '''
from sitespine import copy, match_pattern, ReadCompiler, SetExtension


def site(state):
    state.then(copy("css/*"))
    state.then(match_pattern("posts/*", SetExtension("html"), None, ReadCompiler()))


def broken(state):
    state.then(match_pattern("posts/*", SetExtension("html"), None, ReadCompiler("no-such-codec")))
'''


@pytest.fixture
def project(tmp_path: Path, write_files) -> Path:
    site_root = write_files({"css/main.css": "body {}", "posts/a.md": "alpha"})
    (tmp_path / "site.py").write_text(SITE_DEFINITION)
    return site_root


class TestCommands:
    def test_version(self) -> None:
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_info(self) -> None:
        result = runner.invoke(app, ["info"])
        assert result.exit_code == 0
        assert "Output directory" in result.output

    def test_info_invalid_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("VERBOSITY", "9")
        result = runner.invoke(app, ["info"])
        assert result.exit_code == 2
        assert "Error" in result.output


class TestBuildCommand:
    """Tests for `sitespine build`."""

    def test_build(self, tmp_path: Path, project: Path) -> None:
        result = runner.invoke(
            app, ["build", f"{tmp_path / 'site.py'}:site", "-C", str(project), "-v", "0"]
        )
        assert result.exit_code == 0, result.output
        assert (project / "_site/css/main.css").exists()
        assert (project / "_site/posts/a.html").read_text() == "alpha"

    def test_output_dir_option(self, tmp_path: Path, project: Path) -> None:
        out = tmp_path / "public"
        result = runner.invoke(
            app,
            ["build", f"{tmp_path / 'site.py'}:site", "-C", str(project), "-o", str(out), "-v", "0"],
        )
        assert result.exit_code == 0, result.output
        assert (out / "css/main.css").exists()

    def test_failed_file_exit_code(self, tmp_path: Path, project: Path) -> None:
        result = runner.invoke(
            app, ["build", f"{tmp_path / 'site.py'}:broken", "-C", str(project), "-v", "0"]
        )
        assert result.exit_code == 1
        assert "posts/a.md" in result.output

    def test_fatal_error_exit_code(self, tmp_path: Path, project: Path) -> None:
        result = runner.invoke(
            app,
            ["build", f"{tmp_path / 'site.py'}:site", "-C", str(tmp_path / "missing"), "-v", "0"],
        )
        assert result.exit_code == 2
        assert "Error" in result.output

    def test_invalid_environment_exit_code(
        self, tmp_path: Path, project: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("VERBOSITY", "9")
        result = runner.invoke(app, ["build", f"{tmp_path / 'site.py'}:site", "-C", str(project)])
        assert result.exit_code == 2
        assert "Error" in result.output
        assert not (project / "_site").exists()

    def test_bad_target(self) -> None:
        result = runner.invoke(app, ["build", "site"])
        assert result.exit_code != 0


class TestLoadSite:
    def test_file_target(self, tmp_path: Path) -> None:
        (tmp_path / "mysite.py").write_text("def build(state):\n    return 'ok'\n")
        assert load_site(f"{tmp_path / 'mysite.py'}:build")(None) == "ok"

    def test_module_target(self) -> None:
        assert load_site("sitespine.rules:copy").__name__ == "copy"

    @pytest.mark.parametrize(
        "target", ["no-colon", "missing.py:site", "sitespine.rules:nothing", "no_such_module_x:f"]
    )
    def test_invalid_targets(self, target: str) -> None:
        with pytest.raises(typer.BadParameter):
            load_site(target)
