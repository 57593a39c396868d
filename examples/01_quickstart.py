#!/usr/bin/env python3
"""
SiteSpine Quickstart Example

Shows the basic flow without external tools: a plain-text compiler,
a Jinja2 template, a snapshot and an RSS feed. Run it twice to see the
second build reuse the cached pages.

Usage:
    python examples/01_quickstart.py
"""

import html
import tempfile
from pathlib import Path

from sitespine import (
    FunctionCompiler,
    RssChannel,
    SetExtension,
    State,
    TemplateRenderer,
    add_to_snapshot,
    build_rss_feed,
    compiler_seq,
    copy,
    match_pattern,
    rss_feed,
)
from sitespine.reporter import RichBuildReporter

POSTS = {
    "posts/first.txt": "First post\n\nPlain text, escaped and wrapped in paragraphs.",
    "posts/second.txt": "Second post\n\nEvery post lands in the feed.",
}


def text_to_html(ctx, path: Path) -> dict:
    """First line is the title, blank-line separated blocks are paragraphs."""
    title, _, rest = path.read_text(encoding="utf-8").partition("\n")
    paragraphs = [p.strip() for p in rest.split("\n\n") if p.strip()]
    body = "\n".join(f"<p>{html.escape(p)}</p>" for p in paragraphs)
    return {"title": title.strip(), "body": body}


def build(root: Path) -> None:
    state = State(content_root=root)
    state.then(
        match_pattern(
            "posts/*",
            SetExtension("html"),
            TemplateRenderer("post.html"),
            compiler_seq(FunctionCompiler(text_to_html), add_to_snapshot("posts")),
        )
    )
    state.then(copy("css/*"))
    state.then(
        build_rss_feed(
            "rss.xml",
            rss_feed("posts", RssChannel(title="Quickstart", link="http://localhost")),
        )
    )
    RichBuildReporter().report(state.finish())


def main() -> None:
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        for name, text in POSTS.items():
            (root / name).parent.mkdir(parents=True, exist_ok=True)
            (root / name).write_text(text)
        (root / "css").mkdir()
        (root / "css" / "main.css").write_text("body { font-family: sans-serif; }")
        (root / "templates").mkdir()
        (root / "templates" / "post.html").write_text(
            "<html><head><title>{{ title }}</title></head><body>{{ body }}</body></html>"
        )

        print("First build:")
        build(root)

        print("\nSecond build (nothing changed):")
        build(root)

        print("\nOutput files:")
        for path in sorted((root / "_site").rglob("*")):
            if path.is_file():
                print(f"  {path.relative_to(root)}")


if __name__ == "__main__":
    main()
