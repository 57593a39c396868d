#!/usr/bin/env python3
"""
SiteSpine Blog Example

Builds a small blog: markdown posts and an index page converted with
pandoc, a copied stylesheet and an RSS feed of the posts.

Expects this directory tree:

    ├── site.py
    ├── css/main.css
    ├── index.md
    ├── posts/*.md
    └── templates/
        ├── default.html
        └── index.html

Usage (pandoc must be on PATH):
    cd examples/blog
    python site.py
    FORCE=1 VERBOSITY=3 python site.py

    # or through the CLI
    sitespine build site.py:site -C examples/blog
"""

from sitespine import (
    RendererPipeline,
    RssChannel,
    SetExtension,
    State,
    TemplateRenderer,
    add_to_snapshot,
    build_rss_feed,
    compiler_seq,
    copy,
    match_pattern,
    pandoc,
    rss_feed,
)
from sitespine.reporter import RichBuildReporter

CHANNEL = RssChannel(
    title="example page",
    description="example using sitespine",
    link="http://localhost",
)


def site(state: State) -> None:
    """Register the blog's rules on ``state``."""
    state.then(
        match_pattern(
            "^posts/*",
            SetExtension("html"),
            TemplateRenderer("default.html"),
            compiler_seq(pandoc(), add_to_snapshot("main-rss-feed")),
        )
    )
    state.then(
        match_pattern(
            "^index.md",
            SetExtension("html"),
            RendererPipeline([TemplateRenderer("index.html"), TemplateRenderer("default.html")]),
            pandoc(),
        )
    )
    state.then(copy("^css/*"))
    state.then(build_rss_feed("rss.xml", rss_feed("main-rss-feed", CHANNEL)))


def main() -> int:
    # content_root defaults to the working directory
    state = State()
    site(state)
    report = state.finish()
    RichBuildReporter().report(report)
    return report.exit_code


if __name__ == "__main__":
    raise SystemExit(main())
