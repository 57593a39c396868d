"""Feed builders."""

from sitespine.feeds.rss import (
    RssChannel,
    RssFeedCompiler,
    RssItem,
    build_rss_feed,
    render_rss,
    rss_feed,
)

__all__ = [
    "RssChannel",
    "RssItem",
    "RssFeedCompiler",
    "rss_feed",
    "build_rss_feed",
    "render_rss",
]
