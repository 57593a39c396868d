"""RSS 2.0 feed builder.

The feed is a generated rule: it has no source file, only a target path.
At build time it reads every item id appended to a snapshot, looks each up
in the artifact store and writes one ``<item>`` per artifact, in snapshot
order.

Example:
    >>> from sitespine.feeds import RssChannel, build_rss_feed, rss_feed
    >>> channel = RssChannel(
    ...     title="example page",
    ...     description="example page",
    ...     link="https://example.com",
    ... )
    >>> rule = build_rss_feed("rss.xml", rss_feed("main-rss-feed", channel))
    >>> rule.target, rule.consumes
    ('rss.xml', ('main-rss-feed',))
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from collections.abc import Sequence
from datetime import UTC, date, datetime
from email.utils import format_datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import Field

from sitespine.compilers.base import Compiler
from sitespine.core.exceptions import ConfigError
from sitespine.models.artifact import BuildArtifact
from sitespine.models.base import SiteSpineModel
from sitespine.pipeline import Document
from sitespine.rules import Rule, create

if TYPE_CHECKING:
    from sitespine.core.context import BuildContext

ATOM_NS = "http://www.w3.org/2005/Atom"
EPOCH_PUB_DATE = "Thu, 01 Jan 1970 00:00:00 +0000"
DEFAULT_TTL = 1800


class RssChannel(SiteSpineModel):
    """Channel-level settings of a feed."""

    title: str = Field(..., description="Channel title")
    description: str = Field(default="", description="Channel description")
    link: str = Field(..., description="Site URL; item links are built from it")
    last_build_date: str = Field(default="", description="Optional RFC 822 date")
    pub_date: str = Field(default=EPOCH_PUB_DATE, description="RFC 822 publication date")
    ttl: int = Field(default=DEFAULT_TTL, ge=0, description="Minutes a reader may cache")


class RssItem(SiteSpineModel):
    """One ``<item>`` of the feed."""

    title: str
    description: str = ""
    link: str
    guid: str
    pub_date: str = EPOCH_PUB_DATE


def join_url(base: str, path: str) -> str:
    """Join a site URL and an output path with exactly one ``/``.

    Example:
        >>> from sitespine.feeds.rss import join_url
        >>> join_url("https://example.com/", "/posts/a.html")
        'https://example.com/posts/a.html'
    """
    return f"{base.rstrip('/')}/{path.lstrip('/')}"


def rfc822_date(value: Any) -> str | None:
    """Format a metadata date for ``<pubDate>``.

    Datetimes and ISO 8601 strings are converted (naive values are taken
    as UTC); any other string is used as written, assuming the author
    already wrote an RFC 822 date.

    Example:
        >>> from sitespine.feeds.rss import rfc822_date
        >>> rfc822_date("2020-03-01")
        'Sun, 01 Mar 2020 00:00:00 +0000'
        >>> rfc822_date("Sun, 01 Mar 2020 10:00:00 GMT")
        'Sun, 01 Mar 2020 10:00:00 GMT'
    """
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, date):
        moment = datetime(value.year, value.month, value.day)
    elif isinstance(value, str) and value.strip():
        try:
            moment = datetime.fromisoformat(value.strip())
        except ValueError:
            return value.strip()
    else:
        return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return format_datetime(moment)


def item_from_artifact(channel: RssChannel, artifact: BuildArtifact) -> RssItem:
    """Build a feed item from the artifact of a processed file."""
    title = artifact.title or f"No title, uuid: {artifact.item_id}"
    link = join_url(channel.link, artifact.path)
    pub_date = (
        rfc822_date(artifact.metadata.get("date"))
        or rfc822_date(artifact.modified_date)
        or EPOCH_PUB_DATE
    )
    return RssItem(
        title=title,
        description=artifact.body,
        link=link,
        guid=link,
        pub_date=pub_date,
    )


def render_rss(channel: RssChannel, items: Sequence[RssItem], self_link: str) -> str:
    """Serialize a channel and its items as an RSS 2.0 document."""
    ET.register_namespace("atom", ATOM_NS)

    rss = ET.Element("rss", attrib={"version": "2.0"})
    chan = ET.SubElement(rss, "channel")
    ET.SubElement(chan, "title").text = channel.title
    ET.SubElement(chan, "description").text = channel.description
    ET.SubElement(chan, "link").text = channel.link
    ET.SubElement(
        chan,
        f"{{{ATOM_NS}}}link",
        attrib={"href": self_link, "rel": "self", "type": "application/rss+xml"},
    )
    ET.SubElement(chan, "pubDate").text = channel.pub_date
    if channel.last_build_date:
        ET.SubElement(chan, "lastBuildDate").text = channel.last_build_date
    ET.SubElement(chan, "ttl").text = str(channel.ttl)

    for item in items:
        item_el = ET.SubElement(chan, "item")
        ET.SubElement(item_el, "title").text = item.title
        ET.SubElement(item_el, "description").text = item.description
        ET.SubElement(item_el, "link").text = item.link
        ET.SubElement(item_el, "guid").text = item.guid
        ET.SubElement(item_el, "pubDate").text = item.pub_date

    ET.indent(rss)
    return '<?xml version="1.0" encoding="UTF-8"?>\n' + ET.tostring(rss, encoding="unicode") + "\n"


class RssFeedCompiler(Compiler):
    """Compile the items of a snapshot into an RSS document.

    A snapshot key no rule appended to gives an empty (but valid) feed and
    a warning. Item ids with no recorded artifact are skipped with a
    warning.

    Args:
        snapshot_key: Snapshot to read items from.
        channel: Channel settings.
    """

    def __init__(self, snapshot_key: str, channel: RssChannel) -> None:
        if not isinstance(snapshot_key, str) or not snapshot_key:
            raise ConfigError("Snapshot key cannot be empty")
        if not isinstance(channel, RssChannel):
            raise ConfigError("rss_feed needs an RssChannel")
        self.snapshot_key = snapshot_key
        self.channel = channel

    @property
    def consumes_snapshots(self) -> tuple[str, ...]:
        return (self.snapshot_key,)

    def compile(self, context: BuildContext, path: Path) -> Document:
        if self.snapshot_key not in context.snapshots:
            context.warn(
                f"There are no snapshots with key `{self.snapshot_key}`, is the source rule "
                "empty (ie producing no items) or have you typed the name wrong?"
            )
        items: list[RssItem] = []
        for item_id in context.snapshot(self.snapshot_key):
            artifact = context.artifact(item_id)
            if artifact is None:
                context.warn(f"No artifact recorded for item {item_id}, skipping it")
                continue
            items.append(item_from_artifact(self.channel, artifact))

        self_link = join_url(self.channel.link, context.destination)
        body = render_rss(self.channel, items, self_link)
        return Document(body, {"title": self.channel.title, "items": len(items)})

    def __repr__(self) -> str:
        return f"RssFeedCompiler({self.snapshot_key!r})"


def rss_feed(snapshot_key: str, channel: RssChannel) -> RssFeedCompiler:
    """Create a feed compiler over ``snapshot_key``."""
    return RssFeedCompiler(snapshot_key, channel)


def build_rss_feed(path: str, compiler: RssFeedCompiler, *, name: str | None = None) -> Rule:
    """Rule that writes the feed produced by ``compiler`` to ``path``.

    Register it after the rules that fill the snapshot; rules run in
    registration order.
    """
    if not isinstance(compiler, RssFeedCompiler):
        raise ConfigError("build_rss_feed needs an RssFeedCompiler, see rss_feed()")
    return create(path, compiler=compiler, name=name or f"rss feed {path}")
