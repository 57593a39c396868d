"""Tests for sitespine.feeds.rss - RSS 2.0 feed builder."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from datetime import UTC, datetime
from pathlib import Path

import pytest

from sitespine.core.exceptions import ConfigError
from sitespine.feeds import RssChannel, RssFeedCompiler, build_rss_feed, rss_feed
from sitespine.feeds.rss import ATOM_NS, EPOCH_PUB_DATE, item_from_artifact, rfc822_date
from sitespine.models.artifact import BuildArtifact, uuid_from_path
from sitespine.snapshots import ArtifactStore, SnapshotRegistry

# =============================================================================
# Test Fixtures
# =============================================================================


@pytest.fixture
def channel() -> RssChannel:
    return RssChannel(title="example page", description="about", link="https://example.com/")


def make_artifact(source: str, path: str, **metadata: object) -> BuildArtifact:
    return BuildArtifact(
        item_id=uuid_from_path(source),
        path=path,
        resource=source,
        metadata=dict(metadata),
    )


def parse(xml: str) -> ET.Element:
    return ET.fromstring(xml.encode("utf-8"))


# =============================================================================
# Items
# =============================================================================


class TestItemFromArtifact:
    """Tests for artifact to item mapping."""

    def test_fields(self, channel: RssChannel) -> None:
        artifact = make_artifact(
            "posts/a.md", "posts/a.html", title="Hello", body="<p>x</p>", date="2020-03-01"
        )
        item = item_from_artifact(channel, artifact)
        assert item.title == "Hello"
        assert item.description == "<p>x</p>"
        assert item.link == "https://example.com/posts/a.html"
        assert item.guid == item.link
        assert item.pub_date == "Sun, 01 Mar 2020 00:00:00 +0000"

    def test_defaults(self, channel: RssChannel) -> None:
        artifact = make_artifact("posts/a.md", "posts/a.html")
        item = item_from_artifact(channel, artifact)
        assert item.title == f"No title, uuid: {artifact.item_id}"
        assert item.description == ""
        assert item.pub_date == EPOCH_PUB_DATE

    def test_modified_date_fallback(self, channel: RssChannel) -> None:
        artifact = make_artifact("a.md", "a.html")
        artifact.modified_date = datetime(2021, 1, 2, 3, 4, 5, tzinfo=UTC)
        assert item_from_artifact(channel, artifact).pub_date == "Sat, 02 Jan 2021 03:04:05 +0000"


class TestRfc822Date:
    def test_rfc822_string_kept(self) -> None:
        assert rfc822_date("Thu, 01 Jan 2026 12:00:00 GMT") == "Thu, 01 Jan 2026 12:00:00 GMT"

    def test_aware_datetime(self) -> None:
        moment = datetime(2020, 1, 1, 12, 0, tzinfo=UTC)
        assert rfc822_date(moment) == "Wed, 01 Jan 2020 12:00:00 +0000"

    @pytest.mark.parametrize("value", [None, "", "   ", 42])
    def test_no_date(self, value: object) -> None:
        assert rfc822_date(value) is None


# =============================================================================
# Compiler
# =============================================================================


class TestRssFeedCompiler:
    """Tests for feed compilation from snapshots."""

    def test_items_in_snapshot_order(self, channel: RssChannel, site_root: Path, make_context) -> None:
        registry = SnapshotRegistry()
        store = ArtifactStore()
        for name in ("b", "a"):
            artifact = make_artifact(f"posts/{name}.md", f"posts/{name}.html", title=name.upper())
            store.record(artifact)
            registry.add("main-rss-feed", artifact.item_id)

        ctx = make_context("rss.xml", "rss.xml", snapshots=registry, artifacts=store)
        doc = rss_feed("main-rss-feed", channel).compile(ctx, site_root / "rss.xml")

        root = parse(doc.body)
        assert root.tag == "rss"
        assert root.get("version") == "2.0"
        titles = [item.findtext("title") for item in root.iter("item")]
        assert titles == ["B", "A"]
        assert ctx.warnings == []

    def test_channel_elements(self, channel: RssChannel, site_root: Path, make_context) -> None:
        ctx = make_context("feeds/rss.xml", "feeds/rss.xml")
        ctx.snapshots.ensure("main-rss-feed")
        doc = rss_feed("main-rss-feed", channel).compile(ctx, site_root / "feeds/rss.xml")

        chan = parse(doc.body).find("channel")
        assert chan.findtext("title") == "example page"
        assert chan.findtext("description") == "about"
        assert chan.findtext("link") == "https://example.com/"
        assert chan.findtext("pubDate") == EPOCH_PUB_DATE
        assert chan.findtext("ttl") == "1800"
        self_link = chan.find(f"{{{ATOM_NS}}}link")
        assert self_link.get("href") == "https://example.com/feeds/rss.xml"
        assert self_link.get("rel") == "self"
        assert doc.body.startswith('<?xml version="1.0" encoding="UTF-8"?>')

    def test_description_is_escaped_html(
        self, channel: RssChannel, site_root: Path, make_context
    ) -> None:
        store = ArtifactStore()
        artifact = make_artifact("a.md", "a.html", body="<p>A & B</p>")
        store.record(artifact)
        ctx = make_context("rss.xml", "rss.xml", artifacts=store)
        ctx.snapshots.add("feed", artifact.item_id)

        doc = rss_feed("feed", channel).compile(ctx, site_root / "rss.xml")
        assert "&lt;p&gt;A &amp; B&lt;/p&gt;" in doc.body
        assert parse(doc.body).find("channel/item/description").text == "<p>A & B</p>"

    def test_missing_key_gives_empty_feed_and_warning(
        self, channel: RssChannel, site_root: Path, make_context
    ) -> None:
        ctx = make_context("rss.xml", "rss.xml")
        doc = rss_feed("typo", channel).compile(ctx, site_root / "rss.xml")
        assert list(parse(doc.body).iter("item")) == []
        assert len(ctx.warnings) == 1
        assert "typo" in ctx.warnings[0]

    def test_unknown_item_skipped(self, channel: RssChannel, site_root: Path, make_context) -> None:
        ctx = make_context("rss.xml", "rss.xml")
        ctx.snapshots.add("feed", uuid_from_path("never-built.md"))
        doc = rss_feed("feed", channel).compile(ctx, site_root / "rss.xml")
        assert list(parse(doc.body).iter("item")) == []
        assert "No artifact recorded" in ctx.warnings[0]

    def test_declares_consumed_key(self, channel: RssChannel) -> None:
        assert rss_feed("feed", channel).consumes_snapshots == ("feed",)

    def test_validation(self, channel: RssChannel) -> None:
        with pytest.raises(ConfigError):
            RssFeedCompiler("", channel)
        with pytest.raises(ConfigError):
            RssFeedCompiler("feed", {"title": "x"})  # type: ignore[arg-type]


class TestBuildRssFeed:
    def test_generated_rule(self, channel: RssChannel) -> None:
        rule = build_rss_feed("rss.xml", rss_feed("main-rss-feed", channel))
        assert rule.generated
        assert rule.target == "rss.xml"
        assert rule.consumes == ("main-rss-feed",)
        assert rule.targets(["index.md"]) == ["rss.xml"]

    def test_requires_feed_compiler(self) -> None:
        with pytest.raises(ConfigError):
            build_rss_feed("rss.xml", object())  # type: ignore[arg-type]
