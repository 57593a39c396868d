"""
SiteSpine - Declarative Static Site Build Pipeline.

SiteSpine turns a tree of source files (markdown, stylesheets, images) into
a static output tree. The build is described in Python as an ordered list
of rules, each selecting files with a pattern, routing them to an output
path and running them through a compiler/renderer pipeline.

Key Features:
- Pattern-selected rules run in registration order
- Pandoc compiler, Jinja2 templates, verbatim copies
- Snapshots let a late rule (an RSS feed) read what earlier rules built
- Modification-time rebuild skipping that keeps feeds complete
- Per-file error collection with configurable policies

Quick Start:
    >>> from sitespine import (
    ...     Identity, RssChannel, SetExtension, State, TemplateRenderer,
    ...     add_to_snapshot, build_rss_feed, compiler_seq, copy, match_pattern,
    ...     pandoc, rss_feed,
    ... )
    >>> state = State(verbosity=0)
    >>> _ = state.then(
    ...     match_pattern(
    ...         "^posts/*",
    ...         SetExtension("html"),
    ...         TemplateRenderer("post.html"),
    ...         compiler_seq(pandoc(), add_to_snapshot("main-rss-feed")),
    ...     )
    ... ).then(copy("^css/*", Identity())).then(
    ...     build_rss_feed(
    ...         "rss.xml",
    ...         rss_feed("main-rss-feed", RssChannel(title="blog", link="https://example.com")),
    ...     )
    ... )
    >>> len(state.rules)
    3
    >>> # report = state.finish()

Architecture:
    Selection: MatchPattern, PatternSet
    Routes: Identity, SetExtension, Const, Custom
    Compilers: PandocCompiler, FunctionCompiler, SequenceCompiler, SnapshotCompiler
    Renderers: TemplateRenderer, RendererPipeline, CustomRenderer
    Feeds: RssFeedCompiler
"""

# Core orchestration
from sitespine.core.config import ErrorPolicy, Settings, get_settings
from sitespine.core.context import BuildContext
from sitespine.core.exceptions import (
    BuildFailed,
    BuildIOError,
    CompilerError,
    ConfigError,
    FileError,
    RendererError,
    RouteError,
    SiteSpineError,
)
from sitespine.core.report import BuildReport, FileFailure, RuleStats
from sitespine.core.state import State

# Compilers
from sitespine.compilers import (
    Compiler,
    CopyStep,
    FunctionCompiler,
    PandocCompiler,
    ReadCompiler,
    SequenceCompiler,
    SnapshotCompiler,
    add_to_snapshot,
    compiler_seq,
    pandoc,
)

# Feeds
from sitespine.feeds import RssChannel, RssFeedCompiler, RssItem, build_rss_feed, rss_feed
from sitespine.models.artifact import BuildArtifact, uuid_from_path

# Selection and routing
from sitespine.patterns import MatchPattern, PatternSet, list_sources
from sitespine.pipeline import Document, Pipeline, PipelineStep, ValueKind

# Renderers
from sitespine.renderers import (
    CustomRenderer,
    Renderer,
    RendererPipeline,
    TemplateEngine,
    TemplateRenderer,
    load_and_apply_template,
)
from sitespine.routes import Const, Custom, Identity, Route, SetExtension, resolve
from sitespine.rules import Rule, copy, create, match_pattern
from sitespine.snapshots import ArtifactStore, SnapshotRegistry

__version__ = "0.1.0"

__all__ = [
    # Orchestration
    "State",
    "BuildContext",
    "Settings",
    "ErrorPolicy",
    "get_settings",
    "BuildReport",
    "RuleStats",
    "FileFailure",
    # Rules
    "Rule",
    "match_pattern",
    "copy",
    "create",
    # Selection and routing
    "MatchPattern",
    "PatternSet",
    "list_sources",
    "Route",
    "Identity",
    "SetExtension",
    "Const",
    "Custom",
    "resolve",
    # Pipeline
    "Pipeline",
    "PipelineStep",
    "ValueKind",
    "Document",
    "Compiler",
    "CopyStep",
    "FunctionCompiler",
    "PandocCompiler",
    "ReadCompiler",
    "SequenceCompiler",
    "SnapshotCompiler",
    "add_to_snapshot",
    "compiler_seq",
    "pandoc",
    "Renderer",
    "TemplateRenderer",
    "RendererPipeline",
    "CustomRenderer",
    "TemplateEngine",
    "load_and_apply_template",
    # Snapshots and feeds
    "SnapshotRegistry",
    "ArtifactStore",
    "BuildArtifact",
    "uuid_from_path",
    "RssChannel",
    "RssItem",
    "RssFeedCompiler",
    "rss_feed",
    "build_rss_feed",
    # Errors
    "SiteSpineError",
    "ConfigError",
    "BuildIOError",
    "FileError",
    "CompilerError",
    "RendererError",
    "RouteError",
    "BuildFailed",
    # Version
    "__version__",
]
