"""Core configuration, errors and the build orchestrator."""

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
from sitespine.core.logging import configure_logging
from sitespine.core.manifest import BuildManifest, ManifestEntry
from sitespine.core.report import BuildReport, FileFailure, RuleStats
from sitespine.core.state import State

__all__ = [
    # Orchestrator
    "State",
    "BuildContext",
    # Configuration
    "ErrorPolicy",
    "Settings",
    "get_settings",
    "configure_logging",
    # Reporting
    "BuildReport",
    "FileFailure",
    "RuleStats",
    # Manifest
    "BuildManifest",
    "ManifestEntry",
    # Errors
    "SiteSpineError",
    "ConfigError",
    "BuildIOError",
    "FileError",
    "CompilerError",
    "RendererError",
    "RouteError",
    "BuildFailed",
]
