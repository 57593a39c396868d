"""SiteSpine configuration.

Build settings loaded from environment variables. The short names the
site binaries have always used (``FORCE``, ``VERBOSITY``, ``OUTPUT_DIR``)
are honoured next to their ``SITESPINE_`` prefixed forms.

Example:
    >>> from sitespine.core.config import get_settings
    >>> settings = get_settings(verbosity=3, force=True)
    >>> settings.verbosity
    3
    >>> settings.force
    True
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import AliasChoices, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from sitespine.core.exceptions import ConfigError

_FALSY = frozenset({"", "0", "false", "no", "off"})


class ErrorPolicy(str, Enum):
    """What the orchestrator does after a per-file failure.

    Example:
        >>> ErrorPolicy("abort_rule")
        <ErrorPolicy.ABORT_RULE: 'abort_rule'>
    """

    CONTINUE = "continue"  # record and keep going
    ABORT_RULE = "abort_rule"  # record and skip the rest of the rule
    ABORT_BUILD = "abort_build"  # record and raise BuildFailed


class Settings(BaseSettings):
    """Build settings.

    Relative ``output_dir`` and ``templates_dir`` are resolved against
    ``content_root`` by the build state.

    Example:
        >>> from sitespine.core.config import Settings
        >>> s = Settings(output_dir="public", verbosity=0)
        >>> s.output_dir
        PosixPath('public')
        >>> s.error_policy
        <ErrorPolicy.CONTINUE: 'continue'>
    """

    model_config = SettingsConfigDict(
        env_prefix="SITESPINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Directories
    content_root: Path = Field(default=Path("."), description="Root of the source tree")
    output_dir: Path = Field(
        default=Path("_site"),
        validation_alias=AliasChoices("output_dir", "SITESPINE_OUTPUT_DIR", "OUTPUT_DIR"),
        description="Destination tree",
    )
    templates_dir: Path = Field(default=Path("templates"), description="Template lookup directory")

    # Run-time behaviour
    force: bool = Field(
        default=False,
        validation_alias=AliasChoices("force", "SITESPINE_FORCE", "FORCE"),
        description="Bypass staleness checks and rebuild everything",
    )
    verbosity: int = Field(
        default=1,
        ge=0,
        le=5,
        validation_alias=AliasChoices("verbosity", "SITESPINE_VERBOSITY", "VERBOSITY"),
        description="Diagnostic output volume, 0 is silent",
    )
    error_policy: ErrorPolicy = Field(default=ErrorPolicy.CONTINUE)

    # Rendering
    url_root: str = Field(default="", description="Exposed to templates as ROOT_PREFIX")
    manifest_name: str = Field(default=".sitespine-manifest.json", min_length=1)

    @field_validator("force", mode="before")
    @classmethod
    def parse_force_flag(cls, v: Any) -> Any:
        """Treat any value except the usual falsy spellings as set."""
        if isinstance(v, str):
            return v.strip().lower() not in _FALSY
        return v

    @field_validator("verbosity", mode="before")
    @classmethod
    def parse_verbosity(cls, v: Any) -> Any:
        """Blank VERBOSITY falls back to the default level."""
        if isinstance(v, str) and not v.strip():
            return 1
        return v


def get_settings(**overrides: Any) -> Settings:
    """Get settings with optional overrides.

    Raises:
        ConfigError: If an override or environment variable is invalid.

    Example:
        >>> from sitespine.core.config import get_settings
        >>> s = get_settings(url_root="/blog")
        >>> s.url_root
        '/blog'
    """
    try:
        return Settings(**overrides)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings: {e}") from e
