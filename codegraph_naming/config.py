"""
Centralized configuration for codegraph-naming

Usage:
    from codegraph_naming.config import NamingSettings, get_settings

    # Environment / defaults
    settings = get_settings()

    # Rule-set file
    settings = NamingSettings.from_yaml("naming.yaml")

    # Direct override
    settings = NamingSettings(mode=RunMode.DRY_RUN)
"""

from __future__ import annotations

from enum import Enum
from functools import lru_cache
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from codegraph_naming.errors import ConfigurationError


class RunMode(str, Enum):
    """Whether planned file moves are applied at the end of a run."""

    APPLY = "apply"
    DRY_RUN = "dry-run"


class CollisionPolicy(str, Enum):
    """What the file planner does when a source path is planned twice."""

    FIRST_WINS = "first-wins"
    LAST_WINS = "last-wins"
    ERROR = "error"


class DiscoveryConfig(BaseModel):
    """Which files a run looks at."""

    extensions: list[str] = Field(default_factory=lambda: [".php"])
    """File extensions to parse (with leading dot)"""

    exclude_dirs: list[str] = Field(
        default_factory=lambda: [
            "vendor",
            "node_modules",
            ".git",
            "storage",
            "bootstrap/cache",
        ]
    )
    """Directory paths (relative to the root) that are never visited"""

    max_file_size_bytes: int = Field(default=2_000_000, ge=1_000, le=100_000_000)
    """Files larger than this are skipped"""


class PolicyConfig(BaseModel):
    """Which naming policies run, in catalog order."""

    enabled: list[str] | None = None
    """Policy names to run (None = whole catalog)"""

    disabled: list[str] = Field(default_factory=list)
    """Policy names removed from the enabled set"""

    repository_prefix: str = Field(default="Eloquent", min_length=1)
    """Technology prefix added to repository implementations"""

    advisories: bool = True
    """Run advisory rules (diagnostics only)"""


class ArgumentsConfig(BaseModel):
    """Call-site argument passes."""

    enforce_named: bool = True
    """Convert positional constructor/static-call arguments to named ones"""

    min_named_arguments: int = Field(default=2, ge=1, le=50)
    """Minimum positional arguments before named arguments are enforced"""

    format_multiline: bool = True
    """Put named argument lists on one line per argument"""

    min_multiline_arguments: int = Field(default=3, ge=1, le=50)
    """Minimum arguments before a named call is split over lines"""

    indent: str = "    "
    """Indentation unit used for multiline argument lists"""


class LoggingConfig(BaseModel):
    """Logging output."""

    level: str = "INFO"
    format: str = Field(default="console", pattern="^(console|json)$")


class NamingSettings(BaseSettings):
    """
    Root configuration for a naming run.

    Can be configured via:
    - Environment variables (prefixed with CODEGRAPH_NAMING_)
    - A YAML rule-set file (NamingSettings.from_yaml)
    - Direct instantiation

    Examples:
        CODEGRAPH_NAMING_MODE=dry-run
        CODEGRAPH_NAMING_POLICIES__DISABLED='["query"]'
        CODEGRAPH_NAMING_ARGUMENTS__ENFORCE_NAMED=false
    """

    model_config = SettingsConfigDict(
        env_prefix="CODEGRAPH_NAMING_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    mode: RunMode = RunMode.APPLY
    collision_policy: CollisionPolicy = CollisionPolicy.FIRST_WINS
    skip_files_with_errors: bool = True

    discovery: DiscoveryConfig = Field(default_factory=DiscoveryConfig)
    policies: PolicyConfig = Field(default_factory=PolicyConfig)
    arguments: ArgumentsConfig = Field(default_factory=ArgumentsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def dry_run(self) -> bool:
        return self.mode == RunMode.DRY_RUN

    @classmethod
    def from_yaml(cls, path: str | Path) -> NamingSettings:
        """
        Load settings from a YAML rule-set file.

        Environment variables still apply to keys the file does not set.

        Raises:
            ConfigurationError: unreadable file, invalid YAML or invalid values
        """
        path = Path(path)
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except OSError as e:
            raise ConfigurationError("Cannot read configuration file", path=str(path)) from e
        except yaml.YAMLError as e:
            raise ConfigurationError("Invalid YAML in configuration file", path=str(path)) from e

        if not isinstance(data, dict):
            raise ConfigurationError("Configuration root must be a mapping", path=str(path))

        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigurationError(str(e), path=str(path)) from e


@lru_cache(maxsize=1)
def get_settings() -> NamingSettings:
    """
    Get the process-wide default settings.

    The instance is cached. To reload, call get_settings.cache_clear() first.
    """
    return NamingSettings()
