"""Configuration models for twig."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from twig.errors import ConfigError
from twig.paths import CONFIG_FILE


class RepositoryConfig(BaseModel):
    """Repository layout configuration."""

    default_branch: str = Field(
        default="main",
        description="Branch created by 'twig init'",
    )
    initial_message: str = Field(
        default="initial commit",
        description="Message of the root commit created by 'twig init'",
    )
    ignore: list[str] = Field(
        default=[
            CONFIG_FILE,
            ".env",
            ".DS_Store",
            "*.swp",
        ],
        description="Glob patterns of working files the engine never sees",
    )


class CommitsConfig(BaseModel):
    """Commit identity and lookup configuration."""

    id_strategy: Literal["content", "random"] = Field(
        default="content",
        description="'content' derives ids from commit data, 'random' salts them",
    )
    prefix_resolution: Literal["strict", "first-match"] = Field(
        default="strict",
        description="How an abbreviated id matching several commits is handled",
    )
    short_hash_length: int = Field(
        default=7,
        ge=4,
        le=40,
        description="Length of abbreviated ids shown in merge log headers",
    )


class MergeConfig(BaseModel):
    """Merge engine configuration."""

    split_strategy: Literal["first-parent", "bidirectional"] = Field(
        default="first-parent",
        description="Split-point search used to pick the merge base",
    )
    conflict_on_both_added: bool = Field(
        default=False,
        description="Treat a file added on both sides with different content as a conflict",
    )


class CLIConfig(BaseModel):
    """Command-line behaviour."""

    strict_exit_codes: bool = Field(
        default=False,
        description="Exit with a non-zero status when a command reports an error",
    )


class TwigConfig(BaseSettings):
    """Main twig configuration."""

    model_config = SettingsConfigDict(
        env_prefix="TWIG_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    version: str = Field(default="1.0", description="Config version")
    repository: RepositoryConfig = Field(default_factory=RepositoryConfig)
    commits: CommitsConfig = Field(default_factory=CommitsConfig)
    merge: MergeConfig = Field(default_factory=MergeConfig)
    cli: CLIConfig = Field(default_factory=CLIConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Environment wins over values read from .twigrc.toml
        return (env_settings, init_settings, file_secret_settings)

    @classmethod
    def load(cls, config_path: Path | None = None, root: Path | None = None) -> TwigConfig:
        """Load configuration from file and environment.

        Resolution order (highest to lowest priority):
        1. Environment variables (TWIG_COMMITS__ID_STRATEGY=random, ...)
        2. Provided config file path
        3. .twigrc.toml in the repository root (or current directory)
        4. .twigrc.toml in home directory
        5. Built-in defaults
        """
        config_data: dict[str, Any] = {}

        locations = []
        if config_path:
            locations.append(config_path)
        locations.extend(
            [
                (root or Path.cwd()) / CONFIG_FILE,
                Path.home() / CONFIG_FILE,
            ]
        )

        for loc in locations:
            if loc.exists():
                try:
                    with open(loc, "rb") as f:
                        config_data = tomllib.load(f)
                except tomllib.TOMLDecodeError as e:
                    raise ConfigError(f"Invalid configuration file {loc}: {e}", path=str(loc)) from e
                break

        try:
            return cls(**config_data)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e


def get_default_config_toml() -> str:
    """Generate default .twigrc.toml content."""
    return f"""# twig configuration

version = "1.0"

[repository]
default_branch = "main"
initial_message = "initial commit"
ignore = [
    "{CONFIG_FILE}",
    ".env",
    ".DS_Store",
    "*.swp",
]

[commits]
id_strategy = "content"  # content | random
prefix_resolution = "strict"  # strict | first-match
short_hash_length = 7

[merge]
split_strategy = "first-parent"  # first-parent | bidirectional
conflict_on_both_added = false

[cli]
strict_exit_codes = false
"""
