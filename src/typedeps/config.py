"""Configuration settings for typedeps."""

from __future__ import annotations

from enum import Enum
from pathlib import Path  # noqa: TC003

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    CliImplicitFlag,
    SettingsConfigDict,
)

from .models import DEFAULT_CACHE_PATH, Options


class OutputFormat(str, Enum):
    """Output formats for typedeps."""

    json = "json"
    dot = "dot"


class Settings(BaseSettings):
    """Settings for typedeps."""

    target: str = Field(
        default=".",
        description="""Project directory to resolve. Manifests are searched for
            in this directory and then in each of its parents.""",
    )
    dev: CliImplicitFlag[bool] = Field(
        default=False,
        description="""Include the development dependencies of the project
        (but not those of its dependencies).""",
    )
    cache_path: Path = Field(
        default=DEFAULT_CACHE_PATH,
        description="""Alternative path to load/store the remote fetch cache, or
        ':memory:' to cache remote responses in memory rather than reading/writing
        to disk.""",
    )
    clear_cache: CliImplicitFlag[bool] = Field(
        default=False,
        description="""Clears the cache specified by `--cache_path` (equivalent
        to deleting the cache file).""",
    )
    force: CliImplicitFlag[bool] = Field(
        default=False,
        description="""Force the overwrite of the output file if it already
        exists.""",
    )
    log_level: str = Field(default="info", description="Log level")
    max_workers: int = Field(
        default=-1,
        description="""Maximum number of threads used for file and network
            access. If not provided, the executor default is used.""",
    )
    output_file: Path | None = Field(
        default=None,
        description="""Output file path. If not provided, the output will be
        written to stdout.""",
    )
    output_format: OutputFormat = Field(
        default=OutputFormat.json,
        description="""Output format: the merged dependency tree as JSON, or a
            Graphviz dot graph of it.""",
    )
    version: CliImplicitFlag[bool] = Field(
        default=False,
        description="""Show the version of typedeps and exit.""",
    )

    model_config = SettingsConfigDict(
        cli_parse_args=True,
        env_prefix="TYPEDEPS_",
        nested_model_default_partial_update=True,
    )

    def to_options(self) -> Options:
        """Return the resolution options selected by these settings."""
        return Options(dev=self.dev, cache_path=self.cache_path)
