# Copyright 2026 PHPDepend Contributors
# SPDX-License-Identifier: Apache-2.0

"""Data model and YAML loader for the project configuration file."""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

# ###############
# Public Interface
# ###############

CONFIG_FILE_NAME = ".phpdepend.yaml"


class ConfigError(Exception):
    """Raised when a configuration file is invalid or cannot be loaded."""


class ParseConfig(BaseModel):
    """Settings controlling which files are parsed and how declarations are filed.

    Attributes:
        file_suffixes: Suffixes of files considered PHP sources.
        exclude: Glob patterns of paths to skip, matched against each path
            relative to the directory being scanned.
        exclude_packages: ``fnmatch`` patterns of packages hidden from reports.
        cache_directory: Directory for the token cache; an in-memory cache is
            used when unset.
        ignore_annotations: Ignore ``@package`` annotations of non-namespaced code.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    file_suffixes: list[str] = Field(alias="file-suffixes", default_factory=lambda: [".php"])
    exclude: list[str] = Field(default_factory=list)
    exclude_packages: list[str] = Field(alias="exclude-packages", default_factory=list)
    cache_directory: str | None = Field(alias="cache-directory", default=None)
    ignore_annotations: bool = Field(alias="ignore-annotations", default=False)


def load_config(path: Path) -> ParseConfig:
    """Load and validate a configuration file.

    An empty file yields the default configuration.

    Args:
        path: Path to the ``.phpdepend.yaml`` file.

    Returns:
        A validated ParseConfig instance.

    Raises:
        ConfigError: If the file cannot be read, contains invalid YAML,
            or does not conform to the expected schema.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ConfigError(f"Config file not found: {path}") from None
    except OSError as exc:
        raise ConfigError(f"Cannot read config file '{path}': {exc}") from exc

    return _parse_config(raw, source_label=str(path))


def find_config(directory: Path) -> Path | None:
    """Return the configuration file in *directory* or its nearest ancestor."""
    for candidate in (directory, *directory.parents):
        path = candidate / CONFIG_FILE_NAME
        if path.is_file():
            return path
    return None


# ################
# Implementation
# ################


def _parse_config(text: str, source_label: str = "<string>") -> ParseConfig:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {source_label}: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"{source_label}: configuration must be a YAML mapping")

    try:
        return ParseConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration in {source_label}: {exc}") from exc
