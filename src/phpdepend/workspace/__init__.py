# Copyright 2026 PHPDepend Contributors
# SPDX-License-Identifier: Apache-2.0

"""Project configuration for PHPDepend."""

from phpdepend.workspace.config import CONFIG_FILE_NAME, ConfigError, ParseConfig, find_config, load_config

__all__ = [
    "CONFIG_FILE_NAME",
    "ConfigError",
    "ParseConfig",
    "find_config",
    "load_config",
]
