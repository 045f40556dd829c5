# Copyright 2026 PHPDepend Contributors
# SPDX-License-Identifier: Apache-2.0

"""Parsing pipeline: recursive-descent parser, symbol table and token cache."""

from phpdepend.compiler.build import FileError, ParseRun, collect_files, parse_files
from phpdepend.compiler.builder import DEFAULT_PACKAGE, Builder, package_filter_from_patterns
from phpdepend.compiler.cache import CacheDriver, FileCacheDriver, MemoryCacheDriver
from phpdepend.compiler.errors import (
    InvalidStateError,
    ParserError,
    RedeclarationError,
    TokenStreamEndError,
    UnclosedBodyError,
    UnexpectedTokenError,
)
from phpdepend.compiler.parser import parse, parse_stream

__all__ = [
    "parse",
    "parse_stream",
    "Builder",
    "DEFAULT_PACKAGE",
    "package_filter_from_patterns",
    "CacheDriver",
    "MemoryCacheDriver",
    "FileCacheDriver",
    "ParserError",
    "UnexpectedTokenError",
    "TokenStreamEndError",
    "UnclosedBodyError",
    "InvalidStateError",
    "RedeclarationError",
    "collect_files",
    "parse_files",
    "ParseRun",
    "FileError",
]
