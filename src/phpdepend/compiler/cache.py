# Copyright 2026 PHPDepend Contributors
# SPDX-License-Identifier: Apache-2.0

"""Token caches keyed by declaration id.

The parser stores the tokens of every completed declaration once, and
declarations restore them on demand. The file-backed driver writes one
compact, versioned JSON document per id so that later runs can reuse them.
"""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path
from typing import Protocol

from pydantic import BaseModel, ValidationError

from phpdepend.parser.lexer import Token

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############

CACHE_FORMAT_VERSION = "1"
CACHE_SUFFIX = ".tokens.json"


class CacheDriver(Protocol):
    """Storage for token sequences."""

    def store(self, id: str, tokens: list[Token]) -> None: ...

    def restore(self, id: str) -> list[Token] | None: ...

    def remove(self, id: str) -> None: ...


class MemoryCacheDriver:
    """Keeps token lists in a dictionary for the lifetime of the process."""

    def __init__(self) -> None:
        self._entries: dict[str, list[Token]] = {}

    def __contains__(self, id: str) -> bool:
        return id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def store(self, id: str, tokens: list[Token]) -> None:
        self._entries[id] = list(tokens)

    def restore(self, id: str) -> list[Token] | None:
        return self._entries.get(id)

    def remove(self, id: str) -> None:
        self._entries.pop(id, None)


class FileCacheDriver:
    """Stores each token list as a JSON file below *directory*."""

    def __init__(self, directory: Path) -> None:
        self._directory = directory

    @property
    def directory(self) -> Path:
        return self._directory

    def store(self, id: str, tokens: list[Token]) -> None:
        path = self._path(id)
        path.parent.mkdir(parents=True, exist_ok=True)
        entry = _CacheEntry(v=CACHE_FORMAT_VERSION, id=id, tokens=tokens)
        path.write_text(entry.model_dump_json(), encoding="utf-8")

    def restore(self, id: str) -> list[Token] | None:
        path = self._path(id)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        try:
            entry = _CacheEntry.model_validate_json(raw)
        except ValidationError as exc:
            logger.warning("Ignoring corrupt cache entry %s: %s", path, exc)
            return None
        if entry.v != CACHE_FORMAT_VERSION:
            logger.debug("Ignoring cache entry %s with format version %r", path, entry.v)
            return None
        return entry.tokens

    def remove(self, id: str) -> None:
        self._path(id).unlink(missing_ok=True)

    def _path(self, id: str) -> Path:
        digest = hashlib.sha1(id.encode("utf-8")).hexdigest()
        return self._directory / digest[:2] / (digest + CACHE_SUFFIX)


# ################
# Implementation
# ################


class _CacheEntry(BaseModel):
    v: str
    id: str
    tokens: list[Token]
