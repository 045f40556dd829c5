# Copyright 2026 PHPDepend Contributors
# SPDX-License-Identifier: Apache-2.0

"""Parse run over a set of files and directories.

Every file is parsed against one shared builder. A file that fails to parse
is reported and skipped; the declarations of all other files stay usable.
"""

from __future__ import annotations

import fnmatch
import logging
from dataclasses import dataclass, field
from pathlib import Path

from phpdepend.compiler.builder import Builder
from phpdepend.compiler.cache import CacheDriver
from phpdepend.compiler.errors import ParserError, RedeclarationError
from phpdepend.compiler.parser import parse
from phpdepend.model.entities import SourceFile
from phpdepend.parser.lexer import LexerError
from phpdepend.workspace.config import ParseConfig

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


@dataclass
class FileError:
    """A file that could not be parsed."""

    path: Path
    message: str


@dataclass
class ParseRun:
    """Outcome of parsing a set of files.

    Attributes:
        builder: The symbol table holding every declaration found.
        files: Successfully parsed files in parse order.
        errors: Files that failed, with the reason.
    """

    builder: Builder
    files: list[SourceFile] = field(default_factory=list)
    errors: list[FileError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def collect_files(paths: list[Path], config: ParseConfig) -> list[Path]:
    """Expand *paths* into the sorted list of source files to parse.

    Directories are searched recursively for files with one of the configured
    suffixes; explicitly named files are always included unless excluded.

    Raises:
        FileNotFoundError: If one of *paths* does not exist.
    """
    found: list[Path] = []
    for path in paths:
        if path.is_file():
            if not _is_excluded(Path(path.name), config):
                found.append(path)
        elif path.is_dir():
            for candidate in sorted(path.rglob("*")):
                if not candidate.is_file() or candidate.suffix not in config.file_suffixes:
                    continue
                if not _is_excluded(candidate.relative_to(path), config):
                    found.append(candidate)
        else:
            raise FileNotFoundError(f"No such file or directory: '{path}'")
    return found


def parse_files(
    paths: list[Path],
    *,
    builder: Builder,
    cache: CacheDriver | None = None,
    config: ParseConfig | None = None,
) -> ParseRun:
    """Parse every source file below *paths* into *builder*.

    Args:
        paths: Files and directories to parse.
        builder: Symbol table shared by all files.
        cache: Optional token cache passed to the parser.
        config: File selection and annotation settings; defaults apply when omitted.

    Returns:
        The parse run with its parsed files and per-file errors.
    """
    config = config or ParseConfig()
    run = ParseRun(builder=builder)
    files = collect_files(paths, config)
    logger.info("Parsing %d file(s)", len(files))
    for path in files:
        try:
            source = path.read_text(encoding="utf-8", errors="replace")
            source_file = parse(
                source,
                file_name=str(path),
                builder=builder,
                cache=cache,
                ignore_annotations=config.ignore_annotations,
            )
        except LexerError as exc:
            run.errors.append(_report(path, f"{path}: {exc}"))
        except (ParserError, RedeclarationError, OSError) as exc:
            run.errors.append(_report(path, str(exc)))
        else:
            run.files.append(source_file)
    return run


# ################
# Implementation
# ################


def _is_excluded(relative: Path, config: ParseConfig) -> bool:
    text = relative.as_posix()
    return any(fnmatch.fnmatch(text, pattern) or relative.match(pattern) for pattern in config.exclude)


def _report(path: Path, message: str) -> FileError:
    logger.warning("Skipping %s: %s", path, message)
    return FileError(path=path, message=message)
