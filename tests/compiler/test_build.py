# Copyright 2026 PHPDepend Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for parsing a set of files into one symbol table."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from phpdepend.compiler.build import collect_files, parse_files
from phpdepend.compiler.builder import Builder
from phpdepend.compiler.cache import MemoryCacheDriver
from phpdepend.workspace.config import ParseConfig

# ###############
# Helpers
# ###############


def _write(path: Path, content: str) -> Path:
    """Write *content* to *path*, creating parent directories as needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def _project(root: Path) -> Path:
    _write(root / "src" / "Model" / "User.php", "<?php\nnamespace App\\Model;\nclass User extends Base {}\n")
    _write(root / "src" / "Model" / "Base.php", "<?php\nnamespace App\\Model;\nabstract class Base {}\n")
    _write(root / "src" / "helpers.php", "<?php\nfunction helper() {}\n")
    _write(root / "src" / "README.md", "# not php\n")
    _write(root / "tests" / "UserTest.php", "<?php\nclass UserTest {}\n")
    return root


# ###############
# File Collection
# ###############


class TestCollectFiles:
    def test_directory_is_searched_recursively_in_sorted_order(self, tmp_path: Path) -> None:
        root = _project(tmp_path)
        files = collect_files([root / "src"], ParseConfig())
        assert [f.relative_to(root).as_posix() for f in files] == [
            "src/Model/Base.php",
            "src/Model/User.php",
            "src/helpers.php",
        ]

    def test_custom_suffixes(self, tmp_path: Path) -> None:
        _write(tmp_path / "a.php", "<?php")
        _write(tmp_path / "b.inc", "<?php")
        config = ParseConfig(file_suffixes=[".inc"])
        assert [f.name for f in collect_files([tmp_path], config)] == ["b.inc"]

    def test_explicit_file_ignores_suffix(self, tmp_path: Path) -> None:
        script = _write(tmp_path / "bin" / "console", "<?php")
        assert collect_files([script], ParseConfig()) == [script]

    def test_exclude_patterns(self, tmp_path: Path) -> None:
        root = _project(tmp_path)
        config = ParseConfig(exclude=["tests/*", "*/helpers.php"])
        files = collect_files([root], config)
        assert [f.relative_to(root).as_posix() for f in files] == ["src/Model/Base.php", "src/Model/User.php"]

    def test_exclude_matches_file_name(self, tmp_path: Path) -> None:
        root = _project(tmp_path)
        config = ParseConfig(exclude=["*Test.php"])
        assert collect_files([root / "tests" / "UserTest.php"], config) == []

    def test_missing_path(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            collect_files([tmp_path / "missing"], ParseConfig())


# ###############
# Parse Runs
# ###############


class TestParseFiles:
    def test_files_share_one_builder(self, tmp_path: Path) -> None:
        root = _project(tmp_path)
        builder = Builder()
        run = parse_files([root / "src"], builder=builder)
        assert run.ok
        assert len(run.files) == 3
        user = builder.find_type("App\\Model\\User")
        base = builder.find_type("App\\Model\\Base")
        assert user.get_parent_class() is base
        assert base.is_resolved
        assert builder.find_function("helper") is not None

    def test_failing_file_is_reported_and_skipped(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        root = _project(tmp_path)
        broken = _write(root / "src" / "Broken.php", "<?php\nclass Broken {\n")
        builder = Builder()
        with caplog.at_level(logging.WARNING, logger="phpdepend.compiler.build"):
            run = parse_files([root / "src"], builder=builder)
        assert not run.ok
        assert [error.path for error in run.errors] == [broken]
        assert "Unclosed body" in run.errors[0].message
        assert len(run.files) == 3
        assert builder.find_type("App\\Model\\User").is_resolved
        assert "Skipping" in caplog.text

    def test_lexer_error_names_file(self, tmp_path: Path) -> None:
        bad = _write(tmp_path / "bad.php", "<?php\n$a = 'never closed;\n")
        run = parse_files([bad], builder=Builder())
        assert run.errors[0].message.startswith(str(bad))

    def test_redeclaration_across_files(self, tmp_path: Path) -> None:
        _write(tmp_path / "a.php", "<?php\nclass Dup {}\n")
        _write(tmp_path / "b.php", "<?php\nclass Dup {}\n")
        builder = Builder()
        run = parse_files([tmp_path], builder=builder)
        assert [error.path.name for error in run.errors] == ["b.php"]
        assert builder.find_type("Dup").source_file.file_name.endswith("a.php")

    def test_cache_and_annotations_are_passed_to_parser(self, tmp_path: Path) -> None:
        source = _write(tmp_path / "a.php", "<?php\n/** @package Lib */\nclass A {}\n")
        cache = MemoryCacheDriver()
        builder = Builder()
        parse_files([source], builder=builder, cache=cache, config=ParseConfig(ignore_annotations=True))
        declared = builder.find_type("A")
        assert declared.package.name == "+global"
        assert declared.id in cache
