# Copyright 2026 PHPDepend Contributors
# SPDX-License-Identifier: Apache-2.0

"""Entry point for the PHPDepend command-line interface."""

import argparse
import logging
import sys
from dataclasses import dataclass
from pathlib import Path

from yachalk import chalk

from phpdepend.compiler.build import parse_files
from phpdepend.compiler.builder import Builder, package_filter_from_patterns
from phpdepend.compiler.cache import CacheDriver, FileCacheDriver, MemoryCacheDriver
from phpdepend.model.entities import DeclaredType, Function, Method, Package
from phpdepend.model.visitor import ASTVisitor, traverse
from phpdepend.workspace.config import ConfigError, ParseConfig, find_config, load_config

# ###############
# Public Interface
# ###############


def main() -> None:
    """Run the PHPDepend CLI."""
    parser = argparse.ArgumentParser(
        prog="phpdepend",
        description="PHPDepend - parse PHP sources into a dependency model",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    # parse subcommand
    parse_parser = subparsers.add_parser(
        "parse",
        help="Parse PHP sources and summarize the declarations found",
        description="Parse PHP files and directories into one symbol table and print a summary.",
    )
    parse_parser.add_argument(
        "paths",
        nargs="+",
        help="PHP files or directories to parse",
    )
    parse_parser.add_argument(
        "--config",
        default=None,
        help="Configuration file (default: nearest .phpdepend.yaml above the first path)",
    )
    parse_parser.add_argument(
        "--cache-dir",
        default=None,
        help="Directory for the token cache (default: in-memory)",
    )
    parse_parser.add_argument(
        "--exclude-package",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Hide packages matching the glob pattern from the summary (repeatable)",
    )
    parse_parser.add_argument(
        "--ignore-annotations",
        action="store_true",
        help="Ignore @package annotations of code outside namespaces",
    )
    parse_parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log output (-v for info, -vv for debug)",
    )

    args = parser.parse_args()
    if args.command is None:
        parser.print_help()
        sys.exit(0)

    sys.exit(_dispatch(args))


# ################
# Implementation
# ################

logger = logging.getLogger(__name__)

_LOG_LEVELS = [logging.WARNING, logging.INFO, logging.DEBUG]


@dataclass
class _Summary:
    packages: int = 0
    classes: int = 0
    interfaces: int = 0
    traits: int = 0
    enums: int = 0
    functions: int = 0
    methods: int = 0


class _SummaryVisitor(ASTVisitor):
    """Counts the declarations of every reported package."""

    def __init__(self) -> None:
        self.summary = _Summary()

    def visit_package(self, package: Package) -> None:
        self.summary.packages += 1
        super().visit_package(package)

    def visit_class(self, declared: DeclaredType) -> None:
        self.summary.classes += 1
        self.visit_members(declared)

    def visit_interface(self, declared: DeclaredType) -> None:
        self.summary.interfaces += 1
        self.visit_members(declared)

    def visit_trait(self, declared: DeclaredType) -> None:
        self.summary.traits += 1
        self.visit_members(declared)

    def visit_enum(self, declared: DeclaredType) -> None:
        self.summary.enums += 1
        self.visit_members(declared)

    def visit_method(self, method: Method) -> None:
        self.summary.methods += 1

    def visit_function(self, function: Function) -> None:
        self.summary.functions += 1


def _dispatch(args: argparse.Namespace) -> int:
    """Dispatch to the appropriate subcommand handler."""
    if args.command == "parse":
        return _cmd_parse(args)
    return 0


def _cmd_parse(args: argparse.Namespace) -> int:
    """Handle the parse subcommand."""
    logging.basicConfig(
        level=_LOG_LEVELS[min(args.verbose, len(_LOG_LEVELS) - 1)],
        format="%(levelname)s %(name)s: %(message)s",
    )
    paths = [Path(p) for p in args.paths]

    for path in paths:
        if not path.exists():
            print(chalk.red(f"Error: path '{path}' does not exist."), file=sys.stderr)
            return 1

    try:
        config = _load_config(args, paths[0])
    except ConfigError as exc:
        print(chalk.red(f"Error: {exc}"), file=sys.stderr)
        return 1

    if args.ignore_annotations:
        config.ignore_annotations = True
    if args.cache_dir:
        config.cache_directory = args.cache_dir

    cache: CacheDriver
    if config.cache_directory:
        cache = FileCacheDriver(Path(config.cache_directory))
    else:
        cache = MemoryCacheDriver()

    builder = Builder(package_filter=package_filter_from_patterns([*config.exclude_packages, *args.exclude_package]))
    run = parse_files(paths, builder=builder, cache=cache, config=config)

    visitor = _SummaryVisitor()
    traverse(builder, visitor)
    summary = visitor.summary

    print(chalk.blue(f"Parsed {len(run.files)} file(s)"))
    print(f"  packages:   {summary.packages}")
    print(f"  classes:    {summary.classes}")
    print(f"  interfaces: {summary.interfaces}")
    print(f"  traits:     {summary.traits}")
    print(f"  enums:      {summary.enums}")
    print(f"  functions:  {summary.functions}")
    print(f"  methods:    {summary.methods}")

    unresolved = builder.unresolved_types()
    if unresolved:
        print(f"  unresolved: {len(unresolved)}")
        for declared in sorted(unresolved, key=lambda t: t.qualified_name):
            logger.info("Unresolved type %s", declared.qualified_name)

    for error in run.errors:
        print(chalk.red(f"Error: {error.message}"), file=sys.stderr)

    if run.errors:
        return 1

    print(chalk.green("No issues found."))
    return 0


def _load_config(args: argparse.Namespace, first_path: Path) -> ParseConfig:
    if args.config:
        return load_config(Path(args.config))
    start = first_path if first_path.is_dir() else first_path.parent
    found = find_config(start.resolve())
    if found is None:
        return ParseConfig()
    return load_config(found)
