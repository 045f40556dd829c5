# Copyright 2026 PHPDepend Contributors
# SPDX-License-Identifier: Apache-2.0

"""Symbol table shared by every file of a parse run.

The builder is the single source of truth for "which object represents the
type named X". It hands out the same :class:`DeclaredType` for the same
qualified name regardless of parse order: a name referenced before its
declaration gets an unresolved placeholder, and the later declaration fills
that placeholder in place. Keys are always fully qualified; qualifying names
relative to the current namespace is the parser's job.
"""

from __future__ import annotations

import fnmatch
import logging
import threading
from collections.abc import Callable, Iterable, Iterator

from phpdepend.compiler.errors import RedeclarationError
from phpdepend.model.entities import DeclaredType, Function, Modifier, Package, SourceFile, TypeKind
from phpdepend.model.nodes import ASTNode

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############

DEFAULT_PACKAGE = "+global"

PackageFilter = Callable[[Package], bool]


def package_filter_from_patterns(patterns: Iterable[str]) -> PackageFilter:
    """Build an accept filter that rejects packages matching any glob pattern.

    Args:
        patterns: ``fnmatch`` patterns such as ``"Vendor\\*"`` or ``"+global"``.

    Returns:
        A predicate returning True for packages that should be reported.
    """
    excluded = list(patterns)

    def accept(package: Package) -> bool:
        return not any(fnmatch.fnmatchcase(package.name, pattern) for pattern in excluded)

    return accept


class Builder:
    """Identity-preserving registry of types, functions and packages.

    Placeholder creation, declaration completion and package membership
    updates are serialized by one lock, so files may be parsed from several
    threads against a single builder.

    Args:
        package_filter: Optional predicate applied when iterating
            :attr:`packages`; rejected packages stay registered but are not
            reported.
    """

    def __init__(self, *, package_filter: PackageFilter | None = None) -> None:
        self._package_filter = package_filter
        self._types: dict[str, DeclaredType] = {}
        self._functions: dict[str, Function] = {}
        self._packages: dict[str, Package] = {}
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Types
    # ------------------------------------------------------------------

    def get_or_create_placeholder(self, qualified_name: str, kind: TypeKind | None = None) -> DeclaredType:
        """Return the type registered for *qualified_name*, creating a placeholder if needed.

        An existing entry is returned whether or not it is declared yet. A
        placeholder whose kind is still unknown adopts *kind* as its guess.
        """
        kind = kind or TypeKind.UNKNOWN
        with self._lock:
            declared = self._types.get(qualified_name)
            if declared is None:
                logger.debug("Creating placeholder for %s", qualified_name)
                declared = DeclaredType(qualified_name=qualified_name, kind=kind)
                self._types[qualified_name] = declared
            elif not declared.is_resolved and declared.kind is TypeKind.UNKNOWN:
                declared.kind = kind
            return declared

    def check_redeclaration(self, qualified_name: str) -> None:
        """Raise if *qualified_name* was already completed.

        Raises:
            RedeclarationError: If a declaration for the name was completed.
        """
        with self._lock:
            declared = self._types.get(qualified_name)
            if declared is not None and declared.is_resolved:
                raise RedeclarationError(qualified_name)

    def complete_declaration(
        self,
        qualified_name: str,
        kind: TypeKind,
        node: ASTNode,
        *,
        package_name: str | None = None,
        modifiers: Modifier = Modifier.NONE,
        comment: str | None = None,
        source_file: SourceFile | None = None,
        members: DeclaredType | None = None,
    ) -> DeclaredType:
        """Mark *qualified_name* as declared, filling in an existing placeholder in place.

        Args:
            qualified_name: Fully qualified name of the declaration.
            kind: The declared kind.
            node: The declaration's syntax subtree.
            package_name: Package to file the type under; defaults to the
                namespace part of the name.
            modifiers: Declaration modifiers such as ``abstract``.
            comment: The declaration's doc comment.
            source_file: The file the declaration was parsed from.
            members: Detached type the parser collected the header references
                and members into; they are moved onto the registered object.

        Returns:
            The (now resolved) type object.

        Raises:
            RedeclarationError: If the name was already completed.
        """
        with self._lock:
            declared = self.get_or_create_placeholder(qualified_name, kind)
            if declared.is_resolved:
                raise RedeclarationError(qualified_name)
            declared.kind = kind
            declared.node = node
            declared.modifiers = modifiers
            declared.comment = comment
            declared.source_file = source_file
            if members is not None:
                declared.adopt_members(members)
            declared.is_resolved = True
            self.get_package(package_name or _namespace_of(qualified_name)).add_type(declared)
            logger.debug("Completed %s %s", kind.value, qualified_name)
            return declared

    def find_type(self, qualified_name: str) -> DeclaredType | None:
        """Return the registered type without creating a placeholder."""
        with self._lock:
            return self._types.get(qualified_name)

    @property
    def types(self) -> list[DeclaredType]:
        """Every registered type, placeholders included, in registration order."""
        with self._lock:
            return list(self._types.values())

    def unresolved_types(self) -> list[DeclaredType]:
        """Placeholders that never received a declaration."""
        return [t for t in self.types if not t.is_resolved]

    # ------------------------------------------------------------------
    # Functions
    # ------------------------------------------------------------------

    def build_function(self, qualified_name: str, *, package_name: str | None = None) -> Function:
        """Create and register the function *qualified_name*.

        Raises:
            RedeclarationError: If a function with that name was already built.
        """
        with self._lock:
            if qualified_name in self._functions:
                raise RedeclarationError(qualified_name, "function")
            function = Function(name=qualified_name.rsplit("\\", 1)[-1], qualified_name=qualified_name)
            self._functions[qualified_name] = function
            self.get_package(package_name or _namespace_of(qualified_name)).add_function(function)
            return function

    def find_function(self, qualified_name: str) -> Function | None:
        with self._lock:
            return self._functions.get(qualified_name)

    # ------------------------------------------------------------------
    # Packages
    # ------------------------------------------------------------------

    def get_package(self, name: str) -> Package:
        """Return the package *name*, creating it on first use."""
        name = name or DEFAULT_PACKAGE
        with self._lock:
            package = self._packages.get(name)
            if package is None:
                package = Package(name)
                self._packages[name] = package
            return package

    @property
    def packages(self) -> list[Package]:
        """Packages accepted by the filter that contain at least one declaration."""
        with self._lock:
            candidates = [p for p in self._packages.values() if p.types or p.functions]
        if self._package_filter is None:
            return candidates
        return [p for p in candidates if self._package_filter(p)]

    def __iter__(self) -> Iterator[Package]:
        return iter(self.packages)


# ################
# Implementation
# ################


def _namespace_of(qualified_name: str) -> str:
    if "\\" not in qualified_name:
        return DEFAULT_PACKAGE
    return qualified_name.rsplit("\\", 1)[0]
