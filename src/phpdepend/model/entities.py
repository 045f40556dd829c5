# Copyright 2026 PHPDepend Contributors
# SPDX-License-Identifier: Apache-2.0

"""Declared code artifacts: packages, types, functions and their members."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from phpdepend.model.nodes import ASTNode, ReferenceNode
from phpdepend.parser.lexer import Token

if TYPE_CHECKING:
    from phpdepend.compiler.cache import CacheDriver

# ###############
# Public Interface
# ###############


class Modifier(enum.IntFlag):
    """Declaration modifiers, combined with ``|``."""

    NONE = 0
    PUBLIC = 1
    PROTECTED = 2
    PRIVATE = 4
    STATIC = 8
    ABSTRACT = 16
    FINAL = 32
    READONLY = 64


VISIBILITY_MODIFIERS = Modifier.PUBLIC | Modifier.PROTECTED | Modifier.PRIVATE


class TypeKind(enum.Enum):
    """What a declared type turned out to be. ``UNKNOWN`` only for placeholders."""

    CLASS = "class"
    INTERFACE = "interface"
    TRAIT = "trait"
    ENUM = "enum"
    UNKNOWN = "unknown"


class _Artifact:
    """Span and token accessors shared by everything that owns a syntax subtree."""

    node: ASTNode | None
    id: str
    cache: CacheDriver | None

    @property
    def start_line(self) -> int:
        return self.node.start_line if self.node is not None else 0

    @property
    def end_line(self) -> int:
        return self.node.end_line if self.node is not None else 0

    @property
    def start_column(self) -> int:
        return self.node.start_column if self.node is not None else 0

    @property
    def end_column(self) -> int:
        return self.node.end_column if self.node is not None else 0

    @property
    def tokens(self) -> list[Token]:
        """The tokens of this declaration, restored from the cache when one is attached."""
        if self.cache is not None and self.id:
            restored = self.cache.restore(self.id)
            if restored is not None:
                return restored
        return self.node.tokens if self.node is not None else []


@dataclass(eq=False)
class Package:
    """A namespace (or ``@package`` annotation) grouping types and functions."""

    name: str
    types: list[DeclaredType] = field(default_factory=list)
    functions: list[Function] = field(default_factory=list)

    def add_type(self, declared: DeclaredType) -> None:
        if declared.package is not None and declared.package is not self:
            declared.package.types.remove(declared)
        if declared not in self.types:
            self.types.append(declared)
        declared.package = self

    def add_function(self, function: Function) -> None:
        if function not in self.functions:
            self.functions.append(function)
        function.package = self

    @property
    def classes(self) -> list[DeclaredType]:
        return [t for t in self.types if t.kind is TypeKind.CLASS]

    @property
    def interfaces(self) -> list[DeclaredType]:
        return [t for t in self.types if t.kind is TypeKind.INTERFACE]

    @property
    def traits(self) -> list[DeclaredType]:
        return [t for t in self.types if t.kind is TypeKind.TRAIT]

    @property
    def enums(self) -> list[DeclaredType]:
        return [t for t in self.types if t.kind is TypeKind.ENUM]


@dataclass(eq=False)
class Parameter:
    """A formal parameter of a function, method or closure."""

    name: str
    position: int
    node: ASTNode
    type_hint: ASTNode | None = None
    by_reference: bool = False
    variadic: bool = False
    default_value: ASTNode | None = None
    modifiers: Modifier = Modifier.NONE

    @property
    def is_optional(self) -> bool:
        return self.default_value is not None or self.variadic

    @property
    def is_promoted(self) -> bool:
        """True for constructor parameters that also declare a property."""
        return bool(self.modifiers)


@dataclass(eq=False)
class AbstractCallable(_Artifact):
    """Common state of functions and methods."""

    name: str
    modifiers: Modifier = Modifier.NONE
    parameters: list[Parameter] = field(default_factory=list)
    return_type: ASTNode | None = None
    returns_reference: bool = False
    comment: str | None = None
    node: ASTNode | None = None
    id: str = ""
    cache: CacheDriver | None = field(default=None, repr=False)


@dataclass(eq=False)
class Function(AbstractCallable):
    """A top-level (or conditionally declared) function."""

    qualified_name: str = ""
    package: Package | None = field(default=None, repr=False)
    source_file: SourceFile | None = field(default=None, repr=False)


@dataclass(eq=False)
class Method(AbstractCallable):
    """A method of a class, interface, trait or enum."""

    parent: DeclaredType | None = field(default=None, repr=False)

    @property
    def is_abstract(self) -> bool:
        return bool(self.modifiers & Modifier.ABSTRACT)

    @property
    def is_static(self) -> bool:
        return bool(self.modifiers & Modifier.STATIC)


@dataclass(eq=False)
class Property(_Artifact):
    """A property declared in a type body or through constructor promotion."""

    name: str
    modifiers: Modifier = Modifier.NONE
    type_hint: ASTNode | None = None
    default_value: ASTNode | None = None
    comment: str | None = None
    parent: DeclaredType | None = field(default=None, repr=False)
    node: ASTNode | None = None
    id: str = ""
    cache: CacheDriver | None = field(default=None, repr=False)

    @property
    def is_static(self) -> bool:
        return bool(self.modifiers & Modifier.STATIC)


@dataclass(eq=False)
class ClassConstant(_Artifact):
    """A constant declared in a type body (enum cases included)."""

    name: str
    modifiers: Modifier = Modifier.NONE
    value: ASTNode | None = None
    comment: str | None = None
    parent: DeclaredType | None = field(default=None, repr=False)
    node: ASTNode | None = None
    is_enum_case: bool = False
    id: str = ""
    cache: CacheDriver | None = field(default=None, repr=False)


@dataclass(eq=False)
class DeclaredType(_Artifact):
    """A class, interface, trait or enum, possibly still an unresolved placeholder.

    The builder hands out exactly one instance per qualified name. A
    placeholder created for a forward reference is completed in place when
    the declaration is parsed, so references taken earlier stay valid.

    Attributes:
        qualified_name: Fully qualified name without a leading backslash.
        kind: The declared kind, or the kind guessed from a reference.
        is_resolved: True once a real declaration was parsed.
        parent_class: Reference to the parent class, if declared.
        interfaces: References to implemented (or, for interfaces, extended)
            interfaces.
        trait_references: References to traits pulled in with ``use``.
    """

    qualified_name: str
    kind: TypeKind = TypeKind.UNKNOWN
    is_resolved: bool = False
    modifiers: Modifier = Modifier.NONE
    comment: str | None = None
    node: ASTNode | None = None
    package: Package | None = field(default=None, repr=False)
    parent_class: ReferenceNode | None = None
    interfaces: list[ReferenceNode] = field(default_factory=list)
    trait_references: list[ReferenceNode] = field(default_factory=list)
    methods: list[Method] = field(default_factory=list)
    properties: list[Property] = field(default_factory=list)
    constants: list[ClassConstant] = field(default_factory=list)
    source_file: SourceFile | None = field(default=None, repr=False)
    is_anonymous: bool = False
    id: str = ""
    cache: CacheDriver | None = field(default=None, repr=False)

    def __repr__(self) -> str:
        state = "resolved" if self.is_resolved else "placeholder"
        return f"DeclaredType({self.qualified_name!r}, {self.kind.name}, {state})"

    @property
    def name(self) -> str:
        return self.qualified_name.rsplit("\\", 1)[-1]

    @property
    def namespace_name(self) -> str:
        if "\\" not in self.qualified_name:
            return ""
        return self.qualified_name.rsplit("\\", 1)[0]

    @property
    def is_abstract(self) -> bool:
        return bool(self.modifiers & Modifier.ABSTRACT) or self.kind is TypeKind.INTERFACE

    @property
    def is_final(self) -> bool:
        return bool(self.modifiers & Modifier.FINAL)

    def get_parent_class(self) -> DeclaredType | None:
        if self.parent_class is None:
            return None
        return self.parent_class.resolve()

    def get_interfaces(self) -> list[DeclaredType]:
        resolved = (ref.resolve() for ref in self.interfaces)
        return [t for t in resolved if t is not None]

    def get_traits(self) -> list[DeclaredType]:
        resolved = (ref.resolve() for ref in self.trait_references)
        return [t for t in resolved if t is not None]

    def get_method(self, name: str) -> Method | None:
        """Return the method named *name*; PHP method names are case-insensitive."""
        lowered = name.lower()
        for method in self.methods:
            if method.name.lower() == lowered:
                return method
        return None

    def get_property(self, name: str) -> Property | None:
        name = name.lstrip("$")
        for prop in self.properties:
            if prop.name == name:
                return prop
        return None

    def adopt_members(self, draft: DeclaredType) -> None:
        """Replace header references and members with those parsed into *draft*."""
        self.parent_class = draft.parent_class
        self.interfaces = list(draft.interfaces)
        self.trait_references = list(draft.trait_references)
        self.methods = list(draft.methods)
        self.properties = list(draft.properties)
        self.constants = list(draft.constants)
        for member in (*self.methods, *self.properties, *self.constants):
            member.parent = self


@dataclass(eq=False)
class SourceFile(_Artifact):
    """The result of parsing one file.

    Attributes:
        file_name: Name the file was parsed under.
        node: Synthetic root node holding every top-level construct.
        types: Types declared in the file, in declaration order.
        functions: Functions declared in the file.
        comment: File-level doc comment.
    """

    file_name: str
    node: ASTNode | None = None
    types: list[DeclaredType] = field(default_factory=list)
    functions: list[Function] = field(default_factory=list)
    comment: str | None = None
    id: str = ""
    cache: CacheDriver | None = field(default=None, repr=False)
