# Copyright 2026 PHPDepend Contributors
# SPDX-License-Identifier: Apache-2.0

"""Visitor contract for walking packages, declarations and syntax trees.

Analyzers subclass :class:`ASTVisitor` and override the hooks they care
about. Node hooks are looked up by kind: a node of kind
``NodeKind.IF_STATEMENT`` is passed to ``visit_if_statement`` when the
subclass defines it, otherwise the visitor descends into its children.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from phpdepend.model.entities import DeclaredType, Function, Method, Package, Property, TypeKind
from phpdepend.model.nodes import ASTNode, NodeKind

if TYPE_CHECKING:
    from phpdepend.compiler.builder import Builder

# ###############
# Public Interface
# ###############


class ASTVisitor:
    """Base visitor with depth-first default traversal."""

    def visit_package(self, package: Package) -> None:
        for declared in package.types:
            self.visit_type(declared)
        for function in package.functions:
            self.visit_function(function)

    def visit_type(self, declared: DeclaredType) -> None:
        """Dispatch to the hook matching the kind of *declared*."""
        if declared.kind is TypeKind.INTERFACE:
            self.visit_interface(declared)
        elif declared.kind is TypeKind.TRAIT:
            self.visit_trait(declared)
        elif declared.kind is TypeKind.ENUM:
            self.visit_enum(declared)
        else:
            self.visit_class(declared)

    def visit_class(self, declared: DeclaredType) -> None:
        self.visit_members(declared)

    def visit_interface(self, declared: DeclaredType) -> None:
        self.visit_members(declared)

    def visit_trait(self, declared: DeclaredType) -> None:
        self.visit_members(declared)

    def visit_enum(self, declared: DeclaredType) -> None:
        self.visit_members(declared)

    def visit_members(self, declared: DeclaredType) -> None:
        for prop in declared.properties:
            self.visit_property(prop)
        for method in declared.methods:
            self.visit_method(method)

    def visit_method(self, method: Method) -> None:
        if method.node is not None:
            self.visit_children(method.node)

    def visit_property(self, prop: Property) -> None:
        pass

    def visit_function(self, function: Function) -> None:
        if function.node is not None:
            self.visit_children(function.node)

    def visit_node(self, node: ASTNode) -> Any:
        """Call ``visit_<kind>`` for *node* if defined, else visit its children.

        Declaration nodes share their names with the declaration hooks and
        are always descended into.
        """
        hook = None if node.kind in _DECLARATION_KINDS else getattr(self, f"visit_{node.kind.value}", None)
        if hook is not None:
            return hook(node)
        self.visit_children(node)
        return None

    def visit_children(self, node: ASTNode) -> None:
        for child in node.children:
            child.accept(self)


def traverse(builder: Builder, visitor: ASTVisitor) -> None:
    """Drive *visitor* over every package accepted by the builder's filter."""
    for package in builder.packages:
        visitor.visit_package(package)


# ################
# Implementation
# ################

_DECLARATION_KINDS: frozenset[NodeKind] = frozenset(
    {NodeKind.CLASS, NodeKind.INTERFACE, NodeKind.TRAIT, NodeKind.ENUM, NodeKind.METHOD, NodeKind.FUNCTION}
)
