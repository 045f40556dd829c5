# Copyright 2026 PHPDepend Contributors
# SPDX-License-Identifier: Apache-2.0

"""Code model for parsed PHP: syntax nodes, declarations and the visitor contract."""

from phpdepend.model.entities import (
    VISIBILITY_MODIFIERS,
    AbstractCallable,
    ClassConstant,
    DeclaredType,
    Function,
    Method,
    Modifier,
    Package,
    Parameter,
    Property,
    SourceFile,
    TypeKind,
)
from phpdepend.model.nodes import ASTNode, NodeKind, ReferenceNode
from phpdepend.model.visitor import ASTVisitor, traverse

__all__ = [
    "ASTNode",
    "NodeKind",
    "ReferenceNode",
    "ASTVisitor",
    "traverse",
    "AbstractCallable",
    "ClassConstant",
    "DeclaredType",
    "Function",
    "Method",
    "Modifier",
    "Package",
    "Parameter",
    "Property",
    "SourceFile",
    "TypeKind",
    "VISIBILITY_MODIFIERS",
]
