# Copyright 2026 PHPDepend Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the visitor contract and package traversal."""

from phpdepend.compiler.builder import Builder, package_filter_from_patterns
from phpdepend.compiler.parser import parse
from phpdepend.model.entities import DeclaredType, Function, Method, Package
from phpdepend.model.nodes import ASTNode
from phpdepend.model.visitor import ASTVisitor, traverse

# ###############
# Test Helpers
# ###############

SOURCE = """<?php
namespace App;

interface Shape {
    public function area(): float;
}

trait Named {
    public function name() { return static::class; }
}

enum Color { case Red; }

class Square implements Shape {
    use Named;
    private float $side = 1.0;

    public function area(): float {
        if ($this->side > 0) {
            return $this->side * $this->side;
        }
        return 0.0;
    }
}

function describe(Shape $shape) {
    if ($shape instanceof Square) {
        return 'square';
    }
    return 'shape';
}
"""


class _RecordingVisitor(ASTVisitor):
    def __init__(self) -> None:
        self.events: list[str] = []

    def visit_package(self, package: Package) -> None:
        self.events.append(f"package {package.name}")
        super().visit_package(package)

    def visit_class(self, declared: DeclaredType) -> None:
        self.events.append(f"class {declared.name}")
        super().visit_class(declared)

    def visit_interface(self, declared: DeclaredType) -> None:
        self.events.append(f"interface {declared.name}")
        super().visit_interface(declared)

    def visit_trait(self, declared: DeclaredType) -> None:
        self.events.append(f"trait {declared.name}")
        super().visit_trait(declared)

    def visit_enum(self, declared: DeclaredType) -> None:
        self.events.append(f"enum {declared.name}")
        super().visit_enum(declared)

    def visit_method(self, method: Method) -> None:
        self.events.append(f"method {method.name}")
        super().visit_method(method)

    def visit_function(self, function: Function) -> None:
        self.events.append(f"function {function.name}")
        super().visit_function(function)

    def visit_if_statement(self, node: ASTNode) -> None:
        self.events.append(f"if line {node.start_line}")
        self.visit_children(node)

    def visit_return_statement(self, node: ASTNode) -> None:
        self.events.append("return")


def _builder(**kwargs) -> Builder:
    builder = Builder(**kwargs)
    parse(SOURCE, file_name="shapes.php", builder=builder)
    return builder


# ###############
# Dispatch
# ###############


class TestVisitor:
    def test_declarations_are_dispatched_by_kind(self) -> None:
        visitor = _RecordingVisitor()
        traverse(_builder(), visitor)
        declarations = [e for e in visitor.events if not e.startswith(("if", "return"))]
        assert declarations == [
            "package App",
            "interface Shape",
            "method area",
            "trait Named",
            "method name",
            "enum Color",
            "class Square",
            "method area",
            "function describe",
        ]

    def test_node_hooks_are_looked_up_by_kind(self) -> None:
        visitor = _RecordingVisitor()
        traverse(_builder(), visitor)
        assert [e for e in visitor.events if e.startswith("if")] == ["if line 19", "if line 27"]

    def test_hook_controls_descent(self) -> None:
        visitor = _RecordingVisitor()
        traverse(_builder(), visitor)
        assert visitor.events.count("return") == 5

    def test_nodes_accept_visitor_directly(self) -> None:
        builder = _builder()
        visitor = _RecordingVisitor()
        builder.find_function("App\\describe").node.accept(visitor)
        assert visitor.events == ["if line 27", "return", "return"]

    def test_default_visitor_walks_everything(self) -> None:
        traverse(_builder(), ASTVisitor())


class TestTraverse:
    def test_rejected_packages_are_skipped(self) -> None:
        visitor = _RecordingVisitor()
        traverse(_builder(package_filter=package_filter_from_patterns(["App"])), visitor)
        assert visitor.events == []

    def test_placeholders_are_not_visited(self) -> None:
        builder = _builder()
        builder.get_or_create_placeholder("Vendor\\Missing")
        visitor = _RecordingVisitor()
        traverse(builder, visitor)
        assert "package Vendor" not in visitor.events
