# Copyright 2026 PHPDepend Contributors
# SPDX-License-Identifier: Apache-2.0

"""Generic syntax tree nodes for parsed PHP source.

Every syntactic construct is an :class:`ASTNode` tagged with a
:class:`NodeKind`. Type references additionally carry a lazily resolved link
into the symbol table (:class:`ReferenceNode`).
"""

from __future__ import annotations

import enum
from typing import TYPE_CHECKING, Any

from phpdepend.parser.lexer import COMMENT_KINDS, Token

if TYPE_CHECKING:
    from phpdepend.compiler.builder import Builder
    from phpdepend.model.entities import DeclaredType, TypeKind
    from phpdepend.model.visitor import ASTVisitor

# ###############
# Public Interface
# ###############


class NodeKind(enum.Enum):
    """All syntactic node kinds. The value doubles as the visitor method suffix."""

    # Files and declarations
    COMPILATION_UNIT = "compilation_unit"
    CLASS = "class"
    INTERFACE = "interface"
    TRAIT = "trait"
    ENUM = "enum"
    ANONYMOUS_CLASS = "anonymous_class"
    ENUM_CASE = "enum_case"
    METHOD = "method"
    FUNCTION = "function"
    CLOSURE = "closure"
    ARROW_FUNCTION = "arrow_function"
    FORMAL_PARAMETERS = "formal_parameters"
    FORMAL_PARAMETER = "formal_parameter"
    BOUND_VARIABLES = "bound_variables"
    FIELD_DECLARATION = "field_declaration"
    VARIABLE_DECLARATOR = "variable_declarator"
    CONSTANT_DEFINITION = "constant_definition"
    CONSTANT_DECLARATOR = "constant_declarator"
    TRAIT_USE_STATEMENT = "trait_use_statement"
    TRAIT_ADAPTATION = "trait_adaptation"
    TRAIT_ADAPTATION_ALIAS = "trait_adaptation_alias"
    TRAIT_ADAPTATION_PRECEDENCE = "trait_adaptation_precedence"

    # Type references and hints
    CLASS_REFERENCE = "class_reference"
    INTERFACE_REFERENCE = "interface_reference"
    TRAIT_REFERENCE = "trait_reference"
    CLASS_OR_INTERFACE_REFERENCE = "class_or_interface_reference"
    SELF_REFERENCE = "self_reference"
    PARENT_REFERENCE = "parent_reference"
    STATIC_REFERENCE = "static_reference"
    SCALAR_TYPE = "scalar_type"
    NULLABLE_TYPE = "nullable_type"
    UNION_TYPE = "union_type"
    INTERSECTION_TYPE = "intersection_type"

    # Statements
    SCOPE = "scope"
    STATEMENT = "statement"
    IF_STATEMENT = "if_statement"
    ELSE_IF_STATEMENT = "else_if_statement"
    FOR_STATEMENT = "for_statement"
    FOR_INIT = "for_init"
    FOR_UPDATE = "for_update"
    FOREACH_STATEMENT = "foreach_statement"
    WHILE_STATEMENT = "while_statement"
    DO_WHILE_STATEMENT = "do_while_statement"
    SWITCH_STATEMENT = "switch_statement"
    SWITCH_LABEL = "switch_label"
    BREAK_STATEMENT = "break_statement"
    CONTINUE_STATEMENT = "continue_statement"
    RETURN_STATEMENT = "return_statement"
    ECHO_STATEMENT = "echo_statement"
    GLOBAL_STATEMENT = "global_statement"
    STATIC_VARIABLE_DECLARATION = "static_variable_declaration"
    UNSET_STATEMENT = "unset_statement"
    THROW_STATEMENT = "throw_statement"
    TRY_STATEMENT = "try_statement"
    CATCH_STATEMENT = "catch_statement"
    FINALLY_STATEMENT = "finally_statement"
    DECLARE_STATEMENT = "declare_statement"
    GOTO_STATEMENT = "goto_statement"
    LABEL_STATEMENT = "label_statement"
    INLINE_HTML = "inline_html"

    # Expressions
    EXPRESSION = "expression"
    ASSIGNMENT_EXPRESSION = "assignment_expression"
    CONDITIONAL_EXPRESSION = "conditional_expression"
    BOOLEAN_AND_EXPRESSION = "boolean_and_expression"
    BOOLEAN_OR_EXPRESSION = "boolean_or_expression"
    LOGICAL_AND_EXPRESSION = "logical_and_expression"
    LOGICAL_OR_EXPRESSION = "logical_or_expression"
    LOGICAL_XOR_EXPRESSION = "logical_xor_expression"
    UNARY_EXPRESSION = "unary_expression"
    CAST_EXPRESSION = "cast_expression"
    PRE_INCREMENT_EXPRESSION = "pre_increment_expression"
    PRE_DECREMENT_EXPRESSION = "pre_decrement_expression"
    POSTFIX_EXPRESSION = "postfix_expression"
    INSTANCEOF_EXPRESSION = "instanceof_expression"
    ALLOCATION_EXPRESSION = "allocation_expression"
    CLONE_EXPRESSION = "clone_expression"
    INCLUDE_EXPRESSION = "include_expression"
    REQUIRE_EXPRESSION = "require_expression"
    EVAL_EXPRESSION = "eval_expression"
    EXIT_EXPRESSION = "exit_expression"
    ISSET_EXPRESSION = "isset_expression"
    EMPTY_EXPRESSION = "empty_expression"
    PRINT_EXPRESSION = "print_expression"
    YIELD_EXPRESSION = "yield_expression"
    THROW_EXPRESSION = "throw_expression"
    LIST_EXPRESSION = "list_expression"
    MATCH_EXPRESSION = "match_expression"
    MATCH_ENTRY = "match_entry"
    ARRAY = "array"
    ARRAY_ELEMENT = "array_element"

    # Primaries and postfixes
    VARIABLE = "variable"
    VARIABLE_VARIABLE = "variable_variable"
    COMPOUND_VARIABLE = "compound_variable"
    COMPOUND_EXPRESSION = "compound_expression"
    LITERAL = "literal"
    CONSTANT = "constant"
    IDENTIFIER = "identifier"
    MEMBER_PRIMARY_PREFIX = "member_primary_prefix"
    METHOD_POSTFIX = "method_postfix"
    PROPERTY_POSTFIX = "property_postfix"
    CONSTANT_POSTFIX = "constant_postfix"
    CLASS_FQN_POSTFIX = "class_fqn_postfix"
    FUNCTION_POSTFIX = "function_postfix"
    ARGUMENTS = "arguments"
    NAMED_ARGUMENT = "named_argument"
    ARRAY_INDEX_EXPRESSION = "array_index_expression"


REFERENCE_KINDS: frozenset[NodeKind] = frozenset(
    {
        NodeKind.CLASS_REFERENCE,
        NodeKind.INTERFACE_REFERENCE,
        NodeKind.TRAIT_REFERENCE,
        NodeKind.CLASS_OR_INTERFACE_REFERENCE,
        NodeKind.SELF_REFERENCE,
        NodeKind.PARENT_REFERENCE,
        NodeKind.STATIC_REFERENCE,
    }
)


class ASTNode:
    """One syntactic construct in the parsed tree.

    Attributes:
        kind: The syntactic kind of this node.
        image: Source text fragment such as an identifier or operator.
        children: Child nodes in parse order.
        parent: The enclosing node, or ``None`` for a root.
        comment: The doc comment preceding the construct, if any.
        tokens: Tokens consumed while parsing the construct.
    """

    def __init__(self, kind: NodeKind, image: str | None = None) -> None:
        self.kind = kind
        self.image = image
        self.children: list[ASTNode] = []
        self.parent: ASTNode | None = None
        self.comment: str | None = None
        self.tokens: list[Token] = []
        self.start_line = 0
        self.end_line = 0
        self.start_column = 0
        self.end_column = 0

    def __repr__(self) -> str:
        if self.image is None:
            return f"ASTNode({self.kind.name})"
        return f"ASTNode({self.kind.name}, {self.image!r})"

    # ------------------------------------------------------------------
    # Tree construction
    # ------------------------------------------------------------------

    def add_child(self, node: ASTNode) -> ASTNode:
        """Append *node* to the children and make this node its parent."""
        self.children.append(node)
        node.parent = self
        return node

    def configure_span(self, tokens: list[Token]) -> None:
        """Record *tokens* and derive the source span from them and from the children.

        Leading and trailing comments are not part of the span.
        """
        self.tokens = tokens
        significant = [token for token in tokens if token.kind not in COMMENT_KINDS]
        if significant:
            first, last = significant[0], significant[-1]
            self._widen(first.start_line, first.start_column, last.end_line, last.end_column)
        for child in self.children:
            if child.start_line:
                self._widen(child.start_line, child.start_column, child.end_line, child.end_column)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_child(self, index: int) -> ASTNode:
        """Return the child at *index*.

        Raises:
            IndexError: If *index* is not a valid child position.
        """
        if 0 <= index < len(self.children):
            return self.children[index]
        raise IndexError(f"No node found at index {index} in node of type: {self.kind.name}")

    def get_first_child_of_type(self, kind: NodeKind) -> ASTNode | None:
        """Return the first descendant of *kind* in depth-first pre-order."""
        for child in self.children:
            if child.kind is kind:
                return child
            found = child.get_first_child_of_type(kind)
            if found is not None:
                return found
        return None

    def find_children_of_type(self, kind: NodeKind) -> list[ASTNode]:
        """Return all descendants of *kind* in depth-first pre-order."""
        results: list[ASTNode] = []
        self._collect_children_of_type(kind, results)
        return results

    def get_parents_of_type(self, kind: NodeKind) -> list[ASTNode]:
        """Return all ancestors of *kind*, outermost first."""
        parents: list[ASTNode] = []
        node = self.parent
        while node is not None:
            if node.kind is kind:
                parents.append(node)
            node = node.parent
        parents.reverse()
        return parents

    def get_parent_of_type(self, kind: NodeKind) -> ASTNode | None:
        """Return the nearest ancestor of *kind*."""
        node = self.parent
        while node is not None:
            if node.kind is kind:
                return node
            node = node.parent
        return None

    @property
    def image_without_namespace(self) -> str | None:
        if self.image is None:
            return None
        return self.image.rsplit("\\", 1)[-1]

    # ------------------------------------------------------------------
    # Traversal and teardown
    # ------------------------------------------------------------------

    def accept(self, visitor: ASTVisitor) -> Any:
        return visitor.visit_node(self)

    def free(self) -> None:
        """Break all parent/child links in this subtree."""
        for child in self.children:
            child.free()
        self.children = []
        self.parent = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _collect_children_of_type(self, kind: NodeKind, results: list[ASTNode]) -> None:
        for child in self.children:
            if child.kind is kind:
                results.append(child)
            child._collect_children_of_type(kind, results)

    def _widen(self, start_line: int, start_column: int, end_line: int, end_column: int) -> None:
        if not self.start_line or (start_line, start_column) < (self.start_line, self.start_column):
            self.start_line = start_line
            self.start_column = start_column
        if not self.end_line or (end_line, end_column) > (self.end_line, self.end_column):
            self.end_line = end_line
            self.end_column = end_column


class ReferenceNode(ASTNode):
    """A node naming a class, interface or trait.

    The node stores the qualified name plus a handle on the builder instead
    of a direct object pointer, because the referenced declaration may not
    have been parsed yet. The first successful :meth:`resolve` is memoized.

    ``self`` references resolve to their lexical type (by name, or directly
    for anonymous classes), ``parent`` references delegate to the parent-class reference of the
    enclosing type, and ``static`` references are late bound: they resolve to
    the lexical owner but report :attr:`is_late_bound`.
    """

    def __init__(
        self,
        kind: NodeKind,
        qualified_name: str,
        *,
        builder: Builder | None = None,
        type_kind: TypeKind | None = None,
        target: DeclaredType | None = None,
        delegate: ReferenceNode | None = None,
    ) -> None:
        super().__init__(kind, qualified_name)
        self.qualified_name = qualified_name
        self._builder = builder
        self._type_kind = type_kind
        self._delegate = delegate
        self._resolved: DeclaredType | None = target

    @property
    def is_late_bound(self) -> bool:
        return self.kind is NodeKind.STATIC_REFERENCE

    @property
    def delegate(self) -> ReferenceNode | None:
        """The parent-class reference a ``parent`` reference stands for."""
        return self._delegate

    def resolve(self) -> DeclaredType | None:
        """Return the declared type object this reference names.

        Returns ``None`` only for ``parent`` references inside traits, whose
        parent is only known at runtime.
        """
        if self._resolved is None:
            if self._delegate is not None:
                self._resolved = self._delegate.resolve()
            elif self._builder is not None:
                self._resolved = self._builder.get_or_create_placeholder(self.qualified_name, self._type_kind)
        return self._resolved
