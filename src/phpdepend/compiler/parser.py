# Copyright 2026 PHPDepend Contributors
# SPDX-License-Identifier: Apache-2.0

"""Recursive-descent parser for PHP source files.

Converts a token stream into a syntax tree and registers every declared
class, interface, trait, enum and function with a shared :class:`Builder`.
Type names referenced anywhere in the file go through the builder as well,
so files may be parsed in any order and still converge on a single graph of
type objects.
"""

from __future__ import annotations

import hashlib
import logging
import re
from collections.abc import Callable
from typing import NoReturn

from phpdepend.compiler.builder import DEFAULT_PACKAGE, Builder
from phpdepend.compiler.cache import CacheDriver
from phpdepend.compiler.errors import (
    InvalidStateError,
    TokenStreamEndError,
    UnclosedBodyError,
    UnexpectedTokenError,
)
from phpdepend.model.entities import (
    VISIBILITY_MODIFIERS,
    AbstractCallable,
    ClassConstant,
    DeclaredType,
    Method,
    Modifier,
    Parameter,
    Property,
    SourceFile,
    TypeKind,
)
from phpdepend.model.nodes import ASTNode, NodeKind, ReferenceNode
from phpdepend.parser.lexer import COMMENT_KINDS, KEYWORDS, Token, TokenKind
from phpdepend.parser.token_stack import TokenStack
from phpdepend.parser.token_stream import TokenStream

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


def parse(
    source: str,
    *,
    file_name: str = "<string>",
    builder: Builder,
    cache: CacheDriver | None = None,
    ignore_annotations: bool = False,
) -> SourceFile:
    """Parse PHP source text and register its declarations with *builder*.

    Args:
        source: The full text of a PHP file.
        file_name: Name used in error messages and declaration ids.
        builder: Symbol table shared by all files of the run.
        cache: Optional token cache; every completed declaration stores its
            tokens there.
        ignore_annotations: Ignore ``@package`` annotations when choosing the
            package of non-namespaced declarations.

    Returns:
        The parsed file with its syntax tree and declarations.

    Raises:
        LexerError: If the source cannot be tokenized.
        ParserError: If the source is syntactically invalid.
        RedeclarationError: If a declaration conflicts with an earlier one.
    """
    stream = TokenStream.from_source(source, file_name)
    return parse_stream(stream, builder=builder, cache=cache, ignore_annotations=ignore_annotations)


def parse_stream(
    stream: TokenStream,
    *,
    builder: Builder,
    cache: CacheDriver | None = None,
    ignore_annotations: bool = False,
) -> SourceFile:
    """Parse an already tokenized file. See :func:`parse`."""
    return _Parser(stream, builder, cache, ignore_annotations).parse()


# ################
# Implementation
# ################

_SCALAR_TYPES: frozenset[str] = frozenset(
    {
        "array",
        "bool",
        "callable",
        "false",
        "float",
        "int",
        "iterable",
        "mixed",
        "never",
        "null",
        "object",
        "string",
        "true",
        "void",
    }
)

_SEMI_RESERVED: frozenset[TokenKind] = frozenset(KEYWORDS.values()) | {TokenKind.IDENTIFIER}

_NAME_STARTS: frozenset[TokenKind] = frozenset({TokenKind.IDENTIFIER, TokenKind.BACKSLASH, TokenKind.NAMESPACE})

_SPECIAL_TYPES: frozenset[TokenKind] = frozenset({TokenKind.SELF, TokenKind.PARENT, TokenKind.STATIC})

_OPENING_TOKENS: frozenset[TokenKind] = frozenset({TokenKind.CURLY_BRACE_OPEN, TokenKind.PARENTHESIS_OPEN})
_CLOSING_TOKENS: frozenset[TokenKind] = frozenset({TokenKind.CURLY_BRACE_CLOSE, TokenKind.PARENTHESIS_CLOSE})

_MODIFIERS: dict[TokenKind, Modifier] = {
    TokenKind.PUBLIC: Modifier.PUBLIC,
    TokenKind.PROTECTED: Modifier.PROTECTED,
    TokenKind.PRIVATE: Modifier.PRIVATE,
    TokenKind.STATIC: Modifier.STATIC,
    TokenKind.ABSTRACT: Modifier.ABSTRACT,
    TokenKind.FINAL: Modifier.FINAL,
    TokenKind.READONLY: Modifier.READONLY,
    TokenKind.VAR: Modifier.PUBLIC,
}

_PROMOTION_MODIFIERS: frozenset[TokenKind] = frozenset(
    {TokenKind.PUBLIC, TokenKind.PROTECTED, TokenKind.PRIVATE, TokenKind.READONLY}
)

_CLASS_MODIFIERS: frozenset[TokenKind] = frozenset({TokenKind.ABSTRACT, TokenKind.FINAL, TokenKind.READONLY})

# Tokens that make a leading doc comment a declaration comment rather than a file comment.
_DECLARATION_STARTS: frozenset[TokenKind] = frozenset(
    {
        TokenKind.CLASS,
        TokenKind.INTERFACE,
        TokenKind.TRAIT,
        TokenKind.FINAL,
        TokenKind.ABSTRACT,
        TokenKind.READONLY,
        TokenKind.FUNCTION,
    }
)

_ASSIGNMENT_OPERATORS: frozenset[TokenKind] = frozenset(
    {
        TokenKind.EQUAL,
        TokenKind.PLUS_EQUAL,
        TokenKind.MINUS_EQUAL,
        TokenKind.MUL_EQUAL,
        TokenKind.DIV_EQUAL,
        TokenKind.CONCAT_EQUAL,
        TokenKind.MOD_EQUAL,
        TokenKind.AND_EQUAL,
        TokenKind.OR_EQUAL,
        TokenKind.XOR_EQUAL,
        TokenKind.SHIFT_LEFT_EQUAL,
        TokenKind.SHIFT_RIGHT_EQUAL,
        TokenKind.POW_EQUAL,
        TokenKind.COALESCE_EQUAL,
    }
)

# Binary operator levels, loosest first.
_LOGICAL_LEVELS: tuple[frozenset[TokenKind], ...] = (
    frozenset({TokenKind.OR}),
    frozenset({TokenKind.XOR}),
    frozenset({TokenKind.AND}),
)

_BINARY_LEVELS: tuple[frozenset[TokenKind], ...] = (
    frozenset({TokenKind.BOOLEAN_OR}),
    frozenset({TokenKind.BOOLEAN_AND}),
    frozenset({TokenKind.BITWISE_OR}),
    frozenset({TokenKind.BITWISE_XOR}),
    frozenset({TokenKind.BITWISE_AND}),
    frozenset(
        {
            TokenKind.IS_EQUAL,
            TokenKind.IS_NOT_EQUAL,
            TokenKind.IS_IDENTICAL,
            TokenKind.IS_NOT_IDENTICAL,
            TokenKind.SPACESHIP,
        }
    ),
    frozenset({TokenKind.LESS, TokenKind.IS_SMALLER_OR_EQUAL, TokenKind.GREATER, TokenKind.IS_GREATER_OR_EQUAL}),
    frozenset({TokenKind.CONCAT}),
    frozenset({TokenKind.SHIFT_LEFT, TokenKind.SHIFT_RIGHT}),
    frozenset({TokenKind.PLUS, TokenKind.MINUS}),
    frozenset({TokenKind.MUL, TokenKind.DIV, TokenKind.MOD}),
)

_BINARY_NODE_KINDS: dict[TokenKind, NodeKind] = {
    TokenKind.OR: NodeKind.LOGICAL_OR_EXPRESSION,
    TokenKind.XOR: NodeKind.LOGICAL_XOR_EXPRESSION,
    TokenKind.AND: NodeKind.LOGICAL_AND_EXPRESSION,
    TokenKind.BOOLEAN_OR: NodeKind.BOOLEAN_OR_EXPRESSION,
    TokenKind.BOOLEAN_AND: NodeKind.BOOLEAN_AND_EXPRESSION,
}

_LITERAL_TOKENS: frozenset[TokenKind] = frozenset(
    {
        TokenKind.LNUMBER,
        TokenKind.DNUMBER,
        TokenKind.CONSTANT_STRING,
        TokenKind.HEREDOC,
        TokenKind.BACKTICK_STRING,
    }
)

# Tokens after which a bare ``yield`` has no operand.
_YIELD_TERMINATORS: frozenset[TokenKind] = frozenset(
    {
        TokenKind.SEMICOLON,
        TokenKind.PARENTHESIS_CLOSE,
        TokenKind.SQUARED_BRACKET_CLOSE,
        TokenKind.COMMA,
        TokenKind.CLOSE_TAG,
    }
)

_PACKAGE_RE = re.compile(r"\*\s*@package\s+(\S+)")
_SUBPACKAGE_RE = re.compile(r"\*\s*@subpackage\s+(\S+)")


def _make_id(*parts: str) -> str:
    return hashlib.sha1("\x00".join(parts).encode("utf-8")).hexdigest()


class _Parser:
    """Recursive-descent parser state for a single file.

    Brace and parenthesis nesting is tracked on every consumed token so that
    running out of input inside an open body is reported as an unclosed body
    rather than a plain end of stream.
    """

    def __init__(
        self,
        stream: TokenStream,
        builder: Builder,
        cache: CacheDriver | None,
        ignore_annotations: bool,
    ) -> None:
        self._stream = stream
        self._file_name = stream.file_name
        self._builder = builder
        self._cache = cache
        self._ignore_annotations = ignore_annotations
        self._tokens = TokenStack()
        self._depth = 0
        self._doc_comment: str | None = None
        self._namespace = ""
        self._uses: dict[str, str] = {}
        self._type_stack: list[DeclaredType | None] = []
        self._file_package: str | None = None
        self._source_file = SourceFile(file_name=self._file_name, id=_make_id("file", self._file_name))

    def parse(self) -> SourceFile:
        """Parse the full token stream and return the source file."""
        logger.debug("Parsing %s", self._file_name)
        root = ASTNode(NodeKind.COMPILATION_UNIT, self._file_name)
        self._tokens.push()
        while self._peek() is not TokenKind.EOF:
            node = self._parse_statement()
            if node is not None:
                root.add_child(node)
        root.configure_span(self._tokens.pop())
        self._source_file.node = root
        self._store(self._source_file, root.tokens)
        return self._source_file

    # ------------------------------------------------------------------
    # Token access helpers
    # ------------------------------------------------------------------

    def _skip_trivia(self) -> None:
        """Consume comments and open tags, remembering the latest doc comment."""
        while self._stream.peek() in COMMENT_KINDS or self._stream.peek() is TokenKind.OPEN_TAG:
            previous = self._stream.prev()
            token = self._tokens.add(self._stream.next())
            if token.kind is not TokenKind.DOC_COMMENT:
                continue
            self._doc_comment = token.text
            if (
                previous is not None
                and previous.kind is TokenKind.OPEN_TAG
                and self._source_file.comment is None
                and self._stream.peek() not in _DECLARATION_STARTS
            ):
                self._source_file.comment = token.text
                self._file_package = self._package_annotation(token.text)

    def _peek(self) -> TokenKind:
        """Return the kind of the next significant token."""
        self._skip_trivia()
        return self._stream.peek()

    def _current(self) -> Token:
        """Return the next significant token without consuming it."""
        self._skip_trivia()
        token = self._stream.current()
        if token is None:
            self._raise_end()
        return token

    def _next(self) -> Token:
        """Consume and return the next significant token."""
        self._skip_trivia()
        token = self._stream.next()
        if token is None:
            self._raise_end()
        if token.kind in _OPENING_TOKENS:
            self._depth += 1
        elif token.kind in _CLOSING_TOKENS:
            self._depth -= 1
        self._doc_comment = None
        return self._tokens.add(token)

    def _consume(self, kind: TokenKind, expected: str | None = None) -> Token:
        """Consume a token of *kind* or fail."""
        if self._peek() is not kind:
            self._unexpected(expected or repr(kind.value))
        return self._next()

    def _accept(self, kind: TokenKind) -> Token | None:
        """Consume a token of *kind* if it is next."""
        if self._peek() is kind:
            return self._next()
        return None

    def _consume_identifier(self, expected: str = "identifier") -> Token:
        """Consume an identifier, allowing keywords where PHP treats them as plain names."""
        if self._peek() not in _SEMI_RESERVED:
            self._unexpected(expected)
        return self._next()

    def _unexpected(self, expected: str | None = None) -> NoReturn:
        if self._peek() is TokenKind.EOF:
            self._raise_end()
        raise UnexpectedTokenError(self._current(), self._file_name, expected)

    def _raise_end(self) -> NoReturn:
        if self._depth > 0:
            raise UnclosedBodyError(self._file_name)
        raise TokenStreamEndError(self._file_name, self._stream.prev())

    def _take_doc_comment(self) -> str | None:
        self._skip_trivia()
        comment = self._doc_comment
        self._doc_comment = None
        return comment

    def _parse_terminator(self) -> None:
        """Consume a statement terminator: ``;`` or a closing tag."""
        if self._accept(TokenKind.CLOSE_TAG) is None:
            self._consume(TokenKind.SEMICOLON, "';'")

    def _span(self, node: ASTNode, mark: int) -> ASTNode:
        """Assign the tokens consumed since *mark* to *node*."""
        node.configure_span(self._tokens.since(mark))
        return node

    def _store(self, artifact: AbstractCallable | DeclaredType | Property | SourceFile, tokens: list[Token]) -> None:
        if self._cache is None:
            return
        self._cache.store(artifact.id, tokens)
        artifact.cache = self._cache

    def _add_property(self, declared: DeclaredType, prop: Property) -> None:
        prop.id = _make_id(self._source_file.id, "property", declared.qualified_name, prop.name)
        declared.properties.append(prop)
        self._store(prop, prop.node.tokens)

    # ------------------------------------------------------------------
    # Names and references
    # ------------------------------------------------------------------

    def _parse_name(self) -> str:
        """Parse a possibly qualified name and return it as written."""
        parts: list[str] = []
        if self._peek() is TokenKind.NAMESPACE:
            parts.append(self._next().text)
            parts.append(self._consume(TokenKind.BACKSLASH).text)
        elif self._peek() is TokenKind.BACKSLASH:
            parts.append(self._next().text)
        if parts:
            parts.append(self._consume_identifier("name").text)
        else:
            parts.append(self._consume(TokenKind.IDENTIFIER, "name").text)
        while self._peek() is TokenKind.BACKSLASH and self._stream.peek_next() in _SEMI_RESERVED:
            parts.append(self._next().text)
            parts.append(self._next().text)
        return "".join(parts)

    def _qualify(self, name: str) -> str:
        """Resolve *name* against the current namespace and import table."""
        if name.startswith("\\"):
            return name[1:]
        if name.lower().startswith("namespace\\"):
            return self._prefix(name[len("namespace\\") :])
        head, separator, rest = name.partition("\\")
        imported = self._uses.get(head.lower())
        if imported is not None:
            return imported + separator + rest
        return self._prefix(name)

    def _prefix(self, name: str) -> str:
        return f"{self._namespace}\\{name}" if self._namespace else name

    def _parse_class_reference(self, kind: NodeKind, type_kind: TypeKind | None = None) -> ReferenceNode:
        """Parse a class name and register it with the builder."""
        mark = self._tokens.mark()
        return self._reference_to(self._parse_name(), kind, type_kind, mark)

    def _parse_type_reference(self, kind: NodeKind, type_kind: TypeKind | None = None) -> ReferenceNode:
        """Parse a class name or one of ``self``, ``parent`` and ``static``."""
        if self._peek() in _SPECIAL_TYPES:
            return self._parse_special_reference()
        return self._parse_class_reference(kind, type_kind)

    def _parse_special_reference(self) -> ReferenceNode:
        """Parse ``self``, ``parent`` or ``static`` against the innermost open type."""
        token = self._next()
        owner = self._type_stack[-1] if self._type_stack else None
        keyword = token.text.lower()
        if owner is None:
            raise InvalidStateError(
                f"The keyword '{keyword}' was used outside of a class scope",
                self._file_name,
                token.start_line,
                token.start_column,
            )
        if token.kind in (TokenKind.SELF, TokenKind.STATIC):
            kind = NodeKind.SELF_REFERENCE if token.kind is TokenKind.SELF else NodeKind.STATIC_REFERENCE
            if owner.is_anonymous:
                reference = ReferenceNode(kind, owner.qualified_name, target=owner)
            else:
                # Named types are parsed into a draft; bind by name to the registered object.
                reference = ReferenceNode(kind, owner.qualified_name, builder=self._builder)
        elif owner.kind is TypeKind.TRAIT:
            # The parent of a trait method depends on the using class.
            reference = ReferenceNode(NodeKind.PARENT_REFERENCE, keyword)
        elif owner.parent_class is None:
            raise InvalidStateError(
                f"The keyword 'parent' was used within {owner.kind.value} '{owner.qualified_name}' "
                "which has no parent class",
                self._file_name,
                token.start_line,
                token.start_column,
            )
        else:
            parent = owner.parent_class
            reference = ReferenceNode(NodeKind.PARENT_REFERENCE, parent.qualified_name, delegate=parent)
        reference.configure_span([token])
        return reference

    def _package_annotation(self, comment: str | None) -> str | None:
        if comment is None:
            return None
        match = _PACKAGE_RE.search(comment)
        if match is None:
            return None
        package = match.group(1)
        sub = _SUBPACKAGE_RE.search(comment)
        if sub is not None:
            package += "\\" + sub.group(1)
        return package

    def _package_for(self, comment: str | None) -> str | None:
        """Package name for a new declaration; ``None`` lets the builder use the namespace."""
        if self._namespace:
            return None
        if self._ignore_annotations:
            return DEFAULT_PACKAGE
        return self._package_annotation(comment) or self._file_package or DEFAULT_PACKAGE

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def _parse_statement(self) -> ASTNode | None:
        """Parse one statement or declaration. Returns ``None`` for empty statements."""
        kind = self._peek()
        if kind is TokenKind.ATTRIBUTE_START:
            self._skip_attributes()
            kind = self._peek()
        next_kind = self._stream.peek_next()

        if kind is TokenKind.EOF:
            self._unexpected("statement")
        if kind is TokenKind.SEMICOLON or kind is TokenKind.CLOSE_TAG:
            self._next()
            return None
        if kind is TokenKind.INLINE_HTML:
            token = self._next()
            node = ASTNode(NodeKind.INLINE_HTML, token.text)
            node.configure_span([token])
            return node
        if kind is TokenKind.CURLY_BRACE_OPEN:
            return self._parse_scope()
        if kind in _CLASS_MODIFIERS and kind is not TokenKind.READONLY or kind is TokenKind.CLASS:
            return self._parse_class_declaration()
        if kind is TokenKind.READONLY and next_kind in (TokenKind.CLASS, TokenKind.FINAL, TokenKind.ABSTRACT):
            return self._parse_class_declaration()
        if kind is TokenKind.INTERFACE:
            return self._parse_interface_declaration()
        if kind is TokenKind.TRAIT:
            return self._parse_trait_declaration()
        if next_kind is TokenKind.IDENTIFIER and self._current().text.lower() == "enum":
            return self._parse_enum_declaration()
        if kind is TokenKind.FUNCTION and next_kind in (TokenKind.IDENTIFIER, TokenKind.BITWISE_AND):
            return self._parse_function_declaration()
        if kind is TokenKind.NAMESPACE and next_kind is not TokenKind.BACKSLASH:
            return self._parse_namespace()
        if kind is TokenKind.USE:
            self._parse_use_statement()
            return None
        if kind is TokenKind.CONST:
            return self._parse_constant_definition(None, Modifier.NONE, self._take_doc_comment())
        if kind is TokenKind.IDENTIFIER and next_kind is TokenKind.COLON:
            return self._parse_label()
        if kind is TokenKind.STATIC and next_kind is TokenKind.VARIABLE:
            return self._parse_static_variables()

        handler = self._statement_handlers().get(kind)
        if handler is not None:
            return handler()
        return self._parse_expression_statement()

    def _statement_handlers(self) -> dict[TokenKind, Callable[[], ASTNode]]:
        return {
            TokenKind.IF: self._parse_if,
            TokenKind.WHILE: self._parse_while,
            TokenKind.DO: self._parse_do_while,
            TokenKind.FOR: self._parse_for,
            TokenKind.FOREACH: self._parse_foreach,
            TokenKind.SWITCH: self._parse_switch,
            TokenKind.BREAK: lambda: self._parse_jump(NodeKind.BREAK_STATEMENT),
            TokenKind.CONTINUE: lambda: self._parse_jump(NodeKind.CONTINUE_STATEMENT),
            TokenKind.RETURN: lambda: self._parse_jump(NodeKind.RETURN_STATEMENT),
            TokenKind.ECHO: self._parse_echo,
            TokenKind.OPEN_TAG_WITH_ECHO: self._parse_echo,
            TokenKind.GLOBAL: self._parse_global,
            TokenKind.UNSET: self._parse_unset,
            TokenKind.THROW: self._parse_throw,
            TokenKind.TRY: self._parse_try,
            TokenKind.DECLARE: self._parse_declare,
            TokenKind.GOTO: self._parse_goto,
        }

    def _parse_scope(self) -> ASTNode:
        """Parse ``{ statements }``. The scope spans both braces."""
        self._peek()
        self._tokens.push()
        scope = ASTNode(NodeKind.SCOPE)
        self._consume(TokenKind.CURLY_BRACE_OPEN, "'{'")
        while self._peek() is not TokenKind.CURLY_BRACE_CLOSE:
            statement = self._parse_statement()
            if statement is not None:
                scope.add_child(statement)
        self._next()
        scope.configure_span(self._tokens.pop())
        return scope

    def _parse_block(self, *terminators: TokenKind) -> ASTNode:
        """Parse statements up to one of *terminators* into a brace-less scope."""
        mark = self._tokens.mark()
        scope = ASTNode(NodeKind.SCOPE)
        while self._peek() not in terminators:
            statement = self._parse_statement()
            if statement is not None:
                scope.add_child(statement)
        return self._span(scope, mark)

    def _parse_body(self, end_keyword: TokenKind) -> ASTNode:
        """Parse a loop or declare body in either brace or alternative ``:`` syntax."""
        if self._accept(TokenKind.COLON) is None:
            statement = self._parse_statement()
            return statement if statement is not None else ASTNode(NodeKind.SCOPE)
        block = self._parse_block(end_keyword)
        self._next()
        self._parse_terminator()
        return block

    def _parse_parenthesized(self) -> ASTNode:
        self._consume(TokenKind.PARENTHESIS_OPEN, "'('")
        expression = self._parse_expression()
        self._consume(TokenKind.PARENTHESIS_CLOSE, "')'")
        return expression

    def _parse_expression_statement(self) -> ASTNode:
        self._tokens.push()
        node = ASTNode(NodeKind.STATEMENT)
        node.add_child(self._parse_expression())
        self._parse_terminator()
        node.configure_span(self._tokens.pop())
        return node

    def _parse_if(self) -> ASTNode:
        self._tokens.push()
        node = ASTNode(NodeKind.IF_STATEMENT, self._next().text)
        node.add_child(self._parse_parenthesized())
        if self._accept(TokenKind.COLON) is not None:
            self._parse_alternative_if(node)
        else:
            self._add_statement(node)
            while self._peek() is TokenKind.ELSEIF:
                mark = self._tokens.mark()
                branch = ASTNode(NodeKind.ELSE_IF_STATEMENT, self._next().text)
                branch.add_child(self._parse_parenthesized())
                self._add_statement(branch)
                node.add_child(self._span(branch, mark))
            if self._accept(TokenKind.ELSE) is not None:
                self._add_statement(node)
        node.configure_span(self._tokens.pop())
        return node

    def _parse_alternative_if(self, node: ASTNode) -> None:
        branch_ends = (TokenKind.ELSEIF, TokenKind.ELSE, TokenKind.ENDIF)
        node.add_child(self._parse_block(*branch_ends))
        while self._peek() is TokenKind.ELSEIF:
            mark = self._tokens.mark()
            branch = ASTNode(NodeKind.ELSE_IF_STATEMENT, self._next().text)
            branch.add_child(self._parse_parenthesized())
            self._consume(TokenKind.COLON, "':'")
            branch.add_child(self._parse_block(*branch_ends))
            node.add_child(self._span(branch, mark))
        if self._accept(TokenKind.ELSE) is not None:
            self._consume(TokenKind.COLON, "':'")
            node.add_child(self._parse_block(TokenKind.ENDIF))
        self._consume(TokenKind.ENDIF, "'endif'")
        self._parse_terminator()

    def _add_statement(self, node: ASTNode) -> None:
        statement = self._parse_statement()
        node.add_child(statement if statement is not None else ASTNode(NodeKind.SCOPE))

    def _parse_while(self) -> ASTNode:
        self._tokens.push()
        node = ASTNode(NodeKind.WHILE_STATEMENT, self._next().text)
        node.add_child(self._parse_parenthesized())
        node.add_child(self._parse_body(TokenKind.ENDWHILE))
        node.configure_span(self._tokens.pop())
        return node

    def _parse_do_while(self) -> ASTNode:
        self._tokens.push()
        node = ASTNode(NodeKind.DO_WHILE_STATEMENT, self._next().text)
        self._add_statement(node)
        self._consume(TokenKind.WHILE, "'while'")
        node.add_child(self._parse_parenthesized())
        self._parse_terminator()
        node.configure_span(self._tokens.pop())
        return node

    def _parse_for(self) -> ASTNode:
        self._tokens.push()
        node = ASTNode(NodeKind.FOR_STATEMENT, self._next().text)
        self._consume(TokenKind.PARENTHESIS_OPEN, "'('")
        if self._peek() is not TokenKind.SEMICOLON:
            node.add_child(self._parse_expression_list(NodeKind.FOR_INIT, TokenKind.SEMICOLON))
        self._consume(TokenKind.SEMICOLON, "';'")
        while self._peek() is not TokenKind.SEMICOLON:
            node.add_child(self._parse_expression())
            if self._accept(TokenKind.COMMA) is None:
                break
        self._consume(TokenKind.SEMICOLON, "';'")
        if self._peek() is not TokenKind.PARENTHESIS_CLOSE:
            node.add_child(self._parse_expression_list(NodeKind.FOR_UPDATE, TokenKind.PARENTHESIS_CLOSE))
        self._consume(TokenKind.PARENTHESIS_CLOSE, "')'")
        node.add_child(self._parse_body(TokenKind.ENDFOR))
        node.configure_span(self._tokens.pop())
        return node

    def _parse_expression_list(self, kind: NodeKind, end: TokenKind) -> ASTNode:
        mark = self._tokens.mark()
        node = ASTNode(kind)
        while self._peek() is not end:
            node.add_child(self._parse_expression())
            if self._accept(TokenKind.COMMA) is None:
                break
        return self._span(node, mark)

    def _parse_foreach(self) -> ASTNode:
        self._tokens.push()
        node = ASTNode(NodeKind.FOREACH_STATEMENT, self._next().text)
        self._consume(TokenKind.PARENTHESIS_OPEN, "'('")
        node.add_child(self._parse_expression())
        self._consume(TokenKind.AS, "'as'")
        node.add_child(self._parse_foreach_target())
        if self._accept(TokenKind.DOUBLE_ARROW) is not None:
            node.add_child(self._parse_foreach_target())
        self._consume(TokenKind.PARENTHESIS_CLOSE, "')'")
        node.add_child(self._parse_body(TokenKind.ENDFOREACH))
        node.configure_span(self._tokens.pop())
        return node

    def _parse_foreach_target(self) -> ASTNode:
        if self._peek() is not TokenKind.BITWISE_AND:
            return self._parse_expression()
        mark = self._tokens.mark()
        node = ASTNode(NodeKind.UNARY_EXPRESSION, self._next().text)
        node.add_child(self._parse_postfix_expression())
        return self._span(node, mark)

    def _parse_switch(self) -> ASTNode:
        self._tokens.push()
        node = ASTNode(NodeKind.SWITCH_STATEMENT, self._next().text)
        node.add_child(self._parse_parenthesized())
        if self._accept(TokenKind.COLON) is not None:
            end = TokenKind.ENDSWITCH
        else:
            self._consume(TokenKind.CURLY_BRACE_OPEN, "'{'")
            end = TokenKind.CURLY_BRACE_CLOSE
        while self._peek() is not end:
            node.add_child(self._parse_switch_label(end))
        self._next()
        if end is TokenKind.ENDSWITCH:
            self._parse_terminator()
        node.configure_span(self._tokens.pop())
        return node

    def _parse_switch_label(self, end: TokenKind) -> ASTNode:
        mark = self._tokens.mark()
        if self._peek() is TokenKind.CASE:
            label = ASTNode(NodeKind.SWITCH_LABEL, self._next().text)
            label.add_child(self._parse_expression())
        elif self._peek() is TokenKind.DEFAULT:
            label = ASTNode(NodeKind.SWITCH_LABEL, self._next().text)
        else:
            self._unexpected("'case' or 'default'")
        if self._accept(TokenKind.SEMICOLON) is None:
            self._consume(TokenKind.COLON, "':'")
        while self._peek() not in (TokenKind.CASE, TokenKind.DEFAULT, end):
            statement = self._parse_statement()
            if statement is not None:
                label.add_child(statement)
        return self._span(label, mark)

    def _parse_jump(self, kind: NodeKind) -> ASTNode:
        """Parse ``break``, ``continue`` or ``return`` with an optional operand."""
        self._tokens.push()
        node = ASTNode(kind, self._next().text)
        if self._peek() not in (TokenKind.SEMICOLON, TokenKind.CLOSE_TAG):
            node.add_child(self._parse_expression())
        self._parse_terminator()
        node.configure_span(self._tokens.pop())
        return node

    def _parse_echo(self) -> ASTNode:
        self._tokens.push()
        node = ASTNode(NodeKind.ECHO_STATEMENT, self._next().text)
        node.add_child(self._parse_expression())
        while self._accept(TokenKind.COMMA) is not None:
            node.add_child(self._parse_expression())
        self._parse_terminator()
        node.configure_span(self._tokens.pop())
        return node

    def _parse_global(self) -> ASTNode:
        self._tokens.push()
        node = ASTNode(NodeKind.GLOBAL_STATEMENT, self._next().text)
        node.add_child(self._parse_variable())
        while self._accept(TokenKind.COMMA) is not None:
            node.add_child(self._parse_variable())
        self._parse_terminator()
        node.configure_span(self._tokens.pop())
        return node

    def _parse_static_variables(self) -> ASTNode:
        self._tokens.push()
        node = ASTNode(NodeKind.STATIC_VARIABLE_DECLARATION, self._next().text)
        while True:
            node.add_child(self._parse_variable_declarator())
            if self._accept(TokenKind.COMMA) is None:
                break
        self._parse_terminator()
        node.configure_span(self._tokens.pop())
        return node

    def _parse_variable_declarator(self) -> ASTNode:
        """Parse ``$name [= default]``."""
        mark = self._tokens.mark()
        declarator = ASTNode(NodeKind.VARIABLE_DECLARATOR, self._consume(TokenKind.VARIABLE, "variable").text)
        if self._accept(TokenKind.EQUAL) is not None:
            declarator.add_child(self._parse_expression())
        return self._span(declarator, mark)

    def _parse_unset(self) -> ASTNode:
        self._tokens.push()
        node = ASTNode(NodeKind.UNSET_STATEMENT, self._next().text)
        self._consume(TokenKind.PARENTHESIS_OPEN, "'('")
        while self._peek() is not TokenKind.PARENTHESIS_CLOSE:
            node.add_child(self._parse_expression())
            if self._accept(TokenKind.COMMA) is None:
                break
        self._consume(TokenKind.PARENTHESIS_CLOSE, "')'")
        self._parse_terminator()
        node.configure_span(self._tokens.pop())
        return node

    def _parse_throw(self) -> ASTNode:
        self._tokens.push()
        node = ASTNode(NodeKind.THROW_STATEMENT, self._next().text)
        node.add_child(self._parse_expression())
        self._parse_terminator()
        node.configure_span(self._tokens.pop())
        return node

    def _parse_try(self) -> ASTNode:
        self._tokens.push()
        node = ASTNode(NodeKind.TRY_STATEMENT, self._next().text)
        node.add_child(self._parse_scope())
        while self._peek() is TokenKind.CATCH:
            node.add_child(self._parse_catch())
        if self._peek() is TokenKind.FINALLY:
            mark = self._tokens.mark()
            final = ASTNode(NodeKind.FINALLY_STATEMENT, self._next().text)
            final.add_child(self._parse_scope())
            node.add_child(self._span(final, mark))
        if len(node.children) == 1:
            self._unexpected("'catch' or 'finally'")
        node.configure_span(self._tokens.pop())
        return node

    def _parse_catch(self) -> ASTNode:
        mark = self._tokens.mark()
        node = ASTNode(NodeKind.CATCH_STATEMENT, self._next().text)
        self._consume(TokenKind.PARENTHESIS_OPEN, "'('")
        node.add_child(self._parse_class_reference(NodeKind.CLASS_OR_INTERFACE_REFERENCE))
        while self._accept(TokenKind.BITWISE_OR) is not None:
            node.add_child(self._parse_class_reference(NodeKind.CLASS_OR_INTERFACE_REFERENCE))
        if self._peek() is TokenKind.VARIABLE:
            node.add_child(self._parse_variable())
        self._consume(TokenKind.PARENTHESIS_CLOSE, "')'")
        node.add_child(self._parse_scope())
        return self._span(node, mark)

    def _parse_declare(self) -> ASTNode:
        self._tokens.push()
        node = ASTNode(NodeKind.DECLARE_STATEMENT, self._next().text)
        self._consume(TokenKind.PARENTHESIS_OPEN, "'('")
        while True:
            mark = self._tokens.mark()
            directive = ASTNode(NodeKind.CONSTANT_DECLARATOR, self._consume_identifier("declare directive").text)
            self._consume(TokenKind.EQUAL, "'='")
            directive.add_child(self._parse_expression())
            node.add_child(self._span(directive, mark))
            if self._accept(TokenKind.COMMA) is None:
                break
        self._consume(TokenKind.PARENTHESIS_CLOSE, "')'")
        if self._peek() in (TokenKind.SEMICOLON, TokenKind.CLOSE_TAG):
            self._parse_terminator()
        else:
            node.add_child(self._parse_body(TokenKind.ENDDECLARE))
        node.configure_span(self._tokens.pop())
        return node

    def _parse_goto(self) -> ASTNode:
        self._tokens.push()
        self._next()
        node = ASTNode(NodeKind.GOTO_STATEMENT, self._consume(TokenKind.IDENTIFIER, "label").text)
        self._parse_terminator()
        node.configure_span(self._tokens.pop())
        return node

    def _parse_label(self) -> ASTNode:
        self._tokens.push()
        node = ASTNode(NodeKind.LABEL_STATEMENT, self._next().text)
        self._next()
        node.configure_span(self._tokens.pop())
        return node

    # ------------------------------------------------------------------
    # Namespaces and imports
    # ------------------------------------------------------------------

    def _parse_namespace(self) -> ASTNode | None:
        """Parse ``namespace Name;`` or a braced namespace block.

        Every namespace declaration starts a fresh import table.
        """
        self._next()
        name = ""
        if self._peek() is TokenKind.IDENTIFIER:
            name = self._parse_name()
        self._namespace = name
        self._uses = {}
        if self._peek() is not TokenKind.CURLY_BRACE_OPEN:
            self._parse_terminator()
            return None
        block = self._parse_scope()
        self._namespace = ""
        self._uses = {}
        return block

    def _parse_use_statement(self) -> None:
        """Parse a top-level ``use`` import and record class aliases."""
        self._next()
        kind = self._use_kind()
        while True:
            prefix = self._parse_name().lstrip("\\")
            if self._peek() is TokenKind.BACKSLASH and self._stream.peek_next() is TokenKind.CURLY_BRACE_OPEN:
                self._parse_group_use(prefix, kind)
            else:
                self._parse_use_alias(prefix, kind)
            if self._accept(TokenKind.COMMA) is None:
                break
        self._parse_terminator()

    def _use_kind(self) -> TokenKind | None:
        if self._peek() is TokenKind.FUNCTION or self._peek() is TokenKind.CONST:
            return self._next().kind
        return None

    def _parse_group_use(self, prefix: str, kind: TokenKind | None) -> None:
        self._next()
        self._consume(TokenKind.CURLY_BRACE_OPEN, "'{'")
        while self._peek() is not TokenKind.CURLY_BRACE_CLOSE:
            member_kind = self._use_kind() or kind
            self._parse_use_alias(f"{prefix}\\{self._parse_name()}", member_kind)
            if self._accept(TokenKind.COMMA) is None:
                break
        self._consume(TokenKind.CURLY_BRACE_CLOSE, "'}'")

    def _parse_use_alias(self, qualified_name: str, kind: TokenKind | None) -> None:
        alias = qualified_name.rsplit("\\", 1)[-1]
        if self._accept(TokenKind.AS) is not None:
            alias = self._consume_identifier("alias").text
        # Function and constant imports never name a type.
        if kind is None:
            self._uses[alias.lower()] = qualified_name

    # ------------------------------------------------------------------
    # Type declarations
    # ------------------------------------------------------------------

    def _parse_class_declaration(self) -> ASTNode:
        comment = self._take_doc_comment()
        self._tokens.push()
        modifiers = Modifier.NONE
        while self._peek() in _CLASS_MODIFIERS:
            modifiers |= _MODIFIERS[self._next().kind]
        self._consume(TokenKind.CLASS, "'class'")
        return self._parse_type_declaration(TypeKind.CLASS, NodeKind.CLASS, modifiers, comment)

    def _parse_interface_declaration(self) -> ASTNode:
        comment = self._take_doc_comment()
        self._tokens.push()
        self._next()
        return self._parse_type_declaration(TypeKind.INTERFACE, NodeKind.INTERFACE, Modifier.NONE, comment)

    def _parse_trait_declaration(self) -> ASTNode:
        comment = self._take_doc_comment()
        self._tokens.push()
        self._next()
        return self._parse_type_declaration(TypeKind.TRAIT, NodeKind.TRAIT, Modifier.NONE, comment)

    def _parse_enum_declaration(self) -> ASTNode:
        comment = self._take_doc_comment()
        self._tokens.push()
        self._next()
        return self._parse_type_declaration(TypeKind.ENUM, NodeKind.ENUM, Modifier.FINAL, comment)

    def _parse_type_declaration(
        self,
        type_kind: TypeKind,
        node_kind: NodeKind,
        modifiers: Modifier,
        comment: str | None,
    ) -> ASTNode:
        """Parse a named type after its keyword; a token scope is already open.

        Header references and members are collected on a detached draft and
        only moved onto the shared type object by the builder, so a parse
        that fails for any reason leaves the placeholder as it was found.
        """
        name = self._consume(TokenKind.IDENTIFIER, f"{type_kind.value} name").text
        qualified_name = self._prefix(name)
        self._builder.check_redeclaration(qualified_name)
        draft = DeclaredType(qualified_name=qualified_name, kind=type_kind)
        node = ASTNode(node_kind, qualified_name)
        node.comment = comment
        self._parse_type_header(draft, node)
        self._parse_type_body(draft, node)
        node.configure_span(self._tokens.pop())
        declared = self._builder.complete_declaration(
            qualified_name,
            type_kind,
            node,
            package_name=self._package_for(comment),
            modifiers=modifiers,
            comment=comment,
            source_file=self._source_file,
            members=draft,
        )
        declared.id = _make_id(self._source_file.id, type_kind.value, qualified_name)
        self._store(declared, node.tokens)
        self._source_file.types.append(declared)
        return node

    def _parse_type_header(self, declared: DeclaredType, node: ASTNode) -> None:
        """Parse the enum backing type and the ``extends``/``implements`` clauses."""
        if declared.kind is TypeKind.ENUM and self._accept(TokenKind.COLON) is not None:
            node.add_child(self._parse_type_hint())
        if self._accept(TokenKind.EXTENDS) is not None:
            if declared.kind is TypeKind.INTERFACE:
                declared.interfaces.extend(self._parse_interface_list(node))
            elif declared.kind is TypeKind.CLASS:
                declared.parent_class = self._parse_class_reference(NodeKind.CLASS_REFERENCE, TypeKind.CLASS)
                node.add_child(declared.parent_class)
            else:
                self._unexpected("'{'")
        if declared.kind in (TypeKind.CLASS, TypeKind.ENUM) and self._accept(TokenKind.IMPLEMENTS) is not None:
            declared.interfaces.extend(self._parse_interface_list(node))

    def _parse_interface_list(self, node: ASTNode) -> list[ReferenceNode]:
        references = []
        while True:
            reference = self._parse_class_reference(NodeKind.INTERFACE_REFERENCE, TypeKind.INTERFACE)
            references.append(node.add_child(reference))
            if self._accept(TokenKind.COMMA) is None:
                return references

    def _parse_type_body(self, declared: DeclaredType, node: ASTNode) -> None:
        """Parse ``{ members }`` with *declared* as the innermost open type."""
        self._consume(TokenKind.CURLY_BRACE_OPEN, "'{'")
        self._type_stack.append(declared)
        try:
            while self._peek() is not TokenKind.CURLY_BRACE_CLOSE:
                member = self._parse_member(declared)
                if member is not None:
                    node.add_child(member)
            self._next()
        finally:
            self._type_stack.pop()

    def _parse_member(self, declared: DeclaredType) -> ASTNode | None:
        if self._peek() is TokenKind.ATTRIBUTE_START:
            self._skip_attributes()
        comment = self._take_doc_comment()
        if self._peek() is TokenKind.SEMICOLON:
            self._next()
            return None
        if self._peek() is TokenKind.USE:
            return self._parse_trait_use(declared)
        if self._peek() is TokenKind.CASE:
            if declared.kind is not TypeKind.ENUM:
                self._unexpected("class member")
            return self._parse_enum_case(declared, comment)

        self._tokens.push()
        modifiers = Modifier.NONE
        while self._peek() in _MODIFIERS:
            modifiers |= _MODIFIERS[self._next().kind]
        if self._peek() is TokenKind.CONST:
            return self._finish_member(self._parse_constant_definition(declared, modifiers, comment))
        if self._peek() is TokenKind.FUNCTION:
            method = self._parse_method(declared, modifiers, comment)
            self._finish_member(method.node)
            self._store(method, method.node.tokens)
            return method.node
        if not modifiers:
            self._unexpected("class member")
        return self._finish_member(self._parse_field_declaration(declared, modifiers, comment))

    def _finish_member(self, node: ASTNode) -> ASTNode:
        node.configure_span(self._tokens.pop())
        return node

    def _parse_constant_definition(
        self, declared: DeclaredType | None, modifiers: Modifier, comment: str | None
    ) -> ASTNode:
        """Parse ``const A = 1, B = 2;`` in a type body or at file level."""
        top_level = declared is None
        if top_level:
            self._tokens.push()
        node = ASTNode(NodeKind.CONSTANT_DEFINITION, self._next().text)
        node.comment = comment
        self._peek()
        if self._stream.peek_next() is not TokenKind.EQUAL:
            node.add_child(self._parse_type_hint())
        while True:
            mark = self._tokens.mark()
            declarator = ASTNode(NodeKind.CONSTANT_DECLARATOR, self._consume_identifier("constant name").text)
            self._consume(TokenKind.EQUAL, "'='")
            declarator.add_child(self._parse_expression())
            node.add_child(self._span(declarator, mark))
            if declared is not None:
                constant = ClassConstant(
                    name=declarator.image,
                    modifiers=_with_default_visibility(modifiers),
                    value=declarator.get_child(0),
                    comment=comment,
                    parent=declared,
                    node=declarator,
                )
                declared.constants.append(constant)
            if self._accept(TokenKind.COMMA) is None:
                break
        self._parse_terminator()
        if top_level:
            node.configure_span(self._tokens.pop())
        return node

    def _parse_enum_case(self, declared: DeclaredType, comment: str | None) -> ASTNode:
        self._tokens.push()
        self._next()
        node = ASTNode(NodeKind.ENUM_CASE, self._consume_identifier("case name").text)
        node.comment = comment
        if self._accept(TokenKind.EQUAL) is not None:
            node.add_child(self._parse_expression())
        self._parse_terminator()
        node.configure_span(self._tokens.pop())
        case = ClassConstant(
            name=node.image,
            modifiers=Modifier.PUBLIC,
            value=node.children[0] if node.children else None,
            comment=comment,
            parent=declared,
            node=node,
            is_enum_case=True,
        )
        declared.constants.append(case)
        return node

    def _parse_field_declaration(self, declared: DeclaredType, modifiers: Modifier, comment: str | None) -> ASTNode:
        """Parse a property declaration with one or more declarators."""
        node = ASTNode(NodeKind.FIELD_DECLARATION)
        node.comment = comment
        type_hint = None
        if self._peek() is not TokenKind.VARIABLE:
            type_hint = node.add_child(self._parse_type_hint())
        while True:
            declarator = node.add_child(self._parse_variable_declarator())
            prop = Property(
                name=declarator.image.lstrip("$"),
                modifiers=_with_default_visibility(modifiers),
                type_hint=type_hint,
                default_value=declarator.children[0] if declarator.children else None,
                comment=comment,
                parent=declared,
                node=declarator,
            )
            self._add_property(declared, prop)
            if self._accept(TokenKind.COMMA) is None:
                break
        self._parse_terminator()
        return node

    def _parse_method(self, declared: DeclaredType, modifiers: Modifier, comment: str | None) -> Method:
        """Parse a method after its modifiers; the member token scope is already open."""
        self._next()
        returns_reference = self._accept(TokenKind.BITWISE_AND) is not None
        name = self._consume_identifier("method name").text
        if declared.kind is TypeKind.INTERFACE:
            modifiers |= Modifier.ABSTRACT
        node = ASTNode(NodeKind.METHOD, name)
        node.comment = comment
        method = Method(
            name=name,
            modifiers=_with_default_visibility(modifiers),
            returns_reference=returns_reference,
            comment=comment,
            node=node,
            parent=declared,
        )
        promote_to = declared if name.lower() == "__construct" else None
        self._parse_signature(method, node, promote_to)
        if self._peek() is TokenKind.CURLY_BRACE_OPEN:
            node.add_child(self._parse_scope())
        else:
            self._parse_terminator()
        method.id = _make_id(self._source_file.id, "method", declared.qualified_name, name)
        declared.methods.append(method)
        return method

    def _parse_trait_use(self, declared: DeclaredType) -> ASTNode:
        self._tokens.push()
        node = ASTNode(NodeKind.TRAIT_USE_STATEMENT, self._next().text)
        while True:
            reference = self._parse_class_reference(NodeKind.TRAIT_REFERENCE, TypeKind.TRAIT)
            declared.trait_references.append(node.add_child(reference))
            if self._accept(TokenKind.COMMA) is None:
                break
        if self._peek() is TokenKind.CURLY_BRACE_OPEN:
            node.add_child(self._parse_trait_adaptation())
        else:
            self._parse_terminator()
        node.configure_span(self._tokens.pop())
        return node

    def _parse_trait_adaptation(self) -> ASTNode:
        mark = self._tokens.mark()
        node = ASTNode(NodeKind.TRAIT_ADAPTATION)
        self._next()
        while self._peek() is not TokenKind.CURLY_BRACE_CLOSE:
            node.add_child(self._parse_trait_adaptation_rule())
        self._next()
        return self._span(node, mark)

    def _parse_trait_adaptation_rule(self) -> ASTNode:
        """Parse ``[Trait::]method insteadof A, B;`` or ``[Trait::]method as [modifier] [alias];``."""
        mark = self._tokens.mark()
        reference = None
        if self._peek() in (TokenKind.BACKSLASH, TokenKind.NAMESPACE) or self._stream.peek_next() in (
            TokenKind.DOUBLE_COLON,
            TokenKind.BACKSLASH,
        ):
            reference = self._parse_class_reference(NodeKind.TRAIT_REFERENCE, TypeKind.TRAIT)
            self._consume(TokenKind.DOUBLE_COLON, "'::'")
        method_name = self._consume_identifier("method name").text
        if self._accept(TokenKind.INSTEADOF) is not None:
            rule = ASTNode(NodeKind.TRAIT_ADAPTATION_PRECEDENCE, method_name)
            if reference is not None:
                rule.add_child(reference)
            while True:
                rule.add_child(self._parse_class_reference(NodeKind.TRAIT_REFERENCE, TypeKind.TRAIT))
                if self._accept(TokenKind.COMMA) is None:
                    break
        else:
            self._consume(TokenKind.AS, "'as' or 'insteadof'")
            rule = ASTNode(NodeKind.TRAIT_ADAPTATION_ALIAS, method_name)
            if reference is not None:
                rule.add_child(reference)
            if self._peek() in (TokenKind.PUBLIC, TokenKind.PROTECTED, TokenKind.PRIVATE):
                token = self._next()
                modifier = ASTNode(NodeKind.IDENTIFIER, token.text)
                modifier.configure_span([token])
                rule.add_child(modifier)
            if self._peek() in _SEMI_RESERVED:
                token = self._next()
                alias = ASTNode(NodeKind.IDENTIFIER, token.text)
                alias.configure_span([token])
                rule.add_child(alias)
        self._parse_terminator()
        return self._span(rule, mark)

    # ------------------------------------------------------------------
    # Functions, closures and signatures
    # ------------------------------------------------------------------

    def _parse_function_declaration(self) -> ASTNode:
        comment = self._take_doc_comment()
        self._tokens.push()
        self._next()
        returns_reference = self._accept(TokenKind.BITWISE_AND) is not None
        name = self._consume(TokenKind.IDENTIFIER, "function name").text
        qualified_name = self._prefix(name)
        node = ASTNode(NodeKind.FUNCTION, qualified_name)
        node.comment = comment
        callable_ = AbstractCallable(name=name, returns_reference=returns_reference, comment=comment, node=node)
        self._type_stack.append(None)
        try:
            self._parse_signature(callable_, node, None)
            node.add_child(self._parse_scope())
        finally:
            self._type_stack.pop()
        node.configure_span(self._tokens.pop())
        function = self._builder.build_function(qualified_name, package_name=self._package_for(comment))
        function.parameters = callable_.parameters
        function.return_type = callable_.return_type
        function.returns_reference = returns_reference
        function.comment = comment
        function.node = node
        function.source_file = self._source_file
        function.id = _make_id(self._source_file.id, "function", qualified_name)
        self._store(function, node.tokens)
        self._source_file.functions.append(function)
        return node

    def _parse_signature(self, callable_: AbstractCallable, node: ASTNode, promote_to: DeclaredType | None) -> None:
        """Parse the parameter list and optional return type of *callable_*."""
        node.add_child(self._parse_formal_parameters(callable_, promote_to))
        if self._accept(TokenKind.COLON) is not None:
            callable_.return_type = node.add_child(self._parse_type_hint())

    def _parse_formal_parameters(self, callable_: AbstractCallable | None, promote_to: DeclaredType | None) -> ASTNode:
        mark = self._tokens.mark()
        node = ASTNode(NodeKind.FORMAL_PARAMETERS)
        self._consume(TokenKind.PARENTHESIS_OPEN, "'('")
        while self._peek() is not TokenKind.PARENTHESIS_CLOSE:
            parameter = self._parse_formal_parameter(len(node.children), promote_to)
            node.add_child(parameter.node)
            if callable_ is not None:
                callable_.parameters.append(parameter)
            if self._accept(TokenKind.COMMA) is None:
                break
        self._consume(TokenKind.PARENTHESIS_CLOSE, "')'")
        return self._span(node, mark)

    def _parse_formal_parameter(self, position: int, promote_to: DeclaredType | None) -> Parameter:
        if self._peek() is TokenKind.ATTRIBUTE_START:
            self._skip_attributes()
        comment = self._take_doc_comment()
        mark = self._tokens.mark()
        modifiers = Modifier.NONE
        while self._peek() in _PROMOTION_MODIFIERS:
            modifiers |= _MODIFIERS[self._next().kind]
        node = ASTNode(NodeKind.FORMAL_PARAMETER)
        type_hint = None
        if self._peek() not in (TokenKind.VARIABLE, TokenKind.BITWISE_AND, TokenKind.ELLIPSIS):
            type_hint = node.add_child(self._parse_type_hint())
        by_reference = self._accept(TokenKind.BITWISE_AND) is not None
        variadic = self._accept(TokenKind.ELLIPSIS) is not None
        variable = node.add_child(self._parse_variable())
        node.image = variable.image
        default_value = None
        if self._accept(TokenKind.EQUAL) is not None:
            default_value = node.add_child(self._parse_expression())
        self._span(node, mark)
        parameter = Parameter(
            name=variable.image.lstrip("$"),
            position=position,
            node=node,
            type_hint=type_hint,
            by_reference=by_reference,
            variadic=variadic,
            default_value=default_value,
            modifiers=modifiers,
        )
        if modifiers and promote_to is not None:
            prop = Property(
                name=parameter.name,
                modifiers=_with_default_visibility(modifiers),
                type_hint=type_hint,
                default_value=default_value,
                comment=comment,
                parent=promote_to,
                node=node,
            )
            self._add_property(promote_to, prop)
        return parameter

    def _parse_closure(self) -> ASTNode:
        """Parse ``[static] function [&] (...) [use (...)] [: type] { ... }``."""
        mark = self._tokens.mark()
        node = ASTNode(NodeKind.CLOSURE)
        if self._accept(TokenKind.STATIC) is not None:
            node.image = "static"
        self._consume(TokenKind.FUNCTION, "'function'")
        self._accept(TokenKind.BITWISE_AND)
        node.add_child(self._parse_formal_parameters(None, None))
        if self._peek() is TokenKind.USE:
            bound_mark = self._tokens.mark()
            bound = ASTNode(NodeKind.BOUND_VARIABLES, self._next().text)
            self._consume(TokenKind.PARENTHESIS_OPEN, "'('")
            while self._peek() is not TokenKind.PARENTHESIS_CLOSE:
                self._accept(TokenKind.BITWISE_AND)
                bound.add_child(self._parse_variable())
                if self._accept(TokenKind.COMMA) is None:
                    break
            self._consume(TokenKind.PARENTHESIS_CLOSE, "')'")
            node.add_child(self._span(bound, bound_mark))
        if self._accept(TokenKind.COLON) is not None:
            node.add_child(self._parse_type_hint())
        node.add_child(self._parse_scope())
        return self._span(node, mark)

    def _parse_arrow_function(self) -> ASTNode:
        """Parse ``[static] fn [&] (...) [: type] => expression``."""
        mark = self._tokens.mark()
        node = ASTNode(NodeKind.ARROW_FUNCTION)
        if self._accept(TokenKind.STATIC) is not None:
            node.image = "static"
        self._consume(TokenKind.FN, "'fn'")
        self._accept(TokenKind.BITWISE_AND)
        node.add_child(self._parse_formal_parameters(None, None))
        if self._accept(TokenKind.COLON) is not None:
            node.add_child(self._parse_type_hint())
        self._consume(TokenKind.DOUBLE_ARROW, "'=>'")
        node.add_child(self._parse_assignment_level())
        return self._span(node, mark)

    # ------------------------------------------------------------------
    # Type hints
    # ------------------------------------------------------------------

    def _parse_type_hint(self) -> ASTNode:
        """Parse a nullable, union, intersection or single type."""
        mark = self._tokens.mark()
        if self._accept(TokenKind.QUESTION_MARK) is not None:
            node = ASTNode(NodeKind.NULLABLE_TYPE, "?")
            node.add_child(self._parse_single_type())
            return self._span(node, mark)
        first = self._parse_union_member()
        if self._peek() is TokenKind.BITWISE_OR:
            node = ASTNode(NodeKind.UNION_TYPE, "|")
            node.add_child(first)
            while self._accept(TokenKind.BITWISE_OR) is not None:
                node.add_child(self._parse_union_member())
            return self._span(node, mark)
        if self._at_intersection():
            node = ASTNode(NodeKind.INTERSECTION_TYPE, "&")
            node.add_child(first)
            while self._at_intersection():
                self._next()
                node.add_child(self._parse_single_type())
            return self._span(node, mark)
        return first

    def _parse_union_member(self) -> ASTNode:
        """Parse one member of a union; parenthesized members are intersections."""
        if self._peek() is not TokenKind.PARENTHESIS_OPEN:
            return self._parse_single_type()
        mark = self._tokens.mark()
        self._next()
        node = ASTNode(NodeKind.INTERSECTION_TYPE, "&")
        node.add_child(self._parse_single_type())
        while self._accept(TokenKind.BITWISE_AND) is not None:
            node.add_child(self._parse_single_type())
        self._consume(TokenKind.PARENTHESIS_CLOSE, "')'")
        return self._span(node, mark)

    def _at_intersection(self) -> bool:
        # ``Foo &$bar`` passes by reference, ``Foo&Bar $baz`` is an intersection.
        return self._peek() is TokenKind.BITWISE_AND and self._stream.peek_next() not in (
            TokenKind.VARIABLE,
            TokenKind.ELLIPSIS,
        )

    def _parse_single_type(self) -> ASTNode:
        kind = self._peek()
        if kind in _SPECIAL_TYPES:
            return self._parse_special_reference()
        if kind in (TokenKind.ARRAY, TokenKind.CALLABLE):
            token = self._next()
            node = ASTNode(NodeKind.SCALAR_TYPE, token.text.lower())
            node.configure_span([token])
            return node
        if kind not in _NAME_STARTS:
            self._unexpected("type")
        if kind is TokenKind.IDENTIFIER and self._current().text.lower() in _SCALAR_TYPES:
            if self._stream.peek_next() is not TokenKind.BACKSLASH:
                token = self._next()
                node = ASTNode(NodeKind.SCALAR_TYPE, token.text.lower())
                node.configure_span([token])
                return node
        return self._parse_class_reference(NodeKind.CLASS_OR_INTERFACE_REFERENCE)

    # ------------------------------------------------------------------
    # Attributes
    # ------------------------------------------------------------------

    def _skip_attributes(self) -> None:
        """Consume ``#[...]`` groups; attribute arguments are not analyzed."""
        comment = self._doc_comment
        while self._peek() is TokenKind.ATTRIBUTE_START:
            self._next()
            level = 1
            while level:
                token = self._next()
                if token.kind in (TokenKind.SQUARED_BRACKET_OPEN, TokenKind.ATTRIBUTE_START):
                    level += 1
                elif token.kind is TokenKind.SQUARED_BRACKET_CLOSE:
                    level -= 1
        if self._doc_comment is None:
            self._doc_comment = comment

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def _parse_expression(self) -> ASTNode:
        return self._parse_logical(0)

    def _parse_logical(self, level: int) -> ASTNode:
        """Parse ``or``, ``xor`` and ``and``, which bind looser than assignment."""
        if level == len(_LOGICAL_LEVELS):
            return self._parse_assignment_level()
        mark = self._tokens.mark()
        left = self._parse_logical(level + 1)
        while self._peek() in _LOGICAL_LEVELS[level]:
            operator = self._next()
            left = self._binary(operator, left, self._parse_logical(level + 1), mark)
        return left

    def _parse_assignment_level(self) -> ASTNode:
        """Parse a conditional expression; assignments are handled on their target."""
        mark = self._tokens.mark()
        condition = self._parse_coalesce()
        while self._peek() is TokenKind.QUESTION_MARK:
            node = ASTNode(NodeKind.CONDITIONAL_EXPRESSION, self._next().text)
            node.add_child(condition)
            if self._accept(TokenKind.COLON) is None:
                node.add_child(self._parse_assignment_level())
                self._consume(TokenKind.COLON, "':'")
            node.add_child(self._parse_assignment_level())
            condition = self._span(node, mark)
        return condition

    def _parse_coalesce(self) -> ASTNode:
        mark = self._tokens.mark()
        left = self._parse_binary(0)
        if self._peek() is TokenKind.COALESCE:
            operator = self._next()
            left = self._binary(operator, left, self._parse_coalesce(), mark)
        return left

    def _parse_binary(self, level: int) -> ASTNode:
        if level == len(_BINARY_LEVELS):
            return self._parse_not()
        mark = self._tokens.mark()
        left = self._parse_binary(level + 1)
        while self._peek() in _BINARY_LEVELS[level]:
            operator = self._next()
            left = self._binary(operator, left, self._parse_binary(level + 1), mark)
        return left

    def _binary(self, operator: Token, left: ASTNode, right: ASTNode, mark: int) -> ASTNode:
        node = ASTNode(_BINARY_NODE_KINDS.get(operator.kind, NodeKind.EXPRESSION), operator.text)
        node.add_child(left)
        node.add_child(right)
        return self._span(node, mark)

    def _parse_not(self) -> ASTNode:
        if self._peek() is not TokenKind.EXCLAMATION:
            return self._parse_instanceof()
        mark = self._tokens.mark()
        node = ASTNode(NodeKind.UNARY_EXPRESSION, self._next().text)
        node.add_child(self._parse_not())
        return self._span(node, mark)

    def _parse_instanceof(self) -> ASTNode:
        mark = self._tokens.mark()
        left = self._parse_unary()
        while self._peek() is TokenKind.INSTANCEOF:
            node = ASTNode(NodeKind.INSTANCEOF_EXPRESSION, self._next().text)
            node.add_child(left)
            if self._peek() in _SPECIAL_TYPES or self._peek() in _NAME_STARTS:
                node.add_child(self._parse_type_reference(NodeKind.CLASS_OR_INTERFACE_REFERENCE))
            else:
                node.add_child(self._parse_unary())
            left = self._span(node, mark)
        return left

    def _parse_unary(self) -> ASTNode:
        kind = self._peek()
        mark = self._tokens.mark()
        if kind in (TokenKind.MINUS, TokenKind.PLUS, TokenKind.BITWISE_NOT, TokenKind.EXCLAMATION, TokenKind.AT):
            node = ASTNode(NodeKind.UNARY_EXPRESSION, self._next().text)
        elif kind is TokenKind.BITWISE_AND:
            node = ASTNode(NodeKind.UNARY_EXPRESSION, self._next().text)
        elif kind is TokenKind.CAST:
            text = self._next().text
            node = ASTNode(NodeKind.CAST_EXPRESSION, f"({text[1:-1].strip().lower()})")
        elif kind is TokenKind.INC:
            node = ASTNode(NodeKind.PRE_INCREMENT_EXPRESSION, self._next().text)
        elif kind is TokenKind.DEC:
            node = ASTNode(NodeKind.PRE_DECREMENT_EXPRESSION, self._next().text)
        else:
            return self._parse_pow()
        node.add_child(self._parse_unary())
        return self._span(node, mark)

    def _parse_pow(self) -> ASTNode:
        mark = self._tokens.mark()
        base = self._parse_postfix_expression()
        if self._peek() is not TokenKind.POW:
            return base
        operator = self._next()
        return self._binary(operator, base, self._parse_unary(), mark)

    def _parse_postfix_expression(self) -> ASTNode:
        """Parse a primary with its member chain plus a trailing assignment or ``++``/``--``."""
        mark = self._tokens.mark()
        node = self._parse_postfix_chain(self._parse_primary(), mark)
        kind = self._peek()
        if kind in _ASSIGNMENT_OPERATORS:
            operator = self._next().text
            if operator == "=" and self._accept(TokenKind.BITWISE_AND) is not None:
                operator = "=&"
            assignment = ASTNode(NodeKind.ASSIGNMENT_EXPRESSION, operator)
            assignment.add_child(node)
            assignment.add_child(self._parse_assignment_level())
            return self._span(assignment, mark)
        if kind is TokenKind.INC or kind is TokenKind.DEC:
            postfix = ASTNode(NodeKind.POSTFIX_EXPRESSION, self._next().text)
            postfix.add_child(node)
            return self._span(postfix, mark)
        return node

    def _parse_postfix_chain(self, node: ASTNode, mark: int) -> ASTNode:
        """Apply member access, static access, index and call postfixes to *node*."""
        while True:
            kind = self._peek()
            if kind in (TokenKind.OBJECT_OPERATOR, TokenKind.NULLSAFE_OBJECT_OPERATOR):
                prefix = ASTNode(NodeKind.MEMBER_PRIMARY_PREFIX, self._next().text)
                prefix.add_child(node)
                prefix.add_child(self._parse_member_postfix())
            elif kind is TokenKind.DOUBLE_COLON:
                prefix = ASTNode(NodeKind.MEMBER_PRIMARY_PREFIX, self._next().text)
                prefix.add_child(node)
                prefix.add_child(self._parse_static_member_postfix())
            elif kind is TokenKind.SQUARED_BRACKET_OPEN:
                prefix = ASTNode(NodeKind.ARRAY_INDEX_EXPRESSION, self._next().text)
                prefix.add_child(node)
                if self._peek() is not TokenKind.SQUARED_BRACKET_CLOSE:
                    prefix.add_child(self._parse_expression())
                self._consume(TokenKind.SQUARED_BRACKET_CLOSE, "']'")
            elif kind is TokenKind.PARENTHESIS_OPEN:
                prefix = ASTNode(NodeKind.FUNCTION_POSTFIX)
                prefix.add_child(node)
                prefix.add_child(self._parse_arguments())
            else:
                return node
            node = self._span(prefix, mark)

    def _parse_member_postfix(self) -> ASTNode:
        """Parse the member after ``->`` or ``?->``."""
        mark = self._tokens.mark()
        name_node = None
        kind = self._peek()
        if kind is TokenKind.VARIABLE or kind is TokenKind.DOLLAR:
            name_node = self._parse_variable()
            image = name_node.image
        elif kind is TokenKind.CURLY_BRACE_OPEN:
            name_node = self._parse_compound_expression()
            image = None
        elif kind in _SEMI_RESERVED:
            image = self._next().text
        else:
            self._unexpected("member name")
        if self._peek() is TokenKind.PARENTHESIS_OPEN:
            postfix = ASTNode(NodeKind.METHOD_POSTFIX, image)
        else:
            postfix = ASTNode(NodeKind.PROPERTY_POSTFIX, image)
        if name_node is not None:
            postfix.add_child(name_node)
        if postfix.kind is NodeKind.METHOD_POSTFIX:
            postfix.add_child(self._parse_arguments())
        return self._span(postfix, mark)

    def _parse_static_member_postfix(self) -> ASTNode:
        """Parse the member after ``::``."""
        mark = self._tokens.mark()
        kind = self._peek()
        if kind is TokenKind.CLASS:
            return self._span(ASTNode(NodeKind.CLASS_FQN_POSTFIX, self._next().text), mark)
        if kind is TokenKind.VARIABLE or kind is TokenKind.DOLLAR:
            variable = self._parse_variable()
            is_call = self._peek() is TokenKind.PARENTHESIS_OPEN
            postfix = ASTNode(NodeKind.METHOD_POSTFIX if is_call else NodeKind.PROPERTY_POSTFIX, variable.image)
            postfix.add_child(variable)
        elif kind is TokenKind.CURLY_BRACE_OPEN:
            postfix = ASTNode(NodeKind.METHOD_POSTFIX)
            postfix.add_child(self._parse_compound_expression())
        elif kind in _SEMI_RESERVED:
            name = self._next().text
            is_call = self._peek() is TokenKind.PARENTHESIS_OPEN
            postfix = ASTNode(NodeKind.METHOD_POSTFIX if is_call else NodeKind.CONSTANT_POSTFIX, name)
        else:
            self._unexpected("member name")
        if postfix.kind is NodeKind.METHOD_POSTFIX:
            postfix.add_child(self._parse_arguments())
        return self._span(postfix, mark)

    def _parse_compound_expression(self) -> ASTNode:
        mark = self._tokens.mark()
        node = ASTNode(NodeKind.COMPOUND_EXPRESSION, self._next().text)
        node.add_child(self._parse_expression())
        self._consume(TokenKind.CURLY_BRACE_CLOSE, "'}'")
        return self._span(node, mark)

    def _parse_arguments(self) -> ASTNode:
        """Parse a call argument list including named and spread arguments."""
        mark = self._tokens.mark()
        node = ASTNode(NodeKind.ARGUMENTS)
        self._consume(TokenKind.PARENTHESIS_OPEN, "'('")
        while self._peek() is not TokenKind.PARENTHESIS_CLOSE:
            if self._peek() is TokenKind.ELLIPSIS:
                spread_mark = self._tokens.mark()
                token = self._next()
                if self._peek() is TokenKind.PARENTHESIS_CLOSE:
                    # First-class callable syntax: foo(...)
                    node.image = token.text
                    break
                spread = ASTNode(NodeKind.UNARY_EXPRESSION, token.text)
                spread.add_child(self._parse_expression())
                node.add_child(self._span(spread, spread_mark))
            elif self._peek() in _SEMI_RESERVED and self._stream.peek_next() is TokenKind.COLON:
                named_mark = self._tokens.mark()
                named = ASTNode(NodeKind.NAMED_ARGUMENT, self._next().text)
                self._next()
                named.add_child(self._parse_expression())
                node.add_child(self._span(named, named_mark))
            else:
                node.add_child(self._parse_expression())
            if self._accept(TokenKind.COMMA) is None:
                break
        self._consume(TokenKind.PARENTHESIS_CLOSE, "')'")
        return self._span(node, mark)

    # ------------------------------------------------------------------
    # Primaries
    # ------------------------------------------------------------------

    def _parse_primary(self) -> ASTNode:
        if self._peek() is TokenKind.ATTRIBUTE_START:
            self._skip_attributes()
        kind = self._peek()
        if kind is TokenKind.VARIABLE or kind is TokenKind.DOLLAR:
            return self._parse_variable()
        if kind in _LITERAL_TOKENS:
            token = self._next()
            node = ASTNode(NodeKind.LITERAL, token.text)
            node.configure_span([token])
            return node
        if kind in _NAME_STARTS:
            return self._parse_name_expression()
        if kind is TokenKind.STATIC and self._stream.peek_next() is TokenKind.FUNCTION:
            return self._parse_closure()
        if kind is TokenKind.STATIC and self._stream.peek_next() is TokenKind.FN:
            return self._parse_arrow_function()
        if kind in _SPECIAL_TYPES:
            return self._parse_special_reference()
        if kind is TokenKind.FUNCTION:
            return self._parse_closure()
        if kind is TokenKind.FN:
            return self._parse_arrow_function()
        if kind is TokenKind.PARENTHESIS_OPEN:
            return self._parse_parenthesized()
        if kind is TokenKind.NEW:
            return self._parse_allocation()
        if kind is TokenKind.MATCH:
            return self._parse_match()

        mark = self._tokens.mark()
        if kind is TokenKind.ARRAY and self._stream.peek_next() is TokenKind.PARENTHESIS_OPEN:
            node = ASTNode(NodeKind.ARRAY, self._next().text)
            self._next()
            self._parse_array_elements(node, TokenKind.PARENTHESIS_CLOSE)
        elif kind is TokenKind.SQUARED_BRACKET_OPEN:
            node = ASTNode(NodeKind.ARRAY, self._next().text)
            self._parse_array_elements(node, TokenKind.SQUARED_BRACKET_CLOSE)
        elif kind is TokenKind.LIST:
            node = ASTNode(NodeKind.LIST_EXPRESSION, self._next().text)
            self._consume(TokenKind.PARENTHESIS_OPEN, "'('")
            self._parse_array_elements(node, TokenKind.PARENTHESIS_CLOSE)
        elif kind is TokenKind.ISSET:
            node = ASTNode(NodeKind.ISSET_EXPRESSION, self._next().text)
            self._consume(TokenKind.PARENTHESIS_OPEN, "'('")
            while self._peek() is not TokenKind.PARENTHESIS_CLOSE:
                node.add_child(self._parse_expression())
                if self._accept(TokenKind.COMMA) is None:
                    break
            self._consume(TokenKind.PARENTHESIS_CLOSE, "')'")
        elif kind is TokenKind.EMPTY:
            node = ASTNode(NodeKind.EMPTY_EXPRESSION, self._next().text)
            node.add_child(self._parse_parenthesized())
        elif kind is TokenKind.EVAL:
            node = ASTNode(NodeKind.EVAL_EXPRESSION, self._next().text)
            node.add_child(self._parse_parenthesized())
        elif kind is TokenKind.EXIT:
            node = ASTNode(NodeKind.EXIT_EXPRESSION, self._next().text)
            if self._accept(TokenKind.PARENTHESIS_OPEN) is not None:
                if self._peek() is not TokenKind.PARENTHESIS_CLOSE:
                    node.add_child(self._parse_expression())
                self._consume(TokenKind.PARENTHESIS_CLOSE, "')'")
        elif kind is TokenKind.CLONE:
            node = ASTNode(NodeKind.CLONE_EXPRESSION, self._next().text)
            operand_mark = self._tokens.mark()
            node.add_child(self._parse_postfix_chain(self._parse_primary(), operand_mark))
        elif kind in (TokenKind.INCLUDE, TokenKind.INCLUDE_ONCE):
            node = ASTNode(NodeKind.INCLUDE_EXPRESSION, self._next().text.lower())
            node.add_child(self._parse_assignment_level())
        elif kind in (TokenKind.REQUIRE, TokenKind.REQUIRE_ONCE):
            node = ASTNode(NodeKind.REQUIRE_EXPRESSION, self._next().text.lower())
            node.add_child(self._parse_assignment_level())
        elif kind is TokenKind.PRINT:
            node = ASTNode(NodeKind.PRINT_EXPRESSION, self._next().text)
            node.add_child(self._parse_assignment_level())
        elif kind is TokenKind.THROW:
            node = ASTNode(NodeKind.THROW_EXPRESSION, self._next().text)
            node.add_child(self._parse_assignment_level())
        elif kind is TokenKind.YIELD:
            node = self._parse_yield()
        else:
            self._unexpected("expression")
        return self._span(node, mark)

    def _parse_name_expression(self) -> ASTNode:
        """Parse a constant, a function call or the class part of a static access."""
        mark = self._tokens.mark()
        name = self._parse_name()
        if "\\" not in name and name.lower() in ("true", "false", "null"):
            node = ASTNode(NodeKind.LITERAL, name)
        elif self._peek() is TokenKind.DOUBLE_COLON:
            return self._reference_to(name, NodeKind.CLASS_OR_INTERFACE_REFERENCE, None, mark)
        elif self._peek() is TokenKind.PARENTHESIS_OPEN:
            node = ASTNode(NodeKind.FUNCTION_POSTFIX, name)
            node.add_child(self._parse_arguments())
        else:
            node = ASTNode(NodeKind.CONSTANT, name)
        return self._span(node, mark)

    def _reference_to(self, name: str, kind: NodeKind, type_kind: TypeKind | None, mark: int) -> ReferenceNode:
        qualified_name = self._qualify(name)
        self._builder.get_or_create_placeholder(qualified_name, type_kind)
        reference = ReferenceNode(kind, qualified_name, builder=self._builder, type_kind=type_kind)
        self._span(reference, mark)
        return reference

    def _parse_variable(self) -> ASTNode:
        """Parse ``$name``, ``$$name`` or ``${expression}``."""
        mark = self._tokens.mark()
        if self._peek() is TokenKind.VARIABLE:
            return self._span(ASTNode(NodeKind.VARIABLE, self._next().text), mark)
        token = self._consume(TokenKind.DOLLAR, "variable")
        if self._peek() is TokenKind.CURLY_BRACE_OPEN:
            self._next()
            node = ASTNode(NodeKind.COMPOUND_VARIABLE, token.text)
            node.add_child(self._parse_expression())
            self._consume(TokenKind.CURLY_BRACE_CLOSE, "'}'")
        else:
            node = ASTNode(NodeKind.VARIABLE_VARIABLE, token.text)
            node.add_child(self._parse_variable())
        return self._span(node, mark)

    def _parse_array_elements(self, node: ASTNode, close: TokenKind) -> None:
        """Parse array or ``list()`` elements after the opening token, up to *close*."""
        while self._peek() is not close:
            if self._accept(TokenKind.COMMA) is not None:
                continue
            mark = self._tokens.mark()
            element = ASTNode(NodeKind.ARRAY_ELEMENT)
            if self._peek() is TokenKind.ELLIPSIS:
                element.image = self._next().text
            value = self._parse_expression()
            if element.image is None and self._accept(TokenKind.DOUBLE_ARROW) is not None:
                element.add_child(value)
                value = self._parse_expression()
            element.add_child(value)
            node.add_child(self._span(element, mark))
            if self._accept(TokenKind.COMMA) is None:
                break
        self._consume(close, repr(close.value))

    def _parse_yield(self) -> ASTNode:
        node = ASTNode(NodeKind.YIELD_EXPRESSION, self._next().text)
        if self._peek() is TokenKind.IDENTIFIER and self._current().text.lower() == "from":
            self._next()
            node.image = "yield from"
            node.add_child(self._parse_assignment_level())
        elif self._peek() not in _YIELD_TERMINATORS:
            node.add_child(self._parse_assignment_level())
            if self._accept(TokenKind.DOUBLE_ARROW) is not None:
                node.add_child(self._parse_assignment_level())
        return node

    def _parse_match(self) -> ASTNode:
        mark = self._tokens.mark()
        node = ASTNode(NodeKind.MATCH_EXPRESSION, self._next().text)
        node.add_child(self._parse_parenthesized())
        self._consume(TokenKind.CURLY_BRACE_OPEN, "'{'")
        while self._peek() is not TokenKind.CURLY_BRACE_CLOSE:
            entry_mark = self._tokens.mark()
            entry = ASTNode(NodeKind.MATCH_ENTRY)
            if self._peek() is TokenKind.DEFAULT:
                entry.image = self._next().text
            else:
                while True:
                    entry.add_child(self._parse_expression())
                    if self._accept(TokenKind.COMMA) is None or self._peek() is TokenKind.DOUBLE_ARROW:
                        break
            self._consume(TokenKind.DOUBLE_ARROW, "'=>'")
            entry.add_child(self._parse_expression())
            node.add_child(self._span(entry, entry_mark))
            if self._accept(TokenKind.COMMA) is None:
                break
        self._consume(TokenKind.CURLY_BRACE_CLOSE, "'}'")
        return self._span(node, mark)

    def _parse_allocation(self) -> ASTNode:
        """Parse ``new`` with a class name, a dynamic class expression or an anonymous class."""
        mark = self._tokens.mark()
        node = ASTNode(NodeKind.ALLOCATION_EXPRESSION, self._next().text)
        if self._peek() is TokenKind.ATTRIBUTE_START:
            self._skip_attributes()
        kind = self._peek()
        if kind is TokenKind.CLASS or kind in _CLASS_MODIFIERS:
            node.add_child(self._parse_anonymous_class())
            return self._span(node, mark)
        if kind in _SPECIAL_TYPES:
            node.add_child(self._parse_special_reference())
        elif kind in _NAME_STARTS:
            node.add_child(self._parse_class_reference(NodeKind.CLASS_REFERENCE, TypeKind.CLASS))
        elif kind is TokenKind.PARENTHESIS_OPEN:
            node.add_child(self._parse_parenthesized())
        else:
            node.add_child(self._parse_dynamic_class_name())
        if self._peek() is TokenKind.PARENTHESIS_OPEN:
            node.add_child(self._parse_arguments())
        return self._span(node, mark)

    def _parse_dynamic_class_name(self) -> ASTNode:
        """Parse ``$var``, ``$obj->prop`` or ``$var['key']`` as a class name; calls are not part of it."""
        mark = self._tokens.mark()
        node = self._parse_variable()
        while True:
            kind = self._peek()
            if kind in (TokenKind.OBJECT_OPERATOR, TokenKind.NULLSAFE_OBJECT_OPERATOR, TokenKind.DOUBLE_COLON):
                prefix = ASTNode(NodeKind.MEMBER_PRIMARY_PREFIX, self._next().text)
                prefix.add_child(node)
                member_mark = self._tokens.mark()
                if self._peek() is TokenKind.VARIABLE:
                    member = ASTNode(NodeKind.PROPERTY_POSTFIX, self._next().text)
                else:
                    member = ASTNode(NodeKind.PROPERTY_POSTFIX, self._consume_identifier("property name").text)
                prefix.add_child(self._span(member, member_mark))
            elif kind is TokenKind.SQUARED_BRACKET_OPEN:
                prefix = ASTNode(NodeKind.ARRAY_INDEX_EXPRESSION, self._next().text)
                prefix.add_child(node)
                prefix.add_child(self._parse_expression())
                self._consume(TokenKind.SQUARED_BRACKET_CLOSE, "']'")
            else:
                return node
            node = self._span(prefix, mark)

    def _parse_anonymous_class(self) -> ASTNode:
        """Parse ``class (...) extends ... { ... }`` after ``new``.

        Anonymous classes get their own type scope but are not registered
        with the builder.
        """
        self._tokens.push()
        modifiers = Modifier.NONE
        while self._peek() in _CLASS_MODIFIERS:
            modifiers |= _MODIFIERS[self._next().kind]
        token = self._consume(TokenKind.CLASS, "'class'")
        name = f"class@anonymous{self._file_name}:{token.start_line}:{token.start_column}"
        node = ASTNode(NodeKind.ANONYMOUS_CLASS, name)
        declared = DeclaredType(
            qualified_name=name,
            kind=TypeKind.CLASS,
            is_resolved=True,
            modifiers=modifiers,
            node=node,
            source_file=self._source_file,
            is_anonymous=True,
        )
        if self._peek() is TokenKind.PARENTHESIS_OPEN:
            node.add_child(self._parse_arguments())
        self._parse_type_header(declared, node)
        self._parse_type_body(declared, node)
        node.configure_span(self._tokens.pop())
        return node


def _with_default_visibility(modifiers: Modifier) -> Modifier:
    if modifiers & VISIBILITY_MODIFIERS:
        return modifiers
    return modifiers | Modifier.PUBLIC
