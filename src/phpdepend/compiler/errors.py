# Copyright 2026 PHPDepend Contributors
# SPDX-License-Identifier: Apache-2.0

"""Exceptions raised while parsing a file or registering its declarations.

Every error is fatal to the file being parsed and is surfaced to the caller
of the parser; types already registered from other files stay valid.
"""

from phpdepend.parser.lexer import Token

# ###############
# Public Interface
# ###############


class ParserError(Exception):
    """Base class for all parse failures.

    Attributes:
        file_name: Name of the file being parsed.
        line: 1-based line of the failure, 0 when unknown.
        column: 1-based column of the failure, 0 when unknown.
    """

    def __init__(self, message: str, file_name: str, line: int = 0, column: int = 0) -> None:
        location = f"{file_name}, line {line}, column {column}" if line else file_name
        super().__init__(f"{location}: {message}")
        self.message = message
        self.file_name = file_name
        self.line = line
        self.column = column


class UnexpectedTokenError(ParserError):
    """The current token cannot appear at this point.

    Attributes:
        token: The offending token.
        expected: Description of what the parser was looking for.
    """

    def __init__(self, token: Token, file_name: str, expected: str | None = None) -> None:
        message = f"Unexpected token: {token.text!r} ({token.kind.name})"
        if expected:
            message += f", expected {expected}"
        super().__init__(message, file_name, token.start_line, token.start_column)
        self.token = token
        self.expected = expected


class TokenStreamEndError(ParserError):
    """Input ran out while a construct was still open."""

    def __init__(self, file_name: str, last_token: Token | None = None) -> None:
        line = last_token.end_line if last_token is not None else 0
        column = last_token.end_column if last_token is not None else 0
        super().__init__("Unexpected end of token stream", file_name, line, column)
        self.last_token = last_token


class UnclosedBodyError(ParserError):
    """A brace or parenthesis was still open when input ran out."""

    def __init__(self, file_name: str) -> None:
        super().__init__("Unclosed body: the file ends before all braces and parentheses are closed", file_name)


class InvalidStateError(ParserError):
    """A context-sensitive keyword or construct was used outside the scope it requires."""

    def __init__(self, message: str, file_name: str, line: int = 0, column: int = 0) -> None:
        super().__init__(message, file_name, line, column)


class RedeclarationError(Exception):
    """A declaration was completed twice for the same qualified name.

    Attributes:
        qualified_name: The conflicting name.
        kind: ``"type"`` or ``"function"``.
    """

    def __init__(self, qualified_name: str, kind: str = "type") -> None:
        super().__init__(f"Cannot redeclare {kind} {qualified_name!r}")
        self.qualified_name = qualified_name
        self.kind = kind
