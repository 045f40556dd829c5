# Copyright 2026 PHPDepend Contributors
# SPDX-License-Identifier: Apache-2.0

"""Sequential access to the tokens of a single PHP file."""

from __future__ import annotations

from phpdepend.parser.lexer import Token, TokenKind, tokenize

# ###############
# Public Interface
# ###############


class TokenStream:
    """Ordered token sequence with one token of lookahead.

    End of input is reported distinctly from any real token: ``peek()``
    returns :attr:`TokenKind.EOF` and ``next()`` returns ``None``.

    Attributes:
        file_name: Name of the file the tokens belong to, used in error reports.
    """

    def __init__(self, tokens: list[Token], file_name: str = "<string>") -> None:
        self._tokens = tokens
        self._index = 0
        self.file_name = file_name

    @classmethod
    def from_source(cls, source: str, file_name: str = "<string>") -> TokenStream:
        """Tokenize *source* and wrap the result in a stream."""
        return cls(tokenize(source), file_name)

    def peek(self) -> TokenKind:
        """Return the kind of the next token without consuming it."""
        if self._index < len(self._tokens):
            return self._tokens[self._index].kind
        return TokenKind.EOF

    def peek_next(self) -> TokenKind:
        """Return the kind of the token after the next one."""
        if self._index + 1 < len(self._tokens):
            return self._tokens[self._index + 1].kind
        return TokenKind.EOF

    def next(self) -> Token | None:
        """Consume and return the next token, or ``None`` at end of input."""
        if self._index >= len(self._tokens):
            return None
        token = self._tokens[self._index]
        self._index += 1
        return token

    def prev(self) -> Token | None:
        """Return the most recently consumed token."""
        if self._index == 0:
            return None
        return self._tokens[self._index - 1]

    def current(self) -> Token | None:
        """Return the next token without consuming it, or ``None`` at end of input."""
        if self._index < len(self._tokens):
            return self._tokens[self._index]
        return None

