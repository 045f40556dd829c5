# Copyright 2026 PHPDepend Contributors
# SPDX-License-Identifier: Apache-2.0

"""Nested capture scopes over the tokens consumed by the parser.

A single flat buffer holds every token added while at least one scope is
open. Each scope only remembers the buffer offset at which it was opened, so
adding a token is O(1) regardless of nesting depth and popping a scope slices
out exactly the tokens consumed since its push.
"""

from phpdepend.parser.lexer import Token

# ###############
# Public Interface
# ###############


class TokenStack:
    """Stack of token capture scopes.

    Scopes must be popped in LIFO order. Tokens added while no scope is open
    are dropped.
    """

    def __init__(self) -> None:
        self._buffer: list[Token] = []
        self._offsets: list[int] = []

    @property
    def depth(self) -> int:
        """Number of currently open scopes."""
        return len(self._offsets)

    def push(self) -> None:
        """Open a new capture scope."""
        self._offsets.append(len(self._buffer))

    def add(self, token: Token) -> Token:
        """Record *token* in every open scope and return it unchanged."""
        if self._offsets:
            self._buffer.append(token)
        return token

    def pop(self) -> list[Token]:
        """Close the innermost scope and return the tokens added since its push.

        The tokens stay visible to all scopes that are still open.

        Raises:
            IndexError: If no scope is open.
        """
        offset = self._offsets.pop()
        tokens = self._buffer[offset:]
        if not self._offsets:
            self._buffer.clear()
        return tokens

    def mark(self) -> int:
        """Return a position marker for :meth:`since`."""
        return len(self._buffer)

    def since(self, mark: int) -> list[Token]:
        """Return the tokens added after *mark* without closing any scope."""
        return self._buffer[mark:]
