# Copyright 2026 PHPDepend Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tokenizer and token plumbing for PHP source."""

from phpdepend.parser.lexer import LexerError, Token, TokenKind, tokenize
from phpdepend.parser.token_stack import TokenStack
from phpdepend.parser.token_stream import TokenStream

__all__ = [
    "tokenize",
    "Token",
    "TokenKind",
    "LexerError",
    "TokenStack",
    "TokenStream",
]
