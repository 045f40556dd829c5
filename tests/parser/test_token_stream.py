# Copyright 2026 PHPDepend Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for sequential token access."""

from phpdepend.parser.lexer import TokenKind
from phpdepend.parser.token_stream import TokenStream

# ###############
# Test Helpers
# ###############


def _stream(source: str) -> TokenStream:
    return TokenStream.from_source(source, "test.php")


# ###############
# Lookahead and Consumption
# ###############


class TestTokenStream:
    def test_peek_does_not_consume(self) -> None:
        stream = _stream("<?php $a;")
        assert stream.peek() == TokenKind.OPEN_TAG
        assert stream.peek() == TokenKind.OPEN_TAG
        assert stream.next().kind == TokenKind.OPEN_TAG
        assert stream.peek() == TokenKind.VARIABLE

    def test_peek_next_looks_two_ahead(self) -> None:
        stream = _stream("<?php $a;")
        assert stream.peek_next() == TokenKind.VARIABLE

    def test_end_of_input_is_reported_as_eof(self) -> None:
        stream = _stream("<?php")
        stream.next()
        assert stream.peek() == TokenKind.EOF
        assert stream.peek_next() == TokenKind.EOF
        assert stream.next() is None
        assert stream.current() is None

    def test_eof_is_not_emitted_as_a_token(self) -> None:
        stream = _stream("<?php $a;")
        kinds = []
        while (token := stream.next()) is not None:
            kinds.append(token.kind)
        assert TokenKind.EOF not in kinds
        assert len(kinds) == 3

    def test_prev_returns_last_consumed(self) -> None:
        stream = _stream("<?php $a;")
        assert stream.prev() is None
        stream.next()
        variable = stream.next()
        assert stream.prev() is variable

    def test_current_peeks_the_token_object(self) -> None:
        stream = _stream("<?php $a;")
        stream.next()
        current = stream.current()
        assert current is not None
        assert current.text == "$a"
        assert stream.next() is current

    def test_current_at_end_is_none(self) -> None:
        assert _stream("").current() is None

    def test_file_name_is_kept(self) -> None:
        assert _stream("").file_name == "test.php"
