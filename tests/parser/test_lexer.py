# Copyright 2026 PHPDepend Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the PHP lexical scanner."""

import pytest

from phpdepend.parser.lexer import LexerError, Token, TokenKind, tokenize

# ###############
# Test Helpers
# ###############


def _php(source: str) -> list[Token]:
    """Tokenize *source* after an open tag and drop the tag itself."""
    tokens = tokenize("<?php " + source)
    assert tokens[0].kind == TokenKind.OPEN_TAG
    return tokens[1:]


def _kinds(source: str) -> list[TokenKind]:
    return [tok.kind for tok in _php(source)]


def _texts(source: str) -> list[str]:
    return [tok.text for tok in _php(source)]


# ###############
# Inline HTML and Tags
# ###############


class TestTags:
    def test_empty_source_produces_no_tokens(self) -> None:
        assert tokenize("") == []

    def test_plain_html_is_one_inline_html_token(self) -> None:
        tokens = tokenize("<html>\n</html>")
        assert [t.kind for t in tokens] == [TokenKind.INLINE_HTML]
        assert tokens[0].text == "<html>\n</html>"

    def test_open_tag_after_html(self) -> None:
        tokens = tokenize("<p>\n<?php echo 1;")
        assert tokens[0].kind == TokenKind.INLINE_HTML
        assert tokens[1].kind == TokenKind.OPEN_TAG
        assert tokens[1].start_line == 2

    def test_open_tag_is_case_insensitive(self) -> None:
        assert tokenize("<?PHP ")[0].kind == TokenKind.OPEN_TAG

    def test_open_tag_with_echo(self) -> None:
        tokens = tokenize("<?= $x ?>")
        assert tokens[0].kind == TokenKind.OPEN_TAG_WITH_ECHO
        assert tokens[1].kind == TokenKind.VARIABLE
        assert tokens[2].kind == TokenKind.CLOSE_TAG

    def test_close_tag_swallows_single_newline(self) -> None:
        tokens = tokenize("<?php ?>\nrest")
        assert tokens[1].text == "?>\n"
        assert tokens[2].kind == TokenKind.INLINE_HTML
        assert tokens[2].text == "rest"

    def test_html_between_php_blocks(self) -> None:
        kinds = [t.kind for t in tokenize("<?php $a; ?><b><?php $c;")]
        assert kinds == [
            TokenKind.OPEN_TAG,
            TokenKind.VARIABLE,
            TokenKind.SEMICOLON,
            TokenKind.CLOSE_TAG,
            TokenKind.INLINE_HTML,
            TokenKind.OPEN_TAG,
            TokenKind.VARIABLE,
            TokenKind.SEMICOLON,
        ]


# ###############
# Keywords and Names
# ###############


class TestKeywords:
    @pytest.mark.parametrize(
        ("source", "expected"),
        [
            ("class", TokenKind.CLASS),
            ("interface", TokenKind.INTERFACE),
            ("trait", TokenKind.TRAIT),
            ("function", TokenKind.FUNCTION),
            ("namespace", TokenKind.NAMESPACE),
            ("use", TokenKind.USE),
            ("extends", TokenKind.EXTENDS),
            ("implements", TokenKind.IMPLEMENTS),
            ("self", TokenKind.SELF),
            ("parent", TokenKind.PARENT),
            ("static", TokenKind.STATIC),
            ("include_once", TokenKind.INCLUDE_ONCE),
            ("die", TokenKind.EXIT),
            ("fn", TokenKind.FN),
            ("match", TokenKind.MATCH),
        ],
    )
    def test_keyword(self, source: str, expected: TokenKind) -> None:
        assert _kinds(source) == [expected]

    def test_keywords_are_case_insensitive(self) -> None:
        assert _kinds("CLASS Function") == [TokenKind.CLASS, TokenKind.FUNCTION]

    def test_keyword_keeps_original_spelling(self) -> None:
        assert _texts("Class") == ["Class"]

    def test_enum_is_a_plain_identifier(self) -> None:
        assert _kinds("enum") == [TokenKind.IDENTIFIER]

    def test_literal_names_are_identifiers(self) -> None:
        assert _kinds("true null") == [TokenKind.IDENTIFIER, TokenKind.IDENTIFIER]

    def test_qualified_name_is_split_on_backslash(self) -> None:
        assert _kinds("\\Foo\\Bar") == [
            TokenKind.BACKSLASH,
            TokenKind.IDENTIFIER,
            TokenKind.BACKSLASH,
            TokenKind.IDENTIFIER,
        ]

    def test_variable(self) -> None:
        tokens = _php("$value")
        assert tokens[0].kind == TokenKind.VARIABLE
        assert tokens[0].text == "$value"

    def test_lone_dollar(self) -> None:
        assert _kinds("$$name") == [TokenKind.DOLLAR, TokenKind.VARIABLE]


# ###############
# Literals
# ###############


class TestLiterals:
    @pytest.mark.parametrize(
        ("source", "expected"),
        [
            ("42", TokenKind.LNUMBER),
            ("0x1F", TokenKind.LNUMBER),
            ("0b101", TokenKind.LNUMBER),
            ("1_000", TokenKind.LNUMBER),
            ("1.5", TokenKind.DNUMBER),
            (".5", TokenKind.DNUMBER),
            ("1e3", TokenKind.DNUMBER),
        ],
    )
    def test_numbers(self, source: str, expected: TokenKind) -> None:
        assert _kinds(source) == [expected]

    def test_range_dots_do_not_form_a_float(self) -> None:
        assert _kinds("1...") == [TokenKind.LNUMBER, TokenKind.ELLIPSIS]

    def test_single_quoted_string_with_escape(self) -> None:
        assert _texts(r"'it\'s'") == [r"'it\'s'"]

    def test_double_quoted_string_is_one_token(self) -> None:
        tokens = _php('"a {$b} c"')
        assert [t.kind for t in tokens] == [TokenKind.CONSTANT_STRING]

    def test_backtick_string(self) -> None:
        assert _kinds("`ls`") == [TokenKind.BACKTICK_STRING]

    def test_heredoc_spans_lines(self) -> None:
        tokens = _php("<<<EOT\nline one\nline two\nEOT;\n")
        assert tokens[0].kind == TokenKind.HEREDOC
        assert tokens[0].end_line == 4
        assert tokens[1].kind == TokenKind.SEMICOLON

    def test_nowdoc(self) -> None:
        assert _kinds("<<<'EOT'\nraw\nEOT;")[0] == TokenKind.HEREDOC

    @pytest.mark.parametrize("source", ["(int)", "( string )", "(BOOL)", "(array)"])
    def test_casts(self, source: str) -> None:
        assert _kinds(source) == [TokenKind.CAST]

    def test_parenthesized_identifier_is_not_a_cast(self) -> None:
        assert _kinds("(foo)") == [TokenKind.PARENTHESIS_OPEN, TokenKind.IDENTIFIER, TokenKind.PARENTHESIS_CLOSE]


# ###############
# Operators
# ###############


class TestOperators:
    @pytest.mark.parametrize(
        ("source", "expected"),
        [
            ("===", TokenKind.IS_IDENTICAL),
            ("!==", TokenKind.IS_NOT_IDENTICAL),
            ("<=>", TokenKind.SPACESHIP),
            ("??=", TokenKind.COALESCE_EQUAL),
            ("?->", TokenKind.NULLSAFE_OBJECT_OPERATOR),
            ("**=", TokenKind.POW_EQUAL),
            ("<<=", TokenKind.SHIFT_LEFT_EQUAL),
            ("...", TokenKind.ELLIPSIS),
            ("::", TokenKind.DOUBLE_COLON),
            ("=>", TokenKind.DOUBLE_ARROW),
            ("->", TokenKind.OBJECT_OPERATOR),
        ],
    )
    def test_longest_match(self, source: str, expected: TokenKind) -> None:
        assert _kinds(source) == [expected]

    def test_attribute_start(self) -> None:
        assert _kinds("#[Attr]")[0] == TokenKind.ATTRIBUTE_START

    def test_unexpected_character_raises(self) -> None:
        with pytest.raises(LexerError) as exc_info:
            _php("\x01")
        assert exc_info.value.line == 1


# ###############
# Comments
# ###############


class TestComments:
    def test_line_comments(self) -> None:
        assert _kinds("// one\n# two\n$a") == [TokenKind.COMMENT, TokenKind.COMMENT, TokenKind.VARIABLE]

    def test_line_comment_stops_at_close_tag(self) -> None:
        assert _kinds("// c ?>x") == [TokenKind.COMMENT, TokenKind.CLOSE_TAG, TokenKind.INLINE_HTML]

    def test_doc_comment(self) -> None:
        assert _kinds("/** doc */") == [TokenKind.DOC_COMMENT]

    def test_empty_block_comment_is_not_a_doc_comment(self) -> None:
        assert _kinds("/**/") == [TokenKind.COMMENT]

    def test_unterminated_block_comment_raises(self) -> None:
        with pytest.raises(LexerError, match="Unterminated block comment"):
            _php("/* never closed")

    def test_unterminated_string_raises(self) -> None:
        with pytest.raises(LexerError, match="Unterminated string"):
            _php("'open")


# ###############
# Source Locations
# ###############


class TestLocations:
    def test_columns_are_one_based_and_inclusive(self) -> None:
        tokens = tokenize("<?php $ab;")
        variable = tokens[1]
        assert (variable.start_column, variable.end_column) == (7, 9)

    def test_line_numbers_advance(self) -> None:
        tokens = _php("\n\n$x")
        assert tokens[0].start_line == 3
        assert tokens[0].start_column == 1

    def test_multiline_comment_end_position(self) -> None:
        tokens = _php("/*\n ab */ $x")
        comment, variable = tokens
        assert comment.start_line == 1
        assert comment.end_line == 2
        assert comment.end_column == 6
        assert variable.start_column == 8
