# Copyright 2026 PHPDepend Contributors
# SPDX-License-Identifier: Apache-2.0

"""Lexical scanner for PHP source files.

Converts raw source text into a sequence of tokens for subsequent parsing.
Comments are kept as tokens because the parser attaches doc comments to
declarations and records them in token spans.
"""

import enum
import re
from dataclasses import dataclass

# ###############
# Public Interface
# ###############


class TokenKind(enum.Enum):
    """All token kinds produced by the PHP lexer."""

    # Keywords
    ABSTRACT = "abstract"
    AND = "and"
    ARRAY = "array"
    AS = "as"
    BREAK = "break"
    CALLABLE = "callable"
    CASE = "case"
    CATCH = "catch"
    CLASS = "class"
    CLONE = "clone"
    CONST = "const"
    CONTINUE = "continue"
    DECLARE = "declare"
    DEFAULT = "default"
    DO = "do"
    ECHO = "echo"
    ELSE = "else"
    ELSEIF = "elseif"
    EMPTY = "empty"
    ENDDECLARE = "enddeclare"
    ENDFOR = "endfor"
    ENDFOREACH = "endforeach"
    ENDIF = "endif"
    ENDSWITCH = "endswitch"
    ENDWHILE = "endwhile"
    EVAL = "eval"
    EXIT = "exit"
    EXTENDS = "extends"
    FINAL = "final"
    FINALLY = "finally"
    FN = "fn"
    FOR = "for"
    FOREACH = "foreach"
    FUNCTION = "function"
    GLOBAL = "global"
    GOTO = "goto"
    IF = "if"
    IMPLEMENTS = "implements"
    INCLUDE = "include"
    INCLUDE_ONCE = "include_once"
    INSTANCEOF = "instanceof"
    INSTEADOF = "insteadof"
    INTERFACE = "interface"
    ISSET = "isset"
    LIST = "list"
    MATCH = "match"
    NAMESPACE = "namespace"
    NEW = "new"
    OR = "or"
    PARENT = "parent"
    PRINT = "print"
    PRIVATE = "private"
    PROTECTED = "protected"
    PUBLIC = "public"
    READONLY = "readonly"
    REQUIRE = "require"
    REQUIRE_ONCE = "require_once"
    RETURN = "return"
    SELF = "self"
    STATIC = "static"
    SWITCH = "switch"
    THROW = "throw"
    TRAIT = "trait"
    TRY = "try"
    UNSET = "unset"
    USE = "use"
    VAR = "var"
    WHILE = "while"
    XOR = "xor"
    YIELD = "yield"

    # Assignment operators
    EQUAL = "="
    PLUS_EQUAL = "+="
    MINUS_EQUAL = "-="
    MUL_EQUAL = "*="
    DIV_EQUAL = "/="
    CONCAT_EQUAL = ".="
    MOD_EQUAL = "%="
    AND_EQUAL = "&="
    OR_EQUAL = "|="
    XOR_EQUAL = "^="
    SHIFT_LEFT_EQUAL = "<<="
    SHIFT_RIGHT_EQUAL = ">>="
    POW_EQUAL = "**="
    COALESCE_EQUAL = "??="

    # Other operators and punctuators
    INC = "++"
    DEC = "--"
    OBJECT_OPERATOR = "->"
    NULLSAFE_OBJECT_OPERATOR = "?->"
    DOUBLE_ARROW = "=>"
    DOUBLE_COLON = "::"
    ELLIPSIS = "..."
    IS_IDENTICAL = "==="
    IS_NOT_IDENTICAL = "!=="
    IS_EQUAL = "=="
    IS_NOT_EQUAL = "!="
    SPACESHIP = "<=>"
    IS_SMALLER_OR_EQUAL = "<="
    IS_GREATER_OR_EQUAL = ">="
    BOOLEAN_AND = "&&"
    BOOLEAN_OR = "||"
    COALESCE = "??"
    SHIFT_LEFT = "<<"
    SHIFT_RIGHT = ">>"
    POW = "**"
    PLUS = "+"
    MINUS = "-"
    MUL = "*"
    DIV = "/"
    MOD = "%"
    LESS = "<"
    GREATER = ">"
    EXCLAMATION = "!"
    CONCAT = "."
    COMMA = ","
    SEMICOLON = ";"
    COLON = ":"
    QUESTION_MARK = "?"
    PARENTHESIS_OPEN = "("
    PARENTHESIS_CLOSE = ")"
    SQUARED_BRACKET_OPEN = "["
    SQUARED_BRACKET_CLOSE = "]"
    CURLY_BRACE_OPEN = "{"
    CURLY_BRACE_CLOSE = "}"
    BITWISE_AND = "&"
    BITWISE_OR = "|"
    BITWISE_XOR = "^"
    BITWISE_NOT = "~"
    AT = "@"
    DOLLAR = "$"
    BACKSLASH = "\\"
    ATTRIBUTE_START = "#["

    # Literals and names
    IDENTIFIER = "IDENTIFIER"
    VARIABLE = "VARIABLE"
    LNUMBER = "LNUMBER"
    DNUMBER = "DNUMBER"
    CONSTANT_STRING = "CONSTANT_STRING"
    HEREDOC = "HEREDOC"
    BACKTICK_STRING = "BACKTICK_STRING"
    CAST = "CAST"

    # Comments
    COMMENT = "COMMENT"
    DOC_COMMENT = "DOC_COMMENT"

    # Embedding
    INLINE_HTML = "INLINE_HTML"
    OPEN_TAG = "OPEN_TAG"
    OPEN_TAG_WITH_ECHO = "OPEN_TAG_WITH_ECHO"
    CLOSE_TAG = "CLOSE_TAG"

    # End of input sentinel. Never emitted by the lexer, only reported by
    # TokenStream.peek() once all tokens are consumed.
    EOF = "EOF"


@dataclass(frozen=True)
class Token:
    """A lexical token with its source span.

    Attributes:
        kind: The kind of token.
        text: The raw source text of the token.
        start_line: 1-based line number where the token starts.
        end_line: 1-based line number where the token ends.
        start_column: 1-based column of the first character.
        end_column: 1-based column of the last character (inclusive).
    """

    kind: TokenKind
    text: str
    start_line: int
    end_line: int
    start_column: int
    end_column: int


class LexerError(Exception):
    """Raised when the scanner encounters an invalid character or unterminated literal.

    Attributes:
        line: 1-based line number of the error.
        column: 1-based column number of the error.
    """

    def __init__(self, message: str, line: int, column: int) -> None:
        super().__init__(f"Line {line}, column {column}: {message}")
        self.line = line
        self.column = column


KEYWORDS: dict[str, TokenKind] = {
    kind.value: kind for kind in TokenKind if kind.value.islower() and kind.value.replace("_", "").isalpha()
}
KEYWORDS["die"] = TokenKind.EXIT

COMMENT_KINDS: frozenset[TokenKind] = frozenset({TokenKind.COMMENT, TokenKind.DOC_COMMENT})


def tokenize(source: str) -> list[Token]:
    """Tokenize PHP source text into a sequence of tokens.

    Whitespace inside PHP code is dropped, comments and inline HTML are kept.
    No EOF token is appended; the token stream reports end of input itself.

    Args:
        source: The full text of a PHP file.

    Returns:
        A list of Token objects in source order.

    Raises:
        LexerError: On unexpected characters, unterminated string literals,
            heredocs, or block comments.
    """
    return _Lexer(source).tokenize()


# ################
# Implementation
# ################

# Operators ordered longest first so that a simple prefix scan yields the
# longest match.
_OPERATORS: list[tuple[str, TokenKind]] = sorted(
    (
        (kind.value, kind)
        for kind in TokenKind
        if kind.value
        and not kind.value[0].isalnum()
        and kind.value[0] != "_"
        and kind not in (TokenKind.ATTRIBUTE_START,)
    ),
    key=lambda item: -len(item[0]),
)

_OPEN_TAG_RE = re.compile(r"<\?php(?=\s|$)|<\?=", re.IGNORECASE)
_NAME_RE = re.compile(r"[A-Za-z_\x80-\uffff][A-Za-z0-9_\x80-\uffff]*")
_WHITESPACE_RE = re.compile(r"[ \t\r\n\f\v]+")
_NUMBER_RE = re.compile(
    r"0[xX][0-9a-fA-F_]+"
    r"|0[bB][01_]+"
    r"|0[oO][0-7_]+"
    r"|(?P<float>(?:[0-9][0-9_]*)?\.[0-9][0-9_]*(?:[eE][+-]?[0-9]+)?"
    r"|[0-9][0-9_]*\.(?![.])(?:[0-9_]*)(?:[eE][+-]?[0-9]+)?"
    r"|[0-9][0-9_]*[eE][+-]?[0-9]+)"
    r"|[0-9][0-9_]*"
)
_CAST_RE = re.compile(
    r"\([ \t]*(?:int|integer|bool|boolean|float|double|real|string|binary|array|object|unset)[ \t]*\)",
    re.IGNORECASE,
)
_HEREDOC_START_RE = re.compile(r"<<<[ \t]*(?P<quote>[\"']?)(?P<label>[A-Za-z_][A-Za-z0-9_]*)(?P=quote)\r?\n")


class _Lexer:
    """Internal scanner state machine."""

    def __init__(self, source: str) -> None:
        self._source = source
        self._pos = 0
        self._line = 1
        self._column = 1
        self._tokens: list[Token] = []

    def tokenize(self) -> list[Token]:
        """Run the scanner and return all tokens."""
        self._scan_inline_html()
        while self._pos < len(self._source):
            self._skip_whitespace()
            if self._pos >= len(self._source):
                break
            self._scan_token()
        return self._tokens

    # ------------------------------------------------------------------
    # Low-level character access helpers
    # ------------------------------------------------------------------

    def _current(self) -> str:
        """Return the character at the current position, or '' at end of input."""
        if self._pos < len(self._source):
            return self._source[self._pos]
        return ""

    def _peek(self) -> str:
        """Return the character one position ahead, or '' at end of input."""
        if self._pos + 1 < len(self._source):
            return self._source[self._pos + 1]
        return ""

    def _startswith(self, text: str) -> bool:
        return self._source.startswith(text, self._pos)

    def _advance_over(self, text: str) -> None:
        """Move the position past *text*, updating line and column tracking."""
        self._pos += len(text)
        newlines = text.count("\n")
        if newlines:
            self._line += newlines
            self._column = len(text) - text.rfind("\n")
        else:
            self._column += len(text)

    def _emit(self, kind: TokenKind, text: str) -> None:
        """Append a token for *text* starting at the current position and consume it."""
        start_line = self._line
        start_column = self._column
        self._advance_over(text[:-1])
        # The span ends at the position of the token's last character.
        end_line = self._line
        end_column = self._column
        self._advance_over(text[-1])
        self._tokens.append(Token(kind, text, start_line, end_line, start_column, end_column))

    # ------------------------------------------------------------------
    # Inline HTML and open/close tags
    # ------------------------------------------------------------------

    def _scan_inline_html(self) -> None:
        """Scan text up to and including the next PHP open tag."""
        match = _OPEN_TAG_RE.search(self._source, self._pos)
        end = match.start() if match else len(self._source)
        if end > self._pos:
            self._emit(TokenKind.INLINE_HTML, self._source[self._pos : end])
        if match:
            kind = TokenKind.OPEN_TAG_WITH_ECHO if match.group(0) == "<?=" else TokenKind.OPEN_TAG
            self._emit(kind, match.group(0))

    def _scan_close_tag(self) -> None:
        text = "?>"
        if self._source.startswith("\r\n", self._pos + 2):
            text += "\r\n"
        elif self._source.startswith("\n", self._pos + 2):
            text += "\n"
        self._emit(TokenKind.CLOSE_TAG, text)
        self._scan_inline_html()

    # ------------------------------------------------------------------
    # Whitespace and comments
    # ------------------------------------------------------------------

    def _skip_whitespace(self) -> None:
        match = _WHITESPACE_RE.match(self._source, self._pos)
        if match:
            self._advance_over(match.group(0))

    def _scan_line_comment(self) -> None:
        """Scan from '//' or '#' up to the end of line or a closing tag."""
        end = self._pos
        while end < len(self._source) and self._source[end] != "\n":
            if self._source.startswith("?>", end):
                break
            end += 1
        self._emit(TokenKind.COMMENT, self._source[self._pos : end])

    def _scan_block_comment(self) -> None:
        """Scan a '/* ... */' or '/** ... */' comment."""
        end = self._source.find("*/", self._pos + 2)
        if end == -1:
            raise LexerError("Unterminated block comment", self._line, self._column)
        text = self._source[self._pos : end + 2]
        kind = TokenKind.DOC_COMMENT if text.startswith("/**") and text != "/**/" else TokenKind.COMMENT
        self._emit(kind, text)

    # ------------------------------------------------------------------
    # Token scanning dispatcher
    # ------------------------------------------------------------------

    def _scan_token(self) -> None:
        """Dispatch to the appropriate handler based on the current character."""
        ch = self._current()

        if self._startswith("?>"):
            self._scan_close_tag()
        elif self._startswith("#["):
            self._emit(TokenKind.ATTRIBUTE_START, "#[")
        elif ch == "#" or self._startswith("//"):
            self._scan_line_comment()
        elif self._startswith("/*"):
            self._scan_block_comment()
        elif ch == "$" and _NAME_RE.match(self._source, self._pos + 1):
            name = _NAME_RE.match(self._source, self._pos + 1)
            self._emit(TokenKind.VARIABLE, "$" + name.group(0))
        elif ch == "'":
            self._scan_quoted(TokenKind.CONSTANT_STRING, "'")
        elif ch == '"':
            self._scan_quoted(TokenKind.CONSTANT_STRING, '"')
        elif ch == "`":
            self._scan_quoted(TokenKind.BACKTICK_STRING, "`")
        elif self._startswith("<<<") and _HEREDOC_START_RE.match(self._source, self._pos):
            self._scan_heredoc()
        elif ch == "(" and _CAST_RE.match(self._source, self._pos):
            self._emit(TokenKind.CAST, _CAST_RE.match(self._source, self._pos).group(0))
        elif ch.isdigit() or (ch == "." and self._peek().isdigit()):
            self._scan_number()
        elif _NAME_RE.match(ch):
            self._scan_identifier_or_keyword()
        else:
            self._scan_operator()

    # ------------------------------------------------------------------
    # Literal scanners
    # ------------------------------------------------------------------

    def _scan_quoted(self, kind: TokenKind, quote: str) -> None:
        """Scan a quoted literal, honouring backslash escapes. Interpolation is not split."""
        end = self._pos + 1
        while end < len(self._source):
            ch = self._source[end]
            if ch == "\\":
                end += 2
                continue
            if ch == quote:
                self._emit(kind, self._source[self._pos : end + 1])
                return
            end += 1
        raise LexerError("Unterminated string literal", self._line, self._column)

    def _scan_heredoc(self) -> None:
        """Scan a heredoc or nowdoc including its closing label."""
        start = _HEREDOC_START_RE.match(self._source, self._pos)
        label = start.group("label")
        closing = re.compile(r"^[ \t]*" + re.escape(label) + r"(?![A-Za-z0-9_\x80-\uffff])", re.MULTILINE)
        match = closing.search(self._source, start.end())
        if match is None:
            raise LexerError(f"Unterminated heredoc '{label}'", self._line, self._column)
        self._emit(TokenKind.HEREDOC, self._source[self._pos : match.end()])

    def _scan_number(self) -> None:
        match = _NUMBER_RE.match(self._source, self._pos)
        kind = TokenKind.DNUMBER if match.group("float") else TokenKind.LNUMBER
        self._emit(kind, match.group(0))

    def _scan_identifier_or_keyword(self) -> None:
        """Scan an identifier and map it to a keyword token kind if applicable."""
        value = _NAME_RE.match(self._source, self._pos).group(0)
        kind = KEYWORDS.get(value.lower(), TokenKind.IDENTIFIER)
        self._emit(kind, value)

    def _scan_operator(self) -> None:
        for text, kind in _OPERATORS:
            if self._startswith(text):
                self._emit(kind, text)
                return
        raise LexerError(f"Unexpected character: {self._current()!r}", self._line, self._column)
