"""Token and value model for Prot.

Every lexical unit the tokenizer produces is a `Token` tagged with a
`TokenKind`. Literal tokens double as runtime values: the interpreter
evaluates expressions to literal tokens, so the coercion helpers that
decide how values combine live here alongside the token types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict
import math

from .errors import CoercionError


class TokenKind(Enum):
    # Single character tokens
    LEFT_PAREN = '('
    RIGHT_PAREN = ')'
    LEFT_BRACKET = '['
    RIGHT_BRACKET = ']'
    COMMA = ','
    PERIOD = '.'
    COLON = ':'

    # Single and double character tokens
    PLUS = '+'
    PLUS_EQUAL = '+='
    MINUS = '-'
    MINUS_EQUAL = '-='
    STAR = '*'
    STAR_EQUAL = '*='
    SLASH = '/'
    SLASH_EQUAL = '/='
    PERCENT = '%'
    PERCENT_EQUAL = '%='
    CARET = '^'
    CARET_EQUAL = '^='
    BANG = '!'
    BANG_EQUAL = '!='
    EQUAL = '='
    EQUAL_EQUAL = '=='
    GREATER = '>'
    GREATER_EQUAL = '>='
    LESS = '<'
    LESS_EQUAL = '<='

    # Literals
    IDENTIFIER = 'identifier'
    STRING = 'string'
    NUMBER = 'number'
    BOOL = 'bool'

    # Keywords
    FUNC = 'func'
    DEFINE = 'define'
    RETURN = 'return'
    CONTINUE = 'continue'
    BREAK = 'break'
    PRINT = 'print'
    AND = 'and'
    OR = 'or'
    NOT = 'not'
    IF = 'if'
    ELSE = 'else'
    FOR = 'for'
    WHILE = 'while'
    LOOP = 'loop'
    NONE = 'none'

    # Control tokens
    NEWLINE = 'newline'
    INDENT = 'indent'
    DEDENT = 'dedent'
    EOF = 'eof'


KEYWORDS: Dict[str, TokenKind] = {
    kind.value: kind for kind in (
        TokenKind.FUNC, TokenKind.DEFINE, TokenKind.RETURN,
        TokenKind.CONTINUE, TokenKind.BREAK, TokenKind.PRINT,
        TokenKind.AND, TokenKind.OR, TokenKind.NOT,
        TokenKind.IF, TokenKind.ELSE, TokenKind.FOR,
        TokenKind.WHILE, TokenKind.LOOP, TokenKind.NONE,
    )
}

# `true` and `false` are scanned as boolean literals rather than keywords
BOOL_WORDS: Dict[str, bool] = {'true': True, 'false': False}

LITERAL_KINDS = frozenset({
    TokenKind.NONE, TokenKind.BOOL, TokenKind.NUMBER,
    TokenKind.STRING, TokenKind.IDENTIFIER,
})


@dataclass(frozen=True)
class Token:
    """A classified lexical unit.

    `lexeme` is the surface text the token was scanned from; tokens the
    pipeline synthesizes (indentation markers, evaluation results,
    sentinels) carry an empty lexeme. `value` holds the literal payload
    for identifier, string, number and boolean tokens. `line` is kept for
    diagnostics only and does not take part in equality.
    """
    kind: TokenKind
    lexeme: str = ''
    value: Any = None
    line: int = field(default=0, compare=False)

    def __repr__(self) -> str:
        if self.value is not None:
            return f"{self.kind.name}({self.value!r})"
        return self.kind.name

    # Convenience constructors
    @staticmethod
    def of(kind: TokenKind) -> 'Token':
        return Token(kind)

    @staticmethod
    def number(value: float) -> 'Token':
        return Token(TokenKind.NUMBER, '', float(value))

    @staticmethod
    def string(value: str) -> 'Token':
        return Token(TokenKind.STRING, '', value)

    @staticmethod
    def boolean(value: bool) -> 'Token':
        return Token(TokenKind.BOOL, '', bool(value))

    @staticmethod
    def identifier(name: str) -> 'Token':
        return Token(TokenKind.IDENTIFIER, '', name)

    @staticmethod
    def none() -> 'Token':
        return Token(TokenKind.NONE)


def kind_name(token: Token) -> str:
    """Return a short human-readable name for a token's kind."""
    return token.kind.name.lower()


def to_number(token: Token) -> float:
    """Coerce a literal token to a number. Only numbers qualify."""
    if token.kind is TokenKind.NUMBER:
        return token.value
    raise CoercionError(f"expected number, got {kind_name(token)}")


def to_bool(token: Token) -> bool:
    """Coerce a literal token to a boolean.

    Identifiers are always false: there are no bindings to look them up
    in. Strings are true when non-empty and numbers when non-zero.
    """
    kind = token.kind
    if kind is TokenKind.IDENTIFIER:
        return False
    if kind is TokenKind.STRING:
        return len(token.value) > 0
    if kind is TokenKind.NUMBER:
        return token.value != 0.0
    if kind is TokenKind.BOOL:
        return token.value
    if kind is TokenKind.NONE:
        return False
    raise CoercionError(f"expected a value convertible to bool, got {kind_name(token)}")


def format_number(value: float) -> str:
    """Render a number the way `print` shows it.

    Values use the shortest digits that round-trip, always in fixed
    notation; integral values drop the fractional part and negative zero
    keeps its sign. Non-finite values render as inf, -inf and NaN.
    """
    if math.isnan(value):
        return 'NaN'
    if math.isinf(value):
        return 'inf' if value > 0 else '-inf'
    text = format(Decimal(repr(value)), 'f')
    if '.' in text:
        text = text.rstrip('0').rstrip('.')
    return text


def to_string(token: Token) -> str:
    """Coerce a literal token to its printable text."""
    kind = token.kind
    if kind is TokenKind.STRING:
        return token.value
    if kind is TokenKind.NUMBER:
        return format_number(token.value)
    if kind is TokenKind.BOOL:
        return 'true' if token.value else 'false'
    if kind is TokenKind.NONE:
        return 'none'
    raise CoercionError(f"cannot convert {kind_name(token)} to string")


def values_equal(a: Token, b: Token) -> bool:
    """Tag-matched equality: same kind and same payload."""
    return a.kind is b.kind and a.value == b.value


def cascade_equal(a: Token, b: Token) -> bool:
    """Legacy equality: numbers first, then booleans, then strings.

    The first coercion both operands survive decides the comparison, so
    mixed kinds can compare equal (`1 == "x"` holds because both are
    truthy).
    """
    for coerce in (to_number, to_bool, to_string):
        try:
            left = coerce(a)
            right = coerce(b)
        except CoercionError:
            continue
        return left == right
    return False
