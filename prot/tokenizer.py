"""Tokenizer for the Prot language.

Turns source text into a flat list of tokens. Indentation is significant:
at the start of each logical line the leading whitespace width is compared
against a stack of previously seen widths, and INDENT/DEDENT tokens are
synthesized when the block level changes. Inside parentheses or brackets
indentation and newlines are ignored.

Errors do not stop scanning. They are reported to the diagnostics
accumulator and set `contains_errors`; the caller must check the flag
before handing the tokens to the parser.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from .errors import Diagnostics
from .types import Token, TokenKind, KEYWORDS, BOOL_WORDS

TAB_WIDTH = 4

SINGLE_CHAR_TOKENS: Dict[str, TokenKind] = {
    ',': TokenKind.COMMA,
    '.': TokenKind.PERIOD,
    ':': TokenKind.COLON,
}

# first character -> (kind alone, kind when followed by '=')
EQUAL_SUFFIX_TOKENS: Dict[str, Tuple[TokenKind, TokenKind]] = {
    '+': (TokenKind.PLUS, TokenKind.PLUS_EQUAL),
    '-': (TokenKind.MINUS, TokenKind.MINUS_EQUAL),
    '*': (TokenKind.STAR, TokenKind.STAR_EQUAL),
    '/': (TokenKind.SLASH, TokenKind.SLASH_EQUAL),
    '%': (TokenKind.PERCENT, TokenKind.PERCENT_EQUAL),
    '^': (TokenKind.CARET, TokenKind.CARET_EQUAL),
    '!': (TokenKind.BANG, TokenKind.BANG_EQUAL),
    '=': (TokenKind.EQUAL, TokenKind.EQUAL_EQUAL),
    '>': (TokenKind.GREATER, TokenKind.GREATER_EQUAL),
    '<': (TokenKind.LESS, TokenKind.LESS_EQUAL),
}

ESCAPES: Dict[str, str] = {
    '"': '"',
    '\'': '\'',
    '\\': '\\',
    '{': '{',
    'n': '\n',
    'r': '\r',
    't': '\t',
}

QUOTES = ('"', '\'')


def is_digit(c: str) -> bool:
    return c.isascii() and c.isdigit()


class Tokenizer:
    def __init__(self, source: str, diagnostics: Optional[Diagnostics] = None):
        self.source = source
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        self.reset()

    def reset(self) -> None:
        self.tokens: List[Token] = []
        self.pos = 0
        self.line = 1
        self.column = 1
        self.token_line = 1
        self.at_line_start = True
        self.contains_errors = False
        self.indent_stack: List[int] = [0]
        self.indent_counter = 0
        self.paren_depth = 0
        self.bracket_depth = 0

    # Cursor helpers

    def reached_end(self) -> bool:
        return self.pos >= len(self.source)

    def peek(self) -> str:
        if self.reached_end():
            return ''
        return self.source[self.pos]

    def advance(self) -> str:
        c = self.peek()
        self.pos += 1
        self.column += 1
        self.at_line_start = False
        return c

    def match(self, expected: str) -> bool:
        if self.peek() == expected:
            self.advance()
            return True
        return False

    def add(self, kind: TokenKind, lexeme: str = '', value=None) -> None:
        self.tokens.append(Token(kind, lexeme, value, self.token_line))

    def error(self, message: str) -> None:
        self.diagnostics.report('lexing', message, self.token_line)
        self.contains_errors = True

    # Line structure

    def at_empty_line(self) -> bool:
        """True if the rest of the current line is blank or only a comment."""
        i = self.pos
        while i < len(self.source):
            c = self.source[i]
            if c == '\n' or c == '#':
                return True
            if not c.isspace():
                return False
            i += 1
        return True

    def nested(self) -> bool:
        return self.paren_depth > 0 or self.bracket_depth > 0

    def skip_whitespace(self) -> None:
        while not self.reached_end() and self.peek().isspace() and self.peek() != '\n':
            self.advance()

    def skip_line(self) -> None:
        while not self.reached_end() and self.peek() != '\n':
            self.advance()

    def resolve_indentation(self) -> None:
        width = 0
        while self.peek() in (' ', '\t'):
            width += 1 if self.advance() == ' ' else TAB_WIDTH
        top = self.indent_stack[-1]
        if width == top:
            self.indent_stack.append(width)
            return
        if width > top:
            self.indent_counter += 1
            self.add(TokenKind.INDENT)
        # Walk down the stack, closing every level above the new width.
        lowest: Optional[int] = None
        for level in reversed(self.indent_stack):
            if width == level:
                break
            if width < level and (lowest is None or level < lowest):
                if self.indent_counter == 0:
                    self.error("could not find line with matching indentation level")
                    return
                lowest = level
                self.indent_counter -= 1
                self.add(TokenKind.DEDENT)
        self.indent_stack.append(width)

    # Scanners

    def scan_identifier(self) -> None:
        start = self.pos
        while not self.reached_end() and (self.peek().isalnum() or self.peek() == '_'):
            self.advance()
        lexeme = self.source[start:self.pos]
        if lexeme in KEYWORDS:
            self.add(KEYWORDS[lexeme], lexeme)
        elif lexeme in BOOL_WORDS:
            self.add(TokenKind.BOOL, lexeme, BOOL_WORDS[lexeme])
        else:
            self.add(TokenKind.IDENTIFIER, lexeme, lexeme)

    def scan_number(self) -> None:
        start = self.pos
        has_period = False
        while not self.reached_end():
            c = self.peek()
            if c == '.' and not has_period:
                has_period = True
            elif not (is_digit(c) or c == '_'):
                break
            self.advance()
        lexeme = self.source[start:self.pos]
        try:
            value = float(lexeme)
        except ValueError:
            self.error(f"invalid number literal '{lexeme}'")
            return
        self.add(TokenKind.NUMBER, lexeme, value)

    def scan_string(self) -> None:
        start = self.pos
        self.advance()  # opening quote
        chars: List[str] = []
        while not self.reached_end() and self.peek() not in QUOTES:
            c = self.advance()
            if c == '\n':
                self.line += 1
                self.column = 1
            if c != '\\':
                chars.append(c)
                continue
            if self.reached_end():
                break
            escaped = self.advance()
            if escaped in ESCAPES:
                chars.append(ESCAPES[escaped])
            else:
                chars.append('\\' + escaped)
        if self.reached_end():
            self.error("found end of input while looking for end of string")
            return
        self.advance()  # closing quote
        self.add(TokenKind.STRING, self.source[start:self.pos], ''.join(chars))

    def scan_symbol(self) -> None:
        c = self.advance()
        if c == '(':
            self.paren_depth += 1
            self.add(TokenKind.LEFT_PAREN, c)
        elif c == ')':
            if self.paren_depth == 0:
                self.error("found closing parenthesis without matching opening parenthesis")
            else:
                self.paren_depth -= 1
            self.add(TokenKind.RIGHT_PAREN, c)
        elif c == '[':
            self.bracket_depth += 1
            self.add(TokenKind.LEFT_BRACKET, c)
        elif c == ']':
            if self.bracket_depth == 0:
                self.error("found closing bracket without matching opening bracket")
            else:
                self.bracket_depth -= 1
            self.add(TokenKind.RIGHT_BRACKET, c)
        elif c in SINGLE_CHAR_TOKENS:
            self.add(SINGLE_CHAR_TOKENS[c], c)
        elif c in EQUAL_SUFFIX_TOKENS:
            alone, with_equal = EQUAL_SUFFIX_TOKENS[c]
            if self.match('='):
                self.add(with_equal, c + '=')
            else:
                self.add(alone, c)
        elif c == '\n':
            if self.tokens and self.tokens[-1].kind is not TokenKind.NEWLINE and not self.nested():
                self.add(TokenKind.NEWLINE)
            self.line += 1
            self.column = 1
            self.at_line_start = True
        else:
            self.error(f"found unknown symbol {c!r}")

    def tokenize(self) -> List[Token]:
        self.reset()
        while not self.reached_end():
            self.token_line = self.line
            if self.at_line_start and not self.at_empty_line() and not self.nested():
                self.resolve_indentation()
            self.skip_whitespace()
            if self.reached_end():
                break
            self.token_line = self.line
            c = self.peek()
            if c.isalpha() or c == '_':
                self.scan_identifier()
            elif is_digit(c):
                self.scan_number()
            elif c in QUOTES:
                self.scan_string()
            elif c == '#':
                self.skip_line()
            else:
                self.scan_symbol()

        if self.tokens and self.tokens[-1].kind is not TokenKind.NEWLINE:
            self.add(TokenKind.NEWLINE)
        for _ in range(self.indent_counter):
            self.add(TokenKind.DEDENT)
        self.indent_counter = 0
        return list(self.tokens)


def tokenize(source: str, diagnostics: Optional[Diagnostics] = None) -> List[Token]:
    """Tokenize `source`, reporting problems to `diagnostics`."""
    return Tokenizer(source, diagnostics).tokenize()
