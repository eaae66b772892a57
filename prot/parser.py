"""Parser for the Prot language.

A recursive-descent parser over the token list produced by
`prot.tokenizer`. Each precedence level is one method, from loosest to
tightest binding:

    equality    ==  !=
    comparison  >  >=  <  <=
    term        +  -
    factor      *  /  %
    exponent    ^
    unary       !  not  -      (prefix, right-associative)
    primary     literals, ( ... ), [ ... ], INDENT ... DEDENT

The parser never raises on malformed input. A missing closer is reported
through `expect` and parsing carries on; a token that starts no
expression becomes a literal EOF sentinel. Callers must check
`contains_errors` before evaluating the result.
"""

from __future__ import annotations

from typing import List, Optional

from .ast import Expr, Unary, Binary, Literal, Grouping, Statement, Print, ExprStmt
from .errors import Diagnostics
from .types import Token, TokenKind, LITERAL_KINDS

GROUP_CLOSERS = {
    TokenKind.LEFT_PAREN: TokenKind.RIGHT_PAREN,
    TokenKind.LEFT_BRACKET: TokenKind.RIGHT_BRACKET,
    TokenKind.INDENT: TokenKind.DEDENT,
}

UNARY_OPERATORS = (TokenKind.BANG, TokenKind.NOT, TokenKind.MINUS)
EXPONENT_OPERATORS = (TokenKind.CARET,)
FACTOR_OPERATORS = (TokenKind.STAR, TokenKind.SLASH, TokenKind.PERCENT)
TERM_OPERATORS = (TokenKind.PLUS, TokenKind.MINUS)
COMPARISON_OPERATORS = (
    TokenKind.GREATER, TokenKind.GREATER_EQUAL,
    TokenKind.LESS, TokenKind.LESS_EQUAL,
)
EQUALITY_OPERATORS = (TokenKind.EQUAL_EQUAL, TokenKind.BANG_EQUAL)


class Parser:
    def __init__(self, tokens: List[Token], diagnostics: Optional[Diagnostics] = None):
        self.tokens = tokens
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        self.pos = 0
        self.contains_errors = False

    def reset(self) -> None:
        self.pos = 0
        self.contains_errors = False

    def peek(self, offset: int = 0) -> Optional[Token]:
        index = self.pos + offset
        if index < len(self.tokens):
            return self.tokens[index]
        return None

    def advance(self) -> Token:
        token = self.tokens[self.pos]
        self.pos += 1
        return token

    def match(self, *kinds: TokenKind) -> bool:
        token = self.peek()
        return token is not None and token.kind in kinds

    def error(self, message: str, token: Optional[Token] = None) -> None:
        self.diagnostics.report('parsing', message, token.line if token is not None else None)
        self.contains_errors = True

    def expect(self, kind: TokenKind) -> None:
        """Check that a token of `kind` remains somewhere ahead.

        Nothing is consumed; a missing token is reported and flagged but
        parsing continues.
        """
        if any(token.kind is kind for token in self.tokens[self.pos:]):
            return
        self.error(f"expected token of type {kind.name}", self.peek())

    def parse(self) -> List[Statement]:
        self.reset()
        statements: List[Statement] = []
        while self.pos < len(self.tokens) - 1:
            start = self.pos
            statement = self.parse_statement()
            if self.pos == start:
                token = self.advance()
                self.error(f"unexpected token {token.kind.name}", token)
                continue
            statements.append(statement)
        return statements

    def parse_statement(self) -> Statement:
        if self.match(TokenKind.PRINT):
            self.advance()
            expr = self.parse_expression()
            self.expect(TokenKind.NEWLINE)
            statement: Statement = Print(expr)
        else:
            statement = ExprStmt(self.parse_expression())
        if self.match(TokenKind.NEWLINE):
            self.advance()
        return statement

    def parse_expression(self) -> Expr:
        return self.parse_equality()

    def parse_binary(self, operand, operators) -> Expr:
        node = operand()
        while self.match(*operators):
            op_token = self.advance()
            right = operand()
            node = Binary(node, op_token, right)
        return node

    def parse_equality(self) -> Expr:
        return self.parse_binary(self.parse_comparison, EQUALITY_OPERATORS)

    def parse_comparison(self) -> Expr:
        return self.parse_binary(self.parse_term, COMPARISON_OPERATORS)

    def parse_term(self) -> Expr:
        return self.parse_binary(self.parse_factor, TERM_OPERATORS)

    def parse_factor(self) -> Expr:
        return self.parse_binary(self.parse_exponent, FACTOR_OPERATORS)

    def parse_exponent(self) -> Expr:
        return self.parse_binary(self.parse_unary, EXPONENT_OPERATORS)

    def parse_unary(self) -> Expr:
        operators: List[Token] = []
        while self.match(*UNARY_OPERATORS):
            operators.append(self.advance())
        node = self.parse_primary()
        # prefix operators bind right to left: wrap from the innermost out
        for op_token in reversed(operators):
            node = Unary(op_token, node)
        return node

    def parse_primary(self) -> Expr:
        token = self.peek()
        if token is None:
            return Literal(Token.of(TokenKind.EOF))
        if token.kind in LITERAL_KINDS:
            return Literal(self.advance())
        if token.kind in GROUP_CLOSERS:
            opening = self.advance()
            expr = self.parse_expression()
            closing = self.close_group(GROUP_CLOSERS[opening.kind])
            return Grouping(opening, expr, closing)
        return Literal(Token.of(TokenKind.EOF))

    def close_group(self, kind: TokenKind) -> Token:
        # An indented block ends with NEWLINE DEDENT; the newline belongs to the block.
        if kind is TokenKind.DEDENT and self.match(TokenKind.NEWLINE):
            following = self.peek(1)
            if following is not None and following.kind is TokenKind.DEDENT:
                self.advance()
        self.expect(kind)
        if self.match(kind):
            return self.advance()
        return Token.of(kind)


def parse(tokens: List[Token], diagnostics: Optional[Diagnostics] = None) -> List[Statement]:
    """Parse `tokens` into statements, reporting problems to `diagnostics`."""
    return Parser(tokens, diagnostics).parse()
