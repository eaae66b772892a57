"""Interpreter for the Prot language.

This module walks the statement list produced by `prot.parser` and
carries out its effects. Expressions evaluate to literal tokens: numbers,
strings, booleans, identifiers and the `none` value.

Evaluation errors never abort a program. When an operand fails the
coercion an operator needs, the interpreter reports a diagnostic and
the offending sub-expression evaluates to the `none` sentinel, so the
rest of the program keeps running.

`run_program` ties the three stages together and stops between stages
as soon as the tokenizer or parser reports an error.
"""

from __future__ import annotations

import json
import math
from typing import Any, Callable, Dict, List, Optional, Tuple

from .ast import Expr, Unary, Binary, Literal, Grouping, Statement, Print, ExprStmt
from .ast_json import ast_to_obj
from .errors import CoercionError, Diagnostics
from .parser import Parser
from .tokenizer import Tokenizer
from .types import (
    Token, TokenKind,
    to_number, to_bool, to_string, values_equal, cascade_equal, kind_name,
)


def divide(a: float, b: float) -> float:
    """IEEE division: dividing by zero gives an infinity or NaN."""
    if b == 0.0:
        if a == 0.0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


def remainder(a: float, b: float) -> float:
    """Floating-point remainder with the sign of the dividend."""
    try:
        return math.fmod(a, b)
    except ValueError:
        return math.nan


def is_odd_integer(x: float) -> bool:
    return math.isfinite(x) and x.is_integer() and x % 2 == 1


def power(a: float, b: float) -> float:
    """IEEE pow: poles give a signed infinity, domain errors NaN."""
    try:
        return math.pow(a, b)
    except ValueError:
        if a == 0.0 and b < 0:
            # pole: the sign of a zero base survives only odd integer exponents
            return math.copysign(math.inf, a) if is_odd_integer(b) else math.inf
        return math.nan
    except OverflowError:
        if a < 0 and is_odd_integer(b):
            return -math.inf
        return math.inf


ARITHMETIC: Dict[TokenKind, Callable[[float, float], float]] = {
    TokenKind.MINUS: lambda a, b: a - b,
    TokenKind.STAR: lambda a, b: a * b,
    TokenKind.SLASH: divide,
    TokenKind.PERCENT: remainder,
    TokenKind.CARET: power,
}

COMPARISONS: Dict[TokenKind, Callable[[float, float], bool]] = {
    TokenKind.GREATER: lambda a, b: a > b,
    TokenKind.GREATER_EQUAL: lambda a, b: a >= b,
    TokenKind.LESS: lambda a, b: a < b,
    TokenKind.LESS_EQUAL: lambda a, b: a <= b,
}


def symbol(token: Token) -> str:
    return token.lexeme or token.kind.value


class Interpreter:
    """Tree-walking evaluator.

    Options:
      debug_level       0 disables tracing; 1 traces stage checkpoints,
                        2 adds token and tree dumps, 3 adds every operator
                        application.
      debug_file        file the trace is written to.
      diagnostics       accumulator for evaluation errors.
      cascade_equality  compare with the legacy number/bool/string
                        coercion cascade instead of tag-matched equality.
      null_groupings    make every grouping evaluate to `none`, as older
                        releases did, instead of its inner value.
    """

    def __init__(self, debug_level: int = 0, debug_file: str = 'debug.txt',
                 diagnostics: Optional[Diagnostics] = None,
                 cascade_equality: bool = False, null_groupings: bool = False):
        self.debug_level = debug_level
        self.debug_fp = open(debug_file, 'w', encoding='utf-8') if debug_level > 0 else None
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        self.cascade_equality = cascade_equality
        self.null_groupings = null_groupings

    def debug(self, msg: str, level: int = 1):
        if self.debug_level >= level and self.debug_fp:
            self.debug_fp.write(msg + '\n')
            self.debug_fp.flush()

    def close(self):
        if self.debug_fp:
            self.debug_fp.close()
            self.debug_fp = None

    def fail(self, message: str, token: Token) -> Token:
        self.diagnostics.report('evaluation', message, token.line or None)
        return Token.none()

    def run(self, statements: List[Statement]) -> None:
        for statement in statements:
            self.execute(statement)

    def execute(self, node: Statement) -> None:
        if isinstance(node, Print):
            value = self.evaluate(node.expression)
            try:
                text = to_string(value)
            except CoercionError as e:
                self.fail(f"cannot print value: {e}", value)
                return
            print(text)
            return
        if isinstance(node, ExprStmt):
            self.evaluate(node.expression)
            return
        raise NotImplementedError(f"execute: unexpected node type {type(node)}")

    def evaluate(self, node: Expr) -> Token:
        # Post-order walk over an explicit stack; long operator chains build
        # trees deeper than the Python recursion limit.
        values: List[Token] = []
        stack: List[Tuple[Expr, bool]] = [(node, False)]
        while stack:
            current, children_done = stack.pop()
            if isinstance(current, Literal):
                values.append(current.token)
                continue
            if not children_done:
                stack.append((current, True))
                if isinstance(current, Binary):
                    stack.append((current.right, False))
                    stack.append((current.left, False))
                elif isinstance(current, Unary):
                    stack.append((current.operand, False))
                elif isinstance(current, Grouping):
                    stack.append((current.expression, False))
                else:
                    raise NotImplementedError(f"evaluate: unexpected node type {type(current)}")
                continue
            if isinstance(current, Binary):
                right = values.pop()
                left = values.pop()
                result = self.apply_binary_op(current.operator, left, right)
                self.debug(f"{left!r} {symbol(current.operator)} {right!r} -> {result!r}", level=3)
                values.append(result)
            elif isinstance(current, Unary):
                values.append(self.apply_unary_op(current.operator, values.pop()))
            elif self.null_groupings:
                values.pop()
                values.append(Token.none())
        return values.pop()

    def apply_unary_op(self, op: Token, operand: Token) -> Token:
        try:
            if op.kind is TokenKind.MINUS:
                return Token.number(-to_number(operand))
            if op.kind in (TokenKind.BANG, TokenKind.NOT):
                return Token.boolean(not to_bool(operand))
        except CoercionError as e:
            return self.fail(f"unary '{symbol(op)}': {e}", op)
        return self.fail(f"unsupported unary operator '{symbol(op)}'", op)

    def apply_binary_op(self, op: Token, a: Token, b: Token) -> Token:
        kind = op.kind
        if kind is TokenKind.PLUS:
            if a.kind is TokenKind.NUMBER and b.kind is TokenKind.NUMBER:
                return Token.number(a.value + b.value)
            if a.kind is TokenKind.STRING and b.kind is TokenKind.STRING:
                return Token.string(a.value + b.value)
            return self.fail(f"unsupported '+' for {kind_name(a)} and {kind_name(b)}", op)
        if kind in (TokenKind.EQUAL_EQUAL, TokenKind.BANG_EQUAL):
            eq = self.equal_values(a, b)
            return Token.boolean(eq if kind is TokenKind.EQUAL_EQUAL else not eq)
        try:
            if kind in ARITHMETIC:
                return Token.number(ARITHMETIC[kind](to_number(a), to_number(b)))
            if kind in COMPARISONS:
                return Token.boolean(COMPARISONS[kind](to_number(a), to_number(b)))
        except CoercionError as e:
            return self.fail(f"'{symbol(op)}': {e}", op)
        return self.fail(f"unsupported binary operator '{symbol(op)}'", op)

    def equal_values(self, a: Token, b: Token) -> bool:
        if self.cascade_equality:
            return cascade_equal(a, b)
        return values_equal(a, b)


def run_program(source: str, debug_level: int = 0, diagnostics: Optional[Diagnostics] = None,
                **options: Any) -> bool:
    """Tokenize, parse and run a Prot program from a source string.

    Returns False if the tokenizer or parser reported errors (nothing is
    evaluated in that case), True otherwise. Evaluation errors are
    reported to `diagnostics` but do not change the result.
    """
    if diagnostics is None:
        diagnostics = Diagnostics()
    interpreter = Interpreter(debug_level=debug_level, diagnostics=diagnostics, **options)
    try:
        tokenizer = Tokenizer(source, diagnostics)
        tokens = tokenizer.tokenize()
        interpreter.debug(f"tokenize: {len(tokens)} tokens")
        if interpreter.debug_level >= 2:
            interpreter.debug(' '.join(repr(t) for t in tokens), level=2)
        if tokenizer.contains_errors:
            return False
        if not tokens:
            return True

        parser = Parser(tokens, diagnostics)
        statements = parser.parse()
        interpreter.debug(f"parse: {len(statements)} statements")
        if interpreter.debug_level >= 2:
            for statement in statements:
                interpreter.debug(json.dumps(ast_to_obj(statement)), level=2)
        if parser.contains_errors:
            return False

        interpreter.run(statements)
        return True
    finally:
        interpreter.close()
