"""Abstract Syntax Tree (AST) definitions for the Prot language.

Expressions and statements are immutable dataclasses built bottom-up by
the parser. Operators and leaves keep the token they were parsed from so
the interpreter can report diagnostics against a source line.
"""

from __future__ import annotations

from dataclasses import dataclass

from .types import Token


@dataclass(frozen=True)
class Expr:
    """Base class for expression nodes."""
    pass


@dataclass(frozen=True)
class Unary(Expr):
    operator: Token
    operand: Expr


@dataclass(frozen=True)
class Binary(Expr):
    left: Expr
    operator: Token
    right: Expr


@dataclass(frozen=True)
class Literal(Expr):
    token: Token


@dataclass(frozen=True)
class Grouping(Expr):
    opening: Token  # '(', '[' or INDENT
    expression: Expr
    closing: Token


@dataclass(frozen=True)
class Statement:
    """Base class for statement nodes."""
    pass


@dataclass(frozen=True)
class Print(Statement):
    expression: Expr


@dataclass(frozen=True)
class ExprStmt(Statement):
    expression: Expr
