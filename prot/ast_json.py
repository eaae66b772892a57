"""JSON serialization/deserialization for Prot tokens and ASTs.

This module converts between the AST dataclasses and plain Python
dict/list structures suitable for JSON encoding. Token kinds are stored
by enum name. The conversion round-trips every node type, including
the diagnostic line numbers carried by tokens.
"""

from __future__ import annotations

from typing import Any, Dict

from .ast import Unary, Binary, Literal, Grouping, Print, ExprStmt
from .types import Token, TokenKind


def token_to_obj(t: Token) -> Dict[str, Any]:
    return {"kind": t.kind.name, "lexeme": t.lexeme, "value": t.value, "line": t.line}


def token_from_obj(o: Dict[str, Any]) -> Token:
    kind = TokenKind[o["kind"]]
    value = o.get("value")
    if kind is TokenKind.NUMBER and value is not None:
        value = float(value)
    return Token(kind, o.get("lexeme", ""), value, o.get("line", 0))


def ast_to_obj(node: Any) -> Any:
    if node is None:
        return None
    if isinstance(node, list):
        return [ast_to_obj(n) for n in node]
    if isinstance(node, Token):
        return token_to_obj(node)
    if isinstance(node, Print):
        return {"type": "Print", "expression": ast_to_obj(node.expression)}
    if isinstance(node, ExprStmt):
        return {"type": "ExprStmt", "expression": ast_to_obj(node.expression)}
    if isinstance(node, Literal):
        return {"type": "Literal", "token": token_to_obj(node.token)}
    if isinstance(node, Unary):
        return {
            "type": "Unary",
            "operator": token_to_obj(node.operator),
            "operand": ast_to_obj(node.operand),
        }
    if isinstance(node, Binary):
        return {
            "type": "Binary",
            "left": ast_to_obj(node.left),
            "operator": token_to_obj(node.operator),
            "right": ast_to_obj(node.right),
        }
    if isinstance(node, Grouping):
        return {
            "type": "Grouping",
            "opening": token_to_obj(node.opening),
            "expression": ast_to_obj(node.expression),
            "closing": token_to_obj(node.closing),
        }
    raise TypeError(f"Unsupported node for serialization: {type(node).__name__}")


def ast_from_obj(o: Any) -> Any:
    if o is None:
        return None
    if isinstance(o, list):
        return [ast_from_obj(x) for x in o]
    if not isinstance(o, dict):
        raise TypeError(f"Invalid AST object: {o!r}")
    t = o.get("type")
    if t is None and "kind" in o:
        return token_from_obj(o)
    if t == "Print":
        return Print(ast_from_obj(o["expression"]))
    if t == "ExprStmt":
        return ExprStmt(ast_from_obj(o["expression"]))
    if t == "Literal":
        return Literal(token_from_obj(o["token"]))
    if t == "Unary":
        return Unary(token_from_obj(o["operator"]), ast_from_obj(o["operand"]))
    if t == "Binary":
        return Binary(
            ast_from_obj(o["left"]),
            token_from_obj(o["operator"]),
            ast_from_obj(o["right"]),
        )
    if t == "Grouping":
        return Grouping(
            token_from_obj(o["opening"]),
            ast_from_obj(o["expression"]),
            token_from_obj(o["closing"]),
        )
    raise ValueError(f"Unknown AST node type: {t}")
