"""JSON serialization/deserialization for the Lox AST.

This module converts between Lox AST dataclasses and plain Python
dict/list structures suitable for JSON encoding. A program (a list of
statements) round-trips as a JSON list. Tokens are stored with their
type, lexeme, literal, line and span so that error locations survive the
trip. Node ids are not stored: a loaded AST gets fresh ids and must be
resolved again before it is interpreted.
"""

from __future__ import annotations

from typing import Any, Dict

from .ast import (
    Literal,
    Grouping,
    Unary,
    Binary,
    Logical,
    Variable,
    Assign,
    Call,
    Get,
    Set,
    This,
    Expression,
    Print,
    Var,
    Block,
    If,
    While,
    Function,
    Class,
    Return,
)
from .tokens import Token, TokenType


def token_to_obj(t: Token) -> Dict[str, Any]:
    return {
        "type": t.type.name,
        "lexeme": t.lexeme,
        "literal": t.literal,
        "line": t.line,
        "span": list(t.span),
    }


def token_from_obj(o: Dict[str, Any]) -> Token:
    start, end = o.get("span", (0, 0))
    return Token(TokenType[o["type"]], o["lexeme"], o.get("literal"), o.get("line", 0), (start, end))


def ast_to_obj(node: Any) -> Any:
    # Primitives
    if node is None:
        return None
    if isinstance(node, (int, float, str, bool)):
        return node
    if isinstance(node, list):
        return [ast_to_obj(n) for n in node]

    if isinstance(node, Token):
        return {"__type__": "Token", "value": token_to_obj(node)}

    # Expressions
    if isinstance(node, Literal):
        return {"type": "Literal", "value": node.value}
    if isinstance(node, Grouping):
        return {"type": "Grouping", "expression": ast_to_obj(node.expression)}
    if isinstance(node, Unary):
        return {"type": "Unary", "operator": ast_to_obj(node.operator), "right": ast_to_obj(node.right)}
    if isinstance(node, (Binary, Logical)):
        return {
            "type": type(node).__name__,
            "left": ast_to_obj(node.left),
            "operator": ast_to_obj(node.operator),
            "right": ast_to_obj(node.right),
        }
    if isinstance(node, Variable):
        return {"type": "Variable", "name": ast_to_obj(node.name)}
    if isinstance(node, Assign):
        return {"type": "Assign", "name": ast_to_obj(node.name), "value": ast_to_obj(node.value)}
    if isinstance(node, Call):
        return {
            "type": "Call",
            "callee": ast_to_obj(node.callee),
            "paren": ast_to_obj(node.paren),
            "arguments": [ast_to_obj(a) for a in node.arguments],
        }
    if isinstance(node, Get):
        return {"type": "Get", "object": ast_to_obj(node.object), "name": ast_to_obj(node.name)}
    if isinstance(node, Set):
        return {
            "type": "Set",
            "object": ast_to_obj(node.object),
            "name": ast_to_obj(node.name),
            "value": ast_to_obj(node.value),
        }
    if isinstance(node, This):
        return {"type": "This", "keyword": ast_to_obj(node.keyword)}

    # Statements
    if isinstance(node, Expression):
        return {"type": "Expression", "expression": ast_to_obj(node.expression)}
    if isinstance(node, Print):
        return {"type": "Print", "expression": ast_to_obj(node.expression)}
    if isinstance(node, Var):
        return {"type": "Var", "name": ast_to_obj(node.name), "initializer": ast_to_obj(node.initializer)}
    if isinstance(node, Block):
        return {"type": "Block", "statements": [ast_to_obj(s) for s in node.statements]}
    if isinstance(node, If):
        return {
            "type": "If",
            "condition": ast_to_obj(node.condition),
            "then_branch": ast_to_obj(node.then_branch),
            "else_branch": ast_to_obj(node.else_branch),
        }
    if isinstance(node, While):
        return {
            "type": "While",
            "condition": ast_to_obj(node.condition),
            "body": ast_to_obj(node.body),
            "increment": ast_to_obj(node.increment),
            "fresh_bindings": node.fresh_bindings,
        }
    if isinstance(node, Function):
        return {
            "type": "Function",
            "name": ast_to_obj(node.name),
            "params": [ast_to_obj(p) for p in node.params],
            "body": [ast_to_obj(s) for s in node.body],
        }
    if isinstance(node, Class):
        return {
            "type": "Class",
            "name": ast_to_obj(node.name),
            "methods": [ast_to_obj(m) for m in node.methods],
        }
    if isinstance(node, Return):
        return {"type": "Return", "keyword": ast_to_obj(node.keyword), "value": ast_to_obj(node.value)}

    raise TypeError(f"Unsupported node for serialization: {type(node).__name__}")


def ast_from_obj(obj: Any) -> Any:
    if obj is None or isinstance(obj, (int, float, str, bool)):
        return obj
    if isinstance(obj, list):
        return [ast_from_obj(o) for o in obj]
    if not isinstance(obj, dict):
        raise TypeError("Invalid AST object")
    if obj.get("__type__") == "Token":
        return token_from_obj(obj["value"])
    t = obj.get("type")

    # Expressions
    if t == "Literal":
        value = obj["value"]
        # JSON has no float/int distinction; Lox numbers are always floats
        if isinstance(value, int) and not isinstance(value, bool):
            value = float(value)
        return Literal(value)
    if t == "Grouping":
        return Grouping(ast_from_obj(obj["expression"]))
    if t == "Unary":
        return Unary(ast_from_obj(obj["operator"]), ast_from_obj(obj["right"]))
    if t == "Binary":
        return Binary(ast_from_obj(obj["left"]), ast_from_obj(obj["operator"]), ast_from_obj(obj["right"]))
    if t == "Logical":
        return Logical(ast_from_obj(obj["left"]), ast_from_obj(obj["operator"]), ast_from_obj(obj["right"]))
    if t == "Variable":
        return Variable(ast_from_obj(obj["name"]))
    if t == "Assign":
        return Assign(ast_from_obj(obj["name"]), ast_from_obj(obj["value"]))
    if t == "Call":
        return Call(
            callee=ast_from_obj(obj["callee"]),
            paren=ast_from_obj(obj["paren"]),
            arguments=[ast_from_obj(a) for a in obj["arguments"]],
        )
    if t == "Get":
        return Get(ast_from_obj(obj["object"]), ast_from_obj(obj["name"]))
    if t == "Set":
        return Set(ast_from_obj(obj["object"]), ast_from_obj(obj["name"]), ast_from_obj(obj["value"]))
    if t == "This":
        return This(ast_from_obj(obj["keyword"]))

    # Statements
    if t == "Expression":
        return Expression(ast_from_obj(obj["expression"]))
    if t == "Print":
        return Print(ast_from_obj(obj["expression"]))
    if t == "Var":
        return Var(ast_from_obj(obj["name"]), ast_from_obj(obj.get("initializer")))
    if t == "Block":
        return Block([ast_from_obj(s) for s in obj["statements"]])
    if t == "If":
        return If(
            condition=ast_from_obj(obj["condition"]),
            then_branch=ast_from_obj(obj["then_branch"]),
            else_branch=ast_from_obj(obj.get("else_branch")),
        )
    if t == "While":
        return While(
            condition=ast_from_obj(obj["condition"]),
            body=ast_from_obj(obj["body"]),
            increment=ast_from_obj(obj.get("increment")),
            fresh_bindings=bool(obj.get("fresh_bindings", False)),
        )
    if t == "Function":
        return Function(
            name=ast_from_obj(obj["name"]),
            params=[ast_from_obj(p) for p in obj["params"]],
            body=[ast_from_obj(s) for s in obj["body"]],
        )
    if t == "Class":
        return Class(ast_from_obj(obj["name"]), [ast_from_obj(m) for m in obj["methods"]])
    if t == "Return":
        return Return(ast_from_obj(obj["keyword"]), ast_from_obj(obj.get("value")))

    raise ValueError(f"Unknown AST node type: {t}")
