"""Parenthesized, Lisp-like rendering of the Lox AST.

Used by `python -m treelox --print-ast` and handy when debugging the
parsers: `1 + 2 * 3` prints as `(+ 1 (* 2 3))`.
"""

from typing import Any, Iterable

from .ast import (
    Literal, Grouping, Unary, Binary, Logical, Variable, Assign,
    Call, Get, Set, This, Expression, Print, Var, Block, If, While,
    Function, Class, Return,
)
from .types import stringify


def parenthesize(name: str, parts: Iterable[Any]) -> str:
    inner = ' '.join([name] + [print_ast(p) if not isinstance(p, str) else p for p in parts])
    return f"({inner})"


def print_ast(node: Any) -> str:
    if isinstance(node, list):
        return '\n'.join(print_ast(n) for n in node)

    if isinstance(node, Literal):
        if isinstance(node.value, str):
            return f'"{node.value}"'
        return stringify(node.value)
    if isinstance(node, Grouping):
        return parenthesize('group', [node.expression])
    if isinstance(node, Unary):
        return parenthesize(node.operator.lexeme, [node.right])
    if isinstance(node, (Binary, Logical)):
        return parenthesize(node.operator.lexeme, [node.left, node.right])
    if isinstance(node, Variable):
        return node.name.lexeme
    if isinstance(node, Assign):
        return parenthesize('=', [node.name.lexeme, node.value])
    if isinstance(node, Call):
        return parenthesize('call', [node.callee] + list(node.arguments))
    if isinstance(node, Get):
        return parenthesize('.', [node.object, node.name.lexeme])
    if isinstance(node, Set):
        return parenthesize('=', [parenthesize('.', [node.object, node.name.lexeme]), node.value])
    if isinstance(node, This):
        return 'this'

    if isinstance(node, Expression):
        return parenthesize(';', [node.expression])
    if isinstance(node, Print):
        return parenthesize('print', [node.expression])
    if isinstance(node, Var):
        if node.initializer is None:
            return parenthesize('var', [node.name.lexeme])
        return parenthesize('var', [node.name.lexeme, node.initializer])
    if isinstance(node, Block):
        return parenthesize('block', node.statements)
    if isinstance(node, If):
        if node.else_branch is None:
            return parenthesize('if', [node.condition, node.then_branch])
        return parenthesize('if-else', [node.condition, node.then_branch, node.else_branch])
    if isinstance(node, While):
        parts = [node.condition, node.body]
        if node.increment is not None:
            parts.append(node.increment)
        return parenthesize('while', parts)
    if isinstance(node, Function):
        params = '(' + ' '.join(p.lexeme for p in node.params) + ')'
        return parenthesize('fun', [node.name.lexeme, params] + list(node.body))
    if isinstance(node, Class):
        return parenthesize('class', [node.name.lexeme] + list(node.methods))
    if isinstance(node, Return):
        if node.value is None:
            return '(return)'
        return parenthesize('return', [node.value])

    raise TypeError(f"Unsupported node for printing: {type(node).__name__}")
