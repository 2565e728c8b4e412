"""Abstract Syntax Tree (AST) definitions for Lox.

The parser builds these nodes once and never mutates them; the resolver
and the interpreter only read them. Nodes compare structurally (tokens by
type and lexeme). Nodes that the resolver annotates with a binding
distance (`Variable`, `Assign`, `This`) also carry a `node_id` that is
unique per constructed node and takes no part in equality.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Any, List, Optional

from .tokens import Token


_node_ids = itertools.count(1)


def _next_id() -> int:
    return next(_node_ids)


@dataclass
class Expr:
    """Base class for expression nodes."""
    pass


@dataclass
class Stmt:
    """Base class for statement nodes."""
    pass


###############################################################################
# Expressions
###############################################################################

@dataclass
class Literal(Expr):
    value: Any  # float, str, bool or None


@dataclass
class Grouping(Expr):
    expression: Expr


@dataclass
class Unary(Expr):
    operator: Token
    right: Expr


@dataclass
class Binary(Expr):
    left: Expr
    operator: Token
    right: Expr


@dataclass
class Logical(Expr):
    left: Expr
    operator: Token  # AND or OR
    right: Expr


@dataclass
class Variable(Expr):
    name: Token
    node_id: int = field(default_factory=_next_id, compare=False, repr=False)


@dataclass
class Assign(Expr):
    name: Token
    value: Expr
    node_id: int = field(default_factory=_next_id, compare=False, repr=False)


@dataclass
class Call(Expr):
    callee: Expr
    paren: Token  # closing parenthesis, used for error locations
    arguments: List[Expr]


@dataclass
class Get(Expr):
    object: Expr
    name: Token


@dataclass
class Set(Expr):
    object: Expr
    name: Token
    value: Expr


@dataclass
class This(Expr):
    keyword: Token
    node_id: int = field(default_factory=_next_id, compare=False, repr=False)


###############################################################################
# Statements
###############################################################################

@dataclass
class Expression(Stmt):
    expression: Expr


@dataclass
class Print(Stmt):
    expression: Expr


@dataclass
class Var(Stmt):
    name: Token
    initializer: Optional[Expr]


@dataclass
class Block(Stmt):
    statements: List[Stmt]


@dataclass
class If(Stmt):
    condition: Expr
    then_branch: Stmt
    else_branch: Optional[Stmt]


@dataclass
class While(Stmt):
    condition: Expr
    body: Stmt
    # Set by the `for` desugaring: evaluated before the condition on every
    # iteration after the first.
    increment: Optional[Expr] = None
    # Run each iteration in a fresh copy of the enclosing loop-variable
    # environment so closures capture per-iteration values.
    fresh_bindings: bool = False


@dataclass
class Function(Stmt):
    name: Token
    params: List[Token]
    body: List[Stmt]


@dataclass
class Class(Stmt):
    name: Token
    methods: List[Function]


@dataclass
class Return(Stmt):
    keyword: Token
    value: Optional[Expr]
