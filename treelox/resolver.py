"""Static resolution of variable bindings.

The resolver walks the AST with the same shape as the interpreter but
evaluates nothing. It keeps a stack of lexical scopes (the global scope is
not on the stack) and, for every variable reference that binds to a local,
tells the interpreter how many scopes separate the reference from the
declaration. Static errors are collected over the whole program and raised
together as `ResolveErrors` once the walk is complete.
"""

from __future__ import annotations

from enum import Enum, auto
from typing import TYPE_CHECKING, Dict, List, Optional
from typing import Set as SetType

from .ast import (
    Expr, Stmt, Literal, Grouping, Unary, Binary, Logical, Variable, Assign,
    Call, Get, Set, This, Expression, Print, Var, Block, If, While,
    Function, Class, Return,
)
from .errors import ResolveError, ResolveErrorKind, ResolveErrors
from .tokens import Token

if TYPE_CHECKING:
    from .interpreter import Interpreter


class FunctionType(Enum):
    NONE = auto()
    FUNCTION = auto()
    METHOD = auto()


class ClassType(Enum):
    NONE = auto()
    CLASS = auto()


class Resolver:
    def __init__(self, interpreter: 'Interpreter'):
        self.interpreter = interpreter
        self.scopes: List[Dict[str, bool]] = []
        self.current_function = FunctionType.NONE
        self.current_class = ClassType.NONE
        # global names whose own initializer is being resolved
        self.initializing_globals: SetType[str] = set()
        self.errors: List[ResolveError] = []

    def resolve(self, statements: List[Stmt]) -> None:
        self.resolve_statements(statements)
        if self.errors:
            raise ResolveErrors(self.errors)

    def resolve_statements(self, statements: List[Stmt]) -> None:
        for stmt in statements:
            self.resolve_stmt(stmt)

    ###########################################################################
    # Statements
    ###########################################################################

    def resolve_stmt(self, stmt: Stmt) -> None:
        if isinstance(stmt, Block):
            self.begin_scope()
            self.resolve_statements(stmt.statements)
            self.end_scope()
        elif isinstance(stmt, Var):
            self.declare(stmt.name)
            if stmt.initializer is not None:
                is_global = not self.scopes
                if is_global:
                    self.initializing_globals.add(stmt.name.lexeme)
                self.resolve_expr(stmt.initializer)
                if is_global:
                    self.initializing_globals.discard(stmt.name.lexeme)
            self.define(stmt.name)
        elif isinstance(stmt, Function):
            # defined before the body so the function can recurse
            self.declare(stmt.name)
            self.define(stmt.name)
            self.resolve_function(stmt, FunctionType.FUNCTION)
        elif isinstance(stmt, Class):
            self.resolve_class(stmt)
        elif isinstance(stmt, Expression):
            self.resolve_expr(stmt.expression)
        elif isinstance(stmt, Print):
            self.resolve_expr(stmt.expression)
        elif isinstance(stmt, If):
            self.resolve_expr(stmt.condition)
            self.resolve_stmt(stmt.then_branch)
            if stmt.else_branch is not None:
                self.resolve_stmt(stmt.else_branch)
        elif isinstance(stmt, While):
            self.resolve_expr(stmt.condition)
            self.resolve_stmt(stmt.body)
            if stmt.increment is not None:
                self.resolve_expr(stmt.increment)
        elif isinstance(stmt, Return):
            if self.current_function == FunctionType.NONE:
                self.error(stmt.keyword, ResolveErrorKind.TOP_LEVEL_RETURN)
            if stmt.value is not None:
                self.resolve_expr(stmt.value)
        else:
            raise TypeError(f"resolve: unexpected statement {type(stmt).__name__}")

    def resolve_function(self, function: Function, kind: FunctionType) -> None:
        enclosing_function = self.current_function
        self.current_function = kind
        self.begin_scope()
        for param in function.params:
            self.declare(param)
            self.define(param)
        self.resolve_statements(function.body)
        self.end_scope()
        self.current_function = enclosing_function

    def resolve_class(self, stmt: Class) -> None:
        enclosing_class = self.current_class
        self.current_class = ClassType.CLASS
        self.declare(stmt.name)
        self.define(stmt.name)

        self.begin_scope()
        self.scopes[-1]['this'] = True
        for method in stmt.methods:
            self.resolve_function(method, FunctionType.METHOD)
        self.end_scope()

        self.current_class = enclosing_class

    ###########################################################################
    # Expressions
    ###########################################################################

    def resolve_expr(self, expr: Expr) -> None:
        if isinstance(expr, Variable):
            self.resolve_variable(expr)
        elif isinstance(expr, Assign):
            self.resolve_expr(expr.value)
            self.resolve_local(expr, expr.name)
        elif isinstance(expr, This):
            if self.current_class == ClassType.NONE:
                self.error(expr.keyword, ResolveErrorKind.THIS_OUTSIDE_CLASS)
                return
            self.resolve_local(expr, expr.keyword)
        elif isinstance(expr, (Binary, Logical)):
            self.resolve_expr(expr.left)
            self.resolve_expr(expr.right)
        elif isinstance(expr, Unary):
            self.resolve_expr(expr.right)
        elif isinstance(expr, Grouping):
            self.resolve_expr(expr.expression)
        elif isinstance(expr, Call):
            self.resolve_expr(expr.callee)
            for argument in expr.arguments:
                self.resolve_expr(argument)
        elif isinstance(expr, Get):
            self.resolve_expr(expr.object)
        elif isinstance(expr, Set):
            self.resolve_expr(expr.value)
            self.resolve_expr(expr.object)
        elif isinstance(expr, Literal):
            pass
        else:
            raise TypeError(f"resolve: unexpected expression {type(expr).__name__}")

    def resolve_variable(self, expr: Variable) -> None:
        name = expr.name.lexeme
        if self.scopes and self.scopes[-1].get(name) is False:
            self.error(expr.name, ResolveErrorKind.VARIABLE_NOT_INITIALIZED)
        elif name in self.initializing_globals and not any(name in scope for scope in self.scopes):
            self.error(expr.name, ResolveErrorKind.VARIABLE_NOT_INITIALIZED,
                       "Can't read variable in its own initializer.")
        self.resolve_local(expr, expr.name)

    def resolve_local(self, expr: Expr, name: Token) -> None:
        for i in range(len(self.scopes) - 1, -1, -1):
            if name.lexeme in self.scopes[i]:
                self.interpreter.resolve(expr, len(self.scopes) - 1 - i)
                return
        # not found: assumed global, looked up dynamically

    ###########################################################################
    # Scope bookkeeping
    ###########################################################################

    def begin_scope(self) -> None:
        self.scopes.append({})

    def end_scope(self) -> None:
        self.scopes.pop()

    def declare(self, name: Token) -> None:
        if not self.scopes:
            return
        scope = self.scopes[-1]
        if name.lexeme in scope:
            self.error(name, ResolveErrorKind.VARIABLE_ALREADY_EXISTS,
                       f"Already a variable named '{name.lexeme}' in this scope.")
        scope[name.lexeme] = False

    def define(self, name: Token) -> None:
        if not self.scopes:
            return
        self.scopes[-1][name.lexeme] = True

    def error(self, token: Token, kind: ResolveErrorKind, detail: Optional[str] = None) -> None:
        self.errors.append(ResolveError(kind, token, detail))


def resolve(statements: List[Stmt], interpreter: 'Interpreter') -> None:
    """Annotate `statements` with binding distances stored in `interpreter`."""
    Resolver(interpreter).resolve(statements)
