"""Tree-walking interpreter for Lox.

The interpreter executes the statements produced by the parser after the
resolver has annotated them. It owns the global environment, the current
environment and the binding-distance table the resolver fills in through
`Interpreter.resolve`. Variables that have a recorded distance are found
by walking exactly that many enclosing links; all others are globals.
"""

from __future__ import annotations

import math
import sys
from typing import Any, Dict, List, Optional, TextIO

from .ast import (
    Expr, Stmt, Literal, Grouping, Unary, Binary, Logical, Variable, Assign,
    Call, Get, Set, This, Expression, Print, Var, Block, If, While,
    Function, Class, Return,
)
from .callables import LoxCallable, LoxClass, LoxFunction, LoxInstance
from .environment import Environment
from .errors import LoxRuntimeError, ReturnSignal, RuntimeErrorKind
from .natives import populate_globals
from .tokens import Token, TokenType
from .types import is_number, is_truthy, stringify, type_name, values_equal


# each Lox call nests about seven Python frames
RECURSION_LIMIT = 10000


def divide(left: float, right: float) -> float:
    """IEEE-754 division: x/0 is a signed infinity, 0/0 is nan."""
    if right == 0.0:
        if left == 0.0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)
    return left / right


class Interpreter:
    """Core interpreter that executes a resolved Lox AST."""

    def __init__(self, output: Optional[TextIO] = None, debug_level: int = 0,
                 debug_file: Optional[str] = None):
        self.globals = populate_globals(Environment())
        self.environment = self.globals
        self.locals: Dict[int, int] = {}
        # None means "sys.stdout at the time of printing"
        self.output = output
        self.debug_level = debug_level
        self.debug_fp = open(debug_file, 'w') if debug_level > 0 and debug_file else None
        if sys.getrecursionlimit() < RECURSION_LIMIT:
            sys.setrecursionlimit(RECURSION_LIMIT)

    def debug(self, level: int, msg: str) -> None:
        if self.debug_level >= level:
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg, file=sys.stderr)

    def close(self) -> None:
        if self.debug_fp:
            self.debug_fp.close()
            self.debug_fp = None

    # Public API
    def interpret(self, statements: List[Stmt]) -> None:
        for stmt in statements:
            self.debug(1, f"execute {type(stmt).__name__}")
            self.execute(stmt)

    def resolve(self, node: Expr, depth: int) -> None:
        """Record the binding distance of a variable reference site."""
        self.locals[node.node_id] = depth
        self.debug(3, f"resolve {self.describe_site(node)} at distance {depth}")

    ###########################################################################
    # Statements
    ###########################################################################

    def execute(self, stmt: Stmt) -> None:
        if isinstance(stmt, Expression):
            self.evaluate(stmt.expression)
            return
        if isinstance(stmt, Print):
            value = self.evaluate(stmt.expression)
            print(stringify(value), file=self.output or sys.stdout)
            return
        if isinstance(stmt, Var):
            value = None
            if stmt.initializer is not None:
                value = self.evaluate(stmt.initializer)
            self.environment.define(stmt.name.lexeme, value)
            self.debug(2, f"define {stmt.name.lexeme} = {stringify(value)}")
            return
        if isinstance(stmt, Block):
            self.execute_block(stmt.statements, Environment(self.environment))
            return
        if isinstance(stmt, If):
            if is_truthy(self.evaluate(stmt.condition)):
                self.execute(stmt.then_branch)
            elif stmt.else_branch is not None:
                self.execute(stmt.else_branch)
            return
        if isinstance(stmt, While):
            self.execute_while(stmt)
            return
        if isinstance(stmt, Function):
            function = LoxFunction(stmt, self.environment)
            self.environment.define(stmt.name.lexeme, function)
            self.debug(2, f"define function {stmt.name.lexeme}")
            return
        if isinstance(stmt, Class):
            self.execute_class(stmt)
            return
        if isinstance(stmt, Return):
            value = None
            if stmt.value is not None:
                value = self.evaluate(stmt.value)
            raise ReturnSignal(value)
        raise LoxRuntimeError(RuntimeErrorKind.UNREACHABLE_CODE, None,
                              f"execute: unexpected node type {type(stmt).__name__}")

    def execute_block(self, statements: List[Stmt], env: Environment) -> None:
        previous = self.environment
        try:
            self.environment = env
            for stmt in statements:
                self.execute(stmt)
        finally:
            self.environment = previous

    def execute_while(self, stmt: While) -> None:
        if not stmt.fresh_bindings:
            while is_truthy(self.evaluate(stmt.condition)):
                self.execute(stmt.body)
                if stmt.increment is not None:
                    self.evaluate(stmt.increment)
            return

        # Each iteration gets its own copy of the loop-variable scope. The
        # increment runs in the new copy so that closures made during the
        # previous iteration keep the value they saw.
        previous = self.environment
        iteration = previous
        first = True
        try:
            while True:
                iteration = iteration.copy()
                self.environment = iteration
                if not first and stmt.increment is not None:
                    self.evaluate(stmt.increment)
                first = False
                if not is_truthy(self.evaluate(stmt.condition)):
                    break
                self.execute(stmt.body)
        finally:
            self.environment = previous

    def execute_class(self, stmt: Class) -> None:
        self.environment.define(stmt.name.lexeme, None)
        methods: Dict[str, LoxFunction] = {}
        for method in stmt.methods:
            name = method.name.lexeme
            methods[name] = LoxFunction(method, self.environment, is_initializer=(name == 'init'))
        klass = LoxClass(stmt.name.lexeme, methods)
        self.environment.assign(stmt.name, klass)
        self.debug(2, f"define class {stmt.name.lexeme} with methods {sorted(methods)}")

    ###########################################################################
    # Expressions
    ###########################################################################

    def evaluate(self, expr: Expr) -> Any:
        if isinstance(expr, Literal):
            return expr.value
        if isinstance(expr, Grouping):
            return self.evaluate(expr.expression)
        if isinstance(expr, Variable):
            return self.look_up_variable(expr.name, expr)
        if isinstance(expr, This):
            return self.look_up_variable(expr.keyword, expr)
        if isinstance(expr, Assign):
            value = self.evaluate(expr.value)
            distance = self.locals.get(expr.node_id)
            if distance is not None:
                self.environment.assign_at(distance, expr.name, value)
            else:
                self.globals.assign(expr.name, value)
            return value
        if isinstance(expr, Unary):
            return self.evaluate_unary(expr)
        if isinstance(expr, Binary):
            return self.evaluate_binary(expr)
        if isinstance(expr, Logical):
            left = self.evaluate(expr.left)
            if expr.operator.type == TokenType.OR:
                if is_truthy(left):
                    return left
            elif not is_truthy(left):
                return left
            return self.evaluate(expr.right)
        if isinstance(expr, Call):
            return self.evaluate_call(expr)
        if isinstance(expr, Get):
            obj = self.evaluate(expr.object)
            if isinstance(obj, LoxInstance):
                return obj.get(expr.name)
            raise LoxRuntimeError(RuntimeErrorKind.INVALID_OBJECT_PROPERTY, expr.name)
        if isinstance(expr, Set):
            obj = self.evaluate(expr.object)
            if not isinstance(obj, LoxInstance):
                raise LoxRuntimeError(RuntimeErrorKind.INVALID_OBJECT_PROPERTY, expr.name,
                                      'Only instances have fields.')
            value = self.evaluate(expr.value)
            obj.set(expr.name, value)
            return value
        raise LoxRuntimeError(RuntimeErrorKind.UNREACHABLE_CODE, None,
                              f"evaluate: unexpected node type {type(expr).__name__}")

    def look_up_variable(self, name: Token, expr: Expr) -> Any:
        distance = self.locals.get(expr.node_id)
        if distance is not None:
            return self.environment.get_at(distance, name)
        return self.globals.get(name)

    def evaluate_unary(self, expr: Unary) -> Any:
        right = self.evaluate(expr.right)
        if expr.operator.type == TokenType.MINUS:
            if not is_number(right):
                raise LoxRuntimeError(RuntimeErrorKind.EXPECTED_NUMBER_OPERAND, expr.operator)
            return -right
        if expr.operator.type == TokenType.BANG:
            return not is_truthy(right)
        raise LoxRuntimeError(RuntimeErrorKind.UNREACHABLE_CODE, expr.operator)

    def evaluate_binary(self, expr: Binary) -> Any:
        left = self.evaluate(expr.left)
        right = self.evaluate(expr.right)
        kind = expr.operator.type

        if kind == TokenType.PLUS:
            if is_number(left) and is_number(right):
                return left + right
            if isinstance(left, str) and isinstance(right, str):
                return left + right
            raise LoxRuntimeError(
                RuntimeErrorKind.EXPECTED_ADDABLE_OPERANDS, expr.operator,
                f"Operands must be two numbers or two strings, got {type_name(left)} and {type_name(right)}.",
            )
        if kind == TokenType.EQUAL_EQUAL:
            return values_equal(left, right)
        if kind == TokenType.BANG_EQUAL:
            return not values_equal(left, right)

        if kind not in NUMERIC_OPERATORS:
            raise LoxRuntimeError(RuntimeErrorKind.UNREACHABLE_CODE, expr.operator)
        if not (is_number(left) and is_number(right)):
            raise LoxRuntimeError(RuntimeErrorKind.EXPECTED_NUMBER_OPERANDS, expr.operator)
        if kind == TokenType.MINUS:
            return left - right
        if kind == TokenType.STAR:
            return left * right
        if kind == TokenType.SLASH:
            return divide(left, right)
        if kind == TokenType.GREATER:
            return left > right
        if kind == TokenType.GREATER_EQUAL:
            return left >= right
        if kind == TokenType.LESS:
            return left < right
        return left <= right

    def evaluate_call(self, expr: Call) -> Any:
        callee = self.evaluate(expr.callee)
        arguments = [self.evaluate(argument) for argument in expr.arguments]
        if not isinstance(callee, LoxCallable):
            raise LoxRuntimeError(
                RuntimeErrorKind.INVALID_CALL_OBJECT_TYPE, expr.paren,
                f"Can only call functions and classes, got {type_name(callee)}.",
            )
        if len(arguments) != callee.arity():
            raise LoxRuntimeError(
                RuntimeErrorKind.INVALID_ARGS_COUNT, expr.paren,
                f"Expected {callee.arity()} arguments but got {len(arguments)}.",
            )
        if self.debug_level >= 3:
            self.debug(3, f"call {stringify(callee)}({', '.join(stringify(a) for a in arguments)})")
        try:
            return callee.call(self, arguments)
        except RecursionError:
            raise LoxRuntimeError(RuntimeErrorKind.STACK_OVERFLOW, expr.paren) from None

    @staticmethod
    def describe_site(node: Expr) -> str:
        token = node.keyword if isinstance(node, This) else node.name
        return f"'{token.lexeme}' (line {token.line})"


NUMERIC_OPERATORS = {
    TokenType.MINUS, TokenType.STAR, TokenType.SLASH,
    TokenType.GREATER, TokenType.GREATER_EQUAL,
    TokenType.LESS, TokenType.LESS_EQUAL,
}
