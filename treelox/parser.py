"""Recursive-descent parser for Lox.

The parser consumes the scanner's token list with one token of lookahead
and builds the AST defined in `treelox.ast`. Expressions are parsed with
one method per precedence level, lowest first:

    assignment -> or -> and -> equality -> comparison -> term -> factor
    -> unary -> call -> primary

Errors do not stop the parse. Each failing declaration is recorded, the
parser re-synchronizes at the next statement boundary and carries on, and
all recorded errors are raised together as `ParseErrors` at the end.
"""

from __future__ import annotations

from typing import List, Optional

from .ast import (
    Expr, Stmt, Literal, Grouping, Unary, Binary, Logical, Variable, Assign,
    Call, Get, Set, This, Expression, Print, Var, Block, If, While,
    Function, Class, Return,
)
from .errors import ParseError, ParseErrorKind, ParseErrors
from .tokens import Token, TokenType


MAX_ARGUMENTS = 255

# Tokens that begin a declaration or statement; synchronize() stops here.
STATEMENT_STARTS = {
    TokenType.CLASS, TokenType.FUN, TokenType.VAR, TokenType.FOR,
    TokenType.IF, TokenType.WHILE, TokenType.PRINT, TokenType.RETURN,
}


def desugar_for(initializer: Optional[Stmt], condition: Optional[Expr],
                increment: Optional[Expr], body: Stmt) -> Stmt:
    """Rewrite a `for` loop into a `while` loop inside a block.

    A loop that declares its variable gets `fresh_bindings` so that every
    iteration sees its own copy of that variable.
    """
    if condition is None:
        condition = Literal(True)
    loop = While(condition, body, increment, fresh_bindings=isinstance(initializer, Var))
    if initializer is None:
        return loop
    return Block([initializer, loop])


class Parser:
    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.current = 0
        self.errors: List[ParseError] = []

    def parse(self) -> List[Stmt]:
        statements: List[Stmt] = []
        while not self.is_at_end():
            stmt = self.declaration()
            if stmt is not None:
                statements.append(stmt)
        if self.errors:
            raise ParseErrors(self.errors)
        return statements

    ###########################################################################
    # Declarations and statements
    ###########################################################################

    def declaration(self) -> Optional[Stmt]:
        try:
            if self.match(TokenType.CLASS):
                return self.class_declaration()
            if self.match(TokenType.FUN):
                return self.function('function')
            if self.match(TokenType.VAR):
                return self.var_declaration()
            return self.statement()
        except ParseError as error:
            self.errors.append(error)
            self.synchronize()
            return None

    def class_declaration(self) -> Class:
        name = self.consume(TokenType.IDENTIFIER, 'Expect class name.')
        self.consume(TokenType.LEFT_BRACE, "Expect '{' before class body.")
        methods: List[Function] = []
        while not self.check(TokenType.RIGHT_BRACE) and not self.is_at_end():
            methods.append(self.function('method'))
        self.consume(TokenType.RIGHT_BRACE, "Expect '}' after class body.")
        return Class(name, methods)

    def function(self, kind: str) -> Function:
        name = self.consume(TokenType.IDENTIFIER, f"Expect {kind} name.")
        self.consume(TokenType.LEFT_PAREN, f"Expect '(' after {kind} name.")
        params: List[Token] = []
        if not self.check(TokenType.RIGHT_PAREN):
            while True:
                if len(params) >= MAX_ARGUMENTS:
                    self.report(self.peek(), ParseErrorKind.MAX_ARG_NUMBER,
                                "Can't have more than 255 parameters.")
                params.append(self.consume(TokenType.IDENTIFIER, 'Expect parameter name.'))
                if not self.match(TokenType.COMMA):
                    break
        self.consume(TokenType.RIGHT_PAREN, "Expect ')' after parameters.")
        self.consume(TokenType.LEFT_BRACE, f"Expect '{{' before {kind} body.")
        body = self.block()
        return Function(name, params, body)

    def var_declaration(self) -> Var:
        name = self.consume(TokenType.IDENTIFIER, 'Expect variable name.')
        initializer = None
        if self.match(TokenType.EQUAL):
            initializer = self.expression()
        self.consume(TokenType.SEMICOLON, "Expect ';' after variable declaration.")
        return Var(name, initializer)

    def statement(self) -> Stmt:
        if self.match(TokenType.FOR):
            return self.for_statement()
        if self.match(TokenType.IF):
            return self.if_statement()
        if self.match(TokenType.PRINT):
            return self.print_statement()
        if self.match(TokenType.RETURN):
            return self.return_statement()
        if self.match(TokenType.WHILE):
            return self.while_statement()
        if self.match(TokenType.LEFT_BRACE):
            return Block(self.block())
        return self.expression_statement()

    def for_statement(self) -> Stmt:
        self.consume(TokenType.LEFT_PAREN, "Expect '(' after 'for'.")
        initializer: Optional[Stmt]
        if self.match(TokenType.SEMICOLON):
            initializer = None
        elif self.match(TokenType.VAR):
            initializer = self.var_declaration()
        else:
            initializer = self.expression_statement()

        condition = None
        if not self.check(TokenType.SEMICOLON):
            condition = self.expression()
        self.consume(TokenType.SEMICOLON, "Expect ';' after loop condition.")

        increment = None
        if not self.check(TokenType.RIGHT_PAREN):
            increment = self.expression()
        self.consume(TokenType.RIGHT_PAREN, "Expect ')' after for clauses.")

        body = self.statement()
        return desugar_for(initializer, condition, increment, body)

    def if_statement(self) -> If:
        self.consume(TokenType.LEFT_PAREN, "Expect '(' after 'if'.")
        condition = self.expression()
        self.consume(TokenType.RIGHT_PAREN, "Expect ')' after if condition.")
        then_branch = self.statement()
        else_branch = None
        # binds to the nearest unmatched `if`
        if self.match(TokenType.ELSE):
            else_branch = self.statement()
        return If(condition, then_branch, else_branch)

    def print_statement(self) -> Print:
        value = self.expression()
        self.consume(TokenType.SEMICOLON, "Expect ';' after value.")
        return Print(value)

    def return_statement(self) -> Return:
        keyword = self.previous()
        value = None
        if not self.check(TokenType.SEMICOLON):
            value = self.expression()
        self.consume(TokenType.SEMICOLON, "Expect ';' after return value.")
        return Return(keyword, value)

    def while_statement(self) -> While:
        self.consume(TokenType.LEFT_PAREN, "Expect '(' after 'while'.")
        condition = self.expression()
        self.consume(TokenType.RIGHT_PAREN, "Expect ')' after condition.")
        body = self.statement()
        return While(condition, body)

    def block(self) -> List[Stmt]:
        statements: List[Stmt] = []
        while not self.check(TokenType.RIGHT_BRACE) and not self.is_at_end():
            stmt = self.declaration()
            if stmt is not None:
                statements.append(stmt)
        self.consume(TokenType.RIGHT_BRACE, "Expect '}' after block.")
        return statements

    def expression_statement(self) -> Expression:
        expr = self.expression()
        self.consume(TokenType.SEMICOLON, "Expect ';' after expression.")
        return Expression(expr)

    ###########################################################################
    # Expressions
    ###########################################################################

    def expression(self) -> Expr:
        return self.assignment()

    def assignment(self) -> Expr:
        expr = self.logic_or()
        if self.match(TokenType.EQUAL):
            equals = self.previous()
            value = self.assignment()
            if isinstance(expr, Variable):
                return Assign(expr.name, value)
            if isinstance(expr, Get):
                return Set(expr.object, expr.name, value)
            # reported, not raised: the parser is not confused
            self.report(equals, ParseErrorKind.INVALID_ASSIGN_TARGET)
        return expr

    def logic_or(self) -> Expr:
        expr = self.logic_and()
        while self.match(TokenType.OR):
            operator = self.previous()
            right = self.logic_and()
            expr = Logical(expr, operator, right)
        return expr

    def logic_and(self) -> Expr:
        expr = self.equality()
        while self.match(TokenType.AND):
            operator = self.previous()
            right = self.equality()
            expr = Logical(expr, operator, right)
        return expr

    def equality(self) -> Expr:
        return self.binary(self.comparison, TokenType.BANG_EQUAL, TokenType.EQUAL_EQUAL)

    def comparison(self) -> Expr:
        return self.binary(self.term, TokenType.GREATER, TokenType.GREATER_EQUAL,
                           TokenType.LESS, TokenType.LESS_EQUAL)

    def term(self) -> Expr:
        return self.binary(self.factor, TokenType.MINUS, TokenType.PLUS)

    def factor(self) -> Expr:
        return self.binary(self.unary, TokenType.SLASH, TokenType.STAR)

    def binary(self, operand, *operators: TokenType) -> Expr:
        """Parse a left-associative binary level over `operand`."""
        expr = operand()
        while self.match(*operators):
            operator = self.previous()
            right = operand()
            expr = Binary(expr, operator, right)
        return expr

    def unary(self) -> Expr:
        if self.match(TokenType.BANG, TokenType.MINUS):
            operator = self.previous()
            right = self.unary()
            return Unary(operator, right)
        return self.call()

    def call(self) -> Expr:
        expr = self.primary()
        while True:
            if self.match(TokenType.LEFT_PAREN):
                expr = self.finish_call(expr)
            elif self.match(TokenType.DOT):
                name = self.consume(TokenType.IDENTIFIER, "Expect property name after '.'.")
                expr = Get(expr, name)
            else:
                break
        return expr

    def finish_call(self, callee: Expr) -> Call:
        arguments: List[Expr] = []
        if not self.check(TokenType.RIGHT_PAREN):
            while True:
                if len(arguments) >= MAX_ARGUMENTS:
                    self.report(self.peek(), ParseErrorKind.MAX_ARG_NUMBER)
                arguments.append(self.expression())
                if not self.match(TokenType.COMMA):
                    break
        paren = self.consume(TokenType.RIGHT_PAREN, "Expect ')' after arguments.")
        return Call(callee, paren, arguments)

    def primary(self) -> Expr:
        if self.match(TokenType.FALSE):
            return Literal(False)
        if self.match(TokenType.TRUE):
            return Literal(True)
        if self.match(TokenType.NIL):
            return Literal(None)
        if self.match(TokenType.NUMBER, TokenType.STRING):
            return Literal(self.previous().literal)
        if self.match(TokenType.THIS):
            return This(self.previous())
        if self.match(TokenType.IDENTIFIER):
            return Variable(self.previous())
        if self.match(TokenType.LEFT_PAREN):
            expr = self.expression()
            self.consume(TokenType.RIGHT_PAREN, "Expect ')' after expression.")
            return Grouping(expr)
        raise ParseError(ParseErrorKind.EXPECTED_EXPRESSION, self.peek())

    ###########################################################################
    # Token helpers
    ###########################################################################

    def consume(self, kind: TokenType, message: str) -> Token:
        if self.check(kind):
            return self.advance()
        raise ParseError(ParseErrorKind.INVALID_CONSUME_TYPE, self.peek(), message)

    def match(self, *kinds: TokenType) -> bool:
        for kind in kinds:
            if self.check(kind):
                self.advance()
                return True
        return False

    def check(self, kind: TokenType) -> bool:
        if self.is_at_end():
            return False
        return self.peek().type == kind

    def advance(self) -> Token:
        if not self.is_at_end():
            self.current += 1
        return self.previous()

    def is_at_end(self) -> bool:
        return self.peek().type == TokenType.EOF

    def peek(self) -> Token:
        return self.tokens[self.current]

    def previous(self) -> Token:
        return self.tokens[self.current - 1]

    def report(self, token: Token, kind: ParseErrorKind, detail: Optional[str] = None) -> None:
        self.errors.append(ParseError(kind, token, detail))

    def synchronize(self) -> None:
        """Skip tokens until the start of the next statement."""
        self.advance()
        while not self.is_at_end():
            if self.previous().type == TokenType.SEMICOLON:
                return
            if self.peek().type in STATEMENT_STARTS:
                return
            self.advance()


def parse(tokens: List[Token]) -> List[Stmt]:
    """Parse a token list (ending with EOF) into a list of statements."""
    return Parser(tokens).parse()
