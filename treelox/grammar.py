"""Grammar-driven front end for Lox.

This module is an alternative to `scan` + `parse`: the source text is fed
into a Lark LALR parser configured with a grammar for the same language,
and the resulting parse tree is transformed into exactly the AST that the
recursive-descent parser builds (same node classes, same `for`
desugaring, same assignment-target and argument-count checks). It is used
by `python -m treelox --grammar` and to cross-check the hand-written
parser in the test-suite.

Unlike the recursive-descent parser it stops at the first syntax error.
"""

from __future__ import annotations

from typing import Any, List, Optional

from lark import Lark, Transformer, Tree, v_args
from lark.exceptions import UnexpectedCharacters, UnexpectedInput, UnexpectedToken, VisitError

from .ast import (
    Stmt, Literal, Grouping, Unary, Binary, Logical, Variable, Assign,
    Call, Get, Set, This, Expression, Print, Var, Block, If, While,
    Function, Class, Return,
)
from .errors import ParseError, ParseErrorKind, ParseErrors, ScanError, ScanErrorKind
from .parser import MAX_ARGUMENTS, desugar_for
from .scanner import Scanner, byte_offsets
from .tokens import KEYWORDS, PUNCTUATION, Token, TokenType


LOX_GRAMMAR = r"""
    ?start: program
    program: declaration*

    // Declarations and statements
    ?declaration: class_decl
                | fun_decl
                | var_decl
                | statement

    class_decl: "class" IDENTIFIER "{" function* "}"
    fun_decl: "fun" function
    function: IDENTIFIER "(" [parameters] ")" block
    parameters: IDENTIFIER ("," IDENTIFIER)*
    var_decl: "var" IDENTIFIER ["=" expression] ";"

    ?statement: expr_stmt
              | for_stmt
              | if_stmt
              | print_stmt
              | return_stmt
              | while_stmt
              | block

    expr_stmt: expression ";"
    for_stmt: "for" "(" for_init [expression] ";" [expression] ")" statement
    for_init: var_decl
            | expr_stmt
            | ";"
    if_stmt: "if" "(" expression ")" statement ["else" statement]
    print_stmt: "print" expression ";"
    return_stmt: RETURN [expression] ";"
    while_stmt: "while" "(" expression ")" statement
    block: "{" declaration* "}"

    // Expressions with precedence, lowest first
    ?expression: assignment
    ?assignment: call EQUAL assignment -> assign
               | logic_or
    ?logic_or: logic_and (OR logic_and)*
    ?logic_and: equality (AND equality)*
    ?equality: comparison ((BANG_EQUAL | EQUAL_EQUAL) comparison)*
    ?comparison: term ((GREATER | GREATER_EQUAL | LESS | LESS_EQUAL) term)*
    ?term: factor ((MINUS | PLUS) factor)*
    ?factor: unary ((SLASH | STAR) unary)*
    ?unary: (BANG | MINUS) unary
          | call
    ?call: primary
         | call "(" [arguments] ")" -> call
         | call "." IDENTIFIER -> get
    arguments: expression ("," expression)*
    ?primary: "true" -> true
            | "false" -> false
            | "nil" -> nil
            | NUMBER -> number
            | STRING -> string
            | THIS -> this
            | IDENTIFIER -> variable
            | "(" expression ")" -> grouping

    // Tokens
    EQUAL: "="
    OR: "or"
    AND: "and"
    RETURN: "return"
    THIS: "this"
    BANG_EQUAL: "!="
    EQUAL_EQUAL: "=="
    GREATER_EQUAL: ">="
    GREATER: ">"
    LESS_EQUAL: "<="
    LESS: "<"
    MINUS: "-"
    PLUS: "+"
    SLASH: "/"
    STAR: "*"
    BANG: "!"
    NUMBER: /\d+(\.\d+)?/
    STRING: /"[^"]*"/
    IDENTIFIER: /[A-Za-z_][A-Za-z0-9_]*/

    COMMENT: /\/\/[^\n]*/
    %import common.WS
    %ignore WS
    %ignore COMMENT
"""


LOX_PARSER = Lark(
    LOX_GRAMMAR,
    parser='lalr',
    lexer='basic',
    propagate_positions=True,
    maybe_placeholders=True,
)


def convert_token(tok: Any, offsets: Optional[List[int]] = None) -> Token:
    """Turn a Lark token into a Lox `Token`.

    Lark positions count characters; `offsets` (from `byte_offsets`) turns
    them into the byte offsets the scanner uses for spans.
    """
    line = tok.line or 0
    start = tok.start_pos or 0
    end = tok.end_pos if tok.end_pos is not None else start
    if offsets is not None:
        start, end = offsets[start], offsets[end]
    if tok.type == '$END':
        return Token.eof(line, start)
    text = str(tok)
    if tok.type == 'NUMBER':
        return Token(TokenType.NUMBER, text, float(text), line, (start, end))
    if tok.type == 'STRING':
        return Token(TokenType.STRING, text, text[1:-1], line, (start, end))
    if tok.type == 'IDENTIFIER':
        return Token(KEYWORDS.get(text, TokenType.IDENTIFIER), text, None, line, (start, end))
    kind = PUNCTUATION.get(text) or KEYWORDS.get(text, TokenType.IDENTIFIER)
    return Token(kind, text, None, line, (start, end))


def check_argument_counts(tree: Tree, source: str) -> None:
    """Reject calls with too many arguments, pointing at the first extra one."""
    for node in tree.find_data('arguments'):
        if len(node.children) <= MAX_ARGUMENTS:
            continue
        extra = node.children[MAX_ARGUMENTS]
        if isinstance(extra, Tree):
            token = Scanner(source).token_at(extra.meta.start_pos, extra.meta.line)
        else:
            token = convert_token(extra, byte_offsets(source))
        raise ParseError(ParseErrorKind.MAX_ARG_NUMBER, token)


class LoxTransformer(Transformer):
    """Transforms the Lark parse tree into the Lox AST."""

    def __init__(self, source: str):
        super().__init__()
        self.offsets = byte_offsets(source)

    def token(self, tok) -> Token:
        return convert_token(tok, self.offsets)

    def program(self, items):
        return list(items)

    # Declarations
    def class_decl(self, items):
        name = items[0]
        return Class(self.token(name), list(items[1:]))

    def fun_decl(self, items):
        return items[0]

    def function(self, items):
        name, params, body = items
        params = params or []
        if len(params) > MAX_ARGUMENTS:
            raise ParseError(ParseErrorKind.MAX_ARG_NUMBER, params[MAX_ARGUMENTS],
                             "Can't have more than 255 parameters.")
        return Function(self.token(name), params, body.statements)

    def parameters(self, items):
        return [self.token(tok) for tok in items]

    def var_decl(self, items):
        name, initializer = items
        return Var(self.token(name), initializer)

    # Statements
    def expr_stmt(self, items):
        return Expression(items[0])

    def for_init(self, items):
        return items[0] if items else None

    def for_stmt(self, items):
        initializer, condition, increment, body = items
        return desugar_for(initializer, condition, increment, body)

    def if_stmt(self, items):
        condition, then_branch, else_branch = items
        return If(condition, then_branch, else_branch)

    def print_stmt(self, items):
        return Print(items[0])

    def return_stmt(self, items):
        keyword, value = items
        return Return(self.token(keyword), value)

    def while_stmt(self, items):
        condition, body = items
        return While(condition, body)

    def block(self, items):
        return Block(list(items))

    # Expressions
    def assign(self, items):
        target, equals, value = items
        if isinstance(target, Variable):
            return Assign(target.name, value)
        if isinstance(target, Get):
            return Set(target.object, target.name, value)
        raise ParseError(ParseErrorKind.INVALID_ASSIGN_TARGET, self.token(equals))

    def fold_binary(self, items, node=Binary):
        # items pattern: expr (op expr)*, folded left-associatively
        left = items[0]
        i = 1
        while i < len(items):
            operator = self.token(items[i])
            right = items[i + 1]
            left = node(left, operator, right)
            i += 2
        return left

    def logic_or(self, items):
        return self.fold_binary(items, Logical)

    def logic_and(self, items):
        return self.fold_binary(items, Logical)

    def equality(self, items):
        return self.fold_binary(items)

    def comparison(self, items):
        return self.fold_binary(items)

    def term(self, items):
        return self.fold_binary(items)

    def factor(self, items):
        return self.fold_binary(items)

    def unary(self, items):
        operator, right = items
        return Unary(self.token(operator), right)

    @v_args(meta=True)
    def call(self, meta, items):
        callee, arguments = items
        # the closing paren is filtered out of the tree; it ends the rule
        end = self.offsets[meta.end_pos]
        paren = Token(TokenType.RIGHT_PAREN, ')', None, meta.end_line, (end - 1, end))
        return Call(callee, paren, arguments or [])

    def arguments(self, items):
        return list(items)

    def get(self, items):
        obj, name = items
        return Get(obj, self.token(name))

    def true(self, items):
        return Literal(True)

    def false(self, items):
        return Literal(False)

    def nil(self, items):
        return Literal(None)

    def number(self, items):
        return Literal(float(items[0]))

    def string(self, items):
        return Literal(str(items[0])[1:-1])

    def this(self, items):
        return This(self.token(items[0]))

    def variable(self, items):
        return Variable(self.token(items[0]))

    def grouping(self, items):
        return Grouping(items[0])


def parse_with_grammar(source: str) -> List[Stmt]:
    """Parse Lox source text into statements using the Lark grammar."""
    offsets = byte_offsets(source)
    try:
        tree = LOX_PARSER.parse(source)
    except UnexpectedCharacters as err:
        offset = offsets[err.pos_in_stream]
        if err.char == '"':
            raise ScanError(ScanErrorKind.UNTERMINATED_STRING, err.line, offset) from None
        raise ScanError(ScanErrorKind.INVALID_CHARACTER, err.line, offset,
                        f"Invalid character {err.char!r}.") from None
    except UnexpectedToken as err:
        expected = ', '.join(sorted(err.expected))
        error = ParseError(ParseErrorKind.INVALID_CONSUME_TYPE, convert_token(err.token, offsets),
                           f"Expected one of: {expected}.")
        raise ParseErrors([error]) from None
    except UnexpectedInput as err:
        raise ParseErrors([ParseError(ParseErrorKind.INVALID_CONSUME_TYPE, None, str(err))]) from None
    try:
        check_argument_counts(tree, source)
        return LoxTransformer(source).transform(tree)
    except ParseError as err:
        raise ParseErrors([err]) from None
    except VisitError as err:
        if isinstance(err.orig_exc, ParseError):
            raise ParseErrors([err.orig_exc]) from None
        raise
