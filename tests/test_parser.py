import pytest

from treelox.ast import (
    Assign, Binary, Block, Call, Class, Expression, Function, If, Literal,
    Logical, Print, Set, Var, Variable, While,
)
from treelox.ast_printer import print_ast
from treelox.errors import ParseError, ParseErrorKind, ParseErrors
from treelox.parser import parse
from treelox.scanner import scan
from treelox.tokens import Token, TokenType


def parse_source(source):
    return parse(scan(source))


def parse_expr(source):
    stmt, = parse_source(source + ';')
    assert isinstance(stmt, Expression)
    return stmt.expression


def test_precedence_of_factor_over_term():
    expr = parse_expr('1 + 2 * 3')
    assert expr == Binary(
        Literal(1.0),
        Token(TokenType.PLUS, '+'),
        Binary(Literal(2.0), Token(TokenType.STAR, '*'), Literal(3.0)),
    )


@pytest.mark.parametrize('source, printed', [
    ('(1 + 2) * 3', '(* (group (+ 1 2)) 3)'),
    ('1 - 2 - 3', '(- (- 1 2) 3)'),
    ('!-x', '(! (- x))'),
    ('a or b and c', '(or a (and b c))'),
    ('a == b < c', '(== a (< b c))'),
    ('f(1)(2).g', '(. (call (call f 1) 2) g)'),
])
def test_expression_shapes(source, printed):
    assert print_ast(parse_expr(source)) == printed


def test_logical_nodes():
    expr = parse_expr('a or b')
    assert isinstance(expr, Logical)
    assert expr.operator.type == TokenType.OR


def test_assignment_is_right_associative():
    expr = parse_expr('a = b = 1')
    assert expr == Assign(Token(TokenType.IDENTIFIER, 'a'),
                          Assign(Token(TokenType.IDENTIFIER, 'b'), Literal(1.0)))


def test_property_assignment_becomes_set():
    expr = parse_expr('p.x = 1')
    assert isinstance(expr, Set)
    assert expr.object == Variable(Token(TokenType.IDENTIFIER, 'p'))
    assert expr.name.lexeme == 'x'


def test_invalid_assignment_target():
    with pytest.raises(ParseError) as excinfo:
        parse_source('1 = 2;')
    err = excinfo.value
    assert isinstance(err, ParseErrors)
    assert err.kind == ParseErrorKind.INVALID_ASSIGN_TARGET
    assert err.token.lexeme == '='


def test_missing_semicolon():
    with pytest.raises(ParseError) as excinfo:
        parse_source('print 1')
    err = excinfo.value
    assert err.kind == ParseErrorKind.INVALID_CONSUME_TYPE
    assert str(err) == "[line 1] at end -> Expect ';' after value."


def test_errors_are_collected_after_synchronizing():
    with pytest.raises(ParseErrors) as excinfo:
        parse_source('var = 1;\nprint ;\nprint 3;')
    errors = excinfo.value.errors
    assert [e.kind for e in errors] == [
        ParseErrorKind.INVALID_CONSUME_TYPE,
        ParseErrorKind.EXPECTED_EXPRESSION,
    ]
    assert [e.line for e in errors] == [1, 2]
    assert str(excinfo.value) == (
        "[line 1] at '=' -> Expect variable name.\n"
        "[line 2] at ';' -> Expected expression."
    )


def test_var_declaration_without_initializer():
    stmt, = parse_source('var a;')
    assert stmt == Var(Token(TokenType.IDENTIFIER, 'a'), None)


def test_for_loop_desugars_to_while_in_block():
    stmt, = parse_source('for (var i = 0; i < 3; i = i + 1) print i;')
    assert isinstance(stmt, Block)
    init, loop = stmt.statements
    assert isinstance(init, Var)
    assert isinstance(loop, While)
    assert loop.fresh_bindings
    assert isinstance(loop.increment, Assign)
    assert isinstance(loop.body, Print)
    assert print_ast(loop.condition) == '(< i 3)'


def test_for_loop_without_clauses():
    stmt, = parse_source('for (;;) print 1;')
    assert stmt == While(Literal(True), Print(Literal(1.0)))


def test_for_loop_with_expression_initializer_shares_variable():
    stmt, = parse_source('for (i = 0; i < 3;) print i;')
    assert isinstance(stmt, Block)
    loop = stmt.statements[1]
    assert not loop.fresh_bindings
    assert loop.increment is None


def test_dangling_else_binds_to_nearest_if():
    stmt, = parse_source('if (a) if (b) print 1; else print 2;')
    assert isinstance(stmt, If)
    assert stmt.else_branch is None
    assert isinstance(stmt.then_branch, If)
    assert stmt.then_branch.else_branch == Print(Literal(2.0))


def test_function_and_class_declarations():
    fun, klass = parse_source('fun add(a, b) { return a + b; } class A { m() { return 1; } }')
    assert isinstance(fun, Function)
    assert [p.lexeme for p in fun.params] == ['a', 'b']
    assert len(fun.body) == 1
    assert isinstance(klass, Class)
    assert [m.name.lexeme for m in klass.methods] == ['m']


def test_call_records_closing_paren():
    expr = parse_expr('f(1,\n 2)')
    assert isinstance(expr, Call)
    assert expr.paren.type == TokenType.RIGHT_PAREN
    assert expr.paren.line == 2
    assert len(expr.arguments) == 2


def test_too_many_arguments():
    args = ', '.join(['1'] * 256)
    with pytest.raises(ParseErrors) as excinfo:
        parse_source(f'f({args});')
    assert [e.kind for e in excinfo.value.errors] == [ParseErrorKind.MAX_ARG_NUMBER]


def test_too_many_parameters():
    params = ', '.join(f'p{i}' for i in range(256))
    with pytest.raises(ParseErrors) as excinfo:
        parse_source(f'fun f({params}) {{}}')
    assert [e.kind for e in excinfo.value.errors] == [ParseErrorKind.MAX_ARG_NUMBER]


def test_255_arguments_are_allowed():
    args = ', '.join(['1'] * 255)
    expr = parse_expr(f'f({args})')
    assert len(expr.arguments) == 255
