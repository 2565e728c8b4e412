from pathlib import Path

import pytest

from treelox.ast import Call, Class, Function
from treelox.errors import ParseError, ParseErrorKind, ScanError, ScanErrorKind
from treelox.grammar import parse_with_grammar
from treelox.parser import parse
from treelox.scanner import scan

EXAMPLES = Path(__file__).parent.parent / 'examples'

SNIPPETS = [
    '1 + 2 * 3;',
    'print -(1 - 2) / 3 >= 4 == !true;',
    'var a; var b = "str"; a = b = nil;',
    'print a or b and c or false;',
    'if (x) print 1; else if (y) print 2; else { print 3; }',
    'if (a) if (b) print 1; else print 2;',
    'while (i < 10) { i = i + 1; }',
    'for (var i = 0; i < 3; i = i + 1) print i;',
    'for (i = 0; ; ) { }',
    'for (;;) print 1;',
    'fun f() { return; } fun g(a, b, c) { return a(b)(c); }',
    'class A { init(x) { this.x = x; } get() { return this.x; } }',
    'p.x.y = q.z(1, 2).w;',
    '// only a comment\n',
    '',
]


@pytest.mark.parametrize('source', SNIPPETS)
def test_grammar_matches_parser(source):
    assert parse_with_grammar(source) == parse(scan(source))


@pytest.mark.parametrize('path', sorted(EXAMPLES.glob('*.lox')), ids=lambda p: p.name)
def test_grammar_matches_parser_on_examples(path):
    with open(path, 'r', encoding='utf-8') as f:
        source = f.read()
    assert parse_with_grammar(source) == parse(scan(source))


def test_grammar_builds_class_methods():
    klass, = parse_with_grammar('class A { m(a) { } n() { } }')
    assert isinstance(klass, Class)
    assert all(isinstance(m, Function) for m in klass.methods)
    assert [m.name.lexeme for m in klass.methods] == ['m', 'n']


def test_grammar_call_paren_position():
    stmt, = parse_with_grammar('f(1,\n2);')
    assert isinstance(stmt.expression, Call)
    assert stmt.expression.paren.lexeme == ')'
    assert stmt.expression.paren.line == 2


def test_grammar_invalid_assignment_target():
    with pytest.raises(ParseError) as excinfo:
        parse_with_grammar('(a) = 1;')
    assert excinfo.value.kind == ParseErrorKind.INVALID_ASSIGN_TARGET


def test_grammar_unexpected_token():
    with pytest.raises(ParseError) as excinfo:
        parse_with_grammar('print 1')
    assert excinfo.value.kind == ParseErrorKind.INVALID_CONSUME_TYPE
    assert str(excinfo.value).startswith('[line 1] at end -> Expected one of:')


def test_grammar_too_many_arguments():
    args = ', '.join(['1'] * 256)
    with pytest.raises(ParseError) as excinfo:
        parse_with_grammar(f'f({args});')
    assert excinfo.value.kind == ParseErrorKind.MAX_ARG_NUMBER


def test_grammar_invalid_character():
    with pytest.raises(ScanError) as excinfo:
        parse_with_grammar('print @;')
    assert excinfo.value.kind == ScanErrorKind.INVALID_CHARACTER
    assert excinfo.value.offset == 6


def test_grammar_unterminated_string():
    with pytest.raises(ScanError) as excinfo:
        parse_with_grammar('print "abc;')
    assert excinfo.value.kind == ScanErrorKind.UNTERMINATED_STRING


@pytest.mark.parametrize('last', ['1', 'x', '-y', '(y)', 'a.b', 'true', '"é"'])
def test_grammar_too_many_arguments_points_at_first_extra(last):
    args = ', '.join(['"é"'] * 255 + [last])
    source = f'f({args});'
    with pytest.raises(ParseError) as grammar_err:
        parse_with_grammar(source)
    with pytest.raises(ParseError) as parser_err:
        parse(scan(source))
    expected = parser_err.value.token
    assert grammar_err.value.token == expected
    assert grammar_err.value.token.span == expected.span
    assert grammar_err.value.token.line == expected.line


def test_grammar_invalid_assignment_target_location():
    source = '(a)\n = 1;'
    with pytest.raises(ParseError) as grammar_err:
        parse_with_grammar(source)
    with pytest.raises(ParseError) as parser_err:
        parse(scan(source))
    token = grammar_err.value.token
    assert token.lexeme == '='
    assert token.line == 2
    assert token.span == (5, 6)
    assert token.span == parser_err.value.token.span
    assert str(grammar_err.value) == str(parser_err.value)


def test_grammar_spans_are_bytes():
    source = 'print "héllo" + name;'
    stmt, = parse_with_grammar(source)
    expected, = parse(scan(source))
    assert stmt.expression.operator.span == expected.expression.operator.span == (15, 16)
    assert stmt.expression.right.name.span == expected.expression.right.name.span == (17, 21)


def test_grammar_invalid_character_offset_in_bytes():
    with pytest.raises(ScanError) as excinfo:
        parse_with_grammar('print "é"; @')
    assert excinfo.value.offset == 12
