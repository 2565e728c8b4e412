import pytest

from treelox.ast_printer import print_ast
from treelox.parser import parse
from treelox.scanner import scan


@pytest.mark.parametrize('source, printed', [
    ('1 + 2 * 3;', '(; (+ 1 (* 2 3)))'),
    ('print (x);', '(print (group x))'),
    ('print "s" + nil;', '(print (+ "s" nil))'),
    ('var a = 1.5;', '(var a 1.5)'),
    ('var a;', '(var a)'),
    ('{ a = true; }', '(block (; (= a true)))'),
    ('while (x) print x;', '(while x (print x))'),
    ('if (x) print 1; else print 2;', '(if-else x (print 1) (print 2))'),
    ('fun f(a, b) { return a; }', '(fun f (a b) (return a))'),
    ('fun g() { return; }', '(fun g () (return))'),
    ('class C { m() { this.x = 1; } }', '(class C (fun m () (; (= (. this x) 1))))'),
    ('f(1, 2);', '(; (call f 1 2))'),
])
def test_print_statement(source, printed):
    stmt, = parse(scan(source))
    assert print_ast(stmt) == printed


def test_print_for_loop():
    stmt, = parse(scan('for (var i = 0; i < 2; i = i + 1) print i;'))
    assert print_ast(stmt) == '(block (var i 0) (while (< i 2) (print i) (= i (+ i 1))))'


def test_print_program():
    statements = parse(scan('var a = 1;\nprint a;'))
    assert print_ast(statements) == '(var a 1)\n(print a)'
