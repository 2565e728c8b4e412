import pytest

from treelox.errors import ResolveError, ResolveErrorKind, ResolveErrors
from treelox.interpreter import Interpreter
from treelox.parser import parse
from treelox.resolver import resolve
from treelox.scanner import scan


def resolve_source(source):
    interpreter = Interpreter()
    statements = parse(scan(source))
    resolve(statements, interpreter)
    return interpreter, statements


def resolve_errors(source):
    with pytest.raises(ResolveErrors) as excinfo:
        resolve_source(source)
    return excinfo.value.errors


def test_local_variable_in_its_own_initializer():
    errors = resolve_errors('{ var a = a; }')
    assert [e.kind for e in errors] == [ResolveErrorKind.VARIABLE_NOT_INITIALIZED]
    assert errors[0].token.lexeme == 'a'


def test_shadowing_local_in_its_own_initializer():
    errors = resolve_errors('var a = 1; { var a = a; }')
    assert [e.kind for e in errors] == [ResolveErrorKind.VARIABLE_NOT_INITIALIZED]


def test_global_variable_in_its_own_initializer():
    with pytest.raises(ResolveError) as excinfo:
        resolve_source('var a = a;')
    assert excinfo.value.kind == ResolveErrorKind.VARIABLE_NOT_INITIALIZED
    assert str(excinfo.value) == "[line 1] at 'a' -> Can't read variable in its own initializer."


def test_global_redeclaration_is_allowed():
    interpreter, _ = resolve_source('var a = 1; var a = 2; var b = a;')
    assert interpreter.locals == {}


def test_duplicate_variable_in_function_body():
    errors = resolve_errors('fun f() {\n  var x = 1;\n  var x = 2;\n}')
    assert [e.kind for e in errors] == [ResolveErrorKind.VARIABLE_ALREADY_EXISTS]
    assert errors[0].line == 3
    assert errors[0].message == "Already a variable named 'x' in this scope."


def test_redeclaration_in_nested_block_is_legal():
    resolve_source('fun f() { var x = 1; { var x = 2; } }')


def test_duplicate_parameter():
    errors = resolve_errors('fun f(a, a) {}')
    assert [e.kind for e in errors] == [ResolveErrorKind.VARIABLE_ALREADY_EXISTS]


def test_top_level_return():
    errors = resolve_errors('return 1;')
    assert [e.kind for e in errors] == [ResolveErrorKind.TOP_LEVEL_RETURN]


def test_this_outside_class():
    errors = resolve_errors('print this;\nfun f() { return this; }')
    assert [e.kind for e in errors] == [ResolveErrorKind.THIS_OUTSIDE_CLASS] * 2
    assert [e.line for e in errors] == [1, 2]


def test_all_errors_are_reported():
    errors = resolve_errors('return 1;\n{ var a = 1; var a = 2; }\nprint this;')
    assert [e.kind for e in errors] == [
        ResolveErrorKind.TOP_LEVEL_RETURN,
        ResolveErrorKind.VARIABLE_ALREADY_EXISTS,
        ResolveErrorKind.THIS_OUTSIDE_CLASS,
    ]


def test_block_local_distance():
    interpreter, statements = resolve_source('{ var a = 1; { print a; } }')
    inner = statements[0].statements[1]
    variable = inner.statements[0].expression
    assert interpreter.locals[variable.node_id] == 1


def test_globals_are_not_recorded():
    interpreter, _ = resolve_source('var g = 1; print g; g = 2;')
    assert interpreter.locals == {}


def test_closure_distance():
    interpreter, statements = resolve_source(
        'fun outer() { var x = 1; fun inner() { return x; } }'
    )
    inner = statements[0].body[1]
    variable = inner.body[0].value
    assert interpreter.locals[variable.node_id] == 1


def test_for_loop_variable_distance():
    interpreter, statements = resolve_source('for (var i = 0; i < 1; i = i + 1) print i;')
    loop = statements[0].statements[1]
    assert interpreter.locals[loop.condition.left.node_id] == 0
    assert interpreter.locals[loop.body.expression.node_id] == 0
    assert interpreter.locals[loop.increment.node_id] == 0


def test_this_in_method_distance():
    interpreter, statements = resolve_source('class A { m() { return this; } }')
    method = statements[0].methods[0]
    this = method.body[0].value
    assert interpreter.locals[this.node_id] == 1


def test_function_can_reference_itself():
    interpreter, statements = resolve_source('{ fun f() { return f; } }')
    fun = statements[0].statements[0]
    assert interpreter.locals[fun.body[0].value.node_id] == 1
