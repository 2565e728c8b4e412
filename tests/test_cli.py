import io
import json
import sys

import pytest

from treelox.__main__ import (
    EXIT_NO_INPUT, EXIT_RUNTIME_ERROR, EXIT_STATIC_ERROR, main,
)


def write_script(tmp_path, source, name='script.lox'):
    path = tmp_path / name
    path.write_text(source, encoding='utf-8')
    return path


def test_run_script(tmp_path, capsys):
    path = write_script(tmp_path, 'var a = "hi";\nprint a;\n')
    main([str(path)])
    assert capsys.readouterr().out == 'hi\n'


def test_run_script_with_grammar_front_end(tmp_path, capsys):
    path = write_script(tmp_path, 'for (var i = 0; i < 2; i = i + 1) print i;')
    main(['--grammar', str(path)])
    assert capsys.readouterr().out == '0\n1\n'


def test_missing_script(tmp_path, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main([str(tmp_path / 'nope.lox')])
    assert excinfo.value.code == EXIT_NO_INPUT
    assert 'not found' in capsys.readouterr().err


def test_parse_error_exit_status(tmp_path, capsys):
    path = write_script(tmp_path, 'print 1')
    with pytest.raises(SystemExit) as excinfo:
        main([str(path)])
    assert excinfo.value.code == EXIT_STATIC_ERROR
    assert "Expect ';' after value." in capsys.readouterr().err


def test_resolve_error_exit_status(tmp_path, capsys):
    path = write_script(tmp_path, 'print 1;\nreturn 2;')
    with pytest.raises(SystemExit) as excinfo:
        main([str(path)])
    assert excinfo.value.code == EXIT_STATIC_ERROR
    captured = capsys.readouterr()
    # nothing runs when resolution fails
    assert captured.out == ''
    assert "Can't return from top-level code." in captured.err


def test_runtime_error_exit_status(tmp_path, capsys):
    path = write_script(tmp_path, 'print 1;\nprint -"x";\nprint 2;')
    with pytest.raises(SystemExit) as excinfo:
        main([str(path)])
    assert excinfo.value.code == EXIT_RUNTIME_ERROR
    captured = capsys.readouterr()
    assert captured.out == '1\n'
    assert captured.err.strip() == "Runtime error: [line 2] at '-' -> Operand must be a number."


def test_emit_ast_and_run_it(tmp_path, capsys):
    path = write_script(tmp_path, 'fun sq(x) { return x * x; }\nprint sq(4);')
    main(['--emit-ast', str(path)])
    out_path = tmp_path / 'script.lox.ast.json'
    assert capsys.readouterr().out.strip() == str(out_path)
    with open(out_path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    assert [node['type'] for node in data] == ['Function', 'Print']

    main(['--ast', str(out_path)])
    assert capsys.readouterr().out == '16\n'


def test_print_ast(tmp_path, capsys):
    path = write_script(tmp_path, 'print 1 + 2 * 3;\nvar a = -b;')
    main(['--print-ast', str(path)])
    assert capsys.readouterr().out.splitlines() == [
        '(print (+ 1 (* 2 3)))',
        '(var a (- b))',
    ]


def test_repl(monkeypatch, capsys):
    lines = 'var a = 1;\n\nprint a + 1;\nprint nope;\nprint (;\nprint a;\n'
    monkeypatch.setattr(sys, 'stdin', io.StringIO(lines))
    main([])
    captured = capsys.readouterr()
    assert captured.out.replace('> ', '').split() == ['2', '1']
    assert "Undefined variable 'nope'." in captured.err
    assert 'Expected expression.' in captured.err


def test_verbose_writes_debug_file(tmp_path, monkeypatch, capsys):
    path = write_script(tmp_path, 'print 1;')
    monkeypatch.chdir(tmp_path)
    main(['-v', str(path)])
    assert capsys.readouterr().out == '1\n'
    trace = (tmp_path / 'debug.txt').read_text(encoding='utf-8')
    assert 'execute Print' in trace


def test_repl_survives_stack_overflow(monkeypatch, capsys):
    lines = (
        'fun count(n) { if (n == 0) return 0; return 1 + count(n - 1); }\n'
        'fun forever(n) { return forever(n + 1); }\n'
        'print count(200);\n'
        'forever(0);\n'
        'print "still alive";\n'
    )
    monkeypatch.setattr(sys, 'stdin', io.StringIO(lines))
    main([])
    captured = capsys.readouterr()
    assert captured.out.replace('> ', '').split() == ['200', 'still alive']
    assert 'Runtime error:' in captured.err
    assert 'Stack overflow.' in captured.err


def test_stack_overflow_exit_status(tmp_path):
    path = write_script(tmp_path, 'fun f() { f(); } f();')
    with pytest.raises(SystemExit) as excinfo:
        main([str(path)])
    assert excinfo.value.code == EXIT_RUNTIME_ERROR
