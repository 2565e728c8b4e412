"""CLI entry point for the Lox interpreter.

Usage:
    python -m treelox [-v|-vv|-vvv] [--grammar]              (REPL)
    python -m treelox [-v...] [--grammar] <script.lox>
    python -m treelox [-v...] --emit-ast <script.lox>
    python -m treelox [-v...] --ast <ast_json_file>
    python -m treelox [--grammar] --print-ast <script.lox>

Options:
  -v            Increase debug verbosity (can be repeated)
  --grammar     Parse with the Lark grammar instead of the hand-written parser
  --emit-ast    Parse the given .lox file and emit an AST JSON file
  --ast         Execute a previously emitted AST JSON file
  --print-ast   Print the parsed program in parenthesized form

Debug information is written to `debug.txt` in the current directory when
verbosity is greater than zero. Static errors exit with status 65, runtime
errors with 70 and a missing input file with 66.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Callable, List, Optional

from .ast import Stmt
from .ast_json import ast_from_obj, ast_to_obj
from .ast_printer import print_ast
from .errors import LoxError, LoxRuntimeError
from .grammar import parse_with_grammar
from .interpreter import Interpreter
from .parser import parse
from .resolver import resolve
from .scanner import scan

EXIT_STATIC_ERROR = 65
EXIT_NO_INPUT = 66
EXIT_RUNTIME_ERROR = 70


def parse_source(source: str) -> List[Stmt]:
    return parse(scan(source))


def read_file(path: Path) -> str:
    if not path.exists():
        print(f"Error: file {path} not found", file=sys.stderr)
        sys.exit(EXIT_NO_INPUT)
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def run_statements(statements: List[Stmt], interpreter: Interpreter) -> int:
    """Resolve and run `statements`; return a process exit status."""
    try:
        resolve(statements, interpreter)
    except LoxError as e:
        print(e, file=sys.stderr)
        return EXIT_STATIC_ERROR
    try:
        interpreter.interpret(statements)
    except LoxRuntimeError as e:
        print(f"Runtime error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    return 0


def run_prompt(interpreter: Interpreter, front_end: Callable[[str], List[Stmt]]) -> None:
    """Read-eval-print loop sharing one interpreter across lines."""
    while True:
        try:
            line = input('> ')
        except EOFError:
            print()
            return
        if not line.strip():
            continue
        try:
            statements = front_end(line)
        except LoxError as e:
            print(e, file=sys.stderr)
            continue
        run_statements(statements, interpreter)


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Lox language interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    parser.add_argument('--grammar', action='store_true', help='parse with the Lark grammar front end')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--emit-ast', metavar='LOX_FILE', help='emit AST JSON for the given .lox file')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    group.add_argument('--print-ast', action='store_true', help='print the parsed program instead of running it')
    parser.add_argument('script', nargs='?', help='Lox script (.lox) to execute; omit for a REPL')
    args = parser.parse_args(argv)

    front_end = parse_with_grammar if args.grammar else parse_source

    # Emit AST mode
    if args.emit_ast:
        program_file = Path(args.emit_ast)
        source = read_file(program_file)
        try:
            statements = front_end(source)
        except LoxError as e:
            print(e, file=sys.stderr)
            sys.exit(EXIT_STATIC_ERROR)
        out_path = program_file.with_name(program_file.name + '.ast.json')
        with open(out_path, 'w', encoding='utf-8') as out:
            json.dump(ast_to_obj(statements), out, ensure_ascii=False, indent=2)
        print(str(out_path))
        return

    interpreter = Interpreter(debug_level=args.v, debug_file='debug.txt' if args.v else None)
    try:
        # Execute from AST JSON
        if args.ast:
            statements = ast_from_obj(json.loads(read_file(Path(args.ast))))
            status = run_statements(statements, interpreter)
            if status:
                sys.exit(status)
            return

        # REPL
        if not args.script:
            if args.print_ast:
                parser.error('--print-ast needs a script file')
            run_prompt(interpreter, front_end)
            return

        # Default: execute (or print) a source file
        source = read_file(Path(args.script))
        try:
            statements = front_end(source)
        except LoxError as e:
            print(e, file=sys.stderr)
            sys.exit(EXIT_STATIC_ERROR)
        if args.print_ast:
            print(print_ast(statements))
            return
        status = run_statements(statements, interpreter)
        if status:
            sys.exit(status)
    finally:
        interpreter.close()


if __name__ == '__main__':
    main()
