# Lox language package
# This package provides a scanner, parser, resolver and tree-walking
# interpreter for the Lox scripting language.
from typing import Optional

from .errors import (
    LoxError, ScanError, ParseError, ParseErrors, ResolveError, ResolveErrors,
    LoxRuntimeError, BindingError,
)
from .interpreter import Interpreter
from .parser import parse
from .resolver import resolve
from .scanner import scan


def run_source(source: str, interpreter: Optional[Interpreter] = None) -> Interpreter:
    """Scan, parse, resolve and interpret `source`; return the interpreter."""
    if interpreter is None:
        interpreter = Interpreter()
    statements = parse(scan(source))
    resolve(statements, interpreter)
    interpreter.interpret(statements)
    return interpreter


__all__ = [
    'scan',
    'parse',
    'resolve',
    'run_source',
    'Interpreter',
    'LoxError',
    'ScanError',
    'ParseError',
    'ParseErrors',
    'ResolveError',
    'ResolveErrors',
    'LoxRuntimeError',
    'BindingError',
]
