"""Error taxonomy for the Lox pipeline.

Every pass raises its own exception family. Each exception carries a
`kind` (an Enum member whose value is the default message) and, where the
error has a source location, the offending token. Static passes (parser,
resolver) collect several errors and raise them together as an aggregate
that is itself an instance of the pass's error type.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, List, Optional


class ScanErrorKind(Enum):
    INVALID_CHARACTER = 'Invalid character.'
    UNTERMINATED_STRING = 'Unterminated string.'


class ParseErrorKind(Enum):
    EXPECTED_EXPRESSION = 'Expected expression.'
    INVALID_CONSUME_TYPE = 'Unexpected token.'
    INVALID_ASSIGN_TARGET = 'Invalid assignment target.'
    MAX_ARG_NUMBER = "Can't have more than 255 arguments."


class ResolveErrorKind(Enum):
    VARIABLE_NOT_INITIALIZED = "Can't read local variable in its own initializer."
    VARIABLE_ALREADY_EXISTS = 'Already a variable with this name in this scope.'
    TOP_LEVEL_RETURN = "Can't return from top-level code."
    THIS_OUTSIDE_CLASS = "Can't use 'this' outside of a class."


class RuntimeErrorKind(Enum):
    UNREACHABLE_CODE = 'Unreachable code.'
    EXPECTED_NUMBER_OPERAND = 'Operand must be a number.'
    EXPECTED_NUMBER_OPERANDS = 'Operands must be numbers.'
    EXPECTED_ADDABLE_OPERANDS = 'Operands must be two numbers or two strings.'
    INVALID_CALL_OBJECT_TYPE = 'Can only call functions and classes.'
    INVALID_ARGS_COUNT = 'Wrong number of arguments.'
    INVALID_OBJECT_PROPERTY = 'Only instances have properties.'
    UNDEFINED_PROPERTY = 'Undefined property.'
    STACK_OVERFLOW = 'Stack overflow.'


class BindingErrorKind(Enum):
    UNKNOWN_VARIABLE = 'Undefined variable.'


class LoxError(Exception):
    """Base class of every error reported to the user."""

    def __init__(self, kind: Enum, token: Any = None, detail: Optional[str] = None):
        self.kind = kind
        self.token = token
        self.detail = detail
        super().__init__(str(self))

    @property
    def message(self) -> str:
        return self.detail if self.detail is not None else self.kind.value

    @property
    def line(self) -> Optional[int]:
        return self.token.line if self.token is not None else None

    def location(self) -> str:
        if self.token is None:
            return ''
        if self.token.lexeme == '':
            return f"[line {self.token.line}] at end"
        return f"[line {self.token.line}] at '{self.token.lexeme}'"

    def __str__(self) -> str:
        where = self.location()
        return f"{where} -> {self.message}" if where else self.message


class ScanError(LoxError):
    """Raised by the scanner. Carries a line/offset instead of a token."""

    def __init__(self, kind: ScanErrorKind, line: int, offset: int, detail: Optional[str] = None):
        self.scan_line = line
        self.offset = offset
        super().__init__(kind, None, detail)

    @property
    def line(self) -> int:
        return self.scan_line

    def location(self) -> str:
        return f"[line {self.scan_line}] at offset {self.offset}"


class ParseError(LoxError):
    pass


class ResolveError(LoxError):
    pass


class LoxRuntimeError(LoxError):
    pass


class BindingError(LoxRuntimeError):
    """Raised by an Environment when a name has no binding."""


class _Aggregate:
    """Mixin for errors that bundle every error a static pass found."""

    def _bundle(self, errors: List[LoxError]) -> None:
        self.errors = list(errors)
        first = self.errors[0]
        LoxError.__init__(self, first.kind, first.token, first.detail)

    def __str__(self) -> str:
        return '\n'.join(str(e) for e in self.errors)


class ParseErrors(_Aggregate, ParseError):
    def __init__(self, errors: List[ParseError]):
        self._bundle(errors)


class ResolveErrors(_Aggregate, ResolveError):
    def __init__(self, errors: List[ResolveError]):
        self._bundle(errors)


class ReturnSignal(Exception):
    """Internal exception to unwind a `return` statement to its call site."""

    def __init__(self, value: Any):
        super().__init__('return')
        self.value = value
