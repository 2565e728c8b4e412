"""Runtime value helpers for Lox.

Lox values map onto Python objects: Number is `float`, String is `str`,
Boolean is `bool` and nil is `None`. Functions, classes and instances are
the objects defined in `treelox.callables`. This module holds the rules
that the interpreter applies to all of them: truthiness, equality, and
conversion to text.
"""

from __future__ import annotations

import math
from typing import Any

from .callables import LoxClass, LoxFunction, LoxInstance, NativeFunction


def is_number(value: Any) -> bool:
    # bool is a subclass of int, never a Lox number
    return isinstance(value, float) and not isinstance(value, bool)


def is_truthy(value: Any) -> bool:
    """nil and false are falsy; everything else, 0 and "" included, is truthy."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return True


def values_equal(a: Any, b: Any) -> bool:
    """Lox `==`: no type coercion, functions/classes/instances by identity."""
    if a is None or b is None:
        return a is None and b is None
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    if is_number(a) and is_number(b):
        return a == b
    if isinstance(a, str) and isinstance(b, str):
        return a == b
    return a is b


def format_number(value: float) -> str:
    if math.isnan(value):
        return 'nan'
    if math.isinf(value):
        return 'inf' if value > 0 else '-inf'
    if value == 0 and math.copysign(1.0, value) < 0:
        return '-0'
    if value.is_integer():
        return str(int(value))
    return repr(value)


def stringify(value: Any) -> str:
    """Convert a Lox value to the text `print` writes."""
    if value is None:
        return 'nil'
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if is_number(value):
        return format_number(value)
    return str(value)


def type_name(value: Any) -> str:
    """Return the Lox type name of a runtime value, for diagnostics."""
    if value is None:
        return 'nil'
    if isinstance(value, bool):
        return 'boolean'
    if is_number(value):
        return 'number'
    if isinstance(value, str):
        return 'string'
    if isinstance(value, (LoxFunction, NativeFunction)):
        return 'function'
    if isinstance(value, LoxClass):
        return 'class'
    if isinstance(value, LoxInstance):
        return 'instance'
    return type(value).__name__
