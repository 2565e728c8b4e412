import time
from typing import Any, List

from .callables import NativeFunction
from .environment import Environment


def native_clock(args: List[Any]) -> float:
    return time.time()


NATIVES = [
    NativeFunction('clock', 0, native_clock),
]


def populate_globals(env: Environment) -> Environment:
    """Define every native function in `env` (normally the global scope)."""
    for native in NATIVES:
        env.define(native.name, native)
    return env
