from __future__ import annotations

from typing import Any, Dict, Optional

from .errors import BindingError, BindingErrorKind
from .tokens import Token


class Environment:
    """A scope mapping names to values, linked to its enclosing scope.

    Environments are shared: a block, every closure created inside it and
    the call stack may all hold the same one. Links only ever point to a
    lexical ancestor, so no cycles form.
    """

    def __init__(self, enclosing: Optional['Environment'] = None):
        self.enclosing = enclosing
        self.values: Dict[str, Any] = {}

    def define(self, name: str, value: Any) -> None:
        # redefinition is allowed (globals in the REPL rely on it)
        self.values[name] = value

    def get(self, name: Token) -> Any:
        if name.lexeme in self.values:
            return self.values[name.lexeme]
        if self.enclosing is not None:
            return self.enclosing.get(name)
        raise BindingError(BindingErrorKind.UNKNOWN_VARIABLE, name,
                           f"Undefined variable '{name.lexeme}'.")

    def assign(self, name: Token, value: Any) -> None:
        if name.lexeme in self.values:
            self.values[name.lexeme] = value
            return
        if self.enclosing is not None:
            self.enclosing.assign(name, value)
            return
        raise BindingError(BindingErrorKind.UNKNOWN_VARIABLE, name,
                           f"Undefined variable '{name.lexeme}'.")

    def ancestor(self, distance: int) -> 'Environment':
        env = self
        for _ in range(distance):
            env = env.enclosing
        return env

    def get_at(self, distance: int, name: Token) -> Any:
        env = self.ancestor(distance)
        if name.lexeme not in env.values:
            # a resolved distance always lands on the declaring scope
            raise BindingError(BindingErrorKind.UNKNOWN_VARIABLE, name,
                               f"Undefined variable '{name.lexeme}'.")
        return env.values[name.lexeme]

    def assign_at(self, distance: int, name: Token, value: Any) -> None:
        self.ancestor(distance).values[name.lexeme] = value

    def copy(self) -> 'Environment':
        """Return a sibling scope with the same parent and current bindings."""
        env = Environment(self.enclosing)
        env.values = dict(self.values)
        return env

    def __repr__(self) -> str:
        depth = 0
        env = self.enclosing
        while env is not None:
            depth += 1
            env = env.enclosing
        return f"<Environment depth={depth} names={sorted(self.values)}>"
