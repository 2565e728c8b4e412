"""Callable runtime objects: functions, natives, classes and instances."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

from .ast import Function
from .environment import Environment
from .errors import LoxRuntimeError, ReturnSignal, RuntimeErrorKind
from .tokens import Token

if TYPE_CHECKING:
    from .interpreter import Interpreter


class LoxCallable(ABC):
    @abstractmethod
    def arity(self) -> int:
        ...

    @abstractmethod
    def call(self, interpreter: 'Interpreter', arguments: List[Any]) -> Any:
        ...


class LoxFunction(LoxCallable):
    """A user-defined function paired with the environment it closes over."""

    def __init__(self, declaration: Function, closure: Environment, is_initializer: bool = False):
        self.declaration = declaration
        self.closure = closure
        self.is_initializer = is_initializer

    @property
    def name(self) -> str:
        return self.declaration.name.lexeme

    def arity(self) -> int:
        return len(self.declaration.params)

    def bind(self, instance: 'LoxInstance') -> 'LoxFunction':
        """Return a copy of this method whose closure defines `this`."""
        env = Environment(self.closure)
        env.define('this', instance)
        return LoxFunction(self.declaration, env, self.is_initializer)

    def call(self, interpreter: 'Interpreter', arguments: List[Any]) -> Any:
        env = Environment(self.closure)
        for param, argument in zip(self.declaration.params, arguments):
            env.define(param.lexeme, argument)
        try:
            interpreter.execute_block(self.declaration.body, env)
        except ReturnSignal as signal:
            if self.is_initializer:
                return self.closure.values['this']
            return signal.value
        if self.is_initializer:
            return self.closure.values['this']
        return None

    def __repr__(self) -> str:
        return f"<fn {self.name}>"


@dataclass
class NativeFunction(LoxCallable):
    """A function implemented in Python. `fn` receives the argument list."""
    name: str
    native_arity: int
    fn: Callable[[List[Any]], Any]

    def arity(self) -> int:
        return self.native_arity

    def call(self, interpreter: 'Interpreter', arguments: List[Any]) -> Any:
        return self.fn(arguments)

    def __repr__(self) -> str:
        return f"<native fn {self.name}>"


class LoxClass(LoxCallable):
    def __init__(self, name: str, methods: Dict[str, LoxFunction]):
        self.name = name
        self.methods = methods

    def find_method(self, name: str) -> Optional[LoxFunction]:
        return self.methods.get(name)

    def arity(self) -> int:
        initializer = self.find_method('init')
        return initializer.arity() if initializer is not None else 0

    def call(self, interpreter: 'Interpreter', arguments: List[Any]) -> Any:
        instance = LoxInstance(self)
        initializer = self.find_method('init')
        if initializer is not None:
            # whatever init returns, the constructor yields the instance
            initializer.bind(instance).call(interpreter, arguments)
        return instance

    def __repr__(self) -> str:
        return self.name


class LoxInstance:
    def __init__(self, klass: LoxClass):
        self.klass = klass
        self.fields: Dict[str, Any] = {}

    def get(self, name: Token) -> Any:
        if name.lexeme in self.fields:
            return self.fields[name.lexeme]
        method = self.klass.find_method(name.lexeme)
        if method is not None:
            return method.bind(self)
        raise LoxRuntimeError(RuntimeErrorKind.UNDEFINED_PROPERTY, name,
                              f"Undefined property '{name.lexeme}'.")

    def set(self, name: Token, value: Any) -> None:
        self.fields[name.lexeme] = value

    def __repr__(self) -> str:
        return f"{self.klass.name} instance"
