"""
Environment and scoping system for the Pebble Programming Language
"""

from typing import Any, Callable, Dict, List, Optional
from ast_nodes import FunctionStatement
from errors import PebbleRuntimeError
from tokens import Token

class Environment:
    """One scope frame: its own bindings plus a link to the enclosing frame

    Frames are shared, not copied. Every closure created in a frame keeps
    that same frame alive, so an assignment made through one closure is
    seen by all the others.
    """

    def __init__(self, enclosing: Optional['Environment'] = None):
        self.enclosing = enclosing
        self.values: Dict[str, Any] = {}

    def define(self, name: str, value: Any):
        """Bind name in this frame, replacing any earlier binding here"""
        self.values[name] = value

    def get(self, name: Token) -> Any:
        """Look name up by walking outward through the frame chain"""
        environment = self
        while environment is not None:
            if name.lexeme in environment.values:
                return environment.values[name.lexeme]
            environment = environment.enclosing

        raise PebbleRuntimeError.undefined_variable(name)

    def assign(self, name: Token, value: Any):
        """Rebind an existing variable; never declares a new one"""
        environment = self
        while environment is not None:
            if name.lexeme in environment.values:
                environment.values[name.lexeme] = value
                return
            environment = environment.enclosing

        raise PebbleRuntimeError.undefined_variable(name)

    def ancestor(self, distance: int) -> 'Environment':
        """Follow exactly distance enclosing links"""
        environment = self
        for _ in range(distance):
            environment = environment.enclosing
        return environment

    def get_at(self, distance: int, name: str) -> Any:
        return self.ancestor(distance).values[name]

    def assign_at(self, distance: int, name: Token, value: Any):
        self.ancestor(distance).values[name.lexeme] = value

class PebbleCallable:
    """Base class for anything a call expression can invoke"""

    def arity(self) -> int:
        raise NotImplementedError

    def call(self, interpreter, arguments: List[Any]) -> Any:
        raise NotImplementedError

class PebbleFunction(PebbleCallable):
    """User-defined function closed over the frame it was declared in"""

    def __init__(self, declaration: FunctionStatement, closure: Environment):
        self.declaration = declaration
        self.closure = closure

    def arity(self) -> int:
        return len(self.declaration.params)

    def call(self, interpreter, arguments: List[Any]) -> Any:
        # Parented to the closure, not the caller: scoping is lexical
        environment = Environment(self.closure)
        for param, argument in zip(self.declaration.params, arguments):
            environment.define(param.lexeme, argument)

        completion = interpreter.execute_block(self.declaration.body, environment)
        if completion is not None:
            return completion.value
        return None

    def __repr__(self):
        return f"<fn {self.declaration.name.lexeme}>"

class NativeFunction(PebbleCallable):
    """Function provided by the host"""

    def __init__(self, name: str, arity: int, function: Callable[..., Any]):
        self.name = name
        self._arity = arity
        self.function = function

    def arity(self) -> int:
        return self._arity

    def call(self, interpreter, arguments: List[Any]) -> Any:
        return self.function(*arguments)

    def __repr__(self):
        return "<native fn>"
