"""Runtime values of lox and the rules that apply to all of them.

Value kinds and their Python representation:

```
nil       -> None
boolean   -> bool
number    -> float                  ; the only numeric type
string    -> str
callable  -> LoxCallable            ; NativeFunction | LoxFunction | LoxClass
instance  -> LoxInstance
```

Fields live on instances, methods on classes. Methods are stored unbound and bound to an instance each time they are
accessed through it.
"""

import time
from abc import ABC, abstractmethod

from lox.core.environment import Environment
from lox.lang.error import LoxRuntimeError
from lox.lang.numerical import are_equal, format_number


class ReturnSignal:
    """Completion of a `return` statement, passed back up through execute() until a call consumes it."""
    __slots__ = ("value",)

    def __init__(self, value):
        self.value = value

    def __repr__(self):
        return f"ReturnSignal({self.value!r})"


class LoxCallable(ABC):
    """Anything that can appear before "(" in a call expression."""

    @abstractmethod
    def arity(self):
        """Number of arguments the callable requires."""

    @abstractmethod
    def call(self, interpreter, arguments):
        """Invokes the callable. len(arguments) == arity() has already been checked."""


class NativeFunction(LoxCallable):
    """A function implemented in Python and seeded into the global environment."""

    def __init__(self, name, arity, impl):
        self.name = name
        self._arity = arity
        self.impl = impl

    def arity(self):
        return self._arity

    def call(self, interpreter, arguments):
        return self.impl(*arguments)

    def __str__(self):
        return "<native fn>"


class LoxFunction(LoxCallable):
    """A user function: declaration, the environment it closes over, and whether it is a class initializer."""

    def __init__(self, declaration, closure, is_initializer=False):
        self.declaration = declaration
        self.closure = closure
        self.is_initializer = is_initializer

    def arity(self):
        return len(self.declaration.params)

    def bind(self, instance):
        """Returns this method bound to instance: a new function whose closure has one extra frame holding `this`."""
        environment = Environment(self.closure)
        environment.define("this", instance)
        return LoxFunction(self.declaration, environment, self.is_initializer)

    def call(self, interpreter, arguments):
        environment = Environment(self.closure)
        for param, argument in zip(self.declaration.params, arguments):
            environment.define(param.lexeme, argument)

        signal = interpreter.execute_block(self.declaration.body, environment)

        # an initializer always produces its instance, even on an early `return;`
        if self.is_initializer:
            return self.closure.get_at(0, "this")
        if signal is not None:
            return signal.value
        return None

    def __str__(self):
        return f"<fn {self.declaration.name.lexeme}>"


class LoxClass(LoxCallable):
    """A class: its name, optional superclass and unbound methods. Calling it constructs an instance."""

    def __init__(self, name, superclass, methods):
        self.name = name
        self.superclass = superclass
        self.methods = methods  # dict of name: LoxFunction

    def find_method(self, name):
        """Looks name up on this class, then along the superclass chain. Returns None if nothing defines it."""
        klass = self
        while klass is not None:
            if name in klass.methods:
                return klass.methods[name]
            klass = klass.superclass
        return None

    def arity(self):
        initializer = self.find_method("init")
        return initializer.arity() if initializer else 0

    def call(self, interpreter, arguments):
        instance = LoxInstance(self)

        initializer = self.find_method("init")
        if initializer is not None:
            initializer.bind(instance).call(interpreter, arguments)

        return instance

    def __str__(self):
        return self.name


class LoxInstance:
    """An object created by calling a class. Holds its own fields."""

    def __init__(self, klass):
        self.klass = klass
        self.fields = {}

    def get(self, name):
        """Fields shadow methods. A method found on the class chain comes back bound to this instance."""
        if name.lexeme in self.fields:
            return self.fields[name.lexeme]

        method = self.klass.find_method(name.lexeme)
        if method is not None:
            return method.bind(self)

        raise LoxRuntimeError(name, f"Undefined property '{name.lexeme}'.")

    def set(self, name, value):
        self.fields[name.lexeme] = value

    def __str__(self):
        return f"{self.klass.name} instance"


def is_truthy(value):
    """nil and false are falsy, everything else (0 and "" included) is truthy."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return True


def is_equal(left, right):
    """Equality over every kind of value, without coercion: values of different kinds are never equal."""
    if left is None or right is None:
        return left is None and right is None
    if type(left) is not type(right):
        return False
    if isinstance(left, float):
        return are_equal(left, right)
    if isinstance(left, (bool, str)):
        return left == right
    return left is right


def stringify(value):
    """Text of value as `print` shows it."""
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return format_number(value)
    return str(value)


def _clock():
    return time.time()


NATIVES = {
    "clock": NativeFunction("clock", 0, _clock),
}
