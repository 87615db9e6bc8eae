"""Runtime scopes. Environments form a chain through `enclosing`; closures keep a reference to the frame they were
declared in, so several closures can share the tail of a chain and outlive the block that created it.
"""

from lox.lang.error import LoxRuntimeError


class Environment:
    """One scope frame. The enclosing frame is fixed at construction; nested scopes are always new frames."""

    def __init__(self, enclosing=None):
        self._enclosing = enclosing
        self.values = {}

    @property
    def enclosing(self):
        return self._enclosing

    def define(self, name, value):
        """Binds name in this frame. Redefining a name here simply overwrites it."""
        self.values[name] = value

    def ancestor(self, distance):
        """Returns the frame distance enclosing links away (0 is this frame)."""
        environment = self
        for _ in range(distance):
            environment = environment.enclosing
        return environment

    def get(self, name):
        """Looks name.lexeme up through the whole chain. name is a Token, used to locate the error if undefined."""
        environment = self
        while environment is not None:
            if name.lexeme in environment.values:
                return environment.values[name.lexeme]
            environment = environment.enclosing

        raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

    def assign(self, name, value):
        """Rebinds name.lexeme in the nearest frame that defines it."""
        environment = self
        while environment is not None:
            if name.lexeme in environment.values:
                environment.values[name.lexeme] = value
                return
            environment = environment.enclosing

        raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

    def get_at(self, distance, name):
        """Reads name (a str) from the frame the resolver computed."""
        return self.ancestor(distance).values[name]

    def assign_at(self, distance, name, value):
        """Writes name (a str) into the frame the resolver computed."""
        self.ancestor(distance).values[name] = value

    def __repr__(self):
        return f"Environment({', '.join(self.values)})"
