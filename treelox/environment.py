from .errors import LoxRuntimeError, ResolutionError


class Environment:
    """One scope of variables, linked to the scope that encloses it.

    Closures keep their defining environment alive simply by referencing it,
    so a recursive function and the scopes created for its calls may point at
    each other without any manual bookkeeping.
    """

    def __init__(self, enclosing=None):
        self.values = {}
        self.enclosing = enclosing

    def define(self, name, value):
        self.values[name] = value

    # Globals: looked up by name, only in this frame.

    def get(self, name):
        if name.lexeme in self.values:
            return self.values[name.lexeme]
        raise LoxRuntimeError(
            name, f"Undefined variable '{name.lexeme}'.")

    def assign(self, name, value):
        if name.lexeme in self.values:
            self.values[name.lexeme] = value
            return
        raise LoxRuntimeError(
            name, f"Undefined variable '{name.lexeme}'.")

    # Locals: the resolver says exactly how far out the name lives.

    def get_at(self, distance, name):
        values = self.ancestor(distance).values
        if name not in values:
            raise ResolutionError(
                f"'{name}' is not declared {distance} scope(s) out")
        return values[name]

    def assign_at(self, distance, name, value):
        values = self.ancestor(distance).values
        if name not in values:
            raise ResolutionError(
                f"'{name}' is not declared {distance} scope(s) out")
        values[name] = value
        return value

    def ancestor(self, distance):
        environment = self
        for _ in range(distance):
            environment = environment.enclosing
            if environment is None:
                raise ResolutionError(
                    f"no environment {distance} scope(s) out")
        return environment
