class LoxError(Exception):
    pass


class LoxRuntimeError(LoxError):
    def __init__(self, token, message, line=None):
        super().__init__(message)
        self.token = token
        self.message = message
        self._line = line

    @property
    def line(self):
        return self.token.line if self.token is not None else self._line

    def __str__(self):
        return f"{self.message}\n[line {self.line}]"


class ResolutionError(LoxError):
    """Raised when a resolved depth does not match the runtime environments.

    This is never a user error: it means the resolver and the interpreter
    disagree about scope nesting.
    """


class ExecutionCancelled(LoxError):
    pass


class Diagnostic:
    def __init__(self, line, where, message):
        self.line = line
        self.where = where
        self.message = message

    def __eq__(self, other):
        if not isinstance(other, Diagnostic):
            return NotImplemented
        return (self.line, self.where, self.message) == \
            (other.line, other.where, other.message)

    def __repr__(self):
        return f"Diagnostic({self.line}, {self.where!r}, {self.message!r})"

    def __str__(self):
        return f"[line {self.line}] Error{self.where}: {self.message}"


class ErrorReporter:
    """Collects static diagnostics from the scanner, parser and resolver."""

    def __init__(self):
        self.diagnostics = []

    @property
    def had_error(self):
        return bool(self.diagnostics)

    def error(self, line, message):
        self.report(line, "", message)

    def token_error(self, token, message):
        if token.type == "EOF":
            self.report(token.line, " at end", message)
        else:
            self.report(token.line, f" at '{token.lexeme}'", message)

    def report(self, line, where, message):
        self.diagnostics.append(Diagnostic(line, where, message))

    def clear(self):
        self.diagnostics = []
