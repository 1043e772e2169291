from .errors import (
    Diagnostic,
    ErrorReporter,
    ExecutionCancelled,
    LoxError,
    LoxRuntimeError,
    ResolutionError,
)
from .interpreter import Interpreter
from .lox import Lox, RunResult, main
from .parser import Parser
from .printer import AstPrinter
from .resolver import Resolver
from .scanner import Scanner
from .tokens import Token

__all__ = [
    "AstPrinter",
    "Diagnostic",
    "ErrorReporter",
    "ExecutionCancelled",
    "Interpreter",
    "Lox",
    "LoxError",
    "LoxRuntimeError",
    "Parser",
    "ResolutionError",
    "Resolver",
    "RunResult",
    "Scanner",
    "Token",
    "main",
]
