import argparse
import sys

from .errors import ErrorReporter, ExecutionCancelled
from .interpreter import DEFAULT_MAX_DEPTH, Interpreter, raised_recursion_limit
from .parser import Parser
from .printer import AstPrinter
from .resolver import Resolver
from .scanner import Scanner

EXIT_OK = 0
EXIT_DATA_ERROR = 65
EXIT_NO_INPUT = 66
EXIT_SOFTWARE = 70


class RunResult:
    def __init__(self, diagnostics=(), runtime_error=None):
        self.diagnostics = list(diagnostics)
        self.runtime_error = runtime_error

    @property
    def had_error(self):
        return bool(self.diagnostics)

    @property
    def had_runtime_error(self):
        return self.runtime_error is not None

    @property
    def exit_code(self):
        if self.had_error:
            return EXIT_DATA_ERROR
        if self.had_runtime_error:
            return EXIT_SOFTWARE
        return EXIT_OK


class Lox:
    """Runs Lox source against one long-lived interpreter.

    Globals defined by one ``run`` stay visible to the next, which is what
    the REPL relies on. Diagnostics go to ``err`` as they are reported.
    """

    def __init__(self, out=None, err=None, max_depth=DEFAULT_MAX_DEPTH, cancel=None,
                 dump_ast=False):
        self.out = out if out is not None else sys.stdout
        self.err = err if err is not None else sys.stderr
        self.dump_ast = dump_ast
        self.reporter = ErrorReporter()
        self.interpreter = Interpreter(out=self.out, max_depth=max_depth, cancel=cancel)

    def check(self, source):
        """Scan, parse and resolve; returns (statements, locals) and leaves
        any diagnostics in the reporter."""
        self.reporter.clear()

        with raised_recursion_limit(self.interpreter.max_depth):
            tokens = Scanner(source, self.reporter).scan_tokens()
            statements = Parser(tokens, self.reporter).parse()
            if self.reporter.had_error:
                return statements, {}

            resolver = Resolver(self.reporter, self.interpreter.globals.values)
            locals = resolver.resolve_program(statements)
        return statements, locals

    def run(self, source):
        statements, locals = self.check(source)
        if self.reporter.had_error:
            for diagnostic in self.reporter.diagnostics:
                print(diagnostic, file=self.err)
            return RunResult(self.reporter.diagnostics)

        if self.dump_ast:
            self.print_ast(statements)

        error = self.interpreter.interpret(statements, locals)
        if error is not None:
            print(error, file=self.err)
        return RunResult(runtime_error=error)

    def print_ast(self, statements):
        try:
            with raised_recursion_limit(self.interpreter.max_depth):
                text = AstPrinter().print(statements)
        except RecursionError:
            text = "(syntax tree too deep to print)"
        print(text, file=self.err)

    def run_file(self, filename):
        try:
            with open(filename, "r", encoding="utf-8") as file:
                source = file.read()
        except OSError as error:
            print(f"Could not read '{filename}': {error.strerror}.", file=self.err)
            return EXIT_NO_INPUT
        return self.run(source).exit_code

    def run_prompt(self, read_line=input):
        while True:
            try:
                line = read_line("> ")
            except EOFError:
                print(file=self.out)
                break
            except KeyboardInterrupt:
                print(file=self.out)
                continue
            try:
                self.run(line)
            except (ExecutionCancelled, KeyboardInterrupt):
                print("Interrupted.", file=self.err)
        return EXIT_OK


def make_argument_parser():
    parser = argparse.ArgumentParser(
        prog="treelox", description="Run Lox scripts")
    parser.add_argument("filename", nargs="?")
    parser.add_argument(
        "--ast", action="store_true",
        help="print the syntax tree before running")
    parser.add_argument(
        "--max-depth", type=int, default=DEFAULT_MAX_DEPTH,
        help=f"maximum call depth (default {DEFAULT_MAX_DEPTH})")
    return parser


def main(argv=None):
    args = make_argument_parser().parse_args(argv)
    lox = Lox(max_depth=args.max_depth, dump_ast=args.ast)
    if args.filename is not None:
        return lox.run_file(args.filename)
    return lox.run_prompt()
