"""Shared fixtures for the treelox test suite."""

import io

import pytest

from treelox import ErrorReporter, Lox, Parser, Resolver, Scanner


class Outcome:
    def __init__(self, lox, result):
        self.result = result
        self.lines = lox.out.getvalue().splitlines()
        self.stderr = lox.err.getvalue()

    @property
    def messages(self):
        return [diagnostic.message for diagnostic in self.result.diagnostics]

    @property
    def runtime_error(self):
        return self.result.runtime_error


@pytest.fixture
def lox():
    return Lox(out=io.StringIO(), err=io.StringIO())


@pytest.fixture
def run():
    """Run a program on a fresh interpreter and capture what it printed."""

    def run(source, **options):
        lox = Lox(out=io.StringIO(), err=io.StringIO(), **options)
        return Outcome(lox, lox.run(source))

    return run


@pytest.fixture
def parse():
    """Scan and parse source, returning (statements, reporter)."""

    def parse(source):
        reporter = ErrorReporter()
        tokens = Scanner(source, reporter).scan_tokens()
        return Parser(tokens, reporter).parse(), reporter

    return parse


@pytest.fixture
def resolve(parse):
    """Parse and resolve source, returning (statements, locals, reporter)."""

    def resolve(source, known_globals=()):
        statements, reporter = parse(source)
        assert not reporter.had_error, reporter.diagnostics
        locals = Resolver(reporter, known_globals).resolve_program(statements)
        return statements, locals, reporter

    return resolve
