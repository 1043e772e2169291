import contextlib
import sys
import time
import weakref

from .environment import Environment
from .errors import ExecutionCancelled, LoxRuntimeError
from .runtime import LoxCallable, LoxClass, LoxFunction, LoxInstance, NativeFunction
from .syntax import Expr, Stmt

DEFAULT_MAX_DEPTH = 255

# Upper bound on host stack frames spent per Lox call, used to size the
# recursion limit so that max_depth is what actually stops runaway recursion.
FRAMES_PER_CALL = 40


@contextlib.contextmanager
def raised_recursion_limit(max_depth):
    """Size the host recursion limit for ``max_depth`` nested Lox calls.

    The parser, resolver and evaluator all recurse on the tree, so every
    pass over a program runs inside this.
    """
    limit = sys.getrecursionlimit()
    sys.setrecursionlimit(max(limit, max_depth * FRAMES_PER_CALL + 1000))
    try:
        yield
    finally:
        sys.setrecursionlimit(limit)


class ReturnValue:
    """Outcome of a statement that executed ``return``."""

    __slots__ = ("value",)

    def __init__(self, value):
        self.value = value


class Interpreter(Expr.Visitor, Stmt.Visitor):
    """Tree-walking evaluator.

    An interpreter owns everything one program run can touch: the global
    environment, the output sink for ``print``, the call-depth counter and
    the optional cancellation hook. Separate interpreters share nothing.

    Statements evaluate to ``None`` or a ``ReturnValue``; blocks and loops
    stop at the first ``ReturnValue`` and pass it up to the enclosing call.
    """

    def __init__(self, out=None, max_depth=DEFAULT_MAX_DEPTH, cancel=None):
        self.out = out if out is not None else sys.stdout
        self.max_depth = max_depth
        self.cancel = cancel
        self.call_stack = []
        self.globals = Environment()
        self.environment = self.globals
        # Keyed weakly so that trees from finished REPL lines are dropped
        # unless a closure still holds them.
        self.locals = weakref.WeakKeyDictionary()
        self.line = None

        self.define_native("clock", 0, time.time)

    def define_native(self, name, arity, function):
        self.globals.define(name, NativeFunction(name, arity, function))

    def interpret(self, statements, locals=None):
        """Run statements, returning the runtime error that stopped them, if any."""
        if locals:
            self.locals.update(locals)

        try:
            with raised_recursion_limit(self.max_depth):
                for stmt in statements:
                    self.execute(stmt)
        except LoxRuntimeError as error:
            return error
        except RecursionError:
            return LoxRuntimeError(None, "Stack overflow.", line=self.line)
        finally:
            self.environment = self.globals
            self.call_stack.clear()
        return None

    def stringify(self, value):
        if value is None:
            return "nil"
        if isinstance(value, bool):
            return "true" if value else "false"
        text = str(value)
        if isinstance(value, float) and text[-2:] == ".0":
            text = text[:-2]
        return text

    def evaluate(self, expr):
        return expr.accept(self)

    def execute(self, stmt):
        if self.cancel is not None and self.cancel():
            raise ExecutionCancelled("Execution cancelled.")
        if stmt.line is not None:
            self.line = stmt.line
        return stmt.accept(self)

    def execute_block(self, statements, environment):
        previous = self.environment
        try:
            self.environment = environment
            for statement in statements:
                if (outcome := self.execute(statement)) is not None:
                    return outcome
            return None
        finally:
            self.environment = previous

    def call(self, callee, arguments, paren):
        if len(self.call_stack) >= self.max_depth:
            raise LoxRuntimeError(paren, "Stack overflow.")
        self.call_stack.append(paren)
        try:
            return callee.call(self, arguments)
        finally:
            self.call_stack.pop()

    def visit_block_stmt(self, stmt):
        return self.execute_block(stmt.statements, Environment(self.environment))

    def visit_class_stmt(self, stmt):
        superclass = None
        if stmt.superclass is not None:
            superclass = self.evaluate(stmt.superclass)
            if not isinstance(superclass, LoxClass):
                raise LoxRuntimeError(
                    stmt.superclass.name, "Superclass must be a class.")

        self.environment.define(stmt.name.lexeme, None)

        method_closure = self.environment
        if superclass is not None:
            method_closure = Environment(self.environment)
            method_closure.define("super", superclass)

        methods = {
            method.name.lexeme: LoxFunction(
                method, method_closure, method.name.lexeme == "init")
            for method in stmt.methods}

        klass = LoxClass(stmt.name.lexeme, superclass, methods)
        self.environment.define(stmt.name.lexeme, klass)

    def visit_expression_stmt(self, stmt):
        self.evaluate(stmt.expression)

    def visit_function_stmt(self, stmt):
        function = LoxFunction(stmt, self.environment, False)
        self.environment.define(stmt.name.lexeme, function)

    def visit_if_stmt(self, stmt):
        if self.is_truthy(self.evaluate(stmt.condition)):
            return self.execute(stmt.then_branch)
        elif stmt.else_branch is not None:
            return self.execute(stmt.else_branch)
        return None

    def visit_print_stmt(self, stmt):
        value = self.evaluate(stmt.expression)
        print(self.stringify(value), file=self.out)

    def visit_return_stmt(self, stmt):
        value = None
        if stmt.value is not None:
            value = self.evaluate(stmt.value)
        return ReturnValue(value)

    def visit_var_stmt(self, stmt):
        value = None
        if stmt.initializer is not None:
            value = self.evaluate(stmt.initializer)
        self.environment.define(stmt.name.lexeme, value)

    def visit_while_stmt(self, stmt):
        while self.is_truthy(self.evaluate(stmt.condition)):
            if (outcome := self.execute(stmt.body)) is not None:
                return outcome
        return None

    def visit_assign_expr(self, expr):
        value = self.evaluate(expr.value)
        distance = self.locals.get(expr)
        if distance is not None:
            self.environment.assign_at(distance, expr.name.lexeme, value)
        else:
            self.globals.assign(expr.name, value)
        return value

    def visit_binary_expr(self, expr):
        left = self.evaluate(expr.left)
        right = self.evaluate(expr.right)
        operator = expr.operator
        match operator.type:
            case "BANG_EQUAL": return not self.is_equal(left, right)
            case "EQUAL_EQUAL": return self.is_equal(left, right)
            case "GREATER":
                self.check_number_operands(operator, left, right)
                return left > right
            case "GREATER_EQUAL":
                self.check_number_operands(operator, left, right)
                return left >= right
            case "LESS":
                self.check_number_operands(operator, left, right)
                return left < right
            case "LESS_EQUAL":
                self.check_number_operands(operator, left, right)
                return left <= right
            case "MINUS":
                self.check_number_operands(operator, left, right)
                return left - right
            case "PLUS":
                if isinstance(left, float) and isinstance(right, float):
                    return left + right
                if isinstance(left, str) and isinstance(right, str):
                    return left + right
                raise LoxRuntimeError(
                    operator, "Operands must be numbers or strings.")
            case "SLASH":
                self.check_number_operands(operator, left, right)
                if right == 0.0:
                    raise LoxRuntimeError(operator, "Cannot divide by zero.")
                return left / right
            case "STAR":
                self.check_number_operands(operator, left, right)
                return left * right
            case _:
                return None

    def visit_call_expr(self, expr):
        callee = self.evaluate(expr.callee)
        if not isinstance(callee, LoxCallable):
            raise LoxRuntimeError(
                expr.paren, "Can only call functions and classes.")
        arguments = [self.evaluate(argument) for argument in expr.arguments]
        if len(arguments) != callee.arity():
            raise LoxRuntimeError(
                expr.paren, f"Expected {callee.arity()} arguments but got {len(arguments)}.")
        return self.call(callee, arguments, expr.paren)

    def visit_get_expr(self, expr):
        obj = self.evaluate(expr.object)
        if isinstance(obj, LoxInstance):
            return obj.get(expr.name)
        raise LoxRuntimeError(
            expr.name, "Only instances have properties.")

    def visit_grouping_expr(self, expr):
        return self.evaluate(expr.expression)

    def visit_literal_expr(self, expr):
        return expr.value

    def visit_logical_expr(self, expr):
        left = self.evaluate(expr.left)
        if expr.operator.type == "OR":
            if self.is_truthy(left):
                return left
        else:
            if not self.is_truthy(left):
                return left
        return self.evaluate(expr.right)

    def visit_set_expr(self, expr):
        obj = self.evaluate(expr.object)
        if not isinstance(obj, LoxInstance):
            raise LoxRuntimeError(
                expr.name, "Only instances have fields.")
        value = self.evaluate(expr.value)
        obj.set(expr.name, value)
        return value

    def visit_super_expr(self, expr):
        distance = self.locals[expr]
        superclass = self.environment.get_at(distance, "super")
        # "this" lives in the scope just inside the one holding "super".
        instance = self.environment.get_at(distance - 1, "this")

        method = superclass.find_method(expr.method.lexeme)
        if method is None:
            raise LoxRuntimeError(
                expr.method, f"Undefined property '{expr.method.lexeme}'.")

        return method.bind(instance)

    def visit_ternary_expr(self, expr):
        if self.is_truthy(self.evaluate(expr.condition)):
            return self.evaluate(expr.then_branch)
        return self.evaluate(expr.else_branch)

    def visit_this_expr(self, expr):
        return self.lookup_variable(expr.keyword, expr)

    def visit_unary_expr(self, expr):
        right = self.evaluate(expr.right)
        match expr.operator.type:
            case "BANG": return not self.is_truthy(right)
            case "MINUS":
                self.check_number_operands(expr.operator, right)
                return -right
            case _: return None

    def visit_variable_expr(self, expr):
        return self.lookup_variable(expr.name, expr)

    def lookup_variable(self, name, expr):
        distance = self.locals.get(expr)
        if distance is not None:
            return self.environment.get_at(distance, name.lexeme)
        return self.globals.get(name)

    def is_truthy(self, value):
        if value is None:
            return False
        if isinstance(value, bool):
            return value
        return True

    def is_equal(self, left, right):
        # No coercion: true != 1 and nil only equals nil.
        return type(left) is type(right) and left == right

    def check_number_operands(self, operator, *operands):
        if any(not isinstance(operand, float) for operand in operands):
            if len(operands) == 1:
                raise LoxRuntimeError(
                    operator, "Operand must be a number.")
            raise LoxRuntimeError(
                operator, "Operands must be numbers.")
