from .syntax import Expr, Stmt


class Resolver(Expr.Visitor, Stmt.Visitor):
    """Static pass that binds each local variable use to a scope distance.

    ``resolve_program`` returns a mapping from ``Variable``, ``Assign``,
    ``This`` and ``Super`` nodes to the number of scopes between the use and
    the declaration. Names not found in any local scope are globals and get
    no entry. The same pass reports misplaced ``return``/``this``/``super``.

    Scopes map a name to ``False`` while its initializer is being resolved
    and ``True`` once it can be read.
    """

    def __init__(self, reporter, known_globals=()):
        self.reporter = reporter
        self.known_globals = set(known_globals)
        self.globals = set()
        self.scopes = []
        self.locals = {}
        self.current_function = "NONE"
        self.current_class = "NONE"
        self.line = None

    def resolve_program(self, statements):
        self.locals = {}
        self.scopes = []
        self.globals = self.known_globals | {
            stmt.name.lexeme for stmt in statements
            if isinstance(stmt, (Stmt.Var, Stmt.Function, Stmt.Class))}
        for statement in statements:
            try:
                self.resolve(statement)
            except RecursionError:
                self.reporter.error(self.line, "Expression nesting too deep.")
                self.scopes = []
                self.current_function = "NONE"
                self.current_class = "NONE"
        return self.locals

    def resolve(self, expr_or_stmt):
        if isinstance(expr_or_stmt, Stmt) and expr_or_stmt.line is not None:
            self.line = expr_or_stmt.line
        expr_or_stmt.accept(self)

    def visit_block_stmt(self, stmt):
        self.begin_scope()
        for statement in stmt.statements:
            self.resolve(statement)
        self.end_scope()

    def visit_class_stmt(self, stmt):
        enclosing_class = self.current_class
        self.current_class = "CLASS"

        self.declare(stmt.name)
        self.define(stmt.name)

        if stmt.superclass is not None:
            if stmt.name.lexeme == stmt.superclass.name.lexeme:
                self.reporter.token_error(
                    stmt.superclass.name, "A class can't inherit from itself.")
            self.current_class = "SUBCLASS"
            self.resolve(stmt.superclass)

            self.begin_scope()
            self.scopes[-1]["super"] = True

        self.begin_scope()
        self.scopes[-1]["this"] = True
        for method in stmt.methods:
            kind = "METHOD"
            if method.name.lexeme == "init":
                kind = "INITIALIZER"
            self.resolve_function(method, kind)
        self.end_scope()

        if stmt.superclass is not None:
            self.end_scope()

        self.current_class = enclosing_class

    def visit_expression_stmt(self, stmt):
        self.resolve(stmt.expression)

    def visit_function_stmt(self, stmt):
        # Defined before the body so the function can call itself.
        self.declare(stmt.name)
        self.define(stmt.name)
        self.resolve_function(stmt, "FUNCTION")

    def visit_if_stmt(self, stmt):
        self.resolve(stmt.condition)
        self.resolve(stmt.then_branch)
        if stmt.else_branch is not None:
            self.resolve(stmt.else_branch)

    def visit_print_stmt(self, stmt):
        self.resolve(stmt.expression)

    def visit_return_stmt(self, stmt):
        if self.current_function == "NONE":
            self.reporter.token_error(
                stmt.keyword, "Can't return from top-level code.")
        if stmt.value is not None:
            if self.current_function == "INITIALIZER":
                self.reporter.token_error(
                    stmt.keyword, "Can't return a value from an initializer.")
            self.resolve(stmt.value)

    def visit_var_stmt(self, stmt):
        self.declare(stmt.name)
        if stmt.initializer is not None:
            self.resolve(stmt.initializer)
        self.define(stmt.name)

    def visit_while_stmt(self, stmt):
        self.resolve(stmt.condition)
        self.resolve(stmt.body)

    def visit_assign_expr(self, expr):
        self.resolve(expr.value)
        self.resolve_local(expr, expr.name)

    def visit_binary_expr(self, expr):
        self.resolve(expr.left)
        self.resolve(expr.right)

    def visit_call_expr(self, expr):
        self.resolve(expr.callee)
        for argument in expr.arguments:
            self.resolve(argument)

    def visit_get_expr(self, expr):
        self.resolve(expr.object)

    def visit_grouping_expr(self, expr):
        self.resolve(expr.expression)

    def visit_literal_expr(self, expr):
        pass

    def visit_logical_expr(self, expr):
        self.resolve(expr.left)
        self.resolve(expr.right)

    def visit_set_expr(self, expr):
        self.resolve(expr.value)
        self.resolve(expr.object)

    def visit_super_expr(self, expr):
        if self.current_class == "NONE":
            self.reporter.token_error(
                expr.keyword, "Can't use 'super' outside of a class.")
        elif self.current_class != "SUBCLASS":
            self.reporter.token_error(
                expr.keyword, "Can't use 'super' in a class with no superclass.")
        else:
            self.resolve_local(expr, expr.keyword)

    def visit_ternary_expr(self, expr):
        self.resolve(expr.condition)
        self.resolve(expr.then_branch)
        self.resolve(expr.else_branch)

    def visit_this_expr(self, expr):
        if self.current_class == "NONE":
            self.reporter.token_error(
                expr.keyword, "Can't use 'this' outside of a class.")
            return
        self.resolve_local(expr, expr.keyword)

    def visit_unary_expr(self, expr):
        self.resolve(expr.right)

    def visit_variable_expr(self, expr):
        self.resolve_local(expr, expr.name)

    def begin_scope(self):
        self.scopes.append({})

    def end_scope(self):
        self.scopes.pop()

    def declare(self, name):
        if self.scopes:
            if name.lexeme in self.scopes[-1]:
                self.reporter.token_error(
                    name, "Already a variable with this name in this scope.")
            self.scopes[-1][name.lexeme] = False

    def define(self, name):
        if self.scopes:
            self.scopes[-1][name.lexeme] = True

    def resolve_function(self, function, kind):
        enclosing = self.current_function
        self.current_function = kind
        self.begin_scope()
        for param in function.params:
            self.declare(param)
            self.define(param)
        for stmt in function.body:
            self.resolve(stmt)
        self.end_scope()
        self.current_function = enclosing

    def resolve_local(self, expr, name):
        # A name whose initializer is still being resolved is not in scope
        # yet, so the search continues outward past it.
        in_own_initializer = False
        for depth, scope in enumerate(reversed(self.scopes)):
            ready = scope.get(name.lexeme)
            if ready:
                self.locals[expr] = depth
                return
            if ready is False:
                in_own_initializer = True

        if in_own_initializer and name.lexeme not in self.globals:
            self.reporter.token_error(
                name, "Can't read local variable in its own initializer.")
