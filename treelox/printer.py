from .syntax import Expr, Stmt


class AstPrinter(Expr.Visitor, Stmt.Visitor):
    """Renders syntax trees as parenthesized prefix notation.

    ``1 + 2 * 3`` prints as ``(+ 1 (* 2 3))``; statements print the same
    way, e.g. ``(var a 1)`` or ``(while true (block ...))``.
    """

    def print(self, node):
        if isinstance(node, list):
            return "\n".join(self.print(stmt) for stmt in node)
        return node.accept(self)

    def parenthesize(self, name, *parts):
        rendered = [name]
        for part in parts:
            if isinstance(part, (Expr, Stmt)):
                rendered.append(part.accept(self))
            elif isinstance(part, list):
                rendered.extend(item.accept(self) for item in part)
            elif hasattr(part, "lexeme"):
                rendered.append(part.lexeme)
            else:
                rendered.append(str(part))
        return f"({' '.join(rendered)})"

    def visit_assign_expr(self, expr):
        return self.parenthesize("=", expr.name, expr.value)

    def visit_binary_expr(self, expr):
        return self.parenthesize(expr.operator.lexeme, expr.left, expr.right)

    def visit_call_expr(self, expr):
        return self.parenthesize("call", expr.callee, expr.arguments)

    def visit_get_expr(self, expr):
        return self.parenthesize(".", expr.object, expr.name)

    def visit_grouping_expr(self, expr):
        return self.parenthesize("group", expr.expression)

    def visit_literal_expr(self, expr):
        match expr.value:
            case None: return "nil"
            case True: return "true"
            case False: return "false"
            case float() as number:
                text = str(number)
                return text[:-2] if text.endswith(".0") else text
            case value: return f'"{value}"'

    def visit_logical_expr(self, expr):
        return self.parenthesize(expr.operator.lexeme, expr.left, expr.right)

    def visit_set_expr(self, expr):
        return self.parenthesize("=", self.parenthesize(".", expr.object, expr.name), expr.value)

    def visit_super_expr(self, expr):
        return self.parenthesize("super", expr.method)

    def visit_ternary_expr(self, expr):
        return self.parenthesize("?:", expr.condition, expr.then_branch, expr.else_branch)

    def visit_this_expr(self, expr):
        return "this"

    def visit_unary_expr(self, expr):
        return self.parenthesize(expr.operator.lexeme, expr.right)

    def visit_variable_expr(self, expr):
        return expr.name.lexeme

    def visit_block_stmt(self, stmt):
        return self.parenthesize("block", stmt.statements)

    def visit_class_stmt(self, stmt):
        parts = [stmt.name]
        if stmt.superclass is not None:
            parts.append(self.parenthesize("<", stmt.superclass))
        return self.parenthesize("class", *parts, stmt.methods)

    def visit_expression_stmt(self, stmt):
        return self.parenthesize(";", stmt.expression)

    def visit_function_stmt(self, stmt):
        params = "(" + " ".join(param.lexeme for param in stmt.params) + ")"
        return self.parenthesize("fun", stmt.name, params, stmt.body)

    def visit_if_stmt(self, stmt):
        if stmt.else_branch is None:
            return self.parenthesize("if", stmt.condition, stmt.then_branch)
        return self.parenthesize("if", stmt.condition, stmt.then_branch, stmt.else_branch)

    def visit_print_stmt(self, stmt):
        return self.parenthesize("print", stmt.expression)

    def visit_return_stmt(self, stmt):
        if stmt.value is None:
            return "(return)"
        return self.parenthesize("return", stmt.value)

    def visit_var_stmt(self, stmt):
        if stmt.initializer is None:
            return self.parenthesize("var", stmt.name)
        return self.parenthesize("var", stmt.name, stmt.initializer)

    def visit_while_stmt(self, stmt):
        return self.parenthesize("while", stmt.condition, stmt.body)
