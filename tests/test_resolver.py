from treelox.syntax import Expr, Stmt


def distances(statements, locals):
    """Map "name@line" to the resolved distance of every variable use."""
    found = {}

    def walk(node):
        if isinstance(node, list):
            for item in node:
                walk(item)
            return
        if not isinstance(node, (Expr, Stmt)):
            return
        if isinstance(node, (Expr.Variable, Expr.Assign)):
            found.setdefault(f"{node.name.lexeme}@{node.name.line}", []).append(locals.get(node))
        elif isinstance(node, (Expr.This, Expr.Super)):
            found.setdefault(f"{node.keyword.lexeme}@{node.keyword.line}", []).append(locals.get(node))
        for field in node.fields:
            walk(getattr(node, field))

    walk(statements)
    return found


def messages(reporter):
    return [diagnostic.message for diagnostic in reporter.diagnostics]


def test_globals_get_no_distance(resolve):
    statements, locals, _ = resolve("var a = 1; print a;")
    assert distances(statements, locals) == {"a@1": [None]}


def test_block_locals_and_shadowing(resolve):
    statements, locals, reporter = resolve("""
    var a = 1;
    {
      var a = a + 1;
      print a;
      {
        print a;
      }
    }
    """)
    assert not reporter.had_error
    assert distances(statements, locals) == {
        "a@4": [None],
        "a@5": [0],
        "a@7": [1],
    }


def test_own_initializer_reads_outer_local(resolve):
    statements, locals, reporter = resolve("""
    {
      var a = 1;
      {
        var a = a;
      }
    }
    """)
    assert not reporter.had_error
    assert distances(statements, locals) == {"a@5": [1]}


def test_own_initializer_without_outer_binding_is_an_error(resolve):
    _, _, reporter = resolve("{ var a = a; }")
    assert [str(d) for d in reporter.diagnostics] == [
        "[line 1] Error at 'a': Can't read local variable in its own initializer."]


def test_own_initializer_falls_back_to_a_global(resolve):
    _, _, reporter = resolve("fun f() { var a = a; } var a = 1;")
    assert not reporter.had_error
    _, _, reporter = resolve("{ var clock = clock; }", known_globals={"clock"})
    assert not reporter.had_error


def test_global_self_reference_is_left_to_runtime(resolve):
    _, _, reporter = resolve("var a = a;")
    assert not reporter.had_error


def test_function_scopes(resolve):
    statements, locals, _ = resolve("""
    fun outer(x) {
      var y = x;
      fun inner() {
        return x + y + z;
      }
      return inner;
    }
    """)
    found = distances(statements, locals)
    assert found["x@3"] == [0]
    # inner's body scope, then outer's body scope.
    assert found["x@5"] == [1]
    assert found["y@5"] == [1]
    assert found["z@5"] == [None]
    assert found["inner@7"] == [0]


def test_recursive_local_function(resolve):
    statements, locals, reporter = resolve("""
    {
      fun fib(n) {
        return n < 2 ? n : fib(n - 1) + fib(n - 2);
      }
    }
    """)
    assert not reporter.had_error
    assert distances(statements, locals)["fib@4"] == [1, 1]


def test_this_and_super_distances(resolve):
    statements, locals, _ = resolve("""
    class A { m() { return this; } }
    class B < A {
      m() {
        {
          return super.m();
        }
      }
    }
    """)
    found = distances(statements, locals)
    assert found["this@2"] == [1]
    # block -> method body -> "this" scope -> "super" scope
    assert found["super@6"] == [3]


def test_for_loop_variable(resolve):
    statements, locals, _ = resolve("for (var i = 0; i < 2; i = i + 1) print i;")
    # condition, then print, assignment target and operand in the body block
    assert distances(statements, locals) == {"i@1": [0, 1, 1, 1]}


def test_resolving_twice_gives_the_same_distances(parse):
    from treelox import ErrorReporter, Resolver

    statements, _ = parse("""
    fun counter() { var i = 0; fun next() { i = i + 1; return i; } return next; }
    class P { init(v) { this.v = v; } get() { return this.v; } }
    { var a = 1; { var b = a; print b; } }
    """)
    resolver = Resolver(ErrorReporter())
    first = resolver.resolve_program(statements)
    second = resolver.resolve_program(statements)
    assert first == second
    assert first is not second
    assert first == Resolver(ErrorReporter()).resolve_program(statements)


def test_return_at_top_level(resolve):
    _, _, reporter = resolve("return 1;")
    assert messages(reporter) == ["Can't return from top-level code."]


def test_return_value_from_initializer(resolve):
    _, _, reporter = resolve("class A { init() { return 1; } }")
    assert messages(reporter) == ["Can't return a value from an initializer."]


def test_bare_return_from_initializer_is_allowed(resolve):
    _, _, reporter = resolve("class A { init() { return; } }")
    assert not reporter.had_error


def test_this_outside_class(resolve):
    _, _, reporter = resolve("fun f() { return this; } print this;")
    assert messages(reporter) == [
        "Can't use 'this' outside of a class.",
        "Can't use 'this' outside of a class.",
    ]


def test_super_outside_class(resolve):
    _, _, reporter = resolve("fun f() { super.m(); }")
    assert messages(reporter) == ["Can't use 'super' outside of a class."]


def test_super_without_superclass(resolve):
    _, _, reporter = resolve("class A { m() { super.m(); } }")
    assert messages(reporter) == ["Can't use 'super' in a class with no superclass."]


def test_super_in_function_nested_in_subclass_method(resolve):
    _, _, reporter = resolve("""
    class A { m() {} }
    class B < A { m() { fun f() { return super.m; } return f; } }
    """)
    assert not reporter.had_error


def test_class_cannot_inherit_from_itself(resolve):
    _, _, reporter = resolve("class A < A {}")
    assert messages(reporter) == ["A class can't inherit from itself."]


def test_duplicate_local_declaration(resolve):
    _, _, reporter = resolve("{ var a = 1; var a = 2; } fun f(x, x) {}")
    assert messages(reporter) == [
        "Already a variable with this name in this scope.",
        "Already a variable with this name in this scope.",
    ]


def test_global_redeclaration_is_allowed(resolve):
    _, _, reporter = resolve("var a = 1; var a = 2;")
    assert not reporter.had_error


def test_errors_are_all_collected(resolve):
    _, _, reporter = resolve("return; print this; { var x = x; }")
    assert len(reporter.diagnostics) == 3
