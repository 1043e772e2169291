import io

from treelox import Lox, main


def test_run_script(tmp_path, capsys):
    script = tmp_path / "hello.lox"
    script.write_text('var greeting = "hello";\nprint greeting + " world";\n')
    assert main([str(script)]) == 0
    captured = capsys.readouterr()
    assert captured.out == "hello world\n"
    assert captured.err == ""


def test_static_error_exit_code(tmp_path, capsys):
    script = tmp_path / "bad.lox"
    script.write_text("print 1\nprint 2;")
    assert main([str(script)]) == 65
    assert capsys.readouterr().err == \
        "[line 2] Error at 'print': Expected ';' after value.\n"


def test_runtime_error_exit_code(tmp_path, capsys):
    script = tmp_path / "boom.lox"
    script.write_text('print "a";\nprint -"b";\nprint "c";\n')
    assert main([str(script)]) == 70
    captured = capsys.readouterr()
    assert captured.out == "a\n"
    assert captured.err == "Operand must be a number.\n[line 2]\n"


def test_missing_script(tmp_path, capsys):
    assert main([str(tmp_path / "nope.lox")]) == 66
    assert "Could not read" in capsys.readouterr().err


def test_max_depth_option(tmp_path, capsys):
    script = tmp_path / "deep.lox"
    script.write_text("fun f(n) { if (n > 0) f(n - 1); } f(20);\n")
    assert main([str(script), "--max-depth", "10"]) == 70
    assert capsys.readouterr().err == "Stack overflow.\n[line 1]\n"


def test_ast_dump(tmp_path, capsys):
    script = tmp_path / "ast.lox"
    script.write_text("print 1 + 2 * 3;\n")
    assert main([str(script), "--ast"]) == 0
    captured = capsys.readouterr()
    assert captured.err == "(print (+ 1 (* 2 3)))\n"
    assert captured.out == "7\n"


def test_prompt_keeps_state_and_survives_errors():
    lines = iter([
        "var a = 1;",
        "print a +;",
        "print b;",
        "a = a + 1;",
        "print a;",
    ])

    def read_line(prompt):
        try:
            return next(lines)
        except StopIteration:
            raise EOFError

    out, err = io.StringIO(), io.StringIO()
    assert Lox(out=out, err=err).run_prompt(read_line) == 0
    assert out.getvalue() == "2\n\n"
    assert err.getvalue() == (
        "[line 1] Error at ';': Expected expression.\n"
        "Undefined variable 'b'.\n[line 1]\n"
    )
