import os
import subprocess
import sys


def run_repl_with_input(inp: str) -> str:
    root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
    cli = os.path.join(root, "cli.py")

    proc = subprocess.run(
        [sys.executable, cli, "repl"],
        input=inp,
        text=True,
        capture_output=True,
        cwd=root,
        timeout=10,
    )

    # REPL should exit cleanly after :q
    if proc.returncode != 0:
        raise AssertionError(f"REPL exited with code {proc.returncode}\nSTDOUT:\n{proc.stdout}\nSTDERR:\n{proc.stderr}")

    return proc.stdout


def test_auto_print_expression():
    out = run_repl_with_input("1 + 2\n:q\n")
    if "3" not in out:
        raise AssertionError(f"Expected 3 in output.\nOUT:\n{out}")


def test_persistent_state_expression():
    out = run_repl_with_input("var x = 2;\nx + 5\n:q\n")
    if "7" not in out:
        raise AssertionError(f"Expected 7 in output.\nOUT:\n{out}")


def test_multiline_function():
    out = run_repl_with_input("fun twice(n) {\n  return n * 2;\n}\ntwice(21)\n:q\n")
    if "42" not in out:
        raise AssertionError(f"Expected 42 in output.\nOUT:\n{out}")


def test_error_keeps_session():
    out = run_repl_with_input("print nope;\nvar y = 9;\nprint y;\n:env\n:q\n")
    if "Runtime error: Variable with identifier `nope` is not defined." not in out:
        raise AssertionError(f"Expected undefined variable error.\nOUT:\n{out}")
    if "9" not in out or "y" not in out:
        raise AssertionError(f"Session should continue after an error.\nOUT:\n{out}")


def test_deep_nesting_keeps_session():
    deep = "(" * 400 + "1" + ")" * 400
    out = run_repl_with_input(deep + "\nprint 5;\n:q\n")
    if "Expression nested too deeply" not in out or "5" not in out:
        raise AssertionError(f"Session should survive deep nesting.\nOUT:\n{out}")


if __name__ == "__main__":
    test_auto_print_expression()
    test_persistent_state_expression()
    test_multiline_function()
    test_error_keeps_session()
    test_deep_nesting_keeps_session()
    print("ok")
