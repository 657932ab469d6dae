import io

from interpreter import Interpreter


def run(source, **kwargs):
    """Run source on a fresh interpreter and return printed lines."""
    out = io.StringIO()
    Interpreter(out=out, **kwargs).interpret(source)
    return out.getvalue().splitlines()


def expect_error(exc_type, fn):
    try:
        fn()
    except exc_type as e:
        return e
    raise AssertionError(f"Expected {exc_type.__name__} to be raised")


def check_equal(got, expected):
    if got != expected:
        raise AssertionError(f"Expected {expected!r}, got {got!r}")
