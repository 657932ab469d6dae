import io
import sys

from ast_nodes import Block, Break, Call, ExprStmt, FunctionDecl, Program, Return, Literal, Variable
from environment import Environment
from errors import (
    ArityMismatchError, ControlFlowMisuseError, NotCallableError, StackOverflowError, StepLimitError,
    UndefinedVariableError,
)
from interpreter import Interpreter, Signal
from parser import parse_source

from support import check_equal, expect_error, run


def test_block_shadowing_does_not_leak():
    check_equal(run("var x = 1; { var x = 2; print x; } print x;"), ["2", "1"])


def test_closures_share_mutable_binding():
    source = """
    fun counter() {
        var n = 0;
        fun inc() {
            n = n + 1;
            return n;
        }
        return inc;
    }
    var c = counter();
    print c();
    print c();
    var d = counter();
    print d();
    print c();
    """
    check_equal(run(source), ["1", "2", "1", "3"])


def test_break_inside_nested_if_ends_loop():
    source = """
    var i = 0;
    while true {
        i = i + 1;
        if i == 3 { break; }
        print i;
    }
    print "done";
    """
    check_equal(run(source), ["1", "2", "done"])


def test_continue_rechecks_condition():
    source = """
    var i = 0;
    while i < 5 {
        i = i + 1;
        if i == 2 or i == 4 { continue; }
        print i;
    }
    print "after";
    """
    check_equal(run(source), ["1", "3", "5", "after"])


def test_return_inside_loop_exits_function():
    source = """
    fun find() {
        var i = 0;
        while true {
            i = i + 1;
            if i == 4 { return i * 10; }
        }
        print "unreachable";
    }
    print find();
    """
    check_equal(run(source), ["40"])


def test_break_only_exits_innermost_loop():
    source = """
    var i = 0;
    while i < 2 {
        var j = 0;
        while true {
            j = j + 1;
            if j > 2 { break; }
        }
        print i + j;
        i = i + 1;
    }
    """
    check_equal(run(source), ["3", "4"])


def test_break_outside_loop_is_rejected():
    expect_error(ControlFlowMisuseError, lambda: run("break;"))
    expect_error(ControlFlowMisuseError, lambda: run("{ continue; }"))
    expect_error(ControlFlowMisuseError, lambda: run("return 1;"))


def test_arity_mismatch_does_not_run_body():
    interp = Interpreter(out=io.StringIO())
    interp.interpret("var calls = 0; fun f(a, b) { calls = calls + 1; return a + b; }")
    e = expect_error(ArityMismatchError, lambda: interp.interpret("f(1);"))
    check_equal((e.expected, e.got), (2, 1))
    check_equal(interp.globals.get("calls"), 0)
    interp.interpret("f(1, 2);")
    check_equal(interp.globals.get("calls"), 1)


def test_calling_non_callable():
    e = expect_error(NotCallableError, lambda: run('var x = "f"; x();'))
    check_equal(e.type_name, "string")


def test_recursion_and_mutual_recursion():
    source = """
    fun fib(n) {
        if n < 2 { return n; }
        return fib(n - 1) + fib(n - 2);
    }
    print fib(10);

    fun isEven(n) { if n == 0 { return true; } return isOdd(n - 1); }
    fun isOdd(n) { if n == 0 { return false; } return isEven(n - 1); }
    print isEven(10);
    print isOdd(7);
    """
    check_equal(run(source), ["55", "true", "true"])


def test_no_hoisting_of_functions():
    e = expect_error(UndefinedVariableError, lambda: run("print early(); fun early() { return 1; }"))
    check_equal(e.name, "early")


def test_body_may_reference_later_globals():
    check_equal(run("fun f() { return later; } var later = 7; print f();"), ["7"])


def test_function_without_return_yields_nil():
    check_equal(run("fun f() { var a = 1; } print f();"), ["nil"])


def test_scoping_is_lexical_not_dynamic():
    source = """
    var x = "global";
    fun show() { print x; }
    fun call() { var x = "local"; show(); }
    call();
    """
    check_equal(run(source), ["global"])


def test_closure_outlives_its_block():
    source = """
    var f = nil;
    {
        var secret = 42;
        fun get() { return secret; }
        f = get;
    }
    print f();
    """
    check_equal(run(source), ["42"])


def test_each_iteration_gets_fresh_scope():
    source = """
    var i = 0;
    var first = nil;
    var second = nil;
    while i < 2 {
        var j = i;
        fun get() { return j; }
        if i == 0 { first = get; } else { second = get; }
        i = i + 1;
    }
    print first();
    print second();
    """
    check_equal(run(source), ["0", "1"])


def test_if_chain_picks_first_truthy_branch():
    source = """
    fun classify(n) {
        if n < 0 { return "neg"; }
        else if n == 0 { return "zero"; }
        else if n < 10 { return "small"; }
        else { return "big"; }
    }
    print classify(-1);
    print classify(0);
    print classify(5);
    print classify(50);
    """
    check_equal(run(source), ["neg", "zero", "small", "big"])


def test_block_bindings_are_discarded():
    expect_error(UndefinedVariableError, lambda: run("{ var y = 1; } print y;"))


def test_assignment_never_creates_global():
    interp = Interpreter(out=io.StringIO())
    expect_error(UndefinedVariableError, lambda: interp.interpret("z = 3;"))
    if interp.globals.contains("z"):
        raise AssertionError("failed assignment must not bind z")


def test_redefinition_in_same_scope():
    check_equal(run("var a = 1; var a = 2; print a;"), ["2"])


def test_deep_recursion_overflows_cleanly():
    e = expect_error(StackOverflowError, lambda: run("fun f(n) { return f(n + 1); } f(0);"))
    if "depth" not in e.message:
        raise AssertionError(e.message)

    interp = Interpreter(out=io.StringIO(), max_call_depth=5)
    expect_error(StackOverflowError, lambda: interp.interpret("fun g(n) { return g(n + 1); } g(0);"))
    check_equal(interp.call_stack, [])


def test_moderate_recursion_is_fine():
    check_equal(run("fun down(n) { if n == 0 { return 0; } return 1 + down(n - 1); } print down(50);"), ["50"])


def test_step_limit_stops_runaway_loops():
    expect_error(StepLimitError, lambda: run("while true { }", max_steps=100))
    expect_error(StepLimitError, lambda: run("var i = 0; while true { i = i + 1; }", max_steps=100))
    check_equal(run("var i = 0; while i < 3 { i = i + 1; } print i;", max_steps=100), ["3"])


def test_runtime_error_reports_line_and_frames():
    source = "fun inner() {\n    return missing;\n}\nfun outer() {\n    return inner();\n}\nouter();\n"
    e = expect_error(UndefinedVariableError, lambda: run(source))
    check_equal(e.line, 2)
    check_equal(e.frames, [
        {"func": "inner", "line": 2},
        {"func": "outer", "line": 5},
        {"func": "<main>", "line": 7},
    ])
    text = e.format()
    if "at fun inner (line 2)" not in text or "Variable with identifier `missing` is not defined." not in text:
        raise AssertionError(text)


def test_trace_output():
    check_equal(run("print 1;", trace=True), ["TRACE line=0001 PrintStmt depth=0", "1"])


def test_execute_against_given_environment():
    out = io.StringIO()
    env = Environment()
    env.define("x", 5)
    interp = Interpreter(out=out)
    interp.execute(parse_source("print x; var y = x * 2;"), env)
    check_equal(out.getvalue(), "5\n")
    check_equal(env.get("y"), 10)
    if interp.globals.contains("y"):
        raise AssertionError("declarations must land in the given environment")


def test_call_function_callback():
    interp = Interpreter(out=io.StringIO())
    interp.interpret("fun add(a, b) { return a + b; }")
    check_equal(interp.call_function(interp.globals.get("add"), [2, 3]), 5)
    expect_error(NotCallableError, lambda: interp.call_function(3, []))


def test_signals_escaping_hand_built_trees_are_rejected():
    interp = Interpreter(out=io.StringIO())
    expect_error(ControlFlowMisuseError, lambda: interp.execute(Program([Break()])))
    expect_error(ControlFlowMisuseError, lambda: interp.execute(Program([Return(Literal(1))])))

    # a break reaching a call boundary must not leak out of the call
    decl = FunctionDecl("f", [], Block([Break()]))
    call = ExprStmt(Call(Variable("f"), []))
    e = expect_error(ControlFlowMisuseError, lambda: interp.execute(Program([decl, call])))
    if "break" not in e.message:
        raise AssertionError(e.message)


def test_statement_signals():
    interp = Interpreter(out=io.StringIO())
    env = Environment()
    check_equal(interp.execute_node(Break(), env).kind, Signal.BREAK)
    signal = interp.execute_node(Return(Literal(3)), env)
    check_equal((signal.kind, signal.value), (Signal.RETURN, 3))
    check_equal(interp.execute_node(ExprStmt(Literal(1)), env), None)


RECURSE = "fun f(n) { if n > 0 { return 1 + f(n - 1); } return 0; }"


def test_recursion_reaches_configured_depth():
    interp = Interpreter(out=io.StringIO())
    interp.interpret(RECURSE)
    limit = interp.max_call_depth
    # f(limit - 1) makes exactly `limit` nested calls
    interp.interpret(f"var r = f({limit - 1});")
    check_equal(interp.globals.get("r"), limit - 1)

    e = expect_error(StackOverflowError, lambda: interp.interpret(f"f({limit + 1});"))
    if "Max call depth exceeded" not in e.message:
        raise AssertionError(e.message)


def test_deeper_limit_can_be_configured():
    interp = Interpreter(out=io.StringIO(), max_call_depth=600)
    interp.interpret(RECURSE + " var r = f(599);")
    check_equal(interp.globals.get("r"), 599)


def test_host_recursion_limit_is_restored():
    before = sys.getrecursionlimit()
    run(RECURSE + " print f(10);")
    expect_error(StackOverflowError, lambda: run(RECURSE + " f(100);", max_call_depth=10))
    check_equal(sys.getrecursionlimit(), before)


def test_call_function_rejects_non_callable_from_source():
    e = expect_error(NotCallableError, lambda: run("var n = 4; n(1);"))
    check_equal(e.type_name, "number")
    check_equal(e.line, 1)


def test_unknown_statement_is_a_type_error():
    interp = Interpreter(out=io.StringIO())
    expect_error(TypeError, lambda: interp.execute(Program([Literal(1)])))
