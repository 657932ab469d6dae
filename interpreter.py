import sys

from ast_nodes import (
    FunctionDecl, VarDecl, ExprStmt, PrintStmt, Block, If, While, Return, Break, Continue,
)
from environment import Environment
from errors import (
    ArityMismatchError, ControlFlowMisuseError, LoxRuntimeError, NotCallableError,
    StackOverflowError, StepLimitError,
)
from expressions import Evaluator
from parser import parse_source
from values import NIL, FunctionValue, is_truthy, stringify, type_name


FRAMES_PER_CALL = 30


class Signal:
    """Outcome of a statement that stops the rest of its block from running.

    Normal completion is ``None``; anything else is one of these, passed back
    up through every enclosing block until a loop (break/continue) or a
    function call (return) consumes it.
    """

    BREAK = "break"
    CONTINUE = "continue"
    RETURN = "return"

    __slots__ = ("kind", "value")

    def __init__(self, kind, value=NIL):
        self.kind = kind
        self.value = value

    def __repr__(self):
        if self.kind == Signal.RETURN:
            return f"Signal(return, {self.value!r})"
        return f"Signal({self.kind})"


BREAK_SIGNAL = Signal(Signal.BREAK)
CONTINUE_SIGNAL = Signal(Signal.CONTINUE)


class Interpreter:
    def __init__(self, out=None, max_call_depth: int = 500, max_steps: int | None = None, trace: bool = False):
        self.globals = Environment()
        self.evaluator = Evaluator(self.call_function)

        self.out = out                        # print target, None means sys.stdout
        self.max_call_depth = max_call_depth
        self.max_steps = max_steps            # set to an int to guard against infinite loops
        self.steps = 0
        self.trace_enabled = trace

        self.call_stack = []                  # list of frames
        self.current_function_name = "<main>"
        self.current_line = None

    def build_stacktrace(self):
        frames = [{"func": self.current_function_name, "line": self.current_line}]
        # callers (most recent first)
        for fr in reversed(self.call_stack):
            frames.append({"func": fr["caller_func"], "line": fr["call_line"]})
        return frames

    # ---------- entry points ----------
    def execute(self, program, env=None):
        if env is None:
            env = self.globals
        self.steps = 0

        # every Lox call nests a handful of Python frames; leave room for max_call_depth of them
        saved_limit = sys.getrecursionlimit()
        sys.setrecursionlimit(max(saved_limit, self.max_call_depth * FRAMES_PER_CALL + 200))
        try:
            signal = self.execute_declarations(program.declarations, env)
        except RecursionError:
            self.call_stack.clear()
            self.current_function_name = "<main>"
            raise StackOverflowError("Maximum recursion depth exceeded", line=self.current_line)
        finally:
            sys.setrecursionlimit(saved_limit)

        if signal is not None:
            raise self.misplaced(signal, self.current_line)

    def interpret(self, source: str, env=None):
        self.execute(parse_source(source), env)

    def misplaced(self, signal, line):
        if signal.kind == Signal.RETURN:
            return ControlFlowMisuseError("return used outside of a function", line)
        return ControlFlowMisuseError(f"{signal.kind} used outside of a loop", line)

    def tick(self):
        # one step per statement and per loop iteration
        if self.max_steps is None:
            return
        self.steps += 1
        if self.steps > self.max_steps:
            raise StepLimitError("Step limit exceeded (possible infinite loop)", line=self.current_line)

    # ---------- statements ----------
    def execute_declarations(self, declarations, env):
        for decl in declarations:
            signal = self.execute_node(decl, env)
            if signal is not None:
                return signal
        return None

    def execute_block(self, block, env):
        return self.execute_declarations(block.declarations, Environment(env))

    def execute_node(self, node, env):
        if node.line is not None:
            self.current_line = node.line

        self.tick()

        if self.trace_enabled:
            print(f"TRACE line={self.current_line or 0:04d} {node.__class__.__name__} depth={env.depth()}", file=self.out)

        try:
            if isinstance(node, ExprStmt):
                self.evaluator.evaluate(node.expr, env)
                return None

            if isinstance(node, PrintStmt):
                value = self.evaluator.evaluate(node.expr, env)
                print(stringify(value), file=self.out)
                return None

            if isinstance(node, VarDecl):
                env.define(node.name, self.evaluator.evaluate(node.initializer, env))
                return None

            if isinstance(node, FunctionDecl):
                # bound before any call can run the body, so self-reference resolves
                env.define(node.name, FunctionValue(node.name, node.params, node.body, env))
                return None

            if isinstance(node, Block):
                return self.execute_block(node, env)

            if isinstance(node, If):
                return self.execute_if(node, env)

            if isinstance(node, While):
                return self.execute_while(node, env)

            if isinstance(node, Return):
                return Signal(Signal.RETURN, self.evaluator.evaluate(node.expr, env))

            if isinstance(node, Break):
                return BREAK_SIGNAL

            if isinstance(node, Continue):
                return CONTINUE_SIGNAL

        except LoxRuntimeError as e:
            # innermost statement wins; outer ones leave the location alone
            if e.line is None:
                e.line = node.line
                e.frames = self.build_stacktrace()
            raise

        raise TypeError(f"Unknown statement node: {node.__class__.__name__}")

    def execute_if(self, node, env):
        for condition, body in node.branches:
            if is_truthy(self.evaluator.evaluate(condition, env)):
                return self.execute_block(body, env)
        if node.else_body is not None:
            return self.execute_block(node.else_body, env)
        return None

    def execute_while(self, node, env):
        while is_truthy(self.evaluator.evaluate(node.condition, env)):
            self.tick()
            signal = self.execute_block(node.body, env)
            if signal is None or signal.kind == Signal.CONTINUE:
                continue
            if signal.kind == Signal.BREAK:
                break
            # return goes on to the enclosing call
            return signal
        return None

    # ---------- calls ----------
    def call_function(self, function, arguments, call_line=None):
        if not isinstance(function, FunctionValue):
            raise NotCallableError(type_name(function))

        if len(arguments) != function.arity:
            raise ArityMismatchError(function.name, function.arity, len(arguments))

        if len(self.call_stack) >= self.max_call_depth:
            raise StackOverflowError(f"Max call depth exceeded ({self.max_call_depth})")

        self.call_stack.append({
            "caller_func": self.current_function_name,
            "call_line": call_line if call_line is not None else self.current_line,
        })
        saved_line = self.current_line
        self.current_function_name = function.name

        local_env = Environment(function.closure)
        for name, value in zip(function.params, arguments):
            local_env.define(name, value)

        try:
            signal = self.execute_declarations(function.body.declarations, local_env)
        finally:
            fr = self.call_stack.pop()
            self.current_function_name = fr["caller_func"]
            self.current_line = saved_line

        if signal is None:
            return NIL
        if signal.kind == Signal.RETURN:
            return signal.value
        raise self.misplaced(signal, fr["call_line"])
