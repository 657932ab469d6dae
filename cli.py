import sys
import traceback

from ast_nodes import Program, PrintStmt
from errors import LoxError
from expressions import parse_expression
from interpreter import Interpreter
from lexer import Lexer, TokenStream
from parser import Parser
from printer import ast_to_dict, pretty, to_source


USAGE = """Usage:
  python cli.py parse <file.lox>
  python cli.py fmt <file.lox>
  python cli.py run <file.lox>
  python cli.py eval "<code>"
  python cli.py repl
  (optional) --debug to show Python traceback
  (optional) --trace to print each executed statement"""


def read_source(path):
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def report(e, debug):
    if debug:
        traceback.print_exc()
    else:
        print(str(e))


def cmd_parse(path, debug: bool = False):
    try:
        program = Parser(Lexer(read_source(path))).parse()
    except (LoxError, OSError) as e:
        report(e, debug)
        sys.exit(1)
    print(pretty(ast_to_dict(program)))


def cmd_fmt(path, debug: bool = False):
    try:
        program = Parser(Lexer(read_source(path))).parse()
    except (LoxError, OSError) as e:
        report(e, debug)
        sys.exit(1)
    sys.stdout.write(to_source(program))


def run_source(source, debug: bool = False, trace: bool = False):
    try:
        program = Parser(Lexer(source)).parse()
        interp = Interpreter(trace=trace)
        interp.execute(program)
    except LoxError as e:
        report(e, debug)
        sys.exit(1)


def cmd_run(path, debug: bool = False, trace: bool = False):
    try:
        source = read_source(path)
    except OSError as e:
        report(e, debug)
        sys.exit(1)
    run_source(source, debug=debug, trace=trace)


def _count_braces_delta(line: str) -> int:
    # Minimal brace balancer for REPL multiline input.
    # Ignores braces inside "..." strings and after // comments.
    delta = 0
    in_string = False
    i = 0
    while i < len(line):
        ch = line[i]
        if in_string:
            if ch == "\\":
                i += 2
                continue
            if ch == '"':
                in_string = False
        elif ch == "/" and line[i + 1:i + 2] == "/":
            break
        elif ch == '"':
            in_string = True
        elif ch == "{":
            delta += 1
        elif ch == "}":
            delta -= 1
        i += 1
    return delta


def parse_repl_input(source):
    # First, try parsing as a normal program (declarations).
    try:
        return Parser(Lexer(source)).parse()
    except LoxError as parse_err:
        # If that fails, try parsing as a single expression and auto-print it.
        try:
            tokens = TokenStream(Lexer(source))
            expr = parse_expression(tokens)
            if not tokens.at_end():
                raise parse_err
        except LoxError:
            raise parse_err
        stmt = PrintStmt(expr)
        stmt.line = expr.line
        return Program([stmt])


def cmd_repl(debug: bool = False, trace: bool = False):
    # One interpreter (and one global scope) for the whole session.
    interp = Interpreter(trace=trace)

    print("Lox REPL. Type :q to quit.")

    buffer_lines = []
    brace_depth = 0
    while True:
        prompt = "lox> " if not buffer_lines else "...> "
        try:
            line = input(prompt)
        except (EOFError, KeyboardInterrupt):
            print()
            break

        stripped = line.strip()
        if not buffer_lines and stripped in (":q", ":quit", "quit", "exit"):
            break

        if not buffer_lines and stripped == ":env":
            print(", ".join(sorted(interp.globals.names())))
            continue

        # Allow blank lines to submit when not inside a block.
        if not stripped and brace_depth == 0 and not buffer_lines:
            continue

        buffer_lines.append(line)
        brace_depth += _count_braces_delta(line)

        # Wait for block completion if braces aren't balanced yet.
        if brace_depth > 0:
            continue

        source = "\n".join(buffer_lines) + "\n"
        buffer_lines = []
        brace_depth = 0

        try:
            interp.execute(parse_repl_input(source))
        except LoxError as e:
            report(e, debug)


def main():
    debug = False
    if "--debug" in sys.argv:
        debug = True
        sys.argv.remove("--debug")

    trace = False
    if "--trace" in sys.argv:
        trace = True
        sys.argv.remove("--trace")

    if len(sys.argv) < 2:
        print(USAGE)
        sys.exit(1)

    cmd = sys.argv[1]

    if cmd == "repl":
        if len(sys.argv) != 2:
            print(USAGE)
            sys.exit(1)
        cmd_repl(debug=debug, trace=trace)
        return

    if len(sys.argv) != 3:
        print(USAGE)
        sys.exit(1)

    arg = sys.argv[2]

    if cmd == "parse":
        cmd_parse(arg, debug=debug)
    elif cmd == "fmt":
        cmd_fmt(arg, debug=debug)
    elif cmd == "run":
        cmd_run(arg, debug=debug, trace=trace)
    elif cmd == "eval":
        run_source(arg, debug=debug, trace=trace)
    else:
        print(f"Unknown command: {cmd}")
        sys.exit(1)


if __name__ == "__main__":
    main()
