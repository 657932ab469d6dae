from ast_nodes import (
    Literal, Variable, Assign, Unary, Binary, Logical, Conditional, Grouping, Call,
)
from errors import LoxRuntimeError, LoxSyntaxError
from values import is_number, is_truthy, stringify, values_equal


OP_TEXT = {
    "PLUS": "+",
    "MINUS": "-",
    "STAR": "*",
    "SLASH": "/",
    "EQEQ": "==",
    "NOTEQ": "!=",
    "LT": "<",
    "LTE": "<=",
    "GT": ">",
    "GTE": ">=",
    "BANG": "!",
}

EQUALITY_OPS = ("EQEQ", "NOTEQ")
COMPARISON_OPS = ("GT", "GTE", "LT", "LTE")
TERM_OPS = ("PLUS", "MINUS")
FACTOR_OPS = ("STAR", "SLASH")

MAX_ARGS = 255


class ExpressionParser:
    """Recursive-descent parser for the expression grammar.

    Works directly on a shared ``TokenStream`` and stops at the first token
    that cannot continue an expression (``;``, ``{``, ``)``, ``,`` ...),
    leaving it for the caller.
    """

    def __init__(self, tokens):
        self.tokens = tokens

    def _node(self, node, tok):
        node.line = tok.line
        return node

    # expression -> assignment
    def expression(self):
        return self.assignment()

    # assignment -> IDENT "=" assignment | conditional
    def assignment(self):
        start = self.tokens.peek()
        expr = self.conditional()

        if self.tokens.check("EQ"):
            eq_tok = self.tokens.advance()
            value = self.assignment()
            if isinstance(expr, Variable):
                return self._node(Assign(expr.name, value), start)
            raise_invalid_target(eq_tok)

        return expr

    # conditional -> logic_or ("?" logic_or ":" logic_or)?
    def conditional(self):
        start = self.tokens.peek()
        expr = self.logic_or()
        if self.tokens.match("QUESTION"):
            then = self.logic_or()
            self.tokens.eat("COLON", "':'")
            alternative = self.logic_or()
            expr = self._node(Conditional(expr, then, alternative), start)
        return expr

    # logic_or -> logic_and ("or" logic_and)*
    def logic_or(self):
        node = self.logic_and()
        while self.tokens.check("OR"):
            tok = self.tokens.advance()
            right = self.logic_and()
            node = self._node(Logical(node, "or", right), tok)
        return node

    # logic_and -> equality ("and" equality)*
    def logic_and(self):
        node = self.equality()
        while self.tokens.check("AND"):
            tok = self.tokens.advance()
            right = self.equality()
            node = self._node(Logical(node, "and", right), tok)
        return node

    def _binary_level(self, ops, operand):
        if self.tokens.check(*ops):
            self.tokens.error_here("Missing the left-hand expression operand", expected="expression")

        node = operand()
        while self.tokens.check(*ops):
            op_token = self.tokens.advance()
            right = operand()
            node = self._node(Binary(node, OP_TEXT[op_token.type], right), op_token)
        return node

    # equality -> comparison (("==" | "!=") comparison)*
    def equality(self):
        return self._binary_level(EQUALITY_OPS, self.comparison)

    # comparison -> term ((">" | ">=" | "<" | "<=") term)*
    def comparison(self):
        return self._binary_level(COMPARISON_OPS, self.term)

    # term -> factor (("+" | "-") factor)*
    def term(self):
        # a leading "-" is unary negation, not a missing operand
        if self.tokens.check("PLUS"):
            self.tokens.error_here("Missing the left-hand expression operand", expected="expression")
        node = self.factor()
        while self.tokens.check(*TERM_OPS):
            op_token = self.tokens.advance()
            right = self.factor()
            node = self._node(Binary(node, OP_TEXT[op_token.type], right), op_token)
        return node

    # factor -> unary (("*" | "/") unary)*
    def factor(self):
        return self._binary_level(FACTOR_OPS, self.unary)

    # unary -> ("!" | "-") unary | call
    def unary(self):
        if self.tokens.check("BANG", "MINUS"):
            tok = self.tokens.advance()
            return self._node(Unary(OP_TEXT[tok.type], self.unary()), tok)
        return self.call()

    # call -> primary ("(" arguments? ")")*
    def call(self):
        node = self.primary()
        while self.tokens.check("LPAREN"):
            paren = self.tokens.advance()
            args = []
            if not self.tokens.check("RPAREN"):
                args.append(self.expression())
                while self.tokens.match("COMMA"):
                    if len(args) >= MAX_ARGS:
                        self.tokens.error_here(f"Can't have more than {MAX_ARGS} arguments")
                    args.append(self.expression())
            self.tokens.eat("RPAREN", "')' after arguments")
            node = self._node(Call(node, args), paren)
        return node

    # primary -> NUMBER | STRING | BOOL | NIL | IDENT | "(" expression ")"
    def primary(self):
        tok = self.tokens.peek()

        if tok.type in ("NUMBER", "STRING", "BOOL"):
            self.tokens.advance()
            return self._node(Literal(tok.value), tok)

        if tok.type == "NIL":
            self.tokens.advance()
            return self._node(Literal(None), tok)

        if tok.type == "IDENT":
            self.tokens.advance()
            return self._node(Variable(tok.value), tok)

        if tok.type == "LPAREN":
            self.tokens.advance()
            inner = self.expression()
            self.tokens.eat("RPAREN", "')' after expression")
            return self._node(Grouping(inner), tok)

        self.tokens.error_here(f"Expected expression, got {tok!r}", expected="expression")


def raise_invalid_target(tok):
    raise LoxSyntaxError("Invalid assignment target", tok.line, tok.column, expected="identifier", found=repr(tok))


def nested_too_deeply(tokens):
    # the host stack ran out before the input did
    tok = tokens.peek()
    return LoxSyntaxError("Expression nested too deeply", tok.line, tok.column, expected="expression", found=repr(tok))


# statement-parser entry point: consumes one expression, leaves the terminator
def parse_expression(tokens):
    try:
        return ExpressionParser(tokens).expression()
    except RecursionError:
        raise nested_too_deeply(tokens) from None


class Evaluator:
    """Evaluates expression nodes against an ``Environment``.

    ``call_function(function, args)`` is the executor's entry point for
    running a function body; the evaluator only resolves the callee and the
    arguments.
    """

    def __init__(self, call_function):
        self.call_function = call_function

    def evaluate(self, node, env):
        if isinstance(node, Literal):
            return node.value

        if isinstance(node, Variable):
            return env.get(node.name)

        if isinstance(node, Assign):
            value = self.evaluate(node.value, env)
            env.assign(node.name, value)
            return value

        if isinstance(node, Grouping):
            return self.evaluate(node.expr, env)

        if isinstance(node, Unary):
            return self.unary(node, env)

        if isinstance(node, Binary):
            return self.binary(node, env)

        if isinstance(node, Logical):
            left = self.evaluate(node.left, env)
            if node.op == "or":
                if is_truthy(left):
                    return left
            elif not is_truthy(left):
                return left
            return self.evaluate(node.right, env)

        if isinstance(node, Conditional):
            if is_truthy(self.evaluate(node.condition, env)):
                return self.evaluate(node.then, env)
            return self.evaluate(node.alternative, env)

        if isinstance(node, Call):
            return self.call(node, env)

        raise TypeError(f"Unknown expression node: {node.__class__.__name__}")

    def unary(self, node, env):
        right = self.evaluate(node.right, env)
        if node.op == "!":
            return not is_truthy(right)
        if node.op == "-":
            if not is_number(right):
                raise LoxRuntimeError("Operand must be a number.")
            return -right
        raise TypeError(f"Unknown unary operator: {node.op}")

    def binary(self, node, env):
        a = self.evaluate(node.left, env)
        b = self.evaluate(node.right, env)
        op = node.op

        if op == "==":
            return values_equal(a, b)
        if op == "!=":
            return not values_equal(a, b)

        if op == "+":
            if isinstance(a, str) and (isinstance(b, str) or is_number(b)):
                return a + stringify(b)
            if is_number(a) and is_number(b):
                return a + b
            raise LoxRuntimeError("Operands must be two numbers or a string and a value.")

        if not (is_number(a) and is_number(b)):
            raise LoxRuntimeError("Operand must be a number.")

        if op == "-":
            return a - b
        if op == "*":
            return a * b
        if op == "/":
            if b == 0:
                raise LoxRuntimeError("Attempted to divide by zero.")
            if isinstance(a, int) and isinstance(b, int) and a % b == 0:
                return a // b
            return a / b
        if op == "<":
            return a < b
        if op == "<=":
            return a <= b
        if op == ">":
            return a > b
        if op == ">=":
            return a >= b

        raise TypeError(f"Unknown binary operator: {op}")

    def call(self, node, env):
        callee = self.evaluate(node.callee, env)
        args = [self.evaluate(arg, env) for arg in node.args]
        return self.call_function(callee, args, call_line=node.line)
