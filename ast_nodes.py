class ASTNode:
    # Optional source line (1-based). Parser sets this.
    line: int | None = None


class Program(ASTNode):
    def __init__(self, declarations):
        self.declarations = tuple(declarations)


# ---------- declarations ----------

class FunctionDecl(ASTNode):
    def __init__(self, name, params, body):
        self.name = name
        self.params = tuple(params)  # unique identifiers, in order
        self.body = body             # Block


class VarDecl(ASTNode):
    def __init__(self, name, initializer):
        self.name = name
        self.initializer = initializer  # expr (mandatory)


# ---------- statements ----------

class ExprStmt(ASTNode):
    def __init__(self, expr):
        self.expr = expr


class PrintStmt(ASTNode):
    def __init__(self, expr):
        self.expr = expr


class Block(ASTNode):
    def __init__(self, declarations):
        self.declarations = tuple(declarations)


class If(ASTNode):
    def __init__(self, branches, else_body=None):
        # branches: ((condition, Block), ...), leading `if` first, then each `else if`
        if not branches:
            raise ValueError("If needs at least one branch")
        self.branches = tuple(branches)
        self.else_body = else_body  # Block | None


class While(ASTNode):
    def __init__(self, condition, body):
        self.condition = condition
        self.body = body


class Return(ASTNode):
    def __init__(self, expr):
        self.expr = expr


class Break(ASTNode):
    pass


class Continue(ASTNode):
    pass


# ---------- expressions ----------

class Literal(ASTNode):
    def __init__(self, value):
        self.value = value  # int | float | str | bool | None


class Variable(ASTNode):
    def __init__(self, name):
        self.name = name


class Assign(ASTNode):
    def __init__(self, name, value):
        self.name = name
        self.value = value


class Unary(ASTNode):
    def __init__(self, op, right):
        self.op = op  # "-" or "!"
        self.right = right


class Binary(ASTNode):
    def __init__(self, left, op, right):
        self.left = left
        self.op = op
        self.right = right


class Logical(ASTNode):
    def __init__(self, left, op, right):
        self.left = left
        self.op = op  # "and" | "or"
        self.right = right


class Conditional(ASTNode):
    def __init__(self, condition, then, alternative):
        self.condition = condition
        self.then = then
        self.alternative = alternative


class Grouping(ASTNode):
    def __init__(self, expr):
        self.expr = expr


class Call(ASTNode):
    def __init__(self, callee, args):
        self.callee = callee
        self.args = tuple(args)
