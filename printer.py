from decimal import Decimal

from ast_nodes import (
    Program, FunctionDecl, VarDecl, ExprStmt, PrintStmt, Block, If, While, Return, Break, Continue,
    Literal, Variable, Assign, Unary, Binary, Logical, Conditional, Grouping, Call,
)


INDENT = "    "

STRING_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\t": "\\t",
    "\r": "\\r",
}


# ---------- AST -> source ----------

def to_source(program) -> str:
    """Render a parsed program back to concrete syntax.

    Parentheses come only from ``Grouping`` nodes, so a tree produced by the
    parser re-parses to the same tree.
    """
    lines = []
    for decl in program.declarations:
        lines.extend(decl_lines(decl, 0))
    return "\n".join(lines) + ("\n" if lines else "")


def decl_lines(node, depth):
    pad = INDENT * depth

    if isinstance(node, FunctionDecl):
        head = f"{pad}fun {node.name}({', '.join(node.params)}) "
        return join_head(head, block_lines(node.body, depth))

    if isinstance(node, VarDecl):
        return [f"{pad}var {node.name} = {expr_source(node.initializer)};"]

    if isinstance(node, ExprStmt):
        return [f"{pad}{expr_source(node.expr)};"]

    if isinstance(node, PrintStmt):
        return [f"{pad}print {expr_source(node.expr)};"]

    if isinstance(node, Return):
        return [f"{pad}return {expr_source(node.expr)};"]

    if isinstance(node, Break):
        return [f"{pad}break;"]

    if isinstance(node, Continue):
        return [f"{pad}continue;"]

    if isinstance(node, Block):
        return join_head(pad, block_lines(node, depth))

    if isinstance(node, While):
        head = f"{pad}while {expr_source(node.condition)} "
        return join_head(head, block_lines(node.body, depth))

    if isinstance(node, If):
        out = []
        for i, (condition, body) in enumerate(node.branches):
            blk = block_lines(body, depth)
            if i == 0:
                out.extend(join_head(f"{pad}if {expr_source(condition)} ", blk))
            else:
                # `} else if` continues on the previous closing brace
                closing = out.pop()
                out.extend(join_head(f"{closing} else if {expr_source(condition)} ", blk))
        if node.else_body is not None:
            closing = out.pop()
            out.extend(join_head(f"{closing} else ", block_lines(node.else_body, depth)))
        return out

    raise TypeError(f"Unknown declaration node: {node.__class__.__name__}")


def block_lines(block, depth):
    # first element is the opening brace (joined onto the header by the caller)
    pad = INDENT * depth
    out = ["{"]
    for decl in block.declarations:
        out.extend(decl_lines(decl, depth + 1))
    out.append(f"{pad}}}")
    return out


def join_head(head, blk):
    return [head + blk[0]] + blk[1:]


def literal_source(value) -> str:
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        text = repr(value)
        if "e" in text or "E" in text:
            text = format(Decimal(text), "f")
        return text
    if isinstance(value, str):
        return '"' + "".join(STRING_ESCAPES.get(ch, ch) for ch in value) + '"'
    raise TypeError(f"Cannot render literal of type {type(value).__name__}")


def expr_source(node) -> str:
    if isinstance(node, Literal):
        return literal_source(node.value)
    if isinstance(node, Variable):
        return node.name
    if isinstance(node, Assign):
        return f"{node.name} = {expr_source(node.value)}"
    if isinstance(node, Grouping):
        return f"({expr_source(node.expr)})"
    if isinstance(node, Unary):
        return f"{node.op}{expr_source(node.right)}"
    if isinstance(node, (Binary, Logical)):
        return f"{expr_source(node.left)} {node.op} {expr_source(node.right)}"
    if isinstance(node, Conditional):
        return f"{expr_source(node.condition)} ? {expr_source(node.then)} : {expr_source(node.alternative)}"
    if isinstance(node, Call):
        args = ", ".join(expr_source(a) for a in node.args)
        return f"{expr_source(node.callee)}({args})"
    raise TypeError(f"Unknown expression node: {node.__class__.__name__}")


# ---------- AST -> dict (so you can SEE what the parser built) ----------

def ast_to_dict(node):
    if node is None:
        return None

    t = node.__class__.__name__
    d = {"type": t}

    if isinstance(node, (Program, Block)):
        d["declarations"] = [ast_to_dict(s) for s in node.declarations]
    elif isinstance(node, FunctionDecl):
        d["name"] = node.name
        d["params"] = list(node.params)
        d["body"] = ast_to_dict(node.body)
    elif isinstance(node, VarDecl):
        d["name"] = node.name
        d["initializer"] = ast_to_dict(node.initializer)
    elif isinstance(node, (ExprStmt, PrintStmt, Return, Grouping)):
        d["expr"] = ast_to_dict(node.expr)
    elif isinstance(node, If):
        d["branches"] = [
            {"condition": ast_to_dict(cond), "body": ast_to_dict(body)}
            for cond, body in node.branches
        ]
        d["else_body"] = ast_to_dict(node.else_body)
    elif isinstance(node, While):
        d["condition"] = ast_to_dict(node.condition)
        d["body"] = ast_to_dict(node.body)
    elif isinstance(node, (Break, Continue)):
        pass
    elif isinstance(node, Literal):
        d["value"] = node.value
    elif isinstance(node, Variable):
        d["name"] = node.name
    elif isinstance(node, Assign):
        d["name"] = node.name
        d["value"] = ast_to_dict(node.value)
    elif isinstance(node, Unary):
        d["op"] = node.op
        d["right"] = ast_to_dict(node.right)
    elif isinstance(node, (Binary, Logical)):
        d["op"] = node.op
        d["left"] = ast_to_dict(node.left)
        d["right"] = ast_to_dict(node.right)
    elif isinstance(node, Conditional):
        d["condition"] = ast_to_dict(node.condition)
        d["then"] = ast_to_dict(node.then)
        d["alternative"] = ast_to_dict(node.alternative)
    elif isinstance(node, Call):
        d["callee"] = ast_to_dict(node.callee)
        d["args"] = [ast_to_dict(a) for a in node.args]
    else:
        d["raw"] = str(node)

    return d


def pretty(obj, indent=0):
    sp = "  " * indent
    if isinstance(obj, dict):
        lines = []
        for k, v in obj.items():
            if isinstance(v, (dict, list)):
                lines.append(f"{sp}{k}:")
                lines.append(pretty(v, indent + 1))
            else:
                lines.append(f"{sp}{k}: {v}")
        return "\n".join(lines)
    if isinstance(obj, list):
        lines = []
        for item in obj:
            lines.append(f"{sp}-")
            lines.append(pretty(item, indent + 1))
        return "\n".join(lines)
    return f"{sp}{obj}"
