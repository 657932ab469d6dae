from ast_nodes import (
    Program, FunctionDecl, VarDecl, ExprStmt, PrintStmt, Block, If, While, Return, Break, Continue,
)
from errors import ControlFlowMisuseError, LoxSyntaxError
from expressions import ExpressionParser, nested_too_deeply
from lexer import Lexer, TokenStream


class Parser:
    def __init__(self, source):
        # source: Lexer, list of tokens, or an existing TokenStream
        if isinstance(source, TokenStream):
            self.tokens = source
        else:
            self.tokens = TokenStream(source)
        self.expressions = ExpressionParser(self.tokens)
        self.function_depth = 0
        self.loop_depth = 0

    @property
    def current_token(self):
        return self.tokens.peek()

    def eat(self, token_type, expected=None):
        return self.tokens.eat(token_type, expected)

    def expression(self):
        return self.expressions.expression()

    def misuse(self, message, tok):
        raise ControlFlowMisuseError(message, tok.line)

    # ---------- TOP LEVEL ----------
    def parse(self):
        declarations = []
        try:
            while not self.tokens.at_end():
                declarations.append(self.declaration())
        except RecursionError:
            raise nested_too_deeply(self.tokens) from None
        node = Program(declarations)
        node.line = 1
        return node

    # ---------- DECLARATIONS ----------
    def declaration(self):
        if self.current_token.type == "FUN":
            return self.fun_decl()
        if self.current_token.type == "VAR":
            return self.var_decl()
        return self.statement()

    def fun_decl(self):
        tok = self.eat("FUN")
        name = self.eat("IDENT", "function name after fun").value
        self.eat("LPAREN", "'(' after function name")

        params = []
        if self.current_token.type != "RPAREN":
            params.append(self.param(params))
            while self.tokens.match("COMMA"):
                params.append(self.param(params))
        self.eat("RPAREN", "')' after parameters")

        # loops outside the function do not cover its body
        saved_loop_depth = self.loop_depth
        self.loop_depth = 0
        self.function_depth += 1
        try:
            body = self.block()
        finally:
            self.function_depth -= 1
            self.loop_depth = saved_loop_depth

        node = FunctionDecl(name, params, body)
        node.line = tok.line
        return node

    def param(self, seen):
        tok = self.current_token
        name = self.eat("IDENT", "parameter name").value
        if name in seen:
            raise LoxSyntaxError(
                f"Duplicate parameter name '{name}'",
                tok.line,
                tok.column,
                expected="unique parameter name",
                found=repr(tok),
            )
        return name

    def var_decl(self):
        tok = self.eat("VAR")
        name = self.eat("IDENT", "variable name after var").value
        self.eat("EQ", "'=' after variable name")
        initializer = self.expression()
        self.eat("SEMICOLON", "';' after variable declaration")
        node = VarDecl(name, initializer)
        node.line = tok.line
        return node

    # ---------- STATEMENTS ----------
    def statement(self):
        t = self.current_token.type
        if t == "LBRACE":
            return self.block()
        if t == "IF":
            return self.if_statement()
        if t == "WHILE":
            return self.while_statement()
        if t == "RETURN":
            return self.return_statement()
        if t == "BREAK":
            return self.break_statement()
        if t == "CONTINUE":
            return self.continue_statement()
        if t == "PRINT":
            return self.print_statement()
        if t == "ELSE":
            self.tokens.error_here("else used without a preceding if", expected="statement")
        return self.expression_statement()

    def if_statement(self):
        # IF expr block (ELSE IF expr block)* (ELSE block)?
        tok = self.eat("IF")
        branches = [(self.expression(), self.block())]
        else_body = None

        while self.current_token.type == "ELSE":
            self.eat("ELSE")
            if self.current_token.type == "IF":
                self.eat("IF")
                branches.append((self.expression(), self.block()))
                continue
            else_body = self.block()
            break

        node = If(branches, else_body)
        node.line = tok.line
        return node

    def while_statement(self):
        tok = self.eat("WHILE")
        condition = self.expression()
        self.loop_depth += 1
        try:
            body = self.block()
        finally:
            self.loop_depth -= 1
        node = While(condition, body)
        node.line = tok.line
        return node

    def return_statement(self):
        tok = self.current_token
        if self.function_depth == 0:
            self.misuse("return used outside of a function", tok)
        self.eat("RETURN")
        expr = self.expression()
        self.eat("SEMICOLON", "';' after return value")
        node = Return(expr)
        node.line = tok.line
        return node

    def break_statement(self):
        tok = self.current_token
        if self.loop_depth == 0:
            self.misuse("break used outside of a loop", tok)
        self.eat("BREAK")
        self.eat("SEMICOLON", "';' after break")
        node = Break()
        node.line = tok.line
        return node

    def continue_statement(self):
        tok = self.current_token
        if self.loop_depth == 0:
            self.misuse("continue used outside of a loop", tok)
        self.eat("CONTINUE")
        self.eat("SEMICOLON", "';' after continue")
        node = Continue()
        node.line = tok.line
        return node

    def print_statement(self):
        tok = self.eat("PRINT")
        expr = self.expression()
        self.eat("SEMICOLON", "';' after value")
        node = PrintStmt(expr)
        node.line = tok.line
        return node

    def expression_statement(self):
        tok = self.current_token
        expr = self.expression()
        self.eat("SEMICOLON", "';' after expression")
        node = ExprStmt(expr)
        node.line = tok.line
        return node

    def block(self):
        tok = self.eat("LBRACE", "'{'")
        declarations = []
        while self.current_token.type not in ("RBRACE", "EOF"):
            declarations.append(self.declaration())
        self.eat("RBRACE", "'}' after block")
        node = Block(declarations)
        node.line = tok.line
        return node


def parse_program(tokens):
    return Parser(tokens).parse()


def parse_source(source: str):
    return Parser(Lexer(source)).parse()
