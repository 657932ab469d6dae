from errors import LoxScanError, LoxSyntaxError


class Token:
    def __init__(self, type, value=None, line=1, column=1):
        self.type = type
        self.value = value
        self.line = line
        self.column = column

    def __repr__(self):
        if self.value is not None:
            return f"{self.type}({self.value})"
        return f"{self.type}"


KEYWORDS = {
    "and": "AND",
    "break": "BREAK",
    "continue": "CONTINUE",
    "else": "ELSE",
    "fun": "FUN",
    "if": "IF",
    "nil": "NIL",
    "or": "OR",
    "print": "PRINT",
    "return": "RETURN",
    "var": "VAR",
    "while": "WHILE",
}

# single-character tokens that never start a longer one
SINGLE_CHARS = {
    "(": "LPAREN",
    ")": "RPAREN",
    "{": "LBRACE",
    "}": "RBRACE",
    ",": "COMMA",
    ";": "SEMICOLON",
    "+": "PLUS",
    "-": "MINUS",
    "*": "STAR",
    "?": "QUESTION",
    ":": "COLON",
}

# one-or-two character operators: char -> (type alone, type when followed by '=')
EQ_PAIRS = {
    "=": ("EQ", "EQEQ"),
    "!": ("BANG", "NOTEQ"),
    "<": ("LT", "LTE"),
    ">": ("GT", "GTE"),
}


class Lexer:
    def __init__(self, text):
        self.text = text
        self.pos = 0
        self.current_char = text[0] if text else None
        self.line = 1
        self.column = 1

    def advance(self):
        # track line/column based on current_char before moving
        if self.current_char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.pos += 1
        if self.pos >= len(self.text):
            self.current_char = None
        else:
            self.current_char = self.text[self.pos]

    def peek(self):
        nxt = self.pos + 1
        if nxt >= len(self.text):
            return None
        return self.text[nxt]

    def skip_whitespace(self):
        while self.current_char and self.current_char in " \t\r\n":
            self.advance()

    def skip_line_comment(self):
        while self.current_char and self.current_char != "\n":
            self.advance()

    def skip_block_comment(self):
        start_line, start_col = self.line, self.column
        # consume /*
        self.advance()
        self.advance()
        while self.current_char is not None:
            if self.current_char == "*" and self.peek() == "/":
                self.advance()
                self.advance()
                return
            self.advance()
        raise LoxScanError("Unterminated block-style comment", start_line, start_col)

    def read_identifier(self):
        start_line, start_col = self.line, self.column
        result = ""
        while self.current_char and (self.current_char.isalnum() or self.current_char == "_"):
            result += self.current_char
            self.advance()

        if result == "true":
            return Token("BOOL", True, line=start_line, column=start_col)
        if result == "false":
            return Token("BOOL", False, line=start_line, column=start_col)
        if result in KEYWORDS:
            return Token(KEYWORDS[result], line=start_line, column=start_col)

        return Token("IDENT", result, line=start_line, column=start_col)

    def read_number(self):
        start_line, start_col = self.line, self.column
        result = ""
        has_dot = False

        while self.current_char and (self.current_char.isdigit() or self.current_char == "."):
            if self.current_char == ".":
                # a trailing dot is not part of the number
                nxt = self.peek()
                if has_dot or nxt is None or not nxt.isdigit():
                    break
                has_dot = True
            result += self.current_char
            self.advance()

        if has_dot:
            value = float(result)
            # whole numbers are integers, 2.0 reads as 2
            if value.is_integer():
                return Token("NUMBER", int(value), line=start_line, column=start_col)
            return Token("NUMBER", value, line=start_line, column=start_col)
        return Token("NUMBER", int(result), line=start_line, column=start_col)

    def read_string(self):
        start_line, start_col = self.line, self.column
        self.advance()  # skip opening quote
        result = ""

        while self.current_char and self.current_char != '"':
            if self.current_char == "\\":
                self.advance()  # consume backslash
                if self.current_char is None:
                    break
                esc = self.current_char
                if esc == "n":
                    result += "\n"
                elif esc == "t":
                    result += "\t"
                elif esc == "r":
                    result += "\r"
                elif esc == "\\":
                    result += "\\"
                elif esc == '"':
                    result += '"'
                else:
                    # unknown escape: keep literally
                    result += "\\" + esc
                self.advance()
                continue

            result += self.current_char
            self.advance()

        if self.current_char != '"':
            raise LoxScanError("Unterminated string", start_line, start_col)

        self.advance()  # skip closing quote
        return Token("STRING", result, line=start_line, column=start_col)

    def get_next_token(self):
        while self.current_char:

            if self.current_char in " \t\r\n":
                self.skip_whitespace()
                continue

            # comments
            if self.current_char == "/" and self.peek() == "/":
                self.skip_line_comment()
                continue
            if self.current_char == "/" and self.peek() == "*":
                self.skip_block_comment()
                continue

            # identifiers / keywords
            if self.current_char.isalpha() or self.current_char == "_":
                return self.read_identifier()

            if self.current_char.isdigit():
                return self.read_number()

            if self.current_char == '"':
                return self.read_string()

            start_line, start_col = self.line, self.column

            if self.current_char in EQ_PAIRS:
                alone, with_eq = EQ_PAIRS[self.current_char]
                if self.peek() == "=":
                    self.advance()
                    self.advance()
                    return Token(with_eq, line=start_line, column=start_col)
                self.advance()
                return Token(alone, line=start_line, column=start_col)

            if self.current_char == "/":
                self.advance()
                return Token("SLASH", line=start_line, column=start_col)

            if self.current_char in SINGLE_CHARS:
                tok_type = SINGLE_CHARS[self.current_char]
                self.advance()
                return Token(tok_type, line=start_line, column=start_col)

            raise LoxScanError(f"Unexpected character: `{self.current_char}`", self.line, self.column)

        return Token("EOF", line=self.line, column=self.column)

    def tokens(self):
        out = []
        while True:
            tok = self.get_next_token()
            out.append(tok)
            if tok.type == "EOF":
                return out


class TokenStream:
    """Pull-based cursor over a lexer with one token of lookahead.

    Accepts either a ``Lexer`` or an already-scanned list of tokens ending
    in ``EOF``. Both the statement parser and the expression parser share
    one stream, so whatever one of them consumes the other never sees.
    """

    def __init__(self, source):
        if isinstance(source, Lexer):
            self._next_token = source.get_next_token
        else:
            items = list(source)
            if not items or items[-1].type != "EOF":
                last = items[-1] if items else None
                items.append(Token("EOF", line=getattr(last, "line", 1), column=getattr(last, "column", 1)))
            it = iter(items)
            eof = items[-1]
            self._next_token = lambda: next(it, eof)

        self.previous = None
        self.current_token = self._next_token()
        self.next_token = self._next_token()

    def peek(self):
        return self.current_token

    def peek_next(self):
        return self.next_token

    def at_end(self):
        return self.current_token.type == "EOF"

    def advance(self):
        tok = self.current_token
        if tok.type != "EOF":
            self.previous = tok
            self.current_token = self.next_token
            self.next_token = self._next_token()
        return tok

    def check(self, *token_types):
        return self.current_token.type in token_types

    def match(self, *token_types):
        if self.current_token.type in token_types:
            self.advance()
            return True
        return False

    # move to next token, but only if it matches what we expect
    def eat(self, token_type, expected=None):
        if self.current_token.type == token_type:
            return self.advance()
        tok = self.current_token
        what = expected or token_type
        raise LoxSyntaxError(
            f"Expected {what}, got {tok!r}",
            tok.line,
            tok.column,
            expected=what,
            found=repr(tok),
        )

    def error_here(self, message, expected=None):
        tok = self.current_token
        raise LoxSyntaxError(message, tok.line, tok.column, expected=expected, found=repr(tok))
