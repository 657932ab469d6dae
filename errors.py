class LoxError(Exception):
    pass


class LoxScanError(LoxError):
    def __init__(self, message: str, line: int | None = None, column: int | None = None):
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column

    def __str__(self) -> str:
        if self.line is None:
            return f"Scan error: {self.message}"
        return f"Scan error: {self.message} at line {self.line}, col {self.column}"


class LoxSyntaxError(LoxError):
    def __init__(self, message: str, line: int | None = None, column: int | None = None,
                 expected: str | None = None, found: str | None = None):
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column
        self.expected = expected
        self.found = found

    def __str__(self) -> str:
        if self.line is None:
            return f"Syntax error: {self.message}"
        return f"Syntax error: {self.message} at line {self.line}, col {self.column}"


class ControlFlowMisuseError(LoxError):
    def __init__(self, message: str, line: int | None = None):
        super().__init__(message)
        self.message = message
        self.line = line

    def __str__(self) -> str:
        if self.line is None:
            return f"Error: {self.message}"
        return f"Error: {self.message} at line {self.line}"


class LoxRuntimeError(LoxError):
    def __init__(self, message: str, line: int | None = None, frames=None):
        super().__init__(message)
        self.message = message
        self.line = line
        self.frames = frames or []  # most recent first

    def format(self, indent: str = "") -> str:
        lines = [f"{indent}Runtime error: {self.message}"]
        if self.line is not None:
            lines.append(f"{indent}  line {self.line}")
        for fr in self.frames:
            func = fr.get("func", "<unknown>")
            line = fr.get("line")
            loc = "?" if line is None else str(line)
            lines.append(f"{indent}  at fun {func} (line {loc})")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.format()


class UndefinedVariableError(LoxRuntimeError):
    def __init__(self, name: str):
        super().__init__(f"Variable with identifier `{name}` is not defined.")
        self.name = name


class NotCallableError(LoxRuntimeError):
    def __init__(self, type_name: str):
        super().__init__(f"Expression is not callable (got {type_name}).")
        self.type_name = type_name


class ArityMismatchError(LoxRuntimeError):
    def __init__(self, name: str, expected: int, got: int):
        super().__init__(f"Invalid arguments count for {name}() ({got}, expected {expected}).")
        self.expected = expected
        self.got = got


class StackOverflowError(LoxRuntimeError):
    pass


class StepLimitError(LoxRuntimeError):
    pass
