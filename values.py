NIL = None


class FunctionValue:
    """A user function paired with the environment it was declared in.

    The closure is held by reference, so assignments made through it are
    visible to every other holder of the same environment.
    """

    def __init__(self, name, params, body, closure):
        self.name = name
        self.params = tuple(params)
        self.body = body        # Block
        self.closure = closure  # Environment

    @property
    def arity(self) -> int:
        return len(self.params)

    def __repr__(self):
        return f"<fn {self.name}>"


def is_number(value) -> bool:
    # bool is an int subclass in Python, but never a number here
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_truthy(value) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if is_number(value):
        return value != 0
    return True


def values_equal(a, b) -> bool:
    if is_number(a) and is_number(b):
        return a == b
    if a is None or b is None:
        return a is None and b is None
    if type(a) is not type(b):
        return False
    if isinstance(a, FunctionValue):
        return a is b
    return a == b


def type_name(value) -> str:
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "boolean"
    if is_number(value):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, FunctionValue):
        return "function"
    return type(value).__name__


def stringify(value) -> str:
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)
    return str(value)
