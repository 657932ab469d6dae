from errors import UndefinedVariableError


class Environment:
    """One lexical scope: its own bindings plus a link to the enclosing scope.

    The link is a plain reference, so a closure that captured this scope keeps
    it (and everything it encloses) alive after the block or call that created
    it has finished.
    """

    def __init__(self, enclosing=None):
        self.values = {}
        self.enclosing = enclosing

    def define(self, name, value):
        # always the innermost scope; redefinition just overwrites
        self.values[name] = value

    def get(self, name):
        env = self
        while env is not None:
            if name in env.values:
                return env.values[name]
            env = env.enclosing
        raise UndefinedVariableError(name)

    def assign(self, name, value):
        env = self
        while env is not None:
            if name in env.values:
                env.values[name] = value
                return
            env = env.enclosing
        raise UndefinedVariableError(name)

    def contains(self, name) -> bool:
        env = self
        while env is not None:
            if name in env.values:
                return True
            env = env.enclosing
        return False

    def names(self):
        return list(self.values)

    def depth(self) -> int:
        n = 0
        env = self.enclosing
        while env is not None:
            n += 1
            env = env.enclosing
        return n
