## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘


class EasyError(Exception):
    def __init__(self, message: str = "", *, line: int | None = None):
        """Base class for all errors raised while lexing, parsing or running a program."""
        super().__init__(message)
        self.message: str = message
        self.line: int | None = line

    def __str__(self):
        return self.message if self.line is None else f"{self.message} (line {self.line})"

class EasyParseError(EasyError):
    def __init__(self, message, *, filename=None, line=None, column=None, token=None):
        super().__init__(message, line=line)
        self.filename = filename
        self.column = column
        self.token = token


class EasyRuntimeError(EasyError, RuntimeError):
    pass

class EasyNameError(EasyRuntimeError, NameError):
    pass

class EasyTypeError(EasyRuntimeError, TypeError):
    """Operands or conditions that are not of the type an operation requires."""
    pass

class EasyArityError(EasyTypeError):
    pass

class EasyZeroDivisionError(EasyRuntimeError, ZeroDivisionError):
    pass

class EasyRedefinitionError(EasyRuntimeError):
    pass

class EasyInputError(EasyRuntimeError, EOFError):
    pass

class EasyRecursionError(EasyRuntimeError, RecursionError):
    """Function calls nested deeper than the runtime's configured budget."""
    def __init__(self, message: str = "", *, line=None, depth=None):
        super().__init__(message, line=line)
        self.depth = depth
