"""
Exception hierarchy for the Calru toolchain.

Every failure the lexer, parser, type checker, interpreter or assembly backend
can report is a subclass of `CalruError`. Errors carry the 1-based source
position they were detected at (0 when unknown) and render it into the message.

Hierarchy:
    CalruError
    ├── LexicalError                  unrecognized character
    ├── ParseError                    unexpected or missing token
    ├── CalruTypeError                operand, branch or declaration mismatch
    │   ├── AlreadyDeclaredError
    │   └── UndeclaredError
    ├── CalruRuntimeError             faults while executing
    │   ├── IndexOutOfBoundsError
    │   ├── EmptyListError
    │   ├── NotAListError
    │   ├── DivisionByZeroError
    │   └── UnsupportedOperationError
    └── LoweringError                 AST not expressible in the IR/assembly backend

`break` is not an error: statement execution returns it as a control signal.
"""


class CalruError(Exception):
    """Base class for all Calru diagnostics.

    Attributes:
        message (str): The diagnostic without position information.
        line (int): 1-based source line, or 0 when unknown.
        col (int): 1-based source column, or 0 when unknown.
    """

    kind = "Error"

    def __init__(self, message: str, line: int = 0, col: int = 0) -> None:
        self.message = message
        self.line = line
        self.col = col
        super().__init__(self._format())

    def _format(self) -> str:
        if self.line:
            return f"{self.message} at line {self.line}, column {self.col}"
        return self.message

    def report(self) -> str:
        """Returns the message prefixed with the error category."""
        return f"{self.kind}: {self}"


class LexicalError(CalruError):
    kind = "LexicalError"

    def __init__(self, char: str, line: int = 0, col: int = 0) -> None:
        self.char = char
        super().__init__(f"Invalid character {char!r}", line, col)


class ParseError(CalruError):
    """Raised when the token stream does not match the grammar.

    Attributes:
        expected (str): Description of the construct the parser wanted.
        found (str | None): Text of the offending token, None at end of input.
    """

    kind = "ParseError"

    def __init__(
        self, expected: str, found: str | None, line: int = 0, col: int = 0
    ) -> None:
        self.expected = expected
        self.found = found
        shown = "end of input" if found is None else repr(found)
        super().__init__(f"Expected {expected}, found {shown}", line, col)


class CalruTypeError(CalruError):
    kind = "TypeError"


class AlreadyDeclaredError(CalruTypeError):
    def __init__(self, name: str, line: int = 0, col: int = 0) -> None:
        self.name = name
        super().__init__(f"Variable '{name}' already declared", line, col)


class UndeclaredError(CalruTypeError):
    def __init__(self, name: str, line: int = 0, col: int = 0) -> None:
        self.name = name
        super().__init__(f"Undeclared variable '{name}'", line, col)


class CalruRuntimeError(CalruError):
    kind = "RuntimeError"


class IndexOutOfBoundsError(CalruRuntimeError):
    def __init__(self, index: int, length: int, line: int = 0, col: int = 0) -> None:
        self.index = index
        self.length = length
        super().__init__(
            f"Index {index} out of bounds for list of length {length}", line, col
        )


class EmptyListError(CalruRuntimeError):
    def __init__(self, name: str, line: int = 0, col: int = 0) -> None:
        self.name = name
        super().__init__(f"Cannot pop from empty list '{name}'", line, col)


class NotAListError(CalruRuntimeError):
    def __init__(self, name: str, line: int = 0, col: int = 0) -> None:
        self.name = name
        super().__init__(f"Variable '{name}' is not a list", line, col)


class DivisionByZeroError(CalruRuntimeError):
    def __init__(self, line: int = 0, col: int = 0) -> None:
        super().__init__("Division by zero", line, col)


class UnsupportedOperationError(CalruRuntimeError):
    pass


class LoweringError(CalruError):
    kind = "LoweringError"


__all__ = [
    "AlreadyDeclaredError",
    "CalruError",
    "CalruRuntimeError",
    "CalruTypeError",
    "DivisionByZeroError",
    "EmptyListError",
    "IndexOutOfBoundsError",
    "LexicalError",
    "LoweringError",
    "NotAListError",
    "ParseError",
    "UndeclaredError",
    "UnsupportedOperationError",
]
