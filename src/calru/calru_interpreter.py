"""
Tree-walking interpreter for parsed Calru programs.

The interpreter executes statements for effect against a `SymbolTable`, usually
the one the parser populated while checking the same statements.

Execution model:
    - `execute_statement` returns an `Outcome`: COMPLETED, or BROKE_OUT when a
      `break` is propagating toward the nearest enclosing loop. Failures are raised
      as `CalruError` subclasses and never confused with a loop exit.
    - `let` evaluates its expression, checks it against the annotation, then
      refreshes the binding when the innermost scope already holds the name (the
      parser declared it while checking) or declares it otherwise.
    - Each `if` branch and each loop iteration runs in a fresh nested scope, so a
      `let` inside a loop body is declared anew on every iteration.
    - Arithmetic never promotes: mixing Int and Float is an
      `UnsupportedOperationError`. Int results are range-checked to 64 bits;
      division truncates toward zero and dividing by zero raises.
    - `&&` and `||` evaluate both operands, left first.

Example:
    >>> statements, table = Parser(tokenize("let x:int := 2; stdout(x * 3);")).parse_program()
    >>> Interpreter(table).run(statements)
    6
"""

import enum
from typing import TextIO

from calru.calru_ast import ASTNode
from calru.calru_errors import (
    CalruRuntimeError,
    CalruTypeError,
    DivisionByZeroError,
    IndexOutOfBoundsError,
    NotAListError,
    UnsupportedOperationError,
)
from calru.calru_symbols import SymbolTable
from calru.calru_types import SymbolType, SymbolValue, check_int_range


class Outcome(enum.Enum):
    COMPLETED = "completed"
    BROKE_OUT = "broke_out"


def truncating_div(left: int, right: int) -> int:
    quotient = abs(left) // abs(right)
    return quotient if (left >= 0) == (right >= 0) else -quotient


class Interpreter:
    """Executes Calru statements.

    Attributes:
        symbols (SymbolTable): The environment statements read and mutate.
        stream (TextIO | None): Where `stdout` writes; None means `sys.stdout`.
    """

    def __init__(
        self, symbols: SymbolTable | None = None, stream: TextIO | None = None
    ) -> None:
        self.symbols = symbols if symbols is not None else SymbolTable()
        self.stream = stream

    def run(self, statements: list[ASTNode]) -> None:
        """Executes each statement in order.

        Raises:
            CalruError: The first failure, unchanged.
            CalruRuntimeError: If a `break` escapes every loop.
        """
        for statement in statements:
            if self.execute_statement(statement) is Outcome.BROKE_OUT:
                raise CalruRuntimeError(
                    "'break' outside of loop", statement.line, statement.col
                )

    def execute_block(self, statements: list[ASTNode]) -> Outcome:
        for statement in statements:
            if self.execute_statement(statement) is Outcome.BROKE_OUT:
                return Outcome.BROKE_OUT
        return Outcome.COMPLETED

    def execute_statement(self, node: ASTNode) -> Outcome:
        method = getattr(self, f"exec_{node.kind}", None)
        if method is None:
            raise CalruRuntimeError(
                f"Unsupported statement '{node.kind}'", node.line, node.col
            )
        outcome: Outcome = method(node)
        return outcome

    # Statements

    def exec_assign(self, node: ASTNode) -> Outcome:
        assert node.type is not None  # for mypy
        declared = SymbolType.from_annotation(node.type)
        value = self.evaluate_expression(node.children[0])
        if value.type != declared:
            raise CalruTypeError(
                f"Type mismatch: cannot assign expression of type {value.type!r} "
                f"to variable of type {declared!r}",
                node.line,
                node.col,
            )
        name = str(node.value)
        if self.symbols.is_declared_locally(name):
            self.symbols.assign(name, value, node.line, node.col)
        else:
            self.symbols.declare(name, declared, value, node.line, node.col)
        return Outcome.COMPLETED

    def exec_reassign(self, node: ASTNode) -> Outcome:
        symbol = self.symbols.lookup(str(node.value), node.line, node.col)
        value = self.evaluate_expression(node.children[0])
        if value.type != symbol.type:
            raise CalruTypeError(
                f"Type mismatch: cannot assign expression of type {value.type!r} "
                f"to variable of type {symbol.type!r}",
                node.line,
                node.col,
            )
        symbol.value = value
        return Outcome.COMPLETED

    def exec_print(self, node: ASTNode) -> Outcome:
        value = self.evaluate_expression(node.children[0])
        print(value.display(), file=self.stream)
        return Outcome.COMPLETED

    def exec_if(self, node: ASTNode) -> Outcome:
        condition = self.evaluate_expression(node.value)
        if condition.type != SymbolType.BOOLEAN:
            raise CalruTypeError(
                f"Condition must be of type Boolean, found {condition.type!r}",
                node.line,
                node.col,
            )
        branch = node.children if condition.value else node.else_children
        if not branch:
            return Outcome.COMPLETED
        self.symbols.enter_scope()
        try:
            return self.execute_block(branch)
        finally:
            self.symbols.exit_scope()

    def exec_loop(self, node: ASTNode) -> Outcome:
        while True:
            self.symbols.enter_scope()
            try:
                outcome = self.execute_block(node.children)
            finally:
                self.symbols.exit_scope()
            if outcome is Outcome.BROKE_OUT:
                return Outcome.COMPLETED

    def exec_break(self, node: ASTNode) -> Outcome:
        return Outcome.BROKE_OUT

    def exec_push(self, node: ASTNode) -> Outcome:
        target = node.children[0]
        name = str(target.value)
        symbol = self.symbols.lookup(name, target.line, target.col)
        if not symbol.type.is_list:
            raise NotAListError(name, target.line, target.col)
        value = self.evaluate_expression(node.children[1])
        if value.type != symbol.type.element:
            raise CalruTypeError(
                f"Type mismatch: cannot push {value.type!r} onto {symbol.type!r}",
                node.line,
                node.col,
            )
        self.symbols.push_to_list(name, value, node.line, node.col)
        return Outcome.COMPLETED

    def exec_pop(self, node: ASTNode) -> Outcome:
        target = node.children[0]
        self.symbols.pop_from_list(str(target.value), target.line, target.col)
        return Outcome.COMPLETED

    # Expressions

    def evaluate_expression(self, node: ASTNode) -> SymbolValue:
        method = getattr(self, f"eval_{node.kind}", None)
        if method is None:
            raise CalruRuntimeError(
                f"Cannot evaluate '{node.kind}' as an expression", node.line, node.col
            )
        value: SymbolValue = method(node)
        return value

    def eval_int(self, node: ASTNode) -> SymbolValue:
        return SymbolValue.Int(check_int_range(int(node.value), node.line, node.col))

    def eval_float(self, node: ASTNode) -> SymbolValue:
        return SymbolValue.Float(float(node.value))

    def eval_bool(self, node: ASTNode) -> SymbolValue:
        return SymbolValue.Boolean(bool(node.value))

    def eval_identifier(self, node: ASTNode) -> SymbolValue:
        return self.symbols.lookup(str(node.value), node.line, node.col).value.copy()

    def eval_list(self, node: ASTNode) -> SymbolValue:
        items = [self.evaluate_expression(child) for child in node.children]
        if not items:
            raise CalruTypeError(
                "Cannot infer the type of an empty list literal", node.line, node.col
            )
        element = items[0].type
        for item in items[1:]:
            if item.type != element:
                raise CalruTypeError(
                    f"List elements must share one type, found {element!r} and {item.type!r}",
                    node.line,
                    node.col,
                )
        return SymbolValue.List(element, items)

    def _list_value(self, node: ASTNode) -> SymbolValue:
        value = self.evaluate_expression(node)
        if not value.type.is_list:
            name = str(node.value) if node.kind == "identifier" else str(node)
            raise NotAListError(name, node.line, node.col)
        return value

    def eval_fetch(self, node: ASTNode) -> SymbolValue:
        items = self._list_value(node.children[0]).value
        index = self.evaluate_expression(node.children[1])
        if index.type != SymbolType.INT:
            raise CalruTypeError(
                f"List index must be of type Int, found {index.type!r}",
                node.line,
                node.col,
            )
        if index.value < 0 or index.value >= len(items):
            raise IndexOutOfBoundsError(index.value, len(items), node.line, node.col)
        fetched: SymbolValue = items[index.value]
        return fetched.copy()

    def eval_len(self, node: ASTNode) -> SymbolValue:
        return SymbolValue.Int(len(self._list_value(node.children[0]).value))

    def eval_binary_op(self, node: ASTNode) -> SymbolValue:
        left = self.evaluate_expression(node.children[0])
        right = self.evaluate_expression(node.children[1])
        return self.apply_operator(str(node.value), left, right, node)

    def apply_operator(
        self, op: str, left: SymbolValue, right: SymbolValue, node: ASTNode
    ) -> SymbolValue:
        """Computes `left op right`, dispatching on the runtime type pair."""
        line, col = node.line, node.col
        if left.type == right.type:
            kind = left.type.kind
            a, b = left.value, right.value
            if op == "==":
                return SymbolValue.Boolean(a == b)
            if op == "!=":
                return SymbolValue.Boolean(a != b)
            if kind in ("Int", "Float"):
                if op == ">":
                    return SymbolValue.Boolean(a > b)
                if op == "<":
                    return SymbolValue.Boolean(a < b)
                if op == ">=":
                    return SymbolValue.Boolean(a >= b)
                if op == "<=":
                    return SymbolValue.Boolean(a <= b)
                if op in ("+", "-", "*", "/"):
                    return self._arithmetic(op, kind, a, b, line, col)
            if kind == "Boolean":
                if op == "&&":
                    return SymbolValue.Boolean(a and b)
                if op == "||":
                    return SymbolValue.Boolean(a or b)
        raise UnsupportedOperationError(
            f"Unsupported operator '{op}' for {left.type!r} and {right.type!r}",
            line,
            col,
        )

    def _arithmetic(
        self, op: str, kind: str, a: int | float, b: int | float, line: int, col: int
    ) -> SymbolValue:
        if op == "/" and b == 0:
            raise DivisionByZeroError(line, col)
        if kind == "Float":
            if op == "+":
                return SymbolValue.Float(a + b)
            if op == "-":
                return SymbolValue.Float(a - b)
            if op == "*":
                return SymbolValue.Float(a * b)
            return SymbolValue.Float(a / b)
        assert isinstance(a, int) and isinstance(b, int)  # for mypy
        if op == "+":
            result = a + b
        elif op == "-":
            result = a - b
        elif op == "*":
            result = a * b
        else:
            result = truncating_div(a, b)
        return SymbolValue.Int(check_int_range(result, line, col))


__all__ = ["Interpreter", "Outcome", "truncating_div"]
