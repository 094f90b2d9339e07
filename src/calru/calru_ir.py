"""
Lowers checked Calru statements into a flat register-based instruction list.

Only the integer arithmetic subset is expressible: integer literals,
identifiers, `+ - * /`, `let`, reassignment and `stdout`. Expressions are
evaluated into virtual registers `R0, R1, ...`; a binary operation reuses its
left operand's register for the result and releases the right one, so only
right-nested expressions need more than two registers. Numbering restarts at
`R0` for every statement.

Example:
    >>> [str(i) for i in IRGenerator().generate(statements)]
    ['MOV R0, 1', 'MOV R1, 2', 'ADD R0, R1', 'MOV x, R0', 'MOV R0, x', 'PRINT R0']
"""

import re

from calru.calru_ast import ASTNode
from calru.calru_errors import LoweringError
from calru.calru_types import SymbolType

IR_OPS = ("MOV", "ADD", "SUB", "MUL", "DIV", "PRINT")
ARITH_INSTRUCTIONS = {"+": "ADD", "-": "SUB", "*": "MUL", "/": "DIV"}
REGISTER_PATTERN = re.compile(r"R\d+")


def is_register(operand: str) -> bool:
    return REGISTER_PATTERN.fullmatch(operand) is not None


def is_literal(operand: str) -> bool:
    return operand.lstrip("-").isdigit()


class IRInstruction:
    """One IR instruction.

    Attributes:
        op (str): One of MOV, ADD, SUB, MUL, DIV, PRINT.
        dest (str | None): Destination register or variable.
        src (str | None): Source register, variable or integer literal.
        operand (str | None): The register PRINT writes out.
    """

    def __init__(
        self,
        op: str,
        dest: str | None = None,
        src: str | None = None,
        operand: str | None = None,
    ) -> None:
        if op not in IR_OPS:
            raise ValueError(f"Unknown IR operation: {op!r}")
        self.op = op
        self.dest = dest
        self.src = src
        self.operand = operand

    def __str__(self) -> str:
        if self.op == "PRINT":
            return f"PRINT {self.operand}"
        return f"{self.op} {self.dest}, {self.src}"

    def __repr__(self) -> str:
        return f"IRInstruction({str(self)!r})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, IRInstruction) and str(self) == str(other)

    def __hash__(self) -> int:
        return hash(str(self))


class IRGenerator:
    """Walks statement nodes and accumulates `IRInstruction`s."""

    def __init__(self) -> None:
        self.instructions: list[IRInstruction] = []
        self.next_register = 0

    def generate(self, statements: list[ASTNode]) -> list[IRInstruction]:
        for node in statements:
            self.lower_statement(node)
        return self.instructions

    def emit(
        self,
        op: str,
        dest: str | None = None,
        src: str | None = None,
        operand: str | None = None,
    ) -> None:
        self.instructions.append(IRInstruction(op, dest, src, operand))

    def new_register(self) -> str:
        register = f"R{self.next_register}"
        self.next_register += 1
        return register

    def lower_statement(self, node: ASTNode) -> None:
        method = getattr(self, f"lower_{node.kind}", None)
        if method is None:
            raise LoweringError(
                f"Cannot lower '{node.kind}' statements to IR", node.line, node.col
            )
        self.next_register = 0
        method(node)

    def lower_assign(self, node: ASTNode) -> None:
        name = self.variable_name(node)
        self.require_int(node.children[0])
        self.emit("MOV", name, self.lower_expression(node.children[0]))

    lower_reassign = lower_assign

    def lower_print(self, node: ASTNode) -> None:
        self.require_int(node.children[0])
        self.emit("PRINT", operand=self.lower_expression(node.children[0]))

    def lower_expression(self, node: ASTNode) -> str:
        """Emits code computing `node` and returns the register holding the result."""
        if node.kind == "int":
            register = self.new_register()
            self.emit("MOV", register, str(node.value))
            return register
        if node.kind == "identifier":
            register = self.new_register()
            self.emit("MOV", register, self.variable_name(node))
            return register
        if node.kind == "binary_op" and node.value in ARITH_INSTRUCTIONS:
            left = self.lower_expression(node.children[0])
            right = self.lower_expression(node.children[1])
            self.emit(ARITH_INSTRUCTIONS[node.value], left, right)
            # the right operand's register is free again
            self.next_register = int(left[1:]) + 1
            return left
        raise LoweringError(f"Cannot lower expression {node} to IR", node.line, node.col)

    def require_int(self, node: ASTNode) -> None:
        if node.symbol_type is not None and node.symbol_type != SymbolType.INT:
            raise LoweringError(
                f"Only Int values can be lowered to IR, found {node.symbol_type!r}",
                node.line,
                node.col,
            )

    def variable_name(self, node: ASTNode) -> str:
        name = str(node.value)
        if is_register(name):
            raise LoweringError(
                f"Variable name '{name}' clashes with an IR register", node.line, node.col
            )
        return name


def generate_ir(statements: list[ASTNode]) -> list[IRInstruction]:
    return IRGenerator().generate(statements)


__all__ = ["IRGenerator", "IRInstruction", "generate_ir", "is_literal", "is_register"]
