"""
Provides the `Transpiler` class and emitter interface for compiling Calru ASTs ahead of time.

Classes and Features:
    - Emitter (Protocol): Interface for all backend emitters. Requires `__init__` and `get_output`.
    - AsmEmitter: NASM x86-64 assembly backend.
    - IrEmitter: Plain text IR listing.
    - Transpiler: Lowers the AST to IR, then dispatches each instruction to the
      selected emitter's `emit_<op>` method.

Example:
    >>> transpiler = Transpiler("asm")
    >>> asm = transpiler.transpile(statements)

Raises:
    ValueError: If the target is not supported.
    TypeError: If the AST contains non-ASTNode items.
    LoweringError: If the program uses features the IR cannot express.
    NotImplementedError: If the emitter lacks an `emit_*` method for an instruction.
"""

from typing import Protocol

from calru.calru_ast import ASTNode
from calru.calru_ir import IRGenerator, IRInstruction
from calru.emitters.asm_emitter import AsmEmitter
from calru.emitters.ir_emitter import IrEmitter


class Emitter(Protocol):  # pragma: no cover
    """Protocol for all Calru backend emitters.

    Methods:
        __init__(): Initializes the emitter.
        get_output(): Returns the complete emitted code as a string.
    """

    def __init__(self) -> None: ...  # pragma: no cover

    def get_output(self) -> str: ...  # pragma: no cover


EmitterType = type[Emitter]
"""Alias for a concrete Emitter class type."""

TARGETS: dict[str, EmitterType] = {
    "asm": AsmEmitter,
    "ir": IrEmitter,
}


class Transpiler:
    """Compiles Calru statements for one output target.

    Attributes:
        target (str): The normalized target name.
        emitter (Emitter): The selected emitter instance.
    """

    def __init__(self, target: str) -> None:
        """
        Raises:
            ValueError: If the target is not supported.
        """
        target = target.lower()
        if target not in TARGETS:
            raise ValueError(f"Unknown transpilation target: {target!r}")
        self.target = target
        self.emitter: Emitter = TARGETS[target]()

    def transpile(self, ast: list[ASTNode]) -> str:
        """Lowers `ast` to IR and returns the emitted output for the selected target."""
        if not all(isinstance(node, ASTNode) for node in ast):
            raise TypeError("All items in AST must be ASTNode instances.")
        for instr in IRGenerator().generate(ast):
            self._visit(instr)
        return self.emitter.get_output()

    def _visit(self, instr: IRInstruction) -> None:
        method_name = f"emit_{instr.op.lower()}"
        if hasattr(self.emitter, method_name):
            getattr(self.emitter, method_name)(instr)
        else:
            raise NotImplementedError(
                f"No emitter method for instruction '{instr.op}' on target '{self.target}'"
            )


__all__ = ["Emitter", "TARGETS", "Transpiler"]
