"""
Renders Calru IR instructions as a plain text listing, one instruction per line.
"""

from calru.calru_ir import IRInstruction


class IrEmitter:
    """Emits the textual IR listing (`MOV R0, 5`, `PRINT R0`, ...)."""

    def __init__(self) -> None:
        self.lines: list[str] = []

    def get_output(self) -> str:
        return "\n".join(self.lines)

    def _append(self, instr: IRInstruction) -> None:
        self.lines.append(str(instr))

    emit_mov = _append
    emit_add = _append
    emit_sub = _append
    emit_mul = _append
    emit_div = _append
    emit_print = _append
