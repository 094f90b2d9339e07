"""
Translates Calru IR instructions into NASM x86-64 assembly for Linux.

This module defines the `AsmEmitter` class, the backend the `Transpiler` selects for
the "asm" target. Each IR instruction is handed to the matching `emit_*` method,
which appends one group of assembly instructions to the text section.

Layout of the generated program:
    - `section .data`: one `dq` slot per variable (`var_<name>`) and per distinct
      integer literal (`lit_<n>`, `lit_m<n>` for negatives), plus the `buffer`
      used by `print_int`.
    - `section .text`: `_start`, the lowered program, an `exit(0)` syscall, and the
      `print_int` routine.

Register mapping:
    Virtual registers R0..R4 live in the callee-saved registers rbx, r12, r13, r14
    and r15, so `print_int` and `idiv` never clobber them. An expression needing a
    sixth register raises `LoweringError`.

Behavior:
    - DIV moves the dividend into rax, sign-extends with `cqo` and uses `idiv`.
    - PRINT passes the value in rdi to `print_int`, which converts it to ASCII
      (with a leading '-' for negatives), appends a newline and issues `write(1, ...)`.

Example:
    nasm -f elf64 out.asm && ld out.o -o out && ./out
"""

from calru.calru_errors import LoweringError
from calru.calru_ir import IRInstruction, is_literal, is_register

PHYSICAL_REGISTERS = ("rbx", "r12", "r13", "r14", "r15")
BUFFER_SIZE = 32

PRINT_INT_ROUTINE = f"""\
print_int:
    mov rax, rdi
    lea rsi, [buffer + {BUFFER_SIZE - 1}]
    mov byte [rsi], 10
    mov rcx, 1
    xor r8, r8
    test rax, rax
    jns .convert
    mov r8, 1
    neg rax
.convert:
    mov r9, 10
.digit:
    xor rdx, rdx
    div r9
    add dl, '0'
    dec rsi
    mov [rsi], dl
    inc rcx
    test rax, rax
    jnz .digit
    test r8, r8
    jz .write
    dec rsi
    mov byte [rsi], '-'
    inc rcx
.write:
    mov rax, 1
    mov rdi, 1
    mov rdx, rcx
    syscall
    ret"""


class AsmEmitter:
    """Emits NASM x86-64 assembly from Calru IR instructions.

    Attributes:
        lines (list[str]): Instructions of the program body, already indented.
        variables (dict[str, str]): Variable name -> data label, in first-use order.
        literals (dict[str, str]): Literal text -> data label, in first-use order.
    """

    def __init__(self) -> None:
        self.lines: list[str] = []
        self.variables: dict[str, str] = {}
        self.literals: dict[str, str] = {}

    def indent_str(self) -> str:
        return "    "

    def line(self, text: str) -> None:
        self.lines.append(self.indent_str() + text)

    def get_output(self) -> str:
        """Returns the complete assembly program as a single string."""
        data = ["section .data"]
        data += [f"    {label} dq 0" for label in self.variables.values()]
        data += [f"    {label} dq {value}" for value, label in self.literals.items()]
        data.append(f"    buffer times {BUFFER_SIZE} db 0")

        text = ["section .text", "    global _start", "", "_start:"]
        text += self.lines
        text += ["    mov rax, 60", "    xor rdi, rdi", "    syscall", "", PRINT_INT_ROUTINE]
        return "\n".join(data + [""] + text) + "\n"

    def register(self, name: str) -> str:
        index = int(name[1:])
        if index >= len(PHYSICAL_REGISTERS):
            raise LoweringError(
                f"Expression needs more than {len(PHYSICAL_REGISTERS)} registers"
            )
        return PHYSICAL_REGISTERS[index]

    def operand(self, text: str) -> str:
        """Maps an IR operand to a physical register or a `qword` memory reference."""
        if is_register(text):
            return self.register(text)
        if is_literal(text):
            label = self.literals.setdefault(text, "lit_" + text.replace("-", "m"))
            return f"qword [{label}]"
        label = self.variables.setdefault(text, f"var_{text}")
        return f"qword [{label}]"

    def emit_mov(self, instr: IRInstruction) -> None:
        assert instr.dest is not None and instr.src is not None  # for mypy
        dest = self.operand(instr.dest)
        src = self.operand(instr.src)
        if not is_register(instr.dest) and not is_register(instr.src):
            self.line(f"mov rax, {src}")
            src = "rax"
        self.line(f"mov {dest}, {src}")

    def _arith(self, mnemonic: str, instr: IRInstruction) -> None:
        assert instr.dest is not None and instr.src is not None  # for mypy
        self.line(f"{mnemonic} {self.operand(instr.dest)}, {self.operand(instr.src)}")

    def emit_add(self, instr: IRInstruction) -> None:
        self._arith("add", instr)

    def emit_sub(self, instr: IRInstruction) -> None:
        self._arith("sub", instr)

    def emit_mul(self, instr: IRInstruction) -> None:
        self._arith("imul", instr)

    def emit_div(self, instr: IRInstruction) -> None:
        assert instr.dest is not None and instr.src is not None  # for mypy
        dest = self.operand(instr.dest)
        self.line(f"mov rax, {dest}")
        self.line("cqo")
        self.line(f"idiv {self.operand(instr.src)}")
        self.line(f"mov {dest}, rax")

    def emit_print(self, instr: IRInstruction) -> None:
        assert instr.operand is not None  # for mypy
        self.line(f"mov rdi, {self.operand(instr.operand)}")
        self.line("call print_int")
