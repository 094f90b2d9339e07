"""
Interactive console for the Calru language.

Every input is lexed, parsed against one persistent `SymbolTable` and interpreted,
so declarations survive from one prompt to the next. Input whose `{` braces are
not yet balanced continues on a `... ` prompt.

Console commands:
    exit, quit, or a blank line   leave the console (as do EOF and Ctrl-C)
    verbose-mode                  toggle printing of the parsed statements
    env                           list the visible bindings
"""

from calru.calru_errors import CalruError
from calru.calru_interpreter import Interpreter
from calru.calru_lexer import tokenize
from calru.calru_parser import Parser
from calru.calru_symbols import SymbolTable


def read_source() -> str | None:
    """Reads one brace-balanced input, or returns None when the user leaves."""
    src_lines: list[str] = []
    brace_count = 0
    while True:
        prompt = ">>> " if not src_lines else "... "
        line = input(prompt)
        if not src_lines and line.strip() in ("", "exit", "quit"):
            return None
        src_lines.append(line)
        brace_count += line.count("{") - line.count("}")
        if brace_count <= 0:
            return "\n".join(src_lines).strip()


def print_env(table: SymbolTable) -> None:
    bindings = table.snapshot()
    if not bindings:
        print("[env] >>> No variables declared.")
        return
    for name, text in bindings.items():
        print(f"{name:>12} : {text}")


def run_source(src: str, table: SymbolTable, verbose: bool = False) -> None:
    """Lexes, parses and interprets one input against the session's table.

    The input runs against a copy of `table`, which is updated only once every
    statement has succeeded, so a failed input leaves no bindings behind.

    Raises:
        CalruError: On the first failure; `table` is left unchanged.
    """
    working = table.copy()
    statements = Parser(tokenize(src), working).parse()
    if verbose:
        for node in statements:
            print(f"[ast] >>> {node}")
    Interpreter(working).run(statements)
    table.restore(working)


def start_repl(verbose: bool = False) -> None:
    print("Calru REPL. Type 'exit' or 'quit' to leave.")
    table = SymbolTable()

    while True:
        try:
            src = read_source()
            if src is None:
                print("Exiting Calru REPL.")
                return
            if src.startswith("//"):
                continue
            if src.lower() == "verbose-mode":
                verbose = not verbose
                print(f"[mode] >>> Verbose mode {'ON' if verbose else 'OFF'}")
                continue
            if src.lower() == "env":
                print_env(table)
                continue
            try:
                run_source(src, table, verbose)
            except CalruError as e:
                print(f"[error] >>> {e.report()}")
        except (KeyboardInterrupt, EOFError):
            print("\nExiting Calru REPL.")
            break


def main() -> None:
    start_repl()


if __name__ == "__main__":
    main()
