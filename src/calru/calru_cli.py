"""
Calru CLI Entrypoint.

This module provides the command-line interface for running Calru source code.
It supports interpretation, diagnostic dumps, ahead-of-time compilation to
assembly or IR, and the interactive REPL.

Features:
    - Read source from `.cru` files or inline strings.
    - Lex, parse, type-check and interpret the program.
    - Dump the token stream or the AST (plain or JSON) before running.
    - Compile the integer subset to NASM x86-64 assembly or an IR listing.
    - Launch an interactive REPL with optional verbosity.

Example usage:
    calru hello.cru
    calru -s "let x:int := 2; stdout(x * 21);"
    calru hello.cru --tokens --ast
    calru hello.cru -t asm -o hello.asm
    calru --repl --verbose

Functions:
    run_calru(source, is_string=False, tokens=False, ast=False, target=None, out=None,
              as_json=False) -> None:
        Executes the full Calru pipeline (lex → parse → interpret, or lex → parse → transpile).

    main() -> None:
        Parses CLI arguments, invokes the appropriate action and reports failures
        as `[error] >>> ...` on stderr with exit status 1.
"""

import argparse
import json
import sys

from calru.calru_errors import CalruError
from calru.calru_interpreter import Interpreter
from calru.calru_lexer import tokenize
from calru.calru_parser import Parser
from calru.calru_transpile import TARGETS, Transpiler

SOURCE_EXTENSION = ".cru"


def run_calru(
    source: str,
    is_string: bool = False,
    tokens: bool = False,
    ast: bool = False,
    target: str | None = None,
    out: str | None = None,
    as_json: bool = False,
) -> None:
    """
    Run the Calru toolchain on a file or an inline program.

    Args:
        source (str): Calru source code, or a path to a `.cru` file.
        is_string (bool): If True, treats `source` as raw code instead of a file path.
        tokens (bool): If True, prints the token stream before parsing.
        ast (bool): If True, prints the parsed statements before running.
        target (str | None): "asm" or "ir" to compile instead of interpreting.
        out (str | None): Optional path to write compiled output to. If None, prints to stdout.
        as_json (bool): With `ast`, dump the tree as JSON instead of the compact form.

    Raises:
        ValueError: If `is_string` is False and the source does not end with '.cru'.
        CalruError: On the first lexical, parse, type or runtime failure.
    """
    if not is_string and not source.endswith(SOURCE_EXTENSION):
        raise ValueError(f"Only {SOURCE_EXTENSION} files are supported.")
    # 1. Read source
    if not is_string:
        with open(source, encoding="utf-8") as f:
            source = f.read()

    # 2. Lexing
    token_list = tokenize(source)
    if tokens:
        for tok in token_list:
            print(f"{tok!r} at {tok.position}")

    # 3. Parsing and type checking
    statements, table = Parser(token_list).parse_program()
    if ast:
        if as_json:
            print(json.dumps([node.to_dict() for node in statements], indent=2))
        else:
            for node in statements:
                print(node)

    # 4a. Compiling
    if target:
        code = Transpiler(target).transpile(statements)
        if out:
            with open(out, "w", encoding="utf-8") as f:
                f.write(code)
            print(f"[ok] >>> wrote {target} output to {out}")
        else:
            print(code)
        return

    # 4b. Interpreting
    Interpreter(table).run(statements)


def main() -> None:
    """
    Entry point for the Calru CLI.

    Parses command-line arguments and dispatches to the appropriate mode:
    - Launches the REPL if no arguments are passed or `--repl` is specified.
    - Otherwise, runs the Calru toolchain on the given file or string.

    Supported flags:
        - `-s`, `--string`: Interpret source as a raw string instead of a file path.
        - `--tokens`: Print the token stream.
        - `--ast`: Print the parsed statements.
        - `--json`: Print the AST as JSON (implies `--ast`).
        - `-t`, `--target`: Compile to 'asm' or 'ir' instead of interpreting.
        - `-o`, `--out`: Write compiled output to a file (requires `--target`).
        - `--repl`: Launch the interactive REPL.
        - `--verbose`: Enable verbose REPL mode.
    """
    if len(sys.argv) == 1:
        # No args passed: open REPL instead
        from calru.calru_repl import start_repl

        start_repl()
        return
    parser = argparse.ArgumentParser(prog="calru")
    parser.add_argument("source", nargs="?", help="Filename or raw source (with -s)")
    parser.add_argument(
        "-s", "--string", action="store_true", help="Interpret source as literal string"
    )
    parser.add_argument("--tokens", action="store_true", help="Print the token stream")
    parser.add_argument("--ast", action="store_true", help="Print the parsed statements")
    parser.add_argument(
        "--json", dest="as_json", action="store_true", help="Print the AST as JSON"
    )
    parser.add_argument(
        "-t",
        "--target",
        choices=tuple(TARGETS),
        default=None,
        help="Compile to assembly or IR instead of interpreting",
    )
    parser.add_argument("-o", "--out", metavar="OUTFILE", help="Output to file")
    parser.add_argument(
        "--repl",
        action="store_true",
        help="Launch interactive REPL instead of running a program",
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Verbose REPL mode (if --repl)"
    )

    args = parser.parse_args()

    if args.out and not args.target:
        parser.error("--out requires --target")

    if args.repl or args.source is None:
        from calru.calru_repl import start_repl

        start_repl(verbose=args.verbose)
        return

    try:
        run_calru(
            source=args.source,
            is_string=args.string,
            tokens=args.tokens,
            ast=args.ast or args.as_json,
            target=args.target,
            out=args.out,
            as_json=args.as_json,
        )
    except CalruError as e:
        print(f"[error] >>> {e.report()}", file=sys.stderr)
        sys.exit(1)
    except (OSError, ValueError) as e:
        print(f"[error] >>> {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__" and not any("pytest" in arg for arg in sys.argv):
    main()
