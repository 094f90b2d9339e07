from collections.abc import Callable

import pytest

from calru.calru_ast import ASTNode
from calru.calru_interpreter import Interpreter
from calru.calru_lexer import tokenize
from calru.calru_parser import Parser
from calru.calru_symbols import SymbolTable


def parse(source: str, table: SymbolTable | None = None) -> list[ASTNode]:
    return Parser(tokenize(source), table).parse()


@pytest.fixture  # type: ignore[misc]
def run_program(
    capsys: pytest.CaptureFixture[str],
) -> Callable[[str], tuple[str, SymbolTable]]:
    """Parses and interprets a program, returning what it printed and its environment."""

    def _run(source: str) -> tuple[str, SymbolTable]:
        statements, table = Parser(tokenize(source)).parse_program()
        Interpreter(table).run(statements)
        return capsys.readouterr().out, table

    return _run
