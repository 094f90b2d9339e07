import pytest
from hypothesis import given
from hypothesis import strategies as st

from calru.calru_ast import ASTNode
from calru.calru_errors import (
    AlreadyDeclaredError,
    CalruTypeError,
    ParseError,
    UndeclaredError,
)
from calru.calru_lexer import tokenize
from calru.calru_parser import Parser
from calru.calru_symbols import SymbolTable
from calru.calru_types import SymbolType, SymbolValue
from conftest import parse


def parse_program(source: str) -> tuple[list[ASTNode], SymbolTable]:
    return Parser(tokenize(source)).parse_program()


def test_let_with_addition_builds_expected_tree() -> None:
    ast, table = parse_program("let x:int := 1 + 2;")
    assert ast == [
        ASTNode(
            "assign",
            "x",
            [
                ASTNode(
                    "binary_op",
                    "+",
                    [
                        ASTNode("int", 1, line=1, col=14),
                        ASTNode("int", 2, line=1, col=18),
                    ],
                    line=1,
                    col=16,
                )
            ],
            line=1,
            col=1,
            type_="int",
        )
    ]
    assert str(ast[0]) == "Assignment(x:int = BinaryOp(+, Int(1), Int(2)))"
    assert table.lookup("x").value == SymbolValue.Int(3)


@pytest.mark.parametrize(  # type: ignore[misc]
    "source,expected",
    [
        (
            "let x:int := 1 + 2 * 3;",
            "Assignment(x:int = BinaryOp(+, Int(1), BinaryOp(*, Int(2), Int(3))))",
        ),
        (
            "let x:int := 1 - 2 - 3;",
            "Assignment(x:int = BinaryOp(-, BinaryOp(-, Int(1), Int(2)), Int(3)))",
        ),
        (
            "let x:int := (1 + 2) * 3;",
            "Assignment(x:int = BinaryOp(*, BinaryOp(+, Int(1), Int(2)), Int(3)))",
        ),
        (
            "let b:bool := 1 + 2 == 3;",
            "Assignment(b:bool = BinaryOp(==, BinaryOp(+, Int(1), Int(2)), Int(3)))",
        ),
        (
            "let b:bool := true && false || true;",
            "Assignment(b:bool = BinaryOp(||, BinaryOp(&&, Boolean(true), "
            "Boolean(false)), Boolean(true)))",
        ),
        (
            "let xs:[int] := [1, 2, 3];",
            "Assignment(xs:[int] = List[Int(1), Int(2), Int(3)])",
        ),
        ("stdout(2.5);", "Print(Float(2.5))"),
        ("loop { break; }", "Loop{Break}"),
        (
            "if (true) then stdout(1); else stdout(2); end",
            "If(Boolean(true), then Print(Int(1)), else Print(Int(2)))",
        ),
    ],
)
def test_statement_shapes(source: str, expected: str) -> None:
    assert [str(node) for node in parse(source)] == [expected]


def test_eager_let_values() -> None:
    _, table = parse_program("let x:int := 2 * 3; let y:int := x - 10 / 3;")
    assert table.lookup("x").value == SymbolValue.Int(6)
    assert table.lookup("y").value == SymbolValue.Int(3)


def test_comparison_and_additive_share_one_level() -> None:
    # parses as (3 == 1) + 2
    with pytest.raises(CalruTypeError, match=r"Operator '\+'"):
        parse("let b:bool := 3 == 1 + 2;")


def test_duplicate_declaration_fails_regardless_of_type() -> None:
    with pytest.raises(AlreadyDeclaredError, match="Variable 'x' already declared"):
        parse("let x:int := 1; let x:float := 2.0;")


def test_let_type_mismatch() -> None:
    with pytest.raises(CalruTypeError) as exc:
        parse("let x:int := 1.5;")
    assert exc.value.message == (
        "Type mismatch: cannot assign expression of type Float to variable of type Int"
    )


@pytest.mark.parametrize(  # type: ignore[misc]
    "source",
    [
        "let x:float := 1 + 2.0;",
        "let x:int := 1 * 2.0;",
        "let b:bool := 1 < 2.0;",
        "let b:bool := true && 1;",
        "let x:int := true + false;",
    ],
)
def test_operand_type_errors(source: str) -> None:
    with pytest.raises(CalruTypeError):
        parse(source)


def test_comparisons_yield_boolean() -> None:
    parser = Parser(tokenize("1.5 <= 2.5"))
    node = parser.parse_expression()
    assert node.symbol_type == SymbolType.BOOLEAN


def test_every_expression_node_is_typed() -> None:
    (node,) = parse("let xs:[float] := [1.0, 2.0]; ")
    expr = node.children[0]
    assert expr.symbol_type == SymbolType.list_of(SymbolType.FLOAT)
    assert all(child.symbol_type == SymbolType.FLOAT for child in expr.children)


def test_undeclared_variable() -> None:
    with pytest.raises(UndeclaredError, match="Undeclared variable 'y'"):
        parse("stdout(y);")


def test_self_reference_in_let_is_undeclared() -> None:
    with pytest.raises(UndeclaredError):
        parse("let x:int := x + 1;")


def test_reassignment() -> None:
    (_, node) = parse("let x:int := 1; x := x + 1;")
    assert node.kind == "reassign"
    assert str(node) == "Assignment(x = BinaryOp(+, Identifier(x), Int(1)))"


def test_reassignment_type_mismatch() -> None:
    with pytest.raises(CalruTypeError, match="Type mismatch"):
        parse("let x:int := 1; x := true;")


def test_reassignment_of_undeclared() -> None:
    with pytest.raises(UndeclaredError):
        parse("x := 1;")


@pytest.mark.parametrize(  # type: ignore[misc]
    "source",
    ["let xs:[int] := [];", "let xs:[int] := [1, 2.0];"],
)
def test_bad_list_literals(source: str) -> None:
    with pytest.raises(CalruTypeError):
        parse(source)


def test_list_methods() -> None:
    nodes = parse(
        "let xs:[int] := [1, 2]; let y:int := xs.fetch(0); let n:int := xs.len();"
        " xs.push(3); xs.pop();"
    )
    assert [str(n) for n in nodes[1:]] == [
        "Assignment(y:int = Fetch(Identifier(xs), Int(0)))",
        "Assignment(n:int = Len(Identifier(xs)))",
        "Push(Identifier(xs), Int(3))",
        "Pop(Identifier(xs))",
    ]


@pytest.mark.parametrize(  # type: ignore[misc]
    "source",
    [
        "let xs:[int] := [1]; let y:int := xs.fetch(true);",
        "let n:int := 1; let y:int := n.fetch(0);",
        "let n:int := 1; let y:int := n.len();",
        "let xs:[int] := [1]; xs.push(1.5);",
        "let n:int := 1; n.push(1);",
        "let n:int := 1; n.pop();",
        "let xs:[int] := [1]; let y:float := xs.fetch(0);",
    ],
)
def test_list_method_type_errors(source: str) -> None:
    with pytest.raises(CalruTypeError):
        parse(source)


def test_push_is_not_an_expression() -> None:
    with pytest.raises(ParseError, match="Expected 'fetch' or 'len'"):
        parse("let xs:[int] := [1]; let y:int := xs.push(1);")


def test_if_condition_must_be_boolean() -> None:
    with pytest.raises(CalruTypeError, match="must be of type Boolean"):
        parse("if (1) then stdout(1); end")


def test_if_branches_must_agree() -> None:
    with pytest.raises(CalruTypeError, match="branches"):
        parse("if (true) then stdout(1); else stdout(1.5); end")


def test_if_branches_with_statements_of_equal_type() -> None:
    (node,) = parse("if (false) then stdout(1); else stdout(2); end")
    assert node.symbol_type == SymbolType.INT


def test_if_without_else_takes_then_type() -> None:
    (node,) = parse("if (true) then loop { break; } end")
    assert node.symbol_type == SymbolType.VOID
    assert node.else_children == []


def test_if_branch_declarations_are_scoped() -> None:
    with pytest.raises(UndeclaredError):
        parse("if (true) then let y:int := 1; end stdout(y);")


def test_if_requires_end() -> None:
    with pytest.raises(ParseError, match="found end of input"):
        parse("if (true) then stdout(1);")


def test_if_branch_is_single_statement() -> None:
    with pytest.raises(ParseError, match="Expected 'else' or 'end'"):
        parse("if (true) then stdout(1); stdout(2); end")


def test_break_outside_loop() -> None:
    with pytest.raises(ParseError, match="'break'"):
        parse("break;")


def test_break_inside_if_inside_loop() -> None:
    (node,) = parse("loop { if (true) then break; end }")
    assert node.children[0].kind == "if"


def test_let_inside_loop_body() -> None:
    (node,) = parse("let i:int := 0; loop { let j:int := i; i := i + 1; break; }")[1:]
    assert [child.kind for child in node.children] == ["assign", "reassign", "break"]


def test_unclosed_loop() -> None:
    with pytest.raises(ParseError, match="'}'"):
        parse("loop { stdout(1);")


def test_scopes_restored_after_error() -> None:
    table = SymbolTable()
    with pytest.raises(ParseError):
        Parser(tokenize("loop { if (true) then stdout(1)"), table).parse()
    assert table.depth == 1


def test_invalid_statement_start() -> None:
    with pytest.raises(ParseError, match="Expected statement, found '1'"):
        parse("1;")


def test_missing_semicolon_reports_position() -> None:
    with pytest.raises(ParseError) as exc:
        parse("stdout(1)")
    assert str(exc.value) == "Expected ';', found end of input at line 1, column 10"
    assert exc.value.found is None


def test_missing_type_annotation() -> None:
    with pytest.raises(ParseError, match="type annotation"):
        parse("let x := 1;")


def test_identifier_statement_needs_assignment_or_method() -> None:
    with pytest.raises(ParseError):
        parse("let x:int := 1; x;")


def test_integer_literal_out_of_range() -> None:
    with pytest.raises(ParseError, match="64-bit"):
        parse("stdout(9223372036854775808);")


def test_runtime_fault_in_let_declares_default() -> None:
    _, table = parse_program("let xs:[int] := [1]; let y:int := xs.fetch(5);")
    assert table.lookup("y").value == SymbolValue.Int(0)


def test_parser_with_existing_table() -> None:
    table = SymbolTable()
    table.declare("x", SymbolType.INT, SymbolValue.Int(4))
    (node,) = Parser(tokenize("stdout(x * 2);"), table).parse()
    assert node.symbol_type == SymbolType.INT


@given(  # type: ignore[misc]
    name=st.from_regex(r"[a-z][a-z0-9_]{0,6}", fullmatch=True).filter(
        lambda s: s
        not in {"let", "if", "then", "else", "end", "loop", "break", "fetch"}
        | {"push", "pop", "len", "stdout", "true", "false"}
    ),
    a=st.integers(min_value=0, max_value=10**9),
    b=st.integers(min_value=0, max_value=10**9),
)
def test_addition_declares_sum(name: str, a: int, b: int) -> None:
    _, table = parse_program(f"let {name}:int := {a} + {b};")
    assert table.lookup(name).value == SymbolValue.Int(a + b)
