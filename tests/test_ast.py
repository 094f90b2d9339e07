import json

from calru.calru_ast import ASTNode
from calru.calru_types import SymbolType
from conftest import parse


def test_equality_ignores_inferred_type() -> None:
    a = ASTNode("int", 1, line=1, col=1)
    b = ASTNode("int", 1, line=1, col=1)
    b.symbol_type = SymbolType.INT
    assert a == b
    assert a != ASTNode("int", 1, line=1, col=2)
    assert a != "int"


def test_is_expression() -> None:
    assert ASTNode("binary_op", "+").is_expression
    assert not ASTNode("print").is_expression


def test_repr_truncates_children() -> None:
    node = ASTNode("loop", children=[ASTNode("break") for _ in range(5)])
    assert repr(node).endswith(", ...])")


def test_to_dict_is_json_serializable() -> None:
    (node,) = parse("if (1 < 2) then stdout(1); else stdout(2); end")
    data = node.to_dict()
    assert data["kind"] == "if"
    assert data["value"]["kind"] == "binary_op"
    assert data["value"]["symbol_type"] == "Boolean"
    assert data["children"][0]["kind"] == "print"
    assert data["else_children"][0]["children"][0]["value"] == 2
    assert json.loads(json.dumps(data)) == data


def test_str_of_list_statements() -> None:
    nodes = parse("let xs:[bool] := [true]; let n:int := xs.len();")
    assert str(nodes[0]) == "Assignment(xs:[bool] = List[Boolean(true)])"
    assert str(nodes[1]) == "Assignment(n:int = Len(Identifier(xs)))"
