"""
Defines the abstract syntax tree (AST) node structure for the Calru programming language.

Classes:
    ASTNode:
        Represents a node in the syntax tree, used by the parser, interpreter and the
        IR generator. Carries the declared type text of a `let` and the type the
        checker inferred for every expression.

    ASTDict:
        TypedDict representation for serializing ASTNode instances to plain Python
        dictionaries, suitable for JSON output or debugging.

Node kinds:
    Expressions:
        "int", "float", "bool"      value holds the Python int/float/bool
        "identifier"                value holds the name
        "list"                      children are the elements
        "binary_op"                 value is the operator text, children are [left, right]
        "fetch"                     children are [list, index]
        "len"                       children are [list]
    Statements:
        "assign"                    `let`: value is the name, children [expr], type is the annotation
        "reassign"                  `ID := expr`: value is the name, children [expr]
        "print"                     children [operand]
        "if"                        value is the condition, children [then], else_children [else]
        "push"                      children [list, value]
        "pop"                       children [list]
        "loop"                      children are the body statements
        "break"

Example:
    node = ASTNode("assign", "x", [ASTNode("int", 3)], type_="int")
"""

from typing import Any, TypedDict, Union

from calru.calru_types import SymbolType

EXPRESSION_KINDS = frozenset(
    {"int", "float", "bool", "identifier", "list", "binary_op", "fetch", "len"}
)


class ASTDict(TypedDict, total=False):
    """
    TypedDict representation of an ASTNode used for serialization.

    Fields:
        kind (str): The type of AST node (e.g., "assign", "binary_op", "if").
        value (Any): The node's value, which may be a literal, name, or nested ASTDict.
        line (int): Line number in the source code where the node originates.
        col (int): Column number in the source code where the node originates.
        type (Optional[str]): Declared type annotation of a `let`.
        symbol_type (Optional[str]): Inferred type of an expression.
        children (List[ASTDict]): Primary child nodes in the AST hierarchy.
        else_children (List[ASTDict]): Alternate branch nodes (the `else` of an `if`).
    """

    kind: str
    value: Any
    line: int
    col: int
    type: str | None
    symbol_type: str | None
    children: list["ASTDict"]
    else_children: list["ASTDict"]


class ASTNode:
    """
    Represents a node in the abstract syntax tree (AST) for the Calru language.

    Args:
        kind (str): The type of node (see module docstring).
        value (Any, optional): A literal, a name, an operator, or another AST node
            (the condition of an `if`).
        children (list[ASTNode], optional): Primary child nodes in the syntax tree.
        line (int): Source line number (default is 0).
        col (int): Source column number (default is 0).
        type_ (str, optional): Declared type annotation of a `let` (e.g. "int", "[float]").

    Attributes:
        kind (str): Type of the AST node.
        value (Any): Value or nested node.
        children (list[ASTNode]): Main child nodes.
        else_children (list[ASTNode]): The else branch of an `if`.
        type (str | None): Type annotation.
        symbol_type (SymbolType | None): Type inferred by the checker; not part of equality.
        line (int): Line number in the source file.
        col (int): Column number in the source file.
    """

    def __init__(
        self,
        kind: str,
        value: Union[Any, "ASTNode"] = None,
        children: list["ASTNode"] | None = None,
        line: int = 0,
        col: int = 0,
        type_: str | None = None,
    ):
        self.kind = kind
        self.value = value
        self.children: list["ASTNode"] = children or []
        self.line = line
        self.col = col
        self.type = type_
        self.else_children: list["ASTNode"] = []
        self.symbol_type: SymbolType | None = None

    @property
    def is_expression(self) -> bool:
        return self.kind in EXPRESSION_KINDS

    def __repr__(self) -> str:
        parts = [f"{self.kind}"]
        if self.value is not None:
            parts.append(f"value={repr(self.value)}")
        if self.type is not None:
            parts.append(f"type_={self.type}")
        if self.children:
            preview = ", ".join(repr(c) for c in self.children[:3])
            if len(self.children) > 3:
                preview += ", ..."
            parts.append(f"children=[{preview}]")
        if self.else_children:
            preview = ", ".join(repr(c) for c in self.else_children[:3])
            parts.append(f"else_children=[{preview}]")
        return f"ASTNode({', '.join(parts)})"

    def __str__(self) -> str:
        """Renders the node in the compact form used by the diagnostic dump."""
        kind = self.kind
        kids = self.children
        if kind == "int":
            return f"Int({self.value})"
        if kind == "float":
            return f"Float({self.value})"
        if kind == "bool":
            return f"Boolean({'true' if self.value else 'false'})"
        if kind == "identifier":
            return f"Identifier({self.value})"
        if kind == "list":
            return "List[" + ", ".join(str(c) for c in kids) + "]"
        if kind == "binary_op":
            return f"BinaryOp({self.value}, {kids[0]}, {kids[1]})"
        if kind == "fetch":
            return f"Fetch({kids[0]}, {kids[1]})"
        if kind == "len":
            return f"Len({kids[0]})"
        if kind == "assign":
            return f"Assignment({self.value}:{self.type} = {kids[0]})"
        if kind == "reassign":
            return f"Assignment({self.value} = {kids[0]})"
        if kind == "print":
            return f"Print({kids[0]})"
        if kind == "if":
            text = f"If({self.value}, then {kids[0]}"
            if self.else_children:
                text += f", else {self.else_children[0]}"
            return text + ")"
        if kind == "push":
            return f"Push({kids[0]}, {kids[1]})"
        if kind == "pop":
            return f"Pop({kids[0]})"
        if kind == "loop":
            return "Loop{" + "; ".join(str(c) for c in kids) + "}"
        if kind == "break":
            return "Break"
        return repr(self)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, ASTNode):
            return False
        return (
            self.kind == other.kind
            and self.value == other.value
            and self.line == other.line
            and self.col == other.col
            and self.type == other.type
            and self.children == other.children
            and self.else_children == other.else_children
        )

    def to_dict(self) -> ASTDict:
        val: Any = self.value
        if isinstance(val, ASTNode):
            val = val.to_dict()

        return {
            "kind": self.kind,
            "value": val,
            "line": self.line,
            "col": self.col,
            "type": self.type,
            "symbol_type": repr(self.symbol_type) if self.symbol_type else None,
            "children": [c.to_dict() for c in self.children],
            "else_children": [c.to_dict() for c in self.else_children],
        }


__all__ = ["ASTDict", "ASTNode", "EXPRESSION_KINDS"]
