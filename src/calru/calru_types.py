"""
Static types and runtime values of the Calru language.

Classes:
    SymbolType: Tagged type (`Int`, `Float`, `Boolean`, `List(T)`, `Void`) with
        structural equality.
    SymbolValue: Tagged runtime value mirroring `SymbolType`. List values remember
        their element type so that a list emptied by `pop` keeps its type.

Integers are 64-bit signed: `check_int_range` raises when a result leaves the
range, standing in for the native overflow fault.
"""

from typing import Any

from calru.calru_errors import CalruRuntimeError

INT_MIN = -(2**63)
INT_MAX = 2**63 - 1

SCALAR_KINDS = ("Int", "Float", "Boolean", "Void")


class SymbolType:
    """A Calru static type.

    Attributes:
        kind (str): One of "Int", "Float", "Boolean", "List", "Void".
        element (SymbolType | None): Element type when `kind` is "List".
    """

    INT: "SymbolType"
    FLOAT: "SymbolType"
    BOOLEAN: "SymbolType"
    VOID: "SymbolType"

    def __init__(self, kind: str, element: "SymbolType | None" = None) -> None:
        if kind == "List":
            if element is None:
                raise ValueError("List type requires an element type")
        elif kind not in SCALAR_KINDS:
            raise ValueError(f"Unknown type kind: {kind!r}")
        elif element is not None:
            raise ValueError(f"{kind} type takes no element type")
        self.kind = kind
        self.element = element

    @classmethod
    def list_of(cls, element: "SymbolType") -> "SymbolType":
        return cls("List", element)

    @classmethod
    def from_annotation(cls, text: str) -> "SymbolType":
        """Maps a source annotation (`int`, `[float]`, ...) to its type.

        Raises:
            ValueError: If the annotation is not a Calru type name.
        """
        scalars = {"int": cls.INT, "float": cls.FLOAT, "bool": cls.BOOLEAN}
        if text in scalars:
            return scalars[text]
        if text.startswith("[") and text.endswith("]") and text[1:-1] in scalars:
            return cls.list_of(scalars[text[1:-1]])
        raise ValueError(f"Unknown type annotation: {text!r}")

    @property
    def is_list(self) -> bool:
        return self.kind == "List"

    @property
    def is_numeric(self) -> bool:
        return self.kind in ("Int", "Float")

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, SymbolType)
            and self.kind == other.kind
            and self.element == other.element
        )

    def __hash__(self) -> int:
        return hash((self.kind, self.element))

    def __repr__(self) -> str:
        if self.element is not None:
            return f"List({self.element!r})"
        return self.kind


SymbolType.INT = SymbolType("Int")
SymbolType.FLOAT = SymbolType("Float")
SymbolType.BOOLEAN = SymbolType("Boolean")
SymbolType.VOID = SymbolType("Void")


def check_int_range(value: int, line: int = 0, col: int = 0) -> int:
    if not INT_MIN <= value <= INT_MAX:
        raise CalruRuntimeError("Integer overflow", line, col)
    return value


class SymbolValue:
    """A Calru runtime value.

    Attributes:
        type (SymbolType): The value's static type.
        value (int | float | bool | list[SymbolValue] | None): The payload.
    """

    def __init__(self, type_: SymbolType, value: Any = None) -> None:
        self.type = type_
        self.value = value

    @classmethod
    def Int(cls, value: int) -> "SymbolValue":
        return cls(SymbolType.INT, value)

    @classmethod
    def Float(cls, value: float) -> "SymbolValue":
        return cls(SymbolType.FLOAT, value)

    @classmethod
    def Boolean(cls, value: bool) -> "SymbolValue":
        return cls(SymbolType.BOOLEAN, value)

    @classmethod
    def List(
        cls, element: SymbolType, items: "list[SymbolValue] | None" = None
    ) -> "SymbolValue":
        return cls(SymbolType.list_of(element), list(items or []))

    @classmethod
    def Void(cls) -> "SymbolValue":
        return cls(SymbolType.VOID)

    @classmethod
    def default_for(cls, type_: SymbolType) -> "SymbolValue":
        """Returns the zero value of a type (0, 0.0, false, empty list)."""
        if type_.kind == "Int":
            return cls.Int(0)
        if type_.kind == "Float":
            return cls.Float(0.0)
        if type_.kind == "Boolean":
            return cls.Boolean(False)
        if type_.kind == "List":
            assert type_.element is not None  # for mypy
            return cls.List(type_.element)
        return cls.Void()

    def copy(self) -> "SymbolValue":
        if self.type.is_list:
            return SymbolValue(self.type, [item.copy() for item in self.value])
        return SymbolValue(self.type, self.value)

    def display(self) -> str:
        """Returns the text `stdout` prints for this value."""
        kind = self.type.kind
        if kind == "Boolean":
            return "true" if self.value else "false"
        if kind == "Float":
            return repr(self.value)
        if kind == "List":
            return "[" + ", ".join(item.display() for item in self.value) + "]"
        if kind == "Void":
            return "void"
        return str(self.value)

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, SymbolValue)
            and self.type == other.type
            and self.value == other.value
        )

    def __hash__(self) -> int:
        if self.type.is_list:
            return hash((self.type, tuple(self.value)))
        return hash((self.type, self.value))

    def __repr__(self) -> str:
        if self.type.is_list:
            return f"List({self.value!r})"
        if self.type.kind == "Void":
            return "Void"
        return f"{self.type.kind}({self.value!r})"


__all__ = ["INT_MAX", "INT_MIN", "SymbolType", "SymbolValue", "check_int_range"]
