"""
Lexically scoped symbol environment shared by the Calru parser and interpreter.

The environment is a stack of scopes, each a mapping from name to `Symbol`.
A name may be declared at most once per scope; lookup walks from the innermost
scope outward and returns the first match.

List mutation (`push_to_list`, `pop_from_list`) resolves the binding by name and
mutates the stored value in place. Values handed out by expression evaluation are
copies, so mutating through them would be invisible to later reads.
"""

from calru.calru_errors import (
    AlreadyDeclaredError,
    EmptyListError,
    NotAListError,
    UndeclaredError,
)
from calru.calru_types import SymbolType, SymbolValue


class Symbol:
    """A declared name: its declared type and current value."""

    def __init__(self, type_: SymbolType, value: SymbolValue) -> None:
        self.type = type_
        self.value = value

    def __repr__(self) -> str:
        return f"Symbol(type={self.type!r}, value={self.value!r})"


class SymbolTable:
    """A stack of name -> Symbol scopes. The global scope is never popped."""

    def __init__(self) -> None:
        self.scopes: list[dict[str, Symbol]] = [{}]

    @property
    def depth(self) -> int:
        return len(self.scopes)

    def enter_scope(self) -> None:
        self.scopes.append({})

    def exit_scope(self) -> None:
        if len(self.scopes) == 1:
            raise RuntimeError("Cannot exit global scope")
        self.scopes.pop()

    def declare(
        self,
        name: str,
        type_: SymbolType,
        value: SymbolValue,
        line: int = 0,
        col: int = 0,
    ) -> Symbol:
        """Binds `name` in the innermost scope.

        Raises:
            AlreadyDeclaredError: If the innermost scope already binds `name`.
        """
        scope = self.scopes[-1]
        if name in scope:
            raise AlreadyDeclaredError(name, line, col)
        symbol = Symbol(type_, value)
        scope[name] = symbol
        return symbol

    def is_declared_locally(self, name: str) -> bool:
        return name in self.scopes[-1]

    def lookup(self, name: str, line: int = 0, col: int = 0) -> Symbol:
        """Returns the innermost binding of `name`.

        Raises:
            UndeclaredError: If no scope binds `name`.
        """
        for scope in reversed(self.scopes):
            if name in scope:
                return scope[name]
        raise UndeclaredError(name, line, col)

    def assign(self, name: str, value: SymbolValue, line: int = 0, col: int = 0) -> None:
        """Replaces the value of the innermost binding of `name`."""
        self.lookup(name, line, col).value = value

    def _list_symbol(self, name: str, line: int, col: int) -> Symbol:
        symbol = self.lookup(name, line, col)
        if not symbol.value.type.is_list:
            raise NotAListError(name, line, col)
        return symbol

    def push_to_list(
        self, name: str, value: SymbolValue, line: int = 0, col: int = 0
    ) -> None:
        """Appends `value` to the list stored under `name`.

        Raises:
            UndeclaredError: If `name` is not bound.
            NotAListError: If the binding does not hold a list.
        """
        self._list_symbol(name, line, col).value.value.append(value)

    def pop_from_list(self, name: str, line: int = 0, col: int = 0) -> SymbolValue:
        """Removes and returns the last element of the list stored under `name`.

        Raises:
            UndeclaredError: If `name` is not bound.
            NotAListError: If the binding does not hold a list.
            EmptyListError: If the list is empty.
        """
        items = self._list_symbol(name, line, col).value.value
        if not items:
            raise EmptyListError(name, line, col)
        return items.pop()

    def copy(self) -> "SymbolTable":
        """Returns an independent copy of every scope; list values are copied too."""
        clone = SymbolTable()
        clone.scopes = [
            {name: Symbol(sym.type, sym.value.copy()) for name, sym in scope.items()}
            for scope in self.scopes
        ]
        return clone

    def restore(self, other: "SymbolTable") -> None:
        """Adopts the scopes of `other`, typically a copy that ran successfully."""
        self.scopes = other.scopes

    def snapshot(self) -> dict[str, str]:
        """Returns the visible bindings as name -> "Type = value" text, innermost winning."""
        visible: dict[str, str] = {}
        for scope in self.scopes:
            for name, symbol in scope.items():
                visible[name] = f"{symbol.type!r} = {symbol.value.display()}"
        return visible

    def __repr__(self) -> str:
        return f"SymbolTable(depth={self.depth}, bindings={self.snapshot()})"


__all__ = ["Symbol", "SymbolTable"]
