import pytest
from hypothesis import given
from hypothesis import strategies as st

from calru.calru_errors import CalruRuntimeError
from calru.calru_types import INT_MAX, INT_MIN, SymbolType, SymbolValue, check_int_range


@pytest.mark.parametrize(  # type: ignore[misc]
    "text,expected",
    [
        ("int", SymbolType.INT),
        ("float", SymbolType.FLOAT),
        ("bool", SymbolType.BOOLEAN),
        ("[int]", SymbolType.list_of(SymbolType.INT)),
        ("[float]", SymbolType.list_of(SymbolType.FLOAT)),
        ("[bool]", SymbolType.list_of(SymbolType.BOOLEAN)),
    ],
)
def test_from_annotation(text: str, expected: SymbolType) -> None:
    assert SymbolType.from_annotation(text) == expected


@pytest.mark.parametrize("text", ["string", "[[int]]", "[]", "Int"])  # type: ignore[misc]
def test_from_annotation_rejects_unknown(text: str) -> None:
    with pytest.raises(ValueError):
        SymbolType.from_annotation(text)


def test_type_equality_is_structural() -> None:
    assert SymbolType.list_of(SymbolType.INT) == SymbolType("List", SymbolType("Int"))
    assert SymbolType.list_of(SymbolType.INT) != SymbolType.list_of(SymbolType.FLOAT)
    assert SymbolType.INT != SymbolType.FLOAT
    assert len({SymbolType.INT, SymbolType("Int")}) == 1


def test_type_repr() -> None:
    assert repr(SymbolType.INT) == "Int"
    assert repr(SymbolType.list_of(SymbolType.BOOLEAN)) == "List(Boolean)"


def test_invalid_type_construction() -> None:
    with pytest.raises(ValueError):
        SymbolType("List")
    with pytest.raises(ValueError):
        SymbolType("Int", SymbolType.INT)
    with pytest.raises(ValueError):
        SymbolType("String")


def test_type_predicates() -> None:
    assert SymbolType.INT.is_numeric
    assert SymbolType.FLOAT.is_numeric
    assert not SymbolType.BOOLEAN.is_numeric
    assert SymbolType.list_of(SymbolType.INT).is_list
    assert not SymbolType.INT.is_list


@pytest.mark.parametrize(  # type: ignore[misc]
    "value,expected",
    [
        (SymbolValue.Int(-7), "-7"),
        (SymbolValue.Float(2.5), "2.5"),
        (SymbolValue.Float(3.0), "3.0"),
        (SymbolValue.Boolean(True), "true"),
        (SymbolValue.Boolean(False), "false"),
        (
            SymbolValue.List(SymbolType.INT, [SymbolValue.Int(1), SymbolValue.Int(2)]),
            "[1, 2]",
        ),
        (SymbolValue.List(SymbolType.BOOLEAN), "[]"),
        (SymbolValue.Void(), "void"),
    ],
)
def test_display(value: SymbolValue, expected: str) -> None:
    assert value.display() == expected


def test_default_values() -> None:
    assert SymbolValue.default_for(SymbolType.INT) == SymbolValue.Int(0)
    assert SymbolValue.default_for(SymbolType.FLOAT) == SymbolValue.Float(0.0)
    assert SymbolValue.default_for(SymbolType.BOOLEAN) == SymbolValue.Boolean(False)
    empty = SymbolValue.default_for(SymbolType.list_of(SymbolType.FLOAT))
    assert empty.type == SymbolType.list_of(SymbolType.FLOAT)
    assert empty.value == []


def test_copy_is_deep_for_lists() -> None:
    original = SymbolValue.List(SymbolType.INT, [SymbolValue.Int(1)])
    duplicate = original.copy()
    duplicate.value.append(SymbolValue.Int(2))
    assert original.display() == "[1]"
    assert duplicate.display() == "[1, 2]"


def test_value_repr() -> None:
    assert repr(SymbolValue.Int(3)) == "Int(3)"
    assert repr(SymbolValue.Void()) == "Void"


def test_values_of_different_types_differ() -> None:
    assert SymbolValue.Int(1) != SymbolValue.Float(1.0)


@given(st.integers(min_value=INT_MIN, max_value=INT_MAX))  # type: ignore[misc]
def test_check_int_range_accepts_64_bit(value: int) -> None:
    assert check_int_range(value) == value


@given(  # type: ignore[misc]
    st.one_of(st.integers(min_value=INT_MAX + 1), st.integers(max_value=INT_MIN - 1))
)
def test_check_int_range_rejects_overflow(value: int) -> None:
    with pytest.raises(CalruRuntimeError, match="Integer overflow"):
        check_int_range(value)
