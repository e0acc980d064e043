from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import NamedTuple, Optional

import pytest

import csvtext


@dataclass
class Layout:
    name: str
    value: int
    other: float


@dataclass
class WithDefault:
    name: str
    count: int = 7
    note: str = field(default_factory=str)


@dataclass
class Opt:
    name: str
    amount: Optional[int]


class Point(NamedTuple):
    x: int
    y: int
    label: str = "none"


@dataclass
class Unsupported:
    items: list


def read_rows(text, *args, **kwargs):
    return list(csvtext.parse(text, *args, **kwargs))


def test_struct_binding_in_declared_order():
    rows = read_rows("Hello,65,63.63\nWorld,123,3673.562", Layout)
    assert rows == [Layout("Hello", 65, 63.63), Layout("World", 123, 3673.562)]


def test_struct_binding_ignores_extra_columns():
    assert read_rows("x,1,2.5,extra", Layout) == [Layout("x", 1, 2.5)]


def test_struct_binding_short_record_fails_conversion():
    with pytest.raises(csvtext.ConversionError) as exc:
        read_rows("x", Layout)
    assert exc.value.field_name == "value"
    assert exc.value.raw_text == ""
    assert exc.value.type_name == "int"


def test_struct_binding_with_header_reorders():
    ds = csvtext.parse("other,name,value\n63.63,Hello,65", Layout, header=True)
    assert ds.header == ["name", "value", "other"]
    assert list(ds) == [Layout("Hello", 65, 63.63)]


def test_struct_binding_with_positional_header_names():
    rows = read_rows("o,n,v\n1.5,x,2", Layout, header=["n", "v", "o"])
    assert rows == [Layout("x", 2, 1.5)]


def test_struct_binding_missing_column():
    with pytest.raises(csvtext.HeaderMismatch) as exc:
        csvtext.parse("name\nx", WithDefault, header=True)
    assert exc.value.missing == ["count", "note"]

    rows = read_rows("name\nx", WithDefault, header=True, mode="permissive")
    assert rows == [WithDefault("x", 7, "")]


def test_struct_binding_header_placeholders_keep_positions():
    text = "name,v,other\nx,2,1.5"
    ds = csvtext.parse(text, Layout, header=[None, "v", None])
    assert ds.header == ["name", "v", "other"]
    assert list(ds) == [Layout("x", 2, 1.5)]

    rows = read_rows(text, Layout, header=["", "v"], mode="permissive")
    assert rows == [Layout("x", 2, 1.5)]


def test_struct_binding_too_many_header_names():
    with pytest.raises(csvtext.HeaderMismatch):
        csvtext.parse("a,b,c,d\n1,2,3,4", Layout, header=["a", "b", "c", "d"])


def test_namedtuple_binding_with_defaults():
    rows = read_rows("y,x\n2,1", Point, header=True, mode="permissive")
    assert rows == [Point(1, 2, "none")]


def test_pair_list_binding_yields_tuples():
    rows = read_rows("Hello,65\nWorld,1", [("name", str), ("value", int)])
    assert rows == [("Hello", 65), ("World", 1)]


def test_optional_field_maps_empty_to_none():
    assert read_rows("x,\ny,3", Opt) == [Opt("x", None), Opt("y", 3)]


def test_conversion_error_in_permissive_mode():
    with pytest.raises(csvtext.ConversionError) as exc:
        read_rows("Hello,sixty,1.0", Layout, mode="permissive")
    assert exc.value.field_name == "value"
    assert exc.value.raw_text == "sixty"
    assert exc.value.record == 1


def test_describe_fields():
    specs = csvtext.describe_fields(Opt)
    assert [s.name for s in specs] == ["name", "amount"]
    assert [s.position for s in specs] == [0, 1]
    assert specs[1].type is int
    assert specs[1].optional

    specs = csvtext.describe_fields(WithDefault)
    assert specs[1].default_value() == 7
    assert specs[2].default_value() == ""
    assert specs[0].default_value() is None


def test_unsupported_types_fail_fast():
    with pytest.raises(TypeError):
        csvtext.describe_fields(Unsupported)
    with pytest.raises(TypeError):
        csvtext.parse("a", list)
    with pytest.raises(TypeError):
        csvtext.describe_fields(int)


def test_row_binder_direct_use():
    binder = csvtext.RowBinder(Layout)
    assert binder.names == ["name", "value", "other"]
    assert binder.bind(["a", "1", "2"]) == Layout("a", 1, 2.0)


def test_is_row_type():
    assert csvtext.is_row_type(Layout)
    assert csvtext.is_row_type(Point)
    assert csvtext.is_row_type([("a", int)])
    assert not csvtext.is_row_type(str)
    assert not csvtext.is_row_type(int)
    assert not csvtext.is_row_type([])
    with pytest.raises(TypeError):
        csvtext.parse("a,b", [])


@pytest.mark.parametrize("raw", [" 5", "5 ", "1_000", "5.0", "", "0x10"])
def test_int_conversion_is_strict(raw):
    with pytest.raises(csvtext.ConversionError):
        csvtext.convert(raw, int, field_name="n")


def test_float_conversion():
    assert csvtext.convert("-1.5e3", float) == -1500.0
    assert csvtext.convert(".5", float) == 0.5
    assert csvtext.convert("inf", float) == float("inf")
    with pytest.raises(csvtext.ConversionError) as exc:
        csvtext.convert("1e999", float, field_name="f")
    assert "out of range" in exc.value.reason
    with pytest.raises(csvtext.ConversionError):
        csvtext.convert("1,5", float)


def test_other_conversions():
    assert csvtext.convert("Yes", bool) is True
    assert csvtext.convert("0", bool) is False
    assert csvtext.convert("2021-05-01T12:30:00", datetime) == datetime(2021, 5, 1, 12, 30)
    assert csvtext.convert("3.10", Decimal) == Decimal("3.10")
    assert csvtext.convert(" as is ", str) == " as is "
    with pytest.raises(csvtext.ConversionError):
        csvtext.convert("maybe", bool)
    with pytest.raises(csvtext.ConversionError):
        csvtext.convert(" yes", bool)
    with pytest.raises(csvtext.ConversionError):
        csvtext.convert("yesterday", datetime)
