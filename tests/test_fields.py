"""Tests for struct field shape and kind predicates."""

import textwrap

import pytest

from genbase.errors import NotRecordShapeError
from genbase.parsing import Parser


SOURCE = '''
package shapes

import "time"

type Sample struct {
    I     int
    I64   int64
    F32   float32
    F64   float64
    S     string
    B     bool
    T     time.Time
    PI    *int
    Names []string
    Grid  [3]int
    P     *Item
    PA    *[]Item
    AP    []*Item
    PAP   *[]*Item
    M     map[string]int
    X, Y  float64 `json:"x,omitempty" db:"coord"`
    *Item
}

type Item struct{}

type Alias = Item

type Number int
'''


@pytest.fixture
def record(parser_config):
    pkg = Parser(config=parser_config).parse_string_source(
        "shapes.go", textwrap.dedent(SOURCE).lstrip()
    )
    return pkg.find_declaration("Sample").as_record()


def test_fields_in_declaration_order(record):
    names = [f.name for f in record.fields()]
    assert names == [
        "I", "I64", "F32", "F64", "S", "B", "T", "PI", "Names", "Grid",
        "P", "PA", "AP", "PAP", "M", "X", "Y", "Item",
    ]


def test_embedded_field_named_after_type(record):
    item = record.field("Item")
    assert item.embedded is True
    assert item.is_ptr()


@pytest.mark.parametrize("name,kind", [
    ("I", "int"),
    ("I64", "int64"),
    ("F32", "float32"),
    ("F64", "float64"),
    ("S", "string"),
    ("B", "bool"),
    ("T", "time.Time"),
    ("Names", "string"),
    ("Grid", "int"),
    ("PI", None),
    ("P", None),
    ("M", None),
])
def test_primitive_kind(record, name, kind):
    assert record.field(name).primitive_kind() == kind


def test_kind_predicates(record):
    assert record.field("I").is_int()
    assert record.field("I").is_number()
    assert record.field("I64").is_int64()
    assert record.field("F32").is_float32()
    assert record.field("F64").is_float64()
    assert record.field("S").is_string()
    assert record.field("B").is_bool()
    assert record.field("T").is_time()
    assert not record.field("S").is_number()


def test_pointer_hides_primitive_kind(record):
    pi = record.field("PI")
    assert pi.is_ptr()
    assert not pi.is_int()
    assert not pi.is_number()
    assert pi.base_type_name() == "int"


def test_collection_keeps_primitive_kind(record):
    names = record.field("Names")
    assert names.is_array()
    assert names.is_string()
    assert not names.is_ptr()


@pytest.mark.parametrize("name,expected", [
    ("P", (True, False, False, False, False)),
    ("Names", (False, True, False, False, False)),
    ("PA", (True, False, True, False, False)),
    ("AP", (False, True, False, True, False)),
    ("PAP", (True, False, True, False, True)),
    ("I", (False, False, False, False, False)),
])
def test_shape_predicates(record, name, expected):
    field = record.field(name)
    assert (
        field.is_ptr(),
        field.is_array(),
        field.is_ptr_array(),
        field.is_array_ptr(),
        field.is_ptr_array_ptr(),
    ) == expected


def test_type_name_and_wrappers(record):
    pap = record.field("PAP")
    assert pap.type_name() == "*[]*Item"
    assert pap.base_type_name() == "Item"
    assert pap.wrappers() == ("pointer", "collection", "pointer")
    assert record.field("M").type_name() == "map[string]int"


def test_multi_name_fields_share_tag(record):
    x, y = record.field("X"), record.field("Y")
    assert x.tag == y.tag == 'json:"x,omitempty" db:"coord"'
    assert x.tag_value("json") == "x,omitempty"
    assert y.tag_value("db") == "coord"
    assert x.tag_value("yaml") is None
    assert record.field("I").tag == ""


def test_non_struct_declaration_is_not_a_record(parser_config):
    pkg = Parser(config=parser_config).parse_string_source(
        "shapes.go", textwrap.dedent(SOURCE).lstrip()
    )
    number = pkg.find_declaration("Number")
    assert not number.is_record()
    with pytest.raises(NotRecordShapeError):
        number.as_record()
    # An alias of a struct type is not itself a struct type expression.
    assert not pkg.find_declaration("Alias").is_record()


@pytest.mark.parametrize("name,spelling", [
    ("I", "int"),
    ("I64", "int64"),
    ("F32", "float32"),
    ("F64", "float64"),
    ("S", "string"),
    ("B", "bool"),
    ("T", "time.Time"),
])
def test_primitive_type_name_is_literal_spelling(record, name, spelling):
    assert record.field(name).type_name() == spelling


@pytest.mark.parametrize("name,numeric", [
    ("I", True),
    ("I64", True),
    ("F32", True),
    ("F64", True),
    ("S", False),
    ("B", False),
    ("T", False),
])
def test_is_number_only_for_numeric_kinds(record, name, numeric):
    assert record.field(name).is_number() is numeric


def test_parenthesized_type_is_normalized(parser_config):
    code = "package p\n\ntype R struct {\n    D (*int)\n    E [](string)\n}\n"
    pkg = Parser(config=parser_config).parse_string_source("paren.go", code)
    record = pkg.find_declaration("R").as_record()
    d, e = record.field("D"), record.field("E")
    assert d.type_name() == "*int"
    assert d.is_ptr()
    assert not d.is_int()
    assert e.type_name() == "[]string"
    assert e.is_string()
