"""Tests for the tree-sitter based Go loader."""

import textwrap

import pytest

from genbase.errors import LoadError
from genbase.tree import (
    Collection,
    FuncDecl,
    Ident,
    MapType,
    Pointer,
    QualifiedIdent,
    StructType,
    parse_file,
    parse_source_file,
)


def _parse(code, filename="sample.go"):
    return parse_file(filename, textwrap.dedent(code).lstrip())


def test_parse_package_and_imports():
    unit = _parse('''
        package models

        import (
            "fmt"
            js "encoding/json"
            _ "embed"
        )

        import "time"
    ''')
    assert unit.package_name == "models"
    assert [i.path for i in unit.imports] == ["fmt", "encoding/json", "embed", "time"]
    assert unit.imports[1].name == "js"
    assert unit.imports[2].name == "_"
    assert unit.imports[0].name is None


def test_parse_without_package_clause():
    unit = _parse("type A int\n")
    assert unit.package_name is None
    assert len(unit.type_decls()) == 1


def test_type_declarations_keep_source_order():
    unit = _parse('''
        package p

        type A int

        type (
            B string
            C = B
        )

        type D struct{}
    ''')
    names = [spec.name for decl in unit.type_decls() for spec in decl.specs]
    assert names == ["A", "B", "C", "D"]
    grouped = unit.type_decls()[1]
    assert grouped.grouped is True
    assert grouped.specs[1].alias is True


def test_type_expressions():
    unit = _parse('''
        package p

        import "time"

        type T struct {
            A *[]*Item
            B map[string][]int
            C [4]byte
            D time.Time
        }
    ''')
    struct = unit.type_decls()[0].specs[0].type
    assert isinstance(struct, StructType)
    a, b, c, d = [f.type for f in struct.fields]
    assert a == Pointer(Collection(Pointer(Ident("Item"))))
    assert b == MapType(Ident("string"), Collection(Ident("int")))
    assert c == Collection(Ident("byte"), length="4")
    assert d == QualifiedIdent("time", "Time")


def test_struct_fields_multiple_names_embedded_and_tags():
    unit = _parse('''
        package p

        type T struct {
            X, Y int `json:"xy"`
            *Base
            io.Reader
        }
    ''')
    fields = unit.type_decls()[0].specs[0].type.fields
    assert fields[0].names == ("X", "Y")
    assert fields[0].tag == '`json:"xy"`'
    assert fields[1].embedded is True
    assert fields[1].type == Pointer(Ident("Base"))
    assert fields[2].embedded is True
    assert fields[2].type == QualifiedIdent("io", "Reader")


def test_doc_comments_for_ungrouped_and_grouped_specs():
    unit = _parse('''
        package p

        // A is documented on the declaration.
        type A int

        // Group doc.
        type (
            // B doc.
            B int

            C int
        )
    ''')
    first, group = unit.type_decls()
    assert first.doc.text() == "A is documented on the declaration."
    # go/parser attaches ungrouped docs to the declaration only.
    assert first.specs[0].doc is None
    assert group.doc.text() == "Group doc."
    assert group.specs[0].doc.text() == "B doc."
    assert group.specs[1].doc is None


def test_comment_separated_by_blank_line_is_not_doc():
    unit = _parse('''
        package p

        // Detached comment.

        type A int
    ''')
    assert unit.type_decls()[0].doc is None


def test_field_doc_and_trailing_comment():
    unit = _parse('''
        package p

        type T struct {
            // Name doc.
            Name string // trailing
            Age  int
        }
    ''')
    name, age = unit.type_decls()[0].specs[0].type.fields
    assert name.doc.text() == "Name doc."
    assert name.comment.text() == "trailing"
    assert age.doc is None
    assert age.comment is None


def test_trailing_comment_does_not_become_next_field_doc():
    unit = _parse('''
        package p

        type T struct {
            A int // about A
            B int
        }
    ''')
    a, b = unit.type_decls()[0].specs[0].type.fields
    assert a.comment is not None
    assert b.doc is None


def test_function_bodies_are_dropped():
    unit = _parse('''
        package p

        func Helper(a int, b ...string) (int, error) {
            type local struct{}
            return 0, nil
        }

        func (p *Point) Move(dx int) {}
    ''')
    funcs = [d for d in unit.decls if isinstance(d, FuncDecl)]
    assert [f.name for f in funcs] == ["Helper", "Move"]
    assert funcs[0].signature.params == (Ident("int"), Collection(Ident("string")))
    assert funcs[0].signature.results == (Ident("int"), Ident("error"))
    assert funcs[1].receiver == Pointer(Ident("Point"))
    assert unit.type_decls() == ()


def test_syntax_error_raises_load_error_with_position():
    with pytest.raises(LoadError) as exc_info:
        _parse('''
            package p

            type A struct {
                X int
        ''', filename="broken.go")
    assert exc_info.value.path == "broken.go"
    assert "syntax error" in str(exc_info.value)


def test_statement_outside_function_is_rejected():
    with pytest.raises(LoadError):
        _parse('''
            package p

            x := 1
        ''')


def test_invalid_utf8_is_rejected():
    with pytest.raises(LoadError):
        parse_file("bad.go", b"package p\n// \xff\xfe\n")


def test_parse_source_file_missing(tmp_path):
    with pytest.raises(LoadError) as exc_info:
        parse_source_file(str(tmp_path / "missing.go"))
    assert "missing.go" in exc_info.value.path
