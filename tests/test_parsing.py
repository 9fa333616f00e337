"""Tests for package loading and declaration collection."""

import textwrap

import pytest

from genbase.errors import LoadError, NoSourceFilesError, ResolutionError
from genbase.parsing import PackageModel, Parser


def _source(code):
    return textwrap.dedent(code).lstrip()


POINT = "package p\ntype Point struct { X int; Y *int; Tags []string }\n"


def test_parse_point_struct(parser_config):
    pkg = Parser(config=parser_config).parse_string_source("point.go", POINT)
    declarations = pkg.all_declarations()
    assert [d.name for d in declarations] == ["Point"]

    record = declarations[0].as_record()
    x, y, tags = record.fields()
    assert x.name == "X" and x.is_int()
    assert y.is_ptr() and not y.is_int()
    assert tags.is_array()
    assert pkg.package_name() == "p"
    assert pkg.types is not None
    assert pkg.types.type_names() == ["Point"]


def test_declaration_order_is_stable(parser_config):
    code = _source('''
        package p

        type B int
        type (
            A string
            C = A
        )
        type Z struct{}
    ''')
    parser = Parser(config=parser_config)
    first = [d.name for d in parser.parse_string_source("x.go", code).all_declarations()]
    second = [d.name for d in parser.parse_string_source("x.go", code).all_declarations()]
    assert first == second == ["B", "A", "C", "Z"]


def test_by_name_ignores_unknown_names(parser_config):
    code = "package p\n\ntype A int\ntype B int\ntype C int\n"
    pkg = Parser(config=parser_config).parse_string_source("x.go", code)
    assert [d.name for d in pkg.by_name(["C", "A", "Missing"])] == ["A", "C"]
    assert pkg.by_name([]) == []
    assert [d.name for d in pkg.by_name(["B"])] == ["B"]
    assert pkg.find_declaration("B").name == "B"
    assert pkg.find_declaration("Missing") is None


def test_by_tag_uses_spec_doc_then_declaration_doc(parser_config):
    code = _source('''
        package p

        // User is stored.
        // +model table=users
        type User struct{}

        type (
            // +model
            Group struct{}

            // Plain has no tag.
            Plain struct{}
        )

        // +other
        type Other struct{}
    ''')
    pkg = Parser(config=parser_config).parse_string_source("x.go", code)
    tagged = pkg.by_tag("+model")
    assert [d.name for d in tagged] == ["User", "Group"]
    assert tagged[0].annotation.arguments == "table=users"
    assert tagged[1].annotation.arguments == ""
    assert pkg.by_tag("+missing") == []


def test_declaration_doc_falls_back_to_group_doc(parser_config):
    code = _source('''
        package p

        // Shared docs.
        type (
            A int
        )
    ''')
    pkg = Parser(config=parser_config).parse_string_source("x.go", code)
    assert pkg.find_declaration("A").doc.text() == "Shared docs."


def test_package_name_absent(parser_config):
    pkg = Parser(config=parser_config).parse_string_source("x.go", "type A int\n")
    assert pkg.package_name() is None


def test_parse_package_dir(tmp_path, write_go, parser_config):
    write_go("b.go", "package shop\n\ntype Order struct{ Item Item }\n")
    write_go("a.go", "package shop\n\ntype Item struct{ Name string }\n")
    write_go("a_test.go", "package shop\n\ntype Fixture struct{}\n")
    pkg = Parser(config=parser_config).parse_package_dir(str(tmp_path))
    assert pkg.path == str(tmp_path)
    assert [d.name for d in pkg.all_declarations()] == ["Item", "Order"]
    assert pkg.package_name() == "shop"


def test_parse_package_files_skips_non_go(tmp_path, write_go, parser_config):
    a = write_go("a.go", "package p\n\ntype A int\n")
    txt = write_go("notes.txt", "hello")
    pkg = Parser(config=parser_config).parse_package_files([a, txt])
    assert len(pkg.files) == 1
    assert pkg.path == "."


def test_no_source_files(tmp_path, write_go, parser_config):
    txt = write_go("notes.txt", "hello")
    parser = Parser(config=parser_config)
    with pytest.raises(NoSourceFilesError):
        parser.parse_package_files([txt])
    with pytest.raises(NoSourceFilesError):
        parser.parse_package_dir(str(tmp_path))


def test_package_model_requires_files():
    with pytest.raises(NoSourceFilesError):
        PackageModel(path="x", files=())


def test_syntax_error_is_load_error(parser_config):
    with pytest.raises(LoadError):
        Parser(config=parser_config).parse_string_source("x.go", "package p\ntype A struct {\n")


UNRESOLVED = _source('''
    package p

    import "github.com/does/not/exist"

    type A struct {
        B exist.Thing
    }
''')


def test_unresolvable_import_fails_strict(parser_config):
    with pytest.raises(ResolutionError) as exc_info:
        Parser(config=parser_config).parse_string_source("x.go", UNRESOLVED)
    assert "github.com/does/not/exist" in str(exc_info.value)


def test_unresolvable_import_tolerated_when_skipping(parser_config):
    pkg = Parser(skip_semantics_check=True, config=parser_config).parse_string_source("x.go", UNRESOLVED)
    assert pkg.types is None
    field = pkg.find_declaration("A").as_record().field("B")
    assert field.type_name() == "exist.Thing"


def test_package_clause_mismatch(tmp_path, write_go, parser_config):
    a = write_go("a.go", "package a\n")
    b = write_go("b.go", "package b\n")
    parser = Parser(config=parser_config)
    with pytest.raises(ResolutionError):
        parser.parse_package_files([a, b])
    lenient = Parser(skip_semantics_check=True, config=parser_config)
    assert lenient.parse_package_files([a, b]).package_name() == "a"


def test_by_name_rejects_bare_string(parser_config):
    code = "package p\n\ntype A int\ntype AB int\n"
    pkg = Parser(config=parser_config).parse_string_source("x.go", code)
    with pytest.raises(TypeError):
        pkg.by_name("AB")
    assert [d.name for d in pkg.by_name(["AB"])] == ["AB"]
