"""Tests for import lookup."""

import textwrap

from genbase.lookup import find_import
from genbase.tree import parse_file


def _unit(imports):
    code = "package p\n\nimport (\n" + textwrap.indent(imports.strip(), "    ") + "\n)\n"
    return parse_file("p.go", code)


def test_lookup_by_last_segment():
    unit = _unit('"fmt"\n"example.com/project/models"')
    spec = find_import(unit, "models")
    assert spec.path == "example.com/project/models"


def test_lookup_by_alias():
    unit = _unit('m "example.com/project/models"')
    assert find_import(unit, "m").path == "example.com/project/models"


def test_lookup_by_full_path():
    unit = _unit('"fmt"\n"example.com/project/models"')
    assert find_import(unit, "fmt").path == "fmt"
    assert find_import(unit, "example.com/project/models").path == "example.com/project/models"


def test_alias_wins_over_earlier_segment_match():
    unit = _unit('"example.com/a/models"\nmodels "example.com/b/types"')
    assert find_import(unit, "models").path == "example.com/b/types"


def test_segment_wins_over_earlier_full_path_match():
    unit = _unit('"models"\n"example.com/x/models"')
    assert find_import(unit, "models").path == "example.com/x/models"


def test_lookup_missing():
    unit = _unit('"fmt"')
    assert find_import(unit, "json") is None


def test_source_unit_find_import_delegates():
    unit = _unit('js "encoding/json"')
    spec = unit.find_import("js")
    assert spec.quoted_path == '"encoding/json"'
