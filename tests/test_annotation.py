"""Tests for annotation tags in doc comments."""

import pytest

from genbase.annotation import find_annotation, match_line
from genbase.tree.nodes import Comment, CommentGroup


def _group(*texts):
    comments = tuple(Comment(text=t, line=i + 1) for i, t in enumerate(texts))
    return CommentGroup(comments=comments, start_line=1, end_line=len(texts))


@pytest.mark.parametrize("line,expected", [
    ("+genbase", ""),
    ("  +genbase  ", ""),
    ("+genbase kind=User", "kind=User"),
    ("+genbase\tplural", "plural"),
    ("+genbasex", None),
    ("+GENBASE", None),
    ("see +genbase", None),
    ("", None),
])
def test_match_line(line, expected):
    assert match_line(line, "+genbase") == expected


def test_find_annotation_in_line_comments():
    doc = _group("// User is a user.", "// +genbase kind=User")
    match = find_annotation(doc, "+genbase")
    assert match is not None
    assert match.tag == "+genbase"
    assert match.arguments == "kind=User"
    assert match.line == "+genbase kind=User"
    assert match.comment.text == "// +genbase kind=User"


def test_find_annotation_in_block_comment():
    doc = _group("/*\n * Thing doc.\n * +model\n */")
    match = find_annotation(doc, "+model")
    assert match is not None
    assert match.arguments == ""


def test_find_annotation_returns_first_match():
    doc = _group("// +tag first", "// +tag second")
    assert find_annotation(doc, "+tag").arguments == "first"


def test_find_annotation_absent():
    assert find_annotation(_group("// nothing here"), "+tag") is None
    assert find_annotation(None, "+tag") is None


def test_empty_tag_is_rejected():
    with pytest.raises(ValueError):
        find_annotation(_group("// x"), "")
