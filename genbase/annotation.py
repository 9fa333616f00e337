"""Annotation tags in documentation comments.

A comment line carries a tag when, once comment markers and surrounding
whitespace are removed, it equals the tag or starts with the tag followed by
whitespace. Anything after that whitespace is the annotation's arguments::

    // +genbase
    // +genbase kind=User,plural
    type User struct{ ... }

Only the first token of a line is compared, and matching is case sensitive.
"""

from dataclasses import dataclass
from typing import Optional

from .tree.nodes import Comment, CommentGroup


@dataclass(frozen=True)
class AnnotationMatch:
    """A tag found in a declaration's doc comment."""
    tag: str
    comment: Comment  # raw comment the tag was found in
    line: str  # matched line, markers and surrounding whitespace removed
    arguments: str = ""


def match_line(line: str, tag: str) -> Optional[str]:
    """Return the arguments of ``line`` if it carries ``tag``, else None."""
    text = line.strip()
    if text == tag:
        return ""
    if text.startswith(tag) and text[len(tag)].isspace():
        return text[len(tag):].strip()
    return None


def find_annotation(doc: Optional[CommentGroup], tag: str) -> Optional[AnnotationMatch]:
    """Find the first comment line of ``doc`` carrying ``tag``."""
    if not tag or not tag.strip():
        raise ValueError("annotation tag must not be empty")
    if doc is None:
        return None
    for comment in doc.comments:
        for line in comment.lines():
            arguments = match_line(line, tag)
            if arguments is not None:
                return AnnotationMatch(tag=tag, comment=comment, line=line.strip(), arguments=arguments)
    return None
