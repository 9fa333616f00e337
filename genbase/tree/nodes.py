"""Immutable declaration tree for parsed Go source files."""

from dataclasses import dataclass
from typing import Optional, Tuple, Union


@dataclass(frozen=True)
class Comment:
    """One ``//`` or ``/* */`` comment, with its raw source text."""
    text: str
    line: int

    def lines(self) -> Tuple[str, ...]:
        """Return the comment body split into lines, comment markers removed."""
        text = self.text
        if text.startswith("//"):
            return (text[2:],)
        body = text[2:-2] if text.startswith("/*") and text.endswith("*/") else text
        lines = []
        for line in body.splitlines():
            stripped = line.lstrip()
            # Continuation lines of block comments are often prefixed with '*'.
            if stripped.startswith("*"):
                line = stripped[1:]
            lines.append(line)
        return tuple(lines)


@dataclass(frozen=True)
class CommentGroup:
    """Adjacent comments with no blank line or token between them."""
    comments: Tuple[Comment, ...]
    start_line: int
    end_line: int
    trailing: bool = False  # follows a token on the same line

    def text(self) -> str:
        """Return the comment text without markers, like go/ast CommentGroup.Text."""
        lines = []
        for comment in self.comments:
            for line in comment.lines():
                lines.append(line[1:] if line.startswith(" ") else line)
        while lines and not lines[0].strip():
            lines.pop(0)
        while lines and not lines[-1].strip():
            lines.pop()
        return "\n".join(line.rstrip() for line in lines)


# Type expressions. Every expression the loader produces is one of the classes
# below; see ``TypeExpr``.

@dataclass(frozen=True)
class Ident:
    """Reference to a type by unqualified name (``int``, ``Point``)."""
    name: str


@dataclass(frozen=True)
class QualifiedIdent:
    """Reference to a type exported by an imported package (``time.Time``)."""
    package: str
    name: str


@dataclass(frozen=True)
class Pointer:
    elem: "TypeExpr"


@dataclass(frozen=True)
class Collection:
    """Slice (``[]T``) when ``length`` is None, array (``[N]T``) otherwise."""
    elem: "TypeExpr"
    length: Optional[str] = None


@dataclass(frozen=True)
class MapType:
    key: "TypeExpr"
    value: "TypeExpr"


@dataclass(frozen=True)
class ChanType:
    value: "TypeExpr"
    direction: str = "both"  # "both" | "send" | "recv"


@dataclass(frozen=True)
class FuncType:
    params: Tuple["TypeExpr", ...]
    results: Tuple["TypeExpr", ...]
    text: str


@dataclass(frozen=True)
class InterfaceType:
    text: str
    embedded: Tuple["TypeExpr", ...] = ()


@dataclass(frozen=True)
class GenericType:
    """Instantiated generic type (``List[int]``)."""
    base: "TypeExpr"
    args: Tuple["TypeExpr", ...]


@dataclass(frozen=True)
class Field:
    """One field line of a struct; ``names`` is empty for an embedded field."""
    names: Tuple[str, ...]
    type: "TypeExpr"
    tag: Optional[str] = None
    embedded: bool = False
    doc: Optional[CommentGroup] = None
    comment: Optional[CommentGroup] = None
    line: int = 0


@dataclass(frozen=True)
class StructType:
    fields: Tuple[Field, ...] = ()


@dataclass(frozen=True)
class OtherType:
    """Valid syntax with no dedicated shape, such as constraint terms (``~int``)."""
    kind: str
    text: str


@dataclass(frozen=True)
class BadExpr:
    """Syntax the loader could not convert into a type expression."""
    kind: str
    text: str


TypeExpr = Union[
    Ident, QualifiedIdent, Pointer, Collection, MapType, ChanType, FuncType,
    InterfaceType, GenericType, StructType, OtherType, BadExpr,
]


# Declarations.

@dataclass(frozen=True)
class ImportSpec:
    path: str  # unquoted import path
    name: Optional[str] = None  # explicit alias, "." or "_"
    doc: Optional[CommentGroup] = None
    comment: Optional[CommentGroup] = None
    line: int = 0

    @property
    def quoted_path(self) -> str:
        return f'"{self.path}"'


@dataclass(frozen=True)
class TypeSpec:
    name: str
    type: TypeExpr
    type_params: Tuple[str, ...] = ()
    alias: bool = False
    doc: Optional[CommentGroup] = None
    comment: Optional[CommentGroup] = None
    line: int = 0


@dataclass(frozen=True)
class ValueSpec:
    """Names of a ``var`` or ``const`` spec with their optional declared type."""
    names: Tuple[str, ...]
    type: Optional[TypeExpr] = None
    doc: Optional[CommentGroup] = None
    line: int = 0


@dataclass(frozen=True)
class GenDecl:
    """A ``type``, ``var``, ``const`` or ``import`` declaration, grouped or not."""
    keyword: str
    specs: Tuple[Union[TypeSpec, ValueSpec, ImportSpec], ...]
    doc: Optional[CommentGroup] = None
    grouped: bool = False
    line: int = 0


@dataclass(frozen=True)
class FuncDecl:
    """Function or method signature; bodies are never kept."""
    name: str
    signature: FuncType
    receiver: Optional[TypeExpr] = None
    type_params: Tuple[str, ...] = ()
    doc: Optional[CommentGroup] = None
    line: int = 0


Decl = Union[GenDecl, FuncDecl]


@dataclass(frozen=True)
class SourceUnit:
    """One parsed file: package clause, imports, top-level declarations and comments."""
    filename: str
    package_name: Optional[str]
    imports: Tuple[ImportSpec, ...] = ()
    decls: Tuple[Decl, ...] = ()
    comments: Tuple[CommentGroup, ...] = ()
    doc: Optional[CommentGroup] = None

    def type_decls(self) -> Tuple[GenDecl, ...]:
        return tuple(d for d in self.decls if isinstance(d, GenDecl) and d.keyword == "type")

    def find_import(self, identifier: str) -> Optional[ImportSpec]:
        """Find the import that ``identifier`` refers to; see :func:`genbase.lookup.find_import`."""
        from ..lookup import find_import

        return find_import(self, identifier)
