"""Declaration trees for Go source files."""

from .nodes import (
    BadExpr,
    ChanType,
    Collection,
    Comment,
    CommentGroup,
    Field,
    FuncDecl,
    FuncType,
    GenDecl,
    GenericType,
    Ident,
    ImportSpec,
    InterfaceType,
    MapType,
    OtherType,
    Pointer,
    QualifiedIdent,
    SourceUnit,
    StructType,
    TypeExpr,
    TypeSpec,
    ValueSpec,
)
from .parser import get_parser, parse_file, parse_source_file
from .render import expr_to_base_type_name, expr_to_type_name, unwrap

__all__ = [
    # Nodes
    "BadExpr",
    "ChanType",
    "Collection",
    "Comment",
    "CommentGroup",
    "Field",
    "FuncDecl",
    "FuncType",
    "GenDecl",
    "GenericType",
    "Ident",
    "ImportSpec",
    "InterfaceType",
    "MapType",
    "OtherType",
    "Pointer",
    "QualifiedIdent",
    "SourceUnit",
    "StructType",
    "TypeExpr",
    "TypeSpec",
    "ValueSpec",
    # Parser
    "get_parser",
    "parse_file",
    "parse_source_file",
    # Render
    "expr_to_type_name",
    "expr_to_base_type_name",
    "unwrap",
]
