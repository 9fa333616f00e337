"""Rendering and unwrapping of type expressions."""

from typing import List, Optional, Tuple

from ..errors import TypeRenderError
from .nodes import (
    BadExpr,
    ChanType,
    Collection,
    FuncType,
    GenericType,
    Ident,
    InterfaceType,
    MapType,
    OtherType,
    Pointer,
    QualifiedIdent,
    StructType,
    TypeExpr,
)

POINTER = "pointer"
COLLECTION = "collection"


def expr_to_type_name(expr: TypeExpr) -> str:
    """
    Render a type expression back to its Go spelling.

    Raises:
        TypeRenderError: The expression holds syntax that cannot be rendered
    """
    if isinstance(expr, Ident):
        return expr.name
    if isinstance(expr, QualifiedIdent):
        return f"{expr.package}.{expr.name}"
    if isinstance(expr, Pointer):
        return "*" + expr_to_type_name(expr.elem)
    if isinstance(expr, Collection):
        return f"[{expr.length or ''}]" + expr_to_type_name(expr.elem)
    if isinstance(expr, MapType):
        return f"map[{expr_to_type_name(expr.key)}]{expr_to_type_name(expr.value)}"
    if isinstance(expr, ChanType):
        prefix = {"recv": "<-chan ", "send": "chan<- "}.get(expr.direction, "chan ")
        return prefix + expr_to_type_name(expr.value)
    if isinstance(expr, GenericType):
        args = ", ".join(expr_to_type_name(arg) for arg in expr.args)
        return f"{expr_to_type_name(expr.base)}[{args}]"
    if isinstance(expr, StructType):
        if not expr.fields:
            return "struct{}"
        parts = []
        for field in expr.fields:
            type_name = expr_to_type_name(field.type)
            part = f"{', '.join(field.names)} {type_name}" if field.names else type_name
            if field.tag:
                part += " " + field.tag
            parts.append(part)
        return "struct{ " + "; ".join(parts) + " }"
    if isinstance(expr, InterfaceType):
        return "interface{}" if expr.text.replace(" ", "") == "interface{}" else expr.text
    if isinstance(expr, (FuncType, OtherType)):
        return expr.text
    if isinstance(expr, BadExpr):
        raise TypeRenderError(f"unsupported type expression {expr.kind}: {expr.text}")
    raise TypeRenderError(f"unknown type expression: {expr!r}")


def unwrap(expr: TypeExpr) -> Tuple[Optional[str], Tuple[str, ...]]:
    """
    Strip pointer and collection layers one at a time.

    Returns:
        (base type name, wrappers from outermost to innermost). The name is
        None when a layer is neither a wrapper nor a named reference.
    """
    wrappers: List[str] = []
    while True:
        if isinstance(expr, Pointer):
            wrappers.append(POINTER)
            expr = expr.elem
        elif isinstance(expr, Collection):
            wrappers.append(COLLECTION)
            expr = expr.elem
        elif isinstance(expr, Ident):
            return expr.name, tuple(wrappers)
        elif isinstance(expr, QualifiedIdent):
            return f"{expr.package}.{expr.name}", tuple(wrappers)
        else:
            return None, tuple(wrappers)


def expr_to_base_type_name(expr: TypeExpr) -> Optional[str]:
    """Return the name left after unwrapping every pointer and collection layer."""
    return unwrap(expr)[0]
