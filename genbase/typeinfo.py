"""Type declarations, struct shapes and field classification."""

from dataclasses import dataclass
from typing import List, Optional, Tuple
import re

from .annotation import AnnotationMatch
from .errors import NotRecordShapeError, TypeRenderError
from .tree.nodes import (
    BadExpr,
    ChanType,
    Collection,
    CommentGroup,
    Field,
    FuncType,
    GenDecl,
    GenericType,
    Ident,
    InterfaceType,
    MapType,
    Pointer,
    QualifiedIdent,
    SourceUnit,
    StructType,
    TypeExpr,
    TypeSpec,
)
from .tree.render import POINTER, expr_to_type_name, unwrap

NUMBER_KINDS = ("int", "int64", "float32", "float64")
PRIMITIVE_KINDS = NUMBER_KINDS + ("string", "bool", "time.Time")


def doc_fallback(*candidates: Optional[CommentGroup]) -> Optional[CommentGroup]:
    """Return the first non-empty comment group in priority order."""
    for group in candidates:
        if group is not None and group.comments:
            return group
    return None


def expr_kind(expr: TypeExpr) -> str:
    """Short description of an expression's shape, used in error messages."""
    if isinstance(expr, Ident):
        return "named type " + expr.name
    if isinstance(expr, QualifiedIdent):
        return f"named type {expr.package}.{expr.name}"
    if isinstance(expr, Pointer):
        return "pointer"
    if isinstance(expr, Collection):
        return "slice" if expr.length is None else "array"
    if isinstance(expr, MapType):
        return "map"
    if isinstance(expr, ChanType):
        return "channel"
    if isinstance(expr, FuncType):
        return "func"
    if isinstance(expr, InterfaceType):
        return "interface"
    if isinstance(expr, GenericType):
        return "generic instance"
    if isinstance(expr, StructType):
        return "struct"
    if isinstance(expr, BadExpr):
        return "invalid expression"
    return expr.kind


@dataclass(frozen=True)
class TypeDeclaration:
    """One named type of a ``type`` declaration in a source unit."""
    unit: SourceUnit
    decl: GenDecl
    spec: TypeSpec
    annotation: Optional[AnnotationMatch] = None

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def doc(self) -> Optional[CommentGroup]:
        """The TypeSpec's own doc comment, else the enclosing declaration's."""
        return doc_fallback(self.spec.doc, self.decl.doc)

    @property
    def filename(self) -> str:
        return self.unit.filename

    @property
    def type(self) -> TypeExpr:
        return self.spec.type

    def is_record(self) -> bool:
        return isinstance(self.spec.type, StructType)

    def as_record(self) -> "RecordShape":
        """
        Reinterpret the declaration as a struct.

        Raises:
            NotRecordShapeError: The declared type is not a struct type
        """
        if not isinstance(self.spec.type, StructType):
            raise NotRecordShapeError(self.name, expr_kind(self.spec.type))
        return RecordShape(self, self.spec.type)


@dataclass(frozen=True)
class RecordShape:
    declaration: TypeDeclaration
    struct: StructType

    @property
    def name(self) -> str:
        return self.declaration.name

    def fields(self) -> List["FieldDeclaration"]:
        """Fields in declaration order; ``A, B int`` yields one entry per name."""
        result = []
        for field in self.struct.fields:
            if field.names:
                for name in field.names:
                    result.append(FieldDeclaration(name, field))
            else:
                result.append(FieldDeclaration(_embedded_name(field.type), field))
        return result

    def field(self, name: str) -> Optional["FieldDeclaration"]:
        for field in self.fields():
            if field.name == name:
                return field
        return None


def _embedded_name(expr: TypeExpr) -> str:
    """Field name of an embedded field: the unqualified type name."""
    if isinstance(expr, Pointer):
        expr = expr.elem
    if isinstance(expr, GenericType):
        expr = expr.base
    if isinstance(expr, Ident):
        return expr.name
    if isinstance(expr, QualifiedIdent):
        return expr.name
    return "_"


_TAG_KEY_RE = re.compile(r'\s*([^\s:"\x00-\x1f]+):"((?:[^"\\]|\\.)*)"')


@dataclass(frozen=True)
class FieldDeclaration:
    """One named struct field with shape and primitive-kind predicates.

    Shape predicates look only at the outer layers their name implies:
    ``*[]*T`` is a pointer, a pointer to a collection and a pointer to a
    collection of pointers, but not a collection.

    Primitive-kind predicates compare the fully unwrapped base type name and
    are False whenever a pointer layer was unwrapped: ``[]string`` is a string
    field, ``*int`` is not an int field.
    """
    name: str
    field: Field

    @property
    def type(self) -> TypeExpr:
        return self.field.type

    @property
    def embedded(self) -> bool:
        return self.field.embedded

    @property
    def doc(self) -> Optional[CommentGroup]:
        return self.field.doc

    @property
    def comment(self) -> Optional[CommentGroup]:
        return self.field.comment

    @property
    def raw_tag(self) -> Optional[str]:
        return self.field.tag

    @property
    def tag(self) -> str:
        """Struct tag contents without the surrounding quotes."""
        raw = self.field.tag
        if not raw:
            return ""
        if raw[0] == "`":
            return raw[1:-1]
        # Interpreted string literal; struct tags rarely contain escapes.
        return raw[1:-1].replace('\\"', '"').replace("\\\\", "\\")

    def tag_value(self, key: str) -> Optional[str]:
        """Value of ``key`` in a conventional ``key:"value"`` struct tag."""
        tag = self.tag
        pos = 0
        while pos < len(tag):
            match = _TAG_KEY_RE.match(tag, pos)
            if not match:
                return None
            if match.group(1) == key:
                return match.group(2).replace('\\"', '"')
            pos = match.end()
        return None

    def type_name(self) -> str:
        """Go spelling of the declared type, or ``!!reason!!`` when it cannot be rendered."""
        try:
            return expr_to_type_name(self.field.type)
        except TypeRenderError as e:
            return f"!!{e}!!"

    def base_type_name(self) -> Optional[str]:
        return unwrap(self.field.type)[0]

    def wrappers(self) -> Tuple[str, ...]:
        return unwrap(self.field.type)[1]

    # Shape predicates

    def is_ptr(self) -> bool:
        return isinstance(self.field.type, Pointer)

    def is_array(self) -> bool:
        return isinstance(self.field.type, Collection)

    def is_ptr_array(self) -> bool:
        expr = self.field.type
        return isinstance(expr, Pointer) and isinstance(expr.elem, Collection)

    def is_array_ptr(self) -> bool:
        expr = self.field.type
        return isinstance(expr, Collection) and isinstance(expr.elem, Pointer)

    def is_ptr_array_ptr(self) -> bool:
        expr = self.field.type
        return (
            isinstance(expr, Pointer)
            and isinstance(expr.elem, Collection)
            and isinstance(expr.elem.elem, Pointer)
        )

    # Primitive kinds

    def _primitive_kind(self) -> Optional[str]:
        base, wrappers = unwrap(self.field.type)
        if base is None or POINTER in wrappers:
            return None
        return base if base in PRIMITIVE_KINDS else None

    def is_int(self) -> bool:
        return self._primitive_kind() == "int"

    def is_int64(self) -> bool:
        return self._primitive_kind() == "int64"

    def is_float32(self) -> bool:
        return self._primitive_kind() == "float32"

    def is_float64(self) -> bool:
        return self._primitive_kind() == "float64"

    def is_number(self) -> bool:
        return self.is_int() or self.is_int64() or self.is_float32() or self.is_float64()

    def is_string(self) -> bool:
        return self._primitive_kind() == "string"

    def is_bool(self) -> bool:
        return self._primitive_kind() == "bool"

    def is_time(self) -> bool:
        return self._primitive_kind() == "time.Time"

    def primitive_kind(self) -> Optional[str]:
        """One of ``int``, ``int64``, ``float32``, ``float64``, ``string``, ``bool``, ``time.Time``."""
        return self._primitive_kind()
