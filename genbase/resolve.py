"""Semantic resolution of package-level declarations.

Binds the identifiers used by type declarations, struct fields, function
signatures and typed ``var``/``const`` specs to package-level objects,
predeclared types or imported packages. Function bodies are never inspected
and unused imports are not reported. ``import "C"`` is accepted without
resolution and any ``C.name`` reference is valid.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple
import logging
import os

from .errors import ImportNotFoundError, ResolutionError
from .importer import ImportedPackage, SourceImporter
from .tree.nodes import (
    BadExpr,
    ChanType,
    Collection,
    FuncDecl,
    FuncType,
    GenDecl,
    GenericType,
    Ident,
    MapType,
    Pointer,
    QualifiedIdent,
    SourceUnit,
    StructType,
    TypeExpr,
    TypeSpec,
    ValueSpec,
)

logger = logging.getLogger(__name__)

UNIVERSE_TYPES = frozenset({
    "any", "bool", "byte", "comparable", "complex64", "complex128", "error",
    "float32", "float64", "int", "int8", "int16", "int32", "int64", "rune",
    "string", "uint", "uint8", "uint16", "uint32", "uint64", "uintptr",
})

TYPE_KINDS = ("type", "alias")


@dataclass(frozen=True)
class TypeObject:
    """A package-level object defined by the checked package."""
    name: str
    kind: str  # "type" | "alias" | "func" | "var" | "const"
    filename: str
    line: int
    expr: Optional[TypeExpr] = None

    @property
    def exported(self) -> bool:
        return self.name[:1].isupper()

    def is_type(self) -> bool:
        return self.kind in TYPE_KINDS


@dataclass
class TypesPackage:
    """Resolved-type table of one package."""
    path: str
    name: str
    objects: Dict[str, TypeObject] = field(default_factory=dict)
    imports: Tuple[ImportedPackage, ...] = ()

    def lookup(self, name: str) -> Optional[TypeObject]:
        return self.objects.get(name)

    def type_names(self) -> List[str]:
        """Names of declared types in declaration order."""
        return [name for name, obj in self.objects.items() if obj.is_type()]


_FAKE_C = ImportedPackage(path="C", name="C")


class _Checker:
    def __init__(self, path: str, units: Sequence[SourceUnit], importer: SourceImporter, from_dir: str):
        self.path = path
        self.units = units
        self.importer = importer
        self.from_dir = from_dir
        self.errors: List[str] = []
        self.objects: Dict[str, TypeObject] = {}
        self.file_scopes: Dict[str, Dict[str, ImportedPackage]] = {}
        self.dot_imports: Dict[str, List[ImportedPackage]] = {}
        self.imported: Dict[str, ImportedPackage] = {}

    def errorf(self, unit: SourceUnit, line: int, message: str) -> None:
        position = f"{unit.filename}:{line}" if line else unit.filename
        self.errors.append(f"{position}: {message}")

    def check(self) -> TypesPackage:
        name = self.check_package_clauses()
        self.collect_objects()
        for unit in self.units:
            self.collect_imports(unit)
        for unit in self.units:
            self.check_unit(unit)
        self.check_cycles()

        if self.errors:
            raise ResolutionError(self.path, self.errors)
        return TypesPackage(
            path=self.path,
            name=name,
            objects=dict(self.objects),
            imports=tuple(self.imported.values()),
        )

    def check_package_clauses(self) -> str:
        name = self.units[0].package_name or ""
        for unit in self.units[1:]:
            if unit.package_name and name and unit.package_name != name:
                self.errorf(unit, 0, f"package {unit.package_name}; expected {name}")
        return name

    # Package scope

    def declare(self, unit: SourceUnit, name: str, kind: str, line: int, expr: Optional[TypeExpr] = None) -> None:
        if name == "_":
            return
        previous = self.objects.get(name)
        if previous is not None:
            self.errorf(
                unit, line,
                f"{name} redeclared in this block (other declaration at {previous.filename}:{previous.line})",
            )
            return
        self.objects[name] = TypeObject(name=name, kind=kind, filename=unit.filename, line=line, expr=expr)

    def collect_objects(self) -> None:
        for unit in self.units:
            for decl in unit.decls:
                if isinstance(decl, FuncDecl):
                    if decl.receiver is None and decl.name != "init":
                        self.declare(unit, decl.name, "func", decl.line)
                    continue
                for spec in decl.specs:
                    if isinstance(spec, TypeSpec):
                        kind = "alias" if spec.alias else "type"
                        self.declare(unit, spec.name, kind, spec.line, spec.type)
                    elif isinstance(spec, ValueSpec):
                        for value_name in spec.names:
                            self.declare(unit, value_name, decl.keyword, spec.line or decl.line, spec.type)

    def collect_imports(self, unit: SourceUnit) -> None:
        scope: Dict[str, ImportedPackage] = {}
        dots: List[ImportedPackage] = []
        for spec in unit.imports:
            if spec.path == "C":
                pkg = _FAKE_C
            else:
                try:
                    pkg = self.importer.import_package(spec.path, self.from_dir)
                except ImportNotFoundError as e:
                    self.errorf(unit, spec.line, str(e))
                    continue
                self.imported.setdefault(pkg.path, pkg)

            if spec.name == "_":
                continue
            if spec.name == ".":
                dots.append(pkg)
                continue
            local = spec.name or pkg.name
            if local in self.objects:
                self.errorf(unit, spec.line, f"{local} already declared through import of package {pkg.path}")
            scope[local] = pkg
        self.file_scopes[unit.filename] = scope
        self.dot_imports[unit.filename] = dots

    # Declarations

    def check_unit(self, unit: SourceUnit) -> None:
        for decl in unit.decls:
            if isinstance(decl, FuncDecl):
                self.check_func(unit, decl)
            elif isinstance(decl, GenDecl):
                for spec in decl.specs:
                    if isinstance(spec, TypeSpec):
                        self.check_expr(unit, spec.type, set(spec.type_params), spec.line)
                    elif isinstance(spec, ValueSpec) and spec.type is not None:
                        self.check_expr(unit, spec.type, set(), spec.line or decl.line)

    def check_func(self, unit: SourceUnit, decl: FuncDecl) -> None:
        type_params = set(decl.type_params)
        receiver = decl.receiver
        if receiver is not None:
            base = receiver.elem if isinstance(receiver, Pointer) else receiver
            if isinstance(base, GenericType):
                type_params.update(arg.name for arg in base.args if isinstance(arg, Ident))
                base = base.base
            if isinstance(base, Ident) and base.name in UNIVERSE_TYPES and base.name not in self.objects:
                self.errorf(unit, decl.line, f"cannot define new methods on non-local type {base.name}")
            elif isinstance(base, QualifiedIdent):
                self.errorf(unit, decl.line, f"cannot define new methods on non-local type {base.package}.{base.name}")
            else:
                self.check_expr(unit, base, type_params, decl.line)
        self.check_exprs(unit, decl.signature.params, type_params, decl.line)
        self.check_exprs(unit, decl.signature.results, type_params, decl.line)

    def check_exprs(self, unit: SourceUnit, exprs: Iterable[TypeExpr], type_params: Set[str], line: int) -> None:
        for expr in exprs:
            self.check_expr(unit, expr, type_params, line)

    def check_expr(self, unit: SourceUnit, expr: TypeExpr, type_params: Set[str], line: int) -> None:
        if isinstance(expr, Ident):
            self.check_ident(unit, expr.name, type_params, line)
        elif isinstance(expr, QualifiedIdent):
            self.check_qualified(unit, expr, line)
        elif isinstance(expr, (Pointer, Collection)):
            self.check_expr(unit, expr.elem, type_params, line)
        elif isinstance(expr, ChanType):
            self.check_expr(unit, expr.value, type_params, line)
        elif isinstance(expr, MapType):
            self.check_expr(unit, expr.key, type_params, line)
            self.check_expr(unit, expr.value, type_params, line)
        elif isinstance(expr, FuncType):
            self.check_exprs(unit, expr.params, type_params, line)
            self.check_exprs(unit, expr.results, type_params, line)
        elif isinstance(expr, GenericType):
            self.check_expr(unit, expr.base, type_params, line)
            self.check_exprs(unit, expr.args, type_params, line)
        elif isinstance(expr, StructType):
            self.check_struct(unit, expr, type_params)
        elif isinstance(expr, BadExpr):
            self.errorf(unit, line, f"invalid type expression {expr.text}")
        # Interfaces and constraint terms are not inspected.

    def check_struct(self, unit: SourceUnit, struct: StructType, type_params: Set[str]) -> None:
        seen: Set[str] = set()
        for struct_field in struct.fields:
            names = struct_field.names or (_embedded_field_name(struct_field.type),)
            for name in names:
                if name == "_":
                    continue
                if name in seen:
                    self.errorf(unit, struct_field.line, f"{name} redeclared")
                seen.add(name)
            self.check_expr(unit, struct_field.type, type_params, struct_field.line)

    def check_ident(self, unit: SourceUnit, name: str, type_params: Set[str], line: int) -> None:
        if name in type_params or name == "_":
            return
        obj = self.objects.get(name)
        if obj is not None:
            if not obj.is_type():
                self.errorf(unit, line, f"{name} is not a type")
            return
        if name in UNIVERSE_TYPES:
            return
        for pkg in self.dot_imports.get(unit.filename, ()):
            if pkg.type_names is None or name in pkg.type_names:
                return
        self.errorf(unit, line, f"undefined: {name}")

    def check_qualified(self, unit: SourceUnit, expr: QualifiedIdent, line: int) -> None:
        pkg = self.file_scopes.get(unit.filename, {}).get(expr.package)
        if pkg is None:
            if expr.package in self.objects:
                self.errorf(unit, line, f"{expr.package}.{expr.name} is not a type")
            else:
                self.errorf(unit, line, f"undefined: {expr.package}")
            return
        if pkg is _FAKE_C:
            return
        if not expr.name[:1].isupper():
            self.errorf(unit, line, f"name {expr.name} not exported by package {pkg.name}")
            return
        if pkg.names is not None and expr.name not in pkg.names:
            self.errorf(unit, line, f"undefined: {expr.package}.{expr.name}")
        elif pkg.type_names is not None and expr.name not in pkg.type_names:
            self.errorf(unit, line, f"{expr.package}.{expr.name} is not a type")

    # Recursive types

    def check_cycles(self) -> None:
        units = {unit.filename: unit for unit in self.units}
        done: Set[str] = set()
        reported: Set[str] = set()

        def visit(name: str, path: List[str]) -> None:
            if name in done:
                return
            if name in path:
                start = path[path.index(name)]
                if start not in reported:
                    reported.add(start)
                    obj = self.objects[start]
                    self.errorf(units[obj.filename], obj.line, f"invalid recursive type {start}")
                return
            obj = self.objects.get(name)
            if obj is None or not obj.is_type() or obj.expr is None:
                return
            path.append(name)
            for dep in _direct_dependencies(obj.expr):
                visit(dep, path)
            path.pop()
            done.add(name)

        for name in list(self.objects):
            visit(name, [])


def _embedded_field_name(expr: TypeExpr) -> str:
    if isinstance(expr, Pointer):
        expr = expr.elem
    if isinstance(expr, GenericType):
        expr = expr.base
    if isinstance(expr, (Ident, QualifiedIdent)):
        return expr.name
    return "_"


def _direct_dependencies(expr: TypeExpr) -> List[str]:
    """Package-level type names whose size ``expr`` depends on directly."""
    if isinstance(expr, Ident):
        return [expr.name]
    if isinstance(expr, Collection) and expr.length is not None:
        return _direct_dependencies(expr.elem)
    if isinstance(expr, StructType):
        deps = []
        for struct_field in expr.fields:
            deps.extend(_direct_dependencies(struct_field.type))
        return deps
    return []


def check(
    path: str,
    units: Sequence[SourceUnit],
    importer: Optional[SourceImporter] = None,
    from_dir: Optional[str] = None,
) -> TypesPackage:
    """
    Resolve the package-level declarations of ``units``.

    Args:
        path: Destination identifier recorded on the result (package directory)
        units: Parsed files of one package, in load order
        importer: Import resolver (a default SourceImporter when omitted)
        from_dir: Directory imports are resolved from (defaults to ``path``)

    Raises:
        ResolutionError: Any identifier or import could not be resolved
    """
    if not units:
        raise ResolutionError(path, [f"{path}: no files to check"])
    importer = importer or SourceImporter()
    from_dir = from_dir or (path if os.path.isdir(path) else ".")
    checker = _Checker(path, units, importer, from_dir)
    pkg = checker.check()
    logger.debug("Resolved package %s: %d objects", pkg.name or path, len(pkg.objects))
    return pkg
