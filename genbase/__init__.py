"""Go source type introspection for code generators."""

from .annotation import AnnotationMatch, find_annotation
from .build import BuildPackage, import_dir
from .config import BuildContext, ParserConfig
from .errors import (
    GenbaseError,
    ImportNotFoundError,
    LoadError,
    NoSourceFilesError,
    NotRecordShapeError,
    ResolutionError,
)
from .importer import ImportedPackage, SourceImporter
from .lookup import find_import
from .parsing import PackageModel, Parser
from .resolve import TypeObject, TypesPackage, check
from .tree.nodes import ImportSpec, SourceUnit
from .typeinfo import FieldDeclaration, RecordShape, TypeDeclaration

__all__ = [
    # Loading
    "Parser",
    "PackageModel",
    "ParserConfig",
    "BuildContext",
    "BuildPackage",
    "import_dir",
    # Model
    "SourceUnit",
    "ImportSpec",
    "TypeDeclaration",
    "RecordShape",
    "FieldDeclaration",
    "AnnotationMatch",
    "find_annotation",
    "find_import",
    # Resolution
    "check",
    "TypesPackage",
    "TypeObject",
    "SourceImporter",
    "ImportedPackage",
    # Errors
    "GenbaseError",
    "LoadError",
    "NoSourceFilesError",
    "ResolutionError",
    "ImportNotFoundError",
    "NotRecordShapeError",
]
