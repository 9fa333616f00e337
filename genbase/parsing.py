"""Package loading and type declaration collection.

:class:`Parser` loads a package from a directory, a list of files or an
in-memory source, resolves it, and returns a :class:`PackageModel` that
generators query for type declarations.
"""

from dataclasses import dataclass, replace
from typing import Iterable, List, Optional, Sequence, Tuple
import logging

from .annotation import find_annotation
from .build import import_dir
from .config import ParserConfig
from .errors import NoSourceFilesError, ResolutionError
from .importer import SourceImporter
from .resolve import TypesPackage, check
from .tree.nodes import SourceUnit, TypeSpec
from .tree.parser import parse_file, parse_source_file
from .typeinfo import TypeDeclaration

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PackageModel:
    """Parsed files of one package plus its resolved types.

    ``types`` is None when semantic checking failed and the parser was told
    to skip semantic errors.
    """
    path: str
    files: Tuple[SourceUnit, ...]
    types: Optional[TypesPackage] = None

    def __post_init__(self):
        if not self.files:
            raise NoSourceFilesError(self.path)

    def all_declarations(self) -> List[TypeDeclaration]:
        """Every top-level type declaration, in file order then source order."""
        declarations = []
        for unit in self.files:
            for decl in unit.type_decls():
                for spec in decl.specs:
                    if isinstance(spec, TypeSpec):
                        declarations.append(TypeDeclaration(unit=unit, decl=decl, spec=spec))
        return declarations

    def by_tag(self, tag: str) -> List[TypeDeclaration]:
        """Declarations whose doc comment carries ``tag``, with the match attached."""
        result = []
        for declaration in self.all_declarations():
            match = find_annotation(declaration.doc, tag)
            if match is not None:
                result.append(replace(declaration, annotation=match))
        return result

    def by_name(self, names: Iterable[str]) -> List[TypeDeclaration]:
        """Declarations named in ``names``; unknown names are ignored."""
        if isinstance(names, str):
            raise TypeError("by_name expects an iterable of names, not a str")
        wanted = set(names)
        return [d for d in self.all_declarations() if d.name in wanted]

    def find_declaration(self, name: str) -> Optional[TypeDeclaration]:
        for declaration in self.all_declarations():
            if declaration.name == name:
                return declaration
        return None

    def package_name(self) -> Optional[str]:
        """Package clause name of the first file."""
        return self.files[0].package_name


class Parser:
    """Loads Go packages into :class:`PackageModel` values."""

    def __init__(
        self,
        skip_semantics_check: Optional[bool] = None,
        config: Optional[ParserConfig] = None,
        importer: Optional[SourceImporter] = None,
    ):
        self.config = config or ParserConfig()
        if skip_semantics_check is not None:
            self.config = replace(self.config, skip_semantics_check=skip_semantics_check)
        self.importer = importer or SourceImporter(self.config.build)

    @property
    def skip_semantics_check(self) -> bool:
        return self.config.skip_semantics_check

    def parse_package_dir(self, directory: str) -> PackageModel:
        """Parse the buildable files of a package directory."""
        pkg = import_dir(directory, self.config.build)
        return self._parse_package(directory, pkg.all_files(), None)

    def parse_package_files(self, file_names: Sequence[str]) -> PackageModel:
        """Parse exactly the given files."""
        return self._parse_package(".", list(file_names), None)

    def parse_string_source(self, file_name: str, code: str) -> PackageModel:
        """Parse one in-memory file."""
        return self._parse_package(".", [file_name], [code])

    def _parse_package(
        self,
        directory: str,
        file_names: List[str],
        codes: Optional[List[str]],
    ) -> PackageModel:
        units = []
        for idx, file_name in enumerate(file_names):
            if not file_name.endswith(self.config.source_extension):
                logger.debug("Skipping %s: not a %s file", file_name, self.config.source_extension)
                continue
            if codes is not None and idx < len(codes):
                units.append(parse_file(file_name, codes[idx]))
            else:
                units.append(parse_source_file(file_name))

        if not units:
            raise NoSourceFilesError(directory)

        try:
            types = check(directory, units, self.importer)
        except ResolutionError as e:
            if not self.config.skip_semantics_check:
                raise
            logger.info("Semantic check of %s failed, continuing without types: %s", directory, e)
            types = None

        return PackageModel(path=directory, files=tuple(units), types=types)
