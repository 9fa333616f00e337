"""Import lookup for qualifying references emitted by generators."""

from typing import Callable, Optional

from .tree.nodes import ImportSpec, SourceUnit


def _by_alias(spec: ImportSpec, identifier: str) -> bool:
    # import foo "example.com/bar"
    return spec.name is not None and spec.name == identifier


def _by_last_segment(spec: ImportSpec, identifier: str) -> bool:
    # import "example.com/foo"
    return spec.path.endswith("/" + identifier)


def _by_full_path(spec: ImportSpec, identifier: str) -> bool:
    # import "foo"
    return spec.path == identifier


_RULES: tuple = (_by_alias, _by_last_segment, _by_full_path)


def find_import(unit: SourceUnit, identifier: str) -> Optional[ImportSpec]:
    """
    Find the import of ``unit`` that ``identifier`` refers to.

    Rules are tried in priority order over all imports of the file: explicit
    alias, then last path segment, then exact path. Returns None when no
    import matches.
    """
    rule: Callable[[ImportSpec, str], bool]
    for rule in _RULES:
        for spec in unit.imports:
            if rule(spec, identifier):
                return spec
    return None
