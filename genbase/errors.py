"""Error types raised while loading and inspecting Go packages."""

from typing import List, Optional


class GenbaseError(Exception):
    """Base class for genbase errors."""


class LoadError(GenbaseError):
    """Raised when build discovery, reading or syntax parsing of a file fails."""

    def __init__(self, path: str, cause: object):
        self.path = path
        self.cause = cause
        super().__init__(f"{path}: {cause}")


class NoSourceFilesError(GenbaseError):
    """Raised when no buildable Go file remains after filtering."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"{path}: no buildable Go files")


class ResolutionError(GenbaseError):
    """Raised when semantic checking of a package fails.

    ``errors`` holds every message collected during the check; the first one
    is used as the exception message.
    """

    def __init__(self, path: str, errors: List[str]):
        self.path = path
        self.errors = list(errors)
        first = self.errors[0] if self.errors else "type check failed"
        super().__init__(first)


class ImportNotFoundError(GenbaseError):
    """Raised by an importer when an import path cannot be located."""

    def __init__(self, import_path: str, reason: Optional[str] = None):
        self.import_path = import_path
        self.reason = reason
        message = f"could not import {import_path}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class NotRecordShapeError(GenbaseError):
    """Raised when a type declaration is treated as a struct but is not one."""

    def __init__(self, name: str, kind: str):
        self.name = name
        self.kind = kind
        super().__init__(f"type {name} is not a struct type (got {kind})")


class TypeRenderError(GenbaseError):
    """Raised when a type expression cannot be rendered back to source."""
