"""CLI command implementations."""

from .types import cmd_types
from .fields import cmd_fields
from .imports import cmd_import

__all__ = [
    "cmd_types",
    "cmd_fields",
    "cmd_import",
]
