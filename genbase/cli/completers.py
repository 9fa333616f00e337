"""Argcomplete completers for CLI."""

import os

from ..errors import GenbaseError
from ..parsing import Parser


class TypeNameCompleter:
    """Completer for type names declared in the target package."""

    def __call__(self, prefix, parsed_args, **kwargs):
        target = getattr(parsed_args, "target", None)
        if not target:
            return []
        parser = Parser(skip_semantics_check=True)
        try:
            if os.path.isdir(target):
                pkg = parser.parse_package_dir(target)
            else:
                pkg = parser.parse_package_files([target])
        except GenbaseError:
            return []
        return [d.name for d in pkg.all_declarations() if d.name.startswith(prefix)]
