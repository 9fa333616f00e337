"""Import command - find the import an identifier refers to."""

import sys

from ..helpers import load_package


def cmd_import(args):
    """Print the import of a file that an identifier binds to."""
    pkg = load_package(args.target, skip_semantics=True)
    unit = pkg.files[0]

    spec = unit.find_import(args.identifier)
    if spec is None:
        print(f"No import found for '{args.identifier}' in {unit.filename}")
        sys.exit(1)

    if spec.name:
        print(f"{spec.name} {spec.quoted_path}")
    else:
        print(spec.quoted_path)
