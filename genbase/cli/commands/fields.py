"""Fields command - show field classification of a struct type."""

import sys

from ...errors import NotRecordShapeError
from ..helpers import load_package

_SHAPES = (
    ("ptr", "is_ptr"),
    ("array", "is_array"),
    ("ptr-array", "is_ptr_array"),
    ("array-ptr", "is_array_ptr"),
    ("ptr-array-ptr", "is_ptr_array_ptr"),
)


def cmd_fields(args):
    """Print each field of a struct with its shape flags and primitive kind."""
    pkg = load_package(args.target, skip_semantics=args.skip_semantics)

    decl = pkg.find_declaration(args.type_name)
    if decl is None:
        print(f"Error: type '{args.type_name}' not found")
        sys.exit(1)

    try:
        record = decl.as_record()
    except NotRecordShapeError as e:
        print(f"Error: {e}")
        sys.exit(1)

    fields = record.fields()
    print(f"Type: {record.name}")
    print(f"Fields ({len(fields)}):")
    for field in fields:
        shapes = [label for label, predicate in _SHAPES if getattr(field, predicate)()]
        kind = field.primitive_kind() or "-"
        print(f"  {field.name} {field.type_name()}  kind={kind}  shape={','.join(shapes) or '-'}")
        if field.tag:
            print(f"    Tag: {field.tag}")
