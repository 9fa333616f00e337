"""Types command - list type declarations of a package."""

from ..helpers import load_package


def cmd_types(args):
    """List type declarations, optionally selected by tag or name."""
    pkg = load_package(args.target, skip_semantics=args.skip_semantics)

    if args.tag:
        declarations = pkg.by_tag(args.tag)
    elif args.name:
        declarations = pkg.by_name(args.name)
    else:
        declarations = pkg.all_declarations()

    print(f"Package: {pkg.package_name() or '(none)'}")
    print(f"Files: {len(pkg.files)}")
    print(f"Types resolved: {'yes' if pkg.types is not None else 'no'}")
    print(f"\nDeclarations ({len(declarations)}):")

    for decl in declarations:
        kind = "struct" if decl.is_record() else "type"
        print(f"  {decl.name} ({kind}) - {decl.filename}:{decl.spec.line}")
        if decl.annotation:
            print(f"    Annotation: {decl.annotation.line}")
        if args.verbose and decl.doc:
            for line in decl.doc.text().splitlines():
                print(f"    | {line}")
