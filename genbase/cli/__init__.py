"""CLI entry point for genbase."""
# PYTHON_ARGCOMPLETE_OK

import argparse
import sys

import argcomplete

from ..log import configure_logging
from .helpers import load_env_files
from .completers import TypeNameCompleter
from .commands import cmd_types, cmd_fields, cmd_import


def main():
    # Environment may set GOOS, GOARCH, GOFLAGS, CGO_ENABLED, ...
    load_env_files()

    parser = argparse.ArgumentParser(
        prog="genbase",
        description="Inspect Go type declarations the way code generators see them",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Verbose output"
    )
    parser.add_argument(
        "--log", "-l", help="Path to log file for detailed loading logs"
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # types command
    types_parser = subparsers.add_parser(
        "types", help="List type declarations of a package"
    )
    types_parser.add_argument(
        "target", help="Package directory or Go file"
    )
    types_parser.add_argument(
        "--tag", "-t", help="Only types whose doc comment carries this annotation tag"
    )
    types_parser.add_argument(
        "--name", "-n", action="append", help="Only types with this name (repeatable)"
    )
    types_parser.add_argument(
        "--skip-semantics",
        action="store_true",
        help="Continue when identifiers or imports cannot be resolved",
    )

    # fields command
    fields_parser = subparsers.add_parser(
        "fields", help="Show field shapes of a struct type"
    )
    fields_parser.add_argument(
        "target", help="Package directory or Go file"
    )
    fields_parser.add_argument(
        "type_name", help="Struct type name"
    ).completer = TypeNameCompleter()
    fields_parser.add_argument(
        "--skip-semantics",
        action="store_true",
        help="Continue when identifiers or imports cannot be resolved",
    )

    # import command
    import_parser = subparsers.add_parser(
        "import", help="Find the import an identifier refers to (debug)"
    )
    import_parser.add_argument(
        "target", help="Go file"
    )
    import_parser.add_argument(
        "identifier", help="Package identifier, e.g. 'json' or 'example.com/foo'"
    )

    # Enable argcomplete
    argcomplete.autocomplete(parser)

    args = parser.parse_args()
    configure_logging(verbose=args.verbose, log_file=args.log)

    if args.command == "types":
        cmd_types(args)
    elif args.command == "fields":
        cmd_fields(args)
    elif args.command == "import":
        cmd_import(args)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
