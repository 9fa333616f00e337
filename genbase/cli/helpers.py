"""CLI helper functions."""

import os
import sys

from dotenv import load_dotenv

from ..errors import GenbaseError
from ..parsing import PackageModel, Parser


def load_env_files():
    """Load .env from multiple locations (first found wins for each var)."""
    # Priority: cwd > ~/.config/genbase/.env
    load_dotenv()

    config_env = os.path.expanduser("~/.config/genbase/.env")
    if os.path.exists(config_env):
        load_dotenv(config_env)


def load_package(target: str, skip_semantics: bool = False) -> PackageModel:
    """Load a package directory or a single Go file, exiting on failure."""
    parser = Parser(skip_semantics_check=skip_semantics or None)
    try:
        if os.path.isdir(target):
            return parser.parse_package_dir(target)
        return parser.parse_package_files([target])
    except GenbaseError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
