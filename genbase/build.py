"""Build metadata discovery for Go package directories.

Selects the files of a directory that belong to one buildable package under a
given :class:`~genbase.config.BuildContext`: platform filename suffixes, build
constraints, cgo files and assembly files.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional
import logging
import os
import re

from .config import BuildContext
from .constraints import ConstraintSyntaxError, should_build
from .errors import LoadError, NoSourceFilesError

logger = logging.getLogger(__name__)

KNOWN_OS = frozenset({
    "aix", "android", "darwin", "dragonfly", "freebsd", "hurd", "illumos", "ios",
    "js", "linux", "nacl", "netbsd", "openbsd", "plan9", "solaris", "wasip1",
    "windows", "zos",
})

KNOWN_ARCH = frozenset({
    "386", "amd64", "amd64p32", "arm", "armbe", "arm64", "arm64be", "loong64",
    "mips", "mipsle", "mips64", "mips64le", "mips64p32", "mips64p32le", "ppc",
    "ppc64", "ppc64le", "riscv", "riscv64", "s390", "s390x", "sparc", "sparc64",
    "wasm",
})

UNIX_OS = frozenset({
    "aix", "android", "darwin", "dragonfly", "freebsd", "hurd", "illumos", "ios",
    "linux", "netbsd", "openbsd", "solaris",
})

ASSEMBLY_EXTENSIONS = (".s", ".S", ".sx")

_PACKAGE_RE = re.compile(r"^\s*package\s+([A-Za-z_][A-Za-z0-9_]*)", re.MULTILINE)
_IMPORT_C_RE = re.compile(r'^\s*import\s+"C"', re.MULTILINE)
_IMPORT_BLOCK_RE = re.compile(r"^\s*import\s*\((.*?)\)", re.MULTILINE | re.DOTALL)


@dataclass
class BuildPackage:
    """Files of one package directory, as selected by :func:`import_dir`."""

    dir: str
    name: str
    go_files: List[str] = field(default_factory=list)
    cgo_files: List[str] = field(default_factory=list)
    s_files: List[str] = field(default_factory=list)
    ignored_files: List[str] = field(default_factory=list)

    def all_files(self) -> List[str]:
        """Return Go, cgo and assembly file names joined with the directory."""
        names = self.go_files + self.cgo_files + self.s_files
        return [os.path.join(self.dir, name) for name in names]


class TagMatcher:
    """Decides whether a build tag is satisfied by a build context."""

    def __init__(self, context: BuildContext):
        self.context = context

    def match(self, tag: str) -> bool:
        ctx = self.context
        if tag in ctx.build_tags:
            return True
        if tag == ctx.goos or tag == ctx.goarch or tag == ctx.compiler:
            return True
        if tag == "cgo" and ctx.cgo_enabled:
            return True
        if tag == "unix" and ctx.goos in UNIX_OS:
            return True
        if tag == "linux" and ctx.goos == "android":
            return True
        if tag == "solaris" and ctx.goos == "illumos":
            return True
        if tag == "darwin" and ctx.goos == "ios":
            return True
        if tag.startswith("go1."):
            minor = tag[len("go1."):]
            if minor.isdigit() and 1 <= int(minor) <= ctx.go_minor_version:
                return True
        return False

    def good_os_arch_file(self, name: str) -> bool:
        """Check the ``_GOOS``, ``_GOARCH`` and ``_GOOS_GOARCH`` filename suffixes."""
        stem = os.path.splitext(name)[0]
        idx = stem.find("_")
        if idx < 0:
            return True
        parts = stem[idx:].split("_")
        if parts and parts[-1] == "test":
            parts = parts[:-1]
        n = len(parts)
        if n >= 2 and parts[n - 2] in KNOWN_OS and parts[n - 1] in KNOWN_ARCH:
            return self.match(parts[n - 2]) and self.match(parts[n - 1])
        if n >= 1 and parts[n - 1] in KNOWN_OS:
            return self.match(parts[n - 1])
        if n >= 1 and parts[n - 1] in KNOWN_ARCH:
            return self.match(parts[n - 1])
        return True


def read_package_name(source: str) -> Optional[str]:
    """Return the package clause name of Go source text, skipping leading comments."""
    stripped = re.sub(r"/\*.*?\*/", "", source, flags=re.DOTALL)
    stripped = re.sub(r"//[^\n]*", "", stripped)
    match = _PACKAGE_RE.search(stripped)
    return match.group(1) if match else None


def imports_c(source: str) -> bool:
    """Report whether Go source text imports the pseudo package ``"C"``."""
    if _IMPORT_C_RE.search(source):
        return True
    for block in _IMPORT_BLOCK_RE.findall(source):
        for line in block.splitlines():
            if line.split("//", 1)[0].strip() == '"C"':
                return True
    return False


def import_dir(directory: str, context: Optional[BuildContext] = None) -> BuildPackage:
    """
    Discover the buildable files of a package directory.

    Args:
        directory: Directory holding the package sources
        context: Build context (defaults to the host context)

    Returns:
        BuildPackage with Go, cgo and assembly files in sorted order

    Raises:
        LoadError: directory is unreadable or holds several packages
        NoSourceFilesError: no buildable Go file was found
    """
    context = context or BuildContext()
    matcher = TagMatcher(context)

    try:
        entries = sorted(os.listdir(directory))
    except OSError as e:
        raise LoadError(directory, f"cannot process directory: {e}") from e

    pkg = BuildPackage(dir=directory, name="")
    first_file: Dict[str, str] = {}

    for name in entries:
        path = os.path.join(directory, name)
        if os.path.isdir(path):
            continue
        if name.startswith("_") or name.startswith("."):
            pkg.ignored_files.append(name)
            continue

        ext = os.path.splitext(name)[1]
        if ext != ".go" and ext not in ASSEMBLY_EXTENSIONS:
            continue

        if not matcher.good_os_arch_file(name):
            logger.debug("Skipping %s: GOOS/GOARCH suffix does not match", name)
            pkg.ignored_files.append(name)
            continue

        if ext in ASSEMBLY_EXTENSIONS:
            pkg.s_files.append(name)
            continue

        if name.endswith("_test.go"):
            pkg.ignored_files.append(name)
            continue

        try:
            with open(path, "r", encoding="utf-8") as f:
                source = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise LoadError(path, e) from e

        try:
            buildable = should_build(source, matcher.match)
        except ConstraintSyntaxError as e:
            raise LoadError(path, e) from e
        if not buildable:
            logger.debug("Skipping %s: build constraints exclude it", name)
            pkg.ignored_files.append(name)
            continue

        package_name = read_package_name(source)
        if package_name == "documentation":
            pkg.ignored_files.append(name)
            continue

        if package_name:
            first_file.setdefault(package_name, name)
            if not pkg.name:
                pkg.name = package_name
            elif package_name != pkg.name:
                raise LoadError(
                    directory,
                    f"found packages {pkg.name} ({first_file[pkg.name]}) "
                    f"and {package_name} ({name})",
                )

        if imports_c(source):
            if not context.cgo_enabled:
                logger.debug("Skipping %s: cgo is disabled", name)
                pkg.ignored_files.append(name)
                continue
            pkg.cgo_files.append(name)
        else:
            pkg.go_files.append(name)

    if not pkg.go_files and not pkg.cgo_files:
        raise NoSourceFilesError(directory)

    return pkg
