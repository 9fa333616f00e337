"""Configuration for genbase package loading."""

from dataclasses import dataclass, field
from typing import List, Optional
import os
import platform
import re
import shlex
import sys


# Host platform -> Go GOOS / GOARCH names.
_HOST_OS = {
    "linux": "linux",
    "darwin": "darwin",
    "win32": "windows",
    "cygwin": "windows",
    "freebsd": "freebsd",
    "openbsd": "openbsd",
    "netbsd": "netbsd",
    "aix": "aix",
    "sunos5": "solaris",
}

_HOST_ARCH = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "i386": "386",
    "i686": "386",
    "x86": "386",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv7l": "arm",
    "armv6l": "arm",
    "ppc64le": "ppc64le",
    "ppc64": "ppc64",
    "s390x": "s390x",
    "riscv64": "riscv64",
    "mips64": "mips64",
    "mips": "mips",
}


def host_goos() -> str:
    """Return the GOOS value matching the running interpreter's platform."""
    for prefix, goos in _HOST_OS.items():
        if sys.platform.startswith(prefix):
            return goos
    return "linux"


def host_goarch() -> str:
    """Return the GOARCH value matching the running machine."""
    return _HOST_ARCH.get(platform.machine().lower(), "amd64")


def parse_tags_from_goflags(goflags: str) -> List[str]:
    """Extract build tags from a GOFLAGS-style string (``-tags=a,b`` or ``-tags a``)."""
    tags = []

    try:
        parts = shlex.split(goflags)
    except ValueError:
        match = re.search(r"-?-tags[=\s]+([^\s]+)", goflags)
        parts = ["-tags=" + match.group(1)] if match else []

    i = 0
    while i < len(parts):
        part = parts[i].lstrip("-")
        value = None
        if part == "tags" and i + 1 < len(parts):
            value = parts[i + 1]
            i += 2
        elif part.startswith("tags="):
            value = part[len("tags="):]
            i += 1
        else:
            i += 1
        if value:
            # Both comma and space separated lists are accepted by the go tool.
            tags.extend(t for t in re.split(r"[,\s]+", value) if t)

    return tags


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _default_gopath() -> List[str]:
    gopath = os.getenv("GOPATH")
    if gopath:
        return [p for p in gopath.split(os.pathsep) if p]
    return [os.path.join(os.path.expanduser("~"), "go")]


@dataclass
class BuildContext:
    """Build metadata settings used to select the files of a package directory."""

    goos: str = field(default_factory=lambda: os.getenv("GOOS") or host_goos())
    goarch: str = field(default_factory=lambda: os.getenv("GOARCH") or host_goarch())
    cgo_enabled: bool = field(default_factory=lambda: _env_flag("CGO_ENABLED", True))
    build_tags: List[str] = field(
        default_factory=lambda: parse_tags_from_goflags(os.getenv("GOFLAGS", ""))
    )
    compiler: str = "gc"
    go_minor_version: int = 22  # release tags go1.1 .. go1.N are satisfied
    goroot: Optional[str] = field(default_factory=lambda: os.getenv("GOROOT") or None)
    gopath: List[str] = field(default_factory=_default_gopath)


@dataclass
class ParserConfig:
    """Loader configuration."""

    # Downgrade semantic check failures to a model without resolved types.
    skip_semantics_check: bool = field(
        default_factory=lambda: _env_flag("GENBASE_SKIP_SEMANTICS_CHECK", False)
    )
    build: BuildContext = field(default_factory=BuildContext)
    source_extension: str = ".go"
