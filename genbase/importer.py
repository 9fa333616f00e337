"""Import path resolution for semantic checking.

Standard library packages resolve without reading their sources. Other import
paths are looked up, in order, in the enclosing module (``go.mod``), in
enclosing ``vendor`` directories and in each ``GOPATH/src`` tree; a package
found on disk is parsed to learn its name and exported identifiers.
"""

from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional, Tuple
import logging
import os
import re

from .build import import_dir
from .config import BuildContext
from .errors import GenbaseError, ImportNotFoundError
from .tree.nodes import FuncDecl, TypeSpec, ValueSpec
from .tree.parser import parse_source_file

logger = logging.getLogger(__name__)

STDLIB_PACKAGES = frozenset({
    "archive/tar", "archive/zip", "bufio", "bytes", "cmp", "compress/bzip2",
    "compress/flate", "compress/gzip", "compress/lzw", "compress/zlib",
    "container/heap", "container/list", "container/ring", "context", "crypto",
    "crypto/aes", "crypto/cipher", "crypto/des", "crypto/dsa", "crypto/ecdh",
    "crypto/ecdsa", "crypto/ed25519", "crypto/elliptic", "crypto/hmac",
    "crypto/md5", "crypto/rand", "crypto/rc4", "crypto/rsa", "crypto/sha1",
    "crypto/sha256", "crypto/sha512", "crypto/subtle", "crypto/tls",
    "crypto/x509", "crypto/x509/pkix", "database/sql", "database/sql/driver",
    "debug/buildinfo", "debug/dwarf", "debug/elf", "debug/gosym",
    "debug/macho", "debug/pe", "debug/plan9obj", "embed", "encoding",
    "encoding/ascii85", "encoding/asn1", "encoding/base32", "encoding/base64",
    "encoding/binary", "encoding/csv", "encoding/gob", "encoding/hex",
    "encoding/json", "encoding/pem", "encoding/xml", "errors", "expvar",
    "flag", "fmt", "go/ast", "go/build", "go/build/constraint",
    "go/constant", "go/doc", "go/format", "go/importer", "go/parser",
    "go/printer", "go/scanner", "go/token", "go/types", "hash",
    "hash/adler32", "hash/crc32", "hash/crc64", "hash/fnv", "hash/maphash",
    "html", "html/template", "image", "image/color", "image/color/palette",
    "image/draw", "image/gif", "image/jpeg", "image/png", "index/suffixarray",
    "io", "io/fs", "io/ioutil", "iter", "log", "log/slog", "log/syslog",
    "maps", "math", "math/big", "math/bits", "math/cmplx", "math/rand",
    "math/rand/v2", "mime", "mime/multipart", "mime/quotedprintable", "net",
    "net/http", "net/http/cgi", "net/http/cookiejar", "net/http/fcgi",
    "net/http/httptest", "net/http/httptrace", "net/http/httputil",
    "net/http/pprof", "net/mail", "net/netip", "net/rpc", "net/rpc/jsonrpc",
    "net/smtp", "net/textproto", "net/url", "os", "os/exec", "os/signal",
    "os/user", "path", "path/filepath", "plugin", "reflect", "regexp",
    "regexp/syntax", "runtime", "runtime/cgo", "runtime/debug",
    "runtime/pprof", "runtime/trace", "slices", "sort", "strconv", "strings",
    "sync", "sync/atomic", "syscall", "testing", "testing/fstest",
    "testing/iotest", "testing/quick", "text/scanner", "text/tabwriter",
    "text/template", "text/template/parse", "time", "unicode",
    "unicode/utf16", "unicode/utf8", "unique", "unsafe",
})

_MODULE_RE = re.compile(r"^\s*module\s+\"?([^\s\"]+)\"?", re.MULTILINE)
_VERSION_SUFFIX_RE = re.compile(r"^v[0-9]+$")


@dataclass(frozen=True)
class ImportedPackage:
    """An imported package as seen by the checker.

    ``names`` is None when the package contents are unknown (standard
    library), in which case every exported name is accepted.
    """
    path: str
    name: str
    dir: Optional[str] = None
    names: Optional[FrozenSet[str]] = None
    type_names: Optional[FrozenSet[str]] = None


def default_package_name(import_path: str) -> str:
    """Package name implied by an import path (``gopkg.in/yaml.v3`` -> ``yaml``)."""
    segments = [s for s in import_path.split("/") if s]
    if not segments:
        return import_path
    last = segments[-1]
    if _VERSION_SUFFIX_RE.match(last) and len(segments) > 1:
        last = segments[-2]
    last = re.sub(r"\.v[0-9]+$", "", last)
    last = last.replace("-", "_").replace(".", "_")
    return last


def is_standard_path(import_path: str) -> bool:
    """Go reserves import paths without a dot in the first element for the standard library."""
    first = import_path.split("/", 1)[0]
    return "." not in first


def find_module_root(directory: str) -> Tuple[Optional[str], Optional[str]]:
    """Return (module root directory, module path) of the nearest go.mod."""
    current = os.path.abspath(directory)
    while True:
        gomod = os.path.join(current, "go.mod")
        if os.path.isfile(gomod):
            try:
                with open(gomod, "r", encoding="utf-8") as f:
                    match = _MODULE_RE.search(f.read())
            except OSError:
                match = None
            return current, match.group(1) if match else None
        parent = os.path.dirname(current)
        if parent == current:
            return None, None
        current = parent


class SourceImporter:
    """Resolves import paths to :class:`ImportedPackage` values.

    Results are memoized for the lifetime of the importer only.
    """

    def __init__(self, context: Optional[BuildContext] = None):
        self.context = context or BuildContext()
        self._cache: Dict[Tuple[str, str], ImportedPackage] = {}

    def candidate_dirs(self, import_path: str, from_dir: str) -> List[str]:
        """Directories that may hold ``import_path``, in lookup order."""
        candidates = []
        root, module = find_module_root(from_dir)
        if root and module:
            if import_path == module:
                candidates.append(root)
            elif import_path.startswith(module + "/"):
                candidates.append(os.path.join(root, import_path[len(module) + 1:]))

        current = os.path.abspath(from_dir)
        while True:
            candidates.append(os.path.join(current, "vendor", import_path))
            if root and current == root:
                break
            parent = os.path.dirname(current)
            if parent == current:
                break
            current = parent

        for entry in self.context.gopath:
            candidates.append(os.path.join(entry, "src", import_path))
        return candidates

    def import_package(self, import_path: str, from_dir: str = ".") -> ImportedPackage:
        """
        Resolve one import path.

        Raises:
            ImportNotFoundError: The path is neither standard nor found on disk
        """
        key = (import_path, os.path.abspath(from_dir))
        if key in self._cache:
            return self._cache[key]

        if not import_path or not _valid_import_path(import_path):
            raise ImportNotFoundError(import_path, "invalid import path")

        pkg = None
        if is_standard_path(import_path):
            goroot = self.context.goroot
            std_dir = os.path.join(goroot, "src", import_path) if goroot else None
            if import_path in STDLIB_PACKAGES or (std_dir and os.path.isdir(std_dir)):
                pkg = ImportedPackage(path=import_path, name=default_package_name(import_path))
        if pkg is None:
            for candidate in self.candidate_dirs(import_path, from_dir):
                if os.path.isdir(candidate):
                    pkg = self._load_dir(import_path, candidate)
                    break
        if pkg is None:
            if is_standard_path(import_path):
                raise ImportNotFoundError(import_path, "package not in std")
            raise ImportNotFoundError(import_path, "cannot find package")

        logger.debug("Resolved import %s -> %s", import_path, pkg.dir or "<std>")
        self._cache[key] = pkg
        return pkg

    def _load_dir(self, import_path: str, directory: str) -> ImportedPackage:
        try:
            build_pkg = import_dir(directory, self.context)
            units = [
                parse_source_file(path)
                for path in build_pkg.all_files()
                if path.endswith(".go")
            ]
        except GenbaseError as e:
            raise ImportNotFoundError(import_path, str(e)) from e

        names = set()
        type_names = set()
        for unit in units:
            for decl in unit.decls:
                if isinstance(decl, FuncDecl):
                    if decl.receiver is None:
                        names.add(decl.name)
                    continue
                for spec in decl.specs:
                    if isinstance(spec, TypeSpec):
                        names.add(spec.name)
                        type_names.add(spec.name)
                    elif isinstance(spec, ValueSpec):
                        names.update(spec.names)

        exported = frozenset(n for n in names if n[:1].isupper())
        return ImportedPackage(
            path=import_path,
            name=build_pkg.name or default_package_name(import_path),
            dir=directory,
            names=exported,
            type_names=frozenset(n for n in type_names if n in exported),
        )


def _valid_import_path(import_path: str) -> bool:
    if import_path.startswith("/") or import_path.endswith("/"):
        return False
    return all(ch.isprintable() and not ch.isspace() and ch not in '!"#$%&\'()*,:;<=>?[\\]^`{|}' for ch in import_path)
