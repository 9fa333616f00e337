"""Tree-sitter based Go source parsing.

Converts the concrete syntax tree produced by tree-sitter-go into the
immutable declaration tree of :mod:`genbase.tree.nodes`. Only the package
clause, imports and top-level declarations are kept; function bodies are
dropped.
"""

from typing import Dict, List, Optional, Tuple, Union
import logging

import tree_sitter_go as tsgo
from tree_sitter import Language, Parser

from ..errors import LoadError
from .nodes import (
    BadExpr,
    ChanType,
    Collection,
    Comment,
    CommentGroup,
    Decl,
    Field,
    FuncDecl,
    FuncType,
    GenDecl,
    GenericType,
    Ident,
    ImportSpec,
    InterfaceType,
    MapType,
    OtherType,
    Pointer,
    QualifiedIdent,
    SourceUnit,
    StructType,
    TypeExpr,
    TypeSpec,
    ValueSpec,
)

logger = logging.getLogger(__name__)

_GO_LANGUAGE: Optional[Language] = None

TOP_LEVEL_DECLARATIONS = (
    "package_clause",
    "import_declaration",
    "type_declaration",
    "var_declaration",
    "const_declaration",
    "function_declaration",
    "method_declaration",
)


def get_parser() -> Parser:
    """Get tree-sitter parser for Go."""
    global _GO_LANGUAGE
    if _GO_LANGUAGE is None:
        _GO_LANGUAGE = Language(tsgo.language())
    return Parser(_GO_LANGUAGE)


def _get_node_text(node, source_bytes: bytes) -> str:
    """Get text content of a tree-sitter node."""
    return source_bytes[node.start_byte:node.end_byte].decode("utf-8", errors="replace")


def _normalize(text: str) -> str:
    """Collapse whitespace runs so multi-line type text renders on one line."""
    return " ".join(text.split())


def _named(node) -> List:
    """Named children of a node, without comments."""
    return [child for child in node.named_children if child.type != "comment"]


def _line(node) -> int:
    return node.start_point[0] + 1


def _end_line(node) -> int:
    return node.end_point[0] + 1


def _find_syntax_error(node):
    """Find the first ERROR or missing node in document order."""
    if node.type == "ERROR" or node.is_missing:
        return node
    if not node.has_error:
        return None
    for child in node.children:
        found = _find_syntax_error(child)
        if found is not None:
            return found
    return None


def _unquote(literal: str) -> str:
    if len(literal) >= 2 and literal[0] in "\"`" and literal[-1] == literal[0]:
        return literal[1:-1]
    return literal


class _Converter:
    """Builds a SourceUnit from one tree-sitter tree."""

    def __init__(self, filename: str, source_bytes: bytes):
        self.filename = filename
        self.source_bytes = source_bytes
        self.groups: List[CommentGroup] = []
        self._lead: Dict[int, CommentGroup] = {}
        self._trailing: Dict[int, CommentGroup] = {}

    def error(self, node, message: str) -> LoadError:
        row, col = node.start_point
        return LoadError(self.filename, f"{row + 1}:{col + 1}: {message}")

    def text(self, node) -> str:
        return _get_node_text(node, self.source_bytes)

    # Comments

    def _is_trailing(self, node) -> bool:
        """A comment trails a token when text precedes it on its starting line."""
        line_start = self.source_bytes.rfind(b"\n", 0, node.start_byte) + 1
        return bool(self.source_bytes[line_start:node.start_byte].strip())

    def collect_comments(self, root) -> None:
        nodes = []
        stack = [root]
        while stack:
            node = stack.pop()
            if node.type == "comment":
                nodes.append(node)
                continue
            stack.extend(node.children)
        nodes.sort(key=lambda n: n.start_byte)

        current: List[Comment] = []
        start = end = 0
        trailing = False
        for node in nodes:
            comment = Comment(text=self.text(node), line=_line(node))
            is_trailing = self._is_trailing(node)
            if current:
                if trailing:
                    joins = _line(node) == end
                else:
                    joins = not is_trailing and _line(node) <= end + 1
                if joins:
                    current.append(comment)
                    end = _end_line(node)
                    continue
                self._close_group(current, start, end, trailing)
            current = [comment]
            start, end = _line(node), _end_line(node)
            trailing = is_trailing
        if current:
            self._close_group(current, start, end, trailing)

    def _close_group(self, comments: List[Comment], start: int, end: int, trailing: bool) -> None:
        group = CommentGroup(comments=tuple(comments), start_line=start, end_line=end, trailing=trailing)
        self.groups.append(group)
        if trailing:
            self._trailing.setdefault(start, group)
        else:
            self._lead[end] = group

    def doc_for(self, node) -> Optional[CommentGroup]:
        """Comment group ending on the line right before the node."""
        return self._lead.get(_line(node) - 1)

    def comment_for(self, node) -> Optional[CommentGroup]:
        """Line comment trailing the node on its last line."""
        return self._trailing.get(_end_line(node))

    # Types

    def type_expr(self, node) -> TypeExpr:
        kind = node.type
        if kind == "type_identifier" or kind == "identifier":
            return Ident(self.text(node))
        if kind == "qualified_type":
            package = node.child_by_field_name("package")
            name = node.child_by_field_name("name")
            if package is None or name is None:
                return BadExpr(kind, _normalize(self.text(node)))
            return QualifiedIdent(self.text(package), self.text(name))
        if kind == "pointer_type":
            inner = _named(node)
            if not inner:
                return BadExpr(kind, self.text(node))
            return Pointer(self.type_expr(inner[0]))
        if kind == "slice_type":
            return Collection(self._field_type(node, "element"))
        if kind == "array_type":
            length = node.child_by_field_name("length")
            length_text = _normalize(self.text(length)) if length is not None else ""
            return Collection(self._field_type(node, "element"), length=length_text)
        if kind == "implicit_length_array_type":
            return Collection(self._field_type(node, "element"), length="...")
        if kind == "map_type":
            return MapType(self._field_type(node, "key"), self._field_type(node, "value"))
        if kind == "channel_type":
            tokens = [child.type for child in node.children if not child.is_named]
            if tokens and tokens[0] == "<-":
                direction = "recv"
            elif "<-" in tokens:
                direction = "send"
            else:
                direction = "both"
            return ChanType(self._field_type(node, "value"), direction)
        if kind == "function_type":
            params, results = self.signature(node)
            return FuncType(params, results, _normalize(self.text(node)))
        if kind == "interface_type":
            return InterfaceType(_normalize(self.text(node)))
        if kind == "struct_type":
            return self.struct_type(node)
        if kind == "generic_type":
            base = node.child_by_field_name("type")
            arguments = node.child_by_field_name("type_arguments")
            if base is None or arguments is None:
                return BadExpr(kind, _normalize(self.text(node)))
            return GenericType(self.type_expr(base), self.type_arguments(arguments))
        # Parentheses are dropped: (*int) renders and classifies as *int.
        if kind in ("parenthesized_type", "type_elem", "type_constraint"):
            inner = _named(node)
            if len(inner) == 1:
                return self.type_expr(inner[0])
            return OtherType(kind, _normalize(self.text(node)))
        if kind == "negated_type":
            return OtherType(kind, _normalize(self.text(node)))
        return BadExpr(kind, _normalize(self.text(node)))

    def _field_type(self, node, field_name: str) -> TypeExpr:
        child = node.child_by_field_name(field_name)
        if child is None:
            return BadExpr(node.type, _normalize(self.text(node)))
        return self.type_expr(child)

    def type_arguments(self, node) -> Tuple[TypeExpr, ...]:
        return tuple(self.type_expr(child) for child in _named(node))

    def struct_type(self, node) -> StructType:
        body = None
        for child in node.children:
            if child.type == "field_declaration_list":
                body = child
                break
        if body is None:
            return StructType()

        fields = []
        for decl in _named(body):
            if decl.type != "field_declaration":
                continue
            names = tuple(self.text(n) for n in decl.children_by_field_name("name"))
            type_node = decl.child_by_field_name("type")
            field_type = self.type_expr(type_node) if type_node is not None else BadExpr(
                decl.type, _normalize(self.text(decl))
            )
            embedded = not names
            if embedded and any(child.type == "*" for child in decl.children):
                field_type = Pointer(field_type)
            tag_node = decl.child_by_field_name("tag")
            fields.append(Field(
                names=names,
                type=field_type,
                tag=self.text(tag_node) if tag_node is not None else None,
                embedded=embedded,
                doc=self.doc_for(decl),
                comment=self.comment_for(decl),
                line=_line(decl),
            ))
        return StructType(tuple(fields))

    def parameters(self, node) -> Tuple[TypeExpr, ...]:
        """Types of a parameter list, one entry per declared name."""
        types: List[TypeExpr] = []
        for param in _named(node):
            type_node = param.child_by_field_name("type")
            if type_node is None:
                continue
            param_type = self.type_expr(type_node)
            if param.type == "variadic_parameter_declaration":
                param_type = Collection(param_type)
            count = len(param.children_by_field_name("name")) or 1
            types.extend([param_type] * count)
        return tuple(types)

    def signature(self, node) -> Tuple[Tuple[TypeExpr, ...], Tuple[TypeExpr, ...]]:
        params_node = node.child_by_field_name("parameters")
        params = self.parameters(params_node) if params_node is not None else ()
        result = node.child_by_field_name("result")
        if result is None:
            results: Tuple[TypeExpr, ...] = ()
        elif result.type == "parameter_list":
            results = self.parameters(result)
        else:
            results = (self.type_expr(result),)
        return params, results

    def type_params(self, node) -> Tuple[str, ...]:
        if node is None:
            return ()
        names = []
        for decl in _named(node):
            names.extend(self.text(n) for n in decl.children_by_field_name("name"))
        return tuple(names)

    # Declarations

    def import_decl(self, node) -> List[ImportSpec]:
        specs = []
        nodes = []
        for child in _named(node):
            if child.type == "import_spec":
                nodes.append(child)
            elif child.type == "import_spec_list":
                nodes.extend(c for c in _named(child) if c.type == "import_spec")
        for spec in nodes:
            path = spec.child_by_field_name("path")
            name = spec.child_by_field_name("name")
            specs.append(ImportSpec(
                path=_unquote(self.text(path)) if path is not None else "",
                name=self.text(name) if name is not None else None,
                doc=self.doc_for(spec),
                comment=self.comment_for(spec),
                line=_line(spec),
            ))
        return specs

    def type_decl(self, node) -> GenDecl:
        grouped = any(child.type == "(" for child in node.children)
        specs = []
        for spec in _named(node):
            if spec.type not in ("type_spec", "type_alias"):
                continue
            name = spec.child_by_field_name("name")
            type_node = spec.child_by_field_name("type")
            specs.append(TypeSpec(
                name=self.text(name) if name is not None else "",
                type=self.type_expr(type_node) if type_node is not None else BadExpr(
                    spec.type, _normalize(self.text(spec))
                ),
                type_params=self.type_params(spec.child_by_field_name("type_parameters")),
                alias=spec.type == "type_alias",
                # go/parser only attaches spec docs inside a parenthesized group.
                doc=self.doc_for(spec) if grouped else None,
                comment=self.comment_for(spec),
                line=_line(spec),
            ))
        return GenDecl(keyword="type", specs=tuple(specs), doc=self.doc_for(node), grouped=grouped, line=_line(node))

    def value_decl(self, node, keyword: str) -> GenDecl:
        spec_type = f"{keyword}_spec"
        nodes = []
        for child in _named(node):
            if child.type == spec_type:
                nodes.append(child)
            elif child.type == f"{spec_type}_list":
                nodes.extend(c for c in _named(child) if c.type == spec_type)
        grouped = any(child.type == "(" for child in node.children)
        specs = []
        for spec in nodes:
            type_node = spec.child_by_field_name("type")
            specs.append(ValueSpec(
                names=tuple(self.text(n) for n in spec.children_by_field_name("name")),
                type=self.type_expr(type_node) if type_node is not None else None,
                doc=self.doc_for(spec) if grouped else None,
                line=_line(spec),
            ))
        return GenDecl(keyword=keyword, specs=tuple(specs), doc=self.doc_for(node), grouped=grouped, line=_line(node))

    def func_decl(self, node) -> FuncDecl:
        name = node.child_by_field_name("name")
        params, results = self.signature(node)
        receiver = None
        receiver_node = node.child_by_field_name("receiver")
        if receiver_node is not None:
            receivers = self.parameters(receiver_node)
            receiver = receivers[0] if receivers else None
        signature_end = node.child_by_field_name("body")
        end = signature_end.start_byte if signature_end is not None else node.end_byte
        text = self.source_bytes[node.start_byte:end].decode("utf-8", errors="replace")
        return FuncDecl(
            name=self.text(name) if name is not None else "",
            signature=FuncType(params, results, _normalize(text)),
            receiver=receiver,
            type_params=self.type_params(node.child_by_field_name("type_parameters")),
            doc=self.doc_for(node),
            line=_line(node),
        )

    def convert(self, root) -> SourceUnit:
        self.collect_comments(root)

        package_name = None
        unit_doc = None
        imports: List[ImportSpec] = []
        decls: List[Decl] = []
        seen_declaration = False

        for child in root.children:
            kind = child.type
            if kind == "comment":
                continue
            if kind not in TOP_LEVEL_DECLARATIONS:
                raise self.error(child, f"syntax error: non-declaration statement outside function body ({kind})")
            if kind == "package_clause":
                names = _named(child)
                if names:
                    package_name = self.text(names[0])
                unit_doc = self.doc_for(child)
            elif kind == "import_declaration":
                if seen_declaration:
                    raise self.error(child, "syntax error: imports must appear before other declarations")
                imports.extend(self.import_decl(child))
            elif kind == "type_declaration":
                seen_declaration = True
                decls.append(self.type_decl(child))
            elif kind in ("var_declaration", "const_declaration"):
                seen_declaration = True
                decls.append(self.value_decl(child, kind.split("_", 1)[0]))
            else:
                seen_declaration = True
                decls.append(self.func_decl(child))

        return SourceUnit(
            filename=self.filename,
            package_name=package_name,
            imports=tuple(imports),
            decls=tuple(decls),
            comments=tuple(self.groups),
            doc=unit_doc,
        )


def parse_file(filename: str, source: Union[str, bytes]) -> SourceUnit:
    """
    Parse one Go file into a SourceUnit.

    Args:
        filename: Name recorded on the unit and used in error messages
        source: File contents

    Raises:
        LoadError: The source is not valid UTF-8 or has a syntax error
    """
    if isinstance(source, str):
        source_bytes = source.encode("utf-8")
    else:
        source_bytes = source
        try:
            source_bytes.decode("utf-8")
        except UnicodeDecodeError as e:
            raise LoadError(filename, f"invalid UTF-8 encoding: {e}") from e

    tree = get_parser().parse(source_bytes)
    root = tree.root_node

    bad = _find_syntax_error(root)
    if bad is not None:
        row, col = bad.start_point
        if bad.is_missing:
            message = f"syntax error: missing {bad.type}"
        else:
            snippet = _normalize(_get_node_text(bad, source_bytes))[:40]
            message = f"syntax error: unexpected {snippet!r}" if snippet else "syntax error"
        raise LoadError(filename, f"{row + 1}:{col + 1}: {message}")

    unit = _Converter(filename, source_bytes).convert(root)
    logger.debug("Parsed %s: %d declarations", filename, len(unit.decls))
    return unit


def parse_source_file(path: str) -> SourceUnit:
    """Read and parse a Go file from disk."""
    try:
        with open(path, "rb") as f:
            content = f.read()
    except OSError as e:
        raise LoadError(path, e) from e
    return parse_file(path, content)
