"""Go build constraint parsing and evaluation.

Supports both the ``//go:build`` expression syntax and the legacy
``// +build`` line syntax. A constraint is evaluated against a tag predicate,
usually :meth:`genbase.build.TagMatcher.match`.
"""

import re
from typing import Callable, List, Optional, Tuple

TagPredicate = Callable[[str], bool]

_TOKEN_RE = re.compile(r"\s*(&&|\|\||!|\(|\)|[A-Za-z0-9_.]+)")
_TAG_RE = re.compile(r"^[A-Za-z0-9_.]+$")


class ConstraintSyntaxError(ValueError):
    """Raised for a malformed build constraint."""


def _tokenize(expr: str) -> List[str]:
    tokens = []
    pos = 0
    text = expr.rstrip()
    while pos < len(text):
        match = _TOKEN_RE.match(text, pos)
        if not match:
            raise ConstraintSyntaxError(f"unexpected character in build constraint: {text[pos:]!r}")
        tokens.append(match.group(1))
        pos = match.end()
    return tokens


class _ExprParser:
    """Recursive descent parser for ``//go:build`` expressions.

    Grammar::

        or   := and ('||' and)*
        and  := not ('&&' not)*
        not  := '!' not | atom
        atom := tag | '(' or ')'
    """

    def __init__(self, tokens: List[str]):
        self.tokens = tokens
        self.pos = 0

    def _peek(self) -> Optional[str]:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def _next(self) -> str:
        token = self._peek()
        if token is None:
            raise ConstraintSyntaxError("unexpected end of build constraint")
        self.pos += 1
        return token

    def parse(self) -> Tuple:
        if not self.tokens:
            raise ConstraintSyntaxError("empty build constraint")
        node = self._or()
        if self._peek() is not None:
            raise ConstraintSyntaxError(f"unexpected token {self._peek()!r} in build constraint")
        return node

    def _or(self) -> Tuple:
        node = self._and()
        while self._peek() == "||":
            self._next()
            node = ("or", node, self._and())
        return node

    def _and(self) -> Tuple:
        node = self._not()
        while self._peek() == "&&":
            self._next()
            node = ("and", node, self._not())
        return node

    def _not(self) -> Tuple:
        if self._peek() == "!":
            self._next()
            return ("not", self._not())
        return self._atom()

    def _atom(self) -> Tuple:
        token = self._next()
        if token == "(":
            node = self._or()
            if self._next() != ")":
                raise ConstraintSyntaxError("missing ) in build constraint")
            return node
        if not _TAG_RE.match(token):
            raise ConstraintSyntaxError(f"unexpected token {token!r} in build constraint")
        return ("tag", token)


def parse_expr(expr: str) -> Tuple:
    """Parse a ``//go:build`` expression into a nested tuple tree."""
    return _ExprParser(_tokenize(expr)).parse()


def eval_expr(node: Tuple, match: TagPredicate) -> bool:
    kind = node[0]
    if kind == "tag":
        return match(node[1])
    if kind == "not":
        return not eval_expr(node[1], match)
    if kind == "and":
        return eval_expr(node[1], match) and eval_expr(node[2], match)
    if kind == "or":
        return eval_expr(node[1], match) or eval_expr(node[2], match)
    raise ConstraintSyntaxError(f"unknown constraint node {kind!r}")


def eval_plus_build_line(line: str, match: TagPredicate) -> bool:
    """Evaluate the body of one ``// +build`` line.

    Space separated options are ORed, comma separated terms are ANDed, and a
    leading ``!`` negates a term.
    """
    for option in line.split():
        satisfied = True
        for term in option.split(","):
            negated = term.startswith("!")
            name = term[1:] if negated else term
            if not name or not _TAG_RE.match(name) or name.startswith("!"):
                satisfied = False
                break
            if match(name) == negated:
                satisfied = False
                break
        if satisfied:
            return True
    return False


def read_header_constraints(source: str) -> Tuple[Optional[str], List[str]]:
    """Return the ``//go:build`` expression and ``// +build`` lines of a file header.

    Only the leading comment block before the package clause is considered.
    """
    go_build = None
    plus_build = []
    in_block = False

    for raw in source.splitlines():
        line = raw.strip()
        if in_block:
            if "*/" in line:
                in_block = False
                line = line.split("*/", 1)[1].strip()
                if not line:
                    continue
            else:
                continue
        if not line:
            continue
        if line.startswith("/*"):
            if "*/" not in line[2:]:
                in_block = True
            continue
        if not line.startswith("//"):
            break
        body = line[2:]
        if body.startswith("go:build"):
            if go_build is None:
                go_build = body[len("go:build"):].strip()
        elif body.strip().startswith("+build"):
            rest = body.strip()[len("+build"):]
            if not rest or rest[0].isspace():
                plus_build.append(rest.strip())

    return go_build, plus_build


def should_build(source: str, match: TagPredicate) -> bool:
    """Report whether a file's header build constraints are satisfied."""
    go_build, plus_build = read_header_constraints(source)
    if go_build is not None:
        return eval_expr(parse_expr(go_build), match)
    return all(eval_plus_build_line(line, match) for line in plus_build)
