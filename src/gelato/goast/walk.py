import dataclasses
import re
from typing import Iterator, Set

from . import nodes as go

_PLAIN_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_MAJOR_VERSION = re.compile(r"^v[0-9]+$")


def walk(node) -> Iterator:
    """Yields node and every node below it, depth first."""
    stack = [node]
    while stack:
        current = stack.pop()
        if isinstance(current, (tuple, list)):
            stack.extend(reversed(current))
            continue
        if not dataclasses.is_dataclass(current):
            continue
        yield current
        if isinstance(current, go.FieldList):
            stack.extend(reversed(current.fields))
            continue
        children = [getattr(current, f.name) for f in dataclasses.fields(current)]
        stack.extend(reversed(children))


def selector_roots(node) -> Set[str]:
    """Identifiers used as the left side of a selector (pkg in pkg.Name)."""
    roots = set()
    for n in walk(node):
        if isinstance(n, go.SelectorExpr) and isinstance(n.x, go.Ident):
            roots.add(n.x.name)
        elif isinstance(n, go.SourceBlock):
            roots.update(ref.name for ref in n.call_roots + n.selector_refs)
        elif isinstance(n, go.SourceDecl):
            roots.update(n.refs)
    return roots


def import_name(spec: go.ImportSpec) -> str:
    """Name an import is referred to by; last path element unless renamed."""
    if spec.name:
        return spec.name
    return spec.path.rsplit("/", 1)[-1]


def used_imports(specs, decls) -> tuple:
    """
    Imports among specs that decls refer to.

    Imports whose package name cannot be told from the path (gopkg.in/yaml.v2,
    .../v2) are kept.
    """
    roots = selector_roots(decls)
    kept = []
    for spec in specs:
        name = import_name(spec)
        if spec.name is None and (not _PLAIN_NAME.match(name) or _MAJOR_VERSION.match(name)):
            kept.append(spec)
        elif name in roots:
            kept.append(spec)
    return tuple(kept)
