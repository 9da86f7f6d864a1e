"""
Identifier helpers shared by the synthesizers.
"""

import re
from typing import Iterable, List, Optional, Set

from gelato.exceptions import SynthesisError
from gelato.goast import nodes as go

_LOWER_START = re.compile(r"^[a-z]")
_ALL_UPPER = re.compile(r"^[A-Z]+$")
_TITLE = re.compile(r"^[A-Z][0-9a-z_]")
_ACRONYM_TITLE = re.compile(r"^([A-Z]+)[A-Z][0-9a-z_]")

GO_KEYWORDS = frozenset({
    "break", "case", "chan", "const", "continue", "default", "defer", "else",
    "fallthrough", "for", "func", "go", "goto", "if", "import", "interface",
    "map", "package", "range", "return", "select", "struct", "switch", "type", "var",
})

PREDECLARED_TYPES = frozenset({
    "any", "bool", "byte", "comparable", "complex64", "complex128", "error",
    "float32", "float64", "int", "int8", "int16", "int32", "int64", "rune",
    "string", "uint", "uint8", "uint16", "uint32", "uint64", "uintptr",
})

PREDECLARED_NAMES = PREDECLARED_TYPES | frozenset({
    "true", "false", "iota", "nil", "append", "cap", "clear", "close",
    "complex", "copy", "delete", "imag", "len", "make", "max", "min", "new",
    "panic", "print", "println", "real", "recover",
})


def is_exported(name: str) -> bool:
    return name[:1].isupper()


def convert_to_unexported(name: str) -> str:
    """
    Lower-cases the leading word of an identifier.

    Request -> request, ID -> id, HTTPRequest -> httpRequest. Names that are
    already unexported are returned unchanged.

    Raises:
        SynthesisError: the name matches none of the rules (e.g. "_X", "_Id").
    """
    if _LOWER_START.match(name):
        return name
    if _ALL_UPPER.match(name):
        return name.lower()
    if _TITLE.match(name):
        return name[0].lower() + name[1:]
    match = _ACRONYM_TITLE.match(name)
    if match:
        prefix = match.group(1)
        return prefix.lower() + name[len(prefix):]
    raise SynthesisError(f"cannot derive an unexported name from '{name}'")


def infer_name(type_expr: go.Expr) -> str:
    """
    The last identifier of a type expression: *pkg.Config -> Config, []T -> T.

    Raises:
        SynthesisError: the expression has no identifier (e.g. func types).
    """
    if isinstance(type_expr, go.Ident):
        return type_expr.name
    if isinstance(type_expr, go.SelectorExpr):
        return type_expr.sel
    if isinstance(type_expr, (go.StarExpr, go.ParenExpr)):
        return infer_name(type_expr.x)
    if isinstance(type_expr, go.ArrayType):
        return infer_name(type_expr.elt)
    if isinstance(type_expr, go.Ellipsis):
        return infer_name(type_expr.elt)
    if isinstance(type_expr, go.MapType):
        return infer_name(type_expr.value)
    if isinstance(type_expr, go.ChanType):
        return infer_name(type_expr.value)
    if isinstance(type_expr, go.IndexExpr):
        return infer_name(type_expr.x)
    raise SynthesisError(f"cannot infer a name from {type(type_expr).__name__}")


def safe_identifier(name: str) -> str:
    """Makes name usable as a local variable: error -> err, keywords and builtins get a Val suffix."""
    if not name or name == "_":
        return "v"
    if name == "error":
        return "err"
    if name in GO_KEYWORDS or name in PREDECLARED_NAMES:
        return name + "Val"
    return name


def field_name(type_expr: go.Expr) -> str:
    """Local variable name for a value of the given type."""
    try:
        inferred = infer_name(type_expr)
    except SynthesisError:
        return "v"
    return safe_identifier(convert_to_unexported(inferred) if is_exported(inferred) else inferred)


def unique_name(name: str, taken: Set[str]) -> str:
    """Returns name, or name followed by the smallest free numeric suffix; records the result in taken."""
    candidate = name
    counter = 1
    while candidate in taken:
        counter += 1
        candidate = f"{name}{counter}"
    taken.add(candidate)
    return candidate


def unique_names(fields: go.FieldList, taken: Optional[Set[str]] = None) -> List[str]:
    """
    One distinct identifier per value declared by fields.

    Declared names are kept; blank and anonymous entries get names inferred
    from their types.
    """
    taken = set(taken or ())
    declared = {n for f in fields for n in f.names if n != "_"}
    taken |= declared
    names = []
    for f in fields:
        if f.names:
            for n in f.names:
                names.append(n if n != "_" else unique_name(field_name(f.type), taken))
        else:
            names.append(unique_name(field_name(f.type), taken))
    return names


def expand_fields(fields: go.FieldList, names: Iterable[str]) -> go.FieldList:
    """Rebuilds fields with one explicit name per value."""
    names = list(names)
    expanded = []
    index = 0
    for f in fields:
        for _ in range(max(len(f.names), 1)):
            expanded.append(go.Field(names=(names[index],), type=f.type))
            index += 1
    return go.FieldList(tuple(expanded))


def qualify(type_expr: go.Expr, package: str) -> go.Expr:
    """
    Prefixes every unqualified, non-predeclared type name with package.

    Used when synthesized code in another package refers to the original
    package's types: Config -> pkg.Config, map[string]*Item -> map[string]*pkg.Item.
    """
    def q(e: go.Expr) -> go.Expr:
        return qualify(e, package)

    if isinstance(type_expr, go.Ident):
        if type_expr.name in PREDECLARED_TYPES:
            return type_expr
        return go.SelectorExpr(go.Ident(package), type_expr.name)
    if isinstance(type_expr, go.StarExpr):
        return go.StarExpr(q(type_expr.x))
    if isinstance(type_expr, go.ParenExpr):
        return go.ParenExpr(q(type_expr.x))
    if isinstance(type_expr, go.ArrayType):
        return go.ArrayType(elt=q(type_expr.elt), length=qualify_length(type_expr.length, package))
    if isinstance(type_expr, go.Ellipsis):
        return go.Ellipsis(q(type_expr.elt))
    if isinstance(type_expr, go.MapType):
        return go.MapType(key=q(type_expr.key), value=q(type_expr.value))
    if isinstance(type_expr, go.ChanType):
        return go.ChanType(value=q(type_expr.value), dir=type_expr.dir)
    if isinstance(type_expr, go.FuncType):
        return go.FuncType(params=qualify_fields(type_expr.params, package),
                           results=qualify_fields(type_expr.results, package))
    if isinstance(type_expr, go.StructType):
        return go.StructType(qualify_fields(type_expr.fields, package))
    if isinstance(type_expr, go.InterfaceType):
        return go.InterfaceType(qualify_fields(type_expr.methods, package))
    if isinstance(type_expr, go.IndexExpr):
        return go.IndexExpr(q(type_expr.x), tuple(q(i) for i in type_expr.indices))
    return type_expr


def qualify_length(length: Optional[go.Expr], package: str) -> Optional[go.Expr]:
    """Prefixes constants in an array length with package: [N]T -> [pkg.N]T."""
    if isinstance(length, go.Ident):
        return go.SelectorExpr(go.Ident(package), length.name)
    if isinstance(length, go.ParenExpr):
        return go.ParenExpr(qualify_length(length.x, package))
    if isinstance(length, go.BinaryExpr):
        return go.BinaryExpr(qualify_length(length.x, package), length.op, qualify_length(length.y, package))
    return length


def qualify_fields(fields: go.FieldList, package: str) -> go.FieldList:
    return go.FieldList(tuple(
        go.Field(names=f.names, type=qualify(f.type, package), tag=f.tag) for f in fields
    ))


def package_import(import_path: str, package_name: str) -> go.ImportSpec:
    """Import spec for a package, renamed only when its name differs from the last path element."""
    if import_path.rsplit("/", 1)[-1] == package_name:
        return go.ImportSpec(path=import_path)
    return go.ImportSpec(path=import_path, name=package_name)
