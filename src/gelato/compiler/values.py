"""
Value synthesis for generated code.

ValueSynthesizer produces example values for builders; zero_value produces
the value a mock returns when no canned output was registered.
"""

from typing import Dict, List, Optional, Set, Tuple

from gelato.exceptions import SynthesisError
from gelato.goast import nodes as go
from .config import EXAMPLE_SIZE, FACTORY_DIR
from .naming import safe_identifier, unique_name

FACTORY_PACKAGE = FACTORY_DIR

# Predeclared types with a generator function in the factory package
FACTORY_FUNCS = {
    "bool": "Bool",
    "string": "String",
    "byte": "Byte",
    "rune": "Rune",
    "int": "Int",
    "int8": "Int8",
    "int16": "Int16",
    "int32": "Int32",
    "int64": "Int64",
    "uint": "Uint",
    "uint8": "Uint8",
    "uint16": "Uint16",
    "uint32": "Uint32",
    "uint64": "Uint64",
    "uintptr": "Uintptr",
    "float32": "Float32",
    "float64": "Float64",
    "complex64": "Complex64",
    "complex128": "Complex128",
    "error": "Error",
}

NIL = go.Ident("nil")

_NUMERIC = {
    "byte", "rune", "int", "int8", "int16", "int32", "int64", "uint", "uint8",
    "uint16", "uint32", "uint64", "uintptr", "float32", "float64", "complex64", "complex128",
}
_NILABLE = {"error", "any"}


def _named_kind(type_expr: go.Expr, kinds: Optional[Dict[str, str]], package: Optional[str]) -> Optional[str]:
    """Kind of a named type declared in the original package, if known."""
    if not kinds:
        return None
    if isinstance(type_expr, go.Ident):
        return kinds.get(type_expr.name)
    if (
        isinstance(type_expr, go.SelectorExpr)
        and isinstance(type_expr.x, go.Ident)
        and type_expr.x.name == package
    ):
        return kinds.get(type_expr.sel)
    return None


def _named_value(type_expr: go.Expr, kind: Optional[str]) -> go.Expr:
    if kind in ("interface", "func"):
        return NIL
    if kind == "struct":
        return go.CompositeLit(type_expr)
    # *new(T) is the zero value of any type, including non-composite ones
    return go.StarExpr(go.CallExpr(go.Ident("new"), (type_expr,)))


def _array_size(type_expr: go.ArrayType) -> int:
    if isinstance(type_expr.length, go.BasicLit):
        try:
            return min(int(type_expr.length.value, 0), EXAMPLE_SIZE)
        except ValueError:
            return 0
    # the value of a named length is not known here
    return 0


class ValueSynthesizer:
    """
    Builds example values for a type.

    Each call to synthesize returns the statements that must run first
    (temporaries for pointers and channels) and the expression holding the
    value. Temporary names are unique for the lifetime of the synthesizer.
    """

    def __init__(self, kinds: Optional[Dict[str, str]] = None, package: Optional[str] = None,
                 taken: Optional[Set[str]] = None):
        self.kinds = kinds or {}
        self.package = package
        self.taken: Set[str] = set(taken or ())

    def temp(self, base: str) -> str:
        return unique_name(safe_identifier(base), self.taken)

    def synthesize(self, name: str, type_expr: go.Expr) -> Tuple[List[go.Stmt], go.Expr]:
        """
        Raises:
            SynthesisError: no rule exists for the type shape.
        """
        if isinstance(type_expr, go.Ident):
            factory_func = FACTORY_FUNCS.get(type_expr.name)
            if factory_func:
                call = go.CallExpr(go.SelectorExpr(go.Ident(FACTORY_PACKAGE), factory_func))
                return [], call
            if type_expr.name in _NILABLE:
                return [], NIL
            return [], _named_value(type_expr, _named_kind(type_expr, self.kinds, self.package))

        if isinstance(type_expr, (go.SelectorExpr, go.IndexExpr)):
            return [], _named_value(type_expr, _named_kind(type_expr, self.kinds, self.package))

        if isinstance(type_expr, go.StarExpr):
            stmts, value = self.synthesize(name, type_expr.x)
            tmp = self.temp(f"{name}Ptr")
            stmts.append(go.AssignStmt((go.Ident(tmp),), ":=", (value,)))
            return stmts, go.UnaryExpr("&", go.Ident(tmp))

        if isinstance(type_expr, go.ArrayType):
            stmts: List[go.Stmt] = []
            elts = []
            for _ in range(_array_size(type_expr)):
                prep, value = self.synthesize(name, type_expr.elt)
                stmts.extend(prep)
                elts.append(value)
            return stmts, go.CompositeLit(type_expr, tuple(elts))

        if isinstance(type_expr, go.MapType):
            stmts = []
            pairs = []
            for _ in range(EXAMPLE_SIZE):
                key_prep, key = self.synthesize(f"{name}Key", type_expr.key)
                value_prep, value = self.synthesize(name, type_expr.value)
                stmts.extend(key_prep)
                stmts.extend(value_prep)
                pairs.append(go.KeyValueExpr(key, value))
            return stmts, go.CompositeLit(type_expr, tuple(pairs))

        if isinstance(type_expr, go.ChanType):
            tmp = self.temp(f"{name}Chan")
            make = go.CallExpr(
                go.Ident("make"),
                (go.ChanType(value=type_expr.value), go.BasicLit("INT", str(EXAMPLE_SIZE))),
            )
            stmts = [go.AssignStmt((go.Ident(tmp),), ":=", (make,))]
            for _ in range(EXAMPLE_SIZE):
                prep, value = self.synthesize(name, type_expr.value)
                stmts.extend(prep)
                stmts.append(go.SendStmt(go.Ident(tmp), value))
            return stmts, go.Ident(tmp)

        if isinstance(type_expr, (go.FuncType, go.InterfaceType)):
            return [], NIL

        if isinstance(type_expr, go.StructType):
            return [], go.CompositeLit(type_expr)

        raise SynthesisError(f"no example value rule for {type(type_expr).__name__}")


def zero_value(type_expr: go.Expr, kinds: Optional[Dict[str, str]] = None,
               package: Optional[str] = None) -> go.Expr:
    """
    The zero value of a type as an expression.

    kinds maps type names of the original package to their kind. Named
    interfaces and func types become nil and named structs a composite
    literal. A named type of any other or unknown kind becomes *new(T).

    Raises:
        SynthesisError: no rule exists for the type shape.
    """
    if isinstance(type_expr, go.Ident):
        name = type_expr.name
        if name == "bool":
            return go.Ident("false")
        if name == "string":
            return go.BasicLit("STRING", '""')
        if name in _NUMERIC:
            return go.BasicLit("INT", "0")
        if name in _NILABLE:
            return NIL
        return _named_value(type_expr, _named_kind(type_expr, kinds, package))

    if isinstance(type_expr, (go.SelectorExpr, go.IndexExpr)):
        return _named_value(type_expr, _named_kind(type_expr, kinds, package))

    if isinstance(type_expr, go.ArrayType):
        if type_expr.length is None:
            return NIL
        return go.CompositeLit(type_expr)

    if isinstance(type_expr, (go.StarExpr, go.MapType, go.ChanType, go.FuncType,
                              go.InterfaceType, go.Ellipsis)):
        return NIL

    if isinstance(type_expr, go.StructType):
        return go.CompositeLit(type_expr)

    raise SynthesisError(f"no zero value rule for {type(type_expr).__name__}")
