"""
Go AST node kinds.

A deliberately small, closed set of immutable nodes: enough to describe the
declarations gelato reads (imports, types, function signatures) and the code
it synthesizes. Function bodies read from disk are kept verbatim as
SourceBlock values; only the call-site positions needed for rewiring are
extracted from them.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple, Union


# ============================================================================
# EXPRESSIONS AND TYPES
# ============================================================================

@dataclass(frozen=True)
class Ident:
    name: str


@dataclass(frozen=True)
class BasicLit:
    kind: str  # INT, FLOAT, IMAG, CHAR, STRING
    value: str


@dataclass(frozen=True)
class SelectorExpr:
    x: "Expr"
    sel: str


@dataclass(frozen=True)
class StarExpr:
    """Pointer type (*T) or dereference (*x)."""
    x: "Expr"


@dataclass(frozen=True)
class UnaryExpr:
    op: str
    x: "Expr"


@dataclass(frozen=True)
class BinaryExpr:
    x: "Expr"
    op: str
    y: "Expr"


@dataclass(frozen=True)
class ParenExpr:
    x: "Expr"


@dataclass(frozen=True)
class CallExpr:
    fun: "Expr"
    args: Tuple["Expr", ...] = ()
    ellipsis: bool = False


@dataclass(frozen=True)
class CompositeLit:
    type: Optional["Expr"]
    elts: Tuple["Expr", ...] = ()


@dataclass(frozen=True)
class KeyValueExpr:
    key: "Expr"
    value: "Expr"


@dataclass(frozen=True)
class ArrayType:
    """Slice type when length is None, array type otherwise."""
    elt: "Expr"
    length: Optional["Expr"] = None


@dataclass(frozen=True)
class MapType:
    key: "Expr"
    value: "Expr"


CHAN_BOTH = "both"
CHAN_SEND = "send"
CHAN_RECV = "recv"


@dataclass(frozen=True)
class ChanType:
    value: "Expr"
    dir: str = CHAN_BOTH


@dataclass(frozen=True)
class Ellipsis:
    """Trailing variadic parameter type (...T)."""
    elt: "Expr"


@dataclass(frozen=True)
class Field:
    """
    A struct field, interface element, or parameter.

    An empty names tuple means the field is embedded (structs, interfaces)
    or anonymous (parameters and results).
    """
    names: Tuple[str, ...]
    type: "Expr"
    tag: Optional[str] = None


@dataclass(frozen=True)
class FieldList:
    fields: Tuple[Field, ...] = ()

    def __len__(self) -> int:
        return len(self.fields)

    def __iter__(self):
        return iter(self.fields)


@dataclass(frozen=True)
class FuncType:
    params: FieldList = FieldList()
    results: FieldList = FieldList()


@dataclass(frozen=True)
class StructType:
    fields: FieldList = FieldList()


@dataclass(frozen=True)
class InterfaceType:
    methods: FieldList = FieldList()


@dataclass(frozen=True)
class IndexExpr:
    """Generic instantiation, e.g. List[int]."""
    x: "Expr"
    indices: Tuple["Expr", ...]


@dataclass(frozen=True)
class RawExpr:
    """Source text of an expression or type shape gelato does not model."""
    text: str


Expr = Union[
    Ident, BasicLit, SelectorExpr, StarExpr, UnaryExpr, BinaryExpr, ParenExpr,
    CallExpr, CompositeLit, KeyValueExpr, ArrayType, MapType, ChanType,
    Ellipsis, FuncType, StructType, InterfaceType, IndexExpr, RawExpr,
]


# ============================================================================
# STATEMENTS
# ============================================================================

@dataclass(frozen=True)
class ReturnStmt:
    results: Tuple[Expr, ...] = ()


@dataclass(frozen=True)
class ExprStmt:
    x: Expr


@dataclass(frozen=True)
class AssignStmt:
    lhs: Tuple[Expr, ...]
    tok: str  # ":=" or "="
    rhs: Tuple[Expr, ...]


@dataclass(frozen=True)
class SendStmt:
    chan: Expr
    value: Expr


@dataclass(frozen=True)
class Block:
    stmts: Tuple["Stmt", ...] = ()


@dataclass(frozen=True)
class IfStmt:
    cond: Expr
    body: Block
    init: Optional["Stmt"] = None
    orelse: Optional[Union[Block, "IfStmt"]] = None


@dataclass(frozen=True)
class RangeStmt:
    x: Expr
    body: Block
    key: Optional[Expr] = None
    value: Optional[Expr] = None


@dataclass(frozen=True)
class NameRef:
    """Location of an identifier inside a SourceBlock (character offsets into its text)."""
    start: int
    end: int
    name: str


@dataclass(frozen=True)
class LocalName:
    """A name declared inside a function body, in scope over the character offsets [scope, end)."""
    name: str
    scope: int
    end: int


@dataclass(frozen=True)
class SourceBlock:
    """
    A function body kept as source text, braces included.

    call_roots lists every identifier that is the root of a selector used as a
    call target (pkg in pkg.Func(...)), in source order. selector_refs holds the
    other selector roots and qualified type packages (pkg in pkg.T{}). locals
    lists the variables, constants and literal parameters declared in the body.
    """
    text: str
    call_roots: Tuple[NameRef, ...] = ()
    selector_refs: Tuple[NameRef, ...] = ()
    locals: Tuple[LocalName, ...] = ()


Stmt = Union[ReturnStmt, ExprStmt, AssignStmt, SendStmt, Block, IfStmt, RangeStmt]
Body = Union[Block, SourceBlock]


# ============================================================================
# DECLARATIONS
# ============================================================================

@dataclass(frozen=True)
class ImportSpec:
    path: str
    name: Optional[str] = None


@dataclass(frozen=True)
class TypeSpec:
    name: str
    type: Expr
    alias: bool = False
    type_params: Optional[str] = None  # verbatim, brackets included
    doc: Optional[str] = None
    pos: int = field(default=0, compare=False)


@dataclass(frozen=True)
class GenDecl:
    tok: str  # "import" or "type"
    specs: Tuple[Union[ImportSpec, TypeSpec], ...] = ()


@dataclass(frozen=True)
class FuncDecl:
    name: str
    type: FuncType
    recv: Optional[FieldList] = None
    type_params: Optional[str] = None
    body: Optional[Body] = None
    doc: Optional[str] = None
    pos: int = field(default=0, compare=False)


@dataclass(frozen=True)
class SourceDecl:
    """A const or var declaration kept verbatim; refs are the package roots it selects from."""
    tok: str
    text: str
    pos: int = field(default=0, compare=False)
    refs: Tuple[str, ...] = field(default=(), compare=False)


Decl = Union[GenDecl, FuncDecl, SourceDecl]


@dataclass(frozen=True)
class File:
    package: str
    decls: Tuple[Decl, ...] = ()

    @property
    def imports(self) -> Tuple[ImportSpec, ...]:
        specs = []
        for decl in self.decls:
            if isinstance(decl, GenDecl) and decl.tok == "import":
                specs.extend(decl.specs)
        return tuple(specs)


@dataclass(frozen=True)
class Package:
    name: str
    files: Dict[str, File] = field(default_factory=dict, hash=False)
