"""
Declarations of a fluent builder for one struct type.

For struct T of package p:

    type TBuilder struct { v p.T }
    func BuildT() TBuilder
    func (b TBuilder) WithF(f F) TBuilder    // one per exported field
    func (b TBuilder) Value() p.T
    func (b TBuilder) Pointer() *p.T
    func T() p.T                             // builder populated with example values
"""

from typing import Dict, List, Optional, Tuple

from gelato.compiler.naming import (
    convert_to_unexported,
    infer_name,
    is_exported,
    qualify,
    safe_identifier,
    unique_name,
)
from gelato.compiler.values import FACTORY_PACKAGE, ValueSynthesizer
from gelato.goast import nodes as go
from gelato.goast import walk
from gelato.logging_config import logger

RECEIVER = "b"
VALUE_FIELD = "v"


def builder_name(type_name: str) -> str:
    return type_name + "Builder"


def build_func_name(type_name: str) -> str:
    return "Build" + type_name


def _refers_unexported(type_expr: go.Expr, pkg: str) -> bool:
    """True if a qualified type mentions an unexported name of pkg, which other packages cannot use."""
    for node in walk(type_expr):
        if (
            isinstance(node, go.SelectorExpr)
            and node.x == go.Ident(pkg)
            and not is_exported(node.sel)
        ):
            return True
    return False


def builder_fields(pkg: str, struct: go.StructType) -> List[Tuple[str, go.Expr]]:
    """(field name, qualified type) for every exported field, embedded ones included."""
    fields = []
    for f in struct.fields:
        names = f.names or (infer_name(f.type),)
        for name in names:
            if not is_exported(name):
                continue
            type_expr = qualify(f.type, pkg)
            if _refers_unexported(type_expr, pkg):
                logger.debug(f"Field {name} has an unexported type, no builder method")
                continue
            fields.append((name, type_expr))
    return fields


def create_builder_decls(pkg: str, type_name: str, struct: go.StructType,
                         kinds: Optional[Dict[str, str]] = None) -> List[go.Decl]:
    target = go.SelectorExpr(go.Ident(pkg), type_name)
    builder = go.Ident(builder_name(type_name))
    fields = builder_fields(pkg, struct)

    decls: List[go.Decl] = [
        go.GenDecl(tok="type", specs=(go.TypeSpec(
            name=builder.name,
            type=go.StructType(go.FieldList((go.Field(names=(VALUE_FIELD,), type=target),))),
        ),)),
        go.FuncDecl(
            name=build_func_name(type_name),
            type=go.FuncType(results=go.FieldList((go.Field(names=(), type=builder),))),
            body=go.Block((go.ReturnStmt((go.CompositeLit(builder, (
                go.KeyValueExpr(go.Ident(VALUE_FIELD), go.CompositeLit(target)),
            )),)),)),
        ),
    ]

    for name, type_expr in fields:
        decls.append(_with_method(builder, name, type_expr))

    value = go.SelectorExpr(go.Ident(RECEIVER), VALUE_FIELD)
    decls.append(_builder_method(builder, "Value", target, value))
    decls.append(_builder_method(builder, "Pointer", go.StarExpr(target), go.UnaryExpr("&", value)))
    decls.append(_example_func(pkg, type_name, target, fields, kinds))
    return decls


def _receiver(builder: go.Ident) -> go.FieldList:
    return go.FieldList((go.Field(names=(RECEIVER,), type=builder),))


def _with_method(builder: go.Ident, name: str, type_expr: go.Expr) -> go.FuncDecl:
    param = unique_name(safe_identifier(convert_to_unexported(name)), {RECEIVER})
    return go.FuncDecl(
        name=f"With{name}",
        recv=_receiver(builder),
        type=go.FuncType(
            params=go.FieldList((go.Field(names=(param,), type=type_expr),)),
            results=go.FieldList((go.Field(names=(), type=builder),)),
        ),
        body=go.Block((
            go.AssignStmt(
                (go.SelectorExpr(go.SelectorExpr(go.Ident(RECEIVER), VALUE_FIELD), name),),
                "=",
                (go.Ident(param),),
            ),
            go.ReturnStmt((go.Ident(RECEIVER),)),
        )),
    )


def _builder_method(builder: go.Ident, name: str, result: go.Expr, value: go.Expr) -> go.FuncDecl:
    return go.FuncDecl(
        name=name,
        recv=_receiver(builder),
        type=go.FuncType(results=go.FieldList((go.Field(names=(), type=result),))),
        body=go.Block((go.ReturnStmt((value,)),)),
    )


def _example_func(pkg: str, type_name: str, target: go.Expr, fields: List[Tuple[str, go.Expr]],
                  kinds: Optional[Dict[str, str]]) -> go.FuncDecl:
    synthesizer = ValueSynthesizer(kinds=kinds, package=pkg, taken={pkg, FACTORY_PACKAGE})
    stmts: List[go.Stmt] = []
    chain: go.Expr = go.CallExpr(go.Ident(build_func_name(type_name)))
    for name, type_expr in fields:
        prep, value = synthesizer.synthesize(convert_to_unexported(name), type_expr)
        stmts.extend(prep)
        chain = go.CallExpr(go.SelectorExpr(chain, f"With{name}"), (value,))
    stmts.append(go.ReturnStmt((go.CallExpr(go.SelectorExpr(chain, "Value")),)))

    return go.FuncDecl(
        name=type_name,
        type=go.FuncType(results=go.FieldList((go.Field(names=(), type=target),))),
        body=go.Block(tuple(stmts)),
    )
