"""
Declarations of an expectation-based mock for one interface.

For interface I of package p with method M:

    type IMocker struct { t *testing.T; exps *IExpectations }
    func MockI(t *testing.T) *IMocker
    func (m *IMocker) Expect() *IExpectations
    func (m *IMocker) Assert()
    func (m *IMocker) Impl() p.I

    type IExpectations struct { mExpectations []*MExpectation }
    func (e *IExpectations) M() *MExpectation

    type MExpectation struct { inputs *mInputs; outputs *mOutputs; callback func(...); fired bool }
    func (e *MExpectation) WithArgs(...) *MExpectation
    func (e *MExpectation) Return(...) *MExpectation
    func (e *MExpectation) Call(callback func(...)) *MExpectation

    type IImpl struct { t *testing.T; exps *IExpectations }
    func (i *IImpl) M(...) ...

Every expectation fires at most once; calls are matched against
expectations in registration order.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Set

from gelato.compiler.naming import convert_to_unexported, field_name, qualify_fields, unique_name
from gelato.compiler.values import NIL, zero_value
from gelato.goast import nodes as go
from gelato.logging_config import logger

T_FIELD = "t"
EXPS_FIELD = "exps"

# identifiers the generated method bodies use besides the parameters
RESERVED_LOCALS = {"e", "i", "m", "inputs", "callback", "exp", "reflect"}


def _ident(name: str) -> go.Ident:
    return go.Ident(name)


def _sel(x, sel: str) -> go.SelectorExpr:
    if isinstance(x, str):
        x = go.Ident(x)
    return go.SelectorExpr(x, sel)


def _ptr(name: str) -> go.StarExpr:
    return go.StarExpr(go.Ident(name))


def _type_decl(name: str, fields: List[go.Field]) -> go.GenDecl:
    return go.GenDecl(tok="type", specs=(go.TypeSpec(name=name, type=go.StructType(go.FieldList(tuple(fields)))),))


def _method(recv: str, recv_type: go.Expr, name: str, params: go.FieldList,
            results: go.FieldList, stmts: List[go.Stmt]) -> go.FuncDecl:
    return go.FuncDecl(
        name=name,
        recv=go.FieldList((go.Field(names=(recv,), type=recv_type),)),
        type=go.FuncType(params=params, results=results),
        body=go.Block(tuple(stmts)),
    )


def _results(*types: go.Expr) -> go.FieldList:
    return go.FieldList(tuple(go.Field(names=(), type=t) for t in types))


def _record(type_name: str, names: List[str]) -> go.UnaryExpr:
    """&typeName{a: a, b: b}"""
    return go.UnaryExpr("&", go.CompositeLit(
        go.Ident(type_name),
        tuple(go.KeyValueExpr(go.Ident(n), go.Ident(n)) for n in names),
    ))


@dataclass
class MethodNames:
    """Generated identifiers for one interface method."""
    method: str
    expectation: str
    inputs: str
    outputs: str
    slice_field: str


@dataclass
class MethodShape:
    params: go.FieldList  # qualified, one name per value
    param_names: List[str]
    param_types: List[go.Expr]  # ...T kept for variadics
    result_names: List[str]
    result_types: List[go.Expr]

    @property
    def variadic(self) -> bool:
        return bool(self.param_types) and isinstance(self.param_types[-1], go.Ellipsis)


def method_names(iface: str, method: str, taken: Set[str]) -> MethodNames:
    """
    Names for a method's expectation types.

    The expectation name is MExpectation unless another interface of the
    package already claimed it, then IMExpectation.
    """
    base = method
    if f"{method}Expectation" in taken:
        base = iface + method
    taken.add(f"{base}Expectation")
    lower = convert_to_unexported(base)
    return MethodNames(
        method=method,
        expectation=f"{base}Expectation",
        inputs=f"{lower}Inputs",
        outputs=f"{lower}Outputs",
        slice_field=f"{convert_to_unexported(method)}Expectations",
    )


def value_names(fields: go.FieldList, pkg: str) -> List[str]:
    """
    One local name per value of fields.

    Declared names are kept unless they would shadow the package or a local of
    the generated bodies; blank and anonymous values are named after their type.
    """
    reserved = RESERVED_LOCALS | {pkg}
    taken = set(reserved)
    names = []
    for f in fields:
        for declared in f.names or ("",):
            base = declared if declared not in reserved and declared not in ("", "_") else field_name(f.type)
            names.append(unique_name(base, taken))
    return names


def method_shape(pkg: str, signature: go.FuncType) -> MethodShape:
    params = qualify_fields(signature.params, pkg)
    param_names = value_names(params, pkg)
    param_types = [f.type for f in params for _ in range(max(len(f.names), 1))]

    results = qualify_fields(signature.results, pkg)
    result_names = value_names(results, pkg)
    result_types = [f.type for f in results for _ in range(max(len(f.names), 1))]

    named_params = go.FieldList(tuple(
        go.Field(names=(n,), type=t) for n, t in zip(param_names, param_types)
    ))
    return MethodShape(named_params, param_names, param_types, result_names, result_types)


def _field_type(type_expr: go.Expr) -> go.Expr:
    """Record field type for a parameter: ...T is stored as []T."""
    if isinstance(type_expr, go.Ellipsis):
        return go.ArrayType(elt=type_expr.elt)
    return type_expr


def create_mocker_decls(pkg: str, iface_name: str, iface: go.InterfaceType,
                        kinds: Optional[Dict[str, str]] = None,
                        taken: Optional[Set[str]] = None) -> List[go.Decl]:
    taken = taken if taken is not None else set()
    mocker = f"{iface_name}Mocker"
    expectations = f"{iface_name}Expectations"
    impl = f"{iface_name}Impl"
    testing_t = go.StarExpr(_sel("testing", "T"))

    methods = []
    for f in iface.methods:
        if not f.names or not isinstance(f.type, go.FuncType):
            logger.debug(f"Skipping embedded element of {iface_name} in mock")
            continue
        names = method_names(iface_name, f.names[0], taken)
        methods.append((names, method_shape(pkg, f.type)))

    decls: List[go.Decl] = []

    # Mocker
    decls.append(_type_decl(mocker, [
        go.Field(names=(T_FIELD,), type=testing_t),
        go.Field(names=(EXPS_FIELD,), type=_ptr(expectations)),
    ]))
    decls.append(go.FuncDecl(
        name=f"Mock{iface_name}",
        type=go.FuncType(
            params=go.FieldList((go.Field(names=(T_FIELD,), type=testing_t),)),
            results=_results(_ptr(mocker)),
        ),
        body=go.Block((go.ReturnStmt((go.UnaryExpr("&", go.CompositeLit(_ident(mocker), (
            go.KeyValueExpr(_ident(T_FIELD), _ident(T_FIELD)),
            go.KeyValueExpr(_ident(EXPS_FIELD), go.UnaryExpr("&", go.CompositeLit(_ident(expectations)))),
        ))),)),)),
    ))
    decls.append(_method("m", _ptr(mocker), "Expect", go.FieldList(), _results(_ptr(expectations)), [
        go.ReturnStmt((_sel("m", EXPS_FIELD),)),
    ]))
    decls.append(_assert_method(mocker, methods))
    decls.append(_method("m", _ptr(mocker), "Impl", go.FieldList(), _results(_sel(pkg, iface_name)), [
        go.ReturnStmt((go.UnaryExpr("&", go.CompositeLit(_ident(impl), (
            go.KeyValueExpr(_ident(T_FIELD), _sel("m", T_FIELD)),
            go.KeyValueExpr(_ident(EXPS_FIELD), _sel("m", EXPS_FIELD)),
        ))),)),
    ]))

    # Expectations registry
    decls.append(_type_decl(expectations, [
        go.Field(names=(names.slice_field,), type=go.ArrayType(elt=_ptr(names.expectation)))
        for names, _ in methods
    ]))
    for names, _ in methods:
        decls.append(_method("e", _ptr(expectations), names.method, go.FieldList(),
                             _results(_ptr(names.expectation)), [
            go.AssignStmt((_ident("exp"),), ":=", (go.CallExpr(_ident("new"), (_ident(names.expectation),)),)),
            go.AssignStmt(
                (_sel("e", names.slice_field),), "=",
                (go.CallExpr(_ident("append"), (_sel("e", names.slice_field), _ident("exp"))),),
            ),
            go.ReturnStmt((_ident("exp"),)),
        ]))

    # Per method expectation types
    for names, shape in methods:
        decls.extend(_expectation_decls(names, shape))

    # Implementation
    decls.append(_type_decl(impl, [
        go.Field(names=(T_FIELD,), type=testing_t),
        go.Field(names=(EXPS_FIELD,), type=_ptr(expectations)),
    ]))
    for names, shape in methods:
        decls.append(_impl_method(impl, names, shape, kinds, pkg))

    return decls


def _assert_method(mocker: str, methods) -> go.FuncDecl:
    stmts: List[go.Stmt] = [
        go.AssignStmt((_ident("buf"),), ":=", (go.CallExpr(_ident("new"), (_sel("bytes", "Buffer"),)),)),
    ]
    for names, _ in methods:
        message = go.BasicLit("STRING", f'"\\nExpected {names.method} method to be called with %+v"')
        stmts.append(go.RangeStmt(
            key=_ident("_"),
            value=_ident("e"),
            x=_sel(_sel("m", EXPS_FIELD), names.slice_field),
            body=go.Block((go.IfStmt(
                cond=go.UnaryExpr("!", _sel("e", "fired")),
                body=go.Block((go.ExprStmt(go.CallExpr(
                    _sel("fmt", "Fprintf"), (_ident("buf"), message, _sel("e", "inputs")),
                )),)),
            ),)),
        ))
    stmts.append(go.IfStmt(
        cond=go.BinaryExpr(go.CallExpr(_sel("buf", "Len")), ">", go.BasicLit("INT", "0")),
        body=go.Block((go.ExprStmt(go.CallExpr(
            _sel(_sel("m", T_FIELD), "Fatal"), (go.CallExpr(_sel("buf", "String")),),
        )),)),
    ))
    return _method("m", _ptr(mocker), "Assert", go.FieldList(), go.FieldList(), stmts)


def _expectation_decls(names: MethodNames, shape: MethodShape) -> List[go.Decl]:
    callback_type = go.FuncType(params=_results(*shape.param_types), results=_results(*shape.result_types))
    exp_ptr = _ptr(names.expectation)
    result_fields = go.FieldList(tuple(
        go.Field(names=(n,), type=t) for n, t in zip(shape.result_names, shape.result_types)
    ))

    return [
        _type_decl(names.expectation, [
            go.Field(names=("inputs",), type=_ptr(names.inputs)),
            go.Field(names=("outputs",), type=_ptr(names.outputs)),
            go.Field(names=("callback",), type=callback_type),
            go.Field(names=("fired",), type=_ident("bool")),
        ]),
        _type_decl(names.inputs, [
            go.Field(names=(n,), type=_field_type(t)) for n, t in zip(shape.param_names, shape.param_types)
        ]),
        _type_decl(names.outputs, [
            go.Field(names=(n,), type=t) for n, t in zip(shape.result_names, shape.result_types)
        ]),
        _method("e", exp_ptr, "WithArgs", shape.params, _results(exp_ptr), [
            go.AssignStmt((_sel("e", "inputs"),), "=", (_record(names.inputs, shape.param_names),)),
            go.ReturnStmt((_ident("e"),)),
        ]),
        _method("e", exp_ptr, "Return", result_fields, _results(exp_ptr), [
            go.AssignStmt((_sel("e", "outputs"),), "=", (_record(names.outputs, shape.result_names),)),
            go.ReturnStmt((_ident("e"),)),
        ]),
        _method("e", exp_ptr, "Call",
                go.FieldList((go.Field(names=("callback",), type=callback_type),)), _results(exp_ptr), [
            go.AssignStmt((_sel("e", "callback"),), "=", (_ident("callback"),)),
            go.ReturnStmt((_ident("e"),)),
        ]),
    ]


def _impl_method(impl: str, names: MethodNames, shape: MethodShape,
                 kinds: Optional[Dict[str, str]], pkg: str) -> go.FuncDecl:
    has_results = bool(shape.result_types)
    zeros = tuple(zero_value(t, kinds, pkg) for t in shape.result_types)
    callback = go.CallExpr(
        _sel("e", "callback"),
        tuple(_ident(n) for n in shape.param_names),
        ellipsis=shape.variadic,
    )

    matched: List[go.Stmt] = [go.AssignStmt((_sel("e", "fired"),), "=", (_ident("true"),))]
    if has_results:
        outputs = tuple(_sel(_sel("e", "outputs"), n) for n in shape.result_names)
        matched.append(go.IfStmt(
            cond=go.BinaryExpr(_sel("e", "callback"), "!=", NIL),
            body=go.Block((go.ReturnStmt((callback,)),)),
        ))
        matched.append(go.IfStmt(
            cond=go.BinaryExpr(_sel("e", "outputs"), "!=", NIL),
            body=go.Block((go.ReturnStmt(outputs),)),
        ))
        matched.append(go.ReturnStmt(zeros))
    else:
        matched.append(go.IfStmt(
            cond=go.BinaryExpr(_sel("e", "callback"), "!=", NIL),
            body=go.Block((go.ExprStmt(callback),)),
        ))
        matched.append(go.ReturnStmt())

    matches = go.BinaryExpr(
        go.UnaryExpr("!", _sel("e", "fired")),
        "&&",
        go.ParenExpr(go.BinaryExpr(
            go.BinaryExpr(_sel("e", "inputs"), "==", NIL),
            "||",
            go.CallExpr(_sel("reflect", "DeepEqual"), (_sel("e", "inputs"), _ident("inputs"))),
        )),
    )
    message = go.BasicLit("STRING", f'"Expectation missing: {names.method} method called with %+v"')
    stmts: List[go.Stmt] = [
        go.AssignStmt((_ident("inputs"),), ":=", (_record(names.inputs, shape.param_names),)),
        go.RangeStmt(
            key=_ident("_"),
            value=_ident("e"),
            x=_sel(_sel("i", EXPS_FIELD), names.slice_field),
            body=go.Block((go.IfStmt(cond=matches, body=go.Block(tuple(matched))),)),
        ),
        go.ExprStmt(go.CallExpr(_sel(_sel("i", T_FIELD), "Fatalf"), (message, _ident("inputs")))),
    ]
    if has_results:
        stmts.append(go.ReturnStmt(zeros))

    return _method("i", _ptr(impl), names.method, shape.params, _results(*shape.result_types), stmts)
