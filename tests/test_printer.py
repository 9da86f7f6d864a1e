"""
Tests for rendering Go AST nodes to source.
"""

import pytest

from gelato.goast import nodes as go
from gelato.goast import print_expr, print_file, print_stmt, used_imports
from gelato.parser import parse_source

pytestmark = pytest.mark.fast


class TestExpressions:

    def test_channels(self):
        assert print_expr(go.ChanType(go.Ident("int"), dir=go.CHAN_SEND)) == "chan<- int"
        assert print_expr(go.ChanType(go.Ident("int"), dir=go.CHAN_RECV)) == "<-chan int"
        nested = go.ChanType(go.ChanType(go.Ident("int"), dir=go.CHAN_RECV))
        assert print_expr(nested) == "chan (<-chan int)"

    def test_func_type_results(self):
        single = go.FuncType(results=go.FieldList((go.Field(names=(), type=go.Ident("error")),)))
        assert print_expr(single) == "func() error"
        named = go.FuncType(
            params=go.FieldList((go.Field(names=("a", "b"), type=go.Ident("int")),)),
            results=go.FieldList((go.Field(names=("sum",), type=go.Ident("int")),)),
        )
        assert print_expr(named) == "func(a, b int) (sum int)"

    def test_variadic_call(self):
        call = go.CallExpr(go.SelectorExpr(go.Ident("r"), "Do"), (go.Ident("args"),), ellipsis=True)
        assert print_expr(call) == "r.Do(args...)"

    def test_struct_type_indentation(self):
        struct = go.StructType(go.FieldList((
            go.Field(names=("Name",), type=go.Ident("string"), tag='`json:"name"`'),
            go.Field(names=(), type=go.StarExpr(go.Ident("Base"))),
        )))
        assert print_expr(struct, 1) == 'struct {\n\t\tName string `json:"name"`\n\t\t*Base\n\t}'

    def test_empty_struct_and_interface(self):
        assert print_expr(go.StructType()) == "struct{}"
        assert print_expr(go.InterfaceType()) == "interface{}"


class TestStatements:

    def test_if_else(self):
        stmt = go.IfStmt(
            init=go.AssignStmt((go.Ident("err"),), ":=", (go.CallExpr(go.Ident("run")),)),
            cond=go.BinaryExpr(go.Ident("err"), "!=", go.Ident("nil")),
            body=go.Block((go.ReturnStmt((go.Ident("err"),)),)),
            orelse=go.Block((go.ReturnStmt((go.Ident("nil"),)),)),
        )
        assert print_stmt(stmt) == (
            "if err := run(); err != nil {\n\treturn err\n} else {\n\treturn nil\n}"
        )

    def test_range(self):
        stmt = go.RangeStmt(
            key=go.Ident("_"),
            value=go.Ident("e"),
            x=go.Ident("items"),
            body=go.Block((go.ExprStmt(go.CallExpr(go.Ident("use"), (go.Ident("e"),))),)),
        )
        assert print_stmt(stmt) == "for _, e := range items {\n\tuse(e)\n}"


class TestFiles:

    def test_single_and_grouped_imports(self):
        single = go.File("p", (go.GenDecl("import", (go.ImportSpec("fmt"),)),))
        assert print_file(single) == 'package p\n\nimport "fmt"\n'
        grouped = go.File("p", (go.GenDecl("import", (go.ImportSpec("fmt"), go.ImportSpec("x/y", "z"))),))
        assert print_file(grouped) == 'package p\n\nimport (\n\t"fmt"\n\tz "x/y"\n)\n'

    def test_empty_import_decl_is_skipped(self):
        assert print_file(go.File("p", (go.GenDecl("import", ()),))) == "package p\n"

    def test_method_declaration(self):
        decl = go.FuncDecl(
            name="Count",
            recv=go.FieldList((go.Field(names=("c",), type=go.StarExpr(go.Ident("counter"))),)),
            type=go.FuncType(results=go.FieldList((go.Field(names=(), type=go.Ident("int")),))),
            body=go.Block((go.ReturnStmt((go.SelectorExpr(go.Ident("c"), "n"),)),)),
        )
        assert print_file(go.File("p", (decl,))) == (
            "package p\n\nfunc (c *counter) Count() int {\n\treturn c.n\n}\n"
        )

    def test_printed_source_reparses_to_same_declarations(self):
        source = (
            "package store\n\n"
            'import "context"\n\n'
            "// Store persists items.\n"
            "type Store interface {\n"
            "\tGet(ctx context.Context, id string) (*Item, error)\n"
            "\tWatch() <-chan Event\n"
            "}\n\n"
            "type Item struct {\n"
            "\tID   string\n"
            "\tTags []string\n"
            "}\n"
        )
        file = parse_source(source)
        assert parse_source(print_file(file)) == file


def test_used_imports_keeps_referenced_and_versioned():
    specs = (
        go.ImportSpec("fmt"),
        go.ImportSpec("strings"),
        go.ImportSpec("gopkg.in/yaml.v3"),
        go.ImportSpec("example.com/api/v2"),
        go.ImportSpec("example.com/shop/internal/store", "db"),
    )
    decls = (go.FuncDecl(
        name="F",
        type=go.FuncType(params=go.FieldList((
            go.Field(names=("s",), type=go.SelectorExpr(go.Ident("db"), "Store")),
        ))),
        body=go.Block((go.ExprStmt(go.CallExpr(go.SelectorExpr(go.Ident("fmt"), "Println"))),)),
    ),)
    assert used_imports(specs, decls) == (
        go.ImportSpec("fmt"),
        go.ImportSpec("gopkg.in/yaml.v3"),
        go.ImportSpec("example.com/api/v2"),
        go.ImportSpec("example.com/shop/internal/store", "db"),
    )
