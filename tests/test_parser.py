"""
Tests for the tree-sitter Go parser.
"""

import pytest

from gelato.exceptions import GoModuleError, ParserError
from gelato.goast import nodes as go
from gelato.parser import PositionTable, parse_file, parse_source, read_go_module

pytestmark = pytest.mark.fast


def type_specs(file: go.File):
    return {
        spec.name: spec
        for decl in file.decls if isinstance(decl, go.GenDecl) and decl.tok == "type"
        for spec in decl.specs
    }


def funcs(file: go.File):
    return {decl.name: decl for decl in file.decls if isinstance(decl, go.FuncDecl)}


class TestImports:

    def test_grouped_imports(self):
        file = parse_source(
            'package app\n\nimport (\n\t"fmt"\n\tstr "strings"\n\t_ "embed"\n)\n'
        )
        assert file.package == "app"
        assert file.imports == (
            go.ImportSpec(path="fmt"),
            go.ImportSpec(path="strings", name="str"),
            go.ImportSpec(path="embed", name="_"),
        )

    def test_single_import(self):
        file = parse_source('package app\n\nimport "errors"\n')
        assert file.imports == (go.ImportSpec(path="errors"),)


class TestTypes:

    def test_struct_fields(self):
        file = parse_source(
            "package app\n\n"
            "type S struct {\n"
            "\t*Base\n"
            "\tio.Reader\n"
            "\tA, B int `json:\"a\"`\n"
            "\tnext *S\n"
            "}\n"
        )
        spec = type_specs(file)["S"]
        assert spec.type == go.StructType(go.FieldList((
            go.Field(names=(), type=go.StarExpr(go.Ident("Base"))),
            go.Field(names=(), type=go.SelectorExpr(go.Ident("io"), "Reader")),
            go.Field(names=("A", "B"), type=go.Ident("int"), tag='`json:"a"`'),
            go.Field(names=("next",), type=go.StarExpr(go.Ident("S"))),
        )))

    def test_interface_methods_and_embeds(self):
        file = parse_source(
            "package app\n\n"
            "type Store interface {\n"
            "\tio.Closer\n"
            "\tGet(id string) (*Item, error)\n"
            "\tAll() []Item\n"
            "}\n"
        )
        methods = type_specs(file)["Store"].type.methods.fields
        assert methods[0] == go.Field(names=(), type=go.SelectorExpr(go.Ident("io"), "Closer"))
        assert methods[1] == go.Field(names=("Get",), type=go.FuncType(
            params=go.FieldList((go.Field(names=("id",), type=go.Ident("string")),)),
            results=go.FieldList((
                go.Field(names=(), type=go.StarExpr(go.Ident("Item"))),
                go.Field(names=(), type=go.Ident("error")),
            )),
        ))
        assert methods[2].type.results == go.FieldList((
            go.Field(names=(), type=go.ArrayType(elt=go.Ident("Item"))),
        ))

    def test_type_shapes(self):
        file = parse_source(
            "package app\n\n"
            "type In <-chan int\n"
            "type Out chan<- string\n"
            "type Both chan bool\n"
            "type Grid [4]int\n"
            "type Index map[string][]*Item\n"
            "type Handler func(ctx context.Context, args ...string) error\n"
            "type Pair[K comparable, V any] struct {\n\tKey K\n\tValue V\n}\n"
            "type Ints = List[int]\n"
        )
        specs = type_specs(file)
        assert specs["In"].type == go.ChanType(go.Ident("int"), dir=go.CHAN_RECV)
        assert specs["Out"].type == go.ChanType(go.Ident("string"), dir=go.CHAN_SEND)
        assert specs["Both"].type == go.ChanType(go.Ident("bool"))
        assert specs["Grid"].type == go.ArrayType(elt=go.Ident("int"), length=go.BasicLit("INT", "4"))
        assert specs["Index"].type == go.MapType(
            go.Ident("string"), go.ArrayType(elt=go.StarExpr(go.Ident("Item")))
        )
        assert specs["Handler"].type == go.FuncType(
            params=go.FieldList((
                go.Field(names=("ctx",), type=go.SelectorExpr(go.Ident("context"), "Context")),
                go.Field(names=("args",), type=go.Ellipsis(go.Ident("string"))),
            )),
            results=go.FieldList((go.Field(names=(), type=go.Ident("error")),)),
        )
        assert specs["Pair"].type_params == "[K comparable, V any]"
        assert specs["Ints"].alias
        assert specs["Ints"].type == go.IndexExpr(go.Ident("List"), (go.Ident("int"),))

    def test_array_lengths(self):
        file = parse_source(
            "package app\n\n"
            "type Named [N]int\n"
            "type Imported [sha256.Size]byte\n"
            "type Computed [(N + 1) * 2]bool\n"
        )
        specs = type_specs(file)
        assert specs["Named"].type.length == go.Ident("N")
        assert specs["Imported"].type.length == go.SelectorExpr(go.Ident("sha256"), "Size")
        assert specs["Computed"].type.length == go.BinaryExpr(
            go.ParenExpr(go.BinaryExpr(go.Ident("N"), "+", go.BasicLit("INT", "1"))),
            "*",
            go.BasicLit("INT", "2"),
        )

    def test_grouped_type_declaration(self):
        file = parse_source("package app\n\ntype (\n\tA struct{}\n\tB interface{}\n)\n")
        decl = file.decls[0]
        assert [s.name for s in decl.specs] == ["A", "B"]


class TestDocComments:

    def test_contiguous_comments_are_docs(self):
        file = parse_source(
            "package app\n\n"
            "// Item is\n// an item.\n"
            "type Item struct{}\n\n"
            "// detached\n\n"
            "func New() *Item { return &Item{} }\n"
        )
        assert type_specs(file)["Item"].doc == "// Item is\n// an item."
        assert funcs(file)["New"].doc is None

    def test_trailing_comment_is_not_doc(self):
        file = parse_source("package app\n\nvar x = 1 // one\nfunc F() {}\n")
        assert funcs(file)["F"].doc is None


class TestFunctions:

    def test_method_receiver_and_signature(self):
        file = parse_source(
            "package app\n\n"
            "func (s *server[T]) Serve(addr string, opts ...Option) (n int, err error) {\n\treturn 0, nil\n}\n"
        )
        decl = funcs(file)["Serve"]
        assert decl.recv == go.FieldList((
            go.Field(names=("s",), type=go.StarExpr(go.IndexExpr(go.Ident("server"), (go.Ident("T"),)))),
        ))
        assert decl.type.results == go.FieldList((
            go.Field(names=("n",), type=go.Ident("int")),
            go.Field(names=("err",), type=go.Ident("error")),
        ))
        assert decl.type.params.fields[1].type == go.Ellipsis(go.Ident("Option"))

    def test_body_call_roots(self):
        source = (
            "package main\n\n"
            "func main() {\n"
            "\ts := \"héllo\"\n"
            "\tc := lookup.New(lookup.Config{})\n"
            "\tfmt.Println(s, c.Count())\n"
            "}\n"
        )
        body = funcs(parse_source(source))["main"].body
        assert isinstance(body, go.SourceBlock)
        assert [r.name for r in body.call_roots] == ["lookup", "fmt", "c"]
        for ref in body.call_roots:
            assert body.text[ref.start:ref.end] == ref.name

    def test_body_selector_refs_and_locals(self):
        source = (
            "package main\n\n"
            "func main() {\n"
            "\tvar cfg lookup.Config\n"
            "\tif n := cfg.Size; n > 0 {\n"
            "\t\tfmt.Println(n)\n"
            "\t}\n"
            "\tfor _, item := range items {\n"
            "\t\t_ = item\n"
            "\t}\n"
            "}\n"
        )
        body = funcs(parse_source(source))["main"].body
        assert sorted(r.name for r in body.selector_refs) == ["cfg", "lookup"]
        scopes = {local.name: local for local in body.locals}
        assert {"cfg", "n", "item"} <= set(scopes)
        n = scopes["n"]
        assert body.text[n.scope:n.end].startswith("; n > 0 {")
        assert body.text[:n.end].endswith("\t}")
        cfg = scopes["cfg"]
        assert cfg.end == len(body.text)

    def test_const_and_var_refs(self):
        file = parse_source("package main\n\nvar timeout = time.Second * cfg.Scale\n")
        assert file.decls[0].refs == ("cfg", "time")

    def test_const_and_var_kept_verbatim(self):
        file = parse_source("package app\n\n// Max items.\nconst Max = 10\n\nvar cache = map[string]int{}\n")
        assert file.decls[0] == go.SourceDecl(tok="const", text="// Max items.\nconst Max = 10")
        assert file.decls[1].text == "var cache = map[string]int{}"


class TestErrors:

    def test_syntax_error_has_position(self):
        with pytest.raises(ParserError) as exc:
            parse_source("package app\n\nfunc main( {\n}\n", "broken.go")
        assert exc.value.file_path == "broken.go"
        assert " at " in exc.value.message

    def test_parse_file_reads_from_disk(self, temp_dir):
        path = temp_dir / "a.go"
        path.write_text("package a\n\nfunc A() {}\n")
        parsed = parse_file(path)
        assert parsed.ast.package == "a"
        assert parsed.positions.position(path.read_bytes().index(b"func")) == "3:1"

    def test_missing_file_propagates_os_error(self, temp_dir):
        with pytest.raises(FileNotFoundError):
            parse_file(temp_dir / "missing.go")


class TestGoModule:

    def test_module_name(self, temp_dir):
        (temp_dir / "go.mod").write_text("// comment\nmodule example.com/shop // trailing\n\ngo 1.21\n")
        assert read_go_module(temp_dir) == "example.com/shop"

    def test_quoted_module_name(self, temp_dir):
        (temp_dir / "go.mod").write_text('module "example.com/quoted"\n')
        assert read_go_module(temp_dir) == "example.com/quoted"

    def test_missing_directive(self, temp_dir):
        (temp_dir / "go.mod").write_text("go 1.21\n")
        with pytest.raises(GoModuleError):
            read_go_module(temp_dir)

    def test_missing_go_mod(self, temp_dir):
        with pytest.raises(FileNotFoundError):
            read_go_module(temp_dir)


def test_position_table():
    table = PositionTable(b"ab\ncd\n\nef")
    assert table.line_col(0) == (1, 1)
    assert table.line_col(4) == (2, 2)
    assert table.position(7) == "4:1"
