"""
Unit tests for the identifier helpers.
"""

import pytest

from gelato.compiler.naming import (
    convert_to_unexported,
    field_name,
    infer_name,
    is_exported,
    package_import,
    qualify,
    safe_identifier,
    unique_name,
    unique_names,
)
from gelato.exceptions import SynthesisError
from gelato.goast import nodes as go

pytestmark = pytest.mark.fast


class TestConvertToUnexported:

    @pytest.mark.parametrize("name, expected", [
        ("Request", "request"),
        ("ID", "id"),
        ("HTTPRequest", "httpRequest"),
        ("URLs", "urLs"),
        ("X", "x"),
        ("Int64", "int64"),
        ("A1", "a1"),
        ("already", "already"),
    ])
    def test_conversions(self, name, expected):
        assert convert_to_unexported(name) == expected

    @pytest.mark.parametrize("name", ["_Hidden", "_X", "_Id"])
    def test_unconvertible_name_raises(self, name):
        with pytest.raises(SynthesisError):
            convert_to_unexported(name)


class TestInferName:

    def test_pointer_to_qualified(self):
        expr = go.StarExpr(go.SelectorExpr(go.Ident("pkg"), "Config"))
        assert infer_name(expr) == "Config"

    def test_collections(self):
        assert infer_name(go.ArrayType(elt=go.Ident("Item"))) == "Item"
        assert infer_name(go.MapType(go.Ident("string"), go.Ident("Order"))) == "Order"
        assert infer_name(go.ChanType(go.Ident("Event"))) == "Event"
        assert infer_name(go.Ellipsis(go.Ident("Option"))) == "Option"

    def test_generic_instance(self):
        assert infer_name(go.IndexExpr(go.Ident("List"), (go.Ident("int"),))) == "List"

    def test_func_type_has_no_name(self):
        with pytest.raises(SynthesisError):
            infer_name(go.FuncType())


def test_safe_identifier():
    assert safe_identifier("error") == "err"
    assert safe_identifier("type") == "typeVal"
    assert safe_identifier("string") == "stringVal"
    assert safe_identifier("len") == "lenVal"
    assert safe_identifier("_") == "v"
    assert safe_identifier("") == "v"
    assert safe_identifier("user") == "user"


def test_field_name():
    assert field_name(go.Ident("error")) == "err"
    assert field_name(go.StarExpr(go.SelectorExpr(go.Ident("http"), "Request"))) == "request"
    assert field_name(go.Ident("int")) == "intVal"
    assert field_name(go.FuncType()) == "v"


def test_is_exported():
    assert is_exported("Name")
    assert not is_exported("name")
    assert not is_exported("_Name")
    assert not is_exported("")


class TestUniqueNames:

    def test_unique_name_records_result(self):
        taken = {"err"}
        assert unique_name("err", taken) == "err2"
        assert unique_name("err", taken) == "err3"
        assert unique_name("ctx", taken) == "ctx"
        assert {"err", "err2", "err3", "ctx"} == taken

    def test_declared_names_are_kept(self):
        fields = go.FieldList((
            go.Field(names=("a", "b"), type=go.Ident("int")),
            go.Field(names=("err",), type=go.Ident("error")),
        ))
        assert unique_names(fields) == ["a", "b", "err"]

    def test_anonymous_and_blank_get_type_names(self):
        fields = go.FieldList((
            go.Field(names=(), type=go.SelectorExpr(go.Ident("context"), "Context")),
            go.Field(names=(), type=go.Ident("string")),
            go.Field(names=(), type=go.Ident("string")),
            go.Field(names=("_",), type=go.Ident("error")),
        ))
        assert unique_names(fields) == ["context", "stringVal", "stringVal2", "err"]

    def test_anonymous_name_avoids_declared_and_taken(self):
        fields = go.FieldList((
            go.Field(names=(), type=go.Ident("Item")),
            go.Field(names=("item",), type=go.Ident("int")),
        ))
        assert unique_names(fields, taken={"r"}) == ["item2", "item"]


class TestQualify:

    def test_local_names_are_qualified(self):
        expr = go.MapType(go.Ident("string"), go.StarExpr(go.Ident("Item")))
        assert qualify(expr, "store") == go.MapType(
            go.Ident("string"), go.StarExpr(go.SelectorExpr(go.Ident("store"), "Item"))
        )

    def test_qualified_and_predeclared_untouched(self):
        expr = go.FuncType(
            params=go.FieldList((go.Field(names=("ctx",), type=go.SelectorExpr(go.Ident("context"), "Context")),)),
            results=go.FieldList((go.Field(names=(), type=go.Ident("error")),)),
        )
        assert qualify(expr, "store") == expr

    def test_variadic_and_generic(self):
        assert qualify(go.Ellipsis(go.Ident("Option")), "p") == go.Ellipsis(go.SelectorExpr(go.Ident("p"), "Option"))
        generic = go.IndexExpr(go.Ident("Set"), (go.Ident("Key"), go.Ident("int")))
        assert qualify(generic, "p") == go.IndexExpr(
            go.SelectorExpr(go.Ident("p"), "Set"),
            (go.SelectorExpr(go.Ident("p"), "Key"), go.Ident("int")),
        )

    def test_array_length_constants(self):
        named = go.ArrayType(elt=go.Ident("Item"), length=go.Ident("N"))
        assert qualify(named, "p") == go.ArrayType(
            elt=go.SelectorExpr(go.Ident("p"), "Item"),
            length=go.SelectorExpr(go.Ident("p"), "N"),
        )
        computed = go.ArrayType(elt=go.Ident("int"), length=go.BinaryExpr(go.Ident("N"), "*", go.BasicLit("INT", "2")))
        assert qualify(computed, "p").length == go.BinaryExpr(
            go.SelectorExpr(go.Ident("p"), "N"), "*", go.BasicLit("INT", "2")
        )
        imported = go.ArrayType(elt=go.Ident("byte"), length=go.SelectorExpr(go.Ident("sha256"), "Size"))
        assert qualify(imported, "p") == imported


def test_package_import():
    assert package_import("example.com/shop/internal/mapper", "mapper") == go.ImportSpec(
        path="example.com/shop/internal/mapper"
    )
    assert package_import("gopkg.in/yaml.v3", "yaml") == go.ImportSpec(path="gopkg.in/yaml.v3", name="yaml")
