"""
Tests for the decorator: layer proxies and the rewired entry package.
"""

import pytest

from gelato.compiler import decorate, decorator
from gelato.compiler.decorator import (
    PackageDecorator,
    decorated_import_path,
    get_decorated_pkg_name,
    get_original_pkg_name,
    is_decoratable_pkg,
)
from gelato.compiler.decorator.main_decorator import package_refs, rewrite_call_roots
from gelato.goast import nodes as go
from gelato.parser import parse_source

pytestmark = pytest.mark.fast

CONTROLLER_GO = """package controller

type Controller interface {
	Run()
}

type controller struct{}

func New() Controller {
	return &controller{}
}

func (c *controller) Run() {}
"""


class TestHelpers:

    @pytest.mark.parametrize("import_path, expected", [
        ("example.com/shop/internal/controller/lookup", True),
        ("example.com/shop/internal/handler", True),
        ("example.com/shop/gateway/payments", True),
        ("example.com/shop/internal/repository", True),
        ("example.com/shop/internal/mapper", False),
        ("example.com/shop/internal/controllers", False),
        ("handler", False),
    ])
    def test_is_decoratable_pkg(self, import_path, expected):
        assert is_decoratable_pkg(import_path) is expected

    def test_package_aliases(self):
        assert get_original_pkg_name("lookup") == "_lookup"
        assert get_decorated_pkg_name("lookup") == "_lookup"

    def test_decorated_import_path(self):
        assert decorated_import_path("example.com/shop", "example.com/shop/internal/handler") == (
            "example.com/shop/.build/internal/handler"
        )
        assert decorated_import_path("example.com/shop", "github.com/other/handler") is None

    def test_rewrite_call_roots(self):
        source = "package main\n\nfunc main() {\n\tx := lookup.New()\n\ty := lookup.Open(x)\n\tfmt.Println(y)\n}\n"
        body = parse_source(source).decls[0].body
        rewritten = rewrite_call_roots(body, {"lookup": "_lookup"})
        assert rewritten.text == "{\n\tx := _lookup.New()\n\ty := _lookup.Open(x)\n\tfmt.Println(y)\n}"
        for ref in rewritten.call_roots:
            assert rewritten.text[ref.start:ref.end] == ref.name

    def test_shadowed_call_roots_are_kept(self):
        source = (
            "package main\n\n"
            "func main() {\n"
            "\tcontroller := controller.New()\n"
            "\tcontroller.Run()\n"
            "\tgo func(lookup string) {\n\t\tlookup.Trim()\n\t}(\"x\")\n"
            "\tlookup.Open()\n"
            "}\n"
        )
        body = parse_source(source).decls[0].body
        rewritten = rewrite_call_roots(body, {"controller": "_controller", "lookup": "_lookup"})
        assert rewritten.text == (
            "{\n"
            "\tcontroller := _controller.New()\n"
            "\tcontroller.Run()\n"
            "\tgo func(lookup string) {\n\t\tlookup.Trim()\n\t}(\"x\")\n"
            "\t_lookup.Open()\n"
            "}"
        )
        assert package_refs(rewritten) == {"_controller", "_lookup"}

    def test_parameters_shadow_call_roots(self):
        source = "package main\n\nfunc run(lookup Finder) {\n\tlookup.Find()\n}\n"
        body = parse_source(source).decls[0].body
        assert rewrite_call_roots(body, {"lookup": "_lookup"}, params={"lookup"}) == body


@pytest.mark.integration
class TestDecorate:

    def test_layer_package_proxy(self, go_module):
        decorate(go_module)
        output = (go_module / ".build/internal/controller/lookup/lookup.go").read_text()
        assert output == (
            "package lookup\n"
            "\n"
            'import _lookup "example.com/shop/internal/controller/lookup"\n'
            "\n"
            "type controller struct {\n"
            "\timpl _lookup.Controller\n"
            "}\n"
            "\n"
            "func New(cfg _lookup.Config) (_lookup.Controller, error) {\n"
            "\timpl, err := _lookup.New(cfg)\n"
            "\tif err != nil {\n"
            "\t\treturn nil, err\n"
            "\t}\n"
            "\treturn &controller{impl: impl}, nil\n"
            "}\n"
            "\n"
            "func (c *controller) Find(key string) (string, error) {\n"
            "\treturn c.impl.Find(key)\n"
            "}\n"
            "\n"
            "func (c *controller) Count() int {\n"
            "\treturn c.impl.Count()\n"
            "}\n"
            "\n"
            "func (c *controller) Reset() {\n"
            "\tc.impl.Reset()\n"
            "}\n"
        )

    def test_main_package_is_rewired(self, go_module):
        decorate(go_module)
        output = (go_module / ".build/main.go").read_text()
        assert '_lookup "example.com/shop/.build/internal/controller/lookup"' in output
        assert '"example.com/shop/internal/controller/lookup"' in output
        assert 'c, err := _lookup.New(lookup.Config{Name: "shop"})' in output
        assert "fmt.Println(c.Count())" in output

    def test_plain_packages_are_not_decorated(self, go_module):
        decorate(go_module)
        assert not (go_module / ".build/internal/mapper").exists()
        assert not (go_module / ".build/vendor").exists()

    def test_sources_are_untouched(self, go_module):
        before = {p: p.read_bytes() for p in go_module.rglob("*.go")}
        decorate(go_module)
        for path, content in before.items():
            assert path.read_bytes() == content

    def test_output_reparses(self, go_module, read_emitted):
        decorate(go_module)
        emitted = read_emitted(go_module)
        assert set(emitted) == {".build/main.go", ".build/internal/controller/lookup/lookup.go"}
        for name, text in emitted.items():
            parse_source(text, name)

    def test_decorating_twice_is_byte_identical(self, go_module, read_emitted):
        decorate(go_module)
        first = read_emitted(go_module)
        decorate(go_module)
        assert read_emitted(go_module) == first

    def test_unused_layer_import_is_dropped(self, temp_dir, write_go_tree):
        write_go_tree(temp_dir, {
            "go.mod": "module example.com/app\n",
            "main.go": (
                "package main\n\n"
                'import "example.com/app/internal/controller"\n\n'
                "func main() {\n\tcontroller.New().Run()\n}\n"
            ),
            "internal/controller/controller.go": CONTROLLER_GO,
        })
        decorate(temp_dir)
        output = (temp_dir / ".build/main.go").read_text()
        assert '_controller "example.com/app/.build/internal/controller"' in output
        assert '"example.com/app/internal/controller"' not in output
        assert "\t_controller.New().Run()\n" in output

    def test_shadowed_layer_import_keeps_original_only(self, temp_dir, write_go_tree):
        write_go_tree(temp_dir, {
            "go.mod": "module example.com/app\n",
            "main.go": (
                "package main\n\n"
                'import "example.com/app/internal/controller"\n\n'
                "var fallback controller.Controller\n\n"
                "func run(controller controller.Controller) {\n\tcontroller.Run()\n}\n"
            ),
            "internal/controller/controller.go": CONTROLLER_GO,
        })
        decorate(temp_dir)
        output = (temp_dir / ".build/main.go").read_text()
        assert 'import "example.com/app/internal/controller"' in output
        assert ".build/internal/controller" not in output
        assert "\tcontroller.Run()\n" in output

    def test_test_files_are_not_decorated(self, temp_dir, write_go_tree, read_emitted):
        write_go_tree(temp_dir, {
            "go.mod": "module example.com/app\n",
            "internal/controller/controller.go": CONTROLLER_GO,
            "internal/controller/mock_test.go": (
                "package controller\n\n"
                "type mockGateway struct{}\n\n"
                "func (m *mockGateway) Run() {}\n"
            ),
            "internal/controller/external_test.go": (
                "package controller_test\n\n"
                'import "example.com/app/internal/controller"\n\n'
                "func useIt() { controller.New() }\n"
            ),
        })
        decorate(temp_dir)
        assert set(read_emitted(temp_dir)) == {".build/internal/controller/controller.go"}

    def test_new_returns_compiler_with_both_consumers(self):
        compiler = decorator.new()
        assert [c.name for c in compiler.consumers] == ["mainDecorator", "packageDecorator"]


class TestPackageDecorator:

    def test_method_set_follows_embedded_interfaces(self):
        file = parse_source(
            "package repository\n\n"
            "type Reader interface {\n\tGet(id string) string\n}\n\n"
            "type Store interface {\n\tReader\n\tPut(id, v string)\n}\n"
        )
        decorator_ = PackageDecorator()
        decorator_.package(
            _info("example.com/shop/internal/repository"),
            go.Package(name="repository", files={"store.go": file}),
        )
        assert decorator_.method_set("Store") == {"Get", "Put"}

    def test_constructor_without_error_result(self, temp_dir, write_go_tree):
        write_go_tree(temp_dir, {
            "go.mod": "module example.com/svc\n",
            "handler/handler.go": (
                "package handler\n\n"
                "type Handler interface {\n\tServe(args ...string) int\n}\n\n"
                "type handler struct{}\n\n"
                "func New(opts ...string) Handler { return &handler{} }\n\n"
                "func (h handler) Serve(args ...string) int { return len(args) }\n"
            ),
        })
        decorate(temp_dir)
        output = (temp_dir / ".build/handler/handler.go").read_text()
        assert "func New(opts ...string) _handler.Handler {\n\timpl := _handler.New(opts...)\n" in output
        assert "\treturn &handler{impl: impl}\n" in output
        assert "func (h handler) Serve(args ...string) int {\n\treturn h.impl.Serve(args...)\n}" in output


def _info(import_path):
    from gelato.schemas import PackageInfo

    return PackageInfo(
        module_name="example.com/shop",
        package_name=import_path.rsplit("/", 1)[-1],
        import_path=import_path,
        base_dir=".",
        relative_dir=import_path[len("example.com/shop/"):],
    )
