"""
PackageDecorator: generates delegating proxies for layered packages.

For a layered package the decorated copy contains, per file:
- a struct with a single impl field holding the wrapped implementation
- constructors that call the original constructor and wrap its result
- one forwarding method per interface method
Everything else is dropped; the original package is imported as _<pkg>.
"""

from pathlib import Path
from typing import Dict, List, Optional, Set

from gelato.compiler.config import BUILD_DIR
from gelato.compiler.consumer import Consumer
from gelato.compiler.naming import expand_fields, is_exported, qualify_fields, unique_name, unique_names
from gelato.compiler.values import NIL
from gelato.compiler.writer import GoWriter
from gelato.goast import nodes as go
from gelato.goast import used_imports
from gelato.logging_config import logger
from gelato.schemas import FileInfo, FuncInfo, PackageInfo, TypeInfo
from .helper import get_original_pkg_name, is_decoratable_pkg

IMPL_FIELD = "impl"


def _strip_names(fields: go.FieldList) -> go.FieldList:
    """Result list with one unnamed entry per value."""
    return go.FieldList(tuple(
        go.Field(names=(), type=f.type) for f in fields for _ in range(max(len(f.names), 1))
    ))


def _result_types(fields: go.FieldList) -> List[go.Expr]:
    return [f.type for f in fields for _ in range(max(len(f.names), 1))]


def _is_variadic(fields: go.FieldList) -> bool:
    return bool(fields.fields) and isinstance(fields.fields[-1].type, go.Ellipsis)


class PackageDecorator:
    """Per-package and per-file state of the layer observer."""

    def __init__(self, writer: Optional[GoWriter] = None):
        self.writer = writer or GoWriter()
        # package scope
        self.pkg_interfaces: Dict[str, go.InterfaceType] = {}
        self.pkg_structs: List[str] = []
        # file scope
        self.alias = ""
        self.imports: List[go.ImportSpec] = []
        self.decls: List[go.Decl] = []
        self.interface: Optional[str] = None
        self.struct: Optional[str] = None

    def package(self, info: PackageInfo, pkg: go.Package) -> bool:
        if not is_decoratable_pkg(info.import_path):
            return False
        self.pkg_interfaces = {}
        self.pkg_structs = []
        for file in pkg.files.values():
            for decl in file.decls:
                if not (isinstance(decl, go.GenDecl) and decl.tok == "type"):
                    continue
                for spec in decl.specs:
                    if isinstance(spec.type, go.InterfaceType) and is_exported(spec.name):
                        self.pkg_interfaces.setdefault(spec.name, spec.type)
                    elif isinstance(spec.type, go.StructType) and not is_exported(spec.name):
                        self.pkg_structs.append(spec.name)
        return True

    def file_pre(self, info: FileInfo, file: go.File) -> bool:
        self.alias = get_original_pkg_name(info.package_name)
        self.imports = [go.ImportSpec(path=info.import_path, name=self.alias)]
        self.decls = []
        self.interface = None
        self.struct = None
        return True

    def import_spec(self, info: FileInfo, spec: go.ImportSpec) -> None:
        self.imports.append(spec)

    # ------------------------------------------------------------------
    # Current interface and struct
    # ------------------------------------------------------------------

    def current_interface(self, info: FileInfo) -> Optional[str]:
        """Latest exported interface seen, else the first one declared in the file, else in the package."""
        if self.interface:
            return self.interface
        candidates = info.exported_interfaces() or list(self.pkg_interfaces)
        return candidates[0] if candidates else None

    def current_struct(self, info: FileInfo) -> Optional[str]:
        if self.struct:
            return self.struct
        for name, kind in info.declared_types.items():
            if kind == "struct" and not is_exported(name):
                return name
        return self.pkg_structs[0] if self.pkg_structs else None

    def method_set(self, name: str, seen: Optional[Set[str]] = None) -> Set[str]:
        """Method names of a package interface, following embedded interfaces of the same package."""
        seen = seen if seen is not None else set()
        if name in seen or name not in self.pkg_interfaces:
            return set()
        seen.add(name)
        methods = set()
        for f in self.pkg_interfaces[name].methods:
            if f.names:
                methods.add(f.names[0])
            elif isinstance(f.type, go.Ident):
                methods |= self.method_set(f.type.name, seen)
        return methods

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def interface_decl(self, info: TypeInfo, spec: go.TypeSpec) -> None:
        if is_exported(spec.name):
            self.interface = spec.name
            self.pkg_interfaces.setdefault(spec.name, spec.type)

    def struct_decl(self, info: TypeInfo, spec: go.TypeSpec) -> None:
        if is_exported(spec.name):
            return
        self.struct = spec.name
        iface = self.current_interface(info)
        if iface is None:
            logger.debug(f"No exported interface for struct {spec.name} in {info.file_name}, skipping")
            return
        proxy = go.StructType(go.FieldList((
            go.Field(names=(IMPL_FIELD,), type=go.SelectorExpr(go.Ident(self.alias), iface)),
        )))
        self.decls.append(go.GenDecl(tok="type", specs=(go.TypeSpec(name=spec.name, type=proxy),)))

    def func_decl(self, info: FuncInfo, decl: go.FuncDecl, body: Optional[go.Body]) -> None:
        if not is_exported(decl.name):
            return
        iface = self.current_interface(info)
        if iface is None:
            return
        if info.is_method:
            self._method(info, decl, iface)
        else:
            self._constructor(info, decl, iface)

    def _constructor(self, info: FuncInfo, decl: go.FuncDecl, iface: str) -> None:
        results = _result_types(decl.type.results)
        iface_index = next(
            (i for i, t in enumerate(results) if isinstance(t, go.Ident) and t.name == iface), None
        )
        struct = self.current_struct(info)
        if iface_index is None or struct is None:
            return

        names = unique_names(decl.type.params)
        params = qualify_fields(expand_fields(decl.type.params, names), self.alias)
        call = go.CallExpr(
            go.SelectorExpr(go.Ident(self.alias), decl.name),
            tuple(go.Ident(n) for n in names),
            ellipsis=_is_variadic(decl.type.params),
        )
        taken = set(names)
        impl = go.Ident(unique_name(IMPL_FIELD, taken))
        lhs: List[go.Expr] = []
        err_index = None
        for i, t in enumerate(results):
            if i == iface_index:
                lhs.append(impl)
            elif err_index is None and t == go.Ident("error"):
                err_index = i
                lhs.append(go.Ident(unique_name("err", taken)))
            else:
                lhs.append(go.Ident(unique_name(f"r{i}", taken)))

        wrapped = go.UnaryExpr("&", go.CompositeLit(
            go.Ident(struct),
            (go.KeyValueExpr(go.Ident(IMPL_FIELD), impl),),
        ))
        stmts: List[go.Stmt] = [go.AssignStmt(tuple(lhs), ":=", (call,))]
        if err_index is not None:
            failed = list(lhs)
            failed[iface_index] = NIL
            stmts.append(go.IfStmt(
                cond=go.BinaryExpr(lhs[err_index], "!=", NIL),
                body=go.Block((go.ReturnStmt(tuple(failed)),)),
            ))
        returned = list(lhs)
        returned[iface_index] = wrapped
        if err_index is not None:
            returned[err_index] = NIL
        stmts.append(go.ReturnStmt(tuple(returned)))

        signature = go.FuncType(
            params=params,
            results=qualify_fields(_strip_names(decl.type.results), self.alias),
        )
        self.decls.append(go.FuncDecl(name=decl.name, type=signature, body=go.Block(tuple(stmts))))
        logger.debug(f"Proxy constructor {decl.name} wraps {self.alias}.{decl.name}")

    def _method(self, info: FuncInfo, decl: go.FuncDecl, iface: str) -> None:
        struct = self.current_struct(info)
        if struct is None or info.receiver_type != struct:
            return
        if decl.name not in self.method_set(iface):
            return

        receiver = info.receiver_name if info.receiver_name not in ("", "_") else "r"
        names = unique_names(decl.type.params, taken={receiver})
        params = qualify_fields(expand_fields(decl.type.params, names), self.alias)
        recv_type: go.Expr = go.Ident(struct)
        if info.receiver_star:
            recv_type = go.StarExpr(recv_type)

        call = go.CallExpr(
            go.SelectorExpr(go.SelectorExpr(go.Ident(receiver), IMPL_FIELD), decl.name),
            tuple(go.Ident(n) for n in names),
            ellipsis=_is_variadic(decl.type.params),
        )
        if decl.type.results.fields:
            stmt: go.Stmt = go.ReturnStmt((call,))
        else:
            stmt = go.ExprStmt(call)

        self.decls.append(go.FuncDecl(
            name=decl.name,
            recv=go.FieldList((go.Field(names=(receiver,), type=recv_type),)),
            type=go.FuncType(
                params=params,
                results=qualify_fields(_strip_names(decl.type.results), self.alias),
            ),
            body=go.Block((stmt,)),
        ))

    def file_post(self, info: FileInfo, file: go.File) -> None:
        if not self.decls:
            logger.debug(f"Nothing to decorate in {info.relative_dir}/{info.file_name}")
            return
        out = go.File(
            package=info.package_name,
            decls=(go.GenDecl(tok="import", specs=used_imports(self.imports, self.decls)),) + tuple(self.decls),
        )
        path = Path(info.base_dir) / BUILD_DIR / info.relative_dir / info.file_name
        self.writer.write_file(path, out)

    def consumer(self) -> Consumer:
        return Consumer(
            name="packageDecorator",
            package=self.package,
            file_pre=self.file_pre,
            import_spec=self.import_spec,
            struct=self.struct_decl,
            interface=self.interface_decl,
            func_decl=self.func_decl,
            file_post=self.file_post,
        )
