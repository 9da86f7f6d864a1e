"""
MainDecorator: rewires the entry package to the decorated layer packages.

Each file of package main is copied to the build tree with an extra import
for every layered package it uses, and every pkg.Func(...) call on such a
package redirected to the decorated counterpart. A layer import, original or
decorated, is dropped once nothing in the file refers to it.
"""

from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set, Tuple

from gelato.compiler.config import BUILD_DIR
from gelato.compiler.consumer import Consumer
from gelato.compiler.writer import GoWriter
from gelato.goast import nodes as go
from gelato.goast import import_name, selector_roots
from gelato.logging_config import logger
from gelato.schemas import FileInfo, FuncInfo, PackageInfo, TypeInfo
from .helper import decorated_import_path, get_decorated_pkg_name, is_decoratable_pkg, is_main_pkg


def is_shadowed(body: go.SourceBlock, ref: go.NameRef, params: Set[str]) -> bool:
    """True if ref names a parameter or a local of body rather than a package."""
    if ref.name in params:
        return True
    return any(
        local.name == ref.name and local.scope <= ref.start < local.end
        for local in body.locals
    )


def package_refs(body: go.SourceBlock, params: Iterable[str] = ()) -> Set[str]:
    """Selector roots in body that refer to imported packages."""
    params = set(params)
    return {
        ref.name for ref in body.call_roots + body.selector_refs
        if not is_shadowed(body, ref, params)
    }


def rewrite_call_roots(body: go.SourceBlock, renames: Dict[str, str],
                       params: Iterable[str] = ()) -> go.SourceBlock:
    """
    Renames the selector roots of calls in body; other text is untouched.

    A root is left alone where a parameter or a local declaration shadows
    it: in controller := controller.New(); controller.Run() only the first
    call is renamed.
    """
    params = set(params)
    edits = {
        ref.start: renames[ref.name]
        for ref in body.call_roots
        if ref.name in renames and not is_shadowed(body, ref, params)
    }
    if not edits:
        return body

    pieces: List[str] = []
    deltas: List[Tuple[int, int]] = []
    cursor = 0
    for ref in body.call_roots:
        if ref.start not in edits:
            continue
        pieces.append(body.text[cursor:ref.start])
        pieces.append(edits[ref.start])
        deltas.append((ref.start, len(edits[ref.start]) - (ref.end - ref.start)))
        cursor = ref.end
    pieces.append(body.text[cursor:])

    def moved(offset: int) -> int:
        return offset + sum(delta for start, delta in deltas if start < offset)

    def move(ref: go.NameRef) -> go.NameRef:
        name = edits.get(ref.start, ref.name)
        start = moved(ref.start)
        return go.NameRef(start=start, end=start + len(name), name=name)

    return go.SourceBlock(
        text="".join(pieces),
        call_roots=tuple(move(ref) for ref in body.call_roots),
        selector_refs=tuple(move(ref) for ref in body.selector_refs),
        locals=tuple(
            go.LocalName(local.name, moved(local.scope), moved(local.end)) for local in body.locals
        ),
    )


class MainDecorator:
    """Per-file state of the entry package observer."""

    def __init__(self, writer: Optional[GoWriter] = None):
        self.writer = writer or GoWriter()
        self.imports: List[go.ImportSpec] = []
        self.decls: List[go.Decl] = []
        self.renames: Dict[str, str] = {}
        self.refs: Set[str] = set()

    def package(self, info: PackageInfo, pkg: go.Package) -> bool:
        return is_main_pkg(pkg.name)

    def file_pre(self, info: FileInfo, file: go.File) -> bool:
        self.imports = []
        self.decls = []
        self.renames = {}
        self.refs = set()
        return True

    def import_spec(self, info: FileInfo, spec: go.ImportSpec) -> None:
        self.imports.append(spec)
        if spec.name in ("_", "."):
            return
        if not is_decoratable_pkg(spec.path):
            return
        path = decorated_import_path(info.module_name, spec.path)
        if path is None:
            return
        name = import_name(spec)
        alias = get_decorated_pkg_name(name)
        self.renames[name] = alias
        self.imports.append(go.ImportSpec(path=path, name=alias))
        logger.debug(f"Decorating import '{spec.path}' as {alias}")

    def type_spec(self, info: TypeInfo, spec: go.TypeSpec) -> None:
        self.decls.append(go.GenDecl(tok="type", specs=(spec,)))

    def func_decl(self, info: FuncInfo, decl: go.FuncDecl, body: Optional[go.Body]) -> None:
        if isinstance(body, go.SourceBlock):
            fields = decl.type.params.fields + decl.type.results.fields
            if decl.recv is not None:
                fields += decl.recv.fields
            params = {n for f in fields for n in f.names}
            if self.renames:
                body = rewrite_call_roots(body, self.renames, params)
            self.refs |= package_refs(body, params)
        self.decls.append(go.FuncDecl(
            name=decl.name,
            type=decl.type,
            recv=decl.recv,
            type_params=decl.type_params,
            body=body,
            doc=decl.doc,
        ))

    def value_decl(self, info: FileInfo, decl: go.SourceDecl) -> None:
        self.decls.append(decl)

    def file_post(self, info: FileInfo, file: go.File) -> None:
        # Named basic types and aliases are not dispatched as events
        for decl in file.decls:
            if isinstance(decl, go.GenDecl) and decl.tok == "type":
                for spec in decl.specs:
                    if info.declared_types.get(spec.name) == "other":
                        self.decls.append(go.GenDecl(tok="type", specs=(spec,)))

        if not self.decls:
            logger.debug(f"No declarations in {info.relative_dir}/{info.file_name}, nothing to write")
            return

        out = go.File(
            package=info.package_name,
            decls=(go.GenDecl(tok="import", specs=self._resolve_imports()),) + tuple(self.decls),
        )
        path = Path(info.base_dir) / BUILD_DIR / info.relative_dir / info.file_name
        self.writer.write_file(path, out)

    def _resolve_imports(self) -> Tuple[go.ImportSpec, ...]:
        """Drops layer imports, original or decorated, that no longer have a reference."""
        layered = set(self.renames) | set(self.renames.values())
        roots = set(self.refs)
        for decl in self.decls:
            if isinstance(decl, go.FuncDecl):
                # bodies are covered by self.refs, which leaves out shadowed roots
                roots |= selector_roots((decl.recv, decl.type))
            else:
                roots |= selector_roots(decl)
        kept = []
        for spec in self.imports:
            name = import_name(spec)
            if spec.name not in ("_", ".") and name in layered and name not in roots:
                logger.debug(f"Dropping unused import '{spec.path}'")
                continue
            kept.append(spec)
        return tuple(kept)

    def consumer(self) -> Consumer:
        return Consumer(
            name="mainDecorator",
            package=self.package,
            file_pre=self.file_pre,
            import_spec=self.import_spec,
            struct=self.type_spec,
            interface=self.type_spec,
            func_type=self.type_spec,
            func_decl=self.func_decl,
            value_decl=self.value_decl,
            file_post=self.file_post,
        )
