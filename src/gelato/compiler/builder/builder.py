from pathlib import Path
from typing import Dict, List, Optional

from gelato.compiler.compiler import package_types
from gelato.compiler.config import BUILDER_DIR, GEN_DIR
from gelato.compiler.consumer import Consumer
from gelato.compiler.decorator.helper import is_main_pkg
from gelato.compiler.naming import is_exported, package_import
from gelato.compiler.writer import GoWriter
from gelato.goast import nodes as go
from gelato.goast import used_imports
from gelato.logging_config import logger
from gelato.schemas import FileInfo, PackageInfo, TypeInfo
from .factory import factory_import_path
from .generator import create_builder_decls


class Builder:
    """Writes one builder file per source file with exported structs, into .gen/builder."""

    def __init__(self, writer: Optional[GoWriter] = None):
        self.writer = writer or GoWriter()
        self.kinds: Dict[str, str] = {}
        self.decls: List[go.Decl] = []

    def package(self, info: PackageInfo, pkg: go.Package) -> bool:
        if is_main_pkg(pkg.name):
            return False
        self.kinds = package_types(pkg)
        return True

    def file_pre(self, info: FileInfo, file: go.File) -> bool:
        self.decls = []
        return True

    def struct(self, info: TypeInfo, spec: go.TypeSpec) -> None:
        if not is_exported(spec.name):
            return
        if spec.type_params or spec.alias:
            logger.debug(f"Skipping builder for {spec.name}: generic or alias type")
            return
        self.decls.extend(create_builder_decls(info.package_name, spec.name, spec.type, self.kinds))

    def file_post(self, info: FileInfo, file: go.File) -> None:
        if not self.decls:
            return
        candidates = (
            package_import(info.import_path, info.package_name),
            go.ImportSpec(path=factory_import_path(info.module_name), name=None),
        ) + tuple(s for s in file.imports if s.path != info.import_path)
        imports = used_imports(candidates, self.decls)
        out = go.File(
            package=info.package_name + BUILDER_DIR,
            decls=(go.GenDecl(tok="import", specs=imports),) + tuple(self.decls),
        )
        path = Path(info.base_dir) / GEN_DIR / BUILDER_DIR / info.relative_dir / info.file_name
        self.writer.write_file(path, out)

    def consumer(self) -> Consumer:
        return Consumer(
            name="builder",
            package=self.package,
            file_pre=self.file_pre,
            struct=self.struct,
            file_post=self.file_post,
        )
