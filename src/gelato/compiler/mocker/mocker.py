from pathlib import Path
from typing import Dict, List, Optional, Set

from gelato.compiler.compiler import package_types
from gelato.compiler.config import GEN_DIR, MOCK_DIR
from gelato.compiler.consumer import Consumer
from gelato.compiler.decorator.helper import is_main_pkg
from gelato.compiler.naming import is_exported, package_import
from gelato.compiler.writer import GoWriter
from gelato.goast import nodes as go
from gelato.goast import used_imports
from gelato.logging_config import logger
from gelato.schemas import FileInfo, PackageInfo, TypeInfo
from .generator import create_mocker_decls

MOCK_IMPORTS = ("bytes", "fmt", "reflect", "testing")


class Mocker:
    """Writes one mock file per source file with exported interfaces, into .gen/mock."""

    def __init__(self, writer: Optional[GoWriter] = None):
        self.writer = writer or GoWriter()
        self.kinds: Dict[str, str] = {}
        # expectation type names already used in the current package
        self.taken: Set[str] = set()
        self.decls: List[go.Decl] = []

    def package(self, info: PackageInfo, pkg: go.Package) -> bool:
        if is_main_pkg(pkg.name):
            return False
        self.kinds = package_types(pkg)
        self.taken = set()
        return True

    def file_pre(self, info: FileInfo, file: go.File) -> bool:
        self.decls = []
        return True

    def interface(self, info: TypeInfo, spec: go.TypeSpec) -> None:
        if not is_exported(spec.name):
            return
        if spec.type_params or spec.alias:
            logger.debug(f"Skipping mock for {spec.name}: generic or alias type")
            return
        unexported = [f.names[0] for f in spec.type.methods if f.names and not is_exported(f.names[0])]
        if unexported:
            # other packages cannot implement unexported methods
            logger.debug(f"Skipping mock for {spec.name}: unexported methods {unexported}")
            return
        self.decls.extend(create_mocker_decls(info.package_name, spec.name, spec.type, self.kinds, self.taken))

    def file_post(self, info: FileInfo, file: go.File) -> None:
        if not self.decls:
            return
        candidates = tuple(go.ImportSpec(path=p) for p in MOCK_IMPORTS) + (
            package_import(info.import_path, info.package_name),
        ) + tuple(s for s in file.imports if s.path != info.import_path and s.path not in MOCK_IMPORTS)
        imports = used_imports(candidates, self.decls)
        out = go.File(
            package=info.package_name + MOCK_DIR,
            decls=(go.GenDecl(tok="import", specs=imports),) + tuple(self.decls),
        )
        path = Path(info.base_dir) / GEN_DIR / MOCK_DIR / info.relative_dir / info.file_name
        self.writer.write_file(path, out)

    def consumer(self) -> Consumer:
        return Consumer(
            name="mocker",
            package=self.package,
            file_pre=self.file_pre,
            interface=self.interface,
            file_post=self.file_post,
        )
