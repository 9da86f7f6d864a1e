"""
Traversal engine.

Walks a Go module once and multiplexes the structural events of every file to
a set of consumers. Consumers see files one at a time, in a deterministic
order, and emit their output from file_post.
"""

from pathlib import Path
from typing import Dict, List, Optional

from gelato.goast import nodes as go
from gelato.logging_config import logger
from gelato.parser import ParsedFile, read_go_module
from gelato.schemas import FileInfo, ParseOptions, PackageInfo
from gelato.tracing import trace
from .consumer import Consumer
from .packages import as_package, package_directories, parse_directory


def import_path_for(module_name: str, relative_dir: str) -> str:
    if relative_dir in ("", "."):
        return module_name
    return f"{module_name}/{relative_dir}"


def type_kind(type_expr: go.Expr) -> str:
    if isinstance(type_expr, go.StructType):
        return "struct"
    if isinstance(type_expr, go.InterfaceType):
        return "interface"
    if isinstance(type_expr, go.FuncType):
        return "func"
    return "other"


def declared_types(file: go.File) -> Dict[str, str]:
    """Name -> kind of every top-level type declared in file, in source order."""
    kinds: Dict[str, str] = {}
    for decl in file.decls:
        if isinstance(decl, go.GenDecl) and decl.tok == "type":
            for spec in decl.specs:
                kinds[spec.name] = type_kind(spec.type)
    return kinds


def package_types(pkg: go.Package) -> Dict[str, str]:
    """declared_types merged over every file of a package."""
    kinds: Dict[str, str] = {}
    for file in pkg.files.values():
        kinds.update(declared_types(file))
    return kinds


class Compiler:
    """
    Runs consumers over every package of a Go module.

    Usage:
        Compiler(consumer_a, consumer_b).compile(Path("./service"))
    """

    def __init__(self, *consumers: Consumer):
        self.consumers: List[Consumer] = list(consumers)

    @trace
    def compile(self, path: Path, options: Optional[ParseOptions] = None) -> None:
        """
        Parses every package under path and dispatches it to the consumers.

        Raises:
            FileNotFoundError: path or its go.mod does not exist.
            GoModuleError: go.mod declares no module.
            ParserError: a Go file has a syntax error.
            Any exception raised by a consumer's file_post.
        """
        options = options or ParseOptions()
        root = Path(path)
        root.stat()
        module_name = read_go_module(root)
        logger.info(
            f"Compiling module '{module_name}' at '{root}' with consumers "
            f"{[c.name for c in self.consumers]}"
        )

        for directory in package_directories(root):
            relative_dir = directory.relative_to(root).as_posix()
            logger.debug(f"Visiting directory '{relative_dir}'")
            packages = parse_directory(directory, options.skip_test_files)
            for package_name, files in packages.items():
                info = PackageInfo(
                    module_name=module_name,
                    package_name=package_name,
                    import_path=import_path_for(module_name, relative_dir),
                    base_dir=str(root),
                    relative_dir=relative_dir,
                )
                self._compile_package(info, files)

        logger.info(f"Finished compiling module '{module_name}'")

    def _compile_package(self, info: PackageInfo, files: Dict[str, ParsedFile]) -> None:
        package = as_package(info.package_name, files)
        active = []
        for consumer in self.consumers:
            if consumer.package is not None and not consumer.package(info, package):
                logger.debug(f"[{consumer.name}] skipping package '{info.import_path}'")
                continue
            active.append(consumer)
        if not active:
            return

        logger.debug(f"Package '{info.import_path}' ({len(files)} files) -> {[c.name for c in active]}")
        for file_name, parsed in files.items():
            file_info = FileInfo(
                **dict(info),
                file_name=file_name,
                positions=parsed.positions,
                declared_types=declared_types(parsed.ast),
            )
            for consumer in active:
                self._compile_file(consumer, file_info, parsed.ast)

    def _compile_file(self, consumer: Consumer, info: FileInfo, file: go.File) -> None:
        if consumer.file_pre is not None and not consumer.file_pre(info, file):
            logger.debug(f"[{consumer.name}] skipping file '{info.relative_dir}/{info.file_name}'")
            return

        for decl in file.decls:
            if isinstance(decl, go.GenDecl) and decl.tok == "import":
                if consumer.import_spec is not None:
                    for spec in decl.specs:
                        consumer.import_spec(info, spec)
            elif isinstance(decl, go.GenDecl) and decl.tok == "type":
                for spec in decl.specs:
                    self._dispatch_type(consumer, info, spec)
            elif isinstance(decl, go.FuncDecl):
                self._dispatch_func(consumer, info, decl)
            elif isinstance(decl, go.SourceDecl):
                if consumer.value_decl is not None:
                    logger.debug(f"[{consumer.name}] {decl.tok} at {info.file_name}:{info.position(decl.pos)}")
                    consumer.value_decl(info, decl)

        if consumer.file_post is not None:
            consumer.file_post(info, file)

    def _dispatch_type(self, consumer: Consumer, info: FileInfo, spec: go.TypeSpec) -> None:
        kind = type_kind(spec.type)
        callback = {
            "struct": consumer.struct,
            "interface": consumer.interface,
            "func": consumer.func_type,
        }.get(kind)
        if callback is None:
            return
        logger.debug(f"[{consumer.name}] {kind} {spec.name} at {info.file_name}:{info.position(spec.pos)}")
        callback(info.type_info(spec.name), spec)

    def _dispatch_func(self, consumer: Consumer, info: FileInfo, decl: go.FuncDecl) -> None:
        if consumer.func_decl is None:
            return
        receiver_name, receiver_type, receiver_star = "", "", False
        if decl.recv is not None and decl.recv.fields:
            recv = decl.recv.fields[0]
            receiver_name = recv.names[0] if recv.names else ""
            recv_type = recv.type
            if isinstance(recv_type, go.StarExpr):
                receiver_star = True
                recv_type = recv_type.x
            if isinstance(recv_type, go.IndexExpr):
                recv_type = recv_type.x
            receiver_type = recv_type.name if isinstance(recv_type, go.Ident) else ""
        logger.debug(f"[{consumer.name}] func {decl.name} at {info.file_name}:{info.position(decl.pos)}")
        consumer.func_decl(
            info.func_info(decl.name, receiver_name, receiver_type, receiver_star),
            decl,
            decl.body,
        )
