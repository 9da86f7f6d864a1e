"""
Consumer: the observer interface of the traversal engine.
"""

from dataclasses import dataclass
from typing import Callable, Optional

from gelato.goast import nodes as go
from gelato.schemas import FileInfo, FuncInfo, PackageInfo, TypeInfo


@dataclass
class Consumer:
    """
    A named bundle of optional callbacks.

    A missing callback means the consumer is not interested in that event.
    package and file_pre return False to skip the package or file; file_post
    raises to abort the whole compile run.
    """
    name: str
    package: Optional[Callable[[PackageInfo, go.Package], bool]] = None
    file_pre: Optional[Callable[[FileInfo, go.File], bool]] = None
    import_spec: Optional[Callable[[FileInfo, go.ImportSpec], None]] = None
    struct: Optional[Callable[[TypeInfo, go.TypeSpec], None]] = None
    interface: Optional[Callable[[TypeInfo, go.TypeSpec], None]] = None
    func_type: Optional[Callable[[TypeInfo, go.TypeSpec], None]] = None
    func_decl: Optional[Callable[[FuncInfo, go.FuncDecl, Optional[go.Body]], None]] = None
    value_decl: Optional[Callable[[FileInfo, go.SourceDecl], None]] = None
    file_post: Optional[Callable[[FileInfo, go.File], None]] = None
