"""
Builder consumer.

Public API:
- new: a Compiler that writes struct builders under .gen/builder
- create_builder_decls: builder declarations for one struct
- write_factory: the example-value factory package
"""

from typing import Optional

from gelato.compiler.compiler import Compiler
from gelato.compiler.writer import GoWriter
from gelato.logging_config import setup_logging
from .builder import Builder
from .factory import FACTORY_SOURCE, factory_import_path, write_factory
from .generator import create_builder_decls


def new(level: Optional[str] = None, writer: Optional[GoWriter] = None) -> Compiler:
    """Creates a compiler for generating struct builders."""
    if level:
        setup_logging(level=level, force=True)
    return Compiler(Builder(writer).consumer())


__all__ = [
    "new",
    "Builder",
    "create_builder_decls",
    "write_factory",
    "factory_import_path",
    "FACTORY_SOURCE",
]
