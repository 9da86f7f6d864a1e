"""
Mocker consumer.

Public API:
- new: a Compiler that writes interface mocks under .gen/mock
- create_mocker_decls: mock declarations for one interface
"""

from typing import Optional

from gelato.compiler.compiler import Compiler
from gelato.compiler.writer import GoWriter
from gelato.logging_config import setup_logging
from .generator import create_mocker_decls, method_names
from .mocker import Mocker


def new(level: Optional[str] = None, writer: Optional[GoWriter] = None) -> Compiler:
    """Creates a compiler for generating interface mocks."""
    if level:
        setup_logging(level=level, force=True)
    return Compiler(Mocker(writer).consumer())


__all__ = ["new", "Mocker", "create_mocker_decls", "method_names"]
