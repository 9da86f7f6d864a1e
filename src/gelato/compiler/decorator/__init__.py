"""
Decorator consumers.

Public API:
- new: a Compiler that writes decorated layer packages and a rewired entry package under .build
"""

from typing import Optional

from gelato.compiler.compiler import Compiler
from gelato.compiler.writer import GoWriter
from gelato.logging_config import setup_logging
from .helper import (
    decorated_import_path,
    get_decorated_pkg_name,
    get_original_pkg_name,
    is_decoratable_pkg,
    is_main_pkg,
)
from .main_decorator import MainDecorator
from .package_decorator import PackageDecorator


def new(level: Optional[str] = None, writer: Optional[GoWriter] = None) -> Compiler:
    """Creates a compiler for generating decorated applications."""
    if level:
        setup_logging(level=level, force=True)
    writer = writer or GoWriter()
    return Compiler(
        MainDecorator(writer).consumer(),
        PackageDecorator(writer).consumer(),
    )


__all__ = [
    "new",
    "MainDecorator",
    "PackageDecorator",
    "is_main_pkg",
    "is_decoratable_pkg",
    "get_original_pkg_name",
    "get_decorated_pkg_name",
    "decorated_import_path",
]
