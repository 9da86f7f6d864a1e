"""
Compiler package: traversal engine, consumers and entry points.

Public API:
- Compiler / Consumer: the traversal engine and its observer interface
- decorate: write the decorated application under .build
- generate: write builders and mocks under .gen
"""

from .compiler import Compiler
from .consumer import Consumer
from .facade import decorate, generate
from .writer import GoWriter

__all__ = ["Compiler", "Consumer", "GoWriter", "decorate", "generate"]
