"""
Gelato - Source transformations for layered Go applications

Builders and mocks for tests, delegating proxies for layer packages.
"""

__version__ = "0.4.0"

from gelato.compiler import Compiler, Consumer, GoWriter, decorate, generate
from gelato.schemas import ParseOptions

__all__ = [
    "__version__",
    "Compiler",
    "Consumer",
    "GoWriter",
    "ParseOptions",
    "decorate",
    "generate",
]
