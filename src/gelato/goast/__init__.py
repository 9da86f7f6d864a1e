"""
Go AST package.

Public API:
- nodes: the closed set of Go syntax node kinds
- print_file: render a File node to Go source
- walk / selector_roots / used_imports: traversal helpers for synthesized code
"""

from . import nodes
from .printer import print_expr, print_file, print_stmt
from .walk import import_name, selector_roots, used_imports, walk

__all__ = [
    "nodes",
    "print_file",
    "print_expr",
    "print_stmt",
    "walk",
    "selector_roots",
    "import_name",
    "used_imports",
]
