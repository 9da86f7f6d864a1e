"""
Parser package for Go source files.

Public API:
- parse_file: read and parse one .go file
- parse_source: parse Go source text into a goast File
- read_go_module: module path from a go.mod file
"""

from .go_parser import ParsedFile, PositionTable, parse_file, parse_source, read_go_module
from .config import GO_SUFFIX, GO_TEST_SUFFIX

__all__ = [
    "ParsedFile",
    "PositionTable",
    "parse_file",
    "parse_source",
    "read_go_module",
    "GO_SUFFIX",
    "GO_TEST_SUFFIX",
]
