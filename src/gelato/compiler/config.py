"""
Configuration for the compiler and its consumers.

Contains layer names, output directories, directory exclusions and formatter commands.
"""

import os

from gelato.paths import get_paths


def get_compiler_config():
    """
    Get compiler configuration with environment overrides.

    Environment is read at call time so tests and the CLI can toggle formatting.
    """
    paths = get_paths()
    return {
        "format_enabled": os.getenv("GELATO_SKIP_FORMAT", "").lower() not in ("1", "true", "yes"),
        "format_timeout": 30,
        "debug_file": str(paths.debug_file),
    }


# Packages whose import path ends with /<layer> or contains /<layer>/ get proxied
LAYER_PACKAGES = ("handler", "controller", "gateway", "repository")

MAIN_PACKAGE = "main"

# Output trees, relative to the compiled root
BUILD_DIR = ".build"
GEN_DIR = ".gen"
MOCK_DIR = "mock"
BUILDER_DIR = "builder"
FACTORY_DIR = "factory"

# gitignore-style patterns for directories the traversal never enters
EXCLUDED_DIR_PATTERNS = [
    f"{BUILD_DIR}/",
    f"{GEN_DIR}/",
    ".*/",
    "bin/",
    "vendor/",
    "testdata/",
]

# Number of elements synthesized for slices, arrays, maps and channels
EXAMPLE_SIZE = 2

# Tried in order; the first one on PATH formats emitted files
FORMATTERS = [
    {
        "command": "goimports",
        "args": [],
    },
    {
        "command": "gofmt",
        "args": [],
    },
]
