import os
from pathlib import Path
from typing import Dict, List

import pathspec

from gelato.goast import nodes as go
from gelato.logging_config import logger
from gelato.parser import GO_SUFFIX, GO_TEST_SUFFIX, ParsedFile, parse_file
from .config import EXCLUDED_DIR_PATTERNS


def package_directories(root: Path) -> List[Path]:
    """
    Lists root and every directory below it that the traversal should visit, sorted.

    Generated output trees, dot-directories, bin, vendor and testdata are pruned
    together with everything beneath them.
    """
    spec = pathspec.PathSpec.from_lines("gitignore", EXCLUDED_DIR_PATTERNS)
    found = [root]

    for current, dirs, _files in os.walk(root):
        current_path = Path(current)
        kept = []
        for d in sorted(dirs):
            relative = (current_path / d).relative_to(root)
            # trailing slash so directory-only patterns match
            if spec.match_file(f"{relative.as_posix()}/"):
                logger.debug(f"Ignoring directory '{relative}' due to exclusion rules.")
            else:
                kept.append(d)
        dirs[:] = kept
        found.extend(current_path / d for d in kept)

    return sorted(found)


def go_files(directory: Path, skip_test_files: bool = False) -> List[Path]:
    files = []
    for entry in sorted(directory.iterdir()):
        if not entry.is_file() or entry.suffix != GO_SUFFIX:
            continue
        if skip_test_files and entry.name.endswith(GO_TEST_SUFFIX):
            logger.debug(f"Skipping test file '{entry.name}'")
            continue
        files.append(entry)
    return files


def parse_directory(directory: Path, skip_test_files: bool = False) -> Dict[str, Dict[str, ParsedFile]]:
    """
    Parses every eligible Go file of one directory, grouped by package clause.

    Returns package name -> file name -> ParsedFile, both levels sorted by name.
    """
    grouped: Dict[str, Dict[str, ParsedFile]] = {}
    for path in go_files(directory, skip_test_files):
        parsed = parse_file(path)
        grouped.setdefault(parsed.ast.package, {})[path.name] = parsed
    return {name: dict(sorted(files.items())) for name, files in sorted(grouped.items())}


def as_package(name: str, files: Dict[str, ParsedFile]) -> go.Package:
    return go.Package(name=name, files={file_name: parsed.ast for file_name, parsed in files.items()})
