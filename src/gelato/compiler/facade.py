"""
Entry points for the two gelato operations.
"""

from pathlib import Path
from typing import Optional

from gelato.logging_config import logger, setup_logging
from gelato.schemas import ParseOptions
from gelato.tracing import trace
from . import builder, decorator, mocker
from .compiler import Compiler
from .writer import GoWriter


@trace
def decorate(path: Path, level: Optional[str] = None) -> None:
    """
    Writes a decorated copy of the application under <path>/.build.

    Layered packages get delegating proxies; package main is rewired to use them.
    Test files are not part of the decorated copy.
    """
    path = Path(path)
    logger.info(f"Decorating application at '{path}'")
    decorator.new(level).compile(path, ParseOptions(skip_test_files=True))


@trace
def generate(path: Path, level: Optional[str] = None) -> None:
    """
    Writes builders and mocks for every non-main package under <path>/.gen.

    Test files are not read. The factory package used by builders is written
    once the sources compiled cleanly.
    """
    path = Path(path)
    logger.info(f"Generating test helpers for '{path}'")
    writer = GoWriter()
    compiler = Compiler(
        builder.Builder(writer).consumer(),
        mocker.Mocker(writer).consumer(),
    )
    if level:
        setup_logging(level=level, force=True)
    compiler.compile(path, ParseOptions(skip_test_files=True))
    builder.write_factory(path, writer)
