"""
GoWriter: prints, formats and writes generated Go files.

Formatting shells out to goimports (which also resolves imports) or gofmt.
When the formatter rejects a file the unformatted text is dumped to the
debug file so the generator bug can be inspected.
"""

import os
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Optional

from gelato.exceptions import EmissionError
from gelato.goast import nodes as go
from gelato.goast import print_file
from gelato.logging_config import logger
from .config import FORMATTERS, get_compiler_config


class GoWriter:
    """
    Writes Go files atomically, optionally formatted.

    Args:
        config: Optional config overrides (see get_compiler_config)
    """

    def __init__(self, config: Optional[dict] = None):
        self.config = get_compiler_config()
        self.config.update(config or {})

    def write_file(self, path: Path, file: go.File) -> None:
        self.write_source(path, print_file(file))

    def write_source(self, path: Path, source: str) -> None:
        """
        Raises:
            EmissionError: the formatter exited non-zero or timed out.
            OSError: the directory or file could not be written.
        """
        path = Path(path)
        formatted = self.format_source(path, source)
        path.parent.mkdir(parents=True, exist_ok=True)
        self._atomic_write(path, formatted)
        logger.debug(f"Wrote {path}")

    def format_source(self, path: Path, source: str) -> str:
        if not self.config["format_enabled"]:
            return source

        formatter = self._find_formatter()
        if formatter is None:
            logger.debug("Neither goimports nor gofmt found in PATH, writing unformatted output")
            return source

        command = [formatter["command"]] + formatter["args"]
        timeout = self.config["format_timeout"]
        try:
            result = subprocess.run(
                command,
                input=source,
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired:
            debug_path = self._dump_debug(source)
            raise EmissionError(str(path), f"{command[0]} timed out after {timeout}s", debug_path)

        if result.returncode != 0:
            debug_path = self._dump_debug(source)
            error_msg = (result.stderr or result.stdout).strip()
            logger.error(f"Formatter failed on {path}: {error_msg}")
            raise EmissionError(str(path), error_msg, debug_path)

        logger.debug(f"Formatted {path} with {command[0]}")
        return result.stdout

    def _find_formatter(self) -> Optional[dict]:
        for formatter in FORMATTERS:
            if shutil.which(formatter["command"]):
                return formatter
        return None

    def _dump_debug(self, source: str) -> str:
        debug_path = Path(self.config["debug_file"])
        debug_path.write_text(source, encoding="utf-8")
        logger.info(f"Unformatted output written to {debug_path}")
        return str(debug_path)

    def _atomic_write(self, path: Path, content: str) -> None:
        # Temp file in the target directory so os.replace stays on one filesystem
        fd, temp_path = tempfile.mkstemp(
            dir=str(path.parent),
            prefix=f".{path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
            os.replace(temp_path, str(path))
        except BaseException:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            raise
