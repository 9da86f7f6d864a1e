"""
Gelato Path Configuration

Centralized path management for files Gelato writes outside of the
generated-output trees.

Directory Structure:
.gelato/
└── logs/                # Log files (opt-in)

gelato-debug.log         # Last unformattable output (working directory)
"""

from pathlib import Path
from typing import Optional


class GelatoPaths:
    """
    Centralized path configuration for Gelato.

    All paths are lazily resolved relative to project_root.
    Default project_root is current working directory.
    """

    GELATO_DIR = ".gelato"
    LOGS_DIR = "logs"
    LOG_FILE_NAME = "gelato.log"
    DEBUG_FILE_NAME = "gelato-debug.log"

    def __init__(self, project_root: Optional[Path] = None):
        self._project_root = project_root

    @property
    def project_root(self) -> Path:
        """Get the project root directory."""
        if self._project_root is None:
            return Path.cwd()
        return self._project_root

    @property
    def gelato_dir(self) -> Path:
        return self.project_root / self.GELATO_DIR

    @property
    def logs_dir(self) -> Path:
        return self.gelato_dir / self.LOGS_DIR

    @property
    def log_file(self) -> Path:
        return self.logs_dir / self.LOG_FILE_NAME

    @property
    def debug_file(self) -> Path:
        """Dump of the last generated file the formatter rejected."""
        return self.project_root / self.DEBUG_FILE_NAME

    def ensure_dirs(self) -> None:
        """Create all necessary directories if they don't exist."""
        self.logs_dir.mkdir(parents=True, exist_ok=True)


def get_paths(project_root: Optional[Path] = None) -> GelatoPaths:
    return GelatoPaths(project_root)
