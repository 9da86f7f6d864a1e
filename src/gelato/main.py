import os
import typer
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.markup import escape

from gelato.compiler.config import BUILD_DIR, GEN_DIR
from gelato.exceptions import ConfigError, GelatoError
from gelato.logging_config import logger, parse_level, setup_logging
from gelato.parser.config import GO_MOD_FILE

EXIT_PREFLIGHT = 2
EXIT_DECORATE = 3
EXIT_GENERATE = 4

app = typer.Typer(help="Source transformations for layered Go applications.")
console = Console()


def _machine_mode() -> bool:
    return os.getenv("GELATO_MACHINE_MODE", "").lower() in ("1", "true", "yes")


def _report(message: str, style: str = "green") -> None:
    if _machine_mode():
        typer.echo(message)
    else:
        console.print(f"[{style}]{escape(message)}[/{style}]")


def _preflight(path: Path, level: Optional[str]) -> Path:
    """Checks that the target is an existing Go module root and the level is valid."""
    if level is not None:
        try:
            parse_level(level)
        except ConfigError as e:
            _report(str(e), style="red")
            raise typer.Exit(code=EXIT_PREFLIGHT)
    if not path.exists():
        _report(f"Path does not exist: {path}", style="red")
        raise typer.Exit(code=EXIT_PREFLIGHT)
    if not path.is_dir():
        _report(f"Not a directory: {path}", style="red")
        raise typer.Exit(code=EXIT_PREFLIGHT)
    if not (path / GO_MOD_FILE).is_file():
        _report(f"No {GO_MOD_FILE} found in {path}", style="red")
        raise typer.Exit(code=EXIT_PREFLIGHT)
    return path


@app.callback()
def global_options(
    human: bool = typer.Option(
        False,
        "--human",
        "-H",
        help="Show log output on the console even when GELATO_MACHINE_MODE is set",
    ),
):
    """
    Gelato: builders, mocks and layer proxies for Go applications.
    """
    if human:
        setup_logging(suppress_console=False, force=True)
    else:
        setup_logging()


@app.command()
def decorate(
    path: Path = typer.Argument(Path("."), help="Root of the Go module to decorate."),
    level: Optional[str] = typer.Option(None, "--level", "-l", help="Log level (DEBUG, INFO, ...)."),
):
    """
    Writes a decorated copy of the application under PATH/.build.
    """
    from gelato.compiler import decorate as run_decorate

    path = _preflight(path, level)
    try:
        run_decorate(path, level=level)
    except (GelatoError, OSError) as e:
        logger.error(f"Decoration failed: {e}")
        _report(f"Decoration failed: {e}", style="red")
        raise typer.Exit(code=EXIT_DECORATE)
    _report(f"Decorated application written to {path / BUILD_DIR}")


@app.command()
def gen(
    path: Path = typer.Argument(Path("."), help="Root of the Go module to generate helpers for."),
    level: Optional[str] = typer.Option(None, "--level", "-l", help="Log level (DEBUG, INFO, ...)."),
):
    """
    Writes builders and mocks for every non-main package under PATH/.gen.
    """
    from gelato.compiler import generate as run_generate

    path = _preflight(path, level)
    try:
        run_generate(path, level=level)
    except (GelatoError, OSError) as e:
        logger.error(f"Generation failed: {e}")
        _report(f"Generation failed: {e}", style="red")
        raise typer.Exit(code=EXIT_GENERATE)
    _report(f"Test helpers written to {path / GEN_DIR}")


if __name__ == "__main__":
    app()
