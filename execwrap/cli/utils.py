"""CLI utility functions."""

from pathlib import Path
from typing import Any, NoReturn

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.text import Text

from execwrap.cli.theme import theme
from execwrap.domain.value_objects.wrapper_config import WrapperConfig

# WrapperConfig field -> CLI option name, where they differ
OPTION_NAMES = {
    "retention_days": "rotate",
    "notify_email": "email",
    "timeout_s": "timeout",
    "kill_grace_s": "kill-grace",
}


def error_exit(message: str, code: int = 1) -> NoReturn:
    """Print an [ERROR] line on stderr and exit."""
    Console(stderr=True).print(Text(f"[ERROR] {message}", style=theme.ERROR))
    raise typer.Exit(code)


def report_validation_error(error: ValidationError) -> NoReturn:
    for item in error.errors():
        loc = item.get("loc", ())
        field = str(loc[0]) if loc else ""
        msg = item.get("msg", str(item))
        # Clean up Pydantic message format
        if msg.startswith("Value error, "):
            msg = msg[13:]
        if field:
            option = OPTION_NAMES.get(field, field.replace("_", "-"))
            typer.echo(f"Error: --{option}: {msg}", err=True)
        else:
            typer.echo(f"Error: {msg}", err=True)
    raise typer.Exit(1)


def build_config(log_dir: Path, **options: Any) -> WrapperConfig:
    try:
        return WrapperConfig(log_dir=log_dir, **options)
    except ValidationError as e:
        report_validation_error(e)


def enable_verbose(ctx: typer.Context) -> None:
    """Re-configure logging for a command-level --verbose flag."""
    from execwrap.cli.main import setup_logging

    debug_log = (ctx.obj or {}).get("debug_log")
    setup_logging(verbose=True, log_file=debug_log)
