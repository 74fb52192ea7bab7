import sys
from pathlib import Path

import typer
from loguru import logger

from execwrap.cli.commands import docker, install, profile, run_command


def setup_logging(verbose: bool = False, log_file: Path | None = None) -> None:
    """Configure loguru logging."""
    logger.remove()

    if log_file is not None:
        logger.add(
            log_file,
            format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}",
            level="DEBUG",
            rotation="10 MB",
            encoding="utf-8",
        )

    if verbose:
        logger.add(
            sys.stderr,
            format="{time:HH:mm:ss} | {level: <8} | {message}",
            level="DEBUG",
        )


app = typer.Typer(
    name="execwrap",
    help="execwrap - run commands and containers with timestamped logs and summaries",
    no_args_is_help=True,
)

# Everything after the first positional belongs to the wrapped command
PASSTHROUGH = {"allow_interspersed_args": False}

app.command(name="exec", context_settings=PASSTHROUGH)(run_command.wrap_command)
app.command(name="docker", context_settings=PASSTHROUGH)(docker.wrap_container)
app.command(name="install")(install.install_packages)
app.command(name="profile")(profile.show_profile)


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    debug_log: Path | None = typer.Option(
        None,
        "--debug-log",
        envvar="EXECWRAP_DEBUG_LOG",
        help="Write execwrap's own debug log to this file",
    ),
) -> None:
    """execwrap - run commands and containers with timestamped logs and summaries."""
    ctx.obj = {"debug_log": debug_log}
    setup_logging(verbose=verbose, log_file=debug_log)


if __name__ == "__main__":
    app()
