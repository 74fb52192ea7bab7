import asyncio
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console

from execwrap.application.execution_wrapper import (
    COMMAND_LABELS,
    ExecutionWrapper,
    WrapperSetupError,
)
from execwrap.cli.formatters.execution_formatter import create_console_callbacks
from execwrap.cli.utils import build_config, enable_verbose, error_exit, report_validation_error
from execwrap.domain.value_objects.invocation import Invocation
from execwrap.domain.value_objects.wrapper_config import DEFAULT_LOG_DIR, DEFAULT_RETENTION_DAYS
from execwrap.infrastructure.notify.mail_notifier import MailCommandNotifier
from execwrap.infrastructure.process.stream_runner import AsyncStreamRunner

console = Console()


def wrap_command(
    ctx: typer.Context,
    command: list[str] = typer.Argument(
        None, help="Command and its arguments, after --", show_default=False
    ),
    log_dir: Path = typer.Option(
        DEFAULT_LOG_DIR, "--log-dir", "-l", envvar="EXECWRAP_LOG_DIR", help="Log directory"
    ),
    prefix: str | None = typer.Option(
        None, "--prefix", "-p", help="Log file prefix (default: command basename)"
    ),
    email: str | None = typer.Option(
        None,
        "--email",
        "-e",
        envvar="EXECWRAP_EMAIL",
        help="Send email on failure (requires mail command)",
    ),
    rotate: int = typer.Option(
        DEFAULT_RETENTION_DAYS,
        "--rotate",
        "-r",
        envvar="EXECWRAP_RETENTION_DAYS",
        help="Keep logs for N days (0 disables rotation)",
    ),
    silent: bool = typer.Option(
        False, "--silent", "-s", envvar="EXECWRAP_SILENT", help="Don't output to console"
    ),
    tag: str | None = typer.Option(None, "--tag", "-t", help="Add custom tag to log filename"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    timeout: float | None = typer.Option(
        None,
        "--timeout",
        envvar="EXECWRAP_TIMEOUT",
        help="Terminate the command after N seconds (SIGTERM, then SIGKILL)",
    ),
    kill_grace: float = typer.Option(
        10.0, "--kill-grace", help="Seconds between SIGTERM and SIGKILL on timeout"
    ),
) -> None:
    """Run a command with separate timestamped stdout/stderr logs and a summary.

    Example: execwrap exec -p mybackup -e admin@example.com -- rsync -av /src /dst
    """
    if verbose:
        enable_verbose(ctx)
    if not command:
        error_exit("No command specified. Use -- command [args]")

    config = build_config(
        log_dir,
        prefix=prefix,
        tag=tag,
        retention_days=rotate,
        silent=silent,
        verbose=verbose,
        notify_email=email,
        timeout_s=timeout,
        kill_grace_s=kill_grace,
    )
    try:
        invocation = Invocation(argv=tuple(command))
    except ValidationError as e:
        report_validation_error(e)

    wrapper = ExecutionWrapper(AsyncStreamRunner(), MailCommandNotifier())
    callbacks = create_console_callbacks(console, COMMAND_LABELS, silent=config.silent)

    try:
        result = asyncio.run(wrapper.execute(invocation, config, callbacks))
    except WrapperSetupError as e:
        error_exit(str(e))

    raise typer.Exit(result.exit_code)
