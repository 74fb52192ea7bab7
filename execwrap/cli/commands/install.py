import asyncio
from pathlib import Path

import typer
from rich.console import Console

from execwrap.application.execution_wrapper import (
    COMMAND_LABELS,
    ExecutionWrapper,
    WrapperSetupError,
)
from execwrap.cli.formatters.execution_formatter import create_console_callbacks
from execwrap.cli.utils import build_config, enable_verbose, error_exit
from execwrap.domain.value_objects.invocation import Invocation
from execwrap.domain.value_objects.wrapper_config import DEFAULT_LOG_DIR, DEFAULT_RETENTION_DAYS
from execwrap.infrastructure.notify.mail_notifier import MailCommandNotifier
from execwrap.infrastructure.process.stream_runner import AsyncStreamRunner
from execwrap.infrastructure.system.os_detect import UnsupportedSystemError, detect_system_profile
from execwrap.infrastructure.system.package_managers import package_manager_for

console = Console()

# Distinct prefixes keep the cache refresh and the install from sharing artifact names
UPDATE_PREFIX = "package-cache"
INSTALL_PREFIX = "install-packages"


def install_packages(
    ctx: typer.Context,
    packages: list[str] = typer.Argument(..., help="Packages to install"),
    update: bool = typer.Option(False, "--update", "-u", help="Refresh the package cache first"),
    log_dir: Path = typer.Option(
        DEFAULT_LOG_DIR, "--log-dir", "-l", envvar="EXECWRAP_LOG_DIR", help="Log directory"
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
) -> None:
    """Install packages with the host's package manager, through the wrapper."""
    if verbose:
        enable_verbose(ctx)

    try:
        profile = detect_system_profile()
    except UnsupportedSystemError as e:
        error_exit(str(e))
    manager = package_manager_for(profile)

    steps: list[tuple[str, Invocation]] = []
    if update:
        steps.append((UPDATE_PREFIX, manager.update_cache_command()))
    steps.append((INSTALL_PREFIX, manager.install_command(packages)))

    wrapper = ExecutionWrapper(AsyncStreamRunner(), MailCommandNotifier())
    for prefix, invocation in steps:
        config = build_config(
            log_dir,
            prefix=prefix,
            tag=tag,
            retention_days=rotate,
            silent=silent,
            verbose=verbose,
            notify_email=email,
        )
        callbacks = create_console_callbacks(console, COMMAND_LABELS, silent=config.silent)
        try:
            result = asyncio.run(wrapper.execute(invocation, config, callbacks))
        except WrapperSetupError as e:
            error_exit(str(e))
        if result.exit_code != 0:
            raise typer.Exit(result.exit_code)
