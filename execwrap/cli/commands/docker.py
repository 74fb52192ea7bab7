import asyncio
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console

from execwrap.application.container_wrapper import CONTAINER_LABELS, ContainerWrapper
from execwrap.application.execution_wrapper import WrapperSetupError
from execwrap.cli.formatters.execution_formatter import create_console_callbacks
from execwrap.cli.utils import build_config, enable_verbose, error_exit, report_validation_error
from execwrap.domain.value_objects.container_spec import ContainerSpec
from execwrap.domain.value_objects.wrapper_config import (
    DEFAULT_CONTAINER_LOG_DIR,
    DEFAULT_RETENTION_DAYS,
)
from execwrap.infrastructure.notify.mail_notifier import MailCommandNotifier
from execwrap.infrastructure.process.stream_runner import AsyncStreamRunner

console = Console()


def wrap_container(
    ctx: typer.Context,
    image_args: list[str] = typer.Argument(
        None, help="Image, then optional command and arguments, after --", show_default=False
    ),
    log_dir: Path = typer.Option(
        DEFAULT_CONTAINER_LOG_DIR,
        "--log-dir",
        "-l",
        envvar="EXECWRAP_LOG_DIR",
        help="Log directory",
    ),
    prefix: str | None = typer.Option(
        None, "--prefix", "-p", help="Log file prefix (default: image name)"
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
        help="Terminate the container client after N seconds (SIGTERM, then SIGKILL)",
    ),
    kill_grace: float = typer.Option(
        10.0, "--kill-grace", help="Seconds between SIGTERM and SIGKILL on timeout"
    ),
    detach: bool = typer.Option(False, "--detach", "-d", help="Run container in detached mode"),
    interactive: bool = typer.Option(
        False, "--interactive", "-i", help="Run container in interactive mode"
    ),
    auto_remove: bool = typer.Option(
        False, "--rm", help="Automatically remove container when it exits"
    ),
    name: str | None = typer.Option(None, "--name", help="Assign a name to the container"),
    env: list[str] = typer.Option([], "--env", help="Set environment variable KEY=VALUE"),
    env_file: Path | None = typer.Option(
        None, "--env-file", help="Read environment variables from file"
    ),
    volume: list[str] = typer.Option([], "--volume", help="Bind mount volume SRC:DST"),
    port: list[str] = typer.Option([], "--port", help="Publish port HOST:CONTAINER"),
    network: str | None = typer.Option(None, "--network", help="Connect to network"),
    user: str | None = typer.Option(None, "--user", help="Username or UID"),
    workdir: str | None = typer.Option(
        None, "--workdir", help="Working directory inside container"
    ),
    entrypoint: str | None = typer.Option(
        None, "--entrypoint", help="Override default entrypoint"
    ),
    docker_args: str | None = typer.Option(
        None, "--docker-args", help="Additional Docker arguments (quoted string)"
    ),
) -> None:
    """Run a Docker container with timestamped logs and a summary.

    In detached mode the exit code is that of the launch command only.

    Example: execwrap docker --env APP_ENV=production --port 8080:80 -- nginx:alpine
    """
    if verbose:
        enable_verbose(ctx)
    if not image_args:
        error_exit("No Docker image specified. Use -- image [command] [args]")

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
        spec = ContainerSpec(
            image=image_args[0],
            args=tuple(image_args[1:]),
            detach=detach,
            interactive=interactive,
            auto_remove=auto_remove,
            name=name,
            env=tuple(env),
            env_file=env_file,
            volumes=tuple(volume),
            ports=tuple(port),
            network=network,
            user=user,
            workdir=workdir,
            entrypoint=entrypoint,
            extra_args=docker_args,
        )
    except ValidationError as e:
        report_validation_error(e)

    wrapper = ContainerWrapper(AsyncStreamRunner(), MailCommandNotifier())
    callbacks = create_console_callbacks(console, CONTAINER_LABELS, silent=config.silent)

    try:
        result = asyncio.run(wrapper.execute(spec, config, callbacks))
    except WrapperSetupError as e:
        error_exit(str(e))

    raise typer.Exit(result.exit_code)
