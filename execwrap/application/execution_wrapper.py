import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from loguru import logger
from pydantic import BaseModel

from execwrap.domain.entities.execution_record import ExecutionRecord
from execwrap.domain.ports.notifier_port import NotifierPort
from execwrap.domain.ports.process_runner_port import ProcessRunnerPort
from execwrap.domain.services.artifact_naming import (
    ArtifactNamer,
    ArtifactPaths,
    default_prefix,
)
from execwrap.domain.value_objects.execution_status import ExecutionStatus
from execwrap.domain.value_objects.invocation import Invocation
from execwrap.domain.value_objects.wrapper_config import WrapperConfig
from execwrap.infrastructure.artifacts.log_artifacts import LogArtifactWriter
from execwrap.infrastructure.artifacts.retention import sweep_expired_artifacts
from execwrap.infrastructure.artifacts.summary import SummaryHeader, SummaryWriter
from execwrap.infrastructure.notify.mail_notifier import NotificationError
from execwrap.infrastructure.system.host_info import (
    current_directory,
    current_hostname,
    current_user,
)
from execwrap.infrastructure.utils.formatting import format_hms

Clock = Callable[[], datetime]

# Called with a console message or a raw output line
MessageCallback = Callable[[str], None]


def default_clock() -> datetime:
    return datetime.now()


class WrapperSetupError(Exception):
    """Raised when the wrapper cannot prepare or write its log artifacts.

    Raised before the wrapped command starts, except for write failures
    while it runs: those stop the command and still complete the summary.
    """


# Exit code recorded when the run is abandoned because its artifacts failed
ARTIFACT_FAILURE_EXIT_CODE = 1


class WrapperLabels(BaseModel, frozen=True):
    """Wording that differs between the command and container variants."""

    summary_title: str
    log_title: str
    command_label: str
    notification_name: str
    execute_label: str
    console_subject: str


COMMAND_LABELS = WrapperLabels(
    summary_title="Execution Summary",
    log_title="Command execution",
    command_label="Command",
    notification_name="Execution wrapper",
    execute_label="Executing",
    console_subject="Command",
)


@dataclass
class WrapperCallbacks:
    """Console hooks. Any of them may be left unset."""

    on_info: MessageCallback | None = None
    on_stdout: MessageCallback | None = None
    on_stderr: MessageCallback | None = None
    on_warning: MessageCallback | None = None
    on_complete: Callable[["ExecutionResult"], None] | None = None

    def info(self, message: str) -> None:
        if self.on_info:
            self.on_info(message)

    def stdout(self, line: str) -> None:
        if self.on_stdout:
            self.on_stdout(line)

    def stderr(self, line: str) -> None:
        if self.on_stderr:
            self.on_stderr(line)

    def warning(self, message: str) -> None:
        if self.on_warning:
            self.on_warning(message)


class ExecutionResult(BaseModel):
    record: ExecutionRecord
    paths: ArtifactPaths
    error_log_kept: bool
    notified: bool = False

    @property
    def exit_code(self) -> int:
        return self.record.exit_code if self.record.exit_code is not None else 1

    @property
    def duration(self) -> str:
        return format_hms(self.record.duration_s)


class ExecutionWrapper:
    """Runs one invocation with timestamped logs, a summary and retention.

    Artifacts land in `config.log_dir` as `{prefix}[_{tag}]_{timestamp}`
    with the extensions .log, .err and .summary.
    """

    def __init__(
        self,
        runner: ProcessRunnerPort,
        notifier: NotifierPort | None = None,
        clock: Clock = default_clock,
        labels: WrapperLabels = COMMAND_LABELS,
    ) -> None:
        self.runner = runner
        self.notifier = notifier
        self.clock = clock
        self.labels = labels

    async def execute(
        self,
        invocation: Invocation,
        config: WrapperConfig,
        callbacks: WrapperCallbacks | None = None,
        default_prefix_name: str | None = None,
        detached: bool = False,
    ) -> ExecutionResult:
        """Run the invocation and return its finalized record.

        With detached=True only the launch command is awaited; its output is
        recorded as the container id and its exit code is the result.
        """
        callbacks = callbacks or WrapperCallbacks()
        prefix = config.prefix or default_prefix_name or default_prefix(invocation.executable)
        namer = ArtifactNamer(config.log_dir, prefix, config.tag)

        self._prepare_log_dir(config.log_dir)
        if invocation.cwd is not None and not invocation.cwd.is_dir():
            raise WrapperSetupError(f"Working directory does not exist: {invocation.cwd}")

        await asyncio.to_thread(
            sweep_expired_artifacts,
            config.log_dir,
            namer.retention_patterns(),
            config.retention_days,
        )

        started = self.clock()
        paths = namer.paths_for(started)
        summary = SummaryWriter(paths.summary)
        writer = LogArtifactWriter(paths, self.clock)

        try:
            await summary.write_header(
                SummaryHeader(
                    title=self.labels.summary_title,
                    date=started,
                    command_label=self.labels.command_label,
                    command=invocation.display,
                    working_directory=invocation.cwd or current_directory(),
                    user=current_user(),
                    hostname=current_hostname(),
                    paths=paths,
                )
            )
            await writer.open()
        except OSError as e:
            raise WrapperSetupError(f"Failed to write log artifacts in {config.log_dir}: {e}") from e

        callbacks.info(f"{self.labels.execute_label}: {invocation.display}")
        callbacks.info(f"Logging to: {paths.log}")
        callbacks.info(f"Errors to: {paths.err}")

        record = ExecutionRecord(invocation=invocation)
        try:
            await writer.write_log_header(
                started, self.labels.log_title, self.labels.command_label, invocation.display
            )
            record.mark_running(started)
            if detached:
                await self._launch_detached(invocation, writer, record, callbacks)
            else:
                await self._stream(invocation, config, writer, record, callbacks)
            await writer.write_log_footer(
                record.finished_at or self.clock(),
                self.labels.log_title,
                record.exit_code if record.exit_code is not None else 1,
                format_hms(record.duration_s),
                record.container_id,
            )
        except OSError as e:
            logger.error("Writing log artifacts failed: {}", e)
            if record.status == ExecutionStatus.RUNNING:
                record.finalize(ARTIFACT_FAILURE_EXIT_CODE, self.clock())
            raise WrapperSetupError(f"Failed to write log artifacts in {config.log_dir}: {e}") from e
        finally:
            await writer.close()
            if record.finished:
                await summary.append_completion(record)

        result = ExecutionResult(
            record=record,
            paths=paths,
            error_log_kept=not writer.discard_empty_error_log(),
        )
        logger.info(
            "{} finished with exit code {} in {}",
            invocation.display,
            result.exit_code,
            result.duration,
        )
        if callbacks.on_complete:
            callbacks.on_complete(result)
        if result.error_log_kept:
            callbacks.warning(f"Errors were logged to: {paths.err}")

        if config.notify_email and not record.succeeded:
            result.notified = await self._notify(
                config.notify_email, namer.stem_prefix, record, summary, callbacks
            )
        return result

    def _prepare_log_dir(self, log_dir: Path) -> None:
        if log_dir.is_dir():
            return
        logger.debug("Creating log directory: {}", log_dir)
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise WrapperSetupError(f"Failed to create log directory: {log_dir}") from e

    async def _stream(
        self,
        invocation: Invocation,
        config: WrapperConfig,
        writer: LogArtifactWriter,
        record: ExecutionRecord,
        callbacks: WrapperCallbacks,
    ) -> None:
        async def on_stdout(line: str) -> None:
            await writer.append_stdout(line)
            record.count_stdout()
            callbacks.stdout(line)

        async def on_stderr(line: str) -> None:
            stamped = await writer.append_stderr(line)
            record.count_stderr(stamped)
            callbacks.stderr(line)

        outcome = await self.runner.stream(
            invocation,
            on_stdout,
            on_stderr,
            timeout_s=config.timeout_s,
            kill_grace_s=config.kill_grace_s,
        )
        record.finalize(outcome.exit_code, self.clock(), timed_out=outcome.timed_out)

    async def _launch_detached(
        self,
        invocation: Invocation,
        writer: LogArtifactWriter,
        record: ExecutionRecord,
        callbacks: WrapperCallbacks,
    ) -> None:
        captured = await self.runner.capture(invocation)
        if captured.exit_code == 0:
            await writer.append_stdout(f"Container started with ID: {captured.output}")
            record.count_stdout()
            callbacks.info(f"Container started with ID: {captured.output}")
            record.finalize(0, self.clock(), container_id=captured.output or None)
        else:
            stamped = await writer.append_stderr(f"Failed to start container: {captured.output}")
            record.count_stderr(stamped)
            callbacks.stderr(f"Failed to start container: {captured.output}")
            record.finalize(captured.exit_code, self.clock())

    async def _notify(
        self,
        recipient: str,
        stem_prefix: str,
        record: ExecutionRecord,
        summary: SummaryWriter,
        callbacks: WrapperCallbacks,
    ) -> bool:
        if self.notifier is None:
            callbacks.warning("No notifier configured, skipping email notification")
            return False

        subject = (
            f"[FAILED] {self.labels.notification_name}: {stem_prefix} - {current_hostname()}"
        )
        try:
            body = (
                f"{self.labels.log_title} failed with exit code: {record.exit_code}\n\n"
                f"{await summary.read()}"
            )
            await self.notifier.send(recipient, subject, body)
        except (NotificationError, OSError) as e:
            logger.warning("Notification to {} failed: {}", recipient, e)
            callbacks.warning(str(e))
            return False

        callbacks.info(f"Email notification sent to: {recipient}")
        return True
