from datetime import datetime, timedelta
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from execwrap.application.execution_wrapper import (
    ExecutionWrapper,
    WrapperCallbacks,
    WrapperSetupError,
)
from execwrap.domain.value_objects.execution_status import ExecutionStatus
from execwrap.domain.value_objects.invocation import Invocation
from execwrap.domain.value_objects.wrapper_config import WrapperConfig
from execwrap.infrastructure.notify.mail_notifier import NotificationError
from tests.helpers import ScriptedRunner, StepClock, only_artifact


class RecordingCallbacks:
    def __init__(self) -> None:
        self.info: list[str] = []
        self.stdout: list[str] = []
        self.stderr: list[str] = []
        self.warnings: list[str] = []
        self.completed = 0

    def build(self) -> WrapperCallbacks:
        return WrapperCallbacks(
            on_info=self.info.append,
            on_stdout=self.stdout.append,
            on_stderr=self.stderr.append,
            on_warning=self.warnings.append,
            on_complete=lambda _result: self._complete(),
        )

    def _complete(self) -> None:
        self.completed += 1


class TestExecutionWrapper:
    async def test_success_writes_artifacts(
        self, config: WrapperConfig, fixed_clock: StepClock, log_dir: Path
    ) -> None:
        runner = ScriptedRunner(stdout=["a", "b"])
        wrapper = ExecutionWrapper(runner, clock=fixed_clock)

        result = await wrapper.execute(Invocation(argv=("printf", "a\\nb\\n")), config)

        assert result.exit_code == 0
        assert result.record.status == ExecutionStatus.SUCCESS
        assert result.paths.log == log_dir / "printf_20250106_123045.log"
        assert not result.error_log_kept
        assert not result.paths.err.exists()
        summary = result.paths.summary.read_text()
        assert "Exit Code: 0" in summary
        assert "Status: SUCCESS" in summary

    async def test_callbacks_mirror_streams(
        self, config: WrapperConfig, fixed_clock: StepClock
    ) -> None:
        runner = ScriptedRunner(stdout=["out"], stderr=["err"], exit_code=1)
        recorder = RecordingCallbacks()

        await ExecutionWrapper(runner, clock=fixed_clock).execute(
            Invocation(argv=("job",)), config, recorder.build()
        )

        assert recorder.stdout == ["out"]
        assert recorder.stderr == ["err"]
        assert recorder.info[0] == "Executing: job"
        assert recorder.completed == 1
        assert any("Errors were logged to" in w for w in recorder.warnings)

    async def test_prefix_and_tag_from_config(
        self, log_dir: Path, fixed_clock: StepClock
    ) -> None:
        config = WrapperConfig(log_dir=log_dir, prefix="mybackup", tag="daily")

        result = await ExecutionWrapper(ScriptedRunner(), clock=fixed_clock).execute(
            Invocation(argv=("rsync",)), config
        )

        assert result.paths.summary.name == "mybackup_daily_20250106_123045.summary"

    async def test_duration_from_clock(self, config: WrapperConfig, log_dir: Path) -> None:
        start = datetime(2025, 1, 6)
        clock = StepClock(start, timedelta(seconds=30))

        result = await ExecutionWrapper(ScriptedRunner(), clock=clock).execute(
            Invocation(argv=("job",)), config
        )

        assert result.record.started_at == start
        assert result.duration == "00:00:30"
        assert "Duration: 00:00:30" in result.paths.summary.read_text()

    async def test_missing_working_directory_is_setup_error(
        self, config: WrapperConfig, tmp_path: Path
    ) -> None:
        runner = ScriptedRunner()

        with pytest.raises(WrapperSetupError, match="Working directory"):
            await ExecutionWrapper(runner).execute(
                Invocation(argv=("job",), cwd=tmp_path / "missing"), config
            )

        assert runner.streamed == []

    async def test_uncreatable_log_dir_is_setup_error(self, tmp_path: Path) -> None:
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        runner = ScriptedRunner()

        with pytest.raises(WrapperSetupError, match="Failed to create log directory"):
            await ExecutionWrapper(runner).execute(
                Invocation(argv=("job",)), WrapperConfig(log_dir=blocker / "logs")
            )

        assert runner.streamed == []

    async def test_creates_missing_log_dir(self, tmp_path: Path, fixed_clock: StepClock) -> None:
        log_dir = tmp_path / "nested" / "logs"

        result = await ExecutionWrapper(ScriptedRunner(), clock=fixed_clock).execute(
            Invocation(argv=("job",)), WrapperConfig(log_dir=log_dir)
        )

        assert result.paths.log.parent == log_dir
        assert only_artifact(log_dir, "log") == result.paths.log

    async def test_write_failure_mid_run_still_completes_summary(
        self, config: WrapperConfig, fixed_clock: StepClock, log_dir: Path
    ) -> None:
        disk_full = AsyncMock(side_effect=OSError(28, "No space left on device"))
        runner = ScriptedRunner(stdout=["a"])

        with (
            patch(
                "execwrap.application.execution_wrapper.LogArtifactWriter.append_stdout",
                disk_full,
            ),
            pytest.raises(WrapperSetupError, match="No space left"),
        ):
            await ExecutionWrapper(runner, clock=fixed_clock).execute(
                Invocation(argv=("job",)), config
            )

        summary = only_artifact(log_dir, "summary").read_text()
        assert "Exit Code: 1" in summary
        assert "Status: FAILED" in summary


class TestNotification:
    async def test_failure_triggers_notification(
        self, log_dir: Path, fixed_clock: StepClock
    ) -> None:
        notifier = AsyncMock()
        config = WrapperConfig(log_dir=log_dir, notify_email="admin@example.com")
        runner = ScriptedRunner(stderr=["boom"], exit_code=2)

        result = await ExecutionWrapper(runner, notifier, clock=fixed_clock).execute(
            Invocation(argv=("backup.sh",)), config
        )

        assert result.notified
        notifier.send.assert_awaited_once()
        recipient, subject, body = notifier.send.await_args.args
        assert recipient == "admin@example.com"
        assert subject.startswith("[FAILED] Execution wrapper: backup_sh - ")
        assert "failed with exit code: 2" in body
        assert "Status: FAILED" in body

    async def test_success_does_not_notify(self, log_dir: Path, fixed_clock: StepClock) -> None:
        notifier = AsyncMock()
        config = WrapperConfig(log_dir=log_dir, notify_email="admin@example.com")

        result = await ExecutionWrapper(ScriptedRunner(), notifier, clock=fixed_clock).execute(
            Invocation(argv=("job",)), config
        )

        assert not result.notified
        notifier.send.assert_not_awaited()

    async def test_dispatch_failure_is_only_a_warning(
        self, log_dir: Path, fixed_clock: StepClock
    ) -> None:
        notifier = AsyncMock()
        notifier.send.side_effect = NotificationError("Mail command not found")
        config = WrapperConfig(log_dir=log_dir, notify_email="admin@example.com")
        recorder = RecordingCallbacks()

        result = await ExecutionWrapper(
            ScriptedRunner(exit_code=4), notifier, clock=fixed_clock
        ).execute(Invocation(argv=("job",)), config, recorder.build())

        assert result.exit_code == 4
        assert result.record.status == ExecutionStatus.FAILED
        assert not result.notified
        assert "Mail command not found" in recorder.warnings

    async def test_unreadable_summary_is_only_a_warning(
        self, log_dir: Path, fixed_clock: StepClock
    ) -> None:
        notifier = AsyncMock()
        config = WrapperConfig(log_dir=log_dir, notify_email="admin@example.com")
        recorder = RecordingCallbacks()

        with patch(
            "execwrap.application.execution_wrapper.SummaryWriter.read",
            AsyncMock(side_effect=PermissionError(13, "Permission denied")),
        ):
            result = await ExecutionWrapper(
                ScriptedRunner(exit_code=4), notifier, clock=fixed_clock
            ).execute(Invocation(argv=("job",)), config, recorder.build())

        assert result.exit_code == 4
        assert not result.notified
        notifier.send.assert_not_awaited()
        assert any("Permission denied" in w for w in recorder.warnings)
