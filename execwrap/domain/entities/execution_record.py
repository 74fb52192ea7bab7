from datetime import datetime

from pydantic import BaseModel

from execwrap.domain.value_objects.execution_status import ExecutionStatus, is_terminal_status
from execwrap.domain.value_objects.invocation import Invocation

LAST_ERROR_LINES = 10


class RecordStateError(RuntimeError):
    """Raised on an illegal lifecycle transition of an ExecutionRecord."""


class ExecutionRecord(BaseModel):
    """Lifecycle and outcome of one invocation.

    PENDING -> RUNNING on process start, RUNNING -> SUCCESS | FAILED on exit.
    Once finalized the record no longer accepts changes.
    """

    invocation: Invocation
    status: ExecutionStatus = ExecutionStatus.PENDING
    started_at: datetime | None = None
    finished_at: datetime | None = None
    exit_code: int | None = None
    stdout_lines: int = 0
    stderr_lines: int = 0
    last_error_lines: list[str] = []
    container_id: str | None = None
    timed_out: bool = False

    def mark_running(self, at: datetime) -> None:
        if self.status != ExecutionStatus.PENDING:
            raise RecordStateError(f"Cannot start execution in status {self.status.value}")
        self.started_at = at
        self.status = ExecutionStatus.RUNNING

    def count_stdout(self) -> None:
        self._require_running()
        self.stdout_lines += 1

    def count_stderr(self, timestamped_line: str) -> None:
        self._require_running()
        self.stderr_lines += 1
        self.last_error_lines.append(timestamped_line)
        if len(self.last_error_lines) > LAST_ERROR_LINES:
            del self.last_error_lines[0]

    def finalize(
        self,
        exit_code: int,
        at: datetime,
        *,
        container_id: str | None = None,
        timed_out: bool = False,
    ) -> None:
        self._require_running()
        self.finished_at = at
        self.exit_code = exit_code
        self.container_id = container_id
        self.timed_out = timed_out
        self.status = ExecutionStatus.SUCCESS if exit_code == 0 else ExecutionStatus.FAILED

    @property
    def finished(self) -> bool:
        return is_terminal_status(self.status)

    @property
    def succeeded(self) -> bool:
        return self.status == ExecutionStatus.SUCCESS

    @property
    def duration_s(self) -> int:
        """Whole-second clock delta between process start and exit."""
        if self.started_at is None or self.finished_at is None:
            return 0
        return max(0, int(self.finished_at.timestamp()) - int(self.started_at.timestamp()))

    def _require_running(self) -> None:
        if self.status != ExecutionStatus.RUNNING:
            raise RecordStateError(f"Execution record is {self.status.value}, not running")
