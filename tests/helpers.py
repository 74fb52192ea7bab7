import re
from datetime import datetime, timedelta
from pathlib import Path

from execwrap.domain.ports.process_runner_port import (
    CapturedOutput,
    LineHandler,
    ProcessOutcome,
    ProcessRunnerPort,
)
from execwrap.domain.value_objects.invocation import Invocation

TIMESTAMPED_LINE = re.compile(r"^\[\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\] ")


class StepClock:
    """Deterministic clock: starts at `start` and advances `step` per call."""

    def __init__(self, start: datetime, step: timedelta = timedelta(0)) -> None:
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + self.step
        return value


class ScriptedRunner(ProcessRunnerPort):
    """Replays scripted output instead of spawning processes."""

    def __init__(
        self,
        stdout: list[str] | None = None,
        stderr: list[str] | None = None,
        exit_code: int = 0,
        captures: list[CapturedOutput] | None = None,
    ) -> None:
        self.stdout = stdout or []
        self.stderr = stderr or []
        self.exit_code = exit_code
        self.captures = list(captures or [])
        self.streamed: list[Invocation] = []
        self.captured: list[Invocation] = []

    async def stream(
        self,
        invocation: Invocation,
        on_stdout: LineHandler,
        on_stderr: LineHandler,
        timeout_s: float | None = None,
        kill_grace_s: float = 10.0,
    ) -> ProcessOutcome:
        self.streamed.append(invocation)
        for line in self.stdout:
            await on_stdout(line)
        for line in self.stderr:
            await on_stderr(line)
        return ProcessOutcome(exit_code=self.exit_code)

    async def capture(self, invocation: Invocation) -> CapturedOutput:
        self.captured.append(invocation)
        return self.captures.pop(0)


def timestamped_lines(path: Path) -> list[str]:
    return [line for line in path.read_text().splitlines() if TIMESTAMPED_LINE.match(line)]


def only_artifact(log_dir: Path, extension: str) -> Path:
    matches = sorted(log_dir.glob(f"*.{extension}"))
    assert len(matches) == 1, f"expected one .{extension} file, found {matches}"
    return matches[0]
