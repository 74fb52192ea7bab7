from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable

from pydantic import BaseModel

from execwrap.domain.value_objects.invocation import Invocation

# Receives one decoded line without its trailing newline
LineHandler = Callable[[str], Awaitable[None]]


class ProcessOutcome(BaseModel):
    """Exit status of a streamed process."""

    exit_code: int
    timed_out: bool = False


class CapturedOutput(BaseModel):
    """Exit status and combined output of a short-lived process."""

    exit_code: int
    output: str


class ProcessRunnerPort(ABC):
    """Port for spawning processes."""

    @abstractmethod
    async def stream(
        self,
        invocation: Invocation,
        on_stdout: LineHandler,
        on_stderr: LineHandler,
        timeout_s: float | None = None,
        kill_grace_s: float = 10.0,
    ) -> ProcessOutcome:
        """Run to completion, feeding each output line to its stream handler."""

    @abstractmethod
    async def capture(self, invocation: Invocation) -> CapturedOutput:
        """Run to completion and return stdout and stderr combined."""
