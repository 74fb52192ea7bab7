import asyncio
import contextlib
import os
import signal

from loguru import logger

from execwrap.domain.ports.process_runner_port import (
    CapturedOutput,
    LineHandler,
    ProcessOutcome,
    ProcessRunnerPort,
)
from execwrap.domain.value_objects.invocation import Invocation

# Exit codes a POSIX shell reports for these conditions
TIMEOUT_EXIT_CODE = 124
NOT_EXECUTABLE_EXIT_CODE = 126
COMMAND_NOT_FOUND_EXIT_CODE = 127
SIGNAL_EXIT_BASE = 128

# StreamReader buffer limit; longer lines are delivered in chunks of this size
STREAM_LIMIT = 16 * 1024 * 1024


def normalize_returncode(returncode: int) -> int:
    """Map asyncio's negative signal return codes to the shell's 128+N form."""
    if returncode < 0:
        return SIGNAL_EXIT_BASE - returncode
    return returncode


def _spawn_failure(invocation: Invocation, error: OSError) -> tuple[int, str]:
    if isinstance(error, FileNotFoundError):
        return COMMAND_NOT_FOUND_EXIT_CODE, f"{invocation.executable}: command not found"
    if isinstance(error, PermissionError):
        return NOT_EXECUTABLE_EXIT_CODE, f"{invocation.executable}: permission denied"
    return NOT_EXECUTABLE_EXIT_CODE, f"{invocation.executable}: {error}"


def _environment(invocation: Invocation) -> dict[str, str] | None:
    if not invocation.env:
        return None
    env = dict(os.environ)
    env.update(invocation.env)
    return env


def _decode(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace").rstrip("\r\n")


async def _pump(stream: asyncio.StreamReader, handler: LineHandler) -> None:
    """Feed every line of `stream` to `handler` until EOF.

    A line longer than the reader's limit is handed over in buffer-sized
    chunks, each one delivered as a line of its own.
    """
    split_line = False
    while True:
        try:
            raw = await stream.readuntil(b"\n")
        except asyncio.IncompleteReadError as e:
            raw = e.partial
        except asyncio.LimitOverrunError as e:
            raw = await stream.read(max(e.consumed, 1))
            split_line = True
            await handler(_decode(raw))
            continue

        if not raw:
            return
        if split_line and raw == b"\n":
            # Terminator of a line already delivered in chunks
            split_line = False
            continue
        split_line = False
        await handler(_decode(raw))


def _signal(proc: asyncio.subprocess.Process, sig: signal.Signals, grouped: bool) -> None:
    # With start_new_session the child leads its own group, so pid == pgid
    with contextlib.suppress(ProcessLookupError):
        if grouped:
            os.killpg(proc.pid, sig)
        else:
            proc.send_signal(sig)


def _remaining(deadline: float | None) -> float | None:
    if deadline is None:
        return None
    return max(0.0, deadline - asyncio.get_running_loop().time())


class AsyncStreamRunner(ProcessRunnerPort):
    """Spawns processes with asyncio and reads stdout/stderr independently.

    The exit code always comes from the child's own wait() call; the line
    readers only feed handlers and never influence it. A timeout covers
    both the child and its output pipes, so background processes that keep
    the pipes open are terminated with the rest of the process group.
    """

    def __init__(self, stream_limit: int = STREAM_LIMIT) -> None:
        self.stream_limit = stream_limit

    async def stream(
        self,
        invocation: Invocation,
        on_stdout: LineHandler,
        on_stderr: LineHandler,
        timeout_s: float | None = None,
        kill_grace_s: float = 10.0,
    ) -> ProcessOutcome:
        grouped = timeout_s is not None
        try:
            proc = await asyncio.create_subprocess_exec(
                *invocation.argv,
                cwd=str(invocation.cwd) if invocation.cwd else None,
                env=_environment(invocation),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                limit=self.stream_limit,
                # Own process group only when we may need to kill it
                start_new_session=grouped,
            )
        except OSError as e:
            exit_code, message = _spawn_failure(invocation, e)
            logger.debug("Failed to spawn {}: {}", invocation.executable, e)
            await on_stderr(message)
            return ProcessOutcome(exit_code=exit_code)

        logger.debug("Spawned pid {} for {}", proc.pid, invocation.display)
        assert proc.stdout is not None and proc.stderr is not None
        pumps = [
            asyncio.create_task(_pump(proc.stdout, on_stdout)),
            asyncio.create_task(_pump(proc.stderr, on_stderr)),
        ]
        readers = asyncio.gather(*pumps)
        deadline = None if timeout_s is None else asyncio.get_running_loop().time() + timeout_s

        try:
            await asyncio.wait_for(asyncio.shield(readers), timeout=_remaining(deadline))
            returncode = await asyncio.wait_for(proc.wait(), timeout=_remaining(deadline))
        except TimeoutError:
            logger.warning(
                "Command timed out after {}s, terminating process group {}",
                timeout_s,
                proc.pid,
            )
            await self._terminate(proc, readers, pumps, kill_grace_s, grouped)
            return ProcessOutcome(exit_code=TIMEOUT_EXIT_CODE, timed_out=True)
        except (Exception, asyncio.CancelledError):
            # Nobody is left to drain the pipes; stop the child before propagating
            logger.warning("Output handling failed, killing pid {}", proc.pid)
            for task in pumps:
                task.cancel()
            _signal(proc, signal.SIGKILL, grouped)
            # wait() also waits for the pipes, which an orphan may still hold
            with contextlib.suppress(TimeoutError):
                await asyncio.wait_for(proc.wait(), timeout=kill_grace_s)
            raise

        return ProcessOutcome(exit_code=normalize_returncode(returncode))

    async def capture(self, invocation: Invocation) -> CapturedOutput:
        try:
            proc = await asyncio.create_subprocess_exec(
                *invocation.argv,
                cwd=str(invocation.cwd) if invocation.cwd else None,
                env=_environment(invocation),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except OSError as e:
            exit_code, message = _spawn_failure(invocation, e)
            return CapturedOutput(exit_code=exit_code, output=message)

        stdout, _ = await proc.communicate()
        return CapturedOutput(
            exit_code=normalize_returncode(proc.returncode or 0),
            output=stdout.decode("utf-8", errors="replace").strip(),
        )

    async def _terminate(
        self,
        proc: asyncio.subprocess.Process,
        readers: "asyncio.Future[list[None]]",
        pumps: list["asyncio.Task[None]"],
        grace_s: float,
        grouped: bool,
    ) -> None:
        """SIGTERM the process group, then SIGKILL once the grace period ends.

        The readers get one more grace period after SIGKILL; output still
        held open by processes outside the group is abandoned.
        """

        async def settled() -> None:
            await asyncio.shield(readers)
            await proc.wait()

        _signal(proc, signal.SIGTERM, grouped)
        try:
            await asyncio.wait_for(settled(), timeout=grace_s)
            return
        except TimeoutError:
            logger.warning("Process group {} ignored SIGTERM, sending SIGKILL", proc.pid)

        _signal(proc, signal.SIGKILL, grouped)
        try:
            await asyncio.wait_for(settled(), timeout=grace_s)
        except TimeoutError:
            logger.warning("Output of pid {} still open after SIGKILL, abandoning it", proc.pid)
            for task in pumps:
                task.cancel()
            await asyncio.gather(*pumps, return_exceptions=True)
