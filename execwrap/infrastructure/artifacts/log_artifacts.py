from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from types import TracebackType

import aiofiles
from aiofiles.threadpool.text import AsyncTextIOWrapper
from loguru import logger

from execwrap.domain.services.artifact_naming import (
    ArtifactPaths,
    format_line_timestamp,
    timestamp_line,
)

Clock = Callable[[], datetime]

SEPARATOR = "=" * 67
DIVIDER = "-" * 67


class LogArtifactWriter:
    """Owns the output (.log) and error (.err) artifacts of one invocation.

    The error artifact only ever receives timestamped stderr lines, so an
    invocation without stderr leaves it at zero bytes.
    """

    def __init__(self, paths: ArtifactPaths, clock: Clock) -> None:
        self.paths = paths
        self.clock = clock
        self._log: AsyncTextIOWrapper | None = None
        self._err: AsyncTextIOWrapper | None = None

    async def open(self) -> None:
        self._log = await aiofiles.open(self.paths.log, mode="w", encoding="utf-8")
        try:
            self._err = await aiofiles.open(self.paths.err, mode="w", encoding="utf-8")
        except OSError:
            await self._log.close()
            self._log = None
            raise

    async def close(self) -> None:
        for handle in (self._log, self._err):
            if handle is not None:
                await handle.close()
        self._log = None
        self._err = None

    async def __aenter__(self) -> LogArtifactWriter:
        await self.open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def write_log_header(
        self, started: datetime, title: str, command_label: str, command: str
    ) -> None:
        await self._write_log(
            "\n".join(
                [
                    SEPARATOR,
                    f"{title} started at: {format_line_timestamp(started)}",
                    f"{command_label}: {command}",
                    SEPARATOR,
                    "",
                    "",
                ]
            )
        )

    async def append_stdout(self, line: str) -> str:
        stamped = timestamp_line(self.clock(), line)
        await self._write_log(stamped + "\n")
        return stamped

    async def append_stderr(self, line: str) -> str:
        stamped = timestamp_line(self.clock(), line)
        if self._err is None:
            raise RuntimeError("Error artifact is not open")
        await self._err.write(stamped + "\n")
        await self._err.flush()
        return stamped

    async def write_log_footer(
        self,
        finished: datetime,
        title: str,
        exit_code: int,
        duration: str,
        container_id: str | None = None,
    ) -> None:
        lines = [
            "",
            SEPARATOR,
            f"{title} completed at: {format_line_timestamp(finished)}",
            f"Exit code: {exit_code}",
            f"Duration: {duration}",
        ]
        if container_id:
            lines.append(f"Container ID: {container_id}")
        lines.append(SEPARATOR)
        await self._write_log("\n".join(lines) + "\n")

    def discard_empty_error_log(self) -> bool:
        """Delete the error artifact if nothing was written to it."""
        err_path: Path = self.paths.err
        if err_path.exists() and err_path.stat().st_size == 0:
            err_path.unlink()
            logger.debug("No errors logged, removed empty error file {}", err_path)
            return True
        return False

    async def _write_log(self, text: str) -> None:
        if self._log is None:
            raise RuntimeError("Output artifact is not open")
        await self._log.write(text)
        await self._log.flush()
