from datetime import datetime
from pathlib import Path

import aiofiles
from pydantic import BaseModel

from execwrap.domain.entities.execution_record import ExecutionRecord
from execwrap.domain.services.artifact_naming import ArtifactPaths, format_line_timestamp
from execwrap.infrastructure.artifacts.log_artifacts import DIVIDER, SEPARATOR
from execwrap.infrastructure.utils.formatting import format_hms


class SummaryHeader(BaseModel, frozen=True):
    """Invocation metadata written before the command starts."""

    title: str
    date: datetime
    command_label: str
    command: str
    working_directory: Path
    user: str
    hostname: str
    paths: ArtifactPaths


def render_summary_header(header: SummaryHeader) -> str:
    lines = [
        SEPARATOR,
        header.title,
        SEPARATOR,
        f"Date: {format_line_timestamp(header.date)}",
        f"{header.command_label}: {header.command}",
        f"Working Directory: {header.working_directory}",
        f"User: {header.user}",
        f"Hostname: {header.hostname}",
        f"Log File: {header.paths.log}",
        f"Error File: {header.paths.err}",
        DIVIDER,
    ]
    return "\n".join(lines) + "\n"


def render_summary_completion(record: ExecutionRecord) -> str:
    """Completion block: timing, exit code, line counts, status."""
    if not record.finished or record.started_at is None or record.finished_at is None:
        raise ValueError("Execution record is not finalized")

    lines = [
        f"Start Time: {format_line_timestamp(record.started_at)}",
        f"End Time: {format_line_timestamp(record.finished_at)}",
        f"Duration: {format_hms(record.duration_s)}",
        f"Exit Code: {record.exit_code}",
    ]
    if record.container_id:
        lines.append(f"Container ID: {record.container_id}")
    if record.timed_out:
        lines.append("Timed Out: yes")
    lines += [
        DIVIDER,
        f"Output Lines: {record.stdout_lines}",
        f"Error Lines: {record.stderr_lines}",
    ]
    if record.succeeded:
        lines.append("Status: SUCCESS")
    else:
        lines.append("Status: FAILED")
        if record.last_error_lines:
            lines += [DIVIDER, "Last Error Lines:", *record.last_error_lines]
    lines.append(SEPARATOR)
    return "\n".join(lines) + "\n"


class SummaryWriter:
    def __init__(self, path: Path) -> None:
        self.path = path

    async def write_header(self, header: SummaryHeader) -> None:
        async with aiofiles.open(self.path, mode="w", encoding="utf-8") as f:
            await f.write(render_summary_header(header))

    async def append_completion(self, record: ExecutionRecord) -> None:
        async with aiofiles.open(self.path, mode="a", encoding="utf-8") as f:
            await f.write(render_summary_completion(record))

    async def read(self) -> str:
        async with aiofiles.open(self.path, encoding="utf-8") as f:
            return await f.read()
