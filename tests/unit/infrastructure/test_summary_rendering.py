from datetime import datetime, timedelta
from pathlib import Path

import pytest

from execwrap.domain.entities.execution_record import ExecutionRecord
from execwrap.domain.services.artifact_naming import ArtifactNamer
from execwrap.domain.value_objects.invocation import Invocation
from execwrap.infrastructure.artifacts.summary import (
    SummaryHeader,
    SummaryWriter,
    render_summary_completion,
    render_summary_header,
)

START = datetime(2025, 1, 6, 10, 0, 0)


def _finished(exit_code: int, errors: list[str] | None = None) -> ExecutionRecord:
    record = ExecutionRecord(invocation=Invocation(argv=("job",)))
    record.mark_running(START)
    for line in errors or []:
        record.count_stderr(line)
    record.finalize(exit_code, START + timedelta(seconds=3661))
    return record


def _header(tmp_path: Path) -> SummaryHeader:
    return SummaryHeader(
        title="Execution Summary",
        date=START,
        command_label="Command",
        command="job --flag",
        working_directory=tmp_path,
        user="ops",
        hostname="db01",
        paths=ArtifactNamer(tmp_path, "job").paths_for(START),
    )


def test_header_lists_invocation_metadata(tmp_path: Path) -> None:
    text = render_summary_header(_header(tmp_path))

    assert "Execution Summary" in text
    assert "Date: 2025-01-06 10:00:00" in text
    assert "Command: job --flag" in text
    assert f"Working Directory: {tmp_path}" in text
    assert "User: ops" in text
    assert "Hostname: db01" in text
    assert "Log File: " in text and "job_20250106_100000.log" in text
    assert "Error File: " in text and "job_20250106_100000.err" in text


def test_success_block() -> None:
    text = render_summary_completion(_finished(0))

    assert "Start Time: 2025-01-06 10:00:00" in text
    assert "End Time: 2025-01-06 11:01:01" in text
    assert "Duration: 01:01:01" in text
    assert "Exit Code: 0" in text
    assert "Status: SUCCESS" in text
    assert "Last Error Lines:" not in text


def test_failure_block_lists_last_error_lines() -> None:
    text = render_summary_completion(_finished(2, ["[2025-01-06 10:00:01] boom"]))

    assert "Status: FAILED" in text
    assert "Error Lines: 1" in text
    assert "Last Error Lines:\n[2025-01-06 10:00:01] boom" in text


def test_failure_without_stderr_has_no_error_block() -> None:
    text = render_summary_completion(_finished(1))

    assert "Status: FAILED" in text
    assert "Last Error Lines:" not in text


def test_unfinished_record_cannot_be_rendered() -> None:
    record = ExecutionRecord(invocation=Invocation(argv=("job",)))

    with pytest.raises(ValueError, match="not finalized"):
        render_summary_completion(record)


async def test_writer_appends_completion_to_header(tmp_path: Path) -> None:
    writer = SummaryWriter(tmp_path / "job.summary")

    await writer.write_header(_header(tmp_path))
    await writer.append_completion(_finished(0))
    text = await writer.read()

    assert text.index("Hostname: db01") < text.index("Status: SUCCESS")
    assert not list(tmp_path.glob(".tmp_*"))
