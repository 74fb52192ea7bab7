from execwrap.domain.entities.execution_record import (
    LAST_ERROR_LINES,
    ExecutionRecord,
    RecordStateError,
)

__all__ = ["LAST_ERROR_LINES", "ExecutionRecord", "RecordStateError"]
