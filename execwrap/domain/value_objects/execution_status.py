from enum import Enum


class ExecutionStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"


def is_terminal_status(status: ExecutionStatus) -> bool:
    return status in (ExecutionStatus.SUCCESS, ExecutionStatus.FAILED)
