from execwrap.domain.ports.notifier_port import NotifierPort
from execwrap.domain.ports.process_runner_port import (
    CapturedOutput,
    LineHandler,
    ProcessOutcome,
    ProcessRunnerPort,
)

__all__ = [
    "CapturedOutput",
    "LineHandler",
    "NotifierPort",
    "ProcessOutcome",
    "ProcessRunnerPort",
]
