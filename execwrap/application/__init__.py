from execwrap.application.container_wrapper import (
    CONTAINER_LABELS,
    ContainerRuntimeUnavailableError,
    ContainerWrapper,
)
from execwrap.application.execution_wrapper import (
    COMMAND_LABELS,
    ExecutionResult,
    ExecutionWrapper,
    WrapperCallbacks,
    WrapperLabels,
    WrapperSetupError,
)

__all__ = [
    "COMMAND_LABELS",
    "CONTAINER_LABELS",
    "ContainerRuntimeUnavailableError",
    "ContainerWrapper",
    "ExecutionResult",
    "ExecutionWrapper",
    "WrapperCallbacks",
    "WrapperLabels",
    "WrapperSetupError",
]
