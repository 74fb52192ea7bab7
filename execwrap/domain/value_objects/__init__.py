from execwrap.domain.value_objects.container_spec import ContainerSpec
from execwrap.domain.value_objects.execution_status import ExecutionStatus, is_terminal_status
from execwrap.domain.value_objects.invocation import Invocation
from execwrap.domain.value_objects.system_profile import (
    OsFamily,
    PackageManagerKind,
    SystemProfile,
)
from execwrap.domain.value_objects.wrapper_config import (
    DEFAULT_CONTAINER_LOG_DIR,
    DEFAULT_LOG_DIR,
    DEFAULT_RETENTION_DAYS,
    WrapperConfig,
)

__all__ = [
    "DEFAULT_CONTAINER_LOG_DIR",
    "DEFAULT_LOG_DIR",
    "DEFAULT_RETENTION_DAYS",
    "ContainerSpec",
    "ExecutionStatus",
    "Invocation",
    "OsFamily",
    "PackageManagerKind",
    "SystemProfile",
    "WrapperConfig",
    "is_terminal_status",
]
