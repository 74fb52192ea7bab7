import shutil

from loguru import logger

from execwrap.application.execution_wrapper import (
    Clock,
    ExecutionResult,
    ExecutionWrapper,
    WrapperCallbacks,
    WrapperLabels,
    WrapperSetupError,
    default_clock,
)
from execwrap.domain.ports.notifier_port import NotifierPort
from execwrap.domain.ports.process_runner_port import ProcessRunnerPort
from execwrap.domain.services.artifact_naming import default_image_prefix
from execwrap.domain.value_objects.container_spec import ContainerSpec
from execwrap.domain.value_objects.invocation import Invocation
from execwrap.domain.value_objects.wrapper_config import WrapperConfig

CONTAINER_LABELS = WrapperLabels(
    summary_title="Docker Container Execution Summary",
    log_title="Docker container execution",
    command_label="Docker Command",
    notification_name="Docker wrapper",
    execute_label="Executing Docker",
    console_subject="Docker container",
)


class ContainerRuntimeUnavailableError(WrapperSetupError):
    """Raised when the container runtime CLI or its daemon is unreachable."""


class ContainerWrapper:
    """Runs a container through ExecutionWrapper.

    In detached mode the result reflects only the `docker run -d` launch,
    not the container's eventual exit status.
    """

    def __init__(
        self,
        runner: ProcessRunnerPort,
        notifier: NotifierPort | None = None,
        clock: Clock = default_clock,
        runtime: str = "docker",
    ) -> None:
        self.runner = runner
        self.runtime = runtime
        self.wrapper = ExecutionWrapper(runner, notifier, clock, labels=CONTAINER_LABELS)

    async def check_runtime(self) -> None:
        if shutil.which(self.runtime) is None:
            raise ContainerRuntimeUnavailableError(
                f"{self.runtime} is not installed or not in PATH"
            )
        probe = await self.runner.capture(Invocation(argv=(self.runtime, "info")))
        if probe.exit_code != 0:
            logger.debug("{} info failed: {}", self.runtime, probe.output)
            raise ContainerRuntimeUnavailableError(
                f"{self.runtime} daemon is not running or not accessible"
            )

    async def execute(
        self,
        spec: ContainerSpec,
        config: WrapperConfig,
        callbacks: WrapperCallbacks | None = None,
    ) -> ExecutionResult:
        await self.check_runtime()
        return await self.wrapper.execute(
            spec.to_invocation(self.runtime),
            config,
            callbacks,
            default_prefix_name=default_image_prefix(spec.image),
            detached=spec.detach,
        )
