from execwrap.infrastructure.artifacts.log_artifacts import LogArtifactWriter
from execwrap.infrastructure.artifacts.retention import sweep_expired_artifacts
from execwrap.infrastructure.artifacts.summary import SummaryHeader, SummaryWriter

__all__ = ["LogArtifactWriter", "SummaryHeader", "SummaryWriter", "sweep_expired_artifacts"]
