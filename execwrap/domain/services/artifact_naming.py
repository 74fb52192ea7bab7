import glob
import re
from datetime import datetime
from pathlib import Path

from pydantic import BaseModel

FILE_TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"
LINE_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

ARTIFACT_EXTENSIONS = ("log", "err", "summary")

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9_-]")


def sanitize_prefix(name: str) -> str:
    """Replace every character outside [A-Za-z0-9_-] with an underscore."""
    return _UNSAFE_CHARS.sub("_", name)


def default_prefix(executable: str) -> str:
    """Prefix derived from the basename of an executable path."""
    return sanitize_prefix(Path(executable).name)


def default_image_prefix(image: str) -> str:
    """Prefix derived from a whole image reference (registry/name:tag)."""
    return sanitize_prefix(image)


def format_line_timestamp(moment: datetime) -> str:
    return moment.strftime(LINE_TIMESTAMP_FORMAT)


def timestamp_line(moment: datetime, line: str) -> str:
    return f"[{format_line_timestamp(moment)}] {line}"


class ArtifactPaths(BaseModel, frozen=True):
    log: Path
    err: Path
    summary: Path


class ArtifactNamer:
    """Builds `{prefix}[_{tag}]_{YYYYMMDD_HHMMSS}.{ext}` artifact names."""

    def __init__(self, log_dir: Path, prefix: str, tag: str | None = None) -> None:
        self.log_dir = log_dir
        self.prefix = prefix
        self.tag = tag

    @property
    def stem_prefix(self) -> str:
        return f"{self.prefix}_{self.tag}" if self.tag else self.prefix

    def paths_for(self, started: datetime) -> ArtifactPaths:
        stem = f"{self.stem_prefix}_{started.strftime(FILE_TIMESTAMP_FORMAT)}"
        return ArtifactPaths(
            log=self.log_dir / f"{stem}.log",
            err=self.log_dir / f"{stem}.err",
            summary=self.log_dir / f"{stem}.summary",
        )

    def retention_patterns(self) -> list[str]:
        """Glob patterns matching every artifact of this prefix, any tag."""
        prefix = glob.escape(self.prefix)
        return [f"{prefix}_*.{ext}" for ext in ARTIFACT_EXTENSIONS]
