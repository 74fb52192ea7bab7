from pathlib import Path

from pydantic import BaseModel, Field, field_validator

DEFAULT_LOG_DIR = Path("/var/log/execution-wrapper")
DEFAULT_CONTAINER_LOG_DIR = Path("/var/log/docker-wrapper")
DEFAULT_RETENTION_DAYS = 30


class WrapperConfig(BaseModel, frozen=True):
    """Options shared by the command and container wrappers."""

    log_dir: Path = DEFAULT_LOG_DIR
    prefix: str | None = None
    tag: str | None = None
    retention_days: int = Field(default=DEFAULT_RETENTION_DAYS, ge=0)
    silent: bool = False
    verbose: bool = False
    notify_email: str | None = None
    timeout_s: float | None = Field(default=None, gt=0)
    kill_grace_s: float = Field(default=10.0, ge=0)

    @field_validator("prefix", "tag", "notify_email")
    @classmethod
    def _blank_is_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        return value or None

    @field_validator("notify_email")
    @classmethod
    def _looks_like_address(cls, value: str | None) -> str | None:
        if value is not None and "@" not in value:
            raise ValueError(f"'{value}' is not an email address")
        return value
