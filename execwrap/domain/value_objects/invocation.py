from pathlib import Path

from pydantic import BaseModel, field_validator


class Invocation(BaseModel, frozen=True):
    """A command to run: executable, arguments and working directory."""

    argv: tuple[str, ...]
    cwd: Path | None = None
    env: dict[str, str] = {}

    @field_validator("argv")
    @classmethod
    def _require_executable(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if not value or not value[0].strip():
            raise ValueError("No command specified. Use -- command [args]")
        return value

    @property
    def executable(self) -> str:
        return self.argv[0]

    @property
    def display(self) -> str:
        """Command text as shown in logs and summaries."""
        return " ".join(self.argv)
