from execwrap.cli.formatters.execution_formatter import (
    create_console_callbacks,
    format_completion,
)

__all__ = ["create_console_callbacks", "format_completion"]
