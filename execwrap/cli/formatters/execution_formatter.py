"""Console rendering of wrapper progress."""

from rich.console import Console
from rich.text import Text

from execwrap.application.execution_wrapper import (
    ExecutionResult,
    WrapperCallbacks,
    WrapperLabels,
)
from execwrap.cli.theme import theme


def _print_raw(console: Console, text: Text | str) -> None:
    # Wrapped output is printed verbatim: no markup, emoji or highlighting
    console.print(text, markup=False, emoji=False, highlight=False, soft_wrap=True)


def format_completion(result: ExecutionResult, labels: WrapperLabels) -> Text:
    if result.record.succeeded:
        return Text(
            f"[SUCCESS] {labels.console_subject} completed successfully "
            f"(Duration: {result.duration})",
            style=theme.SUCCESS,
        )
    message = (
        f"[FAILED] {labels.console_subject} failed with exit code: {result.exit_code} "
        f"(Duration: {result.duration})"
    )
    if result.record.timed_out:
        message += " - timed out"
    return Text(message, style=theme.ERROR)


def create_console_callbacks(
    console: Console,
    labels: WrapperLabels,
    silent: bool = False,
) -> WrapperCallbacks:
    """Mirror both streams and status lines to the console unless silent."""
    if silent:
        return WrapperCallbacks()

    def on_info(message: str) -> None:
        _print_raw(console, Text(f"[INFO] {message}", style=theme.INFO))

    def on_stdout(line: str) -> None:
        _print_raw(console, line)

    def on_stderr(line: str) -> None:
        _print_raw(console, Text.assemble(("[STDERR]", theme.STDERR_MARKER), " ", line))

    def on_warning(message: str) -> None:
        _print_raw(console, Text(f"[WARNING] {message}", style=theme.WARNING))

    def on_complete(result: ExecutionResult) -> None:
        _print_raw(console, format_completion(result, labels))

    return WrapperCallbacks(
        on_info=on_info,
        on_stdout=on_stdout,
        on_stderr=on_stderr,
        on_warning=on_warning,
        on_complete=on_complete,
    )
