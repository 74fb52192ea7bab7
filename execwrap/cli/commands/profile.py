import typer
from rich.console import Console
from rich.table import Table

from execwrap.cli.theme import theme
from execwrap.cli.utils import error_exit
from execwrap.domain.value_objects.system_profile import SystemProfile
from execwrap.infrastructure.system.os_detect import UnsupportedSystemError, detect_system_profile

console = Console()


def render_profile(profile: SystemProfile) -> Table:
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Field", style=theme.TABLE_LABEL)
    table.add_column("Value", style=theme.TABLE_VALUE)
    table.add_row("OS", profile.os_id)
    table.add_row("Version", profile.version or "-")
    table.add_row("Codename", profile.codename or "-")
    table.add_row("Family", profile.family.value)
    table.add_row("Package manager", profile.package_manager.value)
    table.add_row("Service manager", profile.service_manager)
    return table


def show_profile(
    as_json: bool = typer.Option(False, "--json", help="Print the profile as JSON"),
) -> None:
    """Show the detected operating system profile."""
    try:
        profile = detect_system_profile()
    except UnsupportedSystemError as e:
        error_exit(str(e))

    if as_json:
        typer.echo(profile.model_dump_json(indent=2))
        return

    console.print(f"[{theme.HEADER}]System Profile[/]")
    console.print(render_profile(profile))
