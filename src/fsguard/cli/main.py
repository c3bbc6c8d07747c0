"""
Command-line interface for fsguard.

Resolves patterns, performs bounded reads and checks permissions from the
shell, using the same settings the agent runs with.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from fsguard import __version__
from fsguard.filesystem.config import FileSystemSettings, GlobLimits, configure
from fsguard.filesystem.exceptions import FileSystemError
from fsguard.filesystem.globbing import resolve_file_pattern
from fsguard.filesystem.permissions import check_permissions
from fsguard.filesystem.reader import BoundedFileReader

# Load environment variables
load_dotenv()

console = Console()
err_console = Console(stderr=True)

KIND_LIMITS = {
    "files": GlobLimits.FILES,
    "folders": GlobLimits.FOLDERS,
    "all": GlobLimits.ALL,
}


def setup_logging(verbose: bool = False) -> None:
    """Setup rich logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, rich_tracebacks=True)],
    )


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML or JSON settings file (default: environment)",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path], verbose: bool):
    """fsguard - bounded, permission-aware filesystem inspection."""
    setup_logging(verbose)
    if config_path is not None:
        settings = FileSystemSettings.from_file(config_path)
    else:
        settings = FileSystemSettings()
    ctx.obj = configure(settings)


@cli.command()
@click.argument("pattern")
@click.option(
    "--kind",
    "-k",
    type=click.Choice(list(KIND_LIMITS)),
    default="all",
    help="Kind of match to return (default: all)",
)
@click.option("--no-canon", is_flag=True, help="Do not canonicalize the pattern base")
def resolve(pattern: str, kind: str, no_canon: bool):
    """
    Resolve a SQL-style glob PATTERN.

    Examples:

        # Every .conf file directly in /etc
        fsguard resolve '/etc/%.conf' --kind files

        # Every directory below /usr/lib/modules
        fsguard resolve '/usr/lib/modules/**' --kind folders
    """
    limits = KIND_LIMITS[kind]
    if no_canon:
        limits |= GlobLimits.NO_CANON

    for match in resolve_file_pattern(pattern, limits):
        click.echo(match)


@cli.command()
@click.argument("path", type=click.Path(path_type=Path))
@click.option("--dry-run", is_flag=True, help="Only check limits; print the canonical path")
@click.option("--forensic", is_flag=True, help="Restore atime/mtime after reading")
@click.option("--size", type=int, default=0, help="Expected size for special files")
@click.option("--blocking", is_flag=True, help="Open in blocking mode (pipes)")
@click.pass_obj
def read(
    settings: FileSystemSettings,
    path: Path,
    dry_run: bool,
    forensic: bool,
    size: int,
    blocking: bool,
):
    """Read PATH within the configured read ceiling and write it to stdout."""
    reader = BoundedFileReader(settings)
    stdout = sys.stdout.buffer

    try:
        result = reader.read_file(
            path,
            stdout.write,
            size=size,
            dry_run=dry_run,
            preserve_time=forensic,
            blocking=blocking,
        )
    except FileSystemError as e:
        err_console.print(f"[bold red]{e.kind.value}:[/bold red] {escape(str(e))}", soft_wrap=True)
        sys.exit(1)

    stdout.flush()
    if result.dry_run:
        click.echo(result.path)


@cli.command()
@click.argument("directory", type=click.Path(path_type=Path))
@click.argument("path", type=click.Path(path_type=Path))
@click.option("--executable", "-x", is_flag=True, help="Require a safe executable")
@click.pass_obj
def check(settings: FileSystemSettings, directory: Path, path: Path, executable: bool):
    """Check whether PATH, found in DIRECTORY, has safe permissions."""
    decision = check_permissions(directory, path, executable, settings)

    if decision.safe:
        console.print(f"[green]safe[/green] ({decision.rule.value})", soft_wrap=True)
    else:
        console.print(f"[red]unsafe[/red] ({decision.rule.value})", soft_wrap=True)
        sys.exit(1)


@cli.command()
@click.pass_obj
def config(settings: FileSystemSettings):
    """Show the effective settings."""
    table = Table(title="fsguard settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    for name, value in settings.model_dump().items():
        table.add_row(name, str(value))

    console.print(table)


if __name__ == "__main__":
    cli()
