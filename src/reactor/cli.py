"""Reactor CLI entry point."""

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from reactor.config import ReactorConfig
from reactor.context import RuntimeContext, executable_extension
from reactor.errors import ReactorError
from reactor.reactor import Reactor
from reactor.scanner import LocalVersionScanner

console = Console()


def setup_logging(verbose: bool = False) -> None:
    """Configure logging with rich handler."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, console=console)],
    )


def build_context(name: str, install_dir: str | None, executable: str | None) -> RuntimeContext:
    """Describe the installation the command operates on.

    Without ``--executable`` the canonical executable inside the install
    directory is assumed to be the running program.
    """
    root = Path(install_dir) if install_dir else Path.cwd()
    if executable:
        executable_path = Path(executable)
    else:
        executable_path = root / f"{name}{executable_extension(sys.platform)}"
    return RuntimeContext(executable_path=executable_path, install_dir=root, platform=sys.platform)


install_dir_option = click.option(
    "--install-dir",
    type=click.Path(file_okay=False),
    help="Installation directory (default: current directory)",
)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Reactor - self-updating application runtime."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    setup_logging(verbose)


@cli.command()
@click.argument("name")
@install_dir_option
def scan(name: str, install_dir: str | None) -> None:
    """List versioned builds of NAME in the installation directory."""
    try:
        context = build_context(name, install_dir, None)
        builds = LocalVersionScanner(name, context).scan()
    except ReactorError as err:
        console.print(f"[red]Error: {err}[/red]")
        raise SystemExit(1) from err

    if not builds:
        console.print(f"[yellow]No versioned builds of {name} found[/yellow]")
        return

    table = Table(title=f"Local builds of {name}")
    table.add_column("Version", style="cyan")
    table.add_column("Path")
    for build in reversed(builds):
        table.add_row(str(build.version), str(build.path))
    console.print(table)


@cli.command()
@click.argument("name")
@click.argument("version")
@click.argument("url")
def check(name: str, version: str, url: str) -> None:
    """Check URL for a release of NAME newer than VERSION."""
    try:
        reactor = Reactor(
            name,
            version,
            url,
            context=build_context(name, None, None),
            config=ReactorConfig.from_env(),
        )
        result = reactor.check_update()
    except ReactorError as err:
        console.print(f"[red]Error: {err}[/red]")
        raise SystemExit(1) from err

    if result.update_available and result.manifest is not None:
        table = Table(title="Update available")
        table.add_column("Field", style="cyan")
        table.add_column("Value", style="green")
        table.add_row("Current", str(result.current_version))
        table.add_row("Latest", str(result.manifest.version))
        table.add_row("Download", result.manifest.download_url)
        table.add_row("Hash", result.manifest.hash)
        console.print(table)
    else:
        console.print(f"[green]{name} {result.current_version} is up to date[/green]")


@cli.command()
@click.argument("name")
@click.argument("version")
@click.argument("url")
@install_dir_option
def apply(name: str, version: str, url: str, install_dir: str | None) -> None:
    """Download and install a newer release of NAME without restarting it."""
    try:
        reactor = Reactor(
            name,
            version,
            url,
            context=build_context(name, install_dir, None),
            config=ReactorConfig.from_env(),
        )
        result = reactor.check_update_and_update()
    except ReactorError as err:
        console.print(f"[red]Error: {err}[/red]")
        raise SystemExit(1) from err

    if result.update_available:
        console.print(f"[green]Installed {name} {result.latest_version}[/green]")
    else:
        console.print(f"[green]{name} {result.current_version} is up to date[/green]")


@cli.command()
@click.argument("name")
@click.argument("version")
@click.argument("url")
@install_dir_option
@click.option("--executable", type=click.Path(dir_okay=False), help="Path of the running executable")
@click.option(
    "--handoff-arg",
    "handoff_args",
    multiple=True,
    help="Argument passed to the build that takes over (repeatable)",
)
def run(
    name: str,
    version: str,
    url: str,
    install_dir: str | None,
    executable: str | None,
    handoff_args: tuple[str, ...],
) -> None:
    """Run the full update cycle for NAME, restarting into newer builds.

    The build taking over receives only the --handoff-arg values, never
    this command's own arguments.
    """
    try:
        reactor = Reactor(
            name,
            version,
            url,
            context=build_context(name, install_dir, executable),
            config=ReactorConfig.from_env(),
            handoff_args=list(handoff_args),
        )
        reactor.oneclick()
    except ReactorError as err:
        console.print(f"[red]Error: {err}[/red]")
        raise SystemExit(1) from err
    console.print(f"[green]{name} update cycle complete[/green]")


if __name__ == "__main__":
    cli()
