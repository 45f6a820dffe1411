"""Main CLI entry point for AR Scene."""

import click
from rich.console import Console

from arscene import __version__
from arscene.utils import setup_logging

console = Console()


@click.group()
@click.version_option(version=__version__, prog_name="AR Scene")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """AR Scene - resolve scan codes and AR sessions into renderable scenes."""
    from arscene.config import get_settings

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    setup_logging("DEBUG" if verbose else get_settings().log_level.upper())


# Import and register command groups
from arscene.cli.ar_cmd import ar

cli.add_command(ar)


@cli.command()
def status() -> None:
    """Show configuration."""
    from arscene.config import get_settings

    settings = get_settings()

    console.print("[bold]AR Scene Status[/bold]")
    console.print(f"Version: {__version__}")
    console.print()
    console.print("[bold]Configuration:[/bold]")
    console.print(f"  Backend API: {settings.api_base_url}")
    console.print(f"  Viewer URL: {settings.viewer_base_url}")
    console.print(f"  API Token: {'configured' if settings.api_token else 'not set'}")
    console.print(f"  Request Timeout: {settings.request_timeout}s")
    console.print(f"  Output Directory: {settings.output_dir}")
    console.print(f"  Web Server: {settings.web_host}:{settings.web_port}")


def main() -> None:
    """Main entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
