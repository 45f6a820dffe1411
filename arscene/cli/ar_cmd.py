"""CLI commands for AR configuration resolution."""

import asyncio
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from arscene.ar.errors import ARConfigError

console = Console()


def _print_resolved(resolved, as_json: bool) -> None:
    """Render a resolved config as JSON or as Rich tables."""
    if as_json:
        click.echo(resolved.to_json(indent=2))
        return

    from arscene.ar.actions import parse_actions

    meta = resolved.meta or {}
    console.print(Panel(
        f"[bold]{escape(str(meta.get('title') or 'Untitled'))}[/bold]\n"
        f"{escape(str(meta.get('description') or ''))}\n\n"
        f"Marker: {resolved.marker_type.value}\n"
        f"Marker URL: {escape(resolved.marker_data_url)}\n"
        f"3D Asset: {escape(str((resolved.asset_3d or {}).get('url', 'None')))}",
        title="Resolved AR Scene",
    ))

    table = Table(title="Overlays (draw order)")
    table.add_column("#", justify="right")
    table.add_column("Type")
    table.add_column("Source / Text")
    table.add_column("Scale")
    table.add_column("Position")
    table.add_column("Rotation")

    def vec(v) -> str:
        return ", ".join(f"{x:g}" for x in v) if v is not None else "-"

    for index, overlay in enumerate(resolved.overlays, start=1):
        table.add_row(
            str(index),
            overlay.type.value,
            escape(overlay.src or overlay.text or "-"),
            vec(overlay.scale),
            vec(overlay.position),
            vec(overlay.rotation),
        )
    console.print(table)

    actions = parse_actions(resolved.meta)
    if actions:
        actions_table = Table(title="Actions")
        actions_table.add_column("Kind")
        actions_table.add_column("Label")
        actions_table.add_column("URL")
        for action in actions:
            kind = action.kind.value
            if not action.is_known:
                kind = f"[yellow]{kind} ({escape(str(action.raw_type))})[/yellow]"
            actions_table.add_row(kind, escape(action.label), escape(action.url or "-"))
        console.print(actions_table)


@click.group()
def ar():
    """AR configuration commands."""
    pass


@ar.command()
@click.argument("config_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--json", "as_json", is_flag=True, help="Print the resolved config as JSON")
@click.pass_context
def resolve(ctx: click.Context, config_file: str, as_json: bool) -> None:
    """Resolve a raw AR config stored in a JSON file.

    Examples:
        arscene ar resolve config.json
        arscene ar resolve config.json --json
    """
    from arscene.ar.models import RawConfig
    from arscene.ar.resolver import resolve_config

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            raw = RawConfig.from_json(f.read())
    except (ARConfigError, UnicodeDecodeError) as e:
        console.print(f"[red]Invalid AR config: {escape(str(e))}[/red]")
        ctx.exit(1)

    _print_resolved(resolve_config(raw), as_json)


@ar.command()
@click.argument("code")
@click.option("--api-url", help="Backend base URL (overrides settings)")
@click.option("--json", "as_json", is_flag=True, help="Print the resolved config as JSON")
@click.pass_context
def fetch(ctx: click.Context, code: str, api_url: Optional[str], as_json: bool) -> None:
    """Fetch and resolve the AR config behind a scan code.

    Examples:
        arscene ar fetch 36NPQQF3
        arscene ar fetch 36NPQQF3 --json
    """
    from arscene.ar.client import ARConfigClient

    try:
        resolved = asyncio.run(ARConfigClient(base_url=api_url).resolve_code(code))
    except ARConfigError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        ctx.exit(1)

    _print_resolved(resolved, as_json)


@ar.command()
@click.argument("session_id")
@click.option("--api-url", help="Backend base URL (overrides settings)")
@click.option("--json", "as_json", is_flag=True, help="Print the resolved config as JSON")
@click.pass_context
def session(ctx: click.Context, session_id: str, api_url: Optional[str], as_json: bool) -> None:
    """Fetch and resolve an AR session.

    Examples:
        arscene ar session 6f1c2a
    """
    from arscene.ar.client import ARConfigClient

    try:
        resolved = asyncio.run(ARConfigClient(base_url=api_url).resolve_session(session_id))
    except ARConfigError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        ctx.exit(1)

    _print_resolved(resolved, as_json)


@ar.command()
@click.argument("code")
@click.option("--output", "-o", help="Output PNG path")
@click.option("--size", "-s", default=256, help="Image size in pixels")
@click.option("--base64", "as_base64", is_flag=True, help="Print a base64 data URL instead of writing a file")
@click.pass_context
def qr(ctx: click.Context, code: str, output: Optional[str], size: int, as_base64: bool) -> None:
    """Generate a QR code that opens the viewer for a scan code.

    Examples:
        arscene ar qr 36NPQQF3
        arscene ar qr 36NPQQF3 --output code.png --size 512
    """
    from arscene.ar.qr_generator import QRConfig, QRGenerationError, QRGenerator, scan_url

    generator = QRGenerator(QRConfig(size=size))
    try:
        if as_base64:
            click.echo(generator.generate_base64(code))
            return
        path = generator.generate(code, output)
    except QRGenerationError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        ctx.exit(1)

    console.print("[green]QR code generated[/green]")
    console.print(f"  URL: {scan_url(code)}")
    console.print(f"  File: {path}")


@ar.command()
@click.option("--host", help="Host to bind to")
@click.option("--port", "-p", type=int, help="Server port")
def serve(host: Optional[str], port: Optional[int]) -> None:
    """Start the AR viewer server.

    Examples:
        arscene ar serve
        arscene ar serve --port 9000
    """
    from arscene.ar.ar_server import ARServer

    async def run():
        server = ARServer(host=host, port=port)
        await server.start()

        console.print(Panel(
            f"[bold green]AR Viewer Ready[/bold green]\n\n"
            f"Viewer: {server.base_url}/ar/<code>\n"
            f"API: {server.base_url}/api/ar/<code>\n"
            f"Sessions: {server.base_url}/api/ar-sessions/<session_id>",
            title="AR Server",
        ))
        console.print("[dim]Press Ctrl+C to stop the server[/dim]")

        try:
            while True:
                await asyncio.sleep(1)
        finally:
            await server.stop()

    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        console.print()
        console.print("[yellow]Server stopped[/yellow]")

