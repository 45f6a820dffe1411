"""AR viewer server.

Provides a local web server that:
- Resolves scan codes and AR sessions into renderer-ready JSON
- Renders a simple viewer page with the scene's title, overlays and actions
- Serves QR codes pointing at the viewer page

Nothing is cached: every request fetches the raw record again and
resolves it from scratch.
"""

import html
from urllib.parse import quote
from typing import Optional

from aiohttp import web

from arscene.utils import get_logger
from arscene.config import get_settings
from arscene.ar.actions import Action, parse_actions
from arscene.ar.client import ARConfigClient
from arscene.ar.errors import (
    ConfigFetchError,
    ExpiredCodeError,
    InvalidConfigError,
    SessionNotFoundError,
)
from arscene.ar.models import ResolvedConfig
from arscene.ar.qr_generator import QRGenerationError, QRGenerator, scan_url

logger = get_logger("ar.ar_server")

EXPIRED_CODE_MESSAGE = "Invalid or expired QR code."


class ARServer:
    """
    Viewer-facing server for resolved AR scenes.

    Routes:
        GET /api/ar/{code}                 resolved config JSON
        GET /api/ar-sessions/{session_id}  resolved config JSON
        GET /ar/{code}                     viewer page
        GET /qr/{code}                     scan code PNG
    """

    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        client: Optional[ARConfigClient] = None,
        qr_generator: Optional[QRGenerator] = None,
    ):
        """
        Initialize AR server.

        Args:
            host: Host to bind to
            port: Port to listen on
            client: Backend client (defaults to one built from settings)
            qr_generator: QR generator for /qr routes
        """
        settings = get_settings()
        self.host = host or settings.web_host
        self.port = port or settings.web_port
        self.client = client or ARConfigClient()
        self.qr_generator = qr_generator or QRGenerator()
        self._runner: Optional[web.AppRunner] = None
        self._site: Optional[web.TCPSite] = None

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"

    @property
    def is_running(self) -> bool:
        """Check if server is running."""
        return self._site is not None

    def create_app(self) -> web.Application:
        """Build the aiohttp application."""
        app = web.Application()
        app.router.add_get("/api/ar/{code}", self._handle_api_code)
        app.router.add_get("/api/ar-sessions/{session_id}", self._handle_api_session)
        app.router.add_get("/ar/{code}", self._handle_viewer)
        app.router.add_get("/qr/{code}", self._handle_qr)
        return app

    async def start(self) -> None:
        """Start the AR server."""
        self._runner = web.AppRunner(self.create_app())
        await self._runner.setup()

        self._site = web.TCPSite(self._runner, self.host, self.port)
        await self._site.start()

        logger.info(f"AR server started at {self.base_url}")

    async def stop(self) -> None:
        """Stop the AR server."""
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
        self._site = None
        logger.info("AR server stopped")

    async def _handle_api_code(self, request: web.Request) -> web.Response:
        """Handle resolved config request for a scan code."""
        code = request.match_info["code"]
        try:
            resolved = await self.client.resolve_code(code)
        except ExpiredCodeError:
            return web.json_response({"error": "expired_or_invalid", "message": EXPIRED_CODE_MESSAGE}, status=410)
        except InvalidConfigError as e:
            logger.warning(f"Invalid AR config for code {code}: {e}")
            return web.json_response({"error": "invalid_config", "message": str(e)}, status=502)
        except ConfigFetchError as e:
            return web.json_response({"error": "upstream_error", "message": str(e)}, status=502)

        return web.json_response(resolved.to_dict())

    async def _handle_api_session(self, request: web.Request) -> web.Response:
        """Handle resolved config request for an AR session."""
        session_id = request.match_info["session_id"]
        try:
            resolved = await self.client.resolve_session(session_id)
        except SessionNotFoundError as e:
            return web.json_response({"error": "not_found", "message": str(e)}, status=404)
        except InvalidConfigError as e:
            logger.warning(f"Invalid AR session {session_id}: {e}")
            return web.json_response({"error": "invalid_config", "message": str(e)}, status=502)
        except ConfigFetchError as e:
            return web.json_response({"error": "upstream_error", "message": str(e)}, status=502)

        return web.json_response(resolved.to_dict())

    async def _handle_viewer(self, request: web.Request) -> web.Response:
        """Handle viewer page request."""
        code = request.match_info["code"]
        try:
            resolved = await self.client.resolve_code(code)
        except ExpiredCodeError:
            return web.Response(text=self._generate_error_html(EXPIRED_CODE_MESSAGE), status=410, content_type="text/html")
        except (InvalidConfigError, ConfigFetchError) as e:
            logger.error(f"Failed to load AR config for code {code}: {e}")
            return web.Response(
                text=self._generate_error_html("Failed to load AR experience."),
                status=502,
                content_type="text/html",
            )

        html_text = self._generate_viewer_html(code, resolved)
        return web.Response(text=html_text, content_type="text/html")

    async def _handle_qr(self, request: web.Request) -> web.Response:
        """Handle QR code image request."""
        code = request.match_info["code"]
        try:
            png = self.qr_generator.png_bytes(scan_url(code))
        except QRGenerationError as e:
            logger.error(f"QR generation failed for {code}: {e}")
            return web.Response(text="QR generation failed", status=500)

        return web.Response(body=png, content_type="image/png")

    def _generate_error_html(self, message: str) -> str:
        return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1">
    <title>AR Viewer</title>
</head>
<body>
    <h1>AR Viewer</h1>
    <p class="error">{html.escape(message)}</p>
</body>
</html>"""

    def _render_action(self, action: Action) -> str:
        label = html.escape(action.label or action.kind.value)
        if action.url:
            return (
                f'<a class="action action-{action.kind.value}" '
                f'href="{html.escape(action.url)}" target="_blank" rel="noopener">{label}</a>'
            )
        return f'<span class="action action-{action.kind.value}">{label}</span>'

    def _generate_viewer_html(self, code: str, resolved: ResolvedConfig) -> str:
        """Generate viewer page HTML."""
        meta = resolved.meta or {}
        title = html.escape(str(meta.get("title") or "AR Experience"))
        description = html.escape(str(meta.get("description") or ""))

        overlays_html = "".join(
            f'<li class="overlay overlay-{o.type.value}">{html.escape(o.type.value)}: '
            f"{html.escape(o.src or o.text or '')}</li>"
            for o in resolved.overlays
        )

        actions = parse_actions(resolved.meta)
        actions_section = ""
        if actions:
            actions_html = "".join(self._render_action(a) for a in actions)
            actions_section = f"""
    <div class="actions">
        <h3>Available Actions</h3>
        {actions_html}
    </div>"""

        return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1">
    <title>{title}</title>
    <style>
        body {{
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
            max-width: 600px;
            margin: 0 auto;
            padding: 20px;
            text-align: center;
        }}
        .overlays {{
            list-style: none;
            padding: 0;
            color: #666;
        }}
        .actions {{
            margin-top: 32px;
            padding-top: 32px;
            border-top: 1px solid #eee;
        }}
        .action {{
            display: block;
            margin: 8px auto;
            padding: 8px 16px;
            border: 1px solid #ccc;
            border-radius: 4px;
            color: #000;
            text-decoration: none;
        }}
    </style>
</head>
<body>
    <h1>{title}</h1>
    <p class="description">{description}</p>
    <p class="marker">Marker: {html.escape(resolved.marker_type.value)}</p>
    <ul class="overlays">{overlays_html}</ul>
    <img class="qr-code" src="/qr/{quote(code, safe='')}" alt="QR Code" width="200" height="200">
    {actions_section}
</body>
</html>"""
