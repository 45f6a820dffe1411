"""Tests for the AR viewer server and QR generation."""

import base64
from unittest.mock import AsyncMock, Mock, patch

import pytest
from aiohttp import test_utils

from arscene.ar.ar_server import EXPIRED_CODE_MESSAGE, ARServer
from arscene.ar.errors import (
    ConfigFetchError,
    ExpiredCodeError,
    InvalidConfigError,
    SessionNotFoundError,
)
from arscene.ar.qr_generator import (
    ErrorCorrection,
    QRConfig,
    QRGenerationError,
    QRGenerator,
    generate_qr_code,
    scan_url,
)
from arscene.ar.resolver import resolve_dict

PNG_MAGIC = b"\x89PNG\r\n\x1a\n"


def resolved_scene():
    """Build a resolved stacked scene with actions."""
    return resolve_dict({
        "markerType": "image",
        "markerDataUrl": "https://cdn.example.com/markers/tote.mind",
        "overlayConfig": {"mode": "stacked", "custom": {"type": "text", "text": "Spring <drop>"}},
        "metadata": {
            "title": "WMCYN Tote Bag",
            "description": "Limited tote",
            "actions": [
                {"type": "purchase", "label": "Buy", "url": "https://shop.example.com/tote"},
                {"type": "teleport", "label": "Mystery"},
            ],
        },
    })


@pytest.fixture
def fake_client():
    """Backend client double."""
    client = Mock()
    client.resolve_code = AsyncMock(return_value=resolved_scene())
    client.resolve_session = AsyncMock(return_value=resolved_scene())
    return client


@pytest.fixture
def server(fake_client, tmp_path):
    """Create an AR server with a fake backend client."""
    with patch("arscene.ar.ar_server.get_settings") as mock_settings:
        mock_settings.return_value.web_host = "127.0.0.1"
        mock_settings.return_value.web_port = 9880
        return ARServer(client=fake_client, qr_generator=QRGenerator(output_dir=tmp_path))


class TestQRConfig:
    """Tests for QRConfig dataclass."""

    def test_default_config(self):
        """Test default configuration."""
        config = QRConfig()

        assert config.size == 256
        assert config.border == 4
        assert config.error_correction == ErrorCorrection.MEDIUM
        assert config.fill_color == "black"
        assert config.back_color == "white"
        assert config.logo_path is None

    def test_error_correction_values(self):
        """Test error correction enum values."""
        assert ErrorCorrection.LOW.value == "L"
        assert ErrorCorrection.MEDIUM.value == "M"
        assert ErrorCorrection.QUARTILE.value == "Q"
        assert ErrorCorrection.HIGH.value == "H"


class TestQRGenerator:
    """Tests for QRGenerator class."""

    def test_scan_url(self):
        """Test viewer URL construction."""
        assert scan_url("36NPQQF3", "https://wmcyn.online/") == "https://wmcyn.online/ar/36NPQQF3"
        assert scan_url("a b", "https://v.example.com") == "https://v.example.com/ar/a%20b"

    def test_scan_url_from_settings(self):
        """Test viewer base URL defaults to settings."""
        with patch("arscene.ar.qr_generator.get_settings") as mock_settings:
            mock_settings.return_value.viewer_base_url = "https://viewer.example.com"
            assert scan_url("CODE") == "https://viewer.example.com/ar/CODE"

    def test_png_bytes(self, tmp_path):
        """Test rendering to PNG bytes."""
        generator = QRGenerator(QRConfig(size=128), output_dir=tmp_path)

        png = generator.png_bytes("https://wmcyn.online/ar/CODE")

        assert png.startswith(PNG_MAGIC)

    def test_generate_file(self, tmp_path):
        """Test writing a QR image for a code."""
        generator = QRGenerator(output_dir=tmp_path / "qr")

        with patch("arscene.ar.qr_generator.get_settings") as mock_settings:
            mock_settings.return_value.viewer_base_url = "https://wmcyn.online"
            path = generator.generate("36NPQQF3")

        assert path.endswith("qr_36NPQQF3.png")
        with open(path, "rb") as f:
            assert f.read(8) == PNG_MAGIC

    def test_generate_custom_path(self, tmp_path):
        """Test writing to an explicit path."""
        out = tmp_path / "nested" / "code.png"

        path = QRGenerator(output_dir=tmp_path).generate("CODE", str(out))

        assert path == str(out)
        assert out.exists()

    def test_generate_base64(self, tmp_path):
        """Test base64 data URL output."""
        data_url = QRGenerator(output_dir=tmp_path).generate_base64("CODE")

        assert data_url.startswith("data:image/png;base64,")
        assert base64.b64decode(data_url.split(",", 1)[1]).startswith(PNG_MAGIC)

    def test_overflow(self, tmp_path):
        """Test data too large for a QR code."""
        generator = QRGenerator(QRConfig(error_correction=ErrorCorrection.HIGH), output_dir=tmp_path)

        with pytest.raises(QRGenerationError):
            generator.png_bytes("x" * 5000)

    def test_missing_logo_is_skipped(self, tmp_path):
        """Test a missing logo does not break generation."""
        config = QRConfig(logo_path=str(tmp_path / "missing.png"))

        png = QRGenerator(config, output_dir=tmp_path).png_bytes("CODE")

        assert png.startswith(PNG_MAGIC)

    def test_generate_qr_code(self, tmp_path):
        """Test convenience function."""
        with patch("arscene.ar.qr_generator.get_settings") as mock_settings:
            mock_settings.return_value.output_dir = str(tmp_path)
            mock_settings.return_value.viewer_base_url = "https://wmcyn.online"

            result = generate_qr_code("CODE", size=64)

        assert result.startswith(str(tmp_path))


class TestARServer:
    """Tests for ARServer class."""

    def test_init(self, server):
        """Test server initialization."""
        assert server.host == "127.0.0.1"
        assert server.port == 9880
        assert server.is_running is False
        assert server.base_url == "http://127.0.0.1:9880"

    @pytest.mark.asyncio
    async def test_api_code(self, server, fake_client):
        """Test resolved config JSON for a code."""
        async with test_utils.TestClient(test_utils.TestServer(server.create_app())) as client:
            resp = await client.get("/api/ar/36NPQQF3")
            assert resp.status == 200
            data = await resp.json()

        fake_client.resolve_code.assert_awaited_once_with("36NPQQF3")
        assert data["markerType"] == "image"
        assert [o["type"] for o in data["overlays"]] == ["model", "text"]
        assert data["meta"]["title"] == "WMCYN Tote Bag"

    @pytest.mark.asyncio
    async def test_api_code_not_cached(self, server, fake_client):
        """Test every request resolves again."""
        async with test_utils.TestClient(test_utils.TestServer(server.create_app())) as client:
            await client.get("/api/ar/36NPQQF3")
            await client.get("/api/ar/36NPQQF3")

        assert fake_client.resolve_code.await_count == 2

    @pytest.mark.asyncio
    async def test_api_code_expired(self, server, fake_client):
        """Test expired codes."""
        fake_client.resolve_code.side_effect = ExpiredCodeError("OLD")

        async with test_utils.TestClient(test_utils.TestServer(server.create_app())) as client:
            resp = await client.get("/api/ar/OLD")
            assert resp.status == 410
            data = await resp.json()

        assert data["message"] == EXPIRED_CODE_MESSAGE

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [InvalidConfigError("bad"), ConfigFetchError("down", status=500)])
    async def test_api_code_upstream_failures(self, server, fake_client, error):
        """Test upstream failures map to 502."""
        fake_client.resolve_code.side_effect = error

        async with test_utils.TestClient(test_utils.TestServer(server.create_app())) as client:
            resp = await client.get("/api/ar/CODE")
            assert resp.status == 502

    @pytest.mark.asyncio
    async def test_api_session(self, server, fake_client):
        """Test resolved config JSON for a session."""
        async with test_utils.TestClient(test_utils.TestServer(server.create_app())) as client:
            resp = await client.get("/api/ar-sessions/sess-001")
            assert resp.status == 200
            data = await resp.json()

        fake_client.resolve_session.assert_awaited_once_with("sess-001")
        assert len(data["overlays"]) == 2

    @pytest.mark.asyncio
    async def test_api_session_not_found(self, server, fake_client):
        """Test unknown sessions."""
        fake_client.resolve_session.side_effect = SessionNotFoundError("nope")

        async with test_utils.TestClient(test_utils.TestServer(server.create_app())) as client:
            resp = await client.get("/api/ar-sessions/nope")
            assert resp.status == 404

    @pytest.mark.asyncio
    async def test_viewer_page(self, server):
        """Test viewer page rendering."""
        async with test_utils.TestClient(test_utils.TestServer(server.create_app())) as client:
            resp = await client.get("/ar/36NPQQF3")
            assert resp.status == 200
            text = await resp.text()

        assert "<title>WMCYN Tote Bag</title>" in text
        assert "Limited tote" in text
        assert "Spring &lt;drop&gt;" in text
        assert 'class="action action-purchase"' in text
        assert 'href="https://shop.example.com/tote"' in text
        assert 'class="action action-unknown"' in text
        assert 'src="/qr/36NPQQF3"' in text

    @pytest.mark.asyncio
    async def test_viewer_page_expired(self, server, fake_client):
        """Test viewer page for expired codes."""
        fake_client.resolve_code.side_effect = ExpiredCodeError("OLD")

        async with test_utils.TestClient(test_utils.TestServer(server.create_app())) as client:
            resp = await client.get("/ar/OLD")
            assert resp.status == 410
            text = await resp.text()

        assert EXPIRED_CODE_MESSAGE in text

    @pytest.mark.asyncio
    async def test_qr_route(self, server):
        """Test QR image route."""
        with patch("arscene.ar.qr_generator.get_settings") as mock_settings:
            mock_settings.return_value.viewer_base_url = "https://wmcyn.online"
            async with test_utils.TestClient(test_utils.TestServer(server.create_app())) as client:
                resp = await client.get("/qr/36NPQQF3")
                assert resp.status == 200
                assert resp.headers["Content-Type"] == "image/png"
                body = await resp.read()

        assert body.startswith(PNG_MAGIC)

    def test_generate_viewer_html_without_meta(self, server):
        """Test viewer page for scenes with no metadata."""
        scene = resolve_dict({"markerType": "hiro", "markerDataUrl": "USE_DEFAULT_HIRO_PATTERN"})

        html_text = server._generate_viewer_html("CODE", scene)

        assert "<title>AR Experience</title>" in html_text
        assert "Available Actions" not in html_text
        assert "Marker: hiro" in html_text

    @pytest.mark.asyncio
    async def test_start_stop(self, fake_client, tmp_path, unused_tcp_port):
        """Test server lifecycle."""
        srv = ARServer(host="127.0.0.1", port=unused_tcp_port, client=fake_client,
                       qr_generator=QRGenerator(output_dir=tmp_path))

        await srv.start()
        assert srv.is_running is True

        await srv.stop()
        assert srv.is_running is False
