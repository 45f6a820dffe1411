"""QR code generator for AR scan codes.

Each printed code points at the viewer page for that code; scanning it
opens the viewer, which resolves the code into an AR scene.
"""

import base64
import io
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional
from urllib.parse import quote

import qrcode
from PIL import Image
from qrcode.constants import ERROR_CORRECT_H, ERROR_CORRECT_L, ERROR_CORRECT_M, ERROR_CORRECT_Q
from qrcode.exceptions import DataOverflowError

from arscene.utils import ensure_dir, get_logger, safe_filename
from arscene.config import get_settings

logger = get_logger("ar.qr_generator")


class QRGenerationError(Exception):
    """Raised when a QR code image cannot be produced."""
    pass


class ErrorCorrection(str, Enum):
    """QR code error correction levels."""
    LOW = "L"  # 7% recovery
    MEDIUM = "M"  # 15% recovery
    QUARTILE = "Q"  # 25% recovery
    HIGH = "H"  # 30% recovery


_EC_MAP = {
    ErrorCorrection.LOW: ERROR_CORRECT_L,
    ErrorCorrection.MEDIUM: ERROR_CORRECT_M,
    ErrorCorrection.QUARTILE: ERROR_CORRECT_Q,
    ErrorCorrection.HIGH: ERROR_CORRECT_H,
}


@dataclass
class QRConfig:
    """Configuration for QR code generation."""
    size: int = 256  # Image size in pixels
    border: int = 4  # Border size in modules
    error_correction: ErrorCorrection = ErrorCorrection.MEDIUM
    fill_color: str = "black"
    back_color: str = "white"
    logo_path: Optional[str] = None  # Optional logo to embed


def scan_url(code: str, viewer_base_url: Optional[str] = None) -> str:
    """Build the viewer URL a scan code points at."""
    base = (viewer_base_url or get_settings().viewer_base_url).rstrip("/")
    return f"{base}/ar/{quote(code, safe='')}"


class QRGenerator:
    """Generates QR code images for AR scan codes."""

    def __init__(self, config: Optional[QRConfig] = None, output_dir: Optional[Path] = None):
        """
        Initialize QR generator.

        Args:
            config: QR code configuration
            output_dir: Directory for generated images (defaults to settings)
        """
        self.config = config or QRConfig()
        if output_dir is None:
            output_dir = Path(get_settings().output_dir) / "qr"
        self._output_dir = Path(output_dir)

    def _make_image(self, data: str):
        try:
            qr = qrcode.QRCode(
                version=1,
                error_correction=_EC_MAP[self.config.error_correction],
                box_size=10,
                border=self.config.border,
            )
            qr.add_data(data)
            qr.make(fit=True)

            img = qr.make_image(
                fill_color=self.config.fill_color,
                back_color=self.config.back_color,
            )

            # Resize to target size
            img = img.resize((self.config.size, self.config.size))

        except (ValueError, DataOverflowError) as e:
            raise QRGenerationError(f"QR generation failed: {e}") from e

        # Add logo if configured
        if self.config.logo_path:
            img = self._add_logo(img)

        return img

    def png_bytes(self, data: str) -> bytes:
        """Render a QR code to PNG bytes."""
        img = self._make_image(data)
        buffer = io.BytesIO()
        img.save(buffer, format="PNG")
        return buffer.getvalue()

    def generate(self, code: str, output_path: Optional[str] = None) -> str:
        """
        Generate a QR code image for a scan code.

        Args:
            code: Scan code to encode (as its viewer URL)
            output_path: Optional output path for the image

        Returns:
            Path to generated QR code image
        """
        img = self._make_image(scan_url(code))

        # Determine output path
        if output_path:
            out_file = Path(output_path)
            ensure_dir(out_file.parent)
        else:
            out_file = ensure_dir(self._output_dir) / f"qr_{safe_filename(code)}.png"

        img.save(str(out_file))
        logger.info(f"QR code generated: {out_file}")

        return str(out_file)

    def generate_base64(self, code: str) -> str:
        """Generate a QR code for a scan code as a base64 data URL."""
        b64 = base64.b64encode(self.png_bytes(scan_url(code))).decode()
        return f"data:image/png;base64,{b64}"

    def _add_logo(self, qr_img):
        """Add a logo to the center of the QR code."""
        try:
            logo = Image.open(self.config.logo_path)
        except OSError as e:
            logger.warning(f"Failed to add logo: {e}")
            return qr_img

        # Logo should be about 20% of QR size
        logo_size = self.config.size // 5
        logo = logo.resize((logo_size, logo_size))

        # Calculate position
        pos = ((self.config.size - logo_size) // 2, (self.config.size - logo_size) // 2)

        # Paste logo
        qr_img = qr_img.convert("RGBA")
        logo = logo.convert("RGBA")
        qr_img.paste(logo, pos, logo)

        return qr_img


def generate_qr_code(
    code: str,
    output_path: Optional[str] = None,
    size: int = 256,
) -> str:
    """
    Convenience function to generate a QR code.

    Args:
        code: Scan code to encode
        output_path: Optional output path
        size: Image size in pixels

    Returns:
        Path to generated QR code
    """
    config = QRConfig(size=size)
    generator = QRGenerator(config)
    return generator.generate(code, output_path)
