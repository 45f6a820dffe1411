"""Built-in AR assets and marker URL normalization.

These constants are referenced by external viewers and must stay stable
across releases.
"""

from arscene.ar.models import MarkerType, OverlayKind, ResolvedOverlay, Vector3

# Default WMCYN logo overlay
DEFAULT_LOGO_URL = "https://cdn.wmcyn.online/assets/wmcyn-logo.glb"
DEFAULT_LOGO_SCALE: Vector3 = (0.3, 0.3, 0.3)
DEFAULT_LOGO_ROTATION: Vector3 = (0.0, 0.0, 0.0)
DEFAULT_LOGO_POSITION: Vector3 = (0.0, 0.0, 0.0)

# Fallback hiro pattern, used when the backend sends the sentinel below
DEFAULT_HIRO_PATTERN_URL = "https://cdn.wmcyn.online/ar/patterns/hiro.patt"
USE_DEFAULT_HIRO_PATTERN = "USE_DEFAULT_HIRO_PATTERN"


def default_overlay() -> ResolvedOverlay:
    """Build the built-in logo overlay."""
    return ResolvedOverlay(
        type=OverlayKind.MODEL,
        src=DEFAULT_LOGO_URL,
        scale=DEFAULT_LOGO_SCALE,
        position=DEFAULT_LOGO_POSITION,
        rotation=DEFAULT_LOGO_ROTATION,
    )


def normalize_marker_url(marker_type: MarkerType, marker_data_url: str) -> str:
    """
    Return the marker URL to hand to the tracking runtime.

    The sentinel only means something for hiro markers; for any other
    marker type it is passed through literally.
    """
    if marker_type == MarkerType.HIRO and marker_data_url == USE_DEFAULT_HIRO_PATTERN:
        return DEFAULT_HIRO_PATTERN_URL
    return marker_data_url
