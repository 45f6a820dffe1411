"""AR configuration resolution engine.

Turns a raw backend record into a renderer-ready scene. Resolution is a
pure function of its input: no I/O, no clock, no shared mutable state,
so it can be called from any thread or task any number of times.

Overlay mode policy:
    default  -> [logo]                       (authored overlay ignored)
    custom   -> [custom] or [logo] if none
    stacked  -> [logo, custom] or [logo] if none
    unknown  -> same as default
"""

from typing import Any, List, Optional

from arscene.utils import get_logger
from arscene.ar.markers import default_overlay, normalize_marker_url
from arscene.ar.models import (
    OverlayConfig,
    OverlayMode,
    OverlaySpec,
    RawConfig,
    ResolvedConfig,
    ResolvedOverlay,
)

logger = get_logger("ar.resolver")

# Absent and unrecognized modes both fall back to DEFAULT
MODE_TABLE = {mode.value: mode for mode in OverlayMode}


def lookup_mode(mode: Optional[str]) -> OverlayMode:
    """Map a raw mode string to an overlay mode."""
    if not mode:
        return OverlayMode.DEFAULT
    resolved = MODE_TABLE.get(mode)
    if resolved is None:
        logger.warning(f"Unknown overlay mode '{mode}', falling back to '{OverlayMode.DEFAULT.value}'")
        return OverlayMode.DEFAULT
    return resolved


def to_resolved(spec: Optional[OverlaySpec]) -> Optional[ResolvedOverlay]:
    """Structurally copy an authored overlay; no defaults are injected."""
    if spec is None:
        return None
    return ResolvedOverlay(
        type=spec.type,
        src=spec.src,
        scale=spec.scale,
        position=spec.position,
        rotation=spec.rotation,
        text=spec.text,
    )


def resolve_overlays(overlay_config: Optional[OverlayConfig]) -> List[ResolvedOverlay]:
    """
    Build the ordered overlay list for a record.

    Args:
        overlay_config: Overlay section of the raw record, possibly absent

    Returns:
        Non-empty list of overlays in draw order
    """
    mode = lookup_mode(overlay_config.mode if overlay_config else None)
    custom = to_resolved(overlay_config.custom if overlay_config else None)

    if mode == OverlayMode.CUSTOM:
        if custom is None:
            logger.debug("Custom overlay mode without a custom overlay, using default")
            return [default_overlay()]
        return [custom]

    if mode == OverlayMode.STACKED:
        if custom is None:
            logger.debug("Stacked overlay mode without a custom overlay, using default only")
            return [default_overlay()]
        return [default_overlay(), custom]

    return [default_overlay()]


def resolve_config(raw: RawConfig) -> ResolvedConfig:
    """
    Resolve a raw record into a renderable scene.

    Args:
        raw: Shape-valid raw configuration

    Returns:
        Resolved configuration with markerType, metadata and asset3D
        forwarded unchanged
    """
    return ResolvedConfig(
        marker_type=raw.marker_type,
        marker_data_url=normalize_marker_url(raw.marker_type, raw.marker_data_url),
        overlays=resolve_overlays(raw.overlay_config),
        meta=raw.metadata,
        asset_3d=raw.asset_3d,
    )


resolve = resolve_config


def resolve_dict(data: Any) -> ResolvedConfig:
    """Shape-check a decoded record, then resolve it."""
    return resolve_config(RawConfig.from_dict(data))
