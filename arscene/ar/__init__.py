"""AR configuration module for AR Scene.

Resolves raw backend AR records (scan codes and sessions) into
renderer-ready scene descriptions, and serves them to viewers.
"""

from arscene.ar.errors import (
    ARConfigError,
    ConfigFetchError,
    ExpiredCodeError,
    InvalidConfigError,
    SessionNotFoundError,
)
from arscene.ar.models import (
    MarkerType,
    OverlayConfig,
    OverlayKind,
    OverlayMode,
    OverlaySpec,
    RawConfig,
    ResolvedConfig,
    ResolvedOverlay,
)
from arscene.ar.markers import (
    DEFAULT_HIRO_PATTERN_URL,
    DEFAULT_LOGO_POSITION,
    DEFAULT_LOGO_ROTATION,
    DEFAULT_LOGO_SCALE,
    DEFAULT_LOGO_URL,
    USE_DEFAULT_HIRO_PATTERN,
    default_overlay,
    normalize_marker_url,
)
from arscene.ar.resolver import (
    resolve,
    resolve_config,
    resolve_dict,
    resolve_overlays,
    to_resolved,
)
from arscene.ar.actions import (
    Action,
    ActionKind,
    parse_actions,
)
from arscene.ar.sessions import (
    ARSession,
    parse_session_list,
)

__all__ = [
    "ARConfigError",
    "ConfigFetchError",
    "ExpiredCodeError",
    "InvalidConfigError",
    "SessionNotFoundError",
    "MarkerType",
    "OverlayConfig",
    "OverlayKind",
    "OverlayMode",
    "OverlaySpec",
    "RawConfig",
    "ResolvedConfig",
    "ResolvedOverlay",
    "DEFAULT_HIRO_PATTERN_URL",
    "DEFAULT_LOGO_POSITION",
    "DEFAULT_LOGO_ROTATION",
    "DEFAULT_LOGO_SCALE",
    "DEFAULT_LOGO_URL",
    "USE_DEFAULT_HIRO_PATTERN",
    "default_overlay",
    "normalize_marker_url",
    "resolve",
    "resolve_config",
    "resolve_dict",
    "resolve_overlays",
    "to_resolved",
    "Action",
    "ActionKind",
    "parse_actions",
    "ARSession",
    "parse_session_list",
]
