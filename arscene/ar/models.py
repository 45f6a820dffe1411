"""Data model for raw and resolved AR configurations.

Raw records come from the backend keyed by scan code or session id.
Field names and enum values are a wire contract with that backend and
are kept exactly as it sends them.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from arscene.ar.errors import InvalidConfigError
from arscene.utils import get_logger

logger = get_logger("ar.models")

Vector3 = Tuple[float, float, float]


class MarkerType(str, Enum):
    """Tracking target kinds."""
    IMAGE = "image"
    HIRO = "hiro"
    NFT = "nft"


class OverlayMode(str, Enum):
    """Overlay composition policy."""
    DEFAULT = "default"
    CUSTOM = "custom"
    STACKED = "stacked"


class OverlayKind(str, Enum):
    """Renderable overlay kinds."""
    MODEL = "model"
    IMAGE = "image"
    TEXT = "text"


def _enum_value(enum_cls, value: Any, field_name: str):
    if not isinstance(value, str):
        raise InvalidConfigError(f"{field_name} must be a string, got {type(value).__name__}")
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise InvalidConfigError(f"Unknown {field_name} '{value}' (expected one of: {allowed})")


def _optional_str(data: Dict[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise InvalidConfigError(f"{key} must be a string")
    return value


def _optional_dict(data: Dict[str, Any], key: str) -> Optional[Dict[str, Any]]:
    value = data.get(key)
    if value is not None and not isinstance(value, dict):
        raise InvalidConfigError(f"{key} must be an object")
    return value


def _vector(value: Any, field_name: str) -> Optional[Vector3]:
    if value is None:
        return None
    if (
        not isinstance(value, (list, tuple))
        or len(value) != 3
        or not all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in value)
    ):
        raise InvalidConfigError(f"{field_name} must be a list of three numbers")
    return tuple(value)


def _overlay_dict(overlay) -> Dict[str, Any]:
    """Wire form shared by authored and resolved overlays."""
    d: Dict[str, Any] = {"type": overlay.type.value}
    if overlay.src is not None:
        d["src"] = overlay.src
    for name in ("scale", "position", "rotation"):
        vec = getattr(overlay, name)
        if vec is not None:
            d[name] = list(vec)
    if overlay.text is not None:
        d["text"] = overlay.text
    return d


@dataclass
class OverlaySpec:
    """An overlay authored in the backend."""
    type: OverlayKind
    src: Optional[str] = None
    scale: Optional[Vector3] = None
    position: Optional[Vector3] = None
    rotation: Optional[Vector3] = None
    text: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> "OverlaySpec":
        """Parse an authored overlay from its wire form."""
        if not isinstance(data, dict):
            raise InvalidConfigError("overlayConfig.custom must be an object")
        return cls(
            type=_enum_value(OverlayKind, data.get("type"), "overlay type"),
            src=_optional_str(data, "src"),
            scale=_vector(data.get("scale"), "scale"),
            position=_vector(data.get("position"), "position"),
            rotation=_vector(data.get("rotation"), "rotation"),
            text=_optional_str(data, "text"),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return _overlay_dict(self)


@dataclass
class OverlayConfig:
    """Overlay section of a raw record.

    ``mode`` is kept as the raw string; values outside the known modes are
    legal data and are interpreted by the resolver.
    An authored ``custom`` overlay that fails validation is dropped with a
    warning, leaving the resolver to fall back to the default logo.
    """
    mode: str = OverlayMode.DEFAULT.value
    custom: Optional[OverlaySpec] = None

    @classmethod
    def from_dict(cls, data: Any) -> "OverlayConfig":
        if not isinstance(data, dict):
            raise InvalidConfigError("overlayConfig must be an object")

        mode = data.get("mode")
        if mode is None or mode == "":
            mode = OverlayMode.DEFAULT.value
        elif not isinstance(mode, str):
            raise InvalidConfigError("overlayConfig.mode must be a string")

        custom = data.get("custom")
        if custom is not None:
            # An unusable custom overlay falls back to the default logo
            try:
                custom = OverlaySpec.from_dict(custom)
            except InvalidConfigError as e:
                logger.warning(f"Dropping unusable custom overlay: {e}")
                custom = None

        return cls(mode=mode, custom=custom)

    def to_dict(self) -> dict:
        d: Dict[str, Any] = {"mode": self.mode}
        if self.custom is not None:
            d["custom"] = self.custom.to_dict()
        return d


@dataclass
class RawConfig:
    """A backend-authored AR configuration record.

    ``metadata`` and ``asset_3d`` are free-form and held by reference; they
    are forwarded to the resolved output untouched.
    """
    marker_type: MarkerType
    marker_data_url: str
    overlay_config: Optional[OverlayConfig] = None
    metadata: Optional[Dict[str, Any]] = None
    asset_3d: Optional[Dict[str, Any]] = None

    @classmethod
    def from_dict(cls, data: Any) -> "RawConfig":
        """
        Shape-check and parse a decoded backend record.

        Args:
            data: Decoded JSON object

        Returns:
            Parsed raw configuration

        Raises:
            InvalidConfigError: If required fields are missing or malformed
        """
        if not isinstance(data, dict):
            raise InvalidConfigError("AR config must be a JSON object")

        if "markerType" not in data:
            raise InvalidConfigError("Missing required field: markerType")
        if "markerDataUrl" not in data:
            raise InvalidConfigError("Missing required field: markerDataUrl")

        marker_data_url = data["markerDataUrl"]
        if not isinstance(marker_data_url, str):
            raise InvalidConfigError("markerDataUrl must be a string")

        overlay = data.get("overlayConfig")
        asset_3d = _optional_dict(data, "asset3D")
        if asset_3d is not None and "url" not in asset_3d:
            raise InvalidConfigError("asset3D.url is required")

        return cls(
            marker_type=_enum_value(MarkerType, data["markerType"], "markerType"),
            marker_data_url=marker_data_url,
            overlay_config=OverlayConfig.from_dict(overlay) if overlay is not None else None,
            metadata=_optional_dict(data, "metadata"),
            asset_3d=asset_3d,
        )

    @classmethod
    def from_json(cls, text: str) -> "RawConfig":
        """Decode a JSON document and parse it."""
        try:
            data = json.loads(text)
        except ValueError as e:
            raise InvalidConfigError(f"Malformed AR config JSON: {e}") from e
        return cls.from_dict(data)

    def to_dict(self) -> dict:
        """Convert back to the backend wire shape."""
        d: Dict[str, Any] = {
            "markerType": self.marker_type.value,
            "markerDataUrl": self.marker_data_url,
        }
        if self.overlay_config is not None:
            d["overlayConfig"] = self.overlay_config.to_dict()
        if self.metadata is not None:
            d["metadata"] = self.metadata
        if self.asset_3d is not None:
            d["asset3D"] = self.asset_3d
        return d


@dataclass
class ResolvedOverlay:
    """An overlay ready for a renderer."""
    type: OverlayKind
    src: Optional[str] = None
    scale: Optional[Vector3] = None
    position: Optional[Vector3] = None
    rotation: Optional[Vector3] = None
    text: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return _overlay_dict(self)


@dataclass
class ResolvedConfig:
    """Renderer-ready scene description.

    Overlays are drawn in list order; later entries layer on top.
    """
    marker_type: MarkerType
    marker_data_url: str
    overlays: List[ResolvedOverlay] = field(default_factory=list)
    meta: Optional[Dict[str, Any]] = None
    asset_3d: Optional[Dict[str, Any]] = None

    def to_dict(self) -> dict:
        """Convert to the renderer wire shape."""
        d: Dict[str, Any] = {
            "markerType": self.marker_type.value,
            "markerDataUrl": self.marker_data_url,
            "overlays": [o.to_dict() for o in self.overlays],
        }
        if self.meta is not None:
            d["meta"] = self.meta
        if self.asset_3d is not None:
            d["asset3D"] = self.asset_3d
        return d

    def to_json(self, indent: Optional[int] = None) -> str:
        return json.dumps(self.to_dict(), indent=indent)
