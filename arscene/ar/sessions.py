"""Backend AR session records.

Sessions are stored by the backend and fetched by id. The backend is not
consistent about some field names (``sessionId`` vs ``id``, ``sessions``
vs ``arSessions``), so records are normalized here before being mapped
onto a RawConfig for resolution.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from arscene.utils import get_logger
from arscene.ar.errors import InvalidConfigError
from arscene.ar.markers import USE_DEFAULT_HIRO_PATTERN
from arscene.ar.models import MarkerType, OverlayConfig, RawConfig

logger = get_logger("ar.sessions")


class SessionStatus(str, Enum):
    """Publication state of a session."""
    ACTIVE = "active"
    INACTIVE = "inactive"
    DRAFT = "draft"


# Marker pattern types the admin UI can store, mapped to tracking targets
PATTERN_MARKER_TYPES = {
    "hiro": MarkerType.HIRO,
    "custom": MarkerType.IMAGE,
    "image": MarkerType.IMAGE,
    "nft": MarkerType.NFT,
}


@dataclass
class MarkerPattern:
    """Marker pattern reference on a session."""
    type: str
    url: Optional[str] = None
    name: Optional[str] = None
    pattern_id: Optional[str] = None
    preview_url: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> "MarkerPattern":
        if not isinstance(data, dict):
            raise InvalidConfigError("markerPattern must be an object")
        pattern_type = data.get("type")
        if not isinstance(pattern_type, str):
            raise InvalidConfigError("markerPattern.type is required")
        return cls(
            type=pattern_type,
            url=data.get("url"),
            name=data.get("name"),
            pattern_id=data.get("patternId"),
            preview_url=data.get("previewUrl"),
        )


@dataclass
class ARSession:
    """An AR session as stored by the backend."""
    session_id: str
    marker_pattern: MarkerPattern
    name: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    overlay_config: Optional[Dict[str, Any]] = None
    asset_3d: Optional[Dict[str, Any]] = None
    campaign: Optional[str] = None
    status: SessionStatus = SessionStatus.ACTIVE
    created_by: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> "ARSession":
        """
        Normalize a backend session record.

        Raises:
            InvalidConfigError: If the record has no id or no marker pattern
        """
        if not isinstance(data, dict):
            raise InvalidConfigError("AR session must be a JSON object")

        session_id = data.get("sessionId") or data.get("id")
        if not session_id:
            raise InvalidConfigError("AR session has no sessionId or id")

        if "markerPattern" not in data:
            raise InvalidConfigError(f"AR session {session_id} has no markerPattern")

        status_value = data.get("status") or SessionStatus.ACTIVE.value
        try:
            status = SessionStatus(status_value)
        except ValueError:
            raise InvalidConfigError(f"Unknown session status '{status_value}'")

        metadata = data.get("metadata")
        return cls(
            session_id=str(session_id),
            marker_pattern=MarkerPattern.from_dict(data["markerPattern"]),
            name=data.get("name"),
            metadata=metadata if isinstance(metadata, dict) else {},
            overlay_config=data.get("overlayConfig"),
            asset_3d=data.get("asset3D"),
            campaign=data.get("campaign"),
            status=status,
            created_by=data.get("createdBy"),
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
        )

    @property
    def display_name(self) -> str:
        return self.marker_pattern.name or self.name or self.session_id

    def marker_type(self) -> MarkerType:
        marker_type = PATTERN_MARKER_TYPES.get(self.marker_pattern.type)
        if marker_type is None:
            raise InvalidConfigError(
                f"Unsupported marker pattern type '{self.marker_pattern.type}' "
                f"for session {self.session_id}"
            )
        return marker_type

    def to_raw_config(self) -> RawConfig:
        """
        Map the session onto a raw AR configuration.

        Hiro sessions without a pattern url use the default hiro pattern.
        Campaign and creation time are added to a copy of the metadata.

        Returns:
            RawConfig ready for resolution
        """
        marker_type = self.marker_type()

        marker_url = self.marker_pattern.url
        if not marker_url:
            if marker_type != MarkerType.HIRO:
                raise InvalidConfigError(f"AR session {self.session_id} has no marker pattern url")
            marker_url = USE_DEFAULT_HIRO_PATTERN

        metadata = dict(self.metadata)
        if self.campaign is not None:
            metadata.setdefault("campaign", self.campaign)
        if self.created_at is not None:
            metadata.setdefault("createdAt", self.created_at)

        asset_3d = self.asset_3d
        if asset_3d is not None and (not isinstance(asset_3d, dict) or "url" not in asset_3d):
            raise InvalidConfigError(f"AR session {self.session_id} has a malformed asset3D")

        overlay = OverlayConfig.from_dict(self.overlay_config) if self.overlay_config is not None else None

        return RawConfig(
            marker_type=marker_type,
            marker_data_url=marker_url,
            overlay_config=overlay,
            metadata=metadata,
            asset_3d=asset_3d,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "sessionId": self.session_id,
            "name": self.name,
            "markerPattern": {
                "type": self.marker_pattern.type,
                "url": self.marker_pattern.url,
                "name": self.marker_pattern.name,
                "patternId": self.marker_pattern.pattern_id,
                "previewUrl": self.marker_pattern.preview_url,
            },
            "metadata": self.metadata,
            "overlayConfig": self.overlay_config,
            "asset3D": self.asset_3d,
            "campaign": self.campaign,
            "status": self.status.value,
            "createdBy": self.created_by,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


def parse_session_list(payload: Any) -> List[ARSession]:
    """Parse a session list response in any of the shapes the backend uses."""
    if isinstance(payload, list):
        items = payload
    elif isinstance(payload, dict):
        items = payload.get("arSessions")
        if items is None:
            items = payload.get("sessions")
        if items is None:
            items = []
    else:
        raise InvalidConfigError("AR session list must be a JSON object or array")

    sessions = []
    for item in items:
        try:
            sessions.append(ARSession.from_dict(item))
        except InvalidConfigError as e:
            logger.warning(f"Skipping malformed AR session: {e}")
    return sessions
