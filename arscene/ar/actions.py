"""Interactive actions attached to AR metadata.

Action records arrive as loosely-typed backend data. The resolver
forwards them untouched; renderers narrow them here when they consume a
resolved config.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from arscene.utils import get_logger

logger = get_logger("ar.actions")


class ActionKind(str, Enum):
    """Accepted action kinds, plus an explicit catch-all."""
    PURCHASE = "purchase"
    SHARE = "share"
    CLAIM = "claim"
    INFO = "info"
    UNKNOWN = "unknown"


_KNOWN_KINDS = {k.value: k for k in ActionKind if k is not ActionKind.UNKNOWN}


@dataclass
class Action:
    """A narrowed action."""
    kind: ActionKind
    label: str
    url: Optional[str] = None
    raw_type: Optional[str] = None

    @property
    def is_known(self) -> bool:
        return self.kind is not ActionKind.UNKNOWN

    def to_dict(self) -> dict:
        return {
            "type": self.kind.value,
            "label": self.label,
            "url": self.url,
            "rawType": self.raw_type,
        }


def narrow_kind(raw_type: Any) -> ActionKind:
    """Map a raw action type to an ActionKind without coercion."""
    if isinstance(raw_type, str):
        return _KNOWN_KINDS.get(raw_type, ActionKind.UNKNOWN)
    return ActionKind.UNKNOWN


def parse_action(data: Dict[str, Any]) -> Action:
    raw_type = data.get("type")
    label = data.get("label")
    url = data.get("url")
    return Action(
        kind=narrow_kind(raw_type),
        label=label if isinstance(label, str) else "",
        url=url if isinstance(url, str) else None,
        raw_type=raw_type if isinstance(raw_type, str) else None,
    )


def parse_actions(meta: Optional[Dict[str, Any]]) -> List[Action]:
    """
    Narrow the action list of a resolved config's metadata.

    Args:
        meta: The ``meta`` mapping of a resolved config, possibly None

    Returns:
        Actions in their original order
    """
    if not meta:
        return []

    raw_actions = meta.get("actions")
    if not isinstance(raw_actions, list):
        return []

    actions = []
    for index, item in enumerate(raw_actions):
        if not isinstance(item, dict):
            logger.warning(f"Skipping malformed action at index {index}")
            continue
        action = parse_action(item)
        if not action.is_known:
            logger.debug(f"Unknown action type '{action.raw_type}' at index {index}")
        actions.append(action)
    return actions
