"""Exceptions raised around AR configuration fetch and validation.

The resolution engine itself never raises; these belong to the layers
that fetch and shape-check raw records before they reach it.
"""

from typing import Optional


class ARConfigError(Exception):
    """Base class for AR configuration errors."""
    pass


class InvalidConfigError(ARConfigError):
    """Raised when a raw record is not a shape-valid AR configuration."""
    pass


class ExpiredCodeError(ARConfigError):
    """Raised when a scan code is unknown or has expired."""

    def __init__(self, code: str):
        super().__init__(f"Invalid or expired code: {code}")
        self.code = code


class SessionNotFoundError(ARConfigError):
    """Raised when an AR session id does not exist."""

    def __init__(self, session_id: str):
        super().__init__(f"AR session not found: {session_id}")
        self.session_id = session_id


class ConfigFetchError(ARConfigError):
    """Raised when the backend request fails for any other reason."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status
