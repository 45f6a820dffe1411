"""Backend client for fetching raw AR configurations.

Fetches records by scan code or session id and shape-checks them before
they are handed to the resolver. All network and validation failures are
raised here so the resolver only ever sees shape-valid input.
"""

import asyncio
from typing import Any, Optional
from urllib.parse import quote

import aiohttp

from arscene.utils import get_logger
from arscene.config import get_settings
from arscene.ar.errors import (
    ConfigFetchError,
    ExpiredCodeError,
    InvalidConfigError,
    SessionNotFoundError,
)
from arscene.ar.models import RawConfig, ResolvedConfig
from arscene.ar.resolver import resolve_config
from arscene.ar.sessions import ARSession

logger = get_logger("ar.client")


class ARConfigClient:
    """
    Client for the AR backend API.

    Endpoints:
    - GET /v1/qrcodes/{code}/ar-config
    - GET /v1/ar-sessions/{session_id}/data
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        api_token: Optional[str] = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: Backend base URL (defaults to settings)
            timeout: Request timeout in seconds (defaults to settings)
            api_token: Optional bearer token (defaults to settings)
        """
        settings = get_settings()
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.request_timeout
        self.api_token = api_token if api_token is not None else settings.api_token

    def _get_headers(self) -> dict:
        """Get API request headers."""
        headers = {"Accept": "application/json"}
        if self.api_token:
            headers["Authorization"] = f"Bearer {self.api_token}"
        return headers

    def code_url(self, code: str) -> str:
        return f"{self.base_url}/v1/qrcodes/{quote(code, safe='')}/ar-config"

    def session_url(self, session_id: str) -> str:
        return f"{self.base_url}/v1/ar-sessions/{quote(session_id, safe='')}/data"

    async def _get_json(self, url: str, not_found: Exception, gone_is_not_found: bool) -> Any:
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(url, headers=self._get_headers()) as response:
                    if response.status == 404 or (gone_is_not_found and response.status == 410):
                        raise not_found

                    if response.status != 200:
                        text = await response.text()
                        logger.error(f"Backend request failed: {url} -> {response.status}")
                        raise ConfigFetchError(
                            f"Request failed with status {response.status}: {text}",
                            status=response.status,
                        )

                    try:
                        return await response.json(content_type=None)
                    except ValueError as e:
                        raise InvalidConfigError(f"Backend returned malformed JSON: {e}") from e

        except asyncio.TimeoutError as e:
            logger.error(f"Backend request timed out after {self.timeout}s: {url}")
            raise ConfigFetchError(f"Request timed out after {self.timeout}s") from e
        except aiohttp.ClientError as e:
            logger.error(f"Backend connection error: {e}")
            raise ConfigFetchError(f"Connection error: {e}") from e

    async def fetch_raw_by_code(self, code: str) -> RawConfig:
        """
        Fetch the raw AR configuration behind a scan code.

        Raises:
            ExpiredCodeError: If the code is unknown (404) or expired (410)
            ConfigFetchError: On other HTTP or connection failures
            InvalidConfigError: If the payload is not a valid configuration
        """
        logger.debug(f"Fetching AR config for code {code}")
        data = await self._get_json(self.code_url(code), ExpiredCodeError(code), gone_is_not_found=True)
        return RawConfig.from_dict(data)

    async def fetch_session(self, session_id: str) -> ARSession:
        """
        Fetch an AR session record.

        Raises:
            SessionNotFoundError: If the session does not exist
            ConfigFetchError: On other HTTP or connection failures
            InvalidConfigError: If the payload is not a valid session
        """
        logger.debug(f"Fetching AR session {session_id}")
        data = await self._get_json(
            self.session_url(session_id),
            SessionNotFoundError(session_id),
            gone_is_not_found=False,
        )
        return ARSession.from_dict(data)

    async def resolve_code(self, code: str) -> ResolvedConfig:
        """Fetch and resolve the configuration behind a scan code."""
        raw = await self.fetch_raw_by_code(code)
        resolved = resolve_config(raw)
        logger.info(f"Resolved code {code}: {len(resolved.overlays)} overlay(s)")
        return resolved

    async def resolve_session(self, session_id: str) -> ResolvedConfig:
        """Fetch and resolve an AR session."""
        session = await self.fetch_session(session_id)
        resolved = resolve_config(session.to_raw_config())
        logger.info(f"Resolved session {session_id}: {len(resolved.overlays)} overlay(s)")
        return resolved
