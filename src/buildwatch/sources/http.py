"""HttpStatusSource — httpx-based build status source.

Reads ``<build>/api/json`` from Jenkins.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import ValidationError

from buildwatch.core.exceptions import NotFoundError, TransportError
from buildwatch.core.models import BuildRef, BuildStatusSnapshot, JenkinsConfig
from buildwatch.sources.base import StatusSource

if TYPE_CHECKING:
    from types import TracebackType

logger = logging.getLogger(__name__)


class HttpStatusSource(StatusSource):
    """Status source backed by the Jenkins JSON API."""

    def __init__(self, client: httpx.AsyncClient, *, owns_client: bool = False) -> None:
        self._client = client
        self._owns_client = owns_client

    @classmethod
    def from_config(cls, config: JenkinsConfig | None = None) -> HttpStatusSource:
        """Create a source with its own client (auth, TLS, timeout from config)."""
        config = config or JenkinsConfig()
        auth = (config.user, config.api_token) if config.user else None
        client = httpx.AsyncClient(
            auth=auth,
            verify=config.verify_tls,
            timeout=config.request_timeout_s,
            follow_redirects=True,
        )
        return cls(client, owns_client=True)

    async def fetch(self, ref: BuildRef) -> BuildStatusSnapshot:
        """GET the build's api/json and parse it into a snapshot."""
        url = ref.api_url
        try:
            resp = await self._client.get(url)
        except httpx.TimeoutException as e:
            msg = f"Status request to {url} timed out: {e}"
            raise TransportError(msg) from e
        except httpx.HTTPError as e:
            msg = f"Status request to {url} failed: {e}"
            raise TransportError(msg) from e

        if resp.status_code == httpx.codes.NOT_FOUND:
            msg = f"Build not found: {ref.build_url}"
            raise NotFoundError(msg)
        try:
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            msg = f"Status request to {url} returned HTTP {resp.status_code}"
            raise TransportError(msg) from e

        return _parse_snapshot(resp, url)

    async def aclose(self) -> None:
        """Close the client if this source created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> HttpStatusSource:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()


def _parse_snapshot(resp: httpx.Response, url: str) -> BuildStatusSnapshot:
    try:
        data: Any = resp.json()
    except ValueError as e:
        msg = f"Status response from {url} is not JSON: {e}"
        raise TransportError(msg) from e
    if not isinstance(data, dict):
        msg = f"Status response from {url} must be a JSON object, got {type(data).__name__}"
        raise TransportError(msg)

    try:
        snapshot = BuildStatusSnapshot.model_validate(data)
    except ValidationError as e:
        msg = f"Unexpected status payload from {url}: {e}"
        raise TransportError(msg) from e

    logger.debug("Status %s: building=%s result=%s", url, snapshot.building, snapshot.result)
    return snapshot
