"""Upload of the sync payload to the private server."""

import base64
import logging
from typing import Any
from urllib.parse import urlparse

import httpx

from health_normalize import SyncPayload

from .exceptions import SyncError, SyncErrorKind

logger = logging.getLogger(__name__)


def basic_auth_header(username: str, password: str) -> str:
    """Value for an HTTP Basic Authorization header."""
    token = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
    return f"Basic {token}"


class PayloadUploader:
    """
    POSTs payloads as JSON with HTTP Basic credentials.

    One attempt per upload; failures are raised as SyncError and the caller
    decides whether to try again later.
    """

    def __init__(
        self,
        url: str,
        username: str,
        password: str,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.url = url
        self._authorization = basic_auth_header(username, password)

        if urlparse(url).scheme != "https":
            logger.warning("Upload URL is not HTTPS; credentials will travel in clear: %s", url)

        self.http_client = http_client or httpx.AsyncClient(timeout=timeout)

    async def upload(self, payload: SyncPayload) -> int:
        """
        Upload one payload.

        Returns:
            HTTP status code (2xx)

        Raises:
            SyncError: NETWORK on transport failure, UPLOAD_FAILED on non-2xx
        """
        try:
            response = await self.http_client.post(
                self.url,
                content=payload.to_json(),
                headers={
                    "Content-Type": "application/json",
                    "Authorization": self._authorization,
                },
            )
        except httpx.RequestError as e:
            raise SyncError(
                f"Upload failed: network error: {e}",
                kind=SyncErrorKind.NETWORK,
            ) from e

        if not 200 <= response.status_code < 300:
            raise SyncError(
                f"Upload failed: HTTP {response.status_code}",
                kind=SyncErrorKind.UPLOAD_FAILED,
                status_code=response.status_code,
            )

        logger.info("Uploaded payload to %s (HTTP %d)", self.url, response.status_code)
        return response.status_code

    async def close(self) -> None:
        """Close HTTP client."""
        await self.http_client.aclose()

    async def __aenter__(self) -> "PayloadUploader":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()
