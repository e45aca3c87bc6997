"""Logs API sender — gzip JSON POST with fixed-interval retry."""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

import httpx

from forwarder.config import ForwarderConfig

logger = logging.getLogger(__name__)

ACCEPTED = 202


class DeliveryError(Exception):
    """A payload was not accepted by the Logs API.

    Carries either the transport error or the non-202 response.
    """

    def __init__(
        self,
        message: str,
        error: Optional[BaseException] = None,
        response: Optional[httpx.Response] = None,
    ):
        super().__init__(message)
        self.error = error
        self.response = response
        self.attempts = 0

    @property
    def status_code(self) -> Optional[int]:
        return self.response.status_code if self.response is not None else None


async def retry_max(
    fn: Callable[..., Awaitable[Any]],
    retries: int,
    interval_ms: int,
    *args,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
):
    """Await ``fn(*args)`` up to *retries* times, sleeping *interval_ms* between tries.

    Returns ``(result, attempts)``. Re-raises the last DeliveryError once
    every attempt has failed.
    """
    attempts = max(retries, 1)
    for attempt in range(1, attempts + 1):
        try:
            return await fn(*args), attempt
        except DeliveryError as exc:
            exc.attempts = attempt
            if attempt >= attempts:
                raise
            logger.warning(
                "Send failed (attempt %d/%d): %s", attempt, attempts, exc
            )
            await sleep(interval_ms / 1000)


class LogsApiClient:
    """Posts compressed payloads to the Logs API endpoint."""

    def __init__(
        self,
        config: ForwarderConfig,
        client: Optional[httpx.AsyncClient] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self._config = config
        self._sleep = sleep
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=config.request_timeout)

    @property
    def headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Content-Encoding": "gzip",
        }
        headers.update(self._config.auth_headers())
        return headers

    async def send(self, payload: bytes) -> str:
        """POST one payload. Returns the response body on HTTP 202."""
        try:
            response = await self._client.post(
                self._config.endpoint, content=payload, headers=self.headers
            )
        except httpx.HTTPError as exc:
            raise DeliveryError(f"request failed: {exc!r}", error=exc) from exc

        logger.info("Got response: %d", response.status_code)
        if response.status_code != ACCEPTED:
            raise DeliveryError(
                f"unexpected status {response.status_code}: {response.text[:200]}",
                response=response,
            )
        return response.text

    async def deliver(self, payload: bytes) -> int:
        """Send with retries. Returns the number of attempts used."""
        _, attempts = await retry_max(
            self.send,
            self._config.max_retries,
            self._config.retry_interval_ms,
            payload,
            sleep=self._sleep,
        )
        return attempts

    async def aclose(self):
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "LogsApiClient":
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()
