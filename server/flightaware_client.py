from __future__ import annotations

import asyncio
import logging
import time
from typing import Optional
from urllib.parse import quote

import aiohttp
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
    before_sleep_log,
)

from config import (
    BROWSER_HEADERS,
    FETCH_BACKOFF_MAX_S,
    FETCH_CONNECT_TIMEOUT_S,
    FETCH_MAX_ATTEMPTS,
    FETCH_TIMEOUT_S,
    FLIGHTAWARE_BASE_URL,
)
from logging_utils import log_event

logger = logging.getLogger("flightinfo.flightaware")

_RETRYABLE_STATUS = {429, 500, 502, 503, 504}


def _is_transient(exc: BaseException) -> bool:
    if isinstance(exc, aiohttp.ClientResponseError):
        return exc.status in _RETRYABLE_STATUS
    return isinstance(exc, (asyncio.TimeoutError, aiohttp.ClientConnectionError))


def airport_url(code: str) -> str:
    return f"{FLIGHTAWARE_BASE_URL}/live/airport/{quote(code)}"


def history_url(ident: str) -> str:
    return f"{FLIGHTAWARE_BASE_URL}/live/flight/{quote(ident)}/history"


class FlightAwareClient:
    """
    Plain-HTML client for the public FlightAware pages with:
      - Browser-like headers
      - Explicit total/connect timeouts
      - Capped exponential backoff on timeouts, connection errors, 429 and 5xx
    """

    def __init__(
        self,
        *,
        timeout_s: float = FETCH_TIMEOUT_S,
        connect_timeout_s: float = FETCH_CONNECT_TIMEOUT_S,
    ) -> None:
        self._timeout = aiohttp.ClientTimeout(total=timeout_s, connect=connect_timeout_s)
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> "FlightAwareClient":
        self._session = aiohttp.ClientSession(headers=BROWSER_HEADERS, timeout=self._timeout)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._session:
            await self._session.close()
            self._session = None

    @retry(
        stop=stop_after_attempt(FETCH_MAX_ATTEMPTS),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=FETCH_BACKOFF_MAX_S),
        retry=retry_if_exception(_is_transient),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def fetch_html(self, url: str) -> str:
        if self._session is None:
            raise RuntimeError("FlightAwareClient used outside 'async with'")

        t0 = time.perf_counter()
        async with self._session.get(url) as r:
            elapsed = time.perf_counter() - t0
            log_event(
                logger,
                "flightaware_http_call",
                endpoint=url,
                status_code=r.status,
                duration_ms=int(elapsed * 1000),
            )
            r.raise_for_status()
            return await r.text()
