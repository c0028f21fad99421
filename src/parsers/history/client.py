"""Token history client — per-token liquidity / holder time series.

Feeds the expanded detail card (charts + history table). Failures raise
``HistoryFetchError`` with a message fit for showing inline in that card.
"""

import asyncio

import httpx
from loguru import logger

from src.models.history import HistoryPoint

MAX_RETRIES = 2
RETRY_DELAYS = [1.0, 3.0]


class HistoryFetchError(Exception):
    """History for one token could not be loaded."""


class HistoryClient:
    """Async HTTP client for ``GET /api/tokens/{address}/history``."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        max_retries: int = MAX_RETRIES,
        retry_delays: list[float] | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._max_retries = max_retries
        self._retry_delays = retry_delays if retry_delays is not None else RETRY_DELAYS
        self._client = httpx.AsyncClient(timeout=timeout)

    async def close(self) -> None:
        await self._client.aclose()

    def _delay(self, attempt: int) -> float:
        if not self._retry_delays:
            return 0.0
        return self._retry_delays[min(attempt, len(self._retry_delays) - 1)]

    async def fetch_history(self, address: str) -> list[HistoryPoint]:
        """Fetch history rows for ``address``, oldest first."""
        url = f"{self._base_url}/api/tokens/{address}/history"

        for attempt in range(self._max_retries + 1):
            try:
                resp = await self._client.get(url)
            except (httpx.TimeoutException, httpx.ConnectError) as e:
                if attempt < self._max_retries:
                    delay = self._delay(attempt)
                    logger.debug(f"[HISTORY] {type(e).__name__}, retry in {delay}s")
                    await asyncio.sleep(delay)
                    continue
                logger.warning(f"[HISTORY] Failed after retries for {address[:12]}: {e}")
                raise HistoryFetchError(f"History request failed: {type(e).__name__}") from e

            if resp.status_code == 429 and attempt < self._max_retries:
                delay = self._delay(attempt)
                logger.debug(f"[HISTORY] Rate limited, waiting {delay}s")
                await asyncio.sleep(delay)
                continue

            return _parse_history(resp, address)

        raise HistoryFetchError("Failed to fetch token history")


def _parse_history(resp: httpx.Response, address: str) -> list[HistoryPoint]:
    content_type = resp.headers.get("content-type", "")
    if "application/json" not in content_type:
        raise HistoryFetchError("API response was not JSON")

    try:
        data = resp.json()
    except ValueError as e:
        raise HistoryFetchError("API response was not JSON") from e

    if not 200 <= resp.status_code < 300:
        message = data.get("error") if isinstance(data, dict) else None
        logger.debug(f"[HISTORY] HTTP {resp.status_code} for {address[:12]}")
        raise HistoryFetchError(message or "Failed to fetch token history")

    history = data.get("history") if isinstance(data, dict) else None
    if not isinstance(history, list):
        raise HistoryFetchError("Invalid history data received")

    points: list[HistoryPoint] = []
    skipped = 0
    for row in history:
        try:
            points.append(HistoryPoint.model_validate(row))
        except ValueError:
            skipped += 1
    if skipped:
        logger.debug(f"[HISTORY] Skipped {skipped} malformed rows for {address[:12]}")

    points.sort(key=lambda p: p.timestamp)
    return points
