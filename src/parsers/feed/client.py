"""Scan feed client — pulls the full token scan list from the scan backend."""

import asyncio

import httpx
from loguru import logger
from pydantic import ValidationError

from src.models.scan import TokenScan

MAX_RETRIES = 2
RETRY_DELAYS = [1.0, 3.0]


class TokenFeedClient:
    """Async HTTP client for ``GET /api/tokens``."""

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

    async def fetch_tokens(self) -> list[TokenScan] | None:
        """Fetch the current scan list. None when the feed is unavailable."""
        url = f"{self._base_url}/api/tokens"

        for attempt in range(self._max_retries + 1):
            try:
                resp = await self._client.get(url)

                if resp.status_code == 429:
                    delay = self._delay(attempt)
                    logger.debug(f"[FEED] Rate limited, waiting {delay}s")
                    await asyncio.sleep(delay)
                    continue

                if resp.status_code != 200:
                    logger.warning(f"[FEED] HTTP {resp.status_code} from {url}")
                    return None

                return _parse_tokens(resp.json())

            except (httpx.TimeoutException, httpx.ConnectError) as e:
                if attempt < self._max_retries:
                    delay = self._delay(attempt)
                    logger.debug(f"[FEED] {type(e).__name__}, retry in {delay}s")
                    await asyncio.sleep(delay)
                else:
                    logger.warning(f"[FEED] Failed after retries: {e}")
                    return None
            except ValueError as e:
                logger.warning(f"[FEED] Response is not JSON: {e}")
                return None

        return None


def _parse_tokens(data: object) -> list[TokenScan] | None:
    """Accepts a bare list or ``{"tokens": [...]}``; skips invalid rows."""
    rows = data.get("tokens") if isinstance(data, dict) else data
    if not isinstance(rows, list):
        logger.warning("[FEED] Unexpected payload shape, no token list found")
        return None

    scans: list[TokenScan] = []
    invalid = 0
    for row in rows:
        try:
            scans.append(TokenScan.model_validate(row))
        except ValidationError:
            invalid += 1
    if invalid:
        logger.warning(f"[FEED] Skipped {invalid}/{len(rows)} invalid token rows")
    return scans
