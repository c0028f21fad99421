"""Per-token detail history loading for expanded rows.

Each request runs as its own asyncio task; nothing in the list waits on it.
A slow or failing fetch only affects that token's detail state. Ready
histories older than ``max_age`` are refetched on the next request, and
``retain()`` drops tokens that are no longer expanded.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass

from loguru import logger

from src.models.criteria import FilterCriteria
from src.models.history import HistoryPoint
from src.parsers.history.client import HistoryFetchError
from src.parsers.history.stagnation import is_hidden_as_stagnant

STATUS_LOADING = "loading"
STATUS_READY = "ready"
STATUS_ERROR = "error"

UNKNOWN_ERROR = "Unknown error occurred"


@dataclass(frozen=True)
class DetailState:
    status: str
    points: tuple[HistoryPoint, ...] = ()
    error: str | None = None
    loaded_at: float = 0.0

    @property
    def is_empty(self) -> bool:
        return self.status == STATUS_READY and not self.points


class DetailHistoryLoader:
    """Caches history per token address and fetches it in the background."""

    def __init__(
        self,
        fetch: Callable[[str], Awaitable[list[HistoryPoint]]],
        *,
        max_age: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._fetch = fetch
        self._max_age = max_age
        self._clock = clock
        self._states: dict[str, DetailState] = {}
        self._tasks: dict[str, asyncio.Task] = {}

    def state(self, address: str) -> DetailState | None:
        return self._states.get(address)

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def request(self, address: str, *, refresh: bool = False) -> DetailState:
        """Start loading ``address`` unless it is loaded or in flight.

        Must be called from inside a running event loop. Errored entries are
        retried on the next request, and so are ready entries past ``max_age``.
        """
        current = self._states.get(address)
        if current is not None and not refresh and not self._is_stale(current):
            return current
        if address in self._tasks:
            return self._states[address]

        loading = DetailState(status=STATUS_LOADING)
        self._states[address] = loading
        self._tasks[address] = asyncio.get_running_loop().create_task(self._load(address))
        return loading

    def _is_stale(self, state: DetailState) -> bool:
        if state.status == STATUS_ERROR:
            return True
        if state.status != STATUS_READY or self._max_age is None:
            return False
        return self._clock() - state.loaded_at >= self._max_age

    async def _load(self, address: str) -> None:
        try:
            points = await self._fetch(address)
            self._states[address] = DetailState(
                status=STATUS_READY, points=tuple(points), loaded_at=self._clock()
            )
        except HistoryFetchError as e:
            logger.info(f"[DETAIL] History unavailable for {address[:12]}: {e}")
            self._states[address] = DetailState(status=STATUS_ERROR, error=str(e))
        except Exception as e:
            logger.warning(f"[DETAIL] History load crashed for {address[:12]}: {e}")
            self._states[address] = DetailState(status=STATUS_ERROR, error=str(e) or UNKNOWN_ERROR)
        finally:
            if self._tasks.get(address) is asyncio.current_task():
                del self._tasks[address]

    def forget(self, address: str) -> None:
        """Drop cached state and cancel an in-flight fetch."""
        task = self._tasks.pop(address, None)
        if task is not None:
            task.cancel()
        self._states.pop(address, None)

    def retain(self, addresses: Iterable[str]) -> int:
        """Forget every token not in ``addresses``. Returns how many were dropped."""
        keep = set(addresses)
        stale = [address for address in self._states if address not in keep]
        for address in stale:
            self.forget(address)
        if stale:
            logger.debug(f"[DETAIL] Dropped history for {len(stale)} collapsed tokens")
        return len(stale)

    def stagnant(self, criteria: FilterCriteria) -> set[str]:
        """Tokens whose loaded history trips the ``hide_stagnant_*`` toggles."""
        return {
            address
            for address, state in self._states.items()
            if state.status == STATUS_READY and is_hidden_as_stagnant(state.points, criteria)
        }

    async def wait_idle(self) -> None:
        """Wait for every in-flight fetch to settle."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks.values()), return_exceptions=True)

    async def aclose(self) -> None:
        tasks = list(self._tasks.values())
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()
