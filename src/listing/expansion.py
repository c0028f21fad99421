"""Set of token addresses currently shown as full detail cards."""

from collections.abc import Iterable

from loguru import logger


class ExpansionState:
    """Owned set of expanded token addresses.

    Addresses are not validated against the live snapshot: ids of tokens that
    were filtered out or dropped from the feed stay in the set until
    ``collapse_all`` or an explicit ``prune``.
    """

    def __init__(self, expanded: Iterable[str] = ()) -> None:
        self._expanded: set[str] = set(expanded)

    def __contains__(self, address: object) -> bool:
        return address in self._expanded

    def __len__(self) -> int:
        return len(self._expanded)

    def contains(self, address: str) -> bool:
        return address in self._expanded

    def toggle(self, address: str) -> bool:
        """Flip ``address`` and return its new expanded state."""
        if address in self._expanded:
            self._expanded.discard(address)
            return False
        self._expanded.add(address)
        return True

    def expand(self, addresses: Iterable[str]) -> None:
        self._expanded.update(addresses)

    def collapse_all(self) -> None:
        self._expanded.clear()

    def any_expanded(self, addresses: Iterable[str]) -> bool:
        return any(address in self._expanded for address in addresses)

    def prune(self, live_addresses: Iterable[str]) -> int:
        """Drop addresses absent from ``live_addresses``. Returns count removed."""
        live = set(live_addresses)
        stale = self._expanded - live
        if stale:
            self._expanded -= stale
            logger.debug(f"[EXPAND] Pruned {len(stale)} stale expansions")
        return len(stale)

    def snapshot(self) -> frozenset[str]:
        return frozenset(self._expanded)
