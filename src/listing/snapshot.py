"""Versioned token scan snapshots.

The feed replaces the whole list on every refresh. A ``Snapshot`` is
immutable, so swapping the controller's reference is atomic: readers see the
old list or the new one, never a mix.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from loguru import logger

from src.models.scan import TokenScan


@dataclass(frozen=True)
class Snapshot:
    version: int
    scans: tuple[TokenScan, ...] = ()
    addresses: frozenset[str] = field(default=frozenset(), repr=False)

    def __len__(self) -> int:
        return len(self.scans)

    @classmethod
    def build(cls, scans: Iterable[TokenScan], version: int) -> Snapshot:
        """Freeze ``scans`` keeping the first occurrence of each address."""
        unique: list[TokenScan] = []
        seen: set[str] = set()
        duplicates = 0
        for scan in scans:
            if scan.token_address in seen:
                duplicates += 1
                continue
            seen.add(scan.token_address)
            unique.append(scan)

        if duplicates:
            logger.warning(f"[SNAPSHOT] v{version}: dropped {duplicates} duplicate token addresses")

        return cls(version=version, scans=tuple(unique), addresses=frozenset(seen))


EMPTY_SNAPSHOT = Snapshot(version=0)
