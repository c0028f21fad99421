"""Windowing for the virtualised scan list.

Keeps a prefix-sum array of row heights (``offsets[i]`` is the top of row
``i``, ``offsets[0]`` is the leading padding, ``offsets[n]`` the bottom of the
last row) and turns a scroll position + viewport height into the smallest
contiguous range of rows that must be materialised.

A height change at row ``k`` only invalidates ``offsets[k + 1:]``; the suffix
is rebuilt lazily on the next read.
"""

from bisect import bisect_left, bisect_right
from collections.abc import Callable
from dataclasses import dataclass

from loguru import logger

ALIGN_START = "start"
ALIGN_CENTER = "center"
ALIGN_END = "end"


@dataclass(frozen=True)
class VirtualItem:
    """One materialised row: sequence index, top offset and height (px)."""

    index: int
    start: float
    size: float

    @property
    def end(self) -> float:
        return self.start + self.size


@dataclass(frozen=True)
class ViewportWindow:
    """Rows to render for one scroll position. Rebuilt, never mutated.

    ``end_index`` is inclusive; an empty sequence gives ``start_index=0,
    end_index=-1`` and no items.
    """

    start_index: int
    end_index: int
    items: tuple[VirtualItem, ...]
    total_height: float

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def indexes(self) -> range:
        return range(self.start_index, self.end_index + 1)


class WindowCalculator:
    """Prefix-sum window engine over ``count`` rows of ``height_of(i)`` px."""

    def __init__(
        self,
        *,
        padding_start: float = 0,
        padding_end: float = 0,
        overscan_items: int = 0,
        overscan_px: float = 0,
    ) -> None:
        self.padding_start = padding_start
        self.padding_end = padding_end
        self.overscan_items = max(0, overscan_items)
        self.overscan_px = max(0, overscan_px)

        self._count = 0
        self._height_of: Callable[[int], float] = lambda _index: 0
        self._offsets: list[float] = [padding_start]
        self._dirty_from: int | None = None
        self.rebuilt_rows = 0  # rows whose offset was recomputed, for metrics

    # -- sequence binding / invalidation -----------------------------------

    def set_items(self, count: int, height_of: Callable[[int], float]) -> None:
        """Bind a new sequence. Invalidates every offset."""
        self._count = max(0, count)
        self._height_of = height_of
        self._offsets = [self.padding_start]
        self._dirty_from = 0

    def invalidate_from(self, index: int) -> None:
        """Row ``index`` changed height: offsets after it are stale."""
        if index >= self._count:
            return
        index = max(0, index)
        if self._dirty_from is None or index < self._dirty_from:
            self._dirty_from = index

    def invalidate_all(self) -> None:
        self._offsets = [self.padding_start]
        self._dirty_from = 0

    def _ensure_offsets(self) -> None:
        k = self._dirty_from
        if k is None:
            return
        # offsets[0..k] only depend on rows before k, so they are still valid
        del self._offsets[k + 1:]
        offsets = self._offsets
        height_of = self._height_of
        for i in range(k, self._count):
            offsets.append(offsets[i] + height_of(i))
        self.rebuilt_rows += self._count - k
        self._dirty_from = None

    # -- geometry ----------------------------------------------------------

    @property
    def count(self) -> int:
        return self._count

    @property
    def offsets(self) -> tuple[float, ...]:
        self._ensure_offsets()
        return tuple(self._offsets)

    @property
    def total_height(self) -> float:
        self._ensure_offsets()
        return self._offsets[self._count] + self.padding_end

    def offset_of(self, index: int) -> float:
        self._ensure_offsets()
        return self._offsets[index]

    def size_of(self, index: int) -> float:
        self._ensure_offsets()
        return self._offsets[index + 1] - self._offsets[index]

    def index_at(self, offset: float) -> int:
        """Row covering ``offset`` (clamped to the sequence), -1 when empty."""
        if self._count == 0:
            return -1
        self._ensure_offsets()
        index = bisect_right(self._offsets, offset) - 1
        return min(max(index, 0), self._count - 1)

    def max_scroll(self, viewport_height: float) -> float:
        return max(0.0, self.total_height - viewport_height)

    def offset_for_index(self, index: int, viewport_height: float, align: str = ALIGN_START) -> float:
        """Scroll offset that brings row ``index`` into view with ``align``."""
        if self._count == 0:
            return 0.0
        self._ensure_offsets()
        index = min(max(index, 0), self._count - 1)
        start = self._offsets[index]
        size = self._offsets[index + 1] - start

        if align == ALIGN_CENTER:
            target = start - (viewport_height - size) / 2
        elif align == ALIGN_END:
            target = start + size - viewport_height
        else:
            target = start
        return min(max(target, 0.0), self.max_scroll(viewport_height))

    # -- window ------------------------------------------------------------

    def compute(self, scroll_top: float, viewport_height: float) -> ViewportWindow:
        """Smallest contiguous range covering the viewport ± overscan.

        The pixel range ``[scroll_top - overscan_px, scroll_top +
        viewport_height + overscan_px)`` is covered first, then the range is
        widened by ``overscan_items`` rows on both sides. Never empty when
        there is at least one row.
        """
        self._ensure_offsets()
        n = self._count
        offsets = self._offsets
        total = offsets[n] + self.padding_end

        if n == 0:
            return ViewportWindow(start_index=0, end_index=-1, items=(), total_height=total)

        low = scroll_top - self.overscan_px
        high = scroll_top + max(0.0, viewport_height) + self.overscan_px

        # first row whose bottom edge is below ``low``
        start = bisect_right(offsets, low) - 1
        # last row whose top edge is above ``high``
        end = bisect_left(offsets, high, 0, n) - 1

        start = min(max(start, 0), n - 1)
        end = min(max(end, 0), n - 1)
        end = max(end, start)

        start = max(0, start - self.overscan_items)
        end = min(n - 1, end + self.overscan_items)

        items = tuple(
            VirtualItem(index=i, start=offsets[i], size=offsets[i + 1] - offsets[i])
            for i in range(start, end + 1)
        )
        logger.trace(f"[WINDOW] scroll={scroll_top:.0f} rows {start}..{end} of {n}")
        return ViewportWindow(start_index=start, end_index=end, items=items, total_height=total)
