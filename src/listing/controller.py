"""Scan list controller — turns UI events into render windows.

Every event (snapshot replaced, criteria changed, scroll, resize, expansion
toggled) is a synchronous call that only updates state and marks what went
stale. ``window()`` pulls: it reruns the pipeline if the snapshot or
criteria changed, lets the window calculator rebuild whatever offsets were
invalidated, and returns a fresh ``ViewportWindow``. A window is therefore
always computed from the latest snapshot, criteria and expansion set.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from loguru import logger

from src.db.preferences import PreferenceStore
from src.listing.expansion import ExpansionState
from src.listing.metrics import ListMetrics
from src.listing.pipeline import apply_criteria
from src.listing.sizing import estimate_height
from src.listing.snapshot import EMPTY_SNAPSHOT, Snapshot
from src.listing.window import ALIGN_START, VirtualItem, ViewportWindow, WindowCalculator
from src.models.criteria import FilterCriteria, SortKey
from src.models.scan import TokenScan


@dataclass(frozen=True)
class RenderRow:
    """A materialised row: geometry plus the scan it shows."""

    item: VirtualItem
    scan: TokenScan
    expanded: bool

    @property
    def warnings(self) -> list[str]:
        """Security warnings for the detail card; compact rows show none."""
        return self.scan.warning_reasons() if self.expanded else []


class TokenListController:
    def __init__(
        self,
        *,
        store: PreferenceStore | None = None,
        criteria: FilterCriteria | None = None,
        viewport_height: float = 900,
        overscan_items: int = 5,
        overscan_px: float = 0,
        padding_start: float = 100,
        padding_end: float = 100,
        prune_stale_expansions: bool = False,
        estimator: Callable[[TokenScan, bool], float] = estimate_height,
        metrics: ListMetrics | None = None,
    ) -> None:
        self._store = store
        self._criteria = criteria if criteria is not None else self._load_criteria()
        self._snapshot: Snapshot = EMPTY_SNAPSHOT
        self._estimator = estimator
        self._prune_stale = prune_stale_expansions

        self.expansion = ExpansionState()
        self.metrics = metrics or ListMetrics()

        self._visible: list[TokenScan] = []
        self._index_by_address: dict[str, int] = {}
        self._pipeline_dirty = True

        self._calculator = WindowCalculator(
            padding_start=padding_start,
            padding_end=padding_end,
            overscan_items=overscan_items,
            overscan_px=overscan_px,
        )
        self._scroll_top = 0.0
        self._viewport_height = max(0.0, viewport_height)

    # -- state accessors ---------------------------------------------------

    @property
    def criteria(self) -> FilterCriteria:
        return self._criteria

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    @property
    def scroll_top(self) -> float:
        return self._scroll_top

    @property
    def viewport_height(self) -> float:
        return self._viewport_height

    @property
    def calculator(self) -> WindowCalculator:
        """Window geometry for the current sequence (pipeline rerun if stale)."""
        self._refresh()
        return self._calculator

    def visible_scans(self) -> tuple[TokenScan, ...]:
        """The filtered, sorted and capped sequence."""
        self._refresh()
        return tuple(self._visible)

    def index_of(self, address: str) -> int | None:
        self._refresh()
        return self._index_by_address.get(address)

    # -- criteria / preferences --------------------------------------------

    def _load_criteria(self) -> FilterCriteria:
        if self._store is None:
            return FilterCriteria()
        try:
            loaded = self._store.load()
        except Exception as e:
            logger.warning(f"[LIST] Preference load failed, using defaults: {e}")
            loaded = None
        if loaded is None:
            logger.info("[LIST] No saved filters, using defaults")
            return FilterCriteria()
        logger.info(f"[LIST] Restored saved filters (sort={loaded.sort.legacy_value or 'none'})")
        return loaded

    def _persist(self) -> None:
        if self._store is None:
            return
        try:
            self._store.save(self._criteria)
        except Exception as e:
            logger.warning(f"[LIST] Preference save failed: {e}")

    def set_criteria(self, criteria: FilterCriteria) -> None:
        if criteria == self._criteria:
            return
        self._criteria = criteria
        self._pipeline_dirty = True
        self._persist()

    def update_criteria(self, **changes: Any) -> FilterCriteria:
        """Apply field changes (e.g. ``hide_danger=True``) and persist."""
        self.set_criteria(self._criteria.with_changes(**changes))
        return self._criteria

    def set_sort(self, sort: str | SortKey) -> FilterCriteria:
        """Accepts a ``SortKey`` or the dropdown's ``"field[_asc]"`` value."""
        return self.update_criteria(sort=sort)

    def reset_criteria(self) -> FilterCriteria:
        self.set_criteria(FilterCriteria())
        return self._criteria

    # -- dataset -----------------------------------------------------------

    def replace_snapshot(self, scans: Iterable[TokenScan]) -> Snapshot:
        """Swap in a new snapshot wholesale."""
        snapshot = Snapshot.build(scans, version=self._snapshot.version + 1)
        self._snapshot = snapshot
        self._pipeline_dirty = True
        if self._prune_stale:
            self.expansion.prune(snapshot.addresses)
        return snapshot

    # -- viewport ----------------------------------------------------------

    def scroll(self, scroll_top: float) -> None:
        self._scroll_top = max(0.0, scroll_top)

    def resize(self, viewport_height: float) -> None:
        self._viewport_height = max(0.0, viewport_height)

    def scroll_to(self, address: str, align: str = ALIGN_START) -> bool:
        """Scroll so ``address`` is in view. False if it is not in the list."""
        index = self.index_of(address)
        if index is None:
            return False
        self._scroll_top = self._calculator.offset_for_index(index, self._viewport_height, align)
        return True

    # -- expansion ---------------------------------------------------------

    def _anchor(self) -> tuple[int, float] | None:
        """Row at the top of the viewport and how far into it we are."""
        index = self._calculator.index_at(self._scroll_top)
        if index < 0:
            return None
        return index, self._scroll_top - self._calculator.offset_of(index)

    def _restore_anchor(self, anchor: tuple[int, float] | None) -> None:
        if anchor is None:
            return
        index, into = anchor
        size = self._calculator.size_of(index)
        self._scroll_top = max(0.0, self._calculator.offset_of(index) + min(into, size))

    def toggle_expansion(self, address: str) -> bool:
        """Flip one token between compact and detail layout.

        Rows below the viewport top move; the row at the top stays put.
        """
        self._refresh()
        index = self._index_by_address.get(address)
        anchor = self._anchor() if index is not None else None

        expanded = self.expansion.toggle(address)
        if index is not None:
            self._calculator.invalidate_from(index)
            self._restore_anchor(anchor)
        return expanded

    def toggle_all_expansion(self) -> bool:
        """Collapse everything if any shown token is expanded, else expand the shown ones.

        Collapsing clears the whole set (including tokens currently filtered
        out); expanding only adds the tokens currently shown. Returns True when
        the call expanded.
        """
        self._refresh()
        addresses = [scan.token_address for scan in self._visible]
        anchor = self._anchor()

        if self.expansion.any_expanded(addresses):
            self.expansion.collapse_all()
            expanded = False
        else:
            self.expansion.expand(addresses)
            expanded = True

        self._calculator.invalidate_from(0)
        self._restore_anchor(anchor)
        logger.debug(f"[LIST] {'Expanded' if expanded else 'Collapsed'} all ({len(addresses)} shown)")
        return expanded

    # -- recompute ---------------------------------------------------------

    def _height_at(self, index: int) -> float:
        scan = self._visible[index]
        return self._estimator(scan, scan.token_address in self.expansion)

    def _refresh(self) -> None:
        if not self._pipeline_dirty:
            return
        started = time.perf_counter()
        snapshot = self._snapshot
        self._visible = apply_criteria(snapshot.scans, self._criteria)
        self._index_by_address = {
            scan.token_address: i for i, scan in enumerate(self._visible)
        }
        self._calculator.set_items(len(self._visible), self._height_at)
        self._pipeline_dirty = False
        self.metrics.record_pipeline(
            (time.perf_counter() - started) * 1000,
            total=len(snapshot),
            shown=len(self._visible),
            version=snapshot.version,
        )

    def window(self) -> ViewportWindow:
        """Current render window (recomputing whatever is stale)."""
        self._refresh()
        started = time.perf_counter()
        max_scroll = self._calculator.max_scroll(self._viewport_height)
        if self._scroll_top > max_scroll:
            self._scroll_top = max_scroll
        window = self._calculator.compute(self._scroll_top, self._viewport_height)
        self.metrics.record_window((time.perf_counter() - started) * 1000, len(window.items))
        return window

    def rows(self) -> list[RenderRow]:
        """Rows of the current window paired with their scans."""
        window = self.window()
        return [
            RenderRow(
                item=item,
                scan=self._visible[item.index],
                expanded=self._visible[item.index].token_address in self.expansion,
            )
            for item in window.items
        ]
