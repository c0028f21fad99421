"""Tests for the prefix-sum window calculator."""

import pytest

from src.listing.window import ALIGN_CENTER, ALIGN_END, WindowCalculator


def _calculator(heights: list[float], **kwargs) -> WindowCalculator:
    calc = WindowCalculator(**kwargs)
    calc.set_items(len(heights), lambda i: heights[i])
    return calc


class TestOffsets:
    def test_prefix_sums_with_padding(self) -> None:
        calc = _calculator([100, 50, 25], padding_start=20, padding_end=30)
        assert calc.offsets == (20, 120, 170, 195)
        assert calc.total_height == 225

    def test_empty_sequence(self) -> None:
        calc = _calculator([], padding_start=20, padding_end=30)
        window = calc.compute(0, 500)
        assert window.is_empty
        assert window.start_index == 0
        assert window.end_index == -1
        assert window.total_height == 50

    def test_total_is_sum_of_heights_plus_padding(self) -> None:
        heights = [60, 2240, 60, 2400, 60]
        calc = _calculator(heights, padding_start=100, padding_end=100)
        assert calc.total_height == sum(heights) + 200


class TestInvalidation:
    def test_only_suffix_changes(self) -> None:
        heights = [100.0] * 10
        calc = _calculator(heights)
        before = calc.offsets

        heights[1] = 300.0
        calc.invalidate_from(1)
        after = calc.offsets

        assert after[:2] == before[:2]
        assert all(a - b == 200 for a, b in zip(after[2:], before[2:]))

    def test_suffix_rebuild_counts_rows(self) -> None:
        heights = [100.0] * 10
        calc = _calculator(heights)
        _ = calc.offsets
        assert calc.rebuilt_rows == 10

        heights[7] = 150.0
        calc.invalidate_from(7)
        _ = calc.offsets
        assert calc.rebuilt_rows == 13

    def test_suffix_matches_full_rebuild(self) -> None:
        heights = [float(10 + i) for i in range(50)]
        calc = _calculator(heights, padding_start=5)
        _ = calc.offsets
        heights[20] = 999.0
        heights[35] = 1.0
        calc.invalidate_from(35)
        calc.invalidate_from(20)

        fresh = _calculator(heights, padding_start=5)
        assert calc.offsets == fresh.offsets

    def test_invalidate_past_end_is_ignored(self) -> None:
        calc = _calculator([100.0] * 3)
        before = calc.offsets
        calc.invalidate_from(10)
        assert calc.offsets == before


class TestCompute:
    def test_first_screen(self) -> None:
        calc = _calculator([100] * 10)
        window = calc.compute(0, 250)
        assert (window.start_index, window.end_index) == (0, 2)
        assert [item.start for item in window.items] == [0, 100, 200]
        assert all(item.size == 100 for item in window.items)

    def test_partial_rows_are_included(self) -> None:
        calc = _calculator([100] * 10)
        window = calc.compute(150, 100)
        assert (window.start_index, window.end_index) == (1, 2)

    def test_row_edges_do_not_add_rows(self) -> None:
        """Viewport [200, 300) is covered by row 2 alone."""
        calc = _calculator([100] * 10)
        window = calc.compute(200, 100)
        assert (window.start_index, window.end_index) == (2, 2)

    def test_overscan_items(self) -> None:
        calc = _calculator([100] * 10, overscan_items=2)
        window = calc.compute(500, 100)
        assert (window.start_index, window.end_index) == (3, 7)

    def test_overscan_items_are_clamped(self) -> None:
        calc = _calculator([100] * 10, overscan_items=5)
        window = calc.compute(0, 100)
        assert (window.start_index, window.end_index) == (0, 5)

    def test_overscan_px(self) -> None:
        calc = _calculator([100] * 10, overscan_px=50)
        window = calc.compute(200, 100)
        assert (window.start_index, window.end_index) == (1, 3)

    def test_scrolled_past_end(self) -> None:
        calc = _calculator([100] * 10)
        window = calc.compute(5000, 100)
        assert (window.start_index, window.end_index) == (9, 9)

    def test_leading_padding_only(self) -> None:
        calc = _calculator([100, 100, 100], padding_start=20, padding_end=30)
        window = calc.compute(0, 50)
        assert (window.start_index, window.end_index) == (0, 0)
        assert window.items[0].start == 20

    def test_zero_height_viewport_still_renders_a_row(self) -> None:
        calc = _calculator([100] * 10)
        window = calc.compute(0, 0)
        assert not window.is_empty

    @pytest.mark.parametrize("scroll_top", [0, 37, 99, 100, 101, 555, 999, 1000, 4000])
    @pytest.mark.parametrize("viewport", [1, 80, 333, 2000])
    def test_range_is_within_bounds_and_covers_viewport(self, scroll_top: float, viewport: float) -> None:
        heights = [60, 2240, 60, 60, 2400, 60, 60, 60, 2300, 60]
        calc = _calculator(heights, padding_start=100, padding_end=100)
        n = len(heights)
        window = calc.compute(scroll_top, viewport)

        assert 0 <= window.start_index <= window.end_index <= n - 1
        assert list(window.indexes) == [item.index for item in window.items]
        # contiguous, and no row outside the range intersects the viewport
        low, high = scroll_top, scroll_top + viewport
        for i in range(n):
            top, bottom = calc.offset_of(i), calc.offset_of(i) + calc.size_of(i)
            intersects = top < high and bottom > low
            if intersects:
                assert window.start_index <= i <= window.end_index

    def test_window_reflects_height_change(self) -> None:
        heights = [100.0] * 10
        calc = _calculator(heights)
        assert calc.compute(0, 250).end_index == 2
        heights[0] = 1000.0
        calc.invalidate_from(0)
        window = calc.compute(0, 250)
        assert (window.start_index, window.end_index) == (0, 0)
        assert window.total_height == 1900


class TestNavigation:
    def test_offset_for_index(self) -> None:
        calc = _calculator([100] * 10)
        assert calc.offset_for_index(5, 250) == 500
        assert calc.offset_for_index(5, 250, ALIGN_CENTER) == 425
        assert calc.offset_for_index(5, 250, ALIGN_END) == 350

    def test_offset_for_index_is_clamped_to_max_scroll(self) -> None:
        calc = _calculator([100] * 10)
        assert calc.max_scroll(250) == 750
        assert calc.offset_for_index(9, 250) == 750
        assert calc.offset_for_index(0, 250, ALIGN_END) == 0

    def test_index_at(self) -> None:
        calc = _calculator([100] * 10, padding_start=50)
        assert calc.index_at(0) == 0
        assert calc.index_at(149) == 0
        assert calc.index_at(150) == 1
        assert calc.index_at(99_999) == 9
        assert _calculator([]).index_at(10) == -1
