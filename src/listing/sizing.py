"""Row height estimates for the virtualised scan list.

Compact rows have a fixed height. Expanded rows render the full detail card,
whose height is the sum of its fixed sections plus rows that only appear
when the scan carries the data for them. Estimates must match what the
renderer lays out; any drift shows up as scroll jumps when rows resize.
"""

from src.models.scan import TokenScan

COMPACT_ROW_HEIGHT = 60

# Detail card, fixed sections (px)
CARD_CHROME = 80  # row padding + card border/padding
HEADER_HEIGHT = 72
STATUS_BADGES_HEIGHT = 48
TRADING_INFO_HEIGHT = 260
CONTRACT_INFO_HEIGHT = 300
SECURITY_SETTINGS_HEIGHT = 180
HOLDER_INFO_HEIGHT = 200
ADDITIONAL_INFO_HEIGHT = 260
CHART_PANEL_HEIGHT = 240
CHART_PANEL_COUNT = 2  # liquidity + holders
HISTORY_TABLE_HEIGHT = 360

EXPANDED_BASE_HEIGHT = (
    CARD_CHROME
    + HEADER_HEIGHT
    + STATUS_BADGES_HEIGHT
    + TRADING_INFO_HEIGHT
    + CONTRACT_INFO_HEIGHT
    + SECURITY_SETTINGS_HEIGHT
    + HOLDER_INFO_HEIGHT
    + ADDITIONAL_INFO_HEIGHT
    + CHART_PANEL_HEIGHT * CHART_PANEL_COUNT
    + HISTORY_TABLE_HEIGHT
)

# Variable parts
OPTIONAL_FIELD_HEIGHT = 24  # trust list, other risks, holders, LP holders, DEX info
WARNINGS_HEADER_HEIGHT = 40
WARNING_LINE_HEIGHT = 28


def warnings_section_height(flag_count: int) -> int:
    """Height of the warnings block; absent when no flag is raised."""
    if flag_count <= 0:
        return 0
    return WARNINGS_HEADER_HEIGHT + flag_count * WARNING_LINE_HEIGHT


def expanded_height(scan: TokenScan) -> int:
    return (
        EXPANDED_BASE_HEIGHT
        + scan.present_optional_fields() * OPTIONAL_FIELD_HEIGHT
        + warnings_section_height(scan.active_flag_count())
    )


def estimate_height(scan: TokenScan, is_expanded: bool) -> int:
    """Estimated rendered height of ``scan`` in px."""
    if not is_expanded:
        return COMPACT_ROW_HEIGHT
    return expanded_height(scan)
