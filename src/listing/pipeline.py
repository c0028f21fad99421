"""Filter → sort → cap pipeline for the scan list.

Pure function of (snapshot, criteria): identical inputs always give an
identical sequence. Filtering is the conjunction of every enabled predicate.
A non-empty search query is evaluated last and decides inclusion on its own
(the text match result is returned directly, other filters are not
consulted). The cap is applied after sorting so the top-ranked tokens are
never dropped.
"""

from collections.abc import Callable, Sequence
from operator import attrgetter

from loguru import logger

from src.models.criteria import FilterCriteria, SortDirection, SortField, SortKey
from src.models.scan import RiskLevel, TokenScan

_SORT_VALUES: dict[SortField, Callable[[TokenScan], float]] = {
    SortField.AGE: attrgetter("token_age_hours"),
    SortField.HOLDERS: attrgetter("holder_count"),
    SortField.LIQUIDITY: attrgetter("liquidity_amount"),
    SortField.SAFETY_SCORE: attrgetter("risk_score"),
}


def passes_filters(scan: TokenScan, criteria: FilterCriteria) -> bool:
    """Whether ``scan`` survives the filter stage for ``criteria``."""
    if criteria.search_query:
        # Search overrides every other filter when set
        return scan.matches_text(criteria.search_query)

    if criteria.min_holders > 0 and scan.holder_count < criteria.min_holders:
        return False
    if criteria.min_liquidity > 0 and scan.liquidity_amount < criteria.min_liquidity:
        return False
    if criteria.hide_honeypots and scan.is_honeypot:
        return False
    if criteria.show_only_honeypots and not scan.is_honeypot:
        return False
    if criteria.hide_danger and scan.risk_level == RiskLevel.DANGER:
        return False
    if criteria.hide_warning and scan.risk_level == RiskLevel.WARNING:
        return False
    if criteria.show_only_safe and scan.risk_level != RiskLevel.SAFE:
        return False
    return True


def sort_scans(scans: Sequence[TokenScan], key: SortKey) -> list[TokenScan]:
    """Stable sort by ``key``. ``key.field is None`` keeps input order."""
    value_of = _SORT_VALUES.get(key.field) if key.field is not None else None
    if value_of is None:
        return list(scans)
    # reverse=True keeps equal keys in input order, same as negating the comparator
    return sorted(scans, key=value_of, reverse=key.direction == SortDirection.DESC)


def cap_scans(scans: list[TokenScan], max_records: int) -> list[TokenScan]:
    """First ``max_records`` items; a non-positive cap means no limit."""
    if max_records <= 0:
        return scans
    return scans[:max_records]


def apply_criteria(scans: Sequence[TokenScan], criteria: FilterCriteria) -> list[TokenScan]:
    """Run the full filter → sort → cap pipeline and return a new list."""
    filtered = [scan for scan in scans if passes_filters(scan, criteria)]
    ordered = sort_scans(filtered, criteria.sort)
    result = cap_scans(ordered, criteria.max_records)

    logger.debug(
        f"[PIPELINE] {len(scans)} in → {len(filtered)} filtered → {len(result)} shown "
        f"(sort={criteria.sort.legacy_value or 'none'}, cap={criteria.max_records})"
    )
    return result
