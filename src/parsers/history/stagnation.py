"""Stagnation check on token history.

A token is stagnant on an attribute when its last ``record_count`` history
rows all carry the same value. Used by the detail/history side together with
the ``hide_stagnant_*`` criteria; the list pipeline itself never reads history.
"""

from collections.abc import Sequence

from src.models.criteria import FilterCriteria
from src.models.history import HistoryPoint

HOLDERS_ATTR = "holder_count"
LIQUIDITY_ATTR = "total_liquidity"


def is_stagnant(points: Sequence[HistoryPoint], attribute: str, record_count: int) -> bool:
    """True when the trailing ``record_count`` points share one ``attribute`` value."""
    if record_count <= 1 or len(points) < record_count:
        return False
    tail = sorted(points, key=lambda p: p.timestamp)[-record_count:]
    return len({getattr(p, attribute) for p in tail}) == 1


def is_hidden_as_stagnant(points: Sequence[HistoryPoint], criteria: FilterCriteria) -> bool:
    """Apply the ``hide_stagnant_holders`` / ``hide_stagnant_liquidity`` toggles."""
    count = criteria.stagnant_record_count
    if criteria.hide_stagnant_holders and is_stagnant(points, HOLDERS_ATTR, count):
        return True
    if criteria.hide_stagnant_liquidity and is_stagnant(points, LIQUIDITY_ATTR, count):
        return True
    return False
