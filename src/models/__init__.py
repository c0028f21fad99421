from src.models.criteria import FilterCriteria, SortDirection, SortField, SortKey, parse_sort_key
from src.models.history import HistoryPoint
from src.models.scan import RiskLevel, TokenScan

__all__ = [
    "FilterCriteria",
    "SortKey",
    "SortField",
    "SortDirection",
    "parse_sort_key",
    "HistoryPoint",
    "RiskLevel",
    "TokenScan",
]
