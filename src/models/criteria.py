"""Filter / sort / cap configuration for the scan list.

The list UI historically encoded sorting as a single string with an ``_asc``
suffix (``"liquidity_asc"``); that string is parsed once here, at the input
boundary, into a ``SortKey``. Everything downstream works with the enum pair.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from loguru import logger
from pydantic import BaseModel, Field, field_validator

ASC_SUFFIX = "_asc"
DEFAULT_MAX_RECORDS = 50
DEFAULT_STAGNANT_RECORD_COUNT = 10


class SortField(StrEnum):
    AGE = "age"
    HOLDERS = "holders"
    LIQUIDITY = "liquidity"
    SAFETY_SCORE = "safetyScore"


class SortDirection(StrEnum):
    ASC = "asc"
    DESC = "desc"


class SortKey(BaseModel):
    """Sort field + direction. ``field=None`` keeps snapshot order."""

    field: SortField | None = SortField.AGE
    direction: SortDirection = SortDirection.DESC

    model_config = {"frozen": True}

    @property
    def legacy_value(self) -> str:
        """The suffix-encoded string the list UI uses in its sort dropdown."""
        name = self.field.value if self.field is not None else ""
        return f"{name}{ASC_SUFFIX}" if self.direction == SortDirection.ASC else name


def _lookup_field(name: Any) -> SortField | None:
    if name is None:
        return None
    try:
        return SortField(name)
    except ValueError:
        logger.debug(f"[CRITERIA] Unknown sort field {name!r}, keeping input order")
        return None


def parse_sort_key(value: str) -> SortKey:
    """Parse ``"age"`` / ``"age_asc"`` style values. Never raises.

    Absence of the ``_asc`` suffix means descending.
    """
    if value.endswith(ASC_SUFFIX):
        return SortKey(
            field=_lookup_field(value[: -len(ASC_SUFFIX)]),
            direction=SortDirection.ASC,
        )
    return SortKey(field=_lookup_field(value), direction=SortDirection.DESC)


class FilterCriteria(BaseModel):
    """Active filter configuration. Immutable — use ``with_changes``.

    A threshold of 0 means "no constraint". ``max_records <= 0`` means no cap.
    The stagnant-* fields are carried and persisted but only read by the
    detail-history side (see ``src.parsers.history.stagnation``).
    """

    min_holders: float = Field(0, alias="minHolders")
    min_liquidity: float = Field(0, alias="minLiquidity")
    hide_honeypots: bool = Field(False, alias="hideHoneypots")
    show_only_honeypots: bool = Field(False, alias="showOnlyHoneypots")
    hide_danger: bool = Field(False, alias="hideDanger")
    hide_warning: bool = Field(False, alias="hideWarning")
    show_only_safe: bool = Field(False, alias="showOnlySafe")
    search_query: str = Field("", alias="searchQuery")
    sort: SortKey = Field(default_factory=SortKey, alias="sortBy")
    max_records: int = Field(DEFAULT_MAX_RECORDS, alias="maxRecords")

    hide_stagnant_holders: bool = Field(False, alias="hideStagnantHolders")
    hide_stagnant_liquidity: bool = Field(False, alias="hideStagnantLiquidity")
    stagnant_record_count: int = Field(DEFAULT_STAGNANT_RECORD_COUNT, alias="stagnantRecordCount")

    model_config = {"extra": "ignore", "frozen": True, "populate_by_name": True}

    @field_validator("sort", mode="before")
    @classmethod
    def _coerce_sort(cls, value: Any) -> Any:
        if value is None:
            return SortKey()
        if isinstance(value, str):
            return parse_sort_key(value)
        if isinstance(value, dict):
            direction = value.get("direction") or SortDirection.DESC
            return SortKey(field=_lookup_field(value.get("field")), direction=direction)
        return value

    @field_validator("search_query", mode="before")
    @classmethod
    def _null_query(cls, value: Any) -> Any:
        return "" if value is None else value

    def with_changes(self, **changes: Any) -> FilterCriteria:
        """Return a validated copy with ``changes`` (field names) applied."""
        data = self.model_dump()
        data.update(changes)
        return type(self).model_validate(data)

    def to_payload(self) -> dict[str, Any]:
        """JSON-ready camelCase dict for the preference store."""
        return self.model_dump(mode="json", by_alias=True)
