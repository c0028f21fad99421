from datetime import datetime

from pydantic import AliasChoices, BaseModel, Field


class HistoryPoint(BaseModel):
    """One historical scan of a token (liquidity + holder counts)."""

    timestamp: datetime
    total_liquidity: float = Field(
        0.0, validation_alias=AliasChoices("totalLiquidity", "liquidity", "total_liquidity")
    )
    hp_liquidity: float | None = Field(None, validation_alias=AliasChoices("hpLiquidity", "hp_liquidity"))
    gp_liquidity: float | None = Field(None, validation_alias=AliasChoices("gpLiquidity", "gp_liquidity"))
    holder_count: int = Field(0, validation_alias=AliasChoices("holderCount", "holder_count"))
    lp_holder_count: int = Field(0, validation_alias=AliasChoices("lpHolderCount", "lp_holder_count"))

    model_config = {"extra": "ignore", "frozen": True}
