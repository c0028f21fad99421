"""Token scan record — one row of the live scan list.

Payloads come from the scan backend in camelCase (``tokenAddress``,
``gpHolderCount``, ``hpLiquidityAmount`` ...). Fields prefixed ``gp`` are
GoPlus security results, ``hp`` fields come from the honeypot simulator.
"""

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field, field_validator


class RiskLevel(StrEnum):
    SAFE = "safe"
    WARNING = "warning"
    DANGER = "danger"


# Ordinal used by the safetyScore sort; unknown levels rank with danger
RISK_SCORES: dict[str, int] = {
    RiskLevel.SAFE: 2,
    RiskLevel.WARNING: 1,
    RiskLevel.DANGER: 0,
}

# Boolean risk flags that each add one line to the detail card's warnings block
SIZING_FLAGS: tuple[str, ...] = (
    "is_proxy",
    "is_mintable",
    "has_proxy_calls",
    "cannot_buy",
    "cannot_sell_all",
    "trading_cooldown",
    "transfer_pausable",
    "slippage_modifiable",
    "hidden_owner",
)

# Other boolean flags; they only feed warning_reasons() and the honeypot filters
EXTRA_FLAGS: tuple[str, ...] = (
    "is_honeypot",
    "personal_slippage_modifiable",
    "can_take_back_ownership",
    "owner_change_balance",
    "is_airdrop_scam",
    "honeypot_with_same_creator",
    "fake_token",
    "is_blacklisted",
)

# Optional GoPlus blobs rendered as an extra row only when non-empty
OPTIONAL_DETAIL_FIELDS: tuple[str, ...] = (
    "trust_list",
    "other_potential_risks",
    "holders",
    "lp_holders",
    "dex_info",
)

HIGH_TAX_PCT = 10.0


class TokenScan(BaseModel):
    """Immutable scan result for a single token within one snapshot."""

    token_address: str = Field(alias="tokenAddress")
    token_name: str = Field("", alias="tokenName")
    token_symbol: str = Field("", alias="tokenSymbol")
    pair_address: str | None = Field(None, alias="pairAddress")

    token_age_hours: float = Field(0.0, alias="tokenAgeHours")
    holder_count: int = Field(0, alias="gpHolderCount")
    lp_holder_count: int = Field(0, alias="gpLpHolderCount")
    liquidity_amount: float = Field(0.0, alias="hpLiquidityAmount")
    buy_tax: float = Field(0.0, alias="gpBuyTax")
    sell_tax: float = Field(0.0, alias="gpSellTax")

    risk_level: str = Field(RiskLevel.DANGER.value, alias="riskLevel")
    is_honeypot: bool = Field(False, alias="hpIsHoneypot")
    honeypot_reason: str | None = Field(None, alias="hpHoneypotReason")

    # Contract / trading flags
    is_open_source: bool | None = Field(None, alias="gpIsOpenSource")
    is_proxy: bool = Field(False, alias="gpIsProxy")
    is_mintable: bool = Field(False, alias="gpIsMintable")
    has_proxy_calls: bool = Field(False, alias="gpHasProxyCalls")
    cannot_buy: bool = Field(False, alias="gpCannotBuy")
    cannot_sell_all: bool = Field(False, alias="gpCannotSellAll")
    trading_cooldown: bool = Field(False, alias="gpTradingCooldown")
    transfer_pausable: bool = Field(False, alias="gpTransferPausable")
    slippage_modifiable: bool = Field(False, alias="gpSlippageModifiable")
    personal_slippage_modifiable: bool = Field(False, alias="gpPersonalSlippageModifiable")
    hidden_owner: bool = Field(False, alias="gpHiddenOwner")
    can_take_back_ownership: bool = Field(False, alias="gpCanTakeBackOwnership")
    owner_change_balance: bool = Field(False, alias="gpOwnerChangeBalance")
    is_airdrop_scam: bool = Field(False, alias="gpIsAirdropScam")
    honeypot_with_same_creator: bool = Field(False, alias="gpHoneypotWithSameCreator")
    fake_token: bool = Field(False, alias="gpFakeToken")
    is_blacklisted: bool = Field(False, alias="gpIsBlacklisted")

    # Optional GoPlus blobs (string or JSON, shape owned by the backend)
    note: Any = Field(None, alias="gpNote")
    trust_list: Any = Field(None, alias="gpTrustList")
    other_potential_risks: Any = Field(None, alias="gpOtherPotentialRisks")
    holders: Any = Field(None, alias="gpHolders")
    lp_holders: Any = Field(None, alias="gpLpHolders")
    dex_info: Any = Field(None, alias="gpDexInfo")

    model_config = {"extra": "ignore", "frozen": True, "populate_by_name": True}

    @field_validator(
        "token_age_hours",
        "holder_count",
        "lp_holder_count",
        "liquidity_amount",
        "buy_tax",
        "sell_tax",
        mode="before",
    )
    @classmethod
    def _null_as_zero(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator(*SIZING_FLAGS, *EXTRA_FLAGS, mode="before")
    @classmethod
    def _null_as_false(cls, value: Any) -> Any:
        return False if value is None else value

    @field_validator("token_name", "token_symbol", mode="before")
    @classmethod
    def _null_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("risk_level", mode="before")
    @classmethod
    def _null_as_danger(cls, value: Any) -> Any:
        return RiskLevel.DANGER.value if value is None else value

    @property
    def risk_score(self) -> int:
        return RISK_SCORES.get(self.risk_level, 0)

    def active_flag_count(self) -> int:
        """Number of sizing flags currently true (0-9)."""
        return sum(1 for name in SIZING_FLAGS if getattr(self, name))

    def present_optional_fields(self) -> int:
        """Number of optional detail blobs that are non-empty."""
        return sum(1 for name in OPTIONAL_DETAIL_FIELDS if getattr(self, name))

    def matches_text(self, query: str) -> bool:
        """Case-insensitive substring match on name, symbol and address."""
        needle = query.lower()
        return (
            needle in self.token_name.lower()
            or needle in self.token_symbol.lower()
            or needle in self.token_address.lower()
        )

    def warning_reasons(self) -> list[str]:
        """Human-readable warnings shown in the detail card's security block."""
        reasons: list[str] = []

        # Contract
        if self.is_open_source is False:
            reasons.append("Contract is not open source")
        if self.is_proxy:
            reasons.append("Contract uses proxy pattern")
        if self.is_mintable:
            reasons.append("Token is mintable")
        if self.has_proxy_calls:
            reasons.append("Contract has proxy calls")

        # Trading restrictions
        if self.cannot_buy:
            reasons.append("Buying is restricted")
        if self.cannot_sell_all:
            reasons.append("Cannot sell all tokens")
        if self.trading_cooldown:
            reasons.append("Trading cooldown enabled")
        if self.transfer_pausable:
            reasons.append("Transfers can be paused")
        if self.slippage_modifiable:
            reasons.append("Slippage can be modified")
        if self.personal_slippage_modifiable:
            reasons.append("Personal slippage can be modified")

        # Ownership
        if self.hidden_owner:
            reasons.append("Hidden owner detected")
        if self.can_take_back_ownership:
            reasons.append("Ownership can be taken back")
        if self.owner_change_balance:
            reasons.append("Owner can change balances")

        # Taxes
        if self.buy_tax > HIGH_TAX_PCT:
            reasons.append(f"High buy tax: {self.buy_tax:g}%")
        if self.sell_tax > HIGH_TAX_PCT:
            reasons.append(f"High sell tax: {self.sell_tax:g}%")

        if self.is_airdrop_scam:
            reasons.append("Potential airdrop scam")
        if self.honeypot_with_same_creator:
            reasons.append("Creator has deployed honeypots")
        if self.fake_token:
            reasons.append("Potential fake token")
        if self.is_blacklisted:
            reasons.append("Token is blacklisted")

        return reasons
