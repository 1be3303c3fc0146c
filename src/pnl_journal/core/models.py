"""Core domain models used across the journal.

These are the canonical "truth models" for the system.  The record
store persists them, the engines read them, and the CLI renders them.
Derived fields are filled in by the engines, never edited directly.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter, field_validator

from .enums import MonthStatus, PnlSource, TradeType
from .ids import utc_now


# ---------------------------------------------------------------------------
# Monthly capital snapshot
# ---------------------------------------------------------------------------

class MonthRecord(BaseModel):
    """One calendar month's account snapshot."""

    id: str
    month: str = Field(pattern=r"^\d{4}-\d{2}$")  # "YYYY-MM", unique per collection
    year: int
    month_name: str

    # Capital tracking
    starting_capital: float
    ending_capital: float
    deposits: float = 0.0
    withdrawals: float = 0.0

    # Derived
    gross_change: float = 0.0
    net_profit_loss: float = 0.0
    return_percentage: float = 0.0

    pnl_source: PnlSource = PnlSource.MANUAL
    status: MonthStatus = MonthStatus.CLOSED
    notes: str = ""
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


# ---------------------------------------------------------------------------
# Trades: open and closed are separate shapes
# ---------------------------------------------------------------------------

class _TradeBase(BaseModel):
    id: str
    symbol: str
    trade_type: TradeType
    entry_date: date
    entry_price: float
    quantity: float
    notes: str = ""
    tags: list[str] = Field(default_factory=list)
    month_key: str  # exit month when closed, entry month when open
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("symbol")
    @classmethod
    def _upper_symbol(cls, v: str) -> str:
        return v.strip().upper()

    @field_validator("tags")
    @classmethod
    def _normalise_tags(cls, v: list[str]) -> list[str]:
        seen: list[str] = []
        for tag in v:
            tag = tag.strip().lower()
            if tag and tag not in seen:
                seen.append(tag)
        return seen


class OpenTrade(_TradeBase):
    """A position still running.  Carries no exit or P&L fields."""

    status: Literal["open"] = "open"


class ClosedTrade(_TradeBase):
    """A completed position with its realised P&L."""

    status: Literal["closed"] = "closed"
    exit_date: date
    exit_price: float
    pnl: float
    return_percentage: float
    is_win: bool


Trade = Annotated[Union[OpenTrade, ClosedTrade], Field(discriminator="status")]

TRADE_LIST_ADAPTER: TypeAdapter[list[Trade]] = TypeAdapter(list[Trade])
MONTH_LIST_ADAPTER: TypeAdapter[list[MonthRecord]] = TypeAdapter(list[MonthRecord])
