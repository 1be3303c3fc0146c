"""Parse-and-validate boundary between raw form input and the engines.

Forms arrive as strings (CLI options, UI text fields).  They are parsed
here into strictly numeric entries; anything the engines would compute
nonsense from is rejected with ``FormValidationError``.  The engines
themselves never validate.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import date

from pydantic import BaseModel

from pnl_journal.core.enums import TradeStatus, TradeType
from pnl_journal.core.errors import FormValidationError

MIN_CAPITAL = 0.0
MAX_CAPITAL = 1_000_000_000.0

_MONTH_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")
_NON_NUMERIC = re.compile(r"[^0-9.\-]")


# ---------------------------------------------------------------------------
# Raw input
# ---------------------------------------------------------------------------

class MonthForm(BaseModel):
    month: str
    starting_capital: str
    ending_capital: str
    deposits: str = ""
    withdrawals: str = ""
    notes: str = ""


class TradeForm(BaseModel):
    symbol: str
    trade_type: str = TradeType.LONG.value
    status: str = TradeStatus.CLOSED.value
    entry_date: str
    exit_date: str = ""
    entry_price: str
    exit_price: str = ""
    quantity: str
    notes: str = ""
    tags: str = ""  # comma-separated


# ---------------------------------------------------------------------------
# Parsed input
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class MonthEntry:
    month: str
    starting_capital: float
    ending_capital: float
    deposits: float = 0.0
    withdrawals: float = 0.0
    notes: str = ""


@dataclass(frozen=True)
class TradeEntry:
    symbol: str
    trade_type: TradeType
    status: TradeStatus
    entry_date: date
    entry_price: float
    quantity: float
    exit_date: date | None = None
    exit_price: float | None = None
    notes: str = ""
    tags: tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Field parsers
# ---------------------------------------------------------------------------

def parse_amount(field: str, raw: str, *, required_message: str | None = None) -> float:
    """Parse a currency string, dropping symbols and thousands separators.

    Blank input is 0 unless ``required_message`` is given.
    """
    cleaned = _NON_NUMERIC.sub("", raw or "")
    if not cleaned:
        if required_message:
            raise FormValidationError(field, required_message)
        return 0.0
    try:
        value = float(cleaned)
    except ValueError:
        raise FormValidationError(field, "Must be a number") from None
    if not math.isfinite(value):
        raise FormValidationError(field, "Must be a finite number")
    return value


def parse_date(field: str, raw: str) -> date:
    try:
        return date.fromisoformat(raw.strip())
    except ValueError:
        raise FormValidationError(field, "Invalid date, expected YYYY-MM-DD") from None


def parse_tags(raw: str) -> tuple[str, ...]:
    """Comma-separated tags, lowercased, blanks and repeats dropped."""
    tags: list[str] = []
    for part in raw.split(","):
        tag = part.strip().lower()
        if tag and tag not in tags:
            tags.append(tag)
    return tuple(tags)


# ---------------------------------------------------------------------------
# Month form
# ---------------------------------------------------------------------------

def parse_ending_capital(raw: str) -> float:
    """Ending capital as entered on the month form or when closing a month."""
    ending = parse_amount(
        "ending_capital", raw, required_message="Ending capital is required",
    )
    if ending < MIN_CAPITAL:
        raise FormValidationError("ending_capital", "Ending capital cannot be negative")
    if ending > MAX_CAPITAL:
        raise FormValidationError("ending_capital", "Ending capital exceeds maximum limit")
    return ending


def parse_month_form(form: MonthForm) -> MonthEntry:
    """Validate a month form and return its numeric entry.

    Checks run in form order and the first failure is raised.
    """
    month = form.month.strip()
    if not _MONTH_RE.match(month):
        raise FormValidationError("month", "Invalid month format")

    starting = parse_amount(
        "starting_capital", form.starting_capital,
        required_message="Starting capital is required",
    )
    if starting <= MIN_CAPITAL:
        raise FormValidationError("starting_capital", "Starting capital must be greater than 0")
    if starting > MAX_CAPITAL:
        raise FormValidationError("starting_capital", "Starting capital exceeds maximum limit")

    ending = parse_ending_capital(form.ending_capital)

    deposits = parse_amount("deposits", form.deposits)
    if deposits < 0:
        raise FormValidationError("deposits", "Deposits cannot be negative")

    withdrawals = parse_amount("withdrawals", form.withdrawals)
    if withdrawals < 0:
        raise FormValidationError("withdrawals", "Withdrawals cannot be negative")

    return MonthEntry(
        month=month,
        starting_capital=starting,
        ending_capital=ending,
        deposits=deposits,
        withdrawals=withdrawals,
        notes=form.notes.strip(),
    )


# ---------------------------------------------------------------------------
# Trade form
# ---------------------------------------------------------------------------

def parse_trade_form(form: TradeForm) -> TradeEntry:
    """Validate a trade form and return its numeric entry.

    Exit fields are ignored for open trades and required for closed ones.
    """
    symbol = form.symbol.strip().upper()
    if not symbol:
        raise FormValidationError("symbol", "Symbol is required")

    try:
        trade_type = TradeType(form.trade_type.strip().lower())
    except ValueError:
        raise FormValidationError("trade_type", "Trade type must be long or short") from None
    try:
        status = TradeStatus(form.status.strip().lower())
    except ValueError:
        raise FormValidationError("status", "Status must be open or closed") from None

    entry_date = parse_date("entry_date", form.entry_date)

    entry_price = parse_amount(
        "entry_price", form.entry_price, required_message="Entry price is required",
    )
    if entry_price <= 0:
        raise FormValidationError("entry_price", "Entry price must be greater than 0")

    quantity = parse_amount(
        "quantity", form.quantity, required_message="Quantity is required",
    )
    if quantity <= 0:
        raise FormValidationError("quantity", "Quantity must be greater than 0")

    exit_date: date | None = None
    exit_price: float | None = None
    if status == TradeStatus.CLOSED:
        if not form.exit_date.strip():
            raise FormValidationError("exit_date", "Exit date is required for a closed trade")
        exit_date = parse_date("exit_date", form.exit_date)
        if exit_date < entry_date:
            raise FormValidationError("exit_date", "Exit date cannot be before entry date")
        exit_price = parse_amount(
            "exit_price", form.exit_price,
            required_message="Exit price is required for a closed trade",
        )
        if exit_price <= 0:
            raise FormValidationError("exit_price", "Exit price must be greater than 0")

    return TradeEntry(
        symbol=symbol,
        trade_type=trade_type,
        status=status,
        entry_date=entry_date,
        entry_price=entry_price,
        quantity=quantity,
        exit_date=exit_date,
        exit_price=exit_price,
        notes=form.notes.strip(),
        tags=parse_tags(form.tags),
    )
