"""Shared fixtures for the pnl-journal test suite."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest

from pnl_journal.core.config import Settings
from pnl_journal.core.models import MONTH_LIST_ADAPTER, TRADE_LIST_ADAPTER
from pnl_journal.journal.service import JournalService
from pnl_journal.storage.json_store import JsonRecordStore


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2025, 3, 1, 9, 30, 0, tzinfo=timezone.utc)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(data_dir=str(tmp_path / "data"))


@pytest.fixture
def months_store(settings: Settings) -> JsonRecordStore:
    return JsonRecordStore(settings.months_path, MONTH_LIST_ADAPTER, kind="month")


@pytest.fixture
def trades_store(settings: Settings) -> JsonRecordStore:
    return JsonRecordStore(settings.trades_path, TRADE_LIST_ADAPTER, kind="trade")


@pytest.fixture
def service(months_store, trades_store, fixed_now) -> JournalService:
    return JournalService(months_store, trades_store, clock=lambda: fixed_now)
