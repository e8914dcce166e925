"""Shared test fixtures for risk signal engine tests."""

import pytest

from src.domains.screening.adapters.base import NAME_KINDS
from src.domains.screening.adapters.watchlist import WatchlistAdapter, WatchlistEntry
from src.domains.screening.service import ScreeningService
from src.main import app


@pytest.fixture(autouse=True)
def _clear_dependency_overrides():
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def sanctions_entries() -> list[WatchlistEntry]:
    return [
        WatchlistEntry(
            entry_id="SDN-1001",
            name="Ivan Petrovich Sidorov",
            aliases=["Ivan Sidorov"],
            programs=["RUSSIA-EO14024"],
        ),
        WatchlistEntry(
            entry_id="SDN-2002",
            name="Lazarus Group",
            wallet_addresses=["0x098B716B8Aaf21512996dC57EB0615e2383E2f96"],
            programs=["DPRK3"],
        ),
    ]


@pytest.fixture
def screening_service(sanctions_entries) -> ScreeningService:
    return ScreeningService(
        [
            WatchlistAdapter("sanctions", "SANCTIONS", sanctions_entries),
            WatchlistAdapter(
                "pep",
                "PEP",
                [WatchlistEntry(entry_id="PEP-1", name="Maria Gonzalez Ruiz")],
                supported_kinds=NAME_KINDS,
            ),
        ]
    )


@pytest.fixture
def pass_through_records() -> list[dict]:
    """An inbound wire forwarded almost in full eight hours later."""
    return [
        {
            "transactionId": "in-1",
            "date": "2026-01-05T12:00:00Z",
            "amount": "20,000.00",
            "counterparty": "Harbor Imports",
            "country": "US",
        },
        {
            "transactionId": "out-1",
            "date": "2026-01-05T20:00:00Z",
            "amount": "-19,000.00",
            "counterparty": "Pacific Freight",
            "country": "US",
        },
    ]
