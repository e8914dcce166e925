"""Tests for geographic, sanctions-evasion and counterparty rules."""

from datetime import UTC, datetime, timedelta

from src.domains.monitoring.config import MonitoringConfig
from src.domains.monitoring.models import Direction, Transaction
from src.domains.monitoring.normalizer import build_profile
from src.domains.monitoring.rules.counterparty import (
    CircularCounterpartyRule,
    ConcentrationRule,
    NewCounterpartyLargeAmountRule,
    ShellCompanyRule,
)
from src.domains.monitoring.rules.geographic import (
    GeographicSpreadRule,
    HighRiskJurisdictionRule,
    IntermediaryCountryEvasionRule,
    TaxHavenRule,
)
from src.domains.scoring.models import Severity

BASE = datetime(2026, 1, 5, 12, 0, tzinfo=UTC)
CONFIG = MonitoringConfig()


def _make_tx(**kwargs) -> Transaction:
    defaults = {
        "id": "tx-1",
        "timestamp": BASE,
        "amount": 1000.0,
        "direction": Direction.CREDIT,
        "counterparty_name": "Corner Shop",
        "counterparty_country": "US",
    }
    defaults.update(kwargs)
    return Transaction(**defaults)


def _detect(rule, transactions):
    return rule.detect(transactions, build_profile(transactions), CONFIG)


class TestHighRiskJurisdiction:
    def test_single_high_risk_country(self):
        txs = [_make_tx(id="a"), _make_tx(id="b", counterparty_country="IR", amount=2500)]
        alerts = _detect(HighRiskJurisdictionRule(), txs)
        assert len(alerts) == 1
        assert alerts[0].details["countries"] == ["IR"]
        assert alerts[0].related_transaction_ids == ["b"]

    def test_clean(self):
        assert _detect(HighRiskJurisdictionRule(), [_make_tx()]) == []


class TestTaxHaven:
    def test_three_tax_haven_transactions(self):
        txs = [_make_tx(id=f"k{i}", counterparty_country="KY") for i in range(3)]
        alerts = _detect(TaxHavenRule(), txs)
        assert len(alerts) == 1
        assert alerts[0].score == 25

    def test_two_is_not_enough(self):
        txs = [_make_tx(id=f"k{i}", counterparty_country="KY") for i in range(2)]
        assert _detect(TaxHavenRule(), txs) == []


class TestGeographicSpread:
    COUNTRIES = ["US", "MX", "BR", "DE", "FR", "GB", "JP", "IN", "ZA", "AU"]

    def test_many_countries_few_transactions(self):
        txs = [_make_tx(id=c, counterparty_country=c) for c in self.COUNTRIES]
        alerts = _detect(GeographicSpreadRule(), txs)
        assert len(alerts) == 1
        assert alerts[0].details["country_count"] == 10

    def test_nine_countries(self):
        txs = [_make_tx(id=c, counterparty_country=c) for c in self.COUNTRIES[:9]]
        assert _detect(GeographicSpreadRule(), txs) == []


class TestIntermediaryCountryEvasion:
    def test_sanctioned_with_intermediary(self):
        txs = [
            _make_tx(id="ru", counterparty_country="RU"),
            _make_tx(id="ae", counterparty_country="AE"),
        ]
        alerts = _detect(IntermediaryCountryEvasionRule(), txs)
        assert len(alerts) == 1
        assert alerts[0].category == "SANCTIONS_EVASION"
        assert alerts[0].severity == Severity.CRITICAL
        assert alerts[0].score == 50

    def test_high_volume_corridor(self):
        txs = [_make_tx(id=f"ae{i}", counterparty_country="AE", amount=40000) for i in range(3)]
        alerts = _detect(IntermediaryCountryEvasionRule(), txs)
        assert [a.score for a in alerts] == [35]

    def test_both_patterns(self):
        txs = [_make_tx(id="ru", counterparty_country="RU")] + [
            _make_tx(id=f"ae{i}", counterparty_country="AE", amount=40000) for i in range(3)
        ]
        alerts = _detect(IntermediaryCountryEvasionRule(), txs)
        assert [a.score for a in alerts] == [50, 35]

    def test_intermediary_alone(self):
        txs = [_make_tx(id="sg", counterparty_country="SG", amount=500)]
        assert _detect(IntermediaryCountryEvasionRule(), txs) == []


class TestShellCompany:
    def test_generic_name_in_tax_haven(self):
        txs = [
            _make_tx(id=f"s{i}", counterparty_name="Oceanic Holdings Ltd", counterparty_country="VG")
            for i in range(2)
        ]
        alerts = _detect(ShellCompanyRule(), txs)
        assert len(alerts) == 1
        assert alerts[0].details["counterparties"] == ["Oceanic Holdings Ltd"]

    def test_generic_name_onshore(self):
        txs = [
            _make_tx(id=f"s{i}", counterparty_name="Oceanic Holdings Ltd", counterparty_country="US")
            for i in range(2)
        ]
        assert _detect(ShellCompanyRule(), txs) == []

    def test_keyword_must_be_whole_word(self):
        txs = [
            _make_tx(id=f"s{i}", counterparty_name="Groupon Reseller", counterparty_country="KY")
            for i in range(2)
        ]
        assert _detect(ShellCompanyRule(), txs) == []


class TestConcentration:
    def test_single_counterparty_dominates(self):
        txs = [
            _make_tx(id="a1", counterparty_name="Acme", amount=30000),
            _make_tx(id="a2", counterparty_name="Acme", amount=30000),
            _make_tx(id="o1", counterparty_name="Other", amount=20000),
        ]
        alerts = _detect(ConcentrationRule(), txs)
        assert len(alerts) == 1
        assert alerts[0].details["counterparty"] == "Acme"
        assert alerts[0].details["ratio"] == 0.75

    def test_low_volume(self):
        txs = [_make_tx(id=f"a{i}", counterparty_name="Acme", amount=1000) for i in range(5)]
        assert _detect(ConcentrationRule(), txs) == []


class TestNewCounterpartyLargeAmount:
    def test_first_contact_is_large(self):
        txs = [
            _make_tx(id="a", counterparty_name="Regular", amount=500),
            _make_tx(id="b", counterparty_name="NewCo", amount=30000, timestamp=BASE + timedelta(days=1)),
        ]
        alerts = _detect(NewCounterpartyLargeAmountRule(), txs)
        assert len(alerts) == 1
        assert alerts[0].related_transaction_ids == ["b"]

    def test_established_counterparty(self):
        txs = [
            _make_tx(id="a", counterparty_name="NewCo", amount=500),
            _make_tx(id="b", counterparty_name="NewCo", amount=30000, timestamp=BASE + timedelta(days=1)),
        ]
        assert _detect(NewCounterpartyLargeAmountRule(), txs) == []


class TestCircularCounterparty:
    def _round_trip(self, sent, received):
        txs = []
        for i, amount in enumerate(sent):
            txs.append(
                _make_tx(
                    id=f"out{i}",
                    amount=-amount,
                    direction=Direction.DEBIT,
                    counterparty_name="Loop LLC",
                    timestamp=BASE + timedelta(days=i),
                )
            )
        for i, amount in enumerate(received):
            txs.append(
                _make_tx(
                    id=f"in{i}",
                    amount=amount,
                    counterparty_name="Loop LLC",
                    timestamp=BASE + timedelta(days=10 + i),
                )
            )
        return txs

    def test_money_comes_back(self):
        alerts = _detect(CircularCounterpartyRule(), self._round_trip([6000, 6000], [5000, 5000]))
        assert len(alerts) == 1
        assert alerts[0].severity == Severity.CRITICAL
        assert alerts[0].details["sent_total"] == 12000
        assert alerts[0].details["received_total"] == 10000

    def test_small_amounts_ignored(self):
        assert _detect(CircularCounterpartyRule(), self._round_trip([3000, 3000], [3000, 3000])) == []

    def test_lopsided_flows(self):
        assert _detect(CircularCounterpartyRule(), self._round_trip([10000, 10000], [1000, 1000])) == []

    def test_one_direction_only(self):
        assert _detect(CircularCounterpartyRule(), self._round_trip([10000, 10000], [])) == []
