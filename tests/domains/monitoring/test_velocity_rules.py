"""Tests for velocity and volume rules."""

from datetime import UTC, datetime, timedelta

from src.domains.monitoring.config import MonitoringConfig
from src.domains.monitoring.models import Direction, Transaction
from src.domains.monitoring.normalizer import build_profile
from src.domains.monitoring.rules.velocity import (
    DailyCountRule,
    PassThroughRule,
    RapidFireRule,
    VolumeSpikeRule,
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
    }
    defaults.update(kwargs)
    return Transaction(**defaults)


def _detect(rule, transactions):
    return rule.detect(transactions, build_profile(transactions), CONFIG)


class TestVolumeSpike:
    def _weekly(self, volumes):
        return [
            _make_tx(id=f"w{i}", amount=v, timestamp=BASE + timedelta(days=7 * i))
            for i, v in enumerate(volumes)
        ]

    def test_spike_against_other_buckets(self):
        alerts = _detect(VolumeSpikeRule(), self._weekly([10000, 10000, 100000]))
        assert len(alerts) == 1
        assert alerts[0].details["mean_other_volume"] == 10000
        assert alerts[0].related_transaction_ids == ["w2"]

    def test_compares_with_other_buckets_not_all(self):
        """70k is under 3x the all-bucket mean (25k) but over 3x the mean of the rest (10k)."""
        alerts = _detect(VolumeSpikeRule(), self._weekly([10000, 10000, 10000, 70000]))
        assert len(alerts) == 1
        assert alerts[0].details["bucket_volume"] == 70000

    def test_too_few_buckets(self):
        assert _detect(VolumeSpikeRule(), self._weekly([1000, 100000])) == []

    def test_spike_below_minimum_volume(self):
        assert _detect(VolumeSpikeRule(), self._weekly([1000, 1000, 40000])) == []

    def test_flat_history(self):
        assert _detect(VolumeSpikeRule(), self._weekly([20000] * 6)) == []


class TestRapidFire:
    def test_five_within_an_hour(self):
        txs = [_make_tx(id=f"r{i}", timestamp=BASE + timedelta(minutes=10 * i)) for i in range(5)]
        alerts = _detect(RapidFireRule(), txs)
        assert len(alerts) == 1
        assert alerts[0].rule_id == "VEL-002"
        assert len(alerts[0].related_transaction_ids) == 5

    def test_spread_out(self):
        txs = [_make_tx(id=f"r{i}", timestamp=BASE + timedelta(minutes=20 * i)) for i in range(5)]
        assert _detect(RapidFireRule(), txs) == []


class TestDailyCount:
    def test_excessive_count(self):
        txs = [_make_tx(id=f"d{i}", timestamp=BASE + timedelta(minutes=i)) for i in range(15)]
        alerts = _detect(DailyCountRule(), txs)
        assert len(alerts) == 1
        assert alerts[0].details["count"] == 15

    def test_under_limit(self):
        txs = [_make_tx(id=f"d{i}", timestamp=BASE + timedelta(minutes=i)) for i in range(14)]
        assert _detect(DailyCountRule(), txs) == []


class TestPassThrough:
    def _pair(self, in_amount, out_amount, hours):
        return [
            _make_tx(id="in", amount=in_amount, counterparty_name="Sender"),
            _make_tx(
                id="out",
                amount=-out_amount,
                direction=Direction.DEBIT,
                counterparty_name="Receiver",
                timestamp=BASE + timedelta(hours=hours),
            ),
        ]

    def test_forwarded_almost_in_full(self):
        alerts = _detect(PassThroughRule(), self._pair(20000, 19000, 10))
        assert len(alerts) == 1
        alert = alerts[0]
        assert alert.severity == Severity.CRITICAL
        assert alert.score == 45
        assert alert.related_transaction_ids == ["in", "out"]
        assert alert.details["ratio"] == 0.95

    def test_ratio_too_low(self):
        assert _detect(PassThroughRule(), self._pair(20000, 15000, 10)) == []

    def test_outside_window(self):
        assert _detect(PassThroughRule(), self._pair(20000, 19000, 50)) == []

    def test_inbound_must_exceed_minimum(self):
        assert _detect(PassThroughRule(), self._pair(5000, 4900, 1)) == []

    def test_outbound_larger_than_inbound(self):
        assert _detect(PassThroughRule(), self._pair(20000, 21000, 1)) == []
