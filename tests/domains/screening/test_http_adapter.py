"""Tests for the JSON-over-HTTP source adapter, using httpx.MockTransport."""

import httpx
import pytest

from src.domains.screening.adapters.base import WALLET_KINDS
from src.domains.screening.adapters.http import RiskApiAdapter
from src.domains.screening.errors import AdapterFailureError, AdapterTimeoutError
from src.domains.screening.subject import parse_subject
from src.domains.scoring.models import Severity

WALLET = "0x" + "ab12" * 10


def _adapter(handler, **kwargs) -> RiskApiAdapter:
    defaults = {
        "name": "blockchain",
        "category": "BLOCKCHAIN",
        "base_url": "https://chain.test",
        "path": "/v1/risk",
        "supported_kinds": WALLET_KINDS,
        "transport": httpx.MockTransport(handler),
    }
    defaults.update(kwargs)
    return RiskApiAdapter(**defaults)


class TestRiskApiAdapter:
    @pytest.mark.asyncio
    async def test_flagged_wallet(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["params"] = dict(request.url.params)
            seen["path"] = request.url.path
            return httpx.Response(
                200,
                json={
                    "score": 65,
                    "severity": "high",
                    "message": "Linked to darknet market",
                    "references": ["cluster-17", 42],
                },
            )

        finding = await _adapter(handler).screen(parse_subject(WALLET))

        assert seen["path"] == "/v1/risk"
        assert seen["params"] == {"kind": "WALLET", "address": WALLET, "chain": "ETH"}
        assert finding.source == "blockchain"
        assert finding.category == "BLOCKCHAIN"
        assert finding.severity == Severity.HIGH
        assert finding.score == 65
        assert finding.evidence_refs == ["cluster-17", "42"]

    @pytest.mark.asyncio
    async def test_name_params(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json={"score": 0})

        adapter = _adapter(handler, name="adverse_media", category="ADVERSE_MEDIA")
        finding = await adapter.screen(parse_subject("Jane Doe"))
        assert seen["params"] == {"kind": "INDIVIDUAL", "name": "Jane Doe"}
        assert finding.score == 0
        assert finding.severity == Severity.LOW

    @pytest.mark.asyncio
    async def test_headers_sent(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers.get("authorization")
            return httpx.Response(200, json={})

        await _adapter(handler, headers={"Authorization": "Bearer k"}).screen(parse_subject(WALLET))
        assert seen["auth"] == "Bearer k"

    @pytest.mark.asyncio
    async def test_server_error(self):
        adapter = _adapter(lambda request: httpx.Response(503, text="unavailable"))
        with pytest.raises(AdapterFailureError) as exc_info:
            await adapter.screen(parse_subject(WALLET))
        assert "HTTP 503" in str(exc_info.value)
        assert exc_info.value.source == "blockchain"

    @pytest.mark.asyncio
    async def test_not_json(self):
        adapter = _adapter(lambda request: httpx.Response(200, text="<html>oops</html>"))
        with pytest.raises(AdapterFailureError):
            await adapter.screen(parse_subject(WALLET))

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [
            ["not", "an", "object"],
            {"score": -5},
            {"score": "high"},
            {"score": 50, "severity": "apocalyptic"},
        ],
    )
    async def test_malformed_payload(self, payload):
        adapter = _adapter(lambda request: httpx.Response(200, json=payload))
        with pytest.raises(AdapterFailureError):
            await adapter.screen(parse_subject(WALLET))

    @pytest.mark.asyncio
    async def test_transport_timeout(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("connect timed out", request=request)

        adapter = _adapter(handler, timeout_ms=500)
        with pytest.raises(AdapterTimeoutError) as exc_info:
            await adapter.screen(parse_subject(WALLET))
        assert exc_info.value.timeout_ms == 500

    @pytest.mark.asyncio
    async def test_connection_refused(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(AdapterFailureError):
            await _adapter(handler).screen(parse_subject(WALLET))

    def test_supports_wallets_only(self):
        adapter = _adapter(lambda request: httpx.Response(200, json={}))
        assert adapter.supports(parse_subject(WALLET))
        assert not adapter.supports(parse_subject("Jane Doe"))
