"""JSON-over-HTTP source adapters built on httpx."""

from abc import abstractmethod
from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from src.domains.scoring.models import Finding, Severity

from ..errors import AdapterFailureError, AdapterTimeoutError
from ..models import Subject, SubjectKind
from .base import NAME_KINDS, SourceAdapter

logger = structlog.get_logger()


class HttpSourceAdapter(SourceAdapter):
    """Base for sources reached over HTTP.

    Subclasses build the request parameters and map the decoded JSON body
    onto a Finding. Transport errors, non-2xx responses and payloads the
    mapping cannot read all raise AdapterFailureError.
    """

    method: str = "GET"

    def __init__(
        self,
        name: str,
        category: str,
        base_url: str,
        path: str = "",
        supported_kinds: frozenset[SubjectKind] = NAME_KINDS,
        timeout_ms: int | None = None,
        headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.name = name
        self.category = category
        self.supported_kinds = supported_kinds
        self.timeout_ms = timeout_ms
        self._base_url = base_url
        self._path = path
        self._headers = headers or {}
        self._transport = transport

    def build_params(self, subject: Subject) -> dict[str, Any]:
        params: dict[str, Any] = {"kind": subject.kind.value}
        if subject.is_wallet:
            params["address"] = subject.wallet_address
            if subject.chain:
                params["chain"] = subject.chain
        else:
            params["name"] = subject.name
        return params

    @abstractmethod
    def parse_response(self, subject: Subject, payload: Any) -> Finding:
        """Map a decoded response body onto a Finding."""
        ...

    async def _fetch(self, subject: Subject) -> Any:
        # The executor enforces the overall deadline; this one bounds the socket
        timeout = (self.timeout_ms / 1000) if self.timeout_ms else None
        params = self.build_params(subject)
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url,
                timeout=timeout,
                headers=self._headers,
                transport=self._transport,
            ) as client:
                if self.method == "GET":
                    response = await client.get(self._path, params=params)
                else:
                    response = await client.request(self.method, self._path, json=params)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as e:
            raise AdapterFailureError(
                self.name, f"HTTP {e.response.status_code}: {e.response.text[:200]}"
            ) from e
        except httpx.TimeoutException as e:
            raise AdapterTimeoutError(self.name, self.timeout_ms or 0) from e
        except httpx.RequestError as e:
            raise AdapterFailureError(self.name, f"Request error: {e}") from e
        except ValueError as e:
            raise AdapterFailureError(self.name, f"Response is not JSON: {e}") from e

    async def screen(self, subject: Subject) -> Finding:
        payload = await self._fetch(subject)
        try:
            return self.parse_response(subject, payload)
        except (KeyError, TypeError, ValueError, ValidationError) as e:
            logger.warning("source_payload_malformed", source=self.name, error=str(e))
            raise AdapterFailureError(self.name, f"Malformed payload: {e}") from e


class RiskApiAdapter(HttpSourceAdapter):
    """Source answering ``{"score": n, "severity": "...", "message": "...", "references": [...]}``.

    A missing or zero score means the source checked the subject and found nothing.
    """

    def parse_response(self, subject: Subject, payload: Any) -> Finding:
        if not isinstance(payload, dict):
            raise TypeError(f"expected an object, got {type(payload).__name__}")

        score = float(payload.get("score") or 0)
        if score < 0:
            raise ValueError(f"negative score {score}")
        if score == 0:
            return self._clear(payload.get("message") or f"No findings from {self.name}")

        severity = Severity(str(payload.get("severity", "MEDIUM")).upper())
        references = [str(r) for r in payload.get("references", [])]
        return self._finding(
            severity,
            score,
            payload.get("message") or f"{self.name} flagged {subject.query}",
            references,
        )
