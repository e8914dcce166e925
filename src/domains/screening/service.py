"""Subject screening: route the subject to its sources, fan out, score."""

import time
from collections.abc import Iterable

import structlog

from src.domains.scoring.scorer import CompositeRiskScorer

from .adapters.base import SourceAdapter
from .config import ScreeningConfig, default_config
from .executor import FanOutExecutor, SourceSlot
from .models import ScreeningResult, SourceResult, SourceStatus, SubjectKind
from .subject import parse_subject

logger = structlog.get_logger()


class ScreeningService:
    def __init__(
        self,
        adapters: Iterable[SourceAdapter],
        config: ScreeningConfig | None = None,
        scorer: CompositeRiskScorer | None = None,
        executor: FanOutExecutor | None = None,
    ) -> None:
        self._adapters = list(adapters)
        names = [a.name for a in self._adapters]
        if len(names) != len(set(names)):
            raise ValueError(f"Duplicate source names: {names}")
        self._config = config or default_config
        self._scorer = scorer or CompositeRiskScorer()
        self._executor = executor or FanOutExecutor(self._config)

    @property
    def adapters(self) -> list[SourceAdapter]:
        return list(self._adapters)

    @property
    def config(self) -> ScreeningConfig:
        return self._config

    async def screen(
        self,
        query: str,
        kind: SubjectKind | str | None = None,
        sources: Iterable[str] | None = None,
    ) -> ScreeningResult:
        """Screen one subject. Raises InvalidSubjectError; adapter errors become data."""
        started = time.perf_counter()
        subject = parse_subject(query, kind)

        if sources is not None:
            allow_list = list(sources)
        elif self._config.default_sources:
            allow_list = list(self._config.default_sources)
        else:
            allow_list = None

        routed = [a for a in self._adapters if a.supports(subject)]
        results: dict[str, SourceResult] = {
            a.name: SourceResult(
                name=a.name,
                status=SourceStatus.SKIPPED,
                error=f"does not screen {subject.kind.value} subjects",
            )
            for a in self._adapters
            if not a.supports(subject)
        }

        slots = [SourceSlot(a.name, a.screen, a.timeout_ms) for a in routed]
        results.update(await self._executor.run(subject, slots, allow_list))

        findings = [r.finding for r in results.values() if r.usable]
        assessment = self._scorer.score(findings)

        ordered = {a.name: results[a.name] for a in self._adapters}
        checked = [n for n, r in ordered.items() if r.status == SourceStatus.OK]
        failed = [
            n for n, r in ordered.items() if r.status in (SourceStatus.TIMEOUT, SourceStatus.FAILED)
        ]
        skipped = [n for n, r in ordered.items() if r.status == SourceStatus.SKIPPED]

        duration_ms = round((time.perf_counter() - started) * 1000, 2)
        logger.info(
            "subject_screened",
            kind=subject.kind.value,
            sources_checked=len(checked),
            sources_failed=failed,
            composite_score=assessment.composite_score,
            duration_ms=duration_ms,
        )

        return ScreeningResult(
            subject=subject,
            sources=ordered,
            assessment=assessment,
            sources_checked=checked,
            sources_failed=failed,
            sources_skipped=skipped,
            duration_ms=duration_ms,
        )
